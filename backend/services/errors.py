from __future__ import annotations


class EntityNotFoundError(LookupError):
    """A referenced row does not exist; `code` is the client-facing detail (e.g. CLASS_NOT_FOUND)."""

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code


class SlotConflictError(Exception):
    """Raised when a proposed slot collides with existing slots in the same term."""

    def __init__(self, conflicts: list, message: str = "Slot conflict detected") -> None:
        super().__init__(message)
        self.message = message
        self.conflicts = list(conflicts)


class ConflictError(Exception):
    """The write collides with existing state; `code` is the client-facing detail."""

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code
