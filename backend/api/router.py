from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import require_academic_staff, require_teaching_staff
from api.routes import academic, announcements, auth, classes, rooms, students, subjects, teachers, timetable


api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# Academic records require an academic role.
_protected = [Depends(require_academic_staff)]
api_router.include_router(academic.router, prefix="/academic", tags=["academic"], dependencies=_protected)
api_router.include_router(classes.router, prefix="/classes", tags=["classes"], dependencies=_protected)
api_router.include_router(subjects.router, prefix="/subjects", tags=["subjects"], dependencies=_protected)
api_router.include_router(teachers.router, prefix="/teachers", tags=["teachers"], dependencies=_protected)
api_router.include_router(rooms.router, prefix="/rooms", tags=["rooms"], dependencies=_protected)
api_router.include_router(timetable.router, prefix="/timetable", tags=["timetable"], dependencies=_protected)

# Teachers may read students and post announcements; roles are checked per route for students.
api_router.include_router(students.router, prefix="/students", tags=["students"])
api_router.include_router(
    announcements.router,
    prefix="/announcements",
    tags=["announcements"],
    dependencies=[Depends(require_teaching_staff)],
)
