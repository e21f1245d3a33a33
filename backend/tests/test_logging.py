from __future__ import annotations

import logging

import pytest

from core.config import Settings
from core.logging import LOG_FILE_NAME, log_file_path, resolve_log_level, setup_logging


def _settings(**overrides) -> Settings:
    return Settings(database_url="sqlite+pysqlite:///:memory:", jwt_secret_key="x", **overrides)


def test_level_defaults_follow_environment():
    assert resolve_log_level(_settings(environment="development")) == logging.DEBUG
    assert resolve_log_level(_settings(environment="production")) == logging.INFO


def test_explicit_log_level_wins():
    assert resolve_log_level(_settings(environment="production", log_level=" debug ")) == logging.DEBUG
    assert resolve_log_level(_settings(log_level="WARNING")) == logging.WARNING


def test_unknown_log_level_falls_back_to_environment_default():
    assert resolve_log_level(_settings(environment="production", log_level="LOUD")) == logging.INFO


def test_relative_log_dir_is_under_backend(tmp_path):
    assert log_file_path(_settings(log_dir=str(tmp_path))) == tmp_path / LOG_FILE_NAME
    relative = log_file_path(_settings(log_dir="var/log"))
    assert relative.name == LOG_FILE_NAME
    assert relative.parent.parts[-2:] == ("var", "log")


@pytest.fixture
def _restore_levels():
    names = ("services.timetable_service", "api.routes.auth", "sqlalchemy.engine")
    saved = {n: logging.getLogger(n).level for n in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_setup_applies_level_to_service_loggers(_restore_levels):
    level = setup_logging(_settings(log_level="ERROR"))

    assert level == logging.ERROR
    assert logging.getLogger("services.timetable_service").level == logging.ERROR
    assert logging.getLogger("api.routes.auth").level == logging.ERROR
    assert logging.getLogger("sqlalchemy.engine").level == logging.ERROR


def test_sql_echo_stays_quiet_at_debug(_restore_levels):
    setup_logging(_settings(log_level="DEBUG"))

    assert logging.getLogger("services.timetable_service").level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
