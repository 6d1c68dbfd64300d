"""
Tests for settings parsing and structured logging.
"""

import json
import logging

import pytest
from pydantic import ValidationError as SettingsValidationError

from perfeval.core.config import Settings
from perfeval.core.logging_config import CustomJsonFormatter, setup_logging


class TestSettings:
    """Tests for environment-driven settings"""

    def test_cors_origins_from_comma_list(self):
        settings = Settings(BACKEND_CORS_ORIGINS="http://a.test, http://b.test")
        assert settings.BACKEND_CORS_ORIGINS == ["http://a.test", "http://b.test"]

    def test_cors_origins_from_json(self):
        settings = Settings(BACKEND_CORS_ORIGINS='["http://a.test"]')
        assert settings.BACKEND_CORS_ORIGINS == ["http://a.test"]

    def test_log_level_is_normalized(self):
        assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(SettingsValidationError):
            Settings(LOG_LEVEL="chatty")

    def test_database_url(self):
        settings = Settings(POSTGRES_USER="u", POSTGRES_PASSWORD="p", POSTGRES_SERVER="db",
                            POSTGRES_PORT="5433", POSTGRES_DB="perf")
        assert settings.DATABASE_URL == "postgresql://u:p@db:5433/perf"


class TestLogging:
    """Tests for the JSON log format"""

    def test_json_record_fields(self):
        formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(logger)s %(message)s', process_role="worker")
        record = logging.LogRecord("perfeval.services.kpis", logging.WARNING, __file__, 10,
                                   "Archived KPI %s", (3,), None)

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "Archived KPI 3"
        assert payload["level"] == "WARNING"
        assert payload["logger"] == "perfeval.services.kpis"
        assert payload["process"] == "worker"
        assert payload["line"] == 10
        assert payload["timestamp"].endswith("Z")

    def test_setup_logging_installs_one_handler(self):
        setup_logging("WARNING", json_logs=False)
        root = logging.getLogger()
        try:
            assert len(root.handlers) == 1
            assert root.level == logging.WARNING
            assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        finally:
            setup_logging("INFO", json_logs=True)
