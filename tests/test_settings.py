import sys
import os
import io
import json
import logging

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import settings
from logging_config import setup_logging


@pytest.fixture(autouse=True)
def restore_state():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestPaymentsSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PAYMENTS_LOG_LEVEL", "PAYMENTS_LOG_FORMAT", "PAYMENTS_AMOUNT_PRECISION"):
            monkeypatch.delenv(name, raising=False)

        config = settings.PaymentsSettings(_env_file=None)

        assert config.log_level == "WARNING"
        assert config.log_format == "text"
        assert config.amount_precision == 4

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PAYMENTS_LOG_LEVEL", "debug")
        monkeypatch.setenv("PAYMENTS_AMOUNT_PRECISION", "2")

        config = settings.get_settings()

        assert config.log_level == "DEBUG"
        assert config.amount_precision == 2

    def test_get_settings_reads_environment_each_call(self, monkeypatch):
        monkeypatch.setenv("PAYMENTS_AMOUNT_PRECISION", "2")
        first = settings.get_settings()
        monkeypatch.setenv("PAYMENTS_AMOUNT_PRECISION", "6")

        assert settings.get_settings().amount_precision == 6
        assert first.amount_precision == 2

    def test_rejects_unknown_level(self, monkeypatch):
        monkeypatch.setenv("PAYMENTS_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            settings.PaymentsSettings(_env_file=None)

    def test_get_settings_raises_on_bad_value(self, monkeypatch):
        monkeypatch.setenv("PAYMENTS_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            settings.get_settings()

    def test_rejects_bad_format(self, monkeypatch):
        monkeypatch.setenv("PAYMENTS_LOG_FORMAT", "xml")
        with pytest.raises(ValidationError):
            settings.PaymentsSettings(_env_file=None)


class TestSetupLogging:
    def test_text_format(self):
        stream = io.StringIO()
        setup_logging("INFO", "text", stream=stream)

        logging.getLogger("payments_engine").warning("Rejected tx 1")

        assert stream.getvalue() == "WARNING: Rejected tx 1\n"

    def test_json_format_includes_extra_fields(self):
        stream = io.StringIO()
        setup_logging("WARNING", "json", stream=stream)

        logging.getLogger("payments_engine").warning(
            "Rejected tx 4", extra={"client_id": 3, "transaction_id": 4, "reason": "account_locked"}
        )

        entry = json.loads(stream.getvalue())
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "payments_engine"
        assert entry["message"] == "Rejected tx 4"
        assert entry["client_id"] == 3
        assert entry["reason"] == "account_locked"

    def test_level_filters(self):
        stream = io.StringIO()
        setup_logging("ERROR", "text", stream=stream)

        logging.getLogger("payments_engine").warning("hidden")

        assert stream.getvalue() == ""
