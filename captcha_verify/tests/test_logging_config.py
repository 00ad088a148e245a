import json
import logging
import sys

import pytest
import structlog

from captcha_verify.core import logging_config


def test_redact_sensitive_fields_masks_credentials() -> None:
    event = {"event": "captcha_verification", "secret": "s3cr3t", "response": "tok"}

    redacted = logging_config.redact_sensitive_fields(None, "info", event)

    assert redacted["secret"] == "***"
    assert redacted["response"] == "***"
    assert redacted["event"] == "captcha_verification"


def test_resolve_level_falls_back_to_info() -> None:
    assert logging_config._resolve_level("debug") == logging.DEBUG
    assert logging_config._resolve_level("not-a-level") == logging.INFO


def test_log_event_uses_requested_level() -> None:
    calls: list[tuple[str, str, dict]] = []

    class RecordingLogger:
        def warning(self, event: str, **fields) -> None:  # noqa: ANN003
            calls.append(("warning", event, fields))

        def info(self, event: str, **fields) -> None:  # noqa: ANN003
            calls.append(("info", event, fields))

    logging_config.log_event(RecordingLogger(), "captcha_request_failed", detail="x")
    logging_config.log_event(
        RecordingLogger(), "captcha_verification", level="nonsense", success=True
    )

    assert calls[0][0] == "warning"
    assert calls[0][2]["detail"] == "x"
    assert "occurred_at" in calls[0][2]
    assert calls[1][:2] == ("info", "captcha_verification")


@pytest.mark.parametrize("context", [{}, {"component": "captcha"}])
def test_get_logger_returns_bound_logger(context: dict) -> None:
    logger = logging_config.get_logger(**context)

    assert hasattr(logger, "info")
    assert hasattr(logger, "bind")


def test_library_leaves_global_logging_alone(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(logging, "basicConfig", lambda *a, **k: calls.append("basic"))
    monkeypatch.setattr(structlog, "configure", lambda *a, **k: calls.append("structlog"))
    logging_config._base_logger.cache_clear()

    logging_config.get_logger(component="captcha").info("captcha_verification")

    assert calls == []
    assert not structlog.is_configured()
    assert all(
        isinstance(handler, logging.NullHandler)
        for handler in logging.getLogger(logging_config.LOGGER_NAME).handlers
    )


def test_records_reach_stdlib_logger_as_json(caplog) -> None:  # noqa: ANN001
    caplog.set_level(logging.INFO, logger=logging_config.LOGGER_NAME)

    logging_config.get_logger(component="captcha").info(
        "captcha_verification", secret="s3cr3t", success=True
    )

    [record] = [
        item for item in caplog.records if item.name == logging_config.LOGGER_NAME
    ]
    payload = json.loads(record.getMessage())
    assert payload["event"] == "captcha_verification"
    assert payload["component"] == "captcha"
    assert payload["secret"] == "***"
    assert payload["level"] == "info"


def test_configure_logging_adds_one_stdout_handler() -> None:
    stdlib_logger = logging.getLogger(logging_config.LOGGER_NAME)
    before = list(stdlib_logger.handlers)
    previous_level = stdlib_logger.level
    try:
        logging_config.configure_logging("debug")
        logging_config.configure_logging("debug")

        added = [handler for handler in stdlib_logger.handlers if handler not in before]
        assert len(added) == 1
        assert added[0].stream is sys.stdout
        assert stdlib_logger.level == logging.DEBUG
    finally:
        for handler in stdlib_logger.handlers[:]:
            if handler not in before:
                stdlib_logger.removeHandler(handler)
        stdlib_logger.setLevel(previous_level)
