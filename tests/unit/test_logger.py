"""Unit tests for log sanitization and logger setup."""

import logging

import pytest

from mail_fetcher.lib.logger import (
    ROOT_LOGGER_NAME,
    PIISanitizer,
    SanitizingFormatter,
    get_logger,
    get_structured_logger,
    setup_logger,
)


@pytest.mark.unit
class TestPIISanitizer:
    """Test secret and PII masking."""

    def test_email_masked(self):
        assert PIISanitizer.sanitize("Authenticated as owner@example.com") == (
            "Authenticated as ***@example.com"
        )

    def test_bearer_token_masked(self):
        text = "user=x\x01auth=Bearer ya29.secret-token\x01\x01"

        sanitized = PIISanitizer.sanitize(text)

        assert "secret-token" not in sanitized
        assert "Bearer ***" in sanitized

    def test_google_token_masked(self):
        assert "ya29.***" in PIISanitizer.sanitize("token ya29.a0AfH6SMB_xyz")

    @pytest.mark.parametrize(
        "text,secret",
        [
            ('{"access_token": "opaque-123", "expires_in": 3599}', "opaque-123"),
            ("client_secret=GOCSPX-abc&grant_type=authorization_code", "GOCSPX-abc"),
            ("refresh_token: 1//0gabc", "1//0gabc"),
        ],
    )
    def test_secret_fields_masked(self, text, secret):
        assert secret not in PIISanitizer.sanitize(text)

    def test_code_query_parameter_masked(self):
        sanitized = PIISanitizer.sanitize("http://localhost:8080/?state=s&code=4/0AX4XfWh")

        assert "4/0AX4XfWh" not in sanitized
        assert "state=s" in sanitized

    def test_plain_text_unchanged(self):
        text = "SEARCH SINCE 05-Jan-2024 matched 3 messages"

        assert PIISanitizer.sanitize(text) == text

    def test_non_string_input(self):
        assert PIISanitizer.sanitize(42) == "42"


@pytest.mark.unit
class TestSanitizingFormatter:
    def test_args_sanitized(self):
        formatter = SanitizingFormatter(fmt="%(message)s")
        record = logging.LogRecord(
            "mail_fetcher.test", logging.INFO, __file__, 1,
            "Authenticated as %s", ("owner@example.com",), None,
        )

        assert formatter.format(record) == "Authenticated as ***@example.com"


@pytest.mark.unit
class TestLoggerSetup:
    def test_module_loggers_share_package_handler(self):
        logger = get_logger("mail_fetcher.some.module")
        root = logging.getLogger(ROOT_LOGGER_NAME)

        assert logger.name == "mail_fetcher.some.module"
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, SanitizingFormatter)

    def test_setup_twice_changes_level_only(self):
        root = setup_logger(level="DEBUG")
        handlers = list(root.handlers)

        setup_logger(level="WARNING")

        assert root.level == logging.WARNING
        assert root.handlers == handlers
        setup_logger(level="INFO")

    def test_setup_logs_to_console_only(self):
        logger = setup_logger("mail_fetcher_console_check", level="INFO")
        try:
            assert len(logger.handlers) == 1
            handler = logger.handlers[0]
            assert type(handler) is logging.StreamHandler
            assert not isinstance(handler, logging.FileHandler)
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)

    def test_structured_logger_context(self, caplog):
        logger = get_structured_logger("mail_fetcher.test")
        logger.set_context(run_id="abc123")

        with caplog.at_level(logging.INFO, logger="mail_fetcher.test"):
            logger.info("Retrieval run completed", written=3)

        assert "Retrieval run completed | run_id=abc123 | written=3" in caplog.text
        logger.clear_context()
        assert logger.context == {}
