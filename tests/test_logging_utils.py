"""Tests logging functions in thumbnail_composer."""
import logging

import pytest

import thumbnail_composer.logging_utils as tc_logging_utils


class TestLoggingUtils:
    def test_logger_singleton_behavior(self) -> None:
        """Test that logger instances are singleton per name."""
        logger1 = tc_logging_utils.setup_logger("test_logger")
        logger2 = tc_logging_utils.setup_logger("test_logger")
        assert logger1 is logger2
        assert len(logger1.handlers) == 1

    def test_logger_custom_formatter_and_handler(self) -> None:
        """Test custom formatter and handler are applied."""
        formatter = logging.Formatter("[CUSTOM] %(message)s")
        handler = logging.StreamHandler()
        logger = tc_logging_utils.setup_logger(
            "custom_logger",
            formatter=formatter,
            handler=handler,
        )
        assert logger.name == "custom_logger"
        assert len(logger.handlers) == 1
        assert logger.handlers[0] is handler
        assert logger.handlers[0].formatter._fmt.startswith("[CUSTOM]")

    def test_default_format(self) -> None:
        logger = tc_logging_utils.setup_logger("default_format_logger")
        fmt = logger.handlers[0].formatter._fmt
        assert fmt == tc_logging_utils.LOG_FORMAT
        assert logger.propagate is False

    def test_shared_logger(self) -> None:
        """The package-wide logger is configured once at import."""
        assert tc_logging_utils.logger.name == tc_logging_utils.LOGGER_NAME
        assert tc_logging_utils.logger.level == logging.INFO
        assert len(tc_logging_utils.logger.handlers) == 1


class TestVerbosity:
    @pytest.mark.parametrize(
        ("verbose", "quiet", "expected"),
        [
            (0, 0, logging.INFO),
            (1, 0, logging.DEBUG),
            (5, 0, logging.DEBUG),
            (0, 1, logging.WARNING),
            (0, 2, logging.ERROR),
            (0, 9, logging.CRITICAL),
            (1, 1, logging.INFO),
        ],
    )
    def test_verbosity_level(
        self, verbose: int, quiet: int, expected: int,
    ) -> None:
        assert tc_logging_utils.verbosity_level(verbose, quiet) == expected

    def test_set_verbosity_reaches_handlers(self) -> None:
        handler = logging.StreamHandler()
        tc_logging_utils.setup_logger("verbosity_logger", handler=handler)
        logger = tc_logging_utils.set_verbosity(
            logging.WARNING, "verbosity_logger",
        )
        assert logger.level == logging.WARNING
        assert handler.level == logging.WARNING

    @pytest.mark.usefixtures("restore_log_level")
    def test_quiet_shared_logger_drops_info(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        tc_logging_utils.set_verbosity(logging.ERROR)
        tc_logging_utils.logger.info("hidden message")
        tc_logging_utils.logger.error("shown message")
        assert "hidden message" not in caplog.text
        assert "shown message" in caplog.text
