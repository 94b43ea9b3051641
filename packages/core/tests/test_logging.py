"""Tests for package logging helpers."""

import logging

import pytest

from slidecards_core.utils.logging import get_logger, log_exceptions, set_log_level


class TestGetLogger:
    """Tests for logger setup."""

    def test_single_handler(self) -> None:
        """Asking twice for the same name does not duplicate output."""
        first = get_logger("slidecards_core.tests.single")
        second = get_logger("slidecards_core.tests.single")
        assert first is second
        assert len(first.handlers) == 1
        assert first.propagate is False

    def test_level_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SLIDECARDS_LOG_LEVEL", "warning")
        assert get_logger("slidecards_core.tests.env").level == logging.WARNING

    def test_set_log_level_reaches_package_loggers(self) -> None:
        inside = get_logger("slidecards_core.tests.inside", logging.INFO)
        outside = get_logger("slidecards_tests_outside", logging.INFO)

        set_log_level("DEBUG")

        assert inside.level == logging.DEBUG
        assert outside.level == logging.INFO
        set_log_level(logging.INFO)


class TestLogExceptions:
    """Tests for the exception logging decorator."""

    def test_sync_reraises(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("slidecards_tests_sync")

        @log_exceptions(logger)
        def explode() -> None:
            raise ValueError("boom")

        with caplog.at_level(logging.ERROR, logger="slidecards_tests_sync"):
            with pytest.raises(ValueError, match="boom"):
                explode()

        assert "explode failed: boom" in caplog.text

    @pytest.mark.asyncio
    async def test_async_reraises(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("slidecards_tests_async")

        @log_exceptions(logger)
        async def explode() -> None:
            raise RuntimeError("late")

        with caplog.at_level(logging.ERROR, logger="slidecards_tests_async"):
            with pytest.raises(RuntimeError, match="late"):
                await explode()

        assert "explode failed: late" in caplog.text
