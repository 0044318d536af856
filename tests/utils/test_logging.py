"""Tests for structured logging helpers."""

import pytest
import structlog

from openbandi.utils.logging import (
    LogPerformance,
    bind_run_id,
    clear_run_id,
    get_logger,
    mask_account,
    mask_sensitive_values,
)

pytestmark = pytest.mark.unit


class TestRunId:
    """Tests for run ID binding."""

    def teardown_method(self):
        clear_run_id()

    def test_generated_when_missing(self):
        run_id = bind_run_id()

        assert run_id
        assert structlog.contextvars.get_contextvars()["run_id"] == run_id

    def test_merged_into_events(self):
        bind_run_id("run-42")

        event = structlog.contextvars.merge_contextvars(None, "info", {"event": "x"})

        assert event["run_id"] == "run-42"

    def test_cleared(self):
        bind_run_id("run-42")
        clear_run_id()
        assert "run_id" not in structlog.contextvars.get_contextvars()


class TestMasking:
    """Tests for sensitive value masking."""

    def test_account_keeps_last_four(self):
        assert mask_account("IT60 X054 2811 1010 0000 0123 456") == "*" * 23 + "3456"

    def test_short_account_fully_masked(self):
        assert mask_account("123") == "***"

    def test_processor(self):
        event = mask_sensitive_values(
            None,
            "info",
            {"event": "import", "iban": "IT60X0542811101000000123456", "token": "t", "amount": 5},
        )

        assert event["iban"].endswith("3456")
        assert event["iban"].startswith("****")
        assert event["token"] == "***"
        assert event["amount"] == 5


class TestLogPerformance:
    """Tests for LogPerformance context manager."""

    def test_logs_completion_with_context(self, mocker):
        logger = mocker.Mock()

        with LogPerformance("reconciliation_batch", logger, dry_run=True) as perf:
            pass

        assert perf.duration >= 0
        args, kwargs = logger.info.call_args
        assert args == ("reconciliation_batch_completed",)
        assert kwargs["dry_run"] is True

    def test_logs_failure_and_propagates(self, mocker):
        logger = mocker.Mock()

        with pytest.raises(RuntimeError):
            with LogPerformance("reconciliation_batch", logger):
                raise RuntimeError("boom")

        assert logger.error.call_args.args[0] == "reconciliation_batch_failed"
        assert logger.error.call_args.kwargs["error_type"] == "RuntimeError"
        logger.info.assert_not_called()


def test_get_logger_returns_bound_logger():
    assert hasattr(get_logger(__name__), "info")
