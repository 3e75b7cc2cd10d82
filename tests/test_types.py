"""Tests for shared types module."""

from assetpack.types import OutputResult, OutputStatus, RunOutcome, WatchState


class TestEnums:
    """Test enum definitions."""

    def test_output_status_values(self) -> None:
        assert OutputStatus.SUCCEEDED.value == "succeeded"
        assert OutputStatus.FAILED.value == "failed"

    def test_watch_state_values(self) -> None:
        assert WatchState.IDLE.value == "idle"
        assert WatchState.PENDING_REBUILD.value == "pending_rebuild"
        assert WatchState.REBUILDING.value == "rebuilding"


def ok(label: str) -> OutputResult:
    return OutputResult(label=label, status=OutputStatus.SUCCEEDED)


def failed(label: str) -> OutputResult:
    return OutputResult(
        label=label, status=OutputStatus.FAILED, message="boom", code="action_failed"
    )


class TestRunOutcome:
    """Test RunOutcome aggregation."""

    def test_all_succeeded(self) -> None:
        outcome = RunOutcome(results=[ok("a"), ok("b")], total=2)
        assert outcome.success
        assert outcome.failure is None
        assert outcome.attempted == 2

    def test_failure_reported(self) -> None:
        outcome = RunOutcome(results=[ok("a"), failed("b")], total=3)
        assert not outcome.success
        assert outcome.failure is not None
        assert outcome.failure.label == "b"
        assert outcome.failure.message == "boom"
        assert outcome.attempted == 2

    def test_incomplete_run_is_not_success(self) -> None:
        """Every declared output must have been attempted."""
        outcome = RunOutcome(results=[ok("a")], total=2)
        assert not outcome.success
        assert outcome.failure is None

    def test_empty_run_succeeds(self) -> None:
        assert RunOutcome().success

    def test_output_result_success(self) -> None:
        assert ok("a").success
        assert not failed("a").success
