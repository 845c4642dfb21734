from __future__ import annotations

import pytest

from eventscribe.pipeline.state import TERMINAL_STAGES, PipelineRunState, PipelineStage


def test_happy_path_history() -> None:
    state = PipelineRunState()
    for stage in (
        PipelineStage.CONNECTED,
        PipelineStage.SCHEMA_FETCHED,
        PipelineStage.PLANNED,
        PipelineStage.CONTEXT_FETCHED,
        PipelineStage.COMPOSED,
        PipelineStage.GENERATED,
        PipelineStage.DONE,
    ):
        state.advance(stage)

    assert state.stage is PipelineStage.DONE
    assert state.history[0] is PipelineStage.IDLE
    assert len(state.history) == 8
    assert state.elapsed_ms >= 0


def test_stages_cannot_be_skipped() -> None:
    state = PipelineRunState()
    with pytest.raises(RuntimeError, match="Invalid transition"):
        state.advance(PipelineStage.PLANNED)


def test_fail_records_last_reached_stage() -> None:
    state = PipelineRunState()
    state.advance(PipelineStage.CONNECTED)

    failed_at = state.fail("schema missing")

    assert failed_at is PipelineStage.CONNECTED
    assert state.stage is PipelineStage.FAILED
    assert state.failed_at is PipelineStage.CONNECTED
    assert state.error_message == "schema missing"
    assert state.stage in TERMINAL_STAGES
    with pytest.raises(RuntimeError, match="terminal"):
        state.advance(PipelineStage.SCHEMA_FETCHED)
