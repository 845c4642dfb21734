"""Typed lifecycle state for a single pipeline run.

Internal module used by the orchestrator to record how far a run got and
why it stopped. State lives on the run, never on the module.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import time
from typing import Final


class PipelineStage(Enum):
    """Stages of the description pipeline, in execution order."""

    IDLE = "idle"
    CONNECTED = "connected"
    SCHEMA_FETCHED = "schema_fetched"
    PLANNED = "planned"
    CONTEXT_FETCHED = "context_fetched"
    COMPOSED = "composed"
    GENERATED = "generated"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STAGES: Final[frozenset[PipelineStage]] = frozenset(
    {PipelineStage.DONE, PipelineStage.FAILED}
)

_ORDER: Final[tuple[PipelineStage, ...]] = (
    PipelineStage.IDLE,
    PipelineStage.CONNECTED,
    PipelineStage.SCHEMA_FETCHED,
    PipelineStage.PLANNED,
    PipelineStage.CONTEXT_FETCHED,
    PipelineStage.COMPOSED,
    PipelineStage.GENERATED,
    PipelineStage.DONE,
)


@dataclass(slots=True)
class PipelineRunState:
    """Mutable record of one run: current stage, history and failure reason."""

    stage: PipelineStage = PipelineStage.IDLE
    started_at: float = field(default_factory=time.perf_counter)
    history: list[PipelineStage] = field(default_factory=lambda: [PipelineStage.IDLE])
    failed_at: PipelineStage | None = None
    error_message: str | None = None

    def advance(self, stage: PipelineStage) -> None:
        """Move to the next stage; stages may only advance one step at a time."""
        if self.stage in TERMINAL_STAGES:
            msg = f"Cannot advance from terminal stage {self.stage.value}"
            raise RuntimeError(msg)
        expected = _ORDER[_ORDER.index(self.stage) + 1]
        if stage is not expected:
            msg = f"Invalid transition {self.stage.value} -> {stage.value}"
            raise RuntimeError(msg)
        self.stage = stage
        self.history.append(stage)

    def fail(self, reason: str) -> PipelineStage:
        """Enter FAILED and return the last stage reached before the failure."""
        failed_at = self.stage
        self.failed_at = failed_at
        self.error_message = reason
        self.stage = PipelineStage.FAILED
        self.history.append(PipelineStage.FAILED)
        return failed_at

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started_at) * 1000.0
