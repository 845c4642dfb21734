"""Models for the companion query server's read_only_query tool."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

CellValue = str | int | float | bool | None


class QueryRunResult(BaseModel):
    """Outcome of one read-only statement run against the database."""

    sql: str = Field(description="Statement as executed, trailing semicolon removed")
    execution: dict[str, int | float | str | bool] = Field(
        description="Execution metadata: dialect, elapsed_ms, row_limit, rows_returned, truncated"
    )
    results: list[dict[str, CellValue]] = Field(
        default_factory=list, description="Rows with cell values truncated as needed"
    )
    timestamp: str = Field(
        default_factory=lambda: datetime.now(UTC).isoformat(),
        description="UTC ISO8601 timestamp of completion",
    )
    status: Literal["ok", "error"] = Field(default="ok", description="Overall status of the call")
    execution_error: str | None = Field(default=None, description="Error message when failed")
