"""Pydantic models shared across eventscribe.

Defines the pipeline's externally visible result and the request/response
payloads of the inbound handlers.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

Row = dict[str, Any]
"""One result row: column name mapped to a JSON scalar."""

FetchedContext = dict[str, list[Row]]
"""Result sets keyed by the table name derived from each query."""


class GenerationResult(BaseModel):
    """Output of one successful pipeline run."""

    description: str = Field(min_length=1, description="Generated event description")
    context: FetchedContext = Field(
        default_factory=dict, description="Database rows the description was grounded on"
    )


class GenerateRequest(BaseModel):
    """Inbound request for a generated description."""

    prompt: str = Field(min_length=1, description="Natural-language description request")

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            msg = "Prompt is required"
            raise ValueError(msg)
        return normalized


class GenerateResponse(BaseModel):
    """Successful handler response, including degraded AI-only results."""

    description: str
    context: dict[str, Any] = Field(default_factory=dict)
    mode: Literal["context", "ai_only"] = Field(
        default="context", description="Whether database context was used"
    )


class GenerateFailure(BaseModel):
    """User-facing failure payload."""

    error: str
    details: list[str] = Field(default_factory=list)
