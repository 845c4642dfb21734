"""Description Composer: build the final prompts sent to the model."""

from __future__ import annotations

import json

from eventscribe.errors import NoRelevantDataError
from eventscribe.models import FetchedContext

PERSONA = (
    "You are a professional event copywriter. Your task is to write a compelling "
    "event description based on structured data."
)

STYLE_REQUIREMENTS = (
    "Directly reference specific details from the context, such as the event's title, "
    "location, date, key speakers, or session topics.",
    "Maintain an engaging and persuasive tone.",
    "Be 150-300 words in length.",
    "End with a clear call-to-action.",
)

AI_ONLY_CONTEXT_MESSAGE = "Generated without database context"


def non_empty_entries(context: FetchedContext) -> dict[str, list[dict[str, object]]]:
    return {key: rows for key, rows in context.items() if rows}


def summarize_context(context: FetchedContext) -> str:
    """Render each non-empty entry under a labelled section.

    Raises:
        NoRelevantDataError: If no entry holds any rows
    """
    entries = non_empty_entries(context)
    if not entries:
        raise NoRelevantDataError
    sections = [
        f"### Data from table `{key}`:\n{json.dumps(rows, indent=2, default=str)}"
        for key, rows in entries.items()
    ]
    return "The following relevant data was retrieved from the database:\n\n" + "\n\n".join(
        sections
    )


def compose_description_prompt(user_request: str, context: FetchedContext) -> str:
    """Final generation prompt grounded on the fetched context."""
    summary = summarize_context(context)
    requirements = "\n".join(f"{i}. {req}" for i, req in enumerate(STYLE_REQUIREMENTS, 1))
    return (
        f"{PERSONA}\n\n"
        '**CRITICAL INSTRUCTION:** You MUST use the provided "DATABASE CONTEXT" to write '
        "your response. Do not invent details. Your description MUST be based on the data "
        "provided below.\n\n"
        f"**DATABASE CONTEXT:**\n{summary}\n\n"
        f'**USER REQUEST:** "{user_request}"\n\n'
        "**TASK:**\n"
        "Using only the data from the DATABASE CONTEXT, write a compelling, professional "
        "event description. Your description must:\n"
        f"{requirements}\n\n"
        "The final output must be ONLY the event description text, without any additional "
        "formatting, explanations, or metadata."
    )


def compose_ai_only_prompt(user_request: str) -> str:
    """Generic stylistic prompt for the degraded, context-free path."""
    return (
        "You are an expert event copywriter. Create a compelling, professional event "
        f'description based on this prompt: "{user_request}".\n'
        "The description should be:\n"
        "- Engaging and professional\n"
        "- 150-300 words\n"
        "- Include key event highlights\n"
        "- Have a clear call-to-action\n"
        "- Be suitable for marketing materials\n"
        "Please provide only the event description without any additional formatting "
        "or explanations."
    )
