"""FastMCP server implementation for eventscribe.

Serves the description pipeline two ways:
- MCP tool `generate_event_description(prompt)`
- HTTP `POST /api/generate` with a JSON body `{"prompt": "..."}`
"""

from __future__ import annotations

import json

import dotenv
from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.utilities.logging import get_logger
from starlette.requests import Request
from starlette.responses import JSONResponse

from eventscribe.api import handle_generate_request
from eventscribe.errors import ConfigurationError, PipelineError
from eventscribe.models import GenerationResult
from eventscribe.pipeline import EventDescriptionPipeline

# Load environment variables
dotenv.load_dotenv()

_logger = get_logger(__name__)

mcp = FastMCP(
    name="EventScribe",
    instructions=(
        "Generates marketing descriptions for conferences and events, grounded on "
        "the event management database."
    ),
)


# -- Tool Registration -------------------------------------------------------
@mcp.tool
async def generate_event_description(ctx: Context, prompt: str) -> GenerationResult:  # pyright: ignore[reportUnusedFunction]
    """Write a 150-300 word event description grounded on database records.

    Mention the event title (or part of it) in the prompt so related events,
    speakers, sessions and sponsors can be found.
    """
    if not prompt.strip():
        msg = "Prompt is required"
        raise ToolError(msg)
    try:
        pipeline = EventDescriptionPipeline.from_config()
        return await pipeline.run(prompt)
    except (ConfigurationError, PipelineError) as exc:
        await ctx.error(f"Description generation failed: {exc}")
        raise ToolError(str(exc)) from exc


# -- HTTP Routes -------------------------------------------------------------
@mcp.custom_route("/api/generate", methods=["POST"])
async def generate_route(request: Request) -> JSONResponse:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return JSONResponse({"error": "Request body must be valid JSON"}, status_code=400)
    if not isinstance(body, dict):
        return JSONResponse({"error": "Request body must be a JSON object"}, status_code=400)

    status, payload = await handle_generate_request(body)
    return JSONResponse(payload.model_dump(), status_code=status)


@mcp.custom_route("/health", methods=["GET"])
async def health_check(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "healthy", "service": "eventscribe"})
