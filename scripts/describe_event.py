"""Pipeline harness for event descriptions.

Runs the full description pipeline against the Query Executor and LLM
configured in .env and prints the fetched context and the generated text.
With --ai-only, skips the database and prints the degraded description.

Usage:
    uv run python scripts/describe_event.py "Write a description for TechCon 2024"
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
import sys
from typing import Final

import dotenv

# Load env early
dotenv.load_dotenv()

# Add the project src/ to Python path for local imports when run directly
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))

from eventscribe.errors import PipelineError  # noqa: E402
from eventscribe.pipeline import EventDescriptionPipeline  # noqa: E402
from eventscribe.services.config_service import ConfigService  # noqa: E402

SEPARATOR: Final[str] = "=" * 72
MAX_ROWS_SHOWN: Final[int] = 3


def banner(title: str) -> None:
    print(f"\n{SEPARATOR}\n{title}\n{SEPARATOR}")


async def _run(prompt: str, *, ai_only: bool) -> int:
    pipeline = EventDescriptionPipeline.from_config()
    if ai_only:
        banner("AI-only description")
        print(await pipeline.generate_ai_only(prompt))
        return 0

    try:
        result = await pipeline.run(prompt)
    except PipelineError as exc:
        banner("Pipeline failed")
        print("stage:", exc.stage.value)
        print("reason:", exc.reason)
        return 1

    banner("Fetched context")
    for key, rows in result.context.items():
        print(f"{key}: {len(rows)} rows")
        for row in rows[:MAX_ROWS_SHOWN]:
            print("  ", json.dumps(row, default=str))

    banner("Description")
    print(result.description)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Demo event description pipeline")
    parser.add_argument(
        "prompt",
        nargs="?",
        default="Write an engaging description for TechCon 2024",
        help="Natural language description request",
    )
    parser.add_argument(
        "--ai-only",
        action="store_true",
        help="Generate without database context",
    )
    args = parser.parse_args()

    # Fail early on required envs
    _ = ConfigService.get_mcp_server_url()
    _ = ConfigService.get_llm_config()

    sys.exit(asyncio.run(_run(args.prompt, ai_only=args.ai_only)))


if __name__ == "__main__":
    main()
