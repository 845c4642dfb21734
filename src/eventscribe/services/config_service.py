"""Configuration service for eventscribe.

Centralizes environment variable handling for the description pipeline and
the companion query server. Values are read on every call so that each
request sees the current environment; nothing is cached at module level.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

import sqlalchemy as sa

from eventscribe.errors import ConfigurationError

DEFAULT_LLM_PROVIDER = "google-gla"
DEFAULT_LLM_MODEL = "gemini-1.5-flash"
DEFAULT_SCHEMA_RESOURCE = "mysql://schemas"
DEFAULT_QUERY_TOOL = "read_only_query"
DEFAULT_ALLOWED_TABLES = "events,speakers,sessions,sponsors"


@dataclass(frozen=True, slots=True)
class LLMConfig:
    """Provider, model and credentials for the Generation Adapter."""

    provider: str
    model: str
    api_key: str


def _int_env(name: str, default: int, minimum: int) -> int:
    val = os.getenv(name, str(default))
    try:
        n = int(val)
    except ValueError:
        n = default
    return max(minimum, n)


class ConfigService:
    """Service for reading configuration and creating database engines."""

    # ---- Query Executor ----------------------------------------------------
    @staticmethod
    def get_mcp_server_url() -> str:
        """Get the Query Executor MCP endpoint.

        Raises:
            ConfigurationError: If EVENTSCRIBE_MCP_SERVER_URL is not set
        """
        url = os.getenv("EVENTSCRIBE_MCP_SERVER_URL", "").strip()
        if not url:
            error_msg = "Configuration Error: EVENTSCRIBE_MCP_SERVER_URL is not set."
            raise ConfigurationError(error_msg)
        return url

    @staticmethod
    def query_timeout_seconds() -> float:
        """Upper bound for a single MCP call."""
        val = os.getenv("EVENTSCRIBE_QUERY_TIMEOUT", "30")
        try:
            timeout = float(val)
        except ValueError:
            timeout = 30.0
        return timeout if timeout > 0 else 30.0

    @staticmethod
    def schema_resource_uri() -> str:
        return os.getenv("EVENTSCRIBE_SCHEMA_RESOURCE", DEFAULT_SCHEMA_RESOURCE)

    @staticmethod
    def query_tool_name() -> str:
        return os.getenv("EVENTSCRIBE_QUERY_TOOL", DEFAULT_QUERY_TOOL)

    @staticmethod
    def sql_dialect() -> str:
        return os.getenv("EVENTSCRIBE_SQL_DIALECT", "mysql")

    @staticmethod
    def allowed_tables() -> frozenset[str]:
        """Table allow-list for model-generated SQL. Empty means unrestricted."""
        raw = os.getenv("EVENTSCRIBE_ALLOWED_TABLES", DEFAULT_ALLOWED_TABLES)
        return frozenset(t.strip().lower() for t in raw.split(",") if t.strip())

    # ---- LLM configuration -------------------------------------------------
    @staticmethod
    def get_llm_config() -> LLMConfig:
        """Get provider, model and API key for text generation.

        Raises:
            ConfigurationError: If GEMINI_API_KEY is not set
        """
        api_key = os.getenv("GEMINI_API_KEY", "").strip()
        if not api_key:
            error_msg = "Configuration Error: GEMINI_API_KEY is not set."
            raise ConfigurationError(error_msg)
        return LLMConfig(
            provider=os.getenv("EVENTSCRIBE_LLM_PROVIDER", DEFAULT_LLM_PROVIDER),
            model=os.getenv("EVENTSCRIBE_LLM_MODEL", DEFAULT_LLM_MODEL),
            api_key=api_key,
        )

    @staticmethod
    def generation_max_attempts() -> int:
        return _int_env("EVENTSCRIBE_GENERATION_MAX_ATTEMPTS", 3, 1)

    @staticmethod
    def ai_only_fallback_enabled() -> bool:
        """Whether handlers may substitute a context-free description on failure."""
        val = os.getenv("EVENTSCRIBE_AI_ONLY_FALLBACK", "false").strip().lower()
        return val in {"1", "true", "yes", "on"}

    # ---- Companion query server --------------------------------------------
    @staticmethod
    def get_database_url() -> str:
        """Get the SQLAlchemy URL served by the companion query server.

        Raises:
            ConfigurationError: If EVENTSCRIBE_DATABASE_URL is not set
        """
        database_url = os.getenv("EVENTSCRIBE_DATABASE_URL")
        if not database_url:
            error_msg = "EVENTSCRIBE_DATABASE_URL environment variable not set"
            raise ConfigurationError(error_msg)
        return database_url

    @staticmethod
    def create_database_engine(url: str) -> sa.Engine:
        return sa.create_engine(url, pool_pre_ping=True)

    @staticmethod
    def result_row_limit() -> int:
        """Maximum number of rows returned per query."""
        return _int_env("EVENTSCRIBE_ROW_LIMIT", 200, 1)

    @staticmethod
    def result_max_cell_chars() -> int:
        """Maximum characters per cell value in results."""
        return _int_env("EVENTSCRIBE_MAX_CELL_CHARS", 200, 10)
