"""Services package for eventscribe.

Main Components:
- ConfigService: environment-driven configuration and engine creation
- LLMConfig: provider/model/credential bundle for the Generation Adapter
"""

from .config_service import ConfigService, LLMConfig

__all__ = [
    "ConfigService",
    "LLMConfig",
]
