"""TrueBlazer backend package."""

from .app import create_app
from .config import get_llm_settings, get_store_settings

__all__ = ["create_app", "get_llm_settings", "get_store_settings"]
