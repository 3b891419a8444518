"""Core configuration, database, security and token primitives."""

from retailhub.core.config import get_settings, settings
from retailhub.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
