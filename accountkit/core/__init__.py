"""Core app configuration, database, errors and security."""

from accountkit.core.config import get_settings, settings
from accountkit.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
