"""
cloudherd configuration.

Pydantic-based settings read from ``CLOUDHERD_*`` environment variables
and an optional ``.env`` file.
"""

from cloudherd.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
