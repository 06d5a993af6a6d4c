"""
Provider integrations that turn music service payloads into snapshots.
"""

from dataclasses import dataclass
from typing import Optional


class ProviderError(Exception):
    """Base exception for provider-related errors."""
    pass


class ProviderAuthError(ProviderError):
    """Raised when a call needs credentials that are missing or rejected."""
    pass


class PlaylistNotFoundError(ProviderError):
    """Raised when a playlist does not exist or is not visible."""
    pass


class ProviderNotImplementedError(ProviderError):
    """Raised for provider features that are not available yet."""
    pass


@dataclass
class PlaylistInfo:
    """Playlist metadata without tracks."""
    id: str
    title: str
    description: Optional[str] = None
    item_count: Optional[int] = None


__all__ = [
    "ProviderError",
    "ProviderAuthError",
    "PlaylistNotFoundError",
    "ProviderNotImplementedError",
    "PlaylistInfo",
]
