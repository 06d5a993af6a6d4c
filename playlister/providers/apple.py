"""
Apple Music integration (stub).

Apple Music playlists can only be imported by URL and that import is not
implemented yet. Track parsing is in place so snapshots built from the
Apple Music API look the same as any other provider's.
"""

from typing import List, Optional

from playlister.models import NormalizedTrack, Provider
from playlister.providers import PlaylistInfo, ProviderNotImplementedError


class AppleMusicClient:
    """Client for the Apple Music API."""

    BASE_URL = "https://api.music.apple.com"

    def __init__(self, developer_token: str = None, user_token: str = None, storefront: str = "us"):
        """Initialize Apple Music client.

        Args:
            developer_token: JWT developer token
            user_token: Music user token
            storefront: Apple Music storefront (e.g., 'us', 'gb', 'ca')
        """
        self.developer_token = developer_token
        self.user_token = user_token
        self.storefront = storefront

    def list_playlists(self) -> List[PlaylistInfo]:
        """Apple Music playlists are imported by URL, so there is nothing to list."""
        return []

    def import_playlist(self, playlist_url: str):
        """Import a playlist by URL.

        Raises:
            ProviderNotImplementedError: Always, until Apple Music import lands
        """
        raise ProviderNotImplementedError("Apple Music import not yet implemented")

    @staticmethod
    def parse_track(track_data: dict, playlist_item_id: Optional[str] = None) -> NormalizedTrack:
        """Parse Apple Music song data into a NormalizedTrack.

        Args:
            track_data: Raw song resource from the Apple Music API
            playlist_item_id: Position-specific ID within the playlist, if known

        Returns:
            NormalizedTrack object
        """
        attrs = track_data.get('attributes', {})
        play_params = attrs.get('playParams', {})

        duration_ms = attrs.get('durationInMillis')

        return NormalizedTrack(
            title=attrs.get('name', ''),
            artist=attrs.get('artistName', ''),
            provider=Provider.APPLE,
            album=attrs.get('albumName') or None,
            duration_seconds=round(duration_ms / 1000) if duration_ms else None,
            provider_track_id=play_params.get('catalogId') or track_data.get('id'),
            provider_playlist_item_id=playlist_item_id,
            raw=track_data,
        )
