"""
YouTube Data API v3 integration.

Fetches playlists and turns their items into NormalizedTrack objects.
YouTube has no song metadata, so title and artist are parsed out of the
video title and the album is always unknown.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse
import re
import sys
import time

import requests
from requests.exceptions import RequestException

from playlister.models import NormalizedTrack, PlaylistSnapshot, Provider
from playlister.providers import (
    PlaylistInfo,
    PlaylistNotFoundError,
    ProviderAuthError,
    ProviderError,
)


UNKNOWN_ARTIST = 'Unknown Artist'
UNTITLED_PLAYLIST = 'Untitled Playlist'

# Placeholders YouTube returns for videos that can no longer be played
UNAVAILABLE_TITLES = {'Private video', 'Deleted video'}

_DURATION_RE = re.compile(r'PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?')
_DASH_TITLE_RE = re.compile(r'^(.+?)\s*[-\u2013\u2014]\s*(.+)$')
_BY_TITLE_RE = re.compile(r'^(.+?)\s+by\s+(.+)$', re.IGNORECASE)
_COLON_TITLE_RE = re.compile(r'^(.+?)\s*:\s*(.+)$')


def parse_iso_duration(duration: str) -> int:
    """Parse ISO 8601 duration to seconds.

    Example: "PT4M13S" -> 253. Returns 0 when the text has no PT part.
    """
    match = _DURATION_RE.search(duration or '')
    if not match:
        return 0

    hours, minutes, seconds = (int(group or 0) for group in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def parse_video_title(video_title: str) -> Tuple[str, str]:
    """Split a video title into (title, artist).

    Recognized formats, tried in order:
        "Artist - Title" (hyphen, en dash or em dash)
        "Title by Artist"
        "Artist: Title"

    Args:
        video_title: Raw YouTube video title

    Returns:
        Tuple of (title, artist); artist is 'Unknown Artist' if no format matched
    """
    video_title = video_title or ''

    match = _DASH_TITLE_RE.match(video_title)
    if match:
        return match.group(2).strip(), match.group(1).strip()

    match = _BY_TITLE_RE.match(video_title)
    if match:
        return match.group(1).strip(), match.group(2).strip()

    match = _COLON_TITLE_RE.match(video_title)
    if match:
        return match.group(2).strip(), match.group(1).strip()

    return video_title.strip(), UNKNOWN_ARTIST


def extract_playlist_id(id_or_url: str) -> str:
    """Return the playlist ID from a raw ID or a URL with a 'list' parameter."""
    id_or_url = id_or_url.strip()
    if '://' not in id_or_url and not id_or_url.startswith('www.'):
        return id_or_url

    query = parse_qs(urlparse(id_or_url).query)
    ids = query.get('list')
    if not ids:
        raise PlaylistNotFoundError(f"No playlist ID found in URL: {id_or_url}")
    return ids[0]


def snapshot_from_playlist_items(playlist_id: str, name: str, items: Iterable[Dict],
                                 durations: Optional[Dict[str, int]] = None,
                                 fetched_at: Optional[datetime] = None) -> PlaylistSnapshot:
    """Build a snapshot from raw playlistItems resources.

    Args:
        playlist_id: YouTube playlist ID
        name: Playlist display name
        items: playlistItems resources in playlist order
        durations: Dict mapping video ID -> duration in seconds
        fetched_at: Capture time (default: now, UTC)

    Returns:
        PlaylistSnapshot object
    """
    durations = durations or {}
    tracks = []

    for item in items:
        snippet = item.get('snippet')
        content_details = item.get('contentDetails')
        if not snippet or not content_details:
            continue

        video_title = snippet.get('title') or ''
        if video_title in UNAVAILABLE_TITLES:
            continue

        video_id = content_details.get('videoId')
        title, artist = parse_video_title(video_title)

        tracks.append(NormalizedTrack(
            title=title,
            artist=artist,
            provider=Provider.YOUTUBE,
            album=None,
            duration_seconds=durations.get(video_id),
            provider_track_id=video_id,
            provider_playlist_item_id=item.get('id'),
            raw={'snippet': snippet, 'contentDetails': content_details},
        ))

    return PlaylistSnapshot(
        provider=Provider.YOUTUBE,
        playlist_id_or_url=playlist_id,
        name=name,
        fetched_at=fetched_at or datetime.now(timezone.utc),
        tracks=tracks,
    )


class YouTubeClient:
    """Client for the YouTube Data API v3."""

    BASE_URL = "https://www.googleapis.com/youtube/v3"

    # API maximum for maxResults and for ids per videos.list call
    PAGE_SIZE = 50

    def __init__(self, api_key: str = None, access_token: str = None, debug: bool = False):
        """Initialize YouTube client.

        Args:
            api_key: API key, enough for public playlists
            access_token: OAuth access token, needed for the user's own playlists
            debug: Print request details
        """
        if not api_key and not access_token:
            raise ProviderAuthError("YouTube needs an API key or an access token")

        self.api_key = api_key
        self.access_token = access_token
        self.debug = debug

    def list_playlists(self) -> List[PlaylistInfo]:
        """List the authenticated user's playlists.

        Returns:
            List of PlaylistInfo objects

        Raises:
            ProviderAuthError: If no access token is configured
        """
        if not self.access_token:
            raise ProviderAuthError("Listing your playlists requires YOUTUBE_ACCESS_TOKEN")

        playlists = []
        params = {'part': 'snippet,contentDetails', 'mine': 'true', 'maxResults': self.PAGE_SIZE}

        for item in self._paginate('playlists', params):
            snippet = item.get('snippet') or {}
            if not item.get('id') or not snippet.get('title'):
                continue
            playlists.append(PlaylistInfo(
                id=item['id'],
                title=snippet['title'],
                description=snippet.get('description') or None,
                item_count=(item.get('contentDetails') or {}).get('itemCount') or None,
            ))

        return playlists

    def import_playlist(self, playlist_id: str) -> PlaylistSnapshot:
        """Fetch a playlist with all of its items.

        Args:
            playlist_id: Playlist ID or a URL containing one

        Returns:
            PlaylistSnapshot object

        Raises:
            PlaylistNotFoundError: If the playlist does not exist
        """
        playlist_id = extract_playlist_id(playlist_id)

        data = self._get('playlists', {'part': 'snippet', 'id': playlist_id})
        found = data.get('items') or []
        if not found:
            raise PlaylistNotFoundError(f"Playlist {playlist_id} not found")
        name = (found[0].get('snippet') or {}).get('title') or UNTITLED_PLAYLIST

        params = {'part': 'snippet,contentDetails', 'playlistId': playlist_id,
                  'maxResults': self.PAGE_SIZE}
        items = list(self._paginate('playlistItems', params))

        video_ids = [
            item['contentDetails']['videoId']
            for item in items
            if (item.get('contentDetails') or {}).get('videoId')
        ]
        durations = self.fetch_durations(video_ids)

        return snapshot_from_playlist_items(playlist_id, name, items, durations)

    def fetch_durations(self, video_ids: List[str]) -> Dict[str, int]:
        """Look up video durations in batches.

        A failed batch only loses its durations; the import carries on.

        Args:
            video_ids: YouTube video IDs

        Returns:
            Dict mapping video ID -> duration in seconds
        """
        durations = {}
        unique_ids = list(dict.fromkeys(video_ids))

        for i in range(0, len(unique_ids), self.PAGE_SIZE):
            batch = unique_ids[i:i + self.PAGE_SIZE]
            try:
                data = self._get('videos', {'part': 'contentDetails', 'id': ','.join(batch)})
            except (RequestException, ProviderError) as e:
                print(f"Warning: failed to get durations for {len(batch)} videos: {e}",
                      file=sys.stderr)
                continue

            for item in data.get('items', []):
                duration = (item.get('contentDetails') or {}).get('duration')
                if item.get('id') and duration:
                    durations[item['id']] = parse_iso_duration(duration)

        return durations

    def _paginate(self, resource: str, params: Dict):
        """Yield every item of a paginated list call."""
        params = dict(params)
        while True:
            data = self._get(resource, params)
            for item in data.get('items', []):
                yield item

            page_token = data.get('nextPageToken')
            if not page_token:
                break
            params['pageToken'] = page_token

    def _get(self, resource: str, params: Dict) -> Dict:
        url = f"{self.BASE_URL}/{resource}"
        params = dict(params)
        if self.api_key:
            params['key'] = self.api_key

        if self.debug:
            shown = {k: v for k, v in params.items() if k != 'key'}
            print(f"\n[DEBUG] GET {url}")
            print(f"  Params: {shown}")

        response = self._api_call_with_retry('GET', url, params=params, headers=self._get_headers())
        data = response.json()

        if self.debug:
            print(f"  Items: {len(data.get('items', []))}, next page: {bool(data.get('nextPageToken'))}")

        return data

    def _get_headers(self) -> dict:
        """Get headers for API requests."""
        headers = {'Accept': 'application/json'}
        if self.access_token:
            headers['Authorization'] = f'Bearer {self.access_token}'
        return headers

    def _api_call_with_retry(self, method: str, url: str, max_retries: int = 3, **kwargs) -> requests.Response:
        """Make API call with exponential backoff retry.

        Args:
            method: HTTP method
            url: Request URL
            max_retries: Maximum number of attempts
            **kwargs: Additional arguments for requests.request()

        Returns:
            Response object

        Raises:
            ProviderAuthError: On 401
            ProviderError: If max retries exceeded
        """
        for attempt in range(max_retries):
            try:
                response = requests.request(method, url, timeout=30, **kwargs)
            except RequestException:
                if attempt == max_retries - 1:
                    raise
                time.sleep(2 ** attempt)
                continue

            if response.status_code == 429:
                # Rate limited, wait and retry
                retry_after = int(response.headers.get('Retry-After', 2 ** attempt))
                time.sleep(retry_after)
                continue

            if response.status_code >= 500:
                # Server error, retry with backoff
                time.sleep(2 ** attempt)
                continue

            if response.status_code == 401:
                raise ProviderAuthError("YouTube rejected the credentials (401)")

            # Other client errors are not retried
            response.raise_for_status()
            return response

        raise ProviderError(f"Max retries exceeded for {method} {url}")
