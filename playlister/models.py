"""
Domain types shared by ingestion, matching and export.

Snapshots and comparison results are immutable once built. The JSON
shape produced by ``to_dict`` uses the camelCase keys of the transport
layer so cached snapshots and exported results stay interchangeable
with it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Provider(Enum):
    """Music service a track or playlist came from."""
    YOUTUBE = "youtube"
    APPLE = "apple"


class SnapshotError(ValueError):
    """Raised when serialized snapshot data is malformed."""
    pass


def parse_timestamp(value) -> datetime:
    """Coerce a serialized timestamp into a datetime.

    Args:
        value: datetime or ISO-8601 string (a trailing 'Z' is accepted)

    Returns:
        datetime object

    Raises:
        SnapshotError: If the value cannot be interpreted
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            raise SnapshotError(f"Invalid timestamp: {value!r}")
    raise SnapshotError(f"Invalid timestamp: {value!r}")


def _text(value) -> str:
    return '' if value is None else str(value)


def _parse_provider(value) -> Provider:
    if isinstance(value, Provider):
        return value
    try:
        return Provider(value)
    except ValueError:
        raise SnapshotError(f"Unknown provider: {value!r}")


@dataclass(frozen=True)
class NormalizedTrack:
    """One occurrence of a song inside a playlist."""
    title: str
    artist: str
    provider: Provider
    album: Optional[str] = None
    duration_seconds: Optional[float] = None
    provider_track_id: Optional[str] = None
    provider_playlist_item_id: Optional[str] = None
    raw: Any = field(default=None, compare=False, repr=False)

    def to_dict(self) -> Dict:
        data = {
            'title': self.title,
            'artist': self.artist,
            'provider': self.provider.value,
        }
        if self.album is not None:
            data['album'] = self.album
        if self.duration_seconds is not None:
            data['durationSec'] = self.duration_seconds
        if self.provider_track_id is not None:
            data['providerTrackId'] = self.provider_track_id
        if self.provider_playlist_item_id is not None:
            data['providerPlaylistItemId'] = self.provider_playlist_item_id
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'NormalizedTrack':
        """Build a track from its JSON form.

        Raises:
            SnapshotError: If title/artist are missing, album or duration has the
                wrong type, or the provider is unknown
        """
        if not isinstance(data, dict):
            raise SnapshotError(f"Track must be an object, got {type(data).__name__}")

        title = data.get('title')
        artist = data.get('artist')
        if not isinstance(title, str) or not isinstance(artist, str):
            raise SnapshotError("Track requires string 'title' and 'artist' fields")

        album = data.get('album')
        if album is not None and not isinstance(album, str):
            raise SnapshotError(f"Invalid album for '{title}': {album!r}")

        duration = data.get('durationSec', data.get('durationSeconds'))
        # bool is an int subclass but never a duration
        if duration is not None and (isinstance(duration, bool) or not isinstance(duration, (int, float))):
            raise SnapshotError(f"Invalid duration for '{title}': {duration!r}")

        return cls(
            title=title,
            artist=artist,
            provider=_parse_provider(data.get('provider')),
            album=album or None,
            duration_seconds=duration,
            provider_track_id=data.get('providerTrackId'),
            provider_playlist_item_id=data.get('providerPlaylistItemId'),
            raw=data.get('raw'),
        )


@dataclass(frozen=True)
class PlaylistSnapshot:
    """Point-in-time capture of a playlist's tracks."""
    provider: Provider
    playlist_id_or_url: str
    name: str
    fetched_at: datetime
    tracks: Tuple[NormalizedTrack, ...] = ()

    def __post_init__(self):
        # Freeze whatever sequence the caller handed in
        object.__setattr__(self, 'tracks', tuple(self.tracks))

    def to_dict(self) -> Dict:
        return {
            'provider': self.provider.value,
            'playlistIdOrUrl': self.playlist_id_or_url,
            'name': self.name,
            'fetchedAt': self.fetched_at.isoformat(),
            'tracks': [track.to_dict() for track in self.tracks],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'PlaylistSnapshot':
        """Validate and build a snapshot from its JSON form.

        This is where serialized input gets checked before it reaches
        the comparator: ``tracks`` must be a list and ``fetchedAt`` is
        coerced from an ISO string.

        Args:
            data: Dict with keys provider, playlistIdOrUrl, name, fetchedAt, tracks

        Returns:
            PlaylistSnapshot object

        Raises:
            SnapshotError: If the payload is malformed
        """
        if not isinstance(data, dict):
            raise SnapshotError(f"Snapshot must be an object, got {type(data).__name__}")

        tracks = data.get('tracks')
        if not isinstance(tracks, list):
            raise SnapshotError("Snapshot is missing a 'tracks' array")

        if 'fetchedAt' not in data:
            raise SnapshotError("Snapshot is missing 'fetchedAt'")

        return cls(
            provider=_parse_provider(data.get('provider')),
            playlist_id_or_url=_text(data.get('playlistIdOrUrl')),
            name=_text(data.get('name')),
            fetched_at=parse_timestamp(data['fetchedAt']),
            tracks=tuple(NormalizedTrack.from_dict(track) for track in tracks),
        )


@dataclass(frozen=True)
class TrackPair:
    """A left track matched to a right track.

    ``albums_match`` and ``durations_match`` record the secondary checks
    for later confidence scoring. They never decide whether the pair exists.
    """
    left: NormalizedTrack
    right: NormalizedTrack
    albums_match: bool = True
    durations_match: bool = True

    @property
    def is_weak(self) -> bool:
        return not (self.albums_match and self.durations_match)

    def to_dict(self) -> Dict:
        return {
            'left': self.left.to_dict(),
            'right': self.right.to_dict(),
            'albumMatch': self.albums_match,
            'durationMatch': self.durations_match,
        }


@dataclass(frozen=True)
class MatchDecision:
    """Manual match override made by the user during one session."""
    key: str
    left_provider: Provider
    left_track_id: str
    right_provider: Provider
    right_track_id: str
    matched: bool
    decided_at: datetime

    @staticmethod
    def make_key(left_provider: Provider, left_track_id: str,
                 right_provider: Provider, right_track_id: str) -> str:
        return f"{left_provider.value}:{left_track_id}|{right_provider.value}:{right_track_id}"

    def to_dict(self) -> Dict:
        return {
            'key': self.key,
            'left': {'provider': self.left_provider.value, 'trackId': self.left_track_id},
            'right': {'provider': self.right_provider.value, 'trackId': self.right_track_id},
            'matched': self.matched,
            'decidedAt': self.decided_at.isoformat(),
        }


@dataclass(frozen=True)
class ComparisonResult:
    """Three-way partition of two snapshots' tracks."""
    left: PlaylistSnapshot
    right: PlaylistSnapshot
    only_in_left: Tuple[NormalizedTrack, ...] = ()
    only_in_right: Tuple[NormalizedTrack, ...] = ()
    in_both: Tuple[TrackPair, ...] = ()
    manual_decisions: Tuple[MatchDecision, ...] = ()

    def __post_init__(self):
        for name in ('only_in_left', 'only_in_right', 'in_both', 'manual_decisions'):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def summary(self) -> str:
        """Return a summary string."""
        return (f"{len(self.only_in_left)} only in left, "
                f"{len(self.only_in_right)} only in right, "
                f"{len(self.in_both)} in both")

    def to_dict(self) -> Dict:
        return {
            'left': self.left.to_dict(),
            'right': self.right.to_dict(),
            'onlyInLeft': [track.to_dict() for track in self.only_in_left],
            'onlyInRight': [track.to_dict() for track in self.only_in_right],
            'inBoth': [pair.to_dict() for pair in self.in_both],
            'manualDecisions': [decision.to_dict() for decision in self.manual_decisions],
        }
