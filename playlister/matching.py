"""
Playlist comparison.

Tracks are joined on their normalized ``title|artist`` key. Repeated
occurrences of a key are paired positionally (i-th left with i-th right),
and whatever is left over on either side stays unmatched.
"""

from typing import Dict, Iterable, List

from playlister.models import ComparisonResult, NormalizedTrack, PlaylistSnapshot, TrackPair
from playlister.normalization import (
    DEFAULT_DURATION_TOLERANCE,
    albums_match,
    durations_match,
    match_key,
)


def group_by_match_key(tracks: Iterable[NormalizedTrack]) -> Dict[str, List[NormalizedTrack]]:
    """Group tracks by match key.

    Keys keep first-seen order and each list keeps playlist order, which
    is what makes positional pairing deterministic.

    Args:
        tracks: Tracks in playlist order

    Returns:
        Dict mapping match key -> list of tracks with that key
    """
    groups: Dict[str, List[NormalizedTrack]] = {}
    for track in tracks:
        groups.setdefault(match_key(track.title, track.artist), []).append(track)
    return groups


def find_duplicates(tracks: Iterable[NormalizedTrack]) -> List[List[NormalizedTrack]]:
    """Find tracks that occur more than once in a playlist.

    Args:
        tracks: Tracks in playlist order

    Returns:
        List of duplicate groups (each group is a list of same-key tracks)
    """
    return [group for group in group_by_match_key(tracks).values() if len(group) > 1]


class PlaylistComparator:
    """Partitions two snapshots into only-left, only-right and matched tracks."""

    def __init__(self, duration_tolerance: float = DEFAULT_DURATION_TOLERANCE):
        """Initialize comparator.

        Args:
            duration_tolerance: Seconds two durations may differ before a
                pair is flagged as weak
        """
        self.duration_tolerance = duration_tolerance

    def compare(self, left: PlaylistSnapshot, right: PlaylistSnapshot) -> ComparisonResult:
        """Compare two playlist snapshots.

        Args:
            left: Left playlist snapshot
            right: Right playlist snapshot

        Returns:
            ComparisonResult with every input track in exactly one partition
        """
        left_groups = group_by_match_key(left.tracks)
        right_groups = group_by_match_key(right.tracks)

        in_both: List[TrackPair] = []
        for key, left_tracks in left_groups.items():
            right_tracks = right_groups.get(key)
            if not right_tracks:
                continue

            for left_track, right_track in zip(left_tracks, right_tracks):
                in_both.append(self._pair(left_track, right_track))

        return ComparisonResult(
            left=left,
            right=right,
            only_in_left=self._leftovers(left_groups, right_groups),
            only_in_right=self._leftovers(right_groups, left_groups),
            in_both=in_both,
            manual_decisions=(),
        )

    def _pair(self, left_track: NormalizedTrack, right_track: NormalizedTrack) -> TrackPair:
        # Secondary checks are recorded on the pair but do not gate it
        return TrackPair(
            left=left_track,
            right=right_track,
            albums_match=albums_match(left_track.album, right_track.album),
            durations_match=durations_match(
                left_track.duration_seconds,
                right_track.duration_seconds,
                self.duration_tolerance,
            ),
        )

    @staticmethod
    def _leftovers(groups: Dict[str, List[NormalizedTrack]],
                   other_groups: Dict[str, List[NormalizedTrack]]) -> List[NormalizedTrack]:
        """Collect occurrences that found no positional partner on the other side."""
        unmatched: List[NormalizedTrack] = []
        for key, tracks in groups.items():
            paired = len(other_groups.get(key, ()))
            unmatched.extend(tracks[paired:])
        return unmatched


def compare_playlists(left: PlaylistSnapshot, right: PlaylistSnapshot) -> ComparisonResult:
    """Compare two playlists with the default settings."""
    return PlaylistComparator().compare(left, right)
