"""
Playlister - Compare playlists across music services.
"""

__version__ = "0.1.0"

from playlister.models import (
    ComparisonResult,
    MatchDecision,
    NormalizedTrack,
    PlaylistSnapshot,
    Provider,
    SnapshotError,
    TrackPair,
)
from playlister.normalization import albums_match, durations_match, match_key, normalize_string
from playlister.matching import PlaylistComparator, compare_playlists, find_duplicates, group_by_match_key
from playlister.export import ExportFilter, comparison_to_csv, write_csv

__all__ = [
    "ComparisonResult",
    "MatchDecision",
    "NormalizedTrack",
    "PlaylistSnapshot",
    "Provider",
    "SnapshotError",
    "TrackPair",
    "albums_match",
    "durations_match",
    "match_key",
    "normalize_string",
    "PlaylistComparator",
    "compare_playlists",
    "find_duplicates",
    "group_by_match_key",
    "ExportFilter",
    "comparison_to_csv",
    "write_csv",
]
