"""
CSV export of comparison results.

The column set, order and quoting rules are consumed by other tools,
so they are fixed.
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from playlister.models import ComparisonResult, NormalizedTrack, Provider


class ExportFilter(Enum):
    """Which partitions of a comparison to export."""
    ALL = "all"
    ONLY_LEFT = "onlyLeft"
    ONLY_RIGHT = "onlyRight"
    BOTH = "both"


CSV_HEADER = [
    'Status',
    'Title',
    'Artist',
    'Album',
    'Duration (seconds)',
    'Left Provider',
    'Right Provider',
    'Left Track ID',
    'Right Track ID',
]

STATUS_ONLY_LEFT = 'Only in Left'
STATUS_ONLY_RIGHT = 'Only in Right'
STATUS_IN_BOTH = 'In Both'

EXPORT_FILENAME = 'playlist-comparison.csv'


def escape_csv_field(value) -> str:
    """Render one CSV field.

    Quotes the field (doubling inner quotes) only when it contains a
    comma, a double quote or a newline. None renders as an empty field.
    """
    if value is None:
        return ''
    text = str(value)
    if ',' in text or '"' in text or '\n' in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def _format_duration(duration: Optional[float]) -> str:
    if not duration:
        return ''
    if isinstance(duration, float) and duration.is_integer():
        return str(int(duration))
    return str(duration)


def _provider_value(provider: Optional[Provider]) -> str:
    return provider.value if provider else ''


def _track_row(status: str, track: NormalizedTrack,
               left_provider: Optional[Provider] = None,
               right_provider: Optional[Provider] = None,
               left_track_id: Optional[str] = None,
               right_track_id: Optional[str] = None) -> List[str]:
    return [
        status,
        track.title,
        track.artist,
        track.album or '',
        _format_duration(track.duration_seconds),
        _provider_value(left_provider),
        _provider_value(right_provider),
        left_track_id or '',
        right_track_id or '',
    ]


def _coerce_filter(filter: Union[ExportFilter, str, None]) -> ExportFilter:
    if filter is None:
        return ExportFilter.ALL
    if isinstance(filter, ExportFilter):
        return filter
    try:
        return ExportFilter(filter)
    except ValueError:
        choices = ', '.join(f.value for f in ExportFilter)
        raise ValueError(f"Unknown export filter {filter!r} (expected one of: {choices})")


def comparison_to_csv(result: ComparisonResult,
                      filter: Union[ExportFilter, str, None] = None) -> str:
    """Generate CSV from comparison results.

    Rows are written only-left first, then only-right, then matched
    pairs. Matched rows take their track fields from the left side.

    Args:
        result: ComparisonResult to render
        filter: Partition to export; None or 'all' exports everything

    Returns:
        CSV text, rows joined by '\\n' with no trailing newline

    Raises:
        ValueError: If filter is not a known export filter
    """
    selected = _coerce_filter(filter)
    include_left = selected in (ExportFilter.ALL, ExportFilter.ONLY_LEFT)
    include_right = selected in (ExportFilter.ALL, ExportFilter.ONLY_RIGHT)
    include_both = selected in (ExportFilter.ALL, ExportFilter.BOTH)

    rows = [CSV_HEADER]

    if include_left:
        for track in result.only_in_left:
            rows.append(_track_row(
                STATUS_ONLY_LEFT,
                track,
                left_provider=result.left.provider,
                left_track_id=track.provider_track_id,
            ))

    if include_right:
        for track in result.only_in_right:
            rows.append(_track_row(
                STATUS_ONLY_RIGHT,
                track,
                right_provider=result.right.provider,
                right_track_id=track.provider_track_id,
            ))

    if include_both:
        for pair in result.in_both:
            rows.append(_track_row(
                STATUS_IN_BOTH,
                pair.left,
                left_provider=result.left.provider,
                right_provider=result.right.provider,
                left_track_id=pair.left.provider_track_id,
                right_track_id=pair.right.provider_track_id,
            ))

    return '\n'.join(','.join(escape_csv_field(value) for value in row) for row in rows)


def write_csv(result: ComparisonResult, path: Union[str, Path],
              filter: Union[ExportFilter, str, None] = None) -> Path:
    """Write comparison CSV to a file.

    Args:
        result: ComparisonResult to render
        path: Destination file (parent directories are created)
        filter: Partition to export

    Returns:
        Path the CSV was written to
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    # newline='' keeps the '\n' row separators as-is on every platform
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(comparison_to_csv(result, filter))
    return path
