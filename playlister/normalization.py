"""
Track metadata normalization.

Strict matching only: case, whitespace, quote/dash variants and
"(Official ...)" / "(Lyric ...)" tags are canonicalized, nothing is fuzzy.
"""

from typing import Optional
import re


# Default tolerance for duration comparisons (seconds)
DEFAULT_DURATION_TOLERANCE = 5

_WHITESPACE_RE = re.compile(r'\s+')
_DOUBLE_QUOTES_RE = re.compile('[\u201c\u201d]')
_SINGLE_QUOTES_RE = re.compile('[\u2018\u2019]')
_DASHES_RE = re.compile('[\u2013\u2014]')
_TAG_RES = [
    re.compile(r'\(official.*?\)', re.IGNORECASE),
    re.compile(r'\[official.*?\]', re.IGNORECASE),
    re.compile(r'\(lyric.*?\)', re.IGNORECASE),
    re.compile(r'\[lyric.*?\]', re.IGNORECASE),
]


def _normalize_once(s: str) -> str:
    s = s.lower().strip()
    s = _WHITESPACE_RE.sub(' ', s)
    s = _DOUBLE_QUOTES_RE.sub('"', s)
    s = _SINGLE_QUOTES_RE.sub("'", s)
    s = _DASHES_RE.sub('-', s)
    for tag_re in _TAG_RES:
        s = tag_re.sub('', s)
    return _WHITESPACE_RE.sub(' ', s).strip()


def normalize_string(s: Optional[str]) -> str:
    """Normalize string for comparison.

    Lowercases, trims, collapses whitespace, unifies curly quotes and
    en/em dashes, and removes official/lyric tags. The pipeline is
    re-applied until the text stops changing, so the result is always
    a fixed point: ``normalize_string(normalize_string(s)) == normalize_string(s)``.

    Args:
        s: String to normalize

    Returns:
        Normalized string
    """
    if not s:
        return ''

    # Stripping a tag can expose a new one, e.g. "(off(official x)icial y)"
    while True:
        normalized = _normalize_once(s)
        if normalized == s:
            return normalized
        s = normalized


def match_key(title: Optional[str], artist: Optional[str]) -> str:
    """Build the join key used to pair tracks across playlists."""
    return f"{normalize_string(title)}|{normalize_string(artist)}"


def durations_match(duration1: Optional[float], duration2: Optional[float],
                    tolerance: float = DEFAULT_DURATION_TOLERANCE) -> bool:
    """Check if two durations are within tolerance.

    An absent duration can't disprove a match, so it counts as matching.

    Args:
        duration1: First duration in seconds (or None)
        duration2: Second duration in seconds (or None)
        tolerance: Allowed absolute difference in seconds

    Returns:
        True if either side is missing or the difference is within tolerance
    """
    if duration1 is None or duration2 is None:
        return True

    return abs(duration1 - duration2) <= tolerance


def albums_match(album1: Optional[str], album2: Optional[str]) -> bool:
    """Check if two album names match after normalization.

    Missing or empty album names count as matching.
    """
    if not album1 or not album2:
        return True

    return normalize_string(album1) == normalize_string(album2)
