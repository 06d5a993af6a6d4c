#!/usr/bin/env python3
"""Test script for matching.py - playlist comparison"""

from datetime import datetime, timezone

from playlister.matching import (
    PlaylistComparator,
    compare_playlists,
    find_duplicates,
    group_by_match_key,
)
from playlister.models import NormalizedTrack, PlaylistSnapshot, Provider


def make_track(title, artist, provider=Provider.YOUTUBE, item_id=None, **kwargs):
    return NormalizedTrack(
        title=title,
        artist=artist,
        provider=provider,
        provider_track_id=f"{provider.value}-{title}",
        provider_playlist_item_id=item_id,
        **kwargs
    )


def make_playlist(name, tracks, provider=Provider.YOUTUBE):
    return PlaylistSnapshot(
        provider=provider,
        playlist_id_or_url=f"{provider.value}-{name}",
        name=name,
        fetched_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        tracks=tracks,
    )


def assert_partition_complete(left, right, result):
    """Every input track lands in exactly one place."""
    left_seen = [id(t) for t in result.only_in_left] + [id(p.left) for p in result.in_both]
    right_seen = [id(t) for t in result.only_in_right] + [id(p.right) for p in result.in_both]

    assert sorted(left_seen) == sorted(id(t) for t in left.tracks)
    assert sorted(right_seen) == sorted(id(t) for t in right.tracks)


def test_only_in_left():
    """Test tracks missing from the right playlist."""
    print("Testing: Tracks only in left...")

    left = make_playlist('Left', [
        make_track('Song A', 'Artist 1'),
        make_track('Song B', 'Artist 2'),
    ])
    right = make_playlist('Right', [
        make_track('Song B', 'Artist 2'),
    ])

    result = compare_playlists(left, right)

    assert len(result.only_in_left) == 1
    assert result.only_in_left[0].title == 'Song A'
    assert len(result.only_in_right) == 0
    assert len(result.in_both) == 1
    assert_partition_complete(left, right, result)

    print("✓ Only-in-left detection works!")


def test_only_in_right():
    """Test tracks missing from the left playlist."""
    print("Testing: Tracks only in right...")

    left = make_playlist('Left', [
        make_track('Song A', 'Artist 1'),
    ])
    right = make_playlist('Right', [
        make_track('Song A', 'Artist 1'),
        make_track('Song C', 'Artist 3'),
    ])

    result = compare_playlists(left, right)

    assert len(result.only_in_right) == 1
    assert result.only_in_right[0].title == 'Song C'
    assert_partition_complete(left, right, result)

    print("✓ Only-in-right detection works!")


def test_in_both():
    """Test matched pairs keep both sides."""
    print("Testing: Tracks in both...")

    left_a = make_track('Song A', 'Artist 1')
    right_a = make_track('Song A', 'Artist 1', provider=Provider.APPLE)
    left = make_playlist('Left', [left_a, make_track('Song B', 'Artist 2')])
    right = make_playlist('Right', [right_a, make_track('Song C', 'Artist 3')], Provider.APPLE)

    result = compare_playlists(left, right)

    assert len(result.in_both) == 1
    assert result.in_both[0].left is left_a
    assert result.in_both[0].right is right_a
    assert result.left is left
    assert result.right is right
    assert result.manual_decisions == ()

    print("✓ In-both detection works!")


def test_case_insensitive_matching():
    """Test matching ignores case and extra whitespace."""
    print("Testing: Case-insensitive matching...")

    left = make_playlist('Left', [make_track('Bohemian Rhapsody', 'Queen')])
    right = make_playlist('Right', [make_track('  BOHEMIAN   RHAPSODY  ', 'queen')])

    result = compare_playlists(left, right)

    assert len(result.in_both) == 1
    assert len(result.only_in_left) == 0
    assert len(result.only_in_right) == 0

    print("✓ Case-insensitive matching works!")


def test_no_partial_matching():
    """Test matching is exact on the normalized key."""
    print("Testing: No partial matching...")

    left = make_playlist('Left', [make_track('Yesterday', 'The Beatles')])
    right = make_playlist('Right', [make_track('Yesterday (Live)', 'The Beatles')])

    result = compare_playlists(left, right)

    assert len(result.in_both) == 0
    assert len(result.only_in_left) == 1
    assert len(result.only_in_right) == 1

    print("✓ Only exact keys match!")


def test_duplicates():
    """Test extra duplicates stay unmatched."""
    print("Testing: Duplicate handling...")

    left = make_playlist('Left', [
        make_track('Song A', 'Artist 1', item_id='l1'),
        make_track('Song A', 'Artist 1', item_id='l2'),
        make_track('Song A', 'Artist 1', item_id='l3'),
    ])
    right = make_playlist('Right', [
        make_track('Song A', 'Artist 1', item_id='r1'),
    ])

    result = compare_playlists(left, right)

    assert len(result.in_both) == 1
    assert len(result.only_in_left) == 2
    assert len(result.only_in_right) == 0

    # Positional pairing: first with first, the tail stays unmatched
    assert result.in_both[0].left.provider_playlist_item_id == 'l1'
    assert result.in_both[0].right.provider_playlist_item_id == 'r1'
    assert [t.provider_playlist_item_id for t in result.only_in_left] == ['l2', 'l3']
    assert_partition_complete(left, right, result)

    print("✓ Duplicate handling works!")


def test_duplicates_on_both_sides():
    """Test i-th occurrence pairs with i-th occurrence."""
    print("Testing: Positional pairing on both sides...")

    left = make_playlist('Left', [
        make_track('Song A', 'Artist 1', item_id='l1'),
        make_track('Song B', 'Artist 2', item_id='l2'),
        make_track('Song A', 'Artist 1', item_id='l3'),
    ])
    right = make_playlist('Right', [
        make_track('song a', 'artist 1', item_id='r1'),
        make_track('SONG A', 'ARTIST 1', item_id='r2'),
        make_track('Song A', 'Artist 1', item_id='r3'),
    ])

    result = compare_playlists(left, right)

    pairs = [(p.left.provider_playlist_item_id, p.right.provider_playlist_item_id)
             for p in result.in_both]
    assert pairs == [('l1', 'r1'), ('l3', 'r2')]
    assert [t.provider_playlist_item_id for t in result.only_in_left] == ['l2']
    assert [t.provider_playlist_item_id for t in result.only_in_right] == ['r3']
    assert_partition_complete(left, right, result)

    print("✓ Positional pairing works!")


def test_disjoint_playlists():
    """Test playlists with nothing in common."""
    print("Testing: Disjoint playlists...")

    song_a = make_track('Song A', 'Artist 1')
    song_c = make_track('Song C', 'Artist 3')
    left = make_playlist('Left', [song_a])
    right = make_playlist('Right', [song_c])

    result = compare_playlists(left, right)

    assert list(result.only_in_left) == [song_a]
    assert list(result.only_in_right) == [song_c]
    assert list(result.in_both) == []

    print("✓ Disjoint playlists work!")


def test_only_ordering():
    """Test unmatched tracks follow first-seen key order."""
    print("Testing: Unmatched ordering...")

    left = make_playlist('Left', [
        make_track('Song C', 'X', item_id='c1'),
        make_track('Song A', 'X', item_id='a1'),
        make_track('Song B', 'X', item_id='b1'),
        make_track('Song A', 'X', item_id='a2'),
        make_track('Song C', 'X', item_id='c2'),
    ])
    right = make_playlist('Right', [
        make_track('Song A', 'X', item_id='ra'),
    ])

    result = compare_playlists(left, right)

    # Grouped per key, keys in order of first appearance
    assert [t.provider_playlist_item_id for t in result.only_in_left] == ['c1', 'c2', 'a2', 'b1']
    assert result.in_both[0].left.provider_playlist_item_id == 'a1'

    print("✓ Unmatched ordering is deterministic!")


def test_empty_playlists():
    """Test empty inputs."""
    print("Testing: Empty playlists...")

    empty = make_playlist('Empty', [])
    full = make_playlist('Full', [make_track('Song A', 'Artist 1')])

    result = compare_playlists(empty, full)
    assert len(result.only_in_left) == 0
    assert len(result.only_in_right) == 1
    assert len(result.in_both) == 0

    result = compare_playlists(empty, empty)
    assert result.summary() == "0 only in left, 0 only in right, 0 in both"

    print("✓ Empty playlists work!")


def test_secondary_checks_do_not_gate():
    """Test album/duration differences flag a pair but still match it."""
    print("Testing: Secondary checks...")

    left = make_playlist('Left', [
        make_track('Song A', 'Artist 1', album='Album One', duration_seconds=200),
        make_track('Song B', 'Artist 2', album='Album Two', duration_seconds=180),
        make_track('Song C', 'Artist 3', duration_seconds=100),
    ])
    right = make_playlist('Right', [
        make_track('Song A', 'Artist 1', album='album one', duration_seconds=203),
        make_track('Song B', 'Artist 2', album='Different Album', duration_seconds=300),
        make_track('Song C', 'Artist 3'),
    ])

    result = compare_playlists(left, right)

    assert len(result.in_both) == 3
    first, second, third = result.in_both
    assert first.albums_match and first.durations_match and not first.is_weak
    assert not second.albums_match and not second.durations_match and second.is_weak
    assert third.durations_match and not third.is_weak

    # A tighter tolerance changes the flag, never the match
    strict = PlaylistComparator(duration_tolerance=1).compare(left, right)
    assert len(strict.in_both) == 3
    assert not strict.in_both[0].durations_match

    print("✓ Secondary checks are informational only!")


def test_inputs_unchanged():
    """Test comparing does not modify the snapshots."""
    print("Testing: Inputs are not modified...")

    left_tracks = [make_track('Song A', 'Artist 1'), make_track('Song B', 'Artist 2')]
    left = make_playlist('Left', left_tracks)
    right = make_playlist('Right', [make_track('Song B', 'Artist 2')])

    before = (left.tracks, right.tracks)
    first = compare_playlists(left, right)
    second = compare_playlists(left, right)

    assert (left.tracks, right.tracks) == before
    assert first == second

    print("✓ Comparison is repeatable!")


def test_group_and_find_duplicates():
    """Test grouping tracks by key and finding duplicate groups."""
    print("Testing: Grouping and duplicate detection...")

    tracks = [
        make_track('Song A', 'Artist 1', item_id='1'),
        make_track('Song B', 'Artist 2', item_id='2'),
        make_track('song a', 'ARTIST 1', item_id='3'),
    ]

    groups = group_by_match_key(tracks)
    assert list(groups.keys()) == ['song a|artist 1', 'song b|artist 2']
    assert [t.provider_playlist_item_id for t in groups['song a|artist 1']] == ['1', '3']

    duplicates = find_duplicates(tracks)
    assert len(duplicates) == 1
    assert len(duplicates[0]) == 2

    assert find_duplicates(tracks[:2]) == []

    print("✓ Grouping works!")


def run_all_tests():
    """Run all matching tests."""
    print("=" * 60)
    print("Running Playlist Comparison Tests")
    print("=" * 60)
    print()

    tests = [
        test_only_in_left,
        test_only_in_right,
        test_in_both,
        test_case_insensitive_matching,
        test_no_partial_matching,
        test_duplicates,
        test_duplicates_on_both_sides,
        test_disjoint_playlists,
        test_only_ordering,
        test_empty_playlists,
        test_secondary_checks_do_not_gate,
        test_inputs_unchanged,
        test_group_and_find_duplicates,
    ]

    for test in tests:
        test()
        print()

    print("=" * 60)
    print(f"🎉 All {len(tests)} comparison tests passed!")
    print("=" * 60)


if __name__ == '__main__':
    run_all_tests()
