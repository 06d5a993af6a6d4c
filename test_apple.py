#!/usr/bin/env python3
"""Test script for apple.py - Apple Music track parsing and stub import"""

import pytest

from playlister.models import Provider
from playlister.providers import ProviderError, ProviderNotImplementedError
from playlister.providers.apple import AppleMusicClient


def test_parse_track():
    """Test parsing track data from the Apple Music API."""
    print("Testing: Apple Music track parsing...")

    track_data = {
        'id': 'i.abc123',
        'type': 'library-songs',
        'attributes': {
            'name': 'Bohemian Rhapsody',
            'artistName': 'Queen',
            'albumName': 'A Night at the Opera',
            'durationInMillis': 354320,
            'playParams': {
                'id': 'i.abc123',
                'catalogId': '1440806041',
            },
        },
    }

    track = AppleMusicClient.parse_track(track_data, playlist_item_id='p.item1')

    assert track.title == 'Bohemian Rhapsody'
    assert track.artist == 'Queen'
    assert track.album == 'A Night at the Opera'
    assert track.duration_seconds == 354
    assert track.provider == Provider.APPLE
    assert track.provider_track_id == '1440806041'
    assert track.provider_playlist_item_id == 'p.item1'
    assert track.raw is track_data

    print("✓ Apple Music track parsing works!")


def test_parse_track_missing_fields():
    """Test parsing a catalog song with sparse attributes."""
    print("Testing: Sparse Apple Music track...")

    track = AppleMusicClient.parse_track({
        'id': '1440806041',
        'attributes': {'name': 'Song', 'artistName': 'Artist'},
    })

    assert track.album is None
    assert track.duration_seconds is None
    assert track.provider_track_id == '1440806041'
    assert track.provider_playlist_item_id is None

    print("✓ Sparse Apple Music track works!")


def test_list_playlists_is_empty():
    """Test listing returns nothing since playlists are imported by URL."""
    print("Testing: Apple Music playlist listing...")

    client = AppleMusicClient(developer_token='dev', user_token='user', storefront='gb')

    assert client.list_playlists() == []
    assert client.storefront == 'gb'

    print("✓ Apple Music listing works!")


def test_import_not_implemented():
    """Test import reports that it isn't available yet."""
    print("Testing: Apple Music import...")

    client = AppleMusicClient()

    with pytest.raises(ProviderNotImplementedError) as excinfo:
        client.import_playlist('https://music.apple.com/us/playlist/mix/pl.u-abc')

    assert 'not yet implemented' in str(excinfo.value)
    assert isinstance(excinfo.value, ProviderError)

    print("✓ Apple Music import raises!")


def run_all_tests():
    """Run all Apple Music tests."""
    print("=" * 60)
    print("Running Apple Music Tests")
    print("=" * 60)
    print()

    tests = [
        test_parse_track,
        test_parse_track_missing_fields,
        test_list_playlists_is_empty,
        test_import_not_implemented,
    ]

    for test in tests:
        test()
        print()

    print("=" * 60)
    print(f"🎉 All {len(tests)} Apple Music tests passed!")
    print("=" * 60)


if __name__ == '__main__':
    run_all_tests()
