"""Test song metadata lookup and resolution"""

import pytest
import requests
from unittest.mock import Mock

from youtube_mp3.config.settings import DEFAULT_SEPARATORS
from youtube_mp3.models import LookupResult, MetadataSource, SongMetadata
from youtube_mp3.music.lookup import (
    SongLookupClient,
    matches_term,
    metadata_from_entry,
    resolve_song_metadata
)


def make_response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {'results': []}
    return response


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def client(settings, session):
    return SongLookupClient(settings=settings, session=session)


class TestMatching:

    def test_matches_when_track_and_artist_in_term(self, itunes_entry):
        assert matches_term("Adele - Hello (Official Video)", itunes_entry)
        assert matches_term("ADELE HELLO", itunes_entry)

    def test_rejects_partial_match(self, itunes_entry):
        assert not matches_term("Hello from the other side", itunes_entry)

    def test_rejects_non_songs(self, itunes_entry):
        itunes_entry['kind'] = 'music-video'
        assert not matches_term("Adele Hello", itunes_entry)

    def test_metadata_from_entry_keeps_year(self, itunes_entry):
        song = metadata_from_entry(itunes_entry)
        assert song.title == 'Hello'
        assert song.artist == 'Adele'
        assert song.album == '25'
        assert song.genre == 'Pop'
        assert song.date == '2015'
        assert song.track_number == 1
        assert song.track_count == 11


class TestSongLookupClient:

    def test_lookup_success(self, client, session, itunes_entry):
        session.get.return_value = make_response(payload={'resultCount': 1, 'results': [itunes_entry]})

        result = client.lookup("Adele - Hello")

        assert result.success
        assert result.metadata.display_name == 'Adele - Hello'

        _, kwargs = session.get.call_args
        assert kwargs['params']['term'] == "Adele - Hello"
        assert kwargs['params']['media'] == 'music'
        assert kwargs['params']['entity'] == 'song'
        assert kwargs['params']['limit'] == 25
        assert kwargs['params']['country'] == 'US'

    def test_first_acceptable_result_wins(self, client, session, itunes_entry):
        other = dict(itunes_entry, trackName='Hello (Live)', collectionName='Live')
        session.get.return_value = make_response(payload={'results': [other, itunes_entry]})

        result = client.lookup("Adele Hello")

        assert result.metadata.album == '25'

    def test_no_match(self, client, session, itunes_entry):
        session.get.return_value = make_response(payload={'results': [itunes_entry]})
        assert client.lookup("Something Else") == LookupResult(success=False)

    def test_http_error_is_a_miss(self, client, session):
        session.get.return_value = make_response(status_code=503)
        assert not client.lookup("Adele Hello").success

    def test_network_error_is_a_miss(self, client, session):
        session.get.side_effect = requests.ConnectionError("offline")
        assert not client.lookup("Adele Hello").success

    def test_invalid_json_is_a_miss(self, client, session):
        response = make_response()
        response.json.side_effect = ValueError("not json")
        session.get.return_value = response
        assert not client.lookup("Adele Hello").success

    @pytest.mark.parametrize('payload', [[], None, "text", {'results': 'x'}, {'results': {'a': 1}}])
    def test_unexpected_json_shape_is_a_miss(self, client, session, payload):
        response = make_response()
        response.json.return_value = payload
        session.get.return_value = response
        assert client.lookup("Adele Hello") == LookupResult(success=False)

    def test_missing_results_key_is_a_miss(self, client, session):
        session.get.return_value = make_response(payload={'resultCount': 0})
        assert not client.lookup("Adele Hello").success

    def test_blank_term_skips_request(self, client, session):
        assert not client.lookup("   ").success
        session.get.assert_not_called()


class TestResolveSongMetadata:

    def test_direct_lookup(self, sample_song):
        client = Mock()
        client.lookup.return_value = LookupResult(success=True, metadata=sample_song)

        resolved = resolve_song_metadata("Adele - Hello", DEFAULT_SEPARATORS, client)

        assert resolved.source is MetadataSource.LOOKUP
        assert resolved.metadata is sample_song
        client.lookup.assert_called_once_with("Adele - Hello")

    def test_lookup_with_parsed_title(self, sample_song):
        client = Mock()
        client.lookup.side_effect = [
            LookupResult(success=False),
            LookupResult(success=True, metadata=sample_song),
        ]

        resolved = resolve_song_metadata("Adele - Hello (Official Video)", DEFAULT_SEPARATORS, client)

        assert resolved.source is MetadataSource.PARSED_LOOKUP
        assert client.lookup.call_args_list[1].args == ("Adele Hello",)

    def test_parsed_title_only(self):
        client = Mock()
        client.lookup.return_value = LookupResult(success=False)

        resolved = resolve_song_metadata("Unknown Band - Demo Song", DEFAULT_SEPARATORS, client)

        assert resolved.source is MetadataSource.TITLE_PARSE
        assert resolved.metadata == SongMetadata(title='Demo Song', artist='Unknown Band')

    def test_falls_back_to_video_title(self):
        client = Mock()
        client.lookup.return_value = LookupResult(success=False)

        resolved = resolve_song_metadata("Live stream recording", DEFAULT_SEPARATORS, client)

        assert resolved.source is MetadataSource.VIDEO_TITLE
        assert resolved.metadata == SongMetadata(title='Live stream recording')
        assert client.lookup.call_count == 1
