"""Test video retrieval with mocked yt-dlp and HTTP"""

import pytest
import requests
import yt_dlp
from unittest.mock import MagicMock, Mock, patch

from youtube_mp3.exceptions import DownloadError, FetchError, NoAudioFormatError
from youtube_mp3.models import StreamFormat
from youtube_mp3.youtube.downloader import VideoDownloader


def make_info(**overrides):
    info = {
        'id': 'abc123',
        'title': ' Adele - Hello ',
        'duration': 367,
        'uploader': 'AdeleVEVO',
        'webpage_url': 'https://www.youtube.com/watch?v=abc123',
        'formats': [
            {'format_id': '249', 'abr': 50, 'acodec': 'opus', 'vcodec': 'none', 'ext': 'webm',
             'filesize': 1_300_000, 'url': 'https://media.example/249', 'protocol': 'https'},
            {'format_id': '251', 'abr': 160, 'acodec': 'opus', 'vcodec': 'none', 'ext': 'webm',
             'filesize': 3_900_000, 'url': 'https://media.example/251', 'protocol': 'https'},
            {'format_id': '233', 'abr': 320, 'acodec': 'mp4a.40.2', 'vcodec': 'none', 'ext': 'mp4',
             'url': 'https://manifest.example/233.m3u8', 'protocol': 'm3u8_native'},
            {'format_id': 'sb0', 'acodec': 'none', 'vcodec': 'none', 'ext': 'mhtml'},
        ],
    }
    info.update(overrides)
    return info


def patch_ytdl(info=None, error=None):
    """Patch yt_dlp.YoutubeDL so extract_info returns info or raises error"""
    ydl = MagicMock()
    if error is not None:
        ydl.extract_info.side_effect = error
    else:
        ydl.extract_info.return_value = info
    youtube_dl = MagicMock()
    youtube_dl.return_value.__enter__.return_value = ydl
    return patch('youtube_mp3.youtube.downloader.yt_dlp.YoutubeDL', youtube_dl)


def make_response(body=b'', status_code=206):
    response = MagicMock()
    response.status_code = status_code
    response.iter_content.return_value = [body] if body else []
    response.__enter__.return_value = response
    return response


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def downloader(settings, session):
    return VideoDownloader(settings=settings, session=session)


class TestFetchVideo:

    def test_selects_highest_bitrate_direct_stream(self, downloader):
        with patch_ytdl(make_info()):
            video = downloader.fetch_video('https://www.youtube.com/watch?v=abc123')

        # The 320 kbps stream is HLS only and cannot be fetched directly
        assert video.format.format_id == '251'
        assert video.title == 'Adele - Hello'
        assert video.video_id == 'abc123'
        assert video.duration == 367

    def test_low_quality(self, downloader):
        with patch_ytdl(make_info()):
            video = downloader.fetch_video('https://www.youtube.com/watch?v=abc123', low_quality=True)

        assert video.format.format_id == '249'

    def test_video_only_without_video_streams(self, downloader):
        with patch_ytdl(make_info()):
            with pytest.raises(NoAudioFormatError):
                downloader.fetch_video('https://www.youtube.com/watch?v=abc123', video_only=True)

    def test_extractor_error(self, downloader):
        with patch_ytdl(error=yt_dlp.utils.DownloadError("Video unavailable")):
            with pytest.raises(FetchError) as exc_info:
                downloader.fetch_video('https://www.youtube.com/watch?v=gone')

        assert 'Video unavailable' in exc_info.value.message

    def test_playlist_uses_first_entry(self, downloader):
        playlist = {'_type': 'playlist', 'entries': [None, make_info(id='first')]}
        with patch_ytdl(playlist):
            video = downloader.fetch_video('https://www.youtube.com/playlist?list=xyz')

        assert video.video_id == 'first'

    def test_empty_playlist(self, downloader):
        with patch_ytdl({'_type': 'playlist', 'entries': []}):
            with pytest.raises(FetchError):
                downloader.fetch_video('https://www.youtube.com/playlist?list=xyz')

    def test_ydl_options(self, downloader):
        options = downloader._get_ydl_options()
        assert options['quiet'] is True
        assert options['noplaylist'] is True
        assert options['skip_download'] is True


class TestDownloadStream:

    def test_ranged_download(self, downloader, session):
        downloader.chunk_size = 3
        session.get.side_effect = [make_response(b'abc'), make_response(b'def')]
        fmt = StreamFormat(format_id='251', audio_bitrate=160.0, content_length=6,
                           url='https://media.example/251', http_headers={'Accept': '*/*'})
        progress = Mock()

        payload = downloader.download_stream(fmt, progress=progress)

        assert payload == b'abcdef'
        ranges = [call.kwargs['headers']['Range'] for call in session.get.call_args_list]
        assert ranges == ['bytes=0-2', 'bytes=3-5']
        assert session.get.call_args_list[0].kwargs['headers']['Accept'] == '*/*'
        assert [call.args[0] for call in progress.call_args_list] == [3, 3]

    def test_server_ignoring_range(self, downloader, session):
        downloader.chunk_size = 3
        session.get.return_value = make_response(b'abcdef', status_code=200)
        fmt = StreamFormat(format_id='251', content_length=6, url='https://media.example/251')

        assert downloader.download_stream(fmt) == b'abcdef'
        assert session.get.call_count == 1

    def test_unknown_length_single_request(self, downloader, session):
        session.get.return_value = make_response(b'payload', status_code=200)
        fmt = StreamFormat(format_id='18', url='https://media.example/18')

        assert downloader.download_stream(fmt) == b'payload'
        assert 'Range' not in session.get.call_args.kwargs['headers']

    @pytest.mark.parametrize('estimate', [120, 80])
    def test_estimated_length_single_request(self, downloader, session, estimate):
        downloader.chunk_size = 30
        session.get.return_value = make_response(b'x' * 100, status_code=200)
        fmt = StreamFormat(format_id='140', content_length=estimate, exact_length=False,
                           url='https://media.example/140')

        assert downloader.download_stream(fmt) == b'x' * 100
        assert session.get.call_count == 1
        assert 'Range' not in session.get.call_args.kwargs['headers']

    def test_short_read(self, downloader, session):
        session.get.side_effect = [make_response(b'abc'), make_response(b'')]
        fmt = StreamFormat(format_id='251', content_length=10, url='https://media.example/251')

        with pytest.raises(DownloadError) as exc_info:
            downloader.download_stream(fmt)

        assert exc_info.value.details['received'] == 3
        assert exc_info.value.details['expected'] == 10

    def test_http_error(self, downloader, session):
        session.get.return_value = make_response(status_code=403)
        fmt = StreamFormat(format_id='251', content_length=10, url='https://media.example/251')

        with pytest.raises(DownloadError) as exc_info:
            downloader.download_stream(fmt)

        assert exc_info.value.details['status_code'] == 403

    def test_connection_error(self, downloader, session):
        session.get.side_effect = requests.ConnectionError("reset")
        fmt = StreamFormat(format_id='251', content_length=10, url='https://media.example/251')

        with pytest.raises(DownloadError):
            downloader.download_stream(fmt)

    def test_missing_url(self, downloader):
        with pytest.raises(DownloadError):
            downloader.download_stream(StreamFormat(format_id='251'))
