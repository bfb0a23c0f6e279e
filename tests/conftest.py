"""Test configuration and fixtures"""

import pytest
import tempfile
from pathlib import Path

from youtube_mp3.config.settings import Settings
from youtube_mp3.models import SongMetadata, StreamFormat

# One MPEG-1 Layer III frame: 128 kbps, 44.1 kHz, joint stereo, 417 bytes
MPEG_FRAME = b'\xff\xfb\x90\x64' + b'\x00' * 413


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def settings(temp_dir):
    """Real settings pointed at temporary directories"""
    settings = Settings()
    settings.download.temp_directory = str(temp_dir / "tmp")
    settings.download.output_directory = str(temp_dir / "out")
    settings.download.container = None
    settings.download.chunk_size = 10 * 1024 * 1024
    return settings


@pytest.fixture
def mp3_file(temp_dir):
    """A minimal untagged mp3 made of silent frames"""
    path = temp_dir / "sample.mp3"
    path.write_bytes(MPEG_FRAME * 40)
    return path


@pytest.fixture
def sample_formats():
    """Streams as offered for a typical music video"""
    return [
        StreamFormat(format_id='18', audio_bitrate=96.0, content_length=9_000_000,
                     container='mp4', url='https://media.example/18', has_video=True),
        StreamFormat(format_id='140', audio_bitrate=129.5, content_length=3_400_000,
                     container='m4a', url='https://media.example/140'),
        StreamFormat(format_id='251', audio_bitrate=160.0, content_length=3_900_000,
                     container='webm', url='https://media.example/251'),
        StreamFormat(format_id='249', audio_bitrate=50.0, content_length=1_300_000,
                     container='webm', url='https://media.example/249'),
        StreamFormat(format_id='137', audio_bitrate=None, content_length=40_000_000,
                     container='mp4', url='https://media.example/137', has_video=True),
    ]


@pytest.fixture
def sample_song():
    """Fully populated song metadata"""
    return SongMetadata(
        title='Hello',
        artist='Adele',
        album='25',
        genre='Pop',
        date='2015',
        album_url='https://music.apple.com/us/album/25/1051394208',
        track_number=1,
        track_count=11,
    )


@pytest.fixture
def itunes_entry():
    """One song entry as returned by the iTunes Search API"""
    return {
        'wrapperType': 'track',
        'kind': 'song',
        'trackName': 'Hello',
        'artistName': 'Adele',
        'collectionName': '25',
        'primaryGenreName': 'Pop',
        'releaseDate': '2015-10-23T07:00:00Z',
        'collectionViewUrl': 'https://music.apple.com/us/album/25/1051394208',
        'trackNumber': 1,
        'trackCount': 11,
    }
