"""
ID3 tagging of the produced MP3 files

Present SongMetadata fields are written as ID3v2 text frames; absent fields
are skipped, never written empty. The album artist is always set to the
artist.

Frame Mapping:
- TIT2: title
- TPE1: artist
- TPE2: album artist (same as artist)
- TALB: album
- TCON: genre
- TDRC: release year
- TRCK: "track/total" (or "track" when the total is unknown)
- WOAF: album page URL from the lookup service

Tagging problems are reported as TaggingError. The pipeline treats them as a
warning: an untagged mp3 is still a usable result.
"""

from pathlib import Path
from typing import Any, Dict, Union

import mutagen
from mutagen.id3 import ID3, TALB, TCON, TDRC, TIT2, TPE1, TPE2, TRCK, WOAF
from mutagen.mp3 import MP3

from ..exceptions import TaggingError
from ..models import SongMetadata
from ..utils.logger import get_logger

logger = get_logger(__name__)

TEXT_FRAMES = {
    'title': TIT2,
    'artist': TPE1,
    'album': TALB,
    'genre': TCON,
    'date': TDRC,
}


def _track_text(metadata: SongMetadata) -> str:
    if metadata.track_count:
        return f"{metadata.track_number}/{metadata.track_count}"
    return str(metadata.track_number)


def write_tags(path: Union[str, Path], metadata: SongMetadata, id3_version: str = "2.4") -> None:
    """
    Write song metadata into an mp3 file's ID3 tag

    Existing frames for the same fields are replaced.

    Args:
        path: mp3 file
        metadata: Fields to write
        id3_version: "2.4" or "2.3"

    Raises:
        TaggingError: If the file cannot be read or saved
    """
    try:
        audio = MP3(str(path), ID3=ID3)
        if audio.tags is None:
            audio.add_tags()

        values = metadata.tag_fields()
        for name, frame in TEXT_FRAMES.items():
            if name in values:
                audio.tags.setall(frame.__name__, [frame(encoding=3, text=values[name])])

        if metadata.artist:
            audio.tags.setall('TPE2', [TPE2(encoding=3, text=metadata.artist)])
        if metadata.track_number:
            audio.tags.setall('TRCK', [TRCK(encoding=3, text=_track_text(metadata))])
        if metadata.album_url:
            audio.tags.setall('WOAF', [WOAF(url=metadata.album_url)])

        audio.save(v2_version=4 if id3_version == "2.4" else 3)
    except (mutagen.MutagenError, OSError) as e:
        raise TaggingError(
            f"Failed to write tags: {e}",
            details={'path': str(path), 'original_error': str(e)}
        ) from e

    logger.debug(f"Tagged {path}: {metadata.display_name}")


def read_tags(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read the fields written by write_tags

    Args:
        path: mp3 file

    Returns:
        Mapping with keys title, artist, album_artist, album, genre, date,
        track and album_url; missing frames are omitted

    Raises:
        TaggingError: If the file cannot be read
    """
    try:
        audio = MP3(str(path), ID3=ID3)
    except (mutagen.MutagenError, OSError) as e:
        raise TaggingError(f"Failed to read tags: {e}", details={'path': str(path)}) from e

    if audio.tags is None:
        return {}

    frame_keys = {
        'title': 'TIT2',
        'artist': 'TPE1',
        'album_artist': 'TPE2',
        'album': 'TALB',
        'genre': 'TCON',
        'date': 'TDRC',
        'track': 'TRCK',
    }
    tags = {}
    for key, frame_id in frame_keys.items():
        frame = audio.tags.get(frame_id)
        if frame is not None and frame.text:
            tags[key] = str(frame.text[0])

    woaf = audio.tags.getall('WOAF')
    if woaf:
        tags['album_url'] = woaf[0].url

    return tags
