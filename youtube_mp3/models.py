"""
Data models for youtube-mp3

The pipeline passes a handful of small records between its stages:

- **StreamFormat**: one encoding of the source video as offered by the platform
- **VideoMetadata**: the video title together with the stream chosen for download
- **SongMetadata**: descriptive song fields, filled progressively by the lookup
  service, the title parser and the user
- **TitleParseResult** / **LookupResult**: outcomes of the two metadata
  heuristics; a miss is a normal result, not an exception
- **PipelineResult**: what the finished run reports back

SongMetadata keeps absent fields as None. Empty strings coming from the lookup
service or from user input are normalized to None so "not set" has exactly one
representation.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional


def _clean(value: Any) -> Optional[str]:
    """Normalize an optional text value: None and blank strings become None"""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class StreamFormat:
    """
    One downloadable encoding of a source video

    Attributes:
        format_id: Platform identifier of the encoding (YouTube itag)
        audio_bitrate: Average audio bitrate in kbps, None when the stream has no audio
            or the platform does not report it
        content_length: Size in bytes, None when unknown
        exact_length: True when content_length is the exact byte count, False when it
            is only the platform's estimate
        container: File extension of the container (mp4, webm, m4a, ...)
        url: Direct media URL
        http_headers: Headers the media server expects with the request
        has_video: True when the stream carries a video track
    """
    format_id: str
    audio_bitrate: Optional[float] = None
    content_length: Optional[int] = None
    container: Optional[str] = None
    url: Optional[str] = None
    http_headers: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)
    has_video: bool = False
    exact_length: bool = True

    @classmethod
    def from_ytdl(cls, data: Dict[str, Any]) -> 'StreamFormat':
        """
        Build a StreamFormat from one entry of yt-dlp's "formats" list

        Streams whose acodec is "none" carry no audio: their bitrate is left
        unset so the selector skips them.

        Args:
            data: yt-dlp format dictionary

        Returns:
            StreamFormat instance
        """
        has_audio = data.get('acodec') not in (None, 'none')
        bitrate = data.get('abr') if has_audio else None
        if bitrate is not None and bitrate <= 0:
            bitrate = None

        # filesize_approx is only an estimate, usable for ranking and progress
        exact_size = data.get('filesize')
        content_length = exact_size or data.get('filesize_approx')

        return cls(
            format_id=str(data.get('format_id', '')),
            audio_bitrate=float(bitrate) if bitrate is not None else None,
            content_length=int(content_length) if content_length else None,
            container=data.get('ext'),
            url=data.get('url'),
            http_headers=dict(data.get('http_headers') or {}),
            has_video=data.get('vcodec') not in (None, 'none'),
            exact_length=bool(exact_size),
        )

    @property
    def has_audio(self) -> bool:
        return self.audio_bitrate is not None and self.audio_bitrate > 0


@dataclass(frozen=True)
class VideoMetadata:
    """
    The video being converted and the stream selected for it

    Built once after format selection and never modified afterwards.
    """
    title: str
    format: StreamFormat
    video_id: Optional[str] = None
    duration: Optional[float] = None
    uploader: Optional[str] = None
    webpage_url: Optional[str] = None


@dataclass
class SongMetadata:
    """
    Descriptive song information used to tag the output file

    Attributes:
        title: Song title
        artist: Performing artist
        album: Album name
        genre: Primary genre
        date: Release year (4 digits)
        album_url: Link to the album page of the lookup service
        track_number: Position on the album
        track_count: Number of tracks on the album
    """
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    genre: Optional[str] = None
    date: Optional[str] = None
    album_url: Optional[str] = None
    track_number: Optional[int] = None
    track_count: Optional[int] = None

    def __post_init__(self):
        for name in ('title', 'artist', 'album', 'genre', 'date', 'album_url'):
            setattr(self, name, _clean(getattr(self, name)))
        for name in ('track_number', 'track_count'):
            value = getattr(self, name)
            setattr(self, name, int(value) if value else None)

    def tag_fields(self) -> Dict[str, Any]:
        """
        Return only the fields that are present

        Returns:
            Mapping of field name to value, absent fields omitted
        """
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def with_values(self, **changes) -> 'SongMetadata':
        """Return a copy with the given fields replaced"""
        return replace(self, **changes)

    @property
    def display_name(self) -> str:
        """'Artist - Title' when the artist is known, else the title"""
        if self.artist and self.title:
            return f"{self.artist} - {self.title}"
        return self.title or self.artist or "unknown"


@dataclass(frozen=True)
class TitleParseResult:
    """Outcome of splitting a video title into artist and song title"""
    success: bool
    artist: Optional[str] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class LookupResult:
    """Outcome of one song lookup request"""
    success: bool
    metadata: Optional[SongMetadata] = None


class MetadataSource(Enum):
    """Which strategy supplied the metadata defaults"""
    LOOKUP = "lookup"                 # raw video title matched the lookup service
    PARSED_LOOKUP = "parsed_lookup"   # "artist title" from the parser matched
    TITLE_PARSE = "title_parse"       # parser only, lookups missed
    VIDEO_TITLE = "video_title"       # nothing matched, video title kept


@dataclass
class PipelineResult:
    """
    Summary of a finished run

    Attributes:
        file_path: Final output file
        duration: Probed duration in seconds
        size: File size in bytes
        bit_rate: Overall bit rate in bits per second
        elapsed: Seconds from the start of the fetch to the end of transcoding
        metadata: Song metadata the file was tagged with (None in video mode)
    """
    file_path: Path
    duration: Optional[float] = None
    size: Optional[int] = None
    bit_rate: Optional[int] = None
    elapsed: Optional[int] = None
    metadata: Optional[SongMetadata] = None
