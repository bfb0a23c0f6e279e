"""
Video retrieval using yt-dlp for stream discovery and requests for the transfer

yt-dlp resolves the video page into its list of available streams together
with their direct media URLs. The selected stream is then fetched over plain
HTTP and accumulated in memory; nothing touches the disk until the transcode
stage writes the payload out.

Download Strategy:
- When the stream length is known, the payload is requested in ranged chunks
  (download.chunk_size, 10 MiB by default). Media servers throttle long
  single responses, ranged requests keep the transfer at full speed.
- When the length is unknown or only estimated, a single streamed GET is used
  and the payload is whatever the server sends.
- A payload shorter than the announced length is treated as a failed download.

There are no retries here: a failure is reported and the user re-runs the tool.
"""

from typing import Any, Callable, Dict, List, Optional

import requests
import yt_dlp

from ..config.settings import Settings, get_settings
from ..exceptions import DownloadError, FetchError
from ..models import StreamFormat, VideoMetadata
from ..utils.helpers import format_file_size
from ..utils.logger import get_logger, log_performance
from .formats import select_format

# Size of each block read from the HTTP response
READ_BLOCK_SIZE = 64 * 1024

# Protocols that can be fetched with a plain GET
DIRECT_PROTOCOLS = ('http', 'https')

ProgressCallback = Callable[[int], None]


class VideoDownloader:
    """
    Fetches stream listings and downloads the selected stream

    Configuration (timeouts, chunk size, user agent, container filter) is read
    from the application settings when the downloader is created.
    """

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        """
        Initialize the downloader

        Args:
            settings: Settings to use, defaults to the global instance
            session: HTTP session for the transfer, a new one is created if omitted
        """
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)

        self.chunk_size = self.settings.download.chunk_size
        self.timeout = self.settings.download.socket_timeout
        self.container = self.settings.download.container

        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': self.settings.network.user_agent})

    def _get_ydl_options(self) -> Dict[str, Any]:
        """
        yt-dlp options for information extraction only

        Returns:
            Dictionary of yt-dlp options
        """
        return {
            'quiet': True,
            'no_warnings': True,
            'noprogress': True,
            'noplaylist': True,          # Single video only
            'skip_download': True,       # The transfer is done by download_stream
            'socket_timeout': self.timeout,
            'logtostderr': False,
            'consoletitle': False,
        }

    def extract_info(self, url: str) -> Dict[str, Any]:
        """
        Retrieve the raw video information dictionary

        Args:
            url: Video page URL

        Returns:
            yt-dlp info dictionary for a single video

        Raises:
            FetchError: If the video cannot be resolved
        """
        try:
            with yt_dlp.YoutubeDL(self._get_ydl_options()) as ydl:
                info = ydl.extract_info(url, download=False)
        except yt_dlp.utils.YoutubeDLError as e:
            raise FetchError(
                f"Unable to retrieve video information: {e}",
                details={'url': url, 'original_error': str(e)}
            ) from e

        if not info:
            raise FetchError("No video information returned", details={'url': url})

        # Playlist URLs resolve to their first entry
        if 'entries' in info:
            info = next((entry for entry in info['entries'] or [] if entry), None)
            if info is None:
                raise FetchError("Playlist contains no playable video", details={'url': url})

        return info

    def list_formats(self, info: Dict[str, Any]) -> List[StreamFormat]:
        """
        Convert yt-dlp formats to StreamFormat, keeping directly fetchable ones

        Args:
            info: yt-dlp info dictionary

        Returns:
            Streams that can be downloaded with a plain HTTP GET
        """
        formats = []
        for data in info.get('formats') or []:
            if not data.get('url'):
                continue
            if data.get('protocol', 'https') not in DIRECT_PROTOCOLS:
                continue
            formats.append(StreamFormat.from_ytdl(data))
        return formats

    def fetch_video(self, url: str, low_quality: bool = False, video_only: bool = False) -> VideoMetadata:
        """
        Resolve the video and select the stream to download

        Args:
            url: Video page URL
            low_quality: Select the smallest stream instead of the highest bitrate
            video_only: Only consider streams that also carry video

        Returns:
            VideoMetadata with the title and the selected stream

        Raises:
            FetchError: If the video cannot be resolved
            NoAudioFormatError: If no stream qualifies
        """
        info = self.extract_info(url)
        formats = self.list_formats(info)
        self.logger.debug(f"{len(formats)} downloadable streams for {info.get('id', url)}")

        selected = select_format(
            formats,
            low_quality=low_quality,
            container=self.container,
            require_video=video_only,
        )
        self.logger.debug(
            f"Selected format {selected.format_id} ({selected.container}, "
            f"{selected.audio_bitrate} kbps, "
            f"{format_file_size(selected.content_length) if selected.content_length else 'unknown size'})"
        )

        return VideoMetadata(
            title=(info.get('title') or info.get('id') or 'unknown').strip(),
            format=selected,
            video_id=info.get('id'),
            duration=info.get('duration'),
            uploader=info.get('uploader'),
            webpage_url=info.get('webpage_url') or url,
        )

    @log_performance
    def download_stream(self, fmt: StreamFormat, progress: Optional[ProgressCallback] = None) -> bytes:
        """
        Download the complete payload of a stream into memory

        Args:
            fmt: Stream to download
            progress: Called with the size of every block received

        Returns:
            The downloaded bytes

        Raises:
            DownloadError: On HTTP errors, connection failures or short reads
        """
        if not fmt.url:
            raise DownloadError("Selected stream has no media URL", details={'format_id': fmt.format_id})

        buffer = bytearray()
        try:
            if fmt.content_length and fmt.exact_length:
                self._download_ranges(fmt, buffer, progress)
            else:
                self._download_single(fmt, buffer, progress)
        except requests.RequestException as e:
            raise DownloadError(
                f"Download failed: {e}",
                details={'format_id': fmt.format_id, 'received': len(buffer), 'original_error': str(e)}
            ) from e

        if fmt.content_length and fmt.exact_length and len(buffer) < fmt.content_length:
            raise DownloadError(
                f"Download incomplete: received {format_file_size(len(buffer))} "
                f"of {format_file_size(fmt.content_length)}",
                details={'format_id': fmt.format_id, 'received': len(buffer), 'expected': fmt.content_length}
            )

        self.logger.debug(f"Downloaded {format_file_size(len(buffer))} for format {fmt.format_id}")
        return bytes(buffer)

    def _download_ranges(self, fmt: StreamFormat, buffer: bytearray, progress: Optional[ProgressCallback]) -> None:
        """Fetch a stream of known length in ranged requests"""
        total = fmt.content_length
        while len(buffer) < total:
            start = len(buffer)
            end = min(start + self.chunk_size, total) - 1
            headers = dict(fmt.http_headers)
            headers['Range'] = f"bytes={start}-{end}"

            with self.session.get(fmt.url, headers=headers, stream=True, timeout=self.timeout) as response:
                self._check_status(response, fmt)

                # Server ignored the range and sends the whole payload
                if response.status_code == 200:
                    del buffer[:]
                    self._read_body(response, buffer, progress)
                    break

                received = self._read_body(response, buffer, progress)

            if received == 0:
                break

    def _download_single(self, fmt: StreamFormat, buffer: bytearray, progress: Optional[ProgressCallback]) -> None:
        """Fetch a stream of unknown or estimated length with one streamed request"""
        with self.session.get(fmt.url, headers=fmt.http_headers, stream=True, timeout=self.timeout) as response:
            self._check_status(response, fmt)
            self._read_body(response, buffer, progress)

    @staticmethod
    def _read_body(response: requests.Response, buffer: bytearray, progress: Optional[ProgressCallback]) -> int:
        received = 0
        for block in response.iter_content(chunk_size=READ_BLOCK_SIZE):
            if not block:
                continue
            buffer.extend(block)
            received += len(block)
            if progress:
                progress(len(block))
        return received

    @staticmethod
    def _check_status(response: requests.Response, fmt: StreamFormat) -> None:
        if response.status_code not in (200, 206):
            raise DownloadError(
                f"Media server returned HTTP {response.status_code}",
                details={'format_id': fmt.format_id, 'status_code': response.status_code}
            )
