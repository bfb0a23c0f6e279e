"""
Conversion pipeline for youtube-mp3

A run converts exactly one video into one tagged mp3 file. The work is split
into four stages that always execute in order, each taking and returning the
shared PipelineContext:

1. **FETCH**: resolve the video and select the stream to download
2. **DOWNLOAD**: transfer the selected stream into memory
3. **TRANSCODE**: write the payload to an intermediate file and convert it to
   an intermediate mp3 with ffmpeg
4. **TAG**: resolve song metadata (lookup service, title parser, user
   confirmation), write the ID3 tag, copy the mp3 to its final name and probe it

Stage failures propagate as YoutubeMp3Error subclasses and end the run; the
only recoverable problem is a failed tag write, which is logged as a warning.

Video Mode:
With video_only set the pipeline stops after DOWNLOAD and writes the payload
straight to the final video file; no transcoding or tagging happens.

Timing:
The reported completion time covers FETCH through TRANSCODE. The interactive
prompt in TAG is excluded so waiting for the user does not inflate it.
"""

import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

import click
from tqdm import tqdm

from .audio.probe import probe_file
from .audio.tagger import write_tags
from .audio.transcoder import choose_bitrate, transcode
from .config.settings import DEFAULT_SEPARATORS, Settings, get_settings
from .exceptions import OutputError, TaggingError
from .models import PipelineResult, SongMetadata, VideoMetadata
from .music.lookup import SongLookupClient, resolve_song_metadata
from .music.prompt import confirm_metadata
from .utils.helpers import (
    format_bit_rate, format_duration, now_seconds, pretty_bytes, pretty_time, sanitize_filename
)
from .utils.logger import get_logger
from .utils.validation import build_output_path
from .youtube.downloader import VideoDownloader

logger = get_logger(__name__)


class Stage(Enum):
    """Pipeline stages in execution order"""
    FETCH = "fetch"
    DOWNLOAD = "download"
    TRANSCODE = "transcode"
    TAG = "tag"


@dataclass
class PipelineOptions:
    """
    Per-run options, normally built from the command line

    Attributes:
        url: Video page URL
        output: Requested output file name, None to derive it from the metadata
        low_quality: Select the smallest stream with audio
        separators: Title separators for the "Artist - Title" parser
        bitrate: Output bitrate in kbps, None to follow the source
        video_only: Save the video stream instead of an mp3
        keep_intermediate: Keep the downloaded video in the working directory
        confirm: Ask the user to confirm the metadata
        show_progress: Render progress bars
    """
    url: str
    output: Optional[str] = None
    low_quality: bool = False
    separators: List[str] = field(default_factory=lambda: list(DEFAULT_SEPARATORS))
    bitrate: Optional[int] = None
    video_only: bool = False
    keep_intermediate: bool = False
    confirm: bool = True
    show_progress: bool = True


@dataclass
class PipelineContext:
    """State handed from stage to stage"""
    options: PipelineOptions
    stage: Optional[Stage] = None
    start_time: Optional[int] = None
    video: Optional[VideoMetadata] = None
    payload: Optional[bytes] = None
    intermediate_video: Optional[Path] = None
    intermediate_mp3: Optional[Path] = None
    elapsed: Optional[int] = None
    metadata: Optional[SongMetadata] = None
    output_path: Optional[Path] = None
    result: Optional[PipelineResult] = None


class Mp3Pipeline:
    """
    Runs the FETCH → DOWNLOAD → TRANSCODE → TAG stages for one video

    Collaborators (downloader, lookup client, prompt) can be injected, which is
    how the tests replace the network and the terminal.
    """

    def __init__(
        self,
        options: PipelineOptions,
        settings: Optional[Settings] = None,
        downloader: Optional[VideoDownloader] = None,
        lookup_client: Optional[SongLookupClient] = None,
        prompt: Callable = click.prompt
    ):
        self.options = options
        self.settings = settings or get_settings()
        self.downloader = downloader or VideoDownloader(self.settings)
        self.lookup_client = lookup_client or SongLookupClient(self.settings)
        self.prompt = prompt

    def run(self) -> PipelineResult:
        """
        Execute every stage in order

        Returns:
            PipelineResult describing the produced file

        Raises:
            YoutubeMp3Error: Subclass matching the failed stage
        """
        context = PipelineContext(options=self.options, start_time=now_seconds())

        context = self.fetch(context)
        context = self.download(context)

        if self.options.video_only:
            return self.save_video(context).result

        context = self.transcode(context)
        context = self.tag(context)
        return context.result

    def _progress_bar(self, description: str, **kwargs) -> tqdm:
        return tqdm(
            desc=description,
            disable=not self.options.show_progress,
            leave=False,
            **kwargs
        )

    def fetch(self, context: PipelineContext) -> PipelineContext:
        """FETCH: resolve the video and select a stream"""
        context.stage = Stage.FETCH
        with self._progress_bar("Downloading metadata", total=1) as bar:
            context.video = self.downloader.fetch_video(
                self.options.url,
                low_quality=self.options.low_quality,
                video_only=self.options.video_only,
            )
            bar.update(1)

        duration = format_duration(context.video.duration) if context.video.duration else 'unknown length'
        logger.info(f"Video: {context.video.title} ({duration}, format {context.video.format.format_id})")
        return context

    def download(self, context: PipelineContext) -> PipelineContext:
        """DOWNLOAD: transfer the selected stream into memory"""
        context.stage = Stage.DOWNLOAD
        fmt = context.video.format
        with self._progress_bar(
            "Downloading video",
            total=fmt.content_length,
            unit='B',
            unit_scale=True,
            unit_divisor=1024,
        ) as bar:
            context.payload = self.downloader.download_stream(fmt, progress=bar.update)

        if self.options.video_only:
            context.elapsed = now_seconds() - context.start_time
        return context

    def _intermediate_video_path(self, video: VideoMetadata) -> Path:
        extension = video.format.container or 'video'
        if self.options.keep_intermediate:
            return Path.cwd() / sanitize_filename(f"{video.title}.{extension}")
        stem = sanitize_filename(video.video_id or 'download')
        return self.settings.get_temp_directory() / f"{stem}.{extension}"

    def transcode(self, context: PipelineContext) -> PipelineContext:
        """TRANSCODE: convert the downloaded payload into an intermediate mp3"""
        context.stage = Stage.TRANSCODE
        video = context.video

        context.intermediate_video = self._intermediate_video_path(video)
        try:
            context.intermediate_video.write_bytes(context.payload)
        except OSError as e:
            raise OutputError(
                f"Cannot write {context.intermediate_video}: {e}",
                details={'path': str(context.intermediate_video)}
            ) from e
        context.payload = None

        stem = sanitize_filename(video.video_id or 'download')
        context.intermediate_mp3 = self.settings.get_temp_directory() / f"{stem}.mp3"

        bitrate = choose_bitrate(
            self.options.bitrate,
            video.format.audio_bitrate,
            self.settings.audio.min_bitrate,
            self.settings.audio.max_bitrate,
        )

        try:
            with self._progress_bar("Converting to mp3", total=100) as bar:
                def update(percent: float) -> None:
                    bar.n = int(percent)
                    bar.refresh()

                transcode(
                    context.intermediate_video,
                    context.intermediate_mp3,
                    bitrate,
                    duration=video.duration,
                    on_progress=update,
                )
        except BaseException:
            context.intermediate_mp3.unlink(missing_ok=True)
            raise
        finally:
            if self.options.keep_intermediate:
                logger.console_info(f"Intermediate video kept: {context.intermediate_video}")
            else:
                context.intermediate_video.unlink(missing_ok=True)

        context.elapsed = now_seconds() - context.start_time
        return context

    def tag(self, context: PipelineContext) -> PipelineContext:
        """TAG: resolve and confirm metadata, tag, copy to the final name and probe"""
        context.stage = Stage.TAG
        try:
            resolved = resolve_song_metadata(
                context.video.title,
                self.options.separators,
                self.lookup_client,
            )
            logger.debug(f"Metadata defaults from {resolved.source.value}: {resolved.metadata}")

            context.metadata = confirm_metadata(
                resolved.metadata,
                default_album=self.settings.metadata.default_album,
                interactive=self.options.confirm,
                prompt=self.prompt,
            )

            try:
                write_tags(context.intermediate_mp3, context.metadata, self.settings.metadata.id3_version)
            except TaggingError as e:
                logger.warning(f"Could not write tags: {e}")
                logger.debug(f"Tagging error details: {e.details}")

            # Derived names may contain "/" (e.g. "AC/DC"), which is not a directory
            name = self.options.output or sanitize_filename(context.metadata.display_name)
            context.output_path = build_output_path(name, self.settings.get_output_directory())
            self._copy_output(context.intermediate_mp3, context.output_path)
        finally:
            if context.intermediate_mp3:
                context.intermediate_mp3.unlink(missing_ok=True)

        context.result = self._build_result(context)
        return context

    def save_video(self, context: PipelineContext) -> PipelineContext:
        """Video mode: write the downloaded payload to its final file"""
        video = context.video
        name = self.options.output or sanitize_filename(f"{video.title}.{video.format.container or 'mp4'}")
        context.output_path = build_output_path(name, self.settings.get_output_directory(), suffix=None)

        try:
            context.output_path.parent.mkdir(parents=True, exist_ok=True)
            context.output_path.write_bytes(context.payload)
        except OSError as e:
            raise OutputError(
                f"Cannot write {context.output_path}: {e}",
                details={'path': str(context.output_path)}
            ) from e
        context.payload = None

        context.result = self._build_result(context)
        return context

    @staticmethod
    def _copy_output(source: Path, destination: Path) -> None:
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
        except OSError as e:
            raise OutputError(
                f"Cannot write {destination}: {e}",
                details={'source': str(source), 'path': str(destination)}
            ) from e

    @staticmethod
    def _build_result(context: PipelineContext) -> PipelineResult:
        info = probe_file(context.output_path)
        return PipelineResult(
            file_path=context.output_path,
            duration=info.duration,
            size=info.size,
            bit_rate=info.bit_rate,
            elapsed=context.elapsed,
            metadata=context.metadata,
        )


def summary_lines(result: PipelineResult) -> List[str]:
    """
    Lines of the completion summary shown after a successful run

    Args:
        result: Finished run

    Returns:
        Completion time followed by file, size, length and bit rate
    """
    return [
        f"Conversion completed in {result.elapsed or 0}s.",
        f"File: {result.file_path}",
        f"Size: {pretty_bytes(result.size) if result.size is not None else 'unknown'}",
        f"Length: {pretty_time(result.duration) if result.duration is not None else 'unknown'}",
        f"Bit Rate: {format_bit_rate(result.bit_rate) if result.bit_rate is not None else 'unknown'}",
    ]


def log_summary(result: PipelineResult) -> None:
    """Show the completion summary on the console"""
    for line in summary_lines(result):
        logger.console_info(line)
