"""
MP3 transcoding through ffmpeg

The downloaded container is converted with libmp3lame, dropping any video
track. ffmpeg is driven through ffmpeg-python and asked to write machine
readable progress ("key=value" lines) to stdout, which is turned into a
completion percentage for the progress bar.

Bitrate Selection:
- An explicit --bitrate always wins.
- Otherwise the source stream's audio bitrate is reused, rounded and clamped
  to the range MP3 supports, so the output is never padded beyond what the
  source carries.
"""

import threading
from pathlib import Path
from typing import Callable, Optional, Union

import ffmpeg

from ..exceptions import TranscodeError
from ..utils.logger import get_logger, log_performance

MIN_BITRATE = 32
MAX_BITRATE = 320
DEFAULT_BITRATE = 128

ProgressCallback = Callable[[float], None]

logger = get_logger(__name__)


def choose_bitrate(
    override: Optional[int],
    source_kbps: Optional[float],
    minimum: int = MIN_BITRATE,
    maximum: int = MAX_BITRATE
) -> int:
    """
    Decide the output bitrate in kbps

    Args:
        override: Bitrate requested on the command line
        source_kbps: Audio bitrate of the downloaded stream
        minimum: Lowest accepted bitrate
        maximum: Highest accepted bitrate

    Returns:
        Bitrate in kbps
    """
    if override:
        return int(override)
    if not source_kbps:
        return DEFAULT_BITRATE
    return max(minimum, min(maximum, int(round(source_kbps))))


def parse_progress_line(line: str, duration: Optional[float]) -> Optional[float]:
    """
    Turn one line of ffmpeg's -progress output into a percentage

    ffmpeg reports the position as out_time_us, and as out_time_ms which despite
    its name is also in microseconds.

    Args:
        line: Raw "key=value" line
        duration: Source duration in seconds

    Returns:
        Percentage in [0, 100], or None when the line carries no position
    """
    key, _, value = line.strip().partition('=')
    if key == 'progress' and value == 'end':
        return 100.0
    if key not in ('out_time_us', 'out_time_ms') or not duration:
        return None

    try:
        position = int(value) / 1_000_000
    except ValueError:
        return None

    return max(0.0, min(100.0, position / duration * 100))


def build_command(source: Union[str, Path], destination: Union[str, Path], bitrate_kbps: int):
    """Build the ffmpeg-python stream for an mp3 transcode"""
    return (
        ffmpeg
        .input(str(source))
        .output(
            str(destination),
            format='mp3',
            acodec='libmp3lame',
            audio_bitrate=f'{bitrate_kbps}k',
            vn=None,
        )
        .global_args('-progress', 'pipe:1', '-nostats', '-loglevel', 'error')
        .overwrite_output()
    )


@log_performance
def transcode(
    source: Union[str, Path],
    destination: Union[str, Path],
    bitrate_kbps: int,
    duration: Optional[float] = None,
    on_progress: Optional[ProgressCallback] = None
) -> Path:
    """
    Transcode a media file to MP3

    Args:
        source: Input media file
        destination: Output mp3 path, overwritten if it exists
        bitrate_kbps: Target bitrate
        duration: Source duration in seconds, needed for percentages
        on_progress: Called with the completion percentage as it increases

    Returns:
        Path of the written mp3

    Raises:
        TranscodeError: If ffmpeg is missing or exits with an error
    """
    destination = Path(destination)
    stream = build_command(source, destination, bitrate_kbps)
    logger.debug(f"Running: {' '.join(stream.compile())}")

    try:
        process = stream.run_async(pipe_stdout=True, pipe_stderr=True)
    except FileNotFoundError as e:
        raise TranscodeError(
            "ffmpeg executable not found, install ffmpeg and make sure it is on PATH",
            details={'original_error': str(e)}
        ) from e

    # Drained alongside stdout so a full stderr pipe cannot stall ffmpeg
    stderr_chunks = []
    stderr_reader = threading.Thread(
        target=lambda: stderr_chunks.append(process.stderr.read()),
        name="ffmpeg-stderr",
        daemon=True,
    )
    stderr_reader.start()

    last = 0.0
    for raw_line in process.stdout:
        percent = parse_progress_line(raw_line.decode('utf-8', errors='replace'), duration)
        if percent is not None and percent > last:
            last = percent
            if on_progress:
                on_progress(percent)

    stderr_reader.join()
    stderr = b''.join(stderr_chunks).decode('utf-8', errors='replace')
    return_code = process.wait()

    if return_code != 0:
        raise TranscodeError(
            f"ffmpeg exited with code {return_code}",
            details={'source': str(source), 'stderr': stderr.strip()}
        )

    if not destination.exists():
        raise TranscodeError("ffmpeg produced no output file", details={'destination': str(destination)})

    logger.debug(f"Transcoded {source} to {destination} at {bitrate_kbps} kbps")
    return destination
