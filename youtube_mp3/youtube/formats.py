"""
Stream format selection

Two policies pick the stream to download from the list the platform offers:

- highest quality: the stream with the greatest audio bitrate
- low quality: the smallest stream (by content length) that still has audio

Both are single pass and side-effect free. Streams missing the attribute a
policy depends on are skipped, never treated as zero.
"""

from typing import Iterable, List, Optional

from ..exceptions import NoAudioFormatError
from ..models import StreamFormat


def select_highest_bitrate(formats: Iterable[StreamFormat]) -> Optional[StreamFormat]:
    """
    Pick the stream with the strictly greatest audio bitrate

    Ties keep the first stream encountered.

    Args:
        formats: Candidate streams

    Returns:
        Best stream, or None if no stream has a positive audio bitrate
    """
    best = None
    for fmt in formats:
        if not fmt.has_audio:
            continue
        if best is None or fmt.audio_bitrate > best.audio_bitrate:
            best = fmt
    return best


def select_smallest(formats: Iterable[StreamFormat], min_bitrate: float = 0) -> Optional[StreamFormat]:
    """
    Pick the smallest stream that has audio

    Only streams with BOTH a positive audio bitrate (at least min_bitrate) and
    a known content length qualify. Ties keep the first stream encountered.

    Args:
        formats: Candidate streams
        min_bitrate: Lowest acceptable audio bitrate in kbps

    Returns:
        Smallest qualifying stream, or None if none qualifies
    """
    smallest = None
    for fmt in formats:
        if not fmt.has_audio or fmt.audio_bitrate < min_bitrate:
            continue
        if fmt.content_length is None:
            continue
        if smallest is None or fmt.content_length < smallest.content_length:
            smallest = fmt
    return smallest


def select_format(
    formats: Iterable[StreamFormat],
    low_quality: bool = False,
    container: Optional[str] = None,
    require_video: bool = False,
    min_bitrate: float = 0
) -> StreamFormat:
    """
    Apply the candidate filters and the requested selection policy

    Args:
        formats: All streams offered for the video
        low_quality: Use the smallest-size policy instead of highest bitrate
        container: Only consider streams in this container (e.g. "mp4")
        require_video: Only consider streams that also carry video
        min_bitrate: Lowest acceptable audio bitrate for the low quality policy

    Returns:
        The selected stream

    Raises:
        NoAudioFormatError: If no candidate stream qualifies
    """
    candidates: List[StreamFormat] = [
        fmt for fmt in formats
        if (container is None or fmt.container == container)
        and (not require_video or fmt.has_video)
    ]

    if low_quality:
        selected = select_smallest(candidates, min_bitrate=min_bitrate)
    else:
        selected = select_highest_bitrate(candidates)

    if selected is None:
        raise NoAudioFormatError(
            "No stream with audio matches the requested options",
            details={
                'candidates': len(candidates),
                'low_quality': low_quality,
                'container': container,
                'require_video': require_video,
            }
        )

    return selected
