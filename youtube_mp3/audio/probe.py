"""
Reading back technical properties of the produced file with ffprobe
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import ffmpeg

from ..exceptions import ProbeError


@dataclass(frozen=True)
class ProbeInfo:
    """Container-level properties reported by ffprobe"""
    filename: str
    duration: Optional[float] = None
    size: Optional[int] = None
    bit_rate: Optional[int] = None


def _number(data: Dict[str, Any], key: str, cast):
    value = data.get(key)
    if value in (None, '', 'N/A'):
        return None
    try:
        return cast(float(value))
    except (TypeError, ValueError):
        return None


def probe_file(path: Union[str, Path]) -> ProbeInfo:
    """
    Probe a media file

    Args:
        path: File to inspect

    Returns:
        ProbeInfo with duration (seconds), size (bytes) and bit rate (bits/s)

    Raises:
        ProbeError: If ffprobe is missing or cannot read the file
    """
    try:
        data = ffmpeg.probe(str(path))
    except ffmpeg.Error as e:
        stderr = e.stderr.decode('utf-8', errors='replace') if e.stderr else ''
        raise ProbeError(
            f"Unable to read {Path(path).name}",
            details={'path': str(path), 'stderr': stderr.strip()}
        ) from e
    except FileNotFoundError as e:
        raise ProbeError(
            "ffprobe executable not found, install ffmpeg and make sure it is on PATH",
            details={'path': str(path), 'original_error': str(e)}
        ) from e

    fmt = data.get('format') or {}
    return ProbeInfo(
        filename=fmt.get('filename') or str(path),
        duration=_number(fmt, 'duration', float),
        size=_number(fmt, 'size', int),
        bit_rate=_number(fmt, 'bit_rate', int),
    )
