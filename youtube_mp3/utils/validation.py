"""
Input validation utilities
"""
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import urlparse

from .helpers import sanitize_filename, ensure_suffix


def validate_video_url(url: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a source video URL

    Only the shape is checked here; whether the platform knows the video is
    up to the extractor.

    Args:
        url: URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not url.strip():
        return False, "URL cannot be empty"

    parsed = urlparse(url.strip())
    if parsed.scheme not in ('http', 'https'):
        return False, f"Unsupported URL scheme: {parsed.scheme or 'none'}"

    if not parsed.netloc:
        return False, "URL has no host"

    return True, None


def validate_bitrate(bitrate: Optional[int], minimum: int = 32, maximum: int = 320) -> Tuple[bool, Optional[str]]:
    """
    Validate an output bitrate override

    Args:
        bitrate: Requested bitrate in kbps, None when not given
        minimum: Lowest accepted value
        maximum: Highest accepted value

    Returns:
        Tuple of (is_valid, error_message)
    """
    if bitrate is None:
        return True, None

    if not minimum <= bitrate <= maximum:
        return False, f"Bitrate must be between {minimum} and {maximum} kbps, got {bitrate}"

    return True, None


def validate_separators(separators) -> Tuple[bool, Optional[str]]:
    """
    Validate title separator tokens

    Args:
        separators: Sequence of literal separator strings

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not separators:
        return False, "At least one separator is required"

    if any(not token for token in separators):
        return False, "Separators cannot be empty strings"

    return True, None


def build_output_path(name: str, directory: Path, suffix: Optional[str] = ".mp3") -> Path:
    """
    Turn a requested output name into a safe path

    Only the final path component is kept, unsafe characters are removed and
    the suffix is enforced when one is given.

    Args:
        name: Requested file name (may contain a directory part)
        directory: Directory the file goes into
        suffix: Required extension, None to keep the name's own

    Returns:
        Path inside directory
    """
    requested = Path(name)
    target_dir = directory
    if requested.parent != Path('.'):
        target_dir = requested.parent.expanduser()

    safe_name = sanitize_filename(requested.name)
    if suffix:
        safe_name = ensure_suffix(safe_name, suffix)

    return target_dir / safe_name
