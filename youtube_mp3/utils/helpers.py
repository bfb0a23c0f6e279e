"""
Utility functions and helpers for youtube-mp3
Time formatting, size formatting, string cleanup and filename handling
"""

import math
import re
import time
import unicodedata
from typing import Union


# Straight and curly quote characters trimmed from titles
QUOTE_CHARS = '"\'“”‘’'

RESERVED_NAMES = {
    'CON', 'PRN', 'AUX', 'NUL',
    'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
    'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
}


def now_seconds() -> int:
    """Return the current time in whole seconds"""
    return int(math.floor(time.time()))


def pretty_time(seconds: Union[int, float]) -> str:
    """
    Format a duration as minutes and zero-padded seconds

    Args:
        seconds: Duration in seconds

    Returns:
        String like "3:07"
    """
    total = max(0, int(round(seconds)))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


def format_duration(seconds: Union[int, float]) -> str:
    """
    Format duration in seconds to human-readable string

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string ("1:30" or "1:01:01")
    """
    if seconds < 0:
        return "0:00"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    else:
        return f"{minutes}:{secs:02d}"


def format_file_size(size_bytes: Union[int, float]) -> str:
    """
    Format file size in bytes to human-readable string

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string
    """
    if size_bytes < 0:
        return "0 B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    size = float(size_bytes)
    unit_index = 0

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    else:
        return f"{size:.1f} {units[unit_index]}"


def pretty_bytes(size_bytes: Union[int, float]) -> str:
    """
    Format a size with decimal units and three significant digits

    Used for the completion summary: 1337 -> "1.34 kB", 3145728 -> "3.15 MB".
    format_file_size stays binary for log output.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string
    """
    if size_bytes < 1000:
        return f"{max(int(size_bytes), 0)} B"

    units = ['B', 'kB', 'MB', 'GB', 'TB', 'PB']
    exponent = min(int(math.log10(size_bytes) // 3), len(units) - 1)
    value = size_bytes / 1000 ** exponent
    return f"{float(f'{value:.3g}'):g} {units[exponent]}"


def format_bit_rate(bits_per_second: Union[int, float]) -> str:
    """Format a bit rate in bits/s as kbps"""
    return f"{int(round(bits_per_second / 1000))} kbps"


def strip_quotes(text: str) -> str:
    """
    Remove a single leading and a single trailing quote character

    Straight and curly quotes are recognised. The result is trimmed.

    Args:
        text: Input string

    Returns:
        String without its surrounding quote characters
    """
    text = text.strip()
    if text and text[0] in QUOTE_CHARS:
        text = text[1:]
    if text and text[-1] in QUOTE_CHARS:
        text = text[:-1]
    return text.strip()


def remove_suffix_phrase(text: str, phrase: str) -> str:
    """
    Remove a trailing noise phrase such as "official video"

    The phrase only matches at the very end of the text, case-insensitively,
    when preceded by whitespace. A dash or bar right before it (as in
    "Song - Lyrics") goes with it. Occurrences elsewhere are left alone.

    Args:
        text: Input string
        phrase: Literal phrase to remove

    Returns:
        Text without the trailing phrase, trimmed
    """
    pattern = r'(?:\s+[-–—|]+)?\s+' + re.escape(phrase) + r'\s*$'
    return re.sub(pattern, '', text, flags=re.IGNORECASE).strip()


def sanitize_filename(filename: str, max_length: int = 200) -> str:
    """
    Sanitize filename for cross-platform compatibility

    Args:
        filename: Original filename
        max_length: Maximum filename length

    Returns:
        Sanitized filename, "unknown" if nothing usable remains
    """
    if not filename:
        return "unknown"

    filename = unicodedata.normalize('NFC', filename.strip())

    # Characters not allowed in Windows filenames plus control characters
    filename = re.sub(r'[<>:"/\\|?*\x00-\x1f\x7f-\x9f]', '', filename)

    # Replace multiple whitespace characters with single space
    filename = re.sub(r'\s+', ' ', filename)

    filename = filename.strip(' .')

    name_part = filename.split('.')[0].upper()
    if name_part in RESERVED_NAMES:
        filename = f"_{filename}"

    if len(filename) > max_length:
        # Try to preserve file extension
        if '.' in filename:
            name, ext = filename.rsplit('.', 1)
            available_length = max_length - len(ext) - 1
            if available_length > 0:
                filename = f"{name[:available_length].rstrip(' .')}.{ext}"
            else:
                filename = filename[:max_length]
        else:
            filename = filename[:max_length]

    if not filename or filename in ['.', '..']:
        filename = "unknown"

    return filename


def ensure_suffix(filename: str, suffix: str = ".mp3") -> str:
    """
    Append suffix unless the name already ends with it (case-insensitive)

    Args:
        filename: File name
        suffix: Extension including the dot

    Returns:
        File name ending in suffix
    """
    if filename.lower().endswith(suffix.lower()):
        return filename
    return filename + suffix
