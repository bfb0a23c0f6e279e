# youtube_mp3/utils/__init__.py
"""
Utilities package
Common helpers, logging, and validation functions
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    log_performance,
    get_current_log_file
)
from .helpers import (
    now_seconds,
    pretty_time,
    format_duration,
    format_file_size,
    pretty_bytes,
    format_bit_rate,
    strip_quotes,
    remove_suffix_phrase,
    sanitize_filename,
    ensure_suffix
)
from .validation import (
    validate_video_url,
    validate_bitrate,
    validate_separators,
    build_output_path
)

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'log_performance',
    'get_current_log_file',

    # Helper exports
    'now_seconds',
    'pretty_time',
    'format_duration',
    'format_file_size',
    'pretty_bytes',
    'format_bit_rate',
    'strip_quotes',
    'remove_suffix_phrase',
    'sanitize_filename',
    'ensure_suffix',

    # Validation exports
    'validate_video_url',
    'validate_bitrate',
    'validate_separators',
    'build_output_path',
]
