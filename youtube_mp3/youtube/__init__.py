"""
Video platform integration

Stream discovery and download (downloader) and the stream selection
policies (formats).
"""

from .downloader import VideoDownloader
from .formats import select_format, select_highest_bitrate, select_smallest

__all__ = [
    'VideoDownloader',
    'select_format',
    'select_highest_bitrate',
    'select_smallest',
]
