"""
Audio processing: ffmpeg transcoding, ID3 tagging and probing
"""

from .transcoder import transcode, choose_bitrate
from .tagger import write_tags, read_tags
from .probe import probe_file, ProbeInfo

__all__ = [
    'transcode',
    'choose_bitrate',
    'write_tags',
    'read_tags',
    'probe_file',
    'ProbeInfo',
]
