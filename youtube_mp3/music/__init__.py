"""
Song metadata resolution

Title heuristics (title_parser), the lookup service client (lookup) and the
interactive confirmation step (prompt).
"""

from .title_parser import parse_title, clean_song_title
from .lookup import SongLookupClient, ResolvedMetadata, resolve_song_metadata
from .prompt import confirm_metadata

__all__ = [
    'parse_title',
    'clean_song_title',
    'SongLookupClient',
    'ResolvedMetadata',
    'resolve_song_metadata',
    'confirm_metadata',
]
