"""
Configuration package for youtube-mp3

Settings are loaded from YAML files and environment variables and shared
through a module-level singleton:

    from youtube_mp3.config import get_settings

    settings = get_settings()
"""

from .settings import get_settings, reload_settings, Settings, DEFAULT_SEPARATORS

__all__ = [
    'get_settings',
    'reload_settings',
    'Settings',
    'DEFAULT_SEPARATORS',
]
