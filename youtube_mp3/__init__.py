"""
youtube-mp3 - Convert online videos into tagged MP3 files

Downloads the audio of a video page, transcodes it with ffmpeg and tags the
result with song metadata found through a music search service.
"""

__version__ = "1.0.0"
__author__ = "youtube-mp3 contributors"
__description__ = "Convert online videos into tagged MP3 files"
