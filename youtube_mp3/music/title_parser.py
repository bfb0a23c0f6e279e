"""
Heuristic parsing of "Artist - Title" video titles

Music videos are usually titled "<artist> <separator> <song>", often with
noise appended ("(Official Video)", "Lyrics", ...). The parser splits such a
title once, at the FIRST separator occurrence, and cleans the song part.
A separator surrounded by whitespace is preferred over a bare one, so the
hyphen in "Jay-Z - Song" stays part of the artist.

A title that does not follow the convention is a normal outcome and yields
TitleParseResult(success=False).
"""

import re
from typing import Iterable, Pattern

from ..models import TitleParseResult
from ..utils.helpers import remove_suffix_phrase, strip_quotes

# Removed in this order, each once, only as a trailing token
NOISE_PHRASES = (
    "(official video)",
    "official video",
    "high quality",
    "lyrics",
)


def build_title_pattern(separators: Iterable[str], spaced: bool = False) -> Pattern:
    """
    Build the splitting expression for a set of literal separators

    The artist group is lazy, so "A - B - C" splits into "A" and "B - C".

    Args:
        separators: Literal separator tokens
        spaced: Only match separators with whitespace on both sides

    Returns:
        Compiled pattern with groups (artist, separator, title)
    """
    # Longest first so "--" wins over "-" when both are given
    tokens = sorted({s for s in separators if s}, key=len, reverse=True)
    if not tokens:
        raise ValueError("At least one non-empty separator is required")
    alternatives = '|'.join(re.escape(token) for token in tokens)
    if spaced:
        return re.compile(rf'^(.+?)\s+({alternatives})\s+(.+)$', re.DOTALL)
    return re.compile(rf'^(.+?)({alternatives})(.+)$', re.DOTALL)


def clean_song_title(title: str) -> str:
    """
    Strip surrounding quotes and trailing noise phrases from a song title

    Quotes are stripped again at the end so '"Name" - Lyrics' becomes 'Name'.
    """
    cleaned = strip_quotes(title)
    for phrase in NOISE_PHRASES:
        cleaned = remove_suffix_phrase(cleaned, phrase)
    return strip_quotes(cleaned)


def parse_title(raw_title: str, separators: Iterable[str]) -> TitleParseResult:
    """
    Split a video title into artist and song title

    Args:
        raw_title: Video title as published
        separators: Literal separator tokens (e.g. "-", "—")

    Returns:
        TitleParseResult, success=False when the title has no separator or
        one of the two sides is empty
    """
    if not raw_title:
        return TitleParseResult(success=False)

    separators = list(separators)
    for spaced in (True, False):
        match = build_title_pattern(separators, spaced=spaced).match(raw_title.strip())
        if not match:
            continue

        artist = match.group(1).strip()
        title = clean_song_title(match.group(3).strip())
        if artist and title:
            return TitleParseResult(success=True, artist=artist, title=title)

    return TitleParseResult(success=False)
