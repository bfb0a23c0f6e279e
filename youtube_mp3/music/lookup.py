"""
Song metadata lookup through the iTunes Search API

The lookup is a best-effort fuzzy filter, not a ranking: the first song in the
service's result order whose track name AND artist name both appear in the
search term (case-insensitively) is accepted.

Resolution order used by the pipeline (resolve_song_metadata):
1. Look up the raw video title.
2. If that misses, split the title into artist/title with the title parser.
3. If parsing worked, look up "<artist> <title>".
4. Otherwise fall back to whatever the parser produced, or the video title.

Lookup misses (including network problems) are ordinary negative outcomes,
logged at debug level only.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

import requests

from ..config.settings import Settings, get_settings
from ..models import LookupResult, MetadataSource, SongMetadata
from ..utils.logger import get_logger
from .title_parser import parse_title


logger = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedMetadata:
    """Metadata defaults found for a video and the strategy that produced them"""
    metadata: SongMetadata
    source: MetadataSource


def matches_term(term: str, entry: Dict[str, Any]) -> bool:
    """
    Check whether a search result is acceptable for a search term

    Args:
        term: Search term that was sent
        entry: One element of the response's "results" list

    Returns:
        True for songs whose track and artist names both occur in the term
    """
    if entry.get('kind') != 'song':
        return False

    track_name = (entry.get('trackName') or '').strip().lower()
    artist_name = (entry.get('artistName') or '').strip().lower()
    if not track_name or not artist_name:
        return False

    lowered = term.lower()
    return track_name in lowered and artist_name in lowered


def metadata_from_entry(entry: Dict[str, Any]) -> SongMetadata:
    """Map an iTunes search result to SongMetadata, keeping only the release year"""
    release_date = entry.get('releaseDate') or ''
    return SongMetadata(
        title=entry.get('trackName'),
        artist=entry.get('artistName'),
        album=entry.get('collectionName'),
        genre=entry.get('primaryGenreName'),
        date=release_date[:4] or None,
        album_url=entry.get('collectionViewUrl'),
        track_number=entry.get('trackNumber'),
        track_count=entry.get('trackCount'),
    )


class SongLookupClient:
    """
    Client for an iTunes-compatible song search endpoint

    One blocking GET per lookup. Endpoint, result limit and country come from
    the metadata settings.
    """

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.url = self.settings.metadata.lookup_url
        self.limit = self.settings.metadata.lookup_limit
        self.country = self.settings.metadata.country
        self.timeout = self.settings.network.request_timeout

        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': self.settings.network.user_agent})

    def lookup(self, term: str) -> LookupResult:
        """
        Search for a song and return the first acceptable result

        Args:
            term: Free-text search term

        Returns:
            LookupResult with the mapped metadata, success=False on any miss
        """
        if not term or not term.strip():
            return LookupResult(success=False)

        params = {
            'term': term,
            'media': 'music',
            'entity': 'song',
            'limit': self.limit,
        }
        if self.country:
            params['country'] = self.country

        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug(f"Lookup request failed for '{term}': {e}")
            return LookupResult(success=False)

        if response.status_code != 200:
            logger.debug(f"Lookup for '{term}' returned HTTP {response.status_code}")
            return LookupResult(success=False)

        try:
            payload = response.json()
        except ValueError as e:
            logger.debug(f"Lookup for '{term}' returned invalid JSON: {e}")
            return LookupResult(success=False)

        results = payload.get('results') if isinstance(payload, dict) else None
        if results is None and isinstance(payload, dict):
            results = []
        if not isinstance(results, list):
            logger.debug(f"Lookup for '{term}' returned an unexpected response: {type(payload).__name__}")
            return LookupResult(success=False)

        for entry in results:
            if isinstance(entry, dict) and matches_term(term, entry):
                metadata = metadata_from_entry(entry)
                logger.debug(f"Lookup for '{term}' matched: {metadata.display_name}")
                return LookupResult(success=True, metadata=metadata)

        logger.debug(f"Lookup for '{term}' found no match among {len(results)} results")
        return LookupResult(success=False)


def resolve_song_metadata(
    video_title: str,
    separators: Iterable[str],
    client: SongLookupClient
) -> ResolvedMetadata:
    """
    Find the best metadata defaults for a video title

    Args:
        video_title: Title of the source video
        separators: Separator tokens for the title parser
        client: Lookup client

    Returns:
        ResolvedMetadata with the defaults and the strategy that produced them
    """
    first = client.lookup(video_title)
    if first.success:
        return ResolvedMetadata(first.metadata, MetadataSource.LOOKUP)

    parsed = parse_title(video_title, separators)
    if not parsed.success:
        logger.debug(f"Title '{video_title}' does not follow the 'Artist - Title' format")
        return ResolvedMetadata(SongMetadata(title=video_title), MetadataSource.VIDEO_TITLE)

    logger.debug(f"Parsed title: artist='{parsed.artist}', title='{parsed.title}'")
    second = client.lookup(f"{parsed.artist} {parsed.title}")
    if second.success:
        return ResolvedMetadata(second.metadata, MetadataSource.PARSED_LOOKUP)

    return ResolvedMetadata(
        SongMetadata(title=parsed.title, artist=parsed.artist),
        MetadataSource.TITLE_PARSE
    )
