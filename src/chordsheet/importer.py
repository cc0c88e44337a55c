"""Import pipeline: raw sheet text in, a Song normalized to C out.

Every import is stored in the key of C with the detected key kept in
``original_key``, so all songs in a library share a common baseline.

Imports do not fail on bad input.  When a page cannot be fetched or holds no
usable chord sheet, a clearly labeled placeholder song is returned instead,
together with a warning for the caller to show.
"""

import logging
import re
from dataclasses import dataclass

from .adapters.base import SiteAdapter
from .adapters.cifraclub import MIN_SHEET_LENGTH
from .exceptions import FetchError, ParseError, UnsupportedSiteError
from .models import RawSheet, Song
from .parser import DEFAULT_KEY, extract_key, parse_lyrics_with_chords
from .registry import get_adapter
from .transposer import normalize_to_c

logger = logging.getLogger(__name__)

PLACEHOLDER_TITLE = "Imported Song"
UNKNOWN_ARTIST = "Unknown Artist"
PLACEHOLDER_TEXT = "[Placeholder] Chords could not be imported"


@dataclass
class ImportResult:
    song: Song
    warning: str | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.warning is not None


def _title_from_url(url: str) -> str:
    """Derive a song title from the URL slug as a last-resort fallback."""
    slug = url.rstrip("/").split("/")[-1]
    slug = re.sub(r"[^\w\s-]", "", slug)
    return slug.replace("-", " ").strip().title()


def placeholder_song(source_url: str | None = None, title: str | None = None, artist: str | None = None) -> Song:
    """Return a stand-in song for an import that produced nothing usable."""
    if not title and source_url:
        title = _title_from_url(source_url)
    song = Song(
        title=title or PLACEHOLDER_TITLE,
        artist=artist or UNKNOWN_ARTIST,
        original_key=DEFAULT_KEY,
        current_key=DEFAULT_KEY,
        source_url=source_url,
    )
    song.add_line(PLACEHOLDER_TEXT)
    return song


def import_text(
    raw: str,
    title: str = "",
    artist: str = "",
    source_url: str | None = None,
    key: str | None = None,
) -> Song:
    """Parse *raw* sheet text and return the song transposed to C.

    *key* overrides key detection when the source declares it separately.
    """
    lyrics = parse_lyrics_with_chords(raw)
    if not lyrics and not title.strip():
        logger.warning("Nothing to import from %s, using a placeholder", source_url or "text")
        return placeholder_song(source_url)

    original_key = key or extract_key(raw)
    song = Song(
        title=title.strip() or PLACEHOLDER_TITLE,
        artist=artist.strip() or UNKNOWN_ARTIST,
        original_key=original_key,
        current_key=original_key,
        lyrics=lyrics,
        source_url=source_url,
    )
    logger.info("Imported %r in %s (%d lines)", song.title, original_key, len(lyrics))
    return normalize_to_c(song)


def import_sheet(sheet: RawSheet) -> ImportResult:
    """Import a scraped sheet; a page with a title but no chords gives a placeholder."""
    if len(sheet.text.strip()) < MIN_SHEET_LENGTH:
        logger.warning("No chord sheet found at %s, using a placeholder", sheet.source_url)
        song = placeholder_song(sheet.source_url or None, title=sheet.title, artist=sheet.artist)
        return ImportResult(song, "Title found but no chord sheet; using placeholder chords")

    song = import_text(
        sheet.text,
        title=sheet.title,
        artist=sheet.artist,
        source_url=sheet.source_url or None,
        key=sheet.key,
    )
    return ImportResult(song)


def import_url(url: str, adapter: SiteAdapter | None = None, strict: bool = False) -> ImportResult:
    """Scrape *url* and import it.

    Scraping errors are logged and replaced by a placeholder song unless
    *strict* is set, in which case they propagate.
    """
    try:
        adapter = adapter or get_adapter(url)
        sheet = adapter.scrape(url)
    except UnsupportedSiteError as exc:
        if strict:
            raise
        logger.warning("%s", exc)
        return ImportResult(placeholder_song(url), "Unsupported site; using placeholder song")
    except FetchError as exc:
        if strict:
            raise
        logger.warning("Could not fetch %s: %s", url, exc)
        return ImportResult(placeholder_song(url), f"Could not fetch page (HTTP {exc.status_code}); using placeholder song")
    except ParseError as exc:
        if strict:
            raise
        logger.warning("%s", exc)
        return ImportResult(placeholder_song(url), "Could not extract a chord sheet; using placeholder song")

    return import_sheet(sheet)
