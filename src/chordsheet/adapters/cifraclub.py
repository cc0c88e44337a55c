"""Adapter for www.cifraclub.com.br chord pages.

Cifra Club blocks plain HTTP clients, so requests carry browser-like headers.

Page structure (simplified)::

    <meta property="og:title" content="Tempo Perdido - Legião Urbana - Cifra Club">
    <h1 class="t1">Tempo Perdido</h1>
    <h2 class="t3"><a>Legião Urbana</a></h2>
    <span id="cifra_tom">Tom: <a>G</a></span>
    <pre>[Intro] <b>G</b>  <b>D</b>
    ...
    </pre>

The ``<pre>`` block holds chords above lyrics with the chord names wrapped in
``<b>`` tags; ``get_text()`` keeps the column alignment intact.
"""

import json
import logging
import re

import httpx
from bs4 import BeautifulSoup

from ..exceptions import FetchError, ParseError
from ..models import RawSheet
from .base import SiteAdapter

logger = logging.getLogger(__name__)

_FETCH_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "pt-BR,pt;q=0.9,en;q=0.8",
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Cache-Control": "no-cache",
    "Referer": "https://www.google.com/",
}

_FETCH_TIMEOUT = 20

# Content shorter than this is navigation or ads, not a chord sheet.
MIN_SHEET_LENGTH = 50
_PREFERRED_SHEET_LENGTH = 100
MIN_TITLE_LENGTH = 3

# Tried in order; the first element with enough text wins.
_SHEET_SELECTORS = [
    'pre[class*="cifra"], pre[class*="tab"], pre[class*="chord"]',
    '[data-js="cipher"], [data-cipher="true"]',
    ".js-cipher-content, .cipher-content, .tab-cipher",
    ".tablature-content, .music-content, .song-content",
]

_ARTIST_SELECTOR = ".js-artist, .artist-name, .page-subtitle, h2"

_SITE_SUFFIX_RE = re.compile(r"\s*[-|]\s*Cifra Club\s*$")

# A chord followed, on some later line, by text: chords over lyrics.
_LOOKS_LIKE_SHEET_RE = re.compile(r"\b[A-G][#b]?m?\b.*\n.*[a-zA-Z]")


def _meta_content(soup: BeautifulSoup, prop: str) -> str:
    tag = soup.find("meta", attrs={"property": prop})
    return (tag.get("content") or "").strip() if tag else ""


def _extract_title(soup: BeautifulSoup) -> str:
    candidates = [_meta_content(soup, "og:title")]
    if soup.title and soup.title.string:
        candidates.append(_SITE_SUFFIX_RE.sub("", soup.title.string.strip()))
    h1 = soup.find("h1")
    if h1:
        candidates.append(h1.get_text(strip=True))

    for raw_title in candidates:
        if raw_title and raw_title != "Cifra Club":
            # "Tempo Perdido - Legião Urbana - Cifra Club" -> "Tempo Perdido"
            return raw_title.split(" - ")[0].strip() or raw_title
    return ""


def _extract_artist(soup: BeautifulSoup) -> str:
    element = soup.select_one(_ARTIST_SELECTOR)
    artist = element.get_text(strip=True) if element else ""
    if not artist:
        description = _meta_content(soup, "og:description")
        artist = description.split(" - ")[0].strip() if description else ""
    return artist


def _extract_key(soup: BeautifulSoup) -> str | None:
    tom = soup.find(id="cifra_tom")
    if not tom:
        return None
    link = tom.find("a")
    key = (link or tom).get_text(strip=True)
    key = key.split(":")[-1].strip()
    return key or None


def _extract_sheet_text(soup: BeautifulSoup) -> str:
    text = ""
    for selector in _SHEET_SELECTORS:
        element = soup.select_one(selector)
        if element:
            text = element.get_text().strip("\n")
            if len(text) > _PREFERRED_SHEET_LENGTH:
                return text

    for pre in soup.find_all("pre"):
        candidate = pre.get_text().strip("\n")
        if _LOOKS_LIKE_SHEET_RE.search(candidate):
            return candidate

    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.string or "")
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict) and data.get("lyrics"):
            return str(data["lyrics"])

    return text


class CifraClubAdapter(SiteAdapter):
    """Adapter for www.cifraclub.com.br chord pages."""

    site = "www.cifraclub.com.br"

    @classmethod
    def can_handle(cls, url: str) -> bool:
        return "cifraclub.com.br/" in url

    def fetch(self, url: str) -> str:
        """GET the page with browser-like headers to avoid being blocked."""
        logger.info("Fetching %s", url)
        try:
            resp = httpx.get(
                url,
                headers=_FETCH_HEADERS,
                follow_redirects=True,
                timeout=_FETCH_TIMEOUT,
            )
        except httpx.RequestError as exc:
            raise FetchError(url, 0) from exc
        if resp.status_code != 200:
            raise FetchError(url, resp.status_code)
        return resp.text

    def extract(self, html: str, url: str) -> RawSheet:
        soup = BeautifulSoup(html, "html.parser")

        title = _extract_title(soup)
        artist = _extract_artist(soup)
        text = _extract_sheet_text(soup)
        logger.debug("Extracted title=%r artist=%r sheet=%d chars", title, artist, len(text))

        if len(title) < MIN_TITLE_LENGTH and len(text.strip()) < MIN_SHEET_LENGTH:
            raise ParseError(url, "No title or chord sheet found")

        return RawSheet(
            title=title,
            artist=artist,
            text=text,
            source_url=url,
            key=_extract_key(soup),
        )
