from abc import ABC, abstractmethod

from ..models import RawSheet


class SiteAdapter(ABC):
    """Abstract base class for all site-specific adapters."""

    site: str = ""  # host name shown to users, e.g. "www.cifraclub.com.br"

    @classmethod
    @abstractmethod
    def can_handle(cls, url: str) -> bool:
        """Return True if this adapter can handle the given URL."""

    @abstractmethod
    def fetch(self, url: str) -> str:
        """Fetch the page at url and return raw HTML.

        Raises FetchError on HTTP-level failures.
        """

    @abstractmethod
    def extract(self, html: str, url: str) -> RawSheet:
        """Pull the title, artist and raw chord sheet text out of a page.

        The text is returned as shown on the page (chords above lyrics);
        parsing it into lines is left to :mod:`chordsheet.parser`.

        Raises ParseError if neither a title nor chord text can be found.
        """

    def scrape(self, url: str) -> RawSheet:
        """Convenience method: fetch + extract."""
        html = self.fetch(url)
        return self.extract(html, url)
