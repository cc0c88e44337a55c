from .adapters.base import SiteAdapter
from .adapters.cifraclub import CifraClubAdapter
from .exceptions import UnsupportedSiteError

_ADAPTERS: list[type[SiteAdapter]] = [
    CifraClubAdapter,
]


def supported_sites() -> list[str]:
    """Host names that :func:`get_adapter` can resolve, in lookup order."""
    return [cls.site for cls in _ADAPTERS]


def get_adapter(url: str) -> SiteAdapter:
    """Return an adapter instance for *url*.

    Raises UnsupportedSiteError if no adapter matches.
    """
    for cls in _ADAPTERS:
        if cls.can_handle(url):
            return cls()
    raise UnsupportedSiteError(url)
