import pytest

from chordsheet.adapters.cifraclub import CifraClubAdapter
from chordsheet.exceptions import UnsupportedSiteError
from chordsheet.registry import get_adapter, supported_sites


def test_get_adapter_cifraclub():
    adapter = get_adapter("https://www.cifraclub.com.br/legiao-urbana/tempo-perdido/")
    assert isinstance(adapter, CifraClubAdapter)


def test_get_adapter_unsupported_site():
    with pytest.raises(UnsupportedSiteError) as excinfo:
        get_adapter("https://example.com/song")
    assert excinfo.value.url == "https://example.com/song"


def test_supported_sites():
    assert supported_sites() == ["www.cifraclub.com.br"]
