from chordsheet.exceptions import ChordsheetError, FetchError, ParseError, StorageError, UnsupportedSiteError

URL = "https://www.cifraclub.com.br/legiao-urbana/tempo-perdido/"


def test_every_error_carries_its_location():
    errors = [
        FetchError(URL, 403),
        ParseError(URL, "empty page"),
        UnsupportedSiteError(URL),
        StorageError("/tmp/library.json", "invalid JSON"),
    ]
    assert all(isinstance(exc, ChordsheetError) for exc in errors)
    assert [exc.location for exc in errors] == [URL, URL, URL, "/tmp/library.json"]


def test_fetch_error_message():
    assert str(FetchError(URL, 404)) == f"HTTP 404 fetching {URL}"
    assert str(FetchError(URL, 0)) == f"No response from {URL}"


def test_storage_error_keeps_reason():
    exc = StorageError("/tmp/library.json", "invalid JSON")
    assert exc.reason == "invalid JSON"
    assert "invalid JSON" in str(exc)
