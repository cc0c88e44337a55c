class ChordsheetError(Exception):
    """Base exception for chordsheet.

    ``location`` is the URL or file the error is about, so callers can report
    it without parsing the message.
    """

    def __init__(self, message: str, location: str = ""):
        self.location = location
        super().__init__(message)


class FetchError(ChordsheetError):
    """Raised when a chord page cannot be downloaded.

    ``status_code`` is 0 when no HTTP response was received at all.
    """

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        if status_code:
            message = f"HTTP {status_code} fetching {url}"
        else:
            message = f"No response from {url}"
        super().__init__(message, url)


class ParseError(ChordsheetError):
    """Raised when a page holds neither a song title nor a chord sheet."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"No chord sheet in {url}: {reason}", url)


class UnsupportedSiteError(ChordsheetError):
    """Raised when no site adapter matches the given URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"No chord site adapter for {url}", url)


class StorageError(ChordsheetError):
    """Raised when a song library cannot be read or written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Song library {path}: {reason}", path)
