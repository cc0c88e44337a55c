"""Song libraries.

Callers are handed a :class:`SongRepository` rather than reaching for a
shared store, and decide for themselves when to load and save.
"""

import copy
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from .exceptions import StorageError
from .models import Setlist, Song

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def _songs_from_document(data) -> list[Song] | None:
    """Read the songs out of any of the accepted document shapes, or None."""
    if isinstance(data, list):
        # Bare list of songs, as exported by the web app
        return [Song.from_dict(record) for record in data]
    if isinstance(data, dict) and isinstance(data.get("songs"), list):
        return [Song.from_dict(record) for record in data["songs"]]
    if isinstance(data, dict) and isinstance(data.get("setlists"), list):
        # Web app backup: songs live inside each setlist, in setlist order
        return [song for record in data["setlists"] for song in Setlist.from_dict(record).songs]
    return None


class SongRepository(ABC):
    """Load and save a whole list of songs at once."""

    @abstractmethod
    def load(self) -> list[Song]:
        """Return every stored song, in stored order."""

    @abstractmethod
    def save(self, songs: list[Song]) -> None:
        """Replace the stored songs with *songs*."""

    def add(self, song: Song) -> None:
        """Append *song*, replacing a stored song with the same id."""
        songs = [s for s in self.load() if s.id != song.id]
        songs.append(song)
        self.save(songs)


class InMemoryRepository(SongRepository):
    def __init__(self, songs: list[Song] | None = None):
        self._songs = copy.deepcopy(songs or [])

    def load(self) -> list[Song]:
        return copy.deepcopy(self._songs)

    def save(self, songs: list[Song]) -> None:
        self._songs = copy.deepcopy(songs)


class JsonFileRepository(SongRepository):
    """Songs stored as one JSON document: ``{"version": 1, "songs": [...]}``.

    Loading also accepts a bare list of songs and a web app backup
    (``{"setlists": [{"musics": [...]}, ...]}``); saving always writes the
    versioned document.

    A missing file is an empty library.  Writes go to a temporary file that
    then replaces the target, so a crash never leaves half a library behind.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> list[Song]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StorageError(str(self.path), f"invalid JSON ({exc.msg})") from exc
        except OSError as exc:
            raise StorageError(str(self.path), exc.strerror or str(exc)) from exc

        try:
            songs = _songs_from_document(data)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise StorageError(str(self.path), f"malformed song record ({exc})") from exc
        if songs is None:
            raise StorageError(str(self.path), "expected a list of songs")
        logger.debug("Loaded %d songs from %s", len(songs), self.path)
        return songs

    def save(self, songs: list[Song]) -> None:
        document = {"version": FORMAT_VERSION, "songs": [song.to_dict() for song in songs]}
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as exc:
            raise StorageError(str(self.path), exc.strerror or str(exc)) from exc
        logger.debug("Saved %d songs to %s", len(songs), self.path)
