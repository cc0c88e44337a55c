import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .chords import is_valid_chord, normalize_chord


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _parse_timestamp(value: str | None) -> datetime:
    if not value:
        return utcnow()
    # fromisoformat() only accepts a trailing "Z" from 3.11 on
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _checked_symbol(symbol: str) -> str:
    symbol = normalize_chord(symbol)
    if not is_valid_chord(symbol):
        raise ValueError(f"Not a chord: {symbol!r}")
    return symbol


def _next_id(prefix: str, existing: list[str]) -> str:
    """Return ``prefix-N`` with N one past the highest numeric suffix in use."""
    highest = -1
    for item in existing:
        suffix = item.rsplit("-", 1)[-1]
        if item.startswith(prefix + "-") and suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}-{highest + 1}"


@dataclass
class Chord:
    """A chord symbol aligned to a character column of its lyric line.

    Example: ``Chord(id="chord-0-1", symbol="G/B", position=9)``
    """

    id: str
    symbol: str
    position: int

    def to_dict(self) -> dict:
        return {"id": self.id, "chord": self.symbol, "position": self.position}

    @classmethod
    def from_dict(cls, data: dict) -> "Chord":
        return cls(
            id=data["id"],
            symbol=data.get("chord") or data.get("symbol") or "",
            position=max(0, int(data.get("position", 0))),
        )


@dataclass
class LyricLine:
    """One line of lyric text with the chords printed above it.

    ``text`` may be empty for instrumental lines that only carry chords.
    ``position`` is the line's index within the song.
    """

    id: str
    text: str
    chords: list[Chord] = field(default_factory=list)
    position: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "chords": [chord.to_dict() for chord in self.chords],
            "position": self.position,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LyricLine":
        return cls(
            id=data["id"],
            text=data.get("text") or "",
            chords=[Chord.from_dict(c) for c in data.get("chords") or []],
            position=int(data.get("position", 0)),
        )

    def chord(self, chord_id: str) -> Chord:
        for chord in self.chords:
            if chord.id == chord_id:
                return chord
        raise KeyError(chord_id)

    def sort_chords(self) -> None:
        self.chords.sort(key=lambda c: c.position)


@dataclass
class Song:
    """A song as stored in a setlist.

    ``original_key`` is the key detected at import time.  ``current_key`` is
    the key the chord symbols are written in right now; it only changes
    through transposition.
    """

    title: str
    artist: str
    original_key: str = "C"
    current_key: str = "C"
    lyrics: list[LyricLine] = field(default_factory=list)
    source_url: str | None = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # --- Serialization ---

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "originalKey": self.original_key,
            "currentKey": self.current_key,
            "lyrics": [line.to_dict() for line in self.lyrics],
            "sourceUrl": self.source_url,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Song":
        original_key = data.get("originalKey") or "C"
        return cls(
            id=data.get("id") or _new_id(),
            title=data.get("title") or "",
            artist=data.get("artist") or "",
            original_key=original_key,
            current_key=data.get("currentKey") or original_key,
            lyrics=[LyricLine.from_dict(line) for line in data.get("lyrics") or []],
            # Older records use the name of the site they came from
            source_url=data.get("sourceUrl") or data.get("cifraClubUrl"),
            created_at=_parse_timestamp(data.get("createdAt")),
            updated_at=_parse_timestamp(data.get("updatedAt")),
        )

    # --- Structural edits ---

    def touch(self) -> None:
        self.updated_at = utcnow()

    def line(self, line_id: str) -> LyricLine:
        for line in self.lyrics:
            if line.id == line_id:
                return line
        raise KeyError(line_id)

    def rename(self, title: str | None = None, artist: str | None = None) -> None:
        if title is not None:
            self.title = title
        if artist is not None:
            self.artist = artist
        self.touch()

    def add_line(self, text: str, chords: list[Chord] | None = None) -> LyricLine:
        line = LyricLine(
            id=_next_id("line", [line.id for line in self.lyrics]),
            text=text,
            chords=list(chords or []),
            position=len(self.lyrics),
        )
        line.sort_chords()
        self.lyrics.append(line)
        self.touch()
        return line

    def edit_line(self, line_id: str, text: str) -> None:
        self.line(line_id).text = text
        self.touch()

    def remove_line(self, line_id: str) -> None:
        line = self.line(line_id)
        self.lyrics.remove(line)
        for index, remaining in enumerate(self.lyrics):
            remaining.position = index
        self.touch()

    def add_chord(self, line_id: str, symbol: str, position: int) -> Chord:
        """Insert a chord typed by the user; spacing is dropped (``"G / B"``).

        Raises ValueError if *symbol* is not a chord.
        """
        symbol = _checked_symbol(symbol)
        line = self.line(line_id)
        line_number = line.id.rsplit("-", 1)[-1]
        chord = Chord(
            id=_next_id(f"chord-{line_number}", [c.id for c in line.chords]),
            symbol=symbol,
            position=max(0, position),
        )
        line.chords.append(chord)
        line.sort_chords()
        self.touch()
        return chord

    def edit_chord(
        self,
        line_id: str,
        chord_id: str,
        symbol: str | None = None,
        position: int | None = None,
    ) -> None:
        line = self.line(line_id)
        chord = line.chord(chord_id)
        if symbol is not None:
            chord.symbol = _checked_symbol(symbol)
        if position is not None:
            chord.position = max(0, position)
            line.sort_chords()
        self.touch()

    def remove_chord(self, line_id: str, chord_id: str) -> None:
        line = self.line(line_id)
        line.chords.remove(line.chord(chord_id))
        self.touch()


@dataclass
class Setlist:
    """An ordered, named collection of songs."""

    name: str
    songs: list[Song] = field(default_factory=list)
    description: str | None = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "musics": [song.to_dict() for song in self.songs],
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Setlist":
        return cls(
            id=data.get("id") or _new_id(),
            name=data.get("name") or "",
            description=data.get("description"),
            songs=[Song.from_dict(s) for s in data.get("musics") or data.get("songs") or []],
            created_at=_parse_timestamp(data.get("createdAt")),
            updated_at=_parse_timestamp(data.get("updatedAt")),
        )


@dataclass
class RawSheet:
    """Unparsed chord sheet text as scraped from a site, plus its metadata."""

    title: str
    artist: str
    text: str
    source_url: str = ""
    key: str | None = None  # declared by the page, when it has one
