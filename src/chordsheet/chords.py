"""Chord symbol grammar and note arithmetic.

Chord tokens are recognized by a small scanner rather than a regular
expression so that each rule can be tested on its own::

    chord     := note quality* extension* ("/" note)?
    note      := "A".."G" ("#" | "b")?
    quality   := "maj" | "min" | "dim" | "aug" | "sus" | "add" | "m" | digit
    extension := "M" | "b" | "#" | "+" | "º" | "°" | digit | "(" ... ")"

A token only counts as a chord when it stands on its own: the character
before it must not be a letter, digit or ``/`` and the character after it
must not be a letter or digit.  ``Am`` in ``Am  G`` is a chord, the ``Am``
at the start of ``Amazing`` is not.  Extensions let the Cifra Club
spellings ``C7M``, ``Bm7b5`` and ``E7(9)`` through as whole tokens.

Note arithmetic works on the sharp-spelled chromatic scale.  Flat spellings
are accepted on input and converted, so results are always sharp-spelled.
"""

from dataclasses import dataclass

NOTES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

FLATS_TO_SHARPS = {
    "Db": "C#",
    "Eb": "D#",
    "Gb": "F#",
    "Ab": "G#",
    "Bb": "A#",
}

_SHARPS_TO_FLATS = {sharp: flat for flat, sharp in FLATS_TO_SHARPS.items()}

_LETTERS = "ABCDEFG"
_ACCIDENTALS = "#b"

# Longest markers first so "maj" is not read as "m" followed by "aj".
_QUALITY_MARKERS = ("maj", "min", "dim", "aug", "sus", "add", "m")

# Suffixes written after the quality: "7M", "m7b5", "5+", "º".
_EXTENSION_CHARS = "0123456789Mb#+º°"

# Allowed inside a parenthesised extension such as "(9)" or "(4/9)".
_PAREN_EXTENSION_CHARS = "0123456789Mb#+-/,"


@dataclass(frozen=True)
class ChordToken:
    """A chord recognized inside a line of text.

    ``start``/``end`` delimit the token in the scanned string.
    """

    start: int
    end: int
    root: str
    quality: str = ""
    bass: str | None = None

    @property
    def text(self) -> str:
        if self.bass:
            return f"{self.root}{self.quality}/{self.bass}"
        return f"{self.root}{self.quality}"

    @property
    def is_minor(self) -> bool:
        return is_minor_quality(self.quality)


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


def _read_note(text: str, i: int) -> int:
    """Return the index just past a note starting at *i*, or *i* if none."""
    if i < len(text) and text[i] in _LETTERS:
        i += 1
        if i < len(text) and text[i] in _ACCIDENTALS:
            i += 1
    return i


def _read_quality(text: str, i: int) -> int:
    while i < len(text):
        if text[i].isdigit():
            i += 1
            continue
        for marker in _QUALITY_MARKERS:
            if text.startswith(marker, i):
                i += len(marker)
                break
        else:
            return i
    return i


def _read_extension(text: str, i: int) -> int:
    """Return the index just past an extension run starting at *i*.

    A parenthesised group is taken whole or not at all, so ``A(x2)`` stops
    before the bracket.
    """
    while i < len(text):
        char = text[i]
        if char == "(":
            close = text.find(")", i)
            if close == -1 or not all(c in _PAREN_EXTENSION_CHARS for c in text[i + 1:close]):
                return i
            i = close + 1
        elif char in _EXTENSION_CHARS:
            i += 1
        else:
            return i
    return i


def _starts_token(text: str, i: int) -> bool:
    if i == 0:
        return True
    before = text[i - 1]
    return not (before.isalnum() or before == "/")


def _ends_token(text: str, i: int) -> bool:
    return i >= len(text) or not text[i].isalnum()


def match_chord(text: str, i: int) -> ChordToken | None:
    """Return the chord token starting exactly at index *i* of *text*, if any.

    The longest reading wins: with its extension (``C7M``), then without
    it.  A slash bass that would run into a word is dropped and the token
    falls back to the plain chord (``C/Bob`` yields ``C``).
    """
    if not _starts_token(text, i):
        return None
    root_end = _read_note(text, i)
    if root_end == i:
        return None
    quality_end = _read_quality(text, root_end)
    extension_end = _read_extension(text, quality_end)
    root = text[i:root_end]

    for end in dict.fromkeys((extension_end, quality_end)):
        quality = text[root_end:end]
        if end < len(text) and text[end] == "/":
            bass_end = _read_note(text, end + 1)
            if bass_end > end + 1 and _ends_token(text, bass_end):
                return ChordToken(i, bass_end, root, quality, text[end + 1:bass_end])
        if _ends_token(text, end):
            return ChordToken(i, end, root, quality)
    return None


def scan_chords(line: str) -> list[ChordToken]:
    """Return every chord token in *line*, left to right."""
    tokens: list[ChordToken] = []
    i = 0
    while i < len(line):
        token = match_chord(line, i)
        if token:
            tokens.append(token)
            i = token.end
        else:
            i += 1
    return tokens


def remove_chords(line: str, tokens: list[ChordToken]) -> str:
    """Return *line* with the given tokens cut out (nothing put in their place)."""
    parts: list[str] = []
    cursor = 0
    for token in tokens:
        parts.append(line[cursor:token.start])
        cursor = token.end
    parts.append(line[cursor:])
    return "".join(parts)


def strip_chords(line: str, tokens: list[ChordToken]) -> str:
    """Return *line* with the tokens removed and whitespace collapsed."""
    parts: list[str] = []
    cursor = 0
    for token in tokens:
        parts.append(line[cursor:token.start])
        parts.append(" ")
        cursor = token.end
    parts.append(line[cursor:])
    return " ".join("".join(parts).split())


def parse_chord(symbol: str) -> ChordToken | None:
    """Parse a complete chord symbol, or return None if it is not one."""
    symbol = symbol.strip()
    token = match_chord(symbol, 0) if symbol else None
    if token and token.end == len(symbol):
        return token
    return None


def is_valid_chord(symbol: str) -> bool:
    return parse_chord(symbol) is not None


def normalize_chord(symbol: str) -> str:
    """Remove all whitespace from a chord symbol (``"G / B"`` -> ``"G/B"``)."""
    return "".join(symbol.split())


def is_minor_quality(quality: str) -> bool:
    return quality.startswith("m") and not quality.startswith("maj")


# ---------------------------------------------------------------------------
# Notes and keys
# ---------------------------------------------------------------------------


def note_index(note: str) -> int | None:
    """Return the chromatic index (C=0) of a note, or None if unknown."""
    note = FLATS_TO_SHARPS.get(note, note)
    if note in NOTES:
        return NOTES.index(note)
    return None


def transpose_note(note: str, semitones: int) -> str:
    """Shift *note* by *semitones*; unknown notes are returned unchanged."""
    index = note_index(note)
    if index is None:
        return note
    return NOTES[(index + semitones) % 12]


def key_root(key: str) -> str | None:
    """Return the root note of a key or chord spelling (``"Bbm"`` -> ``"Bb"``)."""
    end = _read_note(key, 0)
    return key[:end] if end else None


def all_keys() -> list[str]:
    """The 24 selectable keys: 12 major roots, then the same roots minor."""
    return NOTES + [note + "m" for note in NOTES]


def enharmonic_equivalents(note: str) -> list[str]:
    """Return the sharp and flat spellings of *note* (or just *note*)."""
    if note in FLATS_TO_SHARPS:
        return [FLATS_TO_SHARPS[note], note]
    if note in _SHARPS_TO_FLATS:
        return [note, _SHARPS_TO_FLATS[note]]
    return [note]


def related_keys(key: str) -> list[str]:
    """Return *key* followed by its relative, dominant and subdominant keys."""
    root = key_root(key.strip())
    index = note_index(root) if root else None
    if index is None:
        return [key]

    minor = is_minor_quality(key.strip()[len(root):])
    suffix = "m" if minor else ""
    related = [key]
    if minor:
        related.append(NOTES[(index + 3) % 12])
    else:
        related.append(NOTES[(index - 3) % 12] + "m")
    related.append(NOTES[(index + 7) % 12] + suffix)
    related.append(NOTES[(index + 5) % 12] + suffix)
    return list(dict.fromkeys(related))
