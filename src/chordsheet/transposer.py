"""Transpose chord symbols and whole songs by a number of semitones.

Results are always sharp-spelled: transposing ``Bb`` by 0 returns ``Bb``
untouched, but by 12 (or there and back again) it returns ``A#``.
"""

import logging
from dataclasses import replace

from .chords import key_root, note_index, transpose_note
from .models import Song, utcnow

logger = logging.getLogger(__name__)

NORMALIZED_KEY = "C"


def semitones_between(from_key: str, to_key: str) -> int:
    """Return the upward distance in semitones from *from_key* to *to_key*.

    Only the root of each key is compared, so ``"Am"`` and ``"A"`` are the
    same.  Always in ``range(12)``; 0 if either key is not recognized.
    """
    from_root = key_root(from_key.strip())
    to_root = key_root(to_key.strip())
    from_index = note_index(from_root) if from_root else None
    to_index = note_index(to_root) if to_root else None
    if from_index is None or to_index is None:
        return 0
    return (to_index - from_index) % 12


def transpose_chord_symbol(symbol: str, semitones: int) -> str:
    """Transpose one chord symbol, e.g. ``("G/B", 2)`` -> ``"A/C#"``.

    In a slash chord the root and the bass note move independently.  Quality
    suffixes are kept verbatim.  Symbols that do not start with a note are
    returned unchanged.  Only a shift of exactly 0 leaves flats alone; any
    other count, 12 included, is applied mod 12 and comes out sharp-spelled.
    """
    if semitones == 0:
        return symbol

    root = key_root(symbol)
    if not root:
        return symbol
    rest = symbol[len(root):]

    modifiers, slash, after = rest.rpartition("/")
    bass = key_root(after) if slash else None
    if bass:
        return (
            f"{transpose_note(root, semitones)}{modifiers}"
            f"/{transpose_note(bass, semitones)}{after[len(bass):]}"
        )
    return transpose_note(root, semitones) + rest


def transpose_song(song: Song, new_key: str) -> Song:
    """Return a copy of *song* with its chords written in *new_key*.

    Chord ids, positions and the line structure are preserved.  The input
    song is not modified.
    """
    semitones = semitones_between(song.current_key, new_key)
    if semitones:
        logger.debug("Transposing %r from %s to %s (%d semitones)", song.title, song.current_key, new_key, semitones)

    lyrics = [
        replace(
            line,
            chords=[
                replace(chord, symbol=transpose_chord_symbol(chord.symbol, semitones))
                for chord in line.chords
            ],
        )
        for line in song.lyrics
    ]
    if new_key == song.current_key:
        return replace(song, lyrics=lyrics)
    return replace(song, current_key=new_key, lyrics=lyrics, updated_at=utcnow())


def transpose_setlist(songs: list[Song], new_key: str) -> list[Song]:
    return [transpose_song(song, new_key) for song in songs]


def reset_to_original_key(song: Song) -> Song:
    """Transpose *song* back to the key it was imported in."""
    return transpose_song(song, song.original_key)


def normalize_to_c(song: Song) -> Song:
    """Rewrite a freshly parsed song in C, keeping ``original_key`` as detected."""
    if song.original_key == NORMALIZED_KEY and song.current_key == NORMALIZED_KEY:
        return song
    return transpose_song(song, NORMALIZED_KEY)
