from datetime import datetime, timezone

import pytest

from chordsheet.chords import all_keys
from chordsheet.models import Chord, LyricLine, Song
from chordsheet.transposer import (
    normalize_to_c,
    reset_to_original_key,
    semitones_between,
    transpose_chord_symbol,
    transpose_setlist,
    transpose_song,
)

LONG_AGO = datetime(2020, 1, 1, tzinfo=timezone.utc)


def _song(symbols: list[str], key: str = "D", original_key: str | None = None) -> Song:
    chords = [Chord(id=f"chord-0-{i}", symbol=s, position=i * 4) for i, s in enumerate(symbols)]
    return Song(
        title="Test Song",
        artist="Test Artist",
        original_key=original_key or key,
        current_key=key,
        lyrics=[LyricLine(id="line-0", text="la la la la la la la la", chords=chords, position=0)],
        updated_at=LONG_AGO,
    )


def _symbols(song: Song) -> list[str]:
    return [chord.symbol for line in song.lyrics for chord in line.chords]


# ---------------------------------------------------------------------------
# semitones_between
# ---------------------------------------------------------------------------


def test_semitones_same_key():
    assert semitones_between("C", "C") == 0


def test_semitones_up():
    assert semitones_between("C", "G") == 7


def test_semitones_wraps_forward():
    assert semitones_between("G", "C") == 5
    assert semitones_between("D", "C") == 10


def test_semitones_ignores_minor_suffix():
    assert semitones_between("Am", "C") == 3


def test_semitones_flat_keys():
    assert semitones_between("Bb", "C") == 2
    assert semitones_between("C", "Eb") == 3


def test_semitones_unknown_key_is_zero():
    assert semitones_between("X", "C") == 0
    assert semitones_between("C", "") == 0


# ---------------------------------------------------------------------------
# transpose_chord_symbol
# ---------------------------------------------------------------------------


def test_transpose_slash_chord():
    assert transpose_chord_symbol("G/B", 2) == "A/C#"


def test_transpose_slash_chord_wraps():
    assert transpose_chord_symbol("C/E", 10) == "A#/D"


def test_transpose_slash_chord_keeps_modifiers():
    assert transpose_chord_symbol("D7/F#", 2) == "E7/G#"
    assert transpose_chord_symbol("Am7/G", 3) == "Cm7/A#"


def test_transpose_keeps_quality_suffix():
    assert transpose_chord_symbol("Am7", 3) == "Cm7"
    assert transpose_chord_symbol("F#m7(9)", 1) == "Gm7(9)"


def test_transpose_flat_input_comes_out_sharp():
    assert transpose_chord_symbol("Bbmaj7", 2) == "Cmaj7"
    assert transpose_chord_symbol("Eb", 1) == "E"
    assert transpose_chord_symbol("Bb", 12) == "A#"


def test_transpose_full_octave_respells_flats():
    assert transpose_chord_symbol("Bb", -12) == "A#"
    assert transpose_chord_symbol("Ebm7/Db", 24) == "D#m7/C#"


def test_transpose_extended_chords():
    assert transpose_chord_symbol("C7M", 2) == "D7M"
    assert transpose_chord_symbol("Bm7b5", 1) == "Cm7b5"
    assert transpose_chord_symbol("E7(4/9)", 5) == "A7(4/9)"


def test_transpose_slash_after_parenthesised_extension():
    assert transpose_chord_symbol("C7(9/11)/E", 2) == "D7(9/11)/F#"


def test_transpose_zero_is_identity():
    assert transpose_chord_symbol("Bb", 0) == "Bb"
    assert transpose_chord_symbol("G/B", 0) == "G/B"


def test_transpose_negative_semitones():
    assert transpose_chord_symbol("C", -1) == "B"


def test_transpose_unrecognized_symbol_unchanged():
    assert transpose_chord_symbol("N.C.", 5) == "N.C."
    assert transpose_chord_symbol("", 5) == ""


def test_transpose_slash_without_bass_note():
    assert transpose_chord_symbol("C/x", 2) == "D/x"


# ---------------------------------------------------------------------------
# transpose_song
# ---------------------------------------------------------------------------


def test_transpose_song_to_same_key_keeps_chords():
    song = _song(["D", "G", "A7"])
    result = transpose_song(song, "D")
    assert _symbols(result) == ["D", "G", "A7"]
    assert result.current_key == "D"


def test_transpose_song_rewrites_chords():
    song = _song(["D", "G", "A7", "G/B"])
    result = transpose_song(song, "E")
    assert _symbols(result) == ["E", "A", "B7", "A/C#"]
    assert result.current_key == "E"
    assert result.original_key == "D"


def test_transpose_song_preserves_structure():
    song = _song(["D", "G"])
    result = transpose_song(song, "F")
    assert [c.id for c in result.lyrics[0].chords] == ["chord-0-0", "chord-0-1"]
    assert [c.position for c in result.lyrics[0].chords] == [0, 4]
    assert result.lyrics[0].text == song.lyrics[0].text
    assert result.id == song.id


def test_transpose_song_does_not_mutate_input():
    song = _song(["D", "G"])
    transpose_song(song, "F")
    assert _symbols(song) == ["D", "G"]
    assert song.current_key == "D"


def test_transpose_song_same_key_returns_independent_copy():
    song = _song(["D", "G"])
    result = transpose_song(song, "D")
    result.lyrics[0].chords[0].symbol = "E"
    assert _symbols(song) == ["D", "G"]
    assert result.updated_at == song.updated_at


def test_transpose_song_refreshes_updated_at():
    result = transpose_song(_song(["D"]), "E")
    assert result.updated_at > LONG_AGO


def test_transpose_song_same_root_changes_only_key():
    song = _song(["D", "G"])
    result = transpose_song(song, "Dm")
    assert result.current_key == "Dm"
    assert _symbols(result) == ["D", "G"]


@pytest.mark.parametrize("target", all_keys())
def test_transpose_full_circle(target):
    song = _song(["D", "G", "A7", "Bm", "F#m", "G/B", "Eb", "Bbmaj7/D"])
    there = transpose_song(song, target)
    back = transpose_song(there, "D")
    # Flats are not round-tripped: they come back sharp-spelled
    expected = ["D", "G", "A7", "Bm", "F#m", "G/B", "D#", "A#maj7/D"]
    if semitones_between("D", target) == 0:
        expected = _symbols(song)
    assert _symbols(back) == expected


def test_transpose_setlist():
    songs = [_song(["D"]), _song(["G"], key="G")]
    result = transpose_setlist(songs, "A")
    assert [_symbols(s) for s in result] == [["A"], ["A"]]
    assert all(s.current_key == "A" for s in result)


# ---------------------------------------------------------------------------
# reset_to_original_key / normalize_to_c
# ---------------------------------------------------------------------------


def test_reset_to_original_key():
    song = _song(["C", "F"], key="C", original_key="D")
    result = reset_to_original_key(song)
    assert result.current_key == "D"
    assert _symbols(result) == ["D", "G"]


def test_normalize_to_c():
    song = _song(["G", "D", "Em", "C"], key="G")
    result = normalize_to_c(song)
    assert result.current_key == "C"
    assert result.original_key == "G"
    assert _symbols(result) == ["C", "G", "Am", "F"]


def test_normalize_song_already_in_c():
    song = _song(["C", "F"], key="C")
    assert normalize_to_c(song) is song
