"""ChordPro export.

Renders a :class:`~chordsheet.models.Song` to ChordPro (``.cho``) text, with
each chord inserted inline in front of the character it sits above::

    {title: The Sound of Silence}
    {artist: Simon & Garfunkel}
    {key: C}
    {comment: Original key: D#m}

    Hello [C]darkness my old [F]friend

Usage::

    from chordsheet.chordpro import ChordProFormatter
    text = ChordProFormatter().render(song)
    Path("output.cho").write_text(text)
"""

from .models import LyricLine, Song


class ChordProFormatter:
    """Render a :class:`~chordsheet.models.Song` to ChordPro text."""

    def render(self, song: Song) -> str:
        """Return ChordPro text for *song*.

        The returned string ends with a single newline and uses Unix line
        endings (``\\n``) throughout.
        """
        parts: list[str] = []

        # --- Metadata block ---
        parts.append(f"{{title: {song.title}}}")
        parts.append(f"{{artist: {song.artist}}}")
        if song.current_key:
            parts.append(f"{{key: {song.current_key}}}")
        if song.original_key and song.original_key != song.current_key:
            parts.append(f"{{comment: Original key: {song.original_key}}}")

        # --- Lyrics ---
        if song.lyrics:
            parts.append("")
            parts.extend(render_line(line) for line in song.lyrics)

        return "\n".join(parts) + "\n"


def render_line(line: LyricLine) -> str:
    """Return *line* with ``[Chord]`` brackets inserted at the chord positions.

    If a chord's position lies beyond the end of the text, the chord is
    appended rather than dropped.  A line without text renders as a bare
    chord sequence: ``[D] [G] [A]``.
    """
    chords = sorted(line.chords, key=lambda c: c.position)
    if not line.text:
        return " ".join(f"[{chord.symbol}]" for chord in chords)

    result = line.text
    inserted = 0  # characters inserted so far (shifts all later positions)
    for chord in chords:
        bracket = f"[{chord.symbol}]"
        pos = min(chord.position + inserted, len(result))
        result = result[:pos] + bracket + result[pos:]
        inserted += len(bracket)

    return result
