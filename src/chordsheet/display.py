"""Plain-text rendering with chords printed above the lyrics."""

from .models import LyricLine, Song


def _chord_row(line: LyricLine) -> str:
    if line.text:
        width = max(len(line.text), *(len(chord.symbol) for chord in line.chords))
    else:
        width = max(chord.position + len(chord.symbol) for chord in line.chords)
    row = [" "] * width
    for chord in sorted(line.chords, key=lambda c: c.position):
        # Shift left so the whole symbol fits inside the row
        start = max(0, min(chord.position, width - len(chord.symbol)))
        for offset, char in enumerate(chord.symbol):
            if start + offset < width:
                row[start + offset] = char
    return "".join(row).rstrip()


def format_lyrics_for_display(lyrics: list[LyricLine]) -> str:
    """Render lines as a chord row above each lyric; lines without chords stay as-is."""
    rendered: list[str] = []
    for line in lyrics:
        if line.chords:
            rendered.append(_chord_row(line))
        if line.text or not line.chords:
            rendered.append(line.text)
    return "\n".join(rendered)


def format_song(song: Song) -> str:
    """Render a song with a short header: title, artist and keys."""
    header = [f"{song.title} - {song.artist}"]
    if song.original_key != song.current_key:
        header.append(f"Key: {song.current_key} (original: {song.original_key})")
    else:
        header.append(f"Key: {song.current_key}")
    return "\n".join(header) + "\n\n" + format_lyrics_for_display(song.lyrics) + "\n"
