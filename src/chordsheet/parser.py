"""Turn raw chord sheet text into lyric lines with positioned chords.

Two layouts appear in scraped or pasted sheets:

  chords above lyrics::

          C        F
      Hello darkness my old friend

  chords mixed into the text::

      C Hello D darkness E my old friend

A line is *chord-only* when, after cutting out every chord token, fewer than
five characters remain.  A chord-only line is paired with the line that
follows it; the chord offsets are scaled by :data:`CHORD_LINE_SCALE` because
the two lines are usually rendered in different fonts on the source page.

Anything else is a mixed line: chords keep their exact offsets, and when a
line carries more than two of them they are treated as markup and cut out of
the text.

Parsing never raises.  A line without chords is kept verbatim.
"""

import logging
import math
import re

from .chords import remove_chords, scan_chords, strip_chords
from .models import Chord, LyricLine, Song

logger = logging.getLogger(__name__)

DEFAULT_KEY = "C"

# Empirical, tunable ratio between chord-line columns and lyric columns.
CHORD_LINE_SCALE = 0.8

# A chord line may carry a few stray characters ("|", "x2", "(") and still
# count as chord-only.
_MAX_CHORD_LINE_RESIDUE = 5

# Mixed lines with more chords than this have them stripped from the text.
_MAX_INLINE_CHORDS = 2

_KEY = r"([A-G][#b]?(?:m(?!aj))?)"

# Tried in order; the first match wins.
_KEY_LABEL_PATTERNS = [
    re.compile(r"\b(?i:tom):\s*" + _KEY),            # "Tom: D"
    re.compile(r"\b(?i:tom)\s+" + _KEY + r"\b"),      # "tom D"
    re.compile(r"(?i:\[intro\])\s*" + _KEY),          # "[Intro] D G"
    re.compile(r"\b(?i:key):\s*" + _KEY),             # "Key: D"
    re.compile(r"\b(?i:tonalidade)[:\s]*" + _KEY),    # "tonalidade: D"
]

# A line that only declares the key: metadata, not a chord line.
_KEY_LINE_RE = re.compile(
    r"^(?i:tom|key|tonalidade)"
    r"(?:\s*:\s*[A-G][#b]?\S*(?:\s*\(.*\))?"  # "Tom: D", "Tom: D (forma dos acordes no tom de C)"
    r"|\s+[A-G][#b]?m?)$"                     # "Tom D"
)


def _scaled(offset: int, scale: float) -> int:
    # Round half up, so 0.5 columns moves a chord right as browsers do.
    return max(0, math.floor(offset * scale + 0.5))


def _is_chord_only(line: str, tokens: list) -> bool:
    if not tokens:
        return False
    return len(remove_chords(line, tokens).strip()) < _MAX_CHORD_LINE_RESIDUE


def parse_lyrics_with_chords(raw: str, chord_line_scale: float = CHORD_LINE_SCALE) -> list[LyricLine]:
    """Parse *raw* sheet text into an ordered list of :class:`LyricLine`.

    Blank lines and key declarations (``Tom: D``) produce no output.  Each
    resulting line gets ``id="line-N"``, ``position=N`` and chords with
    ``id="chord-N-K"``.
    """
    if not raw:
        return []

    # Chord lines keep their indentation: it is what aligns them to the lyric.
    lines = [line.rstrip() for line in raw.splitlines()]
    result: list[LyricLine] = []

    i = 0
    while i < len(lines):
        line = lines[i].strip()
        if not line or _KEY_LINE_RE.match(line):
            i += 1
            continue

        number = len(result)
        following = lines[i + 1].strip() if i + 1 < len(lines) else ""
        raw_tokens = scan_chords(lines[i])

        if _is_chord_only(lines[i], raw_tokens) and following:
            chords = [
                Chord(
                    id=f"chord-{number}-{k}",
                    symbol=token.text,
                    position=_scaled(token.start, chord_line_scale),
                )
                for k, token in enumerate(raw_tokens)
            ]
            result.append(LyricLine(id=f"line-{number}", text=following, chords=chords, position=number))
            i += 2
            continue

        tokens = scan_chords(line)
        chords = [
            Chord(id=f"chord-{number}-{k}", symbol=token.text, position=token.start)
            for k, token in enumerate(tokens)
        ]
        text = strip_chords(line, tokens) if len(tokens) > _MAX_INLINE_CHORDS else line
        result.append(LyricLine(id=f"line-{number}", text=text, chords=chords, position=number))
        i += 1

    logger.debug("Parsed %d lyric lines from %d source lines", len(result), len(lines))
    return result


def extract_key(raw: str) -> str:
    """Best-effort key detection.

    An explicit label (``tom: G``, ``Key: Am``, ...) wins.  Otherwise the
    first chord in the text is taken as the key (root plus ``m`` if minor).
    Falls back to ``"C"``.
    """
    if not raw:
        return DEFAULT_KEY

    for pattern in _KEY_LABEL_PATTERNS:
        m = pattern.search(raw)
        if m:
            return m.group(1)

    for line in raw.splitlines():
        for token in scan_chords(line):
            return token.root + ("m" if token.is_minor else "")

    return DEFAULT_KEY


def parse_song(raw: str, title: str = "", artist: str = "", source_url: str | None = None) -> Song:
    """Build a :class:`Song` in the key it was written in (no normalization)."""
    key = extract_key(raw)
    return Song(
        title=title,
        artist=artist,
        original_key=key,
        current_key=key,
        lyrics=parse_lyrics_with_chords(raw),
        source_url=source_url,
    )
