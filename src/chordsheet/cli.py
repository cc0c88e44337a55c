import json
import logging
import re
import sys
import unicodedata
from pathlib import Path

import click

from .chordpro import ChordProFormatter
from .chords import (
    all_keys,
    enharmonic_equivalents,
    is_valid_chord,
    key_root,
    normalize_chord,
    note_index,
    related_keys,
)
from .display import format_song
from .exceptions import FetchError, ParseError, StorageError, UnsupportedSiteError
from .importer import import_text, import_url
from .models import Song
from .registry import supported_sites
from .storage import JsonFileRepository
from .transposer import reset_to_original_key, transpose_song

_EXTENSIONS = {"text": ".txt", "chordpro": ".cho", "json": ".json"}

_KEY_CHOICE = click.Choice(all_keys())


def _slugify(text: str) -> str:
    """Lowercase ASCII slug for file names: ``"Legião Urbana"`` -> ``"legiao-urbana"``."""
    # Split accented letters into base letter + combining mark, then drop the marks
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    words = re.findall(r"[a-z0-9]+", folded.lower().replace("'", ""))
    return "-".join(words)


def _default_filename(artist: str, title: str, fmt: str) -> str:
    return f"{_slugify(artist)}-{_slugify(title)}{_EXTENSIONS[fmt]}"


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _render(song: Song, fmt: str) -> str:
    if fmt == "chordpro":
        return ChordProFormatter().render(song)
    if fmt == "json":
        return json.dumps(song.to_dict(), ensure_ascii=False, indent=2) + "\n"
    return format_song(song)


def _emit(song: Song, fmt: str, output_path: str | None) -> None:
    """Print the rendered song, or write it to *output_path*.

    When *output_path* is a directory the file is named after the song.
    """
    text = _render(song, fmt)
    if output_path is None:
        click.echo(text, nl=False)
        return

    dest = Path(output_path)
    if dest.is_dir():
        dest = dest / _default_filename(song.artist, song.title, fmt)
    dest.write_text(text, encoding="utf-8")
    click.echo(f"Written to {dest}")


def _load_song(path: str) -> Song:
    try:
        return Song.from_dict(json.loads(Path(path).read_text(encoding="utf-8")))
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        _fail(f"{path} is not a song file ({exc})")


def _add_to_library(library: str, song: Song) -> None:
    try:
        JsonFileRepository(library).add(song)
    except StorageError as exc:
        _fail(str(exc))
    click.echo(f"Saved to library {library}", err=True)


_format_option = click.option(
    "-f", "--format", "fmt", type=click.Choice(list(_EXTENSIONS)), default="text", show_default=True,
    help="Output format.",
)
_output_option = click.option(
    "-o", "--output", "output_path", default=None, metavar="PATH",
    help="Write to PATH instead of stdout (a directory gets <artist>-<title>.<ext>).",
)
_library_option = click.option(
    "--library", default=None, metavar="PATH", help="Also add the song to this JSON song library.",
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log progress to stderr.")
def main(verbose: bool) -> None:
    """Import chord sheets, transpose them and keep them in a song library."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command("import")
@click.argument("url")
@click.option("--key", type=_KEY_CHOICE, default=None,
              help="Transpose to this key after importing (songs are stored in C).")
@click.option("--strict", is_flag=True, default=False,
              help="Fail instead of substituting a placeholder song.")
@_format_option
@_output_option
@_library_option
def import_command(url: str, key: str | None, strict: bool, fmt: str, output_path: str | None,
                   library: str | None) -> None:
    """Import a chord sheet page.

    \b
    Supported sites:
      - www.cifraclub.com.br
    """
    try:
        result = import_url(url, strict=strict)
    except UnsupportedSiteError as exc:
        click.echo(f"Error: {exc}", err=True)
        click.echo(f"Supported sites: {', '.join(supported_sites())}", err=True)
        sys.exit(1)
    except FetchError as exc:
        msg = f"Error: Could not fetch {exc.url}"
        if exc.status_code:
            msg += f" (HTTP {exc.status_code})"
        click.echo(msg, err=True)
        sys.exit(1)
    except ParseError as exc:
        _fail(str(exc))

    if result.warning:
        click.echo(f"Warning: {result.warning}", err=True)

    song = result.song
    if key:
        song = transpose_song(song, key)
    if library:
        _add_to_library(library, song)
    _emit(song, fmt, output_path)


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--title", default="", help="Song title.")
@click.option("--artist", default="", help="Song artist.")
@click.option("--key", type=_KEY_CHOICE, default=None,
              help="Transpose to this key after importing (songs are stored in C).")
@_format_option
@_output_option
@_library_option
def parse(source, title: str, artist: str, key: str | None, fmt: str, output_path: str | None,
          library: str | None) -> None:
    """Import a chord sheet from a text file (or stdin)."""
    song = import_text(source.read(), title=title, artist=artist)
    if key:
        song = transpose_song(song, key)
    if library:
        _add_to_library(library, song)
    _emit(song, fmt, output_path)


@main.command()
@click.argument("song_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--to", "to_key", type=_KEY_CHOICE, required=True, help="Target key.")
@_format_option
@_output_option
def transpose(song_file: str, to_key: str, fmt: str, output_path: str | None) -> None:
    """Transpose a song saved with --format json."""
    _emit(transpose_song(_load_song(song_file), to_key), fmt, output_path)


@main.command()
@click.argument("song_file", type=click.Path(exists=True, dir_okay=False))
@_format_option
@_output_option
def reset(song_file: str, fmt: str, output_path: str | None) -> None:
    """Transpose a song back to the key it was imported in."""
    _emit(reset_to_original_key(_load_song(song_file)), fmt, output_path)


@main.command()
@click.argument("key", required=False)
def keys(key: str | None) -> None:
    """List the selectable keys, or the keys related to KEY."""
    if key is None:
        names = all_keys()
        click.echo(" ".join(names[:12]))
        click.echo(" ".join(names[12:]))
        return

    key = normalize_chord(key)
    root = key_root(key)
    if not is_valid_chord(key) or note_index(root) is None:
        _fail(f"{key!r} is not a key")
    click.echo(f"Related keys: {' '.join(related_keys(key))}")
    spellings = enharmonic_equivalents(root)
    if len(spellings) > 1:
        click.echo(f"Spellings: {' / '.join(spellings)}")


@main.command()
@click.argument("library_path", type=click.Path(dir_okay=False))
def library(library_path: str) -> None:
    """List the songs in a JSON song library."""
    try:
        songs = JsonFileRepository(library_path).load()
    except StorageError as exc:
        _fail(str(exc))
    if not songs:
        click.echo("Library is empty.")
        return
    for song in songs:
        click.echo(f"{song.title} - {song.artist} [{song.current_key}, originally {song.original_key}]")
