import json

import pytest

from chordsheet.exceptions import StorageError
from chordsheet.models import Chord, LyricLine, Setlist, Song
from chordsheet.storage import InMemoryRepository, JsonFileRepository


def _song(title: str = "Yellow") -> Song:
    return Song(
        title=title,
        artist="Coldplay",
        original_key="B",
        current_key="C",
        lyrics=[LyricLine(id="line-0", text="Look at the stars", chords=[Chord("chord-0-0", "C", 0)])],
    )


# ---------------------------------------------------------------------------
# InMemoryRepository
# ---------------------------------------------------------------------------


def test_in_memory_starts_empty():
    assert InMemoryRepository().load() == []


def test_in_memory_round_trip():
    repo = InMemoryRepository()
    songs = [_song("Yellow"), _song("Fix You")]
    repo.save(songs)
    assert repo.load() == songs


def test_in_memory_returns_copies():
    repo = InMemoryRepository([_song()])
    loaded = repo.load()
    loaded[0].title = "changed"
    assert repo.load()[0].title == "Yellow"


def test_add_replaces_song_with_same_id():
    song = _song()
    repo = InMemoryRepository([song])
    song.rename(title="Yellow (live)")
    repo.add(song)
    assert [s.title for s in repo.load()] == ["Yellow (live)"]


# ---------------------------------------------------------------------------
# JsonFileRepository
# ---------------------------------------------------------------------------


def test_json_missing_file_is_empty(tmp_path):
    assert JsonFileRepository(tmp_path / "library.json").load() == []


def test_json_round_trip(tmp_path):
    repo = JsonFileRepository(tmp_path / "library.json")
    songs = [_song("Yellow"), _song("Fix You")]
    repo.save(songs)
    assert repo.load() == songs


def test_json_document_layout(tmp_path):
    path = tmp_path / "library.json"
    JsonFileRepository(path).save([_song()])
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["version"] == 1
    assert data["songs"][0]["currentKey"] == "C"
    assert not (tmp_path / "library.json.tmp").exists()


def test_json_creates_parent_directories(tmp_path):
    repo = JsonFileRepository(tmp_path / "nested" / "library.json")
    repo.add(_song())
    assert len(repo.load()) == 1


def test_json_accepts_bare_song_list(tmp_path):
    path = tmp_path / "export.json"
    path.write_text(json.dumps([_song().to_dict()]), encoding="utf-8")
    assert JsonFileRepository(path).load()[0].title == "Yellow"


def test_json_reads_setlist_backup(tmp_path):
    path = tmp_path / "backup.json"
    backup = {
        "setlists": [
            Setlist(name="Sunday", songs=[_song("Yellow")]).to_dict(),
            Setlist(name="Friday", songs=[_song("Fix You"), _song("Clocks")]).to_dict(),
        ]
    }
    path.write_text(json.dumps(backup), encoding="utf-8")
    assert [s.title for s in JsonFileRepository(path).load()] == ["Yellow", "Fix You", "Clocks"]


def test_json_non_object_records_raise(tmp_path):
    path = tmp_path / "library.json"
    path.write_text('["x"]', encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileRepository(path).load()


def test_json_corrupt_file_raises(tmp_path):
    path = tmp_path / "library.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileRepository(path).load()


def test_json_wrong_shape_raises(tmp_path):
    path = tmp_path / "library.json"
    path.write_text('{"songs": "nope"}', encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileRepository(path).load()


def test_json_malformed_record_raises(tmp_path):
    path = tmp_path / "library.json"
    path.write_text('{"songs": [{"title": "x", "lyrics": [{"text": "no id"}]}]}', encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileRepository(path).load()
