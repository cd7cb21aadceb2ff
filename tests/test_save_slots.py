from pathlib import Path

import pytest

from bardo.domain.defs import AchievementDef
from bardo.domain.saves import SystemsSnapshot
from bardo.presentation.cli.save_slots import FileStorage
from bardo.services.achievement_service import AchievementService
from bardo.services.save_service import SaveService


def test_file_storage_round_trip(tmp_path: Path) -> None:
    storage = FileStorage(tmp_path / "saves")

    assert storage.read("bardo_saves") is None

    storage.write("bardo_saves", '{"saves": []}')

    assert storage.read("bardo_saves") == '{"saves": []}'
    assert (tmp_path / "saves" / "bardo_saves.json").is_file()
    assert storage.keys() == ["bardo_saves"]


def test_file_storage_remove_is_idempotent(tmp_path: Path) -> None:
    storage = FileStorage(tmp_path)
    storage.write("bardo_achievements_crypt", "{}")

    storage.remove("bardo_achievements_crypt")
    storage.remove("bardo_achievements_crypt")

    assert storage.read("bardo_achievements_crypt") is None
    assert storage.keys() == []


@pytest.mark.parametrize("key", ["../escape", "a/b", "", "space key"])
def test_file_storage_rejects_unsafe_keys(tmp_path: Path, key: str) -> None:
    storage = FileStorage(tmp_path)

    with pytest.raises(ValueError):
        storage.write(key, "x")


def test_save_service_persists_through_file_storage(tmp_path: Path) -> None:
    first = SaveService(FileStorage(tmp_path), "crypt")
    save_id = first.save("Gate", "blob", "At the gate.", SystemsSnapshot(stats={"hp": 90}))

    second = SaveService(FileStorage(tmp_path), "crypt")
    data = second.load(save_id)

    assert data is not None
    assert data.text == "At the gate."
    assert data.systems_snapshot.stats == {"hp": 90}


def test_undecodable_save_file_reads_as_empty(tmp_path: Path, caplog) -> None:
    (tmp_path / "bardo_saves.json").write_bytes(b"\xff\xfe{garbage")
    service = SaveService(FileStorage(tmp_path), "crypt")

    assert service.load_most_recent() is None
    assert service.saves() == []
    assert not service.has_continue
    assert "not valid UTF-8" in caplog.text


def test_undecodable_save_file_is_replaced_by_next_save(tmp_path: Path) -> None:
    (tmp_path / "bardo_saves.json").write_bytes(b"\xff\xfe")
    service = SaveService(FileStorage(tmp_path), "crypt")

    save_id = service.save("Fresh", "blob", "", SystemsSnapshot())

    assert [record.id for record in service.saves()] == [save_id]


def test_undecodable_achievement_file_reads_as_empty(tmp_path: Path, caplog) -> None:
    (tmp_path / "bardo_achievements_crypt.json").write_bytes(b"\xff\xfe")

    service = AchievementService("crypt", [AchievementDef(id="first", title="First")], FileStorage(tmp_path))

    assert service.unlocked_ids == []
    assert not service.has_completed_game
    assert "Corrupt achievement data" in caplog.text
    assert service.unlock("first")
