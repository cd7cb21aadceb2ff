import json
import logging
from pathlib import Path

from bardo.presentation.cli import config


def test_load_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    loaded = config.load_config(tmp_path / "missing.json")

    assert loaded == {"text_display_mode": "instant", "log_level": "WARNING"}


def test_load_config_invalid_json_returns_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{broken", encoding="utf-8")

    assert config.load_config(path)["text_display_mode"] == "instant"


def test_load_config_normalizes_values(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"text_display_mode": "step", "log_level": "debug"}), encoding="utf-8")

    assert config.load_config(path) == {"text_display_mode": "step", "log_level": "DEBUG"}

    path.write_text(json.dumps({"text_display_mode": "fast", "log_level": "loud"}), encoding="utf-8")

    assert config.load_config(path) == {"text_display_mode": "instant", "log_level": "WARNING"}


def test_save_config_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"

    config.save_config({"text_display_mode": "step", "log_level": "INFO"}, path)

    assert config.load_config(path) == {"text_display_mode": "step", "log_level": "INFO"}


def test_resolve_log_level_honours_debug_flag(monkeypatch) -> None:
    monkeypatch.delenv("BARDO_DEBUG", raising=False)
    assert config.resolve_log_level({"log_level": "ERROR"}) == logging.ERROR

    monkeypatch.setenv("BARDO_DEBUG", "1")
    assert config.debug_enabled()
    assert config.resolve_log_level({"log_level": "ERROR"}) == logging.DEBUG


def test_user_data_dir_on_posix(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(config.os, "name", "posix")
    monkeypatch.setattr(config.Path, "home", lambda: tmp_path)

    assert config.get_save_dir() == tmp_path / ".config" / "bardo" / "saves"
