# tests/unit/test_settings.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from findmyhome.inputs.settings import SettingsLoader, load_settings


def _write(tmp_path: Path, data: object, name: str = "findmyhome.json") -> Path:
    p = tmp_path / name
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


def test_defaults_when_no_file(tmp_path: Path) -> None:
    cfg = SettingsLoader(default_path=tmp_path / "absent.json").load()
    assert cfg.api_base == "http://localhost:8000"
    assert cfg.timeout_s == 15.0
    assert cfg.state_dir == Path(".findmyhome")


def test_load_file_strips_trailing_slash(tmp_path: Path) -> None:
    p = _write(tmp_path, {"api_base": "https://api.example.com/", "timeout_s": 20})
    cfg = load_settings(p)
    assert cfg.api_base == "https://api.example.com"
    assert cfg.timeout_s == 20.0


def test_default_path_is_picked_up(tmp_path: Path) -> None:
    p = _write(tmp_path, {"state_dir": str(tmp_path / "state")})
    cfg = SettingsLoader(default_path=p).load()
    assert cfg.state_dir == tmp_path / "state"


def test_env_overrides(tmp_path: Path, monkeypatch) -> None:
    p = _write(tmp_path, {"api_base": "https://file.example.com"})
    monkeypatch.setenv("FINDMYHOME_API_BASE", "https://env.example.com/")
    monkeypatch.setenv("FINDMYHOME_TIMEOUT", "3.5")
    monkeypatch.setenv("FINDMYHOME_STATE_DIR", str(tmp_path / "env-state"))

    cfg = SettingsLoader().load(p)

    assert cfg.api_base == "https://env.example.com"
    assert cfg.timeout_s == 3.5
    assert cfg.state_dir == tmp_path / "env-state"


@pytest.mark.parametrize("value", ["abc", "-1", "0"])
def test_bad_timeout_env_is_ignored(monkeypatch, value) -> None:
    monkeypatch.setenv("FINDMYHOME_TIMEOUT", value)
    cfg = SettingsLoader().load_json('{"timeout_s": 9}')
    assert cfg.timeout_s == 9.0


def test_missing_explicit_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        SettingsLoader().load(tmp_path / "nope.json")


def test_non_json_extension_rejected(tmp_path: Path) -> None:
    p = tmp_path / "settings.yaml"
    p.write_text("api_base: x", encoding="utf-8")
    with pytest.raises(ValueError, match="only .json"):
        SettingsLoader().load(p)


@pytest.mark.parametrize(
    "payload, match",
    [
        ("{oops", "Invalid JSON"),
        ("[]", "must be an object"),
        ('{"timeout_s": 0}', "validation failed"),
        ('{"api_base": "  "}', "validation failed"),
    ],
)
def test_load_json_errors(payload, match) -> None:
    with pytest.raises(ValueError, match=match):
        SettingsLoader().load_json(payload)
