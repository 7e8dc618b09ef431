# findmyhome/inputs/settings.py
"""
Settings loader for the FindMyHome client.

Goals
-----
- File-first settings validated via Pydantic (``ClientSettings``).
- Optional: with no file, defaults apply.
- Minimal environment-variable overrides for CI/dev convenience.

Supported JSON shape
--------------------
    {
      "api_base": "https://api.example.com",
      "timeout_s": 20,
      "state_dir": ".findmyhome",
      "user_agent": "findmyhome-client/0.1"
    }

Environment overrides (optional)
--------------------------------
- FINDMYHOME_API_BASE   -> ClientSettings.api_base
- FINDMYHOME_TIMEOUT    -> ClientSettings.timeout_s (float > 0)
- FINDMYHOME_STATE_DIR  -> ClientSettings.state_dir

Public API
----------
- class SettingsLoader:
    - load(path: str | Path | None) -> ClientSettings
    - load_json(text: str) -> ClientSettings
- function load_settings(path: str | Path | None) -> ClientSettings  (convenience)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from pydantic import ValidationError

from findmyhome.schemas.models import ClientSettings


@dataclass(frozen=True)
class SettingsLoader:
    """
    Responsibilities:
        - Read JSON from a file or string
        - Validate with Pydantic
        - Apply environment overrides

    Default search (when path=None): ./findmyhome.json, else pure defaults.
    """

    env_prefix: str = "FINDMYHOME_"
    default_path: Path = Path("findmyhome.json")

    # ---------- Public API ----------

    def load(self, path: str | Path | None = None) -> ClientSettings:
        raw: dict[str, Any] = {}
        p = self._resolve_path(path)
        if p is not None:
            raw = self._read_json_file(p)
        return self._apply_env_overrides(self._parse_root(raw))

    def load_json(self, text: str) -> ClientSettings:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON payload: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError("Settings JSON must be an object.")
        return self._apply_env_overrides(self._parse_root(raw))

    # ---------- Internals ----------

    def _resolve_path(self, path: str | Path | None) -> Path | None:
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise FileNotFoundError(f"Settings file not found: {p}")
            return p
        return self.default_path if self.default_path.exists() else None

    def _read_json_file(self, p: Path) -> dict[str, Any]:
        if p.suffix.lower() != ".json":
            raise ValueError(f"Unsupported settings format for {p.name}; only .json is supported.")
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {p}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Settings in {p} must be a JSON object.")
        return cast(dict[str, Any], data)

    def _parse_root(self, data: dict[str, Any]) -> ClientSettings:
        try:
            return ClientSettings.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Settings validation failed:\n{e}") from e

    def _apply_env_overrides(self, cfg: ClientSettings) -> ClientSettings:
        prefix = self.env_prefix
        updates: dict[str, Any] = {}

        api_base = os.getenv(f"{prefix}API_BASE", "").strip()
        if api_base:
            updates["api_base"] = api_base.rstrip("/")

        timeout = os.getenv(f"{prefix}TIMEOUT")
        if timeout:
            try:
                value = float(timeout)
                if value > 0:
                    updates["timeout_s"] = value
            except ValueError:
                # Ignore bad value; keep validated cfg.timeout_s
                pass

        state_dir = os.getenv(f"{prefix}STATE_DIR")
        if state_dir:
            updates["state_dir"] = Path(state_dir)

        if not updates:
            return cfg
        return cfg.model_copy(update=updates)


def load_settings(path: str | Path | None = None) -> ClientSettings:
    """Convenience wrapper for one-shot callers."""
    return SettingsLoader().load(path)
