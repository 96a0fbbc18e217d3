from __future__ import annotations
"""Persisted listing defaults."""

from dataclasses import dataclass
import json
import logging
from pathlib import Path

from .models import DEFAULT_MAX_KEYS

LOGGER = logging.getLogger(__name__)


@dataclass
class AppSettings:
    """Defaults applied to listings when the caller does not override them."""

    max_keys: int = DEFAULT_MAX_KEYS
    delimiter: str = ""
    # 0 means follow the listing to the end.
    max_pages: int = 0


def _clamp_max_keys(value: object) -> int:
    try:
        max_keys = int(value)
    except (TypeError, ValueError):
        return AppSettings.max_keys
    if max_keys <= 0:
        return AppSettings.max_keys
    return min(max_keys, DEFAULT_MAX_KEYS)


def _clamp_max_pages(value: object) -> int:
    try:
        max_pages = int(value)
    except (TypeError, ValueError):
        return AppSettings.max_pages
    return max(max_pages, 0)


class SettingsStorage:
    """JSON-backed persistence for :class:`AppSettings`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".cos_versions_settings.json"
        self._path = Path(storage_path)

    def load(self) -> AppSettings:
        if not self._path.exists():
            return AppSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning("Ignoring unreadable settings file %s: %s", self._path, exc)
            return AppSettings()
        if not isinstance(data, dict):
            return AppSettings()
        delimiter = data.get("delimiter", AppSettings.delimiter)
        if not isinstance(delimiter, str):
            delimiter = AppSettings.delimiter
        return AppSettings(
            max_keys=_clamp_max_keys(data.get("max_keys", AppSettings.max_keys)),
            delimiter=delimiter,
            max_pages=_clamp_max_pages(data.get("max_pages", AppSettings.max_pages)),
        )

    def save(self, settings: AppSettings) -> None:
        payload = {
            "max_keys": max(min(int(settings.max_keys), DEFAULT_MAX_KEYS), 1),
            "delimiter": settings.delimiter or "",
            "max_pages": max(int(settings.max_pages), 0),
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            LOGGER.warning("Unable to save settings to %s: %s", self._path, exc)
