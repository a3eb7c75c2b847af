"""Where the serialized cart lives between requests."""

from __future__ import annotations

import re
from pathlib import Path
from typing import MutableMapping, Optional

from ..common.services.logging import log_event


_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")


class JsonFileCartStorage:
    """One JSON file per storage key under ``data_dir``."""

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir

    def _path(self, key: str) -> Path:
        return self._data_dir / f"{_UNSAFE.sub('_', key)}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            log_event("warning", "cart.read_failed", key=key, message=str(exc))
            return None

    def write(self, key: str, value: str) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value + "\n", encoding="utf-8")


class SessionCartStorage:
    """Keeps the cart in Flask's signed, client-side session cookie."""

    def __init__(self, session: MutableMapping) -> None:
        self._session = session

    def read(self, key: str) -> Optional[str]:
        value = self._session.get(key)
        return value if isinstance(value, str) else None

    def write(self, key: str, value: str) -> None:
        self._session[key] = value
