"""
Session persistence for the client.

Stores the access token, refresh token and signed-in user under fixed keys,
either in memory or in a JSON file on disk.
"""

import json
import logging
import os
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = "auth_token"
REFRESH_TOKEN_KEY = "auth_refresh_token"
USER_KEY = "auth_user"


class TokenStorage:
    """Key/value store for session data."""

    def get_item(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set_item(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        for key in (AUTH_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY):
            self.remove_item(key)


class MemoryTokenStorage(TokenStorage):
    """In-process storage; nothing survives a restart."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})
        self._lock = Lock()

    def get_item(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._data.get(key)

    def set_item(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class FileTokenStorage(TokenStorage):
    """
    JSON file storage.

    The file is rewritten on every change (write to a temp file, then
    replace). A corrupt file is treated as empty.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = Lock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)
