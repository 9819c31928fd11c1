"""Per-user profile persistence behind a small key-value interface."""

import json
import logging
import threading
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import quote

from common.local_io import read_json, write_json_atomic
from personalization.models import UserProfile, profile_from_dict, profile_to_dict

logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    def get(self, user_id: str) -> Optional[UserProfile]: ...

    def put(self, user_id: str, profile: UserProfile) -> None: ...

    def delete(self, user_id: str) -> None: ...


class InMemoryProfileRepository:
    """Dict-backed repository, for tests and single-process use."""

    def __init__(self) -> None:
        self._profiles: dict[str, UserProfile] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[UserProfile]:
        with self._lock:
            return self._profiles.get(user_id)

    def put(self, user_id: str, profile: UserProfile) -> None:
        with self._lock:
            self._profiles[user_id] = profile

    def delete(self, user_id: str) -> None:
        with self._lock:
            self._profiles.pop(user_id, None)


class JsonFileProfileRepository:
    """One JSON document per user in a directory, written atomically."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, user_id: str) -> Path:
        return self.directory / f"{quote(user_id, safe='')}.json"

    def get(self, user_id: str) -> Optional[UserProfile]:
        path = self._path(user_id)
        if not path.exists():
            return None
        try:
            return profile_from_dict(read_json(path))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Corrupt profile document {path}: {e}") from e

    def put(self, user_id: str, profile: UserProfile) -> None:
        write_json_atomic(profile_to_dict(profile), self._path(user_id))

    def delete(self, user_id: str) -> None:
        self._path(user_id).unlink(missing_ok=True)
