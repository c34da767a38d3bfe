"""
Remote target and the local key/value storage it is persisted in.

The GitHub token, owner, repository and branch are stored under four fixed
keys so they survive between editor sessions. Storage is injected as any
object with ``load(key)`` and ``save(key, value)``.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

LOGGER = logging.getLogger(__name__)

TOKEN_KEY = "githubToken"
OWNER_KEY = "githubOwner"
REPO_KEY = "githubRepo"
BRANCH_KEY = "githubBranch"

DEFAULT_BRANCH = "main"
DEFAULT_PATH = "config.js"


class KeyValueStorage(Protocol):
    def load(self, key: str) -> str | None: ...

    def save(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """Process-local storage, used by tests and one-off CLI runs."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> str | None:
        return self._data.get(key)

    def save(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStorage:
    """Key/value storage backed by a single JSON object on disk.

    The file is read on every ``load`` so edits made by another process (for
    example the CLI while the GUI is running) are picked up.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as exc:
            LOGGER.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            LOGGER.warning("Ignoring storage file %s: expected a JSON object", self.path)
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def load(self, key: str) -> str | None:
        with self._lock:
            return self._read().get(key)

    def save(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
            tmp_path.replace(self.path)


@dataclass(frozen=True)
class RemoteTarget:
    """Where the configuration module is committed."""

    token: str = ""
    owner: str = ""
    repo: str = ""
    branch: str = DEFAULT_BRANCH
    path: str = DEFAULT_PATH

    @property
    def is_complete(self) -> bool:
        return bool(self.token and self.owner and self.repo)

    def missing_fields(self) -> list[str]:
        return [name for name in ("token", "owner", "repo") if not getattr(self, name)]

    def describe(self) -> str:
        """Human-readable location without the token."""
        return f"{self.owner}/{self.repo}@{self.branch}:{self.path}"


def load_target(storage: KeyValueStorage, *, path: str = DEFAULT_PATH) -> RemoteTarget:
    return RemoteTarget(
        token=storage.load(TOKEN_KEY) or "",
        owner=storage.load(OWNER_KEY) or "",
        repo=storage.load(REPO_KEY) or "",
        branch=storage.load(BRANCH_KEY) or DEFAULT_BRANCH,
        path=path,
    )


def save_target(storage: KeyValueStorage, target: RemoteTarget) -> None:
    storage.save(TOKEN_KEY, target.token)
    storage.save(OWNER_KEY, target.owner)
    storage.save(REPO_KEY, target.repo)
    storage.save(BRANCH_KEY, target.branch)
    LOGGER.info("Saved GitHub settings for %s", target.describe())
