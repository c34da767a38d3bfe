from __future__ import annotations

import functools
import logging
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .github_client import DEFAULT_API_URL, GitHubContentsClient, validate_api_url
from .publisher import DEFAULT_COMMIT_MESSAGE, STATUS_CLEAR_DELAY, ConfigPublisher
from .target import DEFAULT_PATH, JsonFileStorage, RemoteTarget

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("sidingconfig.yaml")
DEFAULT_STORAGE_PATH = Path("~/.sidingconfig/storage.json")


@dataclass
class GitHubSettings:
    api_url: str = DEFAULT_API_URL
    path: str = DEFAULT_PATH
    timeout: float = 15.0
    max_retries: int = 3
    backoff_factor: float = 0.5
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    conflict_retries: int = 0


@dataclass
class StorageSettings:
    path: Path = DEFAULT_STORAGE_PATH


@dataclass
class GUISettings:
    host: str = "0.0.0.0"
    port: int = 8080
    status_clear_delay: float = STATUS_CLEAR_DELAY
    storage_secret: str | None = None

    def ensure_storage_secret(self) -> str:
        """Return the browser-storage secret, generating one when none is configured.

        A generated secret lasts for this process only, so saved GitHub
        settings in the browser are lost when the editor restarts.
        """
        if not self.storage_secret:
            LOGGER.warning(
                "No gui.storage_secret configured; using a random secret. "
                "Browser-stored GitHub settings will not survive a restart."
            )
            self.storage_secret = secrets.token_urlsafe(32)
        return self.storage_secret


@dataclass
class AppConfig:
    github: GitHubSettings = field(default_factory=GitHubSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    gui: GUISettings = field(default_factory=GUISettings)

    def build_storage(self) -> JsonFileStorage:
        return JsonFileStorage(self.storage.path)

    def build_publisher(self, target: RemoteTarget) -> ConfigPublisher:
        factory = functools.partial(
            GitHubContentsClient,
            api_url=self.github.api_url,
            timeout=self.github.timeout,
            max_retries=self.github.max_retries,
            backoff_factor=self.github.backoff_factor,
        )
        return ConfigPublisher(
            target,
            client_factory=factory,
            commit_message=self.github.commit_message,
            conflict_retries=self.github.conflict_retries,
            status_clear_delay=self.gui.status_clear_delay,
        )


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: _expand_env(val) for key, val in value.items()}
    return value


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' must be provided as a mapping when specified")
    return section


def _number(section: dict[str, Any], key: str, default: float, *, field_name: str) -> float:
    try:
        value = float(section.get(key, default))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"'{field_name}' must be a number") from exc
    if value < 0:
        raise ValueError(f"'{field_name}' must not be negative")
    return value


def _integer(section: dict[str, Any], key: str, default: int, *, field_name: str) -> int:
    raw = section.get(key, default)
    if isinstance(raw, bool):
        raise ValueError(f"'{field_name}' must be an integer")
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"'{field_name}' must be an integer") from exc
    if value < 0:
        raise ValueError(f"'{field_name}' must not be negative")
    return value


def _build_github_settings(data: dict[str, Any]) -> GitHubSettings:
    if not data:
        return GitHubSettings()

    api_url = str(data.get("api_url") or DEFAULT_API_URL).strip()
    if not validate_api_url(api_url):
        raise ValueError(f"'github.api_url' must be a valid http/https URL, got: {api_url}")

    path = str(data.get("path") or DEFAULT_PATH).strip().lstrip("/")
    if not path:
        raise ValueError("'github.path' must not be empty")

    return GitHubSettings(
        api_url=api_url,
        path=path,
        timeout=_number(data, "timeout", 15.0, field_name="github.timeout"),
        max_retries=_integer(data, "max_retries", 3, field_name="github.max_retries"),
        backoff_factor=_number(data, "backoff_factor", 0.5, field_name="github.backoff_factor"),
        commit_message=str(data.get("commit_message") or DEFAULT_COMMIT_MESSAGE),
        conflict_retries=_integer(data, "conflict_retries", 0, field_name="github.conflict_retries"),
    )


def _build_gui_settings(data: dict[str, Any]) -> GUISettings:
    if not data:
        return GUISettings()

    port = _integer(data, "port", 8080, field_name="gui.port")
    if not 0 < port < 65536:
        raise ValueError(f"'gui.port' must be between 1 and 65535, got: {port}")

    storage_secret = str(data.get("storage_secret") or "").strip() or None
    if storage_secret and storage_secret.startswith("$"):
        raise ValueError(f"'gui.storage_secret' references an unset environment variable: {storage_secret}")

    return GUISettings(
        host=str(data.get("host") or "0.0.0.0"),
        port=port,
        status_clear_delay=_number(data, "status_clear_delay", STATUS_CLEAR_DELAY, field_name="gui.status_clear_delay"),
        storage_secret=storage_secret,
    )


def build_config(data: dict[str, Any]) -> AppConfig:
    storage = _section(data, "storage")
    storage_path = storage.get("path")
    return AppConfig(
        github=_build_github_settings(_section(data, "github")),
        storage=StorageSettings(path=Path(storage_path)) if storage_path else StorageSettings(),
        gui=_build_gui_settings(_section(data, "gui")),
    )


def load_config(path: Path | None = None) -> AppConfig:
    """Load the editor configuration.

    A missing file at the default location yields the built-in defaults; a
    missing file that was asked for explicitly is an error.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return AppConfig()
        path = DEFAULT_CONFIG_PATH

    with Path(path).open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError("Configuration file must contain a mapping at the top level")
    return build_config(_expand_env(data))
