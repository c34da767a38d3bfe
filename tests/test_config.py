from __future__ import annotations

import logging
from pathlib import Path

import pytest

from sidingconfig.config import AppConfig, _expand_env, build_config, load_config
from sidingconfig.github_client import DEFAULT_API_URL
from sidingconfig.target import RemoteTarget


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_file(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = load_config()
    assert config == AppConfig()
    assert config.github.api_url == DEFAULT_API_URL
    assert config.github.path == "config.js"
    assert config.gui.status_clear_delay == 3.0


def test_explicit_missing_file_is_an_error(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_load_full_file(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("SIDING_STORAGE", str(tmp_path / "store.json"))
    path = _write(
        tmp_path / "sidingconfig.yaml",
        """
github:
  api_url: https://github.example.com/api/v3
  path: /public/config.js
  timeout: 5
  max_retries: 1
  backoff_factor: 0.1
  commit_message: Rates update
  conflict_retries: 2
storage:
  path: $SIDING_STORAGE
gui:
  host: 127.0.0.1
  port: 9000
  status_clear_delay: 1.5
""",
    )

    config = load_config(path)

    assert config.github.api_url == "https://github.example.com/api/v3"
    assert config.github.path == "public/config.js"
    assert config.github.timeout == 5.0
    assert config.github.max_retries == 1
    assert config.github.commit_message == "Rates update"
    assert config.github.conflict_retries == 2
    assert config.storage.path == tmp_path / "store.json"
    assert config.gui.host == "127.0.0.1"
    assert config.gui.port == 9000
    assert config.gui.status_clear_delay == 1.5


@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"github": {"timeout": "soon"}}, "'github.timeout' must be a number"),
        ({"github": {"max_retries": "many"}}, "'github.max_retries' must be an integer"),
        ({"github": {"max_retries": True}}, "'github.max_retries' must be an integer"),
        ({"github": {"conflict_retries": -1}}, "'github.conflict_retries' must not be negative"),
        ({"github": {"api_url": "ftp://example.com"}}, "'github.api_url' must be a valid"),
        ({"gui": {"port": 70000}}, "'gui.port' must be between"),
        ({"github": ["not", "a", "mapping"]}, "'github' must be provided as a mapping"),
    ],
)
def test_invalid_values(data, message) -> None:
    with pytest.raises(ValueError, match=message):
        build_config(data)


def test_top_level_must_be_mapping(tmp_path) -> None:
    path = _write(tmp_path / "bad.yaml", "- one\n- two\n")
    with pytest.raises(ValueError, match="mapping at the top level"):
        load_config(path)


def test_build_publisher_uses_settings() -> None:
    config = build_config({"github": {"commit_message": "Rates", "conflict_retries": 1}, "gui": {"status_clear_delay": 2}})
    target = RemoteTarget(token="t", owner="o", repo="r")

    publisher = config.build_publisher(target)

    assert publisher.target is target
    assert publisher.commit_message == "Rates"
    assert publisher.conflict_retries == 1
    assert publisher.status_clear_delay == 2.0


def test_storage_secret_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("SIDINGCONFIG_STORAGE_SECRET", "s3cret-value")
    config = build_config(_expand_env({"gui": {"storage_secret": "$SIDINGCONFIG_STORAGE_SECRET"}}))
    assert config.gui.ensure_storage_secret() == "s3cret-value"


def test_storage_secret_unset_variable_is_rejected(monkeypatch) -> None:
    monkeypatch.delenv("SIDINGCONFIG_STORAGE_SECRET", raising=False)
    with pytest.raises(ValueError, match="'gui.storage_secret' references an unset environment variable"):
        build_config(_expand_env({"gui": {"storage_secret": "$SIDINGCONFIG_STORAGE_SECRET"}}))


def test_missing_storage_secret_is_generated(caplog) -> None:
    gui = AppConfig().gui
    assert gui.storage_secret is None

    with caplog.at_level(logging.WARNING, logger="sidingconfig.config"):
        secret = gui.ensure_storage_secret()

    assert len(secret) >= 32
    assert gui.ensure_storage_secret() == secret
    assert AppConfig().gui.ensure_storage_secret() != secret
    assert "No gui.storage_secret configured" in caplog.text


def test_build_storage(tmp_path) -> None:
    config = build_config({"storage": {"path": str(tmp_path / "s.json")}})
    assert config.build_storage().path == tmp_path / "s.json"
