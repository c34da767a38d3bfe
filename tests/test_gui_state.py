from __future__ import annotations

import asyncio

import pytest

from sidingconfig.config import AppConfig
from sidingconfig.gui.state import EditorState
from sidingconfig.models import default_configuration
from sidingconfig.store import add_material
from sidingconfig.target import OWNER_KEY, MemoryStorage, RemoteTarget

from helpers import FakeContentsClient


@pytest.fixture
def contents_client(monkeypatch):
    client = FakeContentsClient()
    monkeypatch.setattr("sidingconfig.config.GitHubContentsClient", lambda token, **kwargs: client)
    return client


@pytest.fixture
def state(contents_client) -> EditorState:
    storage = MemoryStorage(
        {"githubToken": "ghp_1", "githubOwner": "acme", "githubRepo": "rates", "githubBranch": "main"}
    )
    return EditorState.create(AppConfig(), storage)


def test_create_loads_saved_target(state) -> None:
    assert state.target == RemoteTarget("ghp_1", "acme", "rates", "main", "config.js")
    assert state.store.current == default_configuration()


def test_update_target_persists(state) -> None:
    state.update_target(RemoteTarget("ghp_2", "other", "rates", "dev"))

    assert state.storage.load(OWNER_KEY) == "other"
    assert state.publisher.target.branch == "dev"


def test_publish_marks_store_clean(state, contents_client) -> None:
    state.store.current = add_material(state.store.current, "metal")
    assert state.store.is_modified

    status = asyncio.run(state.publish())

    assert status.error is False
    assert len(contents_client.puts) == 1
    assert not state.store.is_modified


def test_failed_publish_keeps_changes(state) -> None:
    state.publisher.target = RemoteTarget()
    state.store.current = add_material(state.store.current, "metal")

    status = asyncio.run(state.publish())

    assert status.error is True
    assert state.store.is_modified


def test_pull_replaces_configuration(state, contents_client) -> None:
    published = add_material(default_configuration(), "metal")
    state.publisher.publish(published)

    assert asyncio.run(state.pull()) is True
    assert state.store.current == published


def test_pull_without_commit(state) -> None:
    assert asyncio.run(state.pull()) is False
    assert state.store.current == default_configuration()


def test_cancel_without_publish(state) -> None:
    assert state.cancel_publish() is False
