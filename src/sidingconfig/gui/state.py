"""
Per-browser editor state.

``EditorState`` bundles the configuration store, the publisher and the
storage adapter for one client so the page code receives everything it
needs as a single object.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nicegui import app

from ..publisher import CancelToken, ConfigPublisher, PublishStatus
from ..store import ConfigurationStore
from ..target import KeyValueStorage, RemoteTarget, load_target, save_target

if TYPE_CHECKING:
    from ..config import AppConfig

LOGGER = logging.getLogger(__name__)


class UserStorage:
    """Key/value storage backed by NiceGUI's per-browser ``app.storage.user``."""

    def load(self, key: str) -> str | None:
        value = app.storage.user.get(key)
        return None if value is None else str(value)

    def save(self, key: str, value: str) -> None:
        app.storage.user[key] = value


@dataclass
class EditorState:
    store: ConfigurationStore
    publisher: ConfigPublisher
    storage: KeyValueStorage
    _cancel: CancelToken | None = field(default=None, repr=False)

    @classmethod
    def create(cls, app_config: AppConfig, storage: KeyValueStorage) -> EditorState:
        target = load_target(storage, path=app_config.github.path)
        return cls(
            store=ConfigurationStore(),
            publisher=app_config.build_publisher(target),
            storage=storage,
        )

    @property
    def target(self) -> RemoteTarget:
        return self.publisher.target

    def update_target(self, target: RemoteTarget) -> None:
        """Persist new GitHub settings and use them for the next publish."""
        save_target(self.storage, target)
        self.publisher.target = target

    async def publish(self) -> PublishStatus:
        """Run the publish protocol on a worker thread."""
        cancel = CancelToken()
        self._cancel = cancel
        snapshot = self.store.current
        loop = asyncio.get_running_loop()
        try:
            status = await loop.run_in_executor(
                None, functools.partial(self.publisher.publish, snapshot, cancel=cancel)
            )
        finally:
            if self._cancel is cancel:
                self._cancel = None
        if not status.error:
            self.store.mark_published(snapshot)
        return status

    async def pull(self) -> bool:
        """Replace the edited configuration with the committed one.

        Returns:
            False when no configuration has been committed yet.
        """
        loop = asyncio.get_running_loop()
        configuration = await loop.run_in_executor(None, self.publisher.fetch)
        if configuration is None:
            return False
        self.store.load(configuration)
        return True

    def cancel_publish(self) -> bool:
        if self._cancel is None:
            return False
        self._cancel.cancel()
        return True
