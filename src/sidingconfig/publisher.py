"""
Publishing the configuration module to GitHub.

A publish reads the current blob SHA, renders and encodes the module, then
writes it back conditioned on that SHA so a concurrent change to the file is
rejected instead of silently overwritten. Only one publish runs at a time.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .artifact import ArtifactFormatError, decode_content, encode_content, parse_module, render_module
from .github_client import GitHubApiError, GitHubConflictError, GitHubContentsClient
from .models import Configuration
from .target import RemoteTarget

LOGGER = logging.getLogger(__name__)

DEFAULT_COMMIT_MESSAGE = "Update calculator configuration"
STATUS_CLEAR_DELAY = 3.0

SAVING_MESSAGE = "Saving to GitHub..."
SUCCESS_MESSAGE = "Successfully saved to GitHub!"
ERROR_PREFIX = "Error saving to GitHub: "
BUSY_MESSAGE = "A publish is already in progress"


class PublishState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class PublishStatus:
    state: PublishState = PublishState.IDLE
    message: str = ""

    @property
    def loading(self) -> bool:
        return self.state is PublishState.LOADING

    @property
    def error(self) -> bool:
        return self.state is PublishState.ERROR

    def as_dict(self) -> dict[str, Any]:
        return {"loading": self.loading, "message": self.message, "error": self.error}


class PublishCancelledError(RuntimeError):
    """Raised inside a publish when its cancel token has been set."""


class CancelToken:
    """Cooperative cancellation flag checked before each network call."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise PublishCancelledError("publish cancelled")


ClientFactory = Callable[[str], GitHubContentsClient]


class ConfigPublisher:
    """Single-flight publisher for the calculator configuration.

    Args:
        target: Repository location and token; replace the attribute when the
            operator saves new GitHub settings.
        client_factory: Builds a contents client for a token.
        commit_message: Message used for every commit.
        conflict_retries: Extra attempts after a stale-SHA rejection. Each
            attempt re-reads the SHA first.
        status_clear_delay: Seconds the GUI waits before clearing a success.
    """

    def __init__(
        self,
        target: RemoteTarget,
        *,
        client_factory: ClientFactory = GitHubContentsClient,
        commit_message: str = DEFAULT_COMMIT_MESSAGE,
        conflict_retries: int = 0,
        status_clear_delay: float = STATUS_CLEAR_DELAY,
    ) -> None:
        self.target = target
        self.commit_message = commit_message
        self.conflict_retries = max(0, conflict_retries)
        self.status_clear_delay = status_clear_delay
        self.status = PublishStatus()
        self.last_sha: str | None = None
        self._client_factory = client_factory
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[PublishStatus], None]] = []

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    def publish(self, configuration: Configuration, *, cancel: CancelToken | None = None) -> PublishStatus:
        """Write ``configuration`` to the target file.

        Never raises; every failure is returned as an error status and also
        stored on ``status``. A call made while another publish is in flight
        returns an error status and leaves ``status`` untouched.
        """
        if not self._lock.acquire(blocking=False):
            LOGGER.warning("Publish requested while another publish is in flight")
            return PublishStatus(PublishState.ERROR, BUSY_MESSAGE)

        try:
            target = self.target
            if not target.is_complete:
                missing = ", ".join(target.missing_fields())
                return self._set_status(PublishState.ERROR, f"{ERROR_PREFIX}missing GitHub {missing}")

            self._set_status(PublishState.LOADING, SAVING_MESSAGE)
            client = self._client_factory(target.token)
            try:
                self.last_sha = self._write(client, target, configuration, cancel)
            finally:
                client.close()
            LOGGER.info("Published configuration to %s", target.describe())
            return self._set_status(PublishState.SUCCESS, SUCCESS_MESSAGE)
        except (GitHubApiError, PublishCancelledError, ArtifactFormatError) as exc:
            LOGGER.error("Publishing to %s failed: %s", self.target.describe(), exc)
            return self._set_status(PublishState.ERROR, f"{ERROR_PREFIX}{exc}")
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Unexpected error publishing to %s", self.target.describe())
            return self._set_status(PublishState.ERROR, f"{ERROR_PREFIX}{exc}")
        finally:
            self._lock.release()

    def _write(
        self,
        client: GitHubContentsClient,
        target: RemoteTarget,
        configuration: Configuration,
        cancel: CancelToken | None,
    ) -> str | None:
        encoded = encode_content(render_module(configuration))
        attempts = self.conflict_retries + 1

        for attempt in range(1, attempts + 1):
            if cancel:
                cancel.raise_if_cancelled()
            sha = client.get_file_sha(target.owner, target.repo, target.path, ref=target.branch)
            if sha is None:
                LOGGER.debug("No existing %s on %s; creating it", target.path, target.branch)

            if cancel:
                cancel.raise_if_cancelled()
            try:
                return client.put_file(
                    target.owner,
                    target.repo,
                    target.path,
                    content=encoded,
                    message=self.commit_message,
                    branch=target.branch,
                    sha=sha,
                )
            except GitHubConflictError as exc:
                if attempt >= attempts:
                    raise
                LOGGER.warning("Write conflict (attempt %d/%d), re-reading SHA: %s", attempt, attempts, exc)
        return None

    def fetch(self, *, cancel: CancelToken | None = None) -> Configuration | None:
        """Read the configuration currently committed at the target.

        Returns:
            The parsed configuration, or None when the file does not exist yet.

        Raises:
            GitHubApiError: The read failed.
            ArtifactFormatError: The file is not a calculator config module.
        """
        target = self.target
        if not target.is_complete:
            raise GitHubApiError(f"Missing GitHub {', '.join(target.missing_fields())}")
        if cancel:
            cancel.raise_if_cancelled()

        client = self._client_factory(target.token)
        try:
            remote = client.get_file(target.owner, target.repo, target.path, ref=target.branch)
        finally:
            client.close()
        if remote is None:
            return None
        self.last_sha = remote.sha
        return parse_module(decode_content(remote.content))

    def clear_status(self) -> None:
        """Return a finished publish to idle."""
        if self.status.state in (PublishState.SUCCESS, PublishState.ERROR):
            self._set_status(PublishState.IDLE, "")

    def register_callback(self, callback: Callable[[PublishStatus], None]) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[PublishStatus], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _set_status(self, state: PublishState, message: str) -> PublishStatus:
        self.status = PublishStatus(state, message)
        for callback in list(self._callbacks):
            try:
                callback(self.status)
            except Exception:  # noqa: BLE001
                LOGGER.exception("Publish status callback failed")
        return self.status
