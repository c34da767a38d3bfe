from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote, urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

LOGGER = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
GITHUB_MEDIA_TYPE = "application/vnd.github.v3+json"

# Default retry configuration
DEFAULT_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.5
RETRY_STATUS_CODES = frozenset({500, 502, 503, 504})


class GitHubApiError(RuntimeError):
    """Raised when a GitHub API request is rejected."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubConflictError(GitHubApiError):
    """Raised when a write carries a stale or missing blob SHA."""


class GitHubNetworkError(GitHubApiError):
    """Raised when a request never produced an HTTP response."""


def validate_api_url(url: Optional[str]) -> bool:
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or response.reason or f"HTTP {response.status_code}"
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.reason or f"HTTP {response.status_code}"


def _is_sha_conflict(response: requests.Response, message: str) -> bool:
    if response.status_code == 409:
        return True
    return response.status_code == 422 and "sha" in message.lower()


@dataclass(slots=True)
class RemoteFile:
    path: str
    sha: str
    content: str  # base64, as returned by the API


class GitHubContentsClient:
    """Thin wrapper around the repository contents endpoints.

    GET requests are retried with exponential backoff on 5xx responses and
    connection failures. PUT responses are never replayed by the transport:
    a rejected write has to be retried by the caller with a fresh SHA.
    """

    def __init__(
        self,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
        max_retries: int = DEFAULT_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    ) -> None:
        if not validate_api_url(api_url):
            raise GitHubApiError(f"Invalid GitHub API URL: {api_url}")
        try:
            token.encode("latin-1")
        except UnicodeEncodeError as exc:
            # requests encodes header values as latin-1
            raise GitHubApiError("GitHub token contains characters that cannot be sent in a header") from exc

        self.api_url = api_url.rstrip("/")
        self.token = token
        self.timeout = timeout

        self.session = session or requests.Session()
        if session is None:
            retry_strategy = Retry(
                total=max_retries,
                backoff_factor=backoff_factor,
                status_forcelist=list(RETRY_STATUS_CODES),
                allowed_methods=["GET"],
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

    def _contents_url(self, owner: str, repo: str, path: str) -> str:
        return f"{self.api_url}/repos/{quote(owner)}/{quote(repo)}/contents/{quote(path.lstrip('/'), safe='/')}"

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        headers = {
            "Authorization": f"token {self.token}",
            "Accept": GITHUB_MEDIA_TYPE,
        }
        LOGGER.debug("GitHub %s %s", method.upper(), url)
        try:
            return self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise GitHubNetworkError(f"GitHub request failed: {exc}") from exc

    def get_file(self, owner: str, repo: str, path: str, *, ref: Optional[str] = None) -> Optional[RemoteFile]:
        """Fetch file metadata and content, or None when the file does not exist."""
        params = {"ref": ref} if ref else None
        response = self._request("GET", self._contents_url(owner, repo, path), params=params)
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise GitHubApiError(_error_message(response), status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise GitHubApiError(
                f"Failed to parse GitHub response as JSON ({response.status_code})",
                status_code=response.status_code,
            ) from exc
        if not isinstance(payload, dict) or not payload.get("sha"):
            raise GitHubApiError(f"'{path}' is not a file", status_code=response.status_code)
        return RemoteFile(path=path, sha=str(payload["sha"]), content=str(payload.get("content") or ""))

    def get_file_sha(self, owner: str, repo: str, path: str, *, ref: Optional[str] = None) -> Optional[str]:
        """Return the current blob SHA, or None when it cannot be determined.

        None means the next write creates the file.
        """
        try:
            remote = self.get_file(owner, repo, path, ref=ref)
        except GitHubApiError as exc:
            LOGGER.warning("Error getting file SHA for %s/%s:%s: %s", owner, repo, path, exc)
            return None
        return remote.sha if remote else None

    def put_file(
        self,
        owner: str,
        repo: str,
        path: str,
        *,
        content: str,
        message: str,
        branch: str,
        sha: Optional[str] = None,
    ) -> Optional[str]:
        """Create or update a file and return the new blob SHA.

        Args:
            content: Base64-encoded file body.
            sha: Blob SHA the write is based on; omitted when creating the file.

        Raises:
            GitHubConflictError: The file changed since ``sha`` was read.
            GitHubApiError: Any other non-success response.
            GitHubNetworkError: The request did not complete.
        """
        body: Dict[str, Any] = {"message": message, "content": content, "branch": branch}
        if sha:
            body["sha"] = sha

        response = self._request("PUT", self._contents_url(owner, repo, path), json=body)
        if response.status_code >= 400:
            reason = _error_message(response)
            if _is_sha_conflict(response, reason):
                raise GitHubConflictError(reason, status_code=response.status_code)
            raise GitHubApiError(reason, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError:
            return None
        return (payload.get("content") or {}).get("sha")

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> GitHubContentsClient:
        return self

    def __exit__(self, *args) -> None:
        self.close()
