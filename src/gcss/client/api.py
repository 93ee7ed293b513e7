"""HTTP client for the remote content store.

This module provides:
- ContentStore: the protocol the sync engine depends on
- ContentStoreClient: implementation over the GitHub contents API
- RemoteObject, RemoteEntry, PutResult: what the store returns

Every object is addressed by a path inside the repository and carries a
content hash (the git blob SHA). Writes are compare-and-swap: the caller
passes the hash it last observed and the store rejects the write if the
object changed in between.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from gcss.core.config import RemoteConfig

logger = logging.getLogger(__name__)

EMPTY_REPOSITORY_MESSAGE = "This repository is empty."


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(APIError):
    """Authentication failed (bad token or missing permissions)."""


class NotFoundError(APIError):
    """Resource not found."""


class RepositoryEmptyError(NotFoundError):
    """The repository exists but has no commits yet."""


class TransportError(APIError):
    """Request never got a response (connection failure or timeout)."""


@dataclass
class RemoteObject:
    """A file fetched from the store.

    ``exists`` is False (and the other fields empty) when the path has no
    object yet.
    """

    path: str
    exists: bool
    content: bytes = b""
    content_hash: str | None = None

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass
class RemoteEntry:
    """One entry of a directory listing."""

    name: str
    path: str
    type: str  # "file" or "dir"
    content_hash: str
    size: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RemoteEntry:
        """Create from API response dictionary."""
        return cls(
            name=data["name"],
            path=data["path"],
            type=data["type"],
            content_hash=data["sha"],
            size=data.get("size", 0),
        )

    @property
    def is_file(self) -> bool:
        return self.type == "file"


@dataclass
class PutResult:
    """Result of a compare-and-swap write."""

    ok: bool
    new_hash: str | None = None
    conflict: bool = False
    message: str = ""


class ContentStore(Protocol):
    """What the sync engine needs from the remote store."""

    def get(self, path: str) -> RemoteObject: ...

    def put(
        self,
        path: str,
        content: bytes,
        expected_hash: str | None,
        message: str,
    ) -> PutResult: ...

    def list(self, path: str) -> list[RemoteEntry]: ...


def commit_message(text: str) -> str:
    """Prefix a commit message with the current UTC time."""
    return f"{datetime.now(UTC).isoformat(timespec='milliseconds')}: {text}"


class ContentStoreClient:
    """HTTP client for a GitHub repository's contents API."""

    def __init__(self, config: RemoteConfig) -> None:
        """Initialize the client.

        Args:
            config: Remote configuration (repository, token, timeout).
        """
        self._config = config
        self._client = httpx.Client(
            base_url=config.repo_url,
            timeout=config.timeout,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {config.token}",
            },
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> ContentStoreClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {url} timed out") from e
        except httpx.RequestError as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Handle API response and raise appropriate exceptions."""
        if response.status_code in (401, 403):
            raise AuthenticationError(
                "Access denied. Check the access token and its repository permissions.",
                response.status_code,
            )
        if response.status_code == 404:
            detail = _detail(response, "Resource not found")
            if detail == EMPTY_REPOSITORY_MESSAGE:
                raise RepositoryEmptyError(detail, 404)
            raise NotFoundError(detail, 404)
        if response.status_code >= 400:
            raise APIError(_detail(response, "Unknown error"), response.status_code)
        return response

    @staticmethod
    def _contents_url(path: str) -> str:
        path = path.strip("/")
        if not path:
            return "/contents"
        return f"/contents/{quote(path, safe='/')}"

    # === Reads ===

    def get(self, path: str) -> RemoteObject:
        """Fetch a file and its content hash.

        Args:
            path: Path of the file inside the repository.

        Returns:
            RemoteObject, with ``exists=False`` if there is no such file.

        Raises:
            APIError: If the path is a directory or the request fails.
        """
        try:
            response = self._handle_response(
                self._request("GET", self._contents_url(path))
            )
        except NotFoundError:
            return RemoteObject(path=path, exists=False)

        data = response.json()
        if isinstance(data, list) or data.get("type") != "file":
            raise APIError(f"{path} is not a file")

        sha = data["sha"]
        if data.get("encoding") == "base64":
            content = base64.b64decode(data.get("content", ""))
        else:
            # Contents API leaves large files empty; the blob API still serves them
            content = self._get_blob(sha)
        logger.debug(f"Fetched {path} ({len(content)} bytes, {sha[:8]})")
        return RemoteObject(path=path, exists=True, content=content, content_hash=sha)

    def _get_blob(self, sha: str) -> bytes:
        response = self._handle_response(self._request("GET", f"/git/blobs/{sha}"))
        data = response.json()
        return base64.b64decode(data.get("content", ""))

    def list(self, path: str) -> list[RemoteEntry]:
        """List a directory.

        Args:
            path: Directory path ("" for the repository root).

        Returns:
            Directory entries.

        Raises:
            NotFoundError: If the directory does not exist.
            RepositoryEmptyError: If the repository has no commits.
        """
        response = self._handle_response(
            self._request("GET", self._contents_url(path))
        )
        data = response.json()
        if not isinstance(data, list):
            raise APIError(f"{path} is not a directory")
        entries = [RemoteEntry.from_dict(e) for e in data]
        logger.debug(f"Listed {path or '/'}: {[e.name for e in entries]}")
        return entries

    # === Writes ===

    def put(
        self,
        path: str,
        content: bytes,
        expected_hash: str | None,
        message: str,
    ) -> PutResult:
        """Create or replace a file, guarded by its last observed hash.

        Args:
            path: Path of the file inside the repository.
            content: New file content.
            expected_hash: Hash observed before the write, None to create.
            message: Commit message.

        Returns:
            PutResult. ``conflict`` is True when the object no longer has
            ``expected_hash`` (or already exists when creating).

        Raises:
            APIError: On any other failure.
        """
        body: dict[str, Any] = {
            "message": message,
            "committer": self._config.committer,
            "content": base64.b64encode(content).decode("ascii"),
        }
        if expected_hash is not None:
            body["sha"] = expected_hash

        response = self._request("PUT", self._contents_url(path), json=body)
        if _is_conflict(response):
            detail = _detail(response, "Conflict")
            logger.debug(f"Rejected write to {path}: {detail}")
            return PutResult(ok=False, conflict=True, message=detail)

        response = self._handle_response(response)
        new_hash = response.json()["content"]["sha"]
        logger.debug(f"Wrote {path} ({len(content)} bytes, {new_hash[:8]})")
        return PutResult(ok=True, new_hash=new_hash)


def _detail(response: httpx.Response, default: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return default
    if isinstance(data, dict):
        return str(data.get("message", default))
    return default


def _is_conflict(response: httpx.Response) -> bool:
    # GitHub answers 409 for a stale sha and 422 when sha is missing for an
    # existing file.
    if response.status_code == 409:
        return True
    if response.status_code == 422:
        return "sha" in _detail(response, "").lower()
    return False
