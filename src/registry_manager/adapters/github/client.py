"""HTTP client for the GitHub contents and git database APIs."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Self
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from registry_manager.adapters.http_resilience import ResilientClient
from registry_manager.domain.errors import (
    DecodeError,
    NotFoundError,
    StaleReferenceError,
    TransportError,
)
from registry_manager.domain.ports import BranchHead, DirectoryEntry, FileContent

from .schema import (
    BlobPayload,
    BranchPayload,
    ContentFilePayload,
    DirectoryListing,
    ErrorPayload,
    ShaPayload,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import TracebackType

    from registry_manager.config.github import GitHubConfig
    from registry_manager.config.http_resilience import ResilienceConfig
    from registry_manager.domain.ports import BlobEncoding, CommitAuthor, TreeEntry

log = getLogger(__name__)

_FAST_FORWARD_REJECTION = "not a fast forward"


class GitHubClient:
    """Implements the content store port on top of the GitHub REST API.

    Use as an async context manager; one underlying HTTP client serves the whole run.
    """

    def __init__(
        self,
        *,
        config: GitHubConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> Self:
        self._client = self._client_factory(self._resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_file(self, repository: str, path: str, ref: str) -> FileContent:
        payload = await self._get_contents(repository, path, ref)
        if isinstance(payload, list):
            raise DecodeError(f"Expected a file at {repository}:{path}, got a directory")
        content = _validate(ContentFilePayload, payload)
        if content.type != "file":
            raise DecodeError(f"Expected a file at {repository}:{path}, got {content.type}")
        if content.is_inline:
            return FileContent(path=content.path, data=content.decoded())

        log.debug(f"{repository}:{path} is too large for the contents API, reading blob")
        blob = _validate(
            BlobPayload,
            await self._request_json("GET", f"/repos/{repository}/git/blobs/{content.sha}"),
        )
        return FileContent(path=content.path, data=blob.decoded())

    async def list_directory(self, repository: str, path: str, ref: str) -> list[DirectoryEntry]:
        payload = await self._get_contents(repository, path, ref)
        if not isinstance(payload, list):
            raise DecodeError(f"Expected a directory at {repository}:{path}, got a file")
        try:
            entries = DirectoryListing.validate_python(payload)
        except ValidationError as exc:
            raise DecodeError(f"Malformed directory listing for {repository}:{path}") from exc
        return [DirectoryEntry(path=entry.path, type=entry.type) for entry in entries]

    async def get_branch_head(self, repository: str, branch: str) -> BranchHead:
        payload = await self._request_json(
            "GET",
            f"/repos/{repository}/branches/{quote(branch, safe='')}",
            not_found=(repository, branch),
        )
        branch_payload = _validate(BranchPayload, payload)
        return BranchHead(
            commit_sha=branch_payload.commit.sha,
            tree_sha=branch_payload.commit.commit.tree.sha,
        )

    async def create_blob(
        self, repository: str, content: bytes | str, encoding: BlobEncoding
    ) -> str:
        body = content.decode("ascii") if isinstance(content, bytes) else content
        payload = await self._request_json(
            "POST",
            f"/repos/{repository}/git/blobs",
            json={"content": body, "encoding": encoding},
        )
        return _validate(ShaPayload, payload).sha

    async def create_tree(
        self, repository: str, base_tree: str, entries: Sequence[TreeEntry]
    ) -> str:
        tree = [
            {"path": entry.path, "mode": entry.mode, "type": entry.type, "sha": entry.sha}
            for entry in entries
        ]
        payload = await self._request_json(
            "POST",
            f"/repos/{repository}/git/trees",
            json={"base_tree": base_tree, "tree": tree},
        )
        return _validate(ShaPayload, payload).sha

    async def create_commit(
        self,
        repository: str,
        *,
        message: str,
        tree: str,
        parent: str,
        author: CommitAuthor,
    ) -> str:
        payload = await self._request_json(
            "POST",
            f"/repos/{repository}/git/commits",
            json={
                "message": message,
                "tree": tree,
                "parents": [parent],
                "author": {"name": author.name, "email": author.email},
            },
        )
        return _validate(ShaPayload, payload).sha

    async def update_reference(self, repository: str, branch: str, commit_sha: str) -> None:
        response = await self._send(
            "PATCH",
            f"/repos/{repository}/git/refs/heads/{branch}",
            json={"sha": commit_sha, "force": False},
        )
        if _is_stale_rejection(response):
            raise StaleReferenceError(
                f"GitHub rejected the update of {repository}@{branch}: {_error_message(response)}"
            )
        _raise_for_status(response)

    async def _get_contents(self, repository: str, path: str, ref: str) -> object:
        return await self._request_json(
            "GET",
            f"/repos/{repository}/contents/{quote(path)}",
            params={"ref": ref},
            not_found=(repository, path),
        )

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json: object = None,
        not_found: tuple[str, str] | None = None,
    ) -> object:
        response = await self._send(method, url, params=params, json=json)
        if response.status_code == httpx.codes.NOT_FOUND and not_found is not None:
            repository, path = not_found
            raise NotFoundError(
                f"{repository}:{path} does not exist", repository=repository, path=path
            )
        _raise_for_status(response)
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"{method} {url} returned a non-JSON body") from exc

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json: object = None,
    ) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("GitHubClient must be used as an async context manager")
        log.debug(f"{method} {url}")
        try:
            return await self._client.request(method, url, params=params, json=json)
        except httpx.TimeoutException as exc:
            raise TransportError(f"{method} {url} timed out") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc


def _is_stale_rejection(response: httpx.Response) -> bool:
    """409, or the 422 GitHub sends when the branch moved; other 422s are plain errors."""

    if response.status_code == httpx.codes.CONFLICT:
        return True
    if response.status_code != httpx.codes.UNPROCESSABLE_ENTITY:
        return False
    return _FAST_FORWARD_REJECTION in _error_message(response).lower()


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    request = response.request
    raise TransportError(
        f"{request.method} {request.url} returned {response.status_code}: "
        f"{_error_message(response)}",
        status_code=response.status_code,
    )


def _error_message(response: httpx.Response) -> str:
    try:
        return ErrorPayload.model_validate(response.json()).message or response.reason_phrase
    except (ValueError, ValidationError):
        return response.reason_phrase


def _validate[M: BaseModel](model: type[M], payload: object) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"Unexpected GitHub payload for {model.__name__}: {exc}") from exc
