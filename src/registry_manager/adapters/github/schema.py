"""Pydantic models describing the GitHub REST API payloads."""

from __future__ import annotations

import base64
import binascii

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from registry_manager.domain.errors import DecodeError


class GitHubBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ContentFilePayload(GitHubBaseModel):
    type: str
    name: str
    path: str
    sha: str
    size: int = 0
    encoding: str | None = None
    content: str | None = None

    @property
    def is_inline(self) -> bool:
        """Files above 1 MB come back without content (``encoding == "none"``)."""

        return self.encoding == "base64" and self.content is not None

    def decoded(self) -> bytes:
        return decode_base64(self.content or "", label=self.path)


class DirectoryEntryPayload(GitHubBaseModel):
    type: str
    name: str
    path: str
    sha: str


DirectoryListing = TypeAdapter(list[DirectoryEntryPayload])


class BlobPayload(GitHubBaseModel):
    sha: str
    encoding: str
    content: str

    def decoded(self) -> bytes:
        return decode_base64(self.content, label=self.sha)


class ShaPayload(GitHubBaseModel):
    sha: str


class CommitTree(GitHubBaseModel):
    sha: str


class CommitDetail(GitHubBaseModel):
    tree: CommitTree


class BranchCommit(GitHubBaseModel):
    sha: str
    commit: CommitDetail


class BranchPayload(GitHubBaseModel):
    name: str
    commit: BranchCommit


class ErrorPayload(GitHubBaseModel):
    message: str = ""
    documentation_url: str | None = Field(default=None)


def decode_base64(value: str, *, label: str) -> bytes:
    try:
        return base64.b64decode(value.replace("\n", ""), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Invalid base64 content for {label}") from exc
