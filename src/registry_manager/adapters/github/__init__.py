"""Public interface for the GitHub adapter."""

from __future__ import annotations

from .client import GitHubClient
from .schema import BranchPayload, ContentFilePayload, DirectoryEntryPayload

__all__ = [
    "BranchPayload",
    "ContentFilePayload",
    "DirectoryEntryPayload",
    "GitHubClient",
]
