"""Change records produced by reconciliation and consumed by snapshot assembly."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class ChangeKind(StrEnum):
    ADDITION = "addition"
    UPDATE = "update"
    DELETION = "deletion"


@dataclass(slots=True, kw_only=True)
class ChangeRecord:
    """One classified mutation for one extension id.

    ``files`` maps a repository path to a blob sha. ``None`` is a tombstone: the
    path has to disappear from the next snapshot.
    """

    extension_id: str
    kind: ChangeKind
    files: dict[str, str | None] = field(default_factory=dict)

    def record(self, path: str, sha: str | None) -> None:
        self.files[path] = sha

    @property
    def tombstones(self) -> list[str]:
        return [path for path, sha in self.files.items() if sha is None]


type ChangeSet = list[ChangeRecord]
