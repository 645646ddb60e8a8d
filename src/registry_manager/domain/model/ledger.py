"""Pydantic models for the provenance ledger (``metadata.json``)."""

from __future__ import annotations

from pydantic import Field, RootModel

from .manifest import BuiltWith, ManifestBaseModel


class ProvenanceEntry(ManifestBaseModel):
    build_time: str = Field(alias="buildTime")
    built_with: BuiltWith = Field(alias="builtWith")


ProvenanceBucket = dict[str, ProvenanceEntry]


class ProvenanceLedger(RootModel[dict[str, ProvenanceBucket]]):
    """Which extension ids each source repository currently contributes.

    Keys are repository names without their owner prefix. A repository that
    contributes nothing has no key at all.
    """

    root: dict[str, ProvenanceBucket] = Field(default_factory=dict)

    def bucket(self, key: str) -> ProvenanceBucket | None:
        return self.root.get(key)

    def ensure_bucket(self, key: str) -> ProvenanceBucket:
        return self.root.setdefault(key, {})

    def owner_of(self, extension_id: str) -> str | None:
        for key, bucket in self.root.items():
            if extension_id in bucket:
                return key
        return None

    def discard(self, key: str, extension_id: str) -> None:
        bucket = self.root.get(key)
        if bucket is None:
            return
        bucket.pop(extension_id, None)
        self.prune(key)

    def prune(self, key: str) -> bool:
        """Drop ``key`` when its bucket is empty; return whether it was dropped."""

        if key in self.root and not self.root[key]:
            del self.root[key]
            return True
        return False

    def __contains__(self, key: object) -> bool:
        return key in self.root
