"""Documents and records handled during a publish run."""

from __future__ import annotations

from .changes import ChangeKind, ChangeRecord, ChangeSet
from .ledger import ProvenanceBucket, ProvenanceEntry, ProvenanceLedger
from .manifest import (
    TEMPLATE_SUFFIX,
    Badge,
    BuiltWith,
    Developer,
    Extension,
    RepositoryInfo,
    VersionCatalog,
)

__all__ = [
    "TEMPLATE_SUFFIX",
    "Badge",
    "BuiltWith",
    "ChangeKind",
    "ChangeRecord",
    "ChangeSet",
    "Developer",
    "Extension",
    "ProvenanceBucket",
    "ProvenanceEntry",
    "ProvenanceLedger",
    "RepositoryInfo",
    "VersionCatalog",
]
