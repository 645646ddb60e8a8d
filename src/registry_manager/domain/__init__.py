"""Reconciliation of source manifests into the extension registry.

Flow of one run:
1) reconcile the source manifest into the catalog and the ledger
2) materialize every change record into blobs or tombstones
3) stage both documents and assemble the snapshot on the registry head
"""

from __future__ import annotations

from .context import RunContext
from .errors import (
    DecodeError,
    IncompatibleToolchainError,
    NotFoundError,
    RegistryError,
    StaleReferenceError,
    TransportError,
)
from .materialize import materialize, materialize_all
from .reconciliation import reconcile
from .snapshot import Snapshot, assemble_snapshot, stage_documents

__all__ = [
    "DecodeError",
    "IncompatibleToolchainError",
    "NotFoundError",
    "RegistryError",
    "RunContext",
    "Snapshot",
    "StaleReferenceError",
    "TransportError",
    "assemble_snapshot",
    "materialize",
    "materialize_all",
    "reconcile",
    "stage_documents",
]
