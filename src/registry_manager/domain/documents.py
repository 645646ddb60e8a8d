"""JSON codec for the two registry documents."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ValidationError

from .errors import DecodeError
from .model import ProvenanceLedger, VersionCatalog

CATALOG_FILENAME: Final[str] = "versioning.json"
LEDGER_FILENAME: Final[str] = "metadata.json"


def load_catalog(payload: bytes | str) -> VersionCatalog:
    return _load(VersionCatalog, payload, CATALOG_FILENAME)


def load_ledger(payload: bytes | str) -> ProvenanceLedger:
    return _load(ProvenanceLedger, payload, LEDGER_FILENAME)


def dump_document(document: VersionCatalog | ProvenanceLedger) -> str:
    """Serialize a document the way it is stored: two-space indent, trailing newline."""

    return document.model_dump_json(by_alias=True, indent=2) + "\n"


def _load[M: BaseModel](model: type[M], payload: bytes | str, name: str) -> M:
    try:
        return model.model_validate_json(payload)
    except ValidationError as exc:
        raise DecodeError(f"Malformed {name}: {exc}") from exc
