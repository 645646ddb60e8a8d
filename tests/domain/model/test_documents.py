from __future__ import annotations

import json

import pytest

from registry_manager.domain.documents import dump_document, load_catalog, load_ledger
from registry_manager.domain.errors import DecodeError
from registry_manager.domain.model import ProvenanceLedger, VersionCatalog
from tests.support.manifests import dumps, extension_payload, manifest_payload, provenance


def test_catalog_indexes_sources_by_id_and_keeps_order() -> None:
    catalog = load_catalog(
        dumps(manifest_payload(extension_payload("B"), extension_payload("A")))
    )

    assert catalog.ids == ["B", "A"]
    assert catalog.sources["A"].version == "1.0.0"
    assert catalog.built_with.types == "0.9.0"


def test_catalog_serializes_sources_as_list() -> None:
    catalog = load_catalog(dumps(manifest_payload(extension_payload("A"))))

    document = json.loads(dump_document(catalog))

    assert isinstance(document["sources"], list)
    assert document["sources"][0]["id"] == "A"
    assert document["sources"][0]["contentRating"] == "EVERYONE"
    assert document["buildTime"] == "2024-05-01T10:00:00.000Z"
    assert document["builtWith"] == {"toolchain": "1.0.0", "types": "0.9.0"}


def test_dump_document_is_pretty_printed_with_trailing_newline() -> None:
    text = dump_document(VersionCatalog())

    assert text.endswith("}\n")
    assert '\n  "buildTime": ""' in text


def test_duplicate_ids_keep_the_later_entry() -> None:
    payload = manifest_payload(
        extension_payload("A", version="1.0.0"),
        extension_payload("B"),
        extension_payload("A", version="2.0.0"),
    )

    catalog = load_catalog(dumps(payload))

    assert catalog.ids == ["B", "A"]
    assert catalog.sources["A"].version == "2.0.0"


def test_capabilities_accept_single_value_and_list() -> None:
    payload = manifest_payload(
        extension_payload("single", capabilities=3),
        extension_payload("many", capabilities=[1, 2]),
        extension_payload("none", capabilities=None),
    )

    catalog = load_catalog(dumps(payload))

    assert catalog.sources["single"].capabilities == 3
    assert catalog.sources["many"].capabilities == [1, 2]
    assert catalog.sources["none"].capabilities is None
    document = json.loads(dump_document(catalog))
    assert document["sources"][0]["capabilities"] == 3
    assert document["sources"][1]["capabilities"] == [1, 2]


def test_capabilities_reject_values_outside_a_byte() -> None:
    with pytest.raises(DecodeError):
        load_catalog(dumps(manifest_payload(extension_payload("A", capabilities=300))))


def test_unknown_extension_fields_survive_a_round_trip() -> None:
    payload = manifest_payload(extension_payload("A", homepage="https://example.com"))

    document = json.loads(dump_document(load_catalog(dumps(payload))))

    assert document["sources"][0]["homepage"] == "https://example.com"


def test_optional_badges_and_developers_keep_their_nulls() -> None:
    payload = manifest_payload(
        extension_payload(
            "A",
            badges=[None, {"label": "18+", "textColor": "#fff", "backgroundColor": "#f00"}],
            developers=[None],
        )
    )

    extension = load_catalog(dumps(payload)).sources["A"]

    assert extension.badges[0] is None
    badge = extension.badges[1]
    assert badge is not None
    assert badge.text_color == "#fff"
    assert extension.developers == [None]


def test_template_detection_uses_name_suffix() -> None:
    catalog = load_catalog(
        dumps(
            manifest_payload(
                extension_payload("T", name="ExtensionTemplate"),
                extension_payload("X", name="Templates"),
            )
        )
    )

    assert catalog.sources["T"].is_template
    assert not catalog.sources["X"].is_template


def test_malformed_catalog_raises_decode_error() -> None:
    with pytest.raises(DecodeError):
        load_catalog("{not json")
    with pytest.raises(DecodeError):
        load_catalog(dumps({"sources": [{"name": "missing id"}]}))


def test_ledger_round_trip_and_pruning() -> None:
    payload = {"general-extensions": {"A": provenance()}, "other": {"B": provenance()}}

    ledger = load_ledger(dumps(payload))

    assert ledger.owner_of("B") == "other"
    ledger.discard("other", "B")
    assert "other" not in ledger
    assert ledger.owner_of("B") is None
    assert json.loads(dump_document(ledger)) == {"general-extensions": {"A": provenance()}}


def test_ensure_bucket_then_prune_leaves_empty_ledger() -> None:
    ledger = ProvenanceLedger()

    ledger.ensure_bucket("repo")

    assert ledger.prune("repo") is True
    assert ledger.root == {}
    assert ledger.prune("repo") is False
