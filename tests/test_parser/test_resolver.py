"""Tests for specsync.parser.resolver."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path

import pytest

from specsync.exceptions import DereferenceError
from specsync.parser.resolver import dereference_document, has_unresolved_refs


def _doc_with_pet_ref() -> dict:
    return {
        "openapi": "3.0.0",
        "paths": {
            "/pets": {
                "get": {
                    "responses": {
                        "200": {
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": "#/components/schemas/Pet"}
                                }
                            }
                        }
                    }
                }
            }
        },
        "components": {
            "schemas": {
                "Pet": {"type": "object", "properties": {"name": {"type": "string"}}}
            }
        },
    }


class TestDereferenceDocument:
    """Resolution of internal references."""

    def test_resolves_internal_ref(self) -> None:
        resolved = dereference_document(_doc_with_pet_ref())
        schema = resolved["paths"]["/pets"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]
        assert schema == {"type": "object", "properties": {"name": {"type": "string"}}}
        assert not has_unresolved_refs(resolved)

    def test_does_not_mutate_input(self) -> None:
        doc = _doc_with_pet_ref()
        before = copy.deepcopy(doc)
        dereference_document(doc)
        assert doc == before

    def test_recursive_ref_becomes_cycle(self) -> None:
        doc = {
            "components": {
                "schemas": {
                    "Node": {
                        "type": "object",
                        "properties": {"child": {"$ref": "#/components/schemas/Node"}},
                    }
                }
            }
        }
        resolved = dereference_document(doc)
        node = resolved["components"]["schemas"]["Node"]
        assert node["properties"]["child"]["properties"]["child"] is node
        assert not has_unresolved_refs(resolved)

    def test_shared_target_is_inlined_everywhere(self) -> None:
        doc = {
            "defs": {"Pet": {"type": "object"}},
            "a": {"$ref": "#/defs/Pet"},
            "b": [{"$ref": "#/defs/Pet"}],
        }
        resolved = dereference_document(doc)
        assert resolved["a"] == resolved["b"][0] == {"type": "object"}

    def test_ref_to_ref(self) -> None:
        doc = {"defs": {"A": {"$ref": "#/defs/B"}, "B": {"type": "integer"}}, "x": {"$ref": "#/defs/A"}}
        assert dereference_document(doc)["x"] == {"type": "integer"}

    def test_pointer_escaping_and_list_index(self) -> None:
        doc = {
            "paths": {"/pets": {"parameters": [{"name": "limit", "in": "query"}]}},
            "x": {"$ref": "#/paths/~1pets/parameters/0"},
        }
        assert dereference_document(doc)["x"] == {"name": "limit", "in": "query"}

    def test_sibling_keys_are_ignored(self) -> None:
        doc = {"defs": {"A": {"type": "string"}}, "x": {"$ref": "#/defs/A", "description": "ignored"}}
        assert dereference_document(doc)["x"] == {"type": "string"}

    def test_missing_target_raises(self) -> None:
        doc = {"a": {"$ref": "#/components/schemas/Missing"}}
        with pytest.raises(DereferenceError, match="Cannot resolve"):
            dereference_document(doc)

    def test_bad_list_index_raises(self) -> None:
        doc = {"items": [1], "a": {"$ref": "#/items/7"}}
        with pytest.raises(DereferenceError, match="Cannot resolve"):
            dereference_document(doc)

    def test_reference_loop_raises(self) -> None:
        doc = {"defs": {"A": {"$ref": "#/defs/B"}, "B": {"$ref": "#/defs/A"}}}
        with pytest.raises(DereferenceError, match="circular"):
            dereference_document(doc)


class TestExternalReferences:
    """References into other files, with and without a known location."""

    def _write(self, path: Path, value: dict) -> Path:
        path.write_text(json.dumps(value), encoding="utf-8")
        return path

    def _mixed_doc(self, external: str) -> dict:
        doc = _doc_with_pet_ref()
        doc["components"]["schemas"]["Thing"] = {"$ref": external}
        return doc

    def test_external_ref_without_location_is_kept(self) -> None:
        resolved = dereference_document(self._mixed_doc("other.json#/Thing"))
        schema = resolved["paths"]["/pets"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]
        assert schema["type"] == "object"
        assert resolved["components"]["schemas"]["Thing"] == {"$ref": "other.json#/Thing"}
        assert has_unresolved_refs(resolved)

    def test_relative_file_ref_is_followed(self, tmp_path: Path) -> None:
        thing = {"type": "object", "properties": {"label": {"type": "string"}}}
        self._write(tmp_path / "other.json", {"Thing": thing})
        main = self._write(tmp_path / "main.json", self._mixed_doc("other.json#/Thing"))

        resolved = dereference_document(json.loads(main.read_text()), main.as_uri())
        assert resolved["components"]["schemas"]["Thing"] == thing
        assert resolved["paths"]["/pets"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]["type"] == "object"
        assert not has_unresolved_refs(resolved)

    def test_unreadable_external_ref_keeps_internal_resolution(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        main = self._write(tmp_path / "main.json", self._mixed_doc("missing.json#/Thing"))

        with caplog.at_level(logging.WARNING, logger="specsync"):
            resolved = dereference_document(json.loads(main.read_text()), main.as_uri())
        assert resolved["paths"]["/pets"]["get"]["responses"]["200"]["content"][
            "application/json"
        ]["schema"]["type"] == "object"
        assert resolved["components"]["schemas"]["Thing"] == {"$ref": "missing.json#/Thing"}
        assert "Could not follow external references" in caplog.text

    def test_missing_internal_target_still_raises_with_location(self, tmp_path: Path) -> None:
        main = self._write(tmp_path / "main.json", {"a": {"$ref": "#/nope"}})
        with pytest.raises(DereferenceError, match="Cannot resolve"):
            dereference_document(json.loads(main.read_text()), main.as_uri())


class TestHasUnresolvedRefs:
    """Cycle-safe scan for leftover $ref keys."""

    def test_detects_nested_ref(self) -> None:
        assert has_unresolved_refs({"a": [{"b": {"$ref": "#/x"}}]})

    def test_clean_document(self) -> None:
        assert not has_unresolved_refs({"a": [1, "two", {"b": None}]})

    def test_non_string_ref_is_ignored(self) -> None:
        assert not has_unresolved_refs({"properties": {"$ref": {"type": "string"}}})

    def test_terminates_on_cycles(self) -> None:
        node: dict = {"type": "object", "properties": {}}
        node["properties"]["self"] = node
        loop: list = []
        loop.append(loop)
        assert not has_unresolved_refs({"node": node, "loop": loop})

    def test_scalar_input(self) -> None:
        assert not has_unresolved_refs("$ref")
