"""Tests for specsync.parser.loader."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from specsync.exceptions import (
    INVALID_FILE_FORMAT,
    ConnectionError_,
    InvalidFileFormatError,
    SpecParseError,
)
from specsync.parser.loader import (
    load_source,
    parse_document_content,
    parse_documents,
    source_location,
    source_origin,
)


# ---------------------------------------------------------------------------
# parse_document_content
# ---------------------------------------------------------------------------


class TestParseDocumentContent:
    """JSON first, YAML second, None when neither."""

    def test_parses_json(self) -> None:
        assert parse_document_content('{"openapi": "3.0.0"}') == {"openapi": "3.0.0"}

    def test_parses_yaml(self) -> None:
        content = textwrap.dedent("""\
            openapi: "3.0.0"
            info:
              title: YAML
        """)
        result = parse_document_content(content)
        assert result == {"openapi": "3.0.0", "info": {"title": "YAML"}}

    def test_truncated_json_is_unparseable(self) -> None:
        assert parse_document_content('{"openapi": ') is None

    def test_empty_content_is_unparseable(self) -> None:
        assert parse_document_content("") is None

    def test_json_hint_skips_yaml(self) -> None:
        assert parse_document_content("openapi: 3.0.0", hint="json") is None

    def test_yaml_hint_skips_json(self) -> None:
        assert parse_document_content('{"a": 1}', hint="yaml") == {"a": 1}

    def test_yaml_timestamps_stay_strings(self) -> None:
        content = textwrap.dedent("""\
            example:
              created: 2024-01-01T10:00:00Z
              day: 2024-01-01
            enum: [2024-01-01, 7, true]
        """)
        assert parse_document_content(content) == {
            "example": {"created": "2024-01-01T10:00:00Z", "day": "2024-01-01"},
            "enum": ["2024-01-01", 7, True],
        }


# ---------------------------------------------------------------------------
# parse_documents
# ---------------------------------------------------------------------------


class TestParseDocuments:
    """A batch is all-or-nothing."""

    def test_preserves_order(self) -> None:
        result = parse_documents(['{"n": 1}', "n: 2", '{"n": 3}'])
        assert [doc["n"] for doc in result] == [1, 2, 3]

    def test_one_bad_document_fails_the_batch(self) -> None:
        with pytest.raises(InvalidFileFormatError, match="Document #2") as exc_info:
            parse_documents(['{"n": 1}', "{ not: [valid", '{"n": 3}'])
        assert exc_info.value.code == INVALID_FILE_FORMAT

    def test_empty_batch(self) -> None:
        assert parse_documents([]) == []


# ---------------------------------------------------------------------------
# load_source
# ---------------------------------------------------------------------------


class TestLoadSource:
    """Dispatch to file, URL, or stdin."""

    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "doc.json"
        path.write_text(json.dumps({"swagger": "2.0"}), encoding="utf-8")
        assert json.loads(load_source(str(path))) == {"swagger": "2.0"}

    def test_missing_file_raises(self) -> None:
        with pytest.raises(SpecParseError, match="not found"):
            load_source("/nonexistent/path/doc.json")

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("   \n", encoding="utf-8")
        with pytest.raises(SpecParseError, match="empty"):
            load_source(str(path))

    def test_reads_stdin(self) -> None:
        with patch("specsync.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("openapi: 3.0.0\n")
            assert load_source("-") == "openapi: 3.0.0\n"

    def test_empty_stdin_raises(self) -> None:
        with patch("specsync.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("")
            with pytest.raises(SpecParseError, match="stdin"):
                load_source("-")

    def test_reads_url(self) -> None:
        response = httpx.Response(
            status_code=200,
            text="swagger: '2.0'\n",
            request=httpx.Request("GET", "https://example.com/doc.yaml"),
        )
        with patch("specsync.parser.loader.httpx.get", return_value=response) as mock_get:
            assert load_source("https://example.com/doc.yaml") == "swagger: '2.0'\n"
        mock_get.assert_called_once()

    def test_http_error_status_raises_parse_error(self) -> None:
        response = httpx.Response(
            status_code=404,
            request=httpx.Request("GET", "https://example.com/missing.json"),
        )
        with patch("specsync.parser.loader.httpx.get", return_value=response):
            with pytest.raises(SpecParseError, match="HTTP 404"):
                load_source("https://example.com/missing.json")

    def test_network_error_raises_connection_error(self) -> None:
        request = httpx.Request("GET", "https://unreachable.example.com/doc.json")
        with patch(
            "specsync.parser.loader.httpx.get",
            side_effect=httpx.ConnectError("boom", request=request),
        ):
            with pytest.raises(ConnectionError_):
                load_source("https://unreachable.example.com/doc.json")


# ---------------------------------------------------------------------------
# source_origin
# ---------------------------------------------------------------------------


class TestSourceOrigin:

    def test_url_origin(self) -> None:
        assert source_origin("https://api.example.com:8443/v1/openapi.json") == (
            "https://api.example.com:8443"
        )

    def test_file_has_no_origin(self) -> None:
        assert source_origin("openapi.json") is None

    def test_stdin_has_no_origin(self) -> None:
        assert source_origin("-") is None


# ---------------------------------------------------------------------------
# source_location
# ---------------------------------------------------------------------------


class TestSourceLocation:

    def test_url_is_kept(self) -> None:
        url = "https://api.example.com/v1/openapi.json"
        assert source_location(url) == url

    def test_relative_file_becomes_file_uri(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        expected = (tmp_path / "specs" / "openapi.json").resolve().as_uri()
        assert source_location("specs/openapi.json") == expected

    def test_stdin_has_no_location(self) -> None:
        assert source_location("-") is None
