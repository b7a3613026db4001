"""Read API description documents and parse them as JSON or YAML.

This module is the first stage of the import pipeline. It has two layers:

* Content parsing -- :func:`parse_document_content` turns one text blob into
  a Python value (strict JSON first, YAML second), and
  :func:`parse_documents` applies it to a whole batch, failing the batch when
  any member cannot be parsed.
* Source I/O -- :func:`load_source` reads raw text from a local file, an
  ``http(s)`` URL or stdin (``-``). :func:`source_location` gives the URL
  relative references are resolved against, and :func:`source_origin`
  derives the fallback origin used for relative server URLs.

The parsed values are handed to :mod:`specsync.parser.classifier`.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlsplit

import httpx
import yaml

from specsync.exceptions import ConnectionError_, InvalidFileFormatError, SpecParseError

logger = logging.getLogger(__name__)

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _DocumentYamlLoader(yaml.SafeLoader):
    """SafeLoader that leaves unquoted dates and timestamps as strings.

    API descriptions are JSON-shaped; ``example: 2024-01-01`` means the text
    ``"2024-01-01"``, not a :class:`datetime.date`.
    """


_DocumentYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def parse_document_content(content: str, hint: str = "") -> Optional[Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed value, or ``None`` when the content is neither JSON nor
        YAML (or is an empty YAML document).
    """
    if hint != "yaml":
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                logger.debug("Invalid JSON: %s", exc)
                return None

    try:
        return yaml.load(content, Loader=_DocumentYamlLoader)  # noqa: S506
    except yaml.YAMLError as exc:
        logger.debug("Content is neither JSON nor YAML: %s", exc)
        return None


def parse_documents(contents: Sequence[str]) -> list[Any]:
    """Parse every document of a batch.

    The batch is all-or-nothing at this stage: later stages assume each
    document is well-formed enough to classify.

    Args:
        contents: Raw text of each input document, in order.

    Returns:
        The parsed values, in input order.

    Raises:
        InvalidFileFormatError: If any document cannot be parsed.
    """
    parsed: list[Any] = []
    for index, content in enumerate(contents):
        value = parse_document_content(content)
        if value is None:
            raise InvalidFileFormatError(
                f"Document #{index + 1} is not valid JSON or YAML"
            )
        parsed.append(value)
    return parsed


# --- Source I/O ---


def load_source(source: str) -> str:
    """Read raw document text from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The raw document text.

    Raises:
        SpecParseError: If the source cannot be read or is empty.
        ConnectionError_: If a URL cannot be fetched.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def source_origin(source: str) -> Optional[str]:
    """Return ``scheme://host[:port]`` for URL sources, ``None`` otherwise."""
    if not source.startswith(("http://", "https://")):
        return None
    parts = urlsplit(source)
    if not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def source_location(source: str) -> Optional[str]:
    """Return the absolute URL *source* was read from.

    Relative ``$ref`` targets are resolved against it. Standard input has no
    location.
    """
    if source == "-":
        return None
    if source.startswith(("http://", "https://")):
        return source
    return Path(source).resolve().as_uri()


def _load_from_stdin() -> str:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return content


def _load_from_url(url: str) -> str:
    """Fetch document text from URL.

    Raises:
        SpecParseError: On an HTTP error status.
        ConnectionError_: On network-level failures.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise ConnectionError_(f"Failed to fetch document from {url}: {exc}") from exc

    return response.text


def _load_from_file(path: str) -> str:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read document {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Document is empty: {path}")
    return content
