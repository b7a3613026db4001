"""Recognise OpenAPI/Swagger documents and tag them with their dialect.

Classification is deliberately lenient. A value is accepted when it is an
object with a ``paths`` member and any of:

* a ``swagger`` string (Swagger 2.0),
* an ``openapi`` string (OpenAPI 3.0 or 3.1),
* an ``info`` member (last-resort heuristic for malformed documents).

The dialect is computed once here and every later stage branches on
:attr:`ClassifiedDocument.dialect` instead of re-inspecting the document.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Any, Optional

from specsync.exceptions import InvalidFileFormatError

logger = logging.getLogger(__name__)


class Dialect(str, enum.Enum):
    """The schema dialect a document is interpreted with."""

    SWAGGER_2 = "swagger-2.0"
    OPENAPI_3_0 = "openapi-3.0"
    OPENAPI_3_1 = "openapi-3.1"

    @property
    def is_openapi3(self) -> bool:
        return self is not Dialect.SWAGGER_2


@dataclass(frozen=True)
class ClassifiedDocument:
    """A document confirmed to look like an API description.

    Not a pydantic model: after dereferencing, ``document`` may contain
    cyclic object graphs that must be passed around untouched.
    """

    dialect: Dialect
    document: dict[str, Any]
    location: Optional[str] = None

    def with_document(self, document: dict[str, Any]) -> ClassifiedDocument:
        """Return a copy carrying *document*, keeping the dialect."""
        return replace(self, document=document)

    @property
    def title(self) -> str:
        info = self.document.get("info")
        if isinstance(info, dict) and info.get("title") is not None:
            return str(info["title"])
        return "Untitled API"


def classify_document(value: Any) -> Optional[ClassifiedDocument]:
    """Classify one parsed value.

    Args:
        value: A parsed JSON/YAML value.

    Returns:
        The :class:`ClassifiedDocument`, or ``None`` when the value does not
        look like an API description.
    """
    if not isinstance(value, dict) or "paths" not in value:
        return None

    swagger = value.get("swagger")
    if isinstance(swagger, str):
        return ClassifiedDocument(Dialect.SWAGGER_2, value)

    openapi = value.get("openapi")
    if isinstance(openapi, str):
        dialect = Dialect.OPENAPI_3_1 if openapi.startswith("3.1") else Dialect.OPENAPI_3_0
        return ClassifiedDocument(dialect, value)

    if "info" in value:
        return ClassifiedDocument(_guess_dialect(value), value)

    return None


def classify_documents(
    values: Sequence[Any], locations: Optional[Sequence[Optional[str]]] = None
) -> list[ClassifiedDocument]:
    """Classify a batch, dropping (and logging) unrecognised members.

    *locations*, when given, holds where each value was read from (see
    :func:`specsync.parser.loader.source_location`) and is kept on the
    classified document.

    Raises:
        InvalidFileFormatError: If no document in the batch is recognised.
    """
    classified: list[ClassifiedDocument] = []
    for index, value in enumerate(values):
        doc = classify_document(value)
        if doc is None:
            logger.warning(
                "Document #%d is not an OpenAPI/Swagger document, skipping", index + 1
            )
            continue
        logger.debug("Document #%d classified as %s", index + 1, doc.dialect.value)
        if locations is not None:
            doc = replace(doc, location=locations[index])
        classified.append(doc)

    if not classified:
        raise InvalidFileFormatError("No OpenAPI/Swagger document found in the batch")
    return classified


def _guess_dialect(value: dict[str, Any]) -> Dialect:
    """Pick a dialect for a document without a version marker.

    OpenAPI 3 only structures win; everything else is read with Swagger 2.0
    rules.
    """
    if "servers" in value or "components" in value:
        return Dialect.OPENAPI_3_0

    paths = value.get("paths")
    if isinstance(paths, dict):
        for path_item in paths.values():
            if not isinstance(path_item, dict):
                continue
            for operation in path_item.values():
                if isinstance(operation, dict) and "requestBody" in operation:
                    return Dialect.OPENAPI_3_0

    return Dialect.SWAGGER_2
