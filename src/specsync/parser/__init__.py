"""Document parser -- load, classify, and dereference API descriptions.

This sub-package is responsible for the first half of the specsync pipeline:
turning raw document text (JSON or YAML) into :class:`ClassifiedDocument`
objects tagged with their dialect, with ``$ref`` pointers resolved.

Typical usage::

    from specsync.parser import parse_documents, classify_documents

    docs = classify_documents(parse_documents([text]))

Sub-modules:

* :mod:`~specsync.parser.loader` -- I/O layer (URL, file, stdin) plus
  JSON/YAML detection.
* :mod:`~specsync.parser.classifier` -- dialect detection (Swagger 2.0,
  OpenAPI 3.0, OpenAPI 3.1).
* :mod:`~specsync.parser.resolver` -- ``$ref`` resolution and the
  unresolved-reference scan.
"""

from specsync.parser.classifier import (
    ClassifiedDocument,
    Dialect,
    classify_document,
    classify_documents,
)
from specsync.parser.loader import (
    load_source,
    parse_documents,
    source_location,
    source_origin,
)
from specsync.parser.resolver import dereference_document, has_unresolved_refs

__all__ = [
    "ClassifiedDocument",
    "Dialect",
    "classify_document",
    "classify_documents",
    "load_source",
    "parse_documents",
    "source_location",
    "source_origin",
    "dereference_document",
    "has_unresolved_refs",
]
