"""Batch import pipeline.

One call converts an ordered batch of raw document texts into one
:class:`~specsync.models.CollectionModel` per classifiable document::

    parse -> classify -> validate -> dereference -> convert

Each stage finishes for the whole batch before the next begins, and within
the asynchronous stages documents are awaited one after another so the
output order always matches the input order.

Failure policy:

* Any unparseable text, or a batch where nothing classifies, fails the whole
  call with :class:`~specsync.exceptions.InvalidFileFormatError`.
* A recoverable :class:`~specsync.exceptions.BackendError` during
  validation or dereferencing keeps that document's pre-stage version.
* A backend that is closed mid-batch cannot dereference anything; that
  surfaces as :class:`~specsync.exceptions.DereferenceFailedError`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Optional

from specsync.backends.base import DocumentBackend
from specsync.backends.direct import DirectBackend
from specsync.converter.collection import convert_documents
from specsync.exceptions import BackendError, DereferenceFailedError
from specsync.mock.randomness import RandomnessProvider
from specsync.models import CollectionModel
from specsync.parser.classifier import ClassifiedDocument, classify_documents
from specsync.parser.loader import parse_documents
from specsync.parser.resolver import has_unresolved_refs

logger = logging.getLogger(__name__)


async def import_documents(
    contents: Sequence[str],
    fallback_base_url: Optional[str] = None,
    *,
    backend: Optional[DocumentBackend] = None,
    randomness: Optional[RandomnessProvider] = None,
    locations: Optional[Sequence[Optional[str]]] = None,
) -> list[CollectionModel]:
    """Import a batch of API description documents.

    Args:
        contents: Raw JSON or YAML text, one entry per document.
        fallback_base_url: Origin used when a document's server URL is
            relative or lacks a scheme, or when none is declared.
        backend: Validation/dereference backend. The caller owns it; when
            omitted a :class:`DirectBackend` is used for this call.
        randomness: Source of random values for example bodies.
        locations: Where each text was read from, as an absolute URL or
            ``None``. Relative external references are followed from there.

    Returns:
        One collection per classifiable document, in input order.

    Raises:
        InvalidFileFormatError: If any document is unparseable or none is
            recognisably an API description.
        DereferenceFailedError: If the backend is closed during dereferencing.
    """
    if backend is None:
        backend = DirectBackend()

    docs = classify_documents(parse_documents(contents), locations)
    logger.debug("Classified %d of %d documents", len(docs), len(contents))

    docs = await _validate_all(backend, docs)
    docs = await _dereference_all(backend, docs)
    return convert_documents(docs, fallback_base_url, randomness)


def import_documents_sync(
    contents: Sequence[str],
    fallback_base_url: Optional[str] = None,
    *,
    backend: Optional[DocumentBackend] = None,
    randomness: Optional[RandomnessProvider] = None,
    locations: Optional[Sequence[Optional[str]]] = None,
) -> list[CollectionModel]:
    """Blocking wrapper around :func:`import_documents`.

    Must not be called from inside a running event loop.
    """
    return asyncio.run(
        import_documents(
            contents,
            fallback_base_url,
            backend=backend,
            randomness=randomness,
            locations=locations,
        )
    )


async def _validate_all(
    backend: DocumentBackend, docs: list[ClassifiedDocument]
) -> list[ClassifiedDocument]:
    validated = []
    for doc in docs:
        try:
            document = await backend.validate(doc.document)
        except BackendError as exc:
            if not exc.recoverable:
                raise
            logger.warning(
                "Could not validate '%s' (%s); importing it unvalidated", doc.title, exc
            )
            validated.append(doc)
            continue
        validated.append(doc.with_document(document))
    return validated


async def _dereference_all(
    backend: DocumentBackend, docs: list[ClassifiedDocument]
) -> list[ClassifiedDocument]:
    resolved = []
    for doc in docs:
        try:
            document = await backend.dereference(doc.document, doc.location)
        except BackendError as exc:
            if not exc.recoverable:
                raise DereferenceFailedError(
                    f"Dereferencing '{doc.title}' failed: {exc}"
                ) from exc
            if has_unresolved_refs(doc.document):
                logger.warning(
                    "Could not dereference '%s' (%s); using the original document",
                    doc.title,
                    exc,
                )
            resolved.append(doc)
            continue
        resolved.append(doc.with_document(document))
    return resolved
