"""In-process backend.

Validation is a passthrough: hosts without a worker are expected to have
validated the document before handing it over. Dereferencing is real and
uses :func:`specsync.parser.resolver.dereference_document`, which runs
prance's reference resolver.
"""

from __future__ import annotations

from typing import Any, Optional

from specsync.backends.base import DocumentBackend
from specsync.exceptions import BackendClosedError
from specsync.parser.resolver import dereference_document


class DirectBackend(DocumentBackend):
    """Runs every stage in the calling process."""

    def __init__(self) -> None:
        self._closed = False

    @property
    def name(self) -> str:
        return "direct"

    async def validate(self, document: dict[str, Any]) -> dict[str, Any]:
        self._check_open()
        return document

    async def dereference(
        self, document: dict[str, Any], location: Optional[str] = None
    ) -> dict[str, Any]:
        self._check_open()
        return dereference_document(document, location)

    def close(self) -> None:
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise BackendClosedError("Backend 'direct' has been closed")
