"""Abstract interface for validation/dereference backends.

The import pipeline only ever talks to a :class:`DocumentBackend`. Which
implementation sits behind it (an out-of-process worker or in-process
calls) is decided once, when the caller builds the backend with
:func:`specsync.backends.create_backend`.

Backends are caller-owned: create one, reuse it across batches, and
:meth:`~DocumentBackend.close` it on shutdown (or use it as a context
manager).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class DocumentBackend(ABC):
    """Validates and dereferences API description documents.

    Both operations are coroutines and must not mutate the document they
    are given. Failures are reported as
    :class:`~specsync.exceptions.BackendError`; the pipeline decides from
    its ``recoverable`` flag whether to keep the pre-stage document.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in log messages (e.g. ``"direct"``)."""
        ...

    @abstractmethod
    async def validate(self, document: dict[str, Any]) -> dict[str, Any]:
        """Return the validated document.

        Raises:
            ValidationFailedError: If the document is invalid.
            BackendClosedError: If the backend has been closed.
        """
        ...

    @abstractmethod
    async def dereference(
        self, document: dict[str, Any], location: Optional[str] = None
    ) -> dict[str, Any]:
        """Return a copy of *document* with every ``$ref`` resolved.

        *location* is the absolute URL the document was read from; external
        references are only followed when it is known.

        Raises:
            DereferenceError: If a reference cannot be resolved.
            WorkerTimeoutError: If the worker did not answer in time.
            BackendClosedError: If the backend has been closed.
        """
        ...

    def close(self) -> None:
        """Release resources. Further calls raise ``BackendClosedError``."""

    def __enter__(self) -> DocumentBackend:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
