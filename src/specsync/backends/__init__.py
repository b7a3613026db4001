"""Validation/dereference backends.

The pipeline depends only on :class:`DocumentBackend`. Build one with
:func:`create_backend` and close it when the host shuts down.
"""

from __future__ import annotations

import logging
from typing import Union

from specsync.backends.base import DocumentBackend
from specsync.backends.direct import DirectBackend
from specsync.backends.worker import WorkerBackend
from specsync.exceptions import ConfigError
from specsync.models import BackendMode

logger = logging.getLogger(__name__)

__all__ = ["DocumentBackend", "DirectBackend", "WorkerBackend", "create_backend"]


def create_backend(
    mode: Union[BackendMode, str] = BackendMode.AUTO,
    worker_timeout: float = 30.0,
) -> DocumentBackend:
    """Build the backend for *mode*.

    ``auto`` starts a worker process right away and falls back to
    :class:`DirectBackend` when that is not possible. ``worker`` spawns
    lazily and degrades to in-process execution on its own.

    Raises:
        ConfigError: If *mode* is not a known backend name.
    """
    try:
        mode = BackendMode(mode)
    except ValueError:
        choices = ", ".join(m.value for m in BackendMode)
        raise ConfigError(f"Unknown backend '{mode}'. Choose one of: {choices}") from None

    if mode is BackendMode.DIRECT:
        return DirectBackend()
    if mode is BackendMode.WORKER:
        return WorkerBackend(timeout=worker_timeout)

    backend = WorkerBackend(timeout=worker_timeout)
    try:
        backend.start()
    except (OSError, RuntimeError) as exc:
        logger.warning("Worker backend unavailable (%s); using direct backend", exc)
        backend.close()
        return DirectBackend()
    return backend
