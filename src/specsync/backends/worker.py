"""Out-of-process backend.

A child process (``spawn`` start method) is connected to the parent by a
:func:`multiprocessing.Pipe`. Every call is one request/response pair::

    -> {"type": "validate" | "dereference", "docs": <document>,
        "location": <absolute URL or None>}
    <- {"type": "VALIDATION_RESULT" | "DEREFERENCE_RESULT",
        "data": {"ok": True, "value": <document>}}
    <- {"type": ..., "data": {"ok": False, "error": "<message>"}}

There are no request IDs, so round trips are serialized with a lock. Each
round trip is bounded by ``timeout`` seconds; on expiry the child is
terminated (a fresh one is spawned on the next call) and the call fails with
a recoverable :class:`~specsync.exceptions.WorkerTimeoutError`.

If the child cannot be started, or exits while a request is in flight, the
backend logs a warning and handles the remaining calls in-process through
the same :func:`handle_message` the child runs.
"""

from __future__ import annotations

import asyncio
import logging
import multiprocessing
import threading
from multiprocessing.connection import Connection
from typing import Any, Optional

from openapi_spec_validator import validate as validate_spec

from specsync.backends.base import DocumentBackend
from specsync.exceptions import (
    COULD_NOT_DEREFERENCE,
    COULD_NOT_VALIDATE,
    BackendClosedError,
    BackendError,
    DereferenceError,
    ValidationFailedError,
    WorkerTimeoutError,
)
from specsync.parser.resolver import dereference_document

logger = logging.getLogger(__name__)

VALIDATE = "validate"
DEREFERENCE = "dereference"
VALIDATION_RESULT = "VALIDATION_RESULT"
DEREFERENCE_RESULT = "DEREFERENCE_RESULT"

_REPLY_TYPES = {VALIDATE: VALIDATION_RESULT, DEREFERENCE: DEREFERENCE_RESULT}
_ERRORS: dict[str, type[BackendError]] = {
    VALIDATE: ValidationFailedError,
    DEREFERENCE: DereferenceError,
}
_CODES = {VALIDATE: COULD_NOT_VALIDATE, DEREFERENCE: COULD_NOT_DEREFERENCE}

_JOIN_TIMEOUT = 2.0


# --------------------------------------------------------------------------- #
# Worker side
# --------------------------------------------------------------------------- #


def handle_message(message: Any) -> dict[str, Any]:
    """Answer one request message. Runs inside the worker process.

    Failures are reported in the reply rather than raised, so one bad
    document never takes the worker down.
    """
    msg_type = message.get("type") if isinstance(message, dict) else None
    if msg_type not in _REPLY_TYPES:
        return {"type": "ERROR", "data": {"ok": False, "error": f"Unknown message type: {msg_type!r}"}}

    document = message.get("docs")
    try:
        if msg_type == VALIDATE:
            validate_spec(document)
            value = document
        else:
            value = dereference_document(document, message.get("location"))
    except Exception as exc:
        return {
            "type": _REPLY_TYPES[msg_type],
            "data": {"ok": False, "error": f"{type(exc).__name__}: {exc}"},
        }
    return {"type": _REPLY_TYPES[msg_type], "data": {"ok": True, "value": value}}


def _worker_main(conn: Connection) -> None:
    """Child process entry point: serve requests until the pipe closes."""
    while True:
        try:
            message = conn.recv()
        except (EOFError, OSError):
            break
        if message is None:
            break
        conn.send(handle_message(message))
    conn.close()


# --------------------------------------------------------------------------- #
# Parent side
# --------------------------------------------------------------------------- #


class WorkerBackend(DocumentBackend):
    """Delegates validation and dereferencing to a child process.

    Args:
        timeout: Seconds to wait for each reply before the worker is killed.

    Example::

        with WorkerBackend(timeout=10) as backend:
            collections = import_documents_sync([text], backend=backend)
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout
        self._context = multiprocessing.get_context("spawn")
        self._lock = threading.Lock()
        self._process: Optional[multiprocessing.process.BaseProcess] = None
        self._conn: Optional[Connection] = None
        self._in_process = False
        self._closed = False

    @property
    def name(self) -> str:
        return "worker"

    @property
    def in_process(self) -> bool:
        """``True`` once the backend has degraded to in-process execution."""
        return self._in_process

    def start(self) -> None:
        """Spawn the worker now instead of on first use.

        Raises:
            OSError: If the child process cannot be created.
        """
        with self._lock:
            self._spawn()

    async def validate(self, document: dict[str, Any]) -> dict[str, Any]:
        return await asyncio.to_thread(self._call, VALIDATE, document)

    async def dereference(
        self, document: dict[str, Any], location: Optional[str] = None
    ) -> dict[str, Any]:
        return await asyncio.to_thread(self._call, DEREFERENCE, document, location)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            if self._conn is not None:
                try:
                    self._conn.send(None)
                except (OSError, ValueError) as exc:
                    logger.debug("Worker pipe already closed: %s", exc)
            self._stop(graceful=True)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _call(
        self, msg_type: str, document: dict[str, Any], location: Optional[str] = None
    ) -> dict[str, Any]:
        message = {"type": msg_type, "docs": document, "location": location}
        with self._lock:
            if self._closed:
                raise BackendClosedError("Backend 'worker' has been closed")
            if not self._ensure_worker():
                return _unwrap(msg_type, handle_message(message))

            assert self._conn is not None
            try:
                self._conn.send(message)
                if not self._conn.poll(self._timeout):
                    logger.warning(
                        "Worker did not answer '%s' within %.1fs; restarting it",
                        msg_type,
                        self._timeout,
                    )
                    self._stop(graceful=False)
                    raise WorkerTimeoutError(
                        f"Worker timed out after {self._timeout}s",
                        code=_CODES[msg_type],
                    )
                reply = self._conn.recv()
            except (EOFError, OSError) as exc:
                logger.warning("Worker process exited (%s); continuing in-process", exc)
                self._stop()
                self._in_process = True
                reply = handle_message(message)

        return _unwrap(msg_type, reply)

    def _ensure_worker(self) -> bool:
        if self._in_process:
            return False
        if self._process is not None and self._process.is_alive():
            return True
        if self._process is not None:
            logger.warning(
                "Worker process exited with code %s; continuing in-process",
                self._process.exitcode,
            )
            self._stop()
            self._in_process = True
            return False
        try:
            self._spawn()
        except OSError as exc:
            logger.warning("Cannot start worker process (%s); continuing in-process", exc)
            self._in_process = True
            return False
        return True

    def _spawn(self) -> None:
        if self._process is not None:
            return
        parent_conn, child_conn = self._context.Pipe()
        process = self._context.Process(
            target=_worker_main, args=(child_conn,), name="specsync-worker", daemon=True
        )
        process.start()
        child_conn.close()
        self._process, self._conn = process, parent_conn
        logger.debug("Started worker process pid=%s", process.pid)

    def _stop(self, graceful: bool = True) -> None:
        process, conn = self._process, self._conn
        self._process, self._conn = None, None
        if conn is not None:
            conn.close()
        if process is not None:
            if graceful:
                process.join(_JOIN_TIMEOUT)
            if process.is_alive():
                process.terminate()
                process.join(_JOIN_TIMEOUT)


def _unwrap(msg_type: str, reply: Any) -> dict[str, Any]:
    data = reply.get("data") if isinstance(reply, dict) else None
    if not isinstance(data, dict):
        raise _ERRORS[msg_type](f"Malformed worker reply: {reply!r}")
    if data.get("ok"):
        return data["value"]
    raise _ERRORS[msg_type](str(data.get("error") or "Worker reported a failure"))
