"""Exception hierarchy for specsync.

All exceptions inherit from :class:`SpecsyncError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specsync.exit_codes`.
The top-level error handler in :func:`specsync.app.main` catches
``SpecsyncError`` and exits with the appropriate code.

Two families carry a machine-readable ``code`` as well:

* :class:`ImportFailedError` -- the whole batch failed. ``code`` is the error
  tag returned to the host (``invalid_file_format`` or ``deref_error``).
* :class:`BackendError` -- a validation/dereference backend call failed.
  ``recoverable`` tells the pipeline whether to fall back to the pre-stage
  document or to abort.

Subclass hierarchy::

    SpecsyncError (exit 1)
    +-- InvalidUsageError         (exit 2)
    +-- ConnectionError_          (exit 6)
    +-- SpecParseError            (exit 7)
    +-- ImportFailedError         (exit 8)
    |   +-- InvalidFileFormatError
    |   +-- DereferenceFailedError
    +-- BackendError              (exit 9)
    |   +-- ValidationFailedError
    |   +-- DereferenceError
    |   +-- WorkerTimeoutError
    |   +-- BackendClosedError
    +-- ConfigError               (exit 1)
"""

from specsync.exit_codes import (
    EXIT_BACKEND_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_IMPORT_FAILED,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
)

INVALID_FILE_FORMAT = "invalid_file_format"
DEREF_ERROR = "deref_error"
COULD_NOT_VALIDATE = "could_not_validate"
COULD_NOT_DEREFERENCE = "could_not_dereference"


class SpecsyncError(Exception):
    """Base exception for all specsync errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecsyncError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConnectionError_(SpecsyncError):
    """Raised when a source URL cannot be fetched.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(SpecsyncError):
    """Raised when a source document cannot be read from disk, URL or stdin."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ImportFailedError(SpecsyncError):
    """Raised when a whole batch fails to import.

    The ``code`` attribute is the error tag reported to the caller.
    """

    exit_code = EXIT_IMPORT_FAILED
    code: str = INVALID_FILE_FORMAT


class InvalidFileFormatError(ImportFailedError):
    """A document in the batch is unparseable, or no document looks like OpenAPI."""

    code = INVALID_FILE_FORMAT


class DereferenceFailedError(ImportFailedError):
    """The dereference stage could not run at all for the batch."""

    code = DEREF_ERROR


class BackendError(SpecsyncError):
    """Raised by a validation/dereference backend.

    Args:
        message: Human-readable error description.
        code: Stage error code (``could_not_validate`` or
            ``could_not_dereference``).
        recoverable: When ``True`` the pipeline keeps the pre-stage document
            instead of failing.
    """

    exit_code = EXIT_BACKEND_ERROR
    code: str = COULD_NOT_DEREFERENCE
    recoverable: bool = True

    def __init__(
        self,
        message: str,
        code: str | None = None,
        recoverable: bool | None = None,
    ):
        super().__init__(message)
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable


class ValidationFailedError(BackendError):
    """The backend reported the document as invalid."""

    code = COULD_NOT_VALIDATE


class DereferenceError(BackendError):
    """The backend could not resolve the document's ``$ref`` pointers."""

    code = COULD_NOT_DEREFERENCE


class WorkerTimeoutError(BackendError):
    """The worker did not answer within the configured round-trip timeout."""


class BackendClosedError(BackendError):
    """The backend was used after :meth:`close`."""

    recoverable = False


class ConfigError(SpecsyncError):
    """Raised for configuration problems (invalid JSON, bad setting values)."""

    exit_code = EXIT_GENERIC_FAILURE
