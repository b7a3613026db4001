"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specsync.exceptions.SpecsyncError` subclass.

Example::

    $ specsync sync broken.yaml
    $ echo $?
    8   # EXIT_IMPORT_FAILED -- no document in the batch could be imported
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_CONNECTION_ERROR = 6
"""A source URL could not be fetched (timeout, DNS failure, connection refused)."""

EXIT_SPEC_PARSE_ERROR = 7
"""A source document could not be read."""

EXIT_IMPORT_FAILED = 8
"""The batch could not be converted (unparseable or unrecognisable documents)."""

EXIT_BACKEND_ERROR = 9
"""The validation/dereference backend failed in a way that could not be recovered."""
