"""``specsync sync`` -- import API descriptions into a collection file.

Each SOURCE is a file path, an ``http(s)`` URL or ``-`` for stdin. The
resulting collection array is written as pretty JSON, atomically, to the
configured output path (``collection.json`` by default) or to stdout with
``-o -``.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import typer

from specsync.backends import create_backend
from specsync.config import atomic_write, resolve_settings
from specsync.exceptions import InvalidUsageError, SpecsyncError
from specsync.importer import import_documents_sync
from specsync.mock.randomness import FakerRandomness
from specsync.models import BackendMode, CollectionModel, ImportSettings, dump_collections
from specsync.output import error, get_output, print_data, success
from specsync.parser.loader import load_source, source_location, source_origin


def run_import(sources: Sequence[str], settings: ImportSettings) -> list[CollectionModel]:
    """Load *sources* and run the import pipeline with *settings*.

    When no fallback base URL is configured, the origin of the first URL
    source is used.

    Raises:
        InvalidUsageError: If stdin ('-') is listed more than once.
    """
    if list(sources).count("-") > 1:
        raise InvalidUsageError("Standard input ('-') can only be given once")
    contents = [load_source(source) for source in sources]

    fallback = settings.fallback_base_url
    if fallback is None:
        fallback = next(
            (origin for origin in map(source_origin, sources) if origin), None
        )

    randomness = FakerRandomness(
        seed=settings.seed, pattern_timeout=settings.pattern_timeout
    )
    with create_backend(settings.backend, settings.worker_timeout) as backend:
        return import_documents_sync(
            contents,
            fallback,
            backend=backend,
            randomness=randomness,
            locations=[source_location(source) for source in sources],
        )


def sync_command(
    sources: list[str] = typer.Argument(
        ..., help="Document file paths, http(s) URLs, or '-' for stdin."
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output file, '-' for stdout. [default: collection.json]"
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Origin for relative or missing server URLs."
    ),
    backend: Optional[BackendMode] = typer.Option(
        None, "--backend", help="Where validation and dereferencing run."
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Seed for reproducible example values."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug log output."
    ),
) -> None:
    """Import API description documents and write the request collection.

    Example::

        specsync sync petstore.yaml -o petstore.json
        specsync sync https://example.com/openapi.json --backend direct -o -
    """
    if verbose:
        get_output().configure_logging(verbose=True)

    try:
        settings = resolve_settings(
            backend=backend,
            seed=seed,
            fallback_base_url=base_url,
            output=output,
        )
        collections = run_import(sources, settings)
        payload = json.dumps(dump_collections(collections), indent=2, ensure_ascii=False)

        if settings.output == "-":
            print_data(payload)
            return

        path = Path(settings.output)
        atomic_write(path, payload + "\n")
    except SpecsyncError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    requests = sum(len(list(c.iter_requests())) for c in collections)
    success(f"Wrote {len(collections)} collection(s), {requests} request(s) to {path}")
