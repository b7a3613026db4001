"""``specsync inspect`` -- preview the requests an import would produce.

Runs the full import pipeline on one source and lists every request with
its folder, method, name and endpoint. Nothing is written to disk.
"""

from __future__ import annotations

from typing import Optional

import typer

from specsync.commands.sync import run_import
from specsync.config import resolve_settings
from specsync.exceptions import SpecsyncError
from specsync.models import BackendMode
from specsync.output import error, get_output


def inspect_command(
    source: str = typer.Argument(..., help="Document file path, http(s) URL, or '-'."),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Origin for relative or missing server URLs."
    ),
    backend: Optional[BackendMode] = typer.Option(
        None, "--backend", help="Where validation and dereferencing run."
    ),
) -> None:
    """List the requests converted from an API description.

    Example::

        specsync inspect petstore.yaml
        specsync --json inspect https://example.com/openapi.json
    """
    try:
        settings = resolve_settings(backend=backend, fallback_base_url=base_url)
        collections = run_import([source], settings)
    except SpecsyncError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    output = get_output()
    headers = ["Folder", "Method", "Name", "Endpoint"]
    for collection in collections:
        rows = [
            [folder or "-", request.method, request.name, request.endpoint]
            for folder, request in collection.iter_requests()
        ]
        output.print_table(
            headers, rows, title=f"{collection.name} -- Requests ({len(rows)})"
        )
