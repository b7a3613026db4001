"""specsync -- Turn OpenAPI/Swagger documents into executable request collections.

This package imports one or more API description documents (JSON or YAML,
Swagger 2.0, OpenAPI 3.0 or 3.1) and converts them into a hierarchy of
request definitions, complete with example request bodies synthesized from
the declared schemas.

Typical usage::

    from specsync import import_documents_sync

    collections = import_documents_sync([open("petstore.yaml").read()])
    print(collections[0].name)

Modules:
    importer: The batch pipeline (load, classify, validate, dereference, convert).
    models: Pydantic models for collections, requests, responses and auth.
    config: XDG-aware settings resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from specsync.importer import import_documents, import_documents_sync  # noqa: E402

__all__ = ["import_documents", "import_documents_sync", "__version__"]
