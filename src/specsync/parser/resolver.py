"""Resolve ``$ref`` JSON Reference pointers in API description documents.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition. Resolution is
done by prance's :class:`~prance.util.resolver.RefResolver`, which works on
a deep copy of the document and inlines every reference it can reach.

prance refuses to expand a schema inside itself. When it meets a recursive
reference it hands the ``$ref`` back untouched; a second pass then points
every such leftover at the already resolved target, so a tree-like schema
becomes a **cyclic** object graph instead of being expanded forever. The
mock generator guards against such cycles by object identity.

External references (other files, ``http(s)`` URLs) are only followed when
the document's own location is known, since relative references are
resolved against it. Without a location, or when fetching fails, they are
left in place and the rest of the document is still resolved.

Public functions:

* :func:`dereference_document` -- resolve every reachable reference or raise.
* :func:`has_unresolved_refs` -- cycle-safe scan for leftover ``$ref`` keys.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import unquote

from prance.util import url as prance_url
from prance.util.resolver import (
    RESOLVE_FILES,
    RESOLVE_HTTP,
    RESOLVE_INTERNAL,
    RefResolver,
)

from specsync.exceptions import DereferenceError

logger = logging.getLogger(__name__)

# Stands in for the location of documents that were read from text
_IN_MEMORY_URL = "file:///specsync-document.json"

_RESOLVE_EVERYTHING = RESOLVE_INTERNAL | RESOLVE_FILES | RESOLVE_HTTP


def dereference_document(
    document: dict[str, Any], location: Optional[str] = None
) -> dict[str, Any]:
    """Resolve all ``$ref`` pointers in *document*.

    Sibling keys next to a ``$ref`` are ignored, as JSON Reference
    prescribes.

    Args:
        document: The raw document. It is not modified.
        location: Where the document was read from: an absolute ``file://``
            or ``http(s)`` URL. External references are followed relative
            to it; without it only internal references are resolved.

    Returns:
        A **new** document with every reachable reference replaced by its
        target. Recursive references produce cyclic containers.

    Raises:
        DereferenceError: If an internal reference cannot be resolved
            (missing target, or a chain of references that only points back
            to itself).

    Example::

        resolved = dereference_document(raw)
        node = resolved["components"]["schemas"]["Node"]
        assert node["properties"]["parent"]["properties"]["parent"] is node
    """
    if location is None:
        return _resolve(document, _IN_MEMORY_URL, RESOLVE_INTERNAL)

    try:
        return _resolve(document, location, _RESOLVE_EVERYTHING)
    except DereferenceError as exc:
        logger.warning(
            "Could not follow external references from %s (%s); "
            "resolving internal references only",
            location,
            exc,
        )
    return _resolve(document, location, RESOLVE_INTERNAL)


def has_unresolved_refs(obj: Any, visited: set[int] | None = None) -> bool:
    """Return ``True`` if any mapping in *obj* still holds a string ``$ref``.

    Each container is visited once (tracked by identity), so cyclic graphs
    produced by :func:`dereference_document` are safe to scan.
    """
    if visited is None:
        visited = set()

    if not isinstance(obj, (dict, list)):
        return False
    if id(obj) in visited:
        return False
    visited.add(id(obj))

    if isinstance(obj, dict):
        if isinstance(obj.get("$ref"), str):
            return True
        return any(has_unresolved_refs(value, visited) for value in obj.values())

    return any(has_unresolved_refs(item, visited) for item in obj)


def _resolve(document: dict[str, Any], url: str, resolve_types: int) -> dict[str, Any]:
    """Run prance over *document*, then close the recursive leftovers."""
    try:
        own_resource = prance_url.urlresource(prance_url.absurl(url))
        resolver = RefResolver(
            document,
            url,
            resolve_types=resolve_types,
            recursion_limit_handler=_keep_local_ref(own_resource),
        )
        resolver.resolve_references()
    except (prance_url.ResolutionError, OSError, LookupError, TypeError, ValueError) as exc:
        raise DereferenceError(f"Cannot resolve references: {exc}") from exc

    root = resolver.specs
    return _deep_resolve(root, root, built={})


def _keep_local_ref(own_resource: str):
    """Build prance's recursion handler.

    A recursive reference into the document itself is returned as a local
    ``$ref`` for :func:`_deep_resolve` to close. Recursion inside an external
    resource is cut with an empty schema.
    """

    def handler(limit: int, parsed_url: Any, recursions: Any = ()) -> dict[str, Any]:
        if prance_url.urlresource(parsed_url) == own_resource:
            return {"$ref": f"#{parsed_url.fragment}"}
        return {}

    return handler


def _resolve_ref(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a local ``$ref`` string against the root document.

    Handles RFC 6901 JSON Pointer escaping (``~0`` for ``~``, ``~1`` for
    ``/``) and percent-encoded segments.

    Raises:
        DereferenceError: If any segment in the pointer path does not exist
            in the document.
    """
    if ref == "#":
        return root

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = unquote(segment).replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise DereferenceError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise DereferenceError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise DereferenceError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )

    return current


def _deep_resolve(
    obj: Any,
    root: dict[str, Any],
    built: dict[int, Any],
    chain: frozenset[str] = frozenset(),
) -> Any:
    """Return the counterpart of *obj* with local ``$ref`` leftovers closed.

    ``built`` maps ``id()`` of every container of *root* already visited to
    its output container. Output containers are registered before their
    children are resolved, so a reference back to an ancestor returns the
    (still filling) ancestor and closes the cycle.

    ``chain`` holds the ``$ref`` strings followed since the last real
    container; seeing one again means the references only point at each
    other. References that are not local are kept as they are.
    """
    if id(obj) in built:
        return built[id(obj)]

    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str) and (ref == "#" or ref.startswith("#/")):
            if ref in chain:
                raise DereferenceError(f"Cannot resolve $ref '{ref}': circular reference chain")
            return _deep_resolve(_resolve_ref(ref, root), root, built, chain | {ref})

        result: dict[str, Any] = {}
        built[id(obj)] = result
        for key, value in obj.items():
            result[key] = _deep_resolve(value, root, built)
        return result

    if isinstance(obj, list):
        items: list[Any] = []
        built[id(obj)] = items
        items.extend(_deep_resolve(item, root, built) for item in obj)
        return items

    return obj
