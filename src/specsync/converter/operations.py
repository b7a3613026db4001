"""Convert path items into request definitions.

For every path and every recognised HTTP method present on it,
:func:`convert_path` builds one :class:`~specsync.models.RequestModel`
together with the operation's tags, which later decide folder placement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from specsync.converter.auth import resolve_auth
from specsync.converter.body import build_body
from specsync.converter.params import header_params, merge_parameters, path_variables, query_params
from specsync.converter.responses import build_responses
from specsync.converter.urls import build_endpoint
from specsync.mock.randomness import RandomnessProvider
from specsync.models import OriginalRequest, RequestModel
from specsync.parser.classifier import ClassifiedDocument

HTTP_METHODS = ("get", "head", "post", "put", "delete", "options", "patch")
"""Methods converted, in output order. ``trace`` is not imported."""

DEFAULT_TEST_SCRIPT = "pw.expect(response.status).toBe(200);"


@dataclass
class ConvertedOperation:
    """A request plus the tags of the operation it was built from."""

    request: RequestModel
    tags: list[str] = field(default_factory=list)


def convert_path(
    doc: ClassifiedDocument,
    path: str,
    path_item: Any,
    base_url: str,
    randomness: Optional[RandomnessProvider] = None,
) -> list[ConvertedOperation]:
    """Convert every operation of one path item.

    Args:
        doc: The owning document.
        path: The templated path, e.g. ``/pets/{petId}``.
        path_item: The path item object.
        base_url: The resolved base URL (may be empty).
        randomness: Source of random values for example bodies.
    """
    if not isinstance(path_item, dict):
        return []

    converted = []
    for method in HTTP_METHODS:
        operation = path_item.get(method)
        if not isinstance(operation, dict):
            continue
        converted.append(
            convert_operation(doc, path, path_item, method, operation, base_url, randomness)
        )
    return converted


def convert_operation(
    doc: ClassifiedDocument,
    path: str,
    path_item: dict[str, Any],
    method: str,
    operation: dict[str, Any],
    base_url: str,
    randomness: Optional[RandomnessProvider] = None,
) -> ConvertedOperation:
    """Build the request for a single path + method pair."""
    params = merge_parameters(path_item.get("parameters"), operation.get("parameters"))

    name = _request_name(operation)
    endpoint = build_endpoint(base_url, path)
    query = query_params(params)
    headers = header_params(params)
    variables = path_variables(params)
    auth = resolve_auth(doc, operation)
    body = build_body(doc, operation, params, randomness)

    snapshot = OriginalRequest(
        name=name,
        method=method.upper(),
        endpoint=endpoint,
        params=[p.model_copy() for p in query],
        headers=[h.model_copy() for h in headers],
        auth=auth.model_copy(deep=True),
        body=body.model_copy(deep=True),
        request_variables=[v.model_copy() for v in variables],
    )

    description = operation.get("description")
    request = RequestModel(
        name=name,
        description=description if isinstance(description, str) else None,
        method=method.upper(),
        endpoint=endpoint,
        params=query,
        headers=headers,
        request_variables=variables,
        auth=auth,
        body=body,
        responses=build_responses(doc, operation, snapshot, randomness),
        pre_request_script="",
        test_script=DEFAULT_TEST_SCRIPT,
    )

    tags = operation.get("tags")
    tag_names = [str(t) for t in tags] if isinstance(tags, list) else []
    return ConvertedOperation(request=request, tags=tag_names)


def _request_name(operation: dict[str, Any]) -> str:
    for key in ("operationId", "summary"):
        value = operation.get(key)
        if isinstance(value, str) and value:
            return value
    return "Untitled Request"
