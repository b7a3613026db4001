"""Split an operation's parameters into query params, headers and path variables.

Only keys, descriptions and activation flags are filled in; values stay blank
as placeholders. Path-level parameters are merged with the operation's own,
and the operation-level definition wins when both share ``name`` and ``in``.
"""

from __future__ import annotations

from typing import Any

from specsync.models import RequestHeader, RequestParam, RequestVariable


def merge_parameters(path_params: Any, op_params: Any) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Entries that are not parameter objects (including unresolved ``$ref``
    pointers) are dropped.

    Args:
        path_params: The path item's ``parameters`` value.
        op_params: The operation's ``parameters`` value.

    Returns:
        A merged list of parameter dicts, path-level entries first.
    """
    path_list = _parameter_objects(path_params)
    op_list = _parameter_objects(op_params)

    op_keys = {(param["name"], param.get("in", "")) for param in op_list}
    merged = [
        param for param in path_list if (param["name"], param.get("in", "")) not in op_keys
    ]
    merged.extend(op_list)
    return merged


def query_params(params: list[dict[str, Any]]) -> list[RequestParam]:
    return [
        RequestParam(key=str(p["name"]), description=_description(p))
        for p in params
        if p.get("in") == "query"
    ]


def header_params(params: list[dict[str, Any]]) -> list[RequestHeader]:
    return [
        RequestHeader(key=str(p["name"]), description=_description(p))
        for p in params
        if p.get("in") == "header"
    ]


def path_variables(params: list[dict[str, Any]]) -> list[RequestVariable]:
    return [RequestVariable(key=str(p["name"])) for p in params if p.get("in") == "path"]


def _parameter_objects(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [p for p in value if isinstance(p, dict) and isinstance(p.get("name"), (str, int))]


def _description(param: dict[str, Any]) -> str:
    description = param.get("description")
    return description if isinstance(description, str) else ""
