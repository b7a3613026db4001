"""Build example responses for an operation.

Each declared response becomes a :class:`~specsync.models.ResponseModel`
named after its description (or its key), with a numeric code (200 when the
key is not a number, e.g. ``default`` or ``2XX``), the matching reason
phrase, a single ``content-type`` header, example body text, and its own copy
of the request snapshot.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Optional

from specsync.converter.body import serialize_value
from specsync.mock.generator import synthesize
from specsync.mock.randomness import RandomnessProvider
from specsync.models import OriginalRequest, RequestHeader, ResponseModel
from specsync.parser.classifier import ClassifiedDocument

DEFAULT_CONTENT_TYPE = "application/json"


def build_responses(
    doc: ClassifiedDocument,
    operation: dict[str, Any],
    original_request: OriginalRequest,
    randomness: Optional[RandomnessProvider] = None,
) -> dict[str, ResponseModel]:
    """Return the operation's responses keyed by display name.

    Args:
        doc: The owning document; its dialect selects how bodies are read.
        operation: The operation object.
        original_request: Snapshot of the request; every response stores an
            independent deep copy.
        randomness: Source of random values for schema-only bodies.
    """
    responses = operation.get("responses")
    if not isinstance(responses, dict):
        return {}

    result: dict[str, ResponseModel] = {}
    for key, response in responses.items():
        key = str(key)
        if not isinstance(response, dict):
            response = {}

        if doc.dialect.is_openapi3:
            content_type, body = _openapi3_body(response, randomness)
        else:
            content_type, body = _swagger2_body(response, randomness)

        description = response.get("description")
        name = description if isinstance(description, str) and description else key
        if name in result:
            name = f"{name} ({key})"

        code = int(key) if key.isascii() and key.isdigit() else 200
        result[name] = ResponseModel(
            name=name,
            status=status_phrase(code),
            code=code,
            headers=[RequestHeader(key="content-type", value=content_type)],
            body=body,
            original_request=original_request.model_copy(deep=True),
        )

    return result


def status_phrase(code: int) -> str:
    """Return the reason phrase for *code*, or ``"Unknown"``."""
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return "Unknown"


def _openapi3_body(
    response: dict[str, Any], randomness: Optional[RandomnessProvider]
) -> tuple[str, str]:
    content = response.get("content")
    if not isinstance(content, dict) or not content:
        return DEFAULT_CONTENT_TYPE, ""

    content_type, media = next(iter(content.items()))
    if not isinstance(media, dict):
        return str(content_type), ""

    if "example" in media:
        return str(content_type), serialize_value(media["example"])

    examples = media.get("examples")
    if isinstance(examples, dict) and examples:
        first = next(iter(examples.values()))
        if isinstance(first, dict) and "value" in first:
            return str(content_type), serialize_value(first["value"])

    if isinstance(media.get("schema"), dict):
        value = synthesize(media["schema"], set(), None, randomness)
        return str(content_type), serialize_value(value)

    return str(content_type), ""


def _swagger2_body(
    response: dict[str, Any], randomness: Optional[RandomnessProvider]
) -> tuple[str, str]:
    examples = response.get("examples")
    if isinstance(examples, dict) and examples:
        content_type, example = next(iter(examples.items()))
        return str(content_type), serialize_value(example)

    if isinstance(response.get("schema"), dict):
        value = synthesize(response["schema"], set(), None, randomness)
        return DEFAULT_CONTENT_TYPE, serialize_value(value)

    return DEFAULT_CONTENT_TYPE, ""
