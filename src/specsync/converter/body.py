"""Build example request bodies.

OpenAPI 3.x reads the first ``requestBody.content`` entry only. Form content
types list the schema's properties as fields; every other supported content
type gets a value from :func:`~specsync.mock.generator.synthesize`, serialised
as text. Unsupported content types produce an empty body.

Swagger 2.0 turns ``in: formData`` parameters into multipart fields (with
file detection), or else synthesises the ``in: body`` parameter's schema as
JSON.
"""

from __future__ import annotations

import datetime
import json
from typing import Any, Optional

from specsync.mock.generator import synthesize
from specsync.mock.randomness import RandomnessProvider
from specsync.models import FormDataField, RequestBody
from specsync.parser.classifier import ClassifiedDocument

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM_DATA = "multipart/form-data"

KNOWN_CONTENT_TYPES = frozenset(
    {
        "application/json",
        "application/ld+json",
        "application/hal+json",
        "application/vnd.api+json",
        "application/xml",
        "text/xml",
        FORM_URLENCODED,
        MULTIPART_FORM_DATA,
        "application/octet-stream",
        "text/html",
        "text/plain",
    }
)


def build_body(
    doc: ClassifiedDocument,
    operation: dict[str, Any],
    params: list[dict[str, Any]],
    randomness: Optional[RandomnessProvider] = None,
) -> RequestBody:
    """Return the example body for *operation*.

    Args:
        doc: The owning document; its dialect selects the strategy.
        operation: The operation object.
        params: The operation's merged parameter objects (Swagger 2.0 bodies
            are declared as parameters).
        randomness: Source of random values for the mock generator.
    """
    if doc.dialect.is_openapi3:
        return _openapi3_body(operation, randomness)
    return _swagger2_body(params, randomness)


def is_known_content_type(content_type: str) -> bool:
    """Whether a content type is supported; ``+json`` suffixes count as JSON."""
    base = content_type.split(";", 1)[0].strip().lower()
    return base in KNOWN_CONTENT_TYPES or base.endswith("+json")


def serialize_value(value: Any) -> str:
    """Strings pass through, ``None`` becomes empty text, the rest pretty JSON."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, ensure_ascii=False, default=_json_default)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _openapi3_body(
    operation: dict[str, Any], randomness: Optional[RandomnessProvider]
) -> RequestBody:
    request_body = operation.get("requestBody")
    content = request_body.get("content") if isinstance(request_body, dict) else None
    if not isinstance(content, dict) or not content:
        return RequestBody()

    content_type, media = next(iter(content.items()))
    content_type = str(content_type)
    if not is_known_content_type(content_type):
        return RequestBody()
    if not isinstance(media, dict):
        media = {}

    base_type = content_type.split(";", 1)[0].strip().lower()
    if base_type in (MULTIPART_FORM_DATA, FORM_URLENCODED):
        return _openapi3_form_body(base_type, media.get("schema"))

    schema = media.get("schema")
    if isinstance(schema, dict):
        value = synthesize(schema, set(), None, randomness)
        return RequestBody(content_type=content_type, body=serialize_value(value))

    return RequestBody(content_type=content_type, body="")


def _openapi3_form_body(content_type: str, schema: Any) -> RequestBody:
    properties: dict[str, Any] = {}
    if isinstance(schema, dict) and (
        schema.get("type") == "object" or "properties" in schema
    ):
        if isinstance(schema.get("properties"), dict):
            properties = schema["properties"]

    if content_type == FORM_URLENCODED:
        return RequestBody(
            content_type=content_type,
            body="\n".join(f"{key}: " for key in properties),
        )
    return RequestBody(
        content_type=content_type,
        body=[FormDataField(key=str(key)) for key in properties],
    )


def _swagger2_body(
    params: list[dict[str, Any]], randomness: Optional[RandomnessProvider]
) -> RequestBody:
    form_params = [p for p in params if p.get("in") == "formData"]
    if form_params:
        fields = []
        for param in form_params:
            name = str(param["name"])
            is_file = param.get("type") == "file" or param.get("format") == "binary"
            value = synthesize(param, set(), name, randomness)
            fields.append(
                FormDataField(key=name, value=_form_value(value), is_file=is_file)
            )
        return RequestBody(content_type=MULTIPART_FORM_DATA, body=fields)

    body_param = next((p for p in params if p.get("in") == "body"), None)
    if body_param is not None and isinstance(body_param.get("schema"), dict):
        value = synthesize(body_param["schema"], set(), None, randomness)
        return RequestBody(content_type="application/json", body=serialize_value(value))

    return RequestBody()


def _form_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return serialize_value(value)
