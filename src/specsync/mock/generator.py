"""Synthesize example values from JSON Schema fragments.

:func:`synthesize` walks a schema and returns an illustrative value for it:
strings honour ``pattern``, length bounds, ``format`` and ``enum``; numbers
stay within ``minimum``/``maximum``; arrays and objects recurse; ``allOf``
results are merged and ``oneOf``/``anyOf`` use their first member. Binary
fields become ``data:`` URIs embedding a tiny stub file.

Dereferenced documents may contain cyclic schemas, so every call receives a
*visited* set of schema identities. A schema already on the set yields an
empty object. The set is shared across the properties of one object (a schema
reused by sibling properties is still guarded against itself) and copied for
each array element (siblings must not poison each other's guard).

Values are illustrative only; they are not guaranteed to validate against
the schema.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

from specsync.mock.randomness import (
    FakerRandomness,
    PatternSynthesisError,
    RandomnessProvider,
)

logger = logging.getLogger(__name__)

# 1x1 images, a one-page PDF and a line of text
BINARY_STUBS: dict[str, tuple[str, str]] = {
    "png": (
        "image/png",
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg==",
    ),
    "jpg": (
        "image/jpeg",
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg==",
    ),
    "pdf": (
        "application/pdf",
        "JVBERi0xLjAKMSAwIG9iajw8L1R5cGUvQ2F0YWxvZy9QYWdlcyAyIDAgUj4+ZW5kb2JqMiAwIG9iajw8L1R5cGUvUGFnZXMvS2lkc1szIDAgUl0vQ291bnQgMT4+ZW5kb2JqMyAwIG9iajw8L1R5cGUvUGFnZS9QYXJlbnQgMiAwIFIvTWVkaWFCb3hbMCAwIDYxMiA3OTJdPj5lbmRvYmoKdHJhaWxlcjw8L1Jvb3QgMSAwIFI+Pgplb2YK",
    ),
    "txt": ("text/plain", "U2VsZi1IZWFsaW5nIEFQSSBNb2NrIERhdGE="),
}

_DEFAULT_MINIMUM = 1
_DEFAULT_MAXIMUM = 100
_DEFAULT_MAX_LENGTH = 20

_default_randomness: Optional[RandomnessProvider] = None


def default_randomness() -> RandomnessProvider:
    """Return the process-wide unseeded :class:`FakerRandomness`."""
    global _default_randomness
    if _default_randomness is None:
        _default_randomness = FakerRandomness()
    return _default_randomness


def synthesize(
    schema: Any,
    visited: Optional[set[int]] = None,
    field_name: Optional[str] = None,
    randomness: Optional[RandomnessProvider] = None,
) -> Any:
    """Build an example value for *schema*.

    Args:
        schema: A schema mapping (anything else yields ``None``).
        visited: Identities of the schemas on the current descent path.
            Mutated in place; pass a fresh set (or ``None``) for a new walk.
        field_name: Name of the property being generated, used to guess the
            kind of stub file for binary fields.
        randomness: Source of random values. Defaults to an unseeded
            :class:`~specsync.mock.randomness.FakerRandomness`.

    Returns:
        The example value, or ``None`` when the schema describes nothing
        that can be generated.
    """
    if not isinstance(schema, dict):
        return None
    if visited is None:
        visited = set()
    if randomness is None:
        randomness = default_randomness()

    if id(schema) in visited:
        return {}
    visited.add(id(schema))

    schema_type = schema_type_of(schema)

    if schema.get("format") == "binary" or schema_type == "file":
        return _binary_stub(schema, field_name)

    if schema_type == "string":
        return _string_value(schema, randomness)

    if schema_type in ("integer", "number"):
        return _number_value(schema, schema_type, randomness)

    if schema_type == "boolean":
        return randomness.boolean()

    if schema_type == "array" and "items" in schema:
        count = schema.get("minItems")
        if not isinstance(count, int) or count < 0:
            count = 1
        return [
            synthesize(schema["items"], set(visited), field_name, randomness)
            for _ in range(count)
        ]

    if schema_type == "object" or "properties" in schema:
        properties = schema.get("properties")
        if not isinstance(properties, dict):
            return {}
        return {
            str(key): synthesize(value, visited, str(key), randomness)
            for key, value in properties.items()
        }

    if "allOf" in schema:
        merged: dict[str, Any] = {}
        for member in _members(schema["allOf"]):
            generated = synthesize(member, visited, field_name, randomness)
            if isinstance(generated, dict):
                merged.update(generated)
        return merged

    for keyword in ("oneOf", "anyOf"):
        if keyword in schema:
            options = _members(schema[keyword])
            if not options:
                return None
            return synthesize(options[0], visited, field_name, randomness)

    return None


def schema_type_of(schema: dict[str, Any]) -> Optional[str]:
    """Return the schema's ``type``, reducing 3.1 type arrays to one name.

    ``["string", "null"]`` becomes ``"string"``; an all-null array yields
    ``None``.
    """
    type_value = schema.get("type")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        return str(non_null[0]) if non_null else None
    return type_value if isinstance(type_value, str) else None


def _members(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else []


def _binary_stub(schema: dict[str, Any], field_name: Optional[str]) -> str:
    """Return a data URI for a stub file matching the field's media type."""
    kind = "png"
    media_type = schema.get("contentMediaType")

    if isinstance(media_type, str) and media_type:
        if "pdf" in media_type:
            kind = "pdf"
        elif "image/jpeg" in media_type or "image/jpg" in media_type:
            kind = "jpg"
        elif "text/plain" in media_type:
            kind = "txt"
    elif field_name:
        lowered = field_name.lower()
        if "pdf" in lowered:
            kind = "pdf"
        elif "jpg" in lowered or "jpeg" in lowered:
            kind = "jpg"
        elif "txt" in lowered or "text" in lowered:
            kind = "txt"

    mime_type, payload = BINARY_STUBS[kind]
    return f"data:{mime_type};base64,{payload}"


def _string_value(schema: dict[str, Any], randomness: RandomnessProvider) -> str:
    pattern = schema.get("pattern")
    if isinstance(pattern, str) and pattern:
        try:
            return randomness.from_pattern(pattern)
        except PatternSynthesisError as exc:
            logger.debug("Falling back to a word: %s", exc)
            return randomness.word()

    min_length = schema.get("minLength")
    max_length = schema.get("maxLength")
    if isinstance(min_length, int) or isinstance(max_length, int):
        low = min_length if isinstance(min_length, int) and min_length >= 0 else 1
        high = max_length if isinstance(max_length, int) else max(low, _DEFAULT_MAX_LENGTH)
        return randomness.alphanumeric(min(low, high), max(low, high))

    fmt = schema.get("format")
    if fmt == "date-time":
        return randomness.date_time()
    if fmt == "date":
        return randomness.date()
    if fmt == "email":
        return randomness.email()
    if fmt == "uri":
        return randomness.uri()
    if fmt == "uuid":
        return randomness.uuid()

    enum_values = schema.get("enum")
    if isinstance(enum_values, list) and enum_values:
        return randomness.choice(enum_values)

    return randomness.word()


def _number_value(
    schema: dict[str, Any], schema_type: str, randomness: RandomnessProvider
) -> int | float:
    minimum = _as_number(schema.get("minimum"))
    maximum = _as_number(schema.get("maximum"))
    low = minimum if minimum is not None else _DEFAULT_MINIMUM
    high = maximum if maximum is not None else _DEFAULT_MAXIMUM

    # keep the declared bound and move the defaulted one
    if low > high:
        if maximum is None:
            high = low + (_DEFAULT_MAXIMUM - _DEFAULT_MINIMUM)
        elif minimum is None:
            low = high - (_DEFAULT_MAXIMUM - _DEFAULT_MINIMUM)
        else:
            low, high = high, low

    if schema_type == "integer":
        int_low, int_high = math.ceil(low), math.floor(high)
        if int_low > int_high:
            return round(low)
        return randomness.integer(int_low, int_high)
    return randomness.decimal(float(low), float(high), 2)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value
