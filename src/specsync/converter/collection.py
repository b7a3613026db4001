"""Assemble one collection per document.

The root collection is named after ``info.title`` and carries the resolved
base URL in its ``inherit`` auth. Requests are grouped into one folder per
tag (folders keep the order tags are first seen, and take the tag's declared
description). A request with several tags is deep-copied into each folder so
every folder is self-contained; untagged requests stay at the root.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Optional

from specsync.converter.operations import convert_path
from specsync.converter.urls import extract_base_url
from specsync.mock.randomness import RandomnessProvider
from specsync.models import AuthInherit, CollectionModel, RequestModel
from specsync.parser.classifier import ClassifiedDocument
from specsync.parser.resolver import has_unresolved_refs

logger = logging.getLogger(__name__)


def convert_documents(
    docs: Sequence[ClassifiedDocument],
    fallback_base_url: Optional[str] = None,
    randomness: Optional[RandomnessProvider] = None,
) -> list[CollectionModel]:
    """Convert each document into a collection, preserving order."""
    for doc in docs:
        if has_unresolved_refs(doc.document):
            logger.warning(
                "'%s' contains unresolved references which may affect import quality",
                doc.title,
            )
    return [convert_document(doc, fallback_base_url, randomness) for doc in docs]


def convert_document(
    doc: ClassifiedDocument,
    fallback_base_url: Optional[str] = None,
    randomness: Optional[RandomnessProvider] = None,
) -> CollectionModel:
    """Convert a single classified document into a :class:`CollectionModel`.

    Args:
        doc: The (ideally dereferenced) document.
        fallback_base_url: Origin for relative or missing server URLs.
        randomness: Source of random values for example bodies.
    """
    document = doc.document
    base_url = extract_base_url(document, fallback_base_url)
    logger.debug("Converting '%s' (%s), base URL %r", doc.title, doc.dialect.value, base_url)

    info = document.get("info")
    description = info.get("description") if isinstance(info, dict) else None

    paths = document.get("paths")
    if not isinstance(paths, dict):
        paths = {}

    by_tag: dict[str, list[RequestModel]] = {}
    untagged: list[RequestModel] = []
    for path, path_item in paths.items():
        for converted in convert_path(doc, str(path), path_item, base_url, randomness):
            if not converted.tags:
                untagged.append(converted.request)
                continue
            for tag in converted.tags:
                by_tag.setdefault(tag, []).append(converted.request.model_copy(deep=True))

    tag_descriptions = _tag_descriptions(document)
    folders = [
        CollectionModel(
            name=tag,
            description=tag_descriptions.get(tag),
            auth=AuthInherit(),
            requests=requests,
        )
        for tag, requests in by_tag.items()
    ]
    logger.debug(
        "'%s': %d folders, %d untagged requests", doc.title, len(folders), len(untagged)
    )

    return CollectionModel(
        name=doc.title,
        description=description if isinstance(description, str) else None,
        auth=AuthInherit(base_url=base_url),
        folders=folders,
        requests=untagged,
    )


def _tag_descriptions(document: dict[str, Any]) -> dict[str, str]:
    tags = document.get("tags")
    if not isinstance(tags, list):
        return {}
    descriptions: dict[str, str] = {}
    for tag in tags:
        if not isinstance(tag, dict):
            continue
        name, description = tag.get("name"), tag.get("description")
        if name and isinstance(description, str) and description:
            descriptions[str(name)] = description
    return descriptions
