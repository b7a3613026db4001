"""Converter -- turn classified documents into request collections.

This sub-package is the second half of the specsync pipeline. It walks every
path and HTTP method of a (dereferenced) document and builds the collection
hierarchy consumed by the request-execution layer.

Sub-modules:

* :mod:`~specsync.converter.collection` -- one collection per document,
  one folder per tag.
* :mod:`~specsync.converter.operations` -- one request per path + method.
* :mod:`~specsync.converter.urls` -- base URL extraction and endpoint templating.
* :mod:`~specsync.converter.params` -- query params, headers, path variables.
* :mod:`~specsync.converter.auth` -- security requirement to auth mapping.
* :mod:`~specsync.converter.body` -- example request bodies.
* :mod:`~specsync.converter.responses` -- example responses.
"""

from specsync.converter.collection import convert_document, convert_documents
from specsync.converter.urls import extract_base_url

__all__ = ["convert_document", "convert_documents", "extract_base_url"]
