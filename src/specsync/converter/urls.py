"""Base URL extraction and endpoint templating.

The base URL is resolved in this order:

1. OpenAPI 3.x ``servers[0].url`` -- server variables are replaced by their
   defaults; a relative URL gets the fallback origin prepended, a URL without
   a scheme is replaced by the fallback origin, anything else is used as is
   (minus a trailing slash).
2. Swagger 2.0 ``schemes`` + ``host`` + ``basePath`` (``https`` preferred).
3. The caller-supplied fallback origin, else an empty string.

Endpoints replace OpenAPI ``{name}`` path templating with ``<<name>>``.
"""

from __future__ import annotations

import re
from typing import Any, Optional

BASE_URL_PLACEHOLDER = "<<baseUrl>>"

_SERVER_VARIABLE = re.compile(r"\{([^{}]+)\}")


def extract_base_url(document: dict[str, Any], fallback_base_url: Optional[str] = None) -> str:
    """Resolve the base URL of *document*.

    Args:
        document: The API description.
        fallback_base_url: Origin (``scheme://host``) used for relative or
            scheme-less server URLs and when the document declares nothing.

    Returns:
        The base URL without a trailing slash, or ``""``.
    """
    servers = document.get("servers")
    if isinstance(servers, list) and servers:
        first = servers[0]
        server_url = first.get("url") if isinstance(first, dict) else None
        if isinstance(server_url, str):
            server_url = _apply_server_variables(server_url, first.get("variables"))

            if server_url.startswith("/") and fallback_base_url:
                return _strip_trailing_slash(fallback_base_url) + _strip_trailing_slash(server_url)

            if not server_url.startswith("http") and fallback_base_url:
                return _strip_trailing_slash(fallback_base_url)

            return _strip_trailing_slash(server_url)

    host = document.get("host")
    if isinstance(host, str) and host.strip():
        schemes = document.get("schemes")
        if not isinstance(schemes, list):
            schemes = []
        if "https" in schemes:
            protocol = "https"
        else:
            protocol = schemes[0] if schemes else "https"
        base_path = document.get("basePath")
        if not isinstance(base_path, str):
            base_path = ""
        return _strip_trailing_slash(f"{protocol}://{host.strip()}{base_path.strip()}")

    return fallback_base_url or ""


def replace_path_templating(path: str) -> str:
    """Turn ``/pets/{petId}`` into ``/pets/<<petId>>``."""
    return path.replace("{", "<<").replace("}", ">>")


def join_endpoint(base_url: str, path: str) -> str:
    """Join *base_url* and *path*, avoiding a doubled slash at the seam."""
    if base_url.endswith("/") and path.startswith("/"):
        return base_url + path[1:]
    return base_url + path


def build_endpoint(base_url: str, path: str) -> str:
    """Return the request endpoint for *path*.

    An empty base URL is replaced by the ``<<baseUrl>>`` placeholder so the
    request can still be templated by the executing client.
    """
    return join_endpoint(base_url or BASE_URL_PLACEHOLDER, replace_path_templating(path))


def _apply_server_variables(url: str, variables: Any) -> str:
    if not isinstance(variables, dict) or not variables:
        return url

    def _substitute(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1))
        if isinstance(variable, dict) and variable.get("default") is not None:
            return str(variable["default"])
        return match.group(0)

    return _SERVER_VARIABLE.sub(_substitute, url)


def _strip_trailing_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url
