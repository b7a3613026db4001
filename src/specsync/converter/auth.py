"""Map OpenAPI/Swagger security requirements onto request auth settings.

The operation's ``security`` list is used when present (an explicit empty list
means "no auth"), otherwise the document's global one. Only the first scheme
of the first requirement is considered. It is looked up in the dialect's
scheme registry (``components.securitySchemes`` for OpenAPI 3.x,
``securityDefinitions`` for Swagger 2.0) and mapped by its ``type``, checked
in this fixed order:

1. ``http`` + ``bearer`` -> :class:`~specsync.models.AuthBearer`
2. ``apiKey`` -> :class:`~specsync.models.AuthApiKey`
3. ``http`` + ``basic`` -> :class:`~specsync.models.AuthBasic`
4. ``oauth2`` -> :class:`~specsync.models.AuthOAuth2`

Anything else, including an unknown scheme name, maps to
:class:`~specsync.models.AuthNone`. Credentials are always placeholders.
"""

from __future__ import annotations

from typing import Any, Optional

from specsync.models import (
    Auth,
    AuthApiKey,
    AuthBasic,
    AuthBearer,
    AuthNone,
    AuthOAuth2,
    OAuth2GrantInfo,
)
from specsync.parser.classifier import ClassifiedDocument

# Swagger 2.0 and OpenAPI 3.x flow names
_GRANT_TYPES = {
    "implicit": "implicit",
    "password": "password",
    "application": "client-credentials",
    "clientCredentials": "client-credentials",
    "accessCode": "authorization-code",
    "authorizationCode": "authorization-code",
}


def resolve_auth(doc: ClassifiedDocument, operation: dict[str, Any]) -> Auth:
    """Return the auth settings for *operation* of *doc*."""
    security = operation.get("security")
    if security is None:
        security = doc.document.get("security")

    if not isinstance(security, list) or not security:
        return AuthNone()

    requirement = security[0]
    if not isinstance(requirement, dict) or not requirement:
        return AuthNone()

    scheme_name, granted = next(iter(requirement.items()))
    scheme = security_schemes(doc).get(scheme_name)
    if not isinstance(scheme, dict):
        return AuthNone()

    return map_security_scheme(scheme, granted if isinstance(granted, list) else [])


def security_schemes(doc: ClassifiedDocument) -> dict[str, Any]:
    """Return the scheme registry for the document's dialect."""
    if doc.dialect.is_openapi3:
        components = doc.document.get("components")
        registry = components.get("securitySchemes") if isinstance(components, dict) else None
    else:
        registry = doc.document.get("securityDefinitions")
    return registry if isinstance(registry, dict) else {}


def map_security_scheme(scheme: dict[str, Any], granted_scopes: list[Any]) -> Auth:
    """Map one security scheme object to an auth variant.

    Args:
        scheme: The security scheme object.
        granted_scopes: Scopes listed by the security requirement. When empty,
            the scopes declared by the OAuth2 flow are used instead.
    """
    scheme_type = scheme.get("type")
    http_scheme = _http_scheme(scheme)

    if scheme_type == "http" and http_scheme == "bearer":
        return AuthBearer()

    if scheme_type == "apiKey":
        name = scheme.get("name")
        return AuthApiKey(
            key=name if isinstance(name, str) and name else "api_key",
            add_to="QUERY_PARAMS" if scheme.get("in") == "query" else "HEADERS",
        )

    if scheme_type == "http" and http_scheme == "basic":
        return AuthBasic()

    if scheme_type == "oauth2":
        return _oauth2(scheme, granted_scopes)

    return AuthNone()


def _http_scheme(scheme: dict[str, Any]) -> Optional[str]:
    value = scheme.get("scheme")
    return value.lower() if isinstance(value, str) else None


def _oauth2(scheme: dict[str, Any], granted_scopes: list[Any]) -> AuthOAuth2:
    flows = scheme.get("flows")
    if not isinstance(flows, dict):
        # Swagger 2.0 keeps a single flow on the scheme itself
        flow_name = scheme.get("flow")
        flows = {flow_name: scheme} if isinstance(flow_name, str) else {}

    if flows:
        flow_name, flow = next(iter(flows.items()))
    else:
        flow_name, flow = None, {}
    if not isinstance(flow, dict):
        flow = {}

    if granted_scopes:
        scopes = [str(s) for s in granted_scopes]
    else:
        declared = flow.get("scopes")
        scopes = [str(s) for s in declared] if isinstance(declared, dict) else []

    info = OAuth2GrantInfo(
        grant_type=_GRANT_TYPES.get(flow_name, "authorization-code"),
        scope=" ".join(scopes),
    )
    if isinstance(flow.get("authorizationUrl"), str) and flow["authorizationUrl"]:
        info.auth_url = flow["authorizationUrl"]
    if isinstance(flow.get("tokenUrl"), str) and flow["tokenUrl"]:
        info.access_token_url = flow["tokenUrl"]

    return AuthOAuth2(grant_type_info=info)
