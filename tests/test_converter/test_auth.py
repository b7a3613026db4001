"""Tests for specsync.converter.auth."""

from __future__ import annotations

from typing import Any

import pytest

from specsync.converter.auth import map_security_scheme, resolve_auth, security_schemes
from specsync.models import (
    AuthApiKey,
    AuthBasic,
    AuthBearer,
    AuthNone,
    AuthOAuth2,
)
from specsync.parser.classifier import ClassifiedDocument, Dialect


def _openapi3(schemes: dict[str, Any], security: Any = None) -> ClassifiedDocument:
    document: dict[str, Any] = {"openapi": "3.0.0", "paths": {}, "components": {"securitySchemes": schemes}}
    if security is not None:
        document["security"] = security
    return ClassifiedDocument(Dialect.OPENAPI_3_0, document)


def _swagger2(definitions: dict[str, Any], security: Any = None) -> ClassifiedDocument:
    document: dict[str, Any] = {"swagger": "2.0", "paths": {}, "securityDefinitions": definitions}
    if security is not None:
        document["security"] = security
    return ClassifiedDocument(Dialect.SWAGGER_2, document)


class TestResolveAuth:
    """Which requirement applies."""

    def test_no_security_is_none(self) -> None:
        doc = _openapi3({"b": {"type": "http", "scheme": "bearer"}})
        assert isinstance(resolve_auth(doc, {}), AuthNone)

    def test_document_level_requirement(self) -> None:
        doc = _openapi3({"b": {"type": "http", "scheme": "bearer"}}, security=[{"b": []}])
        assert isinstance(resolve_auth(doc, {}), AuthBearer)

    def test_operation_overrides_document(self) -> None:
        doc = _openapi3(
            {"b": {"type": "http", "scheme": "bearer"}, "basic": {"type": "http", "scheme": "basic"}},
            security=[{"b": []}],
        )
        assert isinstance(resolve_auth(doc, {"security": [{"basic": []}]}), AuthBasic)

    def test_explicit_empty_operation_security(self) -> None:
        doc = _openapi3({"b": {"type": "http", "scheme": "bearer"}}, security=[{"b": []}])
        assert isinstance(resolve_auth(doc, {"security": []}), AuthNone)

    def test_only_first_requirement_counts(self) -> None:
        doc = _openapi3(
            {"b": {"type": "http", "scheme": "bearer"}, "basic": {"type": "http", "scheme": "basic"}}
        )
        auth = resolve_auth(doc, {"security": [{"basic": []}, {"b": []}]})
        assert isinstance(auth, AuthBasic)

    def test_unknown_scheme_name(self) -> None:
        doc = _openapi3({}, security=[{"missing": []}])
        assert isinstance(resolve_auth(doc, {}), AuthNone)

    def test_swagger_registry(self) -> None:
        doc = _swagger2({"key": {"type": "apiKey", "name": "token", "in": "query"}}, [{"key": []}])
        auth = resolve_auth(doc, {})
        assert isinstance(auth, AuthApiKey)
        assert auth.add_to == "QUERY_PARAMS"

    def test_dialect_selects_registry(self) -> None:
        doc = ClassifiedDocument(
            Dialect.OPENAPI_3_0,
            {"securityDefinitions": {"x": {"type": "basic"}}, "paths": {}},
        )
        assert security_schemes(doc) == {}


class TestMapSecurityScheme:
    """Scheme type precedence and placeholders."""

    def test_bearer_wins_over_api_key_fields(self) -> None:
        scheme = {"type": "http", "scheme": "bearer", "name": "X-API-Key", "in": "header"}
        auth = map_security_scheme(scheme, [])
        assert isinstance(auth, AuthBearer)
        assert auth.token == "<<bearer_token>>"

    def test_bearer_case_insensitive(self) -> None:
        assert isinstance(map_security_scheme({"type": "http", "scheme": "Bearer"}, []), AuthBearer)

    def test_api_key_header_default(self) -> None:
        auth = map_security_scheme({"type": "apiKey", "name": "X-Key"}, [])
        assert isinstance(auth, AuthApiKey)
        assert (auth.key, auth.value, auth.add_to) == ("X-Key", "<<api_key_value>>", "HEADERS")

    def test_api_key_default_name(self) -> None:
        auth = map_security_scheme({"type": "apiKey", "in": "cookie"}, [])
        assert isinstance(auth, AuthApiKey)
        assert (auth.key, auth.add_to) == ("api_key", "HEADERS")

    def test_basic(self) -> None:
        auth = map_security_scheme({"type": "http", "scheme": "basic"}, [])
        assert isinstance(auth, AuthBasic)
        assert (auth.username, auth.password) == ("<<username>>", "<<password>>")

    def test_swagger_basic_type_is_unmapped(self) -> None:
        assert isinstance(map_security_scheme({"type": "basic"}, []), AuthNone)

    @pytest.mark.parametrize(
        "scheme",
        [{"type": "http", "scheme": "digest"}, {"type": "openIdConnect"}, {"type": "mutualTLS"}],
    )
    def test_other_types(self, scheme: dict[str, Any]) -> None:
        assert isinstance(map_security_scheme(scheme, []), AuthNone)


class TestOAuth2:

    def test_openapi3_first_flow(self) -> None:
        scheme = {
            "type": "oauth2",
            "flows": {
                "authorizationCode": {
                    "authorizationUrl": "https://auth.example.com/authorize",
                    "tokenUrl": "https://auth.example.com/token",
                    "scopes": {"read": "", "write": ""},
                },
                "implicit": {"authorizationUrl": "https://auth.example.com/implicit"},
            },
        }
        auth = map_security_scheme(scheme, ["read", "write"])
        assert isinstance(auth, AuthOAuth2)
        info = auth.grant_type_info
        assert info.grant_type == "authorization-code"
        assert info.auth_url == "https://auth.example.com/authorize"
        assert info.access_token_url == "https://auth.example.com/token"
        assert info.scope == "read write"
        assert (info.client_id, info.client_secret) == ("<<client_id>>", "<<client_secret>>")

    def test_missing_urls_get_placeholders(self) -> None:
        auth = map_security_scheme({"type": "oauth2", "flows": {"password": {"scopes": {}}}}, [])
        info = auth.grant_type_info
        assert info.grant_type == "password"
        assert (info.auth_url, info.access_token_url) == ("<<auth_url>>", "<<token_url>>")

    def test_declared_scopes_when_requirement_lists_none(self) -> None:
        scheme = {"type": "oauth2", "flows": {"clientCredentials": {"scopes": {"a": "", "b": ""}}}}
        info = map_security_scheme(scheme, []).grant_type_info
        assert info.grant_type == "client-credentials"
        assert info.scope == "a b"

    @pytest.mark.parametrize(
        ("flow", "grant_type"),
        [
            ("implicit", "implicit"),
            ("password", "password"),
            ("application", "client-credentials"),
            ("accessCode", "authorization-code"),
        ],
    )
    def test_swagger_flows(self, flow: str, grant_type: str) -> None:
        scheme = {"type": "oauth2", "flow": flow, "tokenUrl": "https://t.example.com"}
        info = map_security_scheme(scheme, []).grant_type_info
        assert info.grant_type == grant_type

    def test_serialises_camel_case(self) -> None:
        auth = map_security_scheme({"type": "oauth2", "flows": {"implicit": {}}}, ["x"])
        data = auth.model_dump(by_alias=True)
        assert data["authType"] == "oauth-2"
        assert data["addTo"] == "HEADERS"
        assert data["grantTypeInfo"]["clientID"] == "<<client_id>>"
        assert data["grantTypeInfo"]["accessTokenUrl"] == "<<token_url>>"
