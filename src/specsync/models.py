"""Canonical Pydantic models shared across all specsync modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Settings models** -- resolved by :mod:`specsync.config` from CLI flags,
environment variables and JSON config files:
    :class:`BackendMode` and :class:`ImportSettings`.

**Collection models** -- the output of the import pipeline, serialised as JSON
for the request-execution layer:
    :class:`CollectionModel`, :class:`RequestModel`, :class:`ResponseModel`,
    :class:`OriginalRequest`, :class:`RequestBody`, :class:`FormDataField`,
    :class:`RequestParam`, :class:`RequestHeader`, :class:`RequestVariable`,
    :class:`CollectionVariable` and the auth variants collected in
    :data:`Auth`.

Collection models serialise with camelCase keys (``requestVariables``,
``preRequestScript``, ``authType``...). Use :func:`dump_collections` to get the
JSON-ready structure.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# --- Settings ---


class BackendMode(str, enum.Enum):
    """How validation and dereferencing are executed.

    ``AUTO`` starts an out-of-process worker when the platform allows it and
    falls back to in-process execution otherwise.
    """

    AUTO = "auto"
    WORKER = "worker"
    DIRECT = "direct"


class ImportSettings(BaseModel):
    """Effective settings for one import run.

    Resolved by :func:`~specsync.config.resolve_settings`; see that function
    for the precedence chain.
    """

    backend: BackendMode = Field(
        default=BackendMode.AUTO, description="Backend mode: auto, worker, direct"
    )
    worker_timeout: float = Field(
        default=30.0, gt=0, description="Worker round-trip timeout in seconds"
    )
    pattern_timeout: float = Field(
        default=1.0, gt=0, description="Time limit for regex-driven string synthesis"
    )
    seed: Optional[int] = Field(
        default=None, description="Seed for reproducible example values"
    )
    fallback_base_url: Optional[str] = Field(
        default=None, description="Origin used for relative or scheme-less server URLs"
    )
    output: str = Field(
        default="collection.json", description="Output path, '-' for stdout"
    )


# --- Collection models ---


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestParam(_CamelModel):
    """A query parameter. Values are left blank as placeholders."""

    key: str
    value: str = ""
    active: bool = True
    description: str = ""


class RequestHeader(_CamelModel):
    """A request (or response) header definition."""

    key: str
    value: str = ""
    active: bool = True
    description: str = ""


class RequestVariable(_CamelModel):
    """A path variable referenced as ``<<key>>`` in the endpoint."""

    key: str
    value: str = ""
    active: bool = True


class CollectionVariable(_CamelModel):
    """A collection-scoped variable."""

    key: str
    value: str = ""
    secret: bool = False


class FormDataField(_CamelModel):
    """One field of a ``multipart/form-data`` body."""

    key: str
    value: str = ""
    active: bool = True
    is_file: bool = False


class RequestBody(_CamelModel):
    """A request body: content type plus serialised payload.

    ``body`` is text for structured and url-encoded payloads, a list of
    :class:`FormDataField` for multipart payloads, and ``None`` (together with
    a ``None`` content type) when the operation has no body.
    """

    content_type: Optional[str] = None
    body: Union[str, list[FormDataField], None] = None


# --- Auth variants ---


class AuthNone(_CamelModel):
    auth_type: Literal["none"] = "none"
    auth_active: bool = True


class AuthInherit(_CamelModel):
    """Inherit auth from the parent collection.

    The root collection uses this variant to carry the resolved base URL.
    """

    auth_type: Literal["inherit"] = "inherit"
    auth_active: bool = True
    base_url: Optional[str] = None


class AuthBearer(_CamelModel):
    auth_type: Literal["bearer"] = "bearer"
    auth_active: bool = True
    token: str = "<<bearer_token>>"


class AuthBasic(_CamelModel):
    auth_type: Literal["basic"] = "basic"
    auth_active: bool = True
    username: str = "<<username>>"
    password: str = "<<password>>"


class AuthApiKey(_CamelModel):
    auth_type: Literal["api-key"] = "api-key"
    auth_active: bool = True
    key: str = "api_key"
    value: str = "<<api_key_value>>"
    add_to: Literal["HEADERS", "QUERY_PARAMS"] = "HEADERS"


class OAuth2GrantInfo(_CamelModel):
    """Grant details of an OAuth 2 auth configuration."""

    grant_type: Literal[
        "implicit", "password", "client-credentials", "authorization-code"
    ] = "authorization-code"
    auth_url: str = "<<auth_url>>"
    access_token_url: str = "<<token_url>>"
    client_id: str = Field(default="<<client_id>>", alias="clientID")
    client_secret: str = "<<client_secret>>"
    scope: str = ""


class AuthOAuth2(_CamelModel):
    auth_type: Literal["oauth-2"] = "oauth-2"
    auth_active: bool = True
    add_to: Literal["HEADERS", "QUERY_PARAMS"] = "HEADERS"
    grant_type_info: OAuth2GrantInfo = Field(default_factory=OAuth2GrantInfo)


Auth = Annotated[
    Union[AuthNone, AuthInherit, AuthBearer, AuthBasic, AuthApiKey, AuthOAuth2],
    Field(discriminator="auth_type"),
]
"""Any auth configuration, discriminated by ``authType``."""


# --- Requests, responses, collections ---


class OriginalRequest(_CamelModel):
    """Snapshot of a request's shape, stored on each of its responses.

    Built from independent copies so later changes to the live request do
    not leak into the snapshot.
    """

    name: str
    method: str
    endpoint: str
    params: list[RequestParam] = Field(default_factory=list)
    headers: list[RequestHeader] = Field(default_factory=list)
    auth: Auth = Field(default_factory=AuthNone)
    body: RequestBody = Field(default_factory=RequestBody)
    request_variables: list[RequestVariable] = Field(default_factory=list)


class ResponseModel(_CamelModel):
    """An example response declared for an operation."""

    name: str
    status: str
    code: int
    headers: list[RequestHeader] = Field(default_factory=list)
    body: str = ""
    original_request: OriginalRequest


class RequestModel(_CamelModel):
    """A single executable request built from one path + HTTP method pair."""

    name: str
    description: Optional[str] = None
    method: str
    endpoint: str
    params: list[RequestParam] = Field(default_factory=list)
    headers: list[RequestHeader] = Field(default_factory=list)
    request_variables: list[RequestVariable] = Field(default_factory=list)
    auth: Auth = Field(default_factory=AuthNone)
    body: RequestBody = Field(default_factory=RequestBody)
    responses: dict[str, ResponseModel] = Field(default_factory=dict)
    pre_request_script: str = ""
    test_script: str = ""


class CollectionModel(_CamelModel):
    """A named group of requests; folders are nested collections.

    The root collection of an imported document carries the resolved base URL
    in its ``auth`` (an :class:`AuthInherit`).
    """

    name: str
    description: Optional[str] = None
    auth: Auth = Field(default_factory=AuthInherit)
    headers: list[RequestHeader] = Field(default_factory=list)
    variables: list[CollectionVariable] = Field(default_factory=list)
    folders: list[CollectionModel] = Field(default_factory=list)
    requests: list[RequestModel] = Field(default_factory=list)

    @property
    def base_url(self) -> Optional[str]:
        """The base URL carried by an ``inherit`` auth, if any."""
        if isinstance(self.auth, AuthInherit):
            return self.auth.base_url
        return None

    def iter_requests(self) -> Iterator[tuple[Optional[str], RequestModel]]:
        """Yield ``(folder_name, request)`` pairs, root requests first.

        Root-level requests are yielded with a ``None`` folder name.
        """
        for request in self.requests:
            yield None, request
        for folder in self.folders:
            for _, request in folder.iter_requests():
                yield folder.name, request


def dump_collections(collections: list[CollectionModel]) -> list[dict[str, Any]]:
    """Serialise collections to JSON-ready dicts with camelCase keys."""
    return [c.model_dump(mode="json", by_alias=True) for c in collections]
