"""Authentication strategies applied by the request pipeline.

A strategy is a pure value held by the client and read once per call.
Schemes that need state (token refresh, request signing) override
``Api.pre_request`` instead of adding variants here.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from .config import ApiClientConfig
    from .request import RequestBuilder


@dataclass(frozen=True)
class NoAuth:
    """No credentials."""


@dataclass(frozen=True)
class BasicAuth:
    """HTTP basic credentials. ``password=None`` encodes ``username:``."""

    username: str
    password: Optional[str] = None

    def __repr__(self) -> str:
        return f"BasicAuth(username={self.username!r}, password=***)"


@dataclass(frozen=True)
class BearerAuth:
    """Bearer token sent in the Authorization header."""

    token: str

    def __repr__(self) -> str:
        return "BearerAuth(token=***)"


@dataclass(frozen=True)
class HeaderAuth:
    """A single named header carrying a credential (API keys and the like)."""

    name: str
    value: str

    def __repr__(self) -> str:
        return f"HeaderAuth(name={self.name!r}, value=***)"


AuthStrategy = Union[NoAuth, BasicAuth, BearerAuth, HeaderAuth]

NO_AUTH = NoAuth()


def apply_auth(request: RequestBuilder, auth: AuthStrategy) -> RequestBuilder:
    """Apply exactly one auth branch to ``request``."""
    if isinstance(auth, NoAuth):
        return request
    if isinstance(auth, BasicAuth):
        return request.basic_auth(auth.username, auth.password)
    if isinstance(auth, BearerAuth):
        return request.bearer_auth(auth.token)
    if isinstance(auth, HeaderAuth):
        return request.header(auth.name, auth.value)
    raise TypeError(f"Unsupported auth strategy: {type(auth).__name__}")


def basic_credentials(username: str, password: Optional[str]) -> str:
    """Encode an Authorization header value for basic auth."""
    raw = f"{username}:{password or ''}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def auth_from_config(config: ApiClientConfig) -> AuthStrategy:
    """Pick a strategy from configured credentials.

    Precedence: token, custom header, basic credentials.
    """
    if config.api_token:
        return BearerAuth(config.api_token)
    if config.auth_header_name and config.auth_header_value:
        return HeaderAuth(config.auth_header_name, config.auth_header_value)
    if config.username:
        return BasicAuth(config.username, config.password)
    return NO_AUTH


__all__ = [
    "AuthStrategy",
    "NoAuth",
    "BasicAuth",
    "BearerAuth",
    "HeaderAuth",
    "NO_AUTH",
    "apply_auth",
    "auth_from_config",
    "basic_credentials",
]
