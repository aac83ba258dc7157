"""Mutable request under construction, handed to ``Api.pre_request``."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import httpx

from .auth import basic_credentials
from .multipart import MultipartForm


class RequestBuilder:
    """
    Request state accumulated by the pipeline before dispatch.

    Setters return the builder so hooks can chain them. Header setters replace
    any previous value for the same (case-insensitive) name. Body setters
    replace any previously attached body.

    Example:
        >>> async def pre_request(self, request):
        ...     token = await self._tokens.fresh()
        ...     return request.bearer_auth(token).header("X-Trace", self.trace_id)
    """

    def __init__(self, client: httpx.AsyncClient, method: str, url: str):
        self.client = client
        self.method = method
        self.url = url
        self.headers = httpx.Headers()
        self.params: Dict[str, Any] = {}
        self.timeout: Any = httpx.USE_CLIENT_DEFAULT
        self.extensions: Dict[str, Any] = {}
        self._json: Any = None
        self._data: Optional[Mapping[str, Any]] = None
        self._files: Optional[List[Any]] = None
        self._content: Optional[bytes] = None

    def header(self, name: str, value: str) -> RequestBuilder:
        self.headers[name] = value
        return self

    def basic_auth(self, username: str, password: Optional[str] = None) -> RequestBuilder:
        return self.header("Authorization", basic_credentials(username, password))

    def bearer_auth(self, token: str) -> RequestBuilder:
        return self.header("Authorization", f"Bearer {token}")

    def query(self, params: Mapping[str, Any]) -> RequestBuilder:
        self.params.update(params)
        return self

    def with_timeout(self, timeout: Any) -> RequestBuilder:
        """Request-scoped timeout, overriding the transport default."""
        self.timeout = timeout
        return self

    def _clear_body(self) -> None:
        self._json = None
        self._data = None
        self._files = None
        self._content = None

    def json(self, value: Any) -> RequestBuilder:
        """Attach an already JSON-compatible value."""
        self._clear_body()
        self._json = value
        return self

    def form(self, pairs: Mapping[str, Any]) -> RequestBuilder:
        self._clear_body()
        self._data = pairs
        return self

    def multipart(self, form: MultipartForm) -> RequestBuilder:
        self._clear_body()
        self._files = form.to_httpx()
        return self

    def content(self, raw: bytes) -> RequestBuilder:
        self._clear_body()
        self._content = raw
        return self

    @property
    def has_body(self) -> bool:
        return any(
            part is not None
            for part in (self._json, self._data, self._files, self._content)
        )

    def build(self) -> httpx.Request:
        """Materialize the ``httpx.Request`` through the client, which merges
        its base URL and default headers."""
        return self.client.build_request(
            self.method,
            self.url,
            params=self.params or None,
            headers=self.headers,
            content=self._content,
            data=self._data,
            files=self._files,
            json=self._json,
            timeout=self.timeout,
            extensions=self.extensions or None,
        )

    def __repr__(self) -> str:
        return f"RequestBuilder({self.method} {self.url})"


__all__ = ["RequestBuilder"]
