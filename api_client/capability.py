"""
Capability interface for generated operations.

Generated methods only talk to ``Api``: they read the transport handle from
``client``, pass the built request through ``pre_request`` and the response
through ``post_response``. Any class implementing this interface can host
generated operations; ``ApiClient`` is the ready-made implementation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from .auth import NO_AUTH, AuthStrategy, auth_from_config
from .config import ApiClientConfig, get_settings
from .request import RequestBuilder

logger = logging.getLogger(__name__)


class Api(ABC):
    """
    Contract a client class must satisfy to host generated operations.

    Override ``pre_request`` for authentication schemes that need state
    (token refresh, signing), custom headers or request-scoped timeouts.

    Example:
        >>> class SignedApi(Api):
        ...     def __init__(self, http: httpx.AsyncClient, signer):
        ...         self._http = http
        ...         self._signer = signer
        ...
        ...     @property
        ...     def client(self) -> httpx.AsyncClient:
        ...         return self._http
        ...
        ...     async def pre_request(self, request):
        ...         signature = await self._signer.sign(request.method, request.url)
        ...         return request.header("X-Signature", signature)
    """

    auth: AuthStrategy = NO_AUTH

    @property
    @abstractmethod
    def client(self) -> httpx.AsyncClient:
        """Shared transport handle."""

    async def pre_request(self, request: RequestBuilder) -> RequestBuilder:
        """Customize the request before auth, headers and body are applied.

        Raising here aborts the call before any network I/O.
        """
        return request

    async def post_response(self, response: httpx.Response) -> httpx.Response:
        """Inspect the response before it is decoded.

        Non-success statuses are returned as-is unless this hook raises.
        """
        return response


CAPABILITY_MEMBERS = frozenset({"client", "pre_request", "post_response", "auth"})


class ApiClient(Api):
    """
    Default client: one shared ``httpx.AsyncClient`` and one auth strategy.

    Example:
        >>> async with Todos(BearerAuth("secret")) as api:
        ...     todo = await api.todo(1)

        With custom config:
        >>> config = ApiClientConfig(timeout=5.0, verify_ssl=False)
        >>> api = Todos(config=config)
    """

    def __init__(
        self,
        auth: Optional[AuthStrategy] = None,
        *,
        config: Optional[ApiClientConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            auth: Auth strategy (derived from config when omitted)
            config: Transport/credential configuration (global settings when omitted)
            client: Pre-built transport; ``config`` transport options are then ignored
        """
        self._config = config or get_settings()
        self._config.apply_log_level()
        self.auth = auth if auth is not None else auth_from_config(self._config)
        self._owns_client = client is None
        self._client = client if client is not None else self._build_client()

    @property
    def config(self) -> ApiClientConfig:
        return self._config

    def _build_client(self) -> httpx.AsyncClient:
        timeout_config = httpx.Timeout(
            timeout=self.config.timeout,
            connect=self.config.connect_timeout,
        )
        logger.debug(f"Creating transport for {type(self).__name__}")
        return httpx.AsyncClient(
            base_url=self.config.base_url,
            headers={"User-Agent": self.config.user_agent},
            timeout=timeout_config,
            verify=self.config.verify_ssl,
            follow_redirects=self.config.follow_redirects,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_client:
            await self._client.aclose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(auth={self.auth!r})"


__all__ = ["Api", "ApiClient", "CAPABILITY_MEMBERS"]
