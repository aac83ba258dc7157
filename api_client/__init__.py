"""
api_client - Declarative async HTTP clients

Describe HTTP operations once (verb, URL template, body kind, response kind,
header templates) and get typed coroutine methods that perform them against a
shared ``httpx.AsyncClient``.

Usage:
    >>> from api_client import ApiClient, Json, JsonBody, STATUS_CODE, endpoint, generate
    >>>
    >>> @generate
    ... class JsonPlaceholder(ApiClient):
    ...     BASE_URL = "https://jsonplaceholder.typicode.com"
    ...
    ...     todo = endpoint("GET", "{BASE_URL}/todos/{id}", params=[("id", int)], response=Json(Todo))
    ...     create_todo = endpoint("POST", "{BASE_URL}/todos", body=JsonBody(CreateTodo), response=Json(Todo))
    ...     delete_todo = endpoint("DELETE", "{BASE_URL}/todos/{id}", params=[("id", int)], response=STATUS_CODE)
    >>>
    >>> async with JsonPlaceholder() as api:
    ...     todo = await api.todo(1)

Key Features:
    - Templates validated when the class is generated, never at call time
    - One fixed assembly pipeline per call: hook, auth, headers, body, send, decode
    - Pluggable auth (basic, bearer, custom header) or a custom pre-request hook
    - Non-success statuses are returned, not raised
"""

from .auth import (
    NO_AUTH,
    AuthStrategy,
    BasicAuth,
    BearerAuth,
    HeaderAuth,
    NoAuth,
    auth_from_config,
)
from .capability import Api, ApiClient
from .config import ApiClientConfig, get_settings, reset_settings
from .descriptor import EndpointDescriptor, Param, endpoint
from .errors import ApiClientError, AuthError, GenerationError
from .generator import Generator, define_client, generate
from .kinds import (
    BYTES,
    NO_BODY,
    STATUS_CODE,
    TEXT,
    Bytes,
    FormBody,
    Json,
    JsonBody,
    MultipartBody,
    NoBody,
    StatusCode,
    Text,
)
from .multipart import MultipartForm
from .request import RequestBuilder
from .stubs import StubGenerator

__version__ = "0.1.0"

__all__ = [
    # Generation
    "Generator",
    "generate",
    "define_client",
    "endpoint",
    "EndpointDescriptor",
    "Param",
    # Capability interface
    "Api",
    "ApiClient",
    "RequestBuilder",
    # Body kinds
    "NoBody",
    "JsonBody",
    "FormBody",
    "MultipartBody",
    "MultipartForm",
    "NO_BODY",
    # Response kinds
    "StatusCode",
    "Text",
    "Bytes",
    "Json",
    "STATUS_CODE",
    "TEXT",
    "BYTES",
    # Auth
    "AuthStrategy",
    "NoAuth",
    "BasicAuth",
    "BearerAuth",
    "HeaderAuth",
    "NO_AUTH",
    "auth_from_config",
    # Configuration
    "ApiClientConfig",
    "get_settings",
    "reset_settings",
    # Stubs
    "StubGenerator",
    # Exceptions
    "ApiClientError",
    "GenerationError",
    "AuthError",
    # Version
    "__version__",
]
