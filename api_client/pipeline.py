"""
Request assembly pipeline.

Every generated operation runs the same fixed sequence per call:

    1. render the URL template
    2. build a base request on the client's transport
    3. await ``api.pre_request``
    4. apply ``api.auth``
    5. render header templates
    6. attach the body
    7. send
    8. await ``api.post_response``
    9. decode per response kind

Exactly one request is sent per call. Nothing is retried, cached or
translated: transport, hook and decode failures reach the caller unchanged,
and a non-success status is returned like any other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx
from pydantic import TypeAdapter
from pydantic_core import to_jsonable_python

from .auth import apply_auth
from .capability import Api
from .descriptor import EndpointDescriptor
from .kinds import (
    Bytes,
    FormBody,
    Json,
    JsonBody,
    MultipartBody,
    NoBody,
    StatusCode,
    Text,
    body_field,
)
from .multipart import MultipartForm
from .request import RequestBuilder
from .template import Template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledEndpoint:
    """A validated descriptor with its templates parsed and scope fixed."""

    descriptor: EndpointDescriptor
    method: str
    url: Template
    headers: Tuple[Tuple[str, Template], ...]
    constants: Mapping[str, Any]
    body_fields: Tuple[str, ...] = ()
    adapter: Optional[TypeAdapter] = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    def scope(self, body: Any, args: Tuple[Any, ...]) -> Dict[str, Any]:
        """Placeholder values for one call. Params shadow body fields,
        which shadow constants."""
        values = dict(self.constants)
        for field_name in self.body_fields:
            values[field_name] = body_field(body, field_name)
        values.update(zip(self.descriptor.param_names, args))
        return values


def freeze_constants(constants: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(constants))


def attach_body(request: RequestBuilder, kind: Any, value: Any) -> RequestBuilder:
    """Encode ``value`` onto ``request`` according to the body kind."""
    if isinstance(kind, NoBody):
        return request
    if isinstance(kind, JsonBody):
        return request.json(to_jsonable_python(value, by_alias=True))
    if isinstance(kind, FormBody):
        # Unset optional fields are omitted, not sent blank.
        pairs = to_jsonable_python(value, by_alias=True, exclude_none=True)
        if not isinstance(pairs, dict):
            raise TypeError(
                f"Form body must serialize to a mapping, got {type(value).__name__}"
            )
        return request.form(pairs)
    if isinstance(kind, MultipartBody):
        if not isinstance(value, MultipartForm):
            raise TypeError(
                f"Multipart body must be a MultipartForm, got {type(value).__name__}"
            )
        return request.multipart(value)
    raise TypeError(f"Unsupported body kind: {type(kind).__name__}")


def decode(response: httpx.Response, endpoint: CompiledEndpoint) -> Any:
    """Convert the response per the endpoint's response kind."""
    kind = endpoint.descriptor.response
    if isinstance(kind, StatusCode):
        return response.status_code
    if isinstance(kind, Text):
        return response.text
    if isinstance(kind, Bytes):
        return response.content
    if isinstance(kind, Json):
        return endpoint.adapter.validate_json(response.content)
    raise TypeError(f"Unsupported response kind: {type(kind).__name__}")


async def assemble(
    api: Api,
    endpoint: CompiledEndpoint,
    body: Any = None,
    args: Tuple[Any, ...] = (),
) -> RequestBuilder:
    """Run steps 1-6 and return the request ready for dispatch."""
    scope = endpoint.scope(body, args)
    url = endpoint.url.render(scope)

    request = RequestBuilder(api.client, endpoint.method, url)
    request = await api.pre_request(request)
    request = apply_auth(request, api.auth)

    for name, template in endpoint.headers:
        request.header(name, template.render(scope))

    return attach_body(request, endpoint.descriptor.body, body)


async def execute(
    api: Api,
    endpoint: CompiledEndpoint,
    body: Any = None,
    args: Tuple[Any, ...] = (),
) -> Any:
    """Perform one call of ``endpoint`` and return the decoded outcome."""
    request = await assemble(api, endpoint, body, args)

    logger.debug(f"{endpoint.name}: {request.method} {request.url}")
    response = await api.client.send(request.build())
    logger.debug(f"{endpoint.name}: HTTP {response.status_code}")

    response = await api.post_response(response)
    return decode(response, endpoint)


__all__ = [
    "CompiledEndpoint",
    "assemble",
    "attach_body",
    "decode",
    "execute",
    "freeze_constants",
]
