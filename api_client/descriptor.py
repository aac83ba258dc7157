"""
Endpoint descriptors.

A descriptor is the immutable metadata for one HTTP operation. It is declared
once and shared by every call to the generated method.

Example:
    ```python
    todo = endpoint(
        "GET",
        "{BASE_URL}/todos/{id}",
        params=[("id", int)],
        response=Json(Todo),
        headers={"User-Agent": "{ua}"},
    )
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional, Tuple, Union

from .kinds import NO_BODY, TEXT, BodyKind, ResponseKind

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")


@dataclass(frozen=True)
class Param:
    """An extra call parameter, passed positionally after the body."""

    name: str
    annotation: Any = Any


ParamSpec = Union[Param, str, Tuple[str, Any]]
HeaderSpec = Union[Mapping, Iterable[Tuple[str, str]]]


@dataclass(frozen=True)
class EndpointDescriptor:
    """Immutable metadata for one operation."""

    name: Optional[str]
    method: str
    url: str
    params: Tuple[Param, ...] = ()
    body: BodyKind = NO_BODY
    response: ResponseKind = TEXT
    headers: Tuple[Tuple[str, str], ...] = ()
    body_name: str = "request"
    doc: Optional[str] = None

    def named(self, name: str) -> EndpointDescriptor:
        """Copy of this descriptor bound to an operation name."""
        return replace(self, name=name)

    @property
    def param_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.params)


def _to_param(spec: ParamSpec) -> Param:
    if isinstance(spec, Param):
        return spec
    if isinstance(spec, str):
        return Param(spec)
    name, annotation = spec
    return Param(name, annotation)


def _to_headers(headers: HeaderSpec) -> Tuple[Tuple[str, str], ...]:
    items = headers.items() if isinstance(headers, Mapping) else headers
    return tuple((str(name), str(value)) for name, value in items)


def endpoint(
    method: str,
    url: str,
    *,
    params: Iterable[ParamSpec] = (),
    body: BodyKind = NO_BODY,
    response: ResponseKind = TEXT,
    headers: HeaderSpec = (),
    body_name: str = "request",
    doc: Optional[str] = None,
    name: Optional[str] = None,
) -> EndpointDescriptor:
    """
    Declare an endpoint.

    Args:
        method: HTTP verb (case-insensitive)
        url: URL template; ``{name}`` placeholders refer to params, body
            fields (JSON/form bodies) or constants
        params: Extra parameters in call order, as ``Param``, ``(name, type)``
            or a bare name
        body: Body kind
        response: Response kind
        headers: Header templates, as a mapping or ``(name, value)`` pairs
        body_name: Name of the body parameter in the generated signature
        doc: Docstring for the generated method
        name: Operation name; filled from the attribute name when declared in
            a class body

    Returns:
        EndpointDescriptor
    """
    return EndpointDescriptor(
        name=name,
        method=method.upper(),
        url=url,
        params=tuple(_to_param(p) for p in params),
        body=body,
        response=response,
        headers=_to_headers(headers),
        body_name=body_name,
        doc=doc,
    )


__all__ = ["EndpointDescriptor", "Param", "endpoint", "HTTP_METHODS"]
