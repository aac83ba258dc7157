"""
Body and response kinds.

Two closed sets of tagged alternatives that fix, per endpoint, how the request
payload is encoded and how the response is consumed:

    Body kinds:      NoBody, JsonBody(T), FormBody(T), MultipartBody
    Response kinds:  StatusCode, Text, Bytes, Json(T)

Example:
    ```python
    endpoint("POST", "{BASE}/todos", body=JsonBody(CreateTodo), response=Json(Todo))
    ```
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, FrozenSet, Optional, Tuple, Type, Union, is_typeddict

from pydantic import BaseModel

from .multipart import MultipartForm


@dataclass(frozen=True)
class NoBody:
    """The request carries no payload."""

    takes_value: ClassVar[bool] = False


@dataclass(frozen=True)
class JsonBody:
    """Serialize the body argument as JSON."""

    type: Any = Any
    takes_value: ClassVar[bool] = True


@dataclass(frozen=True)
class FormBody:
    """Serialize the body argument as URL-encoded key/value pairs."""

    type: Any = Any
    takes_value: ClassVar[bool] = True


@dataclass(frozen=True)
class MultipartBody:
    """Attach a pre-built ``MultipartForm`` passed as the body argument."""

    takes_value: ClassVar[bool] = True

    @property
    def type(self) -> Any:
        return MultipartForm


BodyKind = Union[NoBody, JsonBody, FormBody, MultipartBody]


@dataclass(frozen=True)
class StatusCode:
    """Return only the response status code."""

    reads_body: ClassVar[bool] = False

    @property
    def return_type(self) -> Any:
        return int


@dataclass(frozen=True)
class Text:
    """Return the decoded response text."""

    reads_body: ClassVar[bool] = True

    @property
    def return_type(self) -> Any:
        return str


@dataclass(frozen=True)
class Bytes:
    """Return the raw response body."""

    reads_body: ClassVar[bool] = True

    @property
    def return_type(self) -> Any:
        return bytes


@dataclass(frozen=True)
class Json:
    """Parse the response body as JSON into ``type``."""

    type: Any = Any
    reads_body: ClassVar[bool] = True

    @property
    def return_type(self) -> Any:
        return self.type


ResponseKind = Union[StatusCode, Text, Bytes, Json]

NO_BODY = NoBody()
STATUS_CODE = StatusCode()
TEXT = Text()
BYTES = Bytes()

BODY_KINDS: Tuple[Type[Any], ...] = (NoBody, JsonBody, FormBody, MultipartBody)
RESPONSE_KINDS: Tuple[Type[Any], ...] = (StatusCode, Text, Bytes, Json)

# Every body kind can be combined with every response kind.
SUPPORTED_PAIRS: FrozenSet[Tuple[Type[Any], Type[Any]]] = frozenset(
    (body, response) for body in BODY_KINDS for response in RESPONSE_KINDS
)


def is_supported_pair(body: Any, response: Any) -> bool:
    """Check a body-kind/response-kind combination."""
    return (type(body), type(response)) in SUPPORTED_PAIRS


def has_field_placeholders(body: Any) -> bool:
    """Only structured bodies expose their fields to templates."""
    return isinstance(body, (JsonBody, FormBody))


def declared_fields(tp: Any) -> Optional[Tuple[str, ...]]:
    """Field names declared by a body type, in declaration order.

    Returns None when the type does not declare its fields (plain dicts,
    ``Any``), in which case no placeholder may refer to the body.
    """
    if isinstance(tp, type) and issubclass(tp, BaseModel):
        return tuple(tp.model_fields)
    if dataclasses.is_dataclass(tp) and isinstance(tp, type):
        return tuple(f.name for f in dataclasses.fields(tp))
    if is_typeddict(tp):
        return tuple(tp.__annotations__)
    return None


def body_field(value: Any, name: str) -> Any:
    """Read one declared field from a body value."""
    if isinstance(value, Mapping):
        return value[name]
    return getattr(value, name)


__all__ = [
    "BodyKind",
    "NoBody",
    "JsonBody",
    "FormBody",
    "MultipartBody",
    "ResponseKind",
    "StatusCode",
    "Text",
    "Bytes",
    "Json",
    "NO_BODY",
    "STATUS_CODE",
    "TEXT",
    "BYTES",
    "SUPPORTED_PAIRS",
    "is_supported_pair",
    "has_field_placeholders",
    "declared_fields",
    "body_field",
]
