"""
Operation generator.

Turns endpoint descriptors into coroutine methods on a client class. The whole
descriptor set is validated before anything is bound, so a failure leaves the
class untouched and no call can fail for a reason that was knowable here.

Three entry points:

    Generator(constants).generate(cls, descriptors)   # descriptor table
    @generate(constants=...)                          # class-body declarations
    define_client(name, descriptors, constants=...)   # new ApiClient subclass

Example:
    ```python
    @generate
    class JsonPlaceholder(ApiClient):
        BASE_URL = "https://jsonplaceholder.typicode.com"

        todos = endpoint("GET", "{BASE_URL}/todos", response=Json(List[Todo]))
        todo = endpoint("GET", "{BASE_URL}/todos/{id}", params=[("id", int)], response=Json(Todo))
        create_todo = endpoint("POST", "{BASE_URL}/todos", body=JsonBody(CreateTodo), response=Json(Todo))
        delete_todo = endpoint("DELETE", "{BASE_URL}/todos/{id}", params=[("id", int)], response=STATUS_CODE)

    async with JsonPlaceholder() as api:
        todo = await api.todo(1)
    ```
"""

from __future__ import annotations

import inspect
import keyword
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import PydanticUndefinedAnnotation, PydanticUserError, TypeAdapter

from .capability import CAPABILITY_MEMBERS, Api, ApiClient
from .descriptor import HTTP_METHODS, EndpointDescriptor
from .errors import GenerationError
from .kinds import (
    BODY_KINDS,
    RESPONSE_KINDS,
    Json,
    declared_fields,
    has_field_placeholders,
    is_supported_pair,
)
from .pipeline import CompiledEndpoint, execute, freeze_constants
from .template import parse_template

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


def _check_identifier(name: Any, what: str, operation: Optional[str]) -> None:
    if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
        raise GenerationError(f"Invalid {what} {name!r}", operation=operation)


class Generator:
    """
    Validates descriptors and binds generated operations onto client classes.

    Args:
        constants: Names available to every template in addition to call
            parameters and body fields
    """

    def __init__(self, constants: Optional[Mapping[str, Any]] = None):
        self.constants: Dict[str, Any] = dict(constants or {})

    def compile(self, descriptor: EndpointDescriptor) -> CompiledEndpoint:
        """Validate one descriptor and prepare it for execution."""
        name = descriptor.name
        if name is None:
            raise GenerationError("Endpoint descriptor has no operation name")
        _check_identifier(name, "operation name", name)
        if name.startswith("_"):
            raise GenerationError(
                f"Operation name {name!r} must not start with an underscore",
                operation=name,
            )

        method = descriptor.method.upper()
        if method not in HTTP_METHODS:
            raise GenerationError(
                f"Unsupported HTTP method {descriptor.method!r} in operation '{name}'",
                operation=name,
            )

        body, response = descriptor.body, descriptor.response
        if not isinstance(body, BODY_KINDS):
            raise GenerationError(
                f"Unknown body kind {body!r} in operation '{name}'", operation=name
            )
        if not isinstance(response, RESPONSE_KINDS):
            raise GenerationError(
                f"Unknown response kind {response!r} in operation '{name}'",
                operation=name,
            )
        if not is_supported_pair(body, response):
            raise GenerationError(
                f"Unsupported combination {type(body).__name__}/"
                f"{type(response).__name__} in operation '{name}'",
                operation=name,
            )
        if method == "HEAD" and response.reads_body:
            raise GenerationError(
                f"HEAD operation '{name}' has no response body to decode; "
                f"use the StatusCode response kind",
                operation=name,
            )

        # Parameters: the body (if any) comes first, then extra params.
        taken = {"self"}
        if body.takes_value:
            _check_identifier(descriptor.body_name, "body parameter name", name)
            if descriptor.body_name in taken:
                raise GenerationError(
                    f"Body parameter name {descriptor.body_name!r} is reserved",
                    operation=name,
                )
            taken.add(descriptor.body_name)
        for param in descriptor.params:
            _check_identifier(param.name, "parameter name", name)
            if param.name in taken:
                raise GenerationError(
                    f"Duplicate parameter {param.name!r} in operation '{name}'",
                    operation=name,
                )
            taken.add(param.name)

        fields: Tuple[str, ...] = ()
        if has_field_placeholders(body):
            fields = declared_fields(body.type) or ()

        scope = set(self.constants) | set(fields) | set(descriptor.param_names)

        url = parse_template(descriptor.url, name)
        url.check_scope(scope, name, "URL")

        headers = []
        for header_name, value in descriptor.headers:
            template = parse_template(value, name)
            template.check_scope(scope, name, f"header '{header_name}'")
            headers.append((header_name, template))

        referenced = set(url.placeholders)
        for _, template in headers:
            referenced.update(template.placeholders)
        body_fields = tuple(
            f for f in fields
            if f in referenced and f not in descriptor.param_names
        )

        adapter = None
        if isinstance(response, Json):
            try:
                adapter = TypeAdapter(response.type)
                if not adapter.pydantic_complete:
                    adapter.rebuild(raise_errors=True)
            except (PydanticUserError, PydanticUndefinedAnnotation) as e:
                raise GenerationError(
                    f"Cannot decode responses into {response.type!r} "
                    f"in operation '{name}': {e}",
                    operation=name,
                ) from e
            if not adapter.pydantic_complete:
                raise GenerationError(
                    f"Response type {response.type!r} in operation '{name}' "
                    f"is not fully defined",
                    operation=name,
                )

        return CompiledEndpoint(
            descriptor=descriptor,
            method=method,
            url=url,
            headers=tuple(headers),
            constants=freeze_constants(self.constants),
            body_fields=body_fields,
            adapter=adapter,
        )

    def compile_all(self, descriptors: Iterable[EndpointDescriptor]) -> List[CompiledEndpoint]:
        """Validate a descriptor set; fails on the first bad descriptor."""
        compiled = []
        seen = set()
        for descriptor in descriptors:
            if descriptor.name in seen:
                raise GenerationError(
                    f"Duplicate operation '{descriptor.name}'",
                    operation=descriptor.name,
                )
            seen.add(descriptor.name)
            compiled.append(self.compile(descriptor))
        return compiled

    def generate(self, cls: Type[T], descriptors: Iterable[EndpointDescriptor]) -> Type[T]:
        """Bind one generated operation per descriptor onto ``cls``."""
        if not (isinstance(cls, type) and issubclass(cls, Api)):
            raise GenerationError(
                f"{cls!r} does not implement the Api capability interface"
            )
        # Virtual subclasses registered on Api inherit none of its members.
        missing = sorted(
            member for member in CAPABILITY_MEMBERS
            if inspect.getattr_static(cls, member, _MISSING) is _MISSING
        )
        if missing:
            raise GenerationError(
                f"{cls.__name__} is missing capability members: {', '.join(missing)}"
            )

        compiled = self.compile_all(descriptors)

        for endpoint in compiled:
            name = endpoint.name
            if name in CAPABILITY_MEMBERS:
                raise GenerationError(
                    f"Operation '{name}' would replace the capability member "
                    f"{cls.__name__}.{name}",
                    operation=name,
                )
            existing = inspect.getattr_static(cls, name, _MISSING)
            if existing is not _MISSING and not _is_replaceable(existing):
                raise GenerationError(
                    f"Operation '{name}' clashes with existing attribute "
                    f"{cls.__name__}.{name}",
                    operation=name,
                )

        for endpoint in compiled:
            setattr(cls, endpoint.name, make_operation(endpoint, cls))
            logger.debug(
                f"Generated {cls.__name__}.{endpoint.name} "
                f"({endpoint.method} {endpoint.url.source})"
            )
        return cls


def _is_replaceable(attr: Any) -> bool:
    """Descriptors awaiting generation and previously generated operations."""
    return isinstance(attr, EndpointDescriptor) or hasattr(attr, "__api_descriptor__")


def build_signature(descriptor: EndpointDescriptor) -> inspect.Signature:
    """Signature of the generated method: self, optional body, then params."""
    kind = inspect.Parameter.POSITIONAL_OR_KEYWORD
    parameters = [inspect.Parameter("self", kind)]
    if descriptor.body.takes_value:
        parameters.append(
            inspect.Parameter(descriptor.body_name, kind, annotation=descriptor.body.type)
        )
    for param in descriptor.params:
        parameters.append(inspect.Parameter(param.name, kind, annotation=param.annotation))
    return inspect.Signature(parameters, return_annotation=descriptor.response.return_type)


def make_operation(endpoint: CompiledEndpoint, owner: type) -> Callable[..., Any]:
    """Create the coroutine method for one compiled endpoint."""
    descriptor = endpoint.descriptor
    signature = build_signature(descriptor)
    takes_body = descriptor.body.takes_value

    async def operation(self, *args, **kwargs):
        values = list(signature.bind(self, *args, **kwargs).arguments.values())[1:]
        if takes_body:
            return await execute(self, endpoint, values[0], tuple(values[1:]))
        return await execute(self, endpoint, None, tuple(values))

    operation.__name__ = descriptor.name
    operation.__qualname__ = f"{owner.__qualname__}.{descriptor.name}"
    operation.__module__ = owner.__module__
    operation.__doc__ = descriptor.doc or f"{endpoint.method} {descriptor.url}"
    operation.__signature__ = signature
    operation.__annotations__ = {
        p.name: p.annotation for p in list(signature.parameters.values())[1:]
    }
    operation.__annotations__["return"] = signature.return_annotation
    operation.__api_descriptor__ = descriptor
    operation.__api_endpoint__ = endpoint
    return operation


def class_constants(cls: type) -> Dict[str, Any]:
    """Upper-case str/int/float class attributes, base classes first."""
    constants: Dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if name.startswith("_") or not name.isupper():
                continue
            if isinstance(value, (str, int, float)):
                constants[name] = value
    return constants


def generate(cls: Optional[type] = None, *, constants: Optional[Mapping[str, Any]] = None):
    """
    Class decorator generating operations from class-body descriptors.

    Each class attribute holding an ``EndpointDescriptor`` becomes a method
    of the same name. Templates may use the class's upper-case constants and
    the explicit ``constants`` mapping, which takes precedence.
    """

    def wrap(target: type) -> type:
        scope = class_constants(target)
        scope.update(constants or {})
        descriptors = [
            value.named(attr)
            for attr, value in vars(target).items()
            if isinstance(value, EndpointDescriptor)
        ]
        return Generator(scope).generate(target, descriptors)

    if cls is None:
        return wrap
    return wrap(cls)


def define_client(
    name: str,
    descriptors: Iterable[EndpointDescriptor],
    constants: Optional[Mapping[str, Any]] = None,
    base: Type[ApiClient] = ApiClient,
    doc: Optional[str] = None,
) -> Type[ApiClient]:
    """
    Create a new client class with generated operations.

    Instances are built through ``ApiClient.__init__``, which wires a fresh
    transport and the supplied auth strategy or configuration:

        >>> Todos = define_client("Todos", [todo, create_todo], {"BASE": BASE})
        >>> api = Todos(BearerAuth(token))
    """
    namespace = {
        "__doc__": doc or f"Generated API client {name}.",
        "__module__": base.__module__,
        "__qualname__": name,
    }
    cls = type(name, (base,), namespace)
    return Generator(constants).generate(cls, descriptors)


__all__ = [
    "Generator",
    "generate",
    "define_client",
    "build_signature",
    "make_operation",
    "class_constants",
]
