"""
Type stub generation for generated clients.

Generated operations are bound at import time, so static type checkers cannot
see them. ``StubGenerator`` renders a ``.pyi`` module declaring every
generated method with its parameter and return annotations.

Example:
    ```python
    source = StubGenerator().generate_module(JsonPlaceholder)
    Path("clients.pyi").write_text(source)
    ```

Output is deterministic: same classes in, same text out.
"""

import inspect
import types
import typing
from typing import Any, Dict, List, Set, Tuple

from .errors import GenerationError


def _docstring(doc: str) -> str:
    """Quote ``doc`` as a one-line string literal."""
    if '"' in doc or "\\" in doc or "\n" in doc or "\r" in doc:
        return repr(doc)
    return f'"""{doc}"""'


class StubGenerator:
    """Renders ``.pyi`` source for client classes with generated operations."""

    def __init__(self, indent: str = "    "):
        """
        Initialize stub generator.

        Args:
            indent: Indentation string (default: 4 spaces)
        """
        self.indent = indent
        self._imports: Dict[str, Set[str]] = {}

    def _import(self, module: str, name: str) -> None:
        if module == "builtins":
            return
        self._imports.setdefault(module, set()).add(name)

    def render_annotation(self, annotation: Any) -> str:
        """Render an annotation, recording the imports it needs."""
        if annotation is Any or annotation is inspect.Parameter.empty:
            self._import("typing", "Any")
            return "Any"
        if annotation is None or annotation is type(None):
            return "None"

        origin = typing.get_origin(annotation)
        args = typing.get_args(annotation)

        if origin is typing.Union or origin is types.UnionType:
            non_none = [a for a in args if a is not type(None)]
            if len(non_none) == 1 and len(args) == 2:
                self._import("typing", "Optional")
                return f"Optional[{self.render_annotation(non_none[0])}]"
            self._import("typing", "Union")
            return f"Union[{', '.join(self.render_annotation(a) for a in args)}]"
        if origin is typing.Literal:
            self._import("typing", "Literal")
            return f"Literal[{', '.join(repr(a) for a in args)}]"
        if origin is not None:
            base = self.render_annotation(origin)
            if not args:
                return base
            return f"{base}[{', '.join(self.render_annotation(a) for a in args)}]"

        if isinstance(annotation, type):
            self._import(annotation.__module__, annotation.__qualname__.split(".")[0])
            return annotation.__qualname__
        if isinstance(annotation, str):
            return annotation
        raise GenerationError(f"Cannot render annotation {annotation!r} in a stub")

    def operations(self, cls: type) -> List[Tuple[str, Any]]:
        """Generated operations defined on ``cls``, sorted by name."""
        found = [
            (name, value)
            for name, value in vars(cls).items()
            if hasattr(value, "__api_descriptor__")
        ]
        return sorted(found, key=lambda item: item[0])

    def generate_class(self, cls: type) -> str:
        """Render the stub for one client class."""
        lines = []

        bases = [self.render_annotation(base) for base in cls.__bases__]
        lines.append(f"class {cls.__name__}({', '.join(bases)}):")

        operations = self.operations(cls)
        if not operations:
            lines.append(f"{self.indent}...")
            return "\n".join(lines)

        for name, operation in operations:
            signature = inspect.signature(operation)
            params = ["self"]
            for param in list(signature.parameters.values())[1:]:
                params.append(f"{param.name}: {self.render_annotation(param.annotation)}")
            returns = self.render_annotation(signature.return_annotation)

            lines.append(f"{self.indent}async def {name}({', '.join(params)}) -> {returns}:")
            if operation.__doc__:
                lines.append(f"{self.indent}{self.indent}{_docstring(operation.__doc__)}")
            lines.append(f"{self.indent}{self.indent}...")

        return "\n".join(lines)

    def generate_module(self, *classes: type) -> str:
        """Render a complete stub module for ``classes``."""
        self._imports = {}
        bodies = [self.generate_class(cls) for cls in classes]

        lines = []
        lines.append('"""')
        lines.append("Type stubs for generated API clients.")
        lines.append("")
        lines.append("DO NOT EDIT: This file is auto-generated.")
        lines.append('"""')
        lines.append("")

        for module in sorted(self._imports):
            names = ", ".join(sorted(self._imports[module]))
            lines.append(f"from {module} import {names}")
        lines.append("")
        lines.append("")

        lines.append("\n\n\n".join(bodies))
        lines.append("")
        return "\n".join(lines)


__all__ = ["StubGenerator"]
