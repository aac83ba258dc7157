"""
Placeholder templates for URLs and header values.

Grammar:
    template    := (literal | escape | placeholder)*
    escape      := "{{" | "}}"
    placeholder := "{" identifier "}"

Templates are parsed and checked against their scope once, when operations are
generated, then rendered per call by plain string substitution.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Collection, Mapping, Optional, Tuple, Union

from .errors import GenerationError


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Placeholder:
    name: str


Segment = Union[Literal, Placeholder]


@dataclass(frozen=True)
class Template:
    """A parsed template: literal runs and placeholders in source order."""

    source: str
    segments: Tuple[Segment, ...]

    @property
    def placeholders(self) -> Tuple[str, ...]:
        return tuple(s.name for s in self.segments if isinstance(s, Placeholder))

    @property
    def is_static(self) -> bool:
        return not self.placeholders

    def check_scope(
        self,
        scope: Collection[str],
        operation: Optional[str] = None,
        where: str = "template",
    ) -> None:
        """Reject the first placeholder that is not in ``scope``."""
        for name in self.placeholders:
            if name not in scope:
                target = f" in operation '{operation}'" if operation else ""
                raise GenerationError(
                    f"Unresolved placeholder '{{{name}}}' in {where} "
                    f"{self.source!r}{target}",
                    operation=operation,
                    placeholder=name,
                )

    def render(self, values: Mapping[str, Any]) -> str:
        parts = []
        for segment in self.segments:
            if isinstance(segment, Literal):
                parts.append(segment.text)
            else:
                parts.append(str(values[segment.name]))
        return "".join(parts)


def parse_template(source: str, operation: Optional[str] = None) -> Template:
    """Parse ``source`` into a Template.

    Raises:
        GenerationError: On an unbalanced brace or a placeholder that is not an
            identifier.
    """
    segments = []
    literal = []
    i = 0
    n = len(source)

    def fail(reason: str) -> GenerationError:
        return GenerationError(
            f"Invalid template {source!r}: {reason} at offset {i}",
            operation=operation,
        )

    while i < n:
        ch = source[i]
        if ch == "{":
            if source.startswith("{{", i):
                literal.append("{")
                i += 2
                continue
            end = source.find("}", i + 1)
            if end == -1:
                raise fail("unclosed '{'")
            name = source[i + 1:end]
            if not name.isidentifier():
                raise fail(f"placeholder {name!r} is not an identifier")
            if literal:
                segments.append(Literal("".join(literal)))
                literal = []
            segments.append(Placeholder(name))
            i = end + 1
        elif ch == "}":
            if source.startswith("}}", i):
                literal.append("}")
                i += 2
                continue
            raise fail("unmatched '}'")
        else:
            literal.append(ch)
            i += 1

    if literal:
        segments.append(Literal("".join(literal)))
    return Template(source=source, segments=tuple(segments))


__all__ = ["Template", "Literal", "Placeholder", "parse_template"]
