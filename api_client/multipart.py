"""Pre-built multipart/form-data payloads."""

from __future__ import annotations

from typing import IO, Any, List, Optional, Tuple, Union

FileContent = Union[bytes, str, IO[bytes]]
Part = Tuple[str, Tuple[Optional[str], FileContent, Optional[str]]]


class MultipartForm:
    """
    A multipart form assembled by the caller before the call.

    Parts keep the order in which they were added. Encoding and the
    boundary are left to the transport.

    Example:
        >>> form = MultipartForm().text("title", "report").file(
        ...     "upload", b"...", filename="report.pdf", content_type="application/pdf"
        ... )
        >>> await api.upload(form)
    """

    def __init__(self) -> None:
        self._parts: List[Part] = []

    def text(self, name: str, value: Any) -> MultipartForm:
        """Add a plain text part."""
        self._parts.append((name, (None, str(value), None)))
        return self

    def file(
        self,
        name: str,
        content: FileContent,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> MultipartForm:
        """Add a file part."""
        self._parts.append((name, (filename, content, content_type)))
        return self

    @property
    def field_names(self) -> List[str]:
        return [name for name, _ in self._parts]

    def to_httpx(self) -> List[Part]:
        """Return the ``files`` argument for ``httpx.AsyncClient.build_request``.

        Text parts travel as file parts without a filename so that a form
        holding only text is still sent as multipart.
        """
        return list(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def __repr__(self) -> str:
        return f"MultipartForm(parts={self.field_names!r})"


__all__ = ["MultipartForm"]
