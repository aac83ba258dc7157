"""Models and transport doubles shared by the api_client tests."""

from dataclasses import dataclass
from typing import List, Optional

import httpx
from pydantic import BaseModel


class Item(BaseModel):
    id: int
    name: str


class Todo(BaseModel):
    user_id: int
    id: int
    title: str
    completed: bool


@dataclass
class Pair:
    a: int
    b: int


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(
        self,
        status_code: int = 200,
        content: bytes = b"",
        headers: Optional[dict] = None,
    ):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.content, headers=self.headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_http(recorder, **kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(recorder), **kwargs)
