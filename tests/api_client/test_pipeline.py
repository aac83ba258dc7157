"""Tests for the request assembly pipeline.

Requests go through httpx.MockTransport, so every assertion is made on the
request exactly as the transport received it.
"""

import asyncio
import json
from typing import Optional

import httpx
import pytest
from pydantic import BaseModel, ValidationError

from api_client import (
    BYTES,
    STATUS_CODE,
    TEXT,
    ApiClient,
    AuthError,
    BearerAuth,
    FormBody,
    Generator,
    Json,
    JsonBody,
    MultipartBody,
    MultipartForm,
    endpoint,
    generate,
)
from api_client.pipeline import assemble
from tests.api_client.helpers import Item, Pair, Recorder, Todo, make_http

BASE = "https://api.example.com"


class PairPatch(BaseModel):
    a: int
    b: Optional[int] = None


@generate
class Example(ApiClient):
    BASE = BASE

    item = endpoint("GET", "{BASE}/items/{id}", params=[("id", int)], response=Json(Item))
    item_text = endpoint("GET", "{BASE}/items/{id}", params=[("id", int)], response=TEXT)
    item_bytes = endpoint("GET", "{BASE}/items/{id}", params=[("id", int)], response=BYTES)
    delete_item = endpoint("DELETE", "{BASE}/items/{id}", params=[("id", int)], response=STATUS_CODE)
    create_todo = endpoint("POST", "{BASE}/todos", body=JsonBody(Todo), response=Json(Todo))
    replace_todo = endpoint(
        "PUT", "{BASE}/todos/{id}", params=[("id", int)], body=JsonBody(Todo), response=STATUS_CODE
    )
    submit_pair = endpoint("POST", "{BASE}/pairs", body=FormBody(Pair), response=BYTES)
    pair_by_field = endpoint("PUT", "{BASE}/pairs/{a}", body=JsonBody(Pair), response=STATUS_CODE)
    get_ua = endpoint("GET", "{BASE}/ua", params=["ua"], headers={"User-Agent": "{ua}"}, response=TEXT)
    upload = endpoint("POST", "{BASE}/upload", body=MultipartBody(), response=STATUS_CODE)
    ordered = endpoint(
        "POST", "{BASE}/ordered", body=JsonBody(dict),
        headers={"X-Order": "descriptor"}, response=STATUS_CODE,
    )
    relative = endpoint("GET", "/items/{id}", params=[("id", int)], response=STATUS_CODE)
    patch_pair = endpoint("PATCH", "{BASE}/pairs", body=FormBody(PairPatch), response=STATUS_CODE)


@pytest.fixture
def api(config, http):
    return Example(config=config, client=http)


class TestOperations:
    """End-to-end behaviour of generated operations."""

    @pytest.mark.asyncio
    async def test_get_decoded_object(self, api, recorder):
        recorder.content = b'{"id":1,"name":"x"}'

        item = await api.item(1)

        assert item == Item(id=1, name="x")
        request = recorder.last
        assert request.method == "GET"
        assert str(request.url) == "https://api.example.com/items/1"
        assert request.content == b""
        assert "content-type" not in request.headers

    @pytest.mark.asyncio
    async def test_form_body_raw_bytes(self, api, recorder):
        recorder.content = b"\x00\x01raw\xff"

        result = await api.submit_pair(Pair(a=1, b=2))

        assert result == b"\x00\x01raw\xff"
        request = recorder.last
        assert request.content == b"a=1&b=2"
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"

    @pytest.mark.asyncio
    async def test_json_body(self, api, recorder):
        todo = Todo(user_id=1, id=5, title="test", completed=False)
        recorder.content = todo.model_dump_json().encode()

        created = await api.create_todo(todo)

        assert created == todo
        request = recorder.last
        assert request.method == "POST"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == todo.model_dump(mode="json")

    @pytest.mark.asyncio
    async def test_json_body_from_dict(self, api, recorder):
        body = {"user_id": 1, "id": 2, "title": "t", "completed": True}
        await api.replace_todo(body, 2)
        assert json.loads(recorder.last.content) == body
        assert str(recorder.last.url).endswith("/todos/2")

    @pytest.mark.asyncio
    async def test_form_body_omits_unset_optional_fields(self, api, recorder):
        await api.patch_pair(PairPatch(a=1))
        assert recorder.last.content == b"a=1"

        await api.patch_pair(PairPatch(a=1, b=0))
        assert recorder.last.content == b"a=1&b=0"

    @pytest.mark.asyncio
    async def test_body_field_in_url(self, api, recorder):
        await api.pair_by_field(Pair(a=7, b=8))
        assert str(recorder.last.url) == "https://api.example.com/pairs/7"

    @pytest.mark.asyncio
    async def test_keyword_arguments(self, api, recorder):
        todo = Todo(user_id=1, id=3, title="t", completed=True)
        await api.replace_todo(id=3, request=todo)
        assert str(recorder.last.url).endswith("/todos/3")

    @pytest.mark.asyncio
    async def test_missing_argument(self, api, recorder):
        with pytest.raises(TypeError):
            await api.item()
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_header_template(self, api, recorder):
        recorder.content = b"Api-client 0.1"
        assert await api.get_ua("Api-client 0.1") == "Api-client 0.1"
        assert recorder.last.headers["user-agent"] == "Api-client 0.1"

    @pytest.mark.asyncio
    async def test_multipart(self, api, recorder):
        form = (
            MultipartForm()
            .text("title", "report")
            .file("doc", b"%PDF-1.4", filename="r.pdf", content_type="application/pdf")
        )
        recorder.status_code = 201

        assert await api.upload(form) == 201

        request = recorder.last
        assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
        assert b'name="title"' in request.content
        assert b"report" in request.content
        assert b'filename="r.pdf"' in request.content
        assert b"%PDF-1.4" in request.content

    @pytest.mark.asyncio
    async def test_multipart_requires_form(self, api, recorder):
        with pytest.raises(TypeError):
            await api.upload({"title": "report"})
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_relative_url_uses_transport_base(self, config):
        recorder = Recorder()
        api = Example(config=config, client=make_http(recorder, base_url=BASE))
        await api.relative(4)
        assert str(recorder.last.url) == "https://api.example.com/items/4"


class TestResponseKinds:
    """A non-success status is never an error by itself."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [200, 204, 301, 404, 500, 503])
    async def test_status_code_exact(self, api, recorder, status):
        recorder.status_code = status
        assert await api.delete_item(1) == status

    @pytest.mark.asyncio
    async def test_text_on_error_status(self, api, recorder):
        recorder.status_code = 404
        recorder.content = b"not found"
        assert await api.item_text(1) == "not found"

    @pytest.mark.asyncio
    async def test_bytes_on_error_status(self, api, recorder):
        recorder.status_code = 500
        recorder.content = b"\xde\xad"
        assert await api.item_bytes(1) == b"\xde\xad"

    @pytest.mark.asyncio
    async def test_decoded_object_on_error_status(self, api, recorder):
        recorder.status_code = 500
        recorder.content = b'{"id":9,"name":"still decoded"}'
        assert await api.item(9) == Item(id=9, name="still decoded")

    @pytest.mark.asyncio
    async def test_malformed_json_propagates(self, api, recorder):
        recorder.content = b"<html>oops</html>"
        with pytest.raises(ValidationError):
            await api.item(1)

    @pytest.mark.asyncio
    async def test_wrong_shape_propagates(self, api, recorder):
        recorder.content = b'{"id":"one"}'
        with pytest.raises(ValidationError):
            await api.item(1)


class Hooked(Example):
    """Records what the pre-request hook saw."""

    seen = None

    async def pre_request(self, request):
        await asyncio.sleep(0)
        type(self).seen = {
            "headers": dict(request.headers),
            "has_body": request.has_body,
            "url": request.url,
        }
        return request.header("X-Order", "hook").header("Authorization", "hook")


class Failing(Example):
    async def pre_request(self, request):
        raise AuthError("token expired", scheme="bearer")


class StatusPolicy(Example):
    async def post_response(self, response):
        if response.status_code >= 400:
            raise RuntimeError(f"HTTP {response.status_code}")
        return response


class Tuned(Example):
    async def pre_request(self, request):
        return request.query({"page": 2, "q": "x y"}).with_timeout(3.0).content(b"raw")


class TestHooks:
    """Test hook placement in the pipeline."""

    @pytest.mark.asyncio
    async def test_hook_sets_query_timeout_and_content(self, config, http, recorder):
        api = Tuned(config=config, client=http)

        assert await api.delete_item(1) == 200

        request = recorder.last
        assert request.url.path == "/items/1"
        assert request.url.params["page"] == "2"
        assert request.url.params["q"] == "x y"
        assert request.content == b"raw"
        assert request.extensions["timeout"] == httpx.Timeout(3.0).as_dict()

    @pytest.mark.asyncio
    async def test_body_kind_replaces_hook_content(self, config, http, recorder):
        api = Tuned(config=config, client=http)

        await api.ordered({"k": "v"})

        assert json.loads(recorder.last.content) == {"k": "v"}

    @pytest.mark.asyncio
    async def test_hook_runs_before_auth_headers_and_body(self, config, http, recorder):
        api = Hooked(BearerAuth("secret"), config=config, client=http)

        await api.ordered({"k": "v"})

        assert Hooked.seen["url"] == "https://api.example.com/ordered"
        assert Hooked.seen["has_body"] is False
        assert "authorization" not in Hooked.seen["headers"]
        assert "x-order" not in Hooked.seen["headers"]

        request = recorder.last
        # Later steps win over the hook.
        assert request.headers["authorization"] == "Bearer secret"
        assert request.headers["x-order"] == "descriptor"
        assert json.loads(request.content) == {"k": "v"}

    @pytest.mark.asyncio
    async def test_hook_failure_aborts_before_network(self, config, http, recorder):
        api = Failing(config=config, client=http)

        with pytest.raises(AuthError) as exc_info:
            await api.item(1)

        assert exc_info.value.scheme == "bearer"
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_post_response_policy(self, config, http, recorder):
        api = StatusPolicy(config=config, client=http)
        recorder.status_code = 404
        with pytest.raises(RuntimeError, match="HTTP 404"):
            await api.delete_item(1)

    @pytest.mark.asyncio
    async def test_assemble_without_sending(self, api, recorder):
        endpoint_ = Example.create_todo.__api_endpoint__
        todo = Todo(user_id=1, id=1, title="t", completed=False)

        request = await assemble(api, endpoint_, todo)

        built = request.build()
        assert built.method == "POST"
        assert json.loads(built.content) == todo.model_dump()
        assert recorder.requests == []


class TestTransportFailures:
    """Transport failures reach the caller unchanged."""

    @pytest.mark.asyncio
    async def test_connect_error(self, config):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        api = Example(config=config, client=httpx.AsyncClient(transport=httpx.MockTransport(refuse)))
        with pytest.raises(httpx.ConnectError):
            await api.item(1)

    @pytest.mark.asyncio
    async def test_timeout(self, config):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        api = Example(config=config, client=httpx.AsyncClient(transport=httpx.MockTransport(slow)))
        with pytest.raises(httpx.TimeoutException):
            await api.delete_item(1)


class TestConcurrency:
    """Concurrent calls on one client are independent."""

    @pytest.mark.asyncio
    async def test_gather(self, config):
        def echo(request):
            item_id = int(request.url.path.rsplit("/", 1)[-1])
            return httpx.Response(200, json={"id": item_id, "name": f"item-{item_id}"})

        api = Example(config=config, client=httpx.AsyncClient(transport=httpx.MockTransport(echo)))
        items = await asyncio.gather(*(api.item(i) for i in range(10)))
        assert [item.id for item in items] == list(range(10))
        assert items[3].name == "item-3"


class TestDeterminism:
    """Same descriptors, same requests."""

    @pytest.mark.asyncio
    async def test_two_generations_send_identical_requests(self, config):
        descriptors = [
            endpoint(
                "PUT", "{BASE}/todos/{id}", name="replace_todo", params=[("id", int)],
                body=JsonBody(Todo), headers={"X-Id": "{id}"}, response=STATUS_CODE,
            ),
        ]

        class First(ApiClient):
            pass

        class Second(ApiClient):
            pass

        Generator({"BASE": BASE}).generate(First, descriptors)
        Generator({"BASE": BASE}).generate(Second, descriptors)

        first, second = Recorder(), Recorder()
        todo = Todo(user_id=1, id=2, title="t", completed=True)
        await First(config=config, client=make_http(first)).replace_todo(todo, 2)
        await Second(config=config, client=make_http(second)).replace_todo(todo, 2)

        a, b = first.last, second.last
        assert (a.method, str(a.url), a.content) == (b.method, str(b.url), b.content)
        assert a.headers.multi_items() == b.headers.multi_items()
