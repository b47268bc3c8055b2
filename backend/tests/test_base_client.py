"""
Base Example Site — Base API Client Unit Tests
================================================

What:  Tests for request construction and error mapping in BaseClient.
Why:   The client is the only code that knows the Base API's wire format.
How:   httpx.MockTransport answers requests in-process; each test inspects
       the recorded request and the decoded result.

Test Strategy:
    ✅ Auth header, versioned URLs, form-encoded bodies
    ✅ custom_data is sent as JSON text; None fields are omitted
    ✅ Multipart uploads read the temp file from disk
    ✅ 401 / 400 / 422 / 5xx / network error / malformed JSON mapping
    ✅ Paginated list decoding
"""

import json
from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio

from basesite.exceptions import InvalidRequestError, UnauthorizedError, UnknownApiError
from basesite.services.base_client import BaseClient

USER_JSON = {"id": "u-1", "email": "a@b.com", "custom_data": {"plan": "free"}}


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response):
        self.response = response
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def form(self):
        return {k: v[0] for k, v in parse_qs(self.last.content.decode()).items()}


def make_client(recorder) -> BaseClient:
    return BaseClient(
        access_token="tok",
        url="http://base.test/",
        per_page=10,
        transport=httpx.MockTransport(recorder),
    )


@pytest_asyncio.fixture
async def ok_user():
    recorder = Recorder(httpx.Response(200, json=USER_JSON))
    client = make_client(recorder)
    yield client, recorder
    await client.aclose()


class TestRequests:

    @pytest.mark.asyncio
    async def test_users_create(self, ok_user):
        client, recorder = ok_user
        user = await client.users.create("a@b.com", "pw", "pw", {"plan": "free"})

        assert user.id == "u-1"
        assert recorder.last.method == "POST"
        assert str(recorder.last.url) == "http://base.test/v1/users"
        assert recorder.last.headers["Authorization"] == "Bearer tok"
        form = recorder.form()
        assert form["email"] == "a@b.com"
        assert form["confirmation"] == "pw"
        assert json.loads(form["custom_data"]) == {"plan": "free"}

    @pytest.mark.asyncio
    async def test_none_fields_are_omitted(self, ok_user):
        client, recorder = ok_user
        await client.users.update("u-1", "a@b.com", None)

        assert str(recorder.last.url) == "http://base.test/v1/users/u-1"
        assert "custom_data" not in recorder.form()

    @pytest.mark.asyncio
    async def test_ids_are_escaped(self, ok_user):
        client, recorder = ok_user
        await client.users.get("a/b c")
        assert recorder.last.url.raw_path == b"/v1/users/a%2Fb%20c"

    @pytest.mark.asyncio
    async def test_authenticate(self, ok_user):
        client, recorder = ok_user
        user = await client.sessions.authenticate("a@b.com", "pw")
        assert user.email == "a@b.com"
        assert str(recorder.last.url) == "http://base.test/v1/users/authenticate"

    @pytest.mark.asyncio
    async def test_email_uses_from_field(self):
        recorder = Recorder(httpx.Response(204))
        client = make_client(recorder)
        result = await client.emails.send("Hi", "me@x.com", "you@y.com", text="Hello")
        await client.aclose()

        assert result is None
        assert recorder.form() == {
            "subject": "Hi",
            "from": "me@x.com",
            "to": "you@y.com",
            "text": "Hello",
        }

    @pytest.mark.asyncio
    async def test_mailing_list_subscribe(self):
        recorder = Recorder(httpx.Response(200, json={"id": "ml-1", "subscribers": ["a@b.com"]}))
        client = make_client(recorder)
        mailing_list = await client.mailing_lists.subscribe("ml-1", "a@b.com")
        await client.aclose()

        assert mailing_list.subscribers == ["a@b.com"]
        assert str(recorder.last.url) == "http://base.test/v1/mailing_lists/ml-1/subscribe"

    @pytest.mark.asyncio
    async def test_file_upload_is_multipart(self, tmp_path):
        path = tmp_path / "spooled.bin"
        path.write_bytes(b"hello world")
        recorder = Recorder(httpx.Response(201, json={"id": "f-1", "size": 11}))
        client = make_client(recorder)
        stored = await client.files.create(str(path), "notes.txt", "text/plain")
        await client.aclose()

        assert stored.id == "f-1"
        body = recorder.last.content
        assert recorder.last.headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="file"; filename="notes.txt"' in body
        assert b"hello world" in body

    @pytest.mark.asyncio
    async def test_list_decodes_page(self):
        payload = {
            "items": [USER_JSON],
            "metadata": {"page": 2, "per_page": 10, "count": 25},
        }
        recorder = Recorder(httpx.Response(200, json=payload))
        client = make_client(recorder)
        page = await client.users.list(page=2)
        await client.aclose()

        assert recorder.last.url.params["page"] == "2"
        assert recorder.last.url.params["per_page"] == "10"
        assert [u.id for u in page.items] == ["u-1"]
        assert page.metadata.total_pages == 3
        assert page.has_next and page.has_previous


class TestErrorMapping:

    async def _call(self, response):
        client = make_client(Recorder(response))
        try:
            return await client.users.get("u-1")
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_401(self):
        with pytest.raises(UnauthorizedError):
            await self._call(httpx.Response(401, json={"error": "Unauthorized"}))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 422])
    async def test_invalid_request(self, status):
        with pytest.raises(InvalidRequestError) as exc_info:
            await self._call(httpx.Response(status, json={"error": "Email is taken"}))
        assert exc_info.value.detail == "Email is taken"

    @pytest.mark.asyncio
    async def test_invalid_request_with_text_body(self):
        with pytest.raises(InvalidRequestError) as exc_info:
            await self._call(httpx.Response(400, text="bad email"))
        assert exc_info.value.detail == "bad email"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 500, 503])
    async def test_other_statuses(self, status):
        with pytest.raises(UnknownApiError) as exc_info:
            await self._call(httpx.Response(status))
        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_malformed_json(self):
        with pytest.raises(UnknownApiError, match="malformed"):
            await self._call(httpx.Response(200, text="<html>"))

    @pytest.mark.asyncio
    async def test_network_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = BaseClient("tok", url="http://base.test", transport=httpx.MockTransport(refuse))
        with pytest.raises(UnknownApiError, match="Could not reach"):
            await client.users.get("u-1")
        await client.aclose()


class TestHealthAndUrls:

    @pytest.mark.asyncio
    async def test_health_check_never_raises(self):
        client = make_client(Recorder(httpx.Response(401)))
        assert await client.health_check() is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_health_check_ok(self):
        client = make_client(Recorder(httpx.Response(200, json={"items": [], "metadata": {}})))
        assert await client.health_check() is True
        await client.aclose()

    @pytest.mark.asyncio
    async def test_public_urls(self):
        client = BaseClient("tok", url="http://base.test/")
        assert client.files.download_url("f-1") == "http://base.test/v1/files/f-1/download"
        assert client.images.image_url("i-1", resize="80x80", quality=50) == (
            "http://base.test/v1/images/i-1/version?resize=80x80&quality=50"
        )
        assert client.mailing_lists.unsubscribe_url("ml-1", "a@b.com") == (
            "http://base.test/v1/mailing_lists/ml-1/unsubscribe?email=a%40b.com"
        )
        await client.aclose()
