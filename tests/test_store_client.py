"""Tests for the store web service client."""

import httpx
import pytest

from sheetsync.api import create_app
from sheetsync.engine import Spreadsheet
from sheetsync.store import MemoryStore, StoreClient, StoreClientError


@pytest.fixture
def backing_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def asgi_client(backing_store) -> StoreClient:
    """Client talking to an in-process app over ASGI."""
    transport = httpx.ASGITransport(app=create_app(store=backing_store))
    return StoreClient("http://testserver", transport=transport)


def mock_client(handler) -> StoreClient:
    return StoreClient("http://testserver", transport=httpx.MockTransport(handler))


class TestStoreClientOperations:
    """Test the four store operations over HTTP."""

    @pytest.mark.asyncio
    async def test_update_and_read(self, asgi_client, backing_store):
        async with asgi_client:
            await asgi_client.update_cell("sheet1", "a1", "1")
            await asgi_client.update_cell("sheet1", "b1", "a1 + 1")

            assert await asgi_client.read_formulas("sheet1") == [("a1", "1"), ("b1", "a1 + 1")]
        assert await backing_store.read_formulas("sheet1") == [("a1", "1"), ("b1", "a1 + 1")]

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, asgi_client):
        async with asgi_client:
            await asgi_client.update_cell("sheet1", "a1", "1")
            await asgi_client.update_cell("sheet1", "b1", "2")
            await asgi_client.delete("sheet1", "a1")
            assert await asgi_client.read_formulas("sheet1") == [("b1", "2")]

            await asgi_client.clear("sheet1")
            assert await asgi_client.read_formulas("sheet1") == []

    @pytest.mark.asyncio
    async def test_replace_and_update_all(self, asgi_client):
        async with asgi_client:
            await asgi_client.replace_all("sheet1", [("a1", "1"), ("b1", "2")])
            await asgi_client.update_all("sheet1", [("c1", "3")])
            await asgi_client.replace_all("sheet1", [("d1", "4")])

            assert await asgi_client.read_formulas("sheet1") == [("d1", "4")]

    @pytest.mark.asyncio
    async def test_spreadsheet_over_client(self, asgi_client, backing_store):
        async with asgi_client:
            ss = await Spreadsheet.make("remote", asgi_client)
            await ss.eval("a1", "20")
            await ss.eval("a2", "a1 / 4")

            assert ss.query("a2")["value"] == 5
        assert await backing_store.read_formulas("remote") == [("a1", "20"), ("a2", "a1 / 4")]


class TestStoreClientErrors:
    """Test error normalisation."""

    @pytest.mark.asyncio
    async def test_structured_error_is_rethrown(self, asgi_client):
        async with asgi_client:
            with pytest.raises(StoreClientError) as exc_info:
                await asgi_client.update_cell("sheet1", "not-a-cell", "1")

        err = exc_info.value
        assert err.status == 400
        assert err.code == "BAD_REQUEST"
        assert "not-a-cell" in err.message
        assert err.error == {"code": err.code, "message": err.message}

    @pytest.mark.asyncio
    async def test_unstructured_http_error_is_unchanged(self):
        client = mock_client(lambda request: httpx.Response(502, text="bad gateway"))

        async with client:
            with pytest.raises(httpx.HTTPStatusError) as exc_info:
                await client.read_formulas("sheet1")
        assert exc_info.value.response.status_code == 502

    @pytest.mark.asyncio
    async def test_transport_error_is_unchanged(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = mock_client(handler)
        async with client:
            with pytest.raises(httpx.ConnectError):
                await client.clear("sheet1")

    @pytest.mark.asyncio
    async def test_requests_use_prefix_and_quote_names(self):
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path))
            return httpx.Response(204)

        client = mock_client(handler)
        async with client:
            await client.delete("my sheet", "a1")
        assert seen == [("DELETE", "/api/store/my sheet/a1")]
