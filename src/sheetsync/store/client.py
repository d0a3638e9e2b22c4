"""HTTP client for the spreadsheet store web service."""

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from ..config import settings

logger = logging.getLogger(__name__)


class StoreClientError(Exception):
    """A structured error reported by the store web service.

    ``status`` is the HTTP status code and ``error`` the ``{code, message}``
    object from the response body.
    """

    def __init__(self, status: int, error: dict):
        super().__init__(error.get("message", ""))
        self.status = status
        self.error = error

    @property
    def code(self) -> str:
        return self.error.get("code", "")

    @property
    def message(self) -> str:
        return self.error.get("message", "")


def _rethrow(err: Exception):
    """Raise err as a StoreClientError when the response carries one."""
    response = getattr(err, "response", None)
    if response is not None:
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            raise StoreClientError(response.status_code, data["error"]) from err
    raise err


class StoreClient:
    """Calls the spreadsheet store web service at base_url.

    Implements the store protocol, so a Spreadsheet can be backed by a
    remote store.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        prefix: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.store_url
        self.prefix = (prefix if prefix is not None else settings.store_api_prefix).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=settings.http_timeout if settings.http_timeout is not None else 5.0,
        )

    async def __aenter__(self) -> "StoreClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    def _url(self, name: str, cell_id: Optional[str] = None) -> str:
        url = f"{self.prefix}/{quote(name)}"
        if cell_id is not None:
            url += f"/{quote(cell_id)}"
        return url

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            _rethrow(e)

    async def read_formulas(self, name: str) -> list[tuple[str, str]]:
        """Return list of (cell_id, formula) pairs for spreadsheet name."""
        response = await self._request("GET", self._url(name))
        return [(cell_id, formula) for cell_id, formula in response.json()]

    async def update_cell(self, name: str, cell_id: str, formula: str) -> None:
        """Update cell_id of spreadsheet name to contain formula."""
        await self._request("PATCH", self._url(name, cell_id), json={"formula": formula})

    async def clear(self, name: str) -> None:
        """Clear contents of spreadsheet name."""
        await self._request("DELETE", self._url(name))

    async def delete(self, name: str, cell_id: str) -> None:
        """Delete all info for cell_id from spreadsheet name."""
        await self._request("DELETE", self._url(name, cell_id))

    async def replace_all(self, name: str, pairs: list[tuple[str, str]]) -> None:
        """Replace the whole spreadsheet with pairs."""
        await self._request("PUT", self._url(name), json=[list(p) for p in pairs])

    async def update_all(self, name: str, pairs: list[tuple[str, str]]) -> None:
        """Merge pairs into the spreadsheet without clearing it."""
        await self._request("PATCH", self._url(name), json=[list(p) for p in pairs])
