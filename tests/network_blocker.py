from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

if TYPE_CHECKING:
    import pytest

PROVIDER_HOSTS = {
    "maps.googleapis.com",
    "api.opencagedata.com",
    "photon.komoot.io",
    "nominatim.openstreetmap.org",
}


def _is_blocked_url(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    if not host:
        return False
    if host in PROVIDER_HOSTS:
        return True
    return any(host.endswith(f".{item}") for item in PROVIDER_HOSTS)


def install_network_blocker(monkeypatch: pytest.MonkeyPatch) -> None:
    """Refuse real calls to geocoding providers for the duration of a test."""
    import aiohttp
    import httpx

    def _aiohttp_block(self, method: str, url: Any, *args: Any, **kwargs: Any) -> Any:
        if _is_blocked_url(str(url)):
            msg = f"Blocked external host: {url}"
            raise RuntimeError(msg)
        return _orig_aiohttp_request(self, method, url, *args, **kwargs)

    async def _httpx_block(
        self,
        method: str,
        url: Any,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        if _is_blocked_url(str(url)):
            msg = f"Blocked external host: {url}"
            raise RuntimeError(msg)
        return await _orig_httpx_request(self, method, url, *args, **kwargs)

    _orig_aiohttp_request = aiohttp.ClientSession._request
    monkeypatch.setattr(aiohttp.ClientSession, "_request", _aiohttp_block, raising=True)

    _orig_httpx_request = httpx.AsyncClient.request
    monkeypatch.setattr(httpx.AsyncClient, "request", _httpx_block, raising=True)
