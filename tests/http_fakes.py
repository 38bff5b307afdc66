from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Self

if TYPE_CHECKING:
    from types import TracebackType


@dataclass
class FakeResponse:
    """Stand-in for ``aiohttp.ClientResponse`` used as an async context manager.

    ``delay`` makes entering the context sleep, which lets tests drive
    timeouts and cancellation.
    """

    status: int = 200
    json_data: Any = None
    text_data: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    url: str = "http://test"
    delay: float = 0.0
    json_error: Exception | None = None

    async def json(self) -> Any:
        if self.json_error is not None:
            raise self.json_error
        return self.json_data

    async def text(self) -> str:
        return self.text_data

    async def __aenter__(self) -> Self:
        if self.delay:
            await asyncio.sleep(self.delay)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        return False


class FakeSession:
    """Replays queued responses (or raises queued exceptions) in order."""

    def __init__(
        self,
        *,
        get_responses: list[FakeResponse | Exception] | None = None,
    ) -> None:
        self._get_responses = list(get_responses or [])
        self.requests: list[tuple[str, str, dict[str, Any]]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append(("GET", url, kwargs))
        if not self._get_responses:
            msg = "No fake responses available"
            raise AssertionError(msg)
        response = self._get_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def params(self, index: int = 0) -> dict[str, Any]:
        return self.requests[index][2].get("params") or {}
