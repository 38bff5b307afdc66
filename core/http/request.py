"""
Shared HTTP request helpers for provider backends.

Keeps JSON request/response handling and error mapping consistent across
the geocoding providers: every failure mode (status code, transport error,
unparseable body) surfaces as an ``ExternalServiceException``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiohttp

from core.exceptions import (
    ExternalServiceException,
    GeocodingException,
    RateLimitException,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 5


def _parse_retry_after(value: str | None) -> int:
    try:
        return int(value) if value is not None else DEFAULT_RETRY_AFTER_SECONDS
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS


async def request_json(
    method: str,
    url: str,
    *,
    session: Any,
    params: dict[str, Any] | None = None,
    json: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    expected_status: int | Iterable[int] = 200,
    none_on: Iterable[int] | None = None,
    service_name: str = "Service",
    timeout: Any | None = None,
) -> Any | None:
    method_upper = method.upper()
    if isinstance(expected_status, int):
        expected = {expected_status}
    else:
        expected = set(expected_status)
    none_on_set = set(none_on or [])

    if method_upper == "GET":
        request_fn = session.get
    elif method_upper == "POST":
        request_fn = session.post
    else:
        msg = f"{service_name} request error: unsupported method {method_upper}"
        raise ExternalServiceException(msg, {"url": url})

    request_kwargs: dict[str, Any] = {
        "params": params,
        "headers": headers,
    }
    if json is not None:
        request_kwargs["json"] = json
    if timeout is not None:
        request_kwargs["timeout"] = timeout

    try:
        async with request_fn(url, **request_kwargs) as response:
            if response.status in none_on_set:
                logger.debug(
                    "%s returned %s for %s", service_name, response.status, url
                )
                return None
            if response.status == 429:
                msg = f"{service_name} error: 429"
                raise RateLimitException(
                    msg,
                    {
                        "status": 429,
                        "retry_after": _parse_retry_after(
                            response.headers.get("Retry-After"),
                        ),
                        "url": str(getattr(response, "url", url)),
                    },
                )
            if response.status not in expected:
                body = await response.text()
                msg = f"{service_name} error: {response.status}"
                raise ExternalServiceException(
                    msg,
                    {
                        "status": response.status,
                        "body": body,
                        "url": str(getattr(response, "url", url)),
                    },
                )
            return await response.json()
    except GeocodingException:
        raise
    except (aiohttp.ClientError, TimeoutError) as exc:
        msg = f"{service_name} request failed: {exc.__class__.__name__}"
        raise ExternalServiceException(msg, {"url": url, "error": str(exc)}) from exc
    except ValueError as exc:
        msg = f"{service_name} error: malformed response"
        raise ExternalServiceException(msg, {"url": url, "error": str(exc)}) from exc
