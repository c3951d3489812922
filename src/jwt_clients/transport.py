"""
HTTP transport capability used by the service clients.

The clients never talk to the network directly.  They build a
:class:`RequestOptions` dictionary and hand it to a :class:`Transport`, which
returns the parsed response body or raises :class:`TransportError`.  A
transport error carries either an HTTP ``status_code`` or an ``error``
mapping whose ``code`` names the connection failure (``ECONNREFUSED``,
``ENOTFOUND``, ...).  Classification into client errors happens in
:mod:`jwt_clients.errors`.

:class:`AiohttpTransport` is the default implementation.  It opens a
short-lived ``aiohttp.ClientSession`` per request.  Connection reuse, TLS
settings and timeouts are all left to aiohttp; an optional
``aiohttp.ClientTimeout`` can be passed through.
"""

from __future__ import annotations

import errno
import json
import logging
import socket
from typing import Any, Dict, Optional, TypedDict, Union

import aiohttp
from aiohttp import ClientResponse


logger = logging.getLogger(__name__)


class _RequestOptionsBase(TypedDict):
    url: str
    headers: Dict[str, str]


class RequestOptions(_RequestOptionsBase, total=False):
    """Options for a single request.

    * ``url`` (str): absolute URL with all placeholders resolved.
    * ``headers`` (dict): must contain ``x-access-token``.
    * ``json`` (bool or object): ``True`` to request a JSON response body,
      or the object to send as the JSON request body.
    """

    json: Union[bool, Any]


class TransportError(Exception):
    """Raised by a transport when a request does not succeed."""

    def __init__(
        self,
        message: str = "",
        *,
        status_code: Optional[int] = None,
        error: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message or (str(status_code) if status_code else "transport error"))
        self.status_code = status_code
        self.error = error


class Transport:
    """Abstract HTTP capability."""

    async def get(self, options: RequestOptions) -> Any:
        """Send a GET request and return the parsed body.

        Subclasses must implement this method.
        """
        raise NotImplementedError

    async def post(self, options: RequestOptions) -> Any:
        """Send a POST request and return the parsed body, or ``None``."""
        raise NotImplementedError


def connection_error_code(exc: BaseException) -> Optional[str]:
    """Return the errno-style code for a connection failure, if known."""
    os_error = getattr(exc, "os_error", None) or exc
    if isinstance(os_error, socket.gaierror):
        return "ENOTFOUND"
    if isinstance(os_error, ConnectionRefusedError):
        return "ECONNREFUSED"
    number = getattr(os_error, "errno", None)
    if isinstance(number, int) and number in errno.errorcode:
        return errno.errorcode[number]
    return None


class AiohttpTransport(Transport):
    """Transport backed by ``aiohttp``."""

    def __init__(self, *, timeout: Optional[aiohttp.ClientTimeout] = None) -> None:
        self.timeout = timeout

    async def get(self, options: RequestOptions) -> Any:
        return await self._request("GET", options)

    async def post(self, options: RequestOptions) -> Any:
        return await self._request("POST", options)

    async def _request(self, method: str, options: RequestOptions) -> Any:
        body = options.get("json")
        kwargs: Dict[str, Any] = {"headers": dict(options["headers"])}
        # ``json=True`` only asks for a JSON response; anything else is the body
        if body is not None and not isinstance(body, bool):
            kwargs["json"] = body
        session_kwargs: Dict[str, Any] = {}
        if self.timeout is not None:
            session_kwargs["timeout"] = self.timeout
        try:
            async with aiohttp.ClientSession(**session_kwargs) as session:
                async with session.request(method, options["url"], **kwargs) as resp:
                    await self._handle_response_errors(resp)
                    text = await resp.text(errors="replace")
        except TransportError:
            raise
        except aiohttp.ClientResponseError as exc:
            raise TransportError(str(exc), status_code=exc.status) from exc
        except (aiohttp.ClientConnectorError, OSError) as exc:
            code = connection_error_code(exc)
            raise TransportError(str(exc), error={"code": code} if code else {}) from exc
        except aiohttp.ClientError as exc:
            raise TransportError(str(exc), error={}) from exc
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # plain-text acknowledgements are returned as-is
            return text

    @staticmethod
    async def _handle_response_errors(resp: ClientResponse) -> None:
        if resp.status >= 400:
            # Avoid logging full response bodies; truncate to prevent leakage
            text = await resp.text(errors="replace")
            truncated = text[:200] if text else ""
            logger.error("HTTP error %s from %s: %s", resp.status, resp.url, truncated)
            raise TransportError(f"HTTP error {resp.status}", status_code=resp.status)


__all__ = [
    "AiohttpTransport",
    "RequestOptions",
    "Transport",
    "TransportError",
    "connection_error_code",
]
