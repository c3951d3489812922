"""Tests for the aiohttp transport.

These tests start a local ``aiohttp`` server on an ephemeral port, so they
need no external network access.
"""

from __future__ import annotations

import errno
import socket
from typing import Any, List, Tuple

import pytest  # type: ignore
from aiohttp import web
from aiohttp import test_utils

from jwt_clients.clients.base import JwtClient
from jwt_clients.errors import JwtClientError
from jwt_clients.transport import AiohttpTransport, TransportError, connection_error_code


async def _start_server() -> Tuple[test_utils.TestServer, List[Any]]:
    received: List[Any] = []

    async def get_user(request: web.Request) -> web.Response:
        received.append(("GET", dict(request.headers)))
        return web.json_response({"iat": 1, "payload": "ciphertext"})

    async def post_user(request: web.Request) -> web.Response:
        received.append(("POST", await request.json()))
        return web.Response(status=201)

    async def missing(request: web.Request) -> web.Response:
        return web.Response(status=404, text="not found")

    async def bad_gateway(request: web.Request) -> web.Response:
        return web.Response(status=502, body=b"\xff\xfe gateway \xe9", content_type="text/html")

    async def latin1_body(request: web.Request) -> web.Response:
        return web.Response(status=200, body=b"caf\xe9", content_type="text/plain")

    app = web.Application()
    app.router.add_get("/user", get_user)
    app.router.add_post("/user", post_user)
    app.router.add_get("/missing", missing)
    app.router.add_get("/gateway", bad_gateway)
    app.router.add_get("/latin1", latin1_body)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server, received


@pytest.mark.asyncio  # type: ignore
async def test_get_returns_parsed_json_and_sends_headers() -> None:
    server, received = await _start_server()
    try:
        transport = AiohttpTransport()
        body = await transport.get(
            {"url": str(server.make_url("/user")), "headers": {"x-access-token": "token"}, "json": True}
        )
        assert body == {"iat": 1, "payload": "ciphertext"}
        method, headers = received[0]
        assert method == "GET"
        assert headers["x-access-token"] == "token"
    finally:
        await server.close()


@pytest.mark.asyncio  # type: ignore
async def test_post_sends_json_body_and_returns_none_for_empty_response() -> None:
    server, received = await _start_server()
    try:
        transport = AiohttpTransport()
        body = await transport.post(
            {
                "url": str(server.make_url("/user")),
                "headers": {"x-access-token": "token"},
                "json": {"payload": "ciphertext"},
            }
        )
        assert body is None
        assert received == [("POST", {"payload": "ciphertext"})]
    finally:
        await server.close()


@pytest.mark.asyncio  # type: ignore
async def test_http_error_status_raises_transport_error() -> None:
    server, received = await _start_server()
    try:
        with pytest.raises(TransportError) as excinfo:
            await AiohttpTransport().get(
                {"url": str(server.make_url("/missing")), "headers": {"x-access-token": "token"}}
            )
        assert excinfo.value.status_code == 404
        assert excinfo.value.error is None
    finally:
        await server.close()


@pytest.mark.asyncio  # type: ignore
async def test_error_status_survives_undecodable_body() -> None:
    """A proxy error page that is not UTF-8 must still report its status."""
    server, received = await _start_server()
    try:
        with pytest.raises(TransportError) as excinfo:
            await AiohttpTransport().get(
                {"url": str(server.make_url("/gateway")), "headers": {"x-access-token": "token"}}
            )
        assert excinfo.value.status_code == 502

        client = JwtClient("testServiceToken", transport=AiohttpTransport())
        with pytest.raises(JwtClientError) as client_excinfo:
            await client.send_get(str(server.make_url("/gateway")))
        assert (client_excinfo.value.code, client_excinfo.value.message) == (502, "502")
    finally:
        await server.close()


@pytest.mark.asyncio  # type: ignore
async def test_undecodable_success_body_is_returned_as_text() -> None:
    server, received = await _start_server()
    try:
        body = await AiohttpTransport().get(
            {"url": str(server.make_url("/latin1")), "headers": {"x-access-token": "token"}}
        )
        assert body == "caf\ufffd"
    finally:
        await server.close()


@pytest.mark.asyncio  # type: ignore
async def test_refused_connection_raises_econnrefused() -> None:
    # Reserve a free port and release it so nothing is listening there
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    with pytest.raises(TransportError) as excinfo:
        await AiohttpTransport().get(
            {"url": f"http://127.0.0.1:{port}/user", "headers": {"x-access-token": "token"}}
        )
    assert excinfo.value.status_code is None
    assert excinfo.value.error == {"code": "ECONNREFUSED"}


def test_connection_error_code_mapping() -> None:
    assert connection_error_code(socket.gaierror(-2, "Name or service not known")) == "ENOTFOUND"
    assert connection_error_code(ConnectionRefusedError(errno.ECONNREFUSED, "refused")) == "ECONNREFUSED"
    assert connection_error_code(OSError(errno.ETIMEDOUT, "timed out")) == "ETIMEDOUT"
    assert connection_error_code(RuntimeError("no errno")) is None
