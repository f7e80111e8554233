import asyncio
import socket
from argparse import ArgumentTypeError
from io import BytesIO

import pytest

from client import endpoint_type, port_type, run_client
from conftest import ScriptedProxy
from proxy import SocksConf
from socks5 import DomainName, SocksAddress, SocksCredentials

CONNECT_EXAMPLE = (
    b"\x05\x01\x00\x03\x0bexample.com\x00\x50",
    b"\x05\x00\x00\x01\x00\x00\x00\x00\x00\x00",
)
DESTINATION = SocksAddress(DomainName(b"example.com"), 80)


def test_port_type():
    assert port_type("1080") == 1080
    for value in ["0", "65536", "http"]:
        with pytest.raises(ArgumentTypeError):
            port_type(value)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("proxy.local", ("proxy.local", 1080)),
        ("proxy.local:9050", ("proxy.local", 9050)),
        ("10.0.0.1:1081", ("10.0.0.1", 1081)),
        ("[::1]:1080", ("::1", 1080)),
        ("[::1]", ("::1", 1080)),
        ("::1", ("::1", 1080)),
    ],
)
def test_endpoint_type(text, expected):
    assert endpoint_type(text) == expected


@pytest.mark.parametrize("text", [":1080", "[::1", "[::1]1080", "host:port"])
def test_endpoint_type_invalid(text):
    with pytest.raises(ArgumentTypeError):
        endpoint_type(text)


def _run(script, credentials, data):
    async def main():
        server = ScriptedProxy(script)
        conf = await server.start()
        output = BytesIO()
        try:
            code = await asyncio.wait_for(
                run_client(conf, DESTINATION, credentials, data, output), 5
            )
        finally:
            await server.stop()
        return code, output.getvalue()

    return asyncio.run(main())


def test_run_client_sends_data():
    code, output = _run(
        [(b"\x05\x01\x00", b"\x05\x00"), CONNECT_EXAMPLE], None, b"GET / HTTP/1.0\r\n"
    )
    assert code == 0
    assert output == b"GET / HTTP/1.0\r\n"


def test_run_client_with_credentials():
    script = [
        (b"\x05\x01\x02", b"\x05\x02"),
        (b"\x01\x01u\x01p", b"\x01\x00"),
        CONNECT_EXAMPLE,
    ]
    code, output = _run(script, SocksCredentials(b"u", b"p"), None)
    assert code == 0
    assert output == b""


def test_run_client_failure():
    code, output = _run([(b"\x05\x01\x00", b"\x05\xff")], None, b"ignored")
    assert code == 1
    assert output == b""


def test_run_client_proxy_unreachable():
    async def main():
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(("127.0.0.1", 0))
        port = listener.getsockname()[1]
        listener.close()
        return await run_client(
            SocksConf(("127.0.0.1", port)), DESTINATION, None, None, BytesIO()
        )

    assert asyncio.run(main()) == 1
