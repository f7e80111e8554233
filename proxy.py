import asyncio
import logging
import socket
from asyncio import StreamReader, StreamWriter
from typing import Awaitable, Callable, NamedTuple, Tuple

import util
from error import ErrorKind, SocksError
from socks5 import (
    Command,
    DomainName,
    Handshake,
    Method,
    SocksAddress,
    SocksCredentials,
)
from socks5.address import is_valid_domain_name, is_valid_port
from socks5.codec import VERSION

logger = logging.getLogger(__name__)

DEFAULT_PORT = 1080

Connection = Tuple[StreamReader, StreamWriter, SocksAddress]


class SocksConf(NamedTuple):
    server: Tuple[str, int]
    version: int = VERSION

    def __str__(self) -> str:
        return util.format_addr(*self.server)


def _check_conf(conf: SocksConf) -> None:
    if conf.version != VERSION:
        raise SocksError(
            ErrorKind.INVALID_CONFIGURATION, f"unsupported socks version {conf.version}"
        )


async def connect_with_socket(
    reader: StreamReader,
    writer: StreamWriter,
    conf: SocksConf,
    destination: SocksAddress,
) -> SocksAddress:
    # the streams stay open whatever the outcome
    handshake = Handshake(reader, writer, conf.version)
    await handshake.establish([Method.NO_AUTHENTICATION_REQUIRED])
    return await handshake.command(Command.CONNECT, destination)


async def connect_with_socket_auth(
    reader: StreamReader,
    writer: StreamWriter,
    conf: SocksConf,
    destination: SocksAddress,
    credentials: SocksCredentials,
) -> SocksAddress:
    handshake = Handshake(reader, writer, conf.version)
    await handshake.establish([Method.USERNAME_PASSWORD])
    await handshake.authenticate(credentials)
    return await handshake.command(Command.CONNECT, destination)


async def _open_connection(
    conf: SocksConf,
    destination: SocksAddress,
    negotiate: Callable[[StreamReader, StreamWriter], Awaitable[SocksAddress]],
) -> Connection:
    _check_conf(conf)
    host, port = conf.server
    try:
        reader, writer = await asyncio.open_connection(host, port)
    except OSError as err:
        raise SocksError(
            ErrorKind.TRANSPORT, f"cannot connect to proxy {conf}: {err}"
        ) from err
    logger.debug(f"connected to proxy {conf}")
    try:
        bound = await negotiate(reader, writer)
    except BaseException as err:
        logger.debug(f"socks5 connect to {destination} via {conf} failed: {err!r}")
        await util.close_writer(writer)
        raise
    logger.info(f"tcp://{destination} connected via proxy {conf}, bound on {bound}")
    return reader, writer, bound


async def connect(conf: SocksConf, destination: SocksAddress) -> Connection:
    # the connection is closed on failure; on success the caller owns it
    return await _open_connection(
        conf,
        destination,
        lambda reader, writer: connect_with_socket(reader, writer, conf, destination),
    )


async def connect_auth(
    conf: SocksConf, destination: SocksAddress, credentials: SocksCredentials
) -> Connection:
    return await _open_connection(
        conf,
        destination,
        lambda reader, writer: connect_with_socket_auth(
            reader, writer, conf, destination, credentials
        ),
    )


async def connect_by_name(
    sock: socket.socket, conf: SocksConf, name: str, port: int
) -> Connection:
    # sock must not be connected yet and stays owned by the caller; the
    # returned streams run on a duplicate of it
    try:
        encoded = name.encode("ascii")
    except UnicodeEncodeError:
        raise SocksError(
            ErrorKind.INVALID_CONFIGURATION, f"non-ascii domain name {name!r}"
        )
    if not is_valid_domain_name(encoded):
        raise SocksError(ErrorKind.ADDRESS_TOO_LONG, f"{len(encoded)} bytes")
    if not is_valid_port(port):
        raise SocksError(ErrorKind.INVALID_CONFIGURATION, f"port {port}")
    _check_conf(conf)
    destination = SocksAddress(DomainName(encoded), port)
    loop = asyncio.get_running_loop()
    sock.setblocking(False)
    try:
        await loop.sock_connect(sock, conf.server)
        reader, writer = await asyncio.open_connection(sock=sock.dup())
    except OSError as err:
        raise SocksError(
            ErrorKind.TRANSPORT, f"cannot connect to proxy {conf}: {err}"
        ) from err
    try:
        bound = await connect_with_socket(reader, writer, conf, destination)
    except BaseException as err:
        logger.debug(f"socks5 connect to {destination} via {conf} failed: {err!r}")
        await util.close_writer(writer)
        raise
    logger.info(f"tcp://{destination} connected via proxy {conf}, bound on {bound}")
    return reader, writer, bound
