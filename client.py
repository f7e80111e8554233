import asyncio
import logging
import os
import sys
from argparse import ArgumentParser, ArgumentTypeError
from typing import BinaryIO, Optional, Tuple

import proxy
import util
from error import SocksError
from proxy import SocksConf
from socks5 import SocksAddress, SocksCredentials

__version__ = "0.2.0"

logger = logging.getLogger("client")


def port_type(port_str: str) -> int:
    try:
        port = int(port_str)
    except ValueError:
        raise ArgumentTypeError(f"invalid port number: {port_str}")
    if not 1 <= port <= 0xFFFF:
        raise ArgumentTypeError("port number must be between 1 and 65535")
    return port


def endpoint_type(endpoint_str: str) -> Tuple[str, int]:
    host, port = endpoint_str, proxy.DEFAULT_PORT
    if endpoint_str.startswith("["):
        host, sep, rest = endpoint_str[1:].partition("]")
        if not sep or (rest and not rest.startswith(":")):
            raise ArgumentTypeError(f"invalid proxy address: {endpoint_str}")
        if rest:
            port = port_type(rest[1:])
    elif endpoint_str.count(":") == 1:
        host, port_str = endpoint_str.split(":")
        port = port_type(port_str)
    if not host:
        raise ArgumentTypeError(f"invalid proxy address: {endpoint_str}")
    return host, port


async def run_client(
    conf: SocksConf,
    destination: SocksAddress,
    credentials: Optional[SocksCredentials],
    data: Optional[bytes],
    output: Optional[BinaryIO] = None,
) -> int:
    try:
        if credentials is None:
            reader, writer, bound = await proxy.connect(conf, destination)
        else:
            reader, writer, bound = await proxy.connect_auth(
                conf, destination, credentials
            )
    except SocksError as err:
        logger.error(f"failed to connect to tcp://{destination} via {conf}: {err}")
        return 1
    print(f"Connected to {destination} via {conf}, bound on {bound}", file=sys.stderr)
    try:
        if data is not None:
            writer.write(data)
            await writer.drain()
            if writer.can_write_eof():
                writer.write_eof()
            await util.copy(reader, output or sys.stdout.buffer)
    except OSError as err:
        logger.error(f"connection to tcp://{destination} failed: {err}")
        return 1
    finally:
        await util.close_writer(writer)
    return 0


if __name__ == "__main__":
    parser = ArgumentParser(description="connect to HOST:PORT through a SOCKS5 proxy")
    parser.add_argument(
        "-x",
        "--proxy",
        default=os.environ.get("SOCKS5_PROXY", "127.0.0.1:1080"),
        type=endpoint_type,
        help="specify proxy address [default: $SOCKS5_PROXY or 127.0.0.1:1080]",
        metavar="ADDRESS",
    )
    parser.add_argument("-u", "--user", help="username for proxy authentication")
    parser.add_argument(
        "-p", "--password", default="", help="password for proxy authentication"
    )
    parser.add_argument(
        "-d", "--data", help="send DATA to the destination and print the response"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="enable debug logging"
    )
    parser.add_argument("host", help="destination host", metavar="HOST")
    parser.add_argument("port", type=port_type, help="destination port", metavar="PORT")
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {__version__}"
    )
    args = parser.parse_args()
    util.init_logging("DEBUG" if args.verbose else "WARNING")
    try:
        destination = SocksAddress.from_host(args.host, args.port)
    except SocksError as err:
        print(f"{sys.argv[0]}: error: {err}", file=sys.stderr)
        sys.exit(2)
    credentials = None
    if args.user is not None:
        credentials = SocksCredentials.from_strings(args.user, args.password)
    data = args.data.encode() if args.data is not None else None
    try:
        sys.exit(
            asyncio.run(
                run_client(SocksConf(args.proxy), destination, credentials, data)
            )
        )
    except KeyboardInterrupt:
        print("\nKeyboard interrupt received, exiting.")
        sys.exit(130)
