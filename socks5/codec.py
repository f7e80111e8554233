from typing import Sequence, Tuple

from error import ErrorKind, SocksError

from .address import AddrType, SocksAddress
from .auth import SUBNEGOTIATION_VERSION, Method, SocksCredentials
from .tcp import Command, SocksReply, reply_from_code

VERSION = 0x05
RESERVED = 0x00


def encode_greeting(methods: Sequence[Method]) -> bytes:
    if not methods:
        raise SocksError(ErrorKind.INVALID_CONFIGURATION, "no methods offered")
    if len(methods) > 255:
        raise SocksError(ErrorKind.INVALID_CONFIGURATION, "too many methods")
    if Method.NO_ACCEPTABLE_METHODS in methods:
        raise SocksError(
            ErrorKind.INVALID_CONFIGURATION, "NO_ACCEPTABLE_METHODS is not offerable"
        )
    try:
        offer = [Method(m) for m in methods]
    except ValueError:
        raise SocksError(
            ErrorKind.INVALID_CONFIGURATION, f"unknown method in {methods}"
        )
    return bytes([VERSION, len(offer), *offer])


def decode_method_selection(data: bytes) -> Tuple[int, Method]:
    if len(data) != 2:
        raise SocksError(
            ErrorKind.MALFORMED_REPLY, f"method selection of {len(data)} bytes"
        )
    ver, method = data
    if ver != VERSION:
        raise SocksError(ErrorKind.VERSION_MISMATCH, f"server version {ver}")
    try:
        return ver, Method(method)
    except ValueError:
        raise SocksError(ErrorKind.MALFORMED_REPLY, f"unknown method 0x{method:02x}")


def encode_auth_request(credentials: SocksCredentials) -> bytes:
    username, password = credentials
    if len(username) > 255:
        raise SocksError(ErrorKind.CREDENTIAL_TOO_LONG, "username")
    if len(password) > 255:
        raise SocksError(ErrorKind.CREDENTIAL_TOO_LONG, "password")
    return b"".join(
        [
            bytes([SUBNEGOTIATION_VERSION, len(username)]),
            username,
            bytes([len(password)]),
            password,
        ]
    )


def decode_auth_response(data: bytes) -> int:
    if len(data) != 2:
        raise SocksError(
            ErrorKind.MALFORMED_REPLY, f"auth response of {len(data)} bytes"
        )
    return data[1]


def encode_command_request(command: Command, address: SocksAddress) -> bytes:
    return bytes([VERSION, Command(command), RESERVED]) + address.pack()


def command_reply_size(prefix: bytes) -> int:
    # domain replies need the length byte; until it is read the size is 5
    if len(prefix) < 4:
        raise SocksError(ErrorKind.MALFORMED_REPLY, "short reply header")
    ver, _rep, _rsv, addr_type = prefix[:4]
    if ver != VERSION:
        raise SocksError(ErrorKind.VERSION_MISMATCH, f"server version {ver}")
    if addr_type == AddrType.IP_V4:
        return 4 + 4 + 2
    elif addr_type == AddrType.DOMAIN_NAME:
        if len(prefix) < 5:
            return 5
        return 4 + 1 + prefix[4] + 2
    elif addr_type == AddrType.IP_V6:
        return 4 + 16 + 2
    raise SocksError(ErrorKind.UNSUPPORTED_ADDRESS_TYPE, f"0x{addr_type:02x}")


def decode_command_reply(data: bytes) -> Tuple[SocksReply, SocksAddress]:
    if len(data) < 4:
        raise SocksError(ErrorKind.MALFORMED_REPLY, "short reply header")
    ver, rep, _rsv = data[:3]
    if ver != VERSION:
        raise SocksError(ErrorKind.VERSION_MISMATCH, f"server version {ver}")
    address, _end = SocksAddress.parse(data, 3)
    return reply_from_code(rep), address
