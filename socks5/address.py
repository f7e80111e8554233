from enum import IntEnum
from ipaddress import IPv4Address, IPv6Address
from typing import NamedTuple, Tuple, Union

import util
from error import ErrorKind, SocksError


class AddrType(IntEnum):
    IP_V4 = 0x01
    DOMAIN_NAME = 0x03
    IP_V6 = 0x04


class DomainName(NamedTuple):
    name: bytes

    def __str__(self) -> str:
        return self.name.decode("ascii", errors="replace")


HostAddress = Union[IPv4Address, IPv6Address, DomainName]


def is_valid_domain_name(name: bytes) -> bool:
    return len(name) <= 255


def is_valid_port(port: int) -> bool:
    return 0 <= port <= 0xFFFF


class SocksAddress(NamedTuple):
    host: HostAddress
    port: int

    @classmethod
    def from_host(cls, host: str, port: int) -> "SocksAddress":
        try:
            return cls(IPv4Address(host), port)
        except ValueError:
            try:
                return cls(IPv6Address(host), port)
            except ValueError:
                pass
        try:
            name = host.encode("ascii")
        except UnicodeEncodeError:
            raise SocksError(
                ErrorKind.INVALID_CONFIGURATION, f"non-ascii domain name {host!r}"
            )
        return cls(DomainName(name), port)

    @property
    def type(self) -> AddrType:
        if isinstance(self.host, IPv4Address):
            return AddrType.IP_V4
        elif isinstance(self.host, DomainName):
            return AddrType.DOMAIN_NAME
        elif isinstance(self.host, IPv6Address):
            return AddrType.IP_V6
        raise SocksError(ErrorKind.UNSUPPORTED_ADDRESS_TYPE, repr(self.host))

    def __str__(self) -> str:
        return util.format_addr(str(self.host), self.port)

    def pack(self) -> bytes:
        addr_type = self.type
        if not is_valid_port(self.port):
            raise SocksError(ErrorKind.INVALID_CONFIGURATION, f"port {self.port}")
        blocks = [bytes([addr_type])]
        if addr_type == AddrType.IP_V4:
            blocks.append(self.host.packed)
        elif addr_type == AddrType.DOMAIN_NAME:
            name = self.host.name
            if not is_valid_domain_name(name):
                raise SocksError(ErrorKind.ADDRESS_TOO_LONG, f"{len(name)} bytes")
            blocks.append(bytes([len(name)]) + name)
        elif addr_type == AddrType.IP_V6:
            blocks.append(self.host.packed)
        blocks.append(self.port.to_bytes(2))
        return b"".join(blocks)

    @classmethod
    def parse(cls, data: bytes, offset: int = 0) -> Tuple["SocksAddress", int]:
        # returns the address and the offset just past the port
        if len(data) <= offset:
            raise SocksError(ErrorKind.MALFORMED_REPLY, "missing address type")
        addr_type = data[offset]
        offset += 1
        if addr_type == AddrType.IP_V4:
            size = 4
        elif addr_type == AddrType.DOMAIN_NAME:
            if len(data) <= offset:
                raise SocksError(ErrorKind.MALFORMED_REPLY, "missing name length")
            size = data[offset]
            offset += 1
        elif addr_type == AddrType.IP_V6:
            size = 16
        else:
            raise SocksError(ErrorKind.UNSUPPORTED_ADDRESS_TYPE, f"0x{addr_type:02x}")
        end = offset + size
        if len(data) < end + 2:
            raise SocksError(
                ErrorKind.MALFORMED_REPLY,
                f"expected {end + 2} bytes, got {len(data)}",
            )
        raw = data[offset:end]
        if addr_type == AddrType.IP_V4:
            host: HostAddress = IPv4Address(raw)
        elif addr_type == AddrType.DOMAIN_NAME:
            host = DomainName(raw)
        else:
            host = IPv6Address(raw)
        port = int.from_bytes(data[end : end + 2])
        return cls(host, port), end + 2
