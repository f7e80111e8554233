from enum import IntEnum
from typing import NamedTuple

SUBNEGOTIATION_VERSION = 0x01
STATUS_SUCCESS = 0x00


class Method(IntEnum):
    NO_AUTHENTICATION_REQUIRED = 0x00
    USERNAME_PASSWORD = 0x02
    NO_ACCEPTABLE_METHODS = 0xFF


class SocksCredentials(NamedTuple):
    username: bytes
    password: bytes

    @classmethod
    def from_strings(
        cls, username: str, password: str, encoding: str = "utf-8"
    ) -> "SocksCredentials":
        return cls(username.encode(encoding), password.encode(encoding))
