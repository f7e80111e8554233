import enum
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    VERSION_MISMATCH = enum.auto()
    NO_ACCEPTABLE_AUTH_METHOD = enum.auto()
    AUTHENTICATION_FAILED = enum.auto()
    CREDENTIAL_TOO_LONG = enum.auto()
    ADDRESS_TOO_LONG = enum.auto()
    UNSUPPORTED_ADDRESS_TYPE = enum.auto()
    MALFORMED_REPLY = enum.auto()
    COMMAND_FAILED = enum.auto()
    INVALID_CONFIGURATION = enum.auto()
    TRANSPORT = enum.auto()


class SocksError(Exception):
    def __init__(
        self, kind: ErrorKind, detail: Optional[str] = None, reply: Any = None
    ) -> None:
        self.kind = kind
        self.reply = reply
        messages = {
            ErrorKind.VERSION_MISMATCH: "version mismatch",
            ErrorKind.NO_ACCEPTABLE_AUTH_METHOD: "no acceptable auth method",
            ErrorKind.AUTHENTICATION_FAILED: "authentication failed",
            ErrorKind.CREDENTIAL_TOO_LONG: "credential too long",
            ErrorKind.ADDRESS_TOO_LONG: "address too long",
            ErrorKind.UNSUPPORTED_ADDRESS_TYPE: "unsupported address type",
            ErrorKind.MALFORMED_REPLY: "malformed reply",
            ErrorKind.COMMAND_FAILED: "command failed",
            ErrorKind.INVALID_CONFIGURATION: "invalid configuration",
            ErrorKind.TRANSPORT: "transport error",
        }
        message = messages.get(kind, "unknown error")
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
