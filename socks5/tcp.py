from enum import IntEnum
from typing import NamedTuple, Union


class Command(IntEnum):
    CONNECT = 0x01


class ReplyCode(IntEnum):
    SUCCEEDED = 0x00
    GENERAL_SOCKS_SERVER_FAILURE = 0x01
    CONNECTION_NOT_ALLOWED_BY_RULESET = 0x02
    NETWORK_UNREACHABLE = 0x03
    HOST_UNREACHABLE = 0x04
    CONNECTION_REFUSED = 0x05
    TTL_EXPIRED = 0x06
    COMMAND_NOT_SUPPORTED = 0x07
    ADDRESS_TYPE_NOT_SUPPORTED = 0x08


class UnassignedReply(NamedTuple):
    code: int

    def __str__(self) -> str:
        return f"unassigned reply 0x{self.code:02x}"


SocksReply = Union[ReplyCode, UnassignedReply]


def reply_from_code(code: int) -> SocksReply:
    try:
        return ReplyCode(code)
    except ValueError:
        return UnassignedReply(code)


def describe_reply(reply: SocksReply) -> str:
    if isinstance(reply, ReplyCode):
        return reply.name.lower().replace("_", " ")
    return str(reply)
