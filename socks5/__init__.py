from .address import AddrType, DomainName, HostAddress, SocksAddress
from .auth import Method, SocksCredentials
from .handshake import Handshake, State
from .tcp import Command, ReplyCode, SocksReply, UnassignedReply, reply_from_code

__all__ = [
    "AddrType",
    "Command",
    "DomainName",
    "Handshake",
    "HostAddress",
    "Method",
    "ReplyCode",
    "SocksAddress",
    "SocksCredentials",
    "SocksReply",
    "State",
    "UnassignedReply",
    "reply_from_code",
]
