import enum
import logging
from asyncio import StreamReader, StreamWriter
from enum import Enum
from typing import Iterable, List, Optional

import util
from error import ErrorKind, SocksError

from . import codec
from .address import SocksAddress
from .auth import STATUS_SUCCESS, Method, SocksCredentials
from .tcp import Command, ReplyCode, describe_reply

logger = logging.getLogger(__name__)


class State(Enum):
    START = enum.auto()
    METHOD_NEGOTIATED = enum.auto()
    AUTH_PENDING = enum.auto()
    AUTHENTICATED = enum.auto()
    COMMAND_SENT = enum.auto()
    ESTABLISHED = enum.auto()
    FAILED = enum.auto()


class Handshake:
    def __init__(
        self, reader: StreamReader, writer: StreamWriter, version: int = codec.VERSION
    ) -> None:
        if version != codec.VERSION:
            raise SocksError(
                ErrorKind.INVALID_CONFIGURATION, f"unsupported socks version {version}"
            )
        self._reader = reader
        self._writer = writer
        self.state = State.START
        self.method: Optional[Method] = None

    def _expect(self, step: str, *states: State) -> None:
        if self.state not in states:
            raise RuntimeError(f"cannot {step} in state {self.state.name}")

    def _fail(self) -> None:
        self.state = State.FAILED

    async def establish(self, methods: Iterable[Method]) -> Method:
        self._expect("establish", State.START)
        offered: List[Method] = list(methods)
        try:
            await util.write_frame(self._writer, codec.encode_greeting(offered))
            _ver, method = codec.decode_method_selection(
                await util.read_exactly(self._reader, 2)
            )
            if method == Method.NO_ACCEPTABLE_METHODS:
                raise SocksError(ErrorKind.NO_ACCEPTABLE_AUTH_METHOD)
            if method not in offered:
                raise SocksError(
                    ErrorKind.NO_ACCEPTABLE_AUTH_METHOD,
                    f"server selected {method.name} which was not offered",
                )
        except BaseException:
            self._fail()
            raise
        logger.debug(f"socks5 method {method.name} selected")
        self.method = method
        self.state = State.METHOD_NEGOTIATED
        return method

    async def authenticate(self, credentials: SocksCredentials) -> None:
        self._expect("authenticate", State.METHOD_NEGOTIATED)
        try:
            request = codec.encode_auth_request(credentials)
            self.state = State.AUTH_PENDING
            await util.write_frame(self._writer, request)
            status = codec.decode_auth_response(
                await util.read_exactly(self._reader, 2)
            )
            if status != STATUS_SUCCESS:
                raise SocksError(
                    ErrorKind.AUTHENTICATION_FAILED, f"status 0x{status:02x}"
                )
        except BaseException:
            self._fail()
            raise
        logger.debug("socks5 authentication succeeded")
        self.state = State.AUTHENTICATED

    async def command(self, cmd: Command, destination: SocksAddress) -> SocksAddress:
        self._expect("send command", State.METHOD_NEGOTIATED, State.AUTHENTICATED)
        try:
            request = codec.encode_command_request(cmd, destination)
            self.state = State.COMMAND_SENT
            await util.write_frame(self._writer, request)
            frame = await util.read_exactly(self._reader, 4)
            size = codec.command_reply_size(frame)
            while len(frame) < size:
                frame += await util.read_exactly(self._reader, size - len(frame))
                size = codec.command_reply_size(frame)
            reply, bound = codec.decode_command_reply(frame)
            if reply != ReplyCode.SUCCEEDED:
                raise SocksError(
                    ErrorKind.COMMAND_FAILED, describe_reply(reply), reply=reply
                )
        except BaseException:
            self._fail()
            raise
        logger.debug(f"socks5 {cmd.name.lower()} to {destination} bound on {bound}")
        self.state = State.ESTABLISHED
        return bound
