import logging
import os
import time
from asyncio import IncompleteReadError, StreamReader, StreamWriter
from ipaddress import IPv6Address
from logging import LogRecord
from typing import BinaryIO

from error import ErrorKind, SocksError


async def close_writer(writer: StreamWriter) -> None:
    if writer.is_closing():
        return
    try:
        writer.close()
        await writer.wait_closed()
    except Exception:
        pass


async def read_exactly(reader: StreamReader, n: int) -> bytes:
    try:
        return await reader.readexactly(n)
    except IncompleteReadError as err:
        raise SocksError(
            ErrorKind.TRANSPORT,
            f"connection closed after {len(err.partial)} of {n} bytes",
        ) from err
    except OSError as err:
        raise SocksError(ErrorKind.TRANSPORT, str(err)) from err


async def write_frame(writer: StreamWriter, data: bytes) -> None:
    try:
        writer.write(data)
        await writer.drain()
    except OSError as err:
        raise SocksError(ErrorKind.TRANSPORT, str(err)) from err


async def copy(reader: StreamReader, output: BinaryIO) -> int:
    total = 0
    while True:
        data = await reader.read(16 * 1024)
        if not data:
            break
        output.write(data)
        output.flush()
        total += len(data)
    return total


def format_addr(addr: str, port: int) -> str:
    try:
        return f"[{IPv6Address(addr)}]:{port}"
    except Exception:
        return f"{addr}:{port}"


class Formatter(logging.Formatter):
    converter = time.gmtime

    def format(self, record: LogRecord) -> str:
        timestamp = self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ")
        formatted = (
            f"[{timestamp} {record.levelname:5} {record.name}] {record.getMessage()}"
        )
        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            if formatted[-1:] != "\n":
                formatted += "\n"
            formatted += record.exc_text
        return formatted


def init_logging(default_level: str = "WARNING") -> None:
    log_level_str = os.environ.get("PYTHON_LOG", default_level).upper()
    log_levels = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
        "FATAL": logging.CRITICAL,
    }
    log_level = log_levels.get(log_level_str, logging.WARNING)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(Formatter())
    logging.basicConfig(level=log_level, handlers=[console_handler])
