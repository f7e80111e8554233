import asyncio
from asyncio import IncompleteReadError, StreamReader, StreamWriter
from typing import List, Tuple

from proxy import SocksConf


def make_reader(data: bytes, eof: bool = True) -> StreamReader:
    # must be called with a running event loop
    reader = StreamReader()
    reader.feed_data(data)
    if eof:
        reader.feed_eof()
    return reader


class RecordingWriter:
    """Stands in for a StreamWriter and keeps everything written to it."""

    def __init__(self) -> None:
        self.data = bytearray()
        self.closed = False

    def write(self, data: bytes) -> None:
        self.data += data

    async def drain(self) -> None:
        pass

    def is_closing(self) -> bool:
        return self.closed

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        pass


class ScriptedProxy:
    """Proxy server that reads each expected client frame and answers it.

    Once the script is exhausted it echoes whatever the client sends until
    the client closes the connection.
    """

    def __init__(self, script: List[Tuple[bytes, bytes]]) -> None:
        self.script = script
        self.received = bytearray()
        self.client_closed = False
        self.done = asyncio.Event()
        self.server = None

    async def start(self) -> SocksConf:
        self.server = await asyncio.start_server(self.handle, "127.0.0.1", 0)
        port = self.server.sockets[0].getsockname()[1]
        return SocksConf(("127.0.0.1", port))

    async def stop(self) -> None:
        self.server.close()
        await self.server.wait_closed()

    async def handle(self, reader: StreamReader, writer: StreamWriter) -> None:
        try:
            for expected, reply in self.script:
                self.received += await reader.readexactly(len(expected))
                writer.write(reply)
                await writer.drain()
            while True:
                data = await reader.read(1024)
                if not data:
                    self.client_closed = True
                    break
                writer.write(data)
                await writer.drain()
        except (IncompleteReadError, ConnectionError):
            self.client_closed = True
        finally:
            writer.close()
            self.done.set()

    def expected(self) -> bytes:
        return b"".join(expected for expected, _ in self.script)
