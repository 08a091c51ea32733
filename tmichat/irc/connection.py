"""Connection Manager: owns the byte stream and frames it into lines."""

from __future__ import annotations

import asyncio
import codecs
import logging
import ssl
from collections.abc import Awaitable, Callable, Iterable

from ..config.model import Connection
from ..constants import (
    CONNECT_TIMEOUT,
    LINE_TERMINATOR,
    MAX_LINE_LENGTH,
    READ_CHUNK_SIZE,
)
from ..errors import (
    AlreadyConnectedError,
    NetworkError,
    NotConnectedError,
    ParsingError,
)
from ..logs.logger import logger

LineHandler = Callable[[str], Awaitable[None]]
ClosedHandler = Callable[[bool], Awaitable[None]]
ErrorHandler = Callable[[BaseException], Awaitable[None]]
ConnectedHandler = Callable[[], Awaitable[None]]


def split_lines(buffer: str, new_data: str) -> tuple[list[str], str]:
    """Append ``new_data`` to ``buffer`` and cut out every complete line.

    Returns the complete, non-empty lines in arrival order and the partial
    remainder to carry into the next call.
    """
    buffer += new_data
    lines: list[str] = []
    while LINE_TERMINATOR in buffer:
        line, buffer = buffer.split(LINE_TERMINATOR, 1)
        if line.strip():
            lines.append(line)
    return lines, buffer


class ConnectionManager:  # pylint: disable=too-many-instance-attributes
    """Owns one duplex stream to the server.

    Inbound data is decoded, framed and handed to ``on_line`` one line at a
    time; each call is awaited before the next line is dispatched. Only one
    stream is open at a time.
    """

    def __init__(
        self,
        connection: Connection,
        *,
        on_connected: ConnectedHandler,
        on_line: LineHandler,
        on_closed: ClosedHandler,
        on_error: ErrorHandler,
        connect_timeout: float = CONNECT_TIMEOUT,
        chunk_size: int = READ_CHUNK_SIZE,
        max_line_length: int = MAX_LINE_LENGTH,
    ) -> None:
        self.connection = connection
        self._on_connected = on_connected
        self._on_line = on_line
        self._on_closed = on_closed
        self._on_error = on_error
        self.connect_timeout = connect_timeout
        self.chunk_size = chunk_size
        self.max_line_length = max_line_length
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None
        self.message_buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._discarding = False
        self._read_task: asyncio.Task[None] | None = None
        self._drain_tasks: set[asyncio.Task[None]] = set()
        self._closing = False

    @property
    def is_connected(self) -> bool:
        return self.writer is not None and not self.writer.is_closing()

    async def open(self) -> bool:
        """Open the stream, run the connected handler and start reading.

        Returns ``False`` when the connection could not be established; the
        failure has then been reported through the error and closed handlers.

        Raises:
            AlreadyConnectedError: If a stream is still open.
        """
        host, port = self.connection.host, self.connection.port
        self._ensure_idle()
        logger.log_event("irc", "connect_start", server=host, port=port)
        ssl_context = ssl.create_default_context() if self.connection.secure else None
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port, ssl=ssl_context),
                timeout=self.connect_timeout,
            )
        except TimeoutError as e:
            logger.log_event(
                "irc",
                "connect_timeout",
                level=logging.ERROR,
                timeout=self.connect_timeout,
            )
            await self._fail(NetworkError("Connection timed out", data={"host": host}), e)
            return False
        except OSError as e:
            logger.log_event(
                "irc",
                "connect_network_error",
                level=logging.ERROR,
                error=str(e),
            )
            await self._fail(NetworkError(f"Connection failed: {e}", data={"host": host}), e)
            return False
        await self.attach(reader, writer)
        return True

    async def attach(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """Adopt an already open stream pair and start the read loop."""
        self._ensure_idle()
        self.reader, self.writer = reader, writer
        self.message_buffer = ""
        self._discarding = False
        self._decoder.reset()
        self._closing = False
        logger.log_event("irc", "connection_established", level=logging.DEBUG)
        await self._on_connected()
        self._read_task = asyncio.create_task(self._read_loop(reader, writer))

    def _ensure_idle(self) -> None:
        task = self._read_task
        reading = (
            task is not None and not task.done() and task is not asyncio.current_task()
        )
        if self.writer is not None or reading:
            logger.log_event("irc", "already_connected", level=logging.WARNING)
            raise AlreadyConnectedError(
                "A stream is already open", data={"host": self.connection.host}
            )

    async def _fail(self, error: NetworkError, cause: BaseException) -> None:
        error.__cause__ = cause
        await self._on_error(error)
        await self._on_closed(True)

    async def _read_loop(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        had_error = False
        try:
            while not self._closing:
                data = await reader.read(self.chunk_size)
                if not data:
                    break
                await self.process_incoming_data(data)
        except (OSError, asyncio.IncompleteReadError) as e:
            had_error = True
            logger.log_event(
                "irc", "read_error", level=logging.ERROR, error=str(e)
            )
            wrapped = NetworkError(f"Read failed: {e}")
            wrapped.__cause__ = e
            await self._on_error(wrapped)
        except Exception as e:  # noqa: BLE001
            had_error = True
            logger.log_event(
                "irc",
                "dispatch_error",
                level=logging.ERROR,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self._on_error(e)
        finally:
            await self._release(writer)
        logger.log_event("irc", "disconnected", level=logging.WARNING, had_error=had_error)
        await self._on_closed(had_error)

    async def process_incoming_data(self, data: bytes) -> None:
        """Decode one received chunk and dispatch every complete line in it.

        A partial line that grows past ``max_line_length`` is reported as a
        ``ParsingError`` and skipped up to its terminator.
        """
        text = self._decoder.decode(data)
        if self._discarding:
            head, sep, text = (self.message_buffer + text).partition(LINE_TERMINATOR)
            if not sep:
                # Keep a trailing "\r" in case the terminator is split
                self.message_buffer = head[-1:]
                return
            self.message_buffer = ""
            self._discarding = False
        lines, self.message_buffer = split_lines(self.message_buffer, text)
        for line in lines:
            if self._closing:
                return
            await self._on_line(line)
        if len(self.message_buffer) > self.max_line_length:
            await self._drop_partial_line()

    async def _drop_partial_line(self) -> None:
        size = len(self.message_buffer)
        self.message_buffer = self.message_buffer[-1:]
        self._discarding = True
        logger.log_event(
            "irc", "line_too_long", level=logging.WARNING, limit=self.max_line_length
        )
        await self._on_error(
            ParsingError(
                "Line exceeds maximum length",
                data={"length": size, "limit": self.max_line_length},
            )
        )

    def send_line(self, line: str) -> None:
        """Write one line; the terminator is appended here."""
        self._write(f"{line}{LINE_TERMINATOR}")

    def send_lines(self, lines: Iterable[str]) -> None:
        """Write several lines as a single buffer, in the given order."""
        self.send_line(LINE_TERMINATOR.join(lines))

    def _write(self, payload: str) -> None:
        writer = self.writer
        if writer is None or self._closing:
            raise NotConnectedError("Cannot send: no open connection")
        logger.log_event(
            "irc", "send", level=logging.DEBUG, raw=payload.rstrip(LINE_TERMINATOR)
        )
        writer.write(payload.encode("utf-8"))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to drain on; the transport flushes the buffer itself
            return
        task = loop.create_task(self._drain(writer))
        self._drain_tasks.add(task)
        task.add_done_callback(self._drain_tasks.discard)

    async def _drain(self, writer: asyncio.StreamWriter) -> None:
        try:
            await writer.drain()
        except (OSError, RuntimeError) as e:
            logger.log_event("irc", "write_error", level=logging.ERROR, error=str(e))
            wrapped = NetworkError(f"Write failed: {e}")
            wrapped.__cause__ = e
            await self._on_error(wrapped)

    async def close(self) -> None:
        """Close the stream; the read loop then reports the close.

        When called from inside a listener the read loop is the caller, so
        this returns at once and the close is reported after that listener
        returns.
        """
        self._closing = True
        task = self._read_task
        if task is None or task.done():
            await self._release(self.writer)
            return
        if self.writer is not None:
            self.writer.close()
        if self.reader is not None:
            self.reader.feed_eof()
        if task is asyncio.current_task():
            return
        await asyncio.gather(task, return_exceptions=True)

    async def wait_closed(self) -> None:
        task = self._read_task
        if task is not None and task is not asyncio.current_task():
            await asyncio.gather(task, return_exceptions=True)

    async def _release(self, writer: asyncio.StreamWriter | None) -> None:
        # Only the stream that is still current clears the shared state
        if writer is self.writer:
            self.writer = None
            self.reader = None
            self.message_buffer = ""
            self._discarding = False
        if writer is None:
            return
        try:
            writer.close()
            await writer.wait_closed()
        except (OSError, RuntimeError) as e:
            logger.log_event(
                "irc", "close_error", level=logging.DEBUG, error=str(e)
            )
