"""Test doubles for the transport and stream objects."""

from __future__ import annotations

from tmichat.irc.events import EventEmitter, EventName


class RecordingTransport:
    """Stands in for the connection manager; captures outbound lines."""

    def __init__(self) -> None:
        self.sent: list[str] = []

    def send_line(self, line: str) -> None:
        self.sent.append(line)

    def send_lines(self, lines) -> None:  # type: ignore[no-untyped-def]
        self.sent.append("\r\n".join(lines))


class FakeWriter:
    """Minimal asyncio.StreamWriter replacement capturing written bytes."""

    def __init__(self) -> None:
        self.buffer = bytearray()
        self.closed = False
        self.drain_error: BaseException | None = None

    def write(self, data: bytes) -> None:
        self.buffer.extend(data)

    async def drain(self) -> None:
        if self.drain_error is not None:
            raise self.drain_error

    def close(self) -> None:
        self.closed = True

    def is_closing(self) -> bool:
        return self.closed

    async def wait_closed(self) -> None:
        return None

    @property
    def text(self) -> str:
        return self.buffer.decode("utf-8")


class EventRecorder:
    """Subscribes to every event name and keeps the payloads in order."""

    def __init__(self, emitter: EventEmitter) -> None:
        self.events: list = []
        for name in EventName:
            emitter.on(name, self.events.append)

    def names(self) -> list[str]:
        return [event.name.value for event in self.events]

    def of(self, name: str) -> list:
        return [event for event in self.events if event.name.value == name]
