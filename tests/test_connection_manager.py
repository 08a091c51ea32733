from __future__ import annotations

import asyncio

import pytest

from tests.fakes import FakeWriter
from tmichat.config.model import Connection
from tmichat.errors import (
    AlreadyConnectedError,
    NetworkError,
    NotConnectedError,
    ParsingError,
)
from tmichat.irc.connection import ConnectionManager, split_lines


class Harness:
    """Records every callback the connection manager makes."""

    def __init__(self, **options) -> None:
        self.calls: list[tuple] = []
        self.manager = ConnectionManager(
            Connection(host="localhost", port=6697),
            on_connected=self.on_connected,
            on_line=self.on_line,
            on_closed=self.on_closed,
            on_error=self.on_error,
            **options,
        )

    async def on_connected(self) -> None:
        self.calls.append(("connected",))

    async def on_line(self, line: str) -> None:
        self.calls.append(("line", line))

    async def on_closed(self, had_error: bool) -> None:
        self.calls.append(("closed", had_error))

    async def on_error(self, error: BaseException) -> None:
        self.calls.append(("error", error))

    def lines(self) -> list[str]:
        return [c[1] for c in self.calls if c[0] == "line"]


def test_split_lines_keeps_partial_remainder():
    lines, rest = split_lines("", "PING :a\r\nPRIVMSG #c :hel")
    assert lines == ["PING :a"]
    assert rest == "PRIVMSG #c :hel"
    lines, rest = split_lines(rest, "lo\r\n\r\n")
    assert lines == ["PRIVMSG #c :hello"]
    assert rest == ""


def test_split_lines_terminator_across_chunks():
    lines, rest = split_lines("", "PING :a\r")
    assert lines == []
    lines, rest = split_lines(rest, "\nPING :b\r\n")
    assert lines == ["PING :a", "PING :b"]
    assert rest == ""


@pytest.mark.asyncio
async def test_process_incoming_data_reassembles_lines():
    harness = Harness()
    await harness.manager.process_incoming_data(b"PING :a\r\nPI")
    assert harness.lines() == ["PING :a"]
    await harness.manager.process_incoming_data(b"NG :b\r\n")
    assert harness.lines() == ["PING :a", "PING :b"]


@pytest.mark.asyncio
async def test_multibyte_character_split_across_chunks():
    harness = Harness()
    payload = "PRIVMSG #c :café\r\n".encode()
    split_at = payload.index(b"\xc3") + 1
    await harness.manager.process_incoming_data(payload[:split_at])
    await harness.manager.process_incoming_data(payload[split_at:])
    assert harness.lines() == ["PRIVMSG #c :café"]


@pytest.mark.asyncio
async def test_read_loop_dispatches_then_reports_clean_close():
    harness = Harness()
    reader = asyncio.StreamReader()
    writer = FakeWriter()
    await harness.manager.attach(reader, writer)
    reader.feed_data(b"PING :a\r\nPING :b\r\n")
    reader.feed_eof()
    await harness.manager.wait_closed()
    assert harness.calls == [
        ("connected",),
        ("line", "PING :a"),
        ("line", "PING :b"),
        ("closed", False),
    ]
    assert writer.closed
    assert not harness.manager.is_connected


@pytest.mark.asyncio
async def test_read_error_reports_error_then_close():
    harness = Harness()
    reader = asyncio.StreamReader()
    await harness.manager.attach(reader, FakeWriter())
    reader.set_exception(ConnectionResetError("reset by peer"))
    await harness.manager.wait_closed()
    kinds = [c[0] for c in harness.calls]
    assert kinds == ["connected", "error", "closed"]
    assert isinstance(harness.calls[1][1], NetworkError)
    assert harness.calls[2] == ("closed", True)


@pytest.mark.asyncio
async def test_send_line_and_send_lines_write_terminated_buffers():
    harness = Harness()
    writer = FakeWriter()
    await harness.manager.attach(asyncio.StreamReader(), writer)
    harness.manager.send_line("JOIN #c")
    harness.manager.send_lines(["CAP REQ :x", "PASS oauth:y", "NICK z"])
    assert writer.text == "JOIN #c\r\nCAP REQ :x\r\nPASS oauth:y\r\nNICK z\r\n"
    await harness.manager.close()


def test_send_without_stream_raises():
    harness = Harness()
    with pytest.raises(NotConnectedError):
        harness.manager.send_line("JOIN #c")


@pytest.mark.asyncio
async def test_drain_failure_is_reported_through_error_callback():
    harness = Harness()
    writer = FakeWriter()
    writer.drain_error = BrokenPipeError("pipe closed")
    await harness.manager.attach(asyncio.StreamReader(), writer)
    harness.manager.send_line("PRIVMSG #c :hi")
    for _ in range(3):
        await asyncio.sleep(0)
    errors = [c[1] for c in harness.calls if c[0] == "error"]
    assert len(errors) == 1
    assert isinstance(errors[0], NetworkError)
    assert isinstance(errors[0].__cause__, BrokenPipeError)
    await harness.manager.close()


@pytest.mark.asyncio
async def test_close_stops_read_loop_and_rejects_writes():
    harness = Harness()
    await harness.manager.attach(asyncio.StreamReader(), FakeWriter())
    await harness.manager.close()
    assert harness.calls[-1] == ("closed", False)
    with pytest.raises(NotConnectedError):
        harness.manager.send_line("PING :x")


@pytest.mark.asyncio
async def test_attach_refuses_second_stream_while_first_is_open():
    harness = Harness()
    first_writer = FakeWriter()
    await harness.manager.attach(asyncio.StreamReader(), first_writer)
    with pytest.raises(AlreadyConnectedError):
        await harness.manager.attach(asyncio.StreamReader(), FakeWriter())
    assert harness.manager.writer is first_writer
    assert harness.calls == [("connected",)]
    await harness.manager.close()


@pytest.mark.asyncio
async def test_finished_read_loop_only_releases_its_own_stream():
    harness = Harness()
    old_reader, old_writer = asyncio.StreamReader(), FakeWriter()
    new_writer = FakeWriter()
    await harness.manager.attach(asyncio.StreamReader(), new_writer)
    stale = asyncio.create_task(harness.manager._read_loop(old_reader, old_writer))
    old_reader.feed_eof()
    await stale
    assert old_writer.closed
    assert harness.manager.writer is new_writer
    assert harness.manager.is_connected
    await harness.manager.close()


@pytest.mark.asyncio
async def test_close_from_inside_a_line_handler_finishes_the_loop():
    harness = Harness()
    reader = asyncio.StreamReader()

    async def close_on_first_line(line: str) -> None:
        harness.calls.append(("line", line))
        await harness.manager.close()

    harness.manager._on_line = close_on_first_line
    await harness.manager.attach(reader, FakeWriter())
    reader.feed_data(b"PING :a\r\nPING :b\r\n")
    await asyncio.wait_for(harness.manager.wait_closed(), timeout=2)
    assert harness.calls == [("connected",), ("line", "PING :a"), ("closed", False)]


@pytest.mark.asyncio
async def test_overlong_partial_line_is_reported_and_skipped():
    harness = Harness(max_line_length=16)
    await harness.manager.process_incoming_data(b"X" * 20)
    await harness.manager.process_incoming_data(b"XXXX")
    await harness.manager.process_incoming_data(b"YYY\r\nPING :a\r\n")
    assert harness.lines() == ["PING :a"]
    errors = [c[1] for c in harness.calls if c[0] == "error"]
    assert len(errors) == 1
    assert isinstance(errors[0], ParsingError)
    assert errors[0].data["limit"] == 16


@pytest.mark.asyncio
async def test_overlong_line_with_split_terminator_resumes_on_next_line():
    harness = Harness(max_line_length=16)
    await harness.manager.process_incoming_data(b"Z" * 20 + b"\r")
    await harness.manager.process_incoming_data(b"\nPING :b\r\n")
    assert harness.lines() == ["PING :b"]
