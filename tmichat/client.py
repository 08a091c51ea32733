"""Chat client facade wiring the connection, the session and the events."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .config.model import ClientOptions, Connection, Identity
from .errors import log_error
from .irc.connection import ConnectionManager
from .irc.events import (
    ConnectedEvent,
    DisconnectedEvent,
    ErrorEvent,
    EventEmitter,
    EventName,
    Listener,
)
from .irc.models import Channel, ClientUser
from .irc.session import Session
from .logs.logger import logger


class Client:  # pylint: disable=too-many-instance-attributes
    """The chat client.

    Example::

        client = Client({"identity": {"name": "mybot", "auth": token}})
        client.on("message", on_message)
        await client.connect()
        client.join("#channel")
        await client.wait_closed()
    """

    def __init__(self, options: ClientOptions | Mapping[str, Any] | None = None):
        if not isinstance(options, ClientOptions):
            options = ClientOptions.from_dict(options)
        self.options = options
        self.connection = Connection.from_options(options.connection)
        self.events = EventEmitter()
        self.connection_manager = ConnectionManager(
            self.connection,
            on_connected=self._on_connect,
            on_line=self._on_line,
            on_closed=self._on_close,
            on_error=self._on_error,
        )
        self.session = Session(self.connection_manager, self.events, options.identity)

    # -- state views -------------------------------------------------------

    @property
    def identity(self) -> Identity | None:
        return self.session.identity

    @property
    def user(self) -> ClientUser | None:
        return self.session.user

    @property
    def channels(self) -> Mapping[str, Channel]:
        return self.session.channels

    @property
    def is_connected(self) -> bool:
        return self.connection_manager.is_connected

    # -- listeners ---------------------------------------------------------

    def on(self, event: EventName | str, listener: Listener) -> Listener:
        return self.events.on(event, listener)

    def once(self, event: EventName | str, listener: Listener) -> Listener:
        return self.events.once(event, listener)

    def off(self, event: EventName | str, listener: Listener) -> bool:
        return self.events.off(event, listener)

    # -- connection lifecycle ----------------------------------------------

    async def connect(self) -> bool:
        """Connect to the chat servers and log in.

        Returns ``True`` once the stream is open and the login lines are
        written; failures are reported through ``error`` and ``disconnected``.
        """
        return await self.connection_manager.open()

    async def disconnect(self) -> None:
        """Close the stream; ``disconnected`` follows once reading stops."""
        await self.connection_manager.close()

    async def wait_closed(self) -> None:
        await self.connection_manager.wait_closed()

    async def _on_connect(self) -> None:
        self.connection_manager.send_lines(self.session.handshake_lines())
        logger.log_event("irc", "auth_sent", level=logging.DEBUG, user=self.session.username)
        await self.events.emit(ConnectedEvent())

    async def _on_line(self, line: str) -> None:
        await self.session.handle_line(line)

    async def _on_close(self, had_error: bool) -> None:
        will_reconnect = False
        await self.events.emit(
            DisconnectedEvent(will_reconnect=will_reconnect, had_error=had_error)
        )

    async def _on_error(self, error: BaseException) -> None:
        log_error("Connection error", error, context={"host": self.connection.host})
        await self.events.emit(ErrorEvent(error))

    # -- outbound ----------------------------------------------------------

    def send_raw(self, message: str) -> None:
        self.session.send_raw(message)

    def send_raw_array(self, messages: Iterable[str]) -> None:
        self.session.send_raw_array(messages)

    def join(self, name: str) -> None:
        self.session.join(name)

    def part(self, name: str) -> None:
        self.session.part(name)

    def say(self, channel: str | Channel, message: str) -> None:
        self.session.say(channel, message)

    def send_command(
        self, channel: str | Channel, command: str, params: str | Sequence[str] = ()
    ) -> None:
        self.session.send_command(channel, command, params)
