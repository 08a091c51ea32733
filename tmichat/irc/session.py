"""Session State Machine: turns decoded protocol lines into domain events.

The session exclusively owns the channel map, the authenticated user and its
per-channel states. They are only written from :meth:`Session.dispatch`,
which the connection calls for one line at a time; consumers get read-only
views.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import Protocol

from ..config.model import Identity
from ..constants import (
    ANONYMOUS_NICK_PREFIX,
    ANONYMOUS_PASSWORD,
    CAPABILITY_REQUEST,
    PONG_REPLY,
    SERVICE_PSEUDO_USER,
)
from ..errors import IdentityNotEstablishedError, ParsingError
from ..logs.logger import logger
from .commands import Command
from .events import (
    ErrorEvent,
    Event,
    EventEmitter,
    GlobalUserStateEvent,
    JoinEvent,
    MessageEvent,
    PartEvent,
    PingEvent,
    RoomStateEvent,
    UnhandledCommandEvent,
    UserStateEvent,
)
from .message import ChatMessage, MessageData
from .models import Channel, ClientUser, User, UserState
from .parser import IRCMessage, format_irc_message, parse_irc_message


class LineSender(Protocol):
    """The write side of the connection as seen by the session."""

    def send_line(self, line: str) -> None:
        """Write one line."""
        ...

    def send_lines(self, lines: Iterable[str]) -> None:
        """Write several lines as one buffer, in order."""
        ...


Handler = Callable[[MessageData], Awaitable[None]]


class Session:
    """Applies inbound lines to the chat state and builds outbound lines."""

    def __init__(
        self,
        transport: LineSender,
        events: EventEmitter | None = None,
        identity: Identity | None = None,
    ) -> None:
        self._transport = transport
        self.events = events or EventEmitter()
        self._identity = identity
        self._channels: dict[str, Channel] = {}
        self._user: ClientUser | None = None
        self._handlers: dict[Command, Handler] = {
            Command.PRIVMSG: self._handle_privmsg,
            Command.JOIN: self._handle_join,
            Command.PART: self._handle_part,
            Command.GLOBALUSERSTATE: self._handle_globaluserstate,
            Command.USERSTATE: self._handle_userstate,
            Command.ROOMSTATE: self._handle_roomstate,
        }

    # -- read-only views ---------------------------------------------------

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def channels(self) -> Mapping[str, Channel]:
        return MappingProxyType(self._channels)

    @property
    def user(self) -> ClientUser | None:
        return self._user

    @property
    def username(self) -> str | None:
        return self._identity.name if self._identity else None

    def require_user(self) -> ClientUser:
        if self._user is None:
            raise IdentityNotEstablishedError(
                "Authenticated user not established (no GLOBALUSERSTATE yet)"
            )
        return self._user

    # -- inbound -----------------------------------------------------------

    async def handle_line(self, line: str) -> None:
        """Decode and dispatch one line; decode failures become error events."""
        try:
            parsed = parse_irc_message(line)
        except ParsingError as e:
            logger.log_event(
                "irc",
                "parse_error",
                level=logging.WARNING,
                user=self.username,
                raw=line,
                error=str(e),
            )
            await self._emit(ErrorEvent(e))
            return
        await self.dispatch(parsed)

    async def dispatch(self, parsed: IRCMessage) -> None:
        command = Command.from_token(parsed.command)
        if command is not Command.PING:
            logger.log_event(
                "irc", "raw", level=logging.DEBUG, user=self.username, raw=parsed.raw
            )

        if command is Command.PING:
            self._handle_ping()
            await self._emit(PingEvent())
            return
        if parsed.prefix and parsed.prefix.user == SERVICE_PSEUDO_USER:
            logger.log_event(
                "irc",
                "service_message",
                level=logging.DEBUG,
                user=self.username,
                command=parsed.command,
                params=parsed.params,
            )
            return
        if command is Command.WELCOME:
            self._handle_welcome(parsed)
            return
        if command.is_noop:
            return

        data = MessageData(self, parsed)
        handler = self._handlers.get(command, self._handle_unhandled)
        await handler(data)

    def _handle_ping(self) -> None:
        self._transport.send_line(PONG_REPLY)

    def _handle_welcome(self, parsed: IRCMessage) -> None:
        if not parsed.params:
            logger.log_event(
                "irc", "welcome_without_name", level=logging.WARNING, raw=parsed.raw
            )
            return
        name = parsed.params[0]
        if self._identity is None:
            self._identity = Identity(name=name, auth=None)
        else:
            self._identity = self._identity.with_name(name)
        logger.log_event("irc", "welcome", user=self.username)

    async def _handle_privmsg(self, data: MessageData) -> None:
        channel = self._resolve_channel(data)
        if channel is None:
            logger.log_event(
                "irc",
                "privmsg_without_channel",
                level=logging.WARNING,
                user=self.username,
                raw=data.raw,
            )
            await self._handle_unhandled(data)
            return
        message = ChatMessage(data, channel, self._resolve_user(data, channel))
        logger.log_event(
            "irc",
            "privmsg",
            level=logging.DEBUG,
            user=self.username,
            channel=channel.name,
            author=message.user.login,
            chat_message=message.text,
        )
        await self._emit(MessageEvent(message))

    async def _handle_join(self, data: MessageData) -> None:
        channel = self._resolve_channel(data)
        if channel is None:
            await self._handle_unhandled(data)
            return
        self._channels[channel.name] = channel
        user = self._resolve_user(data, channel)
        logger.log_event(
            "irc",
            "join",
            level=logging.DEBUG,
            user=self.username,
            channel=channel.name,
            login=user.login,
        )
        await self._emit(JoinEvent(channel=channel, user=user))

    async def _handle_part(self, data: MessageData) -> None:
        channel = self._resolve_channel(data)
        if channel is None:
            await self._handle_unhandled(data)
            return
        self._channels.pop(channel.name, None)
        if self._user is None:
            logger.log_event(
                "irc",
                "part_without_user",
                level=logging.WARNING,
                user=self.username,
                channel=channel.name,
            )
        else:
            self._user._remove_state(channel.name)  # noqa: SLF001
        user = self._resolve_user(data, channel)
        logger.log_event(
            "irc",
            "part",
            level=logging.DEBUG,
            user=self.username,
            channel=channel.name,
            login=user.login,
        )
        await self._emit(PartEvent(channel=channel, user=user))

    async def _handle_globaluserstate(self, data: MessageData) -> None:
        self._user = ClientUser(self, self.username, data.tags)
        logger.log_event(
            "irc",
            "globaluserstate",
            level=logging.DEBUG,
            user=self.username,
        )
        await self._emit(GlobalUserStateEvent(user=self._user))

    async def _handle_userstate(self, data: MessageData) -> None:
        channel = self._resolve_channel(data)
        if self._user is None or channel is None:
            logger.log_event(
                "irc",
                "userstate_before_globaluserstate"
                if self._user is None
                else "userstate_without_channel",
                level=logging.WARNING,
                user=self.username,
                raw=data.raw,
            )
            return
        state = self._user.states.get(channel.name)
        if state is None:
            state = UserState(data.tags, channel)
            self._user._set_state(channel.name, state)  # noqa: SLF001
        else:
            state.update(data.tags)
        await self._emit(UserStateEvent(state=state))

    async def _handle_roomstate(self, data: MessageData) -> None:
        name = data.params[0] if data.params else None
        if name is not None and name in self._channels:
            self._channels[name].update(data.tags)
        await self._emit(RoomStateEvent(data=data))

    async def _handle_unhandled(self, data: MessageData) -> None:
        await self._emit(UnhandledCommandEvent(data=data))

    def _resolve_channel(self, data: MessageData) -> Channel | None:
        if not data.params:
            return None
        name = data.params[0]
        channel = self._channels.get(name)
        if channel is None:
            channel = Channel(self, name, data.tags)
        return channel

    def _resolve_user(self, data: MessageData, channel: Channel) -> User:
        sender = data.sender
        if self._user is not None and sender is not None and sender == self._user.login:
            return self._user
        return User(sender or "", data.tags, channel)

    async def _emit(self, event: Event) -> None:
        await self.events.emit(event)

    # -- outbound ----------------------------------------------------------

    def handshake_lines(self) -> list[str]:
        """Capability request, password and nickname, in that order."""
        identity = self._identity
        if identity is not None and identity.name and identity.password:
            password, nick = identity.password, identity.name
        else:
            password = ANONYMOUS_PASSWORD
            nick = f"{ANONYMOUS_NICK_PREFIX}{secrets.randbelow(89999) + 10000}"
        return [CAPABILITY_REQUEST, f"PASS {password}", f"NICK {nick}"]

    def join(self, name: str) -> None:
        self.send_raw(format_irc_message("JOIN", middle=[name]))

    def part(self, name: str) -> None:
        self.send_raw(format_irc_message("PART", middle=[name]))

    def say(self, target: str | Channel, text: str) -> None:
        self.send_raw(format_irc_message("PRIVMSG", params=[str(target), text]))

    def send_command(
        self, target: str | Channel, command: str, params: str | Sequence[str] = ()
    ) -> None:
        """Send a chat command (``/command params``) to a channel."""
        command_params = params if isinstance(params, str) else " ".join(params)
        text = f"/{command} {command_params}" if command_params else f"/{command}"
        self.send_raw(
            format_irc_message("PRIVMSG", middle=[str(target)], trailing=text)
        )

    def send_raw(self, message: str) -> None:
        self._transport.send_line(message)

    def send_raw_array(self, messages: Iterable[str]) -> None:
        self._transport.send_lines(list(messages))
