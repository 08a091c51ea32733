"""Typed event variants and the publish/subscribe surface.

Every event name maps to exactly one payload dataclass:

=====================  ===============================
name                   payload
=====================  ===============================
``unhandled-command``  :class:`UnhandledCommandEvent`
``error``              :class:`ErrorEvent`
``ping``               :class:`PingEvent`
``connected``          :class:`ConnectedEvent`
``disconnected``       :class:`DisconnectedEvent`
``join``               :class:`JoinEvent`
``part``               :class:`PartEvent`
``message``            :class:`MessageEvent`
``globaluserstate``    :class:`GlobalUserStateEvent`
``userstate``          :class:`UserStateEvent`
``roomstate``          :class:`RoomStateEvent`
=====================  ===============================
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Union

from ..logs.logger import logger

if TYPE_CHECKING:  # pragma: no cover
    from .message import ChatMessage, MessageData
    from .models import Channel, ClientUser, User, UserState


class EventName(str, Enum):
    UNHANDLED_COMMAND = "unhandled-command"
    ERROR = "error"
    PING = "ping"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    JOIN = "join"
    PART = "part"
    MESSAGE = "message"
    GLOBALUSERSTATE = "globaluserstate"
    USERSTATE = "userstate"
    ROOMSTATE = "roomstate"


@dataclass(frozen=True)
class UnhandledCommandEvent:
    name: ClassVar[EventName] = EventName.UNHANDLED_COMMAND
    data: MessageData


@dataclass(frozen=True)
class ErrorEvent:
    name: ClassVar[EventName] = EventName.ERROR
    cause: BaseException


@dataclass(frozen=True)
class PingEvent:
    name: ClassVar[EventName] = EventName.PING


@dataclass(frozen=True)
class ConnectedEvent:
    name: ClassVar[EventName] = EventName.CONNECTED


@dataclass(frozen=True)
class DisconnectedEvent:
    name: ClassVar[EventName] = EventName.DISCONNECTED
    will_reconnect: bool
    had_error: bool


@dataclass(frozen=True)
class JoinEvent:
    name: ClassVar[EventName] = EventName.JOIN
    channel: Channel
    user: User


@dataclass(frozen=True)
class PartEvent:
    name: ClassVar[EventName] = EventName.PART
    channel: Channel
    user: User


@dataclass(frozen=True)
class MessageEvent:
    name: ClassVar[EventName] = EventName.MESSAGE
    message: ChatMessage


@dataclass(frozen=True)
class GlobalUserStateEvent:
    name: ClassVar[EventName] = EventName.GLOBALUSERSTATE
    user: ClientUser


@dataclass(frozen=True)
class UserStateEvent:
    name: ClassVar[EventName] = EventName.USERSTATE
    state: UserState


@dataclass(frozen=True)
class RoomStateEvent:
    name: ClassVar[EventName] = EventName.ROOMSTATE
    data: MessageData


Event = Union[
    UnhandledCommandEvent,
    ErrorEvent,
    PingEvent,
    ConnectedEvent,
    DisconnectedEvent,
    JoinEvent,
    PartEvent,
    MessageEvent,
    GlobalUserStateEvent,
    UserStateEvent,
    RoomStateEvent,
]

Listener = Callable[[Any], Union[Awaitable[None], None]]


class EventEmitter:
    """Listeners keyed by :class:`EventName`, invoked in registration order."""

    def __init__(self) -> None:
        self._listeners: dict[EventName, list[tuple[Listener, bool]]] = {
            name: [] for name in EventName
        }

    def on(self, event: EventName | str, listener: Listener) -> Listener:
        self._listeners[EventName(event)].append((listener, False))
        return listener

    def once(self, event: EventName | str, listener: Listener) -> Listener:
        self._listeners[EventName(event)].append((listener, True))
        return listener

    def off(self, event: EventName | str, listener: Listener) -> bool:
        entries = self._listeners[EventName(event)]
        for i, (registered, _) in enumerate(entries):
            if registered is listener:
                del entries[i]
                return True
        return False

    def listener_count(self, event: EventName | str) -> int:
        return len(self._listeners[EventName(event)])

    async def emit(self, event: Event) -> None:
        entries = self._listeners[event.name]
        if not entries:
            return
        # Snapshot so listeners may (un)register while being invoked
        snapshot = list(entries)
        self._listeners[event.name] = [e for e in entries if not e[1]]
        for listener, _ in snapshot:
            await self._invoke(listener, event)

    async def _invoke(self, listener: Listener, event: Event) -> None:
        try:
            result = listener(event)
            if inspect.isawaitable(result):
                await result
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "events",
                "listener_error",
                level=logging.ERROR,
                event=event.name.value,
                error=str(e),
                error_type=type(e).__name__,
            )
