"""IRC subsystem package.

Contains the message codec, the command enumeration, the entity model, the
event surface, the connection manager and the session state machine.
"""

from .commands import NOOP_COMMANDS, Command  # noqa: F401
from .connection import ConnectionManager, split_lines  # noqa: F401
from .events import (  # noqa: F401
    ConnectedEvent,
    DisconnectedEvent,
    ErrorEvent,
    Event,
    EventEmitter,
    EventName,
    GlobalUserStateEvent,
    JoinEvent,
    MessageEvent,
    PartEvent,
    PingEvent,
    RoomStateEvent,
    UnhandledCommandEvent,
    UserStateEvent,
)
from .message import ChatMessage, MessageData  # noqa: F401
from .models import Channel, ClientUser, User, UserState  # noqa: F401
from .parser import IRCMessage, Prefix, format_irc_message, parse_irc_message  # noqa: F401
from .session import Session  # noqa: F401

__all__ = [
    "Command",
    "NOOP_COMMANDS",
    "ConnectionManager",
    "split_lines",
    "Event",
    "EventEmitter",
    "EventName",
    "ConnectedEvent",
    "DisconnectedEvent",
    "ErrorEvent",
    "GlobalUserStateEvent",
    "JoinEvent",
    "MessageEvent",
    "PartEvent",
    "PingEvent",
    "RoomStateEvent",
    "UnhandledCommandEvent",
    "UserStateEvent",
    "ChatMessage",
    "MessageData",
    "Channel",
    "ClientUser",
    "User",
    "UserState",
    "IRCMessage",
    "Prefix",
    "format_irc_message",
    "parse_irc_message",
    "Session",
]
