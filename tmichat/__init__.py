"""tmichat: an asyncio client for the Twitch chat (TMI) IRC dialect."""

from .client import Client  # noqa: F401
from .config import ClientOptions, Connection, ConnectionOptions, Identity  # noqa: F401
from .errors import (  # noqa: F401
    AlreadyConnectedError,
    IdentityNotEstablishedError,
    InternalError,
    NetworkError,
    NotConnectedError,
    ParsingError,
)
from .irc import (  # noqa: F401
    Channel,
    ChatMessage,
    ClientUser,
    EventName,
    MessageData,
    User,
    UserState,
)

__version__ = "0.1.0"

__all__ = [
    "Client",
    "ClientOptions",
    "Connection",
    "ConnectionOptions",
    "Identity",
    "InternalError",
    "NetworkError",
    "NotConnectedError",
    "AlreadyConnectedError",
    "ParsingError",
    "IdentityNotEstablishedError",
    "Channel",
    "ChatMessage",
    "ClientUser",
    "EventName",
    "MessageData",
    "User",
    "UserState",
]
