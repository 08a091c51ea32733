"""Closed enumeration of the protocol commands the session understands."""

from __future__ import annotations

from enum import Enum


class Command(Enum):
    PING = "PING"
    WELCOME = "001"
    CAP = "CAP"
    YOURHOST = "002"
    CREATED = "003"
    MYINFO = "004"
    NAMREPLY = "353"
    ENDOFNAMES = "366"
    MOTD = "372"
    MOTDSTART = "375"
    ENDOFMOTD = "376"
    PRIVMSG = "PRIVMSG"
    JOIN = "JOIN"
    PART = "PART"
    GLOBALUSERSTATE = "GLOBALUSERSTATE"
    USERSTATE = "USERSTATE"
    ROOMSTATE = "ROOMSTATE"
    OTHER = "*"

    @classmethod
    def from_token(cls, token: str) -> Command:
        """Return the member for ``token``, or ``OTHER`` when unrecognized."""
        try:
            member = cls(token.upper())
        except ValueError:
            return cls.OTHER
        return cls.OTHER if member is cls.OTHER else member

    @property
    def is_noop(self) -> bool:
        return self in NOOP_COMMANDS


# Acknowledged but never surfaced as a domain event
NOOP_COMMANDS = frozenset(
    {
        Command.CAP,
        Command.YOURHOST,
        Command.CREATED,
        Command.MYINFO,
        Command.NAMREPLY,
        Command.ENDOFNAMES,
        Command.MOTD,
        Command.MOTDSTART,
        Command.ENDOFMOTD,
    }
)
