"""Per-message wrappers handed to event listeners."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .parser import IRCMessage, Prefix

if TYPE_CHECKING:  # pragma: no cover
    from .models import Channel, User
    from .session import Session

_ACTION_START = "\x01ACTION "


class MessageData:
    """A decoded protocol line plus the session it arrived on."""

    def __init__(self, session: Session | None, parsed: IRCMessage) -> None:
        self.session = session
        self.parsed = parsed

    @property
    def command(self) -> str:
        return self.parsed.command

    @property
    def tags(self) -> dict[str, str]:
        return self.parsed.tags

    @property
    def prefix(self) -> Prefix | None:
        return self.parsed.prefix

    @property
    def params(self) -> list[str]:
        return self.parsed.params

    @property
    def raw(self) -> str:
        return self.parsed.raw

    @property
    def sender(self) -> str | None:
        """Login name of the sender, if the line carried a prefix."""
        return self.prefix.name if self.prefix else None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.command} {self.params!r}>"


class ChatMessage(MessageData):
    """A PRIVMSG resolved against its channel and author."""

    def __init__(self, data: MessageData, channel: Channel, user: User) -> None:
        super().__init__(data.session, data.parsed)
        self.channel = channel
        self.user = user
        text = self.params[1] if len(self.params) > 1 else ""
        # CTCP ACTION (/me) arrives wrapped in \x01 markers
        self.is_action = text.startswith(_ACTION_START)
        if self.is_action:
            text = text[len(_ACTION_START):].rstrip("\x01")
        self.text = text

    @property
    def message_id(self) -> str | None:
        return self.tags.get("id")

    @property
    def is_self(self) -> bool:
        if self.session is None or self.session.user is None:
            return False
        return self.user is self.session.user

    def reply(self, text: str) -> None:
        if self.session is None:
            raise RuntimeError("Message is not bound to a session")
        self.session.say(self.channel, text)
