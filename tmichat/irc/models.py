"""Entity model of a chat session: channels, users and per-channel state."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .session import Session


def parse_badges(raw: str | None) -> dict[str, str]:
    """Split a ``badges`` tag value (``name/version,...``) into a dict."""
    badges: dict[str, str] = {}
    for item in (raw or "").split(","):
        if not item:
            continue
        name, _, version = item.partition("/")
        badges[name] = version
    return badges


class Channel:
    """A chat room, keyed by its protocol name (``#`` sigil preserved).

    ``room_state`` holds the channel-scoped tags seen when the channel was
    created, merged with any later ROOMSTATE for the same name.
    """

    def __init__(
        self, session: Session | None, name: str, tags: Mapping[str, str] | None = None
    ) -> None:
        self._session = session
        self.name = name
        self.room_state: dict[str, str] = dict(tags or {})

    def update(self, tags: Mapping[str, str]) -> None:
        self.room_state.update(tags)

    @property
    def login(self) -> str:
        return self.name.lstrip("#")

    def say(self, text: str) -> None:
        self._require_session().say(self, text)

    def part(self) -> None:
        self._require_session().part(self.name)

    def _require_session(self) -> Session:
        if self._session is None:
            raise RuntimeError(f"Channel {self.name} is not bound to a session")
        return self._session

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<Channel {self.name}>"


class User:
    """Another user as observed in one channel.

    Not a global identity: the same person in two channels is two instances.
    """

    def __init__(
        self, login: str, tags: Mapping[str, str] | None, channel: Channel | None
    ) -> None:
        self.login = login
        self.tags: dict[str, str] = dict(tags or {})
        self.channel = channel

    @property
    def display_name(self) -> str:
        return self.tags.get("display-name") or self.login

    @property
    def color(self) -> str | None:
        return self.tags.get("color") or None

    @property
    def badges(self) -> dict[str, str]:
        return parse_badges(self.tags.get("badges"))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.login}>"


class UserState:
    """The authenticated user's status within one channel."""

    def __init__(self, tags: Mapping[str, str] | None, channel: Channel | None) -> None:
        self.tags: dict[str, str] = dict(tags or {})
        self.channel = channel

    def update(self, tags: Mapping[str, str]) -> None:
        """Merge ``tags`` in place; keys absent from ``tags`` are kept."""
        self.tags.update(tags)

    @property
    def badges(self) -> dict[str, str]:
        return parse_badges(self.tags.get("badges"))

    @property
    def is_moderator(self) -> bool:
        return self.tags.get("mod") == "1" or "moderator" in self.badges

    @property
    def is_subscriber(self) -> bool:
        return self.tags.get("subscriber") == "1" or "subscriber" in self.badges

    def __repr__(self) -> str:
        return f"<UserState {self.channel}>"


class ClientUser(User):
    """The authenticated identity of the session.

    ``states`` is a read-only view; only the owning session mutates it.
    """

    def __init__(
        self, session: Session | None, login: str | None, tags: Mapping[str, str] | None
    ) -> None:
        super().__init__(login or "", tags, None)
        self._session = session
        self._states: dict[str, UserState] = {}

    @property
    def states(self) -> Mapping[str, UserState]:
        return MappingProxyType(self._states)

    def _set_state(self, channel_name: str, state: UserState) -> None:
        self._states[channel_name] = state

    def _remove_state(self, channel_name: str) -> UserState | None:
        return self._states.pop(channel_name, None)
