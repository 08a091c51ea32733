from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import DEFAULT_TMI_HOST, DEFAULT_TMI_PORT


class Identity(BaseModel):
    """Login identity of the client.

    Attributes:
        name: Login name. May be replaced by the name the server reports in
            its welcome message.
        auth: OAuth token, with or without the ``oauth:`` prefix. ``None`` for
            identities learned from the server.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    auth: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: Any) -> Any:
        if isinstance(v, str):
            stripped = v.strip().lower()
            return stripped or None
        return v

    @property
    def password(self) -> str | None:
        """The PASS argument for this identity."""
        if not self.auth:
            return None
        return self.auth if self.auth.startswith("oauth:") else f"oauth:{self.auth}"

    def with_name(self, name: str) -> Identity:
        return self.model_copy(update={"name": name.lower()})


class ConnectionOptions(BaseModel):
    """Overrides for the server endpoint; unset fields take the defaults."""

    model_config = ConfigDict(frozen=True)

    host: str | None = None
    port: int | None = Field(default=None, ge=1, le=65535)
    secure: bool = True


class ClientOptions(BaseModel):
    """Read-only construction options of a :class:`tmichat.Client`.

    ``identity`` absent means an anonymous session whose name is populated
    from the server's welcome message.
    """

    model_config = ConfigDict(frozen=True)

    identity: Identity | None = None
    connection: ConnectionOptions = Field(default_factory=ConnectionOptions)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ClientOptions:
        """Create ClientOptions from a plain dictionary.

        Args:
            data: Mapping with optional ``identity`` and ``connection`` keys.

        Returns:
            ClientOptions instance.
        """
        return cls.model_validate(dict(data or {}))


class Connection(BaseModel):
    """Resolved endpoint of the session. Immutable after construction."""

    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_TMI_HOST
    port: int = DEFAULT_TMI_PORT
    secure: bool = True

    @classmethod
    def from_options(cls, options: ConnectionOptions) -> Connection:
        return cls(
            host=DEFAULT_TMI_HOST if options.host is None else options.host,
            port=DEFAULT_TMI_PORT if options.port is None else options.port,
            secure=options.secure,
        )
