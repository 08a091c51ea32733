"""IRC message parsing and formatting (tags + prefix + command + params)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ..errors import ParsingError

_TAG_UNESCAPES = {":": ";", "s": " ", "\\": "\\", "r": "\r", "n": "\n"}
_TAG_ESCAPES = {";": "\\:", " ": "\\s", "\\": "\\\\", "\r": "\\r", "\n": "\\n"}


@dataclass(frozen=True)
class Prefix:
    name: str
    user: str | None = None
    host: str | None = None

    @classmethod
    def parse(cls, raw: str) -> Prefix:
        name, _, host = raw.partition("@")
        name, _, user = name.partition("!")
        return cls(name=name, user=user or None, host=host or None)

    def __str__(self) -> str:
        text = self.name
        if self.user:
            text += f"!{self.user}"
        if self.host:
            text += f"@{self.host}"
        return text


@dataclass
class IRCMessage:
    raw: str
    command: str
    params: list[str] = field(default_factory=list)
    prefix: Prefix | None = None
    tags: dict[str, str] = field(default_factory=dict)


def parse_irc_message(raw_line: str) -> IRCMessage:
    """Decode one protocol line (without its terminator).

    Raises:
        ParsingError: If the line has no command token or a dangling tag or
            prefix block.
    """
    tags: dict[str, str] = {}
    prefix: Prefix | None = None
    line = raw_line.rstrip("\r\n")

    if line.startswith("@"):
        tags_part, sep, line = line.partition(" ")
        if not sep or len(tags_part) < 2:
            raise ParsingError("Malformed tag block", data={"line": raw_line})
        tags = _parse_tags(tags_part[1:])
        line = line.lstrip(" ")

    if line.startswith(":"):
        prefix_part, sep, line = line.partition(" ")
        if not sep or len(prefix_part) < 2:
            raise ParsingError("Prefix without command", data={"line": raw_line})
        prefix = Prefix.parse(prefix_part[1:])
        line = line.lstrip(" ")

    trailing: str | None = None
    if line.startswith(":"):
        raise ParsingError("Missing command", data={"line": raw_line})
    if " :" in line:
        line, trailing = line.split(" :", 1)

    parts = line.split()
    if not parts:
        raise ParsingError("Missing command", data={"line": raw_line})
    command = parts[0].upper()
    params = parts[1:]
    if trailing is not None:
        params.append(trailing)

    return IRCMessage(
        raw=raw_line, command=command, params=params, prefix=prefix, tags=tags
    )


def _parse_tags(raw_tags: str) -> dict[str, str]:
    tags: dict[str, str] = {}
    for tag in raw_tags.split(";"):
        if not tag:
            continue
        if "=" in tag:
            k, v = tag.split("=", 1)
        else:
            k, v = tag, ""
        tags[k] = _unescape_tag_value(v)
    return tags


def _unescape_tag_value(value: str) -> str:
    if "\\" not in value:
        return value
    out: list[str] = []
    chars = iter(value)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, "")
        # Unknown escapes drop the backslash; a trailing one is dropped too
        out.append(_TAG_UNESCAPES.get(nxt, nxt))
    return "".join(out)


def _escape_tag_value(value: str) -> str:
    return "".join(_TAG_ESCAPES.get(ch, ch) for ch in value)


def format_irc_message(
    command: str,
    params: Sequence[str] | None = None,
    *,
    middle: Sequence[str] | None = None,
    trailing: str | None = None,
    tags: Mapping[str, str] | None = None,
) -> str:
    """Encode a command into a protocol line (no terminator appended).

    Either pass ``params`` (the last one is ``:``-marked only when needed) or
    ``middle`` plus an optional ``trailing`` that is always ``:``-marked.
    """
    parts: list[str] = []
    if tags:
        rendered = ";".join(
            f"{k}={_escape_tag_value(v)}" if v else k for k, v in tags.items()
        )
        parts.append(f"@{rendered}")
    parts.append(command)

    if params is not None:
        args = [str(p) for p in params]
        if args:
            *head, last = args
            parts.extend(_check_middle(head))
            if not last or " " in last or last.startswith(":"):
                last = f":{last}"
            parts.append(last)
    else:
        parts.extend(_check_middle([str(m) for m in middle or ()]))
        if trailing is not None:
            parts.append(f":{trailing}")
    return " ".join(parts)


def _check_middle(params: list[str]) -> list[str]:
    for param in params:
        if not param or " " in param or param.startswith(":"):
            raise ParsingError("Invalid middle parameter", data={"param": param})
    return params
