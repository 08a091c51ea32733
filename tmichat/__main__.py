"""
Command line entry point: connect, join channels and log chat events.

Configuration comes from the environment:
  TMI_USERNAME   login name (omit for an anonymous read-only session)
  TMI_TOKEN      OAuth token for TMI_USERNAME
  TMI_CHANNELS   comma separated channel names to join
"""

import asyncio
import os
import sys

from .client import Client
from .errors import log_error
from .irc.events import EventName
from .logging_config import setup_logging
from .logs.logger import logger


def _options_from_env() -> dict:
    username = os.environ.get("TMI_USERNAME")
    token = os.environ.get("TMI_TOKEN")
    options: dict = {}
    if username and token:
        options["identity"] = {"name": username, "auth": token}
    return options


def _channels_from_env() -> list[str]:
    raw = os.environ.get("TMI_CHANNELS", "")
    channels = []
    for name in raw.split(","):
        name = name.strip().lower()
        if name:
            channels.append(name if name.startswith("#") else f"#{name}")
    return channels


def build_client(options: dict, channels: list[str]) -> Client:
    client = Client(options)

    def on_connected(_event) -> None:
        for channel in channels:
            client.join(channel)

    def on_message(event) -> None:
        message = event.message
        logger.log_event(
            "chat",
            "message",
            user=client.session.username,
            channel=message.channel.name,
            author=message.user.display_name,
            text=message.text,
        )

    def on_join(event) -> None:
        if event.user is client.user:
            logger.log_event(
                "chat", "joined", user=client.session.username, channel=event.channel.name
            )

    def on_disconnected(event) -> None:
        logger.log_event("chat", "disconnected", had_error=event.had_error)

    client.on(EventName.CONNECTED, on_connected)
    client.on(EventName.MESSAGE, on_message)
    client.on(EventName.JOIN, on_join)
    client.on(EventName.DISCONNECTED, on_disconnected)
    return client


async def main() -> int:
    client = build_client(_options_from_env(), _channels_from_env())
    if not await client.connect():
        return 1
    try:
        await client.wait_closed()
    finally:
        await client.disconnect()
    return 0


def run() -> None:
    setup_logging()
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.log_event("app", "interrupted")
        sys.exit(0)
    except Exception as e:  # noqa: BLE001
        log_error("Top-level error", e)
        sys.exit(1)


if __name__ == "__main__":
    run()
