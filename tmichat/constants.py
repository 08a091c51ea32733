"""
Configuration constants for the tmichat client.

Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Same contract as `_get_env_int` for floating point values.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Server endpoint used when the client options leave it unset
DEFAULT_TMI_HOST = os.getenv("TMI_HOST", "irc.chat.twitch.tv")
DEFAULT_TMI_PORT = _get_env_int("TMI_PORT", 6697)  # TLS port

# Transport tuning
CONNECT_TIMEOUT = _get_env_float("TMI_CONNECT_TIMEOUT", 15.0)
READ_CHUNK_SIZE = _get_env_int("TMI_READ_CHUNK_SIZE", 4096)
MAX_LINE_LENGTH = _get_env_int("TMI_MAX_LINE_LENGTH", 65536)

# Wire protocol
LINE_TERMINATOR = "\r\n"
CAPABILITY_REQUEST = "CAP REQ :twitch.tv/tags twitch.tv/commands"
PONG_REPLY = "PONG :tmi.twitch.tv"
SERVICE_PSEUDO_USER = "jtv"

# Anonymous (read-only) login
ANONYMOUS_NICK_PREFIX = "justinfan"
ANONYMOUS_PASSWORD = "SCHMOOPIIE"
