from .model import ClientOptions, Connection, ConnectionOptions, Identity  # noqa: F401

__all__ = ["ClientOptions", "Connection", "ConnectionOptions", "Identity"]
