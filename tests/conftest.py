from __future__ import annotations

import pytest

from tmichat.config.model import Identity
from tmichat.irc.events import EventEmitter
from tmichat.irc.session import Session
from tmichat.logging_config import error_aggregator

from .fakes import EventRecorder, RecordingTransport


@pytest.fixture(autouse=True)
def _reset_error_aggregator():
    yield
    error_aggregator.reset()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def events() -> EventEmitter:
    return EventEmitter()


@pytest.fixture
def recorder(events: EventEmitter) -> EventRecorder:
    return EventRecorder(events)


@pytest.fixture
def session(transport: RecordingTransport, events: EventEmitter) -> Session:
    return Session(transport, events, Identity(name="tester", auth="abc"))


@pytest.fixture
def anonymous_session(transport: RecordingTransport, events: EventEmitter) -> Session:
    return Session(transport, events, None)


@pytest.fixture(autouse=True)
def _plain_log_format(monkeypatch):
    """Tests assert on the concise log format unless they opt into DEBUG."""
    monkeypatch.delenv("DEBUG", raising=False)
