# tests/conftest.py

from __future__ import annotations

import pytest

from focustimer.core.broadcast import EventBroadcaster
from focustimer.core.gateway import CommandGateway
from focustimer.core.timer import TimerController

from .fakes import FakeNotifier, FakeSurface, FakeTicker


@pytest.fixture()
def ticker() -> FakeTicker:
    return FakeTicker()


@pytest.fixture()
def broadcaster() -> EventBroadcaster:
    return EventBroadcaster(queue_size=64)


@pytest.fixture()
def controller(broadcaster: EventBroadcaster, ticker: FakeTicker) -> TimerController:
    """Controller wired to a manually fired clock."""
    return TimerController(broadcaster=broadcaster, ticker=ticker)


@pytest.fixture()
def surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def gateway(
    controller: TimerController, surface: FakeSurface, notifier: FakeNotifier
) -> CommandGateway:
    return CommandGateway(controller, surface=surface, notifier=notifier)
