from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from core.alert_machine import AlertStateMachine
from database.config_store import ConfigStore

TOPICS = {"temperature": "aiot/namuen/temp", "humidity": "aiot/namuen/hum"}


class FakeHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Collects deferred callbacks; tests fire them explicitly."""

    def __init__(self):
        self.handles = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(delay, lambda: callback(*args))
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def run_pending(self):
        due, self.handles = self.pending, []
        for handle in due:
            handle.callback()


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingSink:
    def __init__(self):
        self.sent = []

    def send(self, destination, notification):
        self.sent.append((destination, notification))

    def kinds(self):
        return [n.kind for _, n in self.sent]


@pytest.fixture
def store(tmp_path):
    return ConfigStore(str(tmp_path / "config.json"), min_threshold=-40, max_threshold=125)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def machine(store, sink, scheduler, clock):
    return AlertStateMachine(store, sink=sink, scheduler=scheduler, clock=clock, topics=TOPICS)
