"""Pytest configuration and shared fixtures."""
import threading

import pytest

from eventadmin.events import EventAdmin, EventAdminConfig


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")


class Recorder:
    """Subscriber that records the events it receives."""

    def __init__(self, name="recorder", log=None):
        self.name = name
        self.events = []
        self.log = log if log is not None else []
        self._lock = threading.Lock()

    def handle_event(self, event):
        with self._lock:
            self.events.append(event)
            self.log.append(self.name)


@pytest.fixture
def admin():
    event_admin = EventAdmin(EventAdminConfig(max_workers=2))
    event_admin.start()
    yield event_admin
    event_admin.stop()


@pytest.fixture
def recorder_factory():
    log = []

    def make(name):
        return Recorder(name, log)

    make.log = log
    return make
