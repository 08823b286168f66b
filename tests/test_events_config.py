import pytest

from eventadmin.events import EventAdminConfig, Order


def test_defaults():
    config = EventAdminConfig()
    assert config.max_workers is None
    assert config.max_pending is None
    assert config.order is Order.ASCENDING
    assert not config.bounded


@pytest.mark.parametrize("field", ["max_workers", "max_pending"])
def test_rejects_non_positive_limits(field):
    with pytest.raises(ValueError):
        EventAdminConfig(**{field: 0})


def test_order_from_string():
    assert EventAdminConfig(order="descending").order is Order.DESCENDING
    with pytest.raises(ValueError):
        EventAdminConfig(order="sideways")


def test_from_env():
    config = EventAdminConfig.from_env(
        {
            "EVENTADMIN_MAX_WORKERS": "4",
            "EVENTADMIN_MAX_PENDING": "128",
            "EVENTADMIN_ORDER": "DESCENDING",
            "EVENTADMIN_THREAD_PREFIX": "bus",
            "EVENTADMIN_SHUTDOWN_WAIT": "1",
        }
    )
    assert config.max_workers == 4
    assert config.max_pending == 128
    assert config.bounded
    assert config.order is Order.DESCENDING
    assert config.thread_name_prefix == "bus"
    assert config.shutdown_wait is True


def test_from_process_env(monkeypatch):
    monkeypatch.setenv("EVENTADMIN_MAX_WORKERS", "3")
    monkeypatch.delenv("EVENTADMIN_MAX_PENDING", raising=False)
    config = EventAdminConfig.from_env()
    assert config.max_workers == 3
    assert config.max_pending is None


def test_from_env_rejects_garbage():
    with pytest.raises(ValueError, match="EVENTADMIN_MAX_WORKERS"):
        EventAdminConfig.from_env({"EVENTADMIN_MAX_WORKERS": "many"})
