import pytest

from shared.smoothing import SmoothingWindow, WindowRegistry


def test_first_push_returns_reading_unchanged():
    window = SmoothingWindow(capacity=5)
    assert window.push((12, 34, 56)) == (12, 34, 56)


def test_running_average_example():
    window = SmoothingWindow(capacity=5)
    assert window.push((0, 0, 0)) == (0, 0, 0)
    assert window.push((100, 100, 100)) == (50, 50, 50)


def test_oldest_reading_is_evicted_when_full():
    window = SmoothingWindow(capacity=3)
    for value in (0, 10, 20):
        window.push((value, value, value))

    assert window.push((30, 30, 30)) == (20, 20, 20)
    assert len(window) == 3
    assert window.contents() == ((10, 10, 10), (20, 20, 20), (30, 30, 30))


def test_average_rounds_half_away_from_zero():
    window = SmoothingWindow(capacity=2)
    window.push((0, 0, 0))
    assert window.push((1, 3, 5)) == (1, 2, 3)


def test_reset_empties_the_buffer():
    window = SmoothingWindow(capacity=5)
    window.push((200, 200, 200))
    window.reset()

    assert len(window) == 0
    assert window.push((10, 20, 30)) == (10, 20, 30)


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        SmoothingWindow(capacity=0)


def test_registry_keeps_sessions_apart():
    registry = WindowRegistry(capacity=5)
    registry.get("kitchen").push((100, 0, 0))

    assert registry.get("hallway").push((0, 0, 100)) == (0, 0, 100)
    assert registry.get("kitchen").push((0, 0, 0)) == (50, 0, 0)
    assert len(registry) == 2


def test_registry_reset_and_discard():
    registry = WindowRegistry(capacity=3)
    registry.get("a").push((1, 1, 1))

    registry.reset("a")
    assert len(registry.get("a")) == 0

    registry.discard("a")
    assert "a" not in registry
    registry.reset("missing")


def test_registry_drops_least_recently_used_session():
    registry = WindowRegistry(capacity=3, max_sessions=2)
    registry.get("a").push((1, 1, 1))
    registry.get("b")
    registry.get("a")
    registry.get("c")

    assert len(registry) == 2
    assert "b" not in registry
    assert registry.get("a").contents() == ((1, 1, 1),)


def test_registry_max_sessions_must_be_positive():
    with pytest.raises(ValueError):
        WindowRegistry(max_sessions=0)
