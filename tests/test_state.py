import math
import threading

import pytest

from eyefollow.tracking.state import SharedGazeState


def test_fresh_state_reads_absent() -> None:
    assert SharedGazeState().read() is None


def test_read_returns_last_publish_exactly() -> None:
    state = SharedGazeState()

    state.publish((0.1, -0.7))
    state.publish((0.25, -0.5))

    assert state.read() == (0.25, -0.5)
    assert state.publish_count == 2


def test_publish_none_clears_target() -> None:
    state = SharedGazeState()
    state.publish((0.3, 0.3))

    state.clear()

    assert state.read() is None


@pytest.mark.parametrize("value", [(1.5, 0.0), (0.0, -1.01), (math.nan, 0.0), (math.inf, 0.0)])
def test_out_of_range_publish_is_rejected(value) -> None:
    state = SharedGazeState()
    state.publish((0.5, 0.5))

    with pytest.raises(ValueError):
        state.publish(value)

    assert state.read() == (0.5, 0.5)


def test_busy_slot_reads_as_absent() -> None:
    state = SharedGazeState(read_timeout=0.01)
    state.publish((0.2, 0.2))

    state._lock.acquire()
    try:
        assert state.read() is None
    finally:
        state._lock.release()

    assert state.read() == (0.2, 0.2)


def test_inconsistent_slot_reads_as_absent() -> None:
    state = SharedGazeState()
    state._value = (3.0, "up")

    assert state.read() is None


def test_concurrent_reads_only_see_published_values() -> None:
    state = SharedGazeState()
    published = {(i / 1000.0, -i / 1000.0) for i in range(1000)}
    seen = []

    def writer():
        for i in range(1000):
            state.publish((i / 1000.0, -i / 1000.0))

    thread = threading.Thread(target=writer)
    thread.start()
    while thread.is_alive():
        seen.append(state.read())
    thread.join()

    assert all(value is None or value in published for value in seen)
    assert state.read() == (0.999, -0.999)
