"""Tests for acknowledgment tracking."""
import threading
from unittest.mock import Mock

from socketio_client.ack_registry import AckRegistry, shared_registry


def test_ids_are_nonzero_and_increasing():
    """Test id allocation."""
    registry = AckRegistry()
    assert [registry.next_id() for _ in range(3)] == [1, 2, 3]


def test_resolve_runs_callback_once():
    """Test that a callback runs exactly once."""
    registry = AckRegistry()
    callback = Mock()
    ack_id = registry.next_id()
    registry.register(ack_id, callback)

    assert registry.resolve(str(ack_id))
    assert not registry.resolve(str(ack_id))
    callback.assert_called_once_with()
    assert ack_id not in registry


def test_resolve_with_ack_arguments():
    """Test ack data carrying `id+args` still resolves by id."""
    registry = AckRegistry()
    callback = Mock()
    registry.register(7, callback)
    assert registry.resolve('7+["ok"]')
    callback.assert_called_once()


def test_unknown_and_unparseable_ids_ignored():
    """Test acks that match nothing."""
    registry = AckRegistry()
    callback = Mock()
    registry.register(1, callback)

    assert not registry.resolve("2")
    assert not registry.resolve("")
    assert not registry.resolve("abc")
    callback.assert_not_called()
    assert len(registry) == 1


def test_discard():
    """Test forgetting an id that was never sent."""
    registry = AckRegistry()
    registry.register(3, Mock())
    registry.discard(3)
    registry.discard(3)
    assert len(registry) == 0


def test_concurrent_allocation_unique():
    """Test that ids stay unique across threads."""
    registry = AckRegistry()
    ids = []
    lock = threading.Lock()

    def allocate():
        local = [registry.next_id() for _ in range(200)]
        with lock:
            ids.extend(local)

    threads = [threading.Thread(target=allocate) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(set(ids)) == 1600
    assert 0 not in ids


def test_shared_registry_is_process_wide():
    """Test the module-level registry."""
    first = shared_registry.next_id()
    assert shared_registry.next_id() == first + 1
