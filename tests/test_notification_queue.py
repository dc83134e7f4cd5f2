"""Tests for the priority notification queue."""

import pytest

from ondeestou.notification_queue import NotificationItem, PriorityNotificationQueue


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def queue():
    return PriorityNotificationQueue(max_size=10, expiration_seconds=None)


def test_higher_priority_dequeues_first(queue):
    queue.enqueue("low", 1)
    queue.enqueue("high", 3)

    item = queue.dequeue()

    assert item.text == "high"
    assert item.priority == 3


def test_equal_priority_is_fifo(queue):
    queue.enqueue("first", 2)
    queue.enqueue("second", 2)
    queue.enqueue("urgent", 5)
    queue.enqueue("third", 2)

    assert [queue.dequeue().text for _ in range(4)] == ["urgent", "first", "second", "third"]


def test_negative_priorities(queue):
    queue.enqueue("background", -1)
    queue.enqueue("normal")
    assert queue.dequeue().text == "normal"


def test_dequeue_empty_returns_none(queue):
    assert queue.dequeue() is None
    assert queue.peek() is None


def test_peek_does_not_remove(queue):
    queue.enqueue("a", 1)
    assert queue.peek().text == "a"
    assert queue.size() == 1
    assert len(queue) == 1


def test_clear_publishes_once(queue):
    calls = []
    queue.enqueue("a")
    queue.enqueue("b")
    queue.subscribe_function(calls.append)

    queue.clear()

    assert queue.is_empty()
    assert calls == [queue]


def test_every_mutation_notifies_both_kinds(queue, recorder):
    """Test enqueue and dequeue publish to objects and functions."""
    calls = []
    queue.subscribe(recorder)
    queue.subscribe_function(calls.append)

    queue.enqueue("a")
    queue.dequeue()
    queue.dequeue()  # empty: nothing removed

    assert recorder.events == [queue, queue]
    assert calls == [queue, queue]


def test_subscribe_requires_update(queue):
    """Test the queue refuses subscribers without update()."""
    with pytest.raises(TypeError):
        queue.subscribe(object())


def test_subscribe_none_is_ignored(queue):
    queue.subscribe(None)
    assert queue.observers == ()


def test_subscribe_function_requires_callable(queue):
    with pytest.raises(TypeError):
        queue.subscribe_function("not callable")


def test_failing_function_observer_does_not_break_enqueue(queue):
    calls = []
    queue.subscribe_function(lambda q: 1 / 0)
    queue.subscribe_function(calls.append)
    queue.enqueue("a")
    assert calls == [queue]
    assert queue.size() == 1


@pytest.mark.parametrize("text,priority,error", [
    (123, 0, TypeError),
    ("", 0, ValueError),
    ("   ", 0, ValueError),
    ("a", 1.5, TypeError),
    ("a", "1", TypeError),
    ("a", True, TypeError),
])
def test_enqueue_validation(queue, text, priority, error):
    with pytest.raises(error):
        queue.enqueue(text, priority)


def test_max_size_drops_lowest_priority():
    queue = PriorityNotificationQueue(max_size=2, expiration_seconds=None)
    queue.enqueue("keep", 2)
    queue.enqueue("drop", 0)
    queue.enqueue("also keep", 1)

    assert [item.text for item in queue.items()] == ["keep", "also keep"]


def test_expired_items_are_dropped():
    clock = FakeClock()
    queue = PriorityNotificationQueue(expiration_seconds=30, clock=clock)
    queue.enqueue("old", 5)
    clock.now = 20
    queue.enqueue("new", 1)

    clock.now = 31
    assert queue.dequeue().text == "new"


def test_item_ordering():
    a = NotificationItem("a", 1, sequence=0)
    b = NotificationItem("b", 3, sequence=1)
    c = NotificationItem("c", 3, sequence=2)
    assert sorted([a, c, b]) == [b, c, a]
    assert str(b) == 'NotificationItem: "b" (priority: 3)'
