"""Priority queue of notifications waiting to be spoken."""

import time
import bisect
import logging
import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from .config import QUEUE_MAX_SIZE, QUEUE_EXPIRATION_SECONDS
from .observer import Subject

logger = logging.getLogger(__name__)


@dataclass(order=True, frozen=True)
class NotificationItem:
    """Text to announce. Ordered by priority (desc), then arrival (asc)."""
    sort_key: Tuple[int, int] = field(init=False, repr=False)
    text: str = field(compare=False)
    priority: int = field(compare=False, default=0)
    sequence: int = field(compare=False, default=0)
    enqueued_at: float = field(compare=False, default=0.0)

    def __post_init__(self):
        object.__setattr__(self, "sort_key", (-self.priority, self.sequence))

    def __str__(self):
        text = self.text if len(self.text) <= 50 else self.text[:50] + "..."
        return f'NotificationItem: "{text}" (priority: {self.priority})'


class PriorityNotificationQueue:
    """
    Notifications ordered by priority, FIFO among equal priorities.

    Every mutation notifies object subscribers (``update(queue)``) and
    function subscribers (``fn(queue)``). Unlike the generic Subject,
    subscribe() refuses objects without an update() method.

    Items older than ``expiration_seconds`` are dropped on access and the
    queue never holds more than ``max_size`` items (the lowest priority,
    newest items are dropped first).
    """

    def __init__(
        self,
        max_size: int = QUEUE_MAX_SIZE,
        expiration_seconds: Optional[float] = QUEUE_EXPIRATION_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        if not isinstance(max_size, int) or max_size < 1:
            raise ValueError(f"max_size must be a positive integer, got: {max_size!r}")
        self.max_size = max_size
        self.expiration_seconds = expiration_seconds
        self.clock = clock
        self.subject = Subject()
        self._items: List[NotificationItem] = []
        self._sequence = itertools.count()

    def subscribe(self, observer: Any):
        """
        Add an object subscriber.

        Raises:
            TypeError: if observer has no update() method
        """
        if observer is None:
            logger.warning("Attempted to subscribe a None observer")
            return
        if not callable(getattr(observer, "update", None)):
            raise TypeError("Observer must have an update() method")
        self.subject.subscribe(observer)

    def unsubscribe(self, observer: Any):
        self.subject.unsubscribe(observer)

    def subscribe_function(self, fn: Callable):
        """
        Add a function subscriber.

        Raises:
            TypeError: if fn is not callable
        """
        if fn is None:
            logger.warning("Attempted to subscribe a None observer function")
            return
        if not callable(fn):
            raise TypeError("Observer must be a function")
        self.subject.subscribe_function(fn)

    def unsubscribe_function(self, fn: Callable):
        self.subject.unsubscribe_function(fn)

    @property
    def observers(self):
        return self.subject.observers

    @property
    def function_observers(self):
        return self.subject.function_observers

    def _notify(self):
        self.subject.notify(self)
        self.subject.notify_functions(self)

    def enqueue(self, text: str, priority: int = 0) -> NotificationItem:
        """
        Add a notification.

        Raises:
            TypeError: text is not a string or priority is not an integer
            ValueError: text is empty or whitespace
        """
        if not isinstance(text, str):
            raise TypeError(f"Text must be a string, got: {type(text).__name__}")
        if not text.strip():
            raise ValueError("Text cannot be empty or only whitespace")
        if not isinstance(priority, int) or isinstance(priority, bool):
            raise TypeError(f"Priority must be an integer, got: {type(priority).__name__}")

        self.clean_expired()
        item = NotificationItem(text, priority, next(self._sequence), self.clock())
        bisect.insort(self._items, item)
        if len(self._items) > self.max_size:
            dropped = self._items[self.max_size:]
            del self._items[self.max_size:]
            logger.warning(f"Notification queue full, dropped {len(dropped)} item(s)")
        logger.debug(f"Enqueued {item}")
        self._notify()
        return item

    def dequeue(self) -> Optional[NotificationItem]:
        """Remove and return the next item, or None when the queue is empty."""
        self.clean_expired()
        if not self._items:
            return None
        item = self._items.pop(0)
        self._notify()
        return item

    def peek(self) -> Optional[NotificationItem]:
        """Next item to be dequeued, without removing it."""
        self.clean_expired()
        return self._items[0] if self._items else None

    def clear(self):
        self._items = []
        self._notify()

    def clean_expired(self) -> int:
        """Drop expired items. Returns the number removed."""
        if self.expiration_seconds is None or not self._items:
            return 0
        now = self.clock()
        kept = [item for item in self._items if now - item.enqueued_at <= self.expiration_seconds]
        removed = len(self._items) - len(kept)
        if removed:
            self._items = kept
            logger.debug(f"Removed {removed} expired notification(s)")
        return removed

    def size(self) -> int:
        self.clean_expired()
        return len(self._items)

    def __len__(self) -> int:
        return self.size()

    def is_empty(self) -> bool:
        return self.size() == 0

    def items(self) -> List[NotificationItem]:
        """Snapshot of queued items in dequeue order."""
        self.clean_expired()
        return list(self._items)

    def __str__(self):
        return f"PriorityNotificationQueue: size={self.size()}, max_size={self.max_size}"
