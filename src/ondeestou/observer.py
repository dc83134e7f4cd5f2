"""Publish/subscribe primitive."""

import logging
from typing import Any, Callable, List, Protocol, Tuple, runtime_checkable

from .errors import CallbackError

logger = logging.getLogger(__name__)


@runtime_checkable
class Subscriber(Protocol):
    """Anything that can receive events through ``update``."""

    def update(self, event: Any) -> None:
        ...


class Subject:
    """
    Keeps object subscribers and function subscribers and notifies them.

    Subscriber lists are tuples that get replaced on every subscribe or
    unsubscribe, so a subscriber that (un)subscribes from inside a
    notification never disturbs the loop already in progress.

    Every invocation is isolated: exceptions are logged, wrapped in a
    CallbackError and returned to the caller instead of being raised.
    """

    def __init__(self):
        self.observers: Tuple[Any, ...] = ()
        self.function_observers: Tuple[Callable, ...] = ()

    def subscribe(self, observer: Any):
        """Add an object subscriber (None is ignored)."""
        if observer is not None:
            self.observers = self.observers + (observer,)

    def unsubscribe(self, observer: Any):
        """Remove an object subscriber by identity."""
        self.observers = tuple(o for o in self.observers if o is not observer)

    def notify(self, *args, **kwargs) -> List[CallbackError]:
        """Call ``update(*args, **kwargs)`` on every object subscriber."""
        errors = []
        for observer in self.observers:
            update = getattr(observer, "update", None)
            if not callable(update):
                logger.warning(f"Observer {observer!r} has no update() method, skipping")
                continue
            try:
                update(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error notifying observer {observer!r}: {e}", exc_info=True)
                errors.append(CallbackError(str(e), callback=observer, original=e))
        return errors

    def subscribe_function(self, fn: Callable):
        """Add a function subscriber (None is ignored)."""
        if fn is not None:
            self.function_observers = self.function_observers + (fn,)

    def unsubscribe_function(self, fn: Callable):
        """Remove a function subscriber by identity."""
        self.function_observers = tuple(f for f in self.function_observers if f is not fn)

    def notify_functions(self, *args, **kwargs) -> List[CallbackError]:
        """Call every function subscriber with the given arguments."""
        errors = []
        for fn in self.function_observers:
            if not callable(fn):
                logger.warning(f"Function observer {fn!r} is not callable, skipping")
                continue
            try:
                fn(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in function observer {fn!r}: {e}", exc_info=True)
                errors.append(CallbackError(str(e), callback=fn, original=e))
        return errors

    @property
    def observer_count(self) -> int:
        return len(self.observers)

    @property
    def function_observer_count(self) -> int:
        return len(self.function_observers)

    def clear(self):
        """Drop every subscriber."""
        self.observers = ()
        self.function_observers = ()


class Publisher:
    """Publisher role: owns a Subject and broadcasts events to it."""

    def __init__(self):
        self.subject = Subject()

    def subscribe(self, observer: Any):
        self.subject.subscribe(observer)

    def unsubscribe(self, observer: Any):
        self.subject.unsubscribe(observer)

    def subscribe_function(self, fn: Callable):
        self.subject.subscribe_function(fn)

    def unsubscribe_function(self, fn: Callable):
        self.subject.unsubscribe_function(fn)

    @property
    def observers(self) -> Tuple[Any, ...]:
        return self.subject.observers

    def publish(self, event: Any) -> List[CallbackError]:
        """Send an event to object subscribers, then to function subscribers."""
        errors = self.subject.notify(event)
        errors.extend(self.subject.notify_functions(event))
        return errors
