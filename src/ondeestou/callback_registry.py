"""Per-field change callbacks."""

import logging
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)


class CallbackRegistry:
    """
    Maps field names to the callbacks interested in that field.

    Callbacks are called as ``callback(new_value, old_value)``. A callback
    that raises is logged and skipped; the remaining callbacks still run
    and nothing propagates to the caller.
    """

    def __init__(self):
        self.callbacks: Dict[str, Tuple[Callable, ...]] = {}

    def register(self, field_name: str, callback: Callable):
        """Append a callback for field_name."""
        if not callable(callback):
            raise TypeError(
                f'Callback for field "{field_name}" must be callable, got: {type(callback).__name__}'
            )
        self.callbacks[field_name] = self.callbacks.get(field_name, ()) + (callback,)

    def unregister(self, field_name: str, callback: Callable) -> bool:
        """Remove a callback by identity. Returns True if it was registered."""
        current = self.callbacks.get(field_name, ())
        remaining = tuple(cb for cb in current if cb is not callback)
        if len(remaining) == len(current):
            return False
        if remaining:
            self.callbacks[field_name] = remaining
        else:
            del self.callbacks[field_name]
        return True

    def invoke(self, field_name: str, new_value: Any, old_value: Any) -> int:
        """
        Call every callback registered for field_name.

        Returns:
            Number of callbacks that completed without raising
        """
        succeeded = 0
        for callback in self.callbacks.get(field_name, ()):
            try:
                callback(new_value, old_value)
                succeeded += 1
            except Exception as e:
                logger.error(f'Error executing callback for field "{field_name}": {e}', exc_info=True)
        return succeeded

    def get(self, field_name: str) -> List[Callable]:
        return list(self.callbacks.get(field_name, ()))

    def has(self, field_name: str) -> bool:
        return field_name in self.callbacks

    def registered_fields(self) -> List[str]:
        return list(self.callbacks.keys())

    def clear(self):
        self.callbacks.clear()

    def __len__(self) -> int:
        return sum(len(cbs) for cbs in self.callbacks.values())
