"""Error taxonomy.

Validation, accuracy and network errors are carried inside events instead
of being raised across public boundaries, so every error exposes a ``kind``
and a human readable ``message`` a presentation layer can render as is.
"""

from typing import Any, Optional


class OndeEstouError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __repr__(self):
        return f"{self.kind}({self.message!r})"


class ValidationError(OndeEstouError):
    """Malformed or missing position fields."""


class AccuracyError(OndeEstouError):
    """Position accuracy in a bucket that is not acceptable (non-fatal)."""

    def __init__(self, message: str, accuracy: Optional[float] = None, quality: Optional[str] = None):
        super().__init__(message)
        self.accuracy = accuracy
        self.quality = quality


class NetworkError(OndeEstouError):
    """Reverse geocoding request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CallbackError(OndeEstouError):
    """A subscriber or callback raised while being notified."""

    def __init__(self, message: str, callback: Any = None, original: Optional[BaseException] = None):
        super().__init__(message)
        self.callback = callback
        self.original = original
