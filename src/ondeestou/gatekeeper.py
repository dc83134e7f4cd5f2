"""Position gatekeeper: decides which raw positions are worth acting on."""

import math
import logging
from typing import Any, Iterable, Optional, Union

from .config import (
    MINIMUM_DISTANCE_CHANGE, TRACKING_INTERVAL, LIGHT_UPDATE_INTERVAL,
    DEVICE_PROFILE, not_accepted_accuracy,
)
from .errors import AccuracyError, ValidationError
from .events import FullUpdate, LightUpdate, NotUpdated, Rejected
from .observer import Publisher
from .position import Position

logger = logging.getLogger(__name__)

REASON_TOO_RECENT = "update too recent"


class PositionGatekeeper(Publisher):
    """
    Filters raw position updates before anything expensive happens.

    Policy ("20 m OR 50 s"):
        - FullUpdate: first position, or moved at least ``distance_threshold``
          metres from the last accepted position, or ``long_interval``
          seconds passed since it was accepted. The position becomes the new
          reference and the acceptance time is reset.
        - LightUpdate: anything else, provided ``light_interval`` seconds
          passed since the last published update. The reference position
          and acceptance time are kept, so slow drift still adds up to a
          FullUpdate.
        - NotUpdated: updates arriving faster than ``light_interval``.

    Positions whose accuracy falls in a not-accepted bucket are still
    published, with an AccuracyError attached to the event.

    Elapsed time is measured with the positions' own timestamps.

    Attributes:
        last_position: Last position published as a FullUpdate
        last_accepted_at: Timestamp of last_position
        current_position: Last position published (full or light)
        last_notified_at: Timestamp of current_position

    Note:
        One instance per process, created by the composition root and
        passed to its collaborators.
    """

    def __init__(
        self,
        distance_threshold: float = MINIMUM_DISTANCE_CHANGE,
        long_interval: float = TRACKING_INTERVAL,
        light_interval: float = LIGHT_UPDATE_INTERVAL,
        not_accepted: Optional[Iterable[str]] = None,
        profile: str = DEVICE_PROFILE,
    ):
        super().__init__()
        self.distance_threshold = distance_threshold
        self.long_interval = long_interval
        self.light_interval = light_interval
        if not_accepted is None:
            not_accepted = not_accepted_accuracy(profile)
        self.not_accepted = frozenset(not_accepted)
        self.last_position: Optional[Position] = None
        self.last_accepted_at: Optional[float] = None
        self.current_position: Optional[Position] = None
        self.last_notified_at: Optional[float] = None

    @property
    def latitude(self) -> Optional[float]:
        return self.current_position.latitude if self.current_position else None

    @property
    def longitude(self) -> Optional[float]:
        return self.current_position.longitude if self.current_position else None

    @property
    def accuracy(self) -> Optional[float]:
        return self.current_position.accuracy if self.current_position else None

    @property
    def timestamp(self) -> Optional[float]:
        return self.current_position.timestamp if self.current_position else None

    def submit(self, raw_position: Any) -> Union[FullUpdate, LightUpdate, NotUpdated, Rejected]:
        """
        Evaluate a raw position and publish the resulting event.

        Args:
            raw_position: Mapping/object with latitude, longitude, accuracy,
                altitude, heading, speed and timestamp (or a Position)

        Returns:
            The published event, or Rejected (not published) when the input
            is malformed. Never raises for bad input; state is left
            unchanged on rejection.
        """
        try:
            position = Position.from_raw(raw_position)
        except ValidationError as e:
            logger.warning(f"Invalid position data: {e.message}")
            return Rejected(e)

        if position.timestamp is None:
            error = ValidationError("Position has no timestamp")
            logger.warning(f"Invalid position data: {error.message}")
            return Rejected(error)

        if self.last_notified_at is not None and position.timestamp < self.last_notified_at:
            error = ValidationError(
                f"Position older than last update: {position.timestamp} < {self.last_notified_at}"
            )
            logger.warning(error.message)
            return Rejected(error)

        error = self._check_accuracy(position)

        if self.last_position is None:
            distance = 0.0
            elapsed = math.inf
        else:
            distance = self.last_position.distance_to(position)
            elapsed = position.timestamp - self.last_accepted_at

        if distance >= self.distance_threshold or elapsed >= self.long_interval:
            logger.debug(f"Full update: moved {distance:.1f} m, {elapsed:.1f} s since last accepted")
            self.last_position = position
            self.last_accepted_at = position.timestamp
            event = FullUpdate(self, position, error)
        else:
            since_notified = position.timestamp - self.last_notified_at
            if since_notified < self.light_interval:
                logger.debug(
                    f"Position not updated: {since_notified:.1f} s since last update "
                    f"(minimum {self.light_interval} s), moved {distance:.1f} m"
                )
                event = NotUpdated(self, REASON_TOO_RECENT, position)
                self.publish(event)
                return event
            logger.debug(f"Light update: moved {distance:.1f} m, {elapsed:.1f} s since last accepted")
            event = LightUpdate(self, position, error)

        self.current_position = position
        self.last_notified_at = position.timestamp
        self.publish(event)
        return event

    def _check_accuracy(self, position: Position) -> Optional[AccuracyError]:
        quality = position.accuracy_quality
        if quality in self.not_accepted:
            logger.warning(f"Accuracy not good enough: {position.accuracy} m ({quality})")
            return AccuracyError(
                f"Accuracy is not good enough: {position.accuracy} m ({quality})",
                accuracy=position.accuracy,
                quality=quality,
            )
        return None

    def reset(self):
        """Forget every position seen so far."""
        self.last_position = None
        self.last_accepted_at = None
        self.current_position = None
        self.last_notified_at = None

    def __str__(self):
        if self.current_position is None:
            return "PositionGatekeeper: No position data"
        return f"PositionGatekeeper: {self.current_position}"
