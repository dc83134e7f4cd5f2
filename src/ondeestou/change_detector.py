"""Detect which tracked address fields changed between two snapshots."""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

TRACKED_FIELDS = ("municipality", "neighborhood", "street")


@dataclass(frozen=True)
class ChangeRecord:
    field_name: str
    old_value: Any
    new_value: Any


def _standardized(snapshot: Any) -> Any:
    # Accept either an AddressSnapshot or a bare StandardAddress
    return getattr(snapshot, "standardized", snapshot)


def diff(
    previous: Optional[Any],
    current: Optional[Any],
    tracked_fields: Iterable[str] = TRACKED_FIELDS,
) -> List[ChangeRecord]:
    """
    List the tracked fields whose values differ between two snapshots.

    Values are compared by equality. Without a previous (or current)
    snapshot there is nothing to compare and the result is empty.
    """
    if previous is None or current is None:
        return []
    old = _standardized(previous)
    new = _standardized(current)
    if old is None or new is None:
        return []

    changes = []
    for field_name in tracked_fields:
        old_value = getattr(old, field_name, None)
        new_value = getattr(new, field_name, None)
        if old_value != new_value:
            changes.append(ChangeRecord(field_name, old_value, new_value))
    return changes
