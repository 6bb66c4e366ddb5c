"""Derivation of the ``overdue`` status from the calendar."""
from __future__ import annotations

from datetime import date
from typing import Iterable, List

from ..models import MaintenanceOccurrence


def is_past_due(occurrence: MaintenanceOccurrence, as_of: date) -> bool:
    return occurrence.status == "pending" and occurrence.scheduled_date < as_of


def refresh_overdue(occurrences: Iterable[MaintenanceOccurrence], as_of: date) -> List[MaintenanceOccurrence]:
    """Mark pending occurrences scheduled strictly before ``as_of`` as overdue.

    Completed and already overdue occurrences are left alone. The occurrences
    are updated in place; the ones that changed are returned so the caller
    can persist them.
    """

    changed: List[MaintenanceOccurrence] = []
    for occurrence in occurrences:
        if is_past_due(occurrence, as_of):
            occurrence.status = "overdue"
            changed.append(occurrence)
    return changed
