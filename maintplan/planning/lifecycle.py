"""Completion lifecycle of a single maintenance occurrence.

``pending`` and ``overdue`` occurrences can be completed; completed ones can
be reverted to ``pending``. Reverting a past-due occurrence leaves it to the
status evaluator to flag it ``overdue`` again on the next read.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional

from ..models import MaintenanceOccurrence
from .errors import ValidationError
from .status import refresh_overdue
from .store import OccurrenceStore

logger = logging.getLogger(__name__)


class LifecycleController:
    def __init__(self, store: OccurrenceStore, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today

    def complete(
        self,
        occurrence_id: str,
        completed_by: Optional[str],
        completed_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> MaintenanceOccurrence:
        occurrence = self.store.get_by_id(occurrence_id)
        actor = (completed_by or "").strip()
        if not actor:
            raise ValidationError("completed_by is required")
        previous = occurrence.status
        occurrence.status = "completed"
        occurrence.completed_date = completed_date or self.today()
        occurrence.completed_by = actor
        if notes is not None:
            occurrence.notes = notes
        self.store.save(occurrence)
        logger.info(
            "Occurrence %s %s -> completed by %s on %s",
            occurrence.id, previous, actor, occurrence.completed_date.isoformat(),
        )
        return occurrence

    def uncomplete(self, occurrence_id: str) -> MaintenanceOccurrence:
        occurrence = self.store.get_by_id(occurrence_id)
        previous = occurrence.status
        occurrence.status = "pending"
        occurrence.completed_date = None
        occurrence.completed_by = None
        self.store.save(occurrence)
        logger.info("Occurrence %s %s -> pending", occurrence.id, previous)
        return occurrence

    def reschedule(self, occurrence_id: str, scheduled_date: date) -> MaintenanceOccurrence:
        """Move an occurrence to another day of its own planning year.

        An occurrence of the same equipment and frequency already sitting on
        the destination day is removed.
        """

        occurrence = self.store.get_by_id(occurrence_id)
        if scheduled_date.year != occurrence.year:
            raise ValidationError(
                f"Scheduled date {scheduled_date.isoformat()} is outside planning year {occurrence.year}"
            )
        with self.store.transaction():
            conflict = self.store.find_conflict(
                occurrence.equipment_id, occurrence.frequency, scheduled_date, exclude_id=occurrence.id
            )
            if conflict is not None:
                logger.warning(
                    "Rescheduling %s replaces occurrence %s on %s",
                    occurrence.id, conflict.id, scheduled_date.isoformat(),
                )
                self.store.delete(conflict)
            occurrence.scheduled_date = scheduled_date
            today = self.today()
            if occurrence.status == "overdue" and scheduled_date >= today:
                occurrence.status = "pending"
            refresh_overdue([occurrence], today)
            self.store.save(occurrence)
        return occurrence
