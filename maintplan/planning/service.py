from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Callable, List, Optional

from ..models import FREQUENCIES, STATUSES, MaintenanceOccurrence
from ..utils.scheduling import DEFAULT_ANCHOR_DAY
from .catalog import EquipmentCatalog, SQLEquipmentCatalog
from .errors import NotFound
from .lifecycle import LifecycleController
from .manager import DEFAULT_MAX_YEAR, DEFAULT_MIN_YEAR, GenerationResult, PlanManager, ResetResult, check_year
from .status import refresh_overdue
from .store import OccurrenceStore, SQLOccurrenceStore


class PlanService:
    """Entry point used by the HTTP routes and CLI commands.

    Every read refreshes overdue statuses against ``today()`` and persists
    the rows that changed before returning them.
    """

    def __init__(
        self,
        store: OccurrenceStore,
        catalog: EquipmentCatalog,
        anchor_day: int = DEFAULT_ANCHOR_DAY,
        min_year: int = DEFAULT_MIN_YEAR,
        max_year: int = DEFAULT_MAX_YEAR,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.catalog = catalog
        self.today = today
        self.min_year = min_year
        self.max_year = max_year
        self.manager = PlanManager(store, catalog, anchor_day, min_year, max_year)
        self.lifecycle = LifecycleController(store, today)

    @classmethod
    def for_app(cls, app, session) -> "PlanService":
        return cls(
            SQLOccurrenceStore(session),
            SQLEquipmentCatalog(session),
            anchor_day=app.config.get("PLAN_ANCHOR_DAY", DEFAULT_ANCHOR_DAY),
            min_year=app.config.get("PLAN_MIN_YEAR", DEFAULT_MIN_YEAR),
            max_year=app.config.get("PLAN_MAX_YEAR", DEFAULT_MAX_YEAR),
        )

    def _require_owner(self, owner_id: str) -> None:
        if not self.catalog.owner_exists(owner_id):
            raise NotFound(f"Facility {owner_id} not found")

    def _refreshed(self, occurrences: List[MaintenanceOccurrence]) -> List[MaintenanceOccurrence]:
        changed = refresh_overdue(occurrences, self.today())
        if changed:
            self.store.save_all(changed)
        return occurrences

    def generate(self, owner_id: str, year: int) -> GenerationResult:
        self._require_owner(owner_id)
        return self.manager.generate_year_plan(owner_id, year)

    def reset(self, owner_id: str, year: int) -> ResetResult:
        self._require_owner(owner_id)
        return self.manager.reset_year_plan(owner_id, year)

    def list_by_owner_year(self, owner_id: str, year: int) -> List[dict]:
        self._require_owner(owner_id)
        check_year(year, self.min_year, self.max_year)
        occurrences = self._refreshed(self.store.list_by_owner_year(owner_id, year))
        records = self.catalog.records_by_id(occurrence.equipment_id for occurrence in occurrences)
        rows = []
        for occurrence in occurrences:
            row = occurrence.to_dict()
            record = records.get(occurrence.equipment_id)
            if record is not None:
                row.update(record.display_fields())
            rows.append(row)
        return rows

    def list_by_equipment_year(self, equipment_id: str, year: int) -> List[MaintenanceOccurrence]:
        self.catalog.get(equipment_id)
        check_year(year, self.min_year, self.max_year)
        return self._refreshed(self.store.list_by_equipment_year(equipment_id, year))

    def refresh_year(self, year: int) -> int:
        """Persist overdue flags for every pending occurrence of ``year``."""

        check_year(year, self.min_year, self.max_year)
        pending = self.store.list_filtered(year=year, status="pending")
        changed = refresh_overdue(pending, self.today())
        if changed:
            self.store.save_all(changed)
        return len(changed)

    def summary(self, owner_id: str, year: int, rows: Optional[List[dict]] = None) -> dict:
        if rows is None:
            rows = self.list_by_owner_year(owner_id, year)
        by_status = Counter(row["status"] for row in rows)
        by_frequency = Counter(row["frequency"] for row in rows)
        return {
            "total": len(rows),
            "by_status": {status: by_status.get(status, 0) for status in STATUSES},
            "by_frequency": {frequency: by_frequency.get(frequency, 0) for frequency in FREQUENCIES},
        }

    def complete(
        self,
        occurrence_id: str,
        completed_by: Optional[str],
        completed_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> MaintenanceOccurrence:
        return self.lifecycle.complete(occurrence_id, completed_by, completed_date, notes)

    def uncomplete(self, occurrence_id: str) -> MaintenanceOccurrence:
        return self.lifecycle.uncomplete(occurrence_id)

    def reschedule(self, occurrence_id: str, scheduled_date: date) -> MaintenanceOccurrence:
        return self.lifecycle.reschedule(occurrence_id, scheduled_date)

    def delete(self, occurrence_id: str) -> None:
        self.store.delete(self.store.get_by_id(occurrence_id))

    def delete_equipment(self, equipment_id: str) -> int:
        """Remove equipment together with its occurrences of every year."""

        self.catalog.get(equipment_id)
        with self.store.transaction():
            deleted = self.store.delete_by_equipment(equipment_id)
            self.catalog.remove(equipment_id)
        return deleted
