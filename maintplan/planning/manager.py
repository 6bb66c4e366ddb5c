from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from ..models import MaintenanceOccurrence, new_id
from ..utils.scheduling import DEFAULT_ANCHOR_DAY, ScheduledOccurrence, generate_occurrences
from .catalog import EquipmentCatalog
from .errors import EquipmentFailure, ValidationError
from .store import OccurrenceStore

logger = logging.getLogger(__name__)

DEFAULT_MIN_YEAR = 2000
DEFAULT_MAX_YEAR = 2100


@dataclass
class GenerationResult:
    generated: int = 0
    failures: List[EquipmentFailure] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "generated": self.generated,
            "failures": [failure.to_dict() for failure in self.failures],
        }


@dataclass
class ResetResult:
    deleted: int = 0

    def to_dict(self) -> dict:
        return {"deleted": self.deleted}


def check_year(year, min_year: int = DEFAULT_MIN_YEAR, max_year: int = DEFAULT_MAX_YEAR) -> int:
    if isinstance(year, bool) or not isinstance(year, int):
        raise ValidationError(f"Year must be an integer, got {year!r}")
    if not min_year <= year <= max_year:
        raise ValidationError(f"Year {year} outside the supported range {min_year}-{max_year}")
    return year


def to_occurrence(scheduled: ScheduledOccurrence) -> MaintenanceOccurrence:
    return MaintenanceOccurrence(
        id=new_id(),
        equipment_id=scheduled.equipment_id,
        frequency=scheduled.frequency,
        year=scheduled.year,
        scheduled_date=scheduled.scheduled_date,
        status="pending",
        completed_date=None,
        completed_by=None,
        description=scheduled.description,
        notes=None,
    )


class PlanManager:
    """Builds and tears down the yearly maintenance plan of a facility."""

    def __init__(
        self,
        store: OccurrenceStore,
        catalog: EquipmentCatalog,
        anchor_day: int = DEFAULT_ANCHOR_DAY,
        min_year: int = DEFAULT_MIN_YEAR,
        max_year: int = DEFAULT_MAX_YEAR,
    ):
        self.store = store
        self.catalog = catalog
        self.anchor_day = anchor_day
        self.min_year = min_year
        self.max_year = max_year

    def generate_year_plan(self, owner_id: str, year: int) -> GenerationResult:
        """Create the missing occurrences of every equipment of ``owner_id``.

        Each equipment is written in its own transaction. Existing occurrences,
        completed or not, are never modified. An equipment that cannot be
        processed is reported in ``failures`` and does not stop the others.
        """

        check_year(year, self.min_year, self.max_year)
        result = GenerationResult()
        records = self.catalog.list_for_owner(owner_id)
        candidates = 0
        for record in records:
            try:
                scheduled = generate_occurrences(record.definition(), year, self.anchor_day)
                candidates += len(scheduled)
                with self.store.transaction():
                    result.generated += self.store.upsert_if_absent(
                        [to_occurrence(item) for item in scheduled]
                    )
            except Exception as exc:
                logger.warning("Plan generation failed for equipment %s: %s", record.id, exc)
                result.failures.append(EquipmentFailure(equipment_id=record.id, reason=str(exc)))

        logger.info(
            "Generated %d of %d candidate occurrences for facility %s in %d (%d equipment, %d failures)",
            result.generated, candidates, owner_id, year, len(records), len(result.failures),
        )
        return result

    def reset_year_plan(self, owner_id: str, year: int) -> ResetResult:
        """Delete every occurrence of ``owner_id`` in ``year``, whatever its status."""

        check_year(year, self.min_year, self.max_year)
        deleted = self.store.delete_by_owner_year(owner_id, year)
        logger.warning("Reset plan of facility %s for %d: %d occurrences deleted", owner_id, year, deleted)
        return ResetResult(deleted=deleted)
