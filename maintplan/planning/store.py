"""Persistence of maintenance occurrences.

The uniqueness of ``(equipment_id, frequency, scheduled_date)`` is what keeps
plan regeneration safe. :class:`SQLOccurrenceStore` delegates it to the
``uq_occurrence_slot`` constraint; :class:`MemoryOccurrenceStore` keeps an
index of occupied slots.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from sqlalchemy import insert, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

from ..models import Equipment, MaintenanceOccurrence
from ..utils.scheduling import FREQUENCY_ORDER
from .errors import NotFound

Slot = Tuple[str, str, date]

_CONFLICT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}

_SLOT_COLUMNS = ["equipment_id", "frequency", "scheduled_date"]

_STATE_FIELDS = (
    "equipment_id",
    "frequency",
    "year",
    "scheduled_date",
    "status",
    "completed_date",
    "completed_by",
    "description",
    "notes",
)


def _sort_key(occurrence: MaintenanceOccurrence):
    return (occurrence.scheduled_date, FREQUENCY_ORDER.index(occurrence.frequency), occurrence.equipment_id)


class OccurrenceStore(ABC):
    """Storage contract shared by the plan manager and lifecycle controller."""

    @abstractmethod
    def transaction(self):
        """Context manager grouping writes; only the outermost block commits."""

    @abstractmethod
    def upsert_if_absent(self, occurrences: Iterable[MaintenanceOccurrence]) -> int:
        """Insert candidates whose slot is free and return how many were inserted."""

    @abstractmethod
    def list_by_owner_year(self, owner_id: str, year: int) -> List[MaintenanceOccurrence]:
        ...

    @abstractmethod
    def list_by_equipment_year(self, equipment_id: str, year: int) -> List[MaintenanceOccurrence]:
        ...

    @abstractmethod
    def list_filtered(
        self,
        equipment_id: Optional[str] = None,
        year: Optional[int] = None,
        status: Optional[str] = None,
        frequency: Optional[str] = None,
    ) -> List[MaintenanceOccurrence]:
        ...

    @abstractmethod
    def get_by_id(self, occurrence_id: str) -> MaintenanceOccurrence:
        """Return the occurrence or raise :class:`NotFound`."""

    @abstractmethod
    def find_conflict(
        self, equipment_id: str, frequency: str, scheduled_date: date, exclude_id: Optional[str] = None
    ) -> Optional[MaintenanceOccurrence]:
        ...

    @abstractmethod
    def delete_by_owner_year(self, owner_id: str, year: int) -> int:
        ...

    @abstractmethod
    def delete_by_equipment(self, equipment_id: str) -> int:
        ...

    @abstractmethod
    def delete(self, occurrence: MaintenanceOccurrence) -> None:
        ...

    @abstractmethod
    def save(self, occurrence: MaintenanceOccurrence) -> MaintenanceOccurrence:
        ...

    def save_all(self, occurrences: Iterable[MaintenanceOccurrence]) -> None:
        with self.transaction():
            for occurrence in occurrences:
                self.save(occurrence)


class SQLOccurrenceStore(OccurrenceStore):
    def __init__(self, session):
        self.session = session
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.session.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            self.session.commit()

    def upsert_if_absent(self, occurrences: Iterable[MaintenanceOccurrence]) -> int:
        table = MaintenanceOccurrence.__table__
        conflict_insert = _CONFLICT_INSERTS.get(self.session.get_bind().dialect.name)
        inserted = 0
        with self.transaction():
            for occurrence in occurrences:
                values = {name: getattr(occurrence, name) for name in ("id",) + _STATE_FIELDS}
                if conflict_insert is not None:
                    statement = conflict_insert(table).values(**values).on_conflict_do_nothing(
                        index_elements=_SLOT_COLUMNS
                    )
                    result = self.session.execute(statement)
                    inserted += max(result.rowcount or 0, 0)
                    continue
                try:
                    with self.session.begin_nested():
                        self.session.execute(insert(table).values(**values))
                except IntegrityError:
                    continue
                inserted += 1
        return inserted

    def _owner_query(self, owner_id: str):
        return (
            self.session.query(MaintenanceOccurrence)
            .join(Equipment, MaintenanceOccurrence.equipment_id == Equipment.id)
            .filter(Equipment.facility_id == owner_id)
        )

    def list_by_owner_year(self, owner_id: str, year: int) -> List[MaintenanceOccurrence]:
        rows = self._owner_query(owner_id).filter(MaintenanceOccurrence.year == year).all()
        return sorted(rows, key=_sort_key)

    def list_by_equipment_year(self, equipment_id: str, year: int) -> List[MaintenanceOccurrence]:
        return self.list_filtered(equipment_id=equipment_id, year=year)

    def list_filtered(self, equipment_id=None, year=None, status=None, frequency=None):
        query = self.session.query(MaintenanceOccurrence)
        if equipment_id is not None:
            query = query.filter(MaintenanceOccurrence.equipment_id == equipment_id)
        if year is not None:
            query = query.filter(MaintenanceOccurrence.year == year)
        if status is not None:
            query = query.filter(MaintenanceOccurrence.status == status)
        if frequency is not None:
            query = query.filter(MaintenanceOccurrence.frequency == frequency)
        return sorted(query.all(), key=_sort_key)

    def get_by_id(self, occurrence_id: str) -> MaintenanceOccurrence:
        occurrence = self.session.get(MaintenanceOccurrence, occurrence_id)
        if occurrence is None:
            raise NotFound(f"Occurrence {occurrence_id} not found")
        return occurrence

    def find_conflict(self, equipment_id, frequency, scheduled_date, exclude_id=None):
        query = self.session.query(MaintenanceOccurrence).filter_by(
            equipment_id=equipment_id, frequency=frequency, scheduled_date=scheduled_date
        )
        if exclude_id is not None:
            query = query.filter(MaintenanceOccurrence.id != exclude_id)
        return query.first()

    def delete_by_owner_year(self, owner_id: str, year: int) -> int:
        equipment_ids = select(Equipment.id).where(Equipment.facility_id == owner_id)
        with self.transaction():
            deleted = (
                self.session.query(MaintenanceOccurrence)
                .filter(
                    MaintenanceOccurrence.year == year,
                    MaintenanceOccurrence.equipment_id.in_(equipment_ids),
                )
                .delete(synchronize_session=False)
            )
        return deleted

    def delete_by_equipment(self, equipment_id: str) -> int:
        with self.transaction():
            deleted = (
                self.session.query(MaintenanceOccurrence)
                .filter(MaintenanceOccurrence.equipment_id == equipment_id)
                .delete(synchronize_session=False)
            )
        return deleted

    def delete(self, occurrence: MaintenanceOccurrence) -> None:
        with self.transaction():
            self.session.delete(occurrence)
            # Flush now so a following update may reuse the freed slot.
            self.session.flush()

    def save(self, occurrence: MaintenanceOccurrence) -> MaintenanceOccurrence:
        with self.transaction():
            self.session.add(occurrence)
            self.session.flush()
        return occurrence

    def save_all(self, occurrences: Iterable[MaintenanceOccurrence]) -> None:
        with self.transaction():
            self.session.add_all(list(occurrences))


class MemoryOccurrenceStore(OccurrenceStore):
    """Dictionary-backed store for tests and scripts.

    ``owner_of`` maps an equipment id to its facility id and stands in for
    the join the SQL store performs.
    """

    def __init__(self, owner_of: Callable[[str], Optional[str]]):
        self.owner_of = owner_of
        self._rows: Dict[str, MaintenanceOccurrence] = {}
        self._slots: Dict[Slot, str] = {}
        self._depth = 0

    def __len__(self) -> int:
        return len(self._rows)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        snapshot = None
        if self._depth == 0:
            snapshot = [
                (occurrence, {name: getattr(occurrence, name) for name in _STATE_FIELDS})
                for occurrence in self._rows.values()
            ]
        self._depth += 1
        try:
            yield
        except Exception:
            self._depth -= 1
            if snapshot is not None:
                self._restore(snapshot)
            raise
        self._depth -= 1
        if self._depth == 0:
            self._reindex()

    def _restore(self, snapshot) -> None:
        self._rows = {}
        for occurrence, state in snapshot:
            for name, value in state.items():
                setattr(occurrence, name, value)
            self._rows[occurrence.id] = occurrence
        self._reindex()

    def _reindex(self) -> None:
        self._slots = {occurrence.slot: occurrence.id for occurrence in self._rows.values()}

    def upsert_if_absent(self, occurrences: Iterable[MaintenanceOccurrence]) -> int:
        inserted = 0
        with self.transaction():
            for occurrence in occurrences:
                if occurrence.slot in self._slots:
                    continue
                self._rows[occurrence.id] = occurrence
                self._slots[occurrence.slot] = occurrence.id
                inserted += 1
        return inserted

    def list_by_owner_year(self, owner_id: str, year: int) -> List[MaintenanceOccurrence]:
        rows = [
            occurrence
            for occurrence in self._rows.values()
            if occurrence.year == year and self.owner_of(occurrence.equipment_id) == owner_id
        ]
        return sorted(rows, key=_sort_key)

    def list_by_equipment_year(self, equipment_id: str, year: int) -> List[MaintenanceOccurrence]:
        return self.list_filtered(equipment_id=equipment_id, year=year)

    def list_filtered(self, equipment_id=None, year=None, status=None, frequency=None):
        rows = [
            occurrence
            for occurrence in self._rows.values()
            if (equipment_id is None or occurrence.equipment_id == equipment_id)
            and (year is None or occurrence.year == year)
            and (status is None or occurrence.status == status)
            and (frequency is None or occurrence.frequency == frequency)
        ]
        return sorted(rows, key=_sort_key)

    def get_by_id(self, occurrence_id: str) -> MaintenanceOccurrence:
        occurrence = self._rows.get(occurrence_id)
        if occurrence is None:
            raise NotFound(f"Occurrence {occurrence_id} not found")
        return occurrence

    def find_conflict(self, equipment_id, frequency, scheduled_date, exclude_id=None):
        occurrence_id = self._slots.get((equipment_id, frequency, scheduled_date))
        if occurrence_id is None or occurrence_id == exclude_id:
            return None
        return self._rows.get(occurrence_id)

    def _delete_where(self, predicate) -> int:
        doomed = [occurrence_id for occurrence_id, occurrence in self._rows.items() if predicate(occurrence)]
        with self.transaction():
            for occurrence_id in doomed:
                del self._rows[occurrence_id]
            self._reindex()
        return len(doomed)

    def delete_by_owner_year(self, owner_id: str, year: int) -> int:
        return self._delete_where(
            lambda occurrence: occurrence.year == year and self.owner_of(occurrence.equipment_id) == owner_id
        )

    def delete_by_equipment(self, equipment_id: str) -> int:
        return self._delete_where(lambda occurrence: occurrence.equipment_id == equipment_id)

    def delete(self, occurrence: MaintenanceOccurrence) -> None:
        self._delete_where(lambda candidate: candidate.id == occurrence.id)

    def save(self, occurrence: MaintenanceOccurrence) -> MaintenanceOccurrence:
        with self.transaction():
            current = self._slots.get(occurrence.slot)
            if current is not None and current != occurrence.id:
                raise ValueError(f"Slot already taken: {occurrence.slot}")
            self._rows[occurrence.id] = occurrence
            self._reindex()
        return occurrence
