"""Access to the equipment master data used by the planner."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from ..models import Equipment, Facility
from ..utils.scheduling import EquipmentDefinition
from .errors import NotFound


@dataclass(frozen=True)
class EquipmentRecord:
    id: str
    owner_id: str
    item_code: str = ""
    description: str = ""
    category: Optional[str] = None
    checks: Mapping[str, object] = field(default_factory=dict)

    def definition(self) -> EquipmentDefinition:
        return EquipmentDefinition.from_checks(self.id, self.owner_id, self.checks)

    def display_fields(self) -> dict:
        return {
            "item_code": self.item_code,
            "equipment_description": self.description,
            "category": self.category,
        }


class EquipmentCatalog(ABC):
    @abstractmethod
    def owner_exists(self, owner_id: str) -> bool:
        ...

    @abstractmethod
    def list_for_owner(self, owner_id: str) -> List[EquipmentRecord]:
        ...

    @abstractmethod
    def get(self, equipment_id: str) -> EquipmentRecord:
        """Return the equipment or raise :class:`NotFound`."""

    @abstractmethod
    def remove(self, equipment_id: str) -> None:
        """Drop the equipment; its occurrences are the caller's concern."""

    def records_by_id(self, equipment_ids: Iterable[str]) -> Dict[str, EquipmentRecord]:
        records: Dict[str, EquipmentRecord] = {}
        for equipment_id in set(equipment_ids):
            try:
                records[equipment_id] = self.get(equipment_id)
            except NotFound:
                continue
        return records


def _record_from_model(equipment: Equipment) -> EquipmentRecord:
    return EquipmentRecord(
        id=equipment.id,
        owner_id=equipment.facility_id,
        item_code=equipment.item_code,
        description=equipment.description,
        category=equipment.category,
        checks=equipment.check_texts(),
    )


class SQLEquipmentCatalog(EquipmentCatalog):
    def __init__(self, session):
        self.session = session

    def owner_exists(self, owner_id: str) -> bool:
        return self.session.get(Facility, owner_id) is not None

    def list_for_owner(self, owner_id: str) -> List[EquipmentRecord]:
        rows = (
            self.session.query(Equipment)
            .filter(Equipment.facility_id == owner_id)
            .order_by(Equipment.item_code)
            .all()
        )
        return [_record_from_model(row) for row in rows]

    def get(self, equipment_id: str) -> EquipmentRecord:
        equipment = self.session.get(Equipment, equipment_id)
        if equipment is None:
            raise NotFound(f"Equipment {equipment_id} not found")
        return _record_from_model(equipment)

    def remove(self, equipment_id: str) -> None:
        equipment = self.session.get(Equipment, equipment_id)
        if equipment is None:
            raise NotFound(f"Equipment {equipment_id} not found")
        self.session.delete(equipment)
        self.session.flush()

    def records_by_id(self, equipment_ids: Iterable[str]) -> Dict[str, EquipmentRecord]:
        ids = list(set(equipment_ids))
        if not ids:
            return {}
        rows = self.session.query(Equipment).filter(Equipment.id.in_(ids)).all()
        return {row.id: _record_from_model(row) for row in rows}


class MemoryEquipmentCatalog(EquipmentCatalog):
    def __init__(self, records: Iterable[EquipmentRecord] = ()):
        self._records: Dict[str, EquipmentRecord] = {}
        self._owners = set()
        for record in records:
            self.add(record)

    def add(self, record: EquipmentRecord) -> EquipmentRecord:
        self._records[record.id] = record
        self._owners.add(record.owner_id)
        return record

    def remove(self, equipment_id: str) -> None:
        if self._records.pop(equipment_id, None) is None:
            raise NotFound(f"Equipment {equipment_id} not found")

    def owner_of(self, equipment_id: str) -> Optional[str]:
        record = self._records.get(equipment_id)
        return record.owner_id if record else None

    def owner_exists(self, owner_id: str) -> bool:
        return owner_id in self._owners

    def list_for_owner(self, owner_id: str) -> List[EquipmentRecord]:
        records = [record for record in self._records.values() if record.owner_id == owner_id]
        return sorted(records, key=lambda record: (record.item_code, record.id))

    def get(self, equipment_id: str) -> EquipmentRecord:
        record = self._records.get(equipment_id)
        if record is None:
            raise NotFound(f"Equipment {equipment_id} not found")
        return record
