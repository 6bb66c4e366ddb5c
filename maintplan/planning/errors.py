from __future__ import annotations

from dataclasses import dataclass


class PlanError(Exception):
    """Base class for errors surfaced by the planning core."""


class NotFound(PlanError):
    """Raised when an occurrence, equipment or facility does not exist."""


class ValidationError(PlanError):
    """Raised when a request carries an invalid year, date or actor."""


@dataclass(frozen=True)
class EquipmentFailure:
    """One equipment item that could not be processed during generation."""

    equipment_id: str
    reason: str

    def to_dict(self) -> dict:
        return {"equipment_id": self.equipment_id, "reason": self.reason}
