"""Utility helpers for expanding equipment check definitions into a yearly calendar."""
from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

DEFAULT_ANCHOR_DAY = 15

# Months (1-12) on which each frequency falls due.
FREQUENCY_MONTHS: Dict[str, Tuple[int, ...]] = {
    "monthly": tuple(range(1, 13)),
    "quarterly": (3, 6, 9, 12),
    "biannual": (6, 12),
    "annual": (12,),
}

FREQUENCY_ORDER: Tuple[str, ...] = ("monthly", "quarterly", "biannual", "annual")


class InvalidDefinition(ValueError):
    """Raised when an equipment check definition cannot be interpreted."""


@dataclass(frozen=True)
class EquipmentDefinition:
    """Scheduling view of a piece of equipment.

    Attributes
    ----------
    id:
        Identifier of the equipment in the master data.
    owner_id:
        Identifier of the facility owning the equipment.
    frequencies:
        Active recurrence frequencies. Only names listed in
        :data:`FREQUENCY_ORDER` are accepted.
    instructions:
        Optional check instruction text per frequency, copied onto the
        generated occurrences as their description.
    """

    id: str
    owner_id: str
    frequencies: FrozenSet[str] = frozenset()
    instructions: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = set(self.frequencies) - set(FREQUENCY_ORDER)
        if unknown:
            raise InvalidDefinition(f"Unknown frequencies: {', '.join(sorted(unknown))}")

    @classmethod
    def from_checks(cls, equipment_id: str, owner_id: str, checks: Mapping[str, object]) -> "EquipmentDefinition":
        """Build a definition from raw check-definition texts.

        A frequency is active when its text is a non-blank string. ``None`` and
        blank strings mean the check is absent; any other value is rejected.
        """

        frequencies = set()
        instructions: Dict[str, str] = {}
        for frequency in FREQUENCY_ORDER:
            text = checks.get(frequency)
            if text is None:
                continue
            if not isinstance(text, str):
                raise InvalidDefinition(
                    f"Check definition for {frequency} must be text, got {type(text).__name__}"
                )
            if text.strip():
                frequencies.add(frequency)
                instructions[frequency] = text.strip()
        return cls(id=equipment_id, owner_id=owner_id, frequencies=frozenset(frequencies), instructions=instructions)


@dataclass(frozen=True)
class ScheduledOccurrence:
    """A single generated maintenance slot, not yet persisted."""

    equipment_id: str
    frequency: str
    scheduled_date: date
    year: int
    description: Optional[str] = None


def anchored_date(year: int, month: int, anchor_day: int = DEFAULT_ANCHOR_DAY) -> date:
    """Return ``anchor_day`` of the given month, clamped to the month's last day."""

    last_day = monthrange(year, month)[1]
    return date(year, month, min(anchor_day, last_day))


def generate_occurrences(
    definition: EquipmentDefinition,
    year: int,
    anchor_day: int = DEFAULT_ANCHOR_DAY,
) -> List[ScheduledOccurrence]:
    """Expand an equipment definition into the occurrences of one year.

    Parameters
    ----------
    definition:
        Equipment whose active frequencies are expanded.
    year:
        Target planning year. Every generated date falls inside it.
    anchor_day:
        Day of month the occurrences are pinned to. Months shorter than the
        anchor use their last day instead.

    Returns
    -------
    list[ScheduledOccurrence]
        Grouped by frequency in :data:`FREQUENCY_ORDER`, dates ascending within
        a group. Empty when the equipment has no active frequency.
    """

    if not 1 <= year <= 9999:
        raise ValueError(f"Year out of range: {year}")
    if not 1 <= anchor_day <= 31:
        raise ValueError(f"Anchor day out of range: {anchor_day}")

    occurrences: List[ScheduledOccurrence] = []
    for frequency in FREQUENCY_ORDER:
        if frequency not in definition.frequencies:
            continue
        description = definition.instructions.get(frequency)
        for month in FREQUENCY_MONTHS[frequency]:
            occurrences.append(
                ScheduledOccurrence(
                    equipment_id=definition.id,
                    frequency=frequency,
                    scheduled_date=anchored_date(year, month, anchor_day),
                    year=year,
                    description=description,
                )
            )
    return occurrences
