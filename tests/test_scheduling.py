from datetime import date
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from maintplan.utils.scheduling import (
    EquipmentDefinition,
    InvalidDefinition,
    anchored_date,
    generate_occurrences,
)

ALL_CHECKS = {
    "monthly": "Limpieza",
    "quarterly": "Ajuste de elementos",
    "biannual": "Control de tensión",
    "annual": "Cambio de aceite",
}


def _definition(checks):
    return EquipmentDefinition.from_checks("eq-1", "plant-1", checks)


def test_monthly_only_yields_one_occurrence_per_month():
    occurrences = generate_occurrences(_definition({"monthly": "Limpieza"}), 2025)

    assert len(occurrences) == 12
    assert {occurrence.frequency for occurrence in occurrences} == {"monthly"}
    assert [occurrence.scheduled_date.month for occurrence in occurrences] == list(range(1, 13))
    assert all(occurrence.scheduled_date.day == 15 for occurrence in occurrences)
    assert all(occurrence.description == "Limpieza" for occurrence in occurrences)


def test_all_frequencies_yield_nineteen_occurrences():
    occurrences = generate_occurrences(_definition(ALL_CHECKS), 2025)

    counts = {}
    for occurrence in occurrences:
        counts[occurrence.frequency] = counts.get(occurrence.frequency, 0) + 1
    assert counts == {"monthly": 12, "quarterly": 4, "biannual": 2, "annual": 1}
    assert len(occurrences) == 19
    assert all(occurrence.year == 2025 for occurrence in occurrences)
    assert all(occurrence.scheduled_date.year == 2025 for occurrence in occurrences)


def test_anchor_months_follow_the_plan_convention():
    occurrences = generate_occurrences(_definition(ALL_CHECKS), 2025)
    months = {}
    for occurrence in occurrences:
        months.setdefault(occurrence.frequency, []).append(occurrence.scheduled_date.month)

    assert months["quarterly"] == [3, 6, 9, 12]
    assert months["biannual"] == [6, 12]
    assert months["annual"] == [12]


def test_slots_never_repeat_within_a_frequency():
    occurrences = generate_occurrences(_definition(ALL_CHECKS), 2026)
    slots = [(occurrence.frequency, occurrence.scheduled_date) for occurrence in occurrences]
    assert len(slots) == len(set(slots))


def test_equipment_without_checks_yields_nothing():
    assert generate_occurrences(_definition({}), 2025) == []
    assert generate_occurrences(_definition({"monthly": "   ", "annual": None}), 2025) == []


def test_daily_check_is_ignored():
    definition = _definition({"daily": "Inspección visual", "annual": "Control"})
    assert definition.frequencies == frozenset({"annual"})


def test_anchor_day_is_clamped_to_month_end():
    occurrences = generate_occurrences(_definition({"monthly": "Limpieza"}), 2024, anchor_day=31)
    by_month = {occurrence.scheduled_date.month: occurrence.scheduled_date for occurrence in occurrences}

    assert by_month[2] == date(2024, 2, 29)
    assert by_month[4] == date(2024, 4, 30)
    assert by_month[12] == date(2024, 12, 31)
    assert anchored_date(2025, 2, 31) == date(2025, 2, 28)


def test_malformed_check_definition_is_rejected():
    with pytest.raises(InvalidDefinition):
        _definition({"monthly": 42})


def test_unknown_frequency_is_rejected():
    with pytest.raises(InvalidDefinition):
        EquipmentDefinition(id="eq-1", owner_id="plant-1", frequencies=frozenset({"weekly"}))


@pytest.mark.parametrize("year,anchor_day", [(0, 15), (10000, 15), (2025, 0), (2025, 32)])
def test_out_of_range_arguments_raise(year, anchor_day):
    with pytest.raises(ValueError):
        generate_occurrences(_definition({"annual": "Control"}), year, anchor_day=anchor_day)
