from datetime import date
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from maintplan.planning import (
    EquipmentRecord,
    LifecycleController,
    MemoryEquipmentCatalog,
    MemoryOccurrenceStore,
    NotFound,
    PlanManager,
    PlanService,
    ValidationError,
    refresh_overdue,
)

TODAY = date(2025, 7, 1)


@pytest.fixture
def catalog():
    return MemoryEquipmentCatalog(
        [
            EquipmentRecord(
                id="eq-e01",
                owner_id="plant-1",
                item_code="E01",
                description="CUADRO ELECTRICO",
                category="cuadro_electrico",
                checks={"monthly": "Limpieza", "annual": "Apriete de tornillos"},
            ),
            EquipmentRecord(id="eq-di01", owner_id="plant-1", item_code="DI01", checks={"annual": "Control"}),
        ]
    )


@pytest.fixture
def store(catalog):
    store = MemoryOccurrenceStore(catalog.owner_of)
    PlanManager(store, catalog).generate_year_plan("plant-1", 2025)
    return store


@pytest.fixture
def controller(store):
    return LifecycleController(store, today=lambda: TODAY)


def _occurrence(store, equipment_id, frequency, month):
    for occurrence in store.list_by_equipment_year(equipment_id, 2025):
        if occurrence.frequency == frequency and occurrence.scheduled_date.month == month:
            return occurrence
    raise AssertionError("occurrence not generated")


def test_complete_defaults_to_today(store, controller):
    annual = _occurrence(store, "eq-di01", "annual", 12)

    updated = controller.complete(annual.id, "Operator A")

    assert updated.status == "completed"
    assert updated.completed_date == TODAY
    assert updated.completed_by == "Operator A"
    assert store.get_by_id(annual.id).status == "completed"


def test_complete_with_explicit_date_and_notes(store, controller):
    monthly = _occurrence(store, "eq-e01", "monthly", 3)

    updated = controller.complete(monthly.id, "Operator B", completed_date=date(2025, 3, 20), notes="Sin novedad")

    assert updated.completed_date == date(2025, 3, 20)
    assert updated.notes == "Sin novedad"
    assert updated.description == "Limpieza"


def test_complete_keeps_notes_when_none_given(store, controller):
    monthly = _occurrence(store, "eq-e01", "monthly", 4)
    monthly.notes = "Revisar ventilador"
    store.save(monthly)

    updated = controller.complete(monthly.id, "Operator B")

    assert updated.notes == "Revisar ventilador"


def test_complete_requires_an_actor(store, controller):
    monthly = _occurrence(store, "eq-e01", "monthly", 1)

    for actor in (None, "", "   "):
        with pytest.raises(ValidationError):
            controller.complete(monthly.id, actor)
    assert store.get_by_id(monthly.id).status == "pending"


def test_unknown_occurrence_is_not_found(controller):
    with pytest.raises(NotFound):
        controller.complete("missing", "Operator A")
    with pytest.raises(NotFound):
        controller.uncomplete("missing")
    with pytest.raises(NotFound):
        controller.reschedule("missing", date(2025, 5, 1))


def test_complete_then_uncomplete_round_trip(store, controller):
    annual = _occurrence(store, "eq-di01", "annual", 12)

    controller.complete(annual.id, "Operator A")
    reverted = controller.uncomplete(annual.id)

    assert reverted.status == "pending"
    assert reverted.completed_date is None
    assert reverted.completed_by is None


def test_overdue_occurrence_can_be_completed(store, controller):
    january = _occurrence(store, "eq-e01", "monthly", 1)
    refresh_overdue([january], TODAY)
    assert january.status == "overdue"

    updated = controller.complete(january.id, "Operator A")

    assert updated.status == "completed"


def test_uncompleted_past_occurrence_becomes_overdue_again(store, controller):
    february = _occurrence(store, "eq-e01", "monthly", 2)
    controller.complete(february.id, "Operator A")
    controller.uncomplete(february.id)

    changed = refresh_overdue(store.list_by_equipment_year("eq-e01", 2025), TODAY)

    assert february in changed
    assert february.status == "overdue"


def test_refresh_overdue_uses_strict_date_comparison(store):
    occurrences = store.list_by_equipment_year("eq-e01", 2025)
    june = _occurrence(store, "eq-e01", "monthly", 6)

    refresh_overdue(occurrences, date(2025, 6, 15))
    assert june.status == "pending"

    refresh_overdue(occurrences, date(2025, 6, 16))
    assert june.status == "overdue"


def test_refresh_overdue_never_touches_completed(store, controller):
    january = _occurrence(store, "eq-e01", "monthly", 1)
    controller.complete(january.id, "Operator A", completed_date=date(2025, 1, 15))

    changed = refresh_overdue([january], TODAY)

    assert changed == []
    assert january.status == "completed"


def test_reschedule_moves_within_year(store, controller):
    annual = _occurrence(store, "eq-di01", "annual", 12)

    moved = controller.reschedule(annual.id, date(2025, 11, 3))

    assert moved.scheduled_date == date(2025, 11, 3)
    assert store.find_conflict("eq-di01", "annual", date(2025, 12, 15)) is None


def test_reschedule_outside_year_is_rejected(store, controller):
    annual = _occurrence(store, "eq-di01", "annual", 12)

    with pytest.raises(ValidationError):
        controller.reschedule(annual.id, date(2026, 1, 15))
    assert store.get_by_id(annual.id).scheduled_date == date(2025, 12, 15)


def test_reschedule_onto_taken_slot_replaces_it(store, controller):
    march = _occurrence(store, "eq-e01", "monthly", 3)
    april = _occurrence(store, "eq-e01", "monthly", 4)

    controller.reschedule(march.id, april.scheduled_date)

    with pytest.raises(NotFound):
        store.get_by_id(april.id)
    remaining = store.list_by_equipment_year("eq-e01", 2025)
    assert len([occurrence for occurrence in remaining if occurrence.frequency == "monthly"]) == 11
    assert store.find_conflict("eq-e01", "monthly", date(2025, 4, 15)).id == march.id


def test_reschedule_clears_overdue_for_future_date(store, controller):
    january = _occurrence(store, "eq-e01", "monthly", 1)
    refresh_overdue([january], TODAY)

    moved = controller.reschedule(january.id, date(2025, 7, 20))

    assert moved.status == "pending"


def test_service_read_paths_persist_overdue_and_join_display_fields(store, catalog):
    service = PlanService(store, catalog, today=lambda: TODAY)

    rows = service.list_by_owner_year("plant-1", 2025)

    overdue = [row for row in rows if row["status"] == "overdue"]
    assert len(overdue) == 6
    assert all(row["item_code"] == "E01" for row in overdue)
    assert overdue[0]["equipment_description"] == "CUADRO ELECTRICO"
    assert overdue[0]["category"] == "cuadro_electrico"
    assert len(store.list_filtered(status="overdue")) == 6

    summary = service.summary("plant-1", 2025, rows)
    assert summary["total"] == 14
    assert summary["by_status"] == {"pending": 8, "completed": 0, "overdue": 6}
    assert summary["by_frequency"]["annual"] == 2


def test_service_rejects_unknown_owner_and_equipment(store, catalog):
    service = PlanService(store, catalog, today=lambda: TODAY)

    with pytest.raises(NotFound):
        service.list_by_owner_year("plant-404", 2025)
    with pytest.raises(NotFound):
        service.generate("plant-404", 2025)
    with pytest.raises(NotFound):
        service.list_by_equipment_year("eq-404", 2025)


def test_missing_occurrence_is_reported_before_the_actor(controller):
    with pytest.raises(NotFound):
        controller.complete("missing", "  ")


def test_reschedule_into_the_past_marks_overdue(store, controller):
    annual = _occurrence(store, "eq-di01", "annual", 12)

    moved = controller.reschedule(annual.id, date(2025, 3, 1))

    assert moved.status == "overdue"
    assert store.get_by_id(annual.id).status == "overdue"


def test_reschedule_keeps_completed_status_for_past_date(store, controller):
    annual = _occurrence(store, "eq-di01", "annual", 12)
    controller.complete(annual.id, "Operator A")

    moved = controller.reschedule(annual.id, date(2025, 3, 1))

    assert moved.status == "completed"


def test_delete_equipment_removes_its_occurrences_and_record(store, catalog):
    service = PlanService(store, catalog, today=lambda: TODAY)
    PlanManager(store, catalog).generate_year_plan("plant-1", 2026)

    deleted = service.delete_equipment("eq-di01")

    assert deleted == 2
    assert store.list_filtered(equipment_id="eq-di01") == []
    assert len(store.list_filtered(equipment_id="eq-e01")) == 26
    with pytest.raises(NotFound):
        catalog.get("eq-di01")
    with pytest.raises(NotFound):
        service.delete_equipment("eq-di01")
