from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from maintplan import create_app
from maintplan.config import TestingConfig
from maintplan.extensions import db
from maintplan.models import Equipment, Facility, MaintenanceOccurrence
from maintplan.utils.demo_data import EQUIPMENT_DATA, FACILITY_DATA


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    ctx = app.app_context()
    ctx.push()
    yield app
    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def test_seed_demo_is_repeatable(runner):
    assert runner.invoke(args=["seed-demo"]).exit_code == 0
    assert runner.invoke(args=["seed-demo"]).exit_code == 0

    assert db.session.query(Facility).count() == len(FACILITY_DATA)
    assert db.session.query(Equipment).count() == len(EQUIPMENT_DATA)


def test_plan_generate_and_reset_by_facility_name(runner):
    runner.invoke(args=["seed-demo"])

    result = runner.invoke(args=["plan-generate", "PTARI Tropack Industrial", "2030"])
    assert result.exit_code == 0
    generated = int(result.output.strip().split("=")[1])
    assert generated > 0
    assert db.session.query(MaintenanceOccurrence).count() == generated

    again = runner.invoke(args=["plan-generate", "PTARI Tropack Industrial", "2030"])
    assert again.output.strip() == "generated=0"

    reset = runner.invoke(args=["plan-reset", "PTARI Tropack Industrial", "2030", "--yes"])
    assert reset.exit_code == 0
    assert reset.output.strip() == f"deleted={generated}"


def test_plan_generate_reports_unknown_facility(runner):
    result = runner.invoke(args=["plan-generate", "Nowhere", "2030"])

    assert result.exit_code != 0
    assert "not found" in result.output


def test_plan_refresh_marks_past_years_overdue(runner):
    runner.invoke(args=["seed-demo"])
    runner.invoke(args=["plan-generate", "PTAR Santa Priscila", "2020"])

    result = runner.invoke(args=["plan-refresh", "2020"])

    assert result.exit_code == 0
    assert result.output.strip() == "overdue=1"
