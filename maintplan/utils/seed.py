from __future__ import annotations

from datetime import date
from typing import Dict, List

import click
from flask import current_app
from werkzeug.security import generate_password_hash

from ..extensions import db
from ..models import Equipment, Facility, Role, User
from ..planning import PlanError, PlanService
from .demo_data import EQUIPMENT_DATA, FACILITY_DATA

ROLE_DEFINITIONS: Dict[str, str] = {
    "admin": "Full platform access",
    "supervisor": "Plant supervisor",
    "operator": "Maintenance operator",
}

ADMIN_PASSWORD_HASH = generate_password_hash("admin123")


def register_seed_commands(app):
    @app.cli.command("seed-demo")
    @click.option("--reset", is_flag=True, help="Drop and recreate the schema first.")
    def seed_demo(reset):
        """Populate the database with demo facilities and equipment."""

        if reset:
            current_app.logger.info("Resetting database before demo seed ...")
        if populate_demo_data(reset=reset):
            current_app.logger.info("Demo data seeded successfully")
        else:
            current_app.logger.info("Demo data already present; skipped seeding")

    @app.cli.command("plan-generate")
    @click.argument("facility")
    @click.argument("year", type=int)
    def plan_generate(facility, year):
        """Generate the maintenance plan of FACILITY (id or name) for YEAR."""

        service = PlanService.for_app(current_app, db.session)
        try:
            result = service.generate(_facility_id(facility), year)
        except PlanError as exc:
            raise click.ClickException(str(exc))
        click.echo(f"generated={result.generated}")
        for failure in result.failures:
            click.echo(f"failed {failure.equipment_id}: {failure.reason}", err=True)

    @app.cli.command("plan-reset")
    @click.argument("facility")
    @click.argument("year", type=int)
    @click.confirmation_option(prompt="Delete every occurrence of this facility and year?")
    def plan_reset(facility, year):
        """Delete the maintenance plan of FACILITY for YEAR, completed work included."""

        service = PlanService.for_app(current_app, db.session)
        try:
            result = service.reset(_facility_id(facility), year)
        except PlanError as exc:
            raise click.ClickException(str(exc))
        click.echo(f"deleted={result.deleted}")

    @app.cli.command("plan-refresh")
    @click.argument("year", type=int, required=False)
    def plan_refresh(year):
        """Persist overdue statuses for YEAR (defaults to the current year)."""

        service = PlanService.for_app(current_app, db.session)
        try:
            changed = service.refresh_year(year or date.today().year)
        except PlanError as exc:
            raise click.ClickException(str(exc))
        click.echo(f"overdue={changed}")


def _facility_id(identifier: str) -> str:
    facility = db.session.get(Facility, identifier)
    if facility is None:
        facility = db.session.query(Facility).filter_by(name=identifier).first()
    return facility.id if facility else identifier


def populate_demo_data(reset: bool = False, skip_if_exists: bool = True) -> bool:
    """Populate the database with demo facilities and equipment.

    Args:
        reset: When True the schema is dropped and recreated before loading data.
        skip_if_exists: When True nothing is inserted if a facility already exists.

    Returns:
        bool: True if the demo data was inserted during this invocation.
    """

    if reset:
        db.drop_all()
        db.create_all()
        ensure_base_data()

    if skip_if_exists and db.session.query(Facility).count() > 0:
        return False

    facilities = _ensure_facilities()
    equipment = _ensure_equipment(facilities)
    db.session.commit()

    current_app.logger.debug(
        "Demo seed complete: facilities=%d equipment=%d", len(facilities), len(equipment)
    )
    return True


def ensure_base_data() -> None:
    """Create the roles and the admin account when the database is empty."""

    for name, description in ROLE_DEFINITIONS.items():
        if db.session.query(Role).filter_by(name=name).first() is None:
            db.session.add(Role(name=name, description=description))
    db.session.flush()

    if db.session.query(User).count() == 0:
        admin_role = db.session.query(Role).filter_by(name="admin").first()
        admin = User(username="admin", full_name="Administrador", role=admin_role)
        admin.password_hash = ADMIN_PASSWORD_HASH
        db.session.add(admin)

    db.session.commit()


def _ensure_facilities() -> Dict[str, Facility]:
    facilities: Dict[str, Facility] = {}
    for record in FACILITY_DATA:
        facility = db.session.query(Facility).filter_by(name=record["Name"]).first()
        if facility is None:
            facility = Facility(name=record["Name"], location=record["Location"])
            db.session.add(facility)
        facilities[facility.name] = facility
    db.session.flush()
    return facilities


def _ensure_equipment(facilities: Dict[str, Facility]) -> List[Equipment]:
    equipment: List[Equipment] = []
    for record in EQUIPMENT_DATA:
        facility = facilities[record["Facility"]]
        item = (
            db.session.query(Equipment)
            .filter_by(facility_id=facility.id, item_code=record["Code"])
            .first()
        )
        if item is None:
            item = Equipment(
                facility=facility,
                item_code=record["Code"],
                description=record["Description"],
                category=record["Category"],
                location=record["Location"],
                daily_check=record.get("Daily") or None,
                monthly_check=record.get("Monthly") or None,
                quarterly_check=record.get("Quarterly") or None,
                biannual_check=record.get("Biannual") or None,
                annual_check=record.get("Annual") or None,
            )
            db.session.add(item)
        equipment.append(item)
    db.session.flush()
    return equipment
