import uuid
from datetime import datetime
from typing import Optional

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from .extensions import db, login_manager

FREQUENCIES = ("monthly", "quarterly", "biannual", "annual")
STATUSES = ("pending", "completed", "overdue")


def new_id() -> str:
    return str(uuid.uuid4())


class Role(db.Model):
    __tablename__ = "roles"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False)
    description = db.Column(db.String(255))

    users = db.relationship("User", back_populates="role", lazy="dynamic")

    def __repr__(self) -> str:  # pragma: no cover - repr helper
        return f"<Role {self.name}>"


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    full_name = db.Column(db.String(120), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role_id = db.Column(db.Integer, db.ForeignKey("roles.id"), nullable=False)
    is_active_flag = db.Column(db.Boolean, default=True)

    role = db.relationship("Role", back_populates="users")

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @property
    def is_active(self) -> bool:  # type: ignore[override]
        return self.is_active_flag

    @property
    def is_admin(self) -> bool:
        return self.role is not None and self.role.name == "admin"

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User {self.username}>"


@login_manager.user_loader
def load_user(user_id: str) -> Optional["User"]:
    if user_id is None:
        return None
    return db.session.get(User, int(user_id))


class Facility(db.Model):
    __tablename__ = "facilities"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(120), unique=True, nullable=False)
    location = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    equipment = db.relationship(
        "Equipment",
        back_populates="facility",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Facility {self.name}>"


class Equipment(db.Model):
    __tablename__ = "equipment"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    facility_id = db.Column(
        db.String(36), db.ForeignKey("facilities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_code = db.Column(db.String(40), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(40), default="otros")
    location = db.Column(db.String(120))
    daily_check = db.Column(db.Text)
    monthly_check = db.Column(db.Text)
    quarterly_check = db.Column(db.Text)
    biannual_check = db.Column(db.Text)
    annual_check = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    facility = db.relationship("Facility", back_populates="equipment")
    occurrences = db.relationship(
        "MaintenanceOccurrence",
        back_populates="equipment",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    def check_texts(self) -> dict:
        """Raw check-definition columns keyed by frequency (daily excluded)."""
        return {
            "monthly": self.monthly_check,
            "quarterly": self.quarterly_check,
            "biannual": self.biannual_check,
            "annual": self.annual_check,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Equipment {self.item_code}>"


class MaintenanceOccurrence(db.Model):
    __tablename__ = "maintenance_occurrences"
    __table_args__ = (
        db.UniqueConstraint(
            "equipment_id", "frequency", "scheduled_date", name="uq_occurrence_slot"
        ),
        db.CheckConstraint(
            "frequency IN ('monthly', 'quarterly', 'biannual', 'annual')",
            name="ck_occurrence_frequency",
        ),
        db.CheckConstraint(
            "status IN ('pending', 'completed', 'overdue')", name="ck_occurrence_status"
        ),
        db.Index("ix_occurrence_equipment_year", "equipment_id", "year"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    equipment_id = db.Column(
        db.String(36), db.ForeignKey("equipment.id", ondelete="CASCADE"), nullable=False
    )
    frequency = db.Column(db.String(20), nullable=False)
    year = db.Column(db.Integer, nullable=False, index=True)
    scheduled_date = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    completed_date = db.Column(db.Date)
    completed_by = db.Column(db.String(120))
    description = db.Column(db.Text)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    equipment = db.relationship("Equipment", back_populates="occurrences")

    @property
    def slot(self) -> tuple:
        return (self.equipment_id, self.frequency, self.scheduled_date)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "equipment_id": self.equipment_id,
            "frequency": self.frequency,
            "year": self.year,
            "scheduled_date": self.scheduled_date.isoformat(),
            "status": self.status,
            "completed_date": self.completed_date.isoformat() if self.completed_date else None,
            "completed_by": self.completed_by,
            "description": self.description,
            "notes": self.notes,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<MaintenanceOccurrence {self.frequency} {self.scheduled_date}>"
