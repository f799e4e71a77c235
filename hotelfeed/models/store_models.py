"""HOTELFEED — Backing Store Tables.

The feed only ever reads employees, activity_log and payments.
Guests are written by the find-or-create service.
"""

from datetime import datetime, date as date_type, timezone
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    """Naive UTC now; every timestamp column in the store is naive."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Employee(SQLModel, table=True):
    """Staff member. Feed rows are joined to an employee of the staff role."""

    __tablename__ = "employees"

    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    email: str = ""
    phone_number: str = ""
    username: str = Field(default="", index=True)
    role: str = Field(default="Employee", index=True, description="Admin | Employee")
    is_active: bool = True
    hire_date: Optional[date_type] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ActivityLog(SQLModel, table=True):
    """Append-only employee activity entry (Login, Check-In, ...)."""

    __tablename__ = "activity_log"

    id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: int = Field(foreign_key="employees.id", index=True)
    activity_type: Optional[str] = Field(default=None, description="Login | Check-In | ...")
    activity_description: Optional[str] = None
    activity_datetime: Optional[datetime] = Field(
        default=None, index=True, sa_type=DateTime(timezone=False)
    )


class Payment(SQLModel, table=True):
    """Append-only payment record taken by an employee."""

    __tablename__ = "payments"

    id: Optional[int] = Field(default=None, primary_key=True)
    reservation_id: Optional[int] = Field(default=None, index=True)
    employee_id: int = Field(foreign_key="employees.id", index=True)
    amount: Optional[float] = None
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    transaction_reference: Optional[str] = None
    notes: Optional[str] = None
    payment_date: Optional[datetime] = Field(
        default=None, index=True, sa_type=DateTime(timezone=False)
    )


class Guest(SQLModel, table=True):
    """Hotel guest identity, resolved by find-or-create."""

    __tablename__ = "guests"

    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    email: Optional[str] = None
    phone_number: str = Field(default="", index=True)
    id_type: str = ""
    id_number: str = Field(default="", index=True)
    created_at: datetime = Field(default_factory=_utcnow, sa_type=DateTime(timezone=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_type=DateTime(timezone=False))
