"""HOTELFEED — Filter Selector Options."""

from typing import List, Optional

from pydantic import BaseModel
from sqlmodel import Session, select

from hotelfeed.config import settings
from hotelfeed.core.type_registry import ALL_TYPES_LABEL, TYPE_GROUPS
from hotelfeed.models.store_models import Employee

ALL_EMPLOYEES_LABEL = "All Employees"


class EmployeeOption(BaseModel):
    employee_id: Optional[int] = None
    name: str


class TypeOption(BaseModel):
    value: Optional[str] = None
    label: str


def list_employee_options(
    session: Session, staff_role: str | None = None
) -> List[EmployeeOption]:
    """'All Employees' (id None) followed by staff, ordered by name."""
    role = staff_role or settings.staff_role
    employees = session.exec(
        select(Employee)
        .where(Employee.role == role)
        .order_by(Employee.first_name, Employee.last_name)
    ).all()
    options = [EmployeeOption(employee_id=None, name=ALL_EMPLOYEES_LABEL)]
    options.extend(EmployeeOption(employee_id=e.id, name=e.full_name) for e in employees)
    return options


def list_type_options() -> List[TypeOption]:
    """'All Types' (value None) followed by the registered type groups."""
    options = [TypeOption(value=None, label=ALL_TYPES_LABEL)]
    options.extend(TypeOption(value=g.tag, label=g.label) for g in TYPE_GROUPS.values())
    return options
