import datetime as dt

import pytest
from sqlmodel import Session

from hotelfeed.database import init_db, make_engine
from hotelfeed.models.store_models import ActivityLog, Employee, Payment

DAY = dt.date(2024, 3, 1)


def at(hour: int, minute: int = 0, day: dt.date = DAY) -> dt.datetime:
    return dt.datetime.combine(day, dt.time(hour, minute))


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'hotelfeed.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def staff(engine):
    """Two front-desk employees and one admin."""
    with Session(engine) as session:
        ana = Employee(first_name="Ana", last_name="Reyes", role="Employee")
        ben = Employee(first_name="Ben", last_name="Cruz", role="Employee")
        boss = Employee(first_name="Carla", last_name="Admin", role="Admin")
        session.add_all([ana, ben, boss])
        session.commit()
        return {"ana": ana.id, "ben": ben.id, "admin": boss.id}


def add_activity(engine, employee_id, when, activity_type="Login", description="Logged in"):
    with Session(engine) as session:
        row = ActivityLog(
            employee_id=employee_id,
            activity_type=activity_type,
            activity_description=description,
            activity_datetime=when,
        )
        session.add(row)
        session.commit()
        return row.id


def add_payment(engine, employee_id, when, **fields):
    values = {
        "reservation_id": 42,
        "amount": 150.0,
        "payment_method": "Cash",
        "payment_status": "Completed",
    }
    values.update(fields)
    with Session(engine) as session:
        row = Payment(employee_id=employee_id, payment_date=when, **values)
        session.add(row)
        session.commit()
        return row.id
