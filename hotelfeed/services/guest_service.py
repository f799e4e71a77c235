"""HOTELFEED — Guest Find-or-Create.

Resolves a guest identity to an id, inserting a record only when no match
exists. The caller owns the transaction: this never commits, so a match and
an insert made in the same transaction see each other. Two transactions
racing on the same identity can still both insert.
"""

from typing import Optional

from sqlalchemy import func, or_
from sqlmodel import Session, select

from hotelfeed.core.logging import get_logger
from hotelfeed.models.store_models import Guest

logger = get_logger("services.guest")


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def find_guest(
    session: Session,
    first_name: str,
    middle_name: Optional[str],
    last_name: str,
    phone: str,
    id_number: str,
) -> Optional[int]:
    """Case-insensitive name match AND (same phone OR same ID number)."""
    query = (
        select(Guest.id)
        .where(
            func.lower(Guest.first_name) == first_name.strip().lower(),
            func.lower(func.coalesce(Guest.middle_name, ""))
            == (middle_name or "").strip().lower(),
            func.lower(Guest.last_name) == last_name.strip().lower(),
            or_(
                Guest.phone_number == phone.strip(),
                Guest.id_number == id_number.strip(),
            ),
        )
        .order_by(Guest.id)
        .limit(1)
    )
    return session.exec(query).first()


def ensure_guest(
    session: Session,
    first_name: str,
    middle_name: Optional[str],
    last_name: str,
    phone: str,
    email: Optional[str],
    id_type: str,
    id_number: str,
) -> int:
    """Return the id of the matching guest, creating one if needed."""
    existing = find_guest(session, first_name, middle_name, last_name, phone, id_number)
    if existing is not None:
        return existing

    guest = Guest(
        first_name=first_name.strip(),
        middle_name=_blank_to_none(middle_name),
        last_name=last_name.strip(),
        email=_blank_to_none(email),
        phone_number=phone.strip(),
        id_type=id_type.strip(),
        id_number=id_number.strip(),
    )
    session.add(guest)
    # Flush assigns the id without ending the caller's transaction
    session.flush()
    logger.info(f"Created guest {guest.id}")
    return guest.id
