"""HOTELFEED — Payment Source.

Payments have no stored description; one is synthesized from the payment
fields. Optional suffixes are omitted entirely when their field is blank.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlmodel import select

from hotelfeed.connectors.activity_log import actor_name
from hotelfeed.connectors.base import EventSource
from hotelfeed.core.errors import MalformedRowError
from hotelfeed.core.type_registry import PAYMENT_LABEL, PAYMENT_TAG, SourceKind
from hotelfeed.models.feed_models import FilterState, NormalizedEvent
from hotelfeed.models.store_models import Employee, Payment


def _clean(value: Optional[str]) -> str:
    return value.strip() if value else ""


def reference_suffix(reference: Optional[str]) -> str:
    """' (Ref: X)' or '' when the transaction reference is blank."""
    ref = _clean(reference)
    return f" (Ref: {ref})" if ref else ""


def notes_suffix(notes: Optional[str]) -> str:
    """' - Notes: X' or '' when the notes are blank."""
    text = _clean(notes)
    return f" - Notes: {text}" if text else ""


def describe_payment(
    status: str,
    amount: float,
    method: str,
    reservation_id: int,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
) -> str:
    """e.g. 'Payment Completed - 150.00 via Cash (Ref: TX1) - Res#42 - Notes: deposit'."""
    return (
        f"Payment {status} - {amount:.2f} via {method}"
        f"{reference_suffix(reference)}"
        f" - Res#{reservation_id}"
        f"{notes_suffix(notes)}"
    )


class PaymentSource(EventSource):
    """Payment records taken by staff."""

    kind = SourceKind.PAYMENT

    def _events_query(self, filter: FilterState):
        query = select(
            Payment.id,
            Payment.payment_date,
            Payment.reservation_id,
            Payment.amount,
            Payment.payment_method,
            Payment.payment_status,
            Payment.transaction_reference,
            Payment.notes,
            Employee.first_name,
            Employee.last_name,
        )
        return self._scope(
            query, Payment.employee_id, Payment.payment_date, filter
        ).order_by(Payment.payment_date, Payment.id)

    def _max_query(self, filter: FilterState):
        query = select(func.max(Payment.payment_date)).select_from(Payment)
        return self._scope(query, Payment.employee_id, Payment.payment_date, filter)

    def row_timestamp(self, row: Dict[str, Any]) -> Optional[datetime]:
        return row.get("payment_date")

    def normalize(self, row: Dict[str, Any]) -> NormalizedEvent:
        timestamp = self.row_timestamp(row)
        if timestamp is None:
            raise MalformedRowError("missing payment_date", self.kind.value, row)
        name = actor_name(row)
        if not name:
            raise MalformedRowError("missing employee name", self.kind.value, row)
        for field in ("payment_status", "amount", "payment_method", "reservation_id"):
            if row.get(field) is None or (
                isinstance(row[field], str) and not row[field].strip()
            ):
                raise MalformedRowError(f"missing {field}", self.kind.value, row)

        description = describe_payment(
            status=row["payment_status"].strip(),
            amount=float(row["amount"]),
            method=row["payment_method"].strip(),
            reservation_id=row["reservation_id"],
            reference=row.get("transaction_reference"),
            notes=row.get("notes"),
        )
        return NormalizedEvent(
            timestamp=timestamp,
            actor_name=name,
            display_type=PAYMENT_LABEL,
            norm_type=PAYMENT_TAG,
            description=description,
            source=self.kind,
        )
