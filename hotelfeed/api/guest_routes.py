"""HOTELFEED — Guest Resolution Routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from hotelfeed.database import get_session
from hotelfeed.services.guest_service import ensure_guest
from hotelfeed.core.logging import get_logger

logger = get_logger("api.guests")

router = APIRouter(prefix="/guests", tags=["Guests"])


class EnsureGuestRequest(BaseModel):
    """Request body for POST /guests/ensure."""

    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    phone: str = ""
    email: Optional[str] = None
    id_type: str = ""
    id_number: str = ""


class EnsureGuestResponse(BaseModel):
    guest_id: int


@router.post("/ensure", response_model=EnsureGuestResponse)
async def ensure_guest_route(
    request: EnsureGuestRequest,
    session: Session = Depends(get_session),
):
    """Find a matching guest or create one, in a single transaction."""
    if not request.first_name.strip() or not request.last_name.strip():
        raise HTTPException(status_code=422, detail="First and last name are required")
    try:
        guest_id = ensure_guest(
            session,
            first_name=request.first_name,
            middle_name=request.middle_name,
            last_name=request.last_name,
            phone=request.phone,
            email=request.email,
            id_type=request.id_type,
            id_number=request.id_number,
        )
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Guest resolution failed: {e}")
        raise HTTPException(status_code=500, detail=f"Guest resolution failed: {str(e)}")
    return EnsureGuestResponse(guest_id=guest_id)
