from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from tixit.api.deps import get_optional_user, rate_limit
from tixit.core.sanitize import sanitize_ticket
from tixit.db.session import get_db
from tixit.models.user import User
from tixit.schemas.ticket import TicketOut, ticket_out
from tixit.services.ticket_service import create_ticket, list_tickets

router = APIRouter(prefix="/tickets", tags=["tickets"])


@router.post("", response_model=TicketOut, status_code=201, dependencies=[Depends(rate_limit("ticket_create"))])
def create(
    payload: Any = Body(...),
    db: Session = Depends(get_db),
    me: User | None = Depends(get_optional_user),
):
    """Create a listing. Anonymous callers are allowed; a valid token sets the seller."""
    data = sanitize_ticket(payload, seller_id=me.id if me else None)
    return ticket_out(create_ticket(db, data))


@router.get("", response_model=list[TicketOut], dependencies=[Depends(rate_limit("ticket_list"))])
def list_all(db: Session = Depends(get_db)):
    return [ticket_out(t) for t in list_tickets(db)]
