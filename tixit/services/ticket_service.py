from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from tixit.models.ticket import Ticket

logger = logging.getLogger(__name__)


def create_ticket(db: Session, data: dict[str, Any]) -> Ticket:
    """Persist an already sanitized ticket record."""
    ticket = Ticket(id=str(uuid.uuid4()), is_sold=False, **data)
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    logger.info("Ticket created", extra={"ticket_id": ticket.id, "user_id": ticket.seller_id})
    return ticket


def list_tickets(db: Session) -> list[Ticket]:
    """All tickets, newest first. The seller is joined in the same query."""
    stmt = select(Ticket).order_by(Ticket.created_at.desc(), Ticket.id)
    return list(db.execute(stmt).unique().scalars().all())
