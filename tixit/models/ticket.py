from sqlalchemy import Column, String, Text, Date, DateTime, Numeric, Boolean, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import relationship

from tixit.db.session import Base


class Ticket(Base):
    __tablename__ = "tickets"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_tickets_price_non_negative"),)

    id = Column(String(36), primary_key=True)
    title = Column(Text, nullable=False)  # stored HTML-escaped, so may exceed the input limit
    description = Column(Text, nullable=True)
    category = Column(String(40), nullable=False, index=True)
    city = Column(Text, nullable=False, index=True)
    date = Column(Date, nullable=False)
    time = Column(String(5), nullable=False)  # HH:MM, local time of the event
    venue = Column("place", Text, nullable=False)
    details = Column(Text, nullable=True)  # VIP, seating info, etc.
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    seller_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    is_sold = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    seller = relationship("User", lazy="joined")
