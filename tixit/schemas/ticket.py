import datetime as dt
import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

Category = Literal[
    "Movie",
    "Concert",
    "Standup Comedy",
    "Restaurant",
    "Sports",
    "Art",
    "Festive/Religious",
    "Other",
]


class TicketIn(BaseModel):
    """Ticket listing as submitted by a client. Unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=2000)
    category: Category
    city: str = Field(min_length=1, max_length=80)
    date: dt.date
    time: str
    place: str = Field(min_length=1, max_length=120)
    details: Optional[str] = Field(default=None, max_length=1000)
    price: float = Field(ge=0, le=99_999_999, allow_inf_nan=False)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v):
        if isinstance(v, dt.date) and not isinstance(v, dt.datetime):
            return v
        if not isinstance(v, str) or not DATE_RE.match(v.strip()):
            raise ValueError("date must be YYYY-MM-DD")
        try:
            return dt.datetime.strptime(v.strip(), "%Y-%m-%d").date()
        except ValueError:
            raise ValueError("date is not a valid calendar date")

    @field_validator("time", mode="before")
    @classmethod
    def check_time(cls, v):
        if not isinstance(v, str) or not TIME_RE.match(v.strip()):
            raise ValueError("time must be HH:MM (24-hour)")
        return v.strip()

    @field_validator("price", mode="before")
    @classmethod
    def reject_bool_price(cls, v):
        # bool is an int subclass; "true" is not a price
        if isinstance(v, bool):
            raise ValueError("price must be a number")
        return v


class SellerOut(BaseModel):
    id: str
    name: str
    email: str


class TicketOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    category: str
    city: str
    date: str
    time: str
    place: str
    details: Optional[str] = None
    price: float
    seller: Optional[SellerOut] = None
    isSold: bool = False
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


def ticket_out(t) -> TicketOut:
    seller = t.seller
    return TicketOut(
        id=t.id,
        title=t.title,
        description=t.description,
        category=t.category,
        city=t.city,
        date=t.date.isoformat(),
        time=t.time,
        place=t.venue,
        details=t.details,
        price=float(t.price),
        seller=SellerOut(id=seller.id, name=seller.name, email=seller.email) if seller else None,
        isSold=bool(t.is_sold),
        createdAt=t.created_at.isoformat() if t.created_at else None,
        updatedAt=t.updated_at.isoformat() if t.updated_at else None,
    )
