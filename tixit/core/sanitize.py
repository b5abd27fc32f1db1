"""Validation and sanitization pipeline for untrusted request payloads.

Each step is a hard gate and runs in this order:

1. schema check (pydantic), unknown keys dropped, numeric strings coerced
2. query-operator injection scan over every string value
3. recursive removal of keys that start with ``$`` or contain ``.``
4. markup removal for free-text fields
5. trim + HTML-escape for short display fields

The result is a plain dict keyed by ``Ticket`` column attributes.
"""

import html
import logging
import re
from collections.abc import Mapping
from typing import Any

import nh3
from pydantic import BaseModel, ValidationError

from tixit.core.errors import InjectionDetected, ValidationFailed
from tixit.schemas.ticket import TicketIn

logger = logging.getLogger(__name__)

OPERATORS = (
    "gt", "gte", "lt", "lte", "ne", "eq", "in", "nin", "regex", "where",
    "exists", "expr", "or", "and", "not", "nor", "elemMatch", "size", "all",
    "type", "mod", "text",
)
INJECTION_RE = re.compile(r"\$(?:" + "|".join(OPERATORS) + r")\s*:", re.IGNORECASE)

FREE_TEXT_FIELDS = ("description", "details")
SHORT_TEXT_FIELDS = ("title", "category", "city", "place")


def validate_schema(model: type[BaseModel], raw: Any) -> BaseModel:
    if not isinstance(raw, Mapping):
        raise ValidationFailed([{"field": "body", "message": "Expected a JSON object"}])
    try:
        return model.model_validate(dict(raw))
    except ValidationError as e:
        raise ValidationFailed(validation_details(e)) from None


def validation_details(e) -> list[dict[str, str]]:
    """Flatten pydantic errors to ``[{"field", "message"}]``."""
    out = []
    for err in e.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        out.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return out


def scan_for_injection(data: Any, path: str = "") -> None:
    """Raise InjectionDetected on the first string that looks like ``$op:``."""
    if isinstance(data, str):
        if INJECTION_RE.search(data):
            raise InjectionDetected(path or "body")
    elif isinstance(data, Mapping):
        for key, value in data.items():
            scan_for_injection(value, f"{path}.{key}" if path else str(key))
    elif isinstance(data, (list, tuple)):
        for i, value in enumerate(data):
            scan_for_injection(value, f"{path}.{i}" if path else str(i))


def strip_operator_keys(data: Any) -> Any:
    """Return a copy of ``data`` without keys starting with ``$`` or containing ``.``."""
    if isinstance(data, Mapping):
        return {
            k: strip_operator_keys(v)
            for k, v in data.items()
            if not (isinstance(k, str) and (k.startswith("$") or "." in k))
        }
    if isinstance(data, list):
        return [strip_operator_keys(v) for v in data]
    return data


def strip_markup(text: str | None) -> str | None:
    if text is None:
        return None
    # no tags allowed; script/style contents are dropped with the element
    return nh3.clean(text, tags=set(), attributes={}).strip()


def escape_text(text: str | None) -> str | None:
    if text is None:
        return None
    return html.escape(text.strip(), quote=True)


def sanitize_ticket(raw: Any, seller_id: str | None = None) -> dict[str, Any]:
    """Run the full pipeline over a raw ticket payload."""
    ticket = validate_schema(TicketIn, raw)
    data = ticket.model_dump()

    try:
        scan_for_injection(data)
    except InjectionDetected as e:
        logger.warning("Rejected ticket payload: operator pattern in %s", e.field, extra={"field": e.field})
        raise

    data = strip_operator_keys(data)

    for field in FREE_TEXT_FIELDS:
        data[field] = strip_markup(data.get(field))
    for field in SHORT_TEXT_FIELDS:
        data[field] = escape_text(data.get(field))

    data["venue"] = data.pop("place")
    data["price"] = float(data["price"])
    if seller_id:
        data["seller_id"] = seller_id
    return data
