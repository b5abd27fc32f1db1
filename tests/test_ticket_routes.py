"""HTTP contract of /api/tickets.

Invariants:
    - Creation works anonymously; a valid token sets the seller
    - Rejected payloads persist nothing
    - Listings expose only id/name/email of the seller
    - Creation: 5 per 10 minutes per address
"""

from helpers import auth_header, signup, ticket_payload
from tixit.models.ticket import Ticket


def _create(client, payload=None, headers=None):
    return client.post("/api/tickets", json=payload or ticket_payload(), headers=headers)


def test_anonymous_creation(client):
    res = _create(client)
    assert res.status_code == 201
    body = res.json()
    assert body["seller"] is None
    assert body["isSold"] is False
    assert body["place"] == "Olympiastadion"
    assert body["date"] == "2026-11-20"
    assert body["time"] == "19:30"
    assert body["price"] == 89.5
    assert body["id"]
    assert body["createdAt"]


def test_authenticated_creation_sets_seller(client):
    account = signup(client)
    res = _create(client, headers=auth_header(account["token"]))
    assert res.status_code == 201
    assert res.json()["seller"] == account["user"]


def test_invalid_token_creates_anonymously(client):
    res = _create(client, headers=auth_header("garbage"))
    assert res.status_code == 201
    assert res.json()["seller"] is None


def test_client_cannot_choose_seller_or_sold_flag(client):
    account = signup(client)
    res = _create(client, ticket_payload(seller=account["user"]["id"], seller_id=account["user"]["id"], isSold=True))
    assert res.status_code == 201
    assert res.json()["seller"] is None
    assert res.json()["isSold"] is False


def test_price_string_is_stored_as_number(client, db):
    res = _create(client, ticket_payload(price="19.99"))
    assert res.status_code == 201
    assert res.json()["price"] == 19.99
    stored = db.get(Ticket, res.json()["id"])
    assert isinstance(stored.price, float)
    assert stored.price == 19.99


def test_injection_rejected_and_nothing_persisted(client, db):
    res = _create(client, ticket_payload(city="$gt: 1"))
    assert res.status_code == 400
    assert res.json()["field"] == "city"
    assert db.query(Ticket).count() == 0


def test_script_is_not_persisted(client, db):
    res = _create(client, ticket_payload(description="<script>alert(1)</script>"))
    assert res.status_code == 201
    stored = db.get(Ticket, res.json()["id"])
    assert "<" not in (stored.description or "")
    assert "script" not in (stored.description or "")


def test_validation_failure_lists_fields(client, db):
    res = _create(client, ticket_payload(price=-5, date="2026-13-01", category="Opera"))
    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Invalid input"
    assert {e["field"] for e in body["errors"]} == {"price", "date", "category"}
    assert db.query(Ticket).count() == 0


def test_non_object_body_is_400(client):
    res = client.post("/api/tickets", json=[ticket_payload()])
    assert res.status_code == 400
    res = client.post("/api/tickets", content=b"{not json", headers={"Content-Type": "application/json"})
    assert res.status_code == 400


def test_listing_projects_seller(client):
    account = signup(client)
    _create(client, headers=auth_header(account["token"]))
    _create(client, ticket_payload(title="Anonymous listing"))

    res = client.get("/api/tickets")
    assert res.status_code == 200
    tickets = res.json()
    assert len(tickets) == 2
    by_title = {t["title"]: t for t in tickets}
    assert by_title["Anonymous listing"]["seller"] is None
    seller = by_title["Coldplay - Music of the Spheres"]["seller"]
    assert set(seller) == {"id", "name", "email"}
    assert seller["email"] == "ann@example.com"
    assert "password" not in res.text
    assert "google" not in res.text


def test_sixth_creation_in_window_is_rate_limited(client, db):
    statuses = [_create(client).status_code for _ in range(6)]
    assert statuses == [201] * 5 + [429]
    assert db.query(Ticket).count() == 5


def test_rate_limit_message_differs_from_client_errors(client):
    for _ in range(5):
        _create(client)
    res = _create(client, ticket_payload(price=-1))
    assert res.status_code == 429
    assert res.json() == {"message": "Too many requests, please try again later."}


def test_listing_is_rate_limited_separately(client):
    for _ in range(5):
        _create(client)
    assert client.get("/api/tickets").status_code == 200
    statuses = [client.get("/api/tickets").status_code for _ in range(60)]
    assert statuses[-1] == 429
    assert statuses.count(200) == 59
