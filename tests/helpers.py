"""Request helpers shared by the HTTP tests."""


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def signup(client, name="Ann", email="ann@example.com", password="secret1"):
    res = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
    assert res.status_code == 201, res.text
    return res.json()


def ticket_payload(**overrides) -> dict:
    payload = {
        "title": "Coldplay - Music of the Spheres",
        "description": "Two seats together",
        "category": "Concert",
        "city": "Berlin",
        "date": "2026-11-20",
        "time": "19:30",
        "place": "Olympiastadion",
        "details": "Block C, row 12",
        "price": 89.5,
    }
    payload.update(overrides)
    return payload
