import asyncio
from unittest.mock import patch

import httpx
import pytest

from app.core.errors import StorageError
from app.main import app
from app.services.booking_service import BookingService, get_booking_service


def test_book_and_list(client):
    response = client.post("/api/book", json={"name": "Ana", "service": "checkup"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    data = response.json()
    assert data["success"] is True
    assert isinstance(data["id"], int)

    response = client.get("/api/bookings")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    bookings = response.json()
    assert len(bookings) == 1
    assert bookings[0]["name"] == "Ana"
    assert bookings[0]["id"] == data["id"]
    assert "timestamp" in bookings[0]


def test_list_empty_store(client):
    response = client.get("/api/bookings")
    assert response.status_code == 200
    assert response.json() == []


def test_book_empty_object(client):
    response = client.post("/api/book", json={})
    assert response.status_code == 200

    bookings = client.get("/api/bookings").json()
    assert set(bookings[0].keys()) == {"id", "timestamp"}


@pytest.mark.parametrize("body", [b"not json", b"", b"[1, 2, 3]", b'"text"', b"\x80abc"])
def test_book_invalid_payload(client, store, body):
    response = client.post("/api/book", content=body)

    assert response.status_code == 400
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"error": "invalid payload"}
    assert not store.path.exists()


@pytest.mark.parametrize("body", [
    b'{"name": "Ana", "price": NaN}',
    b'{"name": "Ana", "price": Infinity}',
    b'{"name": "Ana", "price": -Infinity}',
])
def test_book_rejects_non_finite_numbers(client, store, body):
    response = client.post("/api/book", content=body)

    assert response.status_code == 400
    assert response.json() == {"error": "invalid payload"}
    assert not store.path.exists()
    assert client.get("/api/bookings").status_code == 200


def test_book_deeply_nested_body(client, store):
    response = client.post("/api/book", content=b"[" * 50000)

    assert response.status_code == 400
    assert response.json() == {"error": "invalid payload"}
    assert not store.path.exists()


def test_book_oversized_body_drops_connection(client, store):
    response = client.post("/api/book", content=b"x" * 1_000_001)

    assert response.status_code == 413
    assert response.headers["connection"] == "close"
    assert response.content == b""
    assert not store.path.exists()


def test_book_oversized_stream_without_length(client, store):
    def chunks():
        for _ in range(20):
            yield b"y" * 100_000

    response = client.post("/api/book", content=chunks())
    assert response.status_code == 413
    assert not store.path.exists()


def test_book_storage_failure(client, store):
    with patch.object(store, "save", side_effect=StorageError("disk full")):
        response = client.post("/api/book", json={"name": "Ana"})

    assert response.status_code == 500
    assert response.json() == {"error": "storage failure"}


def test_delete_via_query(client):
    booking_id = client.post("/api/book", json={"name": "Ana"}).json()["id"]

    response = client.get(f"/api/delete?id={booking_id}")
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert client.get("/api/bookings").json() == []


def test_delete_body_overrides_query(client):
    keep = client.post("/api/book", json={"name": "Ana"}).json()["id"]
    drop = client.post("/api/book", json={"name": "Bob"}).json()["id"]

    response = client.post(f"/api/delete?id={keep}", json={"id": drop})
    assert response.status_code == 200

    remaining = client.get("/api/bookings").json()
    assert [b["id"] for b in remaining] == [keep]


def test_delete_body_id_as_string(client):
    booking_id = client.post("/api/book", json={"name": "Ana"}).json()["id"]

    response = client.post("/api/delete", json={"id": str(booking_id)})
    assert response.status_code == 200
    assert client.get("/api/bookings").json() == []


def test_delete_malformed_body_falls_back_to_query(client):
    booking_id = client.post("/api/book", json={"name": "Ana"}).json()["id"]

    response = client.post(f"/api/delete?id={booking_id}", content=b"{broken")
    assert response.status_code == 200
    assert client.get("/api/bookings").json() == []


@pytest.mark.parametrize("body", [b"[" * 50000, b'{"id": NaN}'])
def test_delete_unusable_body_falls_back_to_query(client, body):
    booking_id = client.post("/api/book", json={"name": "Ana"}).json()["id"]

    response = client.post(f"/api/delete?id={booking_id}", content=body)
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert client.get("/api/bookings").json() == []


def test_delete_body_without_id_uses_query(client):
    booking_id = client.post("/api/book", json={"name": "Ana"}).json()["id"]

    response = client.post(f"/api/delete?id={booking_id}", json={"reason": "cancelled"})
    assert response.status_code == 200


@pytest.mark.parametrize("url", ["/api/delete", "/api/delete?id=", "/api/delete?id=abc"])
def test_delete_missing_id(client, url):
    response = client.get(url)
    assert response.status_code == 400
    assert response.json() == {"error": "id not specified"}


def test_delete_missing_id_in_post(client):
    response = client.post("/api/delete", json={"id": "abc"})
    assert response.status_code == 400
    assert response.json() == {"error": "id not specified"}


def test_delete_not_found(client):
    client.post("/api/book", json={"name": "Ana"})
    before = client.get("/api/bookings").json()

    response = client.get("/api/delete?id=42")
    assert response.status_code == 404
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"error": "record not found"}
    assert client.get("/api/bookings").json() == before


def test_scenario(client):
    response = client.post("/api/book", json={"name": "Ana"})
    data = response.json()
    assert data["success"] is True
    booking_id = data["id"]

    bookings = client.get("/api/bookings").json()
    assert len(bookings) == 1
    assert bookings[0]["name"] == "Ana"

    assert client.get(f"/api/delete?id={booking_id}").json() == {"success": True}
    assert client.get("/api/bookings").json() == []


@pytest.mark.asyncio
async def test_concurrent_bookings(store):
    service = BookingService(store)
    app.dependency_overrides[get_booking_service] = lambda: service
    n = 20
    try:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            responses = await asyncio.gather(
                *(ac.post("/api/book", json={"n": i}) for i in range(n))
            )
            assert all(r.status_code == 200 for r in responses)

            bookings = (await ac.get("/api/bookings")).json()
    finally:
        app.dependency_overrides.clear()

    assert len(bookings) == n
    assert len({b["id"] for b in bookings}) == n
    assert {r.json()["id"] for r in responses} == {b["id"] for b in bookings}
