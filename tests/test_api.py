"""
Tests for the HTTP API.
"""

from datetime import date, datetime, timedelta

from bakery_reservation_api.app.core.security import create_access_token, decode_access_token


def _tomorrow_at(hour: int) -> datetime:
    return datetime.combine(date.today() + timedelta(days=1), datetime.min.time()).replace(hour=hour)


def _payload(hour: int = 10, breads=(("Baguette", 2),)) -> dict:
    return {
        "bring_time": _tomorrow_at(hour).isoformat(),
        "breads": [{"name": name, "count": count} for name, count in breads],
    }


def _create(client, headers, **kwargs) -> dict:
    response = client.post("/api/v1/reservations/", json=_payload(**kwargs), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestAuthentication:

    def test_missing_token(self, client):
        assert client.get("/api/v1/reservations/").status_code == 401

    def test_tampered_token(self, client, client_headers):
        unsigned = client_headers["Authorization"].rsplit(".", 1)[0]
        headers = {"Authorization": unsigned + ".c2lnbmF0dXJl"}
        assert client.get("/api/v1/reservations/", headers=headers).status_code == 401

    def test_unknown_member(self, client):
        token = create_access_token({"sub": "ghost@bakery.com"})
        response = client.get("/api/v1/reservations/", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_expired_token(self):
        token = create_access_token({"sub": "client@bakery.com"}, expires_delta=-10)
        assert decode_access_token(token) is None

    def test_round_trip_claims(self):
        assert decode_access_token(create_access_token({"sub": "client@bakery.com"}))["sub"] == "client@bakery.com"


class TestReservationEndpoints:

    def test_create_returns_grouped_reservation(self, client, client_headers):
        body = _create(client, client_headers, breads=(("Baguette", 2), ("Croissant", 1)))

        assert body["price"] == 13
        assert body["status"] == "PENDING"
        assert body["member_email"] == "client@bakery.com"
        assert [(b["name"], b["count"]) for b in body["breads"]] == [("Baguette", 2), ("Croissant", 1)]

    def test_create_outside_opening_hours(self, client, client_headers):
        response = client.post("/api/v1/reservations/", json=_payload(hour=20), headers=client_headers)

        assert response.status_code == 400
        assert "not a valid pickup time" in response.json()["detail"]

    def test_create_unknown_bread(self, client, client_headers):
        response = client.post(
            "/api/v1/reservations/", json=_payload(breads=(("Rye", 1),)), headers=client_headers
        )

        assert response.status_code == 404

    def test_create_rejects_bad_payload(self, client, client_headers):
        payload = _payload(breads=(("Baguette", 0),))
        assert client.post("/api/v1/reservations/", json=payload, headers=client_headers).status_code == 422

        payload = _payload(breads=(("Baguette", 1), ("Baguette", 2)))
        assert client.post("/api/v1/reservations/", json=payload, headers=client_headers).status_code == 422

    def test_create_with_oversized_order(self, client, client_headers, admin_headers):
        payload = _payload(breads=(("Baguette", 10**19),))
        assert client.post("/api/v1/reservations/", json=payload, headers=client_headers).status_code == 422

        gold_loaf = {"name": "Gold Loaf", "price": 2**63 - 1}
        assert client.post("/api/v1/breads/", json=gold_loaf, headers=admin_headers).status_code == 201
        response = client.post(
            "/api/v1/reservations/", json=_payload(breads=(("Gold Loaf", 2),)), headers=client_headers
        )

        assert response.status_code == 400
        assert "too large" in response.json()["detail"]
        assert client.get("/api/v1/reservations/recent", headers=client_headers).status_code == 404

    def test_list_and_recent(self, client, client_headers, other_headers):
        first = _create(client, client_headers, hour=10)
        second = _create(client, client_headers, hour=12)
        _create(client, other_headers)

        listed = client.get("/api/v1/reservations/", params={"status": "PENDING"}, headers=client_headers)
        recent = client.get("/api/v1/reservations/recent", headers=client_headers)

        assert [r["reservation_id"] for r in listed.json()] == [second["reservation_id"], first["reservation_id"]]
        assert recent.json()["reservation_id"] == second["reservation_id"]

    def test_recent_without_reservations(self, client, client_headers):
        assert client.get("/api/v1/reservations/recent", headers=client_headers).status_code == 404

    def test_get_is_limited_to_owner_and_admin(self, client, client_headers, other_headers, admin_headers):
        reservation_id = _create(client, client_headers)["reservation_id"]
        url = f"/api/v1/reservations/{reservation_id}"

        assert client.get(url, headers=client_headers).status_code == 200
        assert client.get(url, headers=admin_headers).status_code == 200
        assert client.get(url, headers=other_headers).status_code == 403
        assert client.get("/api/v1/reservations/999", headers=admin_headers).status_code == 404

    def test_update_replaces_reservation(self, client, client_headers):
        old = _create(client, client_headers)

        response = client.put(
            f"/api/v1/reservations/{old['reservation_id']}",
            json=_payload(hour=15, breads=(("Sourdough", 1),)),
            headers=client_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["reservation_id"] != old["reservation_id"]
        assert body["price"] == 8
        assert client.get(f"/api/v1/reservations/{old['reservation_id']}", headers=client_headers).status_code == 404

    def test_update_refuses_completed_reservation(self, client, client_headers, admin_headers):
        reservation_id = _create(client, client_headers)["reservation_id"]
        client.patch(f"/api/v1/reservations/{reservation_id}/status", headers=admin_headers)

        response = client.put(
            f"/api/v1/reservations/{reservation_id}", json=_payload(hour=15), headers=client_headers
        )

        assert response.status_code == 400
        body = client.get(f"/api/v1/reservations/{reservation_id}", headers=client_headers).json()
        assert body["status"] == "COMPLETE"

    def test_delete(self, client, client_headers, other_headers):
        reservation_id = _create(client, client_headers)["reservation_id"]
        url = f"/api/v1/reservations/{reservation_id}"

        assert client.delete(url, headers=other_headers).status_code == 403
        assert client.delete(url, headers=client_headers).status_code == 204
        assert client.delete(url, headers=client_headers).status_code == 404

    def test_status_changes_require_admin(self, client, client_headers, admin_headers):
        reservation_id = _create(client, client_headers)["reservation_id"]
        url = f"/api/v1/reservations/{reservation_id}/status"

        assert client.patch(url, headers=client_headers).status_code == 403
        response = client.patch(url, headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"reservation_id": reservation_id, "status": "COMPLETE"}
        assert client.patch("/api/v1/reservations/999/status", headers=admin_headers).status_code == 404

    def test_cancel(self, client, client_headers, admin_headers):
        reservation_id = _create(client, client_headers)["reservation_id"]

        response = client.post(f"/api/v1/reservations/{reservation_id}/cancel", headers=client_headers)
        assert response.json()["status"] == "CANCELLED"

        done_id = _create(client, client_headers)["reservation_id"]
        client.patch(f"/api/v1/reservations/{done_id}/status", headers=admin_headers)
        assert client.post(f"/api/v1/reservations/{done_id}/cancel", headers=client_headers).status_code == 400

    def test_date_queries(self, client, client_headers, admin_headers):
        created = _create(client, client_headers)
        tomorrow = (date.today() + timedelta(days=1)).isoformat()

        by_date = client.get(
            "/api/v1/reservations/date", params={"select_date": tomorrow, "status": "PENDING"}, headers=admin_headers
        )
        by_range = client.get(
            "/api/v1/reservations/date-range",
            params={"start_date": date.today().isoformat(), "end_date": tomorrow},
            headers=admin_headers,
        )
        reversed_range = client.get(
            "/api/v1/reservations/date-range",
            params={"start_date": tomorrow, "end_date": date.today().isoformat()},
            headers=admin_headers,
        )

        assert [r["reservation_id"] for r in by_date.json()] == [created["reservation_id"]]
        assert [r["reservation_id"] for r in by_range.json()] == [created["reservation_id"]]
        assert reversed_range.status_code == 400
        assert client.get(
            "/api/v1/reservations/date", params={"select_date": tomorrow}, headers=client_headers
        ).status_code == 403


class TestCatalogAndSales:

    def test_breads(self, client, client_headers, admin_headers):
        assert [b["name"] for b in client.get("/api/v1/breads/", headers=client_headers).json()] == [
            "Baguette", "Croissant", "Sourdough",
        ]
        new_bread = {"name": "Rye", "price": 6}
        assert client.post("/api/v1/breads/", json=new_bread, headers=client_headers).status_code == 403
        assert client.post("/api/v1/breads/", json=new_bread, headers=admin_headers).status_code == 201
        assert client.post("/api/v1/breads/", json=new_bread, headers=admin_headers).status_code == 400
        too_expensive = {"name": "Gold Loaf", "price": 2**63}
        assert client.post("/api/v1/breads/", json=too_expensive, headers=admin_headers).status_code == 422

    def test_rollup(self, client, client_headers, admin_headers):
        tomorrow = (date.today() + timedelta(days=1)).isoformat()

        empty = client.post("/api/v1/sales/reservations/rollup", params={"sale_date": tomorrow}, headers=admin_headers)
        assert empty.status_code == 409

        reservation_id = _create(client, client_headers)["reservation_id"]
        client.patch(f"/api/v1/reservations/{reservation_id}/status", headers=admin_headers)
        response = client.post(
            "/api/v1/sales/reservations/rollup", params={"sale_date": tomorrow}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json() == {"sale_date": tomorrow, "reservation_count": 1, "total_price": 10}
        stored = client.get("/api/v1/sales/reservations", headers=admin_headers).json()
        assert [(s["sale_date"], s["total_price"]) for s in stored] == [(tomorrow, 10)]
