"""
Assignment endpoint tests
"""
from datetime import timedelta


def stay_payload(room_id: str, stay_dates) -> dict:
    start, end = stay_dates
    return {"room_id": room_id, "start_date": start.isoformat(), "end_date": end.isoformat()}


async def request_room(client, headers, room_id: str, stay_dates) -> dict:
    response = await client.post(
        "/api/v1/assignments/", headers=headers, json=stay_payload(room_id, stay_dates)
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestQuote:

    async def test_quote(self, client, resident_headers, room, stay_dates):
        response = await client.post(
            "/api/v1/assignments/quote",
            headers=resident_headers,
            json=stay_payload(str(room.id), stay_dates),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["duration_days"] == 30
        assert body["total_price"] == 3000
        assert body["bookable"] is True
        assert body["unavailable_reason"] is None

    async def test_quote_rejects_backwards_dates(self, client, resident_headers, room, stay_dates):
        start, end = stay_dates

        response = await client.post(
            "/api/v1/assignments/quote",
            headers=resident_headers,
            json=stay_payload(str(room.id), (end, start)),
        )

        assert response.status_code == 422
        assert response.json()["code"] == "InvalidDateRange"


class TestRequest:

    async def test_create(self, client, resident, resident_headers, room, stay_dates):
        body = await request_room(client, resident_headers, str(room.id), stay_dates)

        assert body["status"] == "pending"
        assert body["resident_id"] == str(resident.id)
        assert body["total_price"] == 3000
        assert body["reference_number"]

    async def test_second_open_request(self, client, resident_headers, room, single_room, stay_dates):
        room_id, other_room_id = str(room.id), str(single_room.id)
        await request_room(client, resident_headers, room_id, stay_dates)

        response = await client.post(
            "/api/v1/assignments/",
            headers=resident_headers,
            json=stay_payload(other_room_id, stay_dates),
        )

        assert response.status_code == 409
        assert response.json()["code"] == "OverlappingRequest"

    async def test_start_in_the_past(self, client, resident_headers, room, stay_dates):
        start, end = stay_dates

        response = await client.post(
            "/api/v1/assignments/",
            headers=resident_headers,
            json=stay_payload(str(room.id), (start - timedelta(days=30), end)),
        )

        assert response.status_code == 422
        assert response.json()["kind"] == "validation_error"

    async def test_maintenance_room(self, client, resident_headers, room_factory, stay_dates):
        closed = await room_factory("501", status="maintenance")

        response = await client.post(
            "/api/v1/assignments/",
            headers=resident_headers,
            json=stay_payload(str(closed.id), stay_dates),
        )

        assert response.status_code == 409
        assert response.json()["code"] == "RoomUnavailable"


class TestReview:

    async def test_approve(self, client, admin, admin_headers, resident_headers, room, stay_dates):
        created = await request_room(client, resident_headers, str(room.id), stay_dates)

        response = await client.post(
            f"/api/v1/assignments/{created['id']}/approve", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert response.json()["approved_by"] == str(admin.id)

    async def test_resident_cannot_approve(self, client, resident_headers, room, stay_dates):
        created = await request_room(client, resident_headers, str(room.id), stay_dates)

        response = await client.post(
            f"/api/v1/assignments/{created['id']}/approve", headers=resident_headers
        )

        assert response.status_code == 403

    async def test_reject_with_notes(self, client, admin_headers, resident_headers, room, stay_dates):
        created = await request_room(client, resident_headers, str(room.id), stay_dates)

        response = await client.post(
            f"/api/v1/assignments/{created['id']}/reject",
            headers=admin_headers,
            json={"notes": "Incomplete ID"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "rejected"

    async def test_pending_queue(self, client, admin_headers, resident_headers, room, stay_dates):
        await request_room(client, resident_headers, str(room.id), stay_dates)

        response = await client.get("/api/v1/assignments/pending", headers=admin_headers)

        assert response.status_code == 200
        assert len(response.json()) == 1

    async def test_activate_without_payment(self, client, admin_headers, resident_headers, room, stay_dates):
        created = await request_room(client, resident_headers, str(room.id), stay_dates)
        await client.post(f"/api/v1/assignments/{created['id']}/approve", headers=admin_headers)

        response = await client.post(
            f"/api/v1/assignments/{created['id']}/activate", headers=admin_headers
        )

        assert response.status_code == 409
        assert response.json()["code"] == "PaymentNotVerified"


class TestResidentViews:

    async def test_list_is_scoped(
        self, client, admin_headers, resident_headers, other_resident_headers, room, stay_dates
    ):
        room_id = str(room.id)
        await request_room(client, resident_headers, room_id, stay_dates)
        await request_room(client, other_resident_headers, room_id, stay_dates)

        mine = await client.get("/api/v1/assignments/", headers=resident_headers)
        everyone = await client.get("/api/v1/assignments/?status=pending", headers=admin_headers)

        assert mine.json()["total"] == 1
        assert everyone.json()["total"] == 2

    async def test_other_resident_cannot_read(
        self, client, resident_headers, other_resident_headers, room, stay_dates
    ):
        created = await request_room(client, resident_headers, str(room.id), stay_dates)

        response = await client.get(
            f"/api/v1/assignments/{created['id']}", headers=other_resident_headers
        )

        assert response.status_code == 403

    async def test_my_room(self, client, resident_headers, room, stay_dates):
        created = await request_room(client, resident_headers, str(room.id), stay_dates)

        response = await client.get("/api/v1/assignments/me", headers=resident_headers)

        assert response.status_code == 200
        assert response.json()["current_assignment"]["id"] == created["id"]

    async def test_cancel_own_request(self, client, admin_headers, resident_headers, room, stay_dates):
        created = await request_room(client, resident_headers, str(room.id), stay_dates)
        await client.post(f"/api/v1/assignments/{created['id']}/approve", headers=admin_headers)

        response = await client.post(
            f"/api/v1/assignments/{created['id']}/cancel",
            headers=resident_headers,
            json={"reason": "Found another place"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        response = await client.delete(f"/api/v1/assignments/{created['id']}", headers=admin_headers)
        assert response.status_code == 204
