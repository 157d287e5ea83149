"""
Payment endpoint tests, including the full booking lifecycle
"""
from uuid import uuid4

from app.core.permissions import Principal, UserRole


def new_resident() -> Principal:
    return Principal(id=uuid4(), role=UserRole.RESIDENT)


async def approved_assignment(client, admin_headers, resident_headers, room_id: str, stay_dates) -> dict:
    start, end = stay_dates
    response = await client.post(
        "/api/v1/assignments/",
        headers=resident_headers,
        json={"room_id": room_id, "start_date": start.isoformat(), "end_date": end.isoformat()},
    )
    assert response.status_code == 201, response.text
    assignment = response.json()

    response = await client.post(
        f"/api/v1/assignments/{assignment['id']}/approve", headers=admin_headers
    )
    assert response.status_code == 200, response.text
    return response.json()


async def submit_gcash(client, resident_headers, assignment: dict):
    return await client.post(
        "/api/v1/payments/",
        headers=resident_headers,
        json={
            "assignment_id": assignment["id"],
            "method": "gcash",
            "amount": assignment["total_price"],
            "reference_number": "GC0001",
            "proof_image": "payments/gc0001.png",
        },
    )


class TestBookingLifecycle:

    async def test_request_pay_verify_checkout(
        self, client, admin_headers, resident_headers, room, stay_dates
    ):
        room_id = str(room.id)
        assignment = await approved_assignment(
            client, admin_headers, resident_headers, room_id, stay_dates
        )

        response = await submit_gcash(client, resident_headers, assignment)
        assert response.status_code == 201
        payment = response.json()
        assert payment["status"] == "pending"

        response = await client.post(
            f"/api/v1/payments/{payment['id']}/verify",
            headers=admin_headers,
            json={"remarks": "Reference matched"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "verified"

        response = await client.get(f"/api/v1/rooms/{room_id}", headers=admin_headers)
        assert response.json()["occupied_count"] == 1

        response = await client.get(
            f"/api/v1/assignments/{assignment['id']}", headers=resident_headers
        )
        assert response.json()["status"] == "active"
        assert response.json()["checked_in_at"] is not None

        response = await client.post(
            f"/api/v1/assignments/{assignment['id']}/checkout", headers=resident_headers
        )
        assert response.status_code == 200
        checkout = response.json()
        assert checkout["assignment"]["status"] == "cancelled"
        assert checkout["message"] == "Booking cancelled within the grace period"

        response = await client.get(f"/api/v1/rooms/{room_id}", headers=admin_headers)
        assert response.json()["occupied_count"] == 0
        assert response.json()["status"] == "available"

    async def test_cash_confirmation(self, client, admin_headers, resident_headers, room, stay_dates):
        room_id = str(room.id)
        assignment = await approved_assignment(
            client, admin_headers, resident_headers, room_id, stay_dates
        )
        response = await client.post(
            "/api/v1/payments/",
            headers=resident_headers,
            json={"assignment_id": assignment["id"], "method": "cash", "amount": assignment["total_price"]},
        )
        assert response.status_code == 201

        response = await client.post(
            f"/api/v1/assignments/{assignment['id']}/activate",
            headers=admin_headers,
            json={"cash_confirmed": True},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "active"

    async def test_last_slot_goes_to_first_verified(
        self, client, admin_headers, headers_for, single_room, stay_dates
    ):
        room_id = str(single_room.id)
        first_headers = headers_for(new_resident())
        second_headers = headers_for(new_resident())
        first = await approved_assignment(client, admin_headers, first_headers, room_id, stay_dates)
        second = await approved_assignment(client, admin_headers, second_headers, room_id, stay_dates)
        first_payment = (await submit_gcash(client, first_headers, first)).json()
        second_payment = (await submit_gcash(client, second_headers, second)).json()

        response = await client.post(
            f"/api/v1/payments/{first_payment['id']}/verify", headers=admin_headers
        )
        assert response.status_code == 200

        response = await client.post(
            f"/api/v1/payments/{second_payment['id']}/verify", headers=admin_headers
        )
        assert response.status_code == 409
        assert response.json()["code"] == "ActivationConflict"

        response = await client.get(f"/api/v1/payments/{second_payment['id']}", headers=admin_headers)
        assert response.json()["status"] == "pending"
        response = await client.get(f"/api/v1/rooms/{room_id}", headers=admin_headers)
        assert (response.json()["occupied_count"], response.json()["status"]) == (1, "occupied")


class TestSubmit:

    async def test_amount_mismatch(self, client, admin_headers, resident_headers, room, stay_dates):
        assignment = await approved_assignment(
            client, admin_headers, resident_headers, str(room.id), stay_dates
        )

        response = await client.post(
            "/api/v1/payments/",
            headers=resident_headers,
            json={"assignment_id": assignment["id"], "method": "cash", "amount": 1},
        )

        assert response.status_code == 422
        assert response.json()["code"] == "AmountMismatch"

    async def test_duplicate(self, client, admin_headers, resident_headers, room, stay_dates):
        assignment = await approved_assignment(
            client, admin_headers, resident_headers, str(room.id), stay_dates
        )
        await submit_gcash(client, resident_headers, assignment)

        response = await submit_gcash(client, resident_headers, assignment)

        assert response.status_code == 409
        assert response.json()["code"] == "DuplicatePayment"

    async def test_unknown_method(self, client, resident_headers):
        response = await client.post(
            "/api/v1/payments/",
            headers=resident_headers,
            json={"assignment_id": "00000000-0000-0000-0000-000000000000", "method": "card", "amount": 1},
        )

        assert response.status_code == 422
        assert response.json()["code"] == "ValidationError"


class TestReview:

    async def test_reject_requires_remarks(self, client, admin_headers, resident_headers, room, stay_dates):
        assignment = await approved_assignment(
            client, admin_headers, resident_headers, str(room.id), stay_dates
        )
        payment = (await submit_gcash(client, resident_headers, assignment)).json()

        response = await client.post(
            f"/api/v1/payments/{payment['id']}/reject", headers=admin_headers, json={}
        )
        assert response.status_code == 422

        response = await client.post(
            f"/api/v1/payments/{payment['id']}/reject",
            headers=admin_headers,
            json={"remarks": "Reference not found"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "rejected"

    async def test_resident_cannot_verify(self, client, admin_headers, resident_headers, room, stay_dates):
        assignment = await approved_assignment(
            client, admin_headers, resident_headers, str(room.id), stay_dates
        )
        payment = (await submit_gcash(client, resident_headers, assignment)).json()

        response = await client.post(
            f"/api/v1/payments/{payment['id']}/verify", headers=resident_headers
        )

        assert response.status_code == 403

    async def test_instructions(self, client, resident_headers):
        response = await client.get("/api/v1/payments/instructions", headers=resident_headers)

        assert response.status_code == 200
        assert response.json()["accepted_methods"] == ["gcash", "cash"]

    async def test_list_scoped(self, client, admin_headers, resident_headers, room, stay_dates):
        assignment = await approved_assignment(
            client, admin_headers, resident_headers, str(room.id), stay_dates
        )
        await submit_gcash(client, resident_headers, assignment)

        response = await client.get(
            f"/api/v1/payments/?assignment_id={assignment['id']}", headers=resident_headers
        )

        assert response.json()["total"] == 1
