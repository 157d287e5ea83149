"""
Reporting endpoint tests
"""
from datetime import UTC, datetime, timedelta


async def checked_in_stay(client, admin_headers, resident_headers, room_id: str, stay_dates) -> dict:
    """Request, approve, pay cash and check in."""
    start, end = stay_dates
    response = await client.post(
        "/api/v1/assignments/",
        headers=resident_headers,
        json={"room_id": room_id, "start_date": start.isoformat(), "end_date": end.isoformat()},
    )
    assignment = response.json()
    await client.post(f"/api/v1/assignments/{assignment['id']}/approve", headers=admin_headers)
    await client.post(
        "/api/v1/payments/",
        headers=resident_headers,
        json={"assignment_id": assignment["id"], "method": "cash", "amount": assignment["total_price"]},
    )
    response = await client.post(
        f"/api/v1/assignments/{assignment['id']}/activate",
        headers=admin_headers,
        json={"cash_confirmed": True},
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestIncome:

    async def test_monthly(self, client, admin_headers, resident_headers, room, stay_dates):
        stay = await checked_in_stay(client, admin_headers, resident_headers, str(room.id), stay_dates)
        start, _ = stay_dates

        response = await client.get(
            f"/api/v1/reports/income/monthly?year={start.year}&month={start.month}",
            headers=admin_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total_income"] == stay["total_price"]
        assert body["assignment_count"] == 1
        assert body["period_start"] == start.replace(day=1).isoformat()

    async def test_yearly(self, client, admin_headers):
        response = await client.get("/api/v1/reports/income/yearly?year=2027", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["year"] == 2027
        assert [m["period_start"] for m in body["months"]][:2] == ["2027-01-01", "2027-02-01"]
        assert body["total_income"] == 0

    async def test_month_out_of_range(self, client, admin_headers):
        response = await client.get(
            "/api/v1/reports/income/monthly?year=2026&month=13", headers=admin_headers
        )

        assert response.status_code == 422

    async def test_admin_only(self, client, resident_headers):
        response = await client.get(
            "/api/v1/reports/income/monthly?year=2026&month=1", headers=resident_headers
        )

        assert response.status_code == 403
        assert response.json()["code"] == "Forbidden"


class TestTransactions:

    async def test_lists_check_ins(self, client, admin_headers, resident_headers, room, stay_dates):
        stay = await checked_in_stay(client, admin_headers, resident_headers, str(room.id), stay_dates)
        today = datetime.now(UTC).date()

        response = await client.get(
            "/api/v1/reports/transactions",
            headers=admin_headers,
            params={
                "start_date": (today - timedelta(days=1)).isoformat(),
                "end_date": today.isoformat(),
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["total_amount"] == stay["total_price"]
        record = body["transactions"][0]
        assert record["reference_number"] == stay["reference_number"]
        assert record["room_number"] == "101"
        assert record["movement"] == "check_in"
        assert record["days_stayed"] is None

    async def test_half_open_range(self, client, admin_headers):
        response = await client.get(
            "/api/v1/reports/transactions?start_date=2026-01-01", headers=admin_headers
        )

        assert response.status_code == 422
        assert response.json()["kind"] == "validation_error"

    async def test_admin_only(self, client, resident_headers):
        response = await client.get("/api/v1/reports/transactions", headers=resident_headers)

        assert response.status_code == 403
