#!/usr/bin/env python3
"""
Complete room request and payment flow script.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Usage:
    python scripts/flow_book_and_pay.py --room-id <UUID> --start-date 2026-11-01 --end-date 2026-12-01
    python scripts/flow_book_and_pay.py --room-id <UUID> --start-date 2026-11-01 --end-date 2026-11-15 --method cash

Flow:
    1. Issue resident and admin tokens
    2. Quote the stay
    3. Request the room
    4. Approve the request (as admin)
    5. Submit payment
    6. Verify payment, which activates the assignment
    7. Complete the stay
"""

import argparse
import json
import sys
from uuid import uuid4

import httpx

from app.core.security import create_access_token

BASE_URL = "http://localhost:8000"


def api_request(token: str, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make authenticated API request."""
    headers = {"Authorization": f"Bearer {token}"}
    url = f"{BASE_URL}{endpoint}"

    if method == "GET":
        response = httpx.get(url, headers=headers, timeout=10.0, follow_redirects=True)
    elif method == "POST":
        response = httpx.post(url, headers=headers, json=data or {}, timeout=10.0, follow_redirects=True)
    else:
        raise ValueError(f"Unknown method: {method}")

    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    if fields:
        filtered = {k: result["data"].get(k) for k in fields if k in result["data"]}
        print(json.dumps(filtered, indent=2))
    else:
        print(json.dumps(result["data"], indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Complete room request and payment flow")
    parser.add_argument("--room-id", required=True, help="Room UUID")
    parser.add_argument("--start-date", required=True, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end-date", required=True, help="End date (YYYY-MM-DD)")
    parser.add_argument("--method", choices=["gcash", "cash"], default="gcash")
    parser.add_argument("--skip-complete", action="store_true", help="Leave the assignment active")
    args = parser.parse_args()

    # Step 1: Tokens
    print_step(1, "Issue tokens")
    resident_token = create_access_token(str(uuid4()), "resident")
    admin_token = create_access_token(str(uuid4()), "admin")
    print("Issued resident and admin tokens")

    # Step 2: Quote
    print_step(2, "Quote the stay")
    quote_result = api_request(resident_token, "POST", "/api/v1/assignments/quote", {
        "room_id": args.room_id,
        "start_date": args.start_date,
        "end_date": args.end_date,
    })
    if not print_result(quote_result):
        sys.exit(1)
    if not quote_result["data"].get("bookable"):
        print(f"ERROR: Room not bookable - {quote_result['data'].get('unavailable_reason')}")
        sys.exit(1)

    # Step 3: Request the room
    print_step(3, "Request the room")
    assignment_result = api_request(resident_token, "POST", "/api/v1/assignments", {
        "room_id": args.room_id,
        "start_date": args.start_date,
        "end_date": args.end_date,
    })
    if not print_result(assignment_result, ["id", "reference_number", "duration_days", "total_price", "status"]):
        sys.exit(1)

    assignment_id = assignment_result["data"]["id"]
    reference_number = assignment_result["data"]["reference_number"]
    total_price = assignment_result["data"]["total_price"]

    # Step 4: Approve
    print_step(4, "Approve the request (as admin)")
    approve_result = api_request(admin_token, "POST", f"/api/v1/assignments/{assignment_id}/approve")
    if not print_result(approve_result, ["id", "status", "approved_at"]):
        sys.exit(1)

    # Step 5: Submit payment
    print_step(5, "Submit payment")
    payment_data = {"assignment_id": assignment_id, "method": args.method, "amount": total_price}
    if args.method == "gcash":
        payment_data["reference_number"] = "GC" + uuid4().hex[:10].upper()
        payment_data["proof_image"] = f"payments/{assignment_id}.png"
    payment_result = api_request(resident_token, "POST", "/api/v1/payments", payment_data)
    if not print_result(payment_result, ["id", "amount", "method", "status"]):
        sys.exit(1)

    payment_id = payment_result["data"]["id"]

    # Step 6: Verify payment
    print_step(6, "Verify payment (activates the assignment)")
    verify_result = api_request(admin_token, "POST", f"/api/v1/payments/{payment_id}/verify")
    if not print_result(verify_result, ["id", "status", "verified_at"]):
        sys.exit(1)

    room_result = api_request(admin_token, "GET", f"/api/v1/rooms/{args.room_id}")
    print_result(room_result, ["number", "status", "occupied_count", "capacity"])

    if args.skip_complete:
        print("\n" + "="*60)
        print("FLOW COMPLETE (assignment left active)")
        print("="*60)
        return

    # Step 7: Complete
    print_step(7, "Complete the stay")
    complete_result = api_request(admin_token, "POST", f"/api/v1/assignments/{assignment_id}/complete")
    if not print_result(complete_result, ["id", "reference_number", "status", "completed_at"]):
        sys.exit(1)

    # Final summary
    print("\n" + "="*60)
    print("FULL FLOW COMPLETE")
    print("="*60)
    print(f"Assignment:     {reference_number}")
    print(f"Total Paid:     {total_price:,}")


if __name__ == "__main__":
    main()
