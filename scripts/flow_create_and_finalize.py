#!/usr/bin/env python3
"""
Create a payment and follow it until it is finalized.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls and runs the buyer's advisory
countdown. Payment state is owned by the relay.

Usage:
    python scripts/flow_create_and_finalize.py --buyer 0xabc... --price 1 --currency KAIA
    python scripts/flow_create_and_finalize.py --payment-id <ID> --timeout 180

Flow:
    1. Create payment (skipped with --payment-id)
    2. Buyer completes the payment in the Dapp Portal UI
    3. Poll status while the countdown runs
    4. Finalize manually if the payment is stuck at CONFIRMED
"""

import argparse
import json
import sys
import time

import httpx

BASE_URL = "http://localhost:3001"


def api_request(method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make API request to the relay."""
    url = f"{BASE_URL}{endpoint}"

    if method == "GET":
        response = httpx.get(url, timeout=10.0)
    elif method == "POST":
        response = httpx.post(url, json=data or {}, timeout=10.0)
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


def countdown_message(time_left: int) -> str | None:
    """Buyer-facing warning for the remaining time, if any."""
    if time_left <= 0:
        return "Payment may have timed out (3 min limit). Check status or create new payment."
    if time_left <= 30:
        return f"URGENT: Only {time_left} seconds remaining to complete payment!"
    if time_left <= 60:
        return f"WARNING: {time_left} seconds remaining to complete payment!"
    if time_left <= 120:
        return f"{time_left // 60} minute(s) {time_left % 60} seconds remaining to complete payment."
    return None


def wait_for_payment(payment_id: str, timeout: int, interval: int) -> str | None:
    """Poll payment status until it settles or the countdown ends."""
    deadline = time.monotonic() + timeout
    status = None
    confirmed_polls = 0

    while True:
        time_left = int(deadline - time.monotonic())
        result = api_request("GET", f"/api/payment/{payment_id}")
        if result["status"] == 200:
            status = result["data"].get("status")
            print(f"Payment status: {status}")
            if status in ("FINALIZED", "CANCELED"):
                return status
            # Automatic finalize had a poll interval to land
            confirmed_polls = confirmed_polls + 1 if status == "CONFIRMED" else 0
            if confirmed_polls >= 2:
                return status
        else:
            print(f"Status check failed ({result['status']})")

        message = countdown_message(time_left)
        if message:
            print(message)
        if time_left <= 0:
            return status

        time.sleep(min(interval, max(time_left, 1)))


def main():
    global BASE_URL

    parser = argparse.ArgumentParser(description="Create a payment and follow it to FINALIZED")
    parser.add_argument("--base-url", default=BASE_URL, help="Relay base URL")
    parser.add_argument("--payment-id", help="Follow an existing payment instead of creating one")
    parser.add_argument("--buyer", help="Buyer Dapp Portal wallet address")
    parser.add_argument("--price", default="1", help="Item price in display units")
    parser.add_argument("--currency", default="KAIA", help="Currency code")
    parser.add_argument("--pg-type", default="CRYPTO", choices=["CRYPTO", "STRIPE"])
    parser.add_argument("--mainnet", action="store_true", help="Use Kaia mainnet instead of Kairos testnet")
    parser.add_argument("--timeout", type=int, default=180, help="Advisory countdown in seconds")
    parser.add_argument("--interval", type=int, default=5, help="Status poll interval in seconds")
    args = parser.parse_args()

    BASE_URL = args.base_url.rstrip("/")
    payment_id = args.payment_id

    # Step 1: Create payment
    if not payment_id:
        if not args.buyer:
            parser.error("--buyer is required unless --payment-id is given")

        print_step(1, "Create payment")
        create_result = api_request("POST", "/api/payment/create", {
            "buyerDappPortalAddress": args.buyer,
            "pgType": args.pg_type,
            "currencyCode": args.currency,
            "price": args.price,
            "testMode": not args.mainnet,
            "items": [{
                "itemIdentifier": "ITEM_001",
                "name": "Sample Digital Product",
                "price": args.price,
                "currencyCode": args.currency,
            }],
        })
        if not print_result(create_result):
            sys.exit(1)
        payment_id = create_result["data"]["id"]
        print(f"\nPayment created: {payment_id}")

    # Step 2: Buyer pays
    print_step(2, "Complete the payment in the Dapp Portal UI")
    print(f"Payment ID: {payment_id}")
    print(f"You have {args.timeout} seconds to complete the payment.")

    # Step 3: Follow status
    print_step(3, "Wait for status callbacks")
    status = wait_for_payment(payment_id, args.timeout, args.interval)

    if status == "FINALIZED":
        print("\nPayment finalized by the relay.")
        return
    if status == "CANCELED":
        print("\nPayment was canceled. Please create a new payment.")
        sys.exit(1)
    if status != "CONFIRMED":
        print(f"\nCannot finalize: payment status is {status!r}. Must be CONFIRMED first.")
        sys.exit(1)

    # Step 4: Manual finalize
    print_step(4, "Finalize payment manually")
    finalize_result = api_request("POST", "/api/payment/finalize", {"paymentId": payment_id})
    if not print_result(finalize_result):
        sys.exit(1)

    print("\n" + "="*60)
    print("PAYMENT FINALIZED")
    print("="*60)


if __name__ == "__main__":
    main()
