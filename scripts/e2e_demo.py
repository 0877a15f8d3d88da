#!/usr/bin/env python3
"""
End-to-end demo script for the contract lifecycle API.

Prerequisites:
    1. API running (uvicorn app.main:app) against an empty database
    2. ADMIN_SECRET set for the API process

Usage:
    python scripts/e2e_demo.py --secret <ADMIN_SECRET>

    # Output the final dashboard as raw JSON:
    python scripts/e2e_demo.py --secret <ADMIN_SECRET> --json
"""

import argparse
import json
import sys
from datetime import date, timedelta
from uuid import uuid4

import httpx

# Configuration
API_BASE = "http://localhost:8000"


def check_health(client: httpx.Client) -> bool:
    """Check if API is healthy."""
    try:
        resp = client.get(f"{API_BASE}/health")
        return resp.status_code == 200
    except httpx.RequestError:
        return False


def as_user(user_id: str) -> dict:
    """Headers identifying the caller, as the gateway would set them."""
    return {"X-User-Id": user_id}


def bootstrap_admin(client: httpx.Client, secret: str, suffix: str) -> dict:
    resp = client.post(
        f"{API_BASE}/api/users/bootstrap-admin",
        json={
            "secret": secret,
            "email": f"admin-{suffix}@example.com",
            "first_name": "Ada",
            "last_name": "Admin",
        },
    )
    resp.raise_for_status()
    return resp.json()


def register_user(client: httpx.Client, admin_id: str, role: str, suffix: str) -> dict:
    resp = client.post(
        f"{API_BASE}/api/users",
        headers=as_user(admin_id),
        json={
            "email": f"{role}-{suffix}@example.com",
            "first_name": role.title(),
            "last_name": "User",
            "role": role,
        },
    )
    resp.raise_for_status()
    return resp.json()


def create_contract(client: httpx.Client, owner_id: str) -> dict:
    today = date.today()
    resp = client.post(
        f"{API_BASE}/api/contracts",
        headers=as_user(owner_id),
        json={
            "title": "Office Cleaning Services",
            "type": "service",
            "counterparty_name": "Sparkle Ltd",
            "effective_date": today.isoformat(),
            "expiry_date": (today + timedelta(days=7)).isoformat(),
            "contract_value": "12000.00",
            "currency": "USD",
        },
    )
    resp.raise_for_status()
    return resp.json()


def main():
    parser = argparse.ArgumentParser(description="E2E demo for the contract lifecycle API")
    parser.add_argument("--secret", required=True, help="ADMIN_SECRET configured on the API")
    parser.add_argument("--json", action="store_true", help="Output raw JSON")
    args = parser.parse_args()

    suffix = uuid4().hex[:8]

    print("=" * 60)
    print("CONTRACT LIFECYCLE - E2E DEMO")
    print("=" * 60)

    with httpx.Client(timeout=30.0) as client:
        # Step 1: Health check
        print("\n[1/7] Checking API health...")
        if not check_health(client):
            print("  Error: API is not responding.")
            sys.exit(1)
        print("  API is healthy")

        # Step 2: Users
        print("\n[2/7] Creating users...")
        try:
            admin = bootstrap_admin(client, args.secret, suffix)
        except httpx.HTTPStatusError as e:
            print(f"  Error bootstrapping admin: {e.response.text}")
            sys.exit(1)
        manager = register_user(client, admin["id"], "manager", suffix)
        legal = register_user(client, admin["id"], "legal", suffix)
        print(f"  Admin: {admin['email']}")
        print(f"  Manager: {manager['email']}")
        print(f"  Legal: {legal['email']}")

        # Step 3: Draft contract
        print("\n[3/7] Creating a draft contract as the manager...")
        contract = create_contract(client, manager["id"])
        print(f"  Contract ID: {contract['id']}")
        print(f"  Status: {contract['status']}")

        # Step 4: Approval
        print("\n[4/7] Approving as admin...")
        resp = client.post(
            f"{API_BASE}/api/contracts/{contract['id']}/approve", headers=as_user(admin["id"])
        )
        resp.raise_for_status()
        print(f"  Status: {resp.json()['status']}")

        # Step 5: Legal review task
        print("\n[5/7] Creating a legal review task...")
        resp = client.post(
            f"{API_BASE}/api/contracts/{contract['id']}/tasks",
            headers=as_user(manager["id"]),
            json={
                "title": "Legal review of termination clause",
                "type": "review",
                "due_date": (date.today() + timedelta(days=3)).isoformat(),
                "assigned_to": legal["id"],
            },
        )
        resp.raise_for_status()
        task = resp.json()
        print(f"  Task ID: {task['id']} (category: {task['category']})")

        # Step 6: Completion
        print("\n[6/7] Completing the task as the legal user...")
        resp = client.post(f"{API_BASE}/api/tasks/{task['id']}/complete", headers=as_user(legal["id"]))
        resp.raise_for_status()
        print(f"  Status: {resp.json()['status']}")

        for label, user in (("Admin", admin), ("Manager", manager), ("Legal", legal)):
            resp = client.get(f"{API_BASE}/api/notifications/unread-count", headers=as_user(user["id"]))
            resp.raise_for_status()
            print(f"  {label} unread notifications: {resp.json()['unreadCount']}")

        # Step 7: Dashboard
        print("\n[7/7] Fetching the manager dashboard...")
        resp = client.get(f"{API_BASE}/api/dashboard/stats", headers=as_user(manager["id"]))
        resp.raise_for_status()
        stats = resp.json()

    print("\n" + "=" * 60)
    print("ALL ENDPOINTS TESTED SUCCESSFULLY!")
    print("=" * 60)

    if args.json:
        print(json.dumps(stats, indent=2, default=str))
    else:
        print(f"Contracts: {stats['contracts']['total']} (by status: {stats['contracts']['by_status']})")
        print(f"Tasks: {stats['tasks']['total']} (overdue: {stats['tasks']['overdue']})")
        print(f"Expiring within 30 days: {len(stats['expiring_contracts'])}")
        print(f"Active contract value: {stats['value']['total_value']:.2f}")

    sys.exit(0)


if __name__ == "__main__":
    main()
