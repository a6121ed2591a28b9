"""HTTP surface: authentication, capability checks and error mapping."""

from decimal import Decimal
import uuid

from app.core.enums import StaffRole


def test_staff_role_labels_are_normalised() -> None:
    assert StaffRole.parse("Campus Admin") is StaffRole.CAMPUS_ADMIN
    assert StaffRole.parse("CampusHead") is StaffRole.CAMPUS_HEAD
    assert StaffRole.parse("super_admin") is StaffRole.SUPER_ADMIN
    assert StaffRole.parse("Parent") is StaffRole.AMBASSADOR
    assert StaffRole.parse("Janitor") is None
    assert StaffRole.parse(None) is None


async def test_missing_token_is_unauthorized(client) -> None:
    resp = await client.get(f"/api/v1/settlements/pending/{uuid.uuid4()}")
    assert resp.status_code == 401


async def test_invalid_token_is_unauthorized(client) -> None:
    resp = await client.get(
        f"/api/v1/settlements/pending/{uuid.uuid4()}",
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert resp.status_code == 401


async def test_unknown_role_is_unauthorized(client, auth_headers) -> None:
    resp = await client.get(f"/api/v1/settlements/pending/{uuid.uuid4()}", headers=auth_headers("Janitor"))
    assert resp.status_code == 401


async def test_ambassador_role_cannot_pay(client, auth_headers, make_ambassador, make_settlement) -> None:
    ambassador = await make_ambassador()
    settlement = await make_settlement(ambassador, Decimal("100"))

    resp = await client.post(
        f"/api/v1/payouts/{settlement.id}",
        json={"transaction_reference": "UTR-1"},
        headers=auth_headers("Parent"),
    )

    assert resp.status_code == 403
    assert resp.json()["detail"] == "Insufficient permissions"


async def test_pending_endpoint(client, auth_headers, make_ambassador, make_lead) -> None:
    ambassador = await make_ambassador()
    await make_lead(ambassador)
    await make_lead(ambassador)

    resp = await client.get(f"/api/v1/settlements/pending/{ambassador.id}", headers=auth_headers("Finance Admin"))

    assert resp.status_code == 200
    body = resp.json()
    assert Decimal(str(body["pending"])) == Decimal("6000")
    assert Decimal(str(body["benefit_percent"])) == Decimal("10")


async def test_pending_for_unknown_ambassador(client, auth_headers) -> None:
    resp = await client.get(f"/api/v1/settlements/pending/{uuid.uuid4()}", headers=auth_headers("SUPER_ADMIN"))
    assert resp.status_code == 404


async def test_payout_then_conflict(client, auth_headers, make_ambassador, make_settlement) -> None:
    ambassador = await make_ambassador()
    settlement = await make_settlement(ambassador, Decimal("2500"))
    headers = auth_headers("FINANCE_ADMIN")

    first = await client.post(
        f"/api/v1/payouts/{settlement.id}", json={"transaction_reference": "UTR-77"}, headers=headers
    )
    second = await client.post(
        f"/api/v1/payouts/{settlement.id}", json={"transaction_reference": "UTR-78"}, headers=headers
    )
    missing = await client.post(
        f"/api/v1/payouts/{uuid.uuid4()}", json={"transaction_reference": "UTR-79"}, headers=headers
    )

    assert first.status_code == 200
    assert first.json()["ok"] is True
    assert first.json()["settlement"]["status"] == "Processed"
    assert first.json()["settlement"]["bank_reference"] == "UTR-77"
    assert second.status_code == 409
    assert second.json()["detail"] == "Settlement already processed"
    assert missing.status_code == 404


async def test_bulk_endpoint(client, auth_headers, make_ambassador, make_settlement) -> None:
    ambassador = await make_ambassador()
    first = await make_settlement(ambassador, Decimal("100"))
    second = await make_settlement(ambassador, Decimal("200"), status="Processed", bank_reference="UTR-OLD")

    resp = await client.post(
        "/api/v1/payouts/bulk",
        json={
            "items": [
                {"settlement_id": str(first.id), "transaction_reference": "UTR-A"},
                {"settlement_id": str(second.id), "transaction_reference": "UTR-B"},
            ]
        },
        headers=auth_headers("FINANCE_ADMIN"),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success_count"] == 1
    assert body["failure_count"] == 1
    assert [r["outcome"] for r in body["results"]] == ["processed", "already_processed"]


async def test_settlement_lifecycle(client, auth_headers, make_ambassador, make_lead) -> None:
    ambassador = await make_ambassador()
    await make_lead(ambassador)
    headers = auth_headers("FINANCE_ADMIN")

    created = await client.post("/api/v1/settlements", json={"ambassador_id": str(ambassador.id)}, headers=headers)
    assert created.status_code == 201
    settlement_id = created.json()["id"]
    assert Decimal(str(created.json()["amount"])) == Decimal("3000")

    listed = await client.get("/api/v1/settlements", params={"status": "Pending"}, headers=headers)
    assert [s["id"] for s in listed.json()] == [settlement_id]

    deleted = await client.delete(f"/api/v1/settlements/{settlement_id}", headers=headers)
    assert deleted.status_code == 204

    fetched = await client.get(f"/api/v1/settlements/{settlement_id}", headers=headers)
    assert fetched.status_code == 404


async def test_confirm_referral_endpoint(client, auth_headers, make_ambassador, make_lead) -> None:
    ambassador = await make_ambassador()
    lead = await make_lead(ambassador, status="New")

    resp = await client.post(
        f"/api/v1/referrals/{lead.id}/confirm",
        json={"admitted_academic_year": "2025-2026"},
        headers=auth_headers("Campus Admin"),
    )
    again = await client.post(f"/api/v1/referrals/{lead.id}/confirm", json={}, headers=auth_headers("Campus Admin"))

    assert resp.status_code == 200
    assert resp.json()["confirmed_referral_count"] == 1
    assert resp.json()["benefit_status"] == "Active"
    assert again.status_code == 409


async def test_benefit_slab_crud(client, auth_headers) -> None:
    headers = auth_headers("SUPER_ADMIN")

    created = await client.post(
        "/api/v1/benefits/slabs",
        json={"tier_name": "Silver", "referral_count": 2, "year_fee_benefit_percent": "12"},
        headers=headers,
    )
    assert created.status_code == 201
    slab_id = created.json()["id"]

    duplicate = await client.post(
        "/api/v1/benefits/slabs",
        json={"referral_count": 2, "year_fee_benefit_percent": "15"},
        headers=headers,
    )
    assert duplicate.status_code == 409

    out_of_range = await client.post(
        "/api/v1/benefits/slabs",
        json={"referral_count": 6, "year_fee_benefit_percent": "15"},
        headers=headers,
    )
    assert out_of_range.status_code == 422

    updated = await client.patch(
        f"/api/v1/benefits/slabs/{slab_id}", json={"year_fee_benefit_percent": "14"}, headers=headers
    )
    assert updated.status_code == 200
    assert Decimal(str(updated.json()["year_fee_benefit_percent"])) == Decimal("14")

    finance = await client.post(
        "/api/v1/benefits/slabs",
        json={"referral_count": 3, "year_fee_benefit_percent": "20"},
        headers=auth_headers("FINANCE_ADMIN"),
    )
    assert finance.status_code == 403

    deleted = await client.delete(f"/api/v1/benefits/slabs/{slab_id}", headers=headers)
    assert deleted.status_code == 204
    listed = await client.get("/api/v1/benefits/slabs", headers=headers)
    assert listed.json() == []


async def test_benefit_summary(client, auth_headers, make_ambassador, make_lead) -> None:
    ambassador = await make_ambassador(role="Alumni")
    await make_lead(ambassador, annual_fee=Decimal("50000"))
    await make_lead(ambassador, status="Follow-up", annual_fee=Decimal("50000"))
    await make_lead(ambassador, status="Rejected", annual_fee=Decimal("50000"))

    resp = await client.get(f"/api/v1/benefits/ambassador/{ambassador.id}", headers=auth_headers("CAMPUS_HEAD"))

    assert resp.status_code == 200
    body = resp.json()
    assert body["confirmed_count"] == 1
    # Cash ladder: 20% per referral at count 1, 40% per referral at count 2
    assert Decimal(str(body["earned"]["total_amount"])) == Decimal("10000")
    assert Decimal(str(body["potential"]["total_amount"])) == Decimal("40000")
