"""
Tests for vendor research runs.
Celery runs eagerly, so each run finishes inside the request.
"""

from datetime import datetime, timedelta

from haystackfi.db.enums import UserRole
from haystackfi.db.models import VendorResearchRecord
from haystackfi.tasks.research import fail_stale_research


def test_research_completes_for_vendor_with_website(client, admin, make_vendor, auth_headers):
    vendor = make_vendor(detailed_description="Cloud-native core banking. Built for community banks.")
    headers = auth_headers(admin)

    queued = client.post(f"/vendor/{vendor.id}/research", headers=headers)
    assert queued.status_code == 202
    research_id = queued.json()["id"]

    record = client.get(f"/vendor/{vendor.id}/research/{research_id}", headers=headers).json()
    assert record["status"] == "completed"
    assert record["taskId"]
    assert record["websiteUrl"] == "https://coretech-solutions.com"
    assert record["extractedProfile"]["summary"] == "Cloud-native core banking."
    assert record["metadata"]["requested_by"] == admin.id
    assert record["completedAt"] is not None


def test_research_fails_without_website(client, admin, make_vendor, auth_headers, db_session):
    vendor = make_vendor()
    vendor.website = ""
    db_session.commit()
    headers = auth_headers(admin)

    research_id = client.post(f"/vendor/{vendor.id}/research", headers=headers).json()["id"]

    record = client.get(f"/vendor/{vendor.id}/research/{research_id}", headers=headers).json()
    assert record["status"] == "failed"
    assert record["errorMessage"] == "Vendor has no website to research"


def test_research_history_newest_first(client, admin, make_vendor, auth_headers):
    vendor = make_vendor()
    headers = auth_headers(admin)
    first = client.post(f"/vendor/{vendor.id}/research", headers=headers).json()["id"]
    second = client.post(f"/vendor/{vendor.id}/research", headers=headers).json()["id"]

    history = client.get(f"/vendor/{vendor.id}/research", headers=headers).json()

    assert [r["id"] for r in history] == [second, first]


def test_research_is_admin_only(client, make_user, make_vendor, auth_headers):
    vendor = make_vendor()
    owner = make_user(UserRole.VENDOR)

    assert client.post(f"/vendor/{vendor.id}/research", headers=auth_headers(owner)).status_code == 403


def test_apply_fills_only_empty_fields(client, admin, make_vendor, auth_headers):
    vendor = make_vendor(summary="Curated summary")
    headers = auth_headers(admin)
    research_id = client.post(f"/vendor/{vendor.id}/research", headers=headers).json()["id"]

    response = client.post(f"/vendor/{vendor.id}/research/{research_id}/apply", headers=headers)

    assert response.status_code == 200
    profile = response.json()["profile"]
    assert profile["summary"] == "Curated summary"
    assert profile["email"] == "info@coretech-solutions.com"
    assert profile["sourceUrl"] == "https://coretech-solutions.com"
    assert profile["logoUrl"] == "https://coretech-solutions.com/favicon.ico"
    assert profile["lastVerified"] is not None


def test_apply_requires_completed_research(client, admin, make_vendor, auth_headers, db_session):
    vendor = make_vendor()
    record = VendorResearchRecord(vendor_id=vendor.id, status="pending")
    db_session.add(record)
    db_session.commit()

    response = client.post(
        f"/vendor/{vendor.id}/research/{record.id}/apply", headers=auth_headers(admin)
    )

    assert response.status_code == 409
    assert response.json()["error"]["details"] == {"status": "pending"}


def test_research_record_must_belong_to_vendor(client, admin, make_vendor, auth_headers):
    vendor = make_vendor()
    other = make_vendor("PayFlow Systems")
    headers = auth_headers(admin)
    research_id = client.post(f"/vendor/{vendor.id}/research", headers=headers).json()["id"]

    assert client.get(f"/vendor/{other.id}/research/{research_id}", headers=headers).status_code == 404


def test_fail_stale_research(client, make_vendor, db_session):
    vendor = make_vendor()
    stale = VendorResearchRecord(
        vendor_id=vendor.id, status="in_progress", requested_at=datetime.utcnow() - timedelta(hours=12)
    )
    fresh = VendorResearchRecord(vendor_id=vendor.id, status="pending")
    db_session.add_all([stale, fresh])
    db_session.commit()

    result = fail_stale_research.apply(kwargs={"older_than_hours": 6}).get()

    assert result == {"status": "success", "failed": 1}
    db_session.expire_all()
    assert db_session.get(VendorResearchRecord, stale.id).status == "failed"
    assert db_session.get(VendorResearchRecord, fresh.id).status == "pending"
