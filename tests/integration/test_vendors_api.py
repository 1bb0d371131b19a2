"""
Tests for vendor search, detail and editing.
"""

from haystackfi.client.forms import build_vendor_update_payload
from haystackfi.db.enums import UserRole
from haystackfi.db.models import Vendor, VendorView


def test_search_filters_and_sorts(client, make_vendor):
    make_vendor("CoreTech Solutions", compatibility=80, tags=["core", "cloud"], rating=4.5)
    make_vendor("PayFlow Systems", category="Payments", compatibility=95, tags=["payments"], rating=3.0)
    make_vendor(
        "LendWise Analytics", category="Analytics", location="Denver, CO", compatibility=60, rating=4.9
    )

    everything = client.get("/vendor/search").json()
    assert [v["companyName"] for v in everything["vendors"]] == [
        "PayFlow Systems",
        "CoreTech Solutions",
        "LendWise Analytics",
    ]
    assert everything["total"] == 3

    by_category = client.get("/vendor/search", params={"category": "payments"}).json()
    assert [v["companyName"] for v in by_category["vendors"]] == ["PayFlow Systems"]

    by_text = client.get("/vendor/search", params={"q": "lend"}).json()
    assert [v["companyName"] for v in by_text["vendors"]] == ["LendWise Analytics"]

    by_location = client.get("/vendor/search", params={"location": "austin"}).json()
    assert by_location["total"] == 2

    by_tags = client.get("/vendor/search", params={"tags": "cloud,payments"}).json()
    assert {v["companyName"] for v in by_tags["vendors"]} == {"CoreTech Solutions", "PayFlow Systems"}

    by_rating = client.get("/vendor/search", params={"minRating": 4, "sortBy": "rating"}).json()
    assert [v["companyName"] for v in by_rating["vendors"]] == [
        "LendWise Analytics",
        "CoreTech Solutions",
    ]


def test_search_pagination(client, make_vendor):
    for name in ("Alpha", "Bravo", "Charlie", "Delta", "Echo"):
        make_vendor(name)

    first = client.get("/vendor/search", params={"sortBy": "name", "limit": 2}).json()
    last = client.get("/vendor/search", params={"sortBy": "name", "limit": 2, "page": 3}).json()

    assert [v["companyName"] for v in first["vendors"]] == ["Alpha", "Bravo"]
    assert first["totalPages"] == 3
    assert first["hasMore"] is True
    assert [v["companyName"] for v in last["vendors"]] == ["Echo"]
    assert last["hasMore"] is False


def test_search_skips_inactive_vendors(client, make_vendor, db_session):
    vendor = make_vendor("Dormant Inc")
    vendor.is_active = False
    db_session.commit()

    assert client.get("/vendor/search").json()["total"] == 0


def test_search_rejects_unknown_sort(client):
    assert client.get("/vendor/search", params={"sortBy": "popularity"}).status_code == 422


def test_get_vendor_records_view(client, make_vendor, make_user, auth_headers, db_session):
    vendor = make_vendor()
    viewer = make_user()

    response = client.get(f"/vendor/{vendor.id}", headers=auth_headers(viewer))
    client.get(f"/vendor/{vendor.id}")

    assert response.status_code == 200
    assert response.json()["companyName"] == "CoreTech Solutions"
    assert response.json()["profile"]["location"] == "Austin, TX"
    views = db_session.query(VendorView).filter(VendorView.vendor_id == vendor.id).all()
    assert sorted(v.user_id or 0 for v in views) == [0, viewer.id]


def test_get_missing_vendor(client):
    response = client.get("/vendor/999")

    assert response.status_code == 404
    assert response.json()["error"]["type"] == "ResourceNotFoundError"


def test_create_vendor_is_admin_only(client, make_user, admin, auth_headers):
    payload = {"name": "  NewCo  ", "category": "Payments", "website": "https://newco.io"}

    denied = client.post("/vendor", json=payload, headers=auth_headers(make_user(UserRole.VENDOR)))
    created = client.post("/vendor", json=payload, headers=auth_headers(admin))

    assert denied.status_code == 403
    assert created.status_code == 201
    body = created.json()
    assert body["companyName"] == "NewCo"
    assert body["profile"]["status"] == "pending"
    assert body["profile"]["verificationStatus"] == "pending"


def test_owner_updates_listing(client, make_user, make_vendor, auth_headers):
    owner = make_user(UserRole.VENDOR)
    vendor = make_vendor(owner=owner)

    response = client.put(
        f"/vendor/{vendor.id}",
        headers=auth_headers(owner),
        json={"companyName": "CoreTech", "profile": {"summary": "Cloud core", "tags": ["core"]}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["companyName"] == "CoreTech"
    assert body["profile"]["summary"] == "Cloud core"
    assert body["profile"]["tags"] == ["core"]
    assert body["profile"]["lastActivityAt"] is not None


def test_clearing_website_clears_listing_and_profile(client, make_user, make_vendor, auth_headers, db_session):
    owner = make_user(UserRole.VENDOR)
    vendor = make_vendor(owner=owner, website="https://coretech-solutions.com")

    response = client.put(
        f"/vendor/{vendor.id}",
        headers=auth_headers(owner),
        json=build_vendor_update_payload({"website": "  "}),
    )

    assert response.status_code == 200
    assert response.json()["website"] == ""
    assert response.json()["profile"]["website"] is None
    db_session.expire_all()
    refreshed = db_session.get(Vendor, vendor.id)
    assert refreshed.website == ""
    assert refreshed.profile.website is None


def test_owner_cannot_change_status(client, make_user, make_vendor, auth_headers):
    owner = make_user(UserRole.VENDOR)
    vendor = make_vendor(owner=owner)

    response = client.put(
        f"/vendor/{vendor.id}",
        headers=auth_headers(owner),
        json={"profile": {"verificationStatus": "verified"}},
    )

    assert response.status_code == 403


def test_non_owner_cannot_update(client, make_user, make_vendor, auth_headers):
    vendor = make_vendor(owner=make_user(UserRole.VENDOR))
    other = make_user(UserRole.VENDOR)

    response = client.put(f"/vendor/{vendor.id}", headers=auth_headers(other), json={"companyName": "X"})

    assert response.status_code == 403


def test_admin_changes_status(client, admin, make_vendor, auth_headers, db_session):
    vendor = make_vendor()

    response = client.put(
        f"/vendor/{vendor.id}",
        headers=auth_headers(admin),
        json={"profile": {"status": "suspended", "verificationStatus": "verified"}},
    )

    assert response.status_code == 200
    db_session.expire_all()
    profile = db_session.get(Vendor, vendor.id).profile
    assert profile.status == "suspended"
    assert profile.verification_status == "verified"


def test_verification_requests_lists_pending(client, admin, make_vendor, auth_headers):
    make_vendor("Pending Co")
    make_vendor("Verified Co", verification_status="verified")

    response = client.get("/vendor/verification-requests", headers=auth_headers(admin))

    assert response.status_code == 200
    assert [v["companyName"] for v in response.json()] == ["Pending Co"]


def test_dashboard_scoped_to_owner(client, make_user, make_vendor, auth_headers):
    owner = make_user(UserRole.VENDOR)
    make_vendor("Mine", owner=owner)
    make_vendor("Theirs", category="Payments")

    response = client.get("/vendor/dashboard", headers=auth_headers(owner))

    assert response.status_code == 200
    body = response.json()
    assert body["overview"]["totalLeads"] == 0
    assert [c["category"] for c in body["categoryPerformance"]] == ["Core Banking"]
    assert len(body["leadGeneration"]) == 30
    assert body["geographicDistribution"][0]["state"] == "TX"


def test_dashboard_forbidden_for_institutions(client, make_user, auth_headers):
    response = client.get("/vendor/dashboard", headers=auth_headers(make_user()))

    assert response.status_code == 403
