"""
Tests for admin metrics, notifications, health endpoints and the mock dataset.
"""

from datetime import datetime, timedelta

from haystackfi.db.enums import NotificationType, UserRole
from haystackfi.db.models import DemoRequest, Notification, User, Vendor
from haystackfi.db.seed import DEMO_PASSWORD, seed_marketplace


# Admin


def test_admin_endpoints_require_admin(client, make_user, auth_headers):
    headers = auth_headers(make_user(UserRole.VENDOR))

    assert client.get("/admin/metrics", headers=headers).status_code == 403
    assert client.get("/admin/vendor-performance", headers=headers).status_code == 403
    assert client.post("/admin/clear-cache", headers=headers).status_code == 403
    assert client.get("/admin/metrics").status_code == 401


def test_admin_metrics_counts_and_growth(client, admin, make_user, make_vendor, auth_headers, db_session):
    banker = make_user(created_at=datetime.utcnow() - timedelta(days=45))
    make_user(UserRole.CREDIT_UNION)
    vendor = make_vendor()
    make_vendor("Suspended Co", status="suspended", verification_status="verified")
    db_session.add(
        DemoRequest(vendor_id=vendor.id, user_id=banker.id, timeline="Now", preferred_time="Any")
    )
    db_session.commit()

    body = client.get("/admin/metrics", headers=auth_headers(admin)).json()

    assert body["totalVendors"] == 2
    assert body["activeVendors"] == 1
    assert body["pendingVerifications"] == 1
    assert body["totalBanks"] == 2
    assert body["totalDemoRequests"] == 1
    assert body["monthlyGrowth"]["banks"] == 0.0
    assert body["monthlyGrowth"]["vendors"] == 100.0
    assert body["topCategories"][0] == {"category": "Core Banking", "count": 2, "growth": 100.0}
    assert body["recentActivity"][0]["type"] in {
        "vendor_signup",
        "verification_pending",
        "demo_request",
    }


def test_vendor_performance(client, admin, make_user, make_vendor, auth_headers):
    busy = make_vendor("Busy Co")
    make_vendor("Quiet Co")
    banker = make_user()
    client.get(f"/vendor/{busy.id}")
    client.post(
        "/demo-requests",
        json={"vendorId": busy.id, "timeline": "Now", "preferredTime": "Any"},
        headers=auth_headers(banker),
    )

    body = client.get("/admin/vendor-performance", headers=auth_headers(admin)).json()

    assert [m["vendorName"] for m in body] == ["Busy Co", "Quiet Co"]
    assert body[0]["profileViews"] == 1
    assert body[0]["demoRequests"] == 1
    assert body[0]["conversionRate"] == 0.0
    assert len(body[0]["monthlyTrend"]) == 6
    assert body[1]["lastActivityAt"] is None


def test_clear_cache_with_cache_disabled(client, admin, auth_headers):
    response = client.post("/admin/clear-cache", headers=auth_headers(admin))

    assert response.json() == {"status": "success", "keys_cleared": 0}


# Notifications


def add_notification(db_session, user, title, is_read=False):
    notification = Notification(
        user_id=user.id,
        type=NotificationType.DEMO_REQUEST.value,
        title=title,
        message=f"{title} message",
        is_read=is_read,
    )
    db_session.add(notification)
    db_session.commit()
    return notification


def test_list_and_mark_notifications(client, make_user, auth_headers, db_session):
    user = make_user()
    old = add_notification(db_session, user, "Old", is_read=True)
    new = add_notification(db_session, user, "New")
    headers = auth_headers(user)

    listed = client.get("/notifications", headers=headers).json()
    unread = client.get("/notifications", params={"unreadOnly": True}, headers=headers).json()

    assert [n["id"] for n in listed] == [new.id, old.id]
    assert [n["id"] for n in unread] == [new.id]

    marked = client.post(f"/notifications/{new.id}/read", headers=headers)
    assert marked.json()["isRead"] is True
    assert client.get("/notifications", params={"unreadOnly": True}, headers=headers).json() == []


def test_cannot_read_other_users_notification(client, make_user, auth_headers, db_session):
    notification = add_notification(db_session, make_user(), "Private")

    response = client.post(f"/notifications/{notification.id}/read", headers=auth_headers(make_user()))

    assert response.status_code == 404


# Health


def test_health_endpoints(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/live").json()["status"] == "alive"
    assert client.get("/ready").json()["status"] == "ready"


def test_status_reports_components(client):
    body = client.get("/status").json()

    assert body["status"] == "healthy"
    assert body["components"]["database"]["status"] == "healthy"
    assert body["components"]["redis"] == {"status": "disabled"}
    assert body["cache"]["enabled"] is False


def test_metrics_counts_requests(client):
    client.get("/health")
    client.get("/vendor/12345")

    body = client.get("/metrics").json()

    assert body["requests"]["total"] >= 2
    assert body["requests"]["by_status"]["4xx"] >= 1
    assert body["requests"]["by_area"]["vendor"] >= 1


def test_root_lists_service(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["x-response-time"].endswith("ms")


# Mock data


def test_seed_marketplace(client, db_session):
    counts = seed_marketplace(db_session)

    assert counts["vendors"] == 5
    assert counts["claims"] == 1
    assert seed_marketplace(db_session) == {}

    coretech = db_session.query(Vendor).filter(Vendor.company_name == "CoreTech Solutions").one()
    assert coretech.owner is not None
    assert len(coretech.documents) == 7

    signin = client.post(
        "/auth/signin", json={"email": "admin@haystackfi.com", "password": DEMO_PASSWORD}
    )
    assert signin.status_code == 200
    assert signin.json()["user"]["role"] == "admin"

    results = client.get("/vendor/search", params={"q": "coretech"}).json()
    assert results["vendors"][0]["companyName"] == "CoreTech Solutions"
    assert db_session.query(User).count() == counts["users"]


def test_products_from_mock_data(client, db_session):
    seed_marketplace(db_session)

    listed = client.get("/products").json()
    core = client.get("/products", params={"q": "core"}).json()

    assert listed["total"] == 2
    assert [p["name"] for p in listed["items"]] == ["CoreBanking Pro", "SecureBank Mobile"]
    assert [p["slug"] for p in core["items"]] == ["corebanking-pro"]
    assert core["hasMore"] is False

    product_id = core["items"][0]["id"]
    assert client.get(f"/products/{product_id}").json()["version"] == "3.2.1"
    assert client.get("/products/999").status_code == 404
