"""Tests for administrator statistics, coupons and routing."""

import datetime

import pytest

from pyqt_bizforms.exceptions import BackendError
from pyqt_bizforms.services.admin_service import AdminService, OrganizationStats
from pyqt_bizforms.services.coupon_service import (
    ACTIVE, EXPIRED, INACTIVE, USED_UP, CouponService, coupon_status,
)
from pyqt_bizforms.services.route_service import AUTH_PATH, DASHBOARD_PATH, NOT_FOUND_VIEW, resolve_route
from pyqt_bizforms.services.tenant_context import Session

NOW = datetime.datetime(2024, 6, 1, 12, 0, tzinfo=datetime.timezone.utc)


@pytest.fixture
def org_client(client):
    client.tables.update({
        "organizations": [
            {"id": "o1", "name": "North", "created_at": "2024-01-01", "_seq": 0},
            {"id": "o2", "name": "South", "created_at": "2024-02-01", "_seq": 1},
        ],
        "customers": [
            {"id": "c1", "organization_id": "o1", "_seq": 0},
            {"id": "c2", "organization_id": "o1", "_seq": 1},
            {"id": "c3", "organization_id": "o2", "_seq": 2},
        ],
        "invoices": [
            {"id": "i1", "organization_id": "o1", "total_amount": 110.0, "_seq": 0},
        ],
        "purchases": [
            {"id": "p1", "organization_id": "o1", "total_amount": 40.0, "_seq": 0},
            {"id": "p2", "organization_id": "o2", "total_amount": 15.0, "_seq": 1},
        ],
        "admin_users": [{"id": "a1", "user_id": "root", "_seq": 0}],
    })
    return client


# ========== ADMIN ==========

def test_is_admin(org_client, notifications):
    admin = AdminService(org_client, notifications)
    assert admin.is_admin("root")
    assert not admin.is_admin("user-1")
    assert not admin.is_admin(None)


def test_organization_stats(org_client, notifications):
    stats = AdminService(org_client, notifications).organization_stats(["o1", "o2"])

    assert stats["o1"] == OrganizationStats(customers=2, invoices=1, purchases=1, total_revenue=150.0)
    assert stats["o2"] == OrganizationStats(customers=1, invoices=0, purchases=1, total_revenue=15.0)
    assert list(stats) == ["o1", "o2"]


def test_organization_stats_all_or_nothing(org_client, notifications):
    org_client.fail("invoices", "statement timeout", operation="select")
    with pytest.raises(BackendError, match="statement timeout"):
        AdminService(org_client, notifications, max_workers=2).organization_stats(["o1", "o2"])


def test_load_organizations_and_totals(org_client, notifications):
    admin = AdminService(org_client, notifications)

    assert admin.load_organizations() is True

    assert [o["id"] for o in admin.organizations] == ["o2", "o1"]
    assert admin.total_stats() == OrganizationStats(customers=3, invoices=1, purchases=2, total_revenue=165.0)
    assert notifications.history == []


def test_load_organizations_failure_notifies_once(org_client, notifications):
    admin = AdminService(org_client, notifications)
    org_client.fail("purchases", "relation does not exist")

    assert admin.load_organizations() is False

    assert admin.organizations == []
    assert admin.stats == {}
    assert len(notifications.history) == 1
    assert notifications.last.title == "Error loading organizations"


def test_update_and_delete_organization(org_client, notifications):
    admin = AdminService(org_client, notifications)

    assert admin.update_organization("o1", "North East", "Merged")
    assert org_client.rows("organizations")[0]["name"] == "North East"
    assert notifications.last.title == "Organization updated"

    assert admin.delete_organization("o2")
    assert [o["id"] for o in admin.organizations] == ["o1"]
    assert notifications.last.title == "Organization deleted"



# ========== SUBSCRIPTIONS ==========

@pytest.fixture
def subscription_client(client):
    client.tables.update({
        "subscription_plans": [
            {"id": "plan-pro", "name": "Pro", "price_monthly": 49.0, "_seq": 0},
            {"id": "plan-basic", "name": "Basic", "price_monthly": 9.0, "_seq": 1},
        ],
        "user_subscriptions": [
            {"id": "s1", "user_id": "alice", "plan_id": "plan-basic", "status": "trial",
             "created_at": "2024-01-01", "_seq": 0},
            {"id": "s2", "user_id": "bob", "plan_id": "plan-pro", "status": "active",
             "created_at": "2024-02-01", "_seq": 1},
        ],
    })
    return client


def test_load_subscriptions_attaches_plans(subscription_client, notifications):
    admin = AdminService(subscription_client, notifications)

    assert admin.load_subscriptions()

    assert [s["id"] for s in admin.subscriptions] == ["s2", "s1"]
    assert admin.subscriptions[0]["plan"]["name"] == "Pro"
    assert [p["id"] for p in admin.plans] == ["plan-basic", "plan-pro"]
    assert [s["id"] for s in admin.search_subscriptions("BASIC")] == ["s1"]
    assert [s["id"] for s in admin.search_subscriptions("bob")] == ["s2"]


def test_update_subscription_status(subscription_client, notifications):
    admin = AdminService(subscription_client, notifications)

    assert admin.update_subscription_status("s1", "active")

    assert subscription_client.rows("user_subscriptions")[0]["status"] == "active"
    assert {s["id"]: s["status"] for s in admin.subscriptions}["s1"] == "active"
    assert notifications.last.title == "Subscription updated"
    assert notifications.last.description == "Status changed to active"


def test_subscription_errors_notify(subscription_client, notifications):
    admin = AdminService(subscription_client, notifications)
    subscription_client.fail("user_subscriptions", "permission denied", operation="update")
    assert not admin.update_subscription_status("s1", "cancelled")
    assert notifications.last.title == "Error updating subscription"

    subscription_client.fail("subscription_plans", "timeout", operation="select")
    assert not admin.load_subscriptions()
    assert notifications.last.title == "Error loading subscription data"
    assert notifications.last.description == "timeout"


# ========== COUPONS ==========

@pytest.mark.parametrize("coupon, expected", [
    ({"is_active": False, "expires_at": "2020-01-01"}, INACTIVE),
    ({"is_active": True, "expires_at": "2024-05-31"}, EXPIRED),
    ({"is_active": True, "expires_at": "2024-06-01T11:59:00Z"}, EXPIRED),
    ({"is_active": True, "expires_at": "2024-12-31", "max_uses": 5, "current_uses": 5}, USED_UP),
    ({"is_active": True, "expires_at": "2020-01-01", "max_uses": 5, "current_uses": 5}, EXPIRED),
    ({"is_active": True, "max_uses": 5, "current_uses": 4}, ACTIVE),
    ({"is_active": True, "expires_at": None, "max_uses": None, "current_uses": 80}, ACTIVE),
])
def test_coupon_status(coupon, expected):
    assert coupon_status(coupon, NOW) == expected


def test_coupon_crud_reloads_list(client, notifications):
    coupons = CouponService(client, notifications)

    assert coupons.create({"code": "SAVE10", "discount_type": "percentage", "discount_value": 10,
                           "is_active": True, "ignored": "x"})
    row = coupons.coupons[0]
    assert row["current_uses"] == 0
    assert row["created_by"] == "admin"
    assert "ignored" not in row
    assert notifications.last.title == "Coupon created"

    assert coupons.update(row["id"], dict(row, code="SAVE15"))
    assert coupons.search("save15")[0]["id"] == row["id"]
    assert coupons.search("nothing") == []

    assert coupons.delete(row["id"])
    assert coupons.coupons == []
    assert notifications.last.title == "Coupon deleted"


def test_coupon_errors_notify(client, notifications):
    client.fail("coupons", "unique violation", operation="insert")
    assert CouponService(client, notifications).create({"code": "DUP"}) is False
    assert notifications.last.title == "Error creating coupon"
    assert notifications.last.description == "unique violation"


# ========== ROUTES ==========

def test_protected_routes_redirect_to_auth():
    decision = resolve_route("/app/customers", None)
    assert not decision.allowed
    assert decision.redirect == AUTH_PATH


def test_routes_with_session():
    session = Session(user_id="user-1")

    assert resolve_route("/", session).view == "organization_selection"
    assert resolve_route("/app", session).view == "dashboard"
    assert resolve_route("/app/invoices/?tab=open", session).view == "invoices"

    detail = resolve_route("/customer/c-42", session)
    assert detail.view == "customer_detail"
    assert detail.params == {"id": "c-42"}


def test_admin_route_needs_admin_role():
    session = Session(user_id="user-1")
    assert resolve_route("/admin", session).redirect == DASHBOARD_PATH
    assert resolve_route("/admin", session, is_admin=True).view == "admin_dashboard"
    assert resolve_route("/admin", None, is_admin=True).redirect == AUTH_PATH


def test_public_and_unknown_routes():
    assert resolve_route("/pricing", None).view == "pricing"
    assert resolve_route("/landing#features", None).view == "landing"
    assert resolve_route("/does/not/exist", None).view == NOT_FOUND_VIEW
