"""Tests for the user's organizations and purchase comments."""

import pytest

from pyqt_bizforms.services.comment_service import CommentService
from pyqt_bizforms.services.organization_service import OrganizationService
from pyqt_bizforms.services.subscription_service import SubscriptionService
from pyqt_bizforms.services.tenant_context import Session, TenantContext


def _subscribe(client, user_id, max_organizations=2, status="active"):
    client.tables["subscription_plans"] = [
        {"id": "plan-basic", "name": "Basic", "price_monthly": 9.0, "max_organizations": max_organizations,
         "max_customers_per_org": 250, "is_active": True, "_seq": 0},
    ]
    client.tables["user_subscriptions"] = [
        {"id": "s1", "user_id": user_id, "plan_id": "plan-basic", "status": status,
         "created_at": "2024-01-01", "_seq": 0},
    ]


@pytest.fixture
def fresh_tenant(store):
    return TenantContext(store, Session(user_id="user-1"))


@pytest.fixture
def subscriptions(client, fresh_tenant):
    return SubscriptionService(client, fresh_tenant)


# ========== ORGANIZATIONS ==========

def test_fetch_own_organizations_by_name(client, fresh_tenant, notifications, subscriptions):
    client.tables["organizations"] = [
        {"id": "o1", "name": "Zeta", "user_id": "user-1", "_seq": 0},
        {"id": "o2", "name": "Alpha", "user_id": "user-1", "_seq": 1},
        {"id": "o3", "name": "Beta", "user_id": "someone-else", "_seq": 2},
    ]
    service = OrganizationService(client, fresh_tenant, notifications, subscriptions)

    assert [o["name"] for o in service.fetch()] == ["Alpha", "Zeta"]
    assert fresh_tenant.selected_organization_id is None
    assert [(o.value, o.label) for o in service.as_options()] == [("o2", "Alpha"), ("o1", "Zeta")]


def test_single_organization_is_selected(client, fresh_tenant, notifications, subscriptions):
    client.tables["organizations"] = [{"id": "o1", "name": "Only", "user_id": "user-1", "_seq": 0}]

    OrganizationService(client, fresh_tenant, notifications, subscriptions).fetch()

    assert fresh_tenant.selected_organization_id == "o1"


def test_fetch_failure_notifies(client, fresh_tenant, notifications, subscriptions):
    client.fail("organizations", "permission denied", operation="select")

    assert OrganizationService(client, fresh_tenant, notifications, subscriptions).fetch() == []
    assert notifications.last.title == "Error loading organizations"
    assert notifications.last.description == "permission denied"


def test_create_organization_selects_it(client, fresh_tenant, notifications, subscriptions):
    _subscribe(client, "user-1")
    subscriptions.fetch_subscription()
    service = OrganizationService(client, fresh_tenant, notifications, subscriptions)
    service.fetch()

    row = service.create({"name": "  North  ", "description": "  "})

    assert row["name"] == "North"
    assert row["description"] is None
    assert row["user_id"] == "user-1"
    assert fresh_tenant.selected_organization_id == row["id"]
    assert service.organizations == [row]
    assert notifications.last.title == "Organization created"
    assert notifications.last.description == "North has been created successfully."


def test_create_requires_subscription(client, fresh_tenant, notifications, subscriptions):
    service = OrganizationService(client, fresh_tenant, notifications, subscriptions)

    assert not service.can_create()
    assert service.create({"name": "North"}) is None
    assert client.rows("organizations") == []
    assert notifications.last.title == "Cannot create organization"


def test_create_respects_plan_limit(client, fresh_tenant, notifications, subscriptions):
    _subscribe(client, "user-1", max_organizations=1)
    client.tables["organizations"] = [{"id": "o1", "name": "Only", "user_id": "user-1", "_seq": 0}]
    subscriptions.fetch_subscription()
    service = OrganizationService(client, fresh_tenant, notifications, subscriptions)
    service.fetch()

    assert service.remaining_slots() == 0
    assert service.create({"name": "Second"}) is None
    assert len(client.rows("organizations")) == 1
    assert notifications.last.title == "Organization limit reached"


def test_blank_name_is_ignored(client, fresh_tenant, notifications, subscriptions):
    _subscribe(client, "user-1")
    subscriptions.fetch_subscription()

    assert OrganizationService(client, fresh_tenant, notifications, subscriptions).create({"name": " "}) is None
    assert notifications.history == []


def test_create_failure_notifies(client, fresh_tenant, notifications, subscriptions):
    _subscribe(client, "user-1")
    subscriptions.fetch_subscription()
    client.fail("organizations", "duplicate key value", operation="insert")

    assert OrganizationService(client, fresh_tenant, notifications, subscriptions).create({"name": "North"}) is None
    assert notifications.last.title == "Error creating organization"
    assert fresh_tenant.selected_organization_id is None


# ========== COMMENTS ==========

def test_comments_newest_first_per_purchase(client, notifications):
    client.tables["customer_comments"] = [
        {"id": "k1", "purchase_id": "p1", "comment": "first", "created_at": "2024-01-01", "_seq": 0},
        {"id": "k2", "purchase_id": "p1", "comment": "second", "created_at": "2024-01-02", "_seq": 1},
        {"id": "k3", "purchase_id": "p2", "comment": "other", "created_at": "2024-01-03", "_seq": 2},
    ]

    comments = CommentService(client, notifications).fetch("p1")

    assert [c["id"] for c in comments] == ["k2", "k1"]


def test_add_comment_prepends_and_notifies(client, notifications):
    service = CommentService(client, notifications)
    service.fetch("p1")

    row = service.add("p1", "c1", "  Arrived on time  ")

    assert row["comment"] == "Arrived on time"
    assert row["customer_id"] == "c1"
    assert service.comments[0]["id"] == row["id"]
    assert notifications.last.title == "Comment added"


def test_blank_comment_or_missing_customer_is_ignored(client, notifications):
    service = CommentService(client, notifications)

    assert service.add("p1", "c1", "   ") is None
    assert service.add("p1", None, "hello") is None
    assert client.rows("customer_comments") == []


def test_comment_errors(client, notifications):
    service = CommentService(client, notifications)
    client.fail("customer_comments", "timeout")

    assert service.fetch("p1") == []
    assert notifications.history == []

    assert service.add("p1", "c1", "hello") is None
    assert notifications.last.title == "Error adding comment"
    assert notifications.last.description == "timeout"
