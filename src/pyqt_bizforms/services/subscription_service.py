"""Subscription plans and the user's current subscription."""

import logging
from typing import Any, Dict, List, Optional

from pyqt_bizforms.protocols import get_app_config
from pyqt_bizforms.protocols.table_client import NO_ROWS_CODE, TableClient

from .tenant_context import TenantContext

logger = logging.getLogger(__name__)

CURRENT_STATUSES = ("trial", "active")


class SubscriptionService:
    """
    Read-only view of plans and the user's subscription.

    Failures are logged, not notified: the pricing and limit checks fall
    back to "no subscription" defaults.
    """

    def __init__(self, client: TableClient, tenant: TenantContext):
        self.client = client
        self.tenant = tenant
        self.subscription: Optional[Dict[str, Any]] = None
        self.plans: List[Dict[str, Any]] = []

    def fetch_plans(self) -> List[Dict[str, Any]]:
        result = (
            self.client.table("subscription_plans")
            .select("*")
            .eq("is_active", True)
            .order("price_monthly")
            .execute()
        )
        if not result.ok:
            logger.error(f"Error fetching plans: {result.error.message}")
            return self.plans
        self.plans = list(result.data or [])
        return self.plans

    def fetch_subscription(self) -> Optional[Dict[str, Any]]:
        """Newest trial/active subscription of the user with its plan attached, or None."""
        if self.tenant.user_id is None:
            self.subscription = None
            return None

        result = (
            self.client.table("user_subscriptions")
            .select("*")
            .eq("user_id", self.tenant.user_id)
            .in_("status", CURRENT_STATUSES)
            .order("created_at", ascending=False)
            .limit(1)
            .single()
            .execute()
        )
        if not result.ok:
            if result.error.code != NO_ROWS_CODE:
                logger.error(f"Error fetching subscription: {result.error.message}")
            self.subscription = None
            return None

        subscription = dict(result.data)
        subscription["plan"] = self._fetch_plan(subscription.get("plan_id"))
        self.subscription = subscription
        return subscription

    def _fetch_plan(self, plan_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if plan_id is None:
            return None
        result = self.client.table("subscription_plans").select("*").eq("id", plan_id).single().execute()
        if not result.ok:
            logger.warning(f"Plan {plan_id} of current subscription not found: {result.error.message}")
            return None
        return result.data

    @property
    def plan(self) -> Optional[Dict[str, Any]]:
        return self.subscription.get("plan") if self.subscription else None

    def can_create_organization(self) -> bool:
        return self.subscription is not None and self.subscription.get("status") in CURRENT_STATUSES

    def organization_limit(self) -> int:
        if not self.plan:
            return get_app_config().default_organization_limit
        return self.plan["max_organizations"]

    def customer_limit(self) -> int:
        if not self.plan:
            return get_app_config().default_customer_limit
        return self.plan["max_customers_per_org"]

    def is_feature_available(self, feature: str) -> bool:
        if not self.plan:
            return False
        return feature in (self.plan.get("features") or [])
