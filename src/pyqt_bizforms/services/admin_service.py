"""Administrator checks, organization statistics and subscription management."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from pyqt_bizforms.exceptions import BackendError
from pyqt_bizforms.protocols import get_app_config
from pyqt_bizforms.protocols.table_client import NO_ROWS_CODE, TableClient

from .notification_service import NotificationCenter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrganizationStats:
    customers: int = 0
    invoices: int = 0
    purchases: int = 0
    total_revenue: float = 0.0

    def __add__(self, other: "OrganizationStats") -> "OrganizationStats":
        return OrganizationStats(
            self.customers + other.customers,
            self.invoices + other.invoices,
            self.purchases + other.purchases,
            self.total_revenue + other.total_revenue,
        )


class AdminService:
    def __init__(self, client: TableClient, notifications: NotificationCenter, max_workers: Optional[int] = None):
        self.client = client
        self.notifications = notifications
        self.max_workers = max_workers or get_app_config().stats_max_workers
        self.organizations: List[Dict[str, Any]] = []
        self.stats: Dict[str, OrganizationStats] = {}
        self.subscriptions: List[Dict[str, Any]] = []
        self.plans: List[Dict[str, Any]] = []

    def is_admin(self, user_id: Optional[str]) -> bool:
        """True if user_id has an admin_users row; lookup errors count as not admin."""
        if user_id is None:
            return False
        result = self.client.table("admin_users").select("*").eq("user_id", user_id).single().execute()
        if not result.ok:
            if result.error.code != NO_ROWS_CODE:
                logger.error(f"Error checking admin status: {result.error.message}")
            return False
        return result.data is not None

    # ========== ORGANIZATION STATISTICS ==========

    def _count_rows(self, table: str, columns: str, organization_id: str) -> List[Dict[str, Any]]:
        result = self.client.table(table).select(columns).eq("organization_id", organization_id).execute()
        return result.raise_for_error() or []

    def _stats_for(self, organization_id: str) -> OrganizationStats:
        customers = self._count_rows("customers", "id", organization_id)
        invoices = self._count_rows("invoices", "total_amount", organization_id)
        purchases = self._count_rows("purchases", "total_amount", organization_id)
        revenue = sum(row.get("total_amount") or 0 for row in invoices + purchases)
        return OrganizationStats(len(customers), len(invoices), len(purchases), revenue)

    def organization_stats(self, organization_ids: Sequence[str]) -> Dict[str, OrganizationStats]:
        """
        Statistics for every organization, gathered in parallel.

        All or nothing: the first failing query cancels the outstanding work
        and its BackendError propagates; no partial map is returned.
        """
        stats: Dict[str, OrganizationStats] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {pool.submit(self._stats_for, org_id): org_id for org_id in organization_ids}
            try:
                for future in as_completed(futures):
                    stats[futures[future]] = future.result()
            except BackendError:
                for future in futures:
                    future.cancel()
                raise
        return {org_id: stats[org_id] for org_id in organization_ids}

    def load_organizations(self) -> bool:
        """Load all organizations and their statistics; one notification on any failure."""
        try:
            result = self.client.table("organizations").select("*").order("created_at", ascending=False).execute()
            organizations = result.raise_for_error() or []
            stats = self.organization_stats([org["id"] for org in organizations])
        except BackendError as e:
            self.notifications.error("Error loading organizations", e.message)
            return False
        self.organizations = organizations
        self.stats = stats
        return True

    def total_stats(self) -> OrganizationStats:
        return sum(self.stats.values(), OrganizationStats())

    def update_organization(self, organization_id: str, name: str, description: Optional[str] = None) -> bool:
        result = (
            self.client.table("organizations")
            .update({"name": name, "description": description})
            .eq("id", organization_id)
            .execute()
        )
        if not result.ok:
            self.notifications.error("Error updating organization", result.error.message)
            return False
        self.load_organizations()
        self.notifications.notify("Organization updated", "Organization details have been saved")
        return True

    def delete_organization(self, organization_id: str) -> bool:
        result = self.client.table("organizations").delete().eq("id", organization_id).execute()
        if not result.ok:
            self.notifications.error("Error deleting organization", result.error.message)
            return False
        self.load_organizations()
        self.notifications.notify("Organization deleted", "Organization and all related data have been removed")
        return True

    # ========== SUBSCRIPTIONS ==========

    def load_subscriptions(self) -> bool:
        """All user subscriptions, newest first, each with its plan attached."""
        subscriptions_result = (
            self.client.table("user_subscriptions").select("*").order("created_at", ascending=False).execute()
        )
        plans_result = self.client.table("subscription_plans").select("*").order("price_monthly").execute()
        failed = subscriptions_result if not subscriptions_result.ok else plans_result
        if not failed.ok:
            self.notifications.error("Error loading subscription data", failed.error.message)
            return False

        self.plans = list(plans_result.data or [])
        plans_by_id = {plan["id"]: plan for plan in self.plans}
        self.subscriptions = [
            dict(subscription, plan=plans_by_id.get(subscription.get("plan_id")))
            for subscription in subscriptions_result.data or []
        ]
        return True

    def search_subscriptions(self, term: str) -> List[Dict[str, Any]]:
        """Loaded subscriptions whose user id or plan name contains term, ignoring case."""
        needle = term.lower()
        return [
            s for s in self.subscriptions
            if needle in str(s.get("user_id", "")).lower()
            or needle in str((s.get("plan") or {}).get("name", "")).lower()
        ]

    def update_subscription_status(self, subscription_id: str, status: str) -> bool:
        result = (
            self.client.table("user_subscriptions")
            .update({"status": status})
            .eq("id", subscription_id)
            .execute()
        )
        if not result.ok:
            self.notifications.error("Error updating subscription", result.error.message)
            return False
        self.load_subscriptions()
        self.notifications.notify("Subscription updated", f"Status changed to {status}")
        return True
