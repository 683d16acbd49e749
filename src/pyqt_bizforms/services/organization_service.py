"""The signed-in user's own organizations."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from pyqt_bizforms.core.fetch_generation import FetchGeneration
from pyqt_bizforms.forms.form_config_types import FormSelectOption
from pyqt_bizforms.protocols.table_client import TableClient

from .notification_service import NotificationCenter
from .subscription_service import SubscriptionService
from .tenant_context import TenantContext

logger = logging.getLogger(__name__)


class OrganizationService:
    """
    List and create organizations owned by the user.

    Creation is gated by the user's subscription: it needs a trial or active
    subscription, and the number of owned organizations must stay below the
    plan's limit. The subscription is read as last fetched by
    ``subscriptions``; call its fetch_subscription() after sign-in.
    """

    def __init__(
        self,
        client: TableClient,
        tenant: TenantContext,
        notifications: NotificationCenter,
        subscriptions: SubscriptionService,
    ):
        self.client = client
        self.tenant = tenant
        self.notifications = notifications
        self.subscriptions = subscriptions
        self.organizations: List[Dict[str, Any]] = []
        self._generation = FetchGeneration()

    def fetch(self) -> List[Dict[str, Any]]:
        """
        Load the user's organizations ordered by name.

        When nothing is selected yet and the user owns exactly one
        organization, that one becomes the selection.
        """
        if self.tenant.user_id is None:
            return []
        token = self._generation.begin()
        result = (
            self.client.table("organizations")
            .select("*")
            .eq("user_id", self.tenant.user_id)
            .order("name")
            .execute()
        )
        if not result.ok:
            self.notifications.error("Error loading organizations", result.error.message)
            return []
        rows = list(result.data or [])
        if not self._generation.is_current(token):
            logger.debug(f"Discarded stale organizations fetch (token {token})")
            return rows

        self.organizations = rows
        if self.tenant.selected_organization_id is None and len(rows) == 1:
            self.tenant.select_organization(rows[0]["id"])
        return rows

    def remaining_slots(self) -> int:
        return max(self.subscriptions.organization_limit() - len(self.organizations), 0)

    def can_create(self) -> bool:
        return self.subscriptions.can_create_organization() and self.remaining_slots() > 0

    def create(self, data: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Insert an organization from form data (``name``, ``description``)
        and select it.

        Returns None without touching the backend when the name is blank or
        the user is signed out; a subscription or limit refusal is notified.
        """
        name = (data.get("name") or "").strip()
        if self.tenant.user_id is None or not name:
            return None
        if not self.subscriptions.can_create_organization():
            self.notifications.error("Cannot create organization",
                                     "An active subscription is required to create organizations.")
            return None
        if self.remaining_slots() == 0:
            limit = self.subscriptions.organization_limit()
            self.notifications.error("Organization limit reached",
                                     f"Your plan allows {limit} organization(s).")
            return None

        description = (data.get("description") or "").strip() or None
        result = (
            self.client.table("organizations")
            .insert({"name": name, "description": description, "user_id": self.tenant.user_id})
            .select()
            .single()
            .execute()
        )
        if not result.ok:
            self.notifications.error("Error creating organization", result.error.message)
            return None

        organization = result.data
        self.organizations.append(organization)
        self.tenant.select_organization(organization["id"])
        self.notifications.notify("Organization created", f"{organization['name']} has been created successfully.")
        return organization

    def as_options(self) -> List[FormSelectOption]:
        return [FormSelectOption(value=o["id"], label=o.get("name") or o["id"]) for o in self.organizations]
