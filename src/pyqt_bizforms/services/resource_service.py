"""
Base class for tenant-scoped table resources.

Each concrete service names its table and labels; the base provides fetch,
create, update and delete with the same scoping, ordering and notification
rules. Backend errors are caught at the call site, reported as one
destructive notification carrying the backend message verbatim, and turned
into an empty/None/False return. Nothing is retried.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from pyqt_bizforms.core.fetch_generation import FetchGeneration
from pyqt_bizforms.protocols.table_client import QueryResult, TableClient, TableQuery

from .notification_service import NotificationCenter
from .tenant_context import TenantContext

logger = logging.getLogger(__name__)


class TableResourceService:
    """
    CRUD over one table for the signed-in user.

    Class attributes:
        table_name: Backend table
        label: Singular display name ("Customer")
        plural: Plural display name ("customers")
        order_column: Newest-first ordering column of fetch()
        organization_scoped: Filter and stamp rows with the selected organization
    """

    table_name: str = ""
    label: str = ""
    plural: str = ""
    order_column: str = "created_at"
    organization_scoped: bool = False

    def __init__(self, client: TableClient, tenant: TenantContext, notifications: NotificationCenter):
        self.client = client
        self.tenant = tenant
        self.notifications = notifications
        self.items: List[Dict[str, Any]] = []
        self._generation = FetchGeneration()

    # ========== QUERIES ==========

    def _scoped_query(self, **filters: Any) -> TableQuery:
        query = self.client.table(self.table_name).select("*").eq("user_id", self.tenant.user_id)
        if self.organization_scoped and self.tenant.selected_organization_id:
            query = query.eq("organization_id", self.tenant.selected_organization_id)
        for column, value in filters.items():
            if value is not None:
                query = query.eq(column, value)
        return query

    def _report_error(self, action: str, result: QueryResult) -> None:
        self.notifications.error(f"Error {action} {self.label.lower()}", result.error.message)

    def fetch(self, **filters: Any) -> List[Dict[str, Any]]:
        """
        Load the user's rows, newest first.

        Only the latest call publishes to ``items``; a response that arrives
        after a newer fetch started is returned but not stored.
        """
        if self.tenant.user_id is None:
            return []
        token = self._generation.begin()
        result = self._scoped_query(**filters).order(self.order_column, ascending=False).execute()
        if not result.ok:
            self.notifications.error(f"Error fetching {self.plural}", result.error.message)
            return []
        rows = list(result.data or [])
        if self._generation.is_current(token):
            self.items = rows
        else:
            logger.debug(f"Discarded stale {self.table_name} fetch (token {token})")
        return rows

    # ========== MUTATIONS ==========

    def _can_create(self) -> bool:
        if self.tenant.user_id is None:
            return False
        if self.organization_scoped and not self.tenant.selected_organization_id:
            logger.info(f"Cannot create {self.label.lower()}: no organization selected")
            return False
        return True

    def _owned_row(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        row = dict(data, user_id=self.tenant.user_id)
        if self.organization_scoped:
            row["organization_id"] = self.tenant.selected_organization_id
        return row

    def _insert(self, data: Mapping[str, Any]) -> QueryResult:
        return self.client.table(self.table_name).insert([self._owned_row(data)]).select().single().execute()

    def create(self, data: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        if not self._can_create():
            return None
        result = self._insert(data)
        if not result.ok:
            self._report_error("creating", result)
            return None
        row = result.data
        self.items.insert(0, row)
        self.notifications.notify(f"{self.label} created", f"{self.label} has been created successfully.")
        return row

    def update(self, row_id: str, updates: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        result = (
            self.client.table(self.table_name)
            .update(dict(updates))
            .eq("id", row_id)
            .eq("user_id", self.tenant.user_id)
            .select()
            .single()
            .execute()
        )
        if not result.ok:
            self._report_error("updating", result)
            return None
        row = result.data
        self.items = [row if item.get("id") == row_id else item for item in self.items]
        self.notifications.notify(f"{self.label} updated", f"{self.label} has been updated successfully.")
        return row

    def delete(self, row_id: str) -> bool:
        result = (
            self.client.table(self.table_name)
            .delete()
            .eq("id", row_id)
            .eq("user_id", self.tenant.user_id)
            .execute()
        )
        if not result.ok:
            self._report_error("deleting", result)
            return False
        self.items = [item for item in self.items if item.get("id") != row_id]
        self.notifications.notify(f"{self.label} deleted", f"{self.label} has been deleted successfully.")
        return True
