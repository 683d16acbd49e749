"""Invoices, and generating an invoice from selected purchases."""

import datetime
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from pyqt_bizforms.protocols import get_app_config
from pyqt_bizforms.protocols.table_client import TableClient

from .notification_service import NotificationCenter
from .resource_service import TableResourceService
from .tenant_context import TenantContext

logger = logging.getLogger(__name__)


class InvoiceService(TableResourceService):
    table_name = "invoices"
    label = "Invoice"
    plural = "invoices"
    organization_scoped = True

    items_table = "invoice_items"

    def __init__(
        self,
        client: TableClient,
        tenant: TenantContext,
        notifications: NotificationCenter,
        clock: Optional[Callable[[], datetime.datetime]] = None,
    ):
        super().__init__(client, tenant, notifications)
        self._clock = clock or datetime.datetime.now

    def fetch(self, customer_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return super().fetch(customer_id=customer_id)

    def generate_from_purchases(self, customer_id: str, purchase_ids: Sequence[str]) -> Optional[Dict[str, Any]]:
        """
        Create a draft invoice for the given purchases plus one item per purchase.

        subtotal = sum of purchase totals, tax = subtotal × configured tax
        rate, due date = today + configured due days. If the items cannot be
        inserted the invoice row is deleted again, so no invoice without
        items is left behind. Posts exactly one notification either way.

        Returns:
            The invoice row, or None on any failure
        """
        if self.tenant.user_id is None:
            return None
        if not purchase_ids:
            self.notifications.error("No purchases selected",
                                     "Please select at least one purchase to generate an invoice.")
            return None
        if not self._can_create():
            return None

        purchases_result = (
            self.client.table("purchases")
            .select("*")
            .in_("id", list(purchase_ids))
            .eq("user_id", self.tenant.user_id)
            .execute()
        )
        if not purchases_result.ok:
            self.notifications.error("Error generating invoice", purchases_result.error.message)
            return None
        purchases = purchases_result.data or []

        config = get_app_config()
        subtotal = sum(p.get("total_amount") or 0 for p in purchases)
        tax_amount = subtotal * config.default_tax_rate
        now = self._clock()
        invoice_number = f"{config.invoice_number_prefix}{int(now.timestamp() * 1000)}"
        invoice_result = self._insert({
            "customer_id": customer_id,
            "invoice_number": invoice_number,
            "invoice_date": now.isoformat(),
            "due_date": (now + datetime.timedelta(days=config.invoice_due_days)).isoformat(),
            "subtotal": subtotal,
            "tax_amount": tax_amount,
            "total_amount": subtotal + tax_amount,
            "status": "draft",
        })
        if not invoice_result.ok:
            self._report_error("creating", invoice_result)
            return None
        invoice = invoice_result.data

        invoice_items = [
            {
                "invoice_id": invoice["id"],
                "purchase_id": p["id"],
                "description": p.get("product_name"),
                "quantity": p.get("quantity"),
                "unit_price": p.get("unit_price"),
                "total_amount": p.get("total_amount"),
            }
            for p in purchases
        ]
        if invoice_items:
            items_result = self.client.table(self.items_table).insert(invoice_items).execute()
            if not items_result.ok:
                self._delete_orphan(invoice["id"])
                self.notifications.error("Error creating invoice items", items_result.error.message)
                return None

        self.items.insert(0, invoice)
        self.notifications.notify("Invoice generated successfully", f"Invoice {invoice_number} has been created.")
        logger.info(f"Generated {invoice_number} from {len(invoice_items)} purchase(s)")
        return invoice

    def _delete_orphan(self, invoice_id: str) -> None:
        result = self.client.table(self.table_name).delete().eq("id", invoice_id).execute()
        if not result.ok:
            logger.error(f"Could not remove invoice {invoice_id} after item insert failed: {result.error.message}")
