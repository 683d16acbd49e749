"""Purchases of the signed-in user in the selected organization."""

from typing import Any, Dict, List, Optional

from .resource_service import TableResourceService


class PurchaseService(TableResourceService):
    table_name = "purchases"
    label = "Purchase"
    plural = "purchases"
    order_column = "purchase_date"
    organization_scoped = True

    def fetch(self, customer_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return super().fetch(customer_id=customer_id)
