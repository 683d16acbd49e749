"""Customer comments on a purchase."""

import logging
from typing import Any, Dict, List, Optional

from pyqt_bizforms.protocols.table_client import TableClient

from .notification_service import NotificationCenter

logger = logging.getLogger(__name__)


class CommentService:
    """Comments of one purchase at a time, newest first.

    Fetch failures are only logged; adding a comment notifies either way.
    """

    def __init__(self, client: TableClient, notifications: NotificationCenter):
        self.client = client
        self.notifications = notifications
        self.purchase_id: Optional[str] = None
        self.comments: List[Dict[str, Any]] = []

    def fetch(self, purchase_id: str) -> List[Dict[str, Any]]:
        result = (
            self.client.table("customer_comments")
            .select("*")
            .eq("purchase_id", purchase_id)
            .order("created_at", ascending=False)
            .execute()
        )
        if not result.ok:
            logger.error(f"Error fetching comments of purchase {purchase_id}: {result.error.message}")
            return self.comments if self.purchase_id == purchase_id else []
        self.purchase_id = purchase_id
        self.comments = list(result.data or [])
        return self.comments

    def add(self, purchase_id: str, customer_id: Optional[str], comment: str) -> Optional[Dict[str, Any]]:
        text = (comment or "").strip()
        if not text or customer_id is None:
            return None

        result = (
            self.client.table("customer_comments")
            .insert([{"purchase_id": purchase_id, "customer_id": customer_id, "comment": text}])
            .select()
            .single()
            .execute()
        )
        if not result.ok:
            self.notifications.error("Error adding comment", result.error.message)
            return None

        row = result.data
        if self.purchase_id == purchase_id:
            self.comments.insert(0, row)
        self.notifications.notify("Comment added", "Your comment has been added successfully")
        return row
