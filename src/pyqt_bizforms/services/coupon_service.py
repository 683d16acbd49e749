"""Coupon administration."""

import datetime
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from pyqt_bizforms.protocols.table_client import TableClient

from .notification_service import NotificationCenter

logger = logging.getLogger(__name__)

ACTIVE = "Active"
INACTIVE = "Inactive"
EXPIRED = "Expired"
USED_UP = "Used Up"

COUPON_FIELDS = ("code", "discount_type", "discount_value", "max_uses", "expires_at", "is_active")


def _parse_moment(value: Any) -> Optional[datetime.datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day, tzinfo=datetime.timezone.utc)
    text = str(value).replace("Z", "+00:00")
    moment = datetime.datetime.fromisoformat(text)
    if len(text) == 10:
        # Date-only strings mean midnight UTC
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    return moment


def coupon_status(coupon: Mapping[str, Any], now: Optional[datetime.datetime] = None) -> str:
    """
    Inactive beats Expired beats Used Up beats Active.

    A coupon without expiry never expires and one without max_uses is never
    used up.
    """
    if not coupon.get("is_active"):
        return INACTIVE

    expires_at = _parse_moment(coupon.get("expires_at"))
    if expires_at is not None:
        if expires_at.tzinfo is not None:
            current = now.astimezone() if now is not None else datetime.datetime.now(datetime.timezone.utc)
        else:
            current = now.replace(tzinfo=None) if now is not None else datetime.datetime.now()
        if expires_at < current:
            return EXPIRED

    max_uses = coupon.get("max_uses")
    if max_uses is not None and (coupon.get("current_uses") or 0) >= max_uses:
        return USED_UP
    return ACTIVE


class CouponService:
    """Admin-wide coupon list; mutations reload the list."""

    def __init__(self, client: TableClient, notifications: NotificationCenter):
        self.client = client
        self.notifications = notifications
        self.coupons: List[Dict[str, Any]] = []

    def fetch(self) -> List[Dict[str, Any]]:
        result = self.client.table("coupons").select("*").order("created_at", ascending=False).execute()
        if not result.ok:
            self.notifications.error("Error loading coupons", result.error.message)
            return self.coupons
        self.coupons = list(result.data or [])
        return self.coupons

    def search(self, term: str) -> List[Dict[str, Any]]:
        term = term.lower()
        return [c for c in self.coupons if term in str(c.get("code", "")).lower()]

    def statuses(self, now: Optional[datetime.datetime] = None) -> Dict[str, str]:
        return {c["id"]: coupon_status(c, now) for c in self.coupons}

    @staticmethod
    def _editable(data: Mapping[str, Any]) -> Dict[str, Any]:
        return {key: data.get(key) for key in COUPON_FIELDS}

    def create(self, data: Mapping[str, Any]) -> bool:
        row = dict(self._editable(data), current_uses=0, created_by="admin")
        result = self.client.table("coupons").insert([row]).execute()
        if not result.ok:
            self.notifications.error("Error creating coupon", result.error.message)
            return False
        self.fetch()
        self.notifications.notify("Coupon created", "New coupon has been added successfully")
        return True

    def update(self, coupon_id: str, data: Mapping[str, Any]) -> bool:
        result = self.client.table("coupons").update(self._editable(data)).eq("id", coupon_id).execute()
        if not result.ok:
            self.notifications.error("Error updating coupon", result.error.message)
            return False
        self.fetch()
        self.notifications.notify("Coupon updated", "Coupon details have been saved")
        return True

    def delete(self, coupon_id: str) -> bool:
        result = self.client.table("coupons").delete().eq("id", coupon_id).execute()
        if not result.ok:
            self.notifications.error("Error deleting coupon", result.error.message)
            return False
        self.fetch()
        self.notifications.notify("Coupon deleted", "Coupon has been removed from the system")
        return True
