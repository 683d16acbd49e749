"""
Simulated payment gateway.

Checkout sessions are JSON blobs in a key-value store under
``<payment_session_prefix><session id>``; a simulated successful payment
upserts the user's subscription (one row per user) for the billed period.
"""

import calendar
import datetime
import json
import logging
import uuid
from dataclasses import asdict, dataclass
from typing import Callable, Optional
from urllib.parse import urlencode

from pyqt_bizforms.exceptions import BackendError, PaymentSessionNotFound
from pyqt_bizforms.io.kv_store import KeyValueStore
from pyqt_bizforms.protocols import get_app_config
from pyqt_bizforms.protocols.table_client import TableClient

from .notification_service import NotificationCenter
from .tenant_context import TenantContext

logger = logging.getLogger(__name__)

BILLING_CYCLE_MONTHS = {"monthly": 1, "quarterly": 3, "annual": 12}
PRICE_COLUMNS = {"monthly": "price_monthly", "quarterly": "price_quarterly", "annual": "price_annual"}


def add_months(moment: datetime.datetime, months: int) -> datetime.datetime:
    """Same day N months later, clamped to the last day of a shorter month (Jan 31 + 1 → Feb 28/29)."""
    month_index = moment.month - 1 + months
    year, month = moment.year + month_index // 12, month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass
class PaymentSession:
    id: str
    url: str
    plan_id: str
    billing_cycle: str
    amount: float
    status: str = "pending"

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str) -> "PaymentSession":
        return cls(**json.loads(raw))


class PaymentService:
    """
    Example:
        session = payments.create_checkout_session(plan_id, "quarterly")
        payments.simulate_payment(session.id, success=True)
    """

    def __init__(
        self,
        client: TableClient,
        tenant: TenantContext,
        store: KeyValueStore,
        notifications: NotificationCenter,
        clock: Optional[Callable[[], datetime.datetime]] = None,
    ):
        self.client = client
        self.tenant = tenant
        self.store = store
        self.notifications = notifications
        self._clock = clock or datetime.datetime.now

    def _key(self, session_id: str) -> str:
        return f"{get_app_config().payment_session_prefix}{session_id}"

    def _save(self, session: PaymentSession) -> None:
        self.store.set(self._key(session.id), session.to_json())

    def get_session(self, session_id: str) -> PaymentSession:
        raw = self.store.get(self._key(session_id))
        if raw is None:
            raise PaymentSessionNotFound("Payment session not found")
        return PaymentSession.from_json(raw)

    def create_checkout_session(self, plan_id: str, billing_cycle: str = "monthly") -> PaymentSession:
        """
        Price the plan for the billing cycle and store a pending session.

        Raises:
            NotAuthenticatedError: No signed-in user
            ValueError: Unknown billing cycle
            BackendError: The plan could not be loaded
        """
        self.tenant.require_user()
        if billing_cycle not in PRICE_COLUMNS:
            raise ValueError(f"Unknown billing cycle '{billing_cycle}'")

        result = self.client.table("subscription_plans").select("*").eq("id", plan_id).single().execute()
        if not result.ok:
            self.notifications.error("Error creating checkout session", result.error.message)
            raise BackendError(result.error.message, result.error.code)

        amount = result.data[PRICE_COLUMNS[billing_cycle]]
        session_id = f"dummy_{int(self._clock().timestamp() * 1000)}_{uuid.uuid4().hex[:9]}"
        query = urlencode({"session_id": session_id, "plan_id": plan_id,
                           "billing_cycle": billing_cycle, "amount": amount})
        session = PaymentSession(
            id=session_id,
            url=f"/dummy-checkout?{query}",
            plan_id=plan_id,
            billing_cycle=billing_cycle,
            amount=amount,
        )
        self._save(session)
        self.notifications.notify("Checkout Session Created", "Redirecting to dummy payment gateway...")
        return session

    def simulate_payment(self, session_id: str, success: bool = True) -> PaymentSession:
        """
        Complete or fail a pending session.

        On success the user's subscription row is upserted (conflict on
        user_id) as active for one billing period starting now.

        Raises:
            PaymentSessionNotFound: No stored session with this id
            BackendError: The subscription upsert failed
        """
        try:
            session = self.get_session(session_id)
        except PaymentSessionNotFound as e:
            self.notifications.error("Error processing payment", str(e))
            raise

        if not success:
            session.status = "failed"
            self._save(session)
            self.notifications.error("Payment Failed", "Your payment could not be processed. Please try again.")
            return session

        period_start = self._clock()
        period_end = add_months(period_start, BILLING_CYCLE_MONTHS[session.billing_cycle])
        result = (
            self.client.table("user_subscriptions")
            .upsert({
                "user_id": self.tenant.user_id,
                "plan_id": session.plan_id,
                "status": "active",
                "billing_cycle": session.billing_cycle,
                "current_period_start": period_start.isoformat(),
                "current_period_end": period_end.isoformat(),
            }, on_conflict="user_id")
            .execute()
        )
        if not result.ok:
            self.notifications.error("Error processing payment", result.error.message)
            raise BackendError(result.error.message, result.error.code)

        session.status = "completed"
        self._save(session)
        logger.info(f"Payment session {session_id} completed for plan {session.plan_id}")
        self.notifications.notify("Payment Successful!",
                                  f"Your {session.billing_cycle} subscription has been activated.")
        return session

    def create_portal_session(self) -> str:
        user_id = self.tenant.require_user()
        self.notifications.notify("Customer Portal", "Redirecting to subscription management...")
        return f"/dummy-portal?{urlencode({'user_id': user_id})}"
