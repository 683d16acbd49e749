"""Demo launcher: the dashboard forms over an in-memory backend."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date

from PyQt6.QtWidgets import QApplication, QMainWindow, QScrollArea, QTabWidget

from pyqt_bizforms.core.log_utils import configure_logging
from pyqt_bizforms.forms.form_configs import (
    coupon_form_config,
    customer_form_config,
    invoice_form_config,
    organization_form_config,
    purchase_form_config,
)
from pyqt_bizforms.forms.universal_form import UniversalForm
from pyqt_bizforms.io import InMemoryKeyValueStore, InMemoryTableClient
from pyqt_bizforms.services.coupon_service import CouponService
from pyqt_bizforms.services.customer_service import CustomerService
from pyqt_bizforms.services.invoice_service import InvoiceService
from pyqt_bizforms.services.notification_service import NotificationCenter
from pyqt_bizforms.services.organization_service import OrganizationService
from pyqt_bizforms.services.purchase_service import PurchaseService
from pyqt_bizforms.services.subscription_service import SubscriptionService
from pyqt_bizforms.services.tenant_context import Session, TenantContext

logger = logging.getLogger(__name__)

DEMO_USER = "demo-user"
DEMO_ORGANIZATION = "demo-org"


def seed_backend() -> InMemoryTableClient:
    return InMemoryTableClient({
        "organizations": [{"id": DEMO_ORGANIZATION, "name": "Demo Organization", "user_id": DEMO_USER}],
        "customers": [
            {"id": "cust-1", "name": "Ada Lovelace", "email": "ada@example.com", "user_id": DEMO_USER,
             "organization_id": DEMO_ORGANIZATION, "status": "active"},
            {"id": "cust-2", "name": "Grace Hopper", "email": "grace@example.com", "user_id": DEMO_USER,
             "organization_id": DEMO_ORGANIZATION, "status": "active"},
        ],
        "subscription_plans": [
            {"id": "plan-demo", "name": "Demo", "price_monthly": 0.0, "max_organizations": 3,
             "max_customers_per_org": 100, "features": ["reports"], "is_active": True},
        ],
        "user_subscriptions": [
            {"id": "sub-demo", "user_id": DEMO_USER, "plan_id": "plan-demo", "status": "trial"},
        ],
    })


class DemoWindow(QMainWindow):
    """One tab per form; notifications go to the status bar."""

    def __init__(self, client: InMemoryTableClient):
        super().__init__()
        self.setWindowTitle("pyqt-bizforms demo")
        self.notifications = NotificationCenter(parent=self)
        self.notifications.notification_posted.connect(
            lambda n: self.statusBar().showMessage(f"{n.title}: {n.description}", 5000))

        tenant = TenantContext(InMemoryKeyValueStore(), Session(user_id=DEMO_USER))
        tenant.select_organization(DEMO_ORGANIZATION)
        self.customers = CustomerService(client, tenant, self.notifications)
        self.purchases = PurchaseService(client, tenant, self.notifications)
        self.invoices = InvoiceService(client, tenant, self.notifications)
        self.coupons = CouponService(client, self.notifications)
        self.subscriptions = SubscriptionService(client, tenant)
        self.organizations = OrganizationService(client, tenant, self.notifications, self.subscriptions)
        self.subscriptions.fetch_subscription()
        self.organizations.fetch()
        self.customers.fetch()
        options = self.customers.as_options()

        tabs = QTabWidget()
        tabs.addTab(self._scroll(UniversalForm(customer_form_config(), on_submit=self.customers.create)),
                    "Customer")
        tabs.addTab(self._scroll(UniversalForm(purchase_form_config().with_options("customer_id", options),
                                               on_submit=self.purchases.create,
                                               run_submit_in_background=True)), "Purchase")
        invoice_form = UniversalForm(invoice_form_config().with_options("customer_id", options),
                                     on_submit=self.invoices.create)
        invoice_form.update_parameter("invoice_number", f"INV-{date.today():%Y%m%d}-001")
        tabs.addTab(self._scroll(invoice_form), "Invoice")
        tabs.addTab(self._scroll(UniversalForm(coupon_form_config(), on_submit=self.coupons.create)), "Coupon")
        tabs.addTab(self._scroll(UniversalForm(organization_form_config(), on_submit=self.organizations.create)),
                    "Organization")
        self.setCentralWidget(tabs)

    @staticmethod
    def _scroll(form: UniversalForm) -> QScrollArea:
        area = QScrollArea()
        area.setWidgetResizable(True)
        area.setWidget(form)
        return area


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Show the generated dashboard forms")
    parser.add_argument("--no-log-file", action="store_true", help="Log to the console only")
    args, qt_args = parser.parse_known_args(argv)

    if args.no_log_file:
        logging.basicConfig(level=logging.INFO)
    else:
        configure_logging()

    app = QApplication([sys.argv[0], *qt_args])
    logger.info("Starting demo with the in-memory backend")
    window = DemoWindow(seed_backend())
    window.resize(760, 640)
    window.show()
    return app.exec()


if __name__ == "__main__":  # pragma: no cover - manual launch helper
    raise SystemExit(main())
