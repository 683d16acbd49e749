"""
Services: change dispatch, notifications, tenant context and the backend
resources (customers, purchases, invoices, organizations, comments,
subscriptions, payments, admin, coupons) plus the route table. Exported lazily.
"""

from __future__ import annotations

import importlib

_EXPORTS = {
    "FieldChangeDispatcher": ("pyqt_bizforms.services.field_change_dispatcher", "FieldChangeDispatcher"),
    "FieldChangeEvent": ("pyqt_bizforms.services.field_change_dispatcher", "FieldChangeEvent"),
    "DispatchResult": ("pyqt_bizforms.services.field_change_dispatcher", "DispatchResult"),
    "SignalService": ("pyqt_bizforms.services.signal_service", "SignalService"),
    "Notification": ("pyqt_bizforms.services.notification_service", "Notification"),
    "NotificationCenter": ("pyqt_bizforms.services.notification_service", "NotificationCenter"),
    "Session": ("pyqt_bizforms.services.tenant_context", "Session"),
    "TenantContext": ("pyqt_bizforms.services.tenant_context", "TenantContext"),
    "TableResourceService": ("pyqt_bizforms.services.resource_service", "TableResourceService"),
    "CustomerService": ("pyqt_bizforms.services.customer_service", "CustomerService"),
    "PurchaseService": ("pyqt_bizforms.services.purchase_service", "PurchaseService"),
    "InvoiceService": ("pyqt_bizforms.services.invoice_service", "InvoiceService"),
    "SubscriptionService": ("pyqt_bizforms.services.subscription_service", "SubscriptionService"),
    "PaymentService": ("pyqt_bizforms.services.payment_service", "PaymentService"),
    "PaymentSession": ("pyqt_bizforms.services.payment_service", "PaymentSession"),
    "add_months": ("pyqt_bizforms.services.payment_service", "add_months"),
    "AdminService": ("pyqt_bizforms.services.admin_service", "AdminService"),
    "OrganizationStats": ("pyqt_bizforms.services.admin_service", "OrganizationStats"),
    "OrganizationService": ("pyqt_bizforms.services.organization_service", "OrganizationService"),
    "CommentService": ("pyqt_bizforms.services.comment_service", "CommentService"),
    "CouponService": ("pyqt_bizforms.services.coupon_service", "CouponService"),
    "coupon_status": ("pyqt_bizforms.services.coupon_service", "coupon_status"),
    "resolve_route": ("pyqt_bizforms.services.route_service", "resolve_route"),
    "RouteDecision": ("pyqt_bizforms.services.route_service", "RouteDecision"),
    "ROUTES": ("pyqt_bizforms.services.route_service", "ROUTES"),
}


def __getattr__(name: str):
    if name in _EXPORTS:
        module_name, attr = _EXPORTS[name]
        module = importlib.import_module(module_name)
        value = getattr(module, attr)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = list(_EXPORTS.keys())
