"""
pyqt-bizforms: declarative PyQt6 forms for a multi-tenant invoicing dashboard.

A FormConfig describes a form as data (sections, fields, optional pydantic
schema). UniversalForm interprets it into PyQt6 widgets, keeps one state
mapping per form and applies cross-field patches on every edit. The service
layer wraps an injected table client for customers, purchases, invoices,
subscriptions, coupons and a simulated payment flow.

Architecture:
- Tier 1 (Core): background tasks, fetch generations, logging setup
- Tier 2 (Protocols): widget ABCs, Qt adapters, table client contract, app config
- Tier 3 (Forms): config model, state, recompute, visibility, validation, UniversalForm
- Tier 4 (Services): tenant-scoped data services and notifications
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
