"""Application configuration for forms and services.

Provides one global configuration object that applications override at
startup; every module reads it through get_app_config().
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class BizFormsConfig:
    """Base configuration for pyqt-bizforms.

    Attributes:
        log_dir: Directory for log files (None = ~/.local/share/pyqt_bizforms/logs)
        log_prefix: File name prefix for log files
        log_level: Level name passed to logging for the package logger
        default_tax_rate: Tax rate applied by invoice forms and invoice generation
        invoice_due_days: Days between invoice date and due date for generated invoices
        invoice_number_prefix: Prefix of generated invoice numbers
        payment_session_prefix: Key prefix for stored payment sessions
        organization_storage_key: Key under which the selected organization is persisted
        default_customer_limit: Customer limit when the user has no plan
        default_organization_limit: Organization limit when the user has no plan
        stats_max_workers: Thread pool size for parallel statistics queries
    """

    log_dir: Optional[str] = None
    log_prefix: str = "pyqt_bizforms_"
    log_level: str = "INFO"
    default_tax_rate: float = 0.1
    invoice_due_days: int = 30
    invoice_number_prefix: str = "INV-"
    payment_session_prefix: str = "payment_session_"
    organization_storage_key: str = "selectedOrganizationId"
    default_customer_limit: int = 100
    default_organization_limit: int = 1
    stats_max_workers: int = 4


# Global config instance (set by application)
_app_config: Optional[BizFormsConfig] = None


def set_app_config(config: Optional[BizFormsConfig]) -> None:
    """Set the global configuration (None restores defaults)."""
    global _app_config
    _app_config = config


def get_app_config() -> BizFormsConfig:
    """Get the current configuration, or defaults if none was set."""
    if _app_config is None:
        return BizFormsConfig()
    return _app_config
