"""pytest configuration and fixtures for pyqt-bizforms tests."""

import datetime
import os

# Widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

from pyqt_bizforms.io import InMemoryKeyValueStore, InMemoryTableClient
from pyqt_bizforms.protocols import set_app_config
from pyqt_bizforms.services.notification_service import NotificationCenter
from pyqt_bizforms.services.tenant_context import Session, TenantContext

USER_ID = "user-1"
ORG_ID = "org-1"
FIXED_NOW = datetime.datetime(2024, 1, 31, 12, 0, 0)


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


@pytest.fixture(autouse=True)
def default_app_config():
    """Every test starts from the default configuration."""
    set_app_config(None)
    yield
    set_app_config(None)


@pytest.fixture
def client():
    return InMemoryTableClient(clock=lambda: FIXED_NOW)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def notifications(qapp):
    return NotificationCenter()


@pytest.fixture
def tenant(store):
    context = TenantContext(store, Session(user_id=USER_ID, email="owner@example.com"))
    context.select_organization(ORG_ID)
    return context
