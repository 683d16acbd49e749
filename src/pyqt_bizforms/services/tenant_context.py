"""Signed-in user and selected organization."""

import logging
from dataclasses import dataclass
from typing import Optional

from pyqt_bizforms.exceptions import NotAuthenticatedError
from pyqt_bizforms.io.kv_store import KeyValueStore
from pyqt_bizforms.protocols import get_app_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """Opaque authenticated session; sign-in itself happens elsewhere."""
    user_id: str
    email: Optional[str] = None
    created_at: Optional[str] = None


class TenantContext:
    """
    Who is acting, and for which organization.

    The selected organization id survives restarts through the key-value
    store; clearing the selection removes the key.
    """

    def __init__(self, store: KeyValueStore, session: Optional[Session] = None):
        self.store = store
        self.session = session
        self._storage_key = get_app_config().organization_storage_key
        self.selected_organization_id: Optional[str] = store.get(self._storage_key) or None

    @property
    def user_id(self) -> Optional[str]:
        return self.session.user_id if self.session else None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    def require_user(self) -> str:
        if self.session is None:
            raise NotAuthenticatedError("User must be authenticated")
        return self.session.user_id

    def set_session(self, session: Optional[Session]) -> None:
        self.session = session
        logger.info(f"Session {'set for ' + session.user_id if session else 'cleared'}")

    def select_organization(self, organization_id: Optional[str]) -> None:
        self.selected_organization_id = organization_id or None
        if organization_id:
            self.store.set(self._storage_key, organization_id)
        else:
            self.store.remove(self._storage_key)
        logger.debug(f"Selected organization: {organization_id}")
