"""
Application routes and their guards.

Protected routes need a session (else redirect to the sign-in page); the
admin route additionally needs the admin role (else redirect to the
dashboard). Unknown paths resolve to the not-found view.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .tenant_context import Session

logger = logging.getLogger(__name__)

AUTH_PATH = "/auth"
DASHBOARD_PATH = "/app/dashboard"


class Guard(Enum):
    NONE = "none"
    PROTECTED = "protected"
    ADMIN = "admin"


@dataclass(frozen=True)
class Route:
    pattern: str
    view: str
    guard: Guard = Guard.NONE

    def match(self, path: str) -> Optional[Dict[str, str]]:
        regex = "^" + re.sub(r":(\w+)", r"(?P<\1>[^/]+)", self.pattern) + "$"
        found = re.match(regex, path)
        return found.groupdict() if found else None


@dataclass(frozen=True)
class RouteDecision:
    path: str
    view: Optional[str] = None
    params: Dict[str, str] = field(default_factory=dict)
    redirect: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.redirect is None


ROUTES: List[Route] = [
    Route("/landing", "landing"),
    Route("/auth", "auth"),
    Route("/", "organization_selection", Guard.PROTECTED),
    Route("/app", "dashboard", Guard.PROTECTED),
    Route("/app/dashboard", "dashboard", Guard.PROTECTED),
    Route("/app/customers", "customers", Guard.PROTECTED),
    Route("/app/purchases", "purchases", Guard.PROTECTED),
    Route("/app/invoices", "invoices", Guard.PROTECTED),
    Route("/app/reports", "reports", Guard.PROTECTED),
    Route("/app/profile", "profile", Guard.PROTECTED),
    Route("/customer/:id", "customer_detail", Guard.PROTECTED),
    Route("/customer-auth", "customer_auth"),
    Route("/customer-portal", "customer_portal"),
    Route("/pricing", "pricing"),
    Route("/admin", "admin_dashboard", Guard.ADMIN),
]

NOT_FOUND_VIEW = "not_found"


def _normalize(path: str) -> str:
    path = path.split("?", 1)[0].split("#", 1)[0] or "/"
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def resolve_route(path: str, session: Optional[Session], is_admin: bool = False) -> RouteDecision:
    """Match path against the route table and apply its guard."""
    path = _normalize(path)
    for route in ROUTES:
        params = route.match(path)
        if params is None:
            continue
        if route.guard is not Guard.NONE and session is None:
            logger.debug(f"{path} requires a session, redirecting to {AUTH_PATH}")
            return RouteDecision(path, redirect=AUTH_PATH)
        if route.guard is Guard.ADMIN and not is_admin:
            logger.debug(f"{path} requires admin role, redirecting to {DASHBOARD_PATH}")
            return RouteDecision(path, redirect=DASHBOARD_PATH)
        return RouteDecision(path, view=route.view, params=params)
    return RouteDecision(path, view=NOT_FOUND_VIEW)
