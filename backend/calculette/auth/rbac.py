"""Role-based access control.

Capabilities are checked by the routers, which also mask client financial
values in responses; the margin engine itself never sees roles.
"""
from enum import Enum

ROLE_NAMES = [
    "admin",
    "cfo",
    "business_unit_manager",
    "account_manager",
    "viewer",
]


class Role(str, Enum):
    ADMIN = "admin"
    CFO = "cfo"
    BUSINESS_UNIT_MANAGER = "business_unit_manager"
    ACCOUNT_MANAGER = "account_manager"
    VIEWER = "viewer"


def _has_any(roles: list[str], allowed: list[Role]) -> bool:
    allowed_names = [r.value for r in allowed]
    return any(r.lower() in allowed_names for r in roles)


def can_view_financials(roles: list[str]) -> bool:
    """Client margins, discounts and target rates."""
    return _has_any(roles, [Role.ADMIN, Role.CFO])


def can_manage_cost_settings(roles: list[str]) -> bool:
    """Global salary settings, client commercial config and imports."""
    return _has_any(roles, [Role.ADMIN, Role.CFO])


def can_manage_clients(roles: list[str]) -> bool:
    return _has_any(roles, [Role.ADMIN, Role.CFO, Role.BUSINESS_UNIT_MANAGER])


def can_run_simulation(roles: list[str]) -> bool:
    return _has_any(
        roles,
        [Role.ADMIN, Role.CFO, Role.BUSINESS_UNIT_MANAGER, Role.ACCOUNT_MANAGER],
    )


def is_admin(roles: list[str]) -> bool:
    return _has_any(roles, [Role.ADMIN])
