"""SQLAlchemy models."""
from calculette.models.audit import AuditLog
from calculette.models.client import Client
from calculette.models.salary_settings import GlobalSalarySettings
from calculette.models.scenario import MarginScenario
from calculette.models.user import Role, User, UserRole

__all__ = [
    "AuditLog",
    "Client",
    "GlobalSalarySettings",
    "MarginScenario",
    "Role",
    "User",
    "UserRole",
]
