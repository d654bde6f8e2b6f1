"""Pydantic schemas."""
from calculette.schemas.auth import Token, UserCreate, UserLogin, UserResponse
from calculette.schemas.client import (
    ClientCreate,
    ClientResponse,
    ClientUpdate,
    CommercialConfigUpdate,
)
from calculette.schemas.imports import ImportResult, ImportRowError
from calculette.schemas.margin import (
    MarginSimulationRequest,
    MarginSimulationResponse,
    ProjectedTotalsResponse,
    ProposedResultsResponse,
    ScenarioCreate,
    ScenarioResponse,
    ScenarioSummary,
    TargetResultsResponse,
)
from calculette.schemas.salary_settings import (
    ActiveGlobalSalarySettingsResponse,
    GlobalSalarySettingsCreate,
    GlobalSalarySettingsResponse,
    GlobalSalarySettingsUpdate,
)

__all__ = [
    "Token",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "ClientCreate",
    "ClientResponse",
    "ClientUpdate",
    "CommercialConfigUpdate",
    "ImportResult",
    "ImportRowError",
    "MarginSimulationRequest",
    "MarginSimulationResponse",
    "ProjectedTotalsResponse",
    "ProposedResultsResponse",
    "ScenarioCreate",
    "ScenarioResponse",
    "ScenarioSummary",
    "TargetResultsResponse",
    "ActiveGlobalSalarySettingsResponse",
    "GlobalSalarySettingsCreate",
    "GlobalSalarySettingsResponse",
    "GlobalSalarySettingsUpdate",
]
