"""Margin simulation and scenario schemas.

Numeric checks on the request live in the margin engine so that invalid inputs
come back as one error shape (field + message) whatever the caller.
"""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from calculette.engine.types import MarginStatus, ResourceCostProfile, ResourceKind


class MarginSimulationRequest(BaseModel):
    resource_type: ResourceKind
    annual_gross_salary: Decimal | None = None
    hourly_rate: Decimal | None = None
    client_id: int
    proposed_bill_rate: Decimal
    planned_hours: Decimal | None = None
    seniority: str | None = Field(None, max_length=50)

    def cost_profile(self) -> ResourceCostProfile:
        return ResourceCostProfile(
            kind=self.resource_type,
            annual_gross_salary=self.annual_gross_salary,
            hourly_rate=self.hourly_rate,
        )


class TargetResultsResponse(BaseModel):
    """Client-derived fields are None for roles without financial visibility."""

    cost_per_hour: Decimal
    effective_target_bill_rate: Decimal | None = None
    gross_target_bill_rate: Decimal | None = None
    theoretical_margin_percent: Decimal | None = None
    theoretical_margin_per_hour: Decimal | None = None
    configured_target_margin_percent: Decimal | None = None
    configured_minimum_margin_percent: Decimal | None = None
    configured_discount_percent: Decimal | None = None
    forced_vacation_days_per_year: int | None = None
    status: MarginStatus


class ProposedResultsResponse(BaseModel):
    proposed_bill_rate: Decimal
    margin_percent: Decimal
    margin_per_hour: Decimal
    discount_percent_applied: Decimal | None = None
    margin_delta_vs_target: Decimal | None = None
    premium_vs_target_per_hour: Decimal | None = None
    status: MarginStatus


class ProjectedTotalsResponse(BaseModel):
    planned_hours: Decimal
    total_cost: Decimal
    total_revenue: Decimal
    total_margin: Decimal


class MarginSimulationResponse(BaseModel):
    target_results: TargetResultsResponse
    proposed_results: ProposedResultsResponse
    totals: ProjectedTotalsResponse | None = None


class ScenarioCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    request: MarginSimulationRequest


class ScenarioSummary(BaseModel):
    id: int
    name: str
    client_id: int | None
    client_name: str
    resource_kind: str
    proposed_status: MarginStatus
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ScenarioResponse(ScenarioSummary):
    request: MarginSimulationRequest
    result: MarginSimulationResponse
