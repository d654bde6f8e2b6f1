"""Global salary settings schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class GlobalSalarySettingsCreate(BaseModel):
    label: str | None = Field(None, max_length=100)
    employer_charges_rate: Decimal = Field(..., ge=0, le=100)
    indirect_annual_costs: Decimal = Field(..., ge=0)
    billable_hours_per_year: int = Field(..., gt=0, le=8784)


class GlobalSalarySettingsUpdate(BaseModel):
    label: str | None = Field(None, max_length=100)
    employer_charges_rate: Decimal | None = Field(None, ge=0, le=100)
    indirect_annual_costs: Decimal | None = Field(None, ge=0)
    billable_hours_per_year: int | None = Field(None, gt=0, le=8784)


class GlobalSalarySettingsResponse(BaseModel):
    id: int
    label: str | None
    employer_charges_rate: Decimal
    indirect_annual_costs: Decimal
    billable_hours_per_year: int
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ActiveGlobalSalarySettingsResponse(BaseModel):
    has_active_settings: bool
    settings: GlobalSalarySettingsResponse | None = None
