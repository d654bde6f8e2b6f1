"""Client and commercial configuration schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator


class ClientCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    business_unit_code: str | None = Field(None, max_length=20)
    contact_name: str | None = None
    contact_email: str | None = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()


class ClientUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    business_unit_code: str | None = Field(None, max_length=20)
    contact_name: str | None = None
    contact_email: str | None = None
    is_active: bool | None = None


class CommercialConfigUpdate(BaseModel):
    """Full replacement of a client's margin policy. Omitted fields are cleared."""

    target_margin_percent: Decimal | None = Field(None, ge=0, le=100)
    minimum_margin_percent: Decimal | None = Field(None, ge=0, le=100)
    discount_percent: Decimal | None = Field(None, ge=0, le=100)
    forced_vacation_days_per_year: int | None = Field(None, ge=0, le=366)
    target_hourly_rate: Decimal | None = Field(None, gt=0)

    @model_validator(mode="after")
    def minimum_not_above_target(self) -> "CommercialConfigUpdate":
        if (
            self.minimum_margin_percent is not None
            and self.target_margin_percent is not None
            and self.minimum_margin_percent > self.target_margin_percent
        ):
            raise ValueError("minimum_margin_percent must not exceed target_margin_percent")
        return self


class ClientResponse(BaseModel):
    id: int
    code: str
    name: str
    business_unit_code: str | None
    contact_name: str | None
    contact_email: str | None
    is_active: bool
    # Financial fields - only populated for Admin/CFO
    target_margin_percent: Decimal | None = None
    minimum_margin_percent: Decimal | None = None
    discount_percent: Decimal | None = None
    forced_vacation_days_per_year: int | None = None
    target_hourly_rate: Decimal | None = None
    is_financial_config_complete: bool
    missing_financial_fields: list[str] = []
    financial_config_status_message: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
