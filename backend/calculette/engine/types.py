"""Immutable inputs and outputs of the margin engine. Percentages are 0-100, amounts are currency units."""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class ResourceKind(str, Enum):
    SALARIED = "salaried"
    FREELANCE = "freelance"


class MarginStatus(str, Enum):
    KO = "KO"
    WARNING = "WARNING"
    OK = "OK"


# Order matters: it is the order missing fields are reported in.
COMMERCIAL_CONFIG_FIELDS = (
    "target_margin_percent",
    "minimum_margin_percent",
    "discount_percent",
    "forced_vacation_days_per_year",
    "target_hourly_rate",
)


@dataclass(frozen=True)
class ResourceCostProfile:
    kind: ResourceKind
    annual_gross_salary: Decimal | None = None
    hourly_rate: Decimal | None = None


@dataclass(frozen=True)
class GlobalCostParameters:
    employer_charges_rate_percent: Decimal
    indirect_annual_costs: Decimal
    billable_hours_per_year: int


@dataclass(frozen=True)
class ClientCommercialConfig:
    target_margin_percent: Decimal | None = None
    minimum_margin_percent: Decimal | None = None
    discount_percent: Decimal | None = None
    forced_vacation_days_per_year: int | None = None
    target_hourly_rate: Decimal | None = None

    def missing_fields(self, fields: tuple[str, ...] = COMMERCIAL_CONFIG_FIELDS) -> list[str]:
        return [name for name in fields if getattr(self, name) is None]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()


@dataclass(frozen=True)
class TargetResults:
    cost_per_hour: Decimal
    effective_target_bill_rate: Decimal
    gross_target_bill_rate: Decimal
    theoretical_margin_percent: Decimal
    theoretical_margin_per_hour: Decimal
    configured_target_margin_percent: Decimal
    configured_minimum_margin_percent: Decimal
    configured_discount_percent: Decimal
    forced_vacation_days_per_year: int
    status: MarginStatus


@dataclass(frozen=True)
class ProposedResults:
    proposed_bill_rate: Decimal
    margin_percent: Decimal
    margin_per_hour: Decimal
    discount_percent_applied: Decimal
    status: MarginStatus
    margin_delta_vs_target: Decimal | None = None
    premium_vs_target_per_hour: Decimal | None = None


@dataclass(frozen=True)
class ProjectedTotals:
    planned_hours: Decimal
    total_cost: Decimal
    total_revenue: Decimal
    total_margin: Decimal


@dataclass(frozen=True)
class MarginSimulationResult:
    target_results: TargetResults
    proposed_results: ProposedResults
    totals: ProjectedTotals | None = None
