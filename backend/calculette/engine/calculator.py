"""Centralized margin engine - all formulas deterministic, Decimal only. Rates are per hour.

Every consumer (simulation, scenarios, reporting) goes through MarginEngine so the
cost, target and status rules exist in exactly one place.
"""
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal

from calculette.engine.exceptions import IncompleteClientConfigError, InvalidInputError
from calculette.engine.types import (
    ClientCommercialConfig,
    GlobalCostParameters,
    MarginSimulationResult,
    MarginStatus,
    ProjectedTotals,
    ProposedResults,
    ResourceCostProfile,
    ResourceKind,
    TargetResults,
)

THRESHOLD_FIELDS = ("target_margin_percent", "minimum_margin_percent")


def _to_decimal(value) -> Decimal | None:
    if value is None or isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _require_positive(field: str, value, message: str) -> Decimal:
    amount = _to_decimal(value)
    if amount is None or amount <= 0:
        raise InvalidInputError(field, message)
    return amount


def _require_complete(config: ClientCommercialConfig, fields: tuple[str, ...] | None = None) -> None:
    missing = config.missing_fields(fields) if fields else config.missing_fields()
    if missing:
        raise IncompleteClientConfigError(missing)


class MarginEngine:
    """Deterministic margin engine. Stateless: safe to share or recreate per request."""

    @staticmethod
    def _round(value: Decimal, places: int = 2) -> Decimal:
        """Round for internal calculation - display layer formats for output."""
        quantize = Decimal(10) ** -places
        return value.quantize(quantize, rounding=ROUND_HALF_UP)

    def _margin_percent(self, bill_rate: Decimal, cost: Decimal) -> Decimal:
        """Margin % = (Rate - Cost) / Rate × 100, 0 when the rate is 0. Unrounded: classify this value."""
        if bill_rate == 0:
            return Decimal(0)
        return (bill_rate - cost) / bill_rate * Decimal(100)

    def _gross_rate(self, net_rate: Decimal, discount_pct: Decimal | None) -> Decimal:
        """Pre-discount rate = Net / (1 - Discount). Informational only."""
        if not discount_pct or discount_pct <= 0:
            return self._round(net_rate)
        factor = Decimal(1) - (discount_pct / Decimal(100))
        if factor <= 0:
            return Decimal(0)
        return self._round(net_rate / factor)

    @staticmethod
    def classify(
        margin_pct: Decimal,
        minimum_margin_pct: Decimal,
        target_margin_pct: Decimal,
    ) -> MarginStatus:
        """OK at or above target, WARNING between minimum (inclusive) and target, KO below minimum."""
        margin = _to_decimal(margin_pct)
        if margin >= _to_decimal(target_margin_pct):
            return MarginStatus.OK
        if margin >= _to_decimal(minimum_margin_pct):
            return MarginStatus.WARNING
        return MarginStatus.KO

    def compute_hourly_cost(
        self,
        profile: ResourceCostProfile,
        global_costs: GlobalCostParameters | None = None,
    ) -> Decimal:
        """Fully-loaded hourly cost.

        Salaried: (salary × (1 + charges%) + indirect costs) / billable hours.
        Freelance: the paid hourly rate, global parameters are ignored.
        """
        if profile.kind == ResourceKind.FREELANCE:
            rate = _require_positive(
                "hourly_rate",
                profile.hourly_rate,
                "Hourly rate is required for freelance resources and must be positive",
            )
            if profile.annual_gross_salary is not None:
                raise InvalidInputError(
                    "annual_gross_salary",
                    "Annual gross salary must not be set for freelance resources",
                )
            return self._round(rate)

        if profile.kind != ResourceKind.SALARIED:
            raise InvalidInputError("kind", f"Unknown resource kind: {profile.kind}")

        salary = _require_positive(
            "annual_gross_salary",
            profile.annual_gross_salary,
            "Annual gross salary is required for salaried resources and must be positive",
        )
        if profile.hourly_rate is not None:
            raise InvalidInputError("hourly_rate", "Hourly rate must not be set for salaried resources")
        if global_costs is None:
            raise InvalidInputError(
                "global_cost_parameters",
                "Global cost parameters are required to cost a salaried resource",
            )
        billable_hours = _require_positive(
            "billable_hours_per_year",
            global_costs.billable_hours_per_year,
            "Billable hours per year must be positive",
        )
        charges_rate = _to_decimal(global_costs.employer_charges_rate_percent) / Decimal(100)
        loaded_cost = salary * (Decimal(1) + charges_rate) + _to_decimal(global_costs.indirect_annual_costs)
        return self._round(loaded_cost / billable_hours)

    def resolve_target(self, hourly_cost: Decimal, config: ClientCommercialConfig) -> TargetResults:
        """Target side of the simulation. The configured target rate is net of discount."""
        _require_complete(config)
        cost = _to_decimal(hourly_cost)
        net_rate = _to_decimal(config.target_hourly_rate)
        margin_pct = self._margin_percent(net_rate, cost)
        return TargetResults(
            cost_per_hour=cost,
            effective_target_bill_rate=net_rate,
            gross_target_bill_rate=self._gross_rate(net_rate, _to_decimal(config.discount_percent)),
            theoretical_margin_percent=self._round(margin_pct),
            theoretical_margin_per_hour=self._round(net_rate - cost),
            configured_target_margin_percent=_to_decimal(config.target_margin_percent),
            configured_minimum_margin_percent=_to_decimal(config.minimum_margin_percent),
            configured_discount_percent=_to_decimal(config.discount_percent),
            forced_vacation_days_per_year=config.forced_vacation_days_per_year,
            status=self.classify(margin_pct, config.minimum_margin_percent, config.target_margin_percent),
        )

    def evaluate_proposal(
        self,
        hourly_cost: Decimal,
        proposed_bill_rate: Decimal,
        config: ClientCommercialConfig,
    ) -> ProposedResults:
        """Proposal side. The proposed rate is what the client is billed (net)."""
        rate = _require_positive(
            "proposed_bill_rate",
            proposed_bill_rate,
            "Proposed bill rate must be positive",
        )
        _require_complete(config, THRESHOLD_FIELDS)
        cost = _to_decimal(hourly_cost)
        margin_pct = self._margin_percent(rate, cost)
        discount = _to_decimal(config.discount_percent)
        return ProposedResults(
            proposed_bill_rate=rate,
            margin_percent=self._round(margin_pct),
            margin_per_hour=self._round(rate - cost),
            discount_percent_applied=discount if discount is not None else Decimal(0),
            status=self.classify(margin_pct, config.minimum_margin_percent, config.target_margin_percent),
        )

    def projected_totals(
        self,
        hourly_cost: Decimal,
        proposed_bill_rate: Decimal,
        planned_hours: Decimal,
    ) -> ProjectedTotals:
        """Engagement totals: hours × cost, hours × rate and their difference."""
        hours = _require_positive("planned_hours", planned_hours, "Planned hours must be positive")
        total_cost = self._round(hours * _to_decimal(hourly_cost))
        total_revenue = self._round(hours * _to_decimal(proposed_bill_rate))
        return ProjectedTotals(
            planned_hours=hours,
            total_cost=total_cost,
            total_revenue=total_revenue,
            total_margin=total_revenue - total_cost,
        )

    def simulate(
        self,
        profile: ResourceCostProfile,
        global_costs: GlobalCostParameters | None,
        config: ClientCommercialConfig,
        proposed_bill_rate: Decimal,
        planned_hours: Decimal | None = None,
    ) -> MarginSimulationResult:
        """Full pipeline: cost -> target -> proposal -> classification."""
        _require_complete(config)
        hourly_cost = self.compute_hourly_cost(profile, global_costs)
        target = self.resolve_target(hourly_cost, config)
        proposal = self.evaluate_proposal(hourly_cost, proposed_bill_rate, config)
        proposal = replace(
            proposal,
            margin_delta_vs_target=proposal.margin_percent - target.theoretical_margin_percent,
            premium_vs_target_per_hour=self._round(
                proposal.proposed_bill_rate - target.effective_target_bill_rate
            ),
        )
        totals = None
        if planned_hours is not None:
            totals = self.projected_totals(hourly_cost, proposal.proposed_bill_rate, planned_hours)
        return MarginSimulationResult(target_results=target, proposed_results=proposal, totals=totals)
