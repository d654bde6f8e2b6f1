"""Tests of the margin engine: hourly cost, target, proposal and status."""
from decimal import Decimal

import pytest

from calculette.engine.calculator import MarginEngine
from calculette.engine.exceptions import IncompleteClientConfigError, InvalidInputError
from calculette.engine.types import (
    ClientCommercialConfig,
    GlobalCostParameters,
    MarginStatus,
    ResourceCostProfile,
    ResourceKind,
)

GLOBALS = GlobalCostParameters(
    employer_charges_rate_percent=Decimal("65"),
    indirect_annual_costs=Decimal("5000"),
    billable_hours_per_year=1600,
)

CONFIG = ClientCommercialConfig(
    target_margin_percent=Decimal("25"),
    minimum_margin_percent=Decimal("15"),
    discount_percent=Decimal("10"),
    forced_vacation_days_per_year=5,
    target_hourly_rate=Decimal("120"),
)


@pytest.fixture
def engine():
    return MarginEngine()


def salaried(salary="75000"):
    return ResourceCostProfile(kind=ResourceKind.SALARIED, annual_gross_salary=Decimal(salary))


def freelance(rate="110"):
    return ResourceCostProfile(kind=ResourceKind.FREELANCE, hourly_rate=Decimal(rate))


# ==============================
# Hourly cost
# ==============================

class TestComputeHourlyCost:

    def test_salaried_cost_is_fully_loaded(self, engine):
        # (75000 × 1.65 + 5000) / 1600 = 80.46875
        assert engine.compute_hourly_cost(salaried(), GLOBALS) == Decimal("80.47")

    def test_freelance_cost_is_the_paid_rate(self, engine):
        assert engine.compute_hourly_cost(freelance(), GLOBALS) == Decimal("110")

    def test_freelance_ignores_global_parameters(self, engine):
        other = GlobalCostParameters(Decimal("90"), Decimal("99999"), 1)
        assert engine.compute_hourly_cost(freelance(), other) == engine.compute_hourly_cost(freelance(), None)

    def test_zero_charges_and_indirect_costs(self, engine):
        flat = GlobalCostParameters(Decimal("0"), Decimal("0"), 1600)
        assert engine.compute_hourly_cost(salaried("80000"), flat) == Decimal("50.00")

    def test_missing_salary(self, engine):
        profile = ResourceCostProfile(kind=ResourceKind.SALARIED)
        with pytest.raises(InvalidInputError) as exc:
            engine.compute_hourly_cost(profile, GLOBALS)
        assert exc.value.field == "annual_gross_salary"

    def test_negative_salary(self, engine):
        with pytest.raises(InvalidInputError):
            engine.compute_hourly_cost(salaried("-1"), GLOBALS)

    def test_missing_hourly_rate(self, engine):
        profile = ResourceCostProfile(kind=ResourceKind.FREELANCE)
        with pytest.raises(InvalidInputError) as exc:
            engine.compute_hourly_cost(profile, None)
        assert exc.value.field == "hourly_rate"

    def test_zero_hourly_rate(self, engine):
        with pytest.raises(InvalidInputError):
            engine.compute_hourly_cost(freelance("0"), None)

    def test_both_monetary_fields_rejected(self, engine):
        profile = ResourceCostProfile(
            kind=ResourceKind.SALARIED,
            annual_gross_salary=Decimal("75000"),
            hourly_rate=Decimal("110"),
        )
        with pytest.raises(InvalidInputError) as exc:
            engine.compute_hourly_cost(profile, GLOBALS)
        assert exc.value.field == "hourly_rate"

    def test_zero_billable_hours(self, engine):
        bad = GlobalCostParameters(Decimal("65"), Decimal("5000"), 0)
        with pytest.raises(InvalidInputError) as exc:
            engine.compute_hourly_cost(salaried(), bad)
        assert exc.value.field == "billable_hours_per_year"

    def test_salaried_without_globals(self, engine):
        with pytest.raises(InvalidInputError) as exc:
            engine.compute_hourly_cost(salaried(), None)
        assert exc.value.field == "global_cost_parameters"


# ==============================
# Status classification
# ==============================

class TestClassify:

    @pytest.mark.parametrize(
        "margin, expected",
        [
            ("25", MarginStatus.OK),
            ("40", MarginStatus.OK),
            ("24.999", MarginStatus.WARNING),
            ("15", MarginStatus.WARNING),
            ("14.999", MarginStatus.KO),
            ("-10", MarginStatus.KO),
        ],
    )
    def test_boundaries(self, margin, expected):
        assert MarginEngine.classify(Decimal(margin), Decimal("15"), Decimal("25")) == expected

    def test_monotonic_in_margin(self):
        order = [MarginStatus.KO, MarginStatus.WARNING, MarginStatus.OK]
        previous = 0
        for tenth in range(-100, 500):
            status = MarginEngine.classify(Decimal(tenth) / 10, Decimal("15"), Decimal("25"))
            rank = order.index(status)
            assert rank >= previous
            previous = rank

    def test_equal_thresholds_never_warn(self):
        assert MarginEngine.classify(Decimal("20"), Decimal("20"), Decimal("20")) == MarginStatus.OK
        assert MarginEngine.classify(Decimal("19.99"), Decimal("20"), Decimal("20")) == MarginStatus.KO


# ==============================
# Target resolution
# ==============================

class TestResolveTarget:

    def test_net_rate_is_effective_rate(self, engine):
        target = engine.resolve_target(Decimal("80.47"), CONFIG)
        assert target.effective_target_bill_rate == Decimal("120")
        assert target.gross_target_bill_rate == Decimal("133.33")
        assert target.theoretical_margin_percent == Decimal("32.94")
        assert target.theoretical_margin_per_hour == Decimal("39.53")
        assert target.status == MarginStatus.OK

    def test_echoes_configuration(self, engine):
        target = engine.resolve_target(Decimal("80.47"), CONFIG)
        assert target.cost_per_hour == Decimal("80.47")
        assert target.configured_target_margin_percent == Decimal("25")
        assert target.configured_minimum_margin_percent == Decimal("15")
        assert target.configured_discount_percent == Decimal("10")
        assert target.forced_vacation_days_per_year == 5

    def test_no_discount_gross_equals_net(self, engine):
        config = ClientCommercialConfig(
            target_margin_percent=Decimal("25"),
            minimum_margin_percent=Decimal("15"),
            discount_percent=Decimal("0"),
            forced_vacation_days_per_year=0,
            target_hourly_rate=Decimal("120"),
        )
        target = engine.resolve_target(Decimal("80.47"), config)
        assert target.gross_target_bill_rate == Decimal("120.00")

    def test_full_discount_gross_rate_is_zero(self, engine):
        config = ClientCommercialConfig(
            target_margin_percent=Decimal("25"),
            minimum_margin_percent=Decimal("15"),
            discount_percent=Decimal("100"),
            forced_vacation_days_per_year=0,
            target_hourly_rate=Decimal("120"),
        )
        assert engine.resolve_target(Decimal("80"), config).gross_target_bill_rate == Decimal(0)

    def test_zero_target_rate_gives_zero_margin(self, engine):
        config = ClientCommercialConfig(
            target_margin_percent=Decimal("25"),
            minimum_margin_percent=Decimal("15"),
            discount_percent=Decimal("0"),
            forced_vacation_days_per_year=0,
            target_hourly_rate=Decimal("0"),
        )
        target = engine.resolve_target(Decimal("80"), config)
        assert target.theoretical_margin_percent == Decimal(0)
        assert target.status == MarginStatus.KO

    def test_missing_target_rate_is_reported(self, engine):
        config = ClientCommercialConfig(
            target_margin_percent=Decimal("25"),
            minimum_margin_percent=Decimal("15"),
            discount_percent=Decimal("10"),
            forced_vacation_days_per_year=5,
        )
        with pytest.raises(IncompleteClientConfigError) as exc:
            engine.resolve_target(Decimal("80.47"), config)
        assert exc.value.missing_fields == ["target_hourly_rate"]

    def test_all_missing_fields_listed_in_order(self, engine):
        with pytest.raises(IncompleteClientConfigError) as exc:
            engine.resolve_target(Decimal("80.47"), ClientCommercialConfig())
        assert exc.value.missing_fields == [
            "target_margin_percent",
            "minimum_margin_percent",
            "discount_percent",
            "forced_vacation_days_per_year",
            "target_hourly_rate",
        ]
        assert "target_hourly_rate" in str(exc.value)

    def test_missing_discount_is_not_defaulted(self, engine):
        config = ClientCommercialConfig(
            target_margin_percent=Decimal("25"),
            minimum_margin_percent=Decimal("15"),
            forced_vacation_days_per_year=5,
            target_hourly_rate=Decimal("120"),
        )
        with pytest.raises(IncompleteClientConfigError) as exc:
            engine.resolve_target(Decimal("80.47"), config)
        assert exc.value.missing_fields == ["discount_percent"]


# ==============================
# Proposal evaluation
# ==============================

class TestEvaluateProposal:

    def test_margin_on_proposed_rate(self, engine):
        proposal = engine.evaluate_proposal(Decimal("80.47"), Decimal("115"), CONFIG)
        assert proposal.margin_percent == Decimal("30.03")
        assert proposal.margin_per_hour == Decimal("34.53")
        assert proposal.discount_percent_applied == Decimal("10")
        assert proposal.status == MarginStatus.OK

    def test_warning_and_ko(self, engine):
        # 100 -> 19.53 %, 90 -> 10.59 %
        assert engine.evaluate_proposal(Decimal("80.47"), Decimal("100"), CONFIG).status == MarginStatus.WARNING
        assert engine.evaluate_proposal(Decimal("80.47"), Decimal("90"), CONFIG).status == MarginStatus.KO

    def test_negative_margin(self, engine):
        proposal = engine.evaluate_proposal(Decimal("100"), Decimal("80"), CONFIG)
        assert proposal.margin_per_hour == Decimal("-20.00")
        assert proposal.margin_percent == Decimal("-25.00")
        assert proposal.status == MarginStatus.KO

    def test_discount_defaults_to_zero(self, engine):
        config = ClientCommercialConfig(
            target_margin_percent=Decimal("25"),
            minimum_margin_percent=Decimal("15"),
        )
        proposal = engine.evaluate_proposal(Decimal("80"), Decimal("100"), config)
        assert proposal.discount_percent_applied == Decimal(0)

    def test_zero_proposed_rate_is_invalid(self, engine):
        with pytest.raises(InvalidInputError) as exc:
            engine.evaluate_proposal(Decimal("500"), Decimal("0"), CONFIG)
        assert exc.value.field == "proposed_bill_rate"

    def test_negative_proposed_rate_is_invalid(self, engine):
        with pytest.raises(InvalidInputError):
            engine.evaluate_proposal(Decimal("80"), Decimal("-5"), CONFIG)

    def test_thresholds_required(self, engine):
        config = ClientCommercialConfig(target_margin_percent=Decimal("25"))
        with pytest.raises(IncompleteClientConfigError) as exc:
            engine.evaluate_proposal(Decimal("80"), Decimal("100"), config)
        assert exc.value.missing_fields == ["minimum_margin_percent"]


# ==============================
# Full simulation
# ==============================

class TestSimulate:

    def test_end_to_end_scenario(self, engine):
        result = engine.simulate(salaried(), GLOBALS, CONFIG, Decimal("115"))
        target, proposal = result.target_results, result.proposed_results
        assert target.cost_per_hour == Decimal("80.47")
        assert target.gross_target_bill_rate == Decimal("133.33")
        assert target.theoretical_margin_percent == Decimal("32.94")
        assert proposal.margin_percent == Decimal("30.03")
        assert proposal.margin_delta_vs_target == Decimal("-2.91")
        assert proposal.premium_vs_target_per_hour == Decimal("-5.00")
        assert target.status == MarginStatus.OK
        assert proposal.status == MarginStatus.OK
        assert result.totals is None

    def test_identical_inputs_identical_results(self, engine):
        first = engine.simulate(salaried(), GLOBALS, CONFIG, Decimal("115"), Decimal("100"))
        second = MarginEngine().simulate(salaried(), GLOBALS, CONFIG, Decimal("115"), Decimal("100"))
        assert first == second

    def test_planned_hours_totals(self, engine):
        result = engine.simulate(freelance(), None, CONFIG, Decimal("150"), Decimal("200"))
        assert result.totals.planned_hours == Decimal("200")
        assert result.totals.total_cost == Decimal("22000.00")
        assert result.totals.total_revenue == Decimal("30000.00")
        assert result.totals.total_margin == Decimal("8000.00")

    def test_zero_planned_hours_rejected(self, engine):
        with pytest.raises(InvalidInputError) as exc:
            engine.simulate(freelance(), None, CONFIG, Decimal("150"), Decimal("0"))
        assert exc.value.field == "planned_hours"

    def test_incomplete_config_checked_before_cost(self, engine):
        """An invalid profile is not reported when the client config is incomplete."""
        profile = ResourceCostProfile(kind=ResourceKind.SALARIED)
        with pytest.raises(IncompleteClientConfigError):
            engine.simulate(profile, None, ClientCommercialConfig(), Decimal("115"))

    def test_accepts_plain_numbers(self, engine):
        profile = ResourceCostProfile(kind=ResourceKind.FREELANCE, hourly_rate=100)
        result = engine.simulate(profile, None, CONFIG, 125)
        assert result.proposed_results.margin_percent == Decimal("20.00")
        assert result.proposed_results.status == MarginStatus.WARNING


class TestThresholdsThroughPipeline:
    """Statuses come from the exact margin, not the two-decimal figure shown."""

    @pytest.mark.parametrize(
        "cost, rate, expected",
        [
            ("75", "100", MarginStatus.OK),
            ("75.01", "100.01", MarginStatus.WARNING),  # 24.9975 %
            ("85", "100", MarginStatus.WARNING),
            ("85.01", "100.01", MarginStatus.KO),  # 14.9985 %
        ],
    )
    def test_proposal_status_at_boundaries(self, engine, cost, rate, expected):
        result = engine.simulate(freelance(cost), None, CONFIG, Decimal(rate))
        assert result.proposed_results.status == expected

    def test_just_below_target_is_warning_though_displayed_as_target(self, engine):
        result = engine.simulate(freelance("75.01"), None, CONFIG, Decimal("100.01"))
        assert result.proposed_results.margin_percent == Decimal("25.00")
        assert result.proposed_results.status == MarginStatus.WARNING

    @pytest.mark.parametrize(
        "cost, target_rate, expected",
        [
            ("75", "100", MarginStatus.OK),
            ("75.01", "100.01", MarginStatus.WARNING),
            ("85", "100", MarginStatus.WARNING),
            ("85.01", "100.01", MarginStatus.KO),
        ],
    )
    def test_target_status_at_boundaries(self, engine, cost, target_rate, expected):
        config = ClientCommercialConfig(
            target_margin_percent=Decimal("25"),
            minimum_margin_percent=Decimal("15"),
            discount_percent=Decimal("0"),
            forced_vacation_days_per_year=0,
            target_hourly_rate=Decimal(target_rate),
        )
        target = engine.resolve_target(Decimal(cost), config)
        assert target.status == expected

    def test_evaluate_proposal_classifies_exact_margin(self, engine):
        proposal = engine.evaluate_proposal(Decimal("85.01"), Decimal("100.01"), CONFIG)
        assert proposal.margin_percent == Decimal("15.00")
        assert proposal.status == MarginStatus.KO
