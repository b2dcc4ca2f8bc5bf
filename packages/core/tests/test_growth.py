"""Tests for the accumulation-phase growth model."""

import pytest

from fiplan_core.assumptions import PlanningAssumptions
from fiplan_core.growth import CorpusGrowthModel, compound, monthly_rate


@pytest.fixture
def model() -> CorpusGrowthModel:
    """Growth model with default assumptions."""
    return CorpusGrowthModel()


class TestRateHelpers:
    """Test suite for the module-level rate helpers."""

    def test_monthly_rate_compounds_to_annual(self):
        """Twelve months at the monthly rate should give the annual rate."""
        rate = monthly_rate(12.0)
        assert (1 + rate) ** 12 == pytest.approx(1.12)

    def test_monthly_rate_zero(self):
        assert monthly_rate(0.0) == 0.0

    def test_compound_zero_years_is_identity(self):
        assert compound(1000.0, 7.0, 0) == 1000.0

    def test_compound_two_years(self):
        assert compound(1000.0, 10.0, 2) == pytest.approx(1210.0)


class TestRateForYear:
    """Test suite for the short/long-term rate regime."""

    def test_short_term_rate_before_threshold(self, model: CorpusGrowthModel):
        """Years 0-6 earn the short-term rate."""
        for year in range(7):
            assert model.rate_for_year(year) == 12.0

    def test_long_term_rate_from_threshold(self, model: CorpusGrowthModel):
        """Year 7 onwards earns the long-term rate."""
        assert model.rate_for_year(7) == 14.0
        assert model.rate_for_year(30) == 14.0

    def test_custom_threshold(self):
        model = CorpusGrowthModel(PlanningAssumptions(sip_short_term_threshold_years=2))
        assert model.rate_for_year(1) == 12.0
        assert model.rate_for_year(2) == 14.0


class TestGrowRecurringContribution:
    """Test suite for SIP growth."""

    def test_zero_years_returns_monthly_amount(self, model: CorpusGrowthModel):
        """With no elapsed time the corpus is the monthly amount itself."""
        assert model.grow_recurring_contribution(30000.0, 0) == 30000.0

    def test_negative_years_returns_monthly_amount(self, model: CorpusGrowthModel):
        assert model.grow_recurring_contribution(30000.0, -3) == 30000.0

    def test_one_year_matches_annuity_due(self, model: CorpusGrowthModel):
        """Contributions at the start of each month compound for 12..1 months."""
        growth = 1 + monthly_rate(12.0)
        expected = sum(1000.0 * growth**k for k in range(1, 13))

        assert model.grow_recurring_contribution(1000.0, 1) == pytest.approx(expected)

    def test_one_year_exceeds_contributions(self, model: CorpusGrowthModel):
        assert model.grow_recurring_contribution(1000.0, 1) > 12000.0

    def test_step_up_irrelevant_for_first_year(self, model: CorpusGrowthModel):
        """Step-up only applies at year boundaries."""
        flat = model.grow_recurring_contribution(1000.0, 1)
        stepped = model.grow_recurring_contribution(1000.0, 1, step_up_percent=10.0)
        assert stepped == pytest.approx(flat)

    def test_step_up_increases_corpus(self, model: CorpusGrowthModel):
        flat = model.grow_recurring_contribution(1000.0, 10)
        stepped = model.grow_recurring_contribution(1000.0, 10, step_up_percent=5.0)
        assert stepped > flat

    def test_regime_change_is_not_retroactive(self):
        """Raising the long-term rate only changes years past the threshold."""
        base = CorpusGrowthModel()
        richer = CorpusGrowthModel(PlanningAssumptions(sip_return_rate_long_term=20.0))

        assert richer.grow_recurring_contribution(1000.0, 7) == pytest.approx(
            base.grow_recurring_contribution(1000.0, 7)
        )
        assert richer.grow_recurring_contribution(1000.0, 8) > base.grow_recurring_contribution(
            1000.0, 8
        )

    @pytest.mark.parametrize(
        "assumptions",
        [
            PlanningAssumptions(),
            PlanningAssumptions(sip_return_rate_short_term=0.0, sip_return_rate_long_term=0.0),
            PlanningAssumptions(sip_return_rate_short_term=15.0, sip_return_rate_long_term=8.0),
        ],
        ids=["default", "zero_rate", "falling_rate"],
    )
    @pytest.mark.parametrize("step_up", [0.0, 5.0, 10.0])
    def test_non_decreasing_in_years(self, assumptions: PlanningAssumptions, step_up: float):
        """Another year of investing never shrinks the corpus, threshold crossing included."""
        model = CorpusGrowthModel(assumptions)
        values = [
            model.grow_recurring_contribution(1000.0, years, step_up) for years in range(0, 31)
        ]

        for years in range(30):
            assert values[years + 1] >= values[years], f"dropped between {years} and {years + 1}"

    def test_zero_contribution(self, model: CorpusGrowthModel):
        assert model.grow_recurring_contribution(0.0, 20) == 0.0

    def test_pure_function(self, model: CorpusGrowthModel):
        """Same inputs give bit-identical output."""
        first = model.grow_recurring_contribution(12345.0, 25, 7.0)
        second = model.grow_recurring_contribution(12345.0, 25, 7.0)
        assert first == second


class TestLumpSumsAndInflation:
    """Test suite for existing-corpus growth and expense inflation."""

    def test_lump_sums_grow_at_their_own_rates(self, model: CorpusGrowthModel):
        value = model.grow_lump_sums(100000.0, 200000.0, 2)
        expected = 100000.0 * 1.07**2 + 200000.0 * 1.12**2
        assert value == pytest.approx(expected)

    def test_lump_sums_zero_years(self, model: CorpusGrowthModel):
        assert model.grow_lump_sums(100.0, 200.0, 0) == 300.0

    def test_no_existing_corpus(self, model: CorpusGrowthModel):
        assert model.grow_lump_sums(0.0, 0.0, 30) == 0.0

    def test_inflate_expense(self, model: CorpusGrowthModel):
        assert model.inflate_expense(50000.0, 1) == pytest.approx(53500.0)
        assert model.inflate_expense(50000.0, 0) == 50000.0
