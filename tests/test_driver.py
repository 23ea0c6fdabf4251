"""
Tests for the simulation entry points.
"""
import logging

import pytest

from ninth_age_dice import (
    CombatResolver,
    DiceExpressionError,
    DiceRoller,
    SimulationParameters,
    run_simulation,
    run_simulation_with_stats,
)
from ninth_age_dice.dice import get_default_roller, set_default_roller


@pytest.fixture
def params():
    return SimulationParameters(num_attacks="d6+4", to_hit=3, to_wound=4, armor_save=5, iterations=1000)


class TestRunSimulation:
    """Test collecting raw totals."""

    def test_one_total_per_iteration(self, params, roller):
        totals = run_simulation(params, roller)

        assert len(totals) == 1000
        assert all(isinstance(t, int) and t >= 0 for t in totals)

    def test_accepts_mapping_with_defaults(self, roller):
        totals = run_simulation({"numAttacks": 3, "toHit": "auto", "toWound": "auto", "iterations": 50}, roller)

        assert totals == [3] * 50

    def test_default_iterations(self, roller):
        totals = run_simulation({"numAttacks": 1, "toHit": "none", "toWound": 4}, roller)

        assert len(totals) == 10000

    def test_seeded_runs_repeat(self, params):
        assert run_simulation(params, DiceRoller(seed=7)) == run_simulation(params, DiceRoller(seed=7))

    def test_malformed_expression_is_rejected(self, roller):
        with pytest.raises(DiceExpressionError):
            run_simulation({"numAttacks": "2d20", "toHit": 4, "toWound": 4}, roller)

    def test_negative_attack_expressions_deal_nothing(self, roller):
        totals = run_simulation({"numAttacks": "d3-3", "toHit": "auto", "toWound": "auto", "iterations": 200}, roller)

        assert set(totals) == {0}


class TestRunSimulationWithStats:
    """Test the summarized form."""

    def test_results(self, params, roller):
        results = run_simulation_with_stats(params, roller)

        assert len(results.distribution) == 1000
        assert results.total_iterations == 1000
        assert results.execution_time_ms >= 0
        assert results.min <= results.median <= results.max
        assert results.percentiles[10] <= results.percentiles[90]
        assert sum(p.probability for p in results.probability_distribution) == pytest.approx(100, abs=0.01)
        assert results.probability_distribution[-1].cumulative == pytest.approx(100)

    def test_custom_percentiles(self, params, roller):
        results = run_simulation_with_stats(params, roller, percentiles=(25, 75, 95))

        assert set(results.percentiles) == {25, 75, 95}

    def test_zero_damage_is_a_result_not_an_error(self, roller):
        results = run_simulation_with_stats({"numAttacks": 10, "toHit": "none", "toWound": 4, "iterations": 100},
                                            roller)

        assert results.mean == 0
        assert results.max == 0
        assert [(p.wounds, p.probability) for p in results.probability_distribution] == [(0, 100.0)]

    def test_logs_timing(self, params, roller, caplog):
        caplog.set_level(logging.DEBUG, logger="ninth_age_dice.driver")

        run_simulation_with_stats(params, roller)

        assert "Ran 1000 iterations" in caplog.text


class TestRollerIsolation:
    """Test that a run given its own roller leaves the shared roller alone."""

    def test_explicit_roller_never_touches_default(self, params, scripted):
        previous = get_default_roller()
        set_default_roller(scripted([]))
        try:
            results = run_simulation_with_stats(params, DiceRoller())
            expected = CombatResolver(DiceRoller()).calculate_expected_damage(params)
        finally:
            set_default_roller(previous)

        assert len(results.distribution) == 1000
        assert expected > 0
