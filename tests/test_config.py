"""
Tests for simulation parameters.
"""
import dataclasses

import pytest

from ninth_age_dice.config import DEFAULT_ITERATIONS, SimulationParameters
from ninth_age_dice.errors import DiceExpressionError, InvalidParameterError, InvalidThresholdError
from ninth_age_dice.types import FailureReroll, HitValue, SuccessReroll


class TestDefaults:
    """Test that optional fields default to inert values."""

    def test_only_required_fields(self):
        params = SimulationParameters(num_attacks=10, to_hit=4, to_wound=4)

        assert params.to_hit == HitValue.of(4)
        assert params.armor_save.is_none
        assert params.special_save.is_none
        assert params.armor_piercing == 0
        assert params.reroll_hit_failures is FailureReroll.NONE
        assert params.reroll_special_save_successes is SuccessReroll.NONE
        assert not any([params.poison, params.poison_on_5_plus, params.lethal_strike,
                        params.fury, params.red_fury])
        assert params.multiple_wounds == 1
        assert params.target_max_wounds is None
        assert params.iterations == DEFAULT_ITERATIONS

    def test_values_are_coerced(self):
        params = SimulationParameters(num_attacks="2d6", to_hit="auto", to_wound="5+",
                                      reroll_wound_failures="1s", reroll_hit_successes="6s", poison=1)

        assert params.to_hit.is_auto
        assert params.to_wound == HitValue.of(5)
        assert params.reroll_wound_failures is FailureReroll.ONES
        assert params.reroll_hit_successes is SuccessReroll.SIXES
        assert params.poison is True

    def test_parameters_are_immutable(self):
        params = SimulationParameters(num_attacks=10, to_hit=4, to_wound=4)

        with pytest.raises(dataclasses.FrozenInstanceError):
            params.to_hit = HitValue.of(3)

    def test_replace(self):
        params = SimulationParameters(num_attacks=10, to_hit=4, to_wound=4, red_fury=True)
        changed = params.replace(red_fury=False)

        assert params.red_fury is True
        assert changed.red_fury is False
        assert changed.num_attacks == 10


class TestValidation:
    """Test rejection of malformed parameters."""

    def test_bad_attack_expression(self):
        with pytest.raises(DiceExpressionError, match="2d7"):
            SimulationParameters(num_attacks="2d7", to_hit=4, to_wound=4)

    def test_bad_multiple_wounds(self):
        with pytest.raises(DiceExpressionError):
            SimulationParameters(num_attacks=1, to_hit=4, to_wound=4, multiple_wounds="lots")

    def test_bad_threshold(self):
        with pytest.raises(InvalidThresholdError):
            SimulationParameters(num_attacks=1, to_hit=7, to_wound=4)

    @pytest.mark.parametrize("field,value", [
        ("armor_piercing", -1),
        ("armor_piercing", 1.5),
        ("target_max_wounds", 0),
        ("iterations", 0),
        ("iterations", 10 ** 7),
        ("reroll_hit_failures", "sometimes"),
    ])
    def test_bad_values(self, field, value):
        with pytest.raises(InvalidParameterError):
            SimulationParameters(num_attacks=1, to_hit=4, to_wound=4, **{field: value})


class TestFromMapping:
    """Test building parameters from plain dicts."""

    def test_camel_case_keys(self):
        params = SimulationParameters.from_mapping({
            "numAttacks": "d6",
            "toHit": 3,
            "toWound": "auto",
            "rerollHitFailures": "1s",
            "armorSave": 4,
            "armorPiercing": 1,
            "poisonOn5Plus": True,
            "lethalStrike": True,
            "redFury": True,
            "multipleWounds": "d3",
            "targetMaxWounds": 2,
            "iterations": 500,
        })

        assert params.num_attacks == "d6"
        assert params.to_hit == HitValue.of(3)
        assert params.to_wound.is_auto
        assert params.reroll_hit_failures is FailureReroll.ONES
        assert params.armor_save == HitValue.of(4)
        assert params.armor_piercing == 1
        assert params.poison_on_5_plus is True
        assert params.lethal_strike is True
        assert params.red_fury is True
        assert params.multiple_wounds == "d3"
        assert params.target_max_wounds == 2
        assert params.iterations == 500

    def test_snake_case_keys(self):
        params = SimulationParameters.from_mapping({"num_attacks": 5, "to_hit": 4, "to_wound": 4, "fury": True})

        assert params.fury is True

    def test_missing_required(self):
        with pytest.raises(InvalidParameterError, match="to_wound"):
            SimulationParameters.from_mapping({"numAttacks": 5, "toHit": 4})

    def test_unknown_key(self):
        with pytest.raises(InvalidParameterError, match="rerollEverything"):
            SimulationParameters.from_mapping({"numAttacks": 5, "toHit": 4, "toWound": 4, "rerollEverything": True})
