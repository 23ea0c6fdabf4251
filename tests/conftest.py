"""
Shared fixtures for the simulator test suite.

Statistical tests use a seeded roller so they are reproducible; phase tests
use a scripted roller that hands out exactly the rolls a test lists.
"""

import matplotlib
import pytest

matplotlib.use("Agg")

from ninth_age_dice.dice import DiceRoller


class ScriptedRoller(DiceRoller):
    """Roller that returns a fixed sequence of d6 results"""

    def __init__(self, rolls):
        super().__init__(seed=0)
        self.rolls = list(rolls)

    def roll_d6(self):
        if not self.rolls:
            raise AssertionError("Ran out of scripted rolls")
        return self.rolls.pop(0)


@pytest.fixture
def roller():
    """Seeded roller for statistical tests."""
    return DiceRoller(seed=1234)


@pytest.fixture
def scripted():
    """Factory for rollers that return the given d6 results in order."""
    return ScriptedRoller
