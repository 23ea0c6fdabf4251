"""Dice primitives: the random source, D6/D3 rolls and dice expressions"""

import math
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional, Union

import numpy as np

from .errors import DiceExpressionError

# Constants
DICE_MIN = 1
DICE_MAX = 6
SUPPORTED_SIDES = (3, 6)
BUFFER_SIZE = 4096

# [count]d<sides>[+/-modifier], matched after whitespace is stripped
DICE_PATTERN = re.compile(r"(\d*)d(\d+)([+-]\d+)?")

DiceValue = Union[int, str]


class DiceRoller:
    """Handles dice rolling and owns the random generator

    Every roll made during a simulation goes through one roller, so seeding
    the roller makes a whole run reproducible.
    """

    def __init__(self, seed=None, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self._buffer = []
        self._position = 0

    def roll_d6(self) -> int:
        """Roll a single d6"""
        # Drawing one die at a time from numpy is slow, so dice are pulled in blocks
        if self._position >= len(self._buffer):
            self._buffer = self.rng.integers(DICE_MIN, DICE_MAX + 1, size=BUFFER_SIZE).tolist()
            self._position = 0
        value = self._buffer[self._position]
        self._position += 1
        return value

    def roll_d3(self) -> int:
        """Roll a d3 as a halved d6 rounded up (1-2 -> 1, 3-4 -> 2, 5-6 -> 3)"""
        return math.ceil(self.roll_d6() / 2)

    def roll_die(self, sides: int) -> int:
        """Roll a single die with the given number of sides"""
        if sides == 6:
            return self.roll_d6()
        if sides == 3:
            return self.roll_d3()
        if sides < 1:
            raise ValueError(f"A die needs at least one side, got {sides}")
        return int(self.rng.integers(1, sides + 1))


_default_roller = DiceRoller()


def get_default_roller() -> DiceRoller:
    return _default_roller


def set_default_roller(roller: DiceRoller) -> None:
    """Replace the process-wide roller used when none is passed explicitly"""
    global _default_roller
    _default_roller = roller


def roll_die(sides: int) -> int:
    return _default_roller.roll_die(sides)


def roll_d6() -> int:
    return _default_roller.roll_d6()


def roll_d3() -> int:
    return _default_roller.roll_d3()


@dataclass(frozen=True)
class DiceExpression:
    """A parsed ``NdS+M`` expression"""
    count: int
    sides: int
    modifier: int = 0

    @property
    def minimum(self) -> int:
        return self.count + self.modifier

    @property
    def maximum(self) -> int:
        return self.count * self.sides + self.modifier

    @property
    def expected(self) -> float:
        # Expected value of dN is (N+1)/2
        return self.count * (self.sides + 1) / 2.0 + self.modifier

    def roll(self, roller: Optional[DiceRoller] = None) -> int:
        roller = roller or _default_roller
        total = 0
        for _ in range(self.count):
            total += roller.roll_die(self.sides)
        return total + self.modifier

    def distribution(self) -> Dict[int, float]:
        """Exact probability of every possible result"""
        face = np.full(self.sides, 1.0 / self.sides)
        pmf = np.array([1.0])
        for _ in range(self.count):
            pmf = np.convolve(pmf, face)
        return {self.minimum + offset: float(p) for offset, p in enumerate(pmf)}

    def __str__(self) -> str:
        text = f"{self.count if self.count != 1 else ''}d{self.sides}"
        if self.modifier:
            text += f"{self.modifier:+d}"
        return text


@lru_cache(maxsize=256)
def _compile_text(text: str) -> Union[int, DiceExpression]:
    expr = re.sub(r"\s+", "", text).lower()

    # Plain integer
    if re.fullmatch(r"\d+", expr):
        return int(expr)

    match = DICE_PATTERN.fullmatch(expr)
    if not match:
        raise DiceExpressionError(text)

    count = int(match.group(1)) if match.group(1) else 1
    sides = int(match.group(2))
    modifier = int(match.group(3)) if match.group(3) else 0

    if sides not in SUPPORTED_SIDES:
        raise DiceExpressionError(text, f"only d3 and d6 are supported, got d{sides}")

    return DiceExpression(count, sides, modifier)


def compile_dice_expression(expr: DiceValue) -> Union[int, DiceExpression]:
    """Parse an int or expression string without rolling it"""
    if isinstance(expr, DiceExpression):
        return expr
    if isinstance(expr, bool):
        raise DiceExpressionError(expr)
    if isinstance(expr, (int, np.integer)):
        if expr < 0:
            raise DiceExpressionError(expr, "literal values cannot be negative")
        return int(expr)
    if not isinstance(expr, str):
        raise DiceExpressionError(expr)
    return _compile_text(expr)


def validate_dice_expression(expr: DiceValue) -> DiceValue:
    """Validate a dice expression. Returns an int or the normalized expression, raises DiceExpressionError if invalid."""
    compiled = compile_dice_expression(expr)
    if isinstance(compiled, DiceExpression):
        return str(compiled)
    return compiled


def parse_dice_expression(expr: DiceValue, roller: Optional[DiceRoller] = None) -> int:
    """Roll a dice expression and return the result

    Supports plain numbers and "d6", "2d6", "d3", "2d6+3", "3d3-1".
    The result is not clamped, so "d6-3" can come out negative.
    """
    compiled = compile_dice_expression(expr)
    if isinstance(compiled, int):
        return compiled
    return compiled.roll(roller)


def dice_distribution(expr: DiceValue) -> Dict[int, float]:
    """Exact probability distribution of an int or dice expression"""
    compiled = compile_dice_expression(expr)
    if isinstance(compiled, int):
        return {compiled: 1.0}
    return compiled.distribution()


def expected_value_from_dice(expr: DiceValue) -> float:
    """Calculate expected value from a dice expression"""
    compiled = compile_dice_expression(expr)
    if isinstance(compiled, int):
        return float(compiled)
    return compiled.expected
