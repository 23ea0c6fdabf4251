"""Simulation parameters and their defaults"""

import dataclasses
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import numpy as np

from .dice import DiceValue, compile_dice_expression
from .errors import InvalidParameterError
from .types import FailureReroll, HitValue, SuccessReroll

DEFAULT_ITERATIONS = 10000
MAX_ITERATIONS = 1000000

# camelCase keys that don't convert mechanically
_KEY_ALIASES = {
    "poisonOn5Plus": "poison_on_5_plus",
}

_THRESHOLD_FIELDS = ("to_hit", "to_wound", "armor_save", "special_save")
_FAILURE_FIELDS = ("reroll_hit_failures", "reroll_wound_failures",
                   "reroll_armor_save_failures", "reroll_special_save_failures")
_SUCCESS_FIELDS = ("reroll_hit_successes", "reroll_wound_successes",
                   "reroll_armor_save_successes", "reroll_special_save_successes")
_FLAG_FIELDS = ("poison", "poison_on_5_plus", "lethal_strike", "fury", "red_fury")


@dataclass(frozen=True)
class SimulationParameters:
    """Configuration for one attack sequence

    Only the attack count and the hit/wound thresholds are required; every
    other field defaults to "no reroll, no save, no special rule".
    """
    # Attack phase
    num_attacks: DiceValue  # 10, "d6", "2d6+3", "d3"
    to_hit: HitValue
    to_wound: HitValue
    reroll_hit_failures: FailureReroll = FailureReroll.NONE
    reroll_hit_successes: SuccessReroll = SuccessReroll.NONE
    reroll_wound_failures: FailureReroll = FailureReroll.NONE
    reroll_wound_successes: SuccessReroll = SuccessReroll.NONE

    # Save phase (rerolls here belong to the defender)
    armor_save: HitValue = HitValue.none()
    armor_piercing: int = 0
    reroll_armor_save_failures: FailureReroll = FailureReroll.NONE
    reroll_armor_save_successes: SuccessReroll = SuccessReroll.NONE
    special_save: HitValue = HitValue.none()  # ward/regeneration
    reroll_special_save_failures: FailureReroll = FailureReroll.NONE
    reroll_special_save_successes: SuccessReroll = SuccessReroll.NONE

    # Special rules
    poison: bool = False  # natural 6s to hit auto-wound
    poison_on_5_plus: bool = False  # natural 5+ to hit auto-wound
    lethal_strike: bool = False  # natural 6s to wound ignore all saves
    fury: bool = False  # natural 6s to hit score an extra hit
    red_fury: bool = False  # unsaved wounds grant one extra, non-chaining attack
    multiple_wounds: DiceValue = 1
    target_max_wounds: Optional[int] = None  # caps each unsaved wound, None = no cap

    iterations: int = DEFAULT_ITERATIONS

    def __post_init__(self):
        for name in _THRESHOLD_FIELDS:
            object.__setattr__(self, name, HitValue.coerce(getattr(self, name)))
        for name in _FAILURE_FIELDS:
            object.__setattr__(self, name, FailureReroll.coerce(getattr(self, name)))
        for name in _SUCCESS_FIELDS:
            object.__setattr__(self, name, SuccessReroll.coerce(getattr(self, name)))
        for name in _FLAG_FIELDS:
            object.__setattr__(self, name, bool(getattr(self, name)))

        # Raises DiceExpressionError for anything malformed
        compile_dice_expression(self.num_attacks)
        compile_dice_expression(self.multiple_wounds)

        if not _is_int(self.armor_piercing) or self.armor_piercing < 0:
            raise InvalidParameterError(f"Armor piercing must be a non-negative integer, got {self.armor_piercing!r}")
        if self.target_max_wounds is not None and (not _is_int(self.target_max_wounds) or self.target_max_wounds < 1):
            raise InvalidParameterError(f"Target max wounds must be at least 1, got {self.target_max_wounds!r}")
        if not _is_int(self.iterations) or not 1 <= self.iterations <= MAX_ITERATIONS:
            raise InvalidParameterError(f"Iterations must be between 1 and {MAX_ITERATIONS}, got {self.iterations!r}")

    def replace(self, **changes) -> "SimulationParameters":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SimulationParameters":
        """Build parameters from a dict with snake_case or camelCase keys

        Keys that are missing fall back to the defaults; unknown keys are rejected.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs = {}
        for key, value in mapping.items():
            name = _normalize_key(key)
            if name not in known:
                raise InvalidParameterError(f"Unknown simulation parameter: {key}")
            kwargs[name] = value

        missing = [name for name in ("num_attacks", "to_hit", "to_wound") if name not in kwargs]
        if missing:
            raise InvalidParameterError(f"Missing required parameters: {', '.join(missing)}")
        return cls(**kwargs)


def _normalize_key(key: str) -> str:
    if key in _KEY_ALIASES:
        return _KEY_ALIASES[key]
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)
