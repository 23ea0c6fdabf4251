"""Monte Carlo combat simulator for The Ninth Age"""

from .config import DEFAULT_ITERATIONS, SimulationParameters
from .dice import (
    DiceExpression,
    DiceRoller,
    compile_dice_expression,
    expected_value_from_dice,
    get_default_roller,
    parse_dice_expression,
    roll_d3,
    roll_d6,
    roll_die,
    set_default_roller,
    validate_dice_expression,
)
from .driver import run_simulation, run_simulation_with_stats
from .errors import DiceExpressionError, InvalidParameterError, InvalidThresholdError, SimulationError
from .probability import (
    ProbabilityPoint,
    SimulationResults,
    calculate_statistics,
    get_probability_at_least,
    get_probability_exact,
)
from .rules import is_success, should_reroll
from .simulator import CombatResolver, HitTracker
from .types import FailureReroll, HitValue, SuccessReroll

__version__ = "1.0.0"
