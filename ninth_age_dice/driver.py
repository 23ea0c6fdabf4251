"""Entry points that run a full simulation"""

import logging
import time
from typing import Any, List, Mapping, Optional, Sequence, Union

from .config import SimulationParameters
from .dice import DiceRoller
from .probability import DEFAULT_PERCENTILES, SimulationResults, calculate_statistics
from .simulator import CombatResolver

logger = logging.getLogger(__name__)

ParametersLike = Union[SimulationParameters, Mapping[str, Any]]


def apply_defaults(params: ParametersLike) -> SimulationParameters:
    """Fill in defaults for anything the caller left out"""
    if isinstance(params, SimulationParameters):
        return params
    return SimulationParameters.from_mapping(params)


def run_simulation(params: ParametersLike, roller: Optional[DiceRoller] = None) -> List[int]:
    """Run the configured number of iterations and return the wounds dealt in each"""
    full_params = apply_defaults(params)
    resolver = CombatResolver(roller)
    return [resolver.simulate_single_sequence(full_params) for _ in range(full_params.iterations)]


def run_simulation_with_stats(params: ParametersLike, roller: Optional[DiceRoller] = None,
                              percentiles: Sequence[int] = DEFAULT_PERCENTILES) -> SimulationResults:
    """Run the simulation and summarize it"""
    full_params = apply_defaults(params)

    start_time = time.perf_counter()
    distribution = run_simulation(full_params, roller)
    execution_time_ms = (time.perf_counter() - start_time) * 1000

    logger.debug("Ran %d iterations in %.1f ms", full_params.iterations, execution_time_ms)
    return calculate_statistics(distribution, full_params.iterations, execution_time_ms, percentiles)
