"""Statistics and probability distributions over simulated damage totals"""

from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

DEFAULT_PERCENTILES = (10, 90)


@dataclass(frozen=True)
class ProbabilityPoint:
    """Single point in the probability distribution"""
    wounds: int
    count: int
    probability: float  # percentage, 0-100
    cumulative: float  # chance of dealing at most ``wounds``, 0-100


@dataclass
class SimulationResults:
    """Raw totals of a simulation run plus everything derived from them"""
    distribution: List[int]
    mean: float
    median: float
    mode: int
    variance: float
    percentiles: Dict[int, float]
    min: int
    max: int
    probability_distribution: List[ProbabilityPoint] = field(default_factory=list)
    total_iterations: int = 0
    execution_time_ms: float = 0.0

    @property
    def std_dev(self) -> float:
        return float(np.sqrt(self.variance))

    def probability_at_least(self, wounds: int) -> float:
        return get_probability_at_least(self.probability_distribution, wounds)

    def probability_exact(self, wounds: int) -> float:
        return get_probability_exact(self.probability_distribution, wounds)

    def summary(self) -> dict:
        """Statistics without the raw totals"""
        data = asdict(self)
        del data["distribution"]
        return data


def calculate_statistics(distribution: Sequence[int], total_iterations: int, execution_time_ms: float,
                         percentiles: Sequence[int] = DEFAULT_PERCENTILES) -> SimulationResults:
    """
    Calculate statistical measures from simulation distribution

    Args:
        distribution: Wounds dealt in each iteration
        total_iterations: Number of iterations that were run
        execution_time_ms: Time taken to run them
        percentiles: Percentiles to report alongside the median
    """
    values = [int(v) for v in distribution]
    sorted_values = sorted(values)
    mean = calculate_mean(values)

    return SimulationResults(
        distribution=values,
        mean=mean,
        median=calculate_percentile(sorted_values, 50),
        mode=calculate_mode(values),
        variance=calculate_variance(values, mean),
        percentiles={p: calculate_percentile(sorted_values, p) for p in percentiles},
        min=sorted_values[0] if sorted_values else 0,
        max=sorted_values[-1] if sorted_values else 0,
        probability_distribution=build_probability_distribution(values),
        total_iterations=total_iterations,
        execution_time_ms=execution_time_ms,
    )


def calculate_mean(values: Sequence[int]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def calculate_variance(values: Sequence[int], mean: Optional[float] = None) -> float:
    """Population variance (divides by n)"""
    if len(values) == 0:
        return 0.0
    if mean is None:
        mean = calculate_mean(values)
    deviations = np.asarray(values, dtype=float) - mean
    return float(np.mean(deviations ** 2))


def calculate_mode(values: Sequence[int]) -> int:
    """Most common value; ties go to the value seen first"""
    if len(values) == 0:
        return 0
    value, _ = Counter(values).most_common(1)[0]
    return int(value)


def calculate_percentile(sorted_values: Sequence[int], percentile: float) -> float:
    """Percentile of sorted values, interpolating linearly between neighbouring ranks"""
    if len(sorted_values) == 0:
        return 0.0
    return float(np.percentile(sorted_values, percentile))


def build_probability_distribution(values: Sequence[int]) -> List[ProbabilityPoint]:
    if len(values) == 0:
        return []

    counter = Counter(values)
    total = len(values)
    points = []
    cumulative_count = 0

    for wounds, count in sorted(counter.items()):
        cumulative_count += count
        points.append(ProbabilityPoint(
            wounds=int(wounds),
            count=count,
            probability=count / total * 100,
            cumulative=cumulative_count / total * 100,
        ))

    return points


def get_probability_at_least(points: Sequence[ProbabilityPoint], wounds: int) -> float:
    """Chance (0-100) of dealing ``wounds`` or more"""
    for point in points:
        if point.wounds >= wounds:
            return 100 - (point.cumulative - point.probability)
    return 0.0


def get_probability_exact(points: Sequence[ProbabilityPoint], wounds: int) -> float:
    for point in points:
        if point.wounds == wounds:
            return point.probability
    return 0.0
