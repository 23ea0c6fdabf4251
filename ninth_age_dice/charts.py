"""Matplotlib charts for simulation results"""

from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

from .probability import SimulationResults


def plot_distribution(results: SimulationResults):
    """Probability of each damage total, and of dealing at least that much"""
    points = results.probability_distribution
    if not points:
        return None

    wounds = [p.wounds for p in points]
    probabilities = [p.probability for p in points]
    at_least = [100 - (p.cumulative - p.probability) for p in points]

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 8))

    # Top plot: exact probability
    ax1.bar(wounds, probabilities, color="#4CAF50", alpha=0.7)
    ax1.axvline(x=results.mean, color="black", linestyle="--", linewidth=1, label=f"Mean {results.mean:.2f}")
    ax1.set_xlabel("Wounds", fontsize=12)
    ax1.set_ylabel("Probability (%)", fontsize=12)
    ax1.set_title("Wounds Dealt", fontsize=14, fontweight="bold")
    ax1.legend(fontsize=11)
    ax1.grid(True, alpha=0.3, axis="y")

    # Bottom plot: chance of at least N wounds
    ax2.plot(wounds, at_least, marker="o", linewidth=2, markersize=6)
    ax2.fill_between(wounds, at_least, alpha=0.2)
    ax2.axhline(y=50, color="green", linestyle="--", linewidth=1, alpha=0.5)
    ax2.set_ylim(0, 105)
    ax2.set_xlabel("Wounds", fontsize=12)
    ax2.set_ylabel("Chance of at least (%)", fontsize=12)
    ax2.set_title("Chance to Deal at Least N Wounds", fontsize=14, fontweight="bold")
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig


def plot_convergence(results: SimulationResults, expected: Optional[float] = None):
    """Running mean of the simulated totals against the analytical expectation"""
    if len(results.distribution) < 2:
        return None

    iterations = np.arange(1, len(results.distribution) + 1)
    running_mean = np.cumsum(results.distribution) / iterations

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(iterations, running_mean, label="Simulated mean", linewidth=2)
    if expected is not None:
        ax.axhline(y=expected, color="black", linestyle="--", linewidth=1, label=f"Expected {expected:.2f}")
    ax.set_xscale("log")
    ax.set_xlabel("Iteration", fontsize=12)
    ax.set_ylabel("Mean wounds", fontsize=12)
    ax.set_title("Convergence of the Mean", fontsize=14, fontweight="bold")
    ax.legend(fontsize=11)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig
