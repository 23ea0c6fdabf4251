"""Success and reroll evaluation for a single die"""

from typing import Dict, Tuple

from .dice import DICE_MAX, DICE_MIN, DiceRoller
from .types import FailureReroll, HitValue, SuccessReroll, ThresholdKind

FACES = range(DICE_MIN, DICE_MAX + 1)


def is_success(roll: int, threshold: HitValue) -> bool:
    """Check if a roll meets the threshold"""
    if threshold.kind is ThresholdKind.AUTO:
        return True
    if threshold.kind is ThresholdKind.NONE:
        return False
    return roll >= threshold.target


def should_reroll(roll: int, threshold: HitValue,
                  failure_reroll: FailureReroll = FailureReroll.NONE,
                  success_reroll: SuccessReroll = SuccessReroll.NONE) -> bool:
    """
    Decide whether a roll is eligible for its one reroll

    Args:
        roll: The natural roll (1-6)
        threshold: Target the roll is tested against
        failure_reroll: Which failed rolls may be rerolled ('none', '1s', 'all')
        success_reroll: Which successful rolls are rerolled ('none', '6s', 'all')
    """
    if failure_reroll is FailureReroll.NONE and success_reroll is SuccessReroll.NONE:
        return False

    if not is_success(roll, threshold):
        if failure_reroll is FailureReroll.ALL:
            return True
        return failure_reroll is FailureReroll.ONES and roll == 1

    if success_reroll is SuccessReroll.ALL:
        return True
    return success_reroll is SuccessReroll.SIXES and roll == 6


def roll_with_reroll(roller: DiceRoller, threshold: HitValue,
                     failure_reroll: FailureReroll = FailureReroll.NONE,
                     success_reroll: SuccessReroll = SuccessReroll.NONE) -> Tuple[int, int]:
    """Roll a d6, rerolling it at most once. Returns (natural roll, final roll)."""
    natural = roller.roll_d6()
    if should_reroll(natural, threshold, failure_reroll, success_reroll):
        return natural, roller.roll_d6()
    return natural, natural


def success_given_natural(threshold: HitValue,
                          failure_reroll: FailureReroll = FailureReroll.NONE,
                          success_reroll: SuccessReroll = SuccessReroll.NONE) -> Dict[int, float]:
    """Probability of ending in a success for each natural roll"""
    base = sum(is_success(face, threshold) for face in FACES) / len(FACES)
    return {
        face: base if should_reroll(face, threshold, failure_reroll, success_reroll)
        else float(is_success(face, threshold))
        for face in FACES
    }


def success_probability(threshold: HitValue,
                        failure_reroll: FailureReroll = FailureReroll.NONE,
                        success_reroll: SuccessReroll = SuccessReroll.NONE) -> float:
    """Exact chance that a roll (with its reroll) succeeds"""
    outcomes = success_given_natural(threshold, failure_reroll, success_reroll)
    return sum(outcomes.values()) / len(FACES)


def natural_success_probability(threshold: HitValue, minimum_natural: int,
                                failure_reroll: FailureReroll = FailureReroll.NONE,
                                success_reroll: SuccessReroll = SuccessReroll.NONE) -> float:
    """Chance of a success whose natural roll was at least ``minimum_natural``"""
    outcomes = success_given_natural(threshold, failure_reroll, success_reroll)
    return sum(p for face, p in outcomes.items() if face >= minimum_natural) / len(FACES)
