"""Attack sequence resolution: hit, wound, armor save, special save, multiple wounds"""

from dataclasses import dataclass
from typing import List, NamedTuple, Optional

from .config import SimulationParameters
from .dice import DiceRoller, dice_distribution, get_default_roller, parse_dice_expression
from .rules import is_success, natural_success_probability, roll_with_reroll, success_probability
from .types import FailureReroll, HitValue, SuccessReroll


@dataclass(frozen=True)
class HitTracker:
    """Special properties of one hit as it moves through the phases"""
    is_poison: bool = False  # auto-wounds, no wound roll
    is_lethal: bool = False  # ignores armor and special saves


PLAIN_HIT = HitTracker()


class BatchResult(NamedTuple):
    unsaved_hits: int  # wounds that got through both saves, before multiple wounds
    total_wounds: int


class CombatResolver:
    """Handles multi-stage combat resolution"""

    def __init__(self, roller: Optional[DiceRoller] = None):
        self.dice_roller = roller if roller is not None else get_default_roller()

    def resolve_attack_count(self, params: SimulationParameters) -> int:
        """Roll for variable attacks; a negative expression result means no attacks"""
        return max(0, parse_dice_expression(params.num_attacks, self.dice_roller))

    def roll_to_hit(self, num_attacks: int, params: SimulationParameters) -> List[HitTracker]:
        """Stage 1: hit rolls. Returns a tracker per successful hit."""
        hits = []
        poison_from = 5 if params.poison_on_5_plus else 6

        for _ in range(num_attacks):
            natural, roll = roll_with_reroll(self.dice_roller, params.to_hit,
                                             params.reroll_hit_failures, params.reroll_hit_successes)
            if not is_success(roll, params.to_hit):
                continue

            # Poison and fury look at the natural roll, not the reroll
            is_poison = (params.poison or params.poison_on_5_plus) and natural >= poison_from
            hits.append(HitTracker(is_poison=is_poison))

            if params.fury and natural == 6:
                hits.append(PLAIN_HIT)

        return hits

    def roll_to_wound(self, hits: List[HitTracker], params: SimulationParameters) -> List[HitTracker]:
        """Stage 2: wound rolls. Poisoned hits wound without rolling."""
        wounds = []

        for hit in hits:
            if hit.is_poison:
                wounds.append(hit)
                continue

            natural, roll = roll_with_reroll(self.dice_roller, params.to_wound,
                                             params.reroll_wound_failures, params.reroll_wound_successes)
            if is_success(roll, params.to_wound):
                wounds.append(HitTracker(is_poison=hit.is_poison,
                                         is_lethal=params.lethal_strike and natural == 6))

        return wounds

    def roll_armor_saves(self, wounds: List[HitTracker], params: SimulationParameters) -> List[HitTracker]:
        """Stage 3: armor saves, made harder by armor piercing. Returns the unsaved wounds."""
        threshold = params.armor_save.with_penalty(params.armor_piercing)
        return self._roll_saves(wounds, threshold,
                                params.reroll_armor_save_failures, params.reroll_armor_save_successes)

    def roll_special_saves(self, wounds: List[HitTracker], params: SimulationParameters) -> List[HitTracker]:
        """Stage 4: ward/regeneration saves. Armor piercing does not apply."""
        return self._roll_saves(wounds, params.special_save,
                                params.reroll_special_save_failures, params.reroll_special_save_successes)

    def _roll_saves(self, wounds: List[HitTracker], threshold: HitValue,
                    failure_reroll: FailureReroll, success_reroll: SuccessReroll) -> List[HitTracker]:
        unsaved = []

        for wound in wounds:
            if wound.is_lethal or threshold.is_none:
                unsaved.append(wound)
                continue
            if threshold.is_auto:
                continue

            _, roll = roll_with_reroll(self.dice_roller, threshold, failure_reroll, success_reroll)
            if not is_success(roll, threshold):
                unsaved.append(wound)

        return unsaved

    def apply_multiple_wounds(self, wounds: List[HitTracker], params: SimulationParameters) -> int:
        """Stage 5: roll wounds per unsaved wound, capping each one at the target's wounds"""
        total = 0
        for _ in wounds:
            per_hit = max(0, parse_dice_expression(params.multiple_wounds, self.dice_roller))
            if params.target_max_wounds is not None:
                per_hit = min(per_hit, params.target_max_wounds)
            total += per_hit
        return total

    def simulate_attack_batch(self, num_attacks: int, params: SimulationParameters) -> BatchResult:
        """Run every stage once for a fixed number of attacks"""
        hits = self.roll_to_hit(num_attacks, params)
        wounds = self.roll_to_wound(hits, params)
        unsaved = self.roll_armor_saves(wounds, params)
        unsaved = self.roll_special_saves(unsaved, params)
        total = self.apply_multiple_wounds(unsaved, params)
        return BatchResult(unsaved_hits=len(unsaved), total_wounds=total)

    def simulate_single_sequence(self, params: SimulationParameters) -> int:
        """Resolve one full trial and return the wounds dealt"""
        num_attacks = self.resolve_attack_count(params)
        first = self.simulate_attack_batch(num_attacks, params)

        if not params.red_fury or first.unsaved_hits == 0:
            return first.total_wounds

        # Red Fury: each unsaved wound grants one more attack, and those
        # extra attacks cannot grant further attacks
        extra = self.simulate_attack_batch(first.unsaved_hits, params.replace(red_fury=False))
        return first.total_wounds + extra.total_wounds

    def calculate_expected_damage(self, params: SimulationParameters) -> float:
        """Calculate theoretical expected damage based on probabilities"""
        expected_attacks = sum(max(0, value) * p for value, p in dice_distribution(params.num_attacks).items())

        # Hit stage, split into poisoned and plain hits
        hit_rerolls = (params.reroll_hit_failures, params.reroll_hit_successes)
        hit_prob = success_probability(params.to_hit, *hit_rerolls)
        if params.poison or params.poison_on_5_plus:
            poison_prob = natural_success_probability(params.to_hit, 5 if params.poison_on_5_plus else 6, *hit_rerolls)
        else:
            poison_prob = 0.0
        fury_prob = natural_success_probability(params.to_hit, 6, *hit_rerolls) if params.fury else 0.0
        plain_hit_prob = hit_prob - poison_prob + fury_prob

        # Wound stage
        wound_rerolls = (params.reroll_wound_failures, params.reroll_wound_successes)
        wound_prob = success_probability(params.to_wound, *wound_rerolls)
        lethal_prob = natural_success_probability(params.to_wound, 6, *wound_rerolls) if params.lethal_strike else 0.0

        # Saves
        armor = params.armor_save.with_penalty(params.armor_piercing)
        armor_fail_prob = 1 - success_probability(armor, params.reroll_armor_save_failures,
                                                  params.reroll_armor_save_successes)
        special_fail_prob = 1 - success_probability(params.special_save, params.reroll_special_save_failures,
                                                    params.reroll_special_save_successes)
        through_prob = armor_fail_prob * special_fail_prob

        unsaved_per_attack = (poison_prob * through_prob
                              + plain_hit_prob * (lethal_prob + (wound_prob - lethal_prob) * through_prob))

        # Wounds per unsaved wound, capped individually
        cap = params.target_max_wounds
        damage_per_wound = 0.0
        for value, p in dice_distribution(params.multiple_wounds).items():
            value = max(0, value)
            if cap is not None:
                value = min(value, cap)
            damage_per_wound += value * p

        expected = expected_attacks * unsaved_per_attack * damage_per_wound
        if params.red_fury:
            expected += expected_attacks * unsaved_per_attack * unsaved_per_attack * damage_per_wound
        return expected
