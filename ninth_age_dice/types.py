"""Thresholds and reroll policies shared by every roll phase"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np

from .errors import InvalidParameterError, InvalidThresholdError

MIN_TARGET = 2
MAX_TARGET = 6
IMPOSSIBLE_TARGET = 7


class ThresholdKind(Enum):
    TARGET = "target"
    AUTO = "auto"
    NONE = "none"


@dataclass(frozen=True)
class HitValue:
    """Success threshold for a roll: a 2+ to 6+ target, auto-success or impossible

    ``AUTO`` needs no roll and always succeeds. ``NONE`` can never succeed,
    which for a save means the defender has no save at all.
    """
    kind: ThresholdKind
    target: Optional[int] = None

    def __post_init__(self):
        if self.kind is ThresholdKind.TARGET:
            if isinstance(self.target, bool) or not isinstance(self.target, (int, np.integer)):
                raise InvalidThresholdError(f"Threshold target must be an integer, got {self.target!r}")
            if not MIN_TARGET <= self.target <= MAX_TARGET:
                raise InvalidThresholdError(
                    f"Threshold must be between {MIN_TARGET}+ and {MAX_TARGET}+, got {self.target}")
            object.__setattr__(self, "target", int(self.target))
        elif self.target is not None:
            raise InvalidThresholdError(f"'{self.kind.value}' thresholds do not take a target")

    @classmethod
    def of(cls, target: int) -> "HitValue":
        return cls(ThresholdKind.TARGET, target)

    @classmethod
    def auto(cls) -> "HitValue":
        return cls(ThresholdKind.AUTO)

    @classmethod
    def none(cls) -> "HitValue":
        return cls(ThresholdKind.NONE)

    @classmethod
    def coerce(cls, value: Union["HitValue", int, str]) -> "HitValue":
        """Build a HitValue from 2-6, "4+", "auto" or "none" """
        if isinstance(value, HitValue):
            return value
        if isinstance(value, str):
            text = value.strip().lower()
            if text == "auto":
                return cls.auto()
            if text == "none":
                return cls.none()
            text = text.rstrip("+")
            if not text.isdigit():
                raise InvalidThresholdError(f"Invalid threshold: {value!r}")
            return cls.of(int(text))
        if value is None:
            return cls.none()
        return cls.of(value)

    @property
    def is_auto(self) -> bool:
        return self.kind is ThresholdKind.AUTO

    @property
    def is_none(self) -> bool:
        return self.kind is ThresholdKind.NONE

    def with_penalty(self, penalty: int) -> "HitValue":
        """Make the threshold harder by ``penalty``; anything past 6+ becomes impossible"""
        if self.kind is not ThresholdKind.TARGET or penalty == 0:
            return self
        modified = min(IMPOSSIBLE_TARGET, self.target + penalty)
        if modified > MAX_TARGET:
            return HitValue.none()
        return HitValue.of(max(MIN_TARGET, modified))

    def __str__(self) -> str:
        if self.kind is ThresholdKind.TARGET:
            return f"{self.target}+"
        return self.kind.value


class FailureReroll(Enum):
    """Which failed rolls may be rerolled"""
    NONE = "none"
    ONES = "1s"
    ALL = "all"

    @classmethod
    def coerce(cls, value) -> "FailureReroll":
        return _coerce_policy(cls, value)


class SuccessReroll(Enum):
    """Which successful rolls must be rerolled"""
    NONE = "none"
    SIXES = "6s"
    ALL = "all"

    @classmethod
    def coerce(cls, value) -> "SuccessReroll":
        return _coerce_policy(cls, value)


def _coerce_policy(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return enum_cls.NONE
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise InvalidParameterError(
            f"Invalid {enum_cls.__name__} policy {value!r}, expected one of: {choices}") from None
