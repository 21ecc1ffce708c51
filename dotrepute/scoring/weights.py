"""
Weight configuration for combining component scores.

Weights are integer percents that must sum to exactly 100. Construction
never fails; validity is checked explicitly with validate() and the engine
refuses to score with an invalid configuration instead of renormalizing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from dotrepute.core.exceptions import InvalidWeightsError

WEIGHT_TOTAL = 100


@dataclass(frozen=True)
class WeightConfig:
    """Per-source weights in percent: governance, staking, identity, community."""

    governance: int = 30
    staking: int = 30
    identity: int = 20
    community: int = 20

    @classmethod
    def from_tuple(cls, values: tuple[int, ...] | list[int]) -> WeightConfig:
        governance, staking, identity, community = values
        return cls(governance, staking, identity, community)

    @classmethod
    def from_fractions(
        cls,
        governance: float,
        staking: float,
        identity: float,
        community: float,
    ) -> WeightConfig:
        """
        Build from fractional weights that sum to 1.0.

        Fractions are converted to whole percents; a sum other than 1.0 (or
        fractions that do not map to whole percents) raises InvalidWeightsError.
        """
        fractions = (governance, staking, identity, community)
        if not math.isclose(sum(fractions), 1.0, abs_tol=1e-9):
            raise InvalidWeightsError(
                f"Fractional weights must sum to 1.0, got {sum(fractions)}",
                value=list(fractions),
            )
        percents = tuple(round(f * WEIGHT_TOTAL) for f in fractions)
        for fraction, percent in zip(fractions, percents):
            if not math.isclose(fraction * WEIGHT_TOTAL, percent, abs_tol=1e-6):
                raise InvalidWeightsError(
                    f"Fractional weight {fraction} is not a whole percent",
                    value=list(fractions),
                )
        return cls.from_tuple(percents)

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.governance, self.staking, self.identity, self.community)

    @property
    def total(self) -> int:
        return sum(self.as_tuple())

    def is_valid(self) -> bool:
        return all(w >= 0 for w in self.as_tuple()) and self.total == WEIGHT_TOTAL

    def validate(self) -> None:
        """Raise InvalidWeightsError unless all weights are non-negative and sum to 100."""
        values = self.as_tuple()
        if any(w < 0 for w in values):
            raise InvalidWeightsError(f"Weights must be non-negative, got {list(values)}", value=list(values))
        if self.total != WEIGHT_TOTAL:
            raise InvalidWeightsError(
                f"Weights must sum to {WEIGHT_TOTAL}, got {self.total}",
                value=list(values),
            )

    def to_dict(self) -> dict[str, int]:
        return {
            "governance": self.governance,
            "staking": self.staking,
            "identity": self.identity,
            "community": self.community,
        }


DEFAULT_WEIGHTS = WeightConfig()
