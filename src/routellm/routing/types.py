"""Value types shared by strategies and the controller."""

from __future__ import annotations

import math
from dataclasses import dataclass

from routellm.routing.errors import InvalidStrategy, InvalidThreshold

ModelId = str


def validate_threshold(threshold: float) -> float:
    """Return *threshold* as a float, or raise if it is outside [0, 1]."""
    try:
        value = float(threshold)
    except (TypeError, ValueError):
        raise InvalidThreshold(f"Threshold {threshold!r} must be a float.") from None
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        raise InvalidThreshold(
            f"Invalid threshold {threshold}. Threshold must be a float between 0.0 and 1.0."
        )
    return value


@dataclass(frozen=True)
class ModelPair:
    """The strong and weak model a routing session chooses between."""

    strong: ModelId
    weak: ModelId

    def __post_init__(self) -> None:
        if not self.strong or not self.weak:
            raise ValueError("ModelPair needs both a strong and a weak model")
        if self.strong == self.weak:
            raise ValueError(f"ModelPair models must differ, got '{self.strong}' twice")


@dataclass(frozen=True)
class RoutingRequest:
    """One routing call: score *prompt* with *strategy_name* against *threshold*."""

    prompt: str
    strategy_name: str
    threshold: float

    def __post_init__(self) -> None:
        if not self.strategy_name:
            raise InvalidStrategy("Strategy name must not be empty.")
        object.__setattr__(self, "threshold", validate_threshold(self.threshold))


@dataclass(frozen=True)
class PairwiseOutcome:
    """A historical battle between two models. Ties never become outcomes."""

    model_a: ModelId
    model_b: ModelId
    winner: ModelId

    def __post_init__(self) -> None:
        if self.model_a == self.model_b:
            raise ValueError(f"Self-battle for '{self.model_a}' is not a valid outcome")
        if self.winner not in (self.model_a, self.model_b):
            raise ValueError(
                f"Winner '{self.winner}' is neither '{self.model_a}' nor '{self.model_b}'"
            )

    @property
    def a_won(self) -> bool:
        return self.winner == self.model_a

    @property
    def loser(self) -> ModelId:
        return self.model_b if self.a_won else self.model_a
