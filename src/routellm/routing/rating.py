"""Elo-style rating estimation from pairwise battles.

Ratings are the maximum-likelihood fit of a Bradley–Terry model on the Elo
scale: with ratings ``r_a`` and ``r_b`` the probability that ``a`` beats ``b``
is ``1 / (1 + 10 ** (-(r_a - r_b) / 400))``. Each fit starts every model at
1500 and is fully recomputed; nothing is carried over between calls.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from scipy.optimize import minimize
from scipy.special import expit

from routellm.config.constants import INITIAL_RATING, RATING_BASE, RATING_SCALE
from routellm.routing.errors import EstimationFailure
from routellm.routing.types import ModelId, PairwiseOutcome

if TYPE_CHECKING:
    from routellm.config.models import EstimatorConfig

logger = logging.getLogger("routellm.routing.rating")

# d(log-odds)/d(rating): converts base-10/400 rating gaps to natural log-odds
_LOGIT_PER_POINT = math.log(RATING_BASE) / RATING_SCALE


def win_probability(rating_a: float, rating_b: float) -> float:
    """Probability that a model rated *rating_a* beats one rated *rating_b*."""
    return 1.0 / (1.0 + RATING_BASE ** (-(rating_a - rating_b) / RATING_SCALE))


@dataclass(frozen=True)
class IndexedBattles:
    """Battles encoded as dense index arrays, ready for repeated fitting.

    ``a_idx[i]`` / ``b_idx[i]`` index into ``labels``; ``a_won[i]`` is 1.0 when
    the first side won outcome ``i``.
    """

    labels: tuple[ModelId, ...]
    a_idx: np.ndarray
    b_idx: np.ndarray
    a_won: np.ndarray

    def __len__(self) -> int:
        return int(self.a_idx.shape[0])

    @classmethod
    def from_outcomes(cls, outcomes: Sequence[PairwiseOutcome]) -> IndexedBattles:
        """Index models in order of first appearance."""
        index: dict[ModelId, int] = {}
        for outcome in outcomes:
            index.setdefault(outcome.model_a, len(index))
            index.setdefault(outcome.model_b, len(index))

        return cls(
            labels=tuple(index),
            a_idx=np.fromiter((index[o.model_a] for o in outcomes), dtype=np.intp, count=len(outcomes)),
            b_idx=np.fromiter((index[o.model_b] for o in outcomes), dtype=np.intp, count=len(outcomes)),
            a_won=np.fromiter((o.a_won for o in outcomes), dtype=float, count=len(outcomes)),
        )


class PreferenceRatingEstimator:
    """Fits one rating per model by minimizing weighted negative log-likelihood.

    Uses BFGS with an analytic gradient. Weights are relative: they are
    rescaled to mean 1 before fitting, which leaves the maximizer unchanged
    but keeps the gradient tolerance meaningful for any weight magnitude.

    Instances hold only optimizer limits, so a single estimator can serve
    concurrent fits.
    """

    def __init__(self, max_iterations: int = 1000, tolerance: float = 1e-5) -> None:
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
        self.max_iterations = max_iterations
        self.tolerance = tolerance

    @classmethod
    def from_config(cls, config: EstimatorConfig) -> PreferenceRatingEstimator:
        return cls(max_iterations=config.max_iterations, tolerance=config.tolerance)

    def fit(
        self,
        outcomes: Sequence[PairwiseOutcome],
        weights: Sequence[float] | np.ndarray | None = None,
    ) -> dict[ModelId, float]:
        """Return a rating for every model that appears in *outcomes*."""
        if not outcomes:
            return {}
        battles = IndexedBattles.from_outcomes(outcomes)
        ratings = self.fit_indexed(battles, weights)
        return {label: float(ratings[i]) for i, label in enumerate(battles.labels)}

    def fit_indexed(
        self,
        battles: IndexedBattles,
        weights: Sequence[float] | np.ndarray | None = None,
    ) -> np.ndarray:
        """Fit ratings for pre-indexed battles; result is aligned with ``battles.labels``."""
        n_models = len(battles.labels)
        x0 = np.full(n_models, INITIAL_RATING, dtype=float)
        if len(battles) == 0:
            return x0

        w = self._normalize_weights(weights, len(battles))
        a_idx, b_idx, y = battles.a_idx, battles.b_idx, battles.a_won

        def objective(ratings: np.ndarray) -> tuple[float, np.ndarray]:
            logits = (ratings[a_idx] - ratings[b_idx]) * _LOGIT_PER_POINT
            # -log p(a wins) = log(1 + e^-z); -log p(b wins) = log(1 + e^z)
            nll = np.sum(w * np.where(y > 0, np.logaddexp(0.0, -logits), np.logaddexp(0.0, logits)))
            dz = w * (expit(logits) - y) * _LOGIT_PER_POINT
            grad = np.bincount(a_idx, weights=dz, minlength=n_models) - np.bincount(
                b_idx, weights=dz, minlength=n_models
            )
            return float(nll), grad

        result = minimize(
            objective,
            x0,
            jac=True,
            method="BFGS",
            options={"maxiter": self.max_iterations, "gtol": self.tolerance},
        )

        if result.status == 1:
            raise EstimationFailure(
                f"Rating estimation did not converge within {self.max_iterations} iterations "
                f"({len(battles)} battles, {n_models} models)."
            )
        if not np.all(np.isfinite(result.x)):
            raise EstimationFailure("Rating estimation produced non-finite ratings.")
        if not result.success:
            logger.debug("BFGS stopped early (%s); accepting current ratings", result.message)

        return result.x

    @staticmethod
    def _normalize_weights(weights: Sequence[float] | np.ndarray | None, count: int) -> np.ndarray:
        if weights is None:
            return np.ones(count, dtype=float)

        w = np.asarray(weights, dtype=float)
        if w.shape != (count,):
            raise ValueError(f"Expected {count} weights, got shape {w.shape}")
        if not np.all(np.isfinite(w)) or np.any(w < 0):
            raise ValueError("Weights must be finite and non-negative")
        total = w.sum()
        if total <= 0:
            raise ValueError("At least one weight must be positive")
        return w * (count / total)
