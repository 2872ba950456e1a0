"""Similarity-weighted ranking: per-prompt Elo re-estimation over arena battles."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from types import MappingProxyType
from typing import TYPE_CHECKING

import numpy as np

from routellm.config.constants import DEFAULT_NUM_TIERS
from routellm.routing.corpus import load_corpus
from routellm.routing.rating import IndexedBattles, PreferenceRatingEstimator, win_probability
from routellm.routing.similarity import SimilarityIndex
from routellm.routing.strategies.base import RoutingStrategy
from routellm.routing.tiers import assign_tiers
from routellm.routing.types import ModelId, PairwiseOutcome

if TYPE_CHECKING:
    from routellm.config.models import SWRankingConfig
    from routellm.upstream.embeddings import EmbeddingProvider

logger = logging.getLogger("routellm.routing.strategies.sw_ranking")


class SimilarityWeightedRankingStrategy(RoutingStrategy):
    """Scores a prompt by re-ranking model tiers on battles similar to it.

    At construction the whole corpus is rated once with uniform weights and
    the models are bucketed into ``num_tiers`` tiers. Every battle is then
    relabelled as a battle between the tiers of its two models; battles inside
    a single tier carry no signal at that level and are left out.

    For each prompt:

    1. embed the prompt,
    2. weight every battle by ``10 ** (10 * sim / max_sim)`` where ``sim`` is
       the cosine similarity between the prompt and the battle's prompt,
    3. re-fit tier ratings on the weighted tier battles,
    4. return ``1 - P(weak tier beats strong tier)``.

    The corpus, embeddings and base tiers are never modified after
    construction, so scoring is safe to run concurrently. The refit in step 3
    runs on every call and is the dominant cost.
    """

    name = "sw_ranking"
    supports_concurrent_scoring = True

    def __init__(
        self,
        outcomes: Sequence[PairwiseOutcome],
        embeddings: np.ndarray,
        embedder: EmbeddingProvider,
        *,
        strong_model: ModelId,
        weak_model: ModelId,
        num_tiers: int = DEFAULT_NUM_TIERS,
        estimator: PreferenceRatingEstimator | None = None,
        embed_timeout: float | None = None,
    ) -> None:
        if not outcomes:
            raise ValueError("Similarity-weighted ranking needs at least one battle")
        embeddings = np.asarray(embeddings, dtype=float)
        if embeddings.ndim != 2 or embeddings.shape[0] != len(outcomes):
            raise ValueError(
                f"{len(outcomes)} battles but embeddings of shape {embeddings.shape}"
            )

        self._outcomes = tuple(outcomes)
        self._index = SimilarityIndex(embeddings)
        self._embedder = embedder
        self._embed_timeout = embed_timeout
        self._estimator = estimator or PreferenceRatingEstimator()
        self.strong_model = strong_model
        self.weak_model = weak_model
        self.num_tiers = num_tiers

        base_ratings = self._estimator.fit(self._outcomes)
        tiers = assign_tiers(base_ratings, num_tiers)
        for role, model in (("strong", strong_model), ("weak", weak_model)):
            if model not in tiers:
                raise ValueError(f"{role} model '{model}' does not appear in the battle corpus")
        self._base_ratings = MappingProxyType(base_ratings)
        self._tiers = MappingProxyType(tiers)

        self._tier_battles, self._tier_rows = self._build_tier_battles(self._outcomes, tiers)
        self._strong_tier = tiers[strong_model]
        self._weak_tier = tiers[weak_model]

        logger.info(
            "sw_ranking ready: %d battles, %d models, %d tiers "
            "(strong '%s' in tier %d, weak '%s' in tier %d)",
            len(self._outcomes),
            len(tiers),
            max(tiers.values()) + 1,
            strong_model,
            self._strong_tier,
            weak_model,
            self._weak_tier,
        )

    @classmethod
    def from_config(
        cls,
        config: SWRankingConfig,
        embedder: EmbeddingProvider,
        *,
        estimator: PreferenceRatingEstimator | None = None,
        embed_timeout: float | None = None,
    ) -> SimilarityWeightedRankingStrategy:
        if not config.battle_datasets or not config.embedding_datasets:
            raise ValueError("sw_ranking needs battle_datasets and embedding_datasets configured")
        corpus = load_corpus(config.battle_datasets, config.embedding_datasets)
        return cls(
            corpus.outcomes,
            corpus.embeddings,
            embedder,
            strong_model=config.strong_model,
            weak_model=config.weak_model,
            num_tiers=config.num_tiers,
            estimator=estimator,
            embed_timeout=embed_timeout,
        )

    @property
    def base_ratings(self) -> MappingProxyType:
        return self._base_ratings

    @property
    def tiers(self) -> MappingProxyType:
        return self._tiers

    @staticmethod
    def _build_tier_battles(
        outcomes: Sequence[PairwiseOutcome], tiers: dict[ModelId, int]
    ) -> tuple[IndexedBattles, np.ndarray]:
        rows: list[int] = []
        a_tiers: list[int] = []
        b_tiers: list[int] = []
        a_won: list[float] = []
        for i, outcome in enumerate(outcomes):
            tier_a, tier_b = tiers[outcome.model_a], tiers[outcome.model_b]
            if tier_a == tier_b:
                continue
            rows.append(i)
            a_tiers.append(tier_a)
            b_tiers.append(tier_b)
            a_won.append(1.0 if outcome.a_won else 0.0)

        battles = IndexedBattles(
            labels=tuple(str(t) for t in range(max(tiers.values()) + 1)),
            a_idx=np.asarray(a_tiers, dtype=np.intp),
            b_idx=np.asarray(b_tiers, dtype=np.intp),
            a_won=np.asarray(a_won, dtype=float),
        )
        return battles, np.asarray(rows, dtype=np.intp)

    async def score(self, prompt: str) -> float:
        embedding = await self._embedder.embed(prompt, timeout=self._embed_timeout)
        return await asyncio.to_thread(self.score_embedding, embedding)

    def score_embedding(self, embedding: np.ndarray) -> float:
        """Strong-preference score for an already-embedded prompt."""
        if self._strong_tier == self._weak_tier or len(self._tier_battles) == 0:
            return 0.5

        weights = self._index.weights(embedding)[self._tier_rows]
        if not weights.sum() > 0:
            logger.debug("All battle weights underflowed; falling back to uniform weights")
            weights = None

        # Tiers without cross-tier battles keep the initial rating
        tier_ratings = self._estimator.fit_indexed(self._tier_battles, weights)
        strong_score = float(tier_ratings[self._strong_tier])
        weak_score = float(tier_ratings[self._weak_tier])

        weak_win_rate = win_probability(weak_score, strong_score)
        return float(1.0 - weak_win_rate)
