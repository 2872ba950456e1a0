"""Tests for the similarity-weighted ranking strategy."""

from __future__ import annotations

import numpy as np
import pytest

from routellm.routing.strategies import SimilarityWeightedRankingStrategy
from routellm.routing.types import PairwiseOutcome
from tests.helpers import STRONG, WEAK, FakeEmbedder

CODE = [1.0, 0.0]
CHAT = [0.0, 1.0]


def _corpus() -> tuple[list[PairwiseOutcome], np.ndarray]:
    """Strong wins 3 of 4 code battles, weak wins 3 of 4 chat battles."""
    outcomes: list[PairwiseOutcome] = []
    rows: list[list[float]] = []
    for winner in (STRONG, STRONG, STRONG, WEAK):
        outcomes.append(PairwiseOutcome(STRONG, WEAK, winner))
        rows.append(CODE)
    for winner in (WEAK, WEAK, WEAK, STRONG):
        outcomes.append(PairwiseOutcome(WEAK, STRONG, winner))
        rows.append(CHAT)
    return outcomes, np.array(rows)


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder({"write a quicksort": CODE, "tell me a joke": CHAT})


@pytest.fixture
def strategy(embedder) -> SimilarityWeightedRankingStrategy:
    outcomes, embeddings = _corpus()
    return SimilarityWeightedRankingStrategy(
        outcomes,
        embeddings,
        embedder,
        strong_model=STRONG,
        weak_model=WEAK,
        num_tiers=2,
        embed_timeout=5.0,
    )


class TestScoring:
    def test_similar_battles_dominate(self, strategy):
        assert strategy.score_embedding(np.array(CODE)) == pytest.approx(0.75, abs=0.01)
        assert strategy.score_embedding(np.array(CHAT)) == pytest.approx(0.25, abs=0.01)

    @pytest.mark.asyncio
    async def test_code_prompt_prefers_strong(self, strategy, embedder):
        code = await strategy.score("write a quicksort")
        chat = await strategy.score("tell me a joke")

        assert code > 0.5 > chat
        assert embedder.calls == [("write a quicksort", 5.0), ("tell me a joke", 5.0)]

    def test_scores_are_probabilities(self, strategy):
        for vector in ([1.0, 1.0], [-1.0, 0.2], [0.0, 0.0]):
            assert 0.0 <= strategy.score_embedding(np.array(vector)) <= 1.0

    def test_same_tier_scores_half(self, embedder):
        outcomes, embeddings = _corpus()
        strategy = SimilarityWeightedRankingStrategy(
            outcomes, embeddings, embedder, strong_model=STRONG, weak_model=WEAK, num_tiers=1
        )
        assert strategy.score_embedding(np.array(CODE)) == 0.5

    def test_scoring_does_not_touch_base_state(self, strategy):
        ratings = dict(strategy.base_ratings)
        tiers = dict(strategy.tiers)

        strategy.score_embedding(np.array(CODE))
        strategy.score_embedding(np.array(CHAT))

        assert dict(strategy.base_ratings) == ratings
        assert dict(strategy.tiers) == tiers

    @pytest.mark.asyncio
    async def test_route_model(self, strategy, pair):
        assert await strategy.route_model("write a quicksort", 0.5, pair) == STRONG
        assert await strategy.route_model("tell me a joke", 0.5, pair) == WEAK


class TestConstruction:
    def test_tiers_and_ratings_are_read_only(self, strategy):
        assert set(strategy.tiers) == {STRONG, WEAK}
        assert set(strategy.tiers.values()) == {0, 1}
        with pytest.raises(TypeError):
            strategy.tiers[STRONG] = 5

    def test_model_missing_from_corpus(self, embedder):
        outcomes, embeddings = _corpus()
        with pytest.raises(ValueError, match="claude"):
            SimilarityWeightedRankingStrategy(
                outcomes, embeddings, embedder, strong_model="claude", weak_model=WEAK
            )

    def test_misaligned_embeddings(self, embedder):
        outcomes, embeddings = _corpus()
        with pytest.raises(ValueError):
            SimilarityWeightedRankingStrategy(
                outcomes, embeddings[:-1], embedder, strong_model=STRONG, weak_model=WEAK
            )

    def test_empty_corpus(self, embedder):
        with pytest.raises(ValueError):
            SimilarityWeightedRankingStrategy(
                [], np.empty((0, 2)), embedder, strong_model=STRONG, weak_model=WEAK
            )

