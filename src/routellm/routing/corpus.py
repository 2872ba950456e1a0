"""Loading arena battle dumps and their prompt embeddings from disk."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from routellm.config.constants import TIE_MARKERS
from routellm.routing.types import PairwiseOutcome

logger = logging.getLogger("routellm.routing.corpus")


@dataclass(frozen=True)
class BattleCorpus:
    """Outcomes and embeddings, aligned row for row."""

    outcomes: tuple[PairwiseOutcome, ...]
    embeddings: np.ndarray

    def __len__(self) -> int:
        return len(self.outcomes)


def load_battles(paths: Iterable[str | Path]) -> list[dict]:
    """Read battle records from JSON arrays or JSON-lines files, in order."""
    records: list[dict] = []
    for path in map(Path, paths):
        text = path.read_text(encoding="utf-8")
        if path.suffix in (".jsonl", ".ndjson"):
            batch = [json.loads(line) for line in text.splitlines() if line.strip()]
        else:
            batch = json.loads(text)
        if not isinstance(batch, list):
            raise ValueError(f"{path}: expected a list of battle records")
        records.extend(batch)
        logger.debug("Loaded %d battles from %s", len(batch), path)
    return records


def load_embeddings(paths: Iterable[str | Path]) -> np.ndarray:
    """Stack embedding rows from ``.npy``, ``.json`` or CSV files."""
    blocks: list[np.ndarray] = []
    for path in map(Path, paths):
        if path.suffix == ".npy":
            block = np.load(path)
        elif path.suffix == ".json":
            block = np.asarray(json.loads(path.read_text(encoding="utf-8")), dtype=float)
        else:
            block = np.loadtxt(path, delimiter=",", ndmin=2)
        blocks.append(np.atleast_2d(np.asarray(block, dtype=float)))
    if not blocks:
        raise ValueError("No embedding datasets given")
    return np.vstack(blocks)


def _winner_name(record: dict) -> str | None:
    """Resolve the winner field to a model name, or ``None`` for ties."""
    winner = str(record.get("winner", "")).strip()
    if winner in TIE_MARKERS:
        return None
    if winner == "model_a":
        return record["model_a"]
    if winner == "model_b":
        return record["model_b"]
    return winner


def build_corpus(records: Sequence[dict], embeddings: np.ndarray) -> BattleCorpus:
    """Turn raw records into outcomes, dropping ties and self-battles.

    Embedding row ``i`` belongs to record ``i``; rows are dropped together with
    their records so the two stay aligned.
    """
    embeddings = np.atleast_2d(np.asarray(embeddings, dtype=float))
    if len(records) != embeddings.shape[0]:
        raise ValueError(
            f"{len(records)} battle records but {embeddings.shape[0]} embedding rows"
        )

    outcomes: list[PairwiseOutcome] = []
    keep: list[int] = []
    ties = self_battles = 0
    for i, record in enumerate(records):
        model_a, model_b = record["model_a"], record["model_b"]
        if model_a == model_b:
            self_battles += 1
            continue
        winner = _winner_name(record)
        if winner is None:
            ties += 1
            continue
        outcomes.append(PairwiseOutcome(model_a=model_a, model_b=model_b, winner=winner))
        keep.append(i)

    logger.info(
        "Battle corpus: %d outcomes kept, %d ties and %d self-battles dropped",
        len(outcomes),
        ties,
        self_battles,
    )
    kept = embeddings[keep] if keep else np.empty((0, embeddings.shape[1]))
    return BattleCorpus(outcomes=tuple(outcomes), embeddings=kept)


def load_corpus(
    battle_paths: Iterable[str | Path], embedding_paths: Iterable[str | Path]
) -> BattleCorpus:
    return build_corpus(load_battles(battle_paths), load_embeddings(embedding_paths))
