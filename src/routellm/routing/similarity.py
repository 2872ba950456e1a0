"""Cosine-similarity index over the embeddings of historical battles."""

from __future__ import annotations

import numpy as np

# Exponent applied to the best match: weight = 10 ** (SHARPNESS * sim / max_sim)
SHARPNESS = 10.0


class SimilarityIndex:
    """Read-only matrix of embeddings, one row per historical outcome.

    Rows are normalized once at construction; queries never mutate the index,
    so it can be shared by concurrent scoring calls.
    """

    def __init__(self, embeddings: np.ndarray) -> None:
        matrix = np.array(embeddings, dtype=float)
        if matrix.ndim != 2 or matrix.shape[0] == 0:
            raise ValueError(f"Embeddings must be a non-empty 2-D array, got shape {matrix.shape}")

        norms = np.linalg.norm(matrix, axis=1)
        # Zero rows have no direction; they score 0 against every query
        safe = np.where(norms > 0, norms, 1.0)
        self._unit = matrix / safe[:, None]
        self._unit.setflags(write=False)

    def __len__(self) -> int:
        return int(self._unit.shape[0])

    @property
    def dimension(self) -> int:
        return int(self._unit.shape[1])

    def similarities(self, query: np.ndarray) -> np.ndarray:
        """Cosine similarity between *query* and every stored row."""
        q = np.asarray(query, dtype=float).ravel()
        if q.shape[0] != self.dimension:
            raise ValueError(f"Query has dimension {q.shape[0]}, index expects {self.dimension}")
        norm = np.linalg.norm(q)
        if norm == 0 or not np.isfinite(norm):
            return np.zeros(len(self), dtype=float)
        return self._unit @ (q / norm)

    def weights(self, query: np.ndarray) -> np.ndarray:
        """Per-row weights ``10 ** (10 * sim_i / max_j sim_j)``.

        The exponent is normalized by the best match so the most similar
        battle always weighs ``10 ** 10``. When no similarity is positive the
        largest absolute similarity is used instead; all-zero similarities give
        uniform weights.
        """
        sims = self.similarities(query)
        top = float(sims.max())
        scale = top if top > 0 else float(np.abs(sims).max())
        if scale == 0:
            return np.ones_like(sims)
        return np.power(10.0, SHARPNESS * sims / scale)

    def top_k(self, query: np.ndarray, k: int) -> list[tuple[int, float]]:
        """Indices and similarities of the *k* closest rows, best first."""
        if k <= 0:
            return []
        sims = self.similarities(query)
        k = min(k, len(sims))
        order = np.argsort(-sims, kind="stable")[:k]
        return [(int(i), float(sims[i])) for i in order]
