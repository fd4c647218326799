"""Cosine similarity between embedding vectors.

Used by the retrieval ranker to score every stored page of a document
against a question embedding.  Scores are in ``[-1, 1]``; normalised
embeddings from OpenAI or Nomic models land in roughly ``[0, 1]``.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from src.utils.errors import DimensionMismatchError


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return ``dot(a, b) / (|a| * |b|)``.

    Parameters
    ----------
    a, b:
        Vectors of equal length.

    Returns
    -------
    float
        The cosine of the angle between *a* and *b*, clamped to
        ``[-1.0, 1.0]``.  ``0.0`` when either vector has zero magnitude, so a
        degenerate embedding ranks as maximally dissimilar instead of
        aborting the ranking pass.

    Raises
    ------
    DimensionMismatchError
        If ``len(a) != len(b)``.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(
            message=(
                "Vectors must be the same length for cosine similarity "
                f"calculation (got {len(a)} and {len(b)})"
            )
        )

    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)

    magnitude_a = float(np.linalg.norm(vec_a))
    magnitude_b = float(np.linalg.norm(vec_b))
    if magnitude_a == 0.0 or magnitude_b == 0.0:
        return 0.0

    score = float(np.dot(vec_a, vec_b)) / (magnitude_a * magnitude_b)
    # Rounding can push a·a/|a|² a hair past 1.0.
    return max(-1.0, min(1.0, score))
