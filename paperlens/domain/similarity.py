"""Pure vector functions for retrieval and centroid computation.

Why: Similarity and averaging are pure functions, so they live in the domain.
"""

from collections.abc import Sequence
from math import sqrt

from .errors import DimensionMismatchError, EmptyInputError
from .types import Score


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> Score:
    """Compute cosine similarity between two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        Cosine similarity score between -1 and 1, or 0.0 when either
        vector has zero magnitude

    Raises:
        DimensionMismatchError: If the vectors differ in length
    """
    if len(a) != len(b):
        raise DimensionMismatchError(left=len(a), right=len(b))
    dot = sum(x * y for x, y in zip(a, b, strict=True))
    denominator = sqrt(sum(x * x for x in a)) * sqrt(sum(y * y for y in b))
    if denominator == 0:
        return 0.0
    return dot / denominator


def mean_vector(vectors: Sequence[Sequence[float]]) -> list[float]:
    """Element-wise arithmetic mean of equally sized vectors.

    Dimensionality is taken from the first vector; callers must pass vectors
    produced by the same model.
    """
    if not vectors:
        raise EmptyInputError("cannot average zero vectors")
    dim = len(vectors[0])
    total = [0.0] * dim
    for vec in vectors:
        for i in range(dim):
            total[i] += vec[i]
    count = len(vectors)
    return [x / count for x in total]
