from __future__ import annotations

from typing import Sequence

import numpy as np


def phred_to_error_prob(q: int) -> float:
    # Guard against negative values (can occur if qualities are missing).
    if q <= 0:
        return 1.0
    return 10 ** (-q / 10)


def phred_to_error_probs(qs: Sequence[int]) -> np.ndarray:
    """Vectorized :func:`phred_to_error_prob` over a quality array."""
    arr = np.asarray(qs, dtype=np.float64)
    out = np.power(10.0, -arr / 10.0)
    out[arr <= 0] = 1.0
    return out
