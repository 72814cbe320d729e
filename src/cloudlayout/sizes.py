"""Size sources that feed rectangles into a layouter."""

import numpy as np
from typing import List, Optional

from .geometry import Size


def random_sizes(count: int, min_side: int = 10, max_side: int = 50,
                 seed: Optional[int] = None) -> List[Size]:
    """
    Draw ``count`` sizes with sides uniform in ``[min_side, max_side)``.

    The same seed always yields the same sequence.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    if not 0 < min_side < max_side:
        raise ValueError(f"need 0 < min_side < max_side, got {min_side} and {max_side}")

    rng = np.random.default_rng(seed)
    sides = rng.integers(min_side, max_side, size=(count, 2))
    return [Size(int(w), int(h)) for w, h in sides]
