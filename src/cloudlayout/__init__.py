"""
cloudlayout - Compact circular layouts of rectangles for tag clouds.

Usage:
    from cloudlayout import CircularCloudLayouter, LayoutConfig, Size, random_sizes

    # Basic usage
    layouter = CircularCloudLayouter((500, 500))
    first = layouter.place(Size(120, 40))   # centered on (500, 500)
    second = layouter.place((80, 30))

    # Whole batch
    rectangles = layouter.place_all(random_sizes(50, seed=7))

    # With configuration
    config = LayoutConfig(tracing_step=0.002, max_directions=256, verbose=True)
    layouter = CircularCloudLayouter((0, 0), config)

Search:
    - Spiral probing: directions sweep full turns, halving the angular step each turn
    - Ray tracing: each direction is walked outward to the first free point
    - Corner resolution: the free point is tried as each corner of the new rectangle
"""

from .config import LayoutConfig, SearchProgress, IndexMode
from .errors import LayoutError, InvalidSize, SearchExhausted
from .geometry import Point, Size, Rectangle, SpatialIndex
from .layouter import CircularCloudLayouter, DirectionProber
from .sizes import random_sizes

__all__ = [
    "CircularCloudLayouter",
    "DirectionProber",
    "LayoutConfig",
    "SearchProgress",
    "IndexMode",
    "SpatialIndex",
    "LayoutError",
    "InvalidSize",
    "SearchExhausted",
    "Point",
    "Size",
    "Rectangle",
    "random_sizes",
]

__version__ = "0.1.0"
