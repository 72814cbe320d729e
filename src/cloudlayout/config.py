"""
Configuration and type definitions for cloud layout.
"""

import math
from dataclasses import dataclass
from typing import Tuple
from enum import Enum

# Type aliases
Direction = Tuple[float, float]
GridKey = Tuple[int, int]

# Threshold for switching between vectorized and grid index approaches
VECTORIZED_THRESHOLD = 750


class IndexMode(Enum):
    """Available spatial query strategies."""
    LINEAR = "linear"
    GRID = "grid"
    AUTO = "auto"


@dataclass
class LayoutConfig:
    """
    Configuration parameters for the spiral placement search.

    Tracing:
        tracing_step: Ray increment as a fraction of max_tracing_distance
        max_tracing_distance: Absolute reach of every traced ray
        trace_batch_size: Samples tested per vectorized containment batch

    Probing:
        initial_angle_step: Angular step used before the first full turn
        max_cycle_count: Refinement cycles after which the step stops halving
        angle_tolerance: Slack when comparing the swept angle to a full turn
        max_directions: Directions tried per placement before giving up

    Spatial index:
        index_mode: Linear scan, uniform grid, or automatic switch
        grid_cell_size: Edge length of a grid cell
        mega_cell_threshold: Rectangles spanning more cells live in a global list
    """
    # Tracing
    tracing_step: float = 0.001
    max_tracing_distance: float = 1000.0
    trace_batch_size: int = 64

    # Probing
    initial_angle_step: float = math.pi / 2
    max_cycle_count: int = 6
    angle_tolerance: float = 1e-9
    max_directions: int = 1024

    # Spatial index
    index_mode: IndexMode = IndexMode.AUTO
    grid_cell_size: float = 32.0
    mega_cell_threshold: int = 64

    # Output
    verbose: bool = False

    def __post_init__(self) -> None:
        if not 0 < self.tracing_step <= 1:
            raise ValueError(f"tracing_step must be in (0, 1], got {self.tracing_step}")
        if self.max_tracing_distance <= 0:
            raise ValueError(f"max_tracing_distance must be positive, got {self.max_tracing_distance}")
        if self.initial_angle_step <= 0:
            raise ValueError(f"initial_angle_step must be positive, got {self.initial_angle_step}")
        for name in ("max_cycle_count", "max_directions", "trace_batch_size", "mega_cell_threshold"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}")
        if self.grid_cell_size <= 0:
            raise ValueError(f"grid_cell_size must be positive, got {self.grid_cell_size}")

    @property
    def samples_per_ray(self) -> int:
        """Number of samples between the center and the end of a ray (never past step 1.0)."""
        return int(math.floor(1.0 / self.tracing_step + 1e-9))

    @property
    def sample_spacing(self) -> float:
        """Absolute distance between two consecutive ray samples."""
        return self.max_tracing_distance * self.tracing_step


@dataclass
class SearchProgress:
    """Tracks the state of the placement search."""
    rectangles_placed: int = 0
    directions_probed: int = 0
    samples_traced: int = 0
    max_directions: int = 1024
    cycle: int = 0

    @property
    def progress_ratio(self) -> float:
        """How much of the direction budget the last search used (0.0 to 1.0)."""
        return self.directions_probed / self.max_directions if self.max_directions > 0 else 0

    def __str__(self) -> str:
        return (f"Placed: {self.rectangles_placed} | Directions: {self.directions_probed}/"
                f"{self.max_directions} ({self.progress_ratio:.0%}) | Samples: {self.samples_traced}"
                f" | Cycle: {self.cycle}")
