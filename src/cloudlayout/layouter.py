import logging
import math
import numpy as np
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from .config import Direction, LayoutConfig, SearchProgress
from .errors import InvalidSize, SearchExhausted
from .geometry import Point, Rectangle, Size, SpatialIndex

log = logging.getLogger(__name__)

FULL_TURN = 2 * math.pi

SizeLike = Union[Size, Tuple[int, int]]


def _integer_point(value: Tuple[int, int]) -> Point:
    """Cloud centers live on the integer grid the rectangles are placed on."""
    x, y = value
    if x != int(x) or y != int(y):
        raise TypeError(f"cloud center must have integer coordinates, got {tuple(value)}")
    return Point(int(x), int(y))


class DirectionProber:
    """Yields unit directions along a spiral whose angular step halves every full turn."""

    def __init__(self, initial_step: float = math.pi / 2, max_cycle_count: int = 6,
                 tolerance: float = 1e-9):
        self.initial_step = initial_step
        self.max_cycle_count = max_cycle_count
        self.tolerance = tolerance
        self.reset()

    def reset(self) -> None:
        self.angle = 0.0
        self.step = self.initial_step
        self.cycle = 0

    def next_direction(self) -> Direction:
        direction = (math.cos(self.angle), math.sin(self.angle))
        self.angle += self.step
        if self.angle >= FULL_TURN - self.tolerance:
            self.angle = 0.0
            self._advance_cycle()
        return direction

    def _advance_cycle(self) -> None:
        # The step freezes once the last refinement cycle is reached
        if self.cycle + 1 < self.max_cycle_count:
            self.cycle += 1
            self.step = math.pi / 2 ** self.cycle


class CircularCloudLayouter:
    """Places rectangles one at a time in a compact, roughly circular cloud around a center."""

    def __init__(self, center: Tuple[int, int], config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()
        self._center = _integer_point(center)
        self._rectangles: List[Rectangle] = []
        self.prober = DirectionProber(
            initial_step=self.config.initial_angle_step,
            max_cycle_count=self.config.max_cycle_count,
            tolerance=self.config.angle_tolerance,
        )
        self.spatial_index = SpatialIndex(
            cell_size=self.config.grid_cell_size,
            mega_threshold=self.config.mega_cell_threshold,
            mode=self.config.index_mode,
        )
        self.progress = SearchProgress(max_directions=self.config.max_directions)

    @property
    def center(self) -> Point:
        return self._center

    @center.setter
    def center(self, value: Tuple[int, int]) -> None:
        """Move the tracing origin; rectangles already placed stay where they are."""
        self._center = _integer_point(value)
        log.debug("Cloud center moved to %s", self._center)

    @property
    def layout(self) -> Tuple[Rectangle, ...]:
        """Snapshot of every rectangle placed so far, in placement order."""
        return tuple(self._rectangles)

    def __len__(self) -> int:
        return len(self._rectangles)

    # =========================================================================
    # Ray tracing
    # =========================================================================

    def trace(self, direction: Direction, starting_step: float = 0.0) -> Optional[Tuple[float, Point]]:
        """
        Walk outward from the center along ``direction`` and return the first free sample.

        Samples sit at ``center + direction * max_tracing_distance * step`` for
        ``step`` running from ``starting_step`` (one increment if zero) up to
        1.0 in increments of ``tracing_step``.

        Returns:
            ``(step, point)`` of the first sample outside every placed
            rectangle, or None if the whole remaining ray is covered.
        """
        cfg = self.config
        first = max(1, int(round(starting_step / cfg.tracing_step)))
        last = cfg.samples_per_ray
        dx, dy = direction
        cx, cy = self._center

        while first <= last:
            indices = np.arange(first, min(first + cfg.trace_batch_size, last + 1))
            distances = indices * cfg.sample_spacing
            points = np.column_stack([cx + dx * distances, cy + dy * distances])
            free = self.spatial_index.free_mask(points)

            if np.any(free):
                hit = int(np.argmax(free))
                self.progress.samples_traced += hit + 1
                return float(indices[hit] * cfg.tracing_step), Point(float(points[hit, 0]), float(points[hit, 1]))

            self.progress.samples_traced += len(indices)
            first = int(indices[-1]) + 1

        return None

    # =========================================================================
    # Placement resolution
    # =========================================================================

    def resolve(self, point: Point, size: Size) -> Optional[Rectangle]:
        """
        Try each corner of the new rectangle at ``point``.

        Candidates are tried with the point as top-left, top-right,
        bottom-left and bottom-right corner, in that order; the first one
        that overlaps nothing wins.
        """
        px, py = point
        width, height = size
        candidates = (
            Rectangle(px, py, width, height),
            Rectangle(px - width, py, width, height),
            Rectangle(px, py - height, width, height),
            Rectangle(px - width, py - height, width, height),
        )
        for candidate in candidates:
            if not self.spatial_index.intersects_any(candidate):
                return candidate
        return None

    # =========================================================================
    # Search
    # =========================================================================

    def _search(self, size: Size) -> Rectangle:
        """Probe directions until a ray yields a resolvable free point."""
        cfg = self.config
        self.progress.directions_probed = 0

        while self.progress.directions_probed < cfg.max_directions:
            direction = self.prober.next_direction()
            self.progress.directions_probed += 1
            self.progress.cycle = self.prober.cycle

            step = 0.0
            while step <= 1.0:
                traced = self.trace(direction, step)
                if traced is None:
                    break
                step, free_point = traced
                rect = self.resolve(free_point.truncate(), size)
                if rect is not None:
                    return rect
                step += cfg.tracing_step

            log.debug("Ray (%.3f, %.3f) exhausted for %s", direction[0], direction[1], size)

        log.warning("No free position for %s after %d directions", size, self.progress.directions_probed)
        raise SearchExhausted(size, self.progress.directions_probed)

    # =========================================================================
    # Main Entry Points
    # =========================================================================

    def place(self, size: SizeLike) -> Rectangle:
        """
        Place the next rectangle and return its position.

        The first rectangle is centered on the cloud center; every later one
        is found by the spiral search and never overlaps earlier ones.

        Raises:
            InvalidSize: width or height is not positive.
            SearchExhausted: the bounded search found no free position.
        """
        size = Size(*size)
        if not size.is_valid:
            raise InvalidSize(size)

        if not self._rectangles:
            cx, cy = self._center
            rect = Rectangle(cx - size.width // 2, cy - size.height // 2, size.width, size.height)
        else:
            rect = self._search(size)

        self._rectangles.append(rect)
        self.spatial_index.add(rect)
        self.progress.rectangles_placed += 1
        log.debug("Placed %s as %s", size, rect)

        if self.config.verbose and self.progress.rectangles_placed % 25 == 0:
            log.info("%s", self.progress)

        return rect

    def generate(self, sizes: Iterable[SizeLike]) -> Iterator[Rectangle]:
        """
        Place each size in order.

        Yields:
            The rectangle placed for each size.
        """
        for size in sizes:
            yield self.place(size)

    def place_all(self, sizes: Iterable[SizeLike]) -> List[Rectangle]:
        """Place every size and return the new rectangles as a list."""
        return list(self.generate(sizes))
