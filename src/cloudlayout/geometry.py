"""
Geometry utilities for cloud layout.

Contains:
- Point, Size, Rectangle: immutable integer geometry (y grows downward)
- SpatialIndex: containment and intersection queries over placed rectangles
- Layout metrics: barycenter, pairwise spread, bounding box, overlap check
"""

import math
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, NamedTuple, Sequence, Set, Union

from .config import GridKey, IndexMode, VECTORIZED_THRESHOLD

Number = Union[int, float]


class Point(NamedTuple):
    """A position; integer for rectangle corners, float while tracing."""
    x: Number
    y: Number

    def truncate(self) -> "Point":
        """Drop the fractional part of both coordinates, rounding toward zero."""
        return Point(int(self.x), int(self.y))


class Size(NamedTuple):
    """Width and height of a rectangle to place."""
    width: int
    height: int

    @property
    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0


class Rectangle(NamedTuple):
    """Axis-aligned rectangle given by its top-left corner and size."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def location(self) -> Point:
        return Point(self.x, self.y)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def center(self) -> Point:
        """Integer midpoint, floored so it is exact for the first placement."""
        return Point((self.x + self.right) // 2, (self.y + self.bottom) // 2)

    @property
    def midpoint(self) -> Point:
        return Point((self.x + self.right) / 2, (self.y + self.bottom) / 2)

    def contains(self, point: Point) -> bool:
        """Half-open containment: left and top edges are inside, right and bottom are not."""
        return self.x <= point[0] < self.right and self.y <= point[1] < self.bottom

    def intersects(self, other: "Rectangle") -> bool:
        """True if the interiors overlap; touching edges or corners do not count."""
        return (other.x < self.right and self.x < other.right
                and other.y < self.bottom and self.y < other.bottom)


@dataclass
class SpatialIndex:
    """Spatial index over placed rectangles for containment and intersection queries.

    Small layouts are scanned with vectorized numpy comparisons against every
    rectangle. Larger ones (or ``IndexMode.GRID``) go through a uniform grid in
    which each rectangle is registered in every cell it covers; rectangles
    covering more than ``mega_threshold`` cells are kept in a global list
    instead. Both paths answer every query identically.
    """
    cell_size: float
    mega_threshold: int
    mode: IndexMode = IndexMode.AUTO
    grid: Dict[GridKey, List[int]] = field(default_factory=dict)
    mega_rects: List[int] = field(default_factory=list)

    # Columns: x, y, right, bottom
    _bounds: np.ndarray = field(default_factory=lambda: np.empty((0, 4)))

    def __len__(self) -> int:
        return len(self._bounds)

    @property
    def uses_grid(self) -> bool:
        if self.mode is IndexMode.GRID:
            return True
        return self.mode is IndexMode.AUTO and len(self) >= VECTORIZED_THRESHOLD

    def add(self, rect: Rectangle) -> None:
        """Add a rectangle to the index."""
        index = len(self)
        row = np.array([[rect.x, rect.y, rect.right, rect.bottom]], dtype=float)
        self._bounds = np.vstack([self._bounds, row])

        (gx0, gy0), (gx1, gy1) = self._cell_span(rect)
        if (gx1 - gx0 + 1) * (gy1 - gy0 + 1) > self.mega_threshold:
            self.mega_rects.append(index)
            return
        for gx in range(gx0, gx1 + 1):
            for gy in range(gy0, gy1 + 1):
                self.grid.setdefault((gx, gy), []).append(index)

    def get_nearby_indices(self, x: float, y: float) -> Iterator[int]:
        """Yield indices of rectangles that might contain a point."""
        yield from self.mega_rects
        yield from self.grid.get(self._get_cell_key(x, y), ())

    def get_rects_in_region(self, rect: Rectangle) -> List[int]:
        """Get all rectangle indices that might intersect a rectangular region."""
        indices: Set[int] = set(self.mega_rects)
        (gx0, gy0), (gx1, gy1) = self._cell_span(rect)
        if (gx1 - gx0 + 1) * (gy1 - gy0 + 1) > len(self.grid):
            # Fewer occupied cells than spanned ones: walk the occupied cells
            for (gx, gy), members in self.grid.items():
                if gx0 <= gx <= gx1 and gy0 <= gy <= gy1:
                    indices.update(members)
            return sorted(indices)
        for gx in range(gx0, gx1 + 1):
            for gy in range(gy0, gy1 + 1):
                if (gx, gy) in self.grid:
                    indices.update(self.grid[(gx, gy)])
        return sorted(indices)

    def free_mask(self, points: np.ndarray) -> np.ndarray:
        """Vectorized check: True for every point not contained in any rectangle."""
        points = np.asarray(points, dtype=float).reshape(-1, 2)
        if len(self) == 0 or len(points) == 0:
            return np.ones(len(points), dtype=bool)

        if not self.uses_grid:
            return ~np.any(_contains(self._bounds, points), axis=1)

        free = np.ones(len(points), dtype=bool)
        if self.mega_rects:
            free &= ~np.any(_contains(self._bounds[self.mega_rects], points), axis=1)

        # Pair every point with the rectangles registered in its cell
        keys = np.floor(points / self.cell_size).astype(int)
        cells, inverse = np.unique(keys, axis=0, return_inverse=True)
        inverse = inverse.reshape(-1)
        point_ids, rect_ids = [], []
        for k, (gx, gy) in enumerate(cells):
            members = self.grid.get((int(gx), int(gy)))
            if not members:
                continue
            in_cell = np.flatnonzero(inverse == k)
            point_ids.append(np.repeat(in_cell, len(members)))
            rect_ids.append(np.tile(members, len(in_cell)))
        if not point_ids:
            return free

        point_ids = np.concatenate(point_ids)
        bounds = self._bounds[np.concatenate(rect_ids)]
        pts = points[point_ids]
        inside = ((pts[:, 0] >= bounds[:, 0]) & (pts[:, 0] < bounds[:, 2])
                  & (pts[:, 1] >= bounds[:, 1]) & (pts[:, 1] < bounds[:, 3]))
        free[point_ids[inside]] = False
        return free

    def contains_any(self, point: Point) -> bool:
        """Check if a single point lies inside any rectangle."""
        return not self.free_mask(np.array([point], dtype=float))[0]

    def intersects_any(self, rect: Rectangle) -> bool:
        """Check if a rectangle overlaps the interior of any indexed rectangle."""
        if len(self) == 0:
            return False
        if self.uses_grid:
            indices = self.get_rects_in_region(rect)
            if not indices:
                return False
            bounds = self._bounds[indices]
        else:
            bounds = self._bounds
        overlap = ((bounds[:, 0] < rect.right) & (rect.x < bounds[:, 2])
                   & (bounds[:, 1] < rect.bottom) & (rect.y < bounds[:, 3]))
        return bool(np.any(overlap))

    def _get_cell_key(self, x: float, y: float) -> GridKey:
        """Convert a point to its grid cell coordinates."""
        return (int(math.floor(x / self.cell_size)), int(math.floor(y / self.cell_size)))

    def _cell_span(self, rect: Rectangle) -> tuple:
        """First and last cell covered by the half-open extent of a rectangle."""
        first = self._get_cell_key(rect.x, rect.y)
        last = (int(math.ceil(rect.right / self.cell_size)) - 1,
                int(math.ceil(rect.bottom / self.cell_size)) - 1)
        return first, last


def _contains(bounds: np.ndarray, points: np.ndarray) -> np.ndarray:
    """(points, rects) matrix of half-open containment tests."""
    x = points[:, 0:1]
    y = points[:, 1:2]
    return ((x >= bounds[:, 0]) & (x < bounds[:, 2])
            & (y >= bounds[:, 1]) & (y < bounds[:, 3]))


# =========================================================================
# Layout metrics
# =========================================================================

def centers_array(rects: Sequence[Rectangle]) -> np.ndarray:
    """Float midpoints of the rectangles as an (n, 2) array."""
    if len(rects) == 0:
        return np.empty((0, 2))
    arr = np.array(rects, dtype=float)
    return arr[:, :2] + arr[:, 2:] / 2


def barycenter(rects: Sequence[Rectangle]) -> Point:
    """Mean of the rectangle midpoints."""
    if len(rects) == 0:
        raise ValueError("barycenter of an empty layout is undefined")
    mean = centers_array(rects).mean(axis=0)
    return Point(float(mean[0]), float(mean[1]))


def max_pairwise_sq_distance(rects: Sequence[Rectangle]) -> float:
    """Largest squared distance between any two rectangle midpoints."""
    centers = centers_array(rects)
    if len(centers) < 2:
        return 0.0
    diffs = centers[:, np.newaxis, :] - centers[np.newaxis, :, :]
    return float(np.max(np.sum(diffs ** 2, axis=2)))


def bounding_box(rects: Iterable[Rectangle]) -> Rectangle:
    """Smallest rectangle enclosing every given rectangle."""
    rects = list(rects)
    if not rects:
        raise ValueError("bounding box of an empty layout is undefined")
    left = min(r.x for r in rects)
    top = min(r.y for r in rects)
    right = max(r.right for r in rects)
    bottom = max(r.bottom for r in rects)
    return Rectangle(left, top, right - left, bottom - top)


def any_overlap(rects: Sequence[Rectangle]) -> bool:
    """Check whether any two rectangles have intersecting interiors."""
    if len(rects) < 2:
        return False
    arr = np.array(rects, dtype=float)
    x, y = arr[:, 0], arr[:, 1]
    right, bottom = x + arr[:, 2], y + arr[:, 3]
    overlap = ((x[:, np.newaxis] < right[np.newaxis, :]) & (x[np.newaxis, :] < right[:, np.newaxis])
               & (y[:, np.newaxis] < bottom[np.newaxis, :]) & (y[np.newaxis, :] < bottom[:, np.newaxis]))
    np.fill_diagonal(overlap, False)
    return bool(np.any(overlap))
