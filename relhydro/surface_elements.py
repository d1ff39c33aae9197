"""Surface elements of a constant-value hypersurface: lines, polygons and polyhedra.

All points and vectors are four-dimensional; coordinates that an element does
not use stay zero in its normal.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TextIO

DIM = 4
_EPS = 1e-10
_MAX_POLYGON_LINES = 24
_MAX_POLYHEDRON_POLYGONS = 24


def _vector(values: Sequence[float], what: str) -> list[float]:
    vec = [float(v) for v in values]
    if len(vec) != DIM:
        raise ValueError(f"{what} must have {DIM} components, got {len(vec)}")
    return vec


def _orient(normal: list[float], out: Sequence[float]) -> list[float]:
    """Flip normal if it points away from the outward direction."""
    if sum(o * n for o, n in zip(out, normal)) < 0:
        return [-n for n in normal]
    return normal


def _distance(p: Sequence[float], q: Sequence[float]) -> float:
    return sum(abs(a - b) for a, b in zip(p, q))


def _tetra_normal(
    a: Sequence[float], b: Sequence[float], c: Sequence[float]
) -> list[float]:
    """Normal of the tetrahedron spanned by a, b, c; its length is the volume."""
    bc01 = b[0] * c[1] - b[1] * c[0]
    bc02 = b[0] * c[2] - b[2] * c[0]
    bc03 = b[0] * c[3] - b[3] * c[0]
    bc12 = b[1] * c[2] - b[2] * c[1]
    bc13 = b[1] * c[3] - b[3] * c[1]
    bc23 = b[2] * c[3] - b[3] * c[2]
    return [
        1.0 / 6.0 * (a[1] * bc23 - a[2] * bc13 + a[3] * bc12),
        -1.0 / 6.0 * (a[0] * bc23 - a[2] * bc03 + a[3] * bc02),
        1.0 / 6.0 * (a[0] * bc13 - a[1] * bc03 + a[3] * bc01),
        -1.0 / 6.0 * (a[0] * bc12 - a[1] * bc02 + a[2] * bc01),
    ]


class GeneralElement:
    """Element with a lazily computed centroid and outward normal."""

    def __init__(self) -> None:
        self._centroid: list[float] | None = None
        self._normal: list[float] | None = None

    def _reset(self) -> None:
        self._centroid = None
        self._normal = None

    def _calculate_centroid(self) -> list[float]:
        raise NotImplementedError

    def _calculate_normal(self) -> list[float]:
        raise NotImplementedError

    def centroid(self) -> tuple[float, ...]:
        """Centroid in four dimensions."""
        if self._centroid is None:
            self._centroid = self._calculate_centroid()
        return tuple(self._centroid)

    def normal(self) -> tuple[float, ...]:
        """Outward normal in four dimensions."""
        if self._normal is None:
            self._normal = self._calculate_normal()
        return tuple(self._normal)


def _free_pair(c0: int, c1: int) -> tuple[int, int]:
    """The two indices not held constant on a line, smaller first."""
    if c0 == 0:
        if c1 == 1:
            return 2, 3
        if c1 == 2:
            return 1, 3
        return 1, 2
    if c0 == 1:
        if c1 == 2:
            return 0, 3
        return 0, 2
    return 0, 1


class Line(GeneralElement):
    """Line element found on a square, with a point known to be outside."""

    def __init__(
        self,
        corners: Sequence[Sequence[float]],
        out: Sequence[float],
        const_i: Sequence[int],
    ) -> None:
        super().__init__()
        if len(corners) != 2:
            raise ValueError(f"a line has 2 end points, got {len(corners)}")
        self._corners = [_vector(c, "end point") for c in corners]
        self._out = _vector(out, "outside point")
        if len(const_i) != 2:
            raise ValueError(f"a line has 2 constant indices, got {len(const_i)}")
        self._const_i = (int(const_i[0]), int(const_i[1]))
        self._start = 0
        self._end = 1
        self._x1, self._x2 = _free_pair(*self._const_i)

    def _calculate_centroid(self) -> list[float]:
        p0, p1 = self._corners
        return [(a + b) / 2.0 for a, b in zip(p0, p1)]

    def _calculate_normal(self) -> list[float]:
        centroid = self.centroid()
        p0, p1 = self._corners
        normal = [0.0] * DIM
        normal[self._x1] = -(p1[self._x2] - p0[self._x2])
        normal[self._x2] = p1[self._x1] - p0[self._x1]
        for i in self._const_i:
            normal[i] = 0.0
        vout = [o - c for o, c in zip(self._out, centroid)]
        return _orient(normal, vout)

    def flip_start_end(self) -> None:
        """Swap which end point counts as the start."""
        self._start, self._end = self._end, self._start

    def start(self) -> tuple[float, ...]:
        """Start point."""
        return tuple(self._corners[self._start])

    def end(self) -> tuple[float, ...]:
        """End point."""
        return tuple(self._corners[self._end])

    def out(self) -> tuple[float, ...]:
        """Point that lies outside the surface."""
        return tuple(self._out)


class Polygon(GeneralElement):
    """Polygon built from lines inside a cube with one constant coordinate."""

    def __init__(self, const_i: int) -> None:
        super().__init__()
        self._const_i = int(const_i)
        free = [i for i in range(DIM) if i != self._const_i]
        if len(free) != 3:
            raise ValueError(f"constant index must be in 0..{DIM - 1}, got {const_i}")
        self._x1, self._x2, self._x3 = free
        self._lines: list[Line] = []

    def add_line(self, line: Line, donotcheck: bool = False) -> bool:
        """Add a line; unless donotcheck, only if it joins the last line added."""
        if len(self._lines) >= _MAX_POLYGON_LINES:
            raise OverflowError(f"a polygon holds at most {_MAX_POLYGON_LINES} lines")
        if donotcheck or not self._lines:
            self._append(line)
            return True
        last_end = self._lines[-1].end()
        diff1 = _distance(line.start(), last_end)
        diff2 = _distance(line.end(), last_end)
        if diff1 < _EPS or diff2 < _EPS:
            if diff2 < _EPS:
                line.flip_start_end()
            self._append(line)
            return True
        return False

    def _append(self, line: Line) -> None:
        self._lines.append(line)
        self._reset()

    def lines(self) -> list[Line]:
        """Lines of the polygon in the order they were added."""
        return list(self._lines)

    def _mean(self) -> list[float]:
        if not self._lines:
            raise ValueError("polygon has no lines")
        total = [0.0] * DIM
        for line in self._lines:
            total = [t + a + b for t, a, b in zip(total, line.start(), line.end())]
        return [t / (2.0 * len(self._lines)) for t in total]

    def _calculate_centroid(self) -> list[float]:
        mean = self._mean()
        if len(self._lines) == 3:
            return mean
        x1, x2, x3 = self._x1, self._x2, self._x3
        sum_up = [0.0] * DIM
        sum_down = 0.0
        for line in self._lines:
            p1, p2 = line.start(), line.end()
            cm = [(a + b + m) / 3.0 for a, b, m in zip(p1, p2, mean)]
            a = [p - m for p, m in zip(p1, mean)]
            b = [p - m for p, m in zip(p2, mean)]
            area = 0.5 * math.sqrt(
                (a[x2] * b[x3] - a[x3] * b[x2]) ** 2
                + (a[x1] * b[x3] - a[x3] * b[x1]) ** 2
                + (a[x2] * b[x1] - a[x1] * b[x2]) ** 2
            )
            sum_up = [s + c * area for s, c in zip(sum_up, cm)]
            sum_down += area
        return [s / sum_down for s in sum_up]

    def _calculate_normal(self) -> list[float]:
        centroid = self.centroid()
        x1, x2, x3 = self._x1, self._x2, self._x3
        normal = [0.0] * DIM
        for line in self._lines:
            a = [p - c for p, c in zip(line.start(), centroid)]
            b = [p - c for p, c in zip(line.end(), centroid)]
            part = [0.0] * DIM
            part[x1] = 0.5 * (a[x2] * b[x3] - a[x3] * b[x2])
            part[x2] = -0.5 * (a[x1] * b[x3] - a[x3] * b[x1])
            part[x3] = 0.5 * (a[x1] * b[x2] - a[x2] * b[x1])
            part[self._const_i] = 0.0
            vout = [o - c for o, c in zip(line.out(), centroid)]
            part = _orient(part, vout)
            normal = [n + q for n, q in zip(normal, part)]
        return normal

    def write_triangles(self, stream: TextIO, pos: Sequence[float]) -> None:
        """Write each triangle (start, end, centroid) in absolute coordinates."""
        centroid = self.centroid()
        axes = (self._x1, self._x2, self._x3)
        for line in self._lines:
            points = (line.start(), line.end(), centroid)
            fields = [f"{pos[x] + point[x]:g}" for point in points for x in axes]
            stream.write(" ".join(fields) + "\n")


class Polyhedron(GeneralElement):
    """Polyhedron assembled from polygons in a hypercube."""

    def __init__(self) -> None:
        super().__init__()
        self._polygons: list[Polygon] = []
        self._n_tetrahedra = 0

    def add_polygon(self, polygon: Polygon, donotcheck: bool = False) -> bool:
        """Add a polygon; unless donotcheck, only if it shares a line end with one already added."""
        if len(self._polygons) >= _MAX_POLYHEDRON_POLYGONS:
            raise OverflowError(
                f"a polyhedron holds at most {_MAX_POLYHEDRON_POLYGONS} polygons"
            )
        if donotcheck or not self._polygons:
            self._append(polygon)
            return True
        new_lines = polygon.lines()
        for existing in self._polygons:
            for l1 in new_lines:
                for l2 in existing.lines():
                    if self._lines_equal(l1, l2):
                        self._append(polygon)
                        return True
        return False

    def _append(self, polygon: Polygon) -> None:
        self._polygons.append(polygon)
        self._n_tetrahedra += len(polygon.lines())
        self._reset()

    @staticmethod
    def _lines_equal(l1: Line, l2: Line) -> bool:
        start2 = l2.start()
        return _distance(l1.start(), start2) <= _EPS or _distance(l1.end(), start2) <= _EPS

    def polygons(self) -> list[Polygon]:
        """Polygons of the polyhedron in the order they were added."""
        return list(self._polygons)

    def _tetrahedra(self):
        for polygon in self._polygons:
            cent = polygon.centroid()
            for line in polygon.lines():
                yield line, cent

    def _calculate_centroid(self) -> list[float]:
        if self._n_tetrahedra == 0:
            raise ValueError("polyhedron has no lines")
        total = [0.0] * DIM
        for line, _ in self._tetrahedra():
            total = [t + a + b for t, a, b in zip(total, line.start(), line.end())]
        mean = [t / (2.0 * self._n_tetrahedra) for t in total]
        sum_up = [0.0] * DIM
        sum_down = 0.0
        for line, cent in self._tetrahedra():
            p1, p2 = line.start(), line.end()
            cm = [(a + b + c + m) / 4.0 for a, b, c, m in zip(p1, p2, cent, mean)]
            n = _tetra_normal(
                [p - m for p, m in zip(p1, mean)],
                [p - m for p, m in zip(p2, mean)],
                [p - m for p, m in zip(cent, mean)],
            )
            volume = math.sqrt(sum(v * v for v in n))
            sum_up = [s + c * volume for s, c in zip(sum_up, cm)]
            sum_down += volume
        return [s / sum_down for s in sum_up]

    def _calculate_normal(self) -> list[float]:
        centroid = self.centroid()
        normal = [0.0] * DIM
        for line, cent in self._tetrahedra():
            part = _tetra_normal(
                [p - c for p, c in zip(line.start(), centroid)],
                [p - c for p, c in zip(line.end(), centroid)],
                [p - c for p, c in zip(cent, centroid)],
            )
            vout = [o - c for o, c in zip(line.out(), centroid)]
            part = _orient(part, vout)
            normal = [n + q for n, q in zip(normal, part)]
        return normal