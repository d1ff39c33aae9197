"""Squares and cubes of a grid, split into surface lines and polygons.

A square is a two-dimensional face with two coordinates held constant; a cube
is a three-dimensional cell with one coordinate held constant. All points are
four-dimensional.
"""

from __future__ import annotations

from collections.abc import Sequence

from relhydro.surface_elements import DIM, Line, Polygon

_STEPS = 2
_NUDGE = 1e-9


def _check_len(values: Sequence, size: int, what: str) -> None:
    if len(values) != size:
        raise ValueError(f"{what} must have {size} entries, got {len(values)}")


def _edge_fraction(va: float, vb: float, value0: float) -> float | None:
    """Where along an edge from va to vb the surface crosses, or None."""
    if (va - value0) * (vb - value0) < 0:
        return (va - value0) / (va - vb)
    if va == value0 and vb < value0:
        return _NUDGE
    if vb == value0 and va < value0:
        return 1.0 - _NUDGE
    return None


class Square:
    """A face with two constant coordinates; finds the surface lines crossing it."""

    def __init__(
        self,
        points: Sequence[Sequence[float]],
        const_i: Sequence[int],
        const_value: Sequence[float],
        dx: Sequence[float],
    ) -> None:
        _check_len(points, _STEPS, "square values")
        for row in points:
            _check_len(row, _STEPS, "square row")
        _check_len(const_i, 2, "constant indices")
        _check_len(const_value, 2, "constant values")
        _check_len(dx, DIM, "cell size")
        self._points = [[float(v) for v in row] for row in points]
        self._const_i = (int(const_i[0]), int(const_i[1]))
        self._const_value = (float(const_value[0]), float(const_value[1]))
        self._dx = [float(d) for d in dx]
        free = [i for i in range(DIM) if i not in self._const_i]
        if len(free) != 2:
            raise ValueError(f"constant indices must be two distinct axes, got {const_i}")
        self._x1, self._x2 = free
        self._lines: list[Line] = []
        self._ambiguous = False

    def _ends_of_edge(self, value0: float) -> list[list[float]]:
        p = self._points
        d1 = self._dx[self._x1]
        d2 = self._dx[self._x2]
        edges = (
            (p[0][0], p[1][0], lambda t: [t * d1, 0.0]),
            (p[0][0], p[0][1], lambda t: [0.0, t * d2]),
            (p[1][0], p[1][1], lambda t: [d1, t * d2]),
            (p[0][1], p[1][1], lambda t: [t * d1, d2]),
        )
        cuts = []
        for va, vb, place in edges:
            t = _edge_fraction(va, vb, value0)
            if t is not None:
                cuts.append(place(t))
        if len(cuts) not in (0, 2, 4):
            raise RuntimeError(f"inconsistent surface crossing: {len(cuts)} cuts")
        return cuts

    def _find_outside(self, value0: float, cuts: list[list[float]]) -> list[list[float]]:
        p = self._points
        d1 = self._dx[self._x1]
        d2 = self._dx[self._x2]
        if len(cuts) == 4:
            self._ambiguous = True
            emid = 0.0
            for row in p:
                for v in row:
                    emid += 0.25 * v
            if (p[0][0] < value0 and emid < value0) or (p[0][0] > value0 and emid > value0):
                cuts[1], cuts[2] = cuts[2], cuts[1]
            if emid - value0 < 0:
                return [[0.5 * d1, 0.5 * d2], [0.5 * d1, 0.5 * d2]]
            if p[0][0] - value0 < 0:
                return [[0.0, 0.0], [d1, d2]]
            return [[d1, 0.0], [0.0, d2]]
        out = [0.0, 0.0]
        n_out = 0
        for i in range(_STEPS):
            for j in range(_STEPS):
                if p[i][j] < value0:
                    out[0] += i * d1
                    out[1] += j * d2
                    n_out += 1
        if n_out > 0:
            out = [v / n_out for v in out]
        return [out, [0.0, 0.0]]

    def _embed(self, pair: Sequence[float]) -> list[float]:
        point = [0.0] * DIM
        point[self._x1] = pair[0]
        point[self._x2] = pair[1]
        point[self._const_i[0]] = self._const_value[0]
        point[self._const_i[1]] = self._const_value[1]
        return point

    def construct_lines(self, value0: float) -> None:
        """Find the lines where the surface value0 crosses this square."""
        self._lines = []
        self._ambiguous = False
        above = sum(1 for row in self._points for v in row if v >= value0)
        if above in (0, _STEPS * _STEPS):
            return
        cuts = self._ends_of_edge(value0)
        if not cuts:
            return
        outs = self._find_outside(value0, cuts)
        for k in range(len(cuts) // 2):
            corners = [self._embed(cuts[2 * k]), self._embed(cuts[2 * k + 1])]
            self._lines.append(Line(corners, self._embed(outs[k]), self._const_i))

    def ambiguous(self) -> bool:
        """Whether the square had four crossings."""
        return self._ambiguous

    def lines(self) -> list[Line]:
        """Lines found by the last construct_lines call."""
        return list(self._lines)


class Cube:
    """A cell with one constant coordinate; joins the lines of its faces into polygons."""

    def __init__(
        self,
        values: Sequence[Sequence[Sequence[float]]],
        const_i: int,
        const_value: float,
        dx: Sequence[float],
    ) -> None:
        _check_len(values, _STEPS, "cube values")
        for plane in values:
            _check_len(plane, _STEPS, "cube plane")
            for row in plane:
                _check_len(row, _STEPS, "cube row")
        _check_len(dx, DIM, "cell size")
        self._values = [[[float(v) for v in row] for row in plane] for plane in values]
        self._const_i = int(const_i)
        self._const_value = float(const_value)
        self._dx = [float(d) for d in dx]
        free = [i for i in range(DIM) if i != self._const_i]
        if len(free) != 3:
            raise ValueError(f"constant index must be in 0..{DIM - 1}, got {const_i}")
        self._x1, self._x2, self._x3 = free
        self._lines: list[Line] = []
        self._polygons: list[Polygon] = []
        self._ambiguous = 0

    def _face(self, axis: int, j: int) -> list[list[float]]:
        c = self._values
        if axis == self._x1:
            return [[c[j][a][b] for b in range(_STEPS)] for a in range(_STEPS)]
        if axis == self._x2:
            return [[c[a][j][b] for b in range(_STEPS)] for a in range(_STEPS)]
        return [[c[a][b][j] for b in range(_STEPS)] for a in range(_STEPS)]

    def _split_to_squares(self) -> list[Square]:
        squares = []
        for axis in range(DIM):
            if axis == self._const_i:
                continue
            for j in range(_STEPS):
                squares.append(
                    Square(
                        self._face(axis, j),
                        (self._const_i, axis),
                        (self._const_value, j * self._dx[axis]),
                        self._dx,
                    )
                )
        return squares

    def construct_polygons(self, value0: float) -> None:
        """Find the polygons where the surface value0 crosses this cube."""
        self._lines = []
        self._polygons = []
        self._ambiguous = 0
        squares = self._split_to_squares()
        for square in squares:
            square.construct_lines(value0)
            self._lines.extend(square.lines())
        if not self._lines:
            return
        self._ambiguous = sum(1 for square in squares if square.ambiguous())
        if self._ambiguous == 0 and len(self._lines) == 6:
            self._ambiguous = 1
        if self._ambiguous:
            self._connect_lines()
        else:
            polygon = Polygon(self._const_i)
            for line in self._lines:
                polygon.add_line(line, True)
            self._polygons.append(polygon)

    def _connect_lines(self) -> None:
        used = [False] * len(self._lines)
        n_used = 0
        while n_used < len(self._lines):
            remaining = len(self._lines) - n_used
            if remaining < 3:
                raise RuntimeError(f"cannot construct polygon from {remaining} lines")
            polygon = Polygon(self._const_i)
            added = True
            while added:
                added = False
                for index, line in enumerate(self._lines):
                    if not used[index] and polygon.add_line(line, False):
                        used[index] = True
                        n_used += 1
                        added = True
                        break
            self._polygons.append(polygon)

    def ambiguous(self) -> bool:
        """Whether the surface in this cube could be connected in more than one way."""
        return self._ambiguous > 0

    def n_lines(self) -> int:
        """Number of lines found on the faces."""
        return len(self._lines)

    def polygons(self) -> list[Polygon]:
        """Polygons found by the last construct_polygons call."""
        return list(self._polygons)