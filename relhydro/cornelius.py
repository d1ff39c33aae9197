"""Constant-value surface finder for cells of a 2-, 3- or 4-dimensional grid.

Given the values at the corners of one grid cell and the cell size, the
surface elements where the field crosses a given value are found together
with their centroids and outward normals. "Outward" means pointing towards
lower values.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from typing import TextIO

from relhydro.surface_cubes import Cube, Square
from relhydro.surface_elements import DIM, GeneralElement, Polygon, Polyhedron

_STEPS = 2
_N_CUBES = 8


def _check_len(values: Sequence, size: int, what: str) -> None:
    if len(values) != size:
        raise ValueError(f"{what} must have {size} entries, got {len(values)}")


def _corners(values, depth: int) -> list:
    """Validate a nested 2x...x2 sequence and convert it to floats."""
    if depth == 0:
        return float(values)
    _check_len(values, _STEPS, "corner values")
    return [_corners(v, depth - 1) for v in values]


def _flatten(values, depth: int) -> list[float]:
    if depth == 0:
        return [values]
    return [x for v in values for x in _flatten(v, depth - 1)]


class Hypercube:
    """A four-dimensional cell; joins the polygons of its cubes into polyhedra."""

    def __init__(self, values: Sequence, dx: Sequence[float]) -> None:
        self._values = _corners(values, 4)
        _check_len(dx, DIM, "cell size")
        self._dx = [float(d) for d in dx]
        self._cubes: list[Cube] = []
        self._polyhedrons: list[Polyhedron] = []
        self._ambiguous = 0

    def _cube_values(self, axis: int, j: int) -> list[list[list[float]]]:
        h = self._values
        rng = range(_STEPS)
        if axis == 0:
            return [[[h[j][a][b][c] for c in rng] for b in rng] for a in rng]
        if axis == 1:
            return [[[h[a][j][b][c] for c in rng] for b in rng] for a in rng]
        if axis == 2:
            return [[[h[a][b][j][c] for c in rng] for b in rng] for a in rng]
        return [[[h[a][b][c][j] for c in rng] for b in rng] for a in rng]

    def _split_to_cubes(self) -> list[Cube]:
        return [
            Cube(self._cube_values(axis, j), axis, j * self._dx[axis], self._dx)
            for axis in range(DIM)
            for j in range(_STEPS)
        ]

    def _check_ambiguous(self, value0: float) -> int:
        ambiguous = sum(1 for cube in self._cubes if cube.ambiguous())
        if ambiguous == 0:
            n_lines = sum(cube.n_lines() for cube in self._cubes)
            points = sum(1 for v in _flatten(self._values, 4) if v < value0)
            if points > 8:
                points = 16 - points
            if n_lines == 24 and points == 2:
                ambiguous += 1
        return ambiguous

    def construct_polyhedrons(self, value0: float) -> None:
        """Find the polyhedra where the surface value0 crosses this hypercube."""
        self._polyhedrons = []
        self._cubes = self._split_to_cubes()
        polygons: list[Polygon] = []
        for cube in self._cubes:
            cube.construct_polygons(value0)
            polygons.extend(cube.polygons())
        self._ambiguous = self._check_ambiguous(value0)
        if self._ambiguous:
            self._connect(polygons)
        else:
            polyhedron = Polyhedron()
            for polygon in polygons:
                polyhedron.add_polygon(polygon, True)
            self._polyhedrons.append(polyhedron)

    def _connect(self, polygons: list[Polygon]) -> None:
        used = [False] * len(polygons)
        n_used = 0
        while True:
            polyhedron = Polyhedron()
            added = True
            while added:
                added = False
                for index, polygon in enumerate(polygons):
                    if not used[index] and polyhedron.add_polygon(polygon, False):
                        used[index] = True
                        n_used += 1
                        added = True
                        break
            self._polyhedrons.append(polyhedron)
            if n_used >= len(polygons):
                break

    def polyhedrons(self) -> list[Polyhedron]:
        """Polyhedra found by the last construct_polyhedrons call."""
        return list(self._polyhedrons)


class Cornelius:
    """Finds surface elements of constant value in one grid cell at a time."""

    def __init__(self, dim: int, value0: float, dx: Sequence[float]) -> None:
        self._stream: TextIO | None = None
        self._elements: list[tuple[tuple[float, ...], tuple[float, ...]]] = []
        self.init(dim, value0, dx)

    def init(self, dim: int, value0: float, dx: Sequence[float]) -> None:
        """Set the dimension, surface value and cell size; may be called again."""
        if dim not in (2, 3, 4):
            raise ValueError(f"dimension must be 2, 3 or 4, got {dim}")
        _check_len(dx, dim, "cell size")
        self._dim = dim
        self._value0 = float(value0)
        self._dx = [1.0] * (DIM - dim) + [float(d) for d in dx]
        self._elements = []

    def init_print(self, filename: str | os.PathLike[str]) -> None:
        """Open a file that receives the triangles found by find_surface_3d_print."""
        self.close()
        self._stream = open(filename, "w")

    def close(self) -> None:
        """Close the triangle output file if one is open."""
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def __enter__(self) -> Cornelius:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _require(self, dim: int) -> None:
        if self._dim != dim:
            raise RuntimeError(f"Cornelius not initialized for {dim}D case")

    def _store(self, elements: Sequence[GeneralElement]) -> None:
        self._elements = [(el.centroid(), el.normal()) for el in elements]

    def find_surface_2d(self, cube: Sequence[Sequence[float]]) -> int:
        """Find the surface lines in a square; returns their number."""
        self._require(2)
        square = Square(_corners(cube, 2), (0, 1), (0.0, 0.0), self._dx)
        square.construct_lines(self._value0)
        self._store(square.lines())
        return len(self._elements)

    def find_surface_3d(self, cube: Sequence) -> int:
        """Find the surface polygons in a cube; returns their number."""
        return self._surface_3d(cube, None)

    def find_surface_3d_print(self, cube: Sequence, pos: Sequence[float]) -> int:
        """As find_surface_3d, also writing the triangles at absolute position pos."""
        _check_len(pos, DIM, "position")
        return self._surface_3d(cube, [float(p) for p in pos])

    def _surface_3d(self, cube: Sequence, pos: list[float] | None) -> int:
        self._require(3)
        values = _corners(cube, 3)
        above = sum(1 for v in _flatten(values, 3) if v >= self._value0)
        if above in (0, 8):
            self._elements = []
            return 0
        cu3d = Cube(values, 0, 0.0, self._dx)
        cu3d.construct_polygons(self._value0)
        polygons = cu3d.polygons()
        self._store(polygons)
        if self._stream is not None and pos is not None:
            for polygon in polygons:
                polygon.write_triangles(self._stream, pos)
        return len(self._elements)

    def find_surface_4d(self, cube: Sequence) -> int:
        """Find the surface polyhedra in a hypercube; returns their number."""
        self._require(4)
        values = _corners(cube, 4)
        above = sum(1 for v in _flatten(values, 4) if v >= self._value0)
        if above in (0, 16):
            self._elements = []
            return 0
        hcube = Hypercube(values, self._dx)
        hcube.construct_polyhedrons(self._value0)
        self._store(hcube.polyhedrons())
        return len(self._elements)

    def n_elements(self) -> int:
        """Number of surface elements found in the last cell."""
        return len(self._elements)

    def normals(self) -> list[tuple[float, ...]]:
        """Normals in the dimension of the problem."""
        skip = DIM - self._dim
        return [normal[skip:] for _, normal in self._elements]

    def centroids(self) -> list[tuple[float, ...]]:
        """Centroids in the dimension of the problem."""
        skip = DIM - self._dim
        return [centroid[skip:] for centroid, _ in self._elements]

    def normals_4d(self) -> list[tuple[float, ...]]:
        """Normals in four dimensions; unused leading components are zero."""
        return [normal for _, normal in self._elements]

    def centroids_4d(self) -> list[tuple[float, ...]]:
        """Centroids in four dimensions; unused leading components are zero."""
        return [centroid for centroid, _ in self._elements]

    def _check_elem(self, i: int, j: int) -> None:
        if not (0 <= i < len(self._elements) and 0 <= j < self._dim):
            raise IndexError("asking for an element which does not exist")

    def centroid_elem(self, i: int, j: int) -> float:
        """Component j of the centroid of element i."""
        self._check_elem(i, j)
        return self._elements[i][0][j + DIM - self._dim]

    def normal_elem(self, i: int, j: int) -> float:
        """Component j of the normal of element i."""
        self._check_elem(i, j)
        return self._elements[i][1][j + DIM - self._dim]