import pytest

from relhydro.surface_cubes import Cube, Square

UNIT = (1.0, 1.0, 1.0, 1.0)


def _dot(a, b):
    return sum(x * y for x, y in zip(a, b))


def _cube(high_corners):
    values = [[[0.0, 0.0], [0.0, 0.0]], [[0.0, 0.0], [0.0, 0.0]]]
    for i, j, k in high_corners:
        values[i][j][k] = 1.0
    return values


def test_square_all_above_has_no_lines():
    sq = Square([[1.0, 2.0], [3.0, 4.0]], (0, 1), (0.0, 0.0), UNIT)
    sq.construct_lines(0.5)
    assert sq.lines() == []
    assert sq.ambiguous() is False


def test_square_single_corner_gives_one_line():
    sq = Square([[1.0, 0.0], [0.0, 0.0]], (0, 1), (0.0, 0.0), UNIT)
    sq.construct_lines(0.5)
    lines = sq.lines()
    assert len(lines) == 1
    assert sq.ambiguous() is False
    ends = {lines[0].start(), lines[0].end()}
    assert ends == {(0.0, 0.0, 0.5, 0.0), (0.0, 0.0, 0.0, 0.5)}


def test_square_constant_coordinates_are_kept():
    sq = Square([[1.0, 0.0], [0.0, 0.0]], (0, 1), (3.0, 7.0), (1.0, 1.0, 2.0, 2.0))
    sq.construct_lines(0.5)
    line = sq.lines()[0]
    for point in (line.start(), line.end(), line.out()):
        assert point[0] == 3.0
        assert point[1] == 7.0


def test_square_normal_points_outward():
    sq = Square([[1.0, 0.0], [0.0, 0.0]], (0, 1), (0.0, 0.0), UNIT)
    sq.construct_lines(0.5)
    line = sq.lines()[0]
    direction = [o - c for o, c in zip(line.out(), line.centroid())]
    assert _dot(line.normal(), direction) > 0
    assert line.normal()[0] == 0.0
    assert line.normal()[1] == 0.0


def test_square_checkerboard_is_ambiguous():
    sq = Square([[1.0, 0.0], [0.0, 1.0]], (0, 1), (0.0, 0.0), UNIT)
    sq.construct_lines(0.4)
    assert sq.ambiguous() is True
    assert len(sq.lines()) == 2


def test_square_checkerboard_with_low_centre_uses_centre_as_outside():
    dx = (1.0, 1.0, 2.0, 4.0)
    sq = Square([[1.0, 0.0], [0.0, 1.0]], (0, 1), (0.0, 0.0), dx)
    sq.construct_lines(0.6)
    outs = [line.out() for line in sq.lines()]
    assert len(outs) == 2
    assert outs[0] == outs[1]
    assert outs[0][2] == pytest.approx(dx[2] / 2)
    assert outs[0][3] == pytest.approx(dx[3] / 2)


def test_square_value_on_corner_is_nudged_inside():
    sq = Square([[0.5, 0.0], [0.0, 0.0]], (0, 1), (0.0, 0.0), UNIT)
    sq.construct_lines(0.5)
    line = sq.lines()[0]
    for point in (line.start(), line.end()):
        assert point[2] == pytest.approx(0.0, abs=1e-8)
        assert point[3] == pytest.approx(0.0, abs=1e-8)


def test_square_construct_twice_gives_same_lines():
    sq = Square([[1.0, 0.0], [0.0, 0.0]], (0, 1), (0.0, 0.0), UNIT)
    sq.construct_lines(0.5)
    first = [(l.start(), l.end()) for l in sq.lines()]
    sq.construct_lines(0.5)
    second = [(l.start(), l.end()) for l in sq.lines()]
    assert first == second


def test_square_rejects_bad_shape():
    with pytest.raises(ValueError):
        Square([[1.0, 0.0, 2.0], [0.0, 0.0]], (0, 1), (0.0, 0.0), UNIT)
    with pytest.raises(ValueError):
        Square([[1.0, 0.0], [0.0, 0.0]], (0, 1), (0.0, 0.0), (1.0, 1.0))
    with pytest.raises(ValueError):
        Square([[1.0, 0.0], [0.0, 0.0]], (1, 1), (0.0, 0.0), UNIT)


def test_cube_without_crossing_has_no_polygons():
    cube = Cube(_cube([]), 0, 0.0, UNIT)
    cube.construct_polygons(0.5)
    assert cube.n_lines() == 0
    assert cube.polygons() == []
    assert cube.ambiguous() is False


def test_cube_single_corner_gives_triangle():
    cube = Cube(_cube([(0, 0, 0)]), 0, 0.0, UNIT)
    cube.construct_polygons(0.5)
    assert cube.n_lines() == 3
    assert cube.ambiguous() is False
    polygons = cube.polygons()
    assert len(polygons) == 1
    assert len(polygons[0].lines()) == 3


def test_cube_single_corner_normal_points_away_from_high_corner():
    cube = Cube(_cube([(0, 0, 0)]), 0, 0.0, UNIT)
    cube.construct_polygons(0.5)
    normal = cube.polygons()[0].normal()
    assert normal[0] == 0.0
    assert all(n > 0 for n in normal[1:])
    assert normal[1] == pytest.approx(normal[2])
    assert normal[2] == pytest.approx(normal[3])


def test_cube_opposite_corners_are_ambiguous_with_two_polygons():
    cube = Cube(_cube([(0, 0, 0), (1, 1, 1)]), 0, 0.0, UNIT)
    cube.construct_polygons(0.5)
    assert cube.n_lines() == 6
    assert cube.ambiguous() is True
    polygons = cube.polygons()
    assert len(polygons) == 2
    assert [len(p.lines()) for p in polygons] == [3, 3]


def test_cube_planar_split_has_normal_along_one_axis():
    dx = (1.0, 2.0, 1.0, 1.0)
    cube = Cube(_cube([(0, 0, 0), (0, 0, 1), (0, 1, 0), (0, 1, 1)]), 0, 0.0, dx)
    cube.construct_polygons(0.5)
    assert cube.n_lines() == 4
    polygons = cube.polygons()
    assert len(polygons) == 1
    normal = polygons[0].normal()
    assert normal[1] > 0
    assert normal[2] == pytest.approx(0.0, abs=1e-12)
    assert normal[3] == pytest.approx(0.0, abs=1e-12)
    assert polygons[0].centroid()[1] == pytest.approx(dx[1] / 2)


def test_cube_rejects_bad_input():
    with pytest.raises(ValueError):
        Cube([[[0.0, 0.0], [0.0, 0.0]]], 0, 0.0, UNIT)
    with pytest.raises(ValueError):
        Cube(_cube([]), 0, 0.0, (1.0, 1.0, 1.0))
    with pytest.raises(ValueError):
        Cube(_cube([]), 5, 0.0, UNIT)