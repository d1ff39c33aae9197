import pytest

from relhydro.cornelius import Cornelius, Hypercube


def plane_2d(high_first=True):
    hi, lo = (1.0, 0.0) if high_first else (0.0, 1.0)
    return [[hi, hi], [lo, lo]]


def plane_3d(high_first=True):
    hi, lo = (1.0, 0.0) if high_first else (0.0, 1.0)
    return [[[v, v], [v, v]] for v in (hi, lo)]


def plane_4d(high_first=True):
    hi, lo = (1.0, 0.0) if high_first else (0.0, 1.0)
    return [[[[v, v], [v, v]], [[v, v], [v, v]]] for v in (hi, lo)]


def test_2d_plane_surface():
    dx = (2.0, 3.0)
    c = Cornelius(2, 0.5, dx)
    assert c.find_surface_2d(plane_2d()) == 1
    (normal,) = c.normals()
    (centroid,) = c.centroids()
    assert normal[0] == pytest.approx(dx[1])
    assert normal[1] == pytest.approx(0.0)
    assert centroid == pytest.approx((dx[0] / 2, dx[1] / 2))
    assert c.normal_elem(0, 0) == pytest.approx(normal[0])
    assert c.centroid_elem(0, 1) == pytest.approx(centroid[1])


def test_2d_normal_points_to_lower_values():
    c = Cornelius(2, 0.5, (1.0, 1.0))
    c.find_surface_2d(plane_2d(high_first=False))
    assert c.normals()[0][0] < 0


def test_2d_4d_padding_is_zero():
    c = Cornelius(2, 0.5, (1.0, 1.0))
    c.find_surface_2d(plane_2d())
    n4 = c.normals_4d()[0]
    c4 = c.centroids_4d()[0]
    assert n4[:2] == (0.0, 0.0)
    assert c4[:2] == (0.0, 0.0)
    assert n4[2:] == c.normals()[0]


def test_3d_plane_surface():
    dx = (2.0, 4.0, 6.0)
    c = Cornelius(3, 0.5, dx)
    assert c.find_surface_3d(plane_3d()) == 1
    normal = c.normals()[0]
    assert normal[0] == pytest.approx(dx[1] * dx[2])
    assert normal[1:] == pytest.approx((0.0, 0.0))
    assert c.centroids()[0] == pytest.approx(tuple(d / 2 for d in dx))


def test_3d_flipped_values_flip_normal():
    dx = (1.0, 1.0, 1.0)
    a = Cornelius(3, 0.5, dx)
    b = Cornelius(3, 0.5, dx)
    a.find_surface_3d(plane_3d(True))
    b.find_surface_3d(plane_3d(False))
    assert b.normals()[0] == pytest.approx(tuple(-x for x in a.normals()[0]))


def test_3d_no_surface():
    c = Cornelius(3, 5.0, (1.0, 1.0, 1.0))
    assert c.find_surface_3d(plane_3d()) == 0
    assert c.normals() == []


def test_3d_print_writes_triangles(tmp_path):
    path = tmp_path / "triangles.txt"
    dx = (1.0, 1.0, 1.0)
    pos = (0.0, 10.0, 20.0, 30.0)
    with Cornelius(3, 0.5, dx) as c:
        c.init_print(path)
        c.find_surface_3d_print(plane_3d(), pos)
    rows = path.read_text().splitlines()
    assert len(rows) == 4
    for row in rows:
        fields = [float(x) for x in row.split()]
        assert len(fields) == 9
        assert fields[0::3] == pytest.approx([pos[1] + dx[0] / 2] * 3)


def test_4d_plane_surface():
    dx = (1.0, 2.0, 3.0, 4.0)
    c = Cornelius(4, 0.5, dx)
    assert c.find_surface_4d(plane_4d()) == 1
    normal = c.normals()[0]
    assert abs(normal[0]) == pytest.approx(dx[1] * dx[2] * dx[3])
    assert normal[0] > 0
    assert normal[1:] == pytest.approx((0.0, 0.0, 0.0), abs=1e-12)
    assert c.centroids()[0] == pytest.approx(tuple(d / 2 for d in dx))


def test_4d_opposite_corners_give_two_elements():
    values = [[[[0.0] * 2 for _ in range(2)] for _ in range(2)] for _ in range(2)]
    values[0][0][0][0] = 1.0
    values[1][1][1][1] = 1.0
    dx = (1.0, 1.0, 1.0, 1.0)
    c = Cornelius(4, 0.5, dx)
    assert c.find_surface_4d(values) == 2
    n1, n2 = c.normals()
    assert [a + b for a, b in zip(n1, n2)] == pytest.approx([0.0] * 4, abs=1e-12)
    c1, c2 = c.centroids()
    assert [a + b for a, b in zip(c1, c2)] == pytest.approx(list(dx))


def test_hypercube_directly():
    h = Hypercube(plane_4d(), (1.0, 1.0, 1.0, 1.0))
    h.construct_polyhedrons(0.5)
    (poly,) = h.polyhedrons()
    assert len(poly.polygons()) == 6


def test_wrong_dimension_raises():
    c = Cornelius(2, 0.5, (1.0, 1.0))
    with pytest.raises(RuntimeError):
        c.find_surface_3d(plane_3d())
    with pytest.raises(RuntimeError):
        c.find_surface_4d(plane_4d())


def test_reinit_changes_dimension():
    c = Cornelius(2, 0.5, (1.0, 1.0))
    c.init(3, 0.5, (1.0, 1.0, 1.0))
    assert c.find_surface_3d(plane_3d()) == 1
    assert len(c.normals()[0]) == 3


def test_bad_dx_length_raises():
    with pytest.raises(ValueError):
        Cornelius(3, 0.5, (1.0, 1.0))


def test_bad_dimension_raises():
    with pytest.raises(ValueError):
        Cornelius(5, 0.5, (1.0,) * 5)


def test_element_index_out_of_range():
    c = Cornelius(2, 0.5, (1.0, 1.0))
    c.find_surface_2d(plane_2d())
    with pytest.raises(IndexError):
        c.normal_elem(1, 0)
    with pytest.raises(IndexError):
        c.centroid_elem(0, 2)