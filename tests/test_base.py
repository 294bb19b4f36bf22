import itertools
import math

import numpy as np
import pytest

from hemesh.hds import HalfedgeTriangleMesh
from hemesh.linalg import rotation_matrix
from hemesh.triangle import TriangleMesh


@pytest.fixture
def box():
    corners = itertools.product([0.0, 2.0], [0.0, 1.0], [0.0, 0.5])
    return TriangleMesh(np.array(list(corners)))


def test_bounds(box):
    a, b = box.get_axis_aligned_bounding_box()

    assert np.array_equal(a, [0.0, 0.0, 0.0])
    assert np.array_equal(b, [2.0, 1.0, 0.5])
    assert np.allclose(box.get_center(), [1.0, 0.5, 0.25])


def test_empty_bounds():
    mesh = TriangleMesh()

    assert np.array_equal(mesh.get_min_bound(), np.zeros(3))
    assert np.array_equal(mesh.get_max_bound(), np.zeros(3))
    assert np.array_equal(mesh.get_center(), np.zeros(3))

    with pytest.raises(ValueError):
        mesh.get_oriented_bounding_box()


def test_oriented_bounding_box(box):
    center, R, extent = box.get_oriented_bounding_box()

    assert np.allclose(center, [1.0, 0.5, 0.25])
    assert np.allclose(sorted(extent), [0.5, 1.0, 2.0])
    assert np.allclose(R.T @ R, np.eye(3))
    assert math.isclose(np.linalg.det(R), 1.0)


def test_oriented_bounding_box_of_rotated_box(box):
    R = rotation_matrix([1.0, 2.0, 3.0], 0.7)
    box.rotate(R)

    center, _, extent = box.get_oriented_bounding_box()

    assert np.allclose(center, box.get_center())
    assert np.allclose(sorted(extent), [0.5, 1.0, 2.0])


def test_transform(quad):
    T = np.eye(4)
    T[:3, 3] = [1.0, 2.0, 3.0]

    quad.transform(2.0 * T)

    assert np.allclose(quad.vertices[0], [1.0, 2.0, 3.0])
    assert np.allclose(quad.vertices[3], [2.0, 3.0, 3.0])

    with pytest.raises(ValueError):
        quad.transform(np.eye(3))


def test_translate(quad):
    quad.translate([1.0, 0.0, 0.0])
    assert np.allclose(quad.get_center(), [1.5, 0.5, 0.0])

    quad.translate([5.0, 5.0, 5.0], relative=False)
    assert np.allclose(quad.get_center(), [5.0, 5.0, 5.0])


def test_scale(quad):
    mesh = quad.copy().scale(2.0)

    assert np.allclose(mesh.vertices[0], [-0.5, -0.5, 0.0])
    assert np.allclose(mesh.get_center(), quad.get_center())

    quad.scale(2.0, center=False)
    assert np.allclose(quad.vertices[3], [2.0, 2.0, 0.0])


def test_rotate_about_center(quad):
    quad.compute_vertex_normals()
    quad.rotate(rotation_matrix([0.0, 0.0, 1.0], 0.5 * math.pi))

    assert np.allclose(quad.vertices[0], [1.0, 0.0, 0.0])
    assert np.allclose(quad.get_center(), [0.5, 0.5, 0.0])
    assert np.allclose(quad.vertex_normals, [[0.0, 0.0, 1.0]] * 4)

    quad.rotate(rotation_matrix([1.0, 0.0, 0.0], math.pi), center=False)
    assert np.allclose(quad.vertex_normals, [[0.0, 0.0, -1.0]] * 4)

    with pytest.raises(ValueError):
        quad.rotate(np.eye(4))


def test_paint_uniform_color(quad):
    quad.paint_uniform_color([2.0, -1.0, 0.5])

    assert quad.has_vertex_colors()
    assert np.allclose(quad.vertex_colors, [[1.0, 0.0, 0.5]] * 4)


def test_normalize_normals(triangle):
    triangle.vertex_normals = [[0.0, 0.0, 0.0],
                               [3.0, 0.0, 4.0],
                               [0.0, 2.0, 0.0]]
    triangle.normalize_normals()

    assert np.allclose(triangle.vertex_normals, [[0.0, 0.0, 1.0],
                                                 [0.6, 0.0, 0.8],
                                                 [0.0, 1.0, 0.0]])


def test_iadd_vertex_data(triangle, quad):
    quad.compute_vertex_normals()

    mesh = TriangleMesh()
    mesh += quad

    assert mesh.has_vertex_normals()

    mesh += triangle

    assert len(mesh.vertices) == 7
    assert not mesh.has_vertex_normals()


def test_iadd_empty_operand(quad):
    quad += TriangleMesh()

    assert len(quad.vertices) == 4
    assert len(quad.triangles) == 2


def test_copy(quad):
    mesh = quad.copy()
    mesh.vertices[0] = 1.0

    assert quad.vertices[0, 0] == 0.0
    assert isinstance(mesh, TriangleMesh)


def test_convex_hull(box):
    box.vertices = np.vstack((box.vertices, box.get_center()))

    hull, indices = box.compute_convex_hull()

    assert np.array_equal(indices, np.arange(8))
    assert len(hull.vertices) == 8
    assert len(hull.triangles) == 12

    # Outward orientation.
    hull.compute_triangle_normals()
    centroids = np.mean(hull.vertices[hull.triangles], axis=1)
    d = centroids - hull.get_center()

    assert np.all(np.sum(d * hull.triangle_normals, axis=1) > 0.0)

    mesh = HalfedgeTriangleMesh.from_triangle_mesh(hull)

    assert mesh.has_halfedges()
    assert mesh.get_boundaries() == []
