import numpy as np
import pytest

from hemesh.triangle import TriangleMesh


@pytest.fixture
def triangle():
    points = [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]
    return TriangleMesh(points, [[0, 1, 2]])


@pytest.fixture
def quad():
    points = [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0],
              [0.0, 1.0, 0.0], [1.0, 1.0, 0.0]]
    return TriangleMesh(points, [[0, 1, 2], [1, 3, 2]])


@pytest.fixture
def tetrahedron():
    points = [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0],
              [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
    return TriangleMesh(points, [[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]])


@pytest.fixture
def grid():
    # 3x3 vertices, vertex 4 is the only interior vertex.
    points = [[i, j, 0.0] for j in range(3) for i in range(3)]
    triangles = []

    for j in range(2):
        for i in range(2):
            a = i + 3*j
            triangles.append([a, a + 1, a + 4])
            triangles.append([a, a + 4, a + 3])

    return TriangleMesh(np.array(points, dtype=float), triangles)


@pytest.fixture
def annulus():
    # Square with a square hole, two boundary loops.
    points = [[-2.0, -2.0, 0.0], [2.0, -2.0, 0.0],
              [2.0, 2.0, 0.0], [-2.0, 2.0, 0.0],
              [-1.0, -1.0, 0.0], [1.0, -1.0, 0.0],
              [1.0, 1.0, 0.0], [-1.0, 1.0, 0.0]]
    triangles = [[0, 1, 5], [0, 5, 4],
                 [1, 2, 6], [1, 6, 5],
                 [2, 3, 7], [2, 7, 6],
                 [3, 0, 4], [3, 4, 7]]

    return TriangleMesh(points, triangles)


@pytest.fixture
def sphere():
    # Closed triangle mesh, convex hull of random points on the sphere.
    rng = np.random.default_rng(7)
    points = rng.normal(size=(60, 3))
    points /= np.linalg.norm(points, axis=1)[:, None]

    hull, _ = TriangleMesh(points).compute_convex_hull()
    return hull
