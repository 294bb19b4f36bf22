# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Geometric mesh traits.

Convenience functions to compute common and often used geometric mesh
traits like vertex and face normals, etc. All functions operate on plain
coordinate and index arrays so that they can be shared by the different
mesh types.
"""

import numpy as np

import hemesh.linalg as linalg


def bounds(points):
    r""" Bounding box vertices.

    Corner vertices of the axis-aligned bounding box.

    Parameters
    ----------
    points : array_like, shape (n, k)
        Coordinates of :math:`n` points in :math:`\mathbb{R}^k`,
        one point per row.

    Returns
    -------
    a : ~numpy.ndarray
        Holds the minimum value for each dimension.
    b : ~numpy.ndarray
        Holds the maximum value for each dimension.
    """
    return np.min(points, axis=0), np.max(points, axis=0)


def triangle_normals(points, triangles, normalized=True):
    """ Triangle normals.

    Compute face normals as cross product of edge vectors. The normal
    of a triangle :math:`(a, b, c)` is parallel to
    :math:`(b - a) \\times (c - a)`.

    Parameters
    ----------
    points : ~numpy.ndarray, shape (n, 3)
        Vertex coordinates.
    triangles : ~numpy.ndarray, shape (m, 3)
        Triangle definitions, 0-based vertex indexing.
    normalized : bool, optional
        Scale normals to unit length. Otherwise their length equals
        twice the triangle area.

    Returns
    -------
    ~numpy.ndarray, shape (m, 3)
        Normal vectors, one per triangle.

    Note
    ----
    Normals of degenerate triangles are zero vectors, they are **not**
    normalized.
    """
    triangles = np.asarray(triangles, dtype=int).reshape(-1, 3)

    a = points[triangles[:, 0]]
    b = points[triangles[:, 1]]
    c = points[triangles[:, 2]]

    normals = np.cross(b - a, c - a)

    if normalized:
        length = np.linalg.norm(normals, axis=1)
        mask = length > 0.0
        normals[mask] /= length[mask, None]

    return normals


def triangle_areas(points, triangles):
    """ Triangle areas.

    Parameters
    ----------
    points : ~numpy.ndarray, shape (n, 3)
        Vertex coordinates.
    triangles : ~numpy.ndarray, shape (m, 3)
        Triangle definitions.

    Returns
    -------
    ~numpy.ndarray, shape (m, )
        Area of each triangle.
    """
    normals = triangle_normals(points, triangles, normalized=False)
    return 0.5 * np.linalg.norm(normals, axis=1)


def vertex_normals(points, triangles, normalized=True):
    """ Vertex normals.

    Compute vertex normals as area weighted average of the normals of
    incident triangles. Each triangle broadcasts its normal vector to
    each of its three vertices.

    Parameters
    ----------
    points : ~numpy.ndarray, shape (n, 3)
        Vertex coordinates.
    triangles : ~numpy.ndarray, shape (m, 3)
        Triangle definitions.
    normalized : bool, optional
        Scale normals to unit length.

    Returns
    -------
    ~numpy.ndarray, shape (n, 3)
        One normal vector per vertex.

    Note
    ----
    Vertex normals are not well defined for isolated vertices. The
    result holds zero vectors in this case.
    """
    triangles = np.asarray(triangles, dtype=int).reshape(-1, 3)
    normals = np.zeros((len(points), 3))

    # Unnormalized triangle normals are area weighted. Unbuffered
    # accumulation is required since vertex indices repeat.
    face_normals = triangle_normals(points, triangles, normalized=False)

    for k in range(3):
        np.add.at(normals, triangles[:, k], face_normals)

    if normalized:
        length = np.linalg.norm(normals, axis=1)
        mask = length > 0.0
        normals[mask] /= length[mask, None]

    return normals


def signed_volumes(points, tetras):
    """ Signed tetrahedron volumes.

    A tetrahedron :math:`(a, b, c, d)` is positively oriented if `d`
    lies on the side of the plane through `a`, `b`, `c` the normal
    :math:`(b - a) \\times (c - a)` points to.

    Parameters
    ----------
    points : ~numpy.ndarray, shape (n, 3)
        Vertex coordinates.
    tetras : ~numpy.ndarray, shape (k, 4)
        Tetrahedron definitions.

    Returns
    -------
    ~numpy.ndarray, shape (k, )
        Signed volumes.
    """
    tetras = np.asarray(tetras, dtype=int).reshape(-1, 4)

    a = points[tetras[:, 0]]
    u = points[tetras[:, 1]] - a
    v = points[tetras[:, 2]] - a
    w = points[tetras[:, 3]] - a

    return np.einsum('ij,ij->i', np.cross(u, v), w) / 6.0


def edge_length(mesh):
    """ Edge length statistics.

    Minimal, maximal, and average edge length of a halfedge mesh. Each
    undirected edge is counted once.

    Parameters
    ----------
    mesh : HalfedgeTriangleMesh
        Mesh with computed halfedges.

    Returns
    -------
    min : float
        Minimal edge length.
    max : float
        Maximal edge length.
    avg : float
        Average edge length.

    Raises
    ------
    ValueError
        If the mesh has no edges.
    """
    min, max = np.inf, -np.inf
    avg, cnt = 0.0, 0

    for i, h in enumerate(mesh.halfedges):
        # Interior edges are visited twice, once per halfedge.
        if h.twin != -1 and h.twin < i:
            continue

        v, w = h.vertex_indices
        length = linalg.norm(mesh.vertices[w] - mesh.vertices[v])

        avg += length
        cnt += 1

        min = length if length < min else min
        max = length if length > max else max

    if cnt == 0:
        raise ValueError('mesh has no edges')

    return min, max, avg / cnt
