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

""" Combinatorial mesh item neighborhood iterators.

Adjacent/incident mesh items of a vertex are visited in counter-clockwise
order as determined by the mesh orientation. Mesh items are represented by
their indices. All iterators require a
:class:`~hemesh.hds.HalfedgeTriangleMesh` with computed halfedges; this is
checked when the iterator is created, not when it is first advanced.
"""

from collections import deque


def verts(mesh, vertex=None):
    """ Vertex iterator.

    .. table::
       :width: 100%
       :widths: 20, 80

       ================ ================================================
       `vertex` given   \u21ba traversal of adjacent vertices
       ---------------- ------------------------------------------------
       `vertex` omitted in-order traversal of all vertex indices
       ================ ================================================

    Parameters
    ----------
    mesh : HalfedgeTriangleMesh
        The mesh.
    vertex : int, optional
        Center vertex.

    Yields
    ------
    int
        Vertex index.

    Note
    ----
    For a boundary vertex the traversal starts at the target of its
    outgoing boundary halfedge and ends at the origin of its incoming
    boundary halfedge.
    """
    if vertex is None:
        return iter(range(len(mesh.vertices)))

    mesh._check_vertex_index(vertex)
    return _verts_ring(mesh, vertex)


def _verts_ring(mesh, vertex):
    halfs = mesh.halfedges
    fan = mesh.ordered_halfedge_from_vertex[vertex]

    for i in fan:
        yield halfs[i].target

    # The origin of the incoming boundary halfedge is not the target of
    # any outgoing halfedge.
    if fan and halfs[fan[0]].boundary:
        yield halfs[halfs[halfs[fan[-1]].next].next].origin


def _verts_bfs(mesh, item, stop=None, start=0):
    """ Breadth-first vertex neighborhood iterator.

    Breadth-first traversal of the vertex neighborhood of a vertex or a
    set of vertices. Seed vertices are considered neighbors at distance
    zero.

    Parameters
    ----------
    mesh : HalfedgeTriangleMesh
        The mesh.
    item : int or list[int]
        The seed vertex or vertices.
    stop : int, optional
        All vertices at edge distance less or equal to `stop` are visited.
    start : int, optional
        Vertex reporting starts at the given distance level.

    Yields
    ------
    int
        Next vertex in breadth-first search.
    int
        Distance to `item`.
    """
    try:
        seeds = [v for v in item]           # several seed vertices
    except TypeError:
        seeds = [item]                      # single seed vertex

    queue = deque(seeds)
    level = dict.fromkeys(seeds, 0)

    while queue:
        v = queue.popleft()
        d = level[v]

        # Stop when all vertices at distance stop (i.e., number of
        # edges traversed) have been found.
        if stop is not None and d > stop:
            return

        if start <= d:
            yield v, d

        for w in verts(mesh, v):
            # Vertices with assigned level information are either
            # in the queue right now or have been removed earlier.
            if w not in level:
                queue.append(w)
                level[w] = d + 1
            else:
                assert level[w] <= d + 1


def halfs(mesh, vertex=None):
    """ Halfedge iterator.

    .. table::
       :width: 100%
       :widths: 20, 80

       ================ ================================================
       `vertex` given   \u21ba traversal of outgoing halfedges
       ---------------- ------------------------------------------------
       `vertex` omitted in-order traversal of all halfedge indices
       ================ ================================================

    Parameters
    ----------
    mesh : HalfedgeTriangleMesh
        The mesh.
    vertex : int, optional
        Center vertex.

    Yields
    ------
    int
        Halfedge index.
    """
    if vertex is None:
        mesh._check_halfedges()
        return iter(range(len(mesh.halfedges)))

    mesh._check_vertex_index(vertex)
    return iter(mesh.ordered_halfedge_from_vertex[vertex])


def edges(mesh):
    """ Edge iterator.

    An undirected interior edge is represented by a pair of oppositely
    oriented halfedges. This iterator yields exactly one halfedge per
    edge: the one with the smaller index for interior edges, the only
    one for boundary edges.

    Parameters
    ----------
    mesh : HalfedgeTriangleMesh
        The mesh.

    Yields
    ------
    int
        Halfedge index.
    """
    mesh._check_halfedges()

    return (i for i, h in enumerate(mesh.halfedges)
            if h.twin == -1 or i < h.twin)


def faces(mesh, vertex=None):
    """ Face iterator.

    .. table::
       :width: 100%
       :widths: 20, 80

       ================ ================================================
       `vertex` given   \u21ba traversal of incident triangles
       ---------------- ------------------------------------------------
       `vertex` omitted in-order traversal of all triangle indices
       ================ ================================================

    Parameters
    ----------
    mesh : HalfedgeTriangleMesh
        The mesh.
    vertex : int, optional
        Center vertex.

    Yields
    ------
    int
        Triangle index.
    """
    if vertex is None:
        return iter(range(len(mesh.triangles)))

    return (mesh.halfedges[i].triangle_index for i in halfs(mesh, vertex))


def boundary(mesh, halfedge):
    """ Boundary loop iterator.

    Parameters
    ----------
    mesh : HalfedgeTriangleMesh
        The mesh.
    halfedge : int
        Index of a boundary halfedge.

    Raises
    ------
    ValueError
        If `halfedge` is not a boundary halfedge.

    Yields
    ------
    int
        Boundary halfedge indices, starting with `halfedge`.
    """
    mesh.next_halfedge_on_boundary(halfedge)
    return _boundary_walk(mesh, halfedge)


def _boundary_walk(mesh, halfedge):
    i = halfedge

    while True:
        yield i
        i = mesh.next_halfedge_on_boundary(i)

        if i == halfedge:
            return
