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

""" Halfedge data structure.

An orientable 2-manifold triangle mesh (with or without boundary) is
described by flat containers that refer to each other by index:

    - the vertex and triangle arrays inherited from
      :class:`~hemesh.triangle.TriangleMesh`,
    - a list of :class:`Halfedge` records,
    - and, for each vertex, the list of its outgoing halfedges in
      counter-clockwise order.

Triangle ``t`` owns the halfedges ``3*t``, ``3*t + 1``, and ``3*t + 2``.
Halfedge ``3*t + k`` points from vertex ``triangles[t][k]`` to vertex
``triangles[t][(k + 1) % 3]``. Absent links are encoded as -1.

The structure is built once from a :class:`~hemesh.triangle.TriangleMesh`
via :meth:`HalfedgeTriangleMesh.from_triangle_mesh` and not modified by
any of the query methods.

Note
----
To ease debugging, this module relies on assertions which can slow down
script execution. You can disable assertions by running in optimized mode
via the "-O" command line argument.
"""

from time import perf_counter

from hemesh.triangle import TriangleMesh


class HalfedgeTriangleMesh(TriangleMesh):
    """ Halfedge triangle mesh.

    The adjacency information is computed on construction from a vertex
    array and a triangle array. An empty mesh can be created and
    populated later, followed by an explicit :meth:`compute_halfedges`
    call.

    Parameters
    ----------
    vertices : array_like, shape (n, 3), optional
        Vertex coordinates.
    triangles : array_like, shape (m, 3), optional
        Triangle definitions, 0-based vertex indexing.

    Raises
    ------
    NonManifoldError
        When trying to initialize a mesh from non-manifold data.

    Note
    ----
    The clean-up methods inherited from
    :class:`~hemesh.triangle.TriangleMesh` assign new triangles and hence
    invalidate the halfedges.

    A quad split into two triangles has a single boundary loop:

    >>> mesh = HalfedgeTriangleMesh(points, [[0, 1, 2], [1, 3, 2]])
    >>> mesh.get_boundaries()
    [[0, 1, 3, 2]]
    """

    def __init__(self, vertices=None, triangles=None):
        super().__init__(vertices, triangles)

        if len(self._triangles):
            self.compute_halfedges()

    def __repr__(self):
        return (f'HalfedgeTriangleMesh({len(self._vertices)} vertices, ' +
                f'{len(self._triangles)} triangles, ' +
                f'{len(self._halfs)} halfedges)')

    def __iadd__(self, mesh):
        """ Concatenate meshes.

        Vertex indices of `mesh` are shifted by the number of vertices of
        `self`, halfedge and triangle indices accordingly. If both meshes
        carry halfedges, the result does so as well: the two meshes are
        disjoint, hence concatenating their halfedge structures yields the
        halfedge structure of the union. Otherwise the halfedges of the
        result are invalid and :meth:`has_halfedges` returns :obj:`False`
        until :meth:`compute_halfedges` is called.

        Parameters
        ----------
        mesh : TriangleMesh
            Mesh to be appended. A plain
            :class:`~hemesh.triangle.TriangleMesh` has no halfedges and
            always invalidates those of the result.

        Raises
        ------
        TypeError
            If `mesh` is not a triangle mesh.

        Returns
        -------
        HalfedgeTriangleMesh
            The augmented mesh `self`.
        """
        if mesh is self:
            mesh = mesh.copy()

        keep_halfs = (isinstance(mesh, HalfedgeTriangleMesh) and
                      mesh.has_halfedges() and
                      (self.is_empty() or self.has_halfedges()))

        vert_offset = len(self._vertices)
        face_offset = len(self._triangles)
        half_offset = len(self._halfs)

        super().__iadd__(mesh)

        if mesh.is_empty():
            return self

        if not keep_halfs:
            self._halfs = []
            self._vhout = []

            return self

        shift = lambda i: i + half_offset if i != -1 else -1

        for h in mesh._halfs:
            v, w = h.vertex_indices
            self._halfs.append(Halfedge((v + vert_offset, w + vert_offset),
                                        h.triangle_index + face_offset,
                                        shift(h.next), shift(h.twin)))

        self._vhout.extend([i + half_offset for i in fan]
                           for fan in mesh._vhout)

        return self

    @TriangleMesh.triangles.setter
    def triangles(self, value):
        # Assigning new triangles invalidates the halfedge structure.
        TriangleMesh.triangles.fset(self, value)

        self._halfs = []
        self._vhout = []

    @property
    def halfedges(self):
        """ Halfedge list.

        Read access to the list of all halfedges. This list should not be
        modified directly. The halfedges of triangle ``t`` are stored at
        positions ``3*t``, ``3*t + 1``, and ``3*t + 2``.

        :type: list[Halfedge]
        """
        return self._halfs

    @property
    def ordered_halfedge_from_vertex(self):
        """ Outgoing halfedges per vertex.

        Entry ``v`` lists the indices of all halfedges with origin ``v``
        in counter-clockwise order. For a boundary vertex the first entry
        is its (unique) outgoing boundary halfedge. Isolated vertices are
        assigned an empty list.

        :type: list[list[int]]
        """
        return self._vhout

    @classmethod
    def from_triangle_mesh(cls, mesh, *, quiet=True):
        """ Build halfedge mesh from triangle soup.

        Vertex coordinates, normals, colors, triangles and triangle
        normals are copied. The input mesh is not modified.

        Parameters
        ----------
        mesh : TriangleMesh
            Triangle mesh with unique, non-degenerate, and manifold
            triangles.
        quiet : bool, optional
            Suppress console output.

        Raises
        ------
        NonManifoldEdgeError
            If an edge is shared by more than two triangles or by two
            triangles of inconsistent orientation.
        NonManifoldVertexError
            If the triangles around a vertex do not form a single fan.
        NonManifoldError
            If a triangle references a vertex more than once.
        IndexError
            If a triangle references a vertex that does not exist.

        Returns
        -------
        HalfedgeTriangleMesh
            Mesh with computed halfedges.

        Note
        ----
        No repair is attempted. Use the clean-up methods of
        :class:`~hemesh.triangle.TriangleMesh` on raw data first.
        """
        CBOLD = '\33[1m'                    # bold text, white on black
        CWHITERED = '\33[41m'               # white on red background
        CEND = '\33[0m'

        if not quiet:
            start = perf_counter()
            print(f'computing halfedges of {CBOLD}{mesh!r}{CEND}', end=' ...')

        hmesh = cls()

        # Soup data only, `mesh` may be a halfedge mesh itself.
        TriangleMesh.clone(hmesh, mesh)
        hmesh.compute_halfedges()

        if not quiet:
            print(f' done ({perf_counter()-start:.3f} sec)')

            boundary = sum(1 for h in hmesh._halfs if h.boundary)
            isolated = sum(1 for fan in hmesh._vhout if not fan)

            print(f'\t\u251c\u2500 {len(hmesh._halfs)} halfedges')
            print(f'\t\u2514\u2500 {boundary} boundary halfedges')

            if isolated:
                print(f'{CWHITERED}there are {isolated} isolated ' +
                      f'vertices{CEND}')

        return hmesh

    def compute_halfedges(self):
        """ Compute halfedges from triangles.

        Rebuilds the halfedge list and the counter-clockwise ordered
        outgoing halfedges of each vertex from :attr:`vertices` and
        :attr:`triangles`. Either the whole structure is built or, if an
        exception is raised, the mesh holds no halfedges at all.

        Raises
        ------
        NonManifoldEdgeError
            If an edge is shared by more than two triangles or by two
            triangles of inconsistent orientation.
        NonManifoldVertexError
            If the triangles around a vertex do not form a single fan.
        NonManifoldError
            If a triangle references a vertex more than once.
        IndexError
            If a triangle references a vertex that does not exist.

        Returns
        -------
        HalfedgeTriangleMesh
            The mesh `self`.
        """
        # Invalidate first. Nothing is assigned unless construction
        # succeeds.
        self._halfs = []
        self._vhout = []

        n = len(self._vertices)
        triangles = self._triangles.tolist()

        if triangles and (self._triangles.min() < 0 or
                          self._triangles.max() >= n):
            raise IndexError(f'vertex index out of range(0, {n})')

        halfs = []
        halfs_map = dict()              # (origin, target) -> halfedge index

        for t, triangle in enumerate(triangles):
            # Topologically degenerate if two corners coincide. Not to be
            # confused with geometrically degenerate (coincident points).
            if len(set(triangle)) != 3:
                msg = f'triangle #{t} {triangle} is topologically degenerate'
                raise NonManifoldError(msg)

            for k in range(3):
                v = triangle[k]
                w = triangle[(k + 1) % 3]

                # A second halfedge with the same orientation means the
                # undirected edge has more than two incident triangles or
                # adjacent triangles are oriented inconsistently.
                if (v, w) in halfs_map:
                    msg = f'edge ({v}, {w}) is non-manifold'
                    raise NonManifoldEdgeError(msg)

                halfs_map[v, w] = 3*t + k
                halfs.append(Halfedge((v, w), t, 3*t + (k + 1) % 3))

        for (v, w), i in halfs_map.items():
            halfs[i].twin = halfs_map.get((w, v), -1)

        vhout = [[] for _ in range(n)]

        for i, h in enumerate(halfs):
            vhout[h.vertex_indices[0]].append(i)

        # Order outgoing halfedges counter-clockwise. A boundary vertex
        # has exactly one outgoing boundary halfedge where the rotation
        # has to start. Rotation stops at the boundary or when it closes
        # the fan around an interior vertex.
        for v, outgoing in enumerate(vhout):
            if not outgoing:
                continue

            start = [i for i in outgoing if halfs[i].twin == -1]

            if len(start) > 1:
                raise NonManifoldVertexError(f'vertex #{v} is non-manifold')

            fan = [start[0] if start else outgoing[0]]

            while True:
                i = _next_halfedge_from_vertex(halfs, fan[-1])

                if i == -1 or i == fan[0]:
                    break

                assert halfs[i].vertex_indices[0] == v
                fan.append(i)

            # Triangles attached to v that cannot be reached by rotation
            # belong to a second fan.
            if len(fan) != len(outgoing):
                raise NonManifoldVertexError(f'vertex #{v} is non-manifold')

            vhout[v] = fan

        self._halfs = halfs
        self._vhout = vhout

        return self

    def clone(self, mesh):
        super().clone(mesh)

        self._halfs = [Halfedge(h.vertex_indices, h.triangle_index,
                                h.next, h.twin) for h in mesh._halfs]
        self._vhout = [fan.copy() for fan in mesh._vhout]

        return self

    def clear(self):
        """ Remove all mesh items.

        Returns
        -------
        HalfedgeTriangleMesh
            The empty mesh `self`.
        """
        super().clear()

        self._halfs = []
        self._vhout = []

        return self

    def has_halfedges(self):
        """ Halfedge state.

        Queries on the halfedge structure require this to be
        :obj:`True`.

        Returns
        -------
        bool
            :obj:`True` if halfedges are computed and consistent with the
            current number of vertices and triangles.
        """
        return (len(self._halfs) > 0 and
                len(self._halfs) == 3 * len(self._triangles) and
                len(self._vhout) == len(self._vertices))

    def next_halfedge_from_vertex(self, halfedge):
        """ Rotate halfedge about its origin.

        Computed as ``twin(next(next(h)))`` in constant time.

        Parameters
        ----------
        halfedge : int
            Halfedge index.

        Raises
        ------
        RuntimeError
            If halfedges have not been computed.
        IndexError
            If `halfedge` is out of range.

        Returns
        -------
        int
            Index of the next halfedge with the same origin in
            counter-clockwise order, -1 when hitting the boundary.
        """
        self._check_halfedge_index(halfedge)
        return _next_halfedge_from_vertex(self._halfs, halfedge)

    def next_halfedge_on_boundary(self, halfedge):
        """ Successor along a boundary loop.

        Rotates clockwise about the target vertex of `halfedge`, starting
        from its successor in the same triangle, until a halfedge without
        twin is found.

        Parameters
        ----------
        halfedge : int
            Index of a boundary halfedge.

        Raises
        ------
        ValueError
            If `halfedge` is not a boundary halfedge.
        RuntimeError
            If halfedges have not been computed or the target vertex of
            `halfedge` has no outgoing boundary halfedge.
        IndexError
            If `halfedge` is out of range.

        Returns
        -------
        int
            Index of the boundary halfedge that starts where `halfedge`
            ends.
        """
        self._check_halfedge_index(halfedge)

        halfs = self._halfs

        if not halfs[halfedge].boundary:
            msg = f'halfedge #{halfedge} is not a boundary halfedge'
            raise ValueError(msg)

        start = halfs[halfedge].next
        i = start

        while halfs[i].twin != -1:
            i = halfs[halfs[i].twin].next

            if i == start:
                # The target of a boundary halfedge is a boundary vertex.
                # Rotating all the way around means the structure broke.
                raise RuntimeError('halfedge structure seems corrupt')

        return i

    def boundary_halfedges_from_vertex(self, vertex):
        """ Boundary loop through a vertex.

        Parameters
        ----------
        vertex : int
            Vertex index.

        Raises
        ------
        RuntimeError
            If halfedges have not been computed.
        IndexError
            If `vertex` is out of range.

        Returns
        -------
        list[int]
            Indices of the halfedges of the boundary loop, starting with
            the outgoing boundary halfedge of `vertex`. Empty if `vertex`
            is not a boundary vertex.
        """
        self._check_vertex_index(vertex)

        fan = self._vhout[vertex]

        if not fan or not self._halfs[fan[0]].boundary:
            return []

        return self._boundary_loop(fan[0])

    def boundary_vertices_from_vertex(self, vertex):
        """ Boundary loop through a vertex.

        Parameters
        ----------
        vertex : int
            Vertex index.

        Raises
        ------
        RuntimeError
            If halfedges have not been computed.
        IndexError
            If `vertex` is out of range.

        Returns
        -------
        list[int]
            Vertex indices along the boundary loop starting with
            `vertex`. The loop closes implicitly, `vertex` is not
            repeated at the end. Empty if `vertex` is not a boundary
            vertex.
        """
        return [self._halfs[i].vertex_indices[0]
                for i in self.boundary_halfedges_from_vertex(vertex)]

    def get_boundaries(self):
        """ All boundary loops.

        Boundary halfedges are scanned in index order. Each halfedge not
        yet assigned to a loop starts a new one.

        Raises
        ------
        RuntimeError
            If halfedges have not been computed.

        Returns
        -------
        list[list[int]]
            One list of vertex indices per boundary loop. Empty for a
            closed mesh.
        """
        self._check_halfedges()

        visited = set()
        boundaries = []

        for i, h in enumerate(self._halfs):
            if not h.boundary or i in visited:
                continue

            loop = self._boundary_loop(i)
            visited.update(loop)

            boundaries.append([self._halfs[j].vertex_indices[0]
                               for j in loop])

        return boundaries

    def _boundary_loop(self, halfedge):
        """ Follow boundary halfedges until the loop closes.
        """
        loop = [halfedge]
        i = self.next_halfedge_on_boundary(halfedge)

        while i != halfedge:
            # Every boundary vertex has a single outgoing boundary
            # halfedge, hence a loop cannot be longer than this.
            if len(loop) >= len(self._halfs):
                raise RuntimeError('halfedge structure seems corrupt')

            loop.append(i)
            i = self.next_halfedge_on_boundary(i)

        return loop

    def _check_halfedges(self):
        if not self.has_halfedges():
            raise RuntimeError('halfedges have not been computed')

    def _check_halfedge_index(self, halfedge):
        self._check_halfedges()

        if not 0 <= halfedge < len(self._halfs):
            raise IndexError(f'halfedge index {halfedge} out of ' +
                             f'range(0, {len(self._halfs)})')

    def _check_vertex_index(self, vertex):
        self._check_halfedges()

        if not 0 <= vertex < len(self._vertices):
            raise IndexError(f'vertex index {vertex} out of ' +
                             f'range(0, {len(self._vertices)})')

    def _check(self):
        """ Perform sanity checks.
        """
        halfs = self._halfs

        assert len(halfs) == 3 * len(self._triangles)
        assert len(self._vhout) == len(self._vertices)

        for i, h in enumerate(halfs):
            t, k = divmod(i, 3)
            v, w = h.vertex_indices

            assert h.triangle_index == t
            assert v == self._triangles[t][k]
            assert w == self._triangles[t][(k + 1) % 3]
            assert halfs[halfs[h.next].next].next == i
            assert halfs[h.next].triangle_index == t

            if h.twin != -1:
                assert halfs[h.twin].twin == i
                assert halfs[h.twin].vertex_indices == (w, v)

        for v, fan in enumerate(self._vhout):
            assert all(halfs[i].vertex_indices[0] == v for i in fan)
            assert all(not halfs[i].boundary for i in fan[1:])


class Halfedge:
    """ Halfedge record.

    A directed edge of a triangle. Links to other halfedges are stored as
    indices into :attr:`HalfedgeTriangleMesh.halfedges`, -1 marks an
    absent link.

    Parameters
    ----------
    vertex_indices : tuple(int, int), optional
        Origin and target vertex index.
    triangle_index : int, optional
        Index of the triangle to the left of the halfedge.
    next : int, optional
        Index of the successor in counter-clockwise order around the
        triangle.
    twin : int, optional
        Index of the oppositely oriented halfedge of the adjacent
        triangle.
    """

    def __init__(self, vertex_indices=(-1, -1), triangle_index=-1, next=-1,
                 twin=-1):
        self.vertex_indices = tuple(vertex_indices)
        self.triangle_index = triangle_index
        self.next = next
        self.twin = twin

    def __repr__(self):
        return (f'Halfedge({self.vertex_indices}, {self.triangle_index}, ' +
                f'{self.next}, {self.twin})')

    def __str__(self):
        return f'h {self.vertex_indices}'

    @property
    def origin(self):
        """ Origin vertex index.

        :type: int
        """
        return self.vertex_indices[0]

    @property
    def target(self):
        """ Target vertex index.

        :type: int
        """
        return self.vertex_indices[1]

    @property
    def boundary(self):
        """ Topological state.

        A halfedge is a boundary halfedge if there is no adjacent triangle
        on the other side of its edge.

        :type: bool
        """
        return self.twin == -1


def _next_halfedge_from_vertex(halfs, i):
    """ Counter-clockwise rotation about the origin of halfedge `i`.
    """
    return halfs[halfs[halfs[i].next].next].twin


class NonManifoldError(Exception):
    """ Manifold exception base class.

    Raised if triangle data violates the manifold condition or is
    topologically degenerate.
    """

    pass


class NonManifoldEdgeError(NonManifoldError):
    """ Raised for edges with more than two incident triangles.
    """

    pass


class NonManifoldVertexError(NonManifoldError):
    """ Raised for vertices whose incident triangles form several fans.
    """

    pass
