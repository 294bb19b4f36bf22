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

""" Tetrahedral meshes.

A :class:`TetraMesh` stores vertex coordinates and one row of four vertex
indices per tetrahedron. Tetrahedral meshes are created from point sets
by Delaunay tetrahedralization and can be contoured to obtain triangle
meshes of iso-surfaces of piecewise linear scalar fields.
"""

from time import perf_counter

import numpy as np

import hemesh.clean as clean
import hemesh.traits as traits

from hemesh.base import MeshBase, _as_array
from hemesh.triangle import TriangleMesh


class TetraMesh(MeshBase):
    """ Tetrahedral mesh.

    Parameters
    ----------
    vertices : array_like, shape (n, 3), optional
        Vertex coordinates.
    tetras : array_like, shape (k, 4), optional
        Tetrahedron definitions, 0-based vertex indexing.
    """

    def __init__(self, vertices=None, tetras=None):
        super().__init__(vertices)
        self.tetras = tetras

    def __repr__(self):
        return (f'TetraMesh({len(self._vertices)} vertices, ' +
                f'{len(self._tetras)} tetras)')

    def __iadd__(self, mesh):
        """ Concatenate meshes.

        Vertex indices of the tetrahedra of `mesh` are shifted by the
        number of vertices of `self`.

        Raises
        ------
        TypeError
            If `mesh` is not a tetrahedral mesh.
        """
        if not isinstance(mesh, TetraMesh):
            raise TypeError(f'cannot append {type(mesh).__name__} to ' +
                            f'{type(self).__name__}')

        if mesh.is_empty():
            return self

        offset = len(self._vertices)
        super().__iadd__(mesh)

        self._tetras = np.concatenate((self._tetras, mesh._tetras + offset))

        return self

    @property
    def tetras(self):
        """ Tetrahedron definitions.

        :type: ~numpy.ndarray, shape (k, 4)
        """
        return self._tetras

    @tetras.setter
    def tetras(self, value):
        self._tetras = _as_array(value, 4, dtype=int)

    @classmethod
    def from_point_cloud(cls, points, *, quiet=True):
        """ Delaunay tetrahedralization.

        Parameters
        ----------
        points : array_like, shape (n, 3)
            Point coordinates.
        quiet : bool, optional
            Suppress console output.

        Raises
        ------
        ValueError
            If less than four points are given.
        scipy.spatial.QhullError
            If the points are coplanar or otherwise degenerate.

        Returns
        -------
        mesh : TetraMesh
            Positively oriented tetrahedra.
        indices : ~numpy.ndarray
            For each mesh vertex the index of the corresponding input
            point. Points that Qhull discards do not appear.
        """
        from scipy.spatial import Delaunay

        CBOLD = '\33[1m'                    # bold text, white on black
        CEND = '\33[0m'

        points = _as_array(points, 3)

        if len(points) < 4:
            raise ValueError('tetrahedralization requires at least ' +
                             f'four points, got {len(points)}')

        if not quiet:
            start = perf_counter()
            print(f'tetrahedralizing {CBOLD}{len(points)} points{CEND}',
                  end=' ...')

        simplices = Delaunay(points).simplices

        indices = np.unique(simplices)
        imap = clean.index_map(len(points), indices)

        vertices = points[indices]
        tetras = imap[simplices]

        # Swap two vertices of negatively oriented tetrahedra.
        flip = traits.signed_volumes(vertices, tetras) < 0.0
        tetras[flip] = tetras[flip][:, [1, 0, 2, 3]]

        if not quiet:
            print(f' done ({perf_counter()-start:.3f} sec)')
            print(f'\t\u251c\u2500 {len(vertices)} vertices')
            print(f'\t\u2514\u2500 {len(tetras)} tetras')

        return cls(vertices, tetras), indices

    def clone(self, mesh):
        super().clone(mesh)
        self._tetras = mesh._tetras.copy()

        return self

    def clear(self):
        super().clear()
        self._tetras = np.empty((0, 4), dtype=int)

        return self

    def has_tetras(self):
        return len(self._vertices) > 0 and len(self._tetras) > 0

    def remove_duplicated_vertices(self):
        """ Merge vertices with identical coordinates.

        Returns
        -------
        TetraMesh
            The mesh `self`.
        """
        index, inverse = clean.duplicated_vertices(self._vertices)

        self._select_vertices(index)

        if len(self._tetras):
            self._tetras = inverse[self._tetras]

        return self

    def remove_duplicated_tetras(self):
        """ Remove tetrahedra that reference the same four vertices.

        Vertex order is ignored. The first tetrahedron is kept.

        Returns
        -------
        TetraMesh
            The mesh `self`.
        """
        self._tetras = self._tetras[clean.duplicated_cells(self._tetras)]
        return self

    def remove_unreferenced_vertices(self):
        """ Remove vertices not referenced by any tetrahedron.

        Returns
        -------
        TetraMesh
            The mesh `self`.
        """
        mask = clean.unreferenced_vertices(len(self._vertices), self._tetras)
        index = np.flatnonzero(~mask)
        imap = clean.index_map(len(self._vertices), index)

        self._select_vertices(index)
        self._tetras = imap[self._tetras]

        return self

    def remove_degenerate_tetras(self):
        """ Remove tetrahedra that reference a vertex more than once.

        Returns
        -------
        TetraMesh
            The mesh `self`.
        """
        self._tetras = self._tetras[~clean.degenerate_cells(self._tetras)]
        return self

    def extract_triangle_mesh(self, values, level):
        """ Iso-surface extraction.

        Contours the piecewise linear scalar field given by per-vertex
        `values` at `level` (marching tetrahedra). Each tetrahedron
        contributes no triangle, one triangle, or a quadrilateral split
        into two triangles. Iso-surface vertices on edges shared by
        several tetrahedra are shared as well.

        Parameters
        ----------
        values : array_like, shape (n, )
            One scalar value per vertex.
        level : float
            Iso value.

        Raises
        ------
        ValueError
            If the number of values does not match the number of
            vertices.

        Returns
        -------
        TriangleMesh
            Triangles oriented such that their normals point towards
            values above `level`.

        Note
        ----
        A vertex with value equal to `level` counts as below the
        iso-surface. Edges ending in such a vertex share a single
        iso-surface vertex at its position, triangles that collapse as a
        result are dropped. If the level set contains a whole triangle of
        the tetrahedralization with values above `level` on both sides,
        that triangle appears twice with opposite orientation.
        """
        values = np.asarray(values, dtype=float).reshape(-1)

        if len(values) != len(self._vertices):
            raise ValueError(f'expected {len(self._vertices)} values, ' +
                             f'got {len(values)}')

        points = []
        edge_verts = dict()             # (v, w) with v < w, or v -> point

        def edge_vertex(v, w):
            key = (v, w) if v < w else (w, v)

            # Vertices on the level set are keyed by themselves.
            if values[v] == level:
                key = v
            elif values[w] == level:
                key = w

            if key in edge_verts:
                return edge_verts[key]

            if isinstance(key, tuple):
                a, b = key
                t = (level - values[a]) / (values[b] - values[a])
                p = self._vertices[a]
                q = self._vertices[b]

                points.append(p + t * (q - p))
            else:
                points.append(self._vertices[key])

            edge_verts[key] = len(points) - 1

            return edge_verts[key]

        above = values > level
        triangles = []

        for tetra in self._tetras.tolist():
            up = [v for v in tetra if above[v]]
            down = [v for v in tetra if not above[v]]

            if not up or not down:
                continue

            if len(up) == 2:
                (a, b), (c, d) = up, down

                # Edge vertices in cyclic order around the quadrilateral.
                quad = [edge_vertex(a, c), edge_vertex(a, d),
                        edge_vertex(b, d), edge_vertex(b, c)]
                polys = [quad[:3], [quad[0], quad[2], quad[3]]]
            else:
                (a,), others = (up, down) if len(up) == 1 else (down, up)
                polys = [[edge_vertex(a, b) for b in others]]

            # The field increases from the lower to the upper vertices.
            direction = (np.mean(self._vertices[up], axis=0) -
                         np.mean(self._vertices[down], axis=0))

            for tri in polys:
                if len(set(tri)) < 3:
                    continue

                p0, p1, p2 = (points[i] for i in tri)

                if np.cross(p1 - p0, p2 - p0).dot(direction) < 0.0:
                    tri = [tri[0], tri[2], tri[1]]

                triangles.append(tri)

        mesh = TriangleMesh(points, triangles)

        return mesh.remove_unreferenced_vertices()
