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

""" Triangle soup.

A :class:`TriangleMesh` holds vertex coordinates and a list of vertex index
triples without any adjacency information. It is the input for halfedge
mesh construction, see
:meth:`HalfedgeTriangleMesh.from_triangle_mesh
<hemesh.hds.HalfedgeTriangleMesh.from_triangle_mesh>`.

Halfedge construction requires unique, non-degenerate, manifold triangles.
Raw data should be cleaned first, for example:

.. code-block:: python
   :linenos:

   mesh = TriangleMesh(points, triangles)
   mesh.remove_duplicated_vertices()
   mesh.remove_duplicated_triangles()
   mesh.remove_degenerate_triangles()
   mesh.remove_unreferenced_vertices()
"""

import numpy as np

import hemesh.clean as clean
import hemesh.traits as traits

from hemesh.base import MeshBase, _as_array, _normalize


class TriangleMesh(MeshBase):
    """ Triangle mesh.

    Parameters
    ----------
    vertices : array_like, shape (n, 3), optional
        Vertex coordinates.
    triangles : array_like, shape (m, 3), optional
        Triangle definitions, 0-based vertex indexing.
    """

    def __init__(self, vertices=None, triangles=None):
        super().__init__(vertices)

        self.triangles = triangles
        self.triangle_normals = None

    def __repr__(self):
        return (f'TriangleMesh({len(self._vertices)} vertices, ' +
                f'{len(self._triangles)} triangles)')

    def __iadd__(self, mesh):
        """ Concatenate meshes.

        Triangle indices of `mesh` are shifted by the number of vertices
        of `self`. Triangle normals survive only if both meshes have them.

        Raises
        ------
        TypeError
            If `mesh` is not a triangle mesh.
        """
        if not isinstance(mesh, TriangleMesh):
            raise TypeError(f'cannot append {type(mesh).__name__} to ' +
                            f'{type(self).__name__}')

        if mesh.is_empty():
            return self

        offset = len(self._vertices)
        keep_normals = ((not self.has_triangles() or
                         self.has_triangle_normals()) and
                        mesh.has_triangle_normals())

        super().__iadd__(mesh)

        if keep_normals:
            self._triangle_normals = np.concatenate(
                (self._triangle_normals, mesh._triangle_normals))
        else:
            self._triangle_normals = np.empty((0, 3))

        # Bypasses the setter, subclasses keep their topology up to date.
        self._triangles = np.concatenate((self._triangles,
                                          mesh._triangles + offset))

        return self

    @property
    def triangles(self):
        """ Triangle definitions.

        One row of vertex indices per triangle. The vertex order defines
        the triangle orientation.

        :type: ~numpy.ndarray, shape (m, 3)
        """
        return self._triangles

    @triangles.setter
    def triangles(self, value):
        self._triangles = _as_array(value, 3, dtype=int)

    @property
    def triangle_normals(self):
        """ Triangle normal array.

        :type: ~numpy.ndarray, shape (m, 3)
        """
        return self._triangle_normals

    @triangle_normals.setter
    def triangle_normals(self, value):
        self._triangle_normals = _as_array(value, 3)

    def clone(self, mesh):
        super().clone(mesh)

        self._triangles = mesh._triangles.copy()
        self._triangle_normals = mesh._triangle_normals.copy()

        return self

    def clear(self):
        super().clear()

        self._triangles = np.empty((0, 3), dtype=int)
        self._triangle_normals = np.empty((0, 3))

        return self

    def has_triangles(self):
        return len(self._vertices) > 0 and len(self._triangles) > 0

    def has_triangle_normals(self):
        return (self.has_triangles() and
                len(self._triangle_normals) == len(self._triangles))

    def compute_triangle_normals(self, normalized=True):
        """ Compute triangle normals.

        Parameters
        ----------
        normalized : bool, optional
            Scale normals to unit length.

        Returns
        -------
        TriangleMesh
            The mesh `self`.
        """
        self._triangle_normals = traits.triangle_normals(
            self._vertices, self._triangles, normalized)

        if normalized:
            self._triangle_normals = _normalize(self._triangle_normals)

        return self

    def compute_vertex_normals(self, normalized=True):
        """ Compute vertex normals.

        Area weighted average of incident triangle normals.

        Parameters
        ----------
        normalized : bool, optional
            Scale normals to unit length.

        Returns
        -------
        TriangleMesh
            The mesh `self`.
        """
        self._vertex_normals = traits.vertex_normals(
            self._vertices, self._triangles, normalized)

        if normalized:
            self.normalize_normals()

        return self

    def remove_duplicated_vertices(self):
        """ Merge vertices with identical coordinates.

        Triangles are updated to reference the first vertex of each
        group of coincident vertices.

        Returns
        -------
        TriangleMesh
            The mesh `self`.
        """
        index, inverse = clean.duplicated_vertices(self._vertices)

        self._select_vertices(index)

        if len(self._triangles):
            self.triangles = inverse[self._triangles]

        return self

    def remove_duplicated_triangles(self):
        """ Remove triangles that reference the same three vertices.

        Vertex order is ignored, i.e., two triangles of opposite
        orientation are considered duplicates. The first one is kept.

        Returns
        -------
        TriangleMesh
            The mesh `self`.
        """
        self._select_triangles(clean.duplicated_cells(self._triangles))
        return self

    def remove_unreferenced_vertices(self):
        """ Remove vertices not referenced by any triangle.

        Returns
        -------
        TriangleMesh
            The mesh `self`.
        """
        mask = clean.unreferenced_vertices(len(self._vertices),
                                           self._triangles)
        index = np.flatnonzero(~mask)
        imap = clean.index_map(len(self._vertices), index)

        self._select_vertices(index)
        self.triangles = imap[self._triangles]

        return self

    def remove_degenerate_triangles(self):
        """ Remove triangles that reference a vertex more than once.

        Such triangles typically result from merging duplicated vertices.

        Returns
        -------
        TriangleMesh
            The mesh `self`.
        """
        mask = clean.degenerate_cells(self._triangles)
        self._select_triangles(np.flatnonzero(~mask))

        return self

    def _select_triangles(self, index):
        if self.has_triangle_normals():
            self._triangle_normals = self._triangle_normals[index]

        self.triangles = self._triangles[index]

    def _transform_normals(self, R):
        super()._transform_normals(R)

        if len(self._triangle_normals):
            self._triangle_normals = self._triangle_normals @ R.T
