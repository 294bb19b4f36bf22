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

""" Mesh base class.

Vertex storage shared by all mesh types. Vertices are identified by their
index into the parallel arrays :attr:`~MeshBase.vertices`,
:attr:`~MeshBase.vertex_normals`, and :attr:`~MeshBase.vertex_colors`.
There is no separate vertex object.
"""

import numpy as np

import hemesh.traits as traits


def _as_array(value, width, dtype=float):
    """ Convert to a two-dimensional array of given width.

    Parameters
    ----------
    value : array_like or None
        Input data. :obj:`None` and empty sequences result in an empty
        array of shape ``(0, width)``.
    width : int
        Required length of the second axis.
    dtype : data-type, optional
        Data type of the result.

    Raises
    ------
    ValueError
        If `value` cannot be interpreted as an array of shape
        ``(n, width)``.

    Returns
    -------
    ~numpy.ndarray
        Array of shape ``(n, width)``.
    """
    if value is None:
        return np.empty((0, width), dtype=dtype)

    array = np.array(value, dtype=dtype)

    if array.size == 0:
        return np.empty((0, width), dtype=dtype)

    if array.ndim != 2 or array.shape[1] != width:
        raise ValueError(f'expected array of shape (n, {width}), ' +
                         f'got {array.shape}')

    return array


class MeshBase:
    """ Mesh base class.

    Stores vertex coordinates and optional per-vertex normals and colors.
    Provides bounding box queries and geometric transformations.

    Parameters
    ----------
    vertices : array_like, shape (n, 3), optional
        Vertex coordinates.

    Note
    ----
    Vertex normals and colors are considered present only if there are
    as many of them as there are vertices.
    """

    def __init__(self, vertices=None):
        self.vertices = vertices
        self.vertex_normals = None
        self.vertex_colors = None

    def __repr__(self):
        return f'{self.__class__.__name__}({len(self._vertices)} vertices)'

    def __copy__(self):
        """ Mesh copy.

        Equivalent to :meth:`copy`.
        """
        return self.copy()

    def __iadd__(self, mesh):
        """ Concatenate vertex data.

        Vertex normals and colors survive only if both meshes have them
        (or if `self` has no vertices yet).

        Parameters
        ----------
        mesh : MeshBase
            Mesh to be appended.

        Returns
        -------
        MeshBase
            The augmented mesh `self`.
        """
        if mesh.is_empty():
            return self

        for name in ('_vertex_normals', '_vertex_colors'):
            mine = getattr(self, name)
            other = getattr(mesh, name)

            ours = len(mine) == len(self._vertices)
            theirs = len(other) == len(mesh._vertices)

            if (not self.has_vertices() or ours) and theirs:
                setattr(self, name, np.concatenate((mine, other)))
            else:
                setattr(self, name, np.empty((0, 3)))

        self._vertices = np.concatenate((self._vertices, mesh._vertices))

        return self

    def __add__(self, mesh):
        """ Concatenated copy.

        Parameters
        ----------
        mesh : MeshBase
            Mesh to be appended.

        Returns
        -------
        MeshBase
            New mesh, both operands remain unchanged.
        """
        result = self.copy()
        result += mesh

        return result

    @property
    def vertices(self):
        """ Vertex coordinate array.

        Direct read and write access to vertex coordinates. Changing the
        number of vertices is likely to break index based mesh items.

        :type: ~numpy.ndarray, shape (n, 3)
        """
        return self._vertices

    @vertices.setter
    def vertices(self, value):
        self._vertices = _as_array(value, 3)

    @property
    def vertex_normals(self):
        """ Vertex normal array.

        :type: ~numpy.ndarray, shape (n, 3)
        """
        return self._vertex_normals

    @vertex_normals.setter
    def vertex_normals(self, value):
        self._vertex_normals = _as_array(value, 3)

    @property
    def vertex_colors(self):
        """ Vertex color array.

        RGB values in the range [0, 1].

        :type: ~numpy.ndarray, shape (n, 3)
        """
        return self._vertex_colors

    @vertex_colors.setter
    def vertex_colors(self, value):
        self._vertex_colors = _as_array(value, 3)

    def clone(self, mesh):
        """ In-place mesh copy.

        Implements assignment operator like behavior. Performs the same
        operation as :meth:`copy` but assigns the result to `self`.

        Parameters
        ----------
        mesh : MeshBase
            Source mesh.

        Returns
        -------
        MeshBase
            The mesh `self`.
        """
        # ndarray copies do not share data buffers with the source.
        self._vertices = mesh._vertices.copy()
        self._vertex_normals = mesh._vertex_normals.copy()
        self._vertex_colors = mesh._vertex_colors.copy()

        return self

    def copy(self):
        """ Return mesh copy.

        Returns
        -------
        MeshBase
            Copy of the mesh that shares no data buffers with `self`.
        """
        return self.__class__().clone(self)

    def clear(self):
        """ Remove all vertex data.

        Returns
        -------
        MeshBase
            The empty mesh `self`.
        """
        self._vertices = np.empty((0, 3))
        self._vertex_normals = np.empty((0, 3))
        self._vertex_colors = np.empty((0, 3))

        return self

    def is_empty(self):
        return not self.has_vertices()

    def has_vertices(self):
        return len(self._vertices) > 0

    def has_vertex_normals(self):
        return (len(self._vertices) > 0 and
                len(self._vertex_normals) == len(self._vertices))

    def has_vertex_colors(self):
        return (len(self._vertices) > 0 and
                len(self._vertex_colors) == len(self._vertices))

    def get_min_bound(self):
        """ Minimum corner of the axis-aligned bounding box.

        :obj:`~numpy.zeros` for an empty mesh.
        """
        if not self.has_vertices():
            return np.zeros(3)

        return traits.bounds(self._vertices)[0]

    def get_max_bound(self):
        """ Maximum corner of the axis-aligned bounding box.

        :obj:`~numpy.zeros` for an empty mesh.
        """
        if not self.has_vertices():
            return np.zeros(3)

        return traits.bounds(self._vertices)[1]

    def get_center(self):
        """ Vertex centroid.

        Arithmetic mean of vertex coordinates, :obj:`~numpy.zeros` for
        an empty mesh.
        """
        if not self.has_vertices():
            return np.zeros(3)

        return np.mean(self._vertices, axis=0)

    def get_axis_aligned_bounding_box(self):
        """ Axis-aligned bounding box.

        Returns
        -------
        a : ~numpy.ndarray
            Minimum corner.
        b : ~numpy.ndarray
            Maximum corner.
        """
        return self.get_min_bound(), self.get_max_bound()

    def get_oriented_bounding_box(self):
        """ Oriented bounding box.

        The box axes are the principal axes of the vertex set.

        Raises
        ------
        ValueError
            If the mesh has no vertices.

        Returns
        -------
        center : ~numpy.ndarray, shape (3, )
            Box center.
        R : ~numpy.ndarray, shape (3, 3)
            Rotation matrix, columns are box axes.
        extent : ~numpy.ndarray, shape (3, )
            Box side lengths along the columns of `R`.
        """
        if not self.has_vertices():
            raise ValueError('bounding box of empty mesh is undefined')

        mean = np.mean(self._vertices, axis=0)
        d = self._vertices - mean

        # Eigenvectors of the covariance matrix. Flip one axis if
        # necessary to obtain a proper rotation.
        _, R = np.linalg.eigh(d.T @ d / len(d))

        if np.linalg.det(R) < 0.0:
            R[:, 2] *= -1.0

        local = d @ R
        lo, hi = traits.bounds(local)

        return mean + R @ (0.5 * (lo + hi)), R, hi - lo

    def transform(self, transformation):
        """ Apply homogeneous transformation.

        Parameters
        ----------
        transformation : array_like, shape (4, 4)
            Transformation matrix acting on homogeneous column vectors.

        Raises
        ------
        ValueError
            If `transformation` has the wrong shape.

        Returns
        -------
        MeshBase
            The transformed mesh `self`.

        Note
        ----
        Normals are transformed by the upper left 3x3 block only.
        """
        T = np.asarray(transformation, dtype=float)

        if T.shape != (4, 4):
            raise ValueError(f'expected (4, 4) matrix, got {T.shape}')

        if self.has_vertices():
            p = self._vertices @ T[:3, :3].T + T[:3, 3]
            w = self._vertices @ T[3, :3] + T[3, 3]

            self._vertices = p / w[:, None]

        self._transform_normals(T[:3, :3])

        return self

    def translate(self, translation, relative=True):
        """ Translate the mesh.

        Parameters
        ----------
        translation : array_like, shape (3, )
            Translation vector.
        relative : bool, optional
            If :obj:`False`, the mesh is moved such that its center
            coincides with `translation`.

        Returns
        -------
        MeshBase
            The translated mesh `self`.
        """
        t = np.asarray(translation, dtype=float)

        if not relative:
            t = t - self.get_center()

        self._vertices = self._vertices + t

        return self

    def scale(self, scale, center=True):
        """ Uniform scaling.

        Parameters
        ----------
        scale : float
            Scale factor.
        center : bool, optional
            Scale about the mesh center instead of the origin.

        Returns
        -------
        MeshBase
            The scaled mesh `self`.
        """
        c = self.get_center() if center else np.zeros(3)
        self._vertices = (self._vertices - c) * scale + c

        return self

    def rotate(self, R, center=True):
        """ Rotate the mesh.

        Parameters
        ----------
        R : array_like, shape (3, 3)
            Rotation matrix.
        center : bool, optional
            Rotate about the mesh center instead of the origin.

        Raises
        ------
        ValueError
            If `R` has the wrong shape.

        Returns
        -------
        MeshBase
            The rotated mesh `self`.
        """
        R = np.asarray(R, dtype=float)

        if R.shape != (3, 3):
            raise ValueError(f'expected (3, 3) matrix, got {R.shape}')

        c = self.get_center() if center else np.zeros(3)

        self._vertices = (self._vertices - c) @ R.T + c
        self._transform_normals(R)

        return self

    def normalize_normals(self):
        """ Scale vertex normals to unit length.

        Zero length normals are replaced by :math:`(0, 0, 1)`.

        Returns
        -------
        MeshBase
            The mesh `self`.
        """
        self._vertex_normals = _normalize(self._vertex_normals)
        return self

    def paint_uniform_color(self, color):
        """ Assign the same color to every vertex.

        Parameters
        ----------
        color : array_like, shape (3, )
            RGB values, clipped to [0, 1].

        Returns
        -------
        MeshBase
            The mesh `self`.
        """
        color = np.clip(np.asarray(color, dtype=float), 0.0, 1.0)
        self._vertex_colors = np.tile(color, (len(self._vertices), 1))

        return self

    def compute_convex_hull(self):
        """ Convex hull of the vertex set.

        Raises
        ------
        scipy.spatial.QhullError
            If the hull cannot be computed, e.g., for less than four
            vertices or coplanar input.

        Returns
        -------
        hull : TriangleMesh
            Triangle mesh of the hull, triangles oriented outwards.
        indices : ~numpy.ndarray
            For each hull vertex the index of the corresponding vertex
            of `self`.
        """
        from scipy.spatial import ConvexHull
        from hemesh.triangle import TriangleMesh

        qhull = ConvexHull(self._vertices)
        simplices = qhull.simplices.copy()

        # Qhull does not orient simplices consistently. Compare with the
        # outward facet normals stored in the hyperplane equations.
        normals = traits.triangle_normals(self._vertices, simplices,
                                          normalized=False)
        flip = np.einsum('ij,ij->i', normals, qhull.equations[:, :3]) < 0.0
        simplices[flip] = simplices[flip][:, ::-1]

        indices = np.unique(simplices)

        imap = np.full(len(self._vertices), -1, dtype=int)
        imap[indices] = np.arange(len(indices))

        return TriangleMesh(self._vertices[indices], imap[simplices]), indices

    def _select_vertices(self, index):
        """ Keep vertices by index.

        Vertex data arrays are compressed. Normals and colors are only
        compressed if present.

        Parameters
        ----------
        index : ~numpy.ndarray
            Indices of the vertices to keep.
        """
        if self.has_vertex_normals():
            self._vertex_normals = self._vertex_normals[index]

        if self.has_vertex_colors():
            self._vertex_colors = self._vertex_colors[index]

        self._vertices = self._vertices[index]

    def _transform_normals(self, R):
        """ Apply linear map to normal vectors.

        Subclasses extend this to cover their own normal arrays.
        """
        if len(self._vertex_normals):
            self._vertex_normals = self._vertex_normals @ R.T


def _normalize(normals):
    """ Normalize rows, zero rows become (0, 0, 1).
    """
    normals = np.array(normals, dtype=float)
    length = np.linalg.norm(normals, axis=1)

    mask = length > 0.0
    normals[mask] /= length[mask, None]
    normals[~mask] = (0.0, 0.0, 1.0)

    return normals
