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

""" Mesh clean-up helpers.

Low-level functions that find duplicated, degenerate, or unreferenced mesh
items. They operate on coordinate arrays and on cell arrays, i.e., integer
arrays with one row of vertex indices per triangle or tetrahedron, and
return index arrays that the mesh classes use to compress their data.

Note
----
Compressing a mesh invalidates previously obtained vertex and cell
indices.
"""

import numpy as np


def _first_occurrence(rows):
    """ Unique rows in order of first occurrence.

    Parameters
    ----------
    rows : ~numpy.ndarray, shape (n, k)
        Array to be scanned for duplicate rows.

    Returns
    -------
    index : ~numpy.ndarray
        Ascending indices of the first occurrence of each unique row.
    inverse : ~numpy.ndarray
        For each row, the position of its representative in `index`.
    """
    if len(rows) == 0:
        return np.zeros(0, dtype=int), np.zeros(0, dtype=int)

    _, index, inverse = np.unique(rows, axis=0, return_index=True,
                                  return_inverse=True)

    # np.unique sorts lexicographically. Re-rank the unique rows by the
    # position of their first occurrence to preserve relative order.
    order = np.argsort(index)
    rank = np.empty_like(order)
    rank[order] = np.arange(len(order))

    return index[order], rank[np.reshape(inverse, -1)]


def duplicated_vertices(points):
    """ Find vertices with identical coordinates.

    Parameters
    ----------
    points : ~numpy.ndarray, shape (n, 3)
        Vertex coordinates.

    Returns
    -------
    index : ~numpy.ndarray
        Indices of the vertices to keep, the first vertex of each group
        of coincident vertices.
    inverse : ~numpy.ndarray, shape (n, )
        Maps old vertex indices to new vertex indices.
    """
    return _first_occurrence(np.asarray(points))


def duplicated_cells(cells):
    """ Find cells that reference the same vertices.

    Two cells are duplicates if they reference the same set of vertices,
    independent of their order (and hence orientation).

    Parameters
    ----------
    cells : ~numpy.ndarray, shape (m, k)
        Cell definitions.

    Returns
    -------
    ~numpy.ndarray
        Ascending indices of the cells to keep.
    """
    index, _ = _first_occurrence(np.sort(cells, axis=1))
    return index


def degenerate_cells(cells):
    """ Find cells that reference a vertex more than once.

    Parameters
    ----------
    cells : ~numpy.ndarray, shape (m, k)
        Cell definitions.

    Returns
    -------
    ~numpy.ndarray, shape (m, )
        Boolean mask, :obj:`True` for degenerate cells.
    """
    s = np.sort(cells, axis=1)
    return np.any(s[:, 1:] == s[:, :-1], axis=1)


def unreferenced_vertices(n, cells):
    """ Find vertices not referenced by any cell.

    Parameters
    ----------
    n : int
        Number of vertices.
    cells : ~numpy.ndarray, shape (m, k)
        Cell definitions.

    Returns
    -------
    ~numpy.ndarray, shape (n, )
        Boolean mask, :obj:`True` for unreferenced vertices.
    """
    referenced = np.zeros(n, dtype=bool)
    referenced[np.reshape(cells, -1)] = True

    return ~referenced


def index_map(n, index):
    """ Old to new index mapping.

    Parameters
    ----------
    n : int
        Number of items before compression.
    index : ~numpy.ndarray
        Ascending indices of the items that are kept.

    Returns
    -------
    ~numpy.ndarray, shape (n, )
        New index of each kept item, -1 for removed items.
    """
    imap = np.full(n, -1, dtype=int)
    imap[index] = np.arange(len(index))

    return imap
