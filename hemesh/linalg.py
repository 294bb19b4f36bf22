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

""" Rotations and small vector helpers.

Functions in this module act on single vectors of length three and on
:math:`3 \\times 3` matrices. They are used to set up the matrices passed to
:meth:`~hemesh.base.MeshBase.rotate` and
:meth:`~hemesh.base.MeshBase.transform`.
"""

import math

import numpy as np


def norm(u):
    """ Euclidean length of a 3-vector.
    """
    return math.sqrt(u[0]*u[0] + u[1]*u[1] + u[2]*u[2])


def unit(u):
    """ Normalized copy of a 3-vector.

    Parameters
    ----------
    u : array_like, shape (3, )
        Vector, must not be the zero vector.

    Raises
    ------
    ValueError
        For the zero vector.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Vector of length one parallel to `u`.
    """
    u = np.array(u, dtype=float)
    length = norm(u)

    if length == 0.0:
        raise ValueError('cannot normalize zero vector')

    return u / length


def cross_mat(u):
    r""" Skew-symmetric cross product matrix.

    Returns :math:`[\mathbf{u}]_\times` such that
    ``cross_mat(u) @ x == numpy.cross(u, x)``.

    Parameters
    ----------
    u : array_like, shape (3, )
        Vector in 3-space.

    Returns
    -------
    ~numpy.ndarray, shape (3, 3)
    """
    x, y, z = u

    return np.array([[0.0, -z, y],
                     [z, 0.0, -x],
                     [-y, x, 0.0]])


def angle(v, w, a=None, deg=False):
    """ Angle between two vectors.

    Evaluated as ``atan2(|v x w|, v . w)``, which stays accurate for
    nearly parallel vectors.

    Parameters
    ----------
    v, w : array_like, shape (3, )
        Non-zero vectors.
    a : array_like, shape (3, ), optional
        Reference axis. If given, the angle is negative when
        :math:`\\mathbf{v} \\times \\mathbf{w}` points away from `a`.
    deg : bool, optional
        Return degrees instead of radians.

    Returns
    -------
    float
        Angle in [0, pi], or in [-pi, pi] if an axis is given.
    """
    c = np.cross(v, w)
    phi = math.atan2(norm(c), float(np.dot(v, w)))

    if a is not None and np.dot(a, c) < 0.0:
        phi = -phi

    return math.degrees(phi) if deg else phi


def rotation_matrix(a, phi):
    r""" Rotation about an axis through the origin.

    Rodrigues' formula in matrix form,

    .. math::

       R = I + \sin(\varphi) [\mathbf{a}]_\times
             + (1 - \cos(\varphi)) [\mathbf{a}]_\times^2,

    a positive angle rotates counter-clockwise when looking down the
    axis towards the origin.

    Parameters
    ----------
    a : array_like, shape (3, )
        Rotation axis, normalized internally.
    phi : float
        Rotation angle in radians.

    Returns
    -------
    ~numpy.ndarray, shape (3, 3)
        Orthogonal matrix with determinant one.
    """
    K = cross_mat(unit(a))

    return np.eye(3) + math.sin(phi) * K + (1.0 - math.cos(phi)) * (K @ K)


def rotation_axis_angle(R):
    """ Axis and angle of a rotation matrix.

    Inverse of :func:`rotation_matrix` for angles in (0, pi).

    Parameters
    ----------
    R : array_like, shape (3, 3)
        Rotation matrix.

    Returns
    -------
    a : ~numpy.ndarray, shape (3, )
        Unit axis, ``(0, 0, 1)`` for the identity.
    phi : float
        Rotation angle in [0, pi].
    """
    R = np.asarray(R, dtype=float)

    c = 0.5 * (np.trace(R) - 1.0)
    phi = math.acos(max(min(c, 1.0), -1.0))

    # Axial vector of the skew-symmetric part.
    s = np.array([R[2, 1] - R[1, 2], R[0, 2] - R[2, 0], R[1, 0] - R[0, 1]])

    if norm(s) > 1e-12:
        return s / norm(s), phi

    if phi < 0.5 * math.pi:
        return np.array([0.0, 0.0, 1.0]), 0.0

    # Half-turn, R = 2 a a^T - I.
    B = 0.5 * (R + np.eye(3))
    k = int(np.argmax(np.diag(B)))

    return unit(B[:, k]), phi


def homogeneous(R=None, t=None):
    """ Homogeneous 4x4 transformation matrix.

    Parameters
    ----------
    R : array_like, shape (3, 3), optional
        Linear part, identity if omitted.
    t : array_like, shape (3, ), optional
        Translation, zero if omitted.

    Returns
    -------
    ~numpy.ndarray, shape (4, 4)
        Matrix that maps :math:`\\mathbf{x}` to
        :math:`R \\mathbf{x} + \\mathbf{t}`.
    """
    T = np.eye(4)

    if R is not None:
        T[:3, :3] = R

    if t is not None:
        T[:3, 3] = t

    return T
