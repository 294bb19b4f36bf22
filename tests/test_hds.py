import numpy as np
import pytest

from hemesh.hds import HalfedgeTriangleMesh, Halfedge
from hemesh.hds import NonManifoldError
from hemesh.hds import NonManifoldEdgeError
from hemesh.hds import NonManifoldVertexError
from hemesh.triangle import TriangleMesh


def build(mesh):
    return HalfedgeTriangleMesh.from_triangle_mesh(mesh)


def records(mesh):
    return [(h.vertex_indices, h.triangle_index, h.next, h.twin)
            for h in mesh.halfedges]


@pytest.mark.parametrize('name', ['triangle', 'quad', 'tetrahedron',
                                  'grid', 'annulus', 'sphere'])
def test_structural_invariants(name, request):
    mesh = build(request.getfixturevalue(name))
    halfs = mesh.halfedges

    assert mesh.has_halfedges()
    assert len(halfs) == 3 * len(mesh.triangles)

    for i, h in enumerate(halfs):
        assert halfs[halfs[halfs[i].next].next].next == i
        assert halfs[h.next].triangle_index == h.triangle_index
        assert h.boundary == (h.twin == -1)

        if h.twin != -1:
            assert halfs[h.twin].twin == i

    mesh._check()


@pytest.mark.parametrize('name', ['grid', 'annulus', 'sphere'])
def test_interior_vertex_fans(name, request):
    mesh = build(request.getfixturevalue(name))

    for v, fan in enumerate(mesh.ordered_halfedge_from_vertex):
        if not fan or mesh.halfedges[fan[0]].boundary:
            continue

        incident = np.sum(np.any(mesh.triangles == v, axis=1))
        assert len(fan) == incident

        visited = [fan[0]]
        i = mesh.next_halfedge_from_vertex(fan[0])

        while i != fan[0]:
            visited.append(i)
            i = mesh.next_halfedge_from_vertex(i)

        assert visited == fan


def test_boundary_vertex_fans_start_on_boundary(annulus):
    mesh = build(annulus)

    for v, fan in enumerate(mesh.ordered_halfedge_from_vertex):
        assert mesh.halfedges[fan[0]].boundary
        assert not any(mesh.halfedges[i].boundary for i in fan[1:])

        # Rotation ends at the last entry of an open fan.
        assert mesh.next_halfedge_from_vertex(fan[-1]) == -1


def test_single_triangle(triangle):
    mesh = build(triangle)

    assert len(mesh.halfedges) == 3
    assert all(h.boundary for h in mesh.halfedges)
    assert [h.vertex_indices for h in mesh.halfedges] == [(0, 1), (1, 2),
                                                          (2, 0)]
    assert mesh.get_boundaries() == [[0, 1, 2]]


def test_quad(quad):
    mesh = build(quad)

    # Halfedge 1 runs from 1 to 2, halfedge 5 from 2 to 1.
    assert mesh.halfedges[1].twin == 5
    assert mesh.halfedges[5].twin == 1
    assert sum(1 for h in mesh.halfedges if h.boundary) == 4

    assert mesh.get_boundaries() == [[0, 1, 3, 2]]
    assert mesh.ordered_halfedge_from_vertex[1] == [3, 1]


def test_closed_tetrahedron(tetrahedron):
    mesh = build(tetrahedron)

    assert mesh.get_boundaries() == []
    assert all(h.twin != -1 for h in mesh.halfedges)
    assert all(len(fan) == 3 for fan in mesh.ordered_halfedge_from_vertex)

    for v in range(4):
        assert mesh.boundary_halfedges_from_vertex(v) == []
        assert mesh.boundary_vertices_from_vertex(v) == []


def test_closed_sphere(sphere):
    assert build(sphere).get_boundaries() == []


def test_grid_boundary(grid):
    mesh = build(grid)

    assert mesh.get_boundaries() == [[0, 1, 2, 5, 8, 7, 6, 3]]
    assert mesh.boundary_vertices_from_vertex(4) == []
    assert mesh.boundary_vertices_from_vertex(5) == [5, 8, 7, 6, 3, 0, 1, 2]


def test_annulus_boundaries(annulus):
    mesh = build(annulus)
    boundaries = mesh.get_boundaries()

    assert boundaries == [[0, 1, 2, 3], [5, 4, 7, 6]]

    boundary = [i for i, h in enumerate(mesh.halfedges) if h.boundary]
    loops = [mesh.boundary_halfedges_from_vertex(loop[0])
             for loop in boundaries]

    assert sorted(i for loop in loops for i in loop) == boundary


def test_boundary_halfedges_form_closed_polygon(annulus):
    mesh = build(annulus)
    loop = mesh.boundary_halfedges_from_vertex(4)

    assert len(set(loop)) == len(loop) == 4
    assert mesh.halfedges[loop[0]].origin == 4

    for i, j in zip(loop, loop[1:] + loop[:1]):
        assert mesh.halfedges[i].target == mesh.halfedges[j].origin
        assert mesh.next_halfedge_on_boundary(i) == j


def test_next_halfedge_on_boundary_requires_boundary(quad):
    mesh = build(quad)

    with pytest.raises(ValueError):
        mesh.next_halfedge_on_boundary(1)


def test_non_manifold_edge():
    points = np.zeros((5, 3))
    soup = TriangleMesh(points, [[0, 1, 2], [1, 0, 3], [0, 1, 4]])

    with pytest.raises(NonManifoldEdgeError):
        build(soup)


def test_inconsistent_orientation():
    points = np.zeros((4, 3))

    with pytest.raises(NonManifoldEdgeError):
        build(TriangleMesh(points, [[0, 1, 2], [0, 1, 3]]))


def test_bowtie_vertex():
    points = np.zeros((5, 3))

    with pytest.raises(NonManifoldVertexError):
        build(TriangleMesh(points, [[0, 1, 2], [0, 3, 4]]))


def test_closed_surfaces_sharing_a_vertex(tetrahedron):
    a = tetrahedron.triangles
    b = np.where(a == 0, 0, a + 3)

    soup = TriangleMesh(np.zeros((7, 3)), np.concatenate((a, b)))

    with pytest.raises(NonManifoldVertexError):
        build(soup)


def test_degenerate_triangle():
    with pytest.raises(NonManifoldError):
        build(TriangleMesh(np.zeros((3, 3)), [[0, 0, 1]]))


def test_vertex_index_out_of_range():
    with pytest.raises(IndexError):
        build(TriangleMesh(np.zeros((3, 3)), [[0, 1, 3]]))


def test_failed_construction_leaves_no_halfedges(quad):
    mesh = build(quad)

    mesh.triangles = [[0, 1, 2], [0, 1, 3]]

    with pytest.raises(NonManifoldEdgeError):
        mesh.compute_halfedges()

    assert not mesh.has_halfedges()
    assert mesh.halfedges == []
    assert mesh.ordered_halfedge_from_vertex == []


def test_queries_require_halfedges(quad):
    mesh = HalfedgeTriangleMesh()

    assert not mesh.has_halfedges()

    with pytest.raises(RuntimeError):
        mesh.get_boundaries()

    mesh = build(quad)
    mesh.triangles = quad.triangles

    with pytest.raises(RuntimeError):
        mesh.boundary_halfedges_from_vertex(0)

    mesh.compute_halfedges()
    assert mesh.get_boundaries() == [[0, 1, 3, 2]]


def test_index_checks(quad):
    mesh = build(quad)

    with pytest.raises(IndexError):
        mesh.boundary_vertices_from_vertex(4)

    with pytest.raises(IndexError):
        mesh.next_halfedge_from_vertex(-1)


def test_constructor_computes_halfedges(quad):
    mesh = HalfedgeTriangleMesh(quad.vertices, quad.triangles)

    assert mesh.has_halfedges()
    assert records(mesh) == records(build(quad))


def test_from_triangle_mesh_copies(quad):
    quad.compute_triangle_normals()
    quad.paint_uniform_color([1.0, 0.0, 0.0])

    mesh = build(quad)

    assert mesh.has_triangle_normals()
    assert mesh.has_vertex_colors()
    assert np.array_equal(mesh.vertices, quad.vertices)
    assert mesh.vertices is not quad.vertices

    mesh.vertices[0] = 5.0
    assert quad.vertices[0, 0] == 0.0


def test_from_triangle_mesh_console_output(quad, capsys):
    HalfedgeTriangleMesh.from_triangle_mesh(quad, quiet=False)
    out = capsys.readouterr().out

    assert '6 halfedges' in out
    assert '4 boundary halfedges' in out


def test_isolated_vertex(triangle):
    triangle.vertices = np.vstack((triangle.vertices, [5.0, 5.0, 5.0]))
    mesh = build(triangle)

    assert mesh.ordered_halfedge_from_vertex[3] == []
    assert mesh.boundary_vertices_from_vertex(3) == []
    assert mesh.get_boundaries() == [[0, 1, 2]]


def test_merge_keeps_halfedges(quad, triangle):
    a = build(quad)
    b = build(triangle)

    a += b

    assert a.has_halfedges()
    a._check()
    assert a.get_boundaries() == [[0, 1, 3, 2], [4, 5, 6]]

    soup = TriangleMesh(np.vstack((quad.vertices, triangle.vertices)),
                        np.vstack((quad.triangles, triangle.triangles + 4)))
    fresh = build(soup)

    assert records(a) == records(fresh)
    assert a.ordered_halfedge_from_vertex == fresh.ordered_halfedge_from_vertex


def test_merge_without_halfedges_invalidates(quad, triangle):
    a = build(quad)
    b = HalfedgeTriangleMesh()
    b.vertices = triangle.vertices
    b.triangles = triangle.triangles

    a += b

    assert len(a.triangles) == 3
    assert not a.has_halfedges()

    a.compute_halfedges()
    assert a.get_boundaries() == [[0, 1, 3, 2], [4, 5, 6]]


def test_merge_into_empty_mesh(quad):
    mesh = HalfedgeTriangleMesh()
    mesh += build(quad)

    assert mesh.has_halfedges()
    assert mesh.get_boundaries() == [[0, 1, 3, 2]]


def test_add_leaves_operands_unchanged(quad, triangle):
    a = build(quad)
    b = build(triangle)

    c = a + b

    assert len(a.halfedges) == 6
    assert len(b.halfedges) == 3
    assert len(c.halfedges) == 9
    assert len(c.get_boundaries()) == 2


def test_copy_is_independent(quad):
    a = build(quad)
    b = a.copy()

    assert records(a) == records(b)

    b.halfedges[0].twin = 42
    assert a.halfedges[0].twin == -1


def test_clear(quad):
    mesh = build(quad).clear()

    assert mesh.is_empty()
    assert not mesh.has_triangles()
    assert not mesh.has_halfedges()


def test_transform_rotates_triangle_normals(quad):
    quad.compute_triangle_normals()
    mesh = build(quad)

    R = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, -1.0], [0.0, 1.0, 0.0]])
    mesh.rotate(R)

    assert np.allclose(mesh.triangle_normals, [[0.0, -1.0, 0.0]] * 2)
    assert mesh.has_halfedges()


def test_halfedge_record():
    h = Halfedge((3, 4), 1, 5)

    assert h.origin == 3
    assert h.target == 4
    assert h.boundary
    assert repr(h) == 'Halfedge((3, 4), 1, 5, -1)'


def test_merge_with_itself(quad):
    mesh = build(quad)
    mesh += mesh

    assert len(mesh.halfedges) == 12
    assert mesh.has_halfedges()
    assert mesh.get_boundaries() == [[0, 1, 3, 2], [4, 5, 7, 6]]

    mesh._check()


def test_merge_triangle_mesh_operand(quad, triangle):
    mesh = build(quad)
    mesh += triangle

    assert len(mesh.triangles) == 3
    assert not mesh.has_halfedges()

    mesh.compute_halfedges()
    assert mesh.get_boundaries() == [[0, 1, 3, 2], [4, 5, 6]]


def test_merge_rejects_tetra_mesh(quad):
    from hemesh.tetra import TetraMesh

    mesh = build(quad)

    with pytest.raises(TypeError):
        mesh += TetraMesh(np.eye(4)[:, :3], [[0, 1, 2, 3]])

    assert mesh.has_halfedges()


def test_clean_up_invalidates_halfedges(quad):
    mesh = build(quad)
    mesh.remove_duplicated_vertices()

    assert not mesh.has_halfedges()

    mesh.compute_halfedges()
    assert mesh.get_boundaries() == [[0, 1, 3, 2]]


def test_corrupt_boundary_rotation(triangle):
    mesh = build(triangle)

    # Halfedge 1 claims halfedge 0 as twin, rotation about vertex 1 cycles.
    mesh.halfedges[1].twin = 0

    with pytest.raises(RuntimeError):
        mesh.next_halfedge_on_boundary(0)

    with pytest.raises(RuntimeError):
        mesh.get_boundaries()


def test_corrupt_boundary_loop(quad):
    mesh = build(quad)

    assert mesh.boundary_halfedges_from_vertex(0) == [0, 3, 4, 2]

    # Boundary walk 0 -> 3 -> 4 -> 3 -> ... never returns to 0.
    mesh.halfedges[4].next = 3

    with pytest.raises(RuntimeError):
        mesh.boundary_halfedges_from_vertex(0)
