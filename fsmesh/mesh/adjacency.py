"""Vertex adjacency of triangle meshes.

Three equivalent views of the same graph are offered: a dense boolean
matrix (fast, but ``O(N**2)`` memory, so only for modest meshes), a set of
directed edges, and per-vertex neighbor lists.  For full-size cortical
surfaces, :func:`as_sparse_adjmatrix` gives the matrix view in CSR form.

All functions take a :class:`~fsmesh.mesh.Mesh` or its ``(M, 3)`` face array
(a flat ``3*M`` sequence is accepted too) and, for bare face arrays,
optionally the vertex count.  When the vertex count is
omitted it is taken to be ``faces.max() + 1``, which misses trailing
vertices that no face references.
"""

import logging

import numpy as np
from scipy import sparse

logger = logging.getLogger(__name__)


def _face_array(faces, num_vertices=None):
    """Return the faces as an intp (M, 3) array and the vertex count, if known.

    A Mesh (anything with ``faces`` and ``num_vertices``) is unpacked.
    """
    if hasattr(faces, "faces"):
        if num_vertices is None:
            num_vertices = faces.num_vertices
        faces = faces.faces
    arr = np.asarray(faces, dtype=np.intp)
    return arr.reshape(-1, 3), num_vertices


def _resolve_num_vertices(faces, num_vertices):
    max_idx = int(faces.max()) if faces.size else -1
    if num_vertices is None:
        return max_idx + 1
    if faces.size and (max_idx >= num_vertices or int(faces.min()) < 0):
        raise ValueError(
            f"Face indices out of range [0, {num_vertices}): "
            f"min={int(faces.min())}, max={max_idx}."
        )
    return int(num_vertices)


def _directed_pairs(faces):
    """Return rows/cols of every directed triangle edge, self-loops removed."""
    a, b, c = faces.T
    rows = np.concatenate((a, b, c, b, c, a))
    cols = np.concatenate((b, c, a, a, b, c))
    keep = rows != cols
    return rows[keep], cols[keep]


def as_adjmatrix(faces, num_vertices=None):
    """Compute the dense, symmetric adjacency matrix of a mesh.

    Parameters
    ----------
    faces : Mesh or array-like, shape (M, 3)
        The mesh, or its triangle vertex indices.
    num_vertices : int or None, optional
        Number of mesh vertices.

    Returns
    -------
    numpy.ndarray, shape (N, N), dtype bool
        ``adj[i, j]`` is True iff ``i`` and ``j`` share a triangle edge.
        The diagonal is always False.
    """
    faces, num_vertices = _face_array(faces, num_vertices)
    n_verts = _resolve_num_vertices(faces, num_vertices)
    adj = np.zeros((n_verts, n_verts), dtype=bool)
    rows, cols = _directed_pairs(faces)
    adj[rows, cols] = True
    return adj


def as_sparse_adjmatrix(faces, num_vertices=None):
    """Compute the adjacency matrix as a ``scipy.sparse.csr_array``.

    Same graph as :func:`as_adjmatrix`, with memory proportional to the
    number of edges instead of ``N**2``.
    """
    faces, num_vertices = _face_array(faces, num_vertices)
    n_verts = _resolve_num_vertices(faces, num_vertices)
    rows, cols = _directed_pairs(faces)
    data = np.ones(rows.size, dtype=np.int32)
    adj = sparse.csr_array((data, (rows, cols)), shape=(n_verts, n_verts))
    adj.sum_duplicates()
    return adj.astype(bool)


def as_edgelist(faces):
    """Compute the set of directed edges of a mesh.

    Parameters
    ----------
    faces : Mesh or array-like, shape (M, 3)
        The mesh, or its triangle vertex indices.

    Returns
    -------
    set of tuple of (int, int)
        Contains both ``(i, j)`` and ``(j, i)`` for every triangle edge,
        so a closed cube with 18 distinct edges yields 36 entries.
    """
    faces, _ = _face_array(faces)
    rows, cols = _directed_pairs(faces)
    return set(zip(rows.tolist(), cols.tolist()))


def as_adjlist(faces, num_vertices=None, via_matrix=True):
    """Compute per-vertex neighbor lists.

    Parameters
    ----------
    faces : Mesh or array-like, shape (M, 3)
        The mesh, or its triangle vertex indices.
    num_vertices : int or None, optional
        Number of mesh vertices.
    via_matrix : bool, default=True
        Build the lists from the dense adjacency matrix (fast for small
        meshes) or from the directed edge set (no ``N**2`` allocation).

    Returns
    -------
    list of list of int
        ``adjlist[v]`` holds the neighbors of ``v`` in ascending order,
        without ``v`` itself and without duplicates.
    """
    faces, num_vertices = _face_array(faces, num_vertices)
    n_verts = _resolve_num_vertices(faces, num_vertices)
    if via_matrix:
        adj = as_adjmatrix(faces, n_verts)
        return [np.flatnonzero(row).tolist() for row in adj]

    adjlist = [[] for _ in range(n_verts)]
    for i, j in sorted(as_edgelist(faces)):
        adjlist[i].append(j)
    return adjlist


def extend_adj(adjlist, k):
    """Grow each neighborhood to all vertices within *k* hops.

    Parameters
    ----------
    adjlist : list of sequence of int
        1-hop neighbor lists, e.g. from :func:`as_adjlist`.
    k : int
        Neighborhood radius in edges.  ``k=0`` and ``k=1`` return the
        input neighborhoods.

    Returns
    -------
    list of list of int
        A new list; entry ``v`` holds every vertex reachable from ``v`` in
        at most ``k`` steps, sorted, excluding ``v`` itself.

    Raises
    ------
    ValueError
        If *k* is negative.
    """
    if k < 0:
        raise ValueError(f"The neighborhood radius k must be >= 0, got {k}.")
    if k <= 1:
        return [list(neigh) for neigh in adjlist]

    extended = []
    for vertex, neighbors in enumerate(adjlist):
        reached = set(neighbors)
        reached.add(vertex)
        frontier = set(neighbors)
        for _ in range(k - 1):
            next_frontier = set()
            for u in frontier:
                next_frontier.update(adjlist[u])
            frontier = next_frontier - reached
            if not frontier:
                break
            reached |= frontier
        reached.discard(vertex)
        extended.append(sorted(reached))
    logger.debug("Extended %d neighborhoods to %d hops.", len(adjlist), k)
    return extended
