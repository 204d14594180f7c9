"""Induced submeshes and mapping per-vertex data back to the full mesh."""

import logging

import numpy as np

from .mesh import Mesh

logger = logging.getLogger(__name__)


def submesh_vertex(mesh, keep_vertices):
    """Extract the submesh induced by a set of vertices.

    Parameters
    ----------
    mesh : Mesh
        The full mesh.
    keep_vertices : array-like of int
        Vertex indices to keep.  Their order defines the vertex order of
        the submesh.

    Returns
    -------
    mapping : dict of int to int
        Original vertex index -> submesh vertex index.
    submesh : Mesh
        Vertices are ``mesh.vertices[keep_vertices]``; faces are the
        original faces whose three vertices are *all* kept, re-indexed
        through *mapping*.  Faces with only one or two kept vertices are
        dropped.

    Raises
    ------
    ValueError
        If *keep_vertices* holds non-integers, indices outside
        ``[0, mesh.num_vertices)``, or duplicates.
    """
    keep = np.asarray(keep_vertices).ravel()
    if keep.size and not np.issubdtype(keep.dtype, np.integer):
        raise ValueError(f"keep_vertices must hold integer indices, got dtype {keep.dtype}.")
    keep = keep.astype(np.intp)
    n_verts = mesh.num_vertices
    if keep.size and (int(keep.min()) < 0 or int(keep.max()) >= n_verts):
        raise ValueError(
            f"keep_vertices out of range [0, {n_verts}): "
            f"min={int(keep.min())}, max={int(keep.max())}."
        )

    new_index = np.full(n_verts, -1, dtype=np.intp)
    new_index[keep] = np.arange(keep.size)
    if np.count_nonzero(new_index >= 0) != keep.size:
        raise ValueError("keep_vertices contains duplicate vertex indices.")

    mapped = new_index[mesh.faces]
    complete = np.all(mapped >= 0, axis=1)
    submesh = Mesh(mesh.vertices[keep], mapped[complete])
    mapping = dict(zip(keep.tolist(), range(keep.size)))
    logger.debug(
        "Submesh keeps %d of %d vertices and %d of %d faces.",
        submesh.num_vertices, n_verts, submesh.num_faces, mesh.num_faces,
    )
    return mapping, submesh


def curv_data_for_orig_mesh(data, mapping, orig_num_vertices):
    """Expand per-vertex data of a submesh to the original mesh.

    Parameters
    ----------
    data : array-like, shape (K,)
        Per-vertex values of the submesh.
    mapping : dict of int to int
        Original vertex index -> submesh vertex index, as returned by
        :func:`submesh_vertex`.
    orig_num_vertices : int
        Number of vertices of the original mesh.

    Returns
    -------
    numpy.ndarray, shape (orig_num_vertices,)
        ``out[orig] = data[mapping[orig]]`` for every mapped vertex, NaN
        everywhere else.

    Raises
    ------
    ValueError
        If a mapping entry points outside *data* or outside the original
        mesh.
    """
    values = np.asarray(data)
    if values.ndim != 1:
        raise ValueError(f"data must be a 1-D array, got shape {values.shape}.")
    out = np.full(orig_num_vertices, np.nan, dtype=np.result_type(values.dtype, np.float32))
    if not mapping:
        return out

    orig_idx = np.fromiter(mapping.keys(), dtype=np.intp, count=len(mapping))
    sub_idx = np.fromiter(mapping.values(), dtype=np.intp, count=len(mapping))
    if int(orig_idx.min()) < 0 or int(orig_idx.max()) >= orig_num_vertices:
        raise ValueError(
            f"mapping references original vertices outside [0, {orig_num_vertices})."
        )
    if int(sub_idx.min()) < 0 or int(sub_idx.max()) >= values.shape[0]:
        raise ValueError(
            f"mapping references submesh vertices outside [0, {values.shape[0]})."
        )
    out[orig_idx] = values[sub_idx]
    return out
