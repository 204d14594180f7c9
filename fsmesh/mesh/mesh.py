"""Triangle mesh container used by the surf codec and the topology engine."""

import numpy as np

from . import adjacency as _adjacency
from .smooth import smooth_pvd_nn as _smooth_pvd_nn


def _as_vertex_array(vertices):
    arr = np.array(vertices, dtype=np.float32)
    if arr.ndim == 1:
        if arr.size % 3 != 0:
            raise ValueError(
                f"A flat vertex array must have a length divisible by 3, got {arr.size}."
            )
        arr = arr.reshape(-1, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(
            f"vertices must be an array of shape (N, 3), got shape {arr.shape}."
        )
    return arr


def _as_face_array(faces):
    arr = np.asarray(faces)
    if arr.size and not np.issubdtype(arr.dtype, np.integer):
        raise ValueError(f"faces must hold integer vertex indices, got dtype {arr.dtype}.")
    arr = np.array(arr, dtype=np.int32)
    if arr.ndim == 1:
        if arr.size % 3 != 0:
            raise ValueError(
                f"A flat face array must have a length divisible by 3, got {arr.size}."
            )
        arr = arr.reshape(-1, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(
            f"faces must be an array of shape (M, 3), got shape {arr.shape}."
        )
    return arr


class Mesh:
    """A triangle mesh given by vertex coordinates and vertex-index faces.

    Parameters
    ----------
    vertices : array-like
        Vertex coordinates, shape ``(N, 3)`` or a flat sequence of ``3*N``
        values ``x0, y0, z0, x1, ...``.  Stored as ``float32``.
    faces : array-like
        Triangles as vertex indices, shape ``(M, 3)`` or a flat sequence of
        ``3*M`` values.  Stored as ``int32``.

    Raises
    ------
    ValueError
        If the arrays have the wrong shape or a face references a vertex
        outside ``[0, N)``.

    Notes
    -----
    Both arrays are copied and marked read-only.  The only way to change a
    mesh is :meth:`replace`, which swaps both arrays at once.
    """

    def __init__(self, vertices, faces):
        self._vertices = None
        self._faces = None
        self.replace(vertices, faces)

    def replace(self, vertices, faces):
        """Replace both the vertex and the face array after validating them."""
        v = _as_vertex_array(vertices)
        f = _as_face_array(faces)
        n_verts = v.shape[0]
        if f.size > 0 and (int(f.min()) < 0 or int(f.max()) >= n_verts):
            raise ValueError(
                f"Face indices out of range [0, {n_verts}): "
                f"min={int(f.min())}, max={int(f.max())}."
            )
        v.setflags(write=False)
        f.setflags(write=False)
        self._vertices = v
        self._faces = f

    @property
    def vertices(self):
        """Vertex coordinates, ``float32`` array of shape (N, 3)."""
        return self._vertices

    @property
    def faces(self):
        """Triangle vertex indices, ``int32`` array of shape (M, 3)."""
        return self._faces

    @property
    def num_vertices(self):
        return self._vertices.shape[0]

    @property
    def num_faces(self):
        return self._faces.shape[0]

    def __repr__(self):
        return f"Mesh(num_vertices={self.num_vertices}, num_faces={self.num_faces})"

    def vm_at(self, vertex, coord):
        """Return coordinate *coord* (0=x, 1=y, 2=z) of vertex *vertex*.

        Raises
        ------
        IndexError
            If either index is out of range.  Negative indices are rejected
            rather than wrapped around.
        """
        if not 0 <= vertex < self.num_vertices or not 0 <= coord < 3:
            raise IndexError(
                f"Vertex coordinate index ({vertex}, {coord}) out of range for a mesh "
                f"with {self.num_vertices} vertices."
            )
        return float(self._vertices[vertex, coord])

    def fm_at(self, face, corner):
        """Return the vertex index at *corner* (0..2) of face *face*.

        Raises
        ------
        IndexError
            If either index is out of range.
        """
        if not 0 <= face < self.num_faces or not 0 <= corner < 3:
            raise IndexError(
                f"Face index ({face}, {corner}) out of range for a mesh "
                f"with {self.num_faces} faces."
            )
        return int(self._faces[face, corner])

    # ------------------------------------------------------------------
    # Topology shortcuts
    # ------------------------------------------------------------------

    def as_adjmatrix(self):
        """Dense boolean adjacency matrix, see :func:`fsmesh.mesh.adjacency.as_adjmatrix`."""
        return _adjacency.as_adjmatrix(self._faces, self.num_vertices)

    def as_edgelist(self):
        """Directed edge set, see :func:`fsmesh.mesh.adjacency.as_edgelist`."""
        return _adjacency.as_edgelist(self._faces)

    def as_adjlist(self, via_matrix=True):
        """Neighbor lists, see :func:`fsmesh.mesh.adjacency.as_adjlist`."""
        return _adjacency.as_adjlist(self._faces, self.num_vertices, via_matrix=via_matrix)

    def smooth_pvd_nn(self, pvd, num_iter=1, via_matrix=True):
        """Smooth per-vertex data over this mesh's neighborhoods.

        Builds the adjacency list and delegates to
        :func:`fsmesh.mesh.smooth.smooth_pvd_nn`.
        """
        return _smooth_pvd_nn(self.as_adjlist(via_matrix=via_matrix), pvd, num_iter)

    # ------------------------------------------------------------------
    # Constructors for simple test geometry
    # ------------------------------------------------------------------

    @classmethod
    def construct_cube(cls):
        """Return a unit cube with 8 vertices and 12 triangles.

        Vertex 0 sits at the origin and vertex 6 at ``(1, 1, 1)``; the six
        square sides are split along diagonals through those two corners,
        so they have 6 neighbors each while all other vertices have 4.
        """
        vertices = np.array(
            [
                [0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
                [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1],
            ],
            dtype=np.float32,
        )
        faces = np.array(
            [
                [0, 2, 1], [0, 3, 2],  # bottom, z=0
                [4, 5, 6], [4, 6, 7],  # top, z=1
                [0, 1, 5], [0, 5, 4],  # front, y=0
                [3, 7, 6], [3, 6, 2],  # back, y=1
                [0, 4, 7], [0, 7, 3],  # left, x=0
                [1, 2, 6], [1, 6, 5],  # right, x=1
            ],
            dtype=np.int32,
        )
        return cls(vertices, faces)

    @classmethod
    def construct_pyramid(cls):
        """Return a square-based pyramid with 5 vertices and 6 triangles."""
        vertices = np.array(
            [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0], [0.5, 0.5, 1]],
            dtype=np.float32,
        )
        faces = np.array(
            [
                [0, 1, 4], [1, 2, 4], [2, 3, 4], [3, 0, 4],
                [0, 2, 1], [0, 3, 2],
            ],
            dtype=np.int32,
        )
        return cls(vertices, faces)

    @classmethod
    def construct_grid(cls, nx=4, ny=5, distx=1.0, disty=1.0):
        """Return a flat triangulated grid in the z=0 plane.

        Parameters
        ----------
        nx, ny : int
            Number of vertices along x and y, both at least 2.
        distx, disty : float
            Spacing between neighboring vertices along x and y.

        Returns
        -------
        Mesh
            ``nx * ny`` vertices, vertex ``iy * nx + ix`` at
            ``(ix * distx, iy * disty, 0)``, and ``2 * (nx - 1) * (ny - 1)``
            faces, two per grid cell.
        """
        if nx < 2 or ny < 2:
            raise ValueError(f"A grid needs at least 2x2 vertices, got {nx}x{ny}.")
        ix, iy = np.meshgrid(np.arange(nx), np.arange(ny))
        vertices = np.column_stack(
            [ix.ravel() * distx, iy.ravel() * disty, np.zeros(nx * ny)]
        )
        cx, cy = np.meshgrid(np.arange(nx - 1), np.arange(ny - 1))
        v0 = (cy * nx + cx).ravel()
        v1 = v0 + 1
        v2 = v0 + nx
        v3 = v2 + 1
        faces = np.empty((2 * v0.size, 3), dtype=np.int32)
        faces[0::2] = np.column_stack([v0, v1, v3])
        faces[1::2] = np.column_stack([v0, v3, v2])
        return cls(vertices, faces)
