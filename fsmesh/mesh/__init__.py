"""Mesh subpackage — the ``Mesh`` type and the mesh topology engine.

* :mod:`~fsmesh.mesh.mesh` — :class:`Mesh` plus cube / pyramid / grid
  constructors.
* :mod:`~fsmesh.mesh.adjacency` — adjacency matrix, edge set, neighbor
  lists, and k-hop neighborhoods.
* :mod:`~fsmesh.mesh.smooth` — nearest-neighbor smoothing of per-vertex
  data.
* :mod:`~fsmesh.mesh.submesh` — induced submesh extraction and mapping
  submesh data back onto the full mesh.
"""
from .adjacency import as_adjlist, as_adjmatrix, as_edgelist, as_sparse_adjmatrix, extend_adj
from .mesh import Mesh
from .smooth import smooth_pvd_nn
from .submesh import curv_data_for_orig_mesh, submesh_vertex

__all__ = [
    'Mesh',
    'as_adjmatrix',
    'as_sparse_adjmatrix',
    'as_edgelist',
    'as_adjlist',
    'extend_adj',
    'smooth_pvd_nn',
    'submesh_vertex',
    'curv_data_for_orig_mesh',
]
