"""fsmesh: Read and write FreeSurfer neuroimaging files and analyse surface meshes.

fsmesh decodes and encodes the FreeSurfer file formats bit-exactly and
offers graph operations on the decoded triangle meshes.  It includes:

- **Codecs**: per-vertex data (curv), MGH/MGZ volumes, triangle surfaces,
  ASCII labels, and annotations with their colortables
- **Text meshes**: OFF, ASCII PLY (optionally vertex-colored) and OBJ
- **Mesh topology**: adjacency matrix, edge set and neighbor lists, k-hop
  neighborhoods, nearest-neighbor smoothing, and submesh extraction
- **CLI tools**: ``fsmesh-info`` to summarize any supported file

For example::

    from fsmesh import read_surf, read_curv_data, read_label, submesh_vertex

    mesh = read_surf('path/to/lh.white')
    thickness = read_curv_data('path/to/lh.thickness')
    cortex = read_label('path/to/lh.cortex.label')

    mapping, cortex_mesh = submesh_vertex(mesh, cortex.vertex)
    smoothed = cortex_mesh.smooth_pvd_nn(thickness[cortex.vertex], num_iter=5)

"""

from ._config import sys_info  # noqa: F401
from ._version import __version__  # noqa: F401
from .io import (  # noqa: F401
    Annot,
    Colortable,
    Label,
    Mgh,
    MghHeader,
    read_annot,
    read_curv,
    read_curv_data,
    read_label,
    read_mesh,
    read_mgh,
    read_pvd,
    read_subjectsfile,
    read_surf,
    write_annot,
    write_curv,
    write_label,
    write_mgh,
    write_subjectsfile,
    write_surf,
)
from .mesh import Mesh, curv_data_for_orig_mesh, extend_adj, smooth_pvd_nn, submesh_vertex  # noqa: F401
from .utils.datasets import fetch_sample_subject  # noqa: F401

__all__ = [
    "__version__",
    "sys_info",
    "fetch_sample_subject",
    "Mesh",
    "extend_adj",
    "smooth_pvd_nn",
    "submesh_vertex",
    "curv_data_for_orig_mesh",
    "read_curv",
    "read_curv_data",
    "write_curv",
    "Mgh",
    "MghHeader",
    "read_mgh",
    "write_mgh",
    "read_surf",
    "write_surf",
    "Label",
    "read_label",
    "write_label",
    "Annot",
    "Colortable",
    "read_annot",
    "write_annot",
    "read_mesh",
    "read_pvd",
    "read_subjectsfile",
    "write_subjectsfile",
]
