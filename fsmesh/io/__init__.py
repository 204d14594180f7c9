"""IO subpackage — FreeSurfer binary/ASCII codecs, text meshes, and dispatch.

Architecture
------------
The subpackage has three layers:

**Layer 1 — big-endian primitives** (:mod:`~fsmesh.io._binary`):

Scalar and array readers/writers over any byte stream, with the host byte
order detected once at import.  ``open_binary`` accepts paths (gzip for
``.gz``/``.mgz``) or open streams.  Short reads raise
:class:`~fsmesh.io.errors.TruncatedFileError`.

**Layer 2 — format codecs** (one file per format):

* :mod:`~fsmesh.io.curv` — per-vertex data (``read_curv``, ``write_curv``).
* :mod:`~fsmesh.io.mgh` — MGH/MGZ volumes (``read_mgh``, ``write_mgh``)
  with seeking and sequential header readers.
* :mod:`~fsmesh.io.surf` — triangle surfaces (``read_surf``, ``write_surf``).
* :mod:`~fsmesh.io.label` — ASCII labels (``read_label``, ``write_label``).
* :mod:`~fsmesh.io.annot` — parcellations with a version 2 colortable
  (``read_annot``, ``write_annot``).
* :mod:`~fsmesh.io.mesh_io` — OFF, ASCII PLY and OBJ import/export.
* :mod:`~fsmesh.io.subjects` — subjects files listing one subject ID per
  line (``read_subjectsfile``, ``write_subjectsfile``).

Every codec failure is a :class:`~fsmesh.io.errors.FormatError`, which is
a ``ValueError``; recoverable inconsistencies are reported as warnings.

**Layer 3 — dispatch** (:mod:`~fsmesh.io.inputs`):

``read_mesh`` / ``read_pvd`` / ``read_any`` route by extension or magic
number; the ``resolve_*`` functions also accept in-memory objects.
"""
from .annot import Annot, Colortable, read_annot, write_annot
from .curv import Curv, read_curv, read_curv_data, write_curv
from .errors import (
    ColortableCountWarning,
    FormatError,
    LabelParseError,
    MagicNumberError,
    MagicNumberWarning,
    MissingColortableError,
    TruncatedFileError,
    UnsupportedFormatError,
)
from .inputs import (
    detect_format,
    read_any,
    read_mesh,
    read_pvd,
    resolve_annot,
    resolve_label_mask,
    resolve_mesh,
    resolve_pvd,
)
from .label import Label, read_label, write_label
from .mesh_io import read_obj, read_off, read_ply_ascii, to_obj, to_off, to_ply, write_obj, write_off, write_ply
from .mgh import (
    Mgh,
    MghHeader,
    read_mgh,
    read_mgh_data,
    read_mgh_header,
    read_mgh_seekable,
    read_mgh_sequential,
    write_mgh,
)
from .subjects import read_subjectsfile, write_subjectsfile
from .surf import read_surf, read_surf_arrays, write_surf

__all__ = [
    # Layer 3 — dispatch
    'detect_format',
    'read_any',
    'read_mesh',
    'read_pvd',
    'resolve_mesh',
    'resolve_pvd',
    'resolve_label_mask',
    'resolve_annot',
    # Layer 2 — FreeSurfer codecs
    'Curv',
    'read_curv',
    'read_curv_data',
    'write_curv',
    'Mgh',
    'MghHeader',
    'read_mgh',
    'read_mgh_data',
    'read_mgh_header',
    'read_mgh_seekable',
    'read_mgh_sequential',
    'write_mgh',
    'read_surf',
    'read_surf_arrays',
    'write_surf',
    'Label',
    'read_label',
    'write_label',
    'Annot',
    'Colortable',
    'read_annot',
    'write_annot',
    # Layer 2 — text meshes
    'read_off',
    'read_ply_ascii',
    'read_obj',
    'to_off',
    'to_ply',
    'to_obj',
    'write_off',
    'write_ply',
    'write_obj',
    'read_subjectsfile',
    'write_subjectsfile',
    # Errors and warnings
    'FormatError',
    'MagicNumberError',
    'UnsupportedFormatError',
    'TruncatedFileError',
    'LabelParseError',
    'MissingColortableError',
    'MagicNumberWarning',
    'ColortableCountWarning',
]
