"""Extension-based dispatch and input resolvers.

The ``read_*`` functions pick a codec from the file name; the
``resolve_*`` functions additionally accept in-memory objects and arrays
and validate them against a mesh, so callers can take "a path or the
data itself" wherever a mesh, per-vertex data, a label or an annotation is
expected.
"""

import os

import numpy as np

from ..mesh import Mesh
from . import _binary
from .annot import Annot, read_annot
from .curv import CURV_MAGIC, read_curv_data
from .label import Label, read_label
from .mesh_io import TEXT_MESH_READERS
from .mgh import Mgh, read_mgh
from .surf import SURF_MAGIC, read_surf

_MGH_EXTS = frozenset({".mgh", ".mgz"})

FORMATS = ("surf", "curv", "mgh", "label", "annot", "mesh")


def _ext(path):
    return os.path.splitext(os.fspath(path).lower())[1]


def _is_path(obj):
    return isinstance(obj, (str, os.PathLike))


def detect_format(path):
    """Return the format of the file at *path*, one of :data:`FORMATS`.

    The extension decides for ``.mgh``/``.mgz``, ``.label``, ``.annot`` and
    the text mesh formats.  FreeSurfer surfaces and curv files usually have
    no extension (``lh.white``, ``lh.thickness``), so for all other names
    the 3-byte magic number at the start of the file decides.

    Raises
    ------
    ValueError
        If the format cannot be determined.
    """
    ext = _ext(path)
    if ext in _MGH_EXTS:
        return "mgh"
    if ext == ".label":
        return "label"
    if ext == ".annot":
        return "annot"
    if ext in TEXT_MESH_READERS:
        return "mesh"
    with open(path, "rb") as fobj:
        magic = _binary.read_i24(fobj)
    if magic == SURF_MAGIC:
        return "surf"
    if magic == CURV_MAGIC:
        return "curv"
    raise ValueError(
        f"Cannot determine the format of {os.fspath(path)!r}: unknown extension "
        f"{ext!r} and magic number {magic}."
    )


def read_mesh(path):
    """Read a triangle mesh, dispatching on the file extension.

    ``.obj``, ``.ply`` and ``.off`` go to the text readers in
    :mod:`fsmesh.io.mesh_io`; every other path (FreeSurfer surfaces such as
    ``lh.white`` have no extension) is read as a FreeSurfer surface.

    Returns
    -------
    Mesh
    """
    reader = TEXT_MESH_READERS.get(_ext(path))
    if reader is not None:
        return reader(path)
    return read_surf(path)


def read_pvd(path):
    """Read per-vertex data, dispatching on the file extension.

    ``.mgh``/``.mgz`` files are flattened; all other paths are read as
    curv files.

    Returns
    -------
    numpy.ndarray, shape (N,)
    """
    if _ext(path) in _MGH_EXTS:
        return read_mgh(path).data
    return read_curv_data(path)


def read_any(path):
    """Read any supported file and return ``(format, object)``.

    The object is a :class:`~fsmesh.mesh.Mesh` for ``"surf"`` and
    ``"mesh"``, a float32 array for ``"curv"``, an
    :class:`~fsmesh.io.mgh.Mgh`, :class:`~fsmesh.io.label.Label` or
    :class:`~fsmesh.io.annot.Annot` otherwise.
    """
    fmt = detect_format(path)
    readers = {
        "surf": read_surf,
        "mesh": read_mesh,
        "curv": read_curv_data,
        "mgh": read_mgh,
        "label": read_label,
        "annot": read_annot,
    }
    return fmt, readers[fmt](path)


def resolve_mesh(mesh):
    """Resolve a mesh input to a :class:`~fsmesh.mesh.Mesh`.

    Parameters
    ----------
    mesh : Mesh, str, os.PathLike, or tuple/list of two array-likes
        * ``Mesh`` — returned as is.
        * path — loaded with :func:`read_mesh`.
        * ``(vertices, faces)`` — validated by the ``Mesh`` constructor.

    Raises
    ------
    TypeError
        If *mesh* is none of the above.
    ValueError
        If the arrays have the wrong shape or face indices are out of range.
    """
    if isinstance(mesh, Mesh):
        return mesh
    if _is_path(mesh):
        return read_mesh(mesh)
    if isinstance(mesh, (tuple, list)) and len(mesh) == 2:
        return Mesh(mesh[0], mesh[1])
    raise TypeError(
        f"mesh must be a Mesh, a file path, or a (vertices, faces) tuple/list, "
        f"got {type(mesh).__name__!r}."
    )


def resolve_pvd(pvd, *, n_vertices):
    """Resolve per-vertex data to a 1-D numpy array, or ``None``.

    Parameters
    ----------
    pvd : None, str, os.PathLike, Mgh, or array-like
        * ``None`` — returns ``None``.
        * path — loaded with :func:`read_pvd`.
        * ``Mgh`` — its flat data.
        * array-like — converted with ``numpy.asarray``.
    n_vertices : int or None
        Expected number of vertices; shape validation is skipped when
        ``None``.

    Raises
    ------
    ValueError
        If the data does not have shape ``(n_vertices,)``.
    """
    if pvd is None:
        return None
    if _is_path(pvd):
        arr = read_pvd(pvd)
    elif isinstance(pvd, Mgh):
        arr = pvd.data
    else:
        arr = np.asarray(pvd)
    if n_vertices is not None and arr.shape != (n_vertices,):
        raise ValueError(
            f"per-vertex data has shape {arr.shape} but mesh has {n_vertices} vertices."
        )
    return arr


def resolve_label_mask(label, *, n_vertices):
    """Resolve a label input to a boolean vertex mask, or ``None``.

    Parameters
    ----------
    label : None, str, os.PathLike, Label, or array-like
        * ``None`` — returns ``None``.
        * path — an ASCII label file, loaded with :func:`read_label`.
        * ``Label`` — converted with :meth:`Label.vert_in_label`.
        * array-like — converted to ``bool``; must have shape
          ``(n_vertices,)``.
    n_vertices : int
        Number of mesh vertices.

    Raises
    ------
    ValueError
        If the label references vertices beyond *n_vertices* or the array
        has the wrong shape.
    """
    if label is None:
        return None
    if _is_path(label):
        label = read_label(label)
    if isinstance(label, Label):
        return label.vert_in_label(n_vertices)
    arr = np.asarray(label, dtype=bool)
    if arr.shape != (n_vertices,):
        raise ValueError(
            f"label mask has shape {arr.shape} but mesh has {n_vertices} vertices."
        )
    return arr


def resolve_annot(annot, *, n_vertices=None):
    """Resolve an annotation input to an :class:`~fsmesh.io.annot.Annot`, or ``None``.

    Parameters
    ----------
    annot : None, str, os.PathLike, or Annot
    n_vertices : int or None
        When given, the annotation must cover exactly this many vertices.

    Raises
    ------
    TypeError
        If *annot* is not one of the accepted types.
    ValueError
        If the annotation does not match *n_vertices*.
    """
    if annot is None:
        return None
    if _is_path(annot):
        annot = read_annot(annot)
    elif not isinstance(annot, Annot):
        raise TypeError(
            f"annot must be a file path or an Annot, got {type(annot).__name__!r}."
        )
    if n_vertices is not None and annot.num_vertices != n_vertices:
        raise ValueError(
            f"annotation covers {annot.num_vertices} vertices but mesh has "
            f"{n_vertices} vertices."
        )
    return annot
