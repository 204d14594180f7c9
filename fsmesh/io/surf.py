"""Reader and writer for FreeSurfer triangle surface files (``lh.white`` etc.).

Layout (all values big-endian)::

    3 bytes     magic number 0xFFFFFE
    text        creator line, terminated by "\\n"
    text        comment line, terminated by "\\n" (usually empty)
    int32       number of vertices N
    int32       number of faces M
    3N*float32  vertex coordinates x0 y0 z0 x1 ...
    3M*int32    face vertex indices
"""

import logging

import numpy as np

from ..mesh import Mesh
from . import _binary
from .errors import FormatError, MagicNumberError

logger = logging.getLogger(__name__)

SURF_MAGIC = 16777214
DEFAULT_CREATE_STAMP = "created by fsmesh"


def read_surf_arrays(source):
    """Read a surface file into raw vertex and face arrays.

    The face indices are *not* checked against the vertex count; use
    :func:`read_surf` to get a validated :class:`~fsmesh.mesh.Mesh`.

    Parameters
    ----------
    source : str, os.PathLike or binary file-like
        Path to the file, or an open binary stream positioned at its start.

    Returns
    -------
    vertices : numpy.ndarray, shape (N, 3), dtype float32
    faces : numpy.ndarray, shape (M, 3), dtype int32

    Raises
    ------
    MagicNumberError
        If the file does not start with ``0xFFFFFE``.
    TruncatedFileError
        If the stream ends early, including inside the two text lines.
    """
    with _binary.open_binary(source) as fobj:
        name = _binary.stream_name(fobj)
        magic = _binary.read_i24(fobj)
        if magic != SURF_MAGIC:
            raise MagicNumberError(
                f"File {name} is not a triangle surface: magic number {magic}, "
                f"expected {SURF_MAGIC}."
            )
        _binary.read_line(fobj)  # creator
        _binary.read_line(fobj)  # comment
        num_vertices, num_faces = _binary.read_array(fobj, np.int32, 2).tolist()
        if num_vertices < 0 or num_faces < 0:
            raise FormatError(
                f"Surface {name} declares negative counts: {num_vertices} vertices, "
                f"{num_faces} faces."
            )
        vertices = _binary.read_array(fobj, np.float32, 3 * num_vertices).reshape(-1, 3)
        faces = _binary.read_array(fobj, np.int32, 3 * num_faces).reshape(-1, 3)
    logger.debug("Read surface %s: %d vertices, %d faces.", name, num_vertices, num_faces)
    return vertices, faces


def read_surf(source):
    """Read a surface file into a :class:`~fsmesh.mesh.Mesh`.

    Raises
    ------
    MagicNumberError, TruncatedFileError
        See :func:`read_surf_arrays`.
    ValueError
        If a face references a vertex that does not exist.
    """
    vertices, faces = read_surf_arrays(source)
    return Mesh(vertices, faces)


def write_surf(target, mesh_or_vertices, faces=None, create_stamp=DEFAULT_CREATE_STAMP):
    """Write a triangle surface file.

    Parameters
    ----------
    target : str, os.PathLike or binary file-like
        Output path or an open binary stream.
    mesh_or_vertices : Mesh or array-like
        A mesh, or vertex coordinates of shape (N, 3) if *faces* is given.
    faces : array-like, shape (M, 3), optional
        Face indices; required when *mesh_or_vertices* is not a Mesh.
    create_stamp : str, optional
        Text of the creator line.  It must not contain a newline.
    """
    if isinstance(mesh_or_vertices, Mesh):
        if faces is not None:
            raise ValueError("Pass either a Mesh or vertices and faces, not both.")
        mesh = mesh_or_vertices
    else:
        if faces is None:
            raise ValueError("faces are required when vertices are given as an array.")
        mesh = Mesh(mesh_or_vertices, faces)
    if "\n" in create_stamp:
        raise ValueError("create_stamp must be a single line.")

    with _binary.open_binary(target, "wb") as fobj:
        _binary.write_i24(fobj, SURF_MAGIC)
        fobj.write(create_stamp.encode("utf-8") + b"\n\n")
        _binary.write_array(fobj, [mesh.num_vertices, mesh.num_faces], np.int32)
        _binary.write_array(fobj, mesh.vertices, np.float32)
        _binary.write_array(fobj, mesh.faces, np.int32)
    logger.debug("Wrote surface: %d vertices, %d faces.", mesh.num_vertices, mesh.num_faces)
