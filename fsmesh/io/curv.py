"""Reader and writer for FreeSurfer per-vertex data ("curv") files.

Files such as ``lh.thickness``, ``lh.curv`` or ``lh.area`` store one float
per surface vertex in the "new" curv layout (all values big-endian)::

    3 bytes   magic number 0xFFFFFF
    int32     number of vertices N
    int32     number of faces (informational only)
    int32     values per vertex, must be 1
    N*float32 the data
"""

import logging
import warnings
from dataclasses import dataclass

import numpy as np

from . import _binary
from .errors import FormatError, MagicNumberWarning, UnsupportedFormatError

logger = logging.getLogger(__name__)

CURV_MAGIC = 16777215
DEFAULT_NUM_FACES = 100000


@dataclass
class Curv:
    """Per-vertex scalar data read from a curv file.

    Attributes
    ----------
    data : numpy.ndarray, shape (num_vertices,), dtype float32
        One value per mesh vertex.
    num_vertices : int
        Vertex count from the header, equal to ``len(data)``.
    num_faces : int
        Face count from the header.  Many producers write a placeholder
        here, so it is not meaningful.
    num_values_per_vertex : int
        Always 1 for files this reader accepts.
    """
    data: np.ndarray
    num_vertices: int
    num_faces: int = DEFAULT_NUM_FACES
    num_values_per_vertex: int = 1


def read_curv(source):
    """Read a curv file.

    Parameters
    ----------
    source : str, os.PathLike or binary file-like
        Path to the file, or an open binary stream positioned at its start.

    Returns
    -------
    Curv

    Raises
    ------
    UnsupportedFormatError
        If the file stores more than one value per vertex.
    TruncatedFileError
        If the stream ends before all declared values were read.

    Warns
    -----
    MagicNumberWarning
        If the magic number is not ``0xFFFFFF``.  Some producers write a
        different one; the rest of the file is still read.
    """
    with _binary.open_binary(source) as fobj:
        name = _binary.stream_name(fobj)
        magic = _binary.read_i24(fobj)
        if magic != CURV_MAGIC:
            warnings.warn(
                f"Curv file {name} has magic number {magic}, expected {CURV_MAGIC}; "
                f"reading it anyway.",
                MagicNumberWarning,
                stacklevel=2,
            )
        num_vertices, num_faces, num_values = _binary.read_array(fobj, np.int32, 3).tolist()
        if num_values != 1:
            raise UnsupportedFormatError(
                f"Curv file {name} stores {num_values} values per vertex; only 1 is supported."
            )
        if num_vertices < 0:
            raise FormatError(f"Curv file {name} declares a negative vertex count {num_vertices}.")
        data = _binary.read_array(fobj, np.float32, num_vertices)
    logger.debug("Read %d curv values from %s.", num_vertices, name)
    return Curv(
        data=data,
        num_vertices=num_vertices,
        num_faces=num_faces,
        num_values_per_vertex=num_values,
    )


def read_curv_data(source):
    """Read a curv file and return only its per-vertex data array."""
    return read_curv(source).data


def write_curv(target, data, num_faces=DEFAULT_NUM_FACES):
    """Write per-vertex data to a curv file.

    Parameters
    ----------
    target : str, os.PathLike or binary file-like
        Output path or an open binary stream.
    data : array-like, shape (N,) or Curv
        Per-vertex values, written as float32.  When a :class:`Curv` is
        given its ``data`` and ``num_faces`` are used.
    num_faces : int, optional
        Face count to store in the header.  It is not used by readers.

    Raises
    ------
    ValueError
        If *data* is not one-dimensional.  Nothing is written in that case.
    """
    if isinstance(data, Curv):
        num_faces = data.num_faces
        data = data.data
    values = np.asarray(data, dtype=np.float32)
    if values.ndim != 1:
        raise ValueError(f"Curv data must be 1-D, got shape {values.shape}.")
    with _binary.open_binary(target, "wb") as fobj:
        _binary.write_i24(fobj, CURV_MAGIC)
        _binary.write_array(fobj, [values.size, num_faces, 1], np.int32)
        _binary.write_array(fobj, values, np.float32)
    logger.debug("Wrote %d curv values.", values.size)
