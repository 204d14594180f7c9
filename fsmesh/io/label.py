"""Reader and writer for FreeSurfer ASCII label files (``lh.cortex.label`` etc.).

A label file looks like::

    #!ascii label  , from subject bert vox2ras=TkReg
    3
    1234  -10.000  20.000  30.000 0.0000000000
    1240  -11.000  21.000  31.000 0.0000000000
    1300  -12.500  22.000  29.000 1.0000000000

The first line is a free-form comment, the second the number of entries,
then one ``vertex x y z value`` line per entry.
"""

import contextlib
import logging
import os
from dataclasses import dataclass

import numpy as np

from .errors import LabelParseError

logger = logging.getLogger(__name__)

LABEL_HEADER = "#!ascii label , from fsmesh"


@dataclass
class Label:
    """Vertices (or voxels) of a region, with coordinates and a scalar value.

    The five attributes are parallel arrays of equal length.

    Attributes
    ----------
    vertex : numpy.ndarray of int32
    coord_x, coord_y, coord_z : numpy.ndarray of float32
    value : numpy.ndarray of float32
    """
    vertex: np.ndarray
    coord_x: np.ndarray
    coord_y: np.ndarray
    coord_z: np.ndarray
    value: np.ndarray

    def __post_init__(self):
        self.vertex = np.asarray(self.vertex, dtype=np.int32).ravel()
        for attr in ("coord_x", "coord_y", "coord_z", "value"):
            arr = np.asarray(getattr(self, attr), dtype=np.float32).ravel()
            if arr.size != self.vertex.size:
                raise ValueError(
                    f"Label field {attr} has {arr.size} entries, expected "
                    f"{self.vertex.size} like vertex."
                )
            setattr(self, attr, arr)

    @property
    def num_entries(self):
        return int(self.vertex.size)

    @property
    def coords(self):
        """Coordinates as an array of shape (num_entries, 3)."""
        return np.column_stack((self.coord_x, self.coord_y, self.coord_z))

    def vert_in_label(self, total_vertex_count):
        """Return a boolean mask over all mesh vertices marking label membership.

        Parameters
        ----------
        total_vertex_count : int
            Number of vertices of the mesh the label belongs to.

        Returns
        -------
        numpy.ndarray, shape (total_vertex_count,), dtype bool

        Raises
        ------
        ValueError
            If *total_vertex_count* does not exceed the largest vertex index in
            the label, i.e. the label does not fit on the mesh.
        """
        if self.num_entries:
            max_vertex = int(self.vertex.max())
            if total_vertex_count <= max_vertex:
                raise ValueError(
                    f"Label references vertex {max_vertex}, so the mesh needs more than "
                    f"{total_vertex_count} vertices."
                )
            if int(self.vertex.min()) < 0:
                raise ValueError("Label contains negative vertex indices.")
        mask = np.zeros(total_vertex_count, dtype=bool)
        mask[self.vertex] = True
        return mask


@contextlib.contextmanager
def _open_text(source, mode="r"):
    attr = "read" if "r" in mode else "write"
    if hasattr(source, attr):
        yield source
        return
    with open(os.fspath(source), mode, encoding="utf-8") as fobj:
        yield fobj


def _parse_entry(line, lineno, name):
    fields = line.split()
    if len(fields) != 5:
        raise LabelParseError(
            f"Line {lineno} of label {name} has {len(fields)} fields, expected 5: {line!r}"
        )
    try:
        return int(fields[0]), float(fields[1]), float(fields[2]), float(fields[3]), float(fields[4])
    except ValueError:
        raise LabelParseError(
            f"Line {lineno} of label {name} is not 'vertex x y z value': {line!r}"
        ) from None


def read_label(source):
    """Read an ASCII label file.

    Parameters
    ----------
    source : str, os.PathLike or file-like
        Path to the label file or an open text (or binary) stream.

    Returns
    -------
    Label

    Raises
    ------
    LabelParseError
        If the count line or any entry line cannot be parsed, or the
        number of entries differs from the declared count.
    """
    with _open_text(source) as fobj:
        name = getattr(fobj, "name", f"<{type(fobj).__name__}>")
        lines = [
            line.decode("utf-8") if isinstance(line, bytes) else line
            for line in fobj
        ]
    if len(lines) < 2:
        raise LabelParseError(f"Label {name} is missing its comment or count line.")
    try:
        num_entries = int(lines[1].strip())
    except ValueError:
        raise LabelParseError(
            f"Second line of label {name} is not an entry count: {lines[1]!r}"
        ) from None

    entries = [
        _parse_entry(line, lineno, name)
        for lineno, line in enumerate(lines[2:], start=3)
        if line.strip()
    ]
    if len(entries) != num_entries:
        raise LabelParseError(
            f"Label {name} declares {num_entries} entries but contains {len(entries)}."
        )
    if entries:
        vertex, xs, ys, zs, values = zip(*entries)
    else:
        vertex = xs = ys = zs = values = ()
    logger.debug("Read label %s with %d entries.", name, num_entries)
    return Label(vertex=vertex, coord_x=xs, coord_y=ys, coord_z=zs, value=values)


def write_label(target, label):
    """Write *label* as an ASCII label file.

    Parameters
    ----------
    target : str, os.PathLike or text file-like
        Output path or an open text stream.
    label : Label
        Entries are written in their stored order.
    """
    with _open_text(target, "w") as fobj:
        fobj.write(f"{LABEL_HEADER}\n{label.num_entries}\n")
        for v, x, y, z, val in zip(
            label.vertex.tolist(),
            label.coord_x.tolist(),
            label.coord_y.tolist(),
            label.coord_z.tolist(),
            label.value.tolist(),
        ):
            fobj.write(f"{v} {x:.3f} {y:.3f} {z:.3f} {val:.10f}\n")
    logger.debug("Wrote label with %d entries.", label.num_entries)
