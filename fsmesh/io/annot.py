"""Reader and writer for FreeSurfer annotation (parcellation) files.

An annotation assigns every surface vertex a packed RGBA label code and
carries a colortable that maps those codes to region names.  Layout (all
values big-endian int32 unless noted)::

    N                       number of vertex entries
    N * (vertex, label)     interleaved vertex index / label code pairs
    1                       "has colortable" flag
    -2                      negated colortable version; only version 2
    E                       number of colortable entries
    L, L bytes              original colortable file name (ignored)
    E                       entry count again
    E * entry               id, name length K, K bytes of null-terminated
                            name, r, g, b, a

The label code of an entry is ``r + 256*g + 65536*b + 16777216*a``.
Reading is a fixed sequence of steps, and each way a file can be
unreadable raises its own exception type from :mod:`fsmesh.io.errors`.
"""

import logging
import warnings
from dataclasses import dataclass, field

import numpy as np

from . import _binary
from .errors import (
    ColortableCountWarning,
    FormatError,
    MissingColortableError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)

COLORTABLE_VERSION = 2

_CODE_MASK = 0xFFFFFFFF


def compute_label(r, g, b, a):
    """Pack RGBA channel values into FreeSurfer label codes (as int64)."""
    r, g, b, a = (np.asarray(c, dtype=np.int64) for c in (r, g, b, a))
    return r + g * 256 + b * 65536 + a * 16777216


def _unsigned_codes(codes):
    """Map label codes to the unsigned 32-bit range, undoing int32 wrap-around."""
    return np.asarray(codes, dtype=np.int64) & _CODE_MASK


def _as_int32_codes(codes):
    """Store label codes as int32; codes of 2**31 and above wrap to negatives."""
    codes = np.asarray(codes, dtype=np.int64).ravel()
    if codes.size and (int(codes.min()) < -(2 ** 31) or int(codes.max()) > _CODE_MASK):
        raise ValueError(
            f"Label codes must fit in 32 bits, got range [{int(codes.min())}, {int(codes.max())}]."
        )
    return codes.astype(np.int32)


@dataclass
class Colortable:
    """Region metadata of an annotation.

    ``id``, ``name``, ``r``, ``g``, ``b`` and ``a`` are parallel, one entry
    per region; ``label`` is derived from the color channels.
    """
    id: np.ndarray
    name: list
    r: np.ndarray
    g: np.ndarray
    b: np.ndarray
    a: np.ndarray
    label: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        self.id = np.asarray(self.id, dtype=np.int32).ravel()
        self.name = [str(n) for n in self.name]
        n_entries = self.id.size
        for attr in ("r", "g", "b", "a"):
            arr = np.asarray(getattr(self, attr), dtype=np.int32).ravel()
            if arr.size != n_entries:
                raise ValueError(
                    f"Colortable channel {attr} has {arr.size} entries, expected {n_entries}."
                )
            setattr(self, attr, arr)
        if len(self.name) != n_entries:
            raise ValueError(
                f"Colortable has {len(self.name)} names for {n_entries} entries."
            )
        self.label = compute_label(self.r, self.g, self.b, self.a)
        codes, counts = np.unique(self.label, return_counts=True)
        if np.any(counts > 1):
            dup = int(codes[np.argmax(counts > 1)])
            raise ValueError(
                f"Colortable label codes must be unique; code {dup} is used by "
                f"{int(counts.max())} entries with the same RGBA color."
            )

    @classmethod
    def from_rgba(cls, names, rgba, ids=None):
        """Build a colortable from region names and an ``(E, 4)`` RGBA array."""
        rgba = np.asarray(rgba).reshape(-1, 4)
        if ids is None:
            ids = np.arange(rgba.shape[0])
        return cls(ids, list(names), rgba[:, 0], rgba[:, 1], rgba[:, 2], rgba[:, 3])

    @property
    def num_entries(self):
        return int(self.id.size)

    def get_region_idx(self, region_name):
        """Return the entry index of the region called *region_name*, or -1."""
        try:
            return self.name.index(region_name)
        except ValueError:
            return -1

    def get_region_idx_by_label(self, label):
        """Return the entry index of the region with label code *label*, or -1."""
        hits = np.flatnonzero(self.label == int(label) & _CODE_MASK)
        return int(hits[0]) if hits.size else -1


@dataclass
class Annot:
    """A parcellation: per-vertex label codes and the colortable behind them.

    Attributes
    ----------
    vertex_indices : numpy.ndarray of int32
        Vertex index of every entry.
    vertex_labels : numpy.ndarray of int32
        Label code of every entry as stored in the file.  Codes with an alpha
        of 128 or more exceed the int32 range and are stored wrapped; lookups
        compare them with ``colortable.label`` as unsigned 32-bit values.
    colortable : Colortable
    """
    vertex_indices: np.ndarray
    vertex_labels: np.ndarray
    colortable: Colortable

    def __post_init__(self):
        self.vertex_indices = np.asarray(self.vertex_indices, dtype=np.int32).ravel()
        self.vertex_labels = _as_int32_codes(self.vertex_labels)
        if self.vertex_indices.size != self.vertex_labels.size:
            raise ValueError(
                f"Annotation has {self.vertex_indices.size} vertex indices but "
                f"{self.vertex_labels.size} labels."
            )

    @property
    def num_vertices(self):
        return int(self.vertex_indices.size)

    def vertex_regions(self):
        """Return the colortable entry index of every vertex, -1 if unknown."""
        ct_labels = self.colortable.label
        if ct_labels.size == 0:
            return np.full(self.num_vertices, -1, dtype=np.intp)
        order = np.argsort(ct_labels, kind="stable")
        sorted_labels = ct_labels[order]
        labels = _unsigned_codes(self.vertex_labels)
        pos = np.clip(np.searchsorted(sorted_labels, labels), 0, sorted_labels.size - 1)
        found = sorted_labels[pos] == labels
        return np.where(found, order[pos], -1)

    def vertex_region_names(self):
        """Return the region name of every vertex, ``""`` where the label is unknown."""
        names = self.colortable.name
        return [names[idx] if idx >= 0 else "" for idx in self.vertex_regions().tolist()]

    def region_vertices(self, region_name):
        """Return the vertex indices assigned to *region_name*.

        An unknown region name gives an empty array.
        """
        idx = self.colortable.get_region_idx(region_name)
        if idx < 0:
            return np.empty(0, dtype=np.int32)
        return self.region_vertices_by_label(self.colortable.label[idx])

    def region_vertices_by_label(self, label):
        """Return the vertex indices whose label code equals *label*."""
        return self.vertex_indices[_unsigned_codes(self.vertex_labels) == int(label) & _CODE_MASK]

    def vertex_colors(self, alpha=False):
        """Return the colortable color of every vertex.

        Parameters
        ----------
        alpha : bool, default=False
            Include the alpha channel.

        Returns
        -------
        numpy.ndarray, shape (num_vertices, 3) or (num_vertices, 4), dtype uint8
            Vertices whose label is not in the colortable are black (all zero).
        """
        ct = self.colortable
        channels = (ct.r, ct.g, ct.b, ct.a) if alpha else (ct.r, ct.g, ct.b)
        # trailing all-zero row, picked up by region index -1
        table = np.vstack(
            (np.column_stack(channels), np.zeros((1, len(channels)), dtype=np.int32))
        )
        return table[self.vertex_regions()].astype(np.uint8)


def _read_colortable(fobj, num_entries, name):
    orig_len = _binary.read_i32(fobj)
    if orig_len < 0:
        raise FormatError(f"Annotation {name} has a negative colortable file name length.")
    _binary.skip_bytes(fobj, orig_len)

    num_entries_dup = _binary.read_i32(fobj)
    if num_entries_dup != num_entries:
        warnings.warn(
            f"Annotation {name} states {num_entries} colortable entries but repeats "
            f"the count as {num_entries_dup}; using {num_entries}.",
            ColortableCountWarning,
            stacklevel=3,
        )

    ids = np.empty(num_entries, dtype=np.int32)
    rgba = np.empty((num_entries, 4), dtype=np.int32)
    names = []
    for i in range(num_entries):
        ids[i] = _binary.read_i32(fobj)
        name_len = _binary.read_i32(fobj)
        if name_len < 0:
            raise FormatError(
                f"Annotation {name} has a negative name length for colortable entry {i}."
            )
        # drop the trailing null terminator
        raw = _binary.read_exact(fobj, name_len)[:-1]
        names.append(raw.decode("utf-8", errors="replace"))
        rgba[i] = _binary.read_array(fobj, np.int32, 4)
    return Colortable.from_rgba(names, rgba, ids=ids)


def read_annot(source):
    """Read an annotation file.

    Parameters
    ----------
    source : str, os.PathLike or binary file-like
        Path to the ``.annot`` file or an open binary stream.

    Returns
    -------
    Annot

    Raises
    ------
    TruncatedFileError
        If the stream ends before the annotation is complete.
    MissingColortableError
        If the file has no colortable.
    UnsupportedFormatError
        If the colortable uses the old layout or a version other than 2.

    Warns
    -----
    ColortableCountWarning
        If the two colortable entry counts in the file disagree.
    """
    with _binary.open_binary(source) as fobj:
        name = _binary.stream_name(fobj)
        num_vertices = _binary.read_i32(fobj)
        if num_vertices < 0:
            raise FormatError(f"Annotation {name} declares a negative vertex count {num_vertices}.")
        pairs = _binary.read_array(fobj, np.int32, 2 * num_vertices).reshape(-1, 2)

        has_colortable = _binary.read_i32(fobj)
        if has_colortable != 1:
            raise MissingColortableError(
                f"Annotation {name} has no colortable (flag {has_colortable}); "
                f"annotations without a colortable are not supported."
            )
        version = _binary.read_i32(fobj)
        if version > 0:
            raise UnsupportedFormatError(
                f"Annotation {name} uses the old colortable format; only version "
                f"{COLORTABLE_VERSION} is supported."
            )
        if -version != COLORTABLE_VERSION:
            raise UnsupportedFormatError(
                f"Annotation {name} has colortable version {-version}; only version "
                f"{COLORTABLE_VERSION} is supported."
            )
        num_entries = _binary.read_i32(fobj)
        if num_entries < 0:
            raise FormatError(f"Annotation {name} declares {num_entries} colortable entries.")
        colortable = _read_colortable(fobj, num_entries, name)

    logger.debug(
        "Read annotation %s: %d vertices, %d regions.", name, num_vertices, num_entries
    )
    return Annot(pairs[:, 0], pairs[:, 1], colortable)


def write_annot(target, annot, orig_filename="NOFILE"):
    """Write an annotation with a version 2 colortable.

    Parameters
    ----------
    target : str, os.PathLike or binary file-like
        Output path or an open binary stream.
    annot : Annot
        The annotation to write.
    orig_filename : str, optional
        Colortable file name recorded in the header.
    """
    ct = annot.colortable
    pairs = np.column_stack((annot.vertex_indices, annot.vertex_labels))
    with _binary.open_binary(target, "wb") as fobj:
        _binary.write_i32(fobj, annot.num_vertices)
        _binary.write_array(fobj, pairs, np.int32)
        _binary.write_i32(fobj, 1)
        _binary.write_i32(fobj, -COLORTABLE_VERSION)
        _binary.write_i32(fobj, ct.num_entries)
        _write_string(fobj, orig_filename)
        _binary.write_i32(fobj, ct.num_entries)
        for i in range(ct.num_entries):
            _binary.write_i32(fobj, int(ct.id[i]))
            _write_string(fobj, ct.name[i])
            _binary.write_array(fobj, [ct.r[i], ct.g[i], ct.b[i], ct.a[i]], np.int32)
    logger.debug(
        "Wrote annotation: %d vertices, %d regions.", annot.num_vertices, ct.num_entries
    )


def _write_string(fobj, text):
    """Write a length-prefixed, null-terminated string."""
    data = text.encode("utf-8") + b"\x00"
    _binary.write_i32(fobj, len(data))
    fobj.write(data)
