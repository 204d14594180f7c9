"""Reader and writer for FreeSurfer MGH volumes (and gzipped MGZ).

Layout (all values big-endian)::

    int32       version, must be 1
    4*int32     dimensions dim1..dim4
    int32       data type code (see :class:`~fsmesh.utils.types.MghDtype`)
    int32       degrees of freedom
    int16       RAS-good flag
    15*float32  only if the flag is 1: voxel sizes (3), direction
                cosines Mdc (9), center Pxyz_c (3)
    ...         zero padding up to byte 284
    payload     dim1*dim2*dim3*dim4 values of the header's data type,
                first dimension varying fastest

Anything after the payload (the optional scan-parameter footer) is ignored.

The header padding can be skipped in two ways.  Random-access sources
seek over it; sequential sources, such as a gzip stream decompressing on
the fly, must read and discard it.  :func:`read_mgh_seekable` and
:func:`read_mgh_sequential` implement the two strategies on top of the
same parser, and :func:`read_mgh` picks one from the capabilities of the
stream.
"""

import gzip
import logging
from dataclasses import dataclass, field

import numpy as np

from ..utils.types import MghDtype, mgh_dtype_from_numpy
from . import _binary
from .errors import FormatError, UnsupportedFormatError

logger = logging.getLogger(__name__)

MGH_VERSION = 1
HEADER_SIZE = 284
# version, 4 dims, dtype, dof as int32 plus the int16 RAS flag
_FIXED_HEADER_BYTES = 7 * 4 + 2
_RAS_BLOCK_BYTES = 15 * 4


@dataclass
class MghHeader:
    """Header of an MGH volume.

    Attributes
    ----------
    dim1, dim2, dim3, dim4 : int
        Volume dimensions; ``dim4`` is the number of frames.
    dtype : MghDtype
        Data type of the payload.
    dof : int
        Degrees of freedom, usually 0.
    ras_good_flag : int
        1 if the voxel sizes, ``Mdc`` and ``Pxyz_c`` below are valid.
        Those fields are only read and written when the flag is 1.
    xsize, ysize, zsize : float
        Voxel sizes in mm.
    Mdc : numpy.ndarray, shape (9,), dtype float32
        Direction cosines, stored column by column.
    Pxyz_c : numpy.ndarray, shape (3,), dtype float32
        RAS coordinates of the volume center.
    """
    dim1: int
    dim2: int = 1
    dim3: int = 1
    dim4: int = 1
    dtype: MghDtype = MghDtype.FLOAT
    dof: int = 0
    ras_good_flag: int = 0
    xsize: float = 1.0
    ysize: float = 1.0
    zsize: float = 1.0
    Mdc: np.ndarray = field(default_factory=lambda: np.eye(3, dtype=np.float32).ravel())
    Pxyz_c: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float32))

    def __post_init__(self):
        self.dtype = MghDtype(self.dtype)
        self.Mdc = np.asarray(self.Mdc, dtype=np.float32).ravel()
        self.Pxyz_c = np.asarray(self.Pxyz_c, dtype=np.float32).ravel()

    @property
    def shape(self):
        return (self.dim1, self.dim2, self.dim3, self.dim4)

    @property
    def num_values(self):
        return self.dim1 * self.dim2 * self.dim3 * self.dim4


def _coerce_payload(header, data):
    """Return *data* as a flat array of the header's dtype, or raise ValueError."""
    try:
        mgh_dtype = MghDtype(header.dtype)
    except ValueError:
        raise ValueError(
            f"Unsupported MGH data type {header.dtype!r}; supported codes are "
            f"{MghDtype.supported_codes()}."
        ) from None
    arr = np.asarray(data)
    if arr.ndim > 1:
        shape = arr.shape + (1,) * (4 - arr.ndim)
        if arr.ndim > 4 or shape != header.shape:
            raise ValueError(
                f"MGH data of shape {arr.shape} does not match header dimensions "
                f"{header.shape}."
            )
        arr = arr.ravel(order="F")
    if arr.size != header.num_values:
        raise ValueError(
            f"MGH data holds {arr.size} values but the header dimensions "
            f"{header.shape} require {header.num_values}."
        )
    target = mgh_dtype.numpy_dtype
    if arr.dtype != target:
        if not np.can_cast(arr.dtype, target, casting="safe"):
            raise ValueError(
                f"MGH data of dtype {arr.dtype} cannot be stored as {mgh_dtype.name} "
                f"({target}) without loss."
            )
        arr = arr.astype(target)
    return arr


class Mgh:
    """An MGH volume: header plus one flat, typed data array.

    The dtype of :attr:`data` always equals ``header.dtype.numpy_dtype``,
    so the header's type code and the payload cannot disagree.

    Parameters
    ----------
    header : MghHeader
        Volume header.
    data : array-like
        Either a flat array of ``header.num_values`` values in file order,
        or an array with the header's (up to 4-D) shape, which is
        flattened in column-major order.  Values are converted to the
        header's dtype when that is lossless.

    Raises
    ------
    ValueError
        If the size or dtype of *data* does not fit the header.
    """

    def __init__(self, header, data):
        self.header = header
        self.data = _coerce_payload(header, data)

    def __repr__(self):
        return f"Mgh(shape={self.header.shape}, dtype={self.header.dtype.name})"

    @classmethod
    def from_array(cls, volume, **header_fields):
        """Build an MGH volume whose dimensions and dtype come from *volume*.

        Parameters
        ----------
        volume : numpy.ndarray
            1-D to 4-D array of dtype uint8, int32, float32 or int16.
        **header_fields
            Additional :class:`MghHeader` fields such as ``ras_good_flag``.
        """
        volume = np.asarray(volume)
        if not 1 <= volume.ndim <= 4:
            raise ValueError(f"MGH volumes have 1 to 4 dimensions, got {volume.ndim}.")
        dims = volume.shape + (1,) * (4 - volume.ndim)
        header = MghHeader(*dims, dtype=mgh_dtype_from_numpy(volume.dtype), **header_fields)
        return cls(header, volume)

    @property
    def volume(self):
        """The data as a 4-D array indexed ``[i, j, k, frame]``."""
        return self.data.reshape(self.header.shape, order="F")

    def at(self, i, j, k, frame=0):
        """Return the value of voxel ``(i, j, k)`` in *frame*.

        Raises
        ------
        IndexError
            If any index is outside the volume (negative indices included).
        """
        index = (i, j, k, frame)
        if any(not 0 <= idx < dim for idx, dim in zip(index, self.header.shape)):
            raise IndexError(f"Voxel index {index} outside volume of shape {self.header.shape}.")
        return self.volume[index].item()


def read_mgh_header(fobj, allow_seek=False):
    """Parse the 284-byte MGH header at the current position of *fobj*.

    Parameters
    ----------
    fobj : binary file-like
        Stream positioned at the start of the header.
    allow_seek : bool, default=False
        Skip the header padding with ``seek`` instead of reading it.

    Returns
    -------
    MghHeader
        On return *fobj* is positioned at the first payload byte.

    Raises
    ------
    UnsupportedFormatError
        If the version is not 1 or the data type is not supported.
    FormatError
        If a dimension is negative.
    TruncatedFileError
        If the stream ends inside the header.
    """
    name = _binary.stream_name(fobj)
    version = _binary.read_i32(fobj)
    if version != MGH_VERSION:
        raise UnsupportedFormatError(
            f"MGH file {name} has format version {version}; only version "
            f"{MGH_VERSION} is supported."
        )
    dims = _binary.read_array(fobj, np.int32, 4).tolist()
    dtype_code = _binary.read_i32(fobj)
    dof = _binary.read_i32(fobj)
    ras_good_flag = _binary.read_i16(fobj)
    try:
        dtype = MghDtype(dtype_code)
    except ValueError:
        raise UnsupportedFormatError(
            f"MGH file {name} has unsupported data type {dtype_code}; supported "
            f"codes are {MghDtype.supported_codes()}."
        ) from None
    if min(dims) < 0:
        raise FormatError(f"MGH file {name} has negative dimensions {dims}.")

    header = MghHeader(*dims, dtype=dtype, dof=dof, ras_good_flag=ras_good_flag)
    consumed = _FIXED_HEADER_BYTES
    if ras_good_flag == 1:
        header.xsize, header.ysize, header.zsize = _binary.read_array(fobj, np.float32, 3).tolist()
        header.Mdc = _binary.read_array(fobj, np.float32, 9)
        header.Pxyz_c = _binary.read_array(fobj, np.float32, 3)
        consumed += _RAS_BLOCK_BYTES
    _binary.skip_bytes(fobj, HEADER_SIZE - consumed, allow_seek=allow_seek)
    return header


def _read_mgh(fobj, allow_seek):
    header = read_mgh_header(fobj, allow_seek=allow_seek)
    data = _binary.read_array(fobj, header.dtype.numpy_dtype, header.num_values)
    logger.debug(
        "Read MGH volume %s of type %s from %s.",
        header.shape, header.dtype.name, _binary.stream_name(fobj),
    )
    return Mgh(header, data)


def read_mgh_seekable(fobj):
    """Read an MGH volume from a random-access stream, seeking past the padding."""
    return _read_mgh(fobj, allow_seek=True)


def read_mgh_sequential(fobj):
    """Read an MGH volume from a sequential stream, consuming the padding.

    Only ``read`` is called on *fobj*, so this works on pipes and
    decompressing streams that cannot seek.
    """
    return _read_mgh(fobj, allow_seek=False)


def _is_seekable(fobj):
    # GzipFile claims to be seekable but emulates forward seeks by reading.
    if isinstance(fobj, gzip.GzipFile):
        return False
    seekable = getattr(fobj, "seekable", None)
    return bool(seekable is not None and seekable())


def read_mgh(source, allow_seek=None):
    """Read an MGH or MGZ volume.

    Parameters
    ----------
    source : str, os.PathLike or binary file-like
        Path to a ``.mgh`` file or a gzipped ``.mgz`` file, or an open
        binary stream positioned at the start of the header.
    allow_seek : bool or None, optional
        Force the seeking (True) or sequential (False) header skip.  By
        default the stream's ``seekable()`` decides.

    Returns
    -------
    Mgh
    """
    with _binary.open_binary(source) as fobj:
        if allow_seek is None:
            allow_seek = _is_seekable(fobj)
        if allow_seek:
            return read_mgh_seekable(fobj)
        return read_mgh_sequential(fobj)


def read_mgh_data(source):
    """Read an MGH/MGZ file and return its flat data array."""
    return read_mgh(source).data


def write_mgh(target, mgh):
    """Write an MGH volume.

    Parameters
    ----------
    target : str, os.PathLike or binary file-like
        Output path (``.mgz`` paths are gzip-compressed) or an open binary
        stream.
    mgh : Mgh
        The volume to write.

    Raises
    ------
    ValueError
        If the data type is unsupported, the data size does not match the
        header dimensions, or the RAS fields have the wrong length.  All
        checks happen before anything is written.
    """
    header = mgh.header
    data = _coerce_payload(header, mgh.data)
    mdc = np.asarray(header.Mdc, dtype=np.float32).ravel()
    pxyz_c = np.asarray(header.Pxyz_c, dtype=np.float32).ravel()
    if header.ras_good_flag == 1 and (mdc.size != 9 or pxyz_c.size != 3):
        raise ValueError(
            f"MGH header needs 9 Mdc and 3 Pxyz_c values, got {mdc.size} and {pxyz_c.size}."
        )
    dtype = MghDtype(header.dtype)

    with _binary.open_binary(target, "wb") as fobj:
        _binary.write_i32(fobj, MGH_VERSION)
        _binary.write_array(fobj, header.shape, np.int32)
        _binary.write_i32(fobj, int(dtype))
        _binary.write_i32(fobj, header.dof)
        _binary.write_i16(fobj, header.ras_good_flag)
        written = _FIXED_HEADER_BYTES
        if header.ras_good_flag == 1:
            _binary.write_array(fobj, [header.xsize, header.ysize, header.zsize], np.float32)
            _binary.write_array(fobj, mdc, np.float32)
            _binary.write_array(fobj, pxyz_c, np.float32)
            written += _RAS_BLOCK_BYTES
        fobj.write(b"\x00" * (HEADER_SIZE - written))
        _binary.write_array(fobj, data, dtype.numpy_dtype)
    logger.debug("Wrote MGH volume %s of type %s.", header.shape, dtype.name)
