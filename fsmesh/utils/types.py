"""Contains the types used in fsmesh.

This module defines small enumeration types shared by the format codecs.

Classes
-------
MghDtype
    Voxel data types supported in MGH/MGZ volumes.

Functions
---------
mgh_dtype_from_numpy
    Return the :class:`MghDtype` matching a numpy dtype.
"""

import enum

import numpy as np


class MghDtype(enum.IntEnum):
    """Voxel data type codes stored in the ``type`` field of an MGH header.

    Only four of the FreeSurfer ``MRI_*`` types are supported; each maps
    one-to-one onto a fixed-width numpy dtype, so the dtype of an MGH data
    array determines its type code and vice versa.

    Attributes
    ----------
    UCHAR : int
        ``MRI_UCHAR``, 8-bit unsigned integers.
    INT : int
        ``MRI_INT``, 32-bit signed integers.
    FLOAT : int
        ``MRI_FLOAT``, 32-bit IEEE-754 floats.
    SHORT : int
        ``MRI_SHORT``, 16-bit signed integers.
    """
    UCHAR = 0
    INT = 1
    FLOAT = 3
    SHORT = 4

    @property
    def numpy_dtype(self) -> np.dtype:
        """Native-order numpy dtype holding values of this type."""
        return np.dtype(_NUMPY_DTYPES[self])

    @property
    def itemsize(self) -> int:
        """Size in bytes of one value of this type."""
        return self.numpy_dtype.itemsize

    @classmethod
    def supported_codes(cls) -> str:
        return ", ".join(f"{member.value} ({member.name})" for member in cls)


_NUMPY_DTYPES = {
    MghDtype.UCHAR: np.uint8,
    MghDtype.INT: np.int32,
    MghDtype.FLOAT: np.float32,
    MghDtype.SHORT: np.int16,
}


def mgh_dtype_from_numpy(dtype) -> MghDtype:
    """Return the :class:`MghDtype` for a numpy dtype.

    Parameters
    ----------
    dtype : numpy.dtype or type
        Any dtype-like; byte order is ignored.

    Returns
    -------
    MghDtype

    Raises
    ------
    ValueError
        If no supported MGH type stores values of *dtype* exactly.
    """
    dtype = np.dtype(dtype).newbyteorder("=")
    for member, np_type in _NUMPY_DTYPES.items():
        if dtype == np.dtype(np_type):
            return member
    raise ValueError(
        f"numpy dtype {dtype} has no MGH equivalent; supported dtypes are "
        f"uint8, int32, float32 and int16."
    )
