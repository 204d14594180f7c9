"""Big-endian scalar and array primitives over sequential byte streams.

All FreeSurfer binary formats store integers and floats in big-endian byte
order.  The host byte order is detected once, when this module is imported,
and every primitive below reuses that result to decide whether values must
be byte-swapped after reading or before writing.

The primitives only ever call ``read(n)`` / ``write(b)`` on the stream they
are given, so they work on plain files, :class:`io.BytesIO` buffers and
decompressing streams such as :class:`gzip.GzipFile` alike.
"""

import contextlib
import gzip
import os
import sys

import numpy as np

from .errors import TruncatedFileError

SYSTEM_BYTEORDER = sys.byteorder
NEEDS_SWAP = SYSTEM_BYTEORDER != "big"

# Paths with these suffixes are transparently (de)compressed.
_GZIP_EXTS = (".gz", ".mgz")


def stream_name(fobj):
    """Return a printable name for *fobj* to use in error messages."""
    name = getattr(fobj, "name", None)
    if isinstance(name, (str, bytes, os.PathLike)):
        return repr(os.fsdecode(name))
    return f"<{type(fobj).__name__}>"


@contextlib.contextmanager
def open_binary(source, mode="rb"):
    """Yield a binary stream for *source*, closing it only if we opened it.

    Parameters
    ----------
    source : str, os.PathLike or file-like
        A path, or an already open binary stream.  Paths ending in ``.gz``
        or ``.mgz`` are opened through :func:`gzip.open`.
    mode : {'rb', 'wb'}
        Open mode used for paths.

    Yields
    ------
    file-like
        The opened stream, or *source* itself when it already is a stream.
        Streams passed in by the caller are never closed here.
    """
    attr = "read" if "r" in mode else "write"
    if hasattr(source, attr):
        yield source
        return
    path = os.fspath(source)
    if path.lower().endswith(_GZIP_EXTS):
        fobj = gzip.open(path, mode)
    else:
        fobj = open(path, mode)
    with fobj:
        yield fobj


def read_exact(fobj, nbytes):
    """Read exactly *nbytes* bytes, raising if the stream ends early."""
    chunks = []
    remaining = nbytes
    while remaining > 0:
        chunk = fobj.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    buf = b"".join(chunks)
    if len(buf) != nbytes:
        raise TruncatedFileError(
            f"Expected {nbytes} bytes but the stream ended after {len(buf)} "
            f"in {stream_name(fobj)}."
        )
    return buf


def skip_bytes(fobj, nbytes, allow_seek=False):
    """Advance *fobj* by *nbytes*.

    With ``allow_seek=False`` the bytes are consumed with reads, which is
    the only option on non-seekable (e.g. decompressing) streams.
    """
    if nbytes <= 0:
        return
    if allow_seek:
        fobj.seek(nbytes, os.SEEK_CUR)
    else:
        read_exact(fobj, nbytes)


def read_array(fobj, dtype, count):
    """Read *count* big-endian values of *dtype* into a native-order array."""
    dtype = np.dtype(dtype).newbyteorder("=")
    if count == 0:
        return np.empty(0, dtype=dtype)
    buf = read_exact(fobj, dtype.itemsize * count)
    arr = np.frombuffer(buf, dtype=dtype, count=count)
    if NEEDS_SWAP and dtype.itemsize > 1:
        return arr.byteswap()
    return arr.copy()


def write_array(fobj, values, dtype):
    """Write *values* as big-endian *dtype* to *fobj*."""
    arr = np.ascontiguousarray(values, dtype=np.dtype(dtype).newbyteorder("="))
    if NEEDS_SWAP and arr.dtype.itemsize > 1:
        arr = arr.byteswap()
    fobj.write(arr.tobytes())


def read_u8(fobj):
    return int(read_array(fobj, np.uint8, 1)[0])


def read_i16(fobj):
    return int(read_array(fobj, np.int16, 1)[0])


def read_i32(fobj):
    return int(read_array(fobj, np.int32, 1)[0])


def read_f32(fobj):
    return float(read_array(fobj, np.float32, 1)[0])


def read_i24(fobj):
    """Read a 3-byte big-endian integer, as used for FreeSurfer magic numbers."""
    b1, b2, b3 = read_exact(fobj, 3)
    return ((b1 << 16) + (b2 << 8) + b3) & 0x00FFFFFF


def write_u8(fobj, value):
    write_array(fobj, [value], np.uint8)


def write_i16(fobj, value):
    write_array(fobj, [value], np.int16)


def write_i32(fobj, value):
    write_array(fobj, [value], np.int32)


def write_f32(fobj, value):
    write_array(fobj, [value], np.float32)


def write_i24(fobj, value):
    """Write the low three bytes of *value* in big-endian order."""
    value &= 0x00FFFFFF
    fobj.write(bytes(((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)))


def read_line(fobj):
    """Consume one ``\\n``-terminated line and return it without the newline.

    Bytes are read one at a time so that nothing past the newline is
    consumed, whatever buffering the stream does.
    """
    line = bytearray()
    while True:
        char = fobj.read(1)
        if not char:
            raise TruncatedFileError(
                f"Stream ended inside a text line (read {len(line)} bytes without "
                f"a newline) in {stream_name(fobj)}."
            )
        if char == b"\n":
            return bytes(line)
        line += char
