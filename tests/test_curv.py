"""Tests for fsmesh/io/curv.py."""

import io
import os
import tempfile

import numpy as np
import pytest

from fsmesh.io.curv import CURV_MAGIC, Curv, read_curv, read_curv_data, write_curv
from fsmesh.io.errors import MagicNumberWarning, TruncatedFileError, UnsupportedFormatError


def _curv_bytes(values, magic=b"\xff\xff\xff", num_faces=100, vals_per_vertex=1, count=None):
    values = np.asarray(values, dtype=np.float32)
    count = values.size if count is None else count
    header = np.array([count, num_faces, vals_per_vertex], dtype=">i4").tobytes()
    return magic + header + values.astype(">f4").tobytes()


def _tmp_path(suffix=""):
    fd, path = tempfile.mkstemp(suffix=suffix)
    os.close(fd)
    return path


class TestReadCurv:
    def test_basic(self):
        values = [0.5, -1.25, 3.0, 0.0]
        curv = read_curv(io.BytesIO(_curv_bytes(values, num_faces=7)))
        assert isinstance(curv, Curv)
        assert curv.num_vertices == 4
        assert curv.num_faces == 7
        assert curv.num_values_per_vertex == 1
        assert curv.data.dtype == np.float32
        np.testing.assert_array_equal(curv.data, values)

    def test_read_curv_data_from_path(self):
        path = _tmp_path()
        try:
            with open(path, "wb") as fh:
                fh.write(_curv_bytes([1.0, 2.0]))
            np.testing.assert_array_equal(read_curv_data(path), [1.0, 2.0])
        finally:
            os.unlink(path)

    def test_wrong_magic_warns_and_reads(self):
        with pytest.warns(MagicNumberWarning, match="magic number"):
            curv = read_curv(io.BytesIO(_curv_bytes([4.0], magic=b"\x00\x00\x01")))
        np.testing.assert_array_equal(curv.data, [4.0])

    def test_multiple_values_per_vertex_raises(self):
        with pytest.raises(UnsupportedFormatError, match="3 values per vertex"):
            read_curv(io.BytesIO(_curv_bytes([1.0, 2.0, 3.0], vals_per_vertex=3, count=1)))

    def test_truncated_data_raises(self):
        data = _curv_bytes([1.0, 2.0, 3.0], count=5)
        with pytest.raises(TruncatedFileError):
            read_curv(io.BytesIO(data))

    def test_truncated_header_raises(self):
        with pytest.raises(TruncatedFileError):
            read_curv(io.BytesIO(b"\xff\xff\xff\x00\x00"))

    def test_nan_values_survive(self):
        curv = read_curv(io.BytesIO(_curv_bytes([np.nan, 1.0])))
        assert np.isnan(curv.data[0])


class TestWriteCurv:
    def test_layout(self):
        buf = io.BytesIO()
        write_curv(buf, np.array([1.5, -2.0]), num_faces=12)
        assert buf.getvalue() == _curv_bytes([1.5, -2.0], num_faces=12)

    def test_round_trip(self):
        values = np.linspace(-3, 3, 101).astype(np.float32)
        path = _tmp_path()
        try:
            write_curv(path, values)
            curv = read_curv(path)
        finally:
            os.unlink(path)
        np.testing.assert_array_equal(curv.data, values)
        assert curv.num_faces == 100000

    def test_write_curv_object(self):
        buf = io.BytesIO()
        write_curv(buf, Curv(data=np.zeros(3, dtype=np.float32), num_vertices=3, num_faces=1))
        buf.seek(0)
        assert read_curv(buf).num_faces == 1

    def test_non_1d_raises_before_writing(self):
        buf = io.BytesIO()
        with pytest.raises(ValueError, match="1-D"):
            write_curv(buf, np.zeros((2, 2)))
        assert buf.getvalue() == b""

    def test_magic_constant(self):
        assert CURV_MAGIC == 0xFFFFFF


class TestNibabelInterop:
    def test_nibabel_reads_ours(self):
        fsio = pytest.importorskip("nibabel.freesurfer")
        values = np.random.default_rng(0).normal(size=50).astype(np.float32)
        path = _tmp_path()
        try:
            write_curv(path, values)
            np.testing.assert_array_equal(fsio.read_morph_data(path), values)
        finally:
            os.unlink(path)

    def test_we_read_nibabels(self):
        fsio = pytest.importorskip("nibabel.freesurfer")
        values = np.random.default_rng(1).uniform(0, 5, size=33).astype(np.float32)
        path = _tmp_path()
        try:
            fsio.write_morph_data(path, values)
            np.testing.assert_array_equal(read_curv_data(path), values)
        finally:
            os.unlink(path)
