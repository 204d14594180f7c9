"""Tests for fsmesh/io/label.py."""

import io
import os
import tempfile

import numpy as np
import pytest

from fsmesh.io.errors import FormatError, LabelParseError
from fsmesh.io.label import Label, read_label, write_label

_LABEL_TEXT = """\
#!ascii label  , from subject bert vox2ras=TkReg
3
1234  -10.000  20.000  30.000 0.0000000000
1240  -11.000  21.000  31.000 0.5000000000
1300  -12.500  22.000  29.000 1.0000000000
"""


def _write_tmp(content, suffix=".label"):
    """Write *content* to a named temp file, return its path."""
    fd, path = tempfile.mkstemp(suffix=suffix)
    with os.fdopen(fd, "w") as fh:
        fh.write(content)
    return path


def _sample_label():
    return Label(
        vertex=[5, 2, 9],
        coord_x=[1.0, 2.0, 3.0],
        coord_y=[-1.0, -2.0, -3.0],
        coord_z=[0.5, 0.25, 0.125],
        value=[0.0, 1.0, 2.0],
    )


class TestReadLabel:
    def test_from_path(self):
        path = _write_tmp(_LABEL_TEXT)
        try:
            label = read_label(path)
        finally:
            os.unlink(path)
        assert label.num_entries == 3
        np.testing.assert_array_equal(label.vertex, [1234, 1240, 1300])
        np.testing.assert_allclose(label.coord_x, [-10.0, -11.0, -12.5])
        np.testing.assert_allclose(label.coord_z, [30.0, 31.0, 29.0])
        np.testing.assert_allclose(label.value, [0.0, 0.5, 1.0])
        assert label.vertex.dtype == np.int32
        assert label.value.dtype == np.float32

    def test_from_text_stream(self):
        label = read_label(io.StringIO(_LABEL_TEXT))
        assert label.num_entries == 3

    def test_from_binary_stream(self):
        label = read_label(io.BytesIO(_LABEL_TEXT.encode()))
        np.testing.assert_array_equal(label.vertex, [1234, 1240, 1300])

    def test_empty_label(self):
        label = read_label(io.StringIO("#!ascii label\n0\n"))
        assert label.num_entries == 0

    def test_trailing_blank_lines_ignored(self):
        assert read_label(io.StringIO(_LABEL_TEXT + "\n\n")).num_entries == 3

    def test_count_mismatch_raises(self):
        text = _LABEL_TEXT.replace("\n3\n", "\n4\n")
        with pytest.raises(LabelParseError, match="declares 4 entries but contains 3"):
            read_label(io.StringIO(text))

    def test_unparsable_line_raises(self):
        text = _LABEL_TEXT.replace("1240  -11.000", "abc  -11.000")
        with pytest.raises(LabelParseError, match="Line 4"):
            read_label(io.StringIO(text))

    def test_short_line_raises(self):
        text = _LABEL_TEXT.replace(" 0.5000000000", "")
        with pytest.raises(LabelParseError, match="4 fields"):
            read_label(io.StringIO(text))

    def test_bad_count_line_raises(self):
        with pytest.raises(LabelParseError, match="entry count"):
            read_label(io.StringIO("#!ascii label\nthree\n"))

    def test_missing_count_line_raises(self):
        with pytest.raises(LabelParseError):
            read_label(io.StringIO("#!ascii label\n"))

    def test_parse_error_is_format_error(self):
        assert issubclass(LabelParseError, FormatError)
        assert issubclass(LabelParseError, ValueError)


class TestVertInLabel:
    def test_mask(self):
        mask = _sample_label().vert_in_label(12)
        assert mask.shape == (12,)
        assert mask.dtype == bool
        np.testing.assert_array_equal(np.flatnonzero(mask), [2, 5, 9])

    def test_exact_fit(self):
        assert _sample_label().vert_in_label(10)[9]

    def test_too_small_raises(self):
        with pytest.raises(ValueError, match="vertex 9"):
            _sample_label().vert_in_label(9)

    def test_empty_label(self):
        empty = Label([], [], [], [], [])
        assert not empty.vert_in_label(4).any()


class TestLabelModel:
    def test_parallel_lengths_enforced(self):
        with pytest.raises(ValueError, match="coord_y"):
            Label([1, 2], [0, 0], [0], [0, 0], [0, 0])

    def test_coords(self):
        coords = _sample_label().coords
        assert coords.shape == (3, 3)
        np.testing.assert_allclose(coords[1], [2.0, -2.0, 0.25])


class TestWriteLabel:
    def test_layout(self):
        buf = io.StringIO()
        write_label(buf, _sample_label())
        lines = buf.getvalue().splitlines()
        assert lines[0] == "#!ascii label , from fsmesh"
        assert lines[1] == "3"
        assert lines[2].split() == ["5", "1.000", "-1.000", "0.500", "0.0000000000"]
        assert len(lines) == 5

    def test_round_trip_preserves_order(self):
        label = _sample_label()
        path = _write_tmp("")
        try:
            write_label(path, label)
            loaded = read_label(path)
        finally:
            os.unlink(path)
        np.testing.assert_array_equal(loaded.vertex, label.vertex)
        np.testing.assert_allclose(loaded.coord_x, label.coord_x, atol=1e-3)
        np.testing.assert_allclose(loaded.value, label.value)

    def test_nibabel_reads_ours(self):
        fsio = pytest.importorskip("nibabel.freesurfer")
        path = _write_tmp("")
        try:
            write_label(path, _sample_label())
            vertices, scalars = fsio.read_label(path, read_scalars=True)
        finally:
            os.unlink(path)
        np.testing.assert_array_equal(vertices, [5, 2, 9])
        np.testing.assert_allclose(scalars, [0.0, 1.0, 2.0])
