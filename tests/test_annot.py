"""Tests for fsmesh/io/annot.py."""

import io
import os
import tempfile

import numpy as np
import pytest

from fsmesh.io.annot import Annot, Colortable, compute_label, read_annot, write_annot
from fsmesh.io.errors import (
    ColortableCountWarning,
    MissingColortableError,
    TruncatedFileError,
    UnsupportedFormatError,
)

N_REGIONS = 36
N_VERTICES = 100

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _colortable(n_regions=N_REGIONS, alpha=0):
    idx = np.arange(n_regions)
    rgba = np.column_stack((idx * 7 + 1, (idx * 13) % 256, (idx * 29) % 256, np.full(n_regions, alpha)))
    names = [f"region{i:02d}" for i in idx]
    return Colortable.from_rgba(names, rgba)


def _annot(alpha=0):
    ct = _colortable(alpha=alpha)
    vertices = np.arange(N_VERTICES)
    return Annot(vertices, ct.label[vertices % N_REGIONS], ct)


def _i4(*values):
    return np.array(values, dtype=">i4").tobytes()


def _string(text):
    data = text.encode() + b"\x00"
    return _i4(len(data)) + data


def _annot_bytes(flag=1, version=-2, n_entries=2, n_entries_dup=None, truncate_entries=False):
    """Two vertices, two regions ("unknown", "cortex")."""
    n_entries_dup = n_entries if n_entries_dup is None else n_entries_dup
    data = _i4(2) + _i4(0, 0, 1, 256)  # vertex 0 -> label 0, vertex 1 -> label 256 (g=1)
    data += _i4(flag)
    if flag != 1:
        return data
    data += _i4(version)
    if version != -2:
        return data + _i4(0) * 8
    data += _i4(n_entries) + _string("colortable.txt") + _i4(n_entries_dup)
    data += _i4(0) + _string("unknown") + _i4(0, 0, 0, 0)
    if truncate_entries:
        return data
    data += _i4(1) + _string("cortex") + _i4(0, 1, 0, 0)
    return data


def _tmp_path(suffix=".annot"):
    fd, path = tempfile.mkstemp(suffix=suffix)
    os.close(fd)
    return path


# ---------------------------------------------------------------------------
# Colortable
# ---------------------------------------------------------------------------

class TestColortable:
    def test_label_formula(self):
        assert compute_label(1, 2, 3, 4) == 1 + 2 * 256 + 3 * 65536 + 4 * 16777216

    def test_alpha_does_not_overflow(self):
        ct = Colortable.from_rgba(["a"], [[255, 255, 255, 255]])
        assert ct.label[0] == 2 ** 32 - 1
        assert ct.label.dtype == np.int64

    def test_lookup_by_name_and_label_agree(self):
        ct = _colortable()
        assert ct.num_entries == N_REGIONS
        for idx, name in enumerate(ct.name):
            assert ct.get_region_idx(name) == idx
            assert ct.get_region_idx_by_label(ct.label[idx]) == idx

    def test_unknown_lookups(self):
        ct = _colortable()
        assert ct.get_region_idx("no-such-region") == -1
        assert ct.get_region_idx_by_label(-5) == -1

    def test_duplicate_codes_raise(self):
        with pytest.raises(ValueError, match="must be unique"):
            Colortable.from_rgba(["a", "b"], [[1, 2, 3, 0], [1, 2, 3, 0]])

    def test_lookup_by_negative_wrapped_code(self):
        ct = Colortable.from_rgba(["a"], [[10, 20, 30, 200]])
        wrapped = int(np.int64(ct.label[0]).astype(np.int32))
        assert wrapped < 0
        assert ct.get_region_idx_by_label(wrapped) == 0

    def test_parallel_lengths_enforced(self):
        with pytest.raises(ValueError, match="channel g"):
            Colortable([0, 1], ["a", "b"], [0, 0], [0], [0, 0], [0, 0])
        with pytest.raises(ValueError, match="names"):
            Colortable([0, 1], ["a"], [0, 0], [0, 0], [0, 0], [0, 0])


# ---------------------------------------------------------------------------
# Annot
# ---------------------------------------------------------------------------

class TestAnnotModel:
    def test_vertex_regions_and_names(self):
        annot = _annot()
        regions = annot.vertex_regions()
        np.testing.assert_array_equal(regions, np.arange(N_VERTICES) % N_REGIONS)
        names = annot.vertex_region_names()
        assert len(names) == N_VERTICES
        assert names[37] == "region01"

    def test_unknown_label_has_no_region(self):
        ct = _colortable()
        annot = Annot([0, 1], [ct.label[3], 999999], ct)
        np.testing.assert_array_equal(annot.vertex_regions(), [3, -1])
        assert annot.vertex_region_names() == ["region03", ""]
        np.testing.assert_array_equal(annot.vertex_colors()[1], [0, 0, 0])

    def test_region_vertices(self):
        annot = _annot()
        np.testing.assert_array_equal(annot.region_vertices("region02"), [2, 38, 74])
        assert annot.region_vertices("missing").size == 0

    def test_vertex_colors(self):
        annot = _annot(alpha=0)
        rgb = annot.vertex_colors()
        rgba = annot.vertex_colors(alpha=True)
        assert rgb.shape == (N_VERTICES, 3)
        assert rgba.shape == (N_VERTICES, 4)
        assert rgb.dtype == np.uint8
        np.testing.assert_array_equal(rgb[5], [36, 65, 145])
        np.testing.assert_array_equal(rgba[:, :3], rgb)

    def test_high_alpha_codes_keep_their_region(self):
        ct = Colortable.from_rgba(["a", "b"], [[10, 20, 30, 200], [1, 2, 3, 0]])
        annot = Annot([0, 1], ct.label, ct)
        assert annot.vertex_labels.dtype == np.int32
        assert annot.vertex_labels[0] < 0
        np.testing.assert_array_equal(annot.vertex_regions(), [0, 1])
        assert annot.vertex_region_names() == ["a", "b"]
        np.testing.assert_array_equal(annot.region_vertices("a"), [0])
        np.testing.assert_array_equal(annot.vertex_colors(alpha=True)[0], [10, 20, 30, 200])

    def test_codes_beyond_32_bits_raise(self):
        with pytest.raises(ValueError, match="32 bits"):
            Annot([0], [2 ** 32], _colortable())

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="labels"):
            Annot([0, 1, 2], [0, 0], _colortable())


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

class TestReadAnnot:
    def test_basic(self):
        annot = read_annot(io.BytesIO(_annot_bytes()))
        assert annot.num_vertices == 2
        np.testing.assert_array_equal(annot.vertex_indices, [0, 1])
        np.testing.assert_array_equal(annot.vertex_labels, [0, 256])
        assert annot.colortable.name == ["unknown", "cortex"]
        np.testing.assert_array_equal(annot.colortable.label, [0, 256])
        assert annot.vertex_region_names() == ["unknown", "cortex"]

    def test_missing_colortable_raises(self):
        with pytest.raises(MissingColortableError, match="no colortable"):
            read_annot(io.BytesIO(_annot_bytes(flag=0)))

    def test_old_colortable_format_raises(self):
        with pytest.raises(UnsupportedFormatError, match="old colortable format"):
            read_annot(io.BytesIO(_annot_bytes(version=5)))

    def test_unsupported_version_raises(self):
        with pytest.raises(UnsupportedFormatError, match="version 3"):
            read_annot(io.BytesIO(_annot_bytes(version=-3)))

    def test_truncated_vertex_data_raises(self):
        with pytest.raises(TruncatedFileError):
            read_annot(io.BytesIO(_annot_bytes()[:12]))

    def test_truncated_colortable_raises(self):
        with pytest.raises(TruncatedFileError):
            read_annot(io.BytesIO(_annot_bytes(truncate_entries=True)))

    def test_count_disagreement_warns(self):
        with pytest.warns(ColortableCountWarning, match="repeats the count as 3"):
            annot = read_annot(io.BytesIO(_annot_bytes(n_entries_dup=3)))
        assert annot.colortable.num_entries == 2

    def test_steps_raise_distinct_errors(self):
        raised = set()
        for data in (
            _annot_bytes()[:12],
            _annot_bytes(flag=0),
            _annot_bytes(version=5),
            _annot_bytes(version=-3),
        ):
            with pytest.raises(ValueError) as excinfo:
                read_annot(io.BytesIO(data))
            raised.add((type(excinfo.value), str(excinfo.value).split(";")[0]))
        assert len(raised) == 4


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

class TestWriteAnnot:
    def test_layout_matches_reader_fixture(self):
        annot = read_annot(io.BytesIO(_annot_bytes()))
        buf = io.BytesIO()
        write_annot(buf, annot, orig_filename="colortable.txt")
        assert buf.getvalue() == _annot_bytes()

    def test_round_trip_36_regions(self):
        annot = _annot(alpha=0)
        path = _tmp_path()
        try:
            write_annot(path, annot)
            loaded = read_annot(path)
        finally:
            os.unlink(path)
        assert loaded.colortable.num_entries == N_REGIONS
        assert loaded.colortable.name == annot.colortable.name
        np.testing.assert_array_equal(loaded.vertex_labels, annot.vertex_labels)
        for name in loaded.colortable.name:
            idx = loaded.colortable.get_region_idx(name)
            assert loaded.colortable.get_region_idx_by_label(loaded.colortable.label[idx]) == idx


    def test_round_trip_high_alpha(self):
        ct = Colortable.from_rgba(["a", "b"], [[10, 20, 30, 200], [1, 2, 3, 0]])
        buf = io.BytesIO()
        write_annot(buf, Annot([0, 1], ct.label, ct))
        buf.seek(0)
        loaded = read_annot(buf)
        np.testing.assert_array_equal(loaded.colortable.a, [200, 0])
        np.testing.assert_array_equal(loaded.vertex_regions(), [0, 1])
        assert loaded.vertex_region_names() == ["a", "b"]


class TestNibabelInterop:
    def test_we_read_nibabels(self):
        fsio = pytest.importorskip("nibabel.freesurfer")
        ct = _colortable()
        rgba = np.column_stack((ct.r, ct.g, ct.b, ct.a))
        ctab = np.hstack((rgba, compute_label(ct.r, ct.g, ct.b, 0)[:, None])).astype(np.int32)
        labels = np.arange(N_VERTICES) % N_REGIONS
        path = _tmp_path()
        try:
            fsio.write_annot(path, labels, ctab, ct.name, fill_ctab=True)
            annot = read_annot(path)
        finally:
            os.unlink(path)
        assert annot.num_vertices == N_VERTICES
        assert annot.colortable.name == ct.name
        np.testing.assert_array_equal(annot.vertex_regions(), labels)

    def test_nibabel_reads_ours(self):
        fsio = pytest.importorskip("nibabel.freesurfer")
        annot = _annot(alpha=0)
        path = _tmp_path()
        try:
            write_annot(path, annot)
            labels, ctab, names = fsio.read_annot(path)
        finally:
            os.unlink(path)
        np.testing.assert_array_equal(labels, np.arange(N_VERTICES) % N_REGIONS)
        assert [n.decode() for n in names] == annot.colortable.name
        np.testing.assert_array_equal(ctab[:, 0], annot.colortable.r)
