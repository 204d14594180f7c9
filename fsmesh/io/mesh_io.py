"""ASCII import and export of triangle meshes in common open formats.

Readers for:

* **OFF** — Object File Format, ASCII triangles
* **PLY ASCII** — Stanford PLY, ASCII encoding, triangles only
* **OBJ** — Wavefront OBJ, ``v`` and ``f`` records only

All readers return a :class:`~fsmesh.mesh.Mesh`, so face indices are
bounds-checked on construction.  The matching exporters ``to_off``,
``to_ply`` and ``to_obj`` return the file content as a string; the
``write_*`` functions save it to disk.  ``to_ply`` can attach per-vertex
RGB colors, e.g. from :meth:`fsmesh.io.annot.Annot.vertex_colors`.
"""

import logging

import numpy as np

from ..mesh import Mesh

logger = logging.getLogger(__name__)

# float32 values survive a text round trip with 9 significant digits
_FLOAT_FMT = ".9g"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _non_empty_lines(path):
    """Yield stripped, non-empty, non-comment lines from a text file."""
    with open(path, encoding="utf-8", errors="replace") as fh:
        for raw in fh:
            line = raw.strip()
            if line and not line.startswith("#"):
                yield line


def _parse_triangle(tokens, j, path, fmt):
    try:
        count = int(tokens[0])
    except (ValueError, IndexError) as exc:
        raise ValueError(f"Could not parse {fmt} face {j} in {path!r}: {tokens!r}") from exc
    if count != 3:
        raise ValueError(
            f"{fmt} face {j} has {count} vertices; only triangles (3) are "
            f"supported in {path!r}.  Triangulate the mesh first."
        )
    try:
        return [int(tokens[1]), int(tokens[2]), int(tokens[3])]
    except (ValueError, IndexError) as exc:
        raise ValueError(
            f"Could not parse {fmt} face indices at face {j} in {path!r}: {tokens!r}"
        ) from exc


def _build_mesh(vertices, faces, path, fmt):
    try:
        return Mesh(vertices, np.asarray(faces, dtype=np.int64).reshape(-1, 3))
    except ValueError as exc:
        raise ValueError(f"Invalid {fmt} mesh in {path!r}: {exc}") from exc


def _fmt(value):
    return format(float(value), _FLOAT_FMT)


def _check_vertex_colors(mesh, vertex_colors):
    colors = np.asarray(vertex_colors)
    if colors.size == 0:
        raise ValueError("vertex_colors is empty; pass None to export without colors.")
    if colors.ndim != 2 or colors.shape[1] not in (3, 4):
        raise ValueError(
            f"vertex_colors must have shape (N, 3) or (N, 4), got {colors.shape}."
        )
    if colors.shape[0] != mesh.num_vertices:
        raise ValueError(
            f"Got colors for {colors.shape[0]} vertices but the mesh has "
            f"{mesh.num_vertices}."
        )
    return colors[:, :3].astype(np.uint8)


def _write_text(path, text):
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(text)


# ---------------------------------------------------------------------------
# OFF
# ---------------------------------------------------------------------------

def read_off(path):
    """Read an ASCII OFF (Object File Format) triangle mesh.

    Parameters
    ----------
    path : str or os.PathLike
        Path to the ``.off`` file.

    Returns
    -------
    Mesh

    Raises
    ------
    ValueError
        If the file does not start with ``OFF``, if any face is not a
        triangle, if the declared counts don't match the data, or if a face
        index is out of range.

    Notes
    -----
    Comments and blank lines are ignored anywhere in the file.  Only plain
    ``OFF`` is accepted, not the ``COFF`` / ``NOFF`` variants.
    """
    lines = list(_non_empty_lines(path))
    if not lines:
        raise ValueError(f"OFF file is empty: {path!r}")
    if lines[0].upper() != "OFF":
        raise ValueError(
            f"Expected 'OFF' header on first non-comment line, got {lines[0]!r} "
            f"in {path!r}.  Only plain ASCII OFF is supported."
        )
    if len(lines) < 2:
        raise ValueError(f"OFF file has no count line after header: {path!r}")

    parts = lines[1].split()
    try:
        n_verts, n_faces = int(parts[0]), int(parts[1])
    except (ValueError, IndexError) as exc:
        raise ValueError(
            f"Could not parse OFF count line {lines[1]!r} in {path!r}."
        ) from exc

    data_lines = lines[2:]
    if len(data_lines) < n_verts + n_faces:
        raise ValueError(
            f"OFF file declares {n_verts} vertices and {n_faces} faces "
            f"but only {len(data_lines)} data lines follow in {path!r}."
        )

    vertices = np.empty((n_verts, 3), dtype=np.float32)
    for i in range(n_verts):
        try:
            vertices[i] = [float(c) for c in data_lines[i].split()[:3]]
        except ValueError as exc:
            raise ValueError(
                f"Could not parse vertex {i} in OFF file {path!r}: {data_lines[i]!r}"
            ) from exc
    faces = [
        _parse_triangle(data_lines[n_verts + j].split(), j, path, "OFF")
        for j in range(n_faces)
    ]
    return _build_mesh(vertices, faces, path, "OFF")


def to_off(mesh):
    """Return *mesh* as the text of an ASCII OFF file."""
    lines = ["OFF", f"{mesh.num_vertices} {mesh.num_faces} 0"]
    lines.extend(" ".join(_fmt(c) for c in v) for v in mesh.vertices.tolist())
    lines.extend(f"3 {a} {b} {c}" for a, b, c in mesh.faces.tolist())
    return "\n".join(lines) + "\n"


def write_off(path, mesh):
    """Write *mesh* to an ASCII OFF file."""
    _write_text(path, to_off(mesh))
    logger.debug("Wrote OFF mesh %s.", path)


# ---------------------------------------------------------------------------
# PLY (ASCII)
# ---------------------------------------------------------------------------

def read_ply_ascii(path):
    """Read an ASCII PLY triangle mesh.

    Vertex properties other than ``x``, ``y`` and ``z`` (normals, colors)
    are skipped.

    Parameters
    ----------
    path : str or os.PathLike
        Path to the ``.ply`` file.

    Returns
    -------
    Mesh

    Raises
    ------
    ValueError
        If the file is binary PLY, if faces are not triangles, or if the
        header is malformed.
    """
    with open(path, encoding="utf-8", errors="replace") as fh:
        raw_lines = fh.readlines()

    if not raw_lines or raw_lines[0].strip() != "ply":
        raise ValueError(
            f"File does not start with 'ply' magic; not a PLY file: {path!r}."
        )

    n_verts = None
    n_faces = None
    vertex_props = []
    element = None
    header_end = None
    for idx, line in enumerate(raw_lines[1:], start=1):
        tokens = line.split()
        if not tokens:
            continue
        keyword = tokens[0].lower()
        if keyword == "end_header":
            header_end = idx + 1
            break
        if keyword == "format" and (len(tokens) < 2 or tokens[1].lower() != "ascii"):
            raise ValueError(
                f"PLY binary format not supported; only ASCII PLY is "
                f"accepted: {path!r}."
            )
        if keyword == "element" and len(tokens) >= 3:
            element = tokens[1].lower()
            if element == "vertex":
                n_verts = int(tokens[2])
            elif element == "face":
                n_faces = int(tokens[2])
        elif keyword == "property" and element == "vertex":
            vertex_props.append(tokens[-1])

    if header_end is None:
        raise ValueError(f"PLY header has no 'end_header' line: {path!r}.")
    if n_verts is None:
        raise ValueError(f"No 'element vertex' found in PLY header: {path!r}.")
    if n_faces is None:
        raise ValueError(f"No 'element face' found in PLY header: {path!r}.")
    try:
        cols = [vertex_props.index(axis) for axis in ("x", "y", "z")]
    except ValueError as exc:
        raise ValueError(
            f"PLY vertex element missing x/y/z properties in {path!r}; "
            f"found: {vertex_props!r}."
        ) from exc

    data_lines = [raw_line.split() for raw_line in raw_lines[header_end:] if raw_line.strip()]
    if len(data_lines) < n_verts + n_faces:
        raise ValueError(
            f"PLY file has {len(data_lines)} data lines but expects "
            f"{n_verts} vertices + {n_faces} faces in {path!r}."
        )

    vertices = np.empty((n_verts, 3), dtype=np.float32)
    for i in range(n_verts):
        try:
            vertices[i] = [float(data_lines[i][c]) for c in cols]
        except (ValueError, IndexError) as exc:
            raise ValueError(
                f"Could not parse PLY vertex {i} in {path!r}: {data_lines[i]!r}"
            ) from exc
    faces = [
        _parse_triangle(data_lines[n_verts + j], j, path, "PLY")
        for j in range(n_faces)
    ]
    return _build_mesh(vertices, faces, path, "PLY")


def to_ply(mesh, vertex_colors=None):
    """Return *mesh* as the text of an ASCII PLY file.

    Parameters
    ----------
    mesh : Mesh
        The mesh to export.
    vertex_colors : array-like, shape (N, 3) or (N, 4), optional
        Per-vertex RGB(A) colors in 0..255, written as ``uchar red green
        blue`` properties.  An alpha column is ignored.

    Raises
    ------
    ValueError
        If *vertex_colors* is empty or its row count differs from the
        vertex count.
    """
    colors = None if vertex_colors is None else _check_vertex_colors(mesh, vertex_colors)
    header = [
        "ply",
        "format ascii 1.0",
        "comment created by fsmesh",
        f"element vertex {mesh.num_vertices}",
        "property float x",
        "property float y",
        "property float z",
    ]
    if colors is not None:
        header += ["property uchar red", "property uchar green", "property uchar blue"]
    header += [
        f"element face {mesh.num_faces}",
        "property list uchar int vertex_indices",
        "end_header",
    ]
    vertex_lines = [" ".join(_fmt(c) for c in v) for v in mesh.vertices.tolist()]
    if colors is not None:
        vertex_lines = [
            f"{line} {r} {g} {b}" for line, (r, g, b) in zip(vertex_lines, colors.tolist())
        ]
    face_lines = [f"3 {a} {b} {c}" for a, b, c in mesh.faces.tolist()]
    return "\n".join(header + vertex_lines + face_lines) + "\n"


def write_ply(path, mesh, vertex_colors=None):
    """Write *mesh* to an ASCII PLY file, see :func:`to_ply`."""
    _write_text(path, to_ply(mesh, vertex_colors=vertex_colors))
    logger.debug("Wrote PLY mesh %s.", path)


# ---------------------------------------------------------------------------
# OBJ
# ---------------------------------------------------------------------------

def _obj_index(token, n_verts, path):
    # "f" entries may be "v", "v/vt", "v//vn" or "v/vt/vn"; indices are 1-based,
    # negative ones count back from the last vertex read so far
    idx = int(token.split("/")[0])
    if idx < 0:
        return n_verts + idx
    if idx == 0:
        raise ValueError(f"OBJ face index 0 is invalid (indices start at 1) in {path!r}.")
    return idx - 1


def read_obj(path):
    """Read a Wavefront OBJ triangle mesh.

    Only ``v`` and ``f`` records are used; texture coordinates, normals,
    groups and materials are ignored.

    Parameters
    ----------
    path : str or os.PathLike
        Path to the ``.obj`` file.

    Returns
    -------
    Mesh

    Raises
    ------
    ValueError
        If a record cannot be parsed, a face is not a triangle, or a face
        index is out of range.
    """
    vertices = []
    faces = []
    for line in _non_empty_lines(path):
        tokens = line.split()
        keyword = tokens[0]
        if keyword == "v":
            try:
                vertices.append([float(t) for t in tokens[1:4]])
            except ValueError as exc:
                raise ValueError(f"Could not parse OBJ vertex {line!r} in {path!r}.") from exc
            if len(vertices[-1]) != 3:
                raise ValueError(f"OBJ vertex needs 3 coordinates: {line!r} in {path!r}.")
        elif keyword == "f":
            if len(tokens) != 4:
                raise ValueError(
                    f"OBJ face {len(faces)} has {len(tokens) - 1} vertices; only "
                    f"triangles (3) are supported in {path!r}."
                )
            try:
                faces.append([_obj_index(t, len(vertices), path) for t in tokens[1:]])
            except ValueError as exc:
                raise ValueError(f"Could not parse OBJ face {line!r} in {path!r}.") from exc
    if not vertices:
        raise ValueError(f"OBJ file contains no vertices: {path!r}")
    return _build_mesh(np.asarray(vertices, dtype=np.float32), faces, path, "OBJ")


def to_obj(mesh):
    """Return *mesh* as the text of a Wavefront OBJ file."""
    lines = ["# created by fsmesh"]
    lines.extend("v " + " ".join(_fmt(c) for c in v) for v in mesh.vertices.tolist())
    lines.extend(f"f {a + 1} {b + 1} {c + 1}" for a, b, c in mesh.faces.tolist())
    return "\n".join(lines) + "\n"


def write_obj(path, mesh):
    """Write *mesh* to a Wavefront OBJ file."""
    _write_text(path, to_obj(mesh))
    logger.debug("Wrote OBJ mesh %s.", path)


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

TEXT_MESH_READERS = {
    ".off": read_off,
    ".ply": read_ply_ascii,
    ".obj": read_obj,
}

TEXT_MESH_WRITERS = {
    ".off": write_off,
    ".ply": write_ply,
    ".obj": write_obj,
}
