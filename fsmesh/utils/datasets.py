"""Sample FreeSurfer subject for tutorials and tests.

The files (one anonymized subject of the Rhineland Study) are published as
release assets of the WhipperSnapPy project and cached locally with pooch.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

RELEASE_URL = (
    "https://github.com/Deep-MI/WhipperSnapPy"
    "/releases/download/v2.0.0/{file_name}"
)

# Relative path inside the subject directory -> SHA-256 hash.  Release
# assets are flat, so the URL only uses the basename.
_FILES = {
    "surf/lh.white":                        "sha256:4ab049fb42ca882ba9b56f8fe0d0e8814973e7fa2e0575a794d8e468abf7d62f",
    "surf/lh.curv":                         "sha256:9edbde57be8593cd9d89d9d1124e2175edd8ecfee55d53e066d89700c480b12a",
    "surf/lh.thickness":                    "sha256:40ab3483284608c6c5cca2d3d794a60cd1bcbeb0140bb1ca6ad0fce7962c57c6",
    "surf/rh.white":                        "sha256:43035c53a8b04bebe4e843c34f80588f253f79052a8dbf7194b706495b11f8d2",
    "surf/rh.curv":                         "sha256:af2bc71133d7ef17ce1a3a6f4208d2495a5a4c96da00c80b59be03bb7c8ea83f",
    "surf/rh.thickness":                    "sha256:50ec291c73928cd697156edd9e0e77f5c54d15c56cf84810d2564b496876e132",
    "label/lh.aparc.DKTatlas.mapped.annot": "sha256:4d48d33f4fd8278ab973a1552f6ea9c396dfc1791b707ed17ad8e761299c4960",
    "label/lh.cortex.label":                "sha256:79ae17fcfde6b2e0a75a0652fcc0f3c072e4ea62a541843b7338e01c598b0b6e",
    "label/rh.aparc.DKTatlas.mapped.annot": "sha256:12217166d8ef43ee1fa280511ec2ba0796c6885f527a4455b93760acc73ce273",
    "label/rh.cortex.label":                "sha256:162c97c887eb1ec857fe575b8cc4e4b950c7dd5ec181a581d709bbe7fca58f9e",
}

_KEYS = {
    "white": "surf/{hemi}.white",
    "curv": "surf/{hemi}.curv",
    "thickness": "surf/{hemi}.thickness",
    "annot": "label/{hemi}.aparc.DKTatlas.mapped.annot",
    "label": "label/{hemi}.cortex.label",
}


def _build_dict(base: Path) -> dict:
    """Map ``<hemi>_<kind>`` keys (e.g. ``lh_white``) to file paths under *base*."""
    paths = {"sdir": str(base)}
    for hemi in ("lh", "rh"):
        for key, rel in _KEYS.items():
            paths[f"{hemi}_{key}"] = str(base / rel.format(hemi=hemi))
    return paths


def fetch_sample_subject(path=None) -> dict:
    """Download and cache the sample subject.

    Parameters
    ----------
    path : str or os.PathLike, optional
        Directory to store the subject in.  Defaults to the OS-specific
        user cache directory of fsmesh.  Files already present with the
        right hash are not downloaded again.

    Returns
    -------
    dict
        ``sdir`` (the subject directory) and, for ``lh`` and ``rh``,
        ``<hemi>_white``, ``<hemi>_curv``, ``<hemi>_thickness``,
        ``<hemi>_annot`` (DKT atlas parcellation) and ``<hemi>_label``
        (cortex label).

    Raises
    ------
    ImportError
        If ``pooch`` is not installed.  Install with
        ``pip install 'fsmesh[data]'``.

    Notes
    -----
    Data from the Rhineland Study (Koch et al.),
    https://doi.org/10.5281/zenodo.11186582, CC BY 4.0.
    """
    try:
        import pooch
    except ImportError as e:
        raise ImportError(
            "fetch_sample_subject() requires pooch. "
            "Install with: pip install 'fsmesh[data]'"
        ) from e

    if path is None:
        base = Path(pooch.os_cache("fsmesh")) / "sub-rs"
    else:
        base = Path(path)
    for rel_path, known_hash in _FILES.items():
        rel = Path(rel_path)
        pooch.retrieve(
            url=RELEASE_URL.format(file_name=rel.name),
            known_hash=known_hash,
            fname=rel.name,
            path=base / rel.parent,
        )
    logger.debug("Sample subject available in %s.", base)
    return _build_dict(base)
