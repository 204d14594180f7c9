"""Subjects files: plain-text lists of subject IDs, one per line.

Group analyses over a FreeSurfer ``SUBJECTS_DIR`` usually start from such
a file (``subject001``, ``subject002``, ...).
"""

import logging

from .label import _open_text

logger = logging.getLogger(__name__)


def read_subjectsfile(source):
    """Read subject IDs from a subjects file.

    Parameters
    ----------
    source : str, os.PathLike or text file-like
        Path to the file or an open text stream.

    Returns
    -------
    list of str
        One ID per non-empty line, in file order, with surrounding
        whitespace removed.
    """
    with _open_text(source) as fobj:
        subjects = [line.strip() for line in fobj if line.strip()]
    logger.debug("Read %d subject IDs.", len(subjects))
    return subjects


def write_subjectsfile(target, subjects):
    """Write subject IDs, one per line.

    Raises
    ------
    ValueError
        If an ID is empty or contains whitespace, which would not survive
        :func:`read_subjectsfile`.
    """
    subjects = [str(s) for s in subjects]
    for subject in subjects:
        if subject.split() != [subject]:
            raise ValueError(
                f"Invalid subject ID {subject!r}: IDs must be non-empty and contain no whitespace."
            )
    with _open_text(target, "w") as fobj:
        fobj.write("".join(f"{s}\n" for s in subjects))
