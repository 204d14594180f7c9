"""Exception and warning types raised by the fsmesh format codecs.

Every error derives from :class:`ValueError` so that callers who already
guard reads with ``except ValueError`` keep working, while the subclasses
let them tell a bad magic number from a truncated file.
"""


class FormatError(ValueError):
    """Base class for malformed or unsupported input files."""


class MagicNumberError(FormatError):
    """The file does not start with the magic number of its format."""


class UnsupportedFormatError(FormatError):
    """The file uses a format version, data type or layout we do not read."""


class TruncatedFileError(FormatError):
    """The byte source ended before the declared amount of data was read."""


class LabelParseError(FormatError):
    """A line of an ASCII label file could not be parsed."""


class MissingColortableError(FormatError):
    """An annotation file does not embed a colortable."""


class MagicNumberWarning(UserWarning):
    """A magic number mismatch that the reader tolerates."""


class ColortableCountWarning(UserWarning):
    """The two entry counts stored in an annotation colortable disagree."""
