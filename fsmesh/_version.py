"""Version number of the installed distribution."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fsmesh")
except PackageNotFoundError:
    # source checkout without an install
    __version__ = "0.3.0.dev0"
