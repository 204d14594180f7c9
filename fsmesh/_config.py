"""Configuration and system-info helpers (top-level module)."""

import platform
import re
import sys
from functools import partial
from importlib.metadata import PackageNotFoundError, requires, version
from pathlib import Path
from typing import IO, Callable, Optional

import psutil

from .io._binary import NEEDS_SWAP, SYSTEM_BYTEORDER

_EXTRAS = ("test", "data", "style")


def _declared_requirements(package: str) -> list[str]:
    """Return the requirement strings of *package*, including extras.

    Falls back to ``pyproject.toml`` when the package is not installed, so
    the report also works from a source checkout.
    """
    try:
        return requires(package) or []
    except PackageNotFoundError:
        pass
    try:
        import tomllib
    except ImportError:  # Python < 3.11
        return []
    pyproject_path = Path(__file__).resolve().parents[1] / "pyproject.toml"
    if not pyproject_path.exists():
        return []
    with pyproject_path.open("rb") as fh:
        project = tomllib.load(fh).get("project", {})
    reqs = list(project.get("dependencies", []))
    for key, deps in project.get("optional-dependencies", {}).items():
        reqs.extend(f"{dep}; extra == '{key}'" for dep in deps)
    return reqs


def _extra_of(requirement: str) -> Optional[str]:
    match = re.search(r"extra\s*==\s*['\"]([^'\"]+)['\"]", requirement)
    return match.group(1) if match else None


def sys_info(fid: Optional[IO] = None, developer: bool = False):
    """Print the system information for debugging.

    Besides platform, memory and dependency versions this reports the host
    byte order, which decides whether the FreeSurfer codecs byte-swap.

    Parameters
    ----------
    fid : file-like, default=None
        The file to write to, passed to :func:`print`.
        Can be None to use :data:`sys.stdout`.
    developer : bool, default=False
        If True, display information about optional dependencies.
    """
    ljust = 26
    out = partial(print, end="", file=fid)
    package = __package__.split(".")[0]

    out("Platform:".ljust(ljust) + platform.platform() + "\n")
    out("Python:".ljust(ljust) + sys.version.replace("\n", " ") + "\n")
    out("Executable:".ljust(ljust) + sys.executable + "\n")
    out("CPU:".ljust(ljust) + platform.processor() + "\n")
    out("Physical cores:".ljust(ljust) + str(psutil.cpu_count(False)) + "\n")
    out("Logical cores:".ljust(ljust) + str(psutil.cpu_count(True)) + "\n")
    out("RAM:".ljust(ljust))
    out(f"{psutil.virtual_memory().total / float(2 ** 30):0.1f} GB\n")
    out("SWAP:".ljust(ljust))
    out(f"{psutil.swap_memory().total / float(2 ** 30):0.1f} GB\n")
    swap = "byte-swapping big-endian data" if NEEDS_SWAP else "no byte swap needed"
    out("Byte order:".ljust(ljust) + f"{SYSTEM_BYTEORDER} ({swap})\n")

    out("\nDependencies info\n")
    try:
        pkg_version = version(package)
    except PackageNotFoundError:
        pkg_version = "Not installed."
    out(f"{package}:".ljust(ljust) + pkg_version + "\n")

    raw_requires = _declared_requirements(package)
    dependencies = [elt.split(";")[0].rstrip() for elt in raw_requires if _extra_of(elt) is None]
    _list_dependencies_info(out, ljust, dependencies)

    if developer:
        for key in _EXTRAS:
            dependencies = [
                elt.split(";")[0].rstrip() for elt in raw_requires if _extra_of(elt) == key
            ]
            if len(dependencies) == 0:
                continue
            out(f"\nOptional '{key}' info\n")
            _list_dependencies_info(out, ljust, dependencies)


def _list_dependencies_info(out: Callable, ljust: int, dependencies: list[str]):
    """List dependencies names and versions.

    Parameters
    ----------
    out : Callable
        output function
    ljust : int
         length of returned string
    dependencies : List[str]
        list of dependencies

    """
    for dep in dependencies:
        # strip version specifiers and extras, e.g. "numpy>=1.21" or "pkg[toml]"
        name = re.split(r"[\[<>=!~ ]", dep, maxsplit=1)[0]
        try:
            version_ = version(name)
        except PackageNotFoundError:
            version_ = "Not found."
        out(f"{name}:".ljust(ljust) + version_ + "\n")
