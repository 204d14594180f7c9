import argparse

from .. import sys_info


def run():
    """Run the ``fsmesh-sys_info`` command-line helper.

    Prints platform, memory, byte order and dependency information via
    :func:`fsmesh.sys_info`.
    """
    parser = argparse.ArgumentParser(
        prog=f"{__package__.split('.')[0]}-sys_info",
        description="Print system and dependency information for bug reports.",
    )
    parser.add_argument(
        "--developer",
        help="also list the optional test/data/style dependencies",
        action="store_true",
    )
    args = parser.parse_args()

    sys_info(developer=args.developer)
