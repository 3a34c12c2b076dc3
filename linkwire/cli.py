"""Print every network interface of this machine."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from linkwire import backend


def _parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog="linkwire",
        description="List the network interfaces of this machine.",
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Print each interface with its flags, index, MAC and addresses."""
    _parser().parse_args(argv)
    for interface in backend.interfaces():
        print(interface)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())