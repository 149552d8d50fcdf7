"""Download the WWFF directory and refresh it on a timer.

Usage:
    python examples/periodic_refresh.py OHFF-0001 --interval 3600
"""

from __future__ import annotations

import argparse
import logging
import time

from WwffDirectory import DirectoryHandle, FetchError
from WwffDirectory.logging_utils import setup_logging

LOGGER = logging.getLogger("WwffDirectory.examples.periodic_refresh")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("reference", help="Reference to print after every refresh")
    parser.add_argument("--interval", type=float, default=3600.0, help="Seconds between refreshes")
    args = parser.parse_args()

    setup_logging(level="DEBUG")
    with DirectoryHandle.from_download() as directory:
        while True:
            entry = directory.get(args.reference)
            print(entry if entry is not None else f"{args.reference} not found")
            time.sleep(args.interval)
            try:
                directory.refresh()
            except FetchError as exc:
                LOGGER.error("Refresh failed, keeping previous directory: %s", exc)


if __name__ == "__main__":
    main()
