"""``python -m rental_invoice``: serve the order and invoice API."""

from __future__ import annotations

import sys

from .config import HOST, PORT
from .server import DependencyError, run


def main() -> None:
    try:
        run(HOST, PORT)
    except DependencyError as exc:
        sys.stderr.write(f"{exc}\n")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
