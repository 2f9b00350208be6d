"""Allow ``python -m screenlapse``."""

from __future__ import annotations

import sys


def main() -> None:
    from screenlapse import run
    raise SystemExit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
