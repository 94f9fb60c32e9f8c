"""Allow ``python -m sticky_notes`` to launch the application."""

from __future__ import annotations

import sys


def main() -> int:
    from sticky_notes import run
    return run(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
