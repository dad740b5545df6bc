#!/usr/bin/env python3
"""
Write JSON schemas of the optimizer's public models (document, assessment, cycle result, ...)
for editor clients.

Usage:
  PYTHONPATH=. python3 scripts/export_schemas.py [target_dir]

target_dir defaults to ./schemas.
"""

import sys
from pathlib import Path

from libs.core.schemas import export_schemas


def main(argv: list[str]) -> int:
    target_dir = Path(argv[1]) if len(argv) > 1 else Path("schemas")
    written = export_schemas(target_dir)
    for path in written:
        print(f"Wrote {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
