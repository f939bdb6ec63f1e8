#!/usr/bin/env python3
"""
Walk the package source directory and print what was found.

Usage:
    python examples/dir_contents.py [PATH]
"""

import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dir_meta import walk


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    root = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(__file__).parent.parent / "src" / "dir_meta"
    result = walk(root)

    for file in result.files:
        print(f"{file.path}  {file.human_size():>10}  {file.format.name}")
    print(f"\n{result.file_count} files in {result.directory_count + 1} directories, {result.human_size()}")
    for error in result.errors:
        print(f"error: {error.message}")


if __name__ == "__main__":
    main()
