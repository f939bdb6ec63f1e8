#!/usr/bin/env python3
"""
Walk the package source directory with asyncio and look up one file.

Usage:
    python examples/async_dir_contents.py
"""

import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dir_meta import walk_async


async def main():
    root = Path(__file__).parent.parent / "src" / "dir_meta"
    result = await walk_async(root)

    print(f"{result.name}: {result.file_count} files, {result.human_size()}")

    init = result.find_by_path(root / "__init__.py")
    assert init is not None
    print(f"{init.name}: {init.human_size()}, modified {init.modified_am_pm()} ({init.modified_elapsed_human()} ago)")


if __name__ == "__main__":
    asyncio.run(main())
