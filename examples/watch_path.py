#!/usr/bin/env python3
"""
Print filesystem events for a directory until interrupted.

Usage:
    python examples/watch_path.py [PATH]

Create, edit and delete files under PATH (default: src) in another
terminal and watch the events arrive.
"""

import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dir_meta import ChannelClosedError, DirMetaError, Watcher, WatchMask, channel


async def main(path: str):
    sender, receiver = channel()
    mask = WatchMask.MODIFY | WatchMask.CREATE | WatchMask.DELETE | WatchMask.DELETE_SELF

    watch = asyncio.create_task(Watcher(sender).path(path).watch_async(mask))

    try:
        while True:
            outcome = await receiver.recv_async()
            print(outcome)
    except ChannelClosedError:
        # The watch ended and every outcome has been read
        pass
    finally:
        receiver.close()

    try:
        await watch
    except DirMetaError as e:
        print(f"Watch ended: {e}")


if __name__ == "__main__":
    try:
        asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "src"))
    except KeyboardInterrupt:
        pass
