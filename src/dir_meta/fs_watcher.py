"""Filesystem change watching on top of inotify."""

import asyncio
import logging
import os
import sys
import threading
from pathlib import Path
from typing import List, NoReturn, Optional, Union

from .channel import Sender
from .config import WatcherConfig
from .exceptions import (
    ChannelClosedError,
    DirMetaError,
    PathNotSetError,
    WatchError,
    WatchRemovedError,
)
from .models import ErrorKind, RawEvent, WatcherEvent, WatcherOutcome

logger = logging.getLogger(__name__)

# Message of the error raised once the receiving end of the channel is gone
SENDER_CHANNEL_ERROR = "SENDER_CHANNEL_CLOSED"


class InotifyBackend:
    """
    A single inotify watch, read through watchdog's inotify bindings.

    Any object with the same register/read_events/close methods can be
    handed to a Watcher instead.
    """

    def __init__(self, event_buffer_size: int = 4096):
        self.event_buffer_size = event_buffer_size
        self._inotify = None

    def register(self, path: Path, mask: int) -> None:
        """
        Add a watch for ``path``.

        Raises:
            OSError: If the kernel refuses the watch
            WatchError: If inotify is not available on this platform
        """
        if not sys.platform.startswith("linux"):
            raise WatchError(f"inotify is not available on {sys.platform}")

        from watchdog.observers.inotify_c import Inotify

        self._inotify = Inotify(os.fsencode(path), recursive=False, event_mask=mask)

    @property
    def is_registered(self) -> bool:
        return self._inotify is not None

    def read_events(self) -> List[RawEvent]:
        """Block until the next batch of events is available and return it."""
        events = self._inotify.read_events(event_buffer_size=self.event_buffer_size)
        return [
            RawEvent(wd=event.wd, mask=event.mask, cookie=event.cookie, name=event.name or None)
            for event in events
        ]

    def close(self) -> None:
        """Remove the watch and release the inotify descriptor."""
        if self._inotify is not None:
            self._inotify.close()
            self._inotify = None


class Watcher:
    """
    Watches a file or directory and forwards normalized events to a channel.

    Example:
        sender, receiver = channel()
        watcher = Watcher(sender).path("src")
        watcher.start(WatchMask.CREATE | WatchMask.DELETE)
        for outcome in receiver:
            print(outcome)
    """

    def __init__(
        self,
        sender: Sender,
        config: Optional[WatcherConfig] = None,
        backend: Optional[InotifyBackend] = None,
    ):
        """
        Initialize the watcher.

        Args:
            sender: Sending end of the channel outcomes are forwarded to
            config: Watcher configuration
            backend: Notification backend, an InotifyBackend if None
        """
        self.config = config or WatcherConfig()
        self._sender = sender
        self._path: Optional[Path] = None
        self._backend = backend or InotifyBackend(self.config.event_buffer_size)
        self.error: Optional[DirMetaError] = None

    def path(self, path: Union[str, os.PathLike]) -> "Watcher":
        """Set the file or directory to watch."""
        self._path = Path(path)
        return self

    @property
    def watched_path(self) -> Optional[Path]:
        return self._path

    def watch(self, mask: Optional[int] = None) -> NoReturn:
        """
        Watch the path, forwarding every event until the loop has to stop.

        This blocks the calling thread. It only returns by raising; closing
        the channel's receiver is the way to stop it. The sender is closed
        when the loop ends, so a receiver iterating over the channel stops
        once the remaining outcomes are consumed.

        Args:
            mask: WatchMask bits to watch for, config.default_mask if None

        Raises:
            PathNotSetError: If no path was set
            WatchError: If the watch cannot be registered or reading fails
            WatchRemovedError: If the OS removed the watch
            ChannelClosedError: If the receiving end of the channel is closed
        """
        if self._path is None:
            raise PathNotSetError()

        mask = self.config.default_mask if mask is None else mask
        backend = self._backend
        try:
            try:
                backend.register(self._path, int(mask))
            except OSError as error:
                raise WatchError.from_os_error(
                    error,
                    path=self._path,
                    message=f"Unable to watch `{self._path}`: {error.strerror or error}",
                ) from error

            logger.info(f"Watching {self._path} for activity...")
            self._forward_events(backend)
        finally:
            backend.close()
            self._sender.close()

    def _forward_events(self, backend: InotifyBackend) -> NoReturn:
        """Read batches of raw events and send each one on the channel."""
        while True:
            try:
                events = backend.read_events()
            except OSError as error:
                logger.error(f"Stopped watching {self._path}: {error}")
                raise WatchError.from_os_error(
                    error,
                    path=self._path,
                    message=f"Unable to read events for `{self._path}`: {error}",
                ) from error

            for raw_event in events:
                outcome = WatcherOutcome.from_raw(raw_event)
                try:
                    self._sender.send(outcome)
                except ChannelClosedError as error:
                    logger.info(f"Stopped watching {self._path}: channel closed")
                    raise ChannelClosedError(SENDER_CHANNEL_ERROR, path=self._path) from error

                logger.debug(f"Forwarded {outcome.event_kind.value} event for {outcome.name or self._path}")

                if outcome.event_kind is WatcherEvent.WATCH_REMOVED:
                    logger.info(f"Stopped watching {self._path}: watch removed")
                    raise WatchRemovedError(
                        f"The watch on `{self._path}` was removed",
                        kind=ErrorKind.NOT_FOUND,
                        path=self._path,
                    )

    async def watch_async(self, mask: Optional[int] = None) -> NoReturn:
        """
        Run watch() in a worker thread so the event loop is not blocked.

        Cancelling the awaiting task does not stop the worker; close the
        channel's receiver for that.
        """
        await asyncio.to_thread(self.watch, mask)

    def start(self, mask: Optional[int] = None) -> threading.Thread:
        """
        Run watch() on a daemon thread.

        The error that ended the loop is kept in ``self.error``.

        Returns:
            The started thread
        """
        def run() -> None:
            try:
                self.watch(mask)
            except DirMetaError as error:
                self.error = error

        thread = threading.Thread(target=run, name=f"dir-meta-watch:{self._path}", daemon=True)
        thread.start()
        return thread
