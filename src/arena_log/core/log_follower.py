"""
Following the live MTGA log.

Reads lines appended to Player.log as the client writes them. A file that
shrinks (truncation) or is replaced (rotation, new inode) is reported
through on_discontinuity and then read again from its start.
"""

import logging
import os
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class LogFollower:
    """
    Follows the Arena Player.log file and hands new lines to a callback.

    Truncation (MTGA restart on Windows keeps the inode) and rotation (a new
    file at the same path) are reported through `on_discontinuity` so the
    consumer can reset its state before the first line of the new content.
    """

    def __init__(self, log_path: str, start_at_end: bool = False, poll_interval: float = 0.1):
        self.log_path = log_path
        self.start_at_end = start_at_end
        self.poll_interval = poll_interval
        self.file = None
        self.inode = None
        self.offset = 0
        self.first_open = True
        self._stop_event = threading.Event()

    def _open_if_needed(self, on_discontinuity: Optional[Callable[[], None]]):
        current_inode = os.stat(self.log_path).st_ino
        if self.file is not None and self.inode == current_inode:
            return

        rotated = self.inode is not None and self.inode != current_inode
        if self.file:
            self.file.close()
        self.file = open(self.log_path, 'r', encoding='utf-8', errors='replace', newline='')
        self.inode = current_inode

        if self.first_open:
            self.first_open = False
            if self.start_at_end:
                self.file.seek(0, os.SEEK_END)
                self.offset = self.file.tell()
                logger.info(f"Log file opened at end (offset {self.offset}): {self.log_path}")
            else:
                self.offset = 0
                logger.info(f"Log file opened from the beginning: {self.log_path}")
        elif rotated:
            self.offset = 0
            logger.info("Log file rotated - starting from beginning of new file.")
            if on_discontinuity:
                on_discontinuity()

    def poll(self, callback: Callable[[str], None],
             on_discontinuity: Optional[Callable[[], None]] = None) -> int:
        """
        Read whatever complete lines were appended since the last poll.

        A trailing line without a newline is left for the next poll, since
        the client may still be writing it.

        Returns:
            Number of lines passed to the callback

        Raises:
            FileNotFoundError: The log file doesn't exist (yet)
        """
        self._open_if_needed(on_discontinuity)

        self.file.seek(0, os.SEEK_END)
        file_size = self.file.tell()
        if self.offset > file_size:
            logger.warning(f"File truncated: offset {self.offset} > file size {file_size}. Resetting to beginning.")
            self.offset = 0
            if on_discontinuity:
                on_discontinuity()

        self.file.seek(self.offset)
        line_count = 0
        while True:
            line = self.file.readline()
            if not line or not line.endswith(("\n", "\r")):
                break
            self.offset = self.file.tell()
            line_count += 1
            callback(line.rstrip("\r\n"))
        return line_count

    def follow(self, callback: Callable[[str], None],
               on_discontinuity: Optional[Callable[[], None]] = None):
        """Follow the log file until stop() is called."""
        logger.info(f"Following {self.log_path}")
        while not self._stop_event.is_set():
            try:
                self.poll(callback, on_discontinuity)
            except FileNotFoundError:
                logger.warning(f"Log file not found at {self.log_path}. Waiting...")
                self._stop_event.wait(5)
                continue
            except OSError as e:
                logger.error(f"Error following log file: {e}")
                self._stop_event.wait(1)
                continue
            self._stop_event.wait(self.poll_interval)
        self.close()

    def stop(self):
        self._stop_event.set()

    def close(self):
        if self.file:
            self.file.close()
            self.file = None
