"""In-memory capture queue.

Capture itself (taking screenshots, recording audio, storing the files)
happens outside the processing core. The core only needs to look at the
most recent item, list the queue and clear it; this module provides that
interface plus the bookkeeping the capture side uses to fill it.
"""

from collections import deque
from pathlib import Path
from typing import Deque, List, Optional, Union
import logging

from core.models import CaptureItem

logger = logging.getLogger(__name__)


class CaptureQueue:
    """Ordered, bounded sequence of capture items for one channel.

    When the queue is full, adding an item evicts the oldest one.
    """

    def __init__(self, name: str, max_size: int = 5):
        """Initialize the queue.

        Args:
            name: Channel name, used in log messages.
            max_size: Maximum number of items kept.
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self.name = name
        self.max_size = max_size
        self._items: Deque[CaptureItem] = deque()

    def add(self, path: Union[str, Path]) -> Optional[CaptureItem]:
        """Append a capture to the queue.

        Args:
            path: Path of the captured file.

        Returns:
            The evicted item if the queue was full, otherwise None.
        """
        evicted = None
        if len(self._items) >= self.max_size:
            evicted = self._items.popleft()
            logger.debug(f"{self.name} queue full, dropped {evicted.path}")

        item = CaptureItem.from_path(path)
        self._items.append(item)
        logger.debug(f"Queued {item.kind.value} capture on {self.name}: {item.path}")
        return evicted

    def remove(self, path: Union[str, Path]) -> bool:
        """Remove a capture by path.

        Returns:
            True if an item was removed.
        """
        for item in self._items:
            if item.path == str(path):
                self._items.remove(item)
                return True
        return False

    def peek_last(self) -> Optional[CaptureItem]:
        """Most recently added item, or None if the queue is empty."""
        return self._items[-1] if self._items else None

    def list(self) -> List[CaptureItem]:
        """All items, oldest first."""
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
