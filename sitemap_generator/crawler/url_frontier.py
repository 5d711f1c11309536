"""
URL frontier: the work list of (url, depth) pairs awaiting traversal.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional


@dataclass
class URLTask:
    """Represents a URL crawling task."""
    url: str
    depth: int
    parent_url: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for logging and inspection."""
        return {
            'url': self.url,
            'depth': self.depth,
            'parent_url': self.parent_url
        }


class URLFrontier:
    """
    In-memory frontier for a single crawl.

    'breadth_first' serves tasks in discovery order (queue); 'depth_first'
    serves the most recently added task first (stack). Tasks added together
    through add_urls() are served in the order given under both policies.
    """

    def __init__(self, traversal_order: str = 'breadth_first'):
        if traversal_order not in ('breadth_first', 'depth_first'):
            raise ValueError(f"Unknown traversal order: {traversal_order}")

        self.traversal_order = traversal_order
        self.logger = logging.getLogger(__name__)
        self._tasks: Deque[URLTask] = deque()
        self.total_added = 0

    def add_url(self, task: URLTask):
        """Add a single task to the frontier."""
        self._tasks.append(task)
        self.total_added += 1

    def add_urls(self, tasks) -> int:
        """Add tasks discovered on one page. Returns count of added tasks."""
        tasks = list(tasks)
        # A stack pops from the right, so push in reverse to keep page order
        ordered = reversed(tasks) if self.traversal_order == 'depth_first' else tasks
        for task in ordered:
            self.add_url(task)
        return len(tasks)

    def get_next_url(self) -> Optional[URLTask]:
        """Get the next task, or None when the frontier is exhausted."""
        if not self._tasks:
            return None

        if self.traversal_order == 'depth_first':
            return self._tasks.pop()
        return self._tasks.popleft()

    def is_empty(self) -> bool:
        """Check if the frontier is empty."""
        return not self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def get_stats(self) -> Dict[str, int]:
        """Get frontier statistics."""
        return {
            'total_queued': len(self._tasks),
            'total_added': self.total_added
        }
