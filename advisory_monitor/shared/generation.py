from __future__ import annotations

from collections import OrderedDict
from threading import Lock

DEFAULT_MAX_VIEWS = 1024


class RequestGenerationTracker:
    """Monotonic request generations per report view.

    A view bumps its generation every time its inputs change; a response computed for an
    older generation is stale and must be discarded instead of applied. Generations come from
    one process-wide counter, so a view id that was evicted and reused never repeats a number.
    Only the ``max_views`` most recently used views are remembered.
    """

    def __init__(self, max_views: int = DEFAULT_MAX_VIEWS) -> None:
        if max_views < 1:
            raise ValueError("max_views must be at least 1")
        self.max_views = max_views
        self._generations: "OrderedDict[str, int]" = OrderedDict()
        self._counter = 0
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._generations)

    def begin(self, view_id: str) -> int:
        with self._lock:
            self._counter += 1
            self._generations[view_id] = self._counter
            self._generations.move_to_end(view_id)
            while len(self._generations) > self.max_views:
                self._generations.popitem(last=False)
            return self._counter

    def latest(self, view_id: str) -> int:
        with self._lock:
            return self._generations.get(view_id, 0)

    def is_current(self, view_id: str, generation: int) -> bool:
        return self.latest(view_id) == generation
