"""Search tasks and the min-priority queue driving the best-first search."""
import heapq
import math
from dataclasses import dataclass, field
from typing import List


@dataclass(order=True)
class SearchTask:
    """A pyramid cell still to be examined for one query pixel.

    Tasks compare by their lower bound only.
    """
    best_case_dst_sqr: float
    level: int = field(compare=False)
    x: int = field(compare=False)
    y: int = field(compare=False)

    def __post_init__(self):
        if not math.isfinite(self.best_case_dst_sqr):
            raise ValueError(
                f"Infinite or NaN distance bound for cell ({self.x}, {self.y}) "
                f"at level {self.level}: {self.best_case_dst_sqr}"
            )


class TaskQueue:
    """Min-heap of SearchTasks; the smallest lower bound is popped first."""

    def __init__(self):
        self._heap: List[SearchTask] = []

    def push(self, task: SearchTask) -> None:
        heapq.heappush(self._heap, task)

    def pop(self) -> SearchTask:
        return heapq.heappop(self._heap)

    def peek(self) -> SearchTask:
        return self._heap[0]

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
