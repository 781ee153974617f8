"""Parallel Executor Module - Runs independent per-file work concurrently."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class ExecutionResult(Generic[R]):
    """Result of running a function over many items.

    ``results`` is aligned with the input items; failed items hold None and
    their error message is stored in ``errors`` under the item's index.
    """
    results: List[Optional[R]] = field(default_factory=list)
    total_duration_ms: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    errors: Dict[int, str] = field(default_factory=dict)

    @property
    def failed(self) -> int:
        return len(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "item_count": len(self.results),
            "total_duration_ms": self.total_duration_ms,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "failed": self.failed,
            "errors": self.errors,
        }


class ParallelExecutor:
    """Executes a blocking function over items in worker threads.

    Completion order never leaks into the output: results come back in input
    order.
    """

    def __init__(self, max_concurrent: int = 4):
        """Initialize the parallel executor.

        Args:
            max_concurrent: Maximum number of items processed at once
        """
        self.max_concurrent = max_concurrent

    async def execute(
        self,
        items: Sequence[T],
        func: Callable[[T], R],
    ) -> ExecutionResult[R]:
        """Run ``func`` over every item.

        Args:
            items: Independent work items
            func: Blocking function applied to each item

        Returns:
            ExecutionResult with results aligned to ``items``
        """
        started_at = datetime.now()
        result: ExecutionResult[R] = ExecutionResult(started_at=started_at)
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def run_item(index: int, item: T) -> Optional[R]:
            """Run a single item with semaphore."""
            async with semaphore:
                try:
                    return await asyncio.to_thread(func, item)
                except Exception as e:
                    result.errors[index] = f"{type(e).__name__}: {e}"
                    return None

        result.results = list(await asyncio.gather(
            *(run_item(index, item) for index, item in enumerate(items))
        ))

        completed_at = datetime.now()
        result.completed_at = completed_at
        result.total_duration_ms = int(
            (completed_at - started_at).total_seconds() * 1000
        )
        return result

    def execute_sequential(self, items: Sequence[T], func: Callable[[T], R]) -> ExecutionResult[R]:
        """Run ``func`` over every item in the calling thread."""
        started_at = datetime.now()
        result: ExecutionResult[R] = ExecutionResult(started_at=started_at)
        for index, item in enumerate(items):
            try:
                result.results.append(func(item))
            except Exception as e:
                result.errors[index] = f"{type(e).__name__}: {e}"
                result.results.append(None)
        completed_at = datetime.now()
        result.completed_at = completed_at
        result.total_duration_ms = int(
            (completed_at - started_at).total_seconds() * 1000
        )
        return result
