from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")


def run_bounded(tasks: Sequence[Callable[[], T]], max_concurrency: int) -> list[T]:
    """Run tasks with at most ``max_concurrency`` in flight.

    Results come back in task order. The first failing task cancels every
    task that has not started yet and its exception is re-raised.
    """
    max_concurrency = max(1, int(max_concurrency or 1))
    if max_concurrency <= 1 or len(tasks) <= 1:
        return [task() for task in tasks]

    workers = min(max_concurrency, len(tasks))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(task) for task in tasks]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()
        for future in futures:
            if future in done and future.exception() is not None:
                raise future.exception()
        return [future.result() for future in futures]
