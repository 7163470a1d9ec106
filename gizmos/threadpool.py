"""A fixed-size pool of worker threads fed from a FIFO task queue."""

from __future__ import annotations

import threading
import traceback
from collections import deque
from typing import Callable, Optional


class ThreadPool:
    """Runs submitted callables on a fixed number of worker threads.

    Shutting down lets the workers finish every task already queued
    before they exit.
    """

    def __init__(self, workers: int) -> None:
        if workers < 0:
            raise ValueError("number of workers must not be negative")
        self._tasks: deque[Callable[[], object]] = deque()
        self._condition = threading.Condition()
        self._closing = False
        self._threads = [
            threading.Thread(target=self._work, name=f"pool-worker-{n}", daemon=True)
            for n in range(workers)
        ]
        for thread in self._threads:
            thread.start()

    def _work(self) -> None:
        while True:
            with self._condition:
                self._condition.wait_for(lambda: self._closing or self._tasks)
                if not self._tasks:
                    return
                task = self._tasks.popleft()
            try:
                task()
            except Exception:
                traceback.print_exc()

    def submit(self, task: Callable[[], object]) -> None:
        """Queue a callable taking no arguments."""
        with self._condition:
            if self._closing:
                raise RuntimeError("cannot submit to a pool that is shut down")
            self._tasks.append(task)
            self._condition.notify()

    def shutdown(self) -> None:
        """Stop accepting tasks, drain the queue and wait for the workers."""
        with self._condition:
            self._closing = True
            self._condition.notify_all()
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current:
                thread.join()

    def __enter__(self) -> "ThreadPool":
        return self

    def __exit__(self, *args: object) -> Optional[bool]:
        self.shutdown()
        return None