"""Bounded task group for per-plugin jobs.

Each plugin job runs on a thread pool; the caller blocks until every job
has finished and gets one outcome per job back, failures included.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class TaskOutcome:
    """Result of one per-plugin job."""

    name: str
    success: bool
    message: str = ""
    details: list[str] = field(default_factory=list)
    changed: bool = True
    error: BaseException | None = None


@dataclass
class TaskSummary:
    """Outcomes of a batch of jobs, in submission order."""

    outcomes: list[TaskOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[TaskOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> list[TaskOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def changed(self) -> list[TaskOutcome]:
        """Successful outcomes that changed something on disk."""
        return [o for o in self.outcomes if o.success and o.changed]

    @property
    def all_successful(self) -> bool:
        return all(o.success for o in self.outcomes)

    def extend(self, other: TaskSummary) -> None:
        self.outcomes.extend(other.outcomes)


def run_tasks(
    items: Sequence[T],
    job: Callable[[T], TaskOutcome],
    name_of: Callable[[T], str],
    jobs: int,
) -> TaskSummary:
    """Run job(item) for every item on at most `jobs` worker threads.

    Exceptions raised by a job become failed outcomes; they never affect
    sibling jobs.

    Args:
        items: Work items, one per plugin
        job: Callable producing an outcome for one item
        name_of: Plugin name of an item, used for failed outcomes
        jobs: Maximum number of concurrent workers

    Returns:
        TaskSummary with one outcome per item, in the order of items
    """
    summary = TaskSummary()
    if not items:
        return summary

    workers = max(1, min(jobs, len(items)))
    logger.debug("Running %d job(s) on %d worker(s)", len(items), workers)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="vpm") as pool:
        futures = [(item, pool.submit(job, item)) for item in items]

        for item, future in futures:
            name = name_of(item)
            try:
                outcome = future.result()
            except Exception as e:
                logger.debug("Job for %s failed", name, exc_info=True)
                outcome = TaskOutcome(name=name, success=False, message=str(e), error=e)
            summary.outcomes.append(outcome)

    return summary
