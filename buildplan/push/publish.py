"""Sequential publishing of an ordered rebuild plan."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional

from buildplan.push.client import Job, PublishError, Publisher
from buildplan.state.models import Package

logger = logging.getLogger(__name__)


def publish_all(
    packages: Iterable[Package],
    publisher: Publisher,
    on_published: Optional[Callable[[Job], None]] = None,
) -> List[Job]:
    """
    Publish packages one at a time, in the given order.

    Stops at the first failure; the raised PublishError carries the jobs
    already submitted in ``published``. Nothing is rolled back or retried.
    """
    jobs: List[Job] = []
    for pkg in packages:
        logger.info("Publishing %s", pkg.name)
        try:
            job = publisher.publish(pkg)
        except PublishError as e:
            e.published = list(jobs)
            raise
        jobs.append(job)
        if on_published is not None:
            on_published(job)
    return jobs


__all__ = ["publish_all"]
