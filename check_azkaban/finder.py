"""Lookup of the latest completed execution of a flow.

Azkaban lists executions newest first, including those still queued or
running. The finder walks that history one execution at a time and stops at
the first execution that has finished.
"""

import itertools
import logging
from typing import Iterator, Optional

from check_azkaban.azkaban import Azkaban, Execution

# Configure logging
logger = logging.getLogger(__name__)

NO_EXECUTION_FOUND = "No completed execution found"


class NoExecutionFoundError(Exception):
    """Raised when a flow's history holds no completed execution."""

    def __init__(self, message: str = NO_EXECUTION_FOUND):
        super().__init__(message)


def iter_executions(
    azkaban: Azkaban, project: str, flow: str, page_size: int = 1
) -> Iterator[Execution]:
    """Yield a flow's executions from newest to oldest.

    Pages are fetched lazily, so the caller controls how much history is
    queried. Iteration ends at the first empty page.

    Args:
        azkaban: Logged in Azkaban client
        project: Project name
        flow: Flow name
        page_size: Number of executions requested per query

    Raises:
        AzkabanError: If a query fails
    """
    if page_size < 1:
        raise ValueError(f"page_size must be positive: {page_size}")

    for start in itertools.count(0, page_size):
        page = azkaban.executions(project, flow, start, page_size)
        if not page.executions:
            logger.debug(f"History of {project}/{flow} exhausted at offset {start}")
            return
        yield from page.executions


def find_latest_completed(
    azkaban: Azkaban, project: str, flow: str, max_lookback: Optional[int] = None
) -> Execution:
    """Find the newest execution of a flow that is no longer running.

    Executions are requested one per query. Executions that are still ready,
    preparing, running or paused are skipped.

    Args:
        azkaban: Logged in Azkaban client
        project: Project name
        flow: Flow name
        max_lookback: Maximum number of executions to inspect, unbounded if None

    Returns:
        The latest terminal Execution

    Raises:
        NoExecutionFoundError: If no terminal execution exists within the history
            or within ``max_lookback`` executions
        AzkabanError: If a query fails
    """
    if not project or not project.strip():
        raise ValueError("project must not be empty")
    if not flow or not flow.strip():
        raise ValueError("flow must not be empty")
    if max_lookback is not None and max_lookback < 1:
        raise ValueError(f"max_lookback must be positive: {max_lookback}")

    executions = iter_executions(azkaban, project, flow, page_size=1)
    if max_lookback is not None:
        executions = itertools.islice(executions, max_lookback)

    for execution in executions:
        if execution.is_terminal:
            logger.debug(
                f"Latest completed execution of {project}/{flow}: "
                f"{execution.exec_id} ({execution.status})"
            )
            return execution
        logger.debug(f"Skipping execution {execution.exec_id} ({execution.status})")

    if max_lookback is not None:
        logger.info(
            f"No completed execution of {project}/{flow} "
            f"within the last {max_lookback} executions"
        )
    raise NoExecutionFoundError()
