"""Shared fixtures for check_azkaban tests."""

import sys
from pathlib import Path
from typing import List, Tuple

import pytest

# Add project root to path so check_azkaban is importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent))

from check_azkaban.azkaban import Execution, ExecutionPage  # noqa: E402


def make_execution(
    status: str, exec_id: int = 1, start_time: int = 1000, end_time: int = 2000
) -> Execution:
    """Build an Execution with the given status."""
    return Execution(
        exec_id=exec_id, status=status, start_time=start_time, end_time=end_time
    )


class FakeAzkaban:
    """In-memory stand-in for a logged in Azkaban client.

    Holds a flow history newest first and serves it page by page, recording
    every (project, flow, start, length) query it receives.
    """

    def __init__(self, history: List[Execution], error: Exception = None):
        self.history = history
        self.error = error
        self.queries: List[Tuple[str, str, int, int]] = []
        self.closed = False

    def executions(self, project, flow, start, length):
        self.queries.append((project, flow, start, length))
        if self.error is not None:
            raise self.error
        return ExecutionPage(
            executions=self.history[start : start + length],
            total=len(self.history),
            project=project,
            flow=flow,
        )

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


@pytest.fixture
def fake_azkaban():
    """Factory fixture creating FakeAzkaban instances from status lists."""

    def _create(statuses: List[str], error: Exception = None) -> FakeAzkaban:
        history = [
            make_execution(status, exec_id=len(statuses) - i)
            for i, status in enumerate(statuses)
        ]
        return FakeAzkaban(history, error=error)

    return _create
