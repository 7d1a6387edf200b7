"""Mapping of execution lookups to Nagios statuses."""

import logging
from typing import Union

from check_azkaban.azkaban import AzkabanError, Execution
from check_azkaban.duration import format_duration
from check_azkaban.finder import NoExecutionFoundError
from check_azkaban.nagios import NagiosStatus

# Configure logging
logger = logging.getLogger(__name__)

SUCCEEDED = "SUCCEEDED"

LookupResult = Union[Execution, AzkabanError, NoExecutionFoundError]


def describe(execution: Execution) -> str:
    """Describe an execution as ``<status>, took HH:MM:SS.mmm``.

    An end time before the start time (clock skew or an unset end time) is
    reported as a zero duration.
    """
    elapsed = execution.duration_millis
    if elapsed < 0:
        logger.warning(
            f"Execution {execution.exec_id} ends before it starts "
            f"(start={execution.start_time}, end={execution.end_time}), "
            "reporting zero duration"
        )
        elapsed = 0
    return f"{execution.status}, took {format_duration(elapsed)}"


def classify(result: LookupResult) -> NagiosStatus:
    """Classify the outcome of an execution lookup.

    Args:
        result: The execution found, or the error that prevented finding one

    Returns:
        OK for a succeeded execution, CRITICAL for any other completed
        execution, UNKNOWN if the lookup failed

    Raises:
        TypeError: If result is none of the supported types
    """
    if isinstance(result, (AzkabanError, NoExecutionFoundError)):
        return NagiosStatus.unknown(str(result))
    if isinstance(result, Execution):
        if result.status == SUCCEEDED:
            return NagiosStatus.ok(describe(result))
        return NagiosStatus.critical(describe(result))
    raise TypeError(f"Cannot classify {type(result).__name__}")
