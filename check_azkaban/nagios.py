"""Nagios plugin output.

A Nagios plugin reports through a single line on stdout of the form
``SERVICE STATUS: description`` and an exit code of 0 (OK), 1 (WARNING),
2 (CRITICAL) or 3 (UNKNOWN).
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import NoReturn, Optional, TextIO, Tuple


class NagiosState(Enum):
    """Service states with their plugin exit codes."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    @property
    def exit_code(self) -> int:
        return self.value

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class NagiosStatus:
    """A service state together with its human readable description."""

    state: NagiosState
    description: str

    @classmethod
    def ok(cls, description: str) -> "NagiosStatus":
        return cls(NagiosState.OK, description)

    @classmethod
    def warning(cls, description: str) -> "NagiosStatus":
        return cls(NagiosState.WARNING, description)

    @classmethod
    def critical(cls, description: str) -> "NagiosStatus":
        return cls(NagiosState.CRITICAL, description)

    @classmethod
    def unknown(cls, description: str) -> "NagiosStatus":
        return cls(NagiosState.UNKNOWN, description)


class NagiosService:
    """Reports the status of a monitored service."""

    def __init__(self, name: str):
        """Initialize service reporter.

        Args:
            name: Service name printed at the start of the status line
        """
        self.name = name

    def render(self, status: NagiosStatus) -> Tuple[int, str]:
        """Build the exit code and status line for a status.

        Returns:
            Tuple of (exit_code, line) where line has no trailing newline
        """
        line = f"{self.name} {status.state.label}: {status.description}"
        return status.state.exit_code, line

    def report(self, status: NagiosStatus, stream: Optional[TextIO] = None) -> NoReturn:
        """Print the status line and exit with the status' exit code.

        Args:
            status: Status to report
            stream: Output stream, stdout if None
        """
        exit_code, line = self.render(status)
        stream = stream or sys.stdout
        stream.write(line + "\n")
        stream.flush()
        sys.exit(exit_code)
