"""Azkaban AJAX API client.

This module handles session authentication against an Azkaban web server and
queries the execution history of a flow. Only the fields the check needs are
read from the JSON responses.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

import requests

# Configure logging
logger = logging.getLogger(__name__)

# Statuses of executions that have not finished yet. Anything else is terminal.
NON_TERMINAL_STATUSES = frozenset({"READY", "PREPARING", "RUNNING", "PAUSED"})

DEFAULT_TIMEOUT = 30.0


class AzkabanError(Exception):
    """Base class for errors raised while talking to Azkaban."""

    pass


class AuthenticationError(AzkabanError):
    """Raised when login fails or the Azkaban server is unreachable."""

    pass


class QueryError(AzkabanError):
    """Raised when an execution history query fails."""

    pass


@dataclass
class Execution:
    """A single run of an Azkaban flow.

    Attributes:
        exec_id: Azkaban execution id
        status: Execution status name (e.g. "RUNNING", "SUCCEEDED", "FAILED")
        start_time: Start timestamp in milliseconds since the epoch
        end_time: End timestamp in milliseconds since the epoch (-1 while running)
        flow_id: Name of the flow
        project_id: Numeric id of the project
        submit_user: User that submitted the execution
        submit_time: Submission timestamp in milliseconds since the epoch
    """

    exec_id: int
    status: str
    start_time: int
    end_time: int
    flow_id: str = ""
    project_id: int = 0
    submit_user: str = ""
    submit_time: int = 0

    @property
    def is_terminal(self) -> bool:
        """Whether the execution has finished, successfully or not."""
        return self.status not in NON_TERMINAL_STATUSES

    @property
    def duration_millis(self) -> int:
        return self.end_time - self.start_time

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Execution":
        """Create Execution from one entry of a fetchFlowExecutions response."""
        return cls(
            exec_id=int(data.get("execId", 0)),
            status=str(data["status"]),
            start_time=int(data["startTime"]),
            end_time=int(data["endTime"]),
            flow_id=data.get("flowId", ""),
            project_id=int(data.get("projectId", 0)),
            submit_user=data.get("submitUser", ""),
            submit_time=int(data.get("submitTime", 0)),
        )


@dataclass
class ExecutionPage:
    """One page of a flow's execution history, newest execution first."""

    executions: List[Execution] = field(default_factory=list)
    total: int = 0
    project: str = ""
    flow: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionPage":
        """Create ExecutionPage from a fetchFlowExecutions response."""
        return cls(
            executions=[Execution.from_dict(e) for e in data.get("executions", [])],
            total=int(data.get("total", 0)),
            project=data.get("project", ""),
            flow=data.get("flow", ""),
        )


class Azkaban:
    """Client for the Azkaban web server AJAX API.

    A client must be logged in (see ``authenticated``) before querying
    executions. The underlying ``requests.Session`` is closed by ``close`` or
    when the client is used as a context manager.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        session: Optional[requests.Session] = None,
    ):
        """Initialize client for an Azkaban server.

        Args:
            base_url: Base URL of the Azkaban web server (e.g. "https://azkaban:8443")
            timeout: Timeout in seconds for each HTTP request
            verify_ssl: Whether to verify TLS certificates
            session: Optional requests session to use instead of a new one
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session_id: Optional[str] = None
        self._session = session or requests.Session()
        self._session.verify = verify_ssl

    @classmethod
    def authenticated(
        cls,
        base_url: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
    ) -> "Azkaban":
        """Create a client and log in.

        Raises:
            AuthenticationError: If login fails
        """
        azkaban = cls(base_url, timeout=timeout, verify_ssl=verify_ssl)
        try:
            azkaban.login(username, password)
        except AuthenticationError:
            azkaban.close()
            raise
        return azkaban

    def login(self, username: str, password: str) -> str:
        """Log in and store the Azkaban session id.

        Args:
            username: Azkaban user name
            password: Azkaban password

        Returns:
            The session id issued by Azkaban

        Raises:
            AuthenticationError: If the server is unreachable or rejects the credentials
        """
        logger.debug(f"Logging in to {self.base_url} as {username}")
        try:
            response = self._session.post(
                self.base_url,
                data={"action": "login", "username": username, "password": password},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to connect to Azkaban at {self.base_url}: {e}")
            raise AuthenticationError(f"Failed to connect to Azkaban: {e}")

        data = self._decode(response, AuthenticationError)
        if "error" in data:
            logger.error(f"Login rejected for {username}: {data['error']}")
            raise AuthenticationError(str(data["error"]))

        session_id = data.get("session.id")
        if not session_id:
            raise AuthenticationError("Login failed: no session id in response")

        self.session_id = session_id
        logger.debug("Login successful")
        return session_id

    def executions(
        self, project: str, flow: str, start: int, length: int
    ) -> ExecutionPage:
        """Fetch a page of a flow's execution history.

        Args:
            project: Project name
            flow: Flow name
            start: Offset into the history, 0 being the newest execution
            length: Maximum number of executions to return

        Returns:
            ExecutionPage with up to ``length`` executions, newest first

        Raises:
            QueryError: If the request fails or the response is invalid
        """
        if self.session_id is None:
            raise QueryError("Not logged in to Azkaban")

        params = {
            "ajax": "fetchFlowExecutions",
            "session.id": self.session_id,
            "project": project,
            "flow": flow,
            "start": start,
            "length": length,
        }
        url = f"{self.base_url}/manager"
        logger.debug(f"Fetching executions of {project}/{flow} start={start} length={length}")

        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to fetch executions of {project}/{flow}: {e}")
            raise QueryError(f"Failed to fetch executions: {e}")

        data = self._decode(response, QueryError)
        if "error" in data:
            logger.error(f"Azkaban rejected query for {project}/{flow}: {data['error']}")
            raise QueryError(str(data["error"]))

        try:
            return ExecutionPage.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid executions response for {project}/{flow}: {e}")
            raise QueryError(f"Invalid executions response: {e!r}")

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "Azkaban":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @staticmethod
    def _decode(
        response: requests.Response, error_class: Type[AzkabanError]
    ) -> Dict[str, Any]:
        """Parse a JSON object response body.

        Raises:
            error_class: If the body is not a JSON object
        """
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from Azkaban: {e}")
            raise error_class(f"Invalid response from Azkaban: {e}")

        if not isinstance(data, dict):
            raise error_class(
                f"Invalid response from Azkaban: expected object, got {type(data).__name__}"
            )
        return data
