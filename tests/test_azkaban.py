"""Unit tests for the Azkaban API client."""

import json
from unittest.mock import Mock, patch

import pytest
import requests

from check_azkaban.azkaban import (
    Azkaban,
    AuthenticationError,
    Execution,
    ExecutionPage,
    QueryError,
)


def json_response(data):
    """Create a mock response returning data as JSON."""
    response = Mock()
    response.json.return_value = data
    response.raise_for_status = Mock()
    return response


EXECUTIONS_RESPONSE = {
    "project": "etl",
    "flow": "daily",
    "total": 12,
    "from": 0,
    "length": 1,
    "executions": [
        {
            "execId": 304,
            "status": "SUCCEEDED",
            "startTime": 1407779928865,
            "endTime": 1407779929129,
            "submitTime": 1407779928829,
            "submitUser": "azkaban",
            "flowId": "daily",
            "projectId": 7,
        }
    ],
}


class TestDataStructures:
    """Test response parsing."""

    def test_execution_from_dict(self):
        execution = Execution.from_dict(EXECUTIONS_RESPONSE["executions"][0])

        assert execution.exec_id == 304
        assert execution.status == "SUCCEEDED"
        assert execution.start_time == 1407779928865
        assert execution.end_time == 1407779929129
        assert execution.flow_id == "daily"
        assert execution.project_id == 7
        assert execution.submit_user == "azkaban"
        assert execution.duration_millis == 264

    @pytest.mark.parametrize(
        "status,terminal",
        [
            ("READY", False),
            ("PREPARING", False),
            ("RUNNING", False),
            ("PAUSED", False),
            ("SUCCEEDED", True),
            ("FAILED", True),
            ("KILLED", True),
            ("CANCELLED", True),
        ],
    )
    def test_is_terminal(self, status, terminal):
        execution = Execution(exec_id=1, status=status, start_time=0, end_time=0)
        assert execution.is_terminal is terminal

    def test_execution_page_from_dict(self):
        page = ExecutionPage.from_dict(EXECUTIONS_RESPONSE)

        assert page.project == "etl"
        assert page.flow == "daily"
        assert page.total == 12
        assert len(page.executions) == 1

    def test_execution_page_without_executions(self):
        page = ExecutionPage.from_dict({"project": "etl", "flow": "daily", "total": 0})

        assert page.executions == []


class TestLogin:
    """Test Azkaban.login and Azkaban.authenticated."""

    @patch("check_azkaban.azkaban.requests.Session.post")
    def test_login_success(self, mock_post):
        mock_post.return_value = json_response(
            {"status": "success", "session.id": "c001aba5-a90f-4daf-8f11-62330d034c0a"}
        )

        azkaban = Azkaban.authenticated("https://azkaban:8443/", "user", "secret")

        assert azkaban.session_id == "c001aba5-a90f-4daf-8f11-62330d034c0a"
        assert azkaban.base_url == "https://azkaban:8443"
        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        assert args[0] == "https://azkaban:8443"
        assert kwargs["data"] == {
            "action": "login",
            "username": "user",
            "password": "secret",
        }

    @patch("check_azkaban.azkaban.requests.Session.post")
    def test_login_rejected(self, mock_post):
        mock_post.return_value = json_response(
            {"error": "Incorrect Login. Username/Password not found."}
        )

        with pytest.raises(AuthenticationError) as exc_info:
            Azkaban.authenticated("https://azkaban:8443", "user", "wrong")

        assert str(exc_info.value) == "Incorrect Login. Username/Password not found."

    @patch("check_azkaban.azkaban.requests.Session.post")
    def test_login_connection_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("Connection refused")

        with pytest.raises(AuthenticationError) as exc_info:
            Azkaban.authenticated("https://azkaban:8443", "user", "secret")

        assert "Failed to connect to Azkaban" in str(exc_info.value)
        assert "Connection refused" in str(exc_info.value)

    @patch("check_azkaban.azkaban.requests.Session.post")
    def test_login_http_error(self, mock_post):
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("502 Bad Gateway")
        mock_post.return_value = response

        with pytest.raises(AuthenticationError) as exc_info:
            Azkaban.authenticated("https://azkaban:8443", "user", "secret")

        assert "502 Bad Gateway" in str(exc_info.value)

    @patch("check_azkaban.azkaban.requests.Session.post")
    def test_login_invalid_json(self, mock_post):
        response = Mock()
        response.json.side_effect = json.JSONDecodeError("Invalid JSON", "", 0)
        response.raise_for_status = Mock()
        mock_post.return_value = response

        with pytest.raises(AuthenticationError) as exc_info:
            Azkaban.authenticated("https://azkaban:8443", "user", "secret")

        assert "Invalid response from Azkaban" in str(exc_info.value)

    @patch("check_azkaban.azkaban.requests.Session.post")
    def test_login_without_session_id(self, mock_post):
        mock_post.return_value = json_response({"status": "success"})

        with pytest.raises(AuthenticationError) as exc_info:
            Azkaban.authenticated("https://azkaban:8443", "user", "secret")

        assert "no session id" in str(exc_info.value)


class TestExecutions:
    """Test Azkaban.executions."""

    @pytest.fixture
    def azkaban(self):
        azkaban = Azkaban("https://azkaban:8443", timeout=5)
        azkaban.session_id = "session-1"
        return azkaban

    @patch("check_azkaban.azkaban.requests.Session.get")
    def test_executions_success(self, mock_get, azkaban):
        mock_get.return_value = json_response(EXECUTIONS_RESPONSE)

        page = azkaban.executions("etl", "daily", 3, 1)

        assert page.executions[0].status == "SUCCEEDED"
        args, kwargs = mock_get.call_args
        assert args[0] == "https://azkaban:8443/manager"
        assert kwargs["params"] == {
            "ajax": "fetchFlowExecutions",
            "session.id": "session-1",
            "project": "etl",
            "flow": "daily",
            "start": 3,
            "length": 1,
        }
        assert kwargs["timeout"] == 5

    @patch("check_azkaban.azkaban.requests.Session.get")
    def test_executions_empty_page(self, mock_get, azkaban):
        mock_get.return_value = json_response(
            {"project": "etl", "flow": "daily", "total": 0, "executions": []}
        )

        assert azkaban.executions("etl", "daily", 0, 1).executions == []

    @patch("check_azkaban.azkaban.requests.Session.get")
    def test_executions_error_response(self, mock_get, azkaban):
        mock_get.return_value = json_response({"error": "Project etl doesn't exist."})

        with pytest.raises(QueryError) as exc_info:
            azkaban.executions("etl", "daily", 0, 1)

        assert str(exc_info.value) == "Project etl doesn't exist."

    @patch("check_azkaban.azkaban.requests.Session.get")
    def test_executions_timeout(self, mock_get, azkaban):
        mock_get.side_effect = requests.Timeout("Read timed out")

        with pytest.raises(QueryError) as exc_info:
            azkaban.executions("etl", "daily", 0, 1)

        assert "Read timed out" in str(exc_info.value)

    @patch("check_azkaban.azkaban.requests.Session.get")
    def test_executions_malformed_execution(self, mock_get, azkaban):
        mock_get.return_value = json_response(
            {"executions": [{"execId": 1, "status": "FAILED"}]}
        )

        with pytest.raises(QueryError) as exc_info:
            azkaban.executions("etl", "daily", 0, 1)

        assert "Invalid executions response" in str(exc_info.value)

    @patch("check_azkaban.azkaban.requests.Session.get")
    def test_executions_non_object_body(self, mock_get, azkaban):
        mock_get.return_value = json_response([1, 2, 3])

        with pytest.raises(QueryError):
            azkaban.executions("etl", "daily", 0, 1)

    def test_executions_requires_login(self):
        with pytest.raises(QueryError):
            Azkaban("https://azkaban:8443").executions("etl", "daily", 0, 1)

    def test_context_manager_closes_session(self):
        azkaban = Azkaban("https://azkaban:8443")
        with patch.object(azkaban._session, "close") as mock_close:
            with azkaban as client:
                assert client is azkaban
        mock_close.assert_called_once()
