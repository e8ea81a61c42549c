import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pytest
import requests

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from core.config import AppConfig  # noqa: E402
from core.log_sink import LogSink  # noqa: E402

ENDPOINT = "https://veeam.example.com:4443/"
TOKEN_URL = ENDPOINT + "api/oauth2/token"
JOBS_URL = ENDPOINT + "api/v1/jobs/states"
REPOSITORIES_URL = ENDPOINT + "api/v1/backupInfrastructure/repositories/states"


def sessions_url(job_id: str, limit: int = 3) -> str:
    return f"{ENDPOINT}api/v1/sessions?jobIdFilter={job_id}&limit={limit}&orderDesc=true"


class FakeResponse:
    def __init__(self, status_code: int = 200, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self.text = text


def json_response(payload: Any, status_code: int = 200) -> FakeResponse:
    return FakeResponse(status_code, json.dumps(payload))


Route = Union[FakeResponse, Exception]


class FakeHttpSession:
    """Stands in for requests.Session; routes are matched on the exact URL."""

    def __init__(self, routes: Optional[Dict[str, Route]] = None) -> None:
        self.routes: Dict[str, Route] = dict(routes or {})
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def _respond(self, method: str, url: str, **kwargs) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404, '{"message": "not found"}')
        if isinstance(route, Exception):
            raise route
        return route

    def get(self, url: str, **kwargs) -> FakeResponse:
        return self._respond("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> FakeResponse:
        return self._respond("POST", url, **kwargs)

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeHttpSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def urls(self, method: str = "GET") -> List[str]:
        return [call["url"] for call in self.calls if call["method"] == method]


@pytest.fixture
def params() -> Dict[str, Any]:
    return {
        "api_endpoint": ENDPOINT.rstrip("/"),
        "user": "monitor",
        "password": "s3cret&pass",
        "created_after": 7,
    }


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(http_timeout=5.0)


@pytest.fixture
def log_sink() -> LogSink:
    return LogSink()


@pytest.fixture
def healthy_routes() -> Dict[str, Route]:
    """A small deployment: two jobs, each with session history, and one repository."""
    return {
        TOKEN_URL: json_response({"access_token": "T", "token_type": "bearer"}),
        JOBS_URL: json_response({
            "data": [
                {"id": "job-1", "name": "Exchange backup", "status": "Success"},
                {"id": "job-2", "name": "SharePoint backup", "status": "Warning"},
            ]
        }),
        sessions_url("job-1"): json_response({
            "data": [
                {
                    "id": "s1",
                    "name": "Exchange backup",
                    "state": "Stopped",
                    "creationTime": "2024-05-01T10:00:00Z",
                    "endTime": "2024-05-01T10:05:00Z",
                    "progressPercent": 100,
                    "result": {"result": "Success", "message": "ok"},
                },
                {
                    "id": "s0",
                    "name": "Exchange backup",
                    "state": "Stopped",
                    "creationTime": "2024-04-30T10:00:00Z",
                    "endTime": "2024-04-30T10:01:30Z",
                    "progressPercent": 100,
                    "result": {"result": "Success", "message": ""},
                },
            ]
        }),
        sessions_url("job-2"): json_response({"data": []}),
        REPOSITORIES_URL: json_response({"data": [{"id": "repo-1", "capacityGB": 1024, "freeGB": 512}]}),
    }


@pytest.fixture
def fake_session_factory():
    def _factory(routes: Optional[Dict[str, Route]] = None) -> FakeHttpSession:
        return FakeHttpSession(routes)

    return _factory


@pytest.fixture
def connection_error() -> Exception:
    return requests.ConnectionError("connection refused")
