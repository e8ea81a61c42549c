import json
import logging

import pytest

from conftest import JOBS_URL, REPOSITORIES_URL, TOKEN_URL, FakeResponse, json_response, sessions_url
from core.aggregator import MetricsAggregator, normalize_error_message, parse_params
from core.config import AppConfig
from core.exceptions import ConfigError
from core.log_sink import SEVERITY_WARNING
from core.models import SESSION_ERROR_MARKER, SESSION_ERROR_MESSAGE


@pytest.fixture
def aggregator_factory(app_config, log_sink, fake_session_factory):
    sessions = []

    def _factory(routes, config: AppConfig = None):
        def session_factory():
            session = fake_session_factory(routes)
            sessions.append(session)
            return session

        aggregator = MetricsAggregator(app_config=config or app_config, sink=log_sink, session_factory=session_factory)
        aggregator.sessions = sessions
        return aggregator

    return _factory


def test_end_to_end_metrics_document(aggregator_factory, healthy_routes, params):
    aggregator = aggregator_factory(healthy_routes)

    document = json.loads(aggregator.run(json.dumps(params)))

    assert set(document) == {"jobs_states", "repositories_states"}
    assert [job["id"] for job in document["jobs_states"]] == ["job-1", "job-2"]
    assert document["jobs_states"][0]["lastMessage"] == "ok"
    assert document["jobs_states"][0]["sessions"]["s1"]["result"] == {"result": "Success", "message": "ok"}
    assert document["repositories_states"] == {"data": [{"id": "repo-1", "capacityGB": 1024, "freeGB": 512}]}

    session = aggregator.sessions[0]
    assert session.closed
    assert session.urls("POST") == [TOKEN_URL]
    assert session.urls() == [JOBS_URL, sessions_url("job-1"), sessions_url("job-2"), REPOSITORIES_URL]
    assert all(call["headers"].get("Authorization") == "Bearer T" for call in session.calls if call["method"] == "GET")


def test_accepts_decoded_mapping(aggregator_factory, healthy_routes, params):
    document = json.loads(aggregator_factory(healthy_routes).run(params))

    assert len(document["jobs_states"]) == 2


def test_empty_job_list(aggregator_factory, healthy_routes, params):
    healthy_routes[JOBS_URL] = json_response({})

    document = json.loads(aggregator_factory(healthy_routes).run(params))

    assert document == {
        "jobs_states": [],
        "repositories_states": {"data": [{"id": "repo-1", "capacityGB": 1024, "freeGB": 512}]},
    }


def test_non_list_job_data_yields_error_document(aggregator_factory, healthy_routes, params):
    healthy_routes[JOBS_URL] = json_response({"data": {}})
    aggregator = aggregator_factory(healthy_routes)

    document = json.loads(aggregator.run(params))

    assert document == {"error": "Response data is dict, expected list."}
    assert REPOSITORIES_URL not in aggregator.sessions[0].urls()


def test_non_list_session_data_marks_only_that_job(aggregator_factory, healthy_routes, params):
    healthy_routes[sessions_url("job-1")] = json_response({"data": {}})

    document = json.loads(aggregator_factory(healthy_routes).run(params))

    assert document["jobs_states"][0]["sessions"] == SESSION_ERROR_MARKER
    assert document["jobs_states"][1]["sessions"] == {}


def test_job_failure_does_not_fail_run(aggregator_factory, healthy_routes, params):
    healthy_routes[sessions_url("job-1")] = FakeResponse(404, "not found")

    document = json.loads(aggregator_factory(healthy_routes).run(params))

    assert document["jobs_states"][0]["sessions"] == SESSION_ERROR_MARKER
    assert document["jobs_states"][0]["lastMessage"] == SESSION_ERROR_MESSAGE
    assert document["jobs_states"][1]["sessions"] == {}
    assert "error" not in document


def test_run_keeps_timings_of_last_run(aggregator_factory, healthy_routes, params):
    healthy_routes[sessions_url("job-1")] = FakeResponse(404, "not found")
    aggregator = aggregator_factory(healthy_routes)

    aggregator.run(params)

    assert aggregator.last_run.success is True
    assert aggregator.last_run.stats == {"jobs_total": 2, "jobs_failed": 1}

    healthy_routes[REPOSITORIES_URL] = FakeResponse(503, "Service Unavailable")
    aggregator.run(params)

    assert aggregator.last_run.success is False
    assert aggregator.last_run.operations[-1].operation == "repositories_states"


def test_repository_failure_yields_error_document(aggregator_factory, healthy_routes, params, log_sink):
    healthy_routes[REPOSITORIES_URL] = FakeResponse(503, "Service Unavailable")

    document = json.loads(aggregator_factory(healthy_routes).run(params))

    assert document == {"error": "Request failed with status code 503: Service Unavailable."}
    assert len(log_sink.entries) == 1
    assert log_sink.entries[0].severity == SEVERITY_WARNING
    assert log_sink.entries[0].message == "[ VEEAM ] ERROR: Request failed with status code 503: Service Unavailable."


def test_login_failure_yields_error_document(aggregator_factory, healthy_routes, params):
    healthy_routes[TOKEN_URL] = FakeResponse(401, '{"error": "invalid_grant"}')
    aggregator = aggregator_factory(healthy_routes)

    document = json.loads(aggregator.run(params))

    assert document == {"error": 'Login failed with status code 401: {"error": "invalid_grant"}.'}
    assert aggregator.sessions[0].urls() == []


def test_config_failure_makes_no_requests(aggregator_factory, healthy_routes, params):
    params["created_after"] = 365
    aggregator = aggregator_factory(healthy_routes)

    document = json.loads(aggregator.run(params))

    assert document == {"error": 'Incorrect "created_after" parameter given: 365\nMust be between 1 and 365 days.'}
    assert aggregator.sessions == []


def test_existing_period_is_not_doubled(aggregator_factory, healthy_routes):
    document = json.loads(aggregator_factory(healthy_routes).run({}))

    assert document == {"error": "Required param is not set: api_endpoint."}


def test_unparseable_params(aggregator_factory, healthy_routes, log_sink):
    document = json.loads(aggregator_factory(healthy_routes).run("{not json"))

    assert document["error"].startswith("Failed to parse input parameters:")
    assert document["error"].endswith(".")
    assert log_sink.entries[0].message.startswith("[ VEEAM ] ERROR: Failed to parse input parameters")


def test_null_access_token_fails_first_request(aggregator_factory, healthy_routes, params):
    healthy_routes[TOKEN_URL] = json_response({"access_token": None})
    aggregator = aggregator_factory(healthy_routes)

    document = json.loads(aggregator.run(params))

    assert document == {"error": "Request failed with status code 0: null."}
    assert aggregator.sessions[0].urls() == []


def test_unexpected_exception_is_contained(aggregator_factory, params):
    class ExplodingSession:
        def __enter__(self):
            raise RuntimeError("socket layer exploded")

        def __exit__(self, *exc_info):
            return None

    aggregator = aggregator_factory({})
    aggregator.session_factory = ExplodingSession

    document = json.loads(aggregator.run(params))

    assert document == {"error": "socket layer exploded."}


def test_error_is_logged_at_warning(aggregator_factory, healthy_routes, caplog):
    caplog.set_level(logging.WARNING, logger="veeam.monitoring")

    aggregator_factory(healthy_routes).run({"api_endpoint": "https://veeam"})

    assert "[ VEEAM ] ERROR: Required param is not set: user." in caplog.text


def test_parallel_run_matches_sequential(aggregator_factory, healthy_routes, params):
    sequential = aggregator_factory(healthy_routes).run(params)
    parallel = aggregator_factory(healthy_routes, AppConfig(max_workers=4)).run(params)

    assert json.loads(parallel) == json.loads(sequential)


@pytest.mark.parametrize("error,expected", [
    ("Boom", "Boom."),
    ("Boom.", "Boom."),
    (ConfigError("Required param is not set: user."), "Required param is not set: user."),
    (ValueError(""), "."),
])
def test_normalize_error_message(error, expected):
    assert normalize_error_message(error) == expected


def test_parse_params():
    assert parse_params('{"user": "u"}') == {"user": "u"}
    assert parse_params({"user": "u"}) == {"user": "u"}

    with pytest.raises(ConfigError):
        parse_params("[")
