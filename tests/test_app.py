import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

from dashboard.app import DashboardApp
from taskdash.api_client import ApiClient
from taskdash.session import SessionStatus
from taskdash.token_store import TokenStore

USER = {"id": "u1", "name": "Alex Johnson", "email": "alex@example.com", "role": "admin"}


def make_response(status=200, body=None, reason="OK"):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.reason = reason
    response.content = b"" if body is None else b"{...}"
    response.json.return_value = body
    return response


def routed(routes, default_status=200):
    """Fake ``requests.request`` answering by path suffix."""

    def request(method, url, **kwargs):
        for suffix, response in routes.items():
            if url.endswith(suffix):
                return response
        return make_response(default_status, [])

    return request


@pytest.fixture()
def tokens(tmp_path):
    return TokenStore(tmp_path / "token.json")


@pytest.fixture()
def app(tokens):
    client = ApiClient("http://api.test/api", token_store=tokens, timeout=5)
    return DashboardApp(client=client)


@patch("taskdash.api_client.requests.request")
def test_sign_in_loads_dashboard(mock_request, app, tokens):
    mock_request.side_effect = routed(
        {
            "/auth/login": make_response(body={"token": "fresh", "user": USER}),
            "/auth/me": make_response(body=USER),
            "/projects": make_response(body=[{"id": "p1", "name": "Website", "owner_id": "u1"}]),
            "/clients": make_response(500, reason="Internal Server Error"),
        }
    )

    result = app.sign_in("alex@example.com", "pw")

    assert result.ok
    assert tokens.token == "fresh"
    assert app.current_view == "dashboard"
    assert app.current_user.id == "u1"
    assert [p.id for p in app.store.state.projects] == ["p1"]
    assert app.store.state.clients == ()
    assert app.store.state.is_loading is False


def test_start_without_token_shows_login(app):
    app.start()
    assert app.current_view == "login"
    assert app.session.status is SessionStatus.ANONYMOUS


@patch("taskdash.api_client.requests.request")
def test_rejected_credential_returns_to_login(mock_request, app, tokens):
    tokens.save("stale")
    mock_request.return_value = make_response(401, reason="Unauthorized")

    app.start()

    assert app.current_view == "login"
    assert tokens.token is None
    assert not app.session.is_authenticated


def test_switch_view_validates_name(app):
    app.switch_view("projects")
    assert app.current_view == "projects"
    with pytest.raises(ValueError):
        app.switch_view("reports")


@patch("taskdash.api_client.requests.request")
def test_sign_out_resets_everything(mock_request, app, tokens):
    mock_request.side_effect = routed(
        {
            "/auth/login": make_response(body={"token": "fresh", "user": USER}),
            "/auth/me": make_response(body=USER),
            "/tasks": make_response(body=[{"id": "t1", "title": "Copy", "project_id": "p1"}]),
        }
    )
    app.sign_in("alex@example.com", "pw")
    assert app.store.state.tasks

    app.sign_out()

    assert tokens.token is None
    assert app.store.state.tasks == ()
    assert app.current_view == "login"
    assert app.current_user is None


def test_stop_timer_records_entry(app):
    app.current_user = MagicMock(id="u1")
    now = [1_000.0]
    app.timer.clock = lambda: now[0]
    app.timer.on_tick = None

    app.start_timer("t1", "p1", "Drafting")
    now[0] += 3 * 60 + 20
    entry = app.stop_timer()

    assert entry.duration == 3
    assert entry.user_id == "u1"
    assert app.store.state.time_entries == (entry,)
    assert app.elapsed_display == "00:00:00"


def non_json_response():
    response = make_response(body={})
    response.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)
    return response


@patch("taskdash.api_client.requests.request")
def test_restore_with_html_identity_body_ends_anonymous(mock_request, app, tokens):
    tokens.save("tok")
    mock_request.return_value = non_json_response()

    app.start()

    assert app.session.status is SessionStatus.ANONYMOUS
    assert app.current_view == "login"


@patch("taskdash.api_client.requests.request")
def test_sign_in_with_html_body_reports_error(mock_request, app):
    mock_request.return_value = non_json_response()

    result = app.sign_in("alex@example.com", "pw")

    assert not result.ok
    assert app.current_view == "login"
    assert app.session.status is SessionStatus.ANONYMOUS


@patch("taskdash.api_client.requests.request")
def test_sign_in_rejected_during_load_stays_on_login(mock_request, app, tokens):
    mock_request.side_effect = routed(
        {"/auth/login": make_response(body={"token": "fresh", "user": USER})},
        default_status=401,
    )

    result = app.sign_in("alex@example.com", "pw")

    assert not result.ok
    assert app.current_view == "login"
    assert not app.session.is_authenticated
    assert tokens.token is None


def test_switch_view_logs_change(app, caplog):
    with caplog.at_level(logging.DEBUG, logger="taskdash.dashboard"):
        app.switch_view("tasks")
        app.switch_view("tasks")
    assert caplog.text.count("View login -> tasks") == 1
