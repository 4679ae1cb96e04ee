"""
Platform client: GraphQL requests carry variables, timeouts and surface
transport/protocol problems as PlatformError.
"""
from __future__ import annotations

from typing import Any, Dict

import pytest
import requests

from board_invite.config import PlatformConfig
from board_invite.identity_access.domain import Board, RoleSelection, User
from board_invite.platform import client as platform_client
from board_invite.platform.client import PlatformClient, PlatformError


class FakeResponse:
    def __init__(self, payload: Any = None, status: int = 200):
        self._payload = payload
        self.status_code = status

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeSession:
    def __init__(self, responses=None):
        self.headers: Dict[str, str] = {}
        self.verify = None
        self.calls: list[dict] = []
        self._responses = list(responses or [])

    def post(self, url: str, *, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if not self._responses:
            raise AssertionError(f"Unexpected POST {url}")
        nxt = self._responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


def _client(*responses, **kwargs) -> tuple[PlatformClient, FakeSession]:
    session = FakeSession(responses)
    return PlatformClient("https://api.example.test/v2/", "tok", session=session, timeout=7, **kwargs), session


def test_headers_and_url_are_configured():
    client, session = _client(api_version="2024-10")
    assert client.api_url == "https://api.example.test/v2"
    assert session.headers["Authorization"] == "tok"
    assert session.headers["API-Version"] == "2024-10"
    assert session.verify is True


def test_list_boards_passes_limit_as_variable():
    client, session = _client(FakeResponse({"data": {"boards": [{"id": 1, "name": "Roadmap"}, {"name": "x"}]}}))
    boards = client.list_boards(limit=100)
    assert boards == [Board(id="1", name="Roadmap")]
    assert session.calls[0]["json"]["variables"] == {"limit": 100}
    assert session.calls[0]["timeout"] == 7


def test_list_users_pages_until_short_page():
    page1 = {"data": {"users": [{"id": 1, "name": "A", "email": "a@x.com"}, {"id": 2, "name": "B", "email": None}]}}
    page2 = {"data": {"users": [{"id": 3, "name": "C", "email": "c@x.com"}]}}
    client, session = _client(FakeResponse(page1), FakeResponse(page2), users_page_size=2)
    users = client.list_users()
    assert users == [
        User(id="1", name="A", email="a@x.com"),
        User(id="2", name="B", email=""),
        User(id="3", name="C", email="c@x.com"),
    ]
    assert [c["json"]["variables"]["page"] for c in session.calls] == [1, 2]


def test_invite_users_sends_emails_as_variables_not_query_text():
    body = {"data": {"invite_users": {"invited_users": [{"id": 42, "email": "evil\"}@x.com"}], "errors": None}}}
    client, session = _client(FakeResponse(body))
    out = client.invite_users(['evil"}@x.com'], RoleSelection.MEMBER)
    sent = session.calls[0]["json"]
    assert 'evil"}@x.com' not in sent["query"]
    assert sent["variables"] == {"emails": ['evil"}@x.com'], "role": "MEMBER"}
    assert out == [{"id": 42, "email": 'evil"}@x.com'}]


def test_invite_users_with_error_entries_raises():
    body = {"data": {"invite_users": {"invited_users": [], "errors": [{"message": "Invalid email", "email": "x"}]}}}
    client, _ = _client(FakeResponse(body))
    with pytest.raises(PlatformError, match="Invalid email"):
        client.invite_users(["x"], RoleSelection.GUEST)


def test_add_users_to_board_uses_single_call_with_bound_ids():
    client, session = _client(FakeResponse({"data": {"add_users_to_board": [{"id": "7"}]}}))
    ack = client.add_users_to_board("B1", ["7"])
    assert session.calls[0]["json"]["variables"] == {"boardId": "B1", "userIds": ["7"]}
    assert ack["board_id"] == "B1"


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse({"errors": [{"message": "Not authenticated"}]}),
        FakeResponse({"error_message": "Rate limit"}),
        FakeResponse({"data": None}),
        FakeResponse(["not", "a", "dict"]),
        FakeResponse(ValueError("no json")),
        FakeResponse({}, status=500),
        requests.ConnectionError("down"),
        requests.Timeout("slow"),
    ],
)
def test_transport_and_protocol_errors_raise_platform_error(response):
    client, _ = _client(response)
    with pytest.raises(PlatformError):
        client.list_boards()


def test_from_config_requires_token():
    with pytest.raises(RuntimeError):
        PlatformClient.from_config(PlatformConfig(api_url="https://api.example.test", token=None))


def test_from_config_builds_session(monkeypatch: pytest.MonkeyPatch):
    session = FakeSession()
    monkeypatch.setattr(platform_client.requests, "Session", lambda: session)
    monkeypatch.setenv("MONDAY_CA_BUNDLE", "/etc/ssl/custom.pem")
    cfg = PlatformConfig(api_url="https://api.example.test", token="secret", timeout=3)
    client = PlatformClient.from_config(cfg)
    assert client.session is session
    assert client.timeout == 3
    assert session.verify == "/etc/ssl/custom.pem"
