"""
Minimal monday.com GraphQL client (sync, requests-based).

Design:
- Framework-agnostic, callable from the CLI and the web adapter.
- Every query is static text; caller input travels only as GraphQL
  variables, never interpolated into the query body.
- Transport and protocol problems surface as `PlatformError`; callers decide
  whether an error is fatal (directory snapshot) or per identity.

Security:
- Do not log the API token.
- Every HTTP call carries a timeout.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Sequence

import requests

from board_invite.config import PlatformConfig
from board_invite.identity_access.domain import Board, RoleSelection, User


logger = logging.getLogger("board_invite.platform")


BOARDS_QUERY = """
query ($limit: Int) {
  boards(limit: $limit) {
    id
    name
  }
}
"""

USERS_QUERY = """
query ($limit: Int, $page: Int) {
  users(limit: $limit, page: $page) {
    id
    name
    email
  }
}
"""

INVITE_USERS_MUTATION = """
mutation ($emails: [String!]!, $role: UserRole) {
  invite_users(emails: $emails, user_role: $role) {
    invited_users {
      id
      email
    }
    errors {
      message
      code
      email
    }
  }
}
"""

ADD_USERS_TO_BOARD_MUTATION = """
mutation ($boardId: ID!, $userIds: [ID!]!) {
  add_users_to_board(board_id: $boardId, user_ids: $userIds) {
    id
  }
}
"""


class PlatformError(RuntimeError):
    """Remote call failed (HTTP error, malformed body or GraphQL errors)."""


class PlatformClient:
    """Thin adapter over the remote board/directory API."""

    def __init__(
        self,
        api_url: str,
        token: str,
        *,
        api_version: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 10.0,
        users_page_size: int = 500,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.users_page_size = max(1, int(users_page_size))
        self.session.headers.update({
            "Authorization": token,
            "Content-Type": "application/json",
        })
        if api_version:
            self.session.headers["API-Version"] = api_version
        # Honor optional custom CA bundle for TLS verification; default to verify=True
        ca_bundle = os.getenv("MONDAY_CA_BUNDLE")
        self.session.verify = ca_bundle if ca_bundle else True

    @classmethod
    def from_config(cls, cfg: PlatformConfig) -> "PlatformClient":
        if not cfg.token:
            raise RuntimeError("MONDAY_API_TOKEN missing: set it in the environment or pass --token")
        return cls(cfg.api_url, cfg.token, api_version=cfg.api_version, timeout=cfg.timeout)

    # --- transport ----------------------------------------------------------

    def execute(self, query: str, variables: Dict[str, Any] | None = None) -> Dict[str, Any]:
        """POST a GraphQL document and return its `data` object."""
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        try:
            resp = self.session.post(self.api_url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as exc:
            raise PlatformError(f"transport_error: {exc.__class__.__name__}") from exc
        except ValueError as exc:
            raise PlatformError("malformed_response") from exc
        if not isinstance(body, dict):
            raise PlatformError("malformed_response")
        errors = body.get("errors") or body.get("error_message")
        if errors:
            raise PlatformError(f"graphql_error: {_first_message(errors)}")
        data = body.get("data")
        if not isinstance(data, dict):
            raise PlatformError("malformed_response")
        return data

    # --- API ----------------------------------------------------------------

    def list_boards(self, limit: int = 100) -> List[Board]:
        data = self.execute(BOARDS_QUERY, {"limit": int(limit)})
        boards: List[Board] = []
        for b in data.get("boards") or []:
            if not isinstance(b, dict) or b.get("id") is None:
                continue
            boards.append(Board(id=str(b["id"]), name=str(b.get("name") or "")))
        return boards

    def list_users(self) -> List[User]:
        """Return all account users, paging until a short page arrives."""
        users: List[User] = []
        page = 1
        while True:
            data = self.execute(USERS_QUERY, {"limit": self.users_page_size, "page": page})
            batch = data.get("users") or []
            for u in batch:
                if not isinstance(u, dict) or u.get("id") is None:
                    continue
                users.append(
                    User(
                        id=str(u["id"]),
                        name=str(u.get("name") or ""),
                        email=str(u.get("email") or ""),
                    )
                )
            if len(batch) < self.users_page_size:
                break
            page += 1
        logger.debug("Fetched %d directory users in %d page(s)", len(users), page)
        return users

    def invite_users(self, emails: Sequence[str], role: RoleSelection) -> List[dict]:
        """Invite `emails` with `role`; returns the `{id, email}` entries created."""
        data = self.execute(
            INVITE_USERS_MUTATION,
            {"emails": list(emails), "role": RoleSelection.parse(role).value.upper()},
        )
        result = data.get("invite_users")
        if not isinstance(result, dict):
            raise PlatformError("malformed_response")
        errors = result.get("errors") or []
        if errors:
            raise PlatformError(f"invite_error: {_first_message(errors)}")
        invited = result.get("invited_users")
        if not isinstance(invited, list):
            raise PlatformError("malformed_response")
        return [u for u in invited if isinstance(u, dict)]

    def add_users_to_board(self, board_id: str, user_ids: Sequence[str]) -> dict:
        data = self.execute(
            ADD_USERS_TO_BOARD_MUTATION,
            {"boardId": str(board_id), "userIds": [str(u) for u in user_ids]},
        )
        ack = data.get("add_users_to_board")
        if ack is None:
            raise PlatformError("malformed_response")
        return {"board_id": str(board_id), "result": ack}


def _first_message(errors: Any) -> str:
    if isinstance(errors, str):
        return errors
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, dict):
            return str(first.get("message") or first.get("code") or "unknown")
        return str(first)
    return "unknown"
