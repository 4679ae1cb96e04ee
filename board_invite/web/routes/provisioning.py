"""
Provisioning API routes: list boards/users and add people to boards.

Why:
    A browser form collects board selections, email text, selected users and
    a role. These routes hand that input to the provisioning service and
    return the outcome sets plus the rendered summary. Form state lives in the
    browser; the UI resets it only after a 200 response.

Behavior:
    - All responses are private, no-store.
    - 400 on validation failures (no boards, no identities, invalid role).
    - 502 when the directory snapshot cannot be fetched (no partial outcome).
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from board_invite.config import PlatformConfig, clamp_board_limit
from board_invite.identity_access.domain import ALLOWED_ROLES, User
from board_invite.platform.client import PlatformClient, PlatformError
from board_invite.provisioning.errors import DirectoryUnavailable, ValidationFailure
from board_invite.provisioning.service import ProvisioningService
from board_invite.provisioning.summary import FATAL_MESSAGE, render_summary


logger = logging.getLogger("board_invite.web")

provisioning_router = APIRouter(tags=["Provisioning"])


def get_platform_client() -> PlatformClient:
    """Build the platform client from the environment (tests patch this)."""
    return PlatformClient.from_config(PlatformConfig.from_env())


def _private_no_store() -> dict:
    return {"Cache-Control": "private, no-store"}


def _private_error(payload: dict, *, status_code: int) -> JSONResponse:
    return JSONResponse(content=payload, status_code=status_code, headers=_private_no_store())


# --- Request models ------------------------------------------------------------

class SelectedUser(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    email: str = ""


class ProvisioningRequest(BaseModel):
    boards: List[str] = Field(default_factory=list)
    emails: str = ""
    users: List[SelectedUser] = Field(default_factory=list)
    role: str = "guest"

    @field_validator("boards")
    @classmethod
    def _strip_boards(cls, v):
        return [str(b).strip() for b in v if str(b).strip()]


# --- Routes --------------------------------------------------------------------

@provisioning_router.get("/api/boards")
async def boards_list(limit: int | None = None):
    """List boards for the selection form (id, name)."""
    effective = clamp_board_limit(limit) if limit is not None else PlatformConfig.from_env().board_limit
    try:
        boards = get_platform_client().list_boards(limit=effective)
    except (PlatformError, RuntimeError) as exc:
        logger.warning("Board listing failed: %s", exc.__class__.__name__)
        return _private_error({"error": "upstream_unavailable"}, status_code=502)
    return JSONResponse([{"id": b.id, "name": b.name} for b in boards], headers=_private_no_store())


@provisioning_router.get("/api/users")
async def users_list():
    """List directory users for the existing-user selection."""
    try:
        users = get_platform_client().list_users()
    except (PlatformError, RuntimeError) as exc:
        logger.warning("User listing failed: %s", exc.__class__.__name__)
        return _private_error({"error": "upstream_unavailable"}, status_code=502)
    return JSONResponse(
        [{"id": u.id, "name": u.name, "email": u.email} for u in users],
        headers=_private_no_store(),
    )


@provisioning_router.post("/api/provisioning")
async def provisioning_run(payload: ProvisioningRequest):
    """Add selected users and emails to every selected board.

    Response (200):
        { added: [...], invited: [...], failed: [...], summary: "..." }
    """
    if payload.role.strip().lower() not in ALLOWED_ROLES:
        return _private_error({"error": "bad_request", "detail": "invalid_role"}, status_code=400)
    users = [User(id=u.id, name=u.name, email=u.email) for u in payload.users]
    try:
        client = get_platform_client()
    except RuntimeError as exc:
        logger.error("Platform client unavailable: %s", exc.__class__.__name__)
        return _private_error({"error": "upstream_unavailable"}, status_code=502)
    try:
        outcome = ProvisioningService(client).provision(users, payload.emails, payload.boards, payload.role)
    except ValidationFailure as exc:
        return _private_error({"error": "bad_request", "detail": exc.code}, status_code=400)
    except DirectoryUnavailable:
        return _private_error({"error": "directory_unavailable", "detail": FATAL_MESSAGE}, status_code=502)
    body = outcome.to_dict()
    body["summary"] = render_summary(outcome)
    return JSONResponse(body, headers=_private_no_store())
