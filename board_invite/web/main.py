"""
FastAPI application for the board provisioning API.

Run locally:
    uvicorn board_invite.web.main:app --reload
"""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from board_invite import config as _cfg
from board_invite.web.routes.provisioning import provisioning_router


# Abort startup on insecure production settings before serving requests.
_cfg.ensure_secure_config_on_startup()

app = FastAPI(title="Board Invite", description="Bulk board membership provisioning", version="0.1.0")

app.include_router(provisioning_router)


@app.get("/health")
async def health_check():
    # Minimal health endpoint used by orchestrators and tests.
    return JSONResponse({"status": "healthy"}, headers={"Cache-Control": "private, no-store"})
