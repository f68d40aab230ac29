from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel


router = APIRouter()


class PresenceResponse(BaseModel):
    users: list[str]
    count: int


@router.get("/api/health")
def health() -> dict:
    return {"ok": True}


@router.get("/api/users")
async def get_users(request: Request) -> PresenceResponse:
    users = await request.app.state.relay.registry.names()
    return PresenceResponse(users=users, count=len(users))
