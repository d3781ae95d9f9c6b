"""
AI mentor routes. Both flows share one conversation store, keyed by the
token subject.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from gohive.deps import get_mentor_service
from gohive.jwt_auth import AuthenticatedUser, require_jwt_token
from gohive.schemas.mentor import MentorMessageRequest
from gohive.services.mentor_service import EVENT_FLOW, GOAL_FLOW, MentorService

router = APIRouter(prefix="/api", tags=["mentor"])


@router.post("/generate-goal")
async def generate_goal(
    payload: MentorMessageRequest,
    current_user: AuthenticatedUser = Depends(require_jwt_token),
    service: MentorService = Depends(get_mentor_service),
) -> Dict[str, Any]:
    reply = await service.handle_message(current_user.id, GOAL_FLOW, payload.message)
    return reply.model_dump(exclude_none=True)


@router.post("/generate-event")
async def generate_event(
    payload: MentorMessageRequest,
    current_user: AuthenticatedUser = Depends(require_jwt_token),
    service: MentorService = Depends(get_mentor_service),
) -> Dict[str, Any]:
    reply = await service.handle_message(current_user.id, EVENT_FLOW, payload.message)
    return reply.model_dump(exclude_none=True)


__all__ = ["router"]
