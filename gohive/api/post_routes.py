from typing import List

from fastapi import APIRouter, Depends, status

from gohive.deps import get_post_service
from gohive.jwt_auth import AuthenticatedUser, require_jwt_token
from gohive.schemas.posts import (
    EventCreateRequest,
    EventSummary,
    GoalCreateRequest,
    GoalSummary,
    PostCreatedResponse,
    PostPhotos,
)
from gohive.services.post_service import PostService

# Every post route acts on behalf of the token subject.
router = APIRouter(tags=["posts"], dependencies=[Depends(require_jwt_token)])


@router.post(
    "/goals/create",
    response_model=PostCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_goal(
    payload: GoalCreateRequest,
    current_user: AuthenticatedUser = Depends(require_jwt_token),
    service: PostService = Depends(get_post_service),
) -> PostCreatedResponse:
    goal_id = await service.create_goal(current_user.id, payload)
    return PostCreatedResponse(id=goal_id)


@router.post(
    "/events/create",
    response_model=PostCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_event(
    payload: EventCreateRequest,
    current_user: AuthenticatedUser = Depends(require_jwt_token),
    service: PostService = Depends(get_post_service),
) -> PostCreatedResponse:
    event_id = await service.create_event(current_user.id, payload)
    return PostCreatedResponse(id=event_id)


@router.get("/goals/all", response_model=List[GoalSummary])
async def list_goals(service: PostService = Depends(get_post_service)) -> List[GoalSummary]:
    return await service.list_goals()


@router.get("/events/all", response_model=List[EventSummary])
async def list_events(
    service: PostService = Depends(get_post_service),
) -> List[EventSummary]:
    return await service.list_events()


@router.get("/goals/{user_id}", response_model=List[PostPhotos])
async def user_goal_photos(
    user_id: str, service: PostService = Depends(get_post_service)
) -> List[PostPhotos]:
    return await service.goal_photos(user_id)


@router.get("/events/{user_id}", response_model=List[PostPhotos])
async def user_event_photos(
    user_id: str, service: PostService = Depends(get_post_service)
) -> List[PostPhotos]:
    return await service.event_photos(user_id)


__all__ = ["router"]
