from .auth import (
    EmailRegisterRequest,
    LoginRequest,
    LogoutResponse,
    OAuthRegisterRequest,
    ProfileResponse,
    TokenResponse,
)
from .mentor import EventData, EventReply, GoalData, GoalReply, MentorMessageRequest, MentorReply
from .posts import (
    EventCreateRequest,
    EventSummary,
    GoalCreateRequest,
    GoalSummary,
    PostCreatedResponse,
    PostPhotos,
)

__all__ = [
    "EmailRegisterRequest",
    "EventCreateRequest",
    "EventData",
    "EventReply",
    "EventSummary",
    "GoalCreateRequest",
    "GoalData",
    "GoalReply",
    "GoalSummary",
    "LoginRequest",
    "LogoutResponse",
    "MentorMessageRequest",
    "MentorReply",
    "OAuthRegisterRequest",
    "PostCreatedResponse",
    "PostPhotos",
    "ProfileResponse",
    "TokenResponse",
]
