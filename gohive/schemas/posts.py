from typing import List, Optional

from pydantic import BaseModel, Field


class GoalCreateRequest(BaseModel):
    description: str = Field(..., min_length=1)
    location: Optional[str] = None
    interest: Optional[str] = None
    point_a: Optional[str] = None
    point_b: Optional[str] = None
    tasks: List[str] = Field(default_factory=list)
    image_urls: List[str] = Field(default_factory=list)


class EventCreateRequest(BaseModel):
    description: str = Field(..., min_length=1)
    location: Optional[str] = None
    interest: Optional[str] = None
    date_time: Optional[str] = Field(None, description="ISO 8601 date and time")
    image_urls: List[str] = Field(default_factory=list)


class PostCreatedResponse(BaseModel):
    id: str


class GoalSummary(BaseModel):
    id: str
    username: Optional[str] = None
    goalInfo: Optional[str] = None
    numOfLikes: int = 0
    numOfComments: int = 0


class EventSummary(BaseModel):
    id: str
    username: Optional[str] = None
    description: Optional[str] = None
    numOfLikes: int = 0
    numOfComments: int = 0


class PostPhotos(BaseModel):
    id: str
    photoURL: List[str] = Field(default_factory=list)
