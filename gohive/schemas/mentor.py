from typing import List, Optional

from pydantic import BaseModel, Field


class MentorMessageRequest(BaseModel):
    message: Optional[str] = None


class GoalData(BaseModel):
    description: str = ""
    pointA: str = ""
    pointB: str = ""
    steps: List[str] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)


class EventData(BaseModel):
    description: str = ""
    date_time: str = ""


class MentorReply(BaseModel):
    """Reply while the conversation is still in progress."""

    message: str


class GoalReply(MentorReply):
    goalData: GoalData
    missingFields: Optional[List[str]] = None


class EventReply(MentorReply):
    event: EventData
    status: str = "Event generated"
    missingFields: Optional[List[str]] = None
