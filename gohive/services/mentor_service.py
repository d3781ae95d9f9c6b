"""
Scripted multi-turn mentor dialogue.

Each user id has at most one active session. A session starts with the
flow's system instruction and opening question, grows by one user/assistant
pair per message, and ends as soon as the model reply carries the flow's
summary labels. The extracted summary is returned and the session dropped,
so the next message from that user starts over.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from pydantic import BaseModel

from gohive.errors import ValidationError
from gohive.logging_config import logger
from gohive.schemas.mentor import EventReply, GoalReply, MentorReply
from gohive.services.completion_service import ChatMessage, CompletionClient
from gohive.services.conversation_store import ConversationSession, ConversationStore
from gohive.services.summary_parser import (
    EVENT_FORMAT,
    GOAL_FORMAT,
    CompleteSummary,
    PartialSummary,
    SummaryFormat,
    parse_summary,
)
from gohive.settings import settings

MISSING_MESSAGE = "user_id and message are required"

GOAL_SYSTEM_PROMPT = """
You are an AI mentor focused on helping users set and achieve personal goals. Your tone is encouraging, empathetic, and motivational, like a supportive coach. Follow these rules:
1. Ask exactly one question per message to guide the user toward defining a goal. Keep questions open-ended and relevant to their aspirations.
2. After 3-5 exchanges, summarize the conversation into a structured goal with:
   - Goal Description: A clear, concise statement of the goal.
   - Point A: The user's current situation or starting point.
   - Point B: The desired outcome or endpoint.
   - Steps: A list of 3-5 actionable steps to achieve the goal.
   - Tips: 2-3 motivational tips to stay on track.
3. Maintain context by using the full conversation history.
4. If the user provides enough information early, generate the goal summary sooner.
5. Do not repeat questions unless necessary for clarification.
6. End each message with a single question to keep the conversation flowing.
""".strip()

GOAL_OPENING = (
    "What's something you've always wanted to achieve in your personal "
    "or professional life?"
)

EVENT_SYSTEM_PROMPT = """
You are an AI mentor focused on helping users plan events. Your tone is encouraging, empathetic, and motivational, like a supportive organizer. Follow these rules:
1. Ask exactly one question per message to guide the user toward defining an event (e.g., a meetup, workshop, or celebration). Keep questions open-ended and relevant to their plans.
2. After 3-5 exchanges, summarize the conversation into a structured event with:
   - Description: A clear, concise statement of the event.
   - Date and Time: A specific date and time in ISO 8601 format (e.g., "2025-08-15T10:00:00Z").
3. Maintain context by using the full conversation history.
4. If the user provides enough information early, generate the event summary sooner.
5. Do not repeat questions unless necessary for clarification.
6. End each message with a single question to keep the conversation flowing.
""".strip()

EVENT_OPENING = (
    "What kind of event would you like to plan, like a community gathering, "
    "a workshop, or something else?"
)


def _goal_reply(message: str, summary: CompleteSummary) -> MentorReply:
    return GoalReply(
        message=message,
        goalData=summary.data,
        missingFields=summary.missing_fields or None,
    )


def _event_reply(message: str, summary: CompleteSummary) -> MentorReply:
    return EventReply(
        message=message,
        event=summary.data,
        missingFields=summary.missing_fields or None,
    )


@dataclass(frozen=True)
class MentorFlow:
    name: str
    system_prompt: str
    opening_prompt: str
    max_tokens: int
    summary_format: SummaryFormat
    build_reply: Callable[[str, CompleteSummary], BaseModel]

    def opening_messages(self) -> list[ChatMessage]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "assistant", "content": self.opening_prompt},
        ]


GOAL_FLOW = MentorFlow(
    name="goal",
    system_prompt=GOAL_SYSTEM_PROMPT,
    opening_prompt=GOAL_OPENING,
    max_tokens=settings.mentor_goal_max_tokens,
    summary_format=GOAL_FORMAT,
    build_reply=_goal_reply,
)

EVENT_FLOW = MentorFlow(
    name="event",
    system_prompt=EVENT_SYSTEM_PROMPT,
    opening_prompt=EVENT_OPENING,
    max_tokens=settings.mentor_event_max_tokens,
    summary_format=EVENT_FORMAT,
    build_reply=_event_reply,
)


class MentorService:
    def __init__(self, store: ConversationStore, completions: CompletionClient):
        self.store = store
        self.completions = completions

    def _session_for(self, user_id: str, flow: MentorFlow) -> ConversationSession:
        session = self.store.get(user_id)
        if session is not None and session.flow == flow.name:
            return session
        if session is not None:
            logger.info(
                "Replacing %s session of user %s with a new %s session",
                session.flow,
                user_id,
                flow.name,
            )
        return ConversationSession(
            user_id=user_id, flow=flow.name, messages=flow.opening_messages()
        )

    async def handle_message(
        self, user_id: str, flow: MentorFlow, message: str | None
    ) -> BaseModel:
        if not user_id or not message or not message.strip():
            raise ValidationError(MISSING_MESSAGE)

        session = self._session_for(user_id, flow)
        messages = session.messages + [{"role": "user", "content": message}]

        # History is only committed once the provider has answered.
        reply = await self.completions.complete(messages, max_tokens=flow.max_tokens)
        session.messages = messages + [{"role": "assistant", "content": reply}]

        result = parse_summary(reply, flow.summary_format)
        if isinstance(result, PartialSummary):
            self.store.save(session)
            return MentorReply(message=reply)

        self.store.delete(user_id)
        if result.missing_fields:
            logger.warning(
                "Mentor %s summary for user %s is missing fields: %s",
                flow.name,
                user_id,
                ", ".join(result.missing_fields),
            )
        else:
            logger.info("Mentor %s summary completed for user %s", flow.name, user_id)
        return flow.build_reply(reply, result)


__all__ = ["EVENT_FLOW", "GOAL_FLOW", "MentorFlow", "MentorService"]
