"""
Goal and event posts stored in the `posts` schema of the backend.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from gohive.errors import BackendError
from gohive.logging_config import logger
from gohive.schemas.posts import (
    EventCreateRequest,
    EventSummary,
    GoalCreateRequest,
    GoalSummary,
    PostPhotos,
)
from gohive.services.supabase_backend import SupabaseBackend

POSTS_SCHEMA = "posts"
FEED_LIMIT = 100


class PostService:
    def __init__(self, backend: SupabaseBackend):
        self.backend = backend

    async def create_goal(self, author_id: str, request: GoalCreateRequest) -> str:
        goal = await self.backend.insert(
            "goals",
            {
                "userID": author_id,
                "category": request.interest,
                "pointA": request.point_a,
                "pointB": request.point_b,
                "goalInfo": request.description,
                "location": request.location,
            },
            schema=POSTS_SCHEMA,
        )
        goal_id = str(goal["id"])
        await self.backend.insert(
            "steps", {"goalID": goal_id, "stepsInfo": request.tasks}, schema=POSTS_SCHEMA
        )
        if request.image_urls:
            await self.backend.insert(
                "goalsPhoto",
                {"goalsId": goal_id, "photoURL": request.image_urls},
                schema=POSTS_SCHEMA,
            )
        logger.info("User %s created goal %s", author_id, goal_id)
        return goal_id

    async def create_event(self, author_id: str, request: EventCreateRequest) -> str:
        event = await self.backend.insert(
            "events",
            {
                "userID": author_id,
                "category": request.interest,
                "description": request.description,
                "location": request.location,
                "dateTime": request.date_time,
            },
            schema=POSTS_SCHEMA,
        )
        event_id = str(event["id"])
        if request.image_urls:
            await self.backend.insert(
                "eventsPhoto",
                {"eventID": event_id, "photoURL": request.image_urls},
                schema=POSTS_SCHEMA,
            )
        logger.info("User %s created event %s", author_id, event_id)
        return event_id

    async def _username(self, user_id: Any) -> Optional[str]:
        try:
            user = await self.backend.select_one(
                "users", columns="username", filters={"id": user_id}
            )
        except BackendError:
            logger.warning("Username lookup failed for user %s", user_id)
            return None
        return user.get("username") if user else None

    async def list_goals(self) -> List[GoalSummary]:
        goals = await self.backend.select(
            "goals",
            columns="id, userID, goalInfo, numOfLikes, numOfComments",
            schema=POSTS_SCHEMA,
            limit=FEED_LIMIT,
        )
        usernames = await asyncio.gather(*(self._username(g.get("userID")) for g in goals))
        return [
            GoalSummary(
                id=str(goal["id"]),
                username=username,
                goalInfo=goal.get("goalInfo"),
                numOfLikes=goal.get("numOfLikes") or 0,
                numOfComments=goal.get("numOfComments") or 0,
            )
            for goal, username in zip(goals, usernames)
        ]

    async def list_events(self) -> List[EventSummary]:
        events = await self.backend.select(
            "events",
            columns="id, userID, description, numOfLikes, numOfComments",
            schema=POSTS_SCHEMA,
            limit=FEED_LIMIT,
        )
        usernames = await asyncio.gather(*(self._username(e.get("userID")) for e in events))
        return [
            EventSummary(
                id=str(event["id"]),
                username=username,
                description=event.get("description"),
                numOfLikes=event.get("numOfLikes") or 0,
                numOfComments=event.get("numOfComments") or 0,
            )
            for event, username in zip(events, usernames)
        ]

    async def _photos_for(
        self, posts_table: str, photos_table: str, fk_column: str, user_id: str
    ) -> List[PostPhotos]:
        posts = await self.backend.select(
            posts_table, columns="id", schema=POSTS_SCHEMA, filters={"userID": user_id}
        )
        if not posts:
            logger.info("No %s found for user %s", posts_table, user_id)
            return []

        async def _photos(post: Dict[str, Any]) -> PostPhotos:
            rows = await self.backend.select(
                photos_table,
                columns="photoURL",
                schema=POSTS_SCHEMA,
                filters={fk_column: post["id"]},
            )
            urls: List[str] = []
            for row in rows:
                value = row.get("photoURL")
                if isinstance(value, list):
                    urls.extend(str(v) for v in value)
                elif value:
                    urls.append(str(value))
            return PostPhotos(id=str(post["id"]), photoURL=urls)

        return list(await asyncio.gather(*(_photos(post) for post in posts)))

    async def goal_photos(self, user_id: str) -> List[PostPhotos]:
        return await self._photos_for("goals", "goalsPhoto", "goalsId", user_id)

    async def event_photos(self, user_id: str) -> List[PostPhotos]:
        return await self._photos_for("events", "eventsPhoto", "eventID", user_id)


__all__ = ["PostService"]
