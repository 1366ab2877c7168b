"""Control bridge for the web dashboard and other remote callers."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from discord_music_queue.application.services.queue_store import QueueStore
from discord_music_queue.domain.music.value_objects import ActionOrigin, QueueAction
from discord_music_queue.domain.shared.enums import RemoteAction
from discord_music_queue.domain.shared.messages import DiscordUIMessages, LogTemplates

logger = logging.getLogger(__name__)

_QUEUE_ACTIONS: dict[RemoteAction, QueueAction] = {
    RemoteAction.SKIP: QueueAction.SKIP,
    RemoteAction.STOP: QueueAction.STOP,
    RemoteAction.PAUSE: QueueAction.PAUSE,
    RemoteAction.RESUME: QueueAction.RESUME,
}


class RemoteResponse(BaseModel):
    status_code: int
    message: str = ""
    payload: Any = None


class RemoteControlService:
    """Maps ``(action, guild_id)`` requests onto queue actions and views."""

    def __init__(self, store: QueueStore) -> None:
        self._store = store

    async def handle(self, action: str, guild_id: int | None = None) -> RemoteResponse:
        try:
            remote_action = RemoteAction(action)
        except ValueError:
            logger.warning(LogTemplates.REMOTE_UNKNOWN_ACTION, action)
            return RemoteResponse(status_code=400, message=DiscordUIMessages.REMOTE_UNKNOWN_ACTION)

        logger.debug(LogTemplates.REMOTE_ACTION, remote_action.value, guild_id)

        if remote_action is RemoteAction.GET_QUEUES:
            views = [queue.to_view().model_dump(mode="json") for queue in self._store.queues.values()]
            return RemoteResponse(status_code=200, payload=views)

        queue = self._store.get(guild_id) if guild_id is not None else None
        if queue is None:
            return RemoteResponse(status_code=400, message=DiscordUIMessages.REMOTE_NO_QUEUE)

        if remote_action is RemoteAction.GET_QUEUE:
            return RemoteResponse(status_code=200, payload=queue.to_view().model_dump(mode="json"))

        outcome = await queue.perform(_QUEUE_ACTIONS[remote_action], ActionOrigin.REMOTE)
        assert outcome.status_code is not None
        return RemoteResponse(status_code=outcome.status_code, message=outcome.result.message or "")
