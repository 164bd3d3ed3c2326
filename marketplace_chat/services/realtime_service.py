"""
Realtime Service
Subscribes to message inserts addressed to the viewer and queues them for the manager
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional
from pydantic import ValidationError as PydanticValidationError
from supabase import AsyncClient

from marketplace_chat.config import settings
from marketplace_chat.core.exceptions import TransientBackendError
from marketplace_chat.models.conversation import Message

logger = logging.getLogger(__name__)


def extract_record(payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Pull the inserted row out of a postgres_changes payload.

    The Python realtime client nests it under data.record; the JS-style
    shape carries it under "new".
    """
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("record"), dict):
        return data["record"]
    for key in ("record", "new"):
        if isinstance(payload.get(key), dict):
            return payload[key]
    return None


def merge_message(messages: List[Message], message: Message) -> bool:
    """
    Append message unless one with the same id is already present.

    Returns:
        True if the list grew
    """
    if any(existing.id == message.id for existing in messages):
        return False
    messages.append(message)
    return True


class RealtimeSync:
    """
    One realtime subscription per signed-in viewer.

    Notifications are parsed into Message objects and pushed onto an
    internal queue; the manager drains it from its own coroutines.
    """

    def __init__(self, client: AsyncClient, schema: Optional[str] = None):
        self.client = client
        self.schema = schema or settings.REALTIME_SCHEMA
        self.viewer_id: Optional[str] = None
        self._channel = None
        self._queue: asyncio.Queue = asyncio.Queue()

    @property
    def is_subscribed(self) -> bool:
        return self._channel is not None

    async def subscribe(self, viewer_id: str) -> None:
        """
        Listen for message inserts where receiver_id = viewer_id.

        Subscribing again for the same viewer is a no-op; a different viewer
        tears the previous channel down first.

        Raises:
            TransientBackendError: If the channel cannot be joined
        """
        if self._channel is not None:
            if self.viewer_id == viewer_id:
                return
            await self.unsubscribe()

        channel = self.client.channel(f"messages:{viewer_id}")
        channel.on_postgres_changes(
            "INSERT",
            schema=self.schema,
            table=settings.MESSAGES_TABLE,
            filter=f"receiver_id=eq.{viewer_id}",
            callback=self.handle_payload,
        )

        # Set before joining so events delivered during the handshake are accepted
        self.viewer_id = viewer_id
        try:
            await channel.subscribe()
        except Exception as e:
            self.viewer_id = None
            logger.error(f"❌ Realtime subscribe failed for viewer {viewer_id}: {e}")
            raise TransientBackendError(f"Failed to subscribe to messages: {str(e)}") from e

        self._channel = channel
        logger.info(f"✅ Realtime subscribed: viewer={viewer_id}")

    async def unsubscribe(self) -> None:
        """Remove the active channel and drop undelivered events. Idempotent."""
        if self._channel is None:
            return

        channel, viewer_id = self._channel, self.viewer_id
        self._channel = None
        self.viewer_id = None
        dropped = len(self.drain())

        try:
            await self.client.remove_channel(channel)
        except Exception as e:
            logger.warning(f"Realtime channel teardown failed for viewer {viewer_id}: {e}")

        logger.info(f"🔌 Realtime unsubscribed: viewer={viewer_id}, dropped_events={dropped}")

    def handle_payload(self, payload: Dict[str, Any]) -> Optional[Message]:
        """
        Realtime callback. Only enqueues; never touches session state.

        Payloads arriving with no viewer subscribed, or addressed to someone
        other than the subscribed viewer, are dropped.
        """
        if self.viewer_id is None:
            logger.debug("Ignoring realtime payload received after teardown")
            return None

        record = extract_record(payload)
        if record is None:
            logger.warning(f"Ignoring realtime payload without record: {payload}")
            return None

        try:
            message = Message(**record)
        except PydanticValidationError as e:
            logger.warning(f"Ignoring malformed realtime message: {e}")
            return None

        if message.receiver_id != self.viewer_id:
            logger.debug(f"Ignoring message {message.id} addressed to another viewer")
            return None

        self._queue.put_nowait(message)
        logger.debug(f"📥 Queued realtime message {message.id} for conversation {message.conversation_id}")
        return message

    def drain(self) -> List[Message]:
        """Return every pending message without waiting"""
        messages = []
        while True:
            try:
                messages.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                return messages

    async def next_message(self, timeout: Optional[float] = None) -> Optional[Message]:
        """Wait for the next message; None when the timeout elapses"""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            return None
