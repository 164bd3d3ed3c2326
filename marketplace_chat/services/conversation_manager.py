"""
Conversation Manager

Composes profiles, conversations, messages, unread counts and realtime
sync into the operations the messaging UI calls: open inbox, open
conversation, send message, start a conversation from a listing, close.

Every public operation is a catch boundary. Failures become notifications
and leave the session as it was; nothing propagates to the caller.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
from supabase import AsyncClient

from marketplace_chat.auth.session import get_current_viewer
from marketplace_chat.core.exceptions import (
    ConversationNotFoundError,
    TransientBackendError,
    ValidationError,
)
from marketplace_chat.models.conversation import FormattedConversation, Listing, Message, Profile
from marketplace_chat.services.conversation_service import ConversationService
from marketplace_chat.services.message_service import MessageService
from marketplace_chat.services.notification_service import Notifier
from marketplace_chat.services.profile_service import ProfileService
from marketplace_chat.services.realtime_service import RealtimeSync, merge_message
from marketplace_chat.services.supabase_client import get_supabase_client
from marketplace_chat.services.unread_service import UnreadCounter

logger = logging.getLogger(__name__)


class StartState(str, Enum):
    """Progress of start_conversation_with"""
    IDLE = "idle"
    CREATING_OR_FINDING = "creating_or_finding"
    LOADING_HISTORY = "loading_history"
    SENDING_OPENER = "sending_opener"
    READY = "ready"


@dataclass
class MessagingSession:
    """In-memory state of one viewer's messaging session"""
    viewer_id: str
    active_conversation_id: Optional[str] = None
    active_counterpart_id: Optional[str] = None
    active_participant: Optional[Profile] = None
    messages: List[Message] = field(default_factory=list)
    conversations: List[FormattedConversation] = field(default_factory=list)
    unread_total: int = 0
    start_state: StartState = StartState.IDLE
    # Set by any successful send; suppresses the listing opener until close()
    message_sent: bool = False
    starting: bool = False
    generation: int = 0


def format_brl(price: float) -> str:
    """Format a price the pt-BR way: 1234.5 -> '1.234,50'"""
    return f"{price:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def compose_opener(listing: Listing) -> str:
    """Opening message for a conversation started from a listing"""
    if listing.is_item:
        text = f"Gostaria de Comprar o {listing.title}"
    else:
        text = f"Gostaria de Contatar o serviço {listing.title}"
    if listing.price is not None:
        text += f" (R$ {format_brl(listing.price)})"
    return text


def _activity_key(conversation: FormattedConversation) -> float:
    return conversation.last_activity.timestamp() if conversation.last_activity else 0.0


class ConversationManager:
    """Messaging orchestrator for a single viewer"""

    def __init__(
        self,
        client: AsyncClient,
        viewer_id: str,
        notifier: Optional[Notifier] = None,
        profiles: Optional[ProfileService] = None,
        conversations: Optional[ConversationService] = None,
        messages: Optional[MessageService] = None,
        unread: Optional[UnreadCounter] = None,
        realtime: Optional[RealtimeSync] = None,
    ):
        self.client = client
        self.notifier = notifier or Notifier()
        self.profiles = profiles or ProfileService(client)
        self.conversations = conversations or ConversationService(client)
        self.messages = messages or MessageService(client, self.conversations)
        self.unread = unread or UnreadCounter(client)
        self.realtime = realtime or RealtimeSync(client)
        self.session = MessagingSession(viewer_id=viewer_id)

    @property
    def viewer_id(self) -> str:
        return self.session.viewer_id

    def _is_stale(self, session: MessagingSession) -> bool:
        return session.generation != self.session.generation or session is not self.session

    # ============ Inbox ============

    async def open_inbox(self) -> List[FormattedConversation]:
        """
        Load the viewer's conversations with counterpart, last message and unread badge.

        Also makes sure the realtime subscription for the viewer is active.
        """
        session = self.session
        await self._ensure_realtime(session)
        await self._refresh_inbox(session)
        return session.conversations

    async def _ensure_realtime(self, session: MessagingSession) -> None:
        if self._is_stale(session):
            return
        try:
            await self.realtime.subscribe(session.viewer_id)
        except TransientBackendError as e:
            self.notifier.notify_error("Não foi possível conectar às atualizações em tempo real", e)

    async def _refresh_inbox(self, session: MessagingSession) -> None:
        try:
            inbox = await self._load_inbox(session.viewer_id)
        except Exception as e:
            self.notifier.notify_error("Não foi possível carregar as conversas", e)
            return

        if self._is_stale(session):
            logger.debug("Discarding inbox loaded for a closed session")
            return
        session.conversations = inbox

        try:
            total = await self.unread.count_total(session.viewer_id)
        except TransientBackendError as e:
            logger.warning(f"Keeping previous unread total for viewer {session.viewer_id}: {e}")
            return
        if not self._is_stale(session):
            session.unread_total = total

    async def _load_inbox(self, viewer_id: str) -> List[FormattedConversation]:
        conversations = await self.conversations.list_conversations(viewer_id)

        formatted = []
        for conversation in conversations:
            try:
                counterpart_id = conversation.other_participant(viewer_id)
                participant = await self.profiles.resolve_profile(counterpart_id)
                last_message = await self.messages.get_last_message(conversation.id)
                unread_count = await self.unread.count_unread(conversation.id, viewer_id)
            except Exception as e:
                # One broken conversation must not hide the rest of the inbox
                logger.error(f"Error formatting conversation {conversation.id}: {e}")
                continue

            formatted.append(FormattedConversation(
                id=conversation.id,
                participant=participant,
                last_message=last_message,
                unread_count=unread_count,
                last_activity=last_message.created_at if last_message else conversation.created_at,
            ))

        formatted.sort(key=_activity_key, reverse=True)
        return formatted

    # ============ Conversation ============

    async def open_conversation(self, conversation_id: str) -> Optional[List[Message]]:
        """
        Load a conversation's history, then mark it read for the viewer.

        Returns:
            The history as loaded (pre-read state), or None on failure
        """
        session = self.session
        try:
            conversation = await self.conversations.get_conversation(conversation_id)
            if conversation is None or not conversation.has_participant(session.viewer_id):
                raise ConversationNotFoundError(conversation_id)

            counterpart_id = conversation.other_participant(session.viewer_id)
            opened = await self._activate(session, conversation_id, counterpart_id)

        except ConversationNotFoundError as e:
            logger.warning(e.message)
            self.notifier.notify("Conversa não encontrada", "Esta conversa não está disponível")
            return None
        except Exception as e:
            self.notifier.notify_error("Não foi possível carregar as mensagens", e)
            return None

        return session.messages if opened else None

    async def _activate(self, session: MessagingSession, conversation_id: str, counterpart_id: str) -> bool:
        """
        Make conversation_id the open conversation of session.

        Replies only arrive while subscribed, so the realtime channel is joined
        first. History is loaded before mark_read so the viewer sees the
        pre-read state. Raises if the history cannot be loaded; a failed
        mark_read is only notified.
        """
        await self._ensure_realtime(session)
        participant = await self.profiles.resolve_profile(counterpart_id)
        history = await self.messages.list_messages(conversation_id)
        if self._is_stale(session):
            return False

        session.active_conversation_id = conversation_id
        session.active_counterpart_id = counterpart_id
        session.active_participant = participant
        session.messages = history

        try:
            updated = await self.messages.mark_read(conversation_id, session.viewer_id)
        except TransientBackendError as e:
            self.notifier.notify_error("Não foi possível marcar as mensagens como lidas", e)
        else:
            session.unread_total = max(0, session.unread_total - updated)
            for entry in session.conversations:
                if entry.id == conversation_id:
                    entry.unread_count = 0
        return True

    async def send_message(self, text: str) -> Optional[Message]:
        """Send text to the counterpart of the open conversation"""
        session = self.session
        conversation_id = session.active_conversation_id
        if not conversation_id or not session.active_counterpart_id:
            self.notifier.notify_validation(ValidationError("Nenhuma conversa selecionada"))
            return None

        try:
            message = await self.messages.send_message(
                conversation_id, session.viewer_id, session.active_counterpart_id, text
            )
        except ValidationError as e:
            self.notifier.notify_validation(e)
            return None
        except Exception as e:
            self.notifier.notify_error("Não foi possível enviar a mensagem", e)
            return None

        if self._is_stale(session):
            return message

        session.message_sent = True
        if session.active_conversation_id == conversation_id:
            merge_message(session.messages, message)
        return message

    async def start_conversation_with(
        self,
        counterpart_id: str,
        listing: Optional[Listing] = None
    ) -> Optional[str]:
        """
        Find or create the conversation with a seller/provider and open it.

        When a listing is given and nothing has been sent in this session yet,
        an opener referencing the listing's title and price is sent. Calls made
        while a previous one is still in flight are ignored.

        Returns:
            Conversation UUID, or None if ignored or failed
        """
        session = self.session
        if session.starting:
            logger.info(f"Ignoring start_conversation_with({counterpart_id}): already in progress")
            return None

        session.starting = True
        try:
            return await self._start_conversation(session, counterpart_id, listing)
        finally:
            session.starting = False

    async def _start_conversation(
        self,
        session: MessagingSession,
        counterpart_id: str,
        listing: Optional[Listing]
    ) -> Optional[str]:
        session.start_state = StartState.CREATING_OR_FINDING
        try:
            conversation_id = await self.conversations.find_or_create_conversation(
                session.viewer_id, counterpart_id
            )
        except ValidationError as e:
            session.start_state = StartState.IDLE
            self.notifier.notify_validation(e)
            return None
        except Exception as e:
            session.start_state = StartState.IDLE
            self.notifier.notify_error("Não foi possível iniciar a conversa", e)
            return None

        if self._is_stale(session):
            return None

        session.start_state = StartState.LOADING_HISTORY
        try:
            opened = await self._activate(session, conversation_id, counterpart_id)
        except Exception as e:
            session.start_state = StartState.IDLE
            self.notifier.notify_error("Não foi possível carregar as mensagens", e)
            return None

        if not opened:
            return None

        if listing is not None and not session.message_sent:
            session.start_state = StartState.SENDING_OPENER
            try:
                opener = await self.messages.send_message(
                    conversation_id, session.viewer_id, counterpart_id, compose_opener(listing)
                )
            except Exception as e:
                # The conversation is usable without the opener
                self.notifier.notify_error("Não foi possível enviar a mensagem inicial", e)
            else:
                if self._is_stale(session):
                    return None
                session.message_sent = True
                merge_message(session.messages, opener)
                logger.info(f"Sent opener for listing '{listing.title}' in conversation {conversation_id}")

        session.start_state = StartState.READY
        await self._refresh_inbox(session)
        return conversation_id

    # ============ Realtime ============

    async def process_realtime_events(self) -> int:
        """
        Apply every queued realtime message.

        Messages for the open conversation are merged by id and marked read;
        any event triggers one inbox reload from the store.

        Returns:
            Number of events consumed
        """
        events = self.realtime.drain()
        if events:
            await self._apply_realtime(self.session, events)
        return len(events)

    async def listen(self, idle_timeout: float = 1.0) -> None:
        """Apply realtime messages as they arrive until the subscription is closed"""
        while self.realtime.is_subscribed:
            message = await self.realtime.next_message(timeout=idle_timeout)
            if message is None:
                continue
            await self._apply_realtime(self.session, [message] + self.realtime.drain())

    async def _apply_realtime(self, session: MessagingSession, events: List[Message]) -> None:
        active_id = session.active_conversation_id
        delivered_to_open = False
        for message in events:
            if message.conversation_id == active_id:
                merge_message(session.messages, message)
                delivered_to_open = True

        # The open conversation is on screen, so its new messages are read
        if delivered_to_open and not self._is_stale(session):
            try:
                await self.messages.mark_read(active_id, session.viewer_id)
            except TransientBackendError as e:
                logger.warning(f"Could not mark realtime messages read in {active_id}: {e}")

        await self._refresh_inbox(session)

    # ============ Lifecycle ============

    async def close(self) -> None:
        """Tear down realtime and reset the session; in-flight results are discarded"""
        previous = self.session
        self.session = MessagingSession(viewer_id=previous.viewer_id, generation=previous.generation + 1)
        await self.realtime.unsubscribe()
        logger.info(f"Closed messaging session for viewer {previous.viewer_id}")

    async def change_viewer(self, viewer_id: str) -> None:
        """Start a fresh session for another signed-in user"""
        await self.close()
        self.session = MessagingSession(viewer_id=viewer_id, generation=self.session.generation + 1)


async def create_conversation_manager(
    viewer_id: Optional[str] = None,
    notifier: Optional[Notifier] = None
) -> ConversationManager:
    """
    Build a manager on the global Supabase client.

    Without viewer_id the signed-in user of the client session is used.

    Raises:
        ConfigurationError: If Supabase is not configured
        AuthenticationError: If no viewer can be resolved
    """
    client = await get_supabase_client()
    if viewer_id is None:
        viewer = await get_current_viewer(client)
        viewer_id = viewer.user_id
    return ConversationManager(client, viewer_id, notifier=notifier)
