"""
Session registry: one ConversationManager per chat session.

Managers are created lazily by session id and never shared between
sessions. Each session has its own lock, so turns within a session are
serialized while different sessions proceed independently. A turn holds
on to the manager and lock it checked out, so ending the session
mid-turn does not break that turn.

Usage:
    registry = SessionRegistry(knowledge_base)
    result = registry.process_message("web-4f2a", "Oi", LeadData())
    registry.end_session("web-4f2a")
"""

import logging
import threading
from typing import Callable, Optional

from lead_chatbot.conversation.conversation_manager import ConversationManager
from lead_chatbot.conversation.state import ChatResponse
from lead_chatbot.schemas.knowledge_schema import KnowledgeBaseContext
from lead_chatbot.schemas.lead_schema import LeadData

logger = logging.getLogger(__name__)

ManagerFactory = Callable[[KnowledgeBaseContext, str], ConversationManager]


def _default_factory(knowledge_base: KnowledgeBaseContext, session_id: str) -> ConversationManager:
    return ConversationManager(knowledge_base, session_id=session_id)


class SessionRegistry:
    """Owns the live conversations and the knowledge base they share."""

    def __init__(
        self,
        knowledge_base: KnowledgeBaseContext,
        factory: Optional[ManagerFactory] = None,
    ) -> None:
        self._knowledge_base = knowledge_base
        self._factory = factory or _default_factory
        self._managers: dict[str, ConversationManager] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def get_or_create(self, session_id: str) -> ConversationManager:
        """Return the session's manager, creating it on first use."""
        return self._checkout(session_id)[0]

    def _checkout(self, session_id: str) -> tuple[ConversationManager, threading.Lock]:
        """Manager and turn lock of a session, fetched together."""
        with self._registry_lock:
            manager = self._managers.get(session_id)
            if manager is None:
                manager = self._factory(self._knowledge_base, session_id)
                self._managers[session_id] = manager
                self._locks[session_id] = threading.Lock()
                logger.info("Session started: %s", session_id)
            return manager, self._locks[session_id]

    def get(self, session_id: str) -> ConversationManager:
        """Return an existing session's manager.

        Raises:
            KeyError: If the session is not active.
        """
        with self._registry_lock:
            if session_id not in self._managers:
                raise KeyError(f"Session '{session_id}' not active")
            return self._managers[session_id]

    def process_message(
        self,
        session_id: str,
        message: str,
        lead_data: Optional[LeadData] = None,
    ) -> ChatResponse:
        """Run one turn for a session, serialized against other turns of it."""
        manager, lock = self._checkout(session_id)
        with lock:
            return manager.process_message(message, lead_data)

    def end_session(self, session_id: str) -> bool:
        """Drop a session's state. Returns False if it was not active."""
        with self._registry_lock:
            removed = self._managers.pop(session_id, None)
            self._locks.pop(session_id, None)
        if removed is not None:
            logger.info("Session ended: %s", session_id)
        return removed is not None

    def update_knowledge_base(self, knowledge_base: KnowledgeBaseContext) -> None:
        """Hot-reload the knowledge base into every live session."""
        with self._registry_lock:
            self._knowledge_base = knowledge_base
            managers = list(self._managers.values())
        for manager in managers:
            manager.update_knowledge_base(knowledge_base)
        logger.info("Knowledge base pushed to %d session(s)", len(managers))

    @property
    def knowledge_base(self) -> KnowledgeBaseContext:
        return self._knowledge_base

    def active_sessions(self) -> list[str]:
        with self._registry_lock:
            return list(self._managers)

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._managers)
