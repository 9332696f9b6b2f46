"""
Per-session conversation state and the value objects returned per turn.

ConversationState is owned by exactly one ConversationManager and is
only ever mutated from inside ``process_message``.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from lead_chatbot.conversation.intents import Intent
from lead_chatbot.schemas.lead_schema import LeadData


class AwaitingData(str, Enum):
    """Which piece of contact data the bot asked for last."""
    NAME = "name"
    PHONE = "phone"
    EMAIL = "email"


class EngagementLevel(str, Enum):
    """Coarse interest estimate. Never decreases within a session."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _ENGAGEMENT_RANK[self]


_ENGAGEMENT_RANK = {
    EngagementLevel.LOW: 0,
    EngagementLevel.MEDIUM: 1,
    EngagementLevel.HIGH: 2,
}


@dataclass
class ConversationState:
    """Everything the engine remembers about one conversation."""
    current_intent: Optional[str] = None
    last_intent: Optional[str] = None
    awaiting_data: Optional[AwaitingData] = None
    mentioned_products: list[str] = field(default_factory=list)
    asked_questions: set[str] = field(default_factory=set)
    message_count: int = 0
    engagement_level: EngagementLevel = EngagementLevel.LOW
    tone_of_voice: str = "friendly"

    def add_mentioned_product(self, product_name: str) -> bool:
        """Record a product once. Returns True if it was new."""
        if product_name in self.mentioned_products:
            return False
        self.mentioned_products.append(product_name)
        return True

    @property
    def last_mentioned_product(self) -> Optional[str]:
        return self.mentioned_products[-1] if self.mentioned_products else None

    def copy(self) -> "ConversationState":
        return copy.deepcopy(self)


@dataclass
class ChatResponse:
    """Result of processing one inbound message."""
    response: str
    intent: Intent
    updated_lead_data: LeadData
    captured_data: dict[str, str]
    confidence: float


@dataclass
class FollowUpSuggestion:
    should_follow_up: bool
    message: Optional[str] = None
