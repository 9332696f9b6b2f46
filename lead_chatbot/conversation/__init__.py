from lead_chatbot.conversation.conversation_manager import ConversationManager
from lead_chatbot.conversation.guardrails import GuardrailPipeline
from lead_chatbot.conversation.intent_classifier import IntentClassifier
from lead_chatbot.conversation.knowledge_matcher import KnowledgeMatcher
from lead_chatbot.conversation.lead_capture import LeadCaptureExtractor
from lead_chatbot.conversation.response_generator import ResponseGenerator
from lead_chatbot.conversation.session_registry import SessionRegistry
from lead_chatbot.conversation.state import (
    AwaitingData,
    ChatResponse,
    ConversationState,
    EngagementLevel,
    FollowUpSuggestion,
)

__all__ = [
    "ConversationManager",
    "SessionRegistry",
    "IntentClassifier",
    "KnowledgeMatcher",
    "LeadCaptureExtractor",
    "ResponseGenerator",
    "GuardrailPipeline",
    "ConversationState",
    "ChatResponse",
    "FollowUpSuggestion",
    "AwaitingData",
    "EngagementLevel",
]
