"""
Per-session orchestrator: one inbound message in, one ChatResponse out.

Each turn runs the same pipeline:
    1. extract lead fields from the message and merge them
    2. record products named in the message
    3. classify the intent, then refine it (specific product, FAQ)
    4. update conversation state
    5. render the reply, score confidence, run output guardrails

Usage:
    manager = ConversationManager(knowledge_base)
    print(manager.generate_greeting())
    result = manager.process_message("Quanto custa o portão?", LeadData())
    lead = result.updated_lead_data
"""

import uuid
from typing import Optional

from lead_chatbot.config import settings
from lead_chatbot.conversation import intents as intent_ids
from lead_chatbot.conversation.guardrails import GuardrailPipeline, has_unresolved_marker
from lead_chatbot.conversation.intent_classifier import IntentClassifier
from lead_chatbot.conversation.intents import Intent
from lead_chatbot.conversation.knowledge_matcher import KnowledgeMatcher
from lead_chatbot.conversation.lead_capture import LeadCaptureExtractor
from lead_chatbot.conversation.response_generator import ResponseGenerator
from lead_chatbot.conversation.state import (
    AwaitingData,
    ChatResponse,
    ConversationState,
    EngagementLevel,
    FollowUpSuggestion,
)
from lead_chatbot.logging_context import get_session_logger, session_context
from lead_chatbot.schemas.knowledge_schema import KnowledgeBaseContext
from lead_chatbot.schemas.lead_schema import LeadData

logger = get_session_logger(__name__)

# Confidence scoring
BASE_CONFIDENCE = 0.5
PRIORITY_WEIGHT = 0.3
NON_FALLBACK_BONUS = 0.2
SUBSTANTIAL_REPLY_BONUS = 0.1
SUBSTANTIAL_REPLY_LENGTH = 50
UNRESOLVED_PENALTY = 0.3


def calculate_confidence(intent: Intent, response: str) -> float:
    """Heuristic confidence in [0, 1] for a rendered reply."""
    confidence = BASE_CONFIDENCE + (intent.priority / 10) * PRIORITY_WEIGHT
    if intent.id != intent_ids.FALLBACK:
        confidence += NON_FALLBACK_BONUS
    if len(response) > SUBSTANTIAL_REPLY_LENGTH:
        confidence += SUBSTANTIAL_REPLY_BONUS
    if has_unresolved_marker(response):
        confidence -= UNRESOLVED_PENALTY
    return max(0.0, min(1.0, confidence))


def compute_engagement(message_count: int, distinct_intents: int) -> EngagementLevel:
    bounds = settings.engagement
    if message_count > bounds.high_messages or distinct_intents > bounds.high_questions:
        return EngagementLevel.HIGH
    if message_count > bounds.medium_messages or distinct_intents > bounds.medium_questions:
        return EngagementLevel.MEDIUM
    return EngagementLevel.LOW


class ConversationManager:
    """Owns one conversation's state and runs the per-message pipeline."""

    def __init__(
        self,
        knowledge_base: KnowledgeBaseContext,
        session_id: Optional[str] = None,
        classifier: Optional[IntentClassifier] = None,
        generator: Optional[ResponseGenerator] = None,
        extractor: Optional[LeadCaptureExtractor] = None,
        matcher: Optional[KnowledgeMatcher] = None,
        guardrails: Optional[GuardrailPipeline] = None,
    ) -> None:
        self.session_id = session_id or f"CHAT-{uuid.uuid4().hex[:8]}"
        self.knowledge_base = knowledge_base
        self.matcher = matcher or KnowledgeMatcher()
        self.classifier = classifier or IntentClassifier()
        self.generator = generator or ResponseGenerator(matcher=self.matcher)
        self.extractor = extractor or LeadCaptureExtractor()
        self.guardrails = guardrails or GuardrailPipeline()
        self._state = self._initial_state()

    def _initial_state(self) -> ConversationState:
        return ConversationState(tone_of_voice=self._configured_tone())

    def _configured_tone(self) -> str:
        return self.knowledge_base.ai_config.tone_of_voice or settings.business.default_tone

    def process_message(
        self,
        user_message: str,
        current_lead_data: Optional[LeadData] = None,
    ) -> ChatResponse:
        """Run one turn of the conversation."""
        with session_context(self.session_id):
            return self._run_turn(user_message, current_lead_data)

    def _run_turn(self, user_message: str, current_lead_data: Optional[LeadData]) -> ChatResponse:
        lead_data = current_lead_data or LeadData()
        products = self.knowledge_base.products

        captured = self.extractor.extract(user_message)
        if "nome" in captured and not self._accept_name(captured["nome"], user_message, lead_data):
            del captured["nome"]
        updated_lead = lead_data.merge(captured)

        for product in self.matcher.detect_multiple_products(user_message, products):
            self._track_product(product.name, updated_lead)

        intent = self.classifier.classify(user_message, self._state, has_name="nome" in captured)
        intent = self._refine_intent(intent, user_message, updated_lead)

        self._update_state(intent, updated_lead)

        raw_response = self.generator.generate(
            intent, self._state, updated_lead, self.knowledge_base, user_message
        )
        confidence = calculate_confidence(intent, raw_response)
        response, violations = self.guardrails.apply(raw_response)

        logger.info(
            "Turn %d: intent=%s confidence=%.2f captured=%s violations=%d",
            self._state.message_count,
            intent.id,
            confidence,
            sorted(captured),
            len(violations),
        )
        return ChatResponse(
            response=response,
            intent=intent,
            updated_lead_data=updated_lead,
            captured_data=captured,
            confidence=confidence,
        )

    def _refine_intent(self, intent: Intent, user_message: str, lead_data: LeadData) -> Intent:
        """Narrow broad intents using the knowledge base."""
        if intent.id == intent_ids.PRODUCT_INQUIRY:
            products = self.knowledge_base.products
            candidates = self.matcher.find_relevant_products(user_message, products)
            candidates += [
                p for p in self.matcher.detect_keyword_mentions(user_message, products)
                if p not in candidates
            ]
            for candidate in candidates:
                self._track_product(candidate.name, lead_data)

            product = self.matcher.find_best_product(user_message, products)
            specific = self._lookup_intent(intent_ids.SPECIFIC_PRODUCT_INQUIRY)
            if product is not None and specific is not None:
                self._track_product(product.name, lead_data)
                return specific

        elif intent.id == intent_ids.FALLBACK:
            faq = self.matcher.find_relevant_faq(user_message, self.knowledge_base.faqs)
            faq_intent = self._lookup_intent(intent_ids.FAQ_QUESTION)
            if faq is not None and faq_intent is not None:
                return faq_intent

        return intent

    def _lookup_intent(self, intent_id: str) -> Optional[Intent]:
        try:
            return self.classifier.get_intent(intent_id)
        except KeyError:
            return None

    def _track_product(self, product_name: str, lead_data: LeadData) -> None:
        if self._state.add_mentioned_product(product_name):
            logger.debug("Product mentioned: %s", product_name)
        lead_data.add_interest(product_name)

    def _accept_name(self, name: str, user_message: str, lead_data: LeadData) -> bool:
        """Reject product words, and bare words that would replace a known name."""
        if self.matcher.is_catalog_term(name, self.knowledge_base.products):
            logger.debug("Discarding captured name '%s': it names a product", name)
            return False
        if lead_data.nome and self.extractor.extract_name(user_message, include_bare=False) is None:
            logger.debug("Keeping name '%s' over bare word '%s'", lead_data.nome, name)
            return False
        return True

    def _update_state(self, intent: Intent, lead_data: LeadData) -> None:
        state = self._state
        state.last_intent = state.current_intent
        state.current_intent = intent.id
        state.message_count += 1
        state.asked_questions.add(intent.id)

        if intent.id == intent_ids.GIVE_NAME and not lead_data.telefone:
            state.awaiting_data = AwaitingData.PHONE
        elif intent.id == intent_ids.GIVE_PHONE and not lead_data.email:
            state.awaiting_data = AwaitingData.EMAIL
        else:
            state.awaiting_data = None

        level = compute_engagement(state.message_count, len(state.asked_questions))
        if level.rank > state.engagement_level.rank:
            logger.debug("Engagement %s -> %s", state.engagement_level.value, level.value)
            state.engagement_level = level

    def generate_greeting(self) -> str:
        """Opening message for a new conversation."""
        company = self.knowledge_base.company_data
        company_name = company.name if company and company.name else settings.business.name
        greeting = self.knowledge_base.ai_config.greeting_message
        if greeting:
            return greeting.replace("${companyName}", company_name)
        return f"Olá! 👋 Bem-vindo(a) à {company_name}! Como posso te ajudar hoje?"

    def should_follow_up(self, lead_data: LeadData) -> FollowUpSuggestion:
        """Suggest a nudge towards capturing the phone number."""
        if (
            lead_data.nome
            and not lead_data.telefone
            and self._state.message_count > settings.engagement.follow_up_min_messages
        ):
            return FollowUpSuggestion(
                should_follow_up=True,
                message=f"Ah, {lead_data.nome}, para eu te mandar mais informações, qual seu WhatsApp?",
            )
        if lead_data.interesse and not lead_data.telefone:
            return FollowUpSuggestion(
                should_follow_up=True,
                message=(
                    f"Vi que você se interessou por {lead_data.interesse[0]}. "
                    "Posso te mandar mais detalhes no WhatsApp?"
                ),
            )
        return FollowUpSuggestion(should_follow_up=False)

    def get_state(self) -> ConversationState:
        """Snapshot of the conversation state. Mutating it has no effect."""
        return self._state.copy()

    def reset_state(self) -> None:
        self._state = self._initial_state()
        with session_context(self.session_id):
            logger.info("Conversation state reset")

    def update_knowledge_base(self, knowledge_base: KnowledgeBaseContext) -> None:
        """Swap the knowledge base, keeping conversation state.

        The tone of voice follows the new knowledge base.
        """
        self.knowledge_base = knowledge_base
        self._state.tone_of_voice = self._configured_tone()
        with session_context(self.session_id):
            logger.info(
                "Knowledge base updated (%d products, %d FAQs)",
                len(knowledge_base.products),
                len(knowledge_base.faqs),
            )
