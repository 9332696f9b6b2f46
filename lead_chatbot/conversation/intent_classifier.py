"""
Keyword and pattern based intent classification.

Score per intent:
    keywords  sum over keywords of 2 (exact) | 1.5 (whole word) | 1 (substring), x 0.3
    patterns  +1.5 if any pattern matches the original message
    context   x 1.2 when every required predicate holds, x 0.5 otherwise
    priority  x priority / 10

Intents scoring zero are discarded. The highest score wins, ties go to
the higher priority, and with no candidates the fallback intent is
returned. ``give_name`` is skipped in favour of the next candidate when
the message yields no usable name, so a lone "Ótimo" is not a name.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from lead_chatbot.conversation.intents import (
    FALLBACK,
    GIVE_NAME,
    INTENTS,
    ContextRequirement,
    Intent,
    ResponseTemplate,
)
from lead_chatbot.conversation.lead_capture import LeadCaptureExtractor
from lead_chatbot.conversation.state import AwaitingData, ConversationState
from lead_chatbot.utils import normalize_text

logger = logging.getLogger(__name__)

EXACT_MATCH_POINTS = 2.0
WORD_MATCH_POINTS = 1.5
SUBSTRING_MATCH_POINTS = 1.0
KEYWORD_WEIGHT = 0.3
PATTERN_BONUS = 1.5
CONTEXT_BOOST = 1.2
CONTEXT_PENALTY = 0.5

_DEFAULT_FALLBACK = Intent(
    id=FALLBACK,
    name="Fallback",
    priority=0,
    responses=(ResponseTemplate(template="Desculpa, não entendi. Pode reformular?"),),
)


@dataclass
class PersonalDataFlags:
    has_name: bool
    has_phone: bool
    has_email: bool


def _context_holds(requirement: ContextRequirement, state: ConversationState) -> bool:
    if requirement == ContextRequirement.PRODUCT_MENTIONED:
        return bool(state.mentioned_products)
    if requirement == ContextRequirement.AWAITING_NAME:
        return state.awaiting_data == AwaitingData.NAME
    if requirement == ContextRequirement.AWAITING_PHONE:
        return state.awaiting_data == AwaitingData.PHONE
    if requirement == ContextRequirement.AWAITING_EMAIL:
        return state.awaiting_data == AwaitingData.EMAIL
    return False


class IntentClassifier:
    """Maps a message plus conversation state to the best-scoring intent."""

    def __init__(self, intents: Optional[tuple[Intent, ...]] = None) -> None:
        self.intents = tuple(intents) if intents is not None else INTENTS
        self._by_id = {intent.id: intent for intent in self.intents}
        self._extractor = LeadCaptureExtractor()

    def classify(
        self,
        message: str,
        state: ConversationState,
        has_name: Optional[bool] = None,
    ) -> Intent:
        """Return the winning intent, or the fallback when nothing scores.

        ``has_name`` says whether a name was captured from ``message``; when
        omitted the extractor is asked.
        """
        if has_name is None:
            has_name = self._extractor.extract_name(message) is not None
        for intent, score in self.score_intents(message, state):
            if intent.id == GIVE_NAME and not has_name:
                logger.debug("Skipping '%s': no name in message", intent.id)
                continue
            logger.debug("Classified as '%s' (score=%.3f)", intent.id, score)
            return intent
        logger.debug("No intent matched, using fallback")
        return self.get_fallback_intent()

    def score_intents(
        self, message: str, state: ConversationState
    ) -> list[tuple[Intent, float]]:
        """All intents with a positive score, best first."""
        normalized = normalize_text(message)
        scored = [
            (intent, self.calculate_score(normalized, message, intent, state))
            for intent in self.intents
        ]
        scored = [(intent, score) for intent, score in scored if score > 0]
        scored.sort(key=lambda item: (item[1], item[0].priority), reverse=True)
        return scored

    def calculate_score(
        self,
        normalized: str,
        original: str,
        intent: Intent,
        state: ConversationState,
    ) -> float:
        score = self._keyword_points(normalized, intent.keywords) * KEYWORD_WEIGHT

        if any(pattern.search(original) for pattern in intent.patterns):
            score += PATTERN_BONUS

        if intent.requires_context:
            if all(_context_holds(req, state) for req in intent.requires_context):
                score *= CONTEXT_BOOST
            else:
                score *= CONTEXT_PENALTY

        return score * (intent.priority / 10)

    @staticmethod
    def _keyword_points(normalized: str, keywords: tuple[str, ...]) -> float:
        if not normalized:
            return 0.0
        points = 0.0
        for keyword in keywords:
            kw = normalize_text(keyword)
            if not kw:
                continue
            if normalized == kw:
                points += EXACT_MATCH_POINTS
            elif re.search(rf"(?<!\w){re.escape(kw)}(?!\w)", normalized):
                points += WORD_MATCH_POINTS
            elif kw in normalized:
                points += SUBSTRING_MATCH_POINTS
        return points

    def get_intent(self, intent_id: str) -> Intent:
        """Look up an intent by id.

        Raises:
            KeyError: If the id is not in this classifier's table.
        """
        if intent_id not in self._by_id:
            raise KeyError(f"Intent '{intent_id}' not configured. Available: {list(self._by_id)}")
        return self._by_id[intent_id]

    def get_fallback_intent(self) -> Intent:
        return self._by_id.get(FALLBACK, _DEFAULT_FALLBACK)

    def has_personal_data(self, message: str) -> PersonalDataFlags:
        """Which contact fields the message appears to contain."""
        return PersonalDataFlags(
            has_name=self._extractor.extract_name(message) is not None,
            has_phone=self._extractor.extract_phone(message) is not None,
            has_email=self._extractor.extract_email(message) is not None,
        )


# Singleton instance
intent_classifier = IntentClassifier()
