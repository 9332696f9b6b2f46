"""
Template selection, variable filling, and tone rendering.

Rendering order for one turn:
    1. pick the first template whose conditions hold (else the first one)
    2. fill ``${variable}`` placeholders; unknown ones stay literal
    3. maybe prepend a short validation phrase ("Show!", "Perfeito!")
    4. apply the tone of voice
    5. append the template's follow-up line

Randomness only enters at step 3 and comes from an injectable source
exposing ``random()`` and ``choice()``, so tests can pin it.
"""

import logging
import random
import re
from typing import Callable, Optional, Protocol, Sequence

from lead_chatbot.config import settings
from lead_chatbot.conversation import intents as intent_ids
from lead_chatbot.conversation.intents import Intent, ResponseTemplate, TemplateConditions
from lead_chatbot.conversation.knowledge_matcher import KnowledgeMatcher, knowledge_matcher
from lead_chatbot.conversation.state import ConversationState
from lead_chatbot.schemas.knowledge_schema import KnowledgeBaseContext, Product
from lead_chatbot.schemas.lead_schema import LeadData
from lead_chatbot.utils import join_with_and

logger = logging.getLogger(__name__)

NO_FAQ_MATCH_RESPONSE = "Não encontrei informação específica sobre isso. Pode me dar mais detalhes?"
NO_TEMPLATE_RESPONSE = "Desculpa, não consegui processar sua mensagem. Pode tentar de novo?"
NO_COMPANY_INFO = "Entre em contato para mais informações."

VALIDATION_PHRASES = (
    "Ótima escolha!",
    "Legal saber disso!",
    "Entendi!",
    "Show!",
    "Perfeito!",
    "Que bom!",
    "Bacana!",
    "Certo!",
)
_HAS_VALIDATION = re.compile(r"^(?:ótim|otim|legal|perfeito|show|que bom|bacana|entendi|certo)", re.IGNORECASE)

MAX_TOP_PRODUCTS = 5

_PLACEHOLDER = re.compile(r"\$\{(\w+)\}")
_EMOJI = re.compile(
    "[\U0001F300-\U0001FAFF\U00002600-\U000027BF\U0001F1E6-\U0001F1FF️‍⃣]"
)
_SPACES = re.compile(r"[ \t]{2,}")


class RandomSource(Protocol):
    def random(self) -> float: ...

    def choice(self, seq: Sequence[str]) -> str: ...


def _strip_emoji(text: str) -> str:
    text = _EMOJI.sub("", text)
    text = _SPACES.sub(" ", text)
    return "\n".join(line.strip() for line in text.split("\n")).strip()


def _professional(text: str) -> str:
    return re.sub(r"!+", ".", _strip_emoji(text))


def _formal(text: str) -> str:
    text = _professional(text)
    text = re.sub(r"\bvc\b", "você", text, flags=re.IGNORECASE)
    return re.sub(r"\bpra\b", "para", text, flags=re.IGNORECASE)


def _casual(text: str) -> str:
    text = re.sub(r"\bvocê\b", "vc", text, flags=re.IGNORECASE)
    return re.sub(r"\bpara\b", "pra", text, flags=re.IGNORECASE)


TONE_TRANSFORMS: dict[str, Callable[[str], str]] = {
    "professional": _professional,
    "formal": _formal,
    "casual": _casual,
}


def apply_tone(text: str, tone: str) -> str:
    """Render text in the given tone. Friendly and unknown tones are unchanged."""
    transform = TONE_TRANSFORMS.get(tone)
    return transform(text) if transform else text


def conditions_hold(
    conditions: Optional[TemplateConditions],
    state: ConversationState,
    lead_data: LeadData,
) -> bool:
    if conditions is None:
        return True
    if any(not lead_data.has_field(f) for f in conditions.required_fields):
        return False
    if any(lead_data.has_field(f) for f in conditions.forbidden_fields):
        return False
    if conditions.min_messages is not None and state.message_count < conditions.min_messages:
        return False
    if conditions.max_messages is not None and state.message_count > conditions.max_messages:
        return False
    if conditions.product_mentioned and not state.mentioned_products:
        return False
    return True


def fill_placeholders(template: str, variables: dict[str, str]) -> str:
    """Replace ``${name}`` with bound values, leaving unbound ones literal."""
    def _replace(match: re.Match) -> str:
        return variables.get(match.group(1)) or match.group(0)

    return _PLACEHOLDER.sub(_replace, template)


class ResponseGenerator:
    """Turns a classified intent into reply text."""

    def __init__(
        self,
        rng: Optional[RandomSource] = None,
        matcher: Optional[KnowledgeMatcher] = None,
        validation_probability: Optional[float] = None,
    ) -> None:
        self.rng = rng if rng is not None else random.Random(settings.response.random_seed)
        self.matcher = matcher or knowledge_matcher
        self.validation_probability = (
            validation_probability
            if validation_probability is not None
            else settings.response.validation_probability
        )

    def generate(
        self,
        intent: Intent,
        state: ConversationState,
        lead_data: LeadData,
        knowledge_base: KnowledgeBaseContext,
        user_message: str,
    ) -> str:
        template = self.select_template(intent, state, lead_data)
        if template is None:
            logger.warning("Intent '%s' has no response templates", intent.id)
            return NO_TEMPLATE_RESPONSE

        variables = self.build_variables(intent, state, lead_data, knowledge_base, user_message)
        if variables is None:
            return NO_FAQ_MATCH_RESPONSE

        text = fill_placeholders(template.template, variables)
        if intent.id != intent_ids.FALLBACK:
            text = self._add_validation_phrase(text)
        text = apply_tone(text, state.tone_of_voice)

        if template.follow_up:
            text = f"{text}\n{apply_tone(template.follow_up, state.tone_of_voice)}"
        return text

    def select_template(
        self,
        intent: Intent,
        state: ConversationState,
        lead_data: LeadData,
    ) -> Optional[ResponseTemplate]:
        """First template whose conditions hold, else the intent's first template."""
        if not intent.responses:
            return None
        for template in intent.responses:
            if conditions_hold(template.conditions, state, lead_data):
                return template
        return intent.responses[0]

    def build_variables(
        self,
        intent: Intent,
        state: ConversationState,
        lead_data: LeadData,
        knowledge_base: KnowledgeBaseContext,
        user_message: str,
    ) -> Optional[dict[str, str]]:
        """Bind template variables for this intent.

        Returns None when the intent is an FAQ question with no matching
        entry, which the caller answers with a request for more detail.
        """
        company = knowledge_base.company_data
        variables: dict[str, str] = {
            "companyName": (company.name if company and company.name else settings.business.name),
            "userName": lead_data.nome or "você",
            "phone": lead_data.telefone or "[telefone]",
            "email": lead_data.email or "[email]",
        }
        if lead_data.cidade:
            variables["city"] = lead_data.cidade
        if lead_data.interesse:
            variables["interesse"] = lead_data.interesse[0]

        if intent.id == intent_ids.PRODUCT_INQUIRY:
            products = knowledge_base.products
            categories = self.matcher.get_product_categories(products)
            active = [p.name for p in products if p.is_active]
            variables["productCategories"] = join_with_and(categories) or "diversos produtos"
            variables["productCount"] = str(len(active))
            variables["topProducts"] = join_with_and(active[:MAX_TOP_PRODUCTS]) or "diversos produtos"

        elif intent.id in (
            intent_ids.SPECIFIC_PRODUCT_INQUIRY,
            intent_ids.PRICE_QUESTION,
            intent_ids.AVAILABILITY,
        ):
            product = self._resolve_product(user_message, state, knowledge_base)
            if product is not None:
                variables.update(self._product_variables(product))

        elif intent.id == intent_ids.COMPANY_INFO:
            variables["companyInfo"] = self._company_info(knowledge_base)

        elif intent.id == intent_ids.FAQ_QUESTION:
            faq = self.matcher.find_relevant_faq(user_message, knowledge_base.faqs)
            if faq is None:
                return None
            variables["faqAnswer"] = faq.answer

        return variables

    def _resolve_product(
        self,
        user_message: str,
        state: ConversationState,
        knowledge_base: KnowledgeBaseContext,
    ) -> Optional[Product]:
        """The product the message names, else the last one mentioned."""
        found = self.matcher.find_relevant_products(user_message, knowledge_base.products, 1)
        if found:
            return found[0]
        last = state.last_mentioned_product
        if last:
            return self.matcher.find_product_by_name(last, knowledge_base.products)
        return None

    @staticmethod
    def _product_variables(product: Product) -> dict[str, str]:
        return {
            "productName": product.name,
            "description": product.description.strip().rstrip(".") or product.category or product.name,
            "category": product.category or "produto",
            "price": product.price or "sob consulta",
            "priceInfo": f"custa {product.price}" if product.price else "tem preço sob consulta",
        }

    @staticmethod
    def _company_info(knowledge_base: KnowledgeBaseContext) -> str:
        company = knowledge_base.company_data
        if company is None:
            return NO_COMPANY_INFO
        parts = []
        if company.location:
            parts.append(f"📍 Localização: {company.location}")
        if company.working_hours:
            parts.append(f"🕐 Horário: {company.working_hours}")
        if company.phone:
            parts.append(f"📞 Telefone: {company.phone}")
        if company.website:
            parts.append(f"🌐 Site: {company.website}")
        return "\n".join(parts) or NO_COMPANY_INFO

    def _add_validation_phrase(self, text: str) -> str:
        if _HAS_VALIDATION.match(text):
            return text
        if self.rng.random() < self.validation_probability:
            return f"{self.rng.choice(VALIDATION_PHRASES)} {text}"
        return text
