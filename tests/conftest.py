"""Shared test fixtures and helpers."""

from typing import Optional, Sequence

import pytest

from lead_chatbot.conversation.conversation_manager import ConversationManager
from lead_chatbot.conversation.guardrails import GuardrailPipeline
from lead_chatbot.conversation.intent_classifier import IntentClassifier
from lead_chatbot.conversation.knowledge_matcher import KnowledgeMatcher
from lead_chatbot.conversation.lead_capture import LeadCaptureExtractor
from lead_chatbot.conversation.response_generator import ResponseGenerator
from lead_chatbot.conversation.state import ConversationState
from lead_chatbot.schemas.knowledge_schema import (
    AIConfig,
    CompanyData,
    FAQItem,
    KnowledgeBaseContext,
    Product,
)


class FixedRandom:
    """Random source stub: fixed ``random()`` value, first item on ``choice()``."""

    def __init__(self, value: float = 0.99) -> None:
        self.value = value

    def random(self) -> float:
        return self.value

    def choice(self, seq: Sequence[str]) -> str:
        return seq[0]


def make_product(
    name: str,
    category: Optional[str] = None,
    keywords: Optional[list[str]] = None,
    description: str = "",
    price: Optional[str] = None,
    is_active: bool = True,
    product_id: Optional[str] = None,
) -> Product:
    """Helper to create a Product with sensible defaults."""
    return Product(
        id=product_id or name.lower().replace(" ", "-"),
        name=name,
        description=description,
        category=category,
        price=price,
        keywords=keywords or [],
        is_active=is_active,
    )


def make_state(**overrides) -> ConversationState:
    """Helper to create a ConversationState with overrides."""
    return ConversationState(**overrides)


@pytest.fixture
def products():
    return [
        make_product(
            "Portão Automático",
            category="Portões",
            keywords=["portão", "automático"],
            description="Portão automático de alta qualidade",
            price="R$ 1.200 - R$ 2.500",
        ),
        make_product(
            "Grade de Proteção",
            category="Grades",
            keywords=["grade", "proteção", "janela"],
            description="Grade de proteção para janelas",
            price="R$ 300 - R$ 800",
        ),
        make_product(
            "Escada Caracol",
            category="Escadas",
            keywords=["escada", "caracol"],
            description="Escada metálica helicoidal",
            is_active=False,
        ),
    ]


@pytest.fixture
def faqs():
    return [
        FAQItem(
            id="1",
            question="Qual o horário de atendimento?",
            answer="Nosso atendimento funciona de segunda a sexta, das 9h às 18h.",
            category="Atendimento",
            keywords=["horário", "atendimento"],
        ),
        FAQItem(
            id="2",
            question="Quais as formas de pagamento?",
            answer="Aceitamos Pix, boleto e cartão.",
            category="Financeiro",
            keywords=["pagamento", "pix", "boleto"],
        ),
    ]


@pytest.fixture
def company():
    return CompanyData(
        name="FerrAço",
        industry="Metalurgia",
        location="Rua Teste, 123",
        working_hours="Seg-Sex: 9h-18h",
        phone="(11) 3456-7890",
        website="https://ferraco.com.br",
    )


@pytest.fixture
def knowledge_base(company, products, faqs):
    return KnowledgeBaseContext(
        company_data=company,
        products=products,
        faqs=faqs,
        ai_config=AIConfig(
            tone_of_voice="friendly",
            greeting_message="Olá! 👋 Bem-vindo(a) à ${companyName}!",
        ),
    )


@pytest.fixture
def matcher():
    return KnowledgeMatcher()


@pytest.fixture
def extractor():
    return LeadCaptureExtractor()


@pytest.fixture
def classifier():
    return IntentClassifier()


@pytest.fixture
def guardrail_pipeline():
    return GuardrailPipeline()


@pytest.fixture
def generator():
    """Generator that never adds a validation phrase."""
    return ResponseGenerator(rng=FixedRandom(0.99))


@pytest.fixture
def manager(knowledge_base, generator):
    return ConversationManager(knowledge_base, session_id="TEST-001", generator=generator)
