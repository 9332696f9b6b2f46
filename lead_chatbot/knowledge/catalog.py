"""
Knowledge base sources: the bundled demo catalog and JSON files.

The demo knowledge base describes a small metalwork shop and is what the
console demo runs against when no file is configured.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from lead_chatbot.config import settings
from lead_chatbot.schemas.knowledge_schema import (
    AIConfig,
    CompanyData,
    FAQItem,
    KnowledgeBaseContext,
    Product,
)

logger = logging.getLogger(__name__)


class KnowledgeBaseLoadError(ValueError):
    """Raised when a knowledge base file is missing or malformed."""


DEMO_COMPANY = CompanyData(
    name="FerrAço",
    industry="Metalurgia",
    description="Fabricação e instalação de estruturas metálicas sob medida.",
    location="Rua das Indústrias, 123 - São Paulo, SP",
    working_hours="Segunda a sexta, das 8h às 18h. Sábado, das 8h às 12h.",
    phone="(11) 3456-7890",
    email="contato@ferraco.com.br",
    website="https://ferraco.com.br",
)

DEMO_PRODUCTS = [
    Product(
        id="portao-automatico",
        name="Portão Automático",
        description="Portão basculante ou deslizante com motor e controle remoto",
        category="Portões",
        price="a partir de R$ 2.500",
        keywords=["portão", "portao", "automático", "motor", "controle"],
    ),
    Product(
        id="grade-protecao",
        name="Grade de Proteção",
        description="Grade para janelas e sacadas em ferro ou alumínio",
        category="Grades",
        price="a partir de R$ 300 o m²",
        keywords=["grade", "proteção", "janela", "sacada"],
    ),
    Product(
        id="escada-caracol",
        name="Escada Caracol",
        description="Escada metálica helicoidal com acabamento em pintura eletrostática",
        category="Escadas",
        keywords=["escada", "caracol", "helicoidal"],
    ),
    Product(
        id="corrimao-inox",
        name="Corrimão de Inox",
        description="Corrimão em aço inox escovado para escadas e rampas",
        category="Corrimãos",
        price="a partir de R$ 180 o metro",
        keywords=["corrimão", "corrimao", "inox", "guarda-corpo"],
    ),
    Product(
        id="cobertura-policarbonato",
        name="Cobertura de Policarbonato",
        description="Estrutura metálica com telhas de policarbonato",
        category="Coberturas",
        keywords=["cobertura", "policarbonato", "toldo"],
        is_active=False,
    ),
]

DEMO_FAQS = [
    FAQItem(
        id="horario",
        question="Qual o horário de atendimento?",
        answer="Atendemos de segunda a sexta, das 8h às 18h, e sábado das 8h às 12h.",
        category="Atendimento",
        keywords=["horário", "atendimento", "funcionamento", "abre", "fecha"],
    ),
    FAQItem(
        id="garantia",
        question="Os produtos têm garantia?",
        answer="Sim! Todos os produtos têm 1 ano de garantia de fabricação e 90 dias na instalação.",
        category="Pós-venda",
        keywords=["garantia", "defeito"],
    ),
    FAQItem(
        id="pagamento",
        question="Quais as formas de pagamento?",
        answer="Aceitamos Pix, boleto e cartão em até 10x sem juros.",
        category="Financeiro",
        keywords=["pagamento", "pagar", "parcelar", "cartão", "pix", "boleto"],
    ),
    FAQItem(
        id="instalacao",
        question="Vocês fazem a instalação?",
        answer="Sim, nossa equipe faz a medição e a instalação em toda a Grande São Paulo.",
        category="Serviços",
        keywords=["instalação", "instalar", "medição"],
    ),
]

DEMO_AI_CONFIG = AIConfig(
    tone_of_voice=settings.business.default_tone,
    greeting_message="Olá! 👋 Bem-vindo(a) à ${companyName}! Como posso te ajudar hoje?",
)


def build_demo_knowledge_base() -> KnowledgeBaseContext:
    """Fresh copy of the bundled demo knowledge base."""
    return KnowledgeBaseContext(
        company_data=DEMO_COMPANY.model_copy(deep=True),
        products=[p.model_copy(deep=True) for p in DEMO_PRODUCTS],
        faqs=[f.model_copy(deep=True) for f in DEMO_FAQS],
        ai_config=DEMO_AI_CONFIG.model_copy(deep=True),
    )


def load_knowledge_base(path: Union[str, Path]) -> KnowledgeBaseContext:
    """Load a knowledge base from a JSON file.

    Raises:
        KnowledgeBaseLoadError: If the file can't be read, isn't valid
            JSON, or doesn't match the knowledge base schema.
    """
    file_path = Path(path)
    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise KnowledgeBaseLoadError(f"Cannot read knowledge base {file_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise KnowledgeBaseLoadError(f"Invalid JSON in {file_path}: {e}") from e

    try:
        knowledge_base = KnowledgeBaseContext.model_validate(raw)
    except ValidationError as e:
        raise KnowledgeBaseLoadError(
            f"Knowledge base {file_path} failed validation with {e.error_count()} error(s)"
        ) from e

    logger.info(
        "Loaded knowledge base from %s (%d products, %d FAQs)",
        file_path,
        len(knowledge_base.products),
        len(knowledge_base.faqs),
    )
    return knowledge_base


def get_knowledge_base(path: Optional[Union[str, Path]] = None) -> KnowledgeBaseContext:
    """Knowledge base from ``path``, the configured path, or the demo catalog."""
    source = path or settings.knowledge_base_path
    if source:
        return load_knowledge_base(source)
    return build_demo_knowledge_base()
