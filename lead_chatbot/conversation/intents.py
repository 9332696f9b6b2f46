"""
Static intent table: matching rules and candidate replies per intent.

The table is plain immutable data. The classifier scores every entry
against a message, and the response generator picks one of its
templates. Nothing here is mutated at runtime.

Templates use ``${variable}`` placeholders resolved by the response
generator. Conditions reference LeadData field names.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from lead_chatbot.schemas.lead_schema import CONTACT_FIELDS


class ContextRequirement(str, Enum):
    """Conversation-state predicates an intent can depend on."""
    PRODUCT_MENTIONED = "product_mentioned"
    AWAITING_NAME = "awaiting_name"
    AWAITING_PHONE = "awaiting_phone"
    AWAITING_EMAIL = "awaiting_email"


@dataclass(frozen=True)
class TemplateConditions:
    """When a template is eligible. Unset bounds are not checked."""
    required_fields: tuple[str, ...] = ()
    forbidden_fields: tuple[str, ...] = ()
    min_messages: Optional[int] = None
    max_messages: Optional[int] = None
    product_mentioned: bool = False


@dataclass(frozen=True)
class ResponseTemplate:
    """A reply with optional follow-up line and eligibility conditions."""
    template: str
    follow_up: Optional[str] = None
    conditions: Optional[TemplateConditions] = None


@dataclass(frozen=True)
class Intent:
    """A named user purpose with its matching rules and replies."""
    id: str
    name: str
    keywords: tuple[str, ...] = ()
    patterns: tuple[re.Pattern, ...] = ()
    priority: int = 5
    responses: tuple[ResponseTemplate, ...] = ()
    requires_context: tuple[ContextRequirement, ...] = field(default=())


# Intent ids referenced from code
GREETING = "greeting"
PRODUCT_INQUIRY = "product_inquiry"
SPECIFIC_PRODUCT_INQUIRY = "specific_product_inquiry"
PRICE_QUESTION = "price_question"
AVAILABILITY = "availability"
DELIVERY_INQUIRY = "delivery_inquiry"
COMPANY_INFO = "company_info"
GIVE_NAME = "give_name"
GIVE_PHONE = "give_phone"
GIVE_EMAIL = "give_email"
BUDGET_REQUEST = "budget_request"
WANT_ATTENDANT = "want_attendant"
FAQ_QUESTION = "faq_question"
THANKS = "thanks"
GOODBYE = "goodbye"
CONFIRMATION_YES = "confirmation_yes"
CONFIRMATION_NO = "confirmation_no"
FALLBACK = "fallback"

_CAP_WORD = r"[A-ZÀ-ÖØ-Þ][a-zß-öø-ÿ]+"


def _patterns(*regexes: str, flags: int = re.IGNORECASE) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(rx, flags) for rx in regexes)


INTENTS: tuple[Intent, ...] = (
    # --- Greeting ---
    Intent(
        id=GREETING,
        name="Saudação",
        keywords=("oi", "ola", "olá", "bom dia", "boa tarde", "boa noite", "hey", "opa", "e ai", "e aí"),
        patterns=_patterns(r"^(?:oi|ol[áa]|hey|opa|al[ôo]|bom dia|boa tarde|boa noite|e\s*a[íi])\b"),
        priority=10,
        responses=(
            ResponseTemplate(
                template="Olá! 👋 Tudo bem? Sou o assistente virtual da ${companyName}.",
                follow_up="Como posso te ajudar hoje?",
            ),
        ),
    ),

    # --- Catalog ---
    Intent(
        id=PRODUCT_INQUIRY,
        name="Pergunta sobre Produtos",
        keywords=(
            "produto", "produtos", "vende", "vendem", "possui", "possuem",
            "trabalha com", "trabalham com", "oferece", "oferecem",
            "fabrica", "fabricam", "catalogo", "catálogo", "linha de produtos",
        ),
        patterns=_patterns(
            r"o que (?:voc[eê]s?|a empresa) (?:vende|vendem|fabrica|fabricam|oferece|oferecem|faz|fazem)",
            r"quais (?:produtos|servi[cç]os)",
            r"voc[eê]s (?:vendem|fabricam|fazem|trabalham com|t[eê]m)",
        ),
        priority=9,
        responses=(
            ResponseTemplate(
                template=(
                    "Trabalhamos com ${productCategories}. Temos ${productCount} opções no "
                    "catálogo, como ${topProducts}. Qual te interessa mais?"
                ),
            ),
        ),
    ),
    Intent(
        id=SPECIFIC_PRODUCT_INQUIRY,
        name="Pergunta sobre Produto Específico",
        priority=9,
        responses=(
            ResponseTemplate(
                template="Temos ${productName}, sim! ${description}. Te interessa?",
            ),
        ),
    ),
    Intent(
        id=PRICE_QUESTION,
        name="Pergunta sobre Preço",
        keywords=(
            "preço", "preco", "preços", "precos", "quanto custa", "quanto é",
            "quanto sai", "valor", "valores", "custo", "custa",
        ),
        patterns=_patterns(
            r"quanto (?:custa|[ée]|sai|fica)",
            r"qual (?:o |[ée] o )?(?:pre[cç]o|valor)",
        ),
        priority=8,
        responses=(
            ResponseTemplate(
                template=(
                    "O ${productName} ${priceInfo}. Posso te enviar um orçamento "
                    "detalhado no WhatsApp. Qual seu número?"
                ),
                conditions=TemplateConditions(
                    forbidden_fields=CONTACT_FIELDS, product_mentioned=True
                ),
            ),
            ResponseTemplate(
                template=(
                    "Perfeito, ${userName}! Vou preparar um orçamento completo para "
                    "${productName}. Só confirmando, seu WhatsApp é ${phone}?"
                ),
                conditions=TemplateConditions(
                    required_fields=("nome", "telefone"), product_mentioned=True
                ),
            ),
            ResponseTemplate(
                template=(
                    "Os valores variam conforme o modelo e a medida. "
                    "Qual produto te interessa? Assim te passo um orçamento certinho."
                ),
            ),
        ),
    ),
    Intent(
        id=AVAILABILITY,
        name="Disponibilidade",
        keywords=(
            "disponível", "disponivel", "estoque", "disponibilidade",
            "pronta entrega", "entrega imediata",
        ),
        patterns=_patterns(r"(?:tem|possui|h[áa]) (?:em )?(?:estoque|dispon[ií]vel)"),
        priority=7,
        requires_context=(ContextRequirement.PRODUCT_MENTIONED,),
        responses=(
            ResponseTemplate(
                template=(
                    "Sim, temos ${productName} disponível! Posso verificar os detalhes "
                    "e te mandar no WhatsApp. Qual seu número?"
                ),
                conditions=TemplateConditions(
                    forbidden_fields=("telefone",), product_mentioned=True
                ),
            ),
            ResponseTemplate(
                template=(
                    "Sim, temos ${productName} disponível! Vou confirmar os detalhes "
                    "e te mando no WhatsApp ${phone}."
                ),
                conditions=TemplateConditions(
                    required_fields=("telefone",), product_mentioned=True
                ),
            ),
            ResponseTemplate(
                template="Temos vários itens a pronta entrega. Qual produto te interessa?",
            ),
        ),
    ),
    Intent(
        id=DELIVERY_INQUIRY,
        name="Pergunta sobre Entrega",
        keywords=(
            "entrega", "entregar", "entregam", "prazo", "demora",
            "quanto tempo", "quando chega", "frete", "envia", "enviam",
        ),
        patterns=_patterns(
            r"quanto tempo (?:demora|leva|para entregar)",
            r"qual (?:o )?prazo",
            r"fazem entregas?",
        ),
        priority=7,
        responses=(
            ResponseTemplate(
                template=(
                    "Para ${city}, o prazo e o frete são calculados na hora do pedido. "
                    "Quer que eu te mande os detalhes no WhatsApp?"
                ),
                conditions=TemplateConditions(required_fields=("cidade",)),
            ),
            ResponseTemplate(
                template="O prazo de entrega varia conforme sua região. Você é de qual cidade?",
            ),
        ),
    ),

    # --- Company ---
    Intent(
        id=COMPANY_INFO,
        name="Informações da Empresa",
        keywords=(
            "endereço", "endereco", "localização", "localizacao", "onde fica",
            "onde ficam", "localizado", "localizados", "site", "contato da empresa",
        ),
        patterns=_patterns(
            r"(?:qual|me (?:fala|diz|passa)|onde (?:fica|[ée])) (?:o |a )?"
            r"(?:endere[cç]o|localiza[cç][aã]o)",
            r"onde (?:voc[eê]s )?(?:fica|ficam|est[aã]o)",
        ),
        priority=6,
        responses=(
            ResponseTemplate(
                template="${companyInfo}",
                follow_up="Precisa de mais alguma informação?",
            ),
        ),
    ),

    # --- Lead capture ---
    Intent(
        id=GIVE_NAME,
        name="Cliente Fornece Nome",
        keywords=("meu nome é", "meu nome e", "me chamo", "pode me chamar de"),
        patterns=(
            re.compile(r"(?:meu nome [eé]|me chamo|pode me chamar de)\s+\w{2,}", re.IGNORECASE),
            re.compile(rf"(?i:sou [oa])\s+{_CAP_WORD}"),
            re.compile(
                rf"^{_CAP_WORD}(?:\s+{_CAP_WORD})?(?:\s+(?i:aqui))?[.!]?$"
            ),
        ),
        priority=10,
        responses=(
            ResponseTemplate(
                template="Prazer, ${userName}! 😊 Para te enviar informações completas, qual seu WhatsApp?",
                conditions=TemplateConditions(forbidden_fields=("telefone",)),
            ),
            ResponseTemplate(
                template="Prazer, ${userName}! 😊 Já anotei seu contato. Em que posso te ajudar?",
            ),
        ),
    ),
    Intent(
        id=GIVE_PHONE,
        name="Cliente Fornece Telefone",
        keywords=("whatsapp", "zap", "celular", "meu numero", "meu número", "meu telefone"),
        patterns=_patterns(r"\(?\d{2}\)?\s*9?\s?\d{4,5}[-\s]?\d{4}"),
        priority=10,
        responses=(
            ResponseTemplate(
                template=(
                    "Ótimo, ${userName}! Salvei seu WhatsApp ${phone}. Já vou preparar "
                    "o material para você. Algo mais que possa ajudar?"
                ),
                conditions=TemplateConditions(required_fields=("nome", "telefone")),
            ),
            ResponseTemplate(
                template=(
                    "Perfeito! Salvei aqui: ${phone}. Ah, só pra eu personalizar "
                    "melhor as informações, qual seu nome?"
                ),
                conditions=TemplateConditions(
                    required_fields=("telefone",), forbidden_fields=("nome",)
                ),
            ),
        ),
    ),
    Intent(
        id=GIVE_EMAIL,
        name="Cliente Fornece Email",
        keywords=("email", "e-mail", "gmail", "hotmail", "outlook"),
        patterns=_patterns(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)*\.\w{2,}"),
        priority=8,
        responses=(
            ResponseTemplate(
                template="Anotei seu email: ${email}. Para facilitar o contato, tem WhatsApp?",
                conditions=TemplateConditions(
                    required_fields=("email",), forbidden_fields=("telefone",)
                ),
            ),
            ResponseTemplate(
                template="Anotei seu email: ${email}. Vou te enviar tudo por lá também!",
            ),
        ),
    ),
    Intent(
        id=BUDGET_REQUEST,
        name="Solicita Orçamento",
        keywords=(
            "orçamento", "orcamento", "cotação", "cotacao", "proposta",
            "quanto sairia", "quanto ficaria",
        ),
        patterns=_patterns(
            r"(?:fazer|mandar|enviar|me (?:passa|manda|envia)) (?:um )?or[cç]amento",
            r"quero (?:um )?or[cç]amento",
        ),
        priority=8,
        responses=(
            ResponseTemplate(
                template=(
                    "Perfeito, ${userName}! Vou preparar um orçamento completo e te "
                    "mando no ${phone}. Em breve você recebe!"
                ),
                conditions=TemplateConditions(required_fields=("nome", "telefone")),
            ),
            ResponseTemplate(
                template=(
                    "Claro! Para fazer um orçamento personalizado, preciso do seu "
                    "WhatsApp. Pode me passar?"
                ),
                conditions=TemplateConditions(forbidden_fields=("telefone",)),
            ),
            ResponseTemplate(
                template=(
                    "Claro! Vou preparar seu orçamento e te mando no WhatsApp ${phone}. "
                    "Como posso te chamar?"
                ),
            ),
        ),
    ),
    Intent(
        id=WANT_ATTENDANT,
        name="Quer Falar com Atendente",
        keywords=("atendente", "humano", "falar com alguem", "falar com alguém", "vendedor", "consultor"),
        patterns=_patterns(
            r"falar com (?:um |uma |o |a )?(?:atendente|algu[ée]m|pessoa|vendedor|consultor)"
        ),
        priority=9,
        responses=(
            ResponseTemplate(
                template="Claro, ${userName}! Vou pedir pro nosso time te chamar no ${phone}. 😊",
                conditions=TemplateConditions(required_fields=("nome", "telefone")),
            ),
            ResponseTemplate(
                template="Claro! 😊 Vou te conectar com nosso time. Pra agilizar, me passa seu nome e WhatsApp?",
            ),
        ),
    ),

    # --- FAQ ---
    Intent(
        id=FAQ_QUESTION,
        name="Pergunta do FAQ",
        priority=5,
        responses=(
            ResponseTemplate(
                template="${faqAnswer}",
                follow_up="Isso responde sua dúvida? 😊",
            ),
        ),
    ),

    # --- Closing ---
    Intent(
        id=THANKS,
        name="Agradecimento",
        keywords=("obrigado", "obrigada", "valeu", "vlw", "obg", "agradeço", "agradeco"),
        patterns=_patterns(r"^(?:muito )?obrigad[oa]"),
        priority=8,
        responses=(
            ResponseTemplate(
                template="Por nada! 😊 Estou aqui pra ajudar. Precisa de mais alguma coisa?",
            ),
        ),
    ),
    Intent(
        id=GOODBYE,
        name="Despedida",
        keywords=(
            "tchau", "falou", "flw", "abraço", "abraco", "adeus",
            "ate mais", "até mais", "ate logo", "até logo", "ate breve", "até breve",
        ),
        patterns=_patterns(
            r"^(?:tchau|falou|adeus)",
            r"\bat[ée] (?:mais|logo|breve)\b",
            r"\btchau\b",
        ),
        priority=9,
        responses=(
            ResponseTemplate(
                template="Valeu, ${userName}! Já salvei seus dados. Logo te mando as informações. Até! 😊",
                conditions=TemplateConditions(required_fields=("nome",)),
            ),
            ResponseTemplate(
                template="Até mais! 👋 Qualquer coisa é só chamar.",
            ),
        ),
    ),
    Intent(
        id=CONFIRMATION_YES,
        name="Confirmação Positiva",
        keywords=("sim", "claro", "com certeza", "quero", "quero sim", "pode ser", "beleza", "ok", "okay"),
        patterns=_patterns(r"^(?:sim|claro|com certeza|quero|pode ser|beleza|ok|okay)\b"),
        priority=7,
        responses=(
            ResponseTemplate(
                template="Ótimo! Me passa seu WhatsApp para eu te enviar mais detalhes?",
                conditions=TemplateConditions(forbidden_fields=("telefone",)),
            ),
            ResponseTemplate(
                template="Combinado! Vou te mandar tudo no ${phone}. Algo mais em que eu possa ajudar?",
            ),
        ),
    ),
    Intent(
        id=CONFIRMATION_NO,
        name="Negação",
        keywords=("não", "nao", "não quero", "nao quero", "agora não", "agora nao", "depois"),
        patterns=_patterns(r"^(?:n[aã]o|nope|depois|agora n[aã]o)\b"),
        priority=7,
        responses=(
            ResponseTemplate(
                template="Sem problemas! Tem alguma outra dúvida que eu possa ajudar?",
            ),
        ),
    ),

    # --- Fallback ---
    Intent(
        id=FALLBACK,
        name="Não Entendido",
        priority=0,
        responses=(
            ResponseTemplate(
                template=(
                    "Hmm, não entendi muito bem. Pode reformular? Ou me diga: você quer "
                    "saber sobre produtos, preços ou fazer um orçamento?"
                ),
                conditions=TemplateConditions(max_messages=3),
            ),
            ResponseTemplate(
                template=(
                    "Não consegui entender. Para facilitar: está procurando informações "
                    "sobre produtos, preços ou entrega?"
                ),
                conditions=TemplateConditions(min_messages=4),
            ),
        ),
    ),
)

_INTENTS_BY_ID: dict[str, Intent] = {intent.id: intent for intent in INTENTS}


def get_intent(intent_id: str) -> Intent:
    """Look up an intent from the static table.

    Raises:
        KeyError: If no intent with that id exists.
    """
    if intent_id not in _INTENTS_BY_ID:
        raise KeyError(f"Intent '{intent_id}' not configured. Available: {list(_INTENTS_BY_ID)}")
    return _INTENTS_BY_ID[intent_id]
