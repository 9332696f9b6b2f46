"""
Regex-based extraction of lead data from free-text messages.

Each field has its own extractor. An extractor either returns a value or
contributes nothing; ``extract`` never raises and is deterministic.

Usage:
    captured = lead_capture.extract("Sou o João, meu zap é 11 98765-4321")
    # {"nome": "João", "telefone": "(11) 98765-4321"}
"""

import logging
import re
from typing import Any, Optional, Union

from lead_chatbot.schemas.lead_schema import LeadData
from lead_chatbot.utils import format_brazilian_phone, normalize_text

logger = logging.getLogger(__name__)

# Validation thresholds
MIN_NAME_LENGTH = 2
MIN_PHONE_DIGITS = 10
MAX_PHONE_DIGITS = 11

_CAP_WORD = r"[A-ZÀ-ÖØ-Þ][a-zß-öø-ÿ]+"
_ANY_WORD = r"[A-Za-zÀ-ÖØ-öø-ÿ][a-zß-öø-ÿ]+"
_CONNECTOR = r"(?:d[aeo]s?|e)"
_NAME_TAIL = rf"(?:\s+(?:{_CONNECTOR}\s+)?{_CAP_WORD})"

_EXPLICIT_NAME_PATTERNS = [
    # "meu nome é joão silva", "me chamo Ana"
    re.compile(rf"(?i:meu nome [eé]|me chamo|pode me chamar de)\s+({_ANY_WORD}{_NAME_TAIL}*)"),
    # "sou o Carlos", only when the name is capitalized
    re.compile(rf"(?i:\bsou [oa])\s+({_CAP_WORD}{_NAME_TAIL}*)"),
]

# A capitalized word standing alone; weaker evidence than the patterns above.
_BARE_NAME_PATTERNS = [
    # "Maria aqui"
    re.compile(rf"^({_CAP_WORD}{_NAME_TAIL}{{0,3}})\s+(?i:aqui)\b"),
    # bare "João Silva" or "João, (11) 9..."
    re.compile(rf"^({_CAP_WORD}{_NAME_TAIL}{{0,3}})\s*(?:,|[.!]?$)"),
]

# Greetings and fillers that look like names when capitalized.
_NAME_STOPWORDS = frozenset({
    "oi", "ola", "bom", "boa", "dia", "tarde", "noite", "sim", "nao", "tchau",
    "obrigado", "obrigada", "valeu", "ok", "okay", "beleza", "claro", "quero",
    "certo", "opa", "hey", "show", "legal", "perfeito", "depois", "tudo", "aqui",
    "alo", "bem", "pode", "combinado", "otimo", "otima", "top", "blz", "joia",
    "interessante", "entendi", "entendido", "excelente", "maravilha", "massa",
    "bacana", "demais", "firmeza", "nada", "isso", "exato", "exatamente",
    "verdade", "talvez", "pronto", "feito", "certeza", "entao", "hum", "ah",
    # sentence openers
    "sou", "moro", "estou", "tenho", "preciso", "gostaria", "qual", "quais",
    "quanto", "quando", "como", "onde", "voces", "vcs", "meu", "minha",
})

_LOWERCASE_CONNECTORS = {"de", "da", "do", "dos", "das", "e"}

_PHONE_PATTERN = re.compile(r"(?<!\d)\(?\d{2}\)?\s*9?\s?\d{4,5}[-\s]?\d{4}(?!\d)")
_EMAIL_PATTERN = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)*\.\w{2,}")

_AMOUNT = r"\d+(?:[.,]\d+)*"
_BUDGET_PATTERNS = [
    # "até 50 mil", "uns R$ 3.000", "cerca de 20k"
    re.compile(
        rf"(?:at[ée]|uns?|cerca de|aproximadamente|em torno de)\s+"
        rf"(?:R\$\s*{_AMOUNT}(?:\s*(?:mil|k|reais)\b)?|{_AMOUNT}\s*(?:mil|k|reais)\b)",
        re.IGNORECASE,
    ),
    # "tenho R$ 5.000", "disponho de 10 mil"
    re.compile(
        rf"(?:tenho|possuo|disponho de)\s+"
        rf"(?:R\$\s*{_AMOUNT}(?:\s*(?:mil|reais)\b)?|{_AMOUNT}\s*(?:mil|reais)\b)",
        re.IGNORECASE,
    ),
    re.compile(rf"(?:R\$\s*)?{_AMOUNT}\s*(?:mil|k)\b(?:\s*reais)?", re.IGNORECASE),
    re.compile(rf"R\$\s*{_AMOUNT}", re.IGNORECASE),
]

# Matched against normalized text.
_KNOWN_CITIES = [
    (re.compile(r"\bsao paulo\b"), "São Paulo, SP"),
    (re.compile(r"\brio de janeiro\b"), "Rio de Janeiro, RJ"),
    (re.compile(r"\b(?:belo horizonte|bh)\b"), "Belo Horizonte, MG"),
    (re.compile(r"\bbrasilia\b"), "Brasília, DF"),
    (re.compile(r"\b(?:curitiba|cwb)\b"), "Curitiba, PR"),
    (re.compile(r"\b(?:porto alegre|poa)\b"), "Porto Alegre, RS"),
    (re.compile(r"\b(?:salvador|ssa)\b"), "Salvador, BA"),
    (re.compile(r"\bfortaleza\b"), "Fortaleza, CE"),
    (re.compile(r"\brecife\b"), "Recife, PE"),
    (re.compile(r"\bmanaus\b"), "Manaus, AM"),
]

# Bare state abbreviations, tried only after an explicit "City, UF".
_STATE_ALIASES = [
    (re.compile(r"\bsp\b"), "São Paulo, SP"),
    (re.compile(r"\brj\b"), "Rio de Janeiro, RJ"),
    (re.compile(r"\bdf\b"), "Brasília, DF"),
]

_STATES = frozenset({
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO", "MA", "MT", "MS", "MG", "PA",
    "PB", "PR", "PE", "PI", "RJ", "RN", "RS", "RO", "RR", "SC", "SP", "SE", "TO",
})
_GENERIC_CITY_PATTERN = re.compile(
    rf"({_CAP_WORD}(?:\s+{_CAP_WORD})?)\s*[,/-]?\s*([A-Z]{{2}})\b"
)

_MONTHS = r"janeiro|fevereiro|mar[cç]o|abril|maio|junho|julho|agosto|setembro|outubro|novembro|dezembro"
_TIMELINE_PATTERNS = [
    re.compile(rf"\b(?:para|at[ée]|em|no m[eê]s de)\s+(?:{_MONTHS})", re.IGNORECASE),
    re.compile(
        r"\b(?:em|daqui(?: a)?|dentro de)\s+\d+\s+(?:m[eê]s|meses|semanas?|dias?)",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(?:urgente|urg[eê]ncia|o mais r[aá]pido poss[ií]vel|o mais r[aá]pido|r[aá]pido|imediatamente)\b",
        re.IGNORECASE,
    ),
    re.compile(r"(?:final|fim|come[cç]o|in[ií]cio) do ano", re.IGNORECASE),
]


def capitalize_name(text: str) -> str:
    """Capitalize each word except lowercase connectors (de, da, do...)."""
    words = []
    for word in text.split():
        lower = word.lower()
        words.append(lower if lower in _LOWERCASE_CONNECTORS else lower[:1].upper() + lower[1:])
    return " ".join(words)


def _validate_name(value: str) -> bool:
    return len(value.strip()) >= MIN_NAME_LENGTH


def _validate_phone(value: str) -> bool:
    digits = re.sub(r"\D", "", value)
    return MIN_PHONE_DIGITS <= len(digits) <= MAX_PHONE_DIGITS


def _validate_email(value: str) -> bool:
    return re.search(r"@[\w.-]+\.\w{2,}", value) is not None


class LeadCaptureExtractor:
    """Pulls name, phone, email, budget, city and timeline out of a message."""

    def extract(self, message: str) -> dict[str, str]:
        """Return only the fields found in ``message``."""
        if not message or not message.strip():
            return {}

        extractors = {
            "nome": self.extract_name,
            "telefone": self.extract_phone,
            "email": self.extract_email,
            "orcamento": self.extract_budget,
            "cidade": self.extract_city,
            "prazo": self.extract_timeline,
        }
        captured: dict[str, str] = {}
        for field_name, extractor in extractors.items():
            value = extractor(message)
            if value:
                captured[field_name] = value

        if captured:
            logger.debug("Captured fields: %s", sorted(captured))
        return captured

    def extract_name(self, message: str, include_bare: bool = True) -> Optional[str]:
        """Return the capitalized name, or None.

        With ``include_bare=False`` only trigger phrases such as "meu nome é"
        count; a lone capitalized word is ignored.
        """
        text = message.strip()
        patterns = _EXPLICIT_NAME_PATTERNS + (_BARE_NAME_PATTERNS if include_bare else [])
        for pattern in patterns:
            match = pattern.search(text)
            if not match:
                continue
            candidate = match.group(1).strip()
            words = normalize_text(candidate).split()
            if not words or any(w in _NAME_STOPWORDS for w in words):
                continue
            return capitalize_name(candidate)
        return None

    def extract_phone(self, message: str) -> Optional[str]:
        match = _PHONE_PATTERN.search(message)
        if not match:
            return None
        return format_brazilian_phone(match.group(0).strip())

    def extract_email(self, message: str) -> Optional[str]:
        match = _EMAIL_PATTERN.search(message)
        return match.group(0).lower() if match else None

    def extract_budget(self, message: str) -> Optional[str]:
        for pattern in _BUDGET_PATTERNS:
            match = pattern.search(message)
            if match:
                return match.group(0).strip()
        return None

    def extract_city(self, message: str) -> Optional[str]:
        normalized = normalize_text(message)
        for pattern, canonical in _KNOWN_CITIES:
            if pattern.search(normalized):
                return canonical

        for match in _GENERIC_CITY_PATTERN.finditer(message):
            city, state = match.group(1), match.group(2)
            if state in _STATES and not set(normalize_text(city).split()) & _NAME_STOPWORDS:
                return f"{city}, {state}"

        for pattern, canonical in _STATE_ALIASES:
            if pattern.search(normalized):
                return canonical
        return None

    def extract_timeline(self, message: str) -> Optional[str]:
        for pattern in _TIMELINE_PATTERNS:
            match = pattern.search(message)
            if match:
                return match.group(0).strip()
        return None

    def validate(self, data: Union[LeadData, dict[str, Any]]) -> bool:
        """Advisory sanity check over extracted or accumulated data."""
        if isinstance(data, LeadData):
            data = data.model_dump()
        checks = (
            ("nome", _validate_name),
            ("telefone", _validate_phone),
            ("email", _validate_email),
        )
        for field_name, validator in checks:
            value = data.get(field_name)
            if value and not validator(value):
                logger.debug("Field '%s' failed validation: %r", field_name, value)
                return False
        return True


# Singleton instance
lead_capture = LeadCaptureExtractor()
