"""Shared text utilities used by every matching component."""

import re
import unicodedata

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lowercase, strip diacritics and punctuation, collapse whitespace.

    Idempotent: ``normalize_text(normalize_text(s)) == normalize_text(s)``.

    Examples:
        >>> normalize_text("  Portão   Automático! ")
        'portao automatico'
        >>> normalize_text("Qual o horário?")
        'qual o horario'
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    stripped = _NON_WORD.sub(" ", stripped)
    return _WHITESPACE.sub(" ", stripped).strip()


def format_brazilian_phone(value: str) -> str:
    """Format a phone number as ``(DD) DDDDD-DDDD`` or ``(DD) DDDD-DDDD``.

    Numbers that don't have 10 or 11 digits are returned unchanged.

    Examples:
        >>> format_brazilian_phone("11987654321")
        '(11) 98765-4321'
        >>> format_brazilian_phone("1134567890")
        '(11) 3456-7890'
    """
    digits = re.sub(r"\D", "", value)
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return value


def join_with_and(items: list[str], conjunction: str = "e") -> str:
    """Join items as ``a, b e c``."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return f"{', '.join(items[:-1])} {conjunction} {items[-1]}"
