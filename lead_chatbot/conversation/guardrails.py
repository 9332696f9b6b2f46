"""
Output guardrails applied to generated replies before they reach a user.

Two independent checks, each covering one failure mode:
1. PlaceholderGuardrail   flags template syntax left in the text
2. EmptyResponseGuardrail flags replies with no visible content

GuardrailPipeline runs both and swaps in a generic apology when any
violation has "block" severity.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

FALLBACK_APOLOGY = "Desculpa, não consegui processar sua mensagem. Pode tentar de novo?"

_UNRESOLVED_VARIABLE = re.compile(r"\$\{\w*\}?")
_CONTACT_PLACEHOLDER = re.compile(r"\[(?:telefone|email)\]")


@dataclass
class GuardrailResult:
    """Outcome of a single guardrail check."""
    passed: bool
    violation_type: Optional[str] = None
    message: Optional[str] = None
    severity: str = "warning"  # "warning" | "block"


def has_unresolved_marker(text: str) -> bool:
    """True when the text still shows template syntax or a contact stand-in."""
    return "${" in text or _CONTACT_PLACEHOLDER.search(text) is not None


class PlaceholderGuardrail:
    """Detects template variables that were never bound."""

    def check_response(self, response_text: str) -> GuardrailResult:
        match = _UNRESOLVED_VARIABLE.search(response_text)
        if match:
            logger.warning("Unresolved template variable: '%s'", match.group(0))
            return GuardrailResult(
                passed=False,
                violation_type="unresolved_variable",
                message=f"Response contains unresolved variable '{match.group(0)}'.",
                severity="block",
            )

        match = _CONTACT_PLACEHOLDER.search(response_text)
        if match:
            return GuardrailResult(
                passed=False,
                violation_type="contact_placeholder",
                message=f"Response shows placeholder '{match.group(0)}' instead of lead data.",
                severity="warning",
            )
        return GuardrailResult(passed=True)


class EmptyResponseGuardrail:
    """Blocks replies that are empty or whitespace only."""

    def check_response(self, response_text: str) -> GuardrailResult:
        if not response_text or not response_text.strip():
            return GuardrailResult(
                passed=False,
                violation_type="empty_response",
                message="Response is empty.",
                severity="block",
            )
        return GuardrailResult(passed=True)


class GuardrailPipeline:
    """Composes all output guardrails."""

    def __init__(self) -> None:
        self.placeholder = PlaceholderGuardrail()
        self.empty = EmptyResponseGuardrail()

    def check_response(self, text: str) -> list[GuardrailResult]:
        """Return only the failed checks."""
        results = [
            self.empty.check_response(text),
            self.placeholder.check_response(text),
        ]
        return [r for r in results if not r.passed]

    def apply(self, text: str) -> tuple[str, list[GuardrailResult]]:
        """Return the text to send plus any violations found.

        Any "block" violation replaces the text with FALLBACK_APOLOGY.
        """
        violations = self.check_response(text)
        if any(v.severity == "block" for v in violations):
            logger.warning(
                "Response replaced by apology: %s",
                [v.violation_type for v in violations],
            )
            return FALLBACK_APOLOGY, violations
        return text, violations
