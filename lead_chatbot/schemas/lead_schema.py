"""Lead data accumulated over a conversation."""

from typing import Any, Optional

from pydantic import BaseModel, Field

# Fields that count as "we already know who this is" for template conditions.
CONTACT_FIELDS = ("nome", "telefone", "email")


class LeadData(BaseModel):
    """
    What is known about the person chatting.

    Owned by the caller across turns. The engine receives the current
    value and returns an updated copy; it never persists it.
    """
    nome: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    interesse: list[str] = Field(default_factory=list)
    orcamento: Optional[str] = None
    cidade: Optional[str] = None
    prazo: Optional[str] = None
    source: Optional[str] = None

    def merge(self, captured: dict[str, Any]) -> "LeadData":
        """Return a copy with captured fields overwriting, others preserved."""
        update = {k: v for k, v in captured.items() if v is not None}
        return self.model_copy(update=update, deep=True)

    def add_interest(self, product_name: str) -> bool:
        """Append a product name unless already present. Returns True if added."""
        if product_name in self.interesse:
            return False
        self.interesse.append(product_name)
        return True

    def has_field(self, name: str) -> bool:
        value = getattr(self, name, None)
        return bool(value)
