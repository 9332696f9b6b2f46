"""Knowledge base data models: company data, catalog, FAQ, and AI settings."""

from typing import Optional

from pydantic import BaseModel, Field


class Product(BaseModel):
    """Catalog entry the matcher scores against user queries."""
    id: str
    name: str
    description: str = ""
    category: Optional[str] = None
    price: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    is_active: bool = True


class FAQItem(BaseModel):
    """Question/answer pair with matching keywords."""
    id: str
    question: str
    answer: str
    category: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)


class CompanyData(BaseModel):
    """Public company profile used in greetings and company-info replies."""
    name: str
    industry: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    working_hours: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None


class AIConfig(BaseModel):
    """Assistant persona settings."""
    tone_of_voice: str = "friendly"
    greeting_message: Optional[str] = None
    is_active: bool = True


class KnowledgeBaseContext(BaseModel):
    """
    Read-only snapshot of everything the engine reasons over.

    Supplied by the storage layer and swappable between turns without
    resetting conversation state.
    """
    company_data: Optional[CompanyData] = None
    products: list[Product] = Field(default_factory=list)
    faqs: list[FAQItem] = Field(default_factory=list)
    ai_config: AIConfig = Field(default_factory=AIConfig)

    @property
    def active_products(self) -> list[Product]:
        return [p for p in self.products if p.is_active]
