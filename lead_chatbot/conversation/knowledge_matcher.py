"""
Relevance scoring of catalog products and FAQ entries against free text.

Both scorers work on normalized text (lowercase, no accents, no
punctuation) and are capped at 1.0. Scores are additive:

Products:
    name     exact 0.8 | substring either way 0.6 | 0.2 per shared word
    category 0.4 when the query is, or contains, the category
    keywords 0.15 per keyword found (substring either way)
    desc     0.1 when the description contains the query

FAQs:
    question substring either way 0.7 | 0.15 per shared word
    keywords 0.2 per keyword found (substring either way)
    answer   0.1 when the answer contains the query

Usage:
    matcher = KnowledgeMatcher()
    products = matcher.find_relevant_products("portão automático", kb.products)
    faq = matcher.find_relevant_faq("qual o horário?", kb.faqs)
"""

import logging
import re
from typing import Optional

from lead_chatbot.config import settings
from lead_chatbot.schemas.knowledge_schema import FAQItem, Product
from lead_chatbot.utils import normalize_text

logger = logging.getLogger(__name__)

# Product weights
NAME_EXACT_WEIGHT = 0.8
NAME_PARTIAL_WEIGHT = 0.6
NAME_WORD_WEIGHT = 0.2
CATEGORY_WEIGHT = 0.4
PRODUCT_KEYWORD_WEIGHT = 0.15
DESCRIPTION_WEIGHT = 0.1

# FAQ weights
QUESTION_PARTIAL_WEIGHT = 0.7
QUESTION_WORD_WEIGHT = 0.15
FAQ_KEYWORD_WEIGHT = 0.2
ANSWER_WEIGHT = 0.1

MAX_SCORE = 1.0


def _singular(word: str) -> str:
    """Rough Portuguese singular form: portoes -> portao, grades -> grade."""
    if word.endswith(("oes", "aes")):
        return word[:-3] + "ao"
    if word.endswith("ns"):
        return word[:-2] + "m"
    if word.endswith("s") and len(word) > 3:
        return word[:-1]
    return word


def _singular_phrase(text: str) -> str:
    return " ".join(_singular(w) for w in text.split())


def _keyword_hits(query: str, keywords: list[str]) -> int:
    """Count keywords that contain, or are contained in, the query."""
    hits = 0
    for keyword in keywords:
        normalized = normalize_text(keyword)
        if normalized and (normalized in query or query in normalized):
            hits += 1
    return hits


class KnowledgeMatcher:
    """Stateless scorer over catalog and FAQ records."""

    def calculate_product_relevance(self, query: str, product: Product) -> float:
        """Score a product against an already-normalized query."""
        if not query:
            return 0.0
        score = 0.0
        query_words = query.split()

        name = normalize_text(product.name)
        if name == query:
            score += NAME_EXACT_WEIGHT
        elif name and (name in query or query in name):
            score += NAME_PARTIAL_WEIGHT
        else:
            name_words = name.split()
            score += sum(1 for w in query_words if w in name_words) * NAME_WORD_WEIGHT

        if product.category:
            category = normalize_text(product.category)
            if category and (category == query or category in query):
                score += CATEGORY_WEIGHT

        score += _keyword_hits(query, product.keywords) * PRODUCT_KEYWORD_WEIGHT

        if product.description and query in normalize_text(product.description):
            score += DESCRIPTION_WEIGHT

        return min(score, MAX_SCORE)

    def calculate_faq_relevance(self, query: str, faq: FAQItem) -> float:
        """Score an FAQ entry against an already-normalized query."""
        if not query:
            return 0.0
        score = 0.0

        question = normalize_text(faq.question)
        if question and (question in query or query in question):
            score += QUESTION_PARTIAL_WEIGHT
        else:
            question_words = question.split()
            score += sum(1 for w in query.split() if w in question_words) * QUESTION_WORD_WEIGHT

        score += _keyword_hits(query, faq.keywords) * FAQ_KEYWORD_WEIGHT

        if query in normalize_text(faq.answer):
            score += ANSWER_WEIGHT

        return min(score, MAX_SCORE)

    def score_products(self, query: str, products: list[Product]) -> list[tuple[Product, float]]:
        """Active products above the product threshold, best first."""
        normalized = normalize_text(query)
        threshold = settings.matching.product_threshold
        scored = [
            (product, self.calculate_product_relevance(normalized, product))
            for product in products
            if product.is_active
        ]
        scored = [(p, s) for p, s in scored if s > threshold]
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored

    def find_relevant_products(
        self,
        query: str,
        products: list[Product],
        max_results: Optional[int] = None,
    ) -> list[Product]:
        """Return up to ``max_results`` active products relevant to the query."""
        limit = max_results if max_results is not None else settings.matching.max_product_results
        return [product for product, _ in self.score_products(query, products)[:limit]]

    def find_relevant_faq(self, query: str, faqs: list[FAQItem]) -> Optional[FAQItem]:
        """Return the single best FAQ above the FAQ threshold, or None."""
        normalized = normalize_text(query)
        threshold = settings.matching.faq_threshold
        best: Optional[FAQItem] = None
        best_score = threshold
        for faq in faqs:
            score = self.calculate_faq_relevance(normalized, faq)
            if score > best_score:
                best, best_score = faq, score
        if best is not None:
            logger.debug("FAQ match '%s' (score=%.2f)", best.id, best_score)
        return best

    def find_product_by_name(self, name: str, products: list[Product]) -> Optional[Product]:
        """Exact normalized name match first, then the first partial match."""
        normalized = normalize_text(name)
        if not normalized:
            return None
        active = [p for p in products if p.is_active]
        for product in active:
            if normalize_text(product.name) == normalized:
                return product
        for product in active:
            if normalized in normalize_text(product.name):
                return product
        return None

    def get_product_categories(self, products: list[Product]) -> list[str]:
        """Distinct categories of active products, in catalog order."""
        categories: list[str] = []
        for product in products:
            if product.is_active and product.category and product.category not in categories:
                categories.append(product.category)
        return categories

    def detect_multiple_products(self, query: str, products: list[Product]) -> list[Product]:
        """Every active product whose full name appears in the query."""
        normalized = normalize_text(query)
        if not normalized:
            return []
        return [
            product
            for product in products
            if product.is_active
            and normalize_text(product.name)
            and normalize_text(product.name) in normalized
        ]

    def detect_keyword_mentions(self, query: str, products: list[Product]) -> list[Product]:
        """Active products with a keyword present as a whole word.

        Plural and singular forms are treated alike, so "portões" finds a
        product tagged "portão".
        """
        text = _singular_phrase(normalize_text(query))
        if not text:
            return []
        mentioned = []
        for product in products:
            if not product.is_active:
                continue
            for keyword in product.keywords:
                phrase = _singular_phrase(normalize_text(keyword))
                if phrase and re.search(rf"(?<!\w){re.escape(phrase)}(?!\w)", text):
                    mentioned.append(product)
                    break
        return mentioned

    def is_catalog_term(self, phrase: str, products: list[Product]) -> bool:
        """True when ``phrase`` names, or is part of, an active product's name,
        category or keyword. Plurals count: "Portões" matches "Portão"."""
        text = _singular_phrase(normalize_text(phrase))
        if not text:
            return False
        pattern = re.compile(rf"(?<!\w){re.escape(text)}(?!\w)")
        for product in products:
            if not product.is_active:
                continue
            terms = [product.name, product.category or "", *product.keywords]
            if any(pattern.search(_singular_phrase(normalize_text(term))) for term in terms):
                return True
        return False

    def find_best_product(
        self,
        query: str,
        products: list[Product],
        min_score: Optional[float] = None,
    ) -> Optional[Product]:
        """Return the one product the query clearly points at, if any.

        A product qualifies when it is the unique top scorer at or above
        ``min_score``. Failing that, a product is returned when it is the
        only one whose keywords the query mentions.
        """
        floor = min_score if min_score is not None else settings.matching.specific_product_min_score
        scored = self.score_products(query, products)
        if scored:
            top_product, top_score = scored[0]
            runner_up = scored[1][1] if len(scored) > 1 else 0.0
            if top_score >= floor and top_score > runner_up:
                return top_product
            if top_score >= floor:
                return None

        mentions = self.detect_keyword_mentions(query, products)
        if len(mentions) == 1:
            return mentions[0]
        return None


# Singleton instance
knowledge_matcher = KnowledgeMatcher()
