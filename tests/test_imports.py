"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""

import pytest


class TestSchemaImports:
    def test_import_knowledge_schema(self):
        from lead_chatbot.schemas.knowledge_schema import (
            AIConfig, CompanyData, FAQItem, KnowledgeBaseContext, Product,
        )
        kb = KnowledgeBaseContext()
        assert kb.products == []
        assert kb.ai_config.tone_of_voice == "friendly"

    def test_import_lead_schema(self):
        from lead_chatbot.schemas.lead_schema import CONTACT_FIELDS, LeadData
        lead = LeadData()
        assert lead.interesse == []
        assert "telefone" in CONTACT_FIELDS


class TestConversationImports:
    def test_package_reexports(self):
        import lead_chatbot.conversation as conversation
        for name in conversation.__all__:
            assert getattr(conversation, name) is not None

    def test_singletons(self):
        from lead_chatbot.conversation.intent_classifier import intent_classifier
        from lead_chatbot.conversation.knowledge_matcher import knowledge_matcher
        from lead_chatbot.conversation.lead_capture import lead_capture
        assert intent_classifier.get_fallback_intent().id == "fallback"
        assert knowledge_matcher.find_relevant_products("x", []) == []
        assert lead_capture.extract("") == {}


class TestConfigImport:
    def test_import_config(self):
        from lead_chatbot.config import settings
        assert settings.business.name
        assert 0.0 <= settings.matching.product_threshold <= 1.0
        assert settings.engagement.high_messages >= settings.engagement.medium_messages


class TestConsoleDemo:
    def test_console_session(self):
        from console_demo import ConsoleSession
        from lead_chatbot.knowledge.catalog import build_demo_knowledge_base
        session = ConsoleSession(build_demo_knowledge_base(), seed=1)
        assert session.company_name == "FerrAço"
        assert session.lead.source == "console"

    @pytest.mark.parametrize("scenario", ["lead", "faq", "budget", "confused"])
    def test_scenarios_run(self, scenario, capsys):
        from console_demo import ConsoleSession
        from lead_chatbot.knowledge.catalog import build_demo_knowledge_base
        session = ConsoleSession(build_demo_knowledge_base(), seed=1)
        session.run_scenario(scenario)
        out = capsys.readouterr().out
        assert "Conversation complete." in out
        assert session.manager.get_state().message_count == len(ConsoleSession.SCENARIOS[scenario])

    def test_lead_scenario_captures_contact(self):
        from console_demo import ConsoleSession
        from lead_chatbot.knowledge.catalog import build_demo_knowledge_base
        session = ConsoleSession(build_demo_knowledge_base(), seed=1)
        session.run_scenario("lead")
        assert session.lead.nome == "João Silva"
        assert session.lead.telefone == "(11) 98765-4321"
        assert session.lead.email == "joao@email.com"
