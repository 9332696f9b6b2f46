"""Tests for lead data extraction and validation."""

import pytest

from lead_chatbot.conversation.lead_capture import capitalize_name
from lead_chatbot.schemas.lead_schema import LeadData


class TestExtractFullMessage:
    def test_name_phone_and_email_together(self, extractor):
        captured = extractor.extract("Meu nome é João Silva, (11) 98765-4321, joao@email.com")
        assert captured == {
            "nome": "João Silva",
            "telefone": "(11) 98765-4321",
            "email": "joao@email.com",
        }

    def test_no_data(self, extractor):
        assert extractor.extract("Vocês vendem portões?") == {}

    def test_empty_message(self, extractor):
        assert extractor.extract("") == {}
        assert extractor.extract("   ") == {}

    def test_deterministic(self, extractor):
        message = "Sou a Ana, moro em Curitiba e tenho uns 10 mil"
        assert extractor.extract(message) == extractor.extract(message)


class TestExtractName:
    def test_meu_nome_e(self, extractor):
        assert extractor.extract_name("Meu nome é Carlos") == "Carlos"

    def test_me_chamo_lowercase_capitalized(self, extractor):
        assert extractor.extract_name("me chamo maria") == "Maria"

    def test_connector_kept_lowercase(self, extractor):
        assert extractor.extract_name("Meu nome é Ana de Souza") == "Ana de Souza"

    def test_sou_o(self, extractor):
        assert extractor.extract_name("Oi, sou o Pedro") == "Pedro"

    def test_name_here(self, extractor):
        assert extractor.extract_name("Maria aqui") == "Maria"

    def test_bare_name(self, extractor):
        assert extractor.extract_name("Fernanda Lima") == "Fernanda Lima"

    def test_bare_name_before_comma(self, extractor):
        assert extractor.extract_name("João, 11 98765-4321") == "João"

    @pytest.mark.parametrize(
        "message", ["Oi", "Sim", "Obrigado", "Bom Dia", "Tchau!", "Interessante", "Ótimo", "Top"]
    )
    def test_stopwords_are_not_names(self, extractor, message):
        assert extractor.extract_name(message) is None

    def test_lowercase_sentence_is_not_a_name(self, extractor):
        assert extractor.extract_name("quero saber o preço") is None

    def test_bare_patterns_can_be_skipped(self, extractor):
        assert extractor.extract_name("Maria aqui", include_bare=False) is None
        assert extractor.extract_name("Fernanda", include_bare=False) is None

    def test_explicit_patterns_without_bare(self, extractor):
        assert extractor.extract_name("Meu nome é Carlos", include_bare=False) == "Carlos"

    def test_capitalize_name(self):
        assert capitalize_name("JOSÉ DA SILVA") == "José da Silva"


class TestExtractPhone:
    def test_parenthesized(self, extractor):
        assert extractor.extract_phone("(11) 98765-4321") == "(11) 98765-4321"

    def test_plain_digits_mobile(self, extractor):
        assert extractor.extract_phone("meu zap 11987654321") == "(11) 98765-4321"

    def test_landline(self, extractor):
        assert extractor.extract_phone("liga no 11 3456-7890") == "(11) 3456-7890"

    def test_no_phone(self, extractor):
        assert extractor.extract_phone("quero 3 portões") is None


class TestExtractEmail:
    def test_lowercased(self, extractor):
        assert extractor.extract_email("email: Joao.Silva@Email.COM") == "joao.silva@email.com"

    def test_no_email(self, extractor):
        assert extractor.extract_email("joao arroba email") is None


class TestExtractBudget:
    def test_thousand(self, extractor):
        assert extractor.extract_budget("tenho uns 5 mil") == "uns 5 mil"

    def test_k_suffix(self, extractor):
        assert extractor.extract_budget("algo em torno de 20k") == "em torno de 20k"

    def test_tenho_currency(self, extractor):
        assert extractor.extract_budget("tenho R$ 3.000 pra gastar") == "tenho R$ 3.000"

    def test_currency_amount(self, extractor):
        assert extractor.extract_budget("o máximo é R$ 1.500,00") == "R$ 1.500,00"

    def test_bare_number_is_not_budget(self, extractor):
        assert extractor.extract_budget("até 2 semanas") is None

    def test_phone_is_not_budget(self, extractor):
        assert extractor.extract_budget("(11) 98765-4321") is None


class TestExtractCity:
    def test_known_city(self, extractor):
        assert extractor.extract_city("Sou de São Paulo") == "São Paulo, SP"

    def test_known_abbreviation(self, extractor):
        assert extractor.extract_city("moro em BH") == "Belo Horizonte, MG"

    def test_city_before_state_abbreviation(self, extractor):
        assert extractor.extract_city("Moro em Campinas, SP") == "Campinas, SP"
        assert extractor.extract_city("Sou de Campinas, SP") == "Campinas, SP"

    def test_city_with_dash_before_state(self, extractor):
        assert extractor.extract_city("Moro em Niterói - RJ") == "Niterói, RJ"

    def test_bare_state_abbreviation(self, extractor):
        assert extractor.extract_city("Sou de SP") == "São Paulo, SP"
        assert extractor.extract_city("moro no rj") == "Rio de Janeiro, RJ"

    def test_generic_city_with_state(self, extractor):
        assert extractor.extract_city("Sou de Londrina, PR") == "Londrina, PR"

    def test_abbreviation_inside_word_ignored(self, extractor):
        assert extractor.extract_city("quero informações sobre portões") is None

    def test_invalid_state_code(self, extractor):
        assert extractor.extract_city("Oi OK") is None


class TestExtractTimeline:
    def test_month(self, extractor):
        assert extractor.extract_timeline("preciso para dezembro") == "para dezembro"

    def test_relative_period(self, extractor):
        assert extractor.extract_timeline("daqui a 2 semanas") == "daqui a 2 semanas"

    def test_urgency(self, extractor):
        assert extractor.extract_timeline("é urgente!") == "urgente"

    def test_end_of_year(self, extractor):
        assert extractor.extract_timeline("lá pro fim do ano") == "fim do ano"

    def test_no_timeline(self, extractor):
        assert extractor.extract_timeline("quanto custa?") is None


class TestValidate:
    def test_valid_data(self, extractor):
        assert extractor.validate({"nome": "Ana", "telefone": "(11) 98765-4321", "email": "a@b.com"})

    def test_short_name(self, extractor):
        assert extractor.validate({"nome": "A"}) is False

    def test_phone_wrong_digit_count(self, extractor):
        assert extractor.validate({"telefone": "98765-4321"}) is False

    def test_bad_email(self, extractor):
        assert extractor.validate({"email": "joao@email"}) is False

    def test_accepts_lead_data(self, extractor):
        assert extractor.validate(LeadData(nome="Ana", email="ana@email.com"))

    def test_empty_is_valid(self, extractor):
        assert extractor.validate({}) is True
