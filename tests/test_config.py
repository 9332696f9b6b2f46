"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from lead_chatbot.config import (
    AppConfig,
    EngagementConfig,
    MatchingConfig,
    ResponseConfig,
    _validate_config,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_defaults_match_documented_values(self):
        config = AppConfig()
        assert config.matching.product_threshold == pytest.approx(0.2)
        assert config.matching.faq_threshold == pytest.approx(0.4)
        assert config.matching.max_product_results == 3
        assert config.engagement.medium_messages == 5
        assert config.engagement.high_questions == 5
        assert config.response.validation_probability == pytest.approx(0.4)

    def test_product_threshold_above_one(self):
        config = replace(AppConfig(), matching=replace(MatchingConfig(), product_threshold=1.5))
        with pytest.raises(ValueError, match="PRODUCT_THRESHOLD"):
            _validate_config(config)

    def test_faq_threshold_negative(self):
        config = replace(AppConfig(), matching=replace(MatchingConfig(), faq_threshold=-0.1))
        with pytest.raises(ValueError, match="FAQ_THRESHOLD"):
            _validate_config(config)

    def test_validation_probability_out_of_range(self):
        config = replace(
            AppConfig(), response=replace(ResponseConfig(), validation_probability=2.0)
        )
        with pytest.raises(ValueError, match="VALIDATION_PHRASE_PROBABILITY"):
            _validate_config(config)

    def test_zero_max_results(self):
        config = replace(AppConfig(), matching=replace(MatchingConfig(), max_product_results=0))
        with pytest.raises(ValueError, match="MAX_PRODUCT_RESULTS"):
            _validate_config(config)

    def test_medium_messages_above_high(self):
        engagement = replace(EngagementConfig(), medium_messages=20, high_messages=10)
        config = replace(AppConfig(), engagement=engagement)
        with pytest.raises(ValueError, match="ENGAGEMENT_MEDIUM_MESSAGES"):
            _validate_config(config)

    def test_medium_questions_above_high(self):
        engagement = replace(EngagementConfig(), medium_questions=6, high_questions=5)
        config = replace(AppConfig(), engagement=engagement)
        with pytest.raises(ValueError, match="ENGAGEMENT_MEDIUM_QUESTIONS"):
            _validate_config(config)

    def test_config_is_frozen(self):
        config = AppConfig()
        with pytest.raises(AttributeError):
            config.log_level = "DEBUG"  # type: ignore[misc]


class TestEnvParsing:
    def test_safe_int_parsing(self):
        from lead_chatbot.config import _safe_int

        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_float_parsing(self):
        from lead_chatbot.config import _safe_float

        assert _safe_float("NONEXISTENT_VAR_12345", "0.25") == pytest.approx(0.25)

    def test_safe_int_rejects_garbage(self, monkeypatch):
        from lead_chatbot.config import _safe_int

        monkeypatch.setenv("LEAD_TEST_INT", "lots")
        with pytest.raises(ValueError, match="LEAD_TEST_INT"):
            _safe_int("LEAD_TEST_INT", "1")

    def test_safe_float_rejects_garbage(self, monkeypatch):
        from lead_chatbot.config import _safe_float

        monkeypatch.setenv("LEAD_TEST_FLOAT", "high")
        with pytest.raises(ValueError, match="LEAD_TEST_FLOAT"):
            _safe_float("LEAD_TEST_FLOAT", "0.5")

    def test_optional_int_unset_is_none(self, monkeypatch):
        from lead_chatbot.config import _optional_int

        monkeypatch.delenv("LEAD_TEST_SEED", raising=False)
        assert _optional_int("LEAD_TEST_SEED") is None

    def test_optional_int_blank_is_none(self, monkeypatch):
        from lead_chatbot.config import _optional_int

        monkeypatch.setenv("LEAD_TEST_SEED", "  ")
        assert _optional_int("LEAD_TEST_SEED") is None

    def test_optional_int_value(self, monkeypatch):
        from lead_chatbot.config import _optional_int

        monkeypatch.setenv("LEAD_TEST_SEED", "7")
        assert _optional_int("LEAD_TEST_SEED") == 7
