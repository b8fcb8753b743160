"""Tests for Settings."""

import pytest
from pydantic import ValidationError

from supportdesk.config import Settings
from supportdesk.services.escalation_policy import ESCALATION_KEYWORDS


class TestSettings:
    """SUT: Settings"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GATEWAY_API_KEY", raising=False)
        settings = Settings(_env_file=None)
        assert settings.port == 7788
        assert settings.history_limit == 10
        assert settings.gateway_timeout == 30.0
        assert settings.gateway_api_key is None

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("GATEWAY_API_KEY", "secret")
        monkeypatch.setenv("HISTORY_LIMIT", "4")
        settings = Settings(_env_file=None)
        assert settings.gateway_api_key == "secret"
        assert settings.history_limit == 4

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, gateway_timeout=0)

    def test_default_keywords_match_policy(self):
        assert Settings(_env_file=None).get_escalation_keywords() == list(ESCALATION_KEYWORDS)

    def test_keywords_parsed(self):
        settings = Settings(_env_file=None, escalation_keywords=" Refund , ,Chargeback")
        assert settings.get_escalation_keywords() == ["refund", "chargeback"]
