"""
Tests for configuration loading and validation.
"""

import pytest
from pydantic import ValidationError

from utilities.config import BookwormConfig, DEV_FALLBACK_SECRET


class TestBookwormConfig:
    """Test cases for BookwormConfig."""

    def test_defaults(self):
        cfg = BookwormConfig(jwt_secret="s")
        assert cfg.token_expire_days == 7
        assert cfg.bcrypt_rounds == 10
        assert cfg.allowed_email_domain == "gmail.com"
        assert cfg.jwt_algorithm == "HS256"

    def test_fallback_secret(self):
        """Without a secret the development fallback is used and flagged."""
        cfg = BookwormConfig(jwt_secret=None)
        assert cfg.uses_fallback_secret()
        assert cfg.get_jwt_secret() == DEV_FALLBACK_SECRET

    def test_configured_secret(self):
        cfg = BookwormConfig(jwt_secret="real-secret")
        assert not cfg.uses_fallback_secret()
        assert cfg.get_jwt_secret() == "real-secret"

    def test_secret_from_environment(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "from-env")
        assert BookwormConfig().get_jwt_secret() == "from-env"

    def test_domain_normalized(self):
        assert BookwormConfig(allowed_email_domain=" @Example.ORG ").allowed_email_domain == "example.org"

    @pytest.mark.parametrize("field,value", [
        ("bcrypt_rounds", 3),
        ("bcrypt_rounds", 32),
        ("token_expire_days", 0),
        ("log_level", "LOUD"),
        ("log_format", "xml"),
        ("allowed_email_domain", "@"),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            BookwormConfig(**{field: value})

    def test_log_level_normalized(self):
        assert BookwormConfig(log_level="debug").log_level == "DEBUG"

    def test_production_mode(self):
        assert BookwormConfig(debug=False, test_mode=False).is_production()
        assert not BookwormConfig(debug=True).is_production()
