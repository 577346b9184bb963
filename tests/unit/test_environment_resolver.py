"""Tests for environment resolution and detection."""

import os

import pytest

from envlab.core.config import Settings
from envlab.core.environment import (
    Environment,
    EnvironmentContext,
    all_configs,
    detect_environment,
    resolve,
)
from envlab.core.errors import ErrorCode, UnknownEnvironmentError
from envlab.core.severity import Severity


class TestResolve:
    """Tests for resolve."""

    def test_every_environment_has_a_config(self):
        """Lookup is total over the enumeration."""
        for env in Environment:
            config = resolve(env)
            assert config.name == env
        assert set(all_configs()) == set(Environment)

    def test_production_table(self):
        """Test production config values."""
        config = resolve(Environment.PRODUCTION)
        assert config.display_name == "Production"
        assert config.api_url == "https://api.example.com"
        assert config.debug_mode is False
        assert config.min_severity == Severity.ERROR
        assert config.features.analytics is True
        assert config.features.error_reporting is True
        assert config.features.experimental_features is False

    def test_staging_table(self):
        """Test staging config values."""
        config = resolve(Environment.STAGING)
        assert config.api_url == "https://staging-api.example.com"
        assert config.debug_mode is True
        assert config.min_severity == Severity.INFO
        assert config.features.analytics is True
        assert config.features.error_reporting is True
        assert config.features.experimental_features is True

    def test_development_table(self):
        """Test development config values."""
        config = resolve(Environment.DEVELOPMENT)
        assert config.api_url == "http://localhost:3000/api"
        assert config.debug_mode is True
        assert config.min_severity == Severity.DEBUG
        assert config.features.analytics is False
        assert config.features.error_reporting is False
        assert config.features.experimental_features is True

    def test_resolve_accepts_string_values(self):
        """Test resolving by string value."""
        assert resolve("staging") is resolve(Environment.STAGING)
        assert resolve(" Production ") is resolve(Environment.PRODUCTION)

    def test_resolve_returns_same_instance(self):
        """Exactly one config instance per environment."""
        assert resolve(Environment.DEVELOPMENT) is resolve(Environment.DEVELOPMENT)

    def test_unknown_environment_string(self):
        """Test unknown environment name raises."""
        with pytest.raises(UnknownEnvironmentError) as exc_info:
            resolve("qa")
        assert exc_info.value.code == ErrorCode.UNKNOWN_ENVIRONMENT

    def test_configs_are_immutable(self):
        """Test configs and the table cannot be mutated."""
        config = resolve(Environment.PRODUCTION)
        with pytest.raises(AttributeError):
            config.debug_mode = True  # type: ignore[misc]
        with pytest.raises(TypeError):
            all_configs()[Environment.PRODUCTION] = config  # type: ignore[index]

    def test_to_dict(self):
        """Test config serialization."""
        data = resolve(Environment.STAGING).to_dict()
        assert data["name"] == "staging"
        assert data["min_severity"] == "info"
        assert data["features"] == {
            "analytics": True,
            "error_reporting": True,
            "experimental_features": True,
        }


class TestDetectEnvironment:
    """Tests for detect_environment."""

    def test_defaults_to_development(self):
        """Test development is the fallback environment."""
        assert detect_environment(Settings()) == Environment.DEVELOPMENT

    @pytest.mark.parametrize(
        "app_env, mode, expected",
        [
            ("staging", "development", Environment.STAGING),
            ("production", "development", Environment.PRODUCTION),
            ("staging", "production", Environment.STAGING),
            (None, "production", Environment.PRODUCTION),
            ("development", "production", Environment.PRODUCTION),
            ("unknown", "development", Environment.DEVELOPMENT),
        ],
    )
    def test_app_env_takes_precedence_over_mode(self, app_env, mode, expected):
        """Test APP_ENV wins over MODE."""
        settings = Settings(APP_ENV=app_env, MODE=mode)
        assert detect_environment(settings) == expected

    def test_reads_process_environment(self):
        """Test detection reads process environment."""
        os.environ["APP_ENV"] = "production"
        assert detect_environment() == Environment.PRODUCTION


class TestEnvironmentContext:
    """Tests for EnvironmentContext."""

    def test_initial_state(self):
        """Test context starts unsimulated."""
        ctx = EnvironmentContext(Environment.STAGING)
        assert ctx.current == Environment.STAGING
        assert ctx.config is resolve(Environment.STAGING)
        assert ctx.is_simulated is False

    def test_set_environment_marks_simulated(self):
        """Test runtime override marks the context simulated."""
        ctx = EnvironmentContext(Environment.DEVELOPMENT)
        config = ctx.set_environment("production")
        assert ctx.current == Environment.PRODUCTION
        assert config.min_severity == Severity.ERROR
        assert ctx.is_simulated is True

    def test_detects_when_not_given(self):
        """Test context detects the environment when none is given."""
        os.environ["MODE"] = "production"
        ctx = EnvironmentContext()
        assert ctx.current == Environment.PRODUCTION

    def test_invalid_override_keeps_current(self):
        """Test a bad override leaves the context unchanged."""
        ctx = EnvironmentContext(Environment.STAGING)
        with pytest.raises(UnknownEnvironmentError):
            ctx.set_environment("preview")
        assert ctx.current == Environment.STAGING
        assert ctx.is_simulated is False
