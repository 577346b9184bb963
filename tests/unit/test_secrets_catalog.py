"""Tests for the per-environment secrets catalog."""

import pytest

from envlab.core.environment import Environment
from envlab.core.errors import ErrorCode, SecretNotFoundError
from envlab.core.secrets import (
    PREDEFINED_SECRETS,
    EnvironmentSecret,
    SecretCatalog,
    SecretCategory,
    default_catalog,
    mask_value,
)
from envlab.core.secrets.catalog import MASK


class TestMaskValue:
    """Tests for mask_value."""

    @pytest.mark.parametrize("value", ["", "short", "12345678"])
    def test_short_values_fully_masked(self, value):
        """Test short values are fully masked."""
        assert mask_value(value) == MASK

    def test_long_values_keep_edges(self):
        """Test long values keep four characters each side."""
        assert mask_value("sk_test_4eC39HqLyjWDarjtT1zdp7dc") == "sk_t" + MASK + "p7dc"


class TestEnvironmentSecret:
    """Tests for EnvironmentSecret."""

    def test_requires_every_environment(self):
        """Test a value is required per environment."""
        with pytest.raises(ValueError) as exc_info:
            EnvironmentSecret(
                key="PARTIAL",
                label="Partial",
                category=SecretCategory.API,
                values={Environment.DEVELOPMENT: "x"},
            )
        assert "staging" in str(exc_info.value)


class TestSecretCatalog:
    """Tests for SecretCatalog."""

    @pytest.fixture
    def catalog(self):
        return default_catalog()

    def test_predefined_keys(self):
        """Test predefined secret keys."""
        assert [s.key for s in PREDEFINED_SECRETS] == [
            "DATABASE_URL",
            "STRIPE_SECRET_KEY",
            "STRIPE_PUBLISHABLE_KEY",
            "JWT_SECRET",
            "SENDGRID_API_KEY",
            "REDIS_URL",
        ]

    def test_value_for(self, catalog):
        """Test raw value lookup."""
        assert catalog.value_for("REDIS_URL", "development") == "redis://localhost:6379"
        assert catalog.value_for("STRIPE_SECRET_KEY", Environment.PRODUCTION).startswith("sk_live_")

    def test_unknown_secret(self, catalog):
        """Test unknown secret raises."""
        with pytest.raises(SecretNotFoundError) as exc_info:
            catalog.get("AWS_KEY")
        assert exc_info.value.code == ErrorCode.SECRET_NOT_FOUND

    def test_duplicate_keys_rejected(self):
        """Test duplicate keys are rejected."""
        with pytest.raises(ValueError):
            SecretCatalog([PREDEFINED_SECRETS[0], PREDEFINED_SECRETS[0]])

    def test_list_masks_private_values(self, catalog):
        """Test private values are masked."""
        views = {v.key: v for v in catalog.list_for(Environment.PRODUCTION)}
        assert views["JWT_SECRET"].masked is True
        assert MASK in views["JWT_SECRET"].value
        assert views["STRIPE_PUBLISHABLE_KEY"].masked is False
        assert views["STRIPE_PUBLISHABLE_KEY"].value == "pk_live_51HG8k2EZNxCpT0mN3J5Kv9Rs"

    def test_reveal(self, catalog):
        """Test revealing a secret."""
        views = {v.key: v for v in catalog.list_for("staging", reveal={"JWT_SECRET"})}
        assert views["JWT_SECRET"].masked is False
        assert views["JWT_SECRET"].value == catalog.value_for("JWT_SECRET", "staging")
        assert views["DATABASE_URL"].masked is True

    def test_category_filter(self, catalog):
        """Test category filter."""
        views = catalog.list_for(Environment.DEVELOPMENT, category=SecretCategory.DATABASE)
        assert [v.key for v in views] == ["DATABASE_URL", "REDIS_URL"]

    def test_count_by_category(self, catalog):
        """Test counts per category."""
        assert catalog.count_by_category() == {
            SecretCategory.API: 2,
            SecretCategory.DATABASE: 2,
            SecretCategory.AUTH: 1,
            SecretCategory.SERVICE: 1,
        }
