"""Tests for token pricing and cost formatting."""

import logging

import pytest

from commit_progress.utils.cost import (
    TOKEN_PRICING,
    CostCalculation,
    calculate_cost,
    format_cost,
    format_tokens,
    format_token_usage
)


class TestCalculateCost:
    """Test cost calculation from the pricing table."""

    def test_known_model(self):
        cost = calculate_cost("anthropic", "claude-sonnet-4-5-20250929", 1_000_000, 100_000)

        assert cost.input_cost == pytest.approx(3.00)
        assert cost.output_cost == pytest.approx(1.50)
        assert cost.total_cost == pytest.approx(4.50)

    def test_free_tier_model(self):
        cost = calculate_cost("google", "gemini-2.0-flash-exp", 50_000, 50_000)
        assert cost.total_cost == 0.0

    def test_unknown_provider_zero_cost(self, caplog):
        with caplog.at_level(logging.WARNING):
            cost = calculate_cost("acme", "model-x", 1000, 1000)

        assert cost == CostCalculation()
        assert "Unknown provider: acme" in caplog.text

    def test_unknown_model_zero_cost(self, caplog):
        with caplog.at_level(logging.WARNING):
            cost = calculate_cost("openai", "gpt-0", 1000, 1000)

        assert cost.total_cost == 0.0
        assert "openai/gpt-0" in caplog.text

    def test_every_price_non_negative(self):
        for models in TOKEN_PRICING.values():
            for pricing in models.values():
                assert pricing["input"] >= 0
                assert pricing["output"] >= 0


class TestFormatting:
    """Test display formatting helpers."""

    @pytest.mark.parametrize("cost,expected", [
        (0, "$0.0000"),
        (0.00005, "$0.0001"),
        (1.23456, "$1.2346"),
    ])
    def test_format_cost(self, cost, expected):
        assert format_cost(cost) == expected

    def test_format_tokens(self):
        assert format_tokens(12345, 678) == "12,345/678"

    def test_format_token_usage(self):
        assert format_token_usage(1000, 234) == "1,234 (in: 1,000, out: 234)"
