"""
Token pricing and cost helpers.

This module provides the per-model pricing table used to turn token
counts into USD costs, plus the formatting helpers shared by the progress
display and the CLI summary.
"""

import logging
from dataclasses import dataclass
from typing import Dict

# Configure logging
logger = logging.getLogger(__name__)


# USD per million tokens (November 2025)
TOKEN_PRICING: Dict[str, Dict[str, Dict[str, float]]] = {
    "anthropic": {
        "claude-sonnet-4-5-20250929": {
            "input": 3.00,
            "output": 15.00
        },
        "claude-sonnet-4-20250514": {
            "input": 3.00,
            "output": 15.00
        },
        "claude-3-5-sonnet-20241022": {
            "input": 3.00,
            "output": 15.00
        },
    },
    "openai": {
        "gpt-4o": {
            "input": 2.50,
            "output": 10.00
        },
        "gpt-4o-mini": {
            "input": 0.15,
            "output": 0.60
        },
    },
    "google": {
        "gemini-2.0-flash-exp": {
            "input": 0.00,  # Free tier
            "output": 0.00
        },
        "gemini-1.5-pro": {
            "input": 1.25,
            "output": 5.00
        },
    },
}


@dataclass
class CostCalculation:
    """Cost breakdown for a token usage figure."""
    input_cost: float = 0.0
    output_cost: float = 0.0
    total_cost: float = 0.0


def calculate_cost(provider: str, model: str, input_tokens: int, output_tokens: int) -> CostCalculation:
    """
    Calculate the cost of an LLM call based on token usage.

    Unknown providers or models are priced at zero rather than rejected,
    since cost is only ever displayed.

    Args:
        provider: Provider name (anthropic, openai, google)
        model: Model name
        input_tokens: Number of input tokens
        output_tokens: Number of output tokens

    Returns:
        CostCalculation with input, output and total cost in USD
    """
    provider_pricing = TOKEN_PRICING.get(provider)
    if provider_pricing is None:
        logger.warning(f"Unknown provider: {provider}, using zero cost")
        return CostCalculation()

    pricing = provider_pricing.get(model)
    if pricing is None:
        logger.warning(f"Unknown pricing for {provider}/{model}, using zero cost")
        return CostCalculation()

    input_cost = (input_tokens / 1_000_000) * pricing["input"]
    output_cost = (output_tokens / 1_000_000) * pricing["output"]

    return CostCalculation(
        input_cost=input_cost,
        output_cost=output_cost,
        total_cost=input_cost + output_cost
    )


def format_cost(cost: float) -> str:
    """Format a USD cost with four decimals, e.g. ``$0.0123``."""
    return f"${cost:.4f}"


def format_tokens(input_tokens: int, output_tokens: int) -> str:
    """Format token counts as ``in/out`` with thousands separators."""
    return f"{input_tokens:,}/{output_tokens:,}"


def format_token_usage(input_tokens: int, output_tokens: int) -> str:
    """
    Format token usage for log lines.

    Args:
        input_tokens: Number of input tokens
        output_tokens: Number of output tokens

    Returns:
        String such as ``1,234 (in: 1,000, out: 234)``
    """
    total = input_tokens + output_tokens
    return f"{total:,} (in: {input_tokens:,}, out: {output_tokens:,})"
