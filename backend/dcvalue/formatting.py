"""Formatting helpers for valuation output.

Figures are carried in millions of dollars, so '$170.6M' rather than
'$170,637,000'.
"""

from __future__ import annotations


def format_millions(value_m: float) -> str:
    """Format a $M amount, e.g. 170.64 -> '$170.6M', 1250 -> '$1.25B'."""
    if abs(value_m) >= 1_000:
        return f"${value_m / 1_000:,.2f}B"
    return f"${value_m:,.1f}M"


def format_percent(fraction: float) -> str:
    """Format a decimal fraction as a percentage, e.g. 0.075 -> '7.5%'."""
    return f"{fraction * 100:.1f}%"


def format_multiplier(value: float) -> str:
    """Format a multiplier, e.g. 0.95 -> '0.95x'."""
    return f"{value:.2f}x"
