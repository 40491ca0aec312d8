"""Lease valuation math.

This is the one implementation used for both saved valuations and live
previews, so it must stay pure: the result depends only on the arguments.

The method is a direct cap on in-place NOI plus a discounted terminal value:

1. **Annual revenue**: lease value spread over the lease term (term floored
   at 0.1 years).
2. **NOI**: annual revenue times the NOI margin.
3. **Base value**: NOI capitalized at the going-in cap rate.
4. **Terminal value**: NOI grown over the term, capitalized at the exit cap
   rate less terminal growth, discounted back and weighted by the renewal
   probability.
5. **Adjusted value**: gross (base + terminal) times the combined factor.

Any step that is not finite is clamped (amounts to 0, the combined factor
to 1) and recorded on the breakdown instead of being raised.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from dcvalue.models.valuation import NumericDegeneracy, ValuationBreakdown

if TYPE_CHECKING:
    from dcvalue.models.valuation import CapRateInputs, LeaseInputs

logger = logging.getLogger(__name__)

MIN_LEASE_YEARS = 0.1
MIN_CAP_RATE_DIFF = 0.001


def normalize_noi_pct(noi_pct: float | None) -> float:
    """Return the NOI margin as a fraction; values above 1 are percentages."""
    if noi_pct is None:
        return 0.0
    if noi_pct > 1:
        return noi_pct / 100.0
    return noi_pct


def _pow(base: float, exponent: float) -> float:
    """math.pow that returns NaN instead of raising on overflow or a complex result."""
    try:
        return math.pow(base, exponent)
    except (OverflowError, ValueError):
        return math.nan


def _divide(numerator: float, denominator: float) -> float:
    """Divide, returning NaN for a zero denominator."""
    if denominator == 0:
        return math.nan
    return numerator / denominator


class _Guard:
    """Collects clamped steps for one calculation."""

    def __init__(self) -> None:
        self.degeneracies: list[NumericDegeneracy] = []

    def __call__(self, step: str, value: float, fallback: float, **inputs: float | None) -> float:
        if math.isfinite(value):
            return value
        degeneracy = NumericDegeneracy(
            step=step,
            inputs={k: repr(v) for k, v in inputs.items()},
            fallback=fallback,
        )
        self.degeneracies.append(degeneracy)
        logger.warning(
            "Non-finite %s (%r) clamped to %s; inputs=%s",
            step,
            value,
            fallback,
            degeneracy.inputs,
        )
        return fallback


def calculate_valuation(
    lease: LeaseInputs,
    rates: CapRateInputs,
    combined_factor: float,
    renewal_probability: float,
    remaining_lease_years: float | None = None,
) -> ValuationBreakdown:
    """Turn lease terms, cap-rate inputs and a combined factor into a valuation.

    Args:
        lease: Lease terms. ``lease_years`` falls back to
            ``remaining_lease_years`` when unset.
        rates: Resolved going-in/exit cap rates, terminal growth and
            discount rate, as decimal fractions.
        combined_factor: Product of all resolved adjustment factors.
        renewal_probability: Weight applied to the terminal value.
        remaining_lease_years: Estimated remaining term used when the lease
            has no explicit term.

    Returns:
        A breakdown whose every figure is finite.
    """
    guard = _Guard()

    factor = guard("combined_factor", combined_factor, 1.0, combined_factor=combined_factor)

    term = lease.lease_years if lease.lease_years is not None else remaining_lease_years
    years = max(guard("lease_years", term or 0.0, 0.0, lease_years=term), 0.0)
    divisor = max(years, MIN_LEASE_YEARS)

    if lease.lease_value_m:
        annual_revenue = _divide(lease.lease_value_m, divisor)
    elif lease.annual_rev_m:
        annual_revenue = lease.annual_rev_m
    else:
        annual_revenue = 0.0
    annual_revenue = guard(
        "annual_revenue",
        annual_revenue,
        0.0,
        lease_value_m=lease.lease_value_m,
        annual_rev_m=lease.annual_rev_m,
        lease_years=years,
    )

    noi_fraction = normalize_noi_pct(lease.noi_pct)
    noi_annual = guard(
        "noi_annual",
        annual_revenue * noi_fraction,
        0.0,
        annual_revenue=annual_revenue,
        noi_pct=lease.noi_pct,
    )

    cap_rate = rates.cap_rate
    if noi_annual > 0 and cap_rate > 0:
        base_value = noi_annual / cap_rate
    else:
        base_value = 0.0
    base_value = guard("base_value", base_value, 0.0, noi_annual=noi_annual, cap_rate=cap_rate)

    growth = rates.terminal_growth_rate
    cap_rate_diff = guard(
        "cap_rate_diff",
        max(rates.exit_cap_rate - growth, MIN_CAP_RATE_DIFF),
        MIN_CAP_RATE_DIFF,
        exit_cap_rate=rates.exit_cap_rate,
        terminal_growth_rate=growth,
    )

    terminal_noi = guard(
        "terminal_noi",
        noi_annual * _pow(1 + growth, years),
        0.0,
        noi_annual=noi_annual,
        terminal_growth_rate=growth,
        lease_years=years,
    )
    terminal_value_at_end = guard(
        "terminal_value_at_end",
        _divide(terminal_noi, cap_rate_diff),
        0.0,
        terminal_noi=terminal_noi,
        cap_rate_diff=cap_rate_diff,
    )
    terminal_value = guard(
        "terminal_value",
        _divide(terminal_value_at_end, _pow(1 + rates.discount_rate, years))
        * renewal_probability,
        0.0,
        terminal_value_at_end=terminal_value_at_end,
        discount_rate=rates.discount_rate,
        lease_years=years,
        renewal_probability=renewal_probability,
    )

    gross_value = guard(
        "gross_value",
        base_value + terminal_value,
        0.0,
        base_value=base_value,
        terminal_value=terminal_value,
    )
    adjusted_value = guard(
        "adjusted_value",
        gross_value * factor,
        0.0,
        gross_value=gross_value,
        combined_factor=factor,
    )

    return ValuationBreakdown(
        lease_years=years,
        annual_revenue=annual_revenue,
        noi_annual=noi_annual,
        base_value=base_value,
        cap_rate_diff=cap_rate_diff,
        terminal_noi=terminal_noi,
        terminal_value_at_end=terminal_value_at_end,
        terminal_value=terminal_value,
        gross_value=gross_value,
        combined_factor=factor,
        adjusted_value=adjusted_value,
        degeneracies=guard.degeneracies,
    )


class ValuationCalculator:
    """Object wrapper around :func:`calculate_valuation` for injection."""

    def calculate(
        self,
        lease: LeaseInputs,
        rates: CapRateInputs,
        combined_factor: float,
        renewal_probability: float,
        remaining_lease_years: float | None = None,
    ) -> ValuationBreakdown:
        return calculate_valuation(
            lease,
            rates,
            combined_factor,
            renewal_probability,
            remaining_lease_years=remaining_lease_years,
        )


def annual_lease_figures(
    lease_value_m: float | None,
    lease_years: float | None,
    noi_pct: float | None,
) -> tuple[float | None, float | None]:
    """Derive stored annual revenue and NOI from lease terms.

    Uses the same floor and NOI normalization as :func:`calculate_valuation`
    so stored figures match computed ones. Returns ``(None, None)`` when
    there is no lease value.
    """
    if not lease_value_m or not math.isfinite(lease_value_m):
        return None, None
    years = max(lease_years or 0.0, MIN_LEASE_YEARS)
    annual_revenue = lease_value_m / years
    if noi_pct is None:
        return annual_revenue, None
    return annual_revenue, annual_revenue * normalize_noi_pct(noi_pct)
