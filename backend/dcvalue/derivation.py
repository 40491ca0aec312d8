"""Auto-value derivation for the adjustment factors.

Each factor's auto value is a categorical lookup against building or
lease attributes. Unknown categories fall back to a neutral value rather
than failing, since imported data is often incomplete.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from dcvalue.data.factor_tables import (
    DEFAULT_PHASE_PROBABILITY,
    DEFAULT_REGULATORY_RISK,
    LEASE_STRUCTURE_MULTIPLIERS,
    OTHER_TENANT_SPREAD,
    OWNERSHIP_MULTIPLIERS,
    PHASE_PROBABILITIES,
    POWER_AUTHORITY_MULTIPLIERS,
    SELF_TENANT_SPREAD,
    SITE_SIZE_BANDS,
    TENANT_CREDIT_SPREADS,
    TIER_MULTIPLIERS,
)
from dcvalue.models.enums import FactorName, LeaseStructure

if TYPE_CHECKING:
    from datetime import date

    from dcvalue.data.defaults import GlobalDefaults
    from dcvalue.models.building import Building, UsePeriod

_DAYS_PER_YEAR = 365.25


class AutoFactorDeriver:
    """Computes the auto (baseline) value of every factor for a building.

    Args:
        defaults: Global defaults supplying SOFR and the energization decay.
    """

    def __init__(self, defaults: GlobalDefaults) -> None:
        self._defaults = defaults

    def derive(
        self,
        building: Building,
        primary_period: UsePeriod | None,
        site_total_mw: float,
        as_of: date,
    ) -> dict[FactorName, float]:
        """Return the auto value of every factor.

        Args:
            building: The building being valued.
            primary_period: The current use period whose lease drives the
                lease-structure and tenant-credit lookups, if any.
            site_total_mw: Total IT MW across the building's site.
            as_of: Valuation date used for the energization discount.
        """
        lease_structure = (
            primary_period.lease_structure if primary_period else LeaseStructure.NNN
        )
        tenant = primary_period.tenant if primary_period else None
        return {
            FactorName.PHASE_PROBABILITY: PHASE_PROBABILITIES.get(
                building.development_phase, DEFAULT_PHASE_PROBABILITY
            ),
            FactorName.REGULATORY_RISK: DEFAULT_REGULATORY_RISK,
            FactorName.SIZE_MULTIPLIER: self.size_multiplier(site_total_mw),
            FactorName.POWER_AUTHORITY: (
                POWER_AUTHORITY_MULTIPLIERS.get(building.grid, 1.0)
                if building.grid is not None
                else 1.0
            ),
            FactorName.OWNERSHIP: (
                OWNERSHIP_MULTIPLIERS.get(building.ownership_status, 1.0)
                if building.ownership_status is not None
                else 1.0
            ),
            FactorName.DATACENTER_TIER: (
                TIER_MULTIPLIERS.get(building.datacenter_tier, 1.0)
                if building.datacenter_tier is not None
                else 1.0
            ),
            FactorName.LEASE_STRUCTURE: LEASE_STRUCTURE_MULTIPLIERS.get(
                lease_structure, 1.0
            ),
            FactorName.TENANT_CREDIT: self.tenant_credit_multiplier(tenant),
            FactorName.ENERGIZATION: self.energization_multiplier(
                building.energization_date, as_of
            ),
            FactorName.FIDOODLE_FACTOR: 1.0,
        }

    @staticmethod
    def size_multiplier(site_total_mw: float) -> float:
        """Multiplier for the site-size band containing ``site_total_mw``."""
        for minimum_mw, multiplier in SITE_SIZE_BANDS:
            if site_total_mw >= minimum_mw:
                return multiplier
        return SITE_SIZE_BANDS[-1][1]

    @staticmethod
    def tenant_spread(tenant: str | None) -> float:
        """Credit spread over SOFR in percentage points for a tenant."""
        if not tenant or not tenant.strip():
            return SELF_TENANT_SPREAD
        return TENANT_CREDIT_SPREADS.get(tenant.strip().lower(), OTHER_TENANT_SPREAD)

    def tenant_credit_multiplier(self, tenant: str | None) -> float:
        """Convert a tenant's credit spread into a value multiplier.

        A spread widens the effective cap rate by ``(sofr + spread) / sofr``;
        value scales with the reciprocal.
        """
        sofr = self._defaults.sofr_rate
        adjusted = sofr + self.tenant_spread(tenant)
        if adjusted <= 0:
            return 1.0
        return sofr / adjusted

    def energization_multiplier(self, energization_date: date | None, as_of: date) -> float:
        """Exponential discount for capacity not yet energized.

        ``exp(-decay * years_until_energization)``; 1.0 once energized or
        when the date is unknown.
        """
        if energization_date is None:
            return 1.0
        years_out = (energization_date - as_of).days / _DAYS_PER_YEAR
        if years_out <= 0:
            return 1.0
        return math.exp(-self._defaults.energization_decay_rate * years_out)
