"""Lookup tables behind the auto-derived adjustment factors.

Multipliers are relative to a neutral 1.00. Tenant credit values are
spreads in percentage points over SOFR rather than multipliers.
"""

from __future__ import annotations

from dcvalue.models.enums import (
    DatacenterTier,
    DevelopmentPhase,
    LeaseStructure,
    OwnershipStatus,
    PowerAuthority,
)

PHASE_PROBABILITIES: dict[DevelopmentPhase, float] = {
    DevelopmentPhase.OPERATIONAL: 1.0,
    DevelopmentPhase.CONSTRUCTION: 0.9,
    DevelopmentPhase.DEVELOPMENT: 0.7,
    DevelopmentPhase.EXCLUSIVITY: 0.5,
    DevelopmentPhase.DILIGENCE: 0.3,
}
DEFAULT_PHASE_PROBABILITY = 0.5

DEFAULT_REGULATORY_RISK = 1.0

POWER_AUTHORITY_MULTIPLIERS: dict[PowerAuthority, float] = {
    PowerAuthority.ERCOT: 1.05,
    PowerAuthority.PJM: 1.00,
    PowerAuthority.MISO: 0.95,
    PowerAuthority.NYISO: 0.95,
    PowerAuthority.CAISO: 0.90,
    PowerAuthority.CANADA: 0.95,
    PowerAuthority.NORWAY: 0.90,
    PowerAuthority.UAE: 0.85,
    PowerAuthority.BHUTAN: 0.70,
    PowerAuthority.PARAGUAY: 0.70,
    PowerAuthority.ETHIOPIA: 0.60,
    PowerAuthority.OTHER: 0.80,
}

OWNERSHIP_MULTIPLIERS: dict[OwnershipStatus, float] = {
    OwnershipStatus.OWNED: 1.00,
    OwnershipStatus.LONG_TERM_LEASE: 0.95,
    OwnershipStatus.SHORT_TERM_LEASE: 0.85,
}

TIER_MULTIPLIERS: dict[DatacenterTier, float] = {
    DatacenterTier.TIER_IV: 1.15,
    DatacenterTier.TIER_III: 1.00,
    DatacenterTier.TIER_II: 0.90,
    DatacenterTier.TIER_I: 0.80,
}

LEASE_STRUCTURE_MULTIPLIERS: dict[LeaseStructure, float] = {
    LeaseStructure.NNN: 1.00,
    LeaseStructure.MODIFIED_GROSS: 0.95,
    LeaseStructure.GROSS: 0.90,
}

# (minimum site IT MW, multiplier), largest band first.
SITE_SIZE_BANDS: list[tuple[float, float]] = [
    (500.0, 1.10),
    (250.0, 1.00),
    (100.0, 0.95),
    (0.0, 0.85),
]

# Keys are lower-cased tenant names.
TENANT_CREDIT_SPREADS: dict[str, float] = {
    "google": -1.00,
    "microsoft": -1.00,
    "amazon": -1.00,
    "aws": -1.00,
    "meta": -0.75,
    "oracle": -0.50,
    "coreweave": 0.00,
    "anthropic": 0.00,
    "openai": 0.00,
    "xai": 0.25,
}
OTHER_TENANT_SPREAD = 1.00
SELF_TENANT_SPREAD = 3.00
