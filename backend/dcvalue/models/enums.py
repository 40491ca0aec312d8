"""Enums for the dcvalue domain models.

Values match the categorical codes used by the portfolio data, so they
round-trip through JSON unchanged.
"""

from enum import StrEnum


class UseType(StrEnum):
    """What a slice of building capacity is used for."""

    HPC_AI_HOSTING = "HPC_AI_HOSTING"
    HPC_AI_PLANNED = "HPC_AI_PLANNED"
    GPU_CLOUD = "GPU_CLOUD"
    COLOCATION = "COLOCATION"
    BTC_MINING = "BTC_MINING"
    BTC_MINING_HOSTING = "BTC_MINING_HOSTING"
    UNCONTRACTED = "UNCONTRACTED"
    UNCONTRACTED_ROFR = "UNCONTRACTED_ROFR"


class DevelopmentPhase(StrEnum):
    """Lifecycle stage of a building, earliest last."""

    OPERATIONAL = "OPERATIONAL"
    CONSTRUCTION = "CONSTRUCTION"
    DEVELOPMENT = "DEVELOPMENT"
    EXCLUSIVITY = "EXCLUSIVITY"
    DILIGENCE = "DILIGENCE"


class Confidence(StrEnum):
    """Certainty level of the underlying building data."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class OwnershipStatus(StrEnum):
    """How the operator controls the land and shell."""

    OWNED = "OWNED"
    LONG_TERM_LEASE = "LONG_TERM_LEASE"
    SHORT_TERM_LEASE = "SHORT_TERM_LEASE"


class DatacenterTier(StrEnum):
    """Uptime Institute tier classification."""

    TIER_IV = "TIER_IV"
    TIER_III = "TIER_III"
    TIER_II = "TIER_II"
    TIER_I = "TIER_I"


class LeaseStructure(StrEnum):
    """Expense treatment of a lease."""

    NNN = "NNN"
    MODIFIED_GROSS = "MODIFIED_GROSS"
    GROSS = "GROSS"


class PowerAuthority(StrEnum):
    """Normalized grid / power-authority code."""

    ERCOT = "ERCOT"
    PJM = "PJM"
    MISO = "MISO"
    NYISO = "NYISO"
    CAISO = "CAISO"
    CANADA = "CANADA"
    NORWAY = "NORWAY"
    UAE = "UAE"
    BHUTAN = "BHUTAN"
    PARAGUAY = "PARAGUAY"
    ETHIOPIA = "ETHIOPIA"
    OTHER = "OTHER"


class FactorName(StrEnum):
    """The fixed set of adjustment factors multiplied into the combined factor."""

    PHASE_PROBABILITY = "phase_probability"
    REGULATORY_RISK = "regulatory_risk"
    SIZE_MULTIPLIER = "size_multiplier"
    POWER_AUTHORITY = "power_authority"
    OWNERSHIP = "ownership"
    DATACENTER_TIER = "datacenter_tier"
    LEASE_STRUCTURE = "lease_structure"
    TENANT_CREDIT = "tenant_credit"
    ENERGIZATION = "energization"
    FIDOODLE_FACTOR = "fidoodle_factor"
