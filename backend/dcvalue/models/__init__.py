"""Domain models for the dcvalue engine."""

from dcvalue.models.building import (
    Building,
    Campus,
    FactorOverrides,
    Site,
    UsePeriod,
    ValuationOverrides,
)
from dcvalue.models.enums import (
    Confidence,
    DatacenterTier,
    DevelopmentPhase,
    FactorName,
    LeaseStructure,
    OwnershipStatus,
    PowerAuthority,
    UseType,
)
from dcvalue.models.requests import (
    FactorUpdate,
    LeaseUpdate,
    UsePeriodCreate,
    UsePeriodUpdate,
    ValuationDetailsUpdate,
    ValuationUpdate,
)
from dcvalue.models.valuation import (
    CapacityAllocation,
    CapRateInputs,
    FactorDetails,
    LeaseInputs,
    NumericDegeneracy,
    Override,
    PeriodValuation,
    ValuationBreakdown,
    ValuationInputs,
    ValuationSection,
    ValuationView,
)

__all__ = [
    "Building",
    "Campus",
    "CapRateInputs",
    "CapacityAllocation",
    "Confidence",
    "DatacenterTier",
    "DevelopmentPhase",
    "FactorDetails",
    "FactorName",
    "FactorOverrides",
    "FactorUpdate",
    "LeaseInputs",
    "LeaseStructure",
    "LeaseUpdate",
    "NumericDegeneracy",
    "Override",
    "OwnershipStatus",
    "PeriodValuation",
    "PowerAuthority",
    "Site",
    "UsePeriod",
    "UsePeriodCreate",
    "UsePeriodUpdate",
    "UseType",
    "ValuationBreakdown",
    "ValuationDetailsUpdate",
    "ValuationInputs",
    "ValuationOverrides",
    "ValuationSection",
    "ValuationUpdate",
    "ValuationView",
]
