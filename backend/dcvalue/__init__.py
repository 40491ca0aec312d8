"""dcvalue: data-center building valuation engine.

Usage::

    from datetime import date

    from dcvalue import create_default_service

    service = create_default_service()
    view = service.get_valuation("bldg-a1")
    view.total_valuation
"""

from dcvalue.calculator import ValuationCalculator, calculate_valuation
from dcvalue.data.defaults import GlobalDefaults
from dcvalue.engine import ValuationEngine
from dcvalue.events import EventBus, ValuationChanged
from dcvalue.exceptions import (
    DcValueError,
    LastPeriodError,
    NotFoundError,
    ValidationError,
)
from dcvalue.factory import create_default_engine, create_default_service
from dcvalue.models.building import Building, Campus, Site, UsePeriod
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
    UsePeriodCreate,
    UsePeriodUpdate,
    ValuationDetailsUpdate,
)
from dcvalue.models.valuation import (
    CapacityAllocation,
    FactorDetails,
    Override,
    ValuationBreakdown,
    ValuationView,
)

__all__ = [
    "Building",
    "Campus",
    "CapacityAllocation",
    "Confidence",
    "DatacenterTier",
    "DcValueError",
    "DevelopmentPhase",
    "EventBus",
    "FactorDetails",
    "FactorName",
    "GlobalDefaults",
    "LastPeriodError",
    "LeaseStructure",
    "NotFoundError",
    "Override",
    "OwnershipStatus",
    "PowerAuthority",
    "Site",
    "UsePeriod",
    "UsePeriodCreate",
    "UsePeriodUpdate",
    "UseType",
    "ValidationError",
    "ValuationBreakdown",
    "ValuationCalculator",
    "ValuationChanged",
    "ValuationDetailsUpdate",
    "ValuationEngine",
    "ValuationView",
    "calculate_valuation",
    "create_default_engine",
    "create_default_service",
]
