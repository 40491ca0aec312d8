"""Building and use-period domain models."""

from __future__ import annotations

import math
from datetime import date
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from dcvalue.models.enums import (
    Confidence,
    DatacenterTier,
    DevelopmentPhase,
    LeaseStructure,
    OwnershipStatus,
    PowerAuthority,
    UseType,
)


def _new_id() -> str:
    return uuid4().hex


def _reject_non_finite(v: float | None) -> float | None:
    if v is not None and not math.isfinite(v):
        msg = f"value must be finite, got {v}"
        raise ValueError(msg)
    return v


class Site(BaseModel):
    """A physical site, possibly holding several campuses."""

    id: str = Field(default_factory=_new_id)
    name: str
    country: str | None = None


class Campus(BaseModel):
    """A group of buildings on one site."""

    id: str = Field(default_factory=_new_id)
    site_id: str
    name: str


class FactorOverrides(BaseModel):
    """Manual overrides for the auto-derived factors.

    ``None`` means "use the auto value". The fidoodle factor lives on the
    building itself because it defaults to 1.0 rather than ``None``.
    """

    phase_probability: float | None = None
    regulatory_risk: float | None = None
    size_multiplier: float | None = None
    power_authority: float | None = None
    ownership: float | None = None
    datacenter_tier: float | None = None
    lease_structure: float | None = None
    tenant_credit: float | None = None
    energization: float | None = None

    @field_validator("*")
    @classmethod
    def overrides_must_be_finite(cls, v: float | None) -> float | None:
        return _reject_non_finite(v)


class ValuationOverrides(BaseModel):
    """Per-building overrides of the global cap-rate inputs (decimal fractions)."""

    cap_rate: float | None = None
    exit_cap_rate: float | None = None
    terminal_growth_rate: float | None = None
    discount_rate: float | None = None

    @field_validator("*")
    @classmethod
    def rates_must_be_finite(cls, v: float | None) -> float | None:
        return _reject_non_finite(v)


class Building(BaseModel):
    """A single data-center building: the unit being valued."""

    id: str = Field(default_factory=_new_id)
    campus_id: str
    name: str
    gross_mw: float | None = Field(default=None, ge=0)
    it_mw: float | None = Field(default=None, ge=0)
    pue: float | None = Field(default=None, gt=0)
    grid: PowerAuthority | None = None
    ownership_status: OwnershipStatus | None = None
    development_phase: DevelopmentPhase = DevelopmentPhase.DILIGENCE
    confidence: Confidence = Confidence.MEDIUM
    datacenter_tier: DatacenterTier | None = None
    energization_date: date | None = None
    fidoodle_factor: float = 1.0
    factor_overrides: FactorOverrides = Field(default_factory=FactorOverrides)
    valuation_overrides: ValuationOverrides = Field(default_factory=ValuationOverrides)

    @field_validator("fidoodle_factor")
    @classmethod
    def fidoodle_must_be_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            msg = "fidoodle_factor must be finite"
            raise ValueError(msg)
        return v


class UsePeriod(BaseModel):
    """Assignment of some or all of a building's IT capacity to a use.

    ``mw_allocation=None`` means "the whole building" (or, next to other
    current periods, whatever capacity they leave). ``noi_pct`` is stored
    as a fraction.
    """

    id: str = Field(default_factory=_new_id)
    building_id: str
    use_type: UseType = UseType.UNCONTRACTED
    tenant: str | None = None
    is_current: bool = True
    mw_allocation: float | None = Field(default=None, ge=0)
    start_date: date | None = None
    end_date: date | None = None

    # Lease terms
    lease_value_m: float | None = Field(default=None, ge=0)
    lease_years: float | None = None
    annual_rev_m: float | None = None
    noi_pct: float | None = None
    noi_annual_m: float | None = None
    lease_start: date | None = None
    lease_structure: LeaseStructure = LeaseStructure.NNN

    # Auxiliary
    lease_notes: str | None = None
    allocation_method: str | None = None

    @property
    def has_lease(self) -> bool:
        return bool(self.tenant) and (self.lease_value_m or 0) > 0
