"""Request payloads for the valuation operations.

Updates are partial: only fields the caller actually sent are applied
(``model_fields_set``). For override fields an explicit ``null`` clears the
override and a number sets it.
"""

from __future__ import annotations

import math
from datetime import date

from pydantic import BaseModel, Field, field_validator

from dcvalue.models.enums import LeaseStructure, UseType


def _finite(v: float | None) -> float | None:
    if v is not None and not math.isfinite(v):
        msg = f"value must be finite, got {v}"
        raise ValueError(msg)
    return v


class LeaseUpdate(BaseModel):
    """Edits to the lease terms of the building's primary current period."""

    tenant: str | None = None
    lease_structure: LeaseStructure | None = None
    lease_value_m: float | None = Field(default=None, ge=0)
    lease_years: float | None = None
    annual_rev_m: float | None = None
    noi_pct: float | None = None
    lease_start: date | None = None

    @field_validator("lease_value_m", "lease_years", "annual_rev_m", "noi_pct")
    @classmethod
    def numbers_must_be_finite(cls, v: float | None) -> float | None:
        return _finite(v)


class ValuationUpdate(BaseModel):
    """Per-building overrides of the cap-rate inputs."""

    cap_rate: float | None = None
    exit_cap_rate: float | None = None
    terminal_growth_rate: float | None = None
    discount_rate: float | None = None

    @field_validator("*")
    @classmethod
    def rates_must_be_finite(cls, v: float | None) -> float | None:
        return _finite(v)


class FactorUpdate(BaseModel):
    """Factor overrides; ``fidoodle_factor=None`` resets it to 1.0."""

    phase_probability: float | None = None
    regulatory_risk: float | None = None
    size_multiplier: float | None = None
    power_authority: float | None = None
    ownership: float | None = None
    datacenter_tier: float | None = None
    lease_structure: float | None = None
    tenant_credit: float | None = None
    energization: float | None = None
    fidoodle_factor: float | None = None

    @field_validator("*")
    @classmethod
    def factors_must_be_finite(cls, v: float | None) -> float | None:
        return _finite(v)


class ValuationDetailsUpdate(BaseModel):
    """Partial update of a building's lease, valuation inputs and factors."""

    lease: LeaseUpdate | None = None
    valuation: ValuationUpdate | None = None
    factors: FactorUpdate | None = None


class UsePeriodCreate(BaseModel):
    """Create a split (concurrent, current) or a transition (future).

    ``is_current`` defaults to ``is_split``. A current, non-split period
    replaces every existing current period of the building.
    """

    building_id: str
    is_split: bool = True
    is_current: bool | None = None
    use_type: UseType = UseType.HPC_AI_HOSTING
    tenant: str | None = None
    mw_allocation: float | None = None
    lease_value_m: float | None = Field(default=None, ge=0)
    lease_years: float | None = None
    noi_pct: float | None = None
    lease_structure: LeaseStructure = LeaseStructure.NNN
    start_date: date | None = None
    end_date: date | None = None
    lease_start: date | None = None

    @field_validator("mw_allocation", "lease_value_m", "lease_years", "noi_pct")
    @classmethod
    def numbers_must_be_finite(cls, v: float | None) -> float | None:
        return _finite(v)

    @property
    def resolved_is_current(self) -> bool:
        return self.is_split if self.is_current is None else self.is_current


class UsePeriodUpdate(BaseModel):
    """Partial edit of one use period."""

    use_type: UseType | None = None
    tenant: str | None = None
    is_current: bool | None = None
    mw_allocation: float | None = None
    start_date: date | None = None
    end_date: date | None = None
    lease_value_m: float | None = Field(default=None, ge=0)
    lease_years: float | None = None
    noi_pct: float | None = None
    lease_start: date | None = None
    lease_structure: LeaseStructure | None = None
    lease_notes: str | None = None
    allocation_method: str | None = None

    @field_validator("mw_allocation", "lease_value_m", "lease_years", "noi_pct")
    @classmethod
    def numbers_must_be_finite(cls, v: float | None) -> float | None:
        return _finite(v)

    # Optional to allow omission; a use period always has these
    @field_validator("use_type", "is_current", "lease_structure")
    @classmethod
    def required_fields_not_null(cls, v: object) -> object:
        if v is None:
            msg = "may be omitted but not set to null"
            raise ValueError(msg)
        return v
