"""Valuation read models: factors, inputs, breakdowns and the composed view."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field, computed_field

from dcvalue.data.defaults import GlobalDefaults
from dcvalue.models.building import Building, Campus, Site, UsePeriod
from dcvalue.models.enums import FactorName, UseType


class Override(BaseModel):
    """An auto-computed value with an optional manual override.

    ``final`` is always derived, never stored: the override when present,
    otherwise the auto value.
    """

    auto: float
    override: float | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def final(self) -> float:
        return self.override if self.override is not None else self.auto

    @property
    def is_overridden(self) -> bool:
        return self.override is not None

    def reset(self) -> None:
        """Drop the manual override so ``final`` falls back to ``auto``."""
        self.override = None


class FactorDetails(BaseModel):
    """Resolved state of every adjustment factor for one building."""

    phase_probability: Override
    regulatory_risk: Override
    size_multiplier: Override
    power_authority: Override
    ownership: Override
    datacenter_tier: Override
    lease_structure: Override
    tenant_credit: Override
    energization: Override
    fidoodle_factor: Override

    def get(self, name: FactorName) -> Override:
        return getattr(self, name.value)

    def finals(self) -> dict[FactorName, float]:
        return {name: self.get(name).final for name in FactorName}


class LeaseInputs(BaseModel):
    """Lease terms fed into the calculator.

    ``noi_pct`` accepts either a fraction (0.85) or a percentage (85).
    """

    lease_value_m: float | None = None
    lease_years: float | None = None
    noi_pct: float | None = None
    annual_rev_m: float | None = None

    @classmethod
    def from_use_period(cls, period: UsePeriod) -> LeaseInputs:
        return cls(
            lease_value_m=period.lease_value_m,
            lease_years=period.lease_years,
            noi_pct=period.noi_pct,
            annual_rev_m=period.annual_rev_m,
        )


class CapRateInputs(BaseModel):
    """Resolved cap-rate inputs as plain decimal fractions."""

    cap_rate: float
    exit_cap_rate: float
    terminal_growth_rate: float
    discount_rate: float


class ValuationInputs(BaseModel):
    """Cap-rate inputs, each independently overridable against a global default."""

    cap_rate: Override
    exit_cap_rate: Override
    terminal_growth_rate: Override
    discount_rate: Override
    renewal_probability: float

    def resolve(self) -> CapRateInputs:
        return CapRateInputs(
            cap_rate=self.cap_rate.final,
            exit_cap_rate=self.exit_cap_rate.final,
            terminal_growth_rate=self.terminal_growth_rate.final,
            discount_rate=self.discount_rate.final,
        )


class NumericDegeneracy(BaseModel):
    """A calculation step whose result was not finite and was clamped.

    Inputs are kept as ``repr`` strings so NaN/Infinity survive JSON.
    """

    step: str
    inputs: dict[str, str]
    fallback: float


class ValuationBreakdown(BaseModel):
    """Every intermediate and final figure of one valuation, in $M."""

    lease_years: float
    annual_revenue: float
    noi_annual: float
    base_value: float
    cap_rate_diff: float
    terminal_noi: float
    terminal_value_at_end: float
    terminal_value: float
    gross_value: float
    combined_factor: float
    adjusted_value: float
    degeneracies: list[NumericDegeneracy] = Field(default_factory=list)


class CapacityAllocation(BaseModel):
    """Derived split of a building's IT capacity across current use periods."""

    total_it_mw: float
    allocated_mw: float
    unallocated_mw: float
    explicit_allocated_mw: float
    available_mw: float
    current_period_count: int
    over_allocated: bool = False
    warnings: list[str] = Field(default_factory=list)


class PeriodValuation(BaseModel):
    """Valuation of a single current use period of a split building."""

    use_period_id: str
    use_type: UseType
    tenant: str | None
    mw: float
    breakdown: ValuationBreakdown


class ValuationSection(BaseModel):
    inputs: ValuationInputs
    results: ValuationBreakdown


class ValuationView(BaseModel):
    """The composed read model shared by saved and preview valuations."""

    building: Building
    site: Site | None = None
    campus: Campus | None = None
    use_periods: list[UsePeriod]
    factor_details: FactorDetails
    combined_factor: float
    global_factors: GlobalDefaults
    valuation: ValuationSection
    capacity_allocation: CapacityAllocation
    period_valuations: list[PeriodValuation] = Field(default_factory=list)
    total_valuation: float
    pipeline_value: float
    remaining_lease_years: float
    as_of: date

    def to_summary_dict(self) -> dict[str, Any]:
        """Produce a flat summary dict with display-ready strings."""
        from dcvalue.formatting import format_millions, format_multiplier, format_percent

        results = self.valuation.results
        inputs = self.valuation.inputs
        cap = self.capacity_allocation
        return {
            "building_id": self.building.id,
            "building_name": self.building.name,
            "development_phase": self.building.development_phase.value,
            "total_valuation_formatted": format_millions(self.total_valuation),
            "adjusted_value_formatted": format_millions(results.adjusted_value),
            "gross_value_formatted": format_millions(results.gross_value),
            "pipeline_value_formatted": format_millions(self.pipeline_value),
            "combined_factor_formatted": format_multiplier(self.combined_factor),
            "cap_rate_formatted": format_percent(inputs.cap_rate.final),
            "allocated_mw": cap.allocated_mw,
            "unallocated_mw": cap.unallocated_mw,
            "num_use_periods": len(self.use_periods),
            "overridden_factors": [
                name.value
                for name in FactorName
                if self.factor_details.get(name).is_overridden
            ],
        }
