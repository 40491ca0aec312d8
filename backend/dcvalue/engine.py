"""Valuation engine: composes factors, valuation math and capacity allocation.

``ValuationEngine.compose`` is the single entry point for building the
valuation read model. Saved valuations and live previews both go through
it, so the two can only differ if their inputs differ:

1. **Factors**: derive each factor's auto value, pair it with the manual
   override and multiply the finals into the combined factor.
2. **Valuation**: run the lease math for the building's primary current
   use period, and for every current period when the building is split.
3. **Allocation**: compute allocated/unallocated capacity and value the
   unallocated remainder as pipeline.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from dcvalue.allocation import CapacityAllocator
from dcvalue.calculator import ValuationCalculator
from dcvalue.derivation import AutoFactorDeriver
from dcvalue.factors import FactorResolver, overrides_for
from dcvalue.models.valuation import (
    LeaseInputs,
    Override,
    PeriodValuation,
    ValuationInputs,
    ValuationSection,
    ValuationView,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from dcvalue.data.defaults import GlobalDefaults
    from dcvalue.models.building import Building, Campus, Site, UsePeriod

ENGINE_VERSION = "0.1.0"

_DAYS_PER_YEAR = 365.25


def primary_period(use_periods: Sequence[UsePeriod]) -> UsePeriod | None:
    """The current period whose lease drives the building-level valuation.

    The first current period carrying a lease wins, else the first current
    period, else ``None``.
    """
    current = [p for p in use_periods if p.is_current]
    for period in current:
        if period.has_lease:
            return period
    return current[0] if current else None


def remaining_lease_years(
    period: UsePeriod | None, as_of: date, defaults: GlobalDefaults
) -> float:
    """Estimate the years left on a period's lease as of ``as_of``."""
    if period is None:
        return defaults.default_lease_years
    if period.lease_years is not None:
        if period.lease_start is None:
            return max(period.lease_years, 0.0)
        elapsed = max((as_of - period.lease_start).days / _DAYS_PER_YEAR, 0.0)
        return max(period.lease_years - elapsed, 0.0)
    if period.end_date is not None:
        return max((period.end_date - as_of).days / _DAYS_PER_YEAR, 0.0)
    return defaults.default_lease_years


class ValuationEngine:
    """Builds the composed valuation view for one building.

    Args:
        defaults: Global defaults for cap rates, growth and pipeline value.

    Example::

        engine = ValuationEngine(GlobalDefaults())
        view = engine.compose(building, use_periods, as_of=date.today())
        view.valuation.results.adjusted_value
    """

    def __init__(
        self,
        defaults: GlobalDefaults,
        resolver: FactorResolver | None = None,
        calculator: ValuationCalculator | None = None,
        allocator: CapacityAllocator | None = None,
    ) -> None:
        self._defaults = defaults
        self._deriver = AutoFactorDeriver(defaults)
        self._resolver = resolver or FactorResolver()
        self._calculator = calculator or ValuationCalculator()
        self._allocator = allocator or CapacityAllocator()

    @property
    def defaults(self) -> GlobalDefaults:
        return self._defaults

    @property
    def allocator(self) -> CapacityAllocator:
        return self._allocator

    def valuation_inputs(self, building: Building) -> ValuationInputs:
        """Pair each global cap-rate default with the building's override."""
        stored = building.valuation_overrides
        return ValuationInputs(
            cap_rate=Override(auto=self._defaults.hpc_cap_rate, override=stored.cap_rate),
            exit_cap_rate=Override(
                auto=self._defaults.hpc_exit_cap_rate, override=stored.exit_cap_rate
            ),
            terminal_growth_rate=Override(
                auto=self._defaults.terminal_growth_rate,
                override=stored.terminal_growth_rate,
            ),
            discount_rate=Override(
                auto=self._defaults.discount_rate, override=stored.discount_rate
            ),
            renewal_probability=self._defaults.renewal_probability,
        )

    def compose(
        self,
        building: Building,
        use_periods: Sequence[UsePeriod],
        *,
        as_of: date,
        site: Site | None = None,
        campus: Campus | None = None,
        site_buildings: Sequence[Building] = (),
    ) -> ValuationView:
        """Compose the full valuation view of a building.

        Args:
            building: The building to value.
            use_periods: Use periods; those of other buildings are ignored.
            as_of: Valuation date for energization and remaining-term math.
            site: The building's site, echoed on the view.
            campus: The building's campus, echoed on the view.
            site_buildings: Every building on the same site, used for the
                site-size factor. The building itself is always counted.

        Returns:
            The composed view. Never raises for well-formed input.
        """
        periods = [p for p in use_periods if p.building_id == building.id]
        primary = primary_period(periods)

        # 1. Factors
        others = [b for b in site_buildings if b.id != building.id]
        site_total_mw = sum(b.it_mw or 0.0 for b in [building, *others])
        autos = self._deriver.derive(building, primary, site_total_mw, as_of)
        factor_details = self._resolver.resolve_all(autos, overrides_for(building))
        combined, factor_degeneracies = self._resolver.combined_factor(factor_details)

        # 2. Valuation
        inputs = self.valuation_inputs(building)
        rates = inputs.resolve()
        remaining = remaining_lease_years(primary, as_of, self._defaults)
        lease = LeaseInputs.from_use_period(primary) if primary else LeaseInputs()
        results = self._calculator.calculate(
            lease, rates, combined, inputs.renewal_probability, remaining
        )
        if factor_degeneracies:
            results = results.model_copy(
                update={"degeneracies": factor_degeneracies + results.degeneracies}
            )

        current = [p for p in periods if p.is_current]
        period_valuations: list[PeriodValuation] = []
        if len(current) > 1:
            for period in current:
                breakdown = self._calculator.calculate(
                    LeaseInputs.from_use_period(period),
                    rates,
                    combined,
                    inputs.renewal_probability,
                    remaining_lease_years(period, as_of, self._defaults),
                )
                period_valuations.append(
                    PeriodValuation(
                        use_period_id=period.id,
                        use_type=period.use_type,
                        tenant=period.tenant,
                        mw=self._allocator.effective_mw(period, building, periods),
                        breakdown=breakdown,
                    )
                )
            total_valuation = sum(pv.breakdown.adjusted_value for pv in period_valuations)
        else:
            total_valuation = results.adjusted_value

        # 3. Allocation
        allocation = self._allocator.allocation(building, periods)
        pipeline_value = (
            allocation.unallocated_mw * self._defaults.mw_value_hpc_uncontracted * combined
        )
        if not math.isfinite(pipeline_value):
            pipeline_value = 0.0

        return ValuationView(
            building=building,
            site=site,
            campus=campus,
            use_periods=periods,
            factor_details=factor_details,
            combined_factor=combined,
            global_factors=self._defaults,
            valuation=ValuationSection(inputs=inputs, results=results),
            capacity_allocation=allocation,
            period_valuations=period_valuations,
            total_valuation=total_valuation,
            pipeline_value=pipeline_value,
            remaining_lease_years=remaining,
            as_of=as_of,
        )
