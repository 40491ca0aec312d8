"""Capacity allocation across a building's use periods.

A building's IT capacity is shared by its *current* use periods. A period
with an explicit ``mw_allocation`` claims that many MW; a period with no
allocation flexes to absorb whatever the explicit ones leave. Future
periods ("transitions") never count toward current totals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pydantic

from dcvalue.calculator import annual_lease_figures, normalize_noi_pct
from dcvalue.exceptions import LastPeriodError, ValidationError
from dcvalue.models.building import UsePeriod
from dcvalue.models.valuation import CapacityAllocation

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from dcvalue.models.building import Building
    from dcvalue.models.requests import UsePeriodCreate, UsePeriodUpdate

logger = logging.getLogger(__name__)

# Tolerance for float comparisons against capacity
_MW_EPSILON = 1e-6


@dataclass(frozen=True)
class AllocationChange:
    """Outcome of a use-period write: the period to store and the ids to remove."""

    period: UsePeriod
    superseded_ids: list[str] = field(default_factory=list)


def _noi_fraction(noi_pct: float | None) -> float | None:
    return None if noi_pct is None else normalize_noi_pct(noi_pct)


class CapacityAllocator:
    """Computes allocation metrics and validates use-period mutations.

    Holds no state: every method receives the building and its current set
    of use periods and returns a result for the caller to persist.
    """

    def allocation(
        self, building: Building, use_periods: Sequence[UsePeriod]
    ) -> CapacityAllocation:
        """Compute allocated/unallocated capacity over current periods."""
        total = building.it_mw or 0.0
        current = [p for p in use_periods if p.is_current]
        explicit = sum(p.mw_allocation for p in current if p.mw_allocation is not None)
        has_flexible = any(p.mw_allocation is None for p in current)

        allocated = max(explicit, total) if has_flexible else explicit
        warnings: list[str] = []
        over_allocated = explicit > total + _MW_EPSILON
        if over_allocated:
            msg = (
                f"Current use periods allocate {explicit:g} MW but building "
                f"{building.id} has {total:g} MW of IT capacity"
            )
            warnings.append(msg)
            logger.warning(msg)

        return CapacityAllocation(
            total_it_mw=total,
            allocated_mw=allocated,
            unallocated_mw=max(total - allocated, 0.0),
            explicit_allocated_mw=explicit,
            available_mw=max(total - explicit, 0.0),
            current_period_count=len(current),
            over_allocated=over_allocated,
            warnings=warnings,
        )

    def effective_mw(
        self, period: UsePeriod, building: Building, use_periods: Sequence[UsePeriod]
    ) -> float:
        """MW a period actually holds; flexible periods share what is left."""
        if period.mw_allocation is not None:
            return period.mw_allocation
        if not period.is_current:
            return building.it_mw or 0.0
        flexible = [p for p in use_periods if p.is_current and p.mw_allocation is None]
        available = self.allocation(building, use_periods).available_mw
        return available / len(flexible) if flexible else 0.0

    def add_use_period(
        self,
        building: Building,
        use_periods: Sequence[UsePeriod],
        request: UsePeriodCreate,
    ) -> AllocationChange:
        """Validate and build a new use period.

        ``is_split=True`` adds a concurrent current allocation. ``is_split=False``
        adds a future transition that does not touch current totals, unless
        ``is_current=True`` is requested, in which case the new period
        replaces every current period.

        Raises:
            ValidationError: If the request is malformed or asks for more
                capacity than is unallocated. Omitting ``mw_allocation``
                always passes the capacity check.
        """
        if request.building_id != building.id:
            msg = f"Use period targets building {request.building_id}, not {building.id}"
            raise ValidationError(msg)

        is_current = request.resolved_is_current
        mw = request.mw_allocation
        self._check_mw(mw)
        self._check_dates(building, request.start_date, request.end_date, request.lease_start)
        total = building.it_mw or 0.0

        superseded: list[str] = []
        if is_current and request.is_split:
            available = self.allocation(building, use_periods).available_mw
            if mw is not None and mw > available + _MW_EPSILON:
                msg = (
                    f"Requested {mw:g} MW exceeds the {available:g} MW of unallocated "
                    f"capacity on building {building.id}"
                )
                raise ValidationError(msg)
        else:
            if mw is not None and mw > total + _MW_EPSILON:
                msg = f"Requested {mw:g} MW exceeds building capacity of {total:g} MW"
                raise ValidationError(msg)
            if is_current:
                superseded = [p.id for p in use_periods if p.is_current]
            elif request.start_date is None:
                msg = "A transition needs a start_date"
                raise ValidationError(msg)

        annual_rev, noi_annual = annual_lease_figures(
            request.lease_value_m, request.lease_years, request.noi_pct
        )
        created = UsePeriod(
            building_id=building.id,
            use_type=request.use_type,
            tenant=request.tenant,
            is_current=is_current,
            mw_allocation=mw,
            start_date=request.start_date,
            end_date=request.end_date,
            lease_value_m=request.lease_value_m,
            lease_years=request.lease_years,
            annual_rev_m=annual_rev,
            noi_pct=_noi_fraction(request.noi_pct),
            noi_annual_m=noi_annual,
            lease_start=request.lease_start or request.start_date,
            lease_structure=request.lease_structure,
            allocation_method="split" if request.is_split else "transition",
        )
        return AllocationChange(period=created, superseded_ids=superseded)

    def update_use_period(
        self,
        building: Building,
        use_periods: Sequence[UsePeriod],
        target: UsePeriod,
        update: UsePeriodUpdate,
    ) -> AllocationChange:
        """Apply a partial edit, re-checking capacity if the period is current.

        Setting ``is_current=True`` on a transition promotes it. A promoted
        transition that covers the whole building (no allocation, or the full
        IT capacity) ends every other current period, as a replacement does;
        a smaller one joins the current periods as a split.

        Raises:
            ValidationError: If the edited record is invalid (e.g. ``null``
                for a required field) or over-allocates.
        """
        changes = update.model_dump(include=update.model_fields_set)
        if changes.get("noi_pct") is not None:
            changes["noi_pct"] = _noi_fraction(changes["noi_pct"])
        try:
            updated = UsePeriod.model_validate({**target.model_dump(), **changes})
        except pydantic.ValidationError as exc:
            msg = f"Invalid edit of use period {target.id}: {exc}"
            raise ValidationError(msg) from exc

        self._check_mw(updated.mw_allocation)
        # Only dates being changed are held to the energization guard
        self._check_dates(
            building,
            changes.get("start_date"),
            changes.get("end_date"),
            changes.get("lease_start"),
        )
        if updated.start_date and updated.end_date and updated.end_date < updated.start_date:
            msg = f"end_date {updated.end_date} is before start_date {updated.start_date}"
            raise ValidationError(msg)

        total = building.it_mw or 0.0
        superseded: list[str] = []
        promoted = updated.is_current and not target.is_current
        if promoted and self._covers_building(updated.mw_allocation, total):
            superseded = [p.id for p in use_periods if p.is_current and p.id != target.id]
            if updated.mw_allocation is not None and updated.mw_allocation > total + _MW_EPSILON:
                msg = f"Allocation of {updated.mw_allocation:g} MW exceeds building capacity"
                raise ValidationError(msg)
        elif updated.is_current and updated.mw_allocation is not None:
            others = sum(
                p.mw_allocation
                for p in use_periods
                if p.is_current and p.id != target.id and p.mw_allocation is not None
            )
            available = max(total - others, 0.0)
            if updated.mw_allocation > available + _MW_EPSILON:
                msg = (
                    f"Allocation of {updated.mw_allocation:g} MW exceeds the "
                    f"{available:g} MW left by other current use periods"
                )
                raise ValidationError(msg)

        annual_rev, noi_annual = annual_lease_figures(
            updated.lease_value_m, updated.lease_years, updated.noi_pct
        )
        edited = updated.model_copy(
            update={"annual_rev_m": annual_rev, "noi_annual_m": noi_annual}
        )
        return AllocationChange(period=edited, superseded_ids=superseded)

    def delete_use_period(
        self, target: UsePeriod, use_periods: Sequence[UsePeriod]
    ) -> list[UsePeriod]:
        """Return the building's remaining periods once ``target`` is removed.

        Raises:
            LastPeriodError: If ``target`` is the building's only use period.
        """
        siblings = [p for p in use_periods if p.building_id == target.building_id]
        if len(siblings) <= 1:
            msg = f"Cannot delete the only use period of building {target.building_id}"
            raise LastPeriodError(msg)
        return [p for p in siblings if p.id != target.id]

    @staticmethod
    def _covers_building(mw: float | None, total: float) -> bool:
        return mw is None or abs(mw - total) <= _MW_EPSILON

    @staticmethod
    def _check_mw(mw: float | None) -> None:
        if mw is not None and mw < 0:
            msg = f"mw_allocation must not be negative, got {mw:g}"
            raise ValidationError(msg)

    @staticmethod
    def _check_dates(
        building: Building,
        start_date: date | None,
        end_date: date | None,
        lease_start: date | None,
    ) -> None:
        if start_date and end_date and end_date < start_date:
            msg = f"end_date {end_date} is before start_date {start_date}"
            raise ValidationError(msg)
        energized = building.energization_date
        if energized is None:
            return
        for label, value in (("start_date", start_date), ("lease_start", lease_start)):
            if value is not None and value < energized:
                msg = f"{label} {value} cannot be before energization date {energized}"
                raise ValidationError(msg)
