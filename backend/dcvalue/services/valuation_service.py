"""Valuation service: the read/write operations consumed by the API.

Every operation loads what it needs from the repository, runs the pure
engine/allocator code, and persists the result. Update and preview share
``apply_details_update`` so a preview shows exactly what a save would.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Any, TypeVar

import pydantic

from dcvalue.calculator import annual_lease_figures, normalize_noi_pct
from dcvalue.engine import primary_period
from dcvalue.events import EventBus, ValuationChanged
from dcvalue.exceptions import ValidationError
from dcvalue.factors import NEUTRAL_FACTOR
from dcvalue.models.requests import (
    UsePeriodCreate,
    UsePeriodUpdate,
    ValuationDetailsUpdate,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from dcvalue.data.repository import BuildingRepository
    from dcvalue.engine import ValuationEngine
    from dcvalue.models.building import Building, UsePeriod
    from dcvalue.models.requests import LeaseUpdate
    from dcvalue.models.valuation import ValuationView

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=pydantic.BaseModel)


def _parse(model: type[_M], payload: _M | Mapping[str, Any]) -> _M:
    """Accept a model instance or a raw mapping; raise our ValidationError."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        msg = f"Invalid {model.__name__}: {exc}"
        raise ValidationError(msg) from exc


def _apply_lease(building: Building, period: UsePeriod, lease: LeaseUpdate) -> UsePeriod:
    changes = lease.model_dump(include=lease.model_fields_set)
    if "lease_structure" in changes and changes["lease_structure"] is None:
        del changes["lease_structure"]
    if changes.get("noi_pct") is not None:
        changes["noi_pct"] = normalize_noi_pct(changes["noi_pct"])
    start = changes.get("lease_start")
    if start is not None and building.energization_date and start < building.energization_date:
        msg = (
            f"lease_start {start} cannot be before energization date "
            f"{building.energization_date}"
        )
        raise ValidationError(msg)

    updated = period.model_copy(update=changes)
    annual_rev, noi_annual = annual_lease_figures(
        updated.lease_value_m, updated.lease_years, updated.noi_pct
    )
    if annual_rev is None:
        # No lease value: keep any directly entered annual revenue
        annual_rev = updated.annual_rev_m
        if annual_rev is not None and updated.noi_pct is not None:
            noi_annual = annual_rev * updated.noi_pct
    return updated.model_copy(update={"annual_rev_m": annual_rev, "noi_annual_m": noi_annual})


def apply_details_update(
    building: Building,
    use_periods: Sequence[UsePeriod],
    update: ValuationDetailsUpdate,
) -> tuple[Building, list[UsePeriod]]:
    """Apply a partial valuation-details update to copies of the records.

    Only sub-objects present on ``update`` are touched, and within them
    only the fields the caller sent. Lease edits land on the building's
    primary current use period.

    Returns:
        The updated building and the full, updated list of its use periods.

    Raises:
        ValidationError: If a lease edit has no current use period to land on
            or its start date precedes energization.
    """
    building_changes: dict[str, Any] = {}
    if update.valuation is not None:
        building_changes["valuation_overrides"] = building.valuation_overrides.model_copy(
            update=update.valuation.model_dump(include=update.valuation.model_fields_set)
        )
    if update.factors is not None:
        factor_changes = update.factors.model_dump(include=update.factors.model_fields_set)
        if "fidoodle_factor" in factor_changes:
            fidoodle = factor_changes.pop("fidoodle_factor")
            building_changes["fidoodle_factor"] = (
                NEUTRAL_FACTOR if fidoodle is None else fidoodle
            )
        building_changes["factor_overrides"] = building.factor_overrides.model_copy(
            update=factor_changes
        )
    updated_building = building.model_copy(update=building_changes, deep=True)

    periods = [p.model_copy(deep=True) for p in use_periods]
    if update.lease is not None:
        target = primary_period(periods)
        if target is None:
            msg = f"Building {building.id} has no current use period to hold lease terms"
            raise ValidationError(msg)
        edited = _apply_lease(updated_building, target, update.lease)
        periods = [edited if p.id == target.id else p for p in periods]

    return updated_building, periods


class ValuationService:
    """Read and write operations over buildings, factors and use periods.

    Args:
        repository: Persistence collaborator.
        engine: Composes valuation views.
        events: Receives a ``ValuationChanged`` after every successful write.
        today: Clock used for the ``as_of`` date of each valuation.
    """

    def __init__(
        self,
        repository: BuildingRepository,
        engine: ValuationEngine,
        events: EventBus | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._repository = repository
        self._engine = engine
        self._events = events or EventBus()
        self._today = today

    @property
    def events(self) -> EventBus:
        return self._events

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_valuation(self, building_id: str, as_of: date | None = None) -> ValuationView:
        """Compose the authoritative valuation view of a stored building.

        Raises:
            NotFoundError: If the building does not exist.
        """
        building = self._repository.get_building(building_id)
        periods = self._repository.use_periods_for(building_id)
        return self._compose(building, periods, as_of)

    def preview_valuation(
        self,
        building_id: str,
        update: ValuationDetailsUpdate | Mapping[str, Any],
        as_of: date | None = None,
    ) -> ValuationView:
        """Show the view an update would produce, without saving or notifying."""
        details = _parse(ValuationDetailsUpdate, update)
        building = self._repository.get_building(building_id)
        periods = self._repository.use_periods_for(building_id)
        building, periods = apply_details_update(building, periods, details)
        return self._compose(building, periods, as_of)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def update_valuation_details(
        self,
        building_id: str,
        update: ValuationDetailsUpdate | Mapping[str, Any],
    ) -> ValuationView:
        """Persist lease, valuation-input and factor edits; return the new view."""
        details = _parse(ValuationDetailsUpdate, update)
        with self._repository.transaction() as repo:
            building = repo.get_building(building_id)
            periods = repo.use_periods_for(building_id)
            building, periods = apply_details_update(building, periods, details)
            repo.apply_building_changes(
                building, upserts=periods if details.lease is not None else ()
            )
        logger.info(
            "Updated valuation details for building %s (%s)",
            building_id,
            ", ".join(sorted(details.model_fields_set)) or "no fields",
        )
        self._notify(building_id, "valuation_details_updated")
        return self._compose(building, periods, None)

    def create_use_period(self, request: UsePeriodCreate | Mapping[str, Any]) -> UsePeriod:
        """Add a split, a transition or a replacement use period.

        Raises:
            NotFoundError: If the building does not exist.
            ValidationError: If the request is malformed or over-allocates.
        """
        create = _parse(UsePeriodCreate, request)
        with self._repository.transaction() as repo:
            building = repo.get_building(create.building_id)
            periods = repo.use_periods_for(building.id)
            change = self._engine.allocator.add_use_period(building, periods, create)
            repo.apply_use_period_changes(
                upserts=[change.period], deletions=change.superseded_ids
            )
        logger.info(
            "Created use period %s on building %s (%s, %s MW, superseded %d)",
            change.period.id,
            building.id,
            change.period.allocation_method,
            "all" if change.period.mw_allocation is None else f"{change.period.mw_allocation:g}",
            len(change.superseded_ids),
        )
        self._notify(building.id, "use_period_created")
        return change.period

    def update_use_period(
        self, use_period_id: str, update: UsePeriodUpdate | Mapping[str, Any]
    ) -> UsePeriod:
        """Edit one use period; promoting a transition is ``is_current=True``.

        Promoting a whole-building transition ends the building's other
        current periods in the same step.
        """
        edit = _parse(UsePeriodUpdate, update)
        with self._repository.transaction() as repo:
            target = repo.get_use_period(use_period_id)
            building = repo.get_building(target.building_id)
            periods = repo.use_periods_for(building.id)
            change = self._engine.allocator.update_use_period(building, periods, target, edit)
            repo.apply_use_period_changes(
                upserts=[change.period], deletions=change.superseded_ids
            )
        logger.info(
            "Updated use period %s on building %s (superseded %d)",
            use_period_id,
            building.id,
            len(change.superseded_ids),
        )
        self._notify(building.id, "use_period_updated")
        return change.period

    def delete_use_period(self, use_period_id: str) -> None:
        """Delete a use period.

        The last-period check and the delete happen under one transaction,
        so concurrent deletes cannot leave a building with no use periods.

        Raises:
            NotFoundError: If the use period does not exist.
            LastPeriodError: If it is the building's only use period.
        """
        with self._repository.transaction() as repo:
            target = repo.get_use_period(use_period_id)
            periods = repo.use_periods_for(target.building_id)
            self._engine.allocator.delete_use_period(target, periods)
            repo.apply_use_period_changes(deletions=[use_period_id])
        logger.info("Deleted use period %s on building %s", use_period_id, target.building_id)
        self._notify(target.building_id, "use_period_deleted")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _compose(
        self,
        building: Building,
        periods: Sequence[UsePeriod],
        as_of: date | None,
    ) -> ValuationView:
        campus = self._repository.get_campus(building.campus_id)
        site = self._repository.get_site(campus.site_id) if campus else None
        return self._engine.compose(
            building,
            periods,
            as_of=as_of or self._today(),
            site=site,
            campus=campus,
            site_buildings=self._repository.site_buildings(building),
        )

    def _notify(self, building_id: str, reason: str) -> None:
        self._events.publish(ValuationChanged(building_id=building_id, reason=reason))
