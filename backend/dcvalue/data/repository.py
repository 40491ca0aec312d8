"""In-memory repository for buildings and their use periods.

Stands in for the persistence layer. Reads hand out copies so callers can
never mutate stored records by accident. Writes that depend on a prior
read run inside ``transaction()`` and are serialized.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

from dcvalue.exceptions import NotFoundError
from dcvalue.models.building import Building, Campus, Site, UsePeriod
from dcvalue.models.enums import UseType

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class BuildingRepository:
    """Stores sites, campuses, buildings and use periods keyed by id.

    A reentrant lock keeps each read or write atomic. Callers that must
    check and then write (e.g. "never delete the last use period") wrap the
    whole sequence in ``transaction()``.
    """

    def __init__(
        self,
        sites: Iterable[Site] = (),
        campuses: Iterable[Campus] = (),
        buildings: Iterable[Building] = (),
        use_periods: Iterable[UsePeriod] = (),
    ) -> None:
        self._lock = threading.RLock()
        self._sites: dict[str, Site] = {s.id: s for s in sites}
        self._campuses: dict[str, Campus] = {c.id: c for c in campuses}
        self._buildings: dict[str, Building] = {b.id: b for b in buildings}
        self._use_periods: dict[str, UsePeriod] = {p.id: p for p in use_periods}

    # ------------------------------------------------------------------
    # Sites and campuses
    # ------------------------------------------------------------------

    def add_site(self, site: Site) -> Site:
        with self._lock:
            self._sites[site.id] = site.model_copy(deep=True)
        return site

    def add_campus(self, campus: Campus) -> Campus:
        with self._lock:
            self._campuses[campus.id] = campus.model_copy(deep=True)
        return campus

    def get_site(self, site_id: str) -> Site | None:
        with self._lock:
            site = self._sites.get(site_id)
            return site.model_copy(deep=True) if site else None

    def get_campus(self, campus_id: str) -> Campus | None:
        with self._lock:
            campus = self._campuses.get(campus_id)
            return campus.model_copy(deep=True) if campus else None

    # ------------------------------------------------------------------
    # Buildings
    # ------------------------------------------------------------------

    def add_building(
        self, building: Building, initial_period: UsePeriod | None = None
    ) -> Building:
        """Store a building together with its first use period.

        Without ``initial_period`` the building starts with one current,
        uncontracted period covering its whole capacity.
        """
        period = initial_period or UsePeriod(
            building_id=building.id,
            use_type=UseType.UNCONTRACTED,
            is_current=True,
        )
        if period.building_id != building.id:
            msg = f"Initial use period belongs to building {period.building_id}"
            raise ValueError(msg)
        with self._lock:
            self._buildings[building.id] = building.model_copy(deep=True)
            self._use_periods[period.id] = period.model_copy(deep=True)
        return building

    def get_building(self, building_id: str) -> Building:
        with self._lock:
            building = self._buildings.get(building_id)
            if building is None:
                msg = f"Building '{building_id}' not found"
                raise NotFoundError(msg)
            return building.model_copy(deep=True)

    def list_buildings(self) -> list[Building]:
        with self._lock:
            return [b.model_copy(deep=True) for b in self._buildings.values()]

    def site_buildings(self, building: Building) -> list[Building]:
        """All buildings on the same site as ``building`` (itself included)."""
        with self._lock:
            campus = self._campuses.get(building.campus_id)
            if campus is None:
                return [building.model_copy(deep=True)]
            campus_ids = {
                c.id for c in self._campuses.values() if c.site_id == campus.site_id
            }
            return [
                b.model_copy(deep=True)
                for b in self._buildings.values()
                if b.campus_id in campus_ids
            ]

    def save_building(self, building: Building) -> Building:
        with self._lock:
            if building.id not in self._buildings:
                msg = f"Building '{building.id}' not found"
                raise NotFoundError(msg)
            self._buildings[building.id] = building.model_copy(deep=True)
        return building

    # ------------------------------------------------------------------
    # Use periods
    # ------------------------------------------------------------------

    def use_periods_for(self, building_id: str) -> list[UsePeriod]:
        """Use periods of a building in insertion order."""
        with self._lock:
            return [
                p.model_copy(deep=True)
                for p in self._use_periods.values()
                if p.building_id == building_id
            ]

    def get_use_period(self, use_period_id: str) -> UsePeriod:
        with self._lock:
            period = self._use_periods.get(use_period_id)
            if period is None:
                msg = f"Use period '{use_period_id}' not found"
                raise NotFoundError(msg)
            return period.model_copy(deep=True)

    def apply_use_period_changes(
        self,
        upserts: Iterable[UsePeriod] = (),
        deletions: Iterable[str] = (),
    ) -> None:
        """Store and delete use periods in one atomic step."""
        with self._lock:
            for period in upserts:
                self._use_periods[period.id] = period.model_copy(deep=True)
            for period_id in deletions:
                self._use_periods.pop(period_id, None)

    def apply_building_changes(
        self,
        building: Building,
        upserts: Iterable[UsePeriod] = (),
        deletions: Iterable[str] = (),
    ) -> None:
        """Store a building and its use-period changes in one atomic step.

        Raises:
            NotFoundError: If the building does not exist; nothing is stored.
        """
        with self._lock:
            if building.id not in self._buildings:
                msg = f"Building '{building.id}' not found"
                raise NotFoundError(msg)
            stored = building.model_copy(deep=True)
            periods = [p.model_copy(deep=True) for p in upserts]
            self._buildings[building.id] = stored
            self.apply_use_period_changes(periods, deletions)

    @contextmanager
    def transaction(self) -> Iterator[BuildingRepository]:
        """Hold the repository lock across a read-check-write sequence.

        Other writers wait until the block exits, so a check made inside the
        block still holds when its write lands.
        """
        with self._lock:
            yield self
