"""Seed portfolio for the dcvalue engine.

A small, fictional portfolio covering the common shapes: a fully leased
operational building, a split building with unallocated capacity, and a
pre-energization development building with a planned transition.
Ids are fixed so the API and tests can address records directly.
"""

from datetime import date

from dcvalue.data.repository import BuildingRepository
from dcvalue.models.building import Building, Campus, Site, UsePeriod
from dcvalue.models.enums import (
    Confidence,
    DatacenterTier,
    DevelopmentPhase,
    LeaseStructure,
    OwnershipStatus,
    PowerAuthority,
    UseType,
)

SEED_SITES: list[Site] = [
    Site(id="site-abilene", name="Abilene", country="US"),
]

SEED_CAMPUSES: list[Campus] = [
    Campus(id="campus-abilene-north", site_id="site-abilene", name="Abilene North"),
]

SEED_BUILDINGS: list[Building] = [
    Building(
        id="bldg-a1",
        campus_id="campus-abilene-north",
        name="Building A1",
        gross_mw=130.0,
        it_mw=100.0,
        pue=1.3,
        grid=PowerAuthority.ERCOT,
        ownership_status=OwnershipStatus.OWNED,
        development_phase=DevelopmentPhase.OPERATIONAL,
        confidence=Confidence.HIGH,
        datacenter_tier=DatacenterTier.TIER_III,
        energization_date=date(2024, 6, 1),
    ),
    Building(
        id="bldg-a2",
        campus_id="campus-abilene-north",
        name="Building A2",
        gross_mw=156.0,
        it_mw=120.0,
        pue=1.3,
        grid=PowerAuthority.ERCOT,
        ownership_status=OwnershipStatus.OWNED,
        development_phase=DevelopmentPhase.CONSTRUCTION,
        confidence=Confidence.MEDIUM,
        datacenter_tier=DatacenterTier.TIER_III,
        energization_date=date(2025, 3, 1),
    ),
    Building(
        id="bldg-a3",
        campus_id="campus-abilene-north",
        name="Building A3",
        gross_mw=260.0,
        it_mw=200.0,
        pue=1.3,
        grid=PowerAuthority.ERCOT,
        ownership_status=OwnershipStatus.LONG_TERM_LEASE,
        development_phase=DevelopmentPhase.DEVELOPMENT,
        confidence=Confidence.LOW,
        energization_date=date(2028, 1, 1),
    ),
]

SEED_USE_PERIODS: list[UsePeriod] = [
    # A1: one current lease over the whole building
    UsePeriod(
        id="up-a1-microsoft",
        building_id="bldg-a1",
        use_type=UseType.HPC_AI_HOSTING,
        tenant="Microsoft",
        is_current=True,
        start_date=date(2024, 7, 1),
        lease_value_m=100.0,
        lease_years=10.0,
        annual_rev_m=10.0,
        noi_pct=0.85,
        noi_annual_m=8.5,
        lease_start=date(2024, 7, 1),
        lease_structure=LeaseStructure.NNN,
    ),
    # A2: two splits leaving 20 MW unallocated
    UsePeriod(
        id="up-a2-coreweave",
        building_id="bldg-a2",
        use_type=UseType.GPU_CLOUD,
        tenant="CoreWeave",
        is_current=True,
        mw_allocation=60.0,
        start_date=date(2025, 4, 1),
        lease_value_m=90.0,
        lease_years=5.0,
        annual_rev_m=18.0,
        noi_pct=0.8,
        noi_annual_m=14.4,
        lease_start=date(2025, 4, 1),
        allocation_method="split",
    ),
    UsePeriod(
        id="up-a2-mining",
        building_id="bldg-a2",
        use_type=UseType.BTC_MINING,
        is_current=True,
        mw_allocation=40.0,
        start_date=date(2025, 3, 1),
        allocation_method="split",
    ),
    # A3: uncontracted today, planned HPC conversion later
    UsePeriod(
        id="up-a3-current",
        building_id="bldg-a3",
        use_type=UseType.UNCONTRACTED,
        is_current=True,
    ),
    UsePeriod(
        id="up-a3-planned",
        building_id="bldg-a3",
        use_type=UseType.HPC_AI_PLANNED,
        is_current=False,
        start_date=date(2028, 1, 1),
        allocation_method="transition",
    ),
]


def build_seed_repository() -> BuildingRepository:
    """Create a fresh repository holding copies of the seed portfolio."""
    return BuildingRepository(
        sites=[s.model_copy(deep=True) for s in SEED_SITES],
        campuses=[c.model_copy(deep=True) for c in SEED_CAMPUSES],
        buildings=[b.model_copy(deep=True) for b in SEED_BUILDINGS],
        use_periods=[p.model_copy(deep=True) for p in SEED_USE_PERIODS],
    )
