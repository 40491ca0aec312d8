"""Tests for auto factor derivation from building and lease attributes."""

from __future__ import annotations

import math
from datetime import date

import pytest

from dcvalue.data.defaults import GlobalDefaults
from dcvalue.data.factor_tables import OTHER_TENANT_SPREAD, SELF_TENANT_SPREAD
from dcvalue.derivation import AutoFactorDeriver
from dcvalue.models.building import Building, UsePeriod
from dcvalue.models.enums import (
    DatacenterTier,
    DevelopmentPhase,
    FactorName,
    LeaseStructure,
    OwnershipStatus,
    PowerAuthority,
)

AS_OF = date(2026, 1, 1)


@pytest.fixture()
def deriver() -> AutoFactorDeriver:
    return AutoFactorDeriver(GlobalDefaults())


def _building(**kwargs: object) -> Building:
    fields: dict[str, object] = {"id": "b1", "campus_id": "c1", "name": "B1", "it_mw": 100.0}
    fields.update(kwargs)
    return Building(**fields)  # type: ignore[arg-type]


def _period(**kwargs: object) -> UsePeriod:
    fields: dict[str, object] = {"building_id": "b1"}
    fields.update(kwargs)
    return UsePeriod(**fields)  # type: ignore[arg-type]


class TestCategoricalLookups:
    def test_operational_ercot_owned_tier_iii(self, deriver: AutoFactorDeriver) -> None:
        building = _building(
            development_phase=DevelopmentPhase.OPERATIONAL,
            grid=PowerAuthority.ERCOT,
            ownership_status=OwnershipStatus.OWNED,
            datacenter_tier=DatacenterTier.TIER_III,
        )
        autos = deriver.derive(building, None, 100.0, AS_OF)
        assert autos[FactorName.PHASE_PROBABILITY] == 1.0
        assert autos[FactorName.POWER_AUTHORITY] == 1.05
        assert autos[FactorName.OWNERSHIP] == 1.0
        assert autos[FactorName.DATACENTER_TIER] == 1.0
        assert autos[FactorName.REGULATORY_RISK] == 1.0
        assert autos[FactorName.FIDOODLE_FACTOR] == 1.0

    def test_every_factor_present(self, deriver: AutoFactorDeriver) -> None:
        autos = deriver.derive(_building(), None, 0.0, AS_OF)
        assert set(autos) == set(FactorName)

    @pytest.mark.parametrize(
        ("phase", "expected"),
        [
            (DevelopmentPhase.CONSTRUCTION, 0.9),
            (DevelopmentPhase.DEVELOPMENT, 0.7),
            (DevelopmentPhase.EXCLUSIVITY, 0.5),
            (DevelopmentPhase.DILIGENCE, 0.3),
        ],
    )
    def test_phase_probability(
        self, deriver: AutoFactorDeriver, phase: DevelopmentPhase, expected: float
    ) -> None:
        autos = deriver.derive(_building(development_phase=phase), None, 100.0, AS_OF)
        assert autos[FactorName.PHASE_PROBABILITY] == expected

    def test_unknown_categories_are_neutral(self, deriver: AutoFactorDeriver) -> None:
        autos = deriver.derive(_building(), None, 100.0, AS_OF)
        assert autos[FactorName.POWER_AUTHORITY] == 1.0
        assert autos[FactorName.OWNERSHIP] == 1.0
        assert autos[FactorName.DATACENTER_TIER] == 1.0

    def test_lease_structure_from_primary_period(self, deriver: AutoFactorDeriver) -> None:
        period = _period(lease_structure=LeaseStructure.GROSS)
        autos = deriver.derive(_building(), period, 100.0, AS_OF)
        assert autos[FactorName.LEASE_STRUCTURE] == 0.90


class TestSizeMultiplier:
    @pytest.mark.parametrize(
        ("site_mw", "expected"),
        [(750.0, 1.10), (500.0, 1.10), (300.0, 1.00), (100.0, 0.95), (99.9, 0.85), (0.0, 0.85)],
    )
    def test_bands(self, site_mw: float, expected: float) -> None:
        assert AutoFactorDeriver.size_multiplier(site_mw) == expected


class TestTenantCredit:
    def test_known_tenant_is_case_insensitive(self) -> None:
        assert AutoFactorDeriver.tenant_spread("  Microsoft ") == -1.0

    def test_unknown_tenant_uses_other_spread(self) -> None:
        assert AutoFactorDeriver.tenant_spread("Acme Compute") == OTHER_TENANT_SPREAD

    def test_no_tenant_uses_self_spread(self) -> None:
        assert AutoFactorDeriver.tenant_spread(None) == SELF_TENANT_SPREAD
        assert AutoFactorDeriver.tenant_spread("   ") == SELF_TENANT_SPREAD

    def test_multiplier_is_sofr_over_adjusted_rate(self, deriver: AutoFactorDeriver) -> None:
        assert deriver.tenant_credit_multiplier("Microsoft") == pytest.approx(4.3 / 3.3)
        assert deriver.tenant_credit_multiplier("CoreWeave") == pytest.approx(1.0)
        assert deriver.tenant_credit_multiplier(None) == pytest.approx(4.3 / 7.3)

    def test_non_positive_adjusted_rate_is_neutral(self) -> None:
        deriver = AutoFactorDeriver(GlobalDefaults(sofr_rate=0.5))
        assert deriver.tenant_credit_multiplier("Google") == 1.0


class TestEnergization:
    def test_already_energized(self, deriver: AutoFactorDeriver) -> None:
        assert deriver.energization_multiplier(date(2025, 1, 1), AS_OF) == 1.0

    def test_unknown_date(self, deriver: AutoFactorDeriver) -> None:
        assert deriver.energization_multiplier(None, AS_OF) == 1.0

    def test_exponential_decay(self, deriver: AutoFactorDeriver) -> None:
        two_years_out = date(2028, 1, 1)
        years = (two_years_out - AS_OF).days / 365.25
        assert deriver.energization_multiplier(two_years_out, AS_OF) == pytest.approx(
            math.exp(-0.15 * years)
        )

    def test_later_energization_is_worth_less(self, deriver: AutoFactorDeriver) -> None:
        sooner = deriver.energization_multiplier(date(2027, 1, 1), AS_OF)
        later = deriver.energization_multiplier(date(2030, 1, 1), AS_OF)
        assert 0 < later < sooner < 1
