"""Tests for capacity allocation and use-period validation."""

from __future__ import annotations

from datetime import date

import pydantic
import pytest

from dcvalue.allocation import CapacityAllocator
from dcvalue.exceptions import LastPeriodError, ValidationError
from dcvalue.models.building import Building, UsePeriod
from dcvalue.models.enums import UseType
from dcvalue.models.requests import UsePeriodCreate, UsePeriodUpdate


@pytest.fixture()
def allocator() -> CapacityAllocator:
    return CapacityAllocator()


# ---------------------------------------------------------------------------
# Helper builders
# ---------------------------------------------------------------------------


def _building(it_mw: float | None = 100.0, energization_date: date | None = None) -> Building:
    return Building(
        id="b1",
        campus_id="c1",
        name="B1",
        it_mw=it_mw,
        energization_date=energization_date,
    )


def _period(
    period_id: str,
    mw: float | None = None,
    *,
    is_current: bool = True,
    tenant: str | None = None,
) -> UsePeriod:
    return UsePeriod(
        id=period_id,
        building_id="b1",
        use_type=UseType.HPC_AI_HOSTING,
        tenant=tenant,
        is_current=is_current,
        mw_allocation=mw,
    )


def _split(mw: float | None, **kwargs: object) -> UsePeriodCreate:
    return UsePeriodCreate(building_id="b1", is_split=True, mw_allocation=mw, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Allocation metrics
# ---------------------------------------------------------------------------


class TestAllocation:
    def test_explicit_splits(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1", 60.0), _period("p2", 30.0)]
        result = allocator.allocation(_building(), periods)
        assert result.total_it_mw == 100.0
        assert result.allocated_mw == 90.0
        assert result.unallocated_mw == 10.0
        assert result.available_mw == 10.0
        assert result.current_period_count == 2
        assert not result.over_allocated

    def test_null_allocation_takes_whole_building(self, allocator: CapacityAllocator) -> None:
        result = allocator.allocation(_building(), [_period("p1")])
        assert result.allocated_mw == 100.0
        assert result.unallocated_mw == 0.0
        assert result.available_mw == 100.0

    def test_flexible_period_absorbs_the_remainder(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1"), _period("p2", 40.0)]
        result = allocator.allocation(_building(), periods)
        assert result.allocated_mw == 100.0
        assert result.unallocated_mw == 0.0
        assert result.explicit_allocated_mw == 40.0
        assert allocator.effective_mw(periods[0], _building(), periods) == 60.0

    def test_future_periods_do_not_count(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1", 50.0), _period("p2", 50.0, is_current=False)]
        result = allocator.allocation(_building(), periods)
        assert result.allocated_mw == 50.0
        assert result.current_period_count == 1

    def test_invariant_allocated_plus_unallocated(self, allocator: CapacityAllocator) -> None:
        for periods in (
            [_period("p1", 10.0)],
            [_period("p1", 10.0), _period("p2", 25.5)],
            [_period("p1")],
        ):
            result = allocator.allocation(_building(), periods)
            assert result.allocated_mw + result.unallocated_mw == pytest.approx(100.0)

    def test_over_allocation_is_a_warning(
        self, allocator: CapacityAllocator, caplog: pytest.LogCaptureFixture
    ) -> None:
        periods = [_period("p1", 80.0), _period("p2", 40.0)]
        with caplog.at_level("WARNING", logger="dcvalue.allocation"):
            result = allocator.allocation(_building(), periods)
        assert result.over_allocated
        assert result.unallocated_mw == 0.0
        assert result.warnings
        assert "120" in caplog.text

    def test_unknown_capacity_counts_as_zero(self, allocator: CapacityAllocator) -> None:
        result = allocator.allocation(_building(it_mw=None), [_period("p1")])
        assert result.total_it_mw == 0.0
        assert result.unallocated_mw == 0.0


# ---------------------------------------------------------------------------
# Creating splits and transitions
# ---------------------------------------------------------------------------


class TestAddSplit:
    def test_split_within_available(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1", 60.0)]
        change = allocator.add_use_period(_building(), periods, _split(40.0))
        assert change.period.mw_allocation == 40.0
        assert change.period.is_current
        assert change.period.allocation_method == "split"
        assert change.superseded_ids == []

    def test_split_exceeding_available_rejected(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1", 60.0), _period("p2", 30.0)]
        with pytest.raises(ValidationError, match="exceeds"):
            allocator.add_use_period(_building(), periods, _split(15.0))

    def test_omitted_allocation_always_passes(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1", 60.0), _period("p2", 40.0)]
        change = allocator.add_use_period(_building(), periods, _split(None))
        assert change.period.mw_allocation is None

    def test_exactly_remaining_capacity(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1", 70.0)]
        change = allocator.add_use_period(_building(), periods, _split(30.0))
        assert change.period.mw_allocation == 30.0

    def test_negative_allocation_rejected(self, allocator: CapacityAllocator) -> None:
        with pytest.raises(ValidationError):
            allocator.add_use_period(_building(), [_period("p1", 10.0)], _split(-5.0))

    def test_wrong_building_rejected(self, allocator: CapacityAllocator) -> None:
        request = UsePeriodCreate(building_id="other", mw_allocation=1.0)
        with pytest.raises(ValidationError):
            allocator.add_use_period(_building(), [], request)

    def test_lease_fields_derived(self, allocator: CapacityAllocator) -> None:
        request = _split(20.0, tenant="Oracle", lease_value_m=50.0, lease_years=5.0, noi_pct=80.0)
        change = allocator.add_use_period(_building(), [_period("p1", 10.0)], request)
        created = change.period
        assert created.noi_pct == pytest.approx(0.8)
        assert created.annual_rev_m == pytest.approx(10.0)
        assert created.noi_annual_m == pytest.approx(8.0)


class TestAddTransition:
    def test_transition_does_not_touch_current(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1")]
        request = UsePeriodCreate(
            building_id="b1", is_split=False, mw_allocation=100.0, start_date=date(2030, 1, 1)
        )
        change = allocator.add_use_period(_building(), periods, request)
        assert not change.period.is_current
        assert change.period.allocation_method == "transition"
        assert change.superseded_ids == []
        assert allocator.allocation(_building(), [*periods, change.period]).allocated_mw == 100.0

    def test_transition_needs_start_date(self, allocator: CapacityAllocator) -> None:
        request = UsePeriodCreate(building_id="b1", is_split=False)
        with pytest.raises(ValidationError, match="start_date"):
            allocator.add_use_period(_building(), [_period("p1")], request)

    def test_transition_bounded_by_building(self, allocator: CapacityAllocator) -> None:
        request = UsePeriodCreate(
            building_id="b1", is_split=False, mw_allocation=150.0, start_date=date(2030, 1, 1)
        )
        with pytest.raises(ValidationError):
            allocator.add_use_period(_building(), [_period("p1")], request)

    def test_replacement_supersedes_current_periods(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1", 50.0), _period("p2", 50.0), _period("f1", is_current=False)]
        request = UsePeriodCreate(building_id="b1", is_split=False, is_current=True)
        change = allocator.add_use_period(_building(), periods, request)
        assert change.period.is_current
        assert sorted(change.superseded_ids) == ["p1", "p2"]


class TestDateGuards:
    def test_end_before_start_rejected(self, allocator: CapacityAllocator) -> None:
        request = _split(None, start_date=date(2027, 1, 1), end_date=date(2026, 1, 1))
        with pytest.raises(ValidationError, match="end_date"):
            allocator.add_use_period(_building(), [], request)

    def test_start_before_energization_rejected(self, allocator: CapacityAllocator) -> None:
        building = _building(energization_date=date(2027, 1, 1))
        request = _split(None, lease_start=date(2026, 6, 1))
        with pytest.raises(ValidationError, match="energization"):
            allocator.add_use_period(building, [], request)

    def test_lease_start_defaults_to_start_date(self, allocator: CapacityAllocator) -> None:
        request = _split(None, start_date=date(2027, 2, 1))
        change = allocator.add_use_period(_building(), [], request)
        assert change.period.lease_start == date(2027, 2, 1)


# ---------------------------------------------------------------------------
# Editing and deleting
# ---------------------------------------------------------------------------


class TestUpdateUsePeriod:
    def test_partial_edit_keeps_other_fields(self, allocator: CapacityAllocator) -> None:
        target = _period("p1", 40.0, tenant="Meta")
        change = allocator.update_use_period(
            _building(), [target], target, UsePeriodUpdate(lease_value_m=80.0, lease_years=8.0)
        )
        assert change.period.tenant == "Meta"
        assert change.period.mw_allocation == 40.0
        assert change.period.annual_rev_m == pytest.approx(10.0)
        assert change.superseded_ids == []

    def test_growing_past_capacity_rejected(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1", 60.0), _period("p2", 30.0)]
        with pytest.raises(ValidationError):
            allocator.update_use_period(
                _building(), periods, periods[1], UsePeriodUpdate(mw_allocation=45.0)
            )

    def test_promoting_partial_transition_joins_as_split(
        self, allocator: CapacityAllocator
    ) -> None:
        periods = [_period("p1", 60.0), _period("f1", 40.0, is_current=False)]
        change = allocator.update_use_period(
            _building(), periods, periods[1], UsePeriodUpdate(is_current=True)
        )
        assert change.period.is_current
        assert change.superseded_ids == []

    def test_promoting_oversized_transition_rejected(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1", 60.0), _period("f1", 50.0, is_current=False)]
        with pytest.raises(ValidationError):
            allocator.update_use_period(
                _building(), periods, periods[1], UsePeriodUpdate(is_current=True)
            )

    def test_promoting_whole_building_transition_supersedes_current(
        self, allocator: CapacityAllocator
    ) -> None:
        periods = [_period("p1"), _period("f1", is_current=False)]
        change = allocator.update_use_period(
            _building(), periods, periods[1], UsePeriodUpdate(is_current=True)
        )
        assert change.period.is_current
        assert change.superseded_ids == ["p1"]

    def test_promoting_full_capacity_transition_supersedes_current(
        self, allocator: CapacityAllocator
    ) -> None:
        periods = [
            _period("p1", 60.0),
            _period("p2", 40.0),
            _period("f1", 100.0, is_current=False),
        ]
        change = allocator.update_use_period(
            _building(), periods, periods[2], UsePeriodUpdate(is_current=True)
        )
        assert sorted(change.superseded_ids) == ["p1", "p2"]

        remaining = [p for p in periods if p.id not in change.superseded_ids and p.id != "f1"]
        allocation = allocator.allocation(_building(), [*remaining, change.period])
        assert allocation.current_period_count == 1
        assert allocation.allocated_mw == pytest.approx(100.0)
        assert not allocation.over_allocated

    def test_explicit_null_clears_allocation(self, allocator: CapacityAllocator) -> None:
        target = _period("p1", 60.0)
        change = allocator.update_use_period(
            _building(), [target], target, UsePeriodUpdate.model_validate({"mw_allocation": None})
        )
        assert change.period.mw_allocation is None

    @pytest.mark.parametrize("field", ["use_type", "is_current", "lease_structure"])
    def test_null_for_required_field_rejected_by_request(self, field: str) -> None:
        with pytest.raises(pydantic.ValidationError):
            UsePeriodUpdate.model_validate({field: None})

    @pytest.mark.parametrize("field", ["use_type", "is_current", "lease_structure"])
    def test_null_for_required_field_never_stored(
        self, allocator: CapacityAllocator, field: str
    ) -> None:
        target = _period("p1", 60.0)
        # Bypasses request validation to reach the rebuilt record
        update = UsePeriodUpdate.model_construct(_fields_set={field}, **{field: None})
        with pytest.raises(ValidationError):
            allocator.update_use_period(_building(), [target], target, update)
        assert target.is_current
        assert target.use_type == UseType.HPC_AI_HOSTING


class TestDeleteUsePeriod:
    def test_cannot_delete_last_period(self, allocator: CapacityAllocator) -> None:
        only = _period("p1")
        with pytest.raises(LastPeriodError):
            allocator.delete_use_period(only, [only])

    def test_delete_one_of_two(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1", 50.0), _period("p2", 50.0)]
        remaining = allocator.delete_use_period(periods[0], periods)
        assert [p.id for p in remaining] == ["p2"]

    def test_future_period_counts_as_a_sibling(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1"), _period("f1", is_current=False)]
        remaining = allocator.delete_use_period(periods[0], periods)
        assert [p.id for p in remaining] == ["f1"]


# ---------------------------------------------------------------------------
# Mixed sequences of writes
# ---------------------------------------------------------------------------


class TestWriteSequences:
    """Replaying adds and deletes keeps explicit allocations within capacity."""

    STEPS = [
        ("add", 40.0),
        ("add", 35.0),
        ("add", 30.0),
        ("delete", 0),
        ("add", 50.0),
        ("add", None),
        ("add", 25.0),
        ("delete", 1),
        ("add", 40.0),
        ("add", 0.0),
        ("delete", 0),
        ("add", 60.0),
    ]

    def test_capacity_holds_after_every_step(self, allocator: CapacityAllocator) -> None:
        building = _building()
        periods: list[UsePeriod] = [_period("p0", 20.0)]
        rejected = 0

        for action, arg in self.STEPS:
            if action == "add":
                try:
                    change = allocator.add_use_period(building, periods, _split(arg))
                except ValidationError:
                    rejected += 1
                else:
                    periods.append(change.period)
            else:
                target = periods[int(arg)]  # type: ignore[arg-type]
                periods = allocator.delete_use_period(target, periods)

            allocation = allocator.allocation(building, periods)
            assert allocation.explicit_allocated_mw <= allocation.total_it_mw + 1e-6
            assert not allocation.over_allocated
            assert len(periods) >= 1

        assert rejected > 0

    def test_deleting_down_to_one_stops(self, allocator: CapacityAllocator) -> None:
        periods = [_period("p1", 30.0), _period("p2", 30.0), _period("p3")]
        periods = allocator.delete_use_period(periods[0], periods)
        periods = allocator.delete_use_period(periods[0], periods)
        with pytest.raises(LastPeriodError):
            allocator.delete_use_period(periods[0], periods)
        assert [p.id for p in periods] == ["p3"]
