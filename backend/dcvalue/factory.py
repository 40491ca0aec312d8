"""Factory functions for creating pre-configured engines and services."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dcvalue.data.defaults import GlobalDefaults
from dcvalue.data.seed import build_seed_repository
from dcvalue.engine import ValuationEngine
from dcvalue.events import EventBus
from dcvalue.services.valuation_service import ValuationService

if TYPE_CHECKING:
    from dcvalue.data.repository import BuildingRepository


def create_default_engine(defaults: GlobalDefaults | None = None) -> ValuationEngine:
    """Create a ValuationEngine wired up with the built-in global defaults.

    Example::

        from dcvalue import create_default_engine

        engine = create_default_engine()
        view = engine.compose(building, use_periods, as_of=date.today())
    """
    return ValuationEngine(defaults or GlobalDefaults())


def create_default_service(
    defaults: GlobalDefaults | None = None,
    repository: BuildingRepository | None = None,
    events: EventBus | None = None,
) -> ValuationService:
    """Create a ValuationService over the seed portfolio.

    This is the recommended way to get a working service: callers don't
    need to know how the repository, engine and event bus are wired.
    """
    return ValuationService(
        repository=repository or build_seed_repository(),
        engine=create_default_engine(defaults),
        events=events or EventBus(),
    )
