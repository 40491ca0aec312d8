"""Dependency injection for FastAPI endpoints."""

from __future__ import annotations

import logging

from dcvalue.data.defaults import GlobalDefaults
from dcvalue.factory import create_default_service
from dcvalue.services.valuation_service import ValuationService

logger = logging.getLogger(__name__)


def create_service() -> ValuationService:
    """Create a ValuationService configured from the environment.

    Reads ``DCVALUE_*`` overrides of the global defaults. Raises ValueError
    if one of them is not a number.
    """
    defaults = GlobalDefaults.from_env()
    logger.info(
        "Creating valuation service (cap rate %.4f, discount rate %.4f)",
        defaults.hpc_cap_rate,
        defaults.discount_rate,
    )
    return create_default_service(defaults)
