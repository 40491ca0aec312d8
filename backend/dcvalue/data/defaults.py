"""Global valuation defaults.

These are passed explicitly into every computation so a valuation is
reproducible from its arguments alone. ``from_env`` lets deployments
override any field with a ``DCVALUE_<FIELD>`` environment variable.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "DCVALUE_"


class GlobalDefaults(BaseModel):
    """Portfolio-wide defaults for cap rates, growth and pipeline value."""

    model_config = ConfigDict(frozen=True)

    hpc_cap_rate: float = Field(default=0.075, gt=0)
    hpc_exit_cap_rate: float = Field(default=0.08, gt=0)
    terminal_growth_rate: float = 0.025
    discount_rate: float = Field(default=0.10, gt=-1)
    renewal_probability: float = Field(default=0.85, ge=0, le=1)
    # SOFR in percent, matching the tenant credit spread table
    sofr_rate: float = Field(default=4.3, gt=0)
    energization_decay_rate: float = Field(default=0.15, ge=0)
    # $M per uncontracted MW
    mw_value_hpc_uncontracted: float = Field(default=8.0, ge=0)
    default_lease_years: float = Field(default=10.0, gt=0)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GlobalDefaults:
        """Build defaults, letting ``DCVALUE_*`` variables override fields.

        Raises:
            ValueError: If a variable is set but not a valid number.
        """
        env = os.environ if environ is None else environ
        values: dict[str, float] = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None or raw.strip() == "":
                continue
            try:
                values[name] = float(raw)
            except ValueError as exc:
                msg = f"{ENV_PREFIX}{name.upper()} must be a number, got {raw!r}"
                raise ValueError(msg) from exc
        return cls(**values)
