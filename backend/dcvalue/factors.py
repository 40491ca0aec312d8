"""Factor resolution: auto values, manual overrides and the combined factor.

The resolution rule is the same for every factor: the override wins when
present, otherwise the auto value. Factors differ only in how their auto
value is derived (see ``dcvalue.derivation``).
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from dcvalue.models.enums import FactorName
from dcvalue.models.valuation import FactorDetails, NumericDegeneracy, Override

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dcvalue.models.building import Building

logger = logging.getLogger(__name__)

NEUTRAL_FACTOR = 1.0


def overrides_for(building: Building) -> dict[FactorName, float | None]:
    """Collect the manual override of every factor stored on a building.

    The fidoodle factor defaults to 1.0 on the building; at that value it
    is reported as not overridden.
    """
    stored = building.factor_overrides
    overrides: dict[FactorName, float | None] = {
        name: getattr(stored, name.value)
        for name in FactorName
        if name is not FactorName.FIDOODLE_FACTOR
    }
    fidoodle = building.fidoodle_factor
    overrides[FactorName.FIDOODLE_FACTOR] = None if fidoodle == NEUTRAL_FACTOR else fidoodle
    return overrides


class FactorResolver:
    """Resolves final factor values and multiplies them into one factor."""

    @staticmethod
    def resolve(name: FactorName, auto: float, override: float | None) -> float:
        """Return ``override`` when it is not ``None``, else ``auto``."""
        return override if override is not None else auto

    def resolve_all(
        self,
        autos: Mapping[FactorName, float],
        overrides: Mapping[FactorName, float | None],
    ) -> FactorDetails:
        """Pair every factor's auto value with its override."""
        return FactorDetails(
            **{
                name.value: Override(auto=autos[name], override=overrides.get(name))
                for name in FactorName
            }
        )

    def combined_factor(
        self, details: FactorDetails
    ) -> tuple[float, list[NumericDegeneracy]]:
        """Multiply every final factor value together.

        If any step of the product stops being finite the whole product is
        reset to 1.0 and the offending inputs are reported; this never raises.

        Returns:
            The combined factor and any degeneracies encountered.
        """
        finals: dict[FactorName, float] = {}
        for name in FactorName:
            factor = details.get(name)
            finals[name] = self.resolve(name, factor.auto, factor.override)
        product = NEUTRAL_FACTOR
        for name, value in finals.items():
            product *= value
            if not math.isfinite(product):
                degeneracy = NumericDegeneracy(
                    step=f"combined_factor:{name.value}",
                    inputs={n.value: repr(v) for n, v in finals.items()},
                    fallback=NEUTRAL_FACTOR,
                )
                logger.warning(
                    "Combined factor became non-finite at %s; resetting to %.1f (inputs=%s)",
                    name.value,
                    NEUTRAL_FACTOR,
                    degeneracy.inputs,
                )
                return NEUTRAL_FACTOR, [degeneracy]
        return product, []
