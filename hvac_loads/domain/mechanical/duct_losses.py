"""
Duct Loss/Gain Models
Distribution penalties added to the envelope loads when ducts run outside the conditioned space

Two models are available:
1. percentage - flat multipliers on the running heating / sensible cooling totals
   (15% heating, 20% cooling by default). This is the Manual J shortcut.
2. r_value - conduction through the duct wall, U x A x dT, with
   U = 1 / (R_duct + air films) and dT taken from the typical temperature of
   the unconditioned space the ducts run through. Ducts outside the
   conditioned space with no surface area given fall back to percentage.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from hvac_loads.domain.core.models import DuctSpec

logger = logging.getLogger(__name__)

# Inside + outside air film resistance, hr·ft²·°F/BTU
AIR_FILM_R = 0.68 + 0.17

# Temperature difference between the duct location and the conditioned space (°F)
LOCATION_DELTA_T: Mapping[str, Mapping[str, float]] = MappingProxyType({
    'heating': MappingProxyType({
        'conditioned': 0,
        'attic': 50,
        'crawlspace': 30,
        'basement': 20,
        'garage': 35,
        'exterior': 60,
    }),
    'cooling': MappingProxyType({
        'conditioned': 0,
        'attic': 65,
        'crawlspace': 15,
        'basement': 5,
        'garage': 25,
        'exterior': 30,
    }),
})

# Unknown locations are treated as the worst common case
FALLBACK_LOCATION = 'attic'


@dataclass(frozen=True)
class DuctLoadResult:
    """Duct heat loss (heating) and heat gain (sensible cooling) in BTU/hr"""
    heating: float
    cooling: float
    mode: str
    location: str

    @property
    def applied(self) -> bool:
        return self.heating > 0 or self.cooling > 0


def percentage_duct_load(
    heating_subtotal: float,
    sensible_subtotal: float,
    heating_penalty: float = 0.15,
    cooling_penalty: float = 0.20
) -> tuple:
    """Flat-percentage duct loss and gain on the loads accumulated so far"""
    return heating_subtotal * heating_penalty, sensible_subtotal * cooling_penalty


def conduction_duct_load(ducts: DuctSpec) -> tuple:
    """
    Duct wall conduction for a known duct area and insulation level

    Args:
        ducts: Duct specification (location, R-value, surface area)

    Returns:
        (heating_loss, cooling_gain) in BTU/hr
    """
    location = ducts.location
    if location not in LOCATION_DELTA_T['heating']:
        logger.debug(f"Unknown duct location '{location}', using {FALLBACK_LOCATION} temperatures")
        location = FALLBACK_LOCATION

    u_factor = 1.0 / (ducts.r_value + AIR_FILM_R)
    heating = u_factor * ducts.area * LOCATION_DELTA_T['heating'][location]
    cooling = u_factor * ducts.area * LOCATION_DELTA_T['cooling'][location]
    return heating, cooling


def calculate_duct_load(
    ducts: DuctSpec,
    heating_subtotal: float,
    sensible_subtotal: float,
    mode: str = 'percentage',
    heating_penalty: float = 0.15,
    cooling_penalty: float = 0.20
) -> DuctLoadResult:
    """
    Duct loss/gain for the configured model; zero when ducts are in conditioned space

    Args:
        ducts: Duct specification
        heating_subtotal: Heating load accumulated before ducts (BTU/hr)
        sensible_subtotal: Sensible cooling load accumulated before ducts (BTU/hr)
        mode: 'percentage' or 'r_value'
        heating_penalty: Percentage-mode heating fraction
        cooling_penalty: Percentage-mode cooling fraction

    Returns:
        DuctLoadResult
    """
    if ducts.in_conditioned_space:
        return DuctLoadResult(heating=0.0, cooling=0.0, mode=mode, location=ducts.location)

    if mode == 'r_value' and ducts.area <= 0:
        logger.warning(
            f"No duct surface area given for ducts in {ducts.location}, using percentage duct losses"
        )
        mode = 'percentage'

    if mode == 'r_value':
        heating, cooling = conduction_duct_load(ducts)
    else:
        heating, cooling = percentage_duct_load(
            heating_subtotal, sensible_subtotal, heating_penalty, cooling_penalty
        )

    logger.debug(
        f"Duct {mode} load in {ducts.location}: heating {heating:.0f} BTU/hr, "
        f"cooling {cooling:.0f} BTU/hr"
    )
    return DuctLoadResult(heating=heating, cooling=cooling, mode=mode, location=ducts.location)
