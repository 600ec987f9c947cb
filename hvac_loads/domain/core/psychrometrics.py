"""
Psychrometric constants and small derivations shared by the load engine

The air-side factors are the standard-air values used throughout ACCA Manual J:
    Q_sensible = 1.08 x CFM x dT
    Q_latent   = 0.68 x CFM x dGrains

Outdoor moisture is estimated from the summer dry-bulb with a linear fit when
no measured humidity ratio is available. That is a residential shortcut, not a
psychrometric chart lookup.
"""

from typing import Optional

# Standard air at sea level
SENSIBLE_HEAT_FACTOR = 1.08   # BTU/hr per CFM per °F
LATENT_HEAT_FACTOR = 0.68     # BTU/hr per CFM per grain/lb

# Indoor design moisture at 75°F / 50% RH, grains per lb of dry air
INDOOR_GRAINS = 65.0

# People gains, BTU/hr per person (ACCA residential)
PEOPLE_SENSIBLE_BTU = 230.0
PEOPLE_LATENT_BTU = 200.0

BTU_PER_WATT = 3.413

# Linear outdoor grains estimate: grains = dry_bulb x slope + intercept
_OUTDOOR_GRAINS_SLOPE = 1.4
_OUTDOOR_GRAINS_INTERCEPT = -10.0


def estimate_outdoor_grains(outdoor_temp_summer: float) -> float:
    """Approximate outdoor design moisture (grains/lb) from summer dry-bulb (°F)"""
    return outdoor_temp_summer * _OUTDOOR_GRAINS_SLOPE + _OUTDOOR_GRAINS_INTERCEPT


def grains_difference(
    outdoor_temp_summer: float,
    outdoor_grains: Optional[float] = None,
    indoor_grains: float = INDOOR_GRAINS
) -> float:
    """
    Outdoor minus indoor moisture content, floored at zero

    Args:
        outdoor_temp_summer: Summer outdoor design dry-bulb (°F)
        outdoor_grains: Measured outdoor humidity ratio (grains/lb), if known
        indoor_grains: Indoor design humidity ratio (grains/lb)

    Returns:
        Grains difference used for latent infiltration gain
    """
    if outdoor_grains is None:
        outdoor_grains = estimate_outdoor_grains(outdoor_temp_summer)
    return max(0.0, outdoor_grains - indoor_grains)


def sensible_load(cfm: float, delta_t: float, factor: float = SENSIBLE_HEAT_FACTOR) -> float:
    """Sensible air load in BTU/hr"""
    return cfm * factor * delta_t


def latent_load(cfm: float, delta_grains: float, factor: float = LATENT_HEAT_FACTOR) -> float:
    """Latent air load in BTU/hr"""
    return cfm * factor * delta_grains


def airflow_for_load(load_btu: float, supply_delta_t: float, factor: float = SENSIBLE_HEAT_FACTOR) -> float:
    """CFM required to deliver a sensible load at the given supply-air temperature difference"""
    return load_btu / (factor * supply_delta_t)
