"""
ACCA Manual J Load Calculator
Residential heating and cooling loads from a validated ManualJInput

Order of evaluation (and of the breakdown):
1. Envelope transmission per surface, plus window solar gain
2. Infiltration / ventilation (sensible and latent)
3. Internal gains (people and appliances)
4. Duct loss / gain when ducts are outside the conditioned space

Also provides the AED hourly-excursion check and the eight-direction
orientation sweep.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np
from pydantic import ValidationError as PydanticValidationError

from hvac_loads.core.settings import ManualJConfig
from hvac_loads.domain.core import psychrometrics
from hvac_loads.domain.core.models import InfiltrationMethod, ManualJInput, Surface
from hvac_loads.domain.core.solar_gains import COMPASS_POINTS, SolarGainModel, default_solar_model
from hvac_loads.domain.mechanical.duct_losses import calculate_duct_load
from hvac_loads.services.error_types import from_pydantic_error
from hvac_loads.utils.logging_utils import timed_operation
from hvac_loads.utils.validation import round_half_up, round_int

logger = logging.getLogger(__name__)

SOLAR_COMPONENT = 'Solar Gain'
INFILTRATION_COMPONENT = 'Infiltration'
INTERNALS_COMPONENT = 'Internal Gains'
DUCT_COMPONENT = 'Duct Loss/Gain'

# Sweep order for orientation comparisons
ORIENTATION_SEQUENCE = COMPASS_POINTS

HOURS_PER_DAY = 24


@dataclass
class LoadBreakdownItem:
    """One line of the load breakdown, BTU/hr rounded per line"""
    component: str
    heating: int = 0
    cooling: int = 0

    def to_json(self) -> Dict[str, Any]:
        return {"component": self.component, "heating": self.heating, "cooling": self.cooling}


@dataclass
class ManualJOutput:
    """Manual J calculation results"""
    heating_load: int
    cooling_sensible: int
    cooling_latent: int
    total_cooling: int
    heating_cfm: int
    cooling_cfm: int
    breakdown: List[LoadBreakdownItem] = field(default_factory=list)
    grains_difference: float = 0.0
    infiltration_cfm: float = 0.0

    @property
    def sensible_heat_ratio(self) -> float:
        if self.total_cooling <= 0:
            return 1.0
        return self.cooling_sensible / self.total_cooling

    def find_component(self, term: str) -> Tuple[int, int]:
        """(heating, cooling) of the first breakdown line whose name contains term"""
        for item in self.breakdown:
            if term in item.component:
                return item.heating, item.cooling
        return 0, 0

    def to_json(self) -> Dict[str, Any]:
        return {
            "heatingLoad": self.heating_load,
            "coolingSensible": self.cooling_sensible,
            "coolingLatent": self.cooling_latent,
            "totalCooling": self.total_cooling,
            "coolingLoad": self.total_cooling,
            "heatingCFM": self.heating_cfm,
            "coolingCFM": self.cooling_cfm,
            "breakdown": [item.to_json() for item in self.breakdown],
            "psychrometrics": {
                "grainsDifference": self.grains_difference,
                "sensibleHeatRatio": round_half_up(self.sensible_heat_ratio, 3),
            },
        }


@dataclass
class AEDExcursion:
    """Hourly glazing excursion check"""
    hourly_loads: List[int]
    max_excursion_percent: float
    limit_percent: float
    status: str

    @property
    def passed(self) -> bool:
        return self.status == 'Pass'

    def to_json(self) -> Dict[str, Any]:
        return {
            "hourlyLoads": list(self.hourly_loads),
            "maxExcursionPercent": self.max_excursion_percent,
            "limitPercent": self.limit_percent,
            "status": self.status,
        }


@dataclass
class OrientationLoad:
    """Cooling loads and airflow with the building facing one direction"""
    direction: str
    sensible: int
    latent: int
    total: int
    heating_cfm: int
    cooling_cfm: int

    def to_json(self) -> Dict[str, Any]:
        return {
            "direction": self.direction,
            "sensible": self.sensible,
            "latent": self.latent,
            "total": self.total,
            "heatingCFM": self.heating_cfm,
            "coolingCFM": self.cooling_cfm,
        }


class _Breakdown:
    """Ordered accumulation of rounded per-component loads"""

    def __init__(self):
        self._items: Dict[str, LoadBreakdownItem] = {}

    def add(self, component: str, heating: float = 0.0, cooling: float = 0.0):
        item = self._items.get(component)
        if item is None:
            item = self._items[component] = LoadBreakdownItem(component)
        item.heating += round_int(heating)
        item.cooling += round_int(cooling)

    def items(self) -> List[LoadBreakdownItem]:
        return list(self._items.values())


def _coerce_input(data: Union[ManualJInput, Mapping[str, Any]]) -> ManualJInput:
    if isinstance(data, ManualJInput):
        return data
    try:
        return ManualJInput.model_validate(data)
    except PydanticValidationError as e:
        raise from_pydantic_error(e) from e


class ManualJCalculator:
    """
    ACCA Manual J load engine

    Pure and deterministic: the instance only holds immutable configuration and
    the solar table, so one calculator can serve concurrent callers.
    """

    def __init__(self, config: Optional[ManualJConfig] = None, solar_model: Optional[SolarGainModel] = None):
        self.config = config or ManualJConfig()
        self.solar_model = solar_model or default_solar_model

    def calculate(self, data: Union[ManualJInput, Mapping[str, Any]]) -> ManualJOutput:
        """
        Calculate heating and cooling loads

        Args:
            data: ManualJInput (or a mapping that validates as one)

        Returns:
            ManualJOutput with totals, airflow and breakdown
        """
        data = _coerce_input(data)
        cfg = self.config
        design = data.design

        dt_heat = max(0.0, design.indoor_temp_winter - design.outdoor_temp_winter)
        dt_cool = max(0.0, design.outdoor_temp_summer - design.indoor_temp_summer)

        heating = 0.0
        sensible = 0.0
        latent = 0.0
        breakdown = _Breakdown()

        # 1. Envelope
        for surface in data.surfaces:
            heat = surface.u_value * surface.area * dt_heat
            transmission, solar = self._surface_cooling(surface, data, dt_cool)
            heating += heat
            sensible += transmission + solar
            breakdown.add(surface.name, heat, transmission)
            if solar:
                breakdown.add(SOLAR_COMPONENT, 0.0, solar)

        # 2. Infiltration / ventilation
        cfm = self._infiltration_cfm(data)
        grains = psychrometrics.grains_difference(
            design.outdoor_temp_summer, design.outdoor_grains, cfg.indoor_grains
        )
        inf_heat = psychrometrics.sensible_load(cfm, dt_heat, cfg.sensible_factor)
        inf_sensible = psychrometrics.sensible_load(cfm, dt_cool, cfg.sensible_factor)
        inf_latent = psychrometrics.latent_load(cfm, grains, cfg.latent_factor)
        heating += inf_heat
        sensible += inf_sensible
        latent += inf_latent
        breakdown.add(INFILTRATION_COMPONENT, inf_heat, inf_sensible + inf_latent)

        # 3. Internal gains (cooling only)
        internals = data.internals
        int_sensible = internals.occupants * cfg.people_sensible_btu + internals.appliance_sensible
        int_latent = internals.occupants * cfg.people_latent_btu + internals.appliance_latent
        sensible += int_sensible
        latent += int_latent
        breakdown.add(INTERNALS_COMPONENT, 0.0, int_sensible + int_latent)

        # 4. Ducts, applied to the running totals
        duct = calculate_duct_load(
            data.ducts, heating, sensible,
            mode=cfg.duct_loss_mode,
            heating_penalty=cfg.duct_heating_penalty,
            cooling_penalty=cfg.duct_cooling_penalty,
        )
        if not data.ducts.in_conditioned_space:
            heating += duct.heating
            sensible += duct.cooling
            breakdown.add(DUCT_COMPONENT, duct.heating, duct.cooling)

        heating_load = round_int(heating)
        cooling_sensible = round_int(sensible)
        cooling_latent = round_int(latent)

        result = ManualJOutput(
            heating_load=heating_load,
            cooling_sensible=cooling_sensible,
            cooling_latent=cooling_latent,
            total_cooling=cooling_sensible + cooling_latent,
            heating_cfm=round_int(psychrometrics.airflow_for_load(
                heating_load, cfg.supply_dt_heating, cfg.sensible_factor)),
            cooling_cfm=round_int(psychrometrics.airflow_for_load(
                cooling_sensible, cfg.supply_dt_cooling, cfg.sensible_factor)),
            breakdown=breakdown.items(),
            grains_difference=grains,
            infiltration_cfm=cfm,
        )

        logger.debug(
            f"Manual J: heating {result.heating_load:,} BTU/hr, cooling {result.total_cooling:,} BTU/hr "
            f"({result.cooling_sensible:,} sensible / {result.cooling_latent:,} latent), "
            f"{len(data.surfaces)} surfaces"
        )
        return result

    def _surface_cooling(self, surface: Surface, data: ManualJInput, dt_cool: float) -> Tuple[float, float]:
        """(transmission, solar) cooling gain for one surface"""
        orientation = surface.orientation
        if orientation is None and data.design.orientation in COMPASS_POINTS:
            orientation = data.design.orientation

        if surface.is_window and surface.shgc is not None and orientation:
            transmission = surface.u_value * surface.area * dt_cool
            pshgf = self.solar_model.get_solar_gain_factor(data.design.latitude, orientation)
            solar = surface.area * surface.shgc * pshgf * surface.internal_shading
            return transmission, solar

        if surface.cltd is not None:
            return surface.u_value * surface.area * surface.cltd, 0.0

        return surface.u_value * surface.area * dt_cool, 0.0

    def _infiltration_cfm(self, data: ManualJInput) -> float:
        infiltration = data.infiltration
        if infiltration.method == InfiltrationMethod.ACH:
            return infiltration.value * infiltration.volume / 60.0

        if self.config.legacy_cfm_scaling:
            logger.warning(
                f"Legacy CFM scaling active: {infiltration.value} CFM treated as "
                f"{infiltration.value * self.config.legacy_cfm_factor:.2f} CFM"
            )
            return infiltration.value * self.config.legacy_cfm_factor
        return infiltration.value

    def calculate_aed(self, data: Union[ManualJInput, Mapping[str, Any]]) -> AEDExcursion:
        """
        Hourly glazing excursion (AED) check

        The peak glazing load is spread over the day with a half-sine sun curve;
        the excursion compares the peak hour against the daily average glazing load.

        Args:
            data: ManualJInput

        Returns:
            AEDExcursion with 24 hourly cooling loads and a Pass/Fail status
        """
        data = _coerce_input(data)
        baseline = self.calculate(data)
        design = data.design

        windows = data.windows
        window_area = sum(w.area for w in windows)
        rated = [w for w in windows if w.shgc is not None]
        rated_area = sum(w.area for w in rated)
        if rated_area > 0:
            avg_shgc = sum(w.area * w.shgc for w in rated) / rated_area
        else:
            avg_shgc = self.config.aed_default_shgc

        solar_factor = self.solar_model.get_solar_gain_factor(design.latitude, design.orientation)
        peak_glass_load = window_area * avg_shgc * solar_factor
        base_cooling_load = baseline.total_cooling - peak_glass_load

        hours = np.arange(HOURS_PER_DAY)
        sun_intensity = np.maximum(0.0, np.sin((hours - 7) / 13 * np.pi))
        glazing = peak_glass_load * sun_intensity
        hourly = base_cooling_load + glazing

        average_glazing = float(glazing.mean())
        if average_glazing > 0:
            max_glazing = float(hourly.max()) - base_cooling_load
            excursion = (max_glazing - average_glazing) / average_glazing * 100
        else:
            excursion = 0.0
        excursion = max(0.0, round_half_up(excursion, 1))

        limit = self.config.aed_limit_percent
        result = AEDExcursion(
            hourly_loads=[round_int(v) for v in hourly],
            max_excursion_percent=excursion,
            limit_percent=limit,
            status='Pass' if excursion < limit else 'Fail',
        )
        logger.debug(f"AED excursion {excursion:.1f}% (limit {limit:.0f}%): {result.status}")
        return result

    @timed_operation("orientation_sweep")
    def calculate_multi_orientation(self, data: Union[ManualJInput, Mapping[str, Any]]) -> List[OrientationLoad]:
        """
        Re-run the load calculation with the building facing each compass direction

        Returns:
            Eight OrientationLoad rows in N, NE, E, SE, S, SW, W, NW order
        """
        data = _coerce_input(data)
        rows = []
        for direction in ORIENTATION_SEQUENCE:
            result = self.calculate(data.with_orientation(direction))
            rows.append(OrientationLoad(
                direction=direction,
                sensible=result.cooling_sensible,
                latent=result.cooling_latent,
                total=result.total_cooling,
                heating_cfm=result.heating_cfm,
                cooling_cfm=result.cooling_cfm,
            ))
        return rows


_default_calculator = ManualJCalculator()


def calculate_manual_j(data: Union[ManualJInput, Mapping[str, Any]]) -> ManualJOutput:
    """Manual J with default assumptions"""
    return _default_calculator.calculate(data)


def calculate_aed(data: Union[ManualJInput, Mapping[str, Any]]) -> AEDExcursion:
    """AED excursion check with default assumptions"""
    return _default_calculator.calculate_aed(data)


def calculate_multi_orientation(data: Union[ManualJInput, Mapping[str, Any]]) -> List[OrientationLoad]:
    """Orientation sweep with default assumptions"""
    return _default_calculator.calculate_multi_orientation(data)
