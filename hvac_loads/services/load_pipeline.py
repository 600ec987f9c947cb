"""
Load Pipeline - runs the engines in order for one design
normalize -> Manual J -> room apportionment -> Manual S -> Manual D -> Manual T -> AED -> orientation sweep

Each stage is a pure engine call; the pipeline only routes data between them
and assembles the JSON report.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from hvac_loads.core.settings import EngineSettings
from hvac_loads.domain.calculations.manual_d import ManualDDesigner
from hvac_loads.domain.calculations.manual_j import (
    DUCT_COMPONENT,
    INFILTRATION_COMPONENT,
    ManualJCalculator,
    ManualJOutput,
)
from hvac_loads.domain.calculations.manual_s import ManualSVerifier
from hvac_loads.domain.calculations.manual_t import ManualTSelector
from hvac_loads.domain.core.models import CapacityRating, RoomAirflow, RoomArea, SurfaceType
from hvac_loads.domain.validation.input_normalizer import InputNormalizer
from hvac_loads.services.error_types import from_pydantic_error
from hvac_loads.utils.logging_utils import log_operation
from hvac_loads.utils.validation import round_half_up, round_int

logger = logging.getLogger(__name__)

WHOLE_HOUSE = 'Whole House'


@dataclass
class RoomLoad:
    """Whole-building loads scaled to one room by floor area"""
    name: str
    area: float
    area_fraction: float
    heating_load: int
    cooling_sensible: int
    cooling_latent: int
    total_cooling: int
    heating_cfm: int
    cooling_cfm: int

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "area": self.area,
            "areaFraction": round_half_up(self.area_fraction, 4),
            "heatingLoad": self.heating_load,
            "coolingSensible": self.cooling_sensible,
            "coolingLatent": self.cooling_latent,
            "totalCooling": self.total_cooling,
            "heatingCFM": self.heating_cfm,
            "coolingCFM": self.cooling_cfm,
        }


@dataclass
class SystemTotals:
    """System-level split of the design load"""
    heating_load: int
    cooling_sensible: int
    cooling_latent: int
    total_cooling: int
    duct_heating: int
    duct_cooling: int
    ventilation_heating: int
    ventilation_cooling: int
    structure_heating: int
    structure_cooling: int
    heating_cfm: int
    cooling_cfm: int

    def to_json(self) -> Dict[str, Any]:
        return {
            "heatingLoad": self.heating_load,
            "coolingSensible": self.cooling_sensible,
            "coolingLatent": self.cooling_latent,
            "totalCooling": self.total_cooling,
            "ductLoad": {"heating": self.duct_heating, "cooling": self.duct_cooling},
            "ventilationLoad": {"heating": self.ventilation_heating, "cooling": self.ventilation_cooling},
            "structureLoad": {"heating": self.structure_heating, "cooling": self.structure_cooling},
            "airflow": {"heatingCFM": self.heating_cfm, "coolingCFM": self.cooling_cfm},
        }


RoomLike = Union[RoomArea, Mapping[str, Any]]


def _coerce_rooms(rooms: Iterable[RoomLike]) -> List[RoomArea]:
    coerced = []
    for index, room in enumerate(rooms):
        if isinstance(room, RoomArea):
            coerced.append(room)
            continue
        try:
            coerced.append(RoomArea.model_validate(room))
        except PydanticValidationError as e:
            raise from_pydantic_error(e, prefix=f"rooms.{index}") from e
    return coerced


def apportion_to_rooms(output: ManualJOutput, rooms: Iterable[RoomLike]) -> List[RoomLoad]:
    """
    Split whole-building loads and airflow across rooms by floor area

    When every room has zero area the loads are shared equally.

    Args:
        output: Whole-building Manual J result
        rooms: Rooms with name and floor area

    Returns:
        One RoomLoad per room, in input order
    """
    rooms = _coerce_rooms(rooms)
    if not rooms:
        return []

    total_area = sum(room.area for room in rooms)
    room_loads = []
    for room in rooms:
        fraction = room.area / total_area if total_area > 0 else 1.0 / len(rooms)
        sensible = round_int(output.cooling_sensible * fraction)
        latent = round_int(output.cooling_latent * fraction)
        room_loads.append(RoomLoad(
            name=room.name,
            area=room.area,
            area_fraction=fraction,
            heating_load=round_int(output.heating_load * fraction),
            cooling_sensible=sensible,
            cooling_latent=latent,
            total_cooling=sensible + latent,
            heating_cfm=round_int(output.heating_cfm * fraction),
            cooling_cfm=round_int(output.cooling_cfm * fraction),
        ))
    return room_loads


def summarize_system_totals(output: ManualJOutput) -> SystemTotals:
    """Duct, ventilation and structure shares of the design load"""
    duct_heating, duct_cooling = output.find_component(DUCT_COMPONENT)
    vent_heating, vent_cooling = output.find_component(INFILTRATION_COMPONENT)
    return SystemTotals(
        heating_load=output.heating_load,
        cooling_sensible=output.cooling_sensible,
        cooling_latent=output.cooling_latent,
        total_cooling=output.total_cooling,
        duct_heating=duct_heating,
        duct_cooling=duct_cooling,
        ventilation_heating=vent_heating,
        ventilation_cooling=vent_cooling,
        structure_heating=max(0, output.heating_load - duct_heating - vent_heating),
        structure_cooling=max(0, output.total_cooling - duct_cooling - vent_cooling),
        heating_cfm=output.heating_cfm,
        cooling_cfm=output.cooling_cfm,
    )


class LoadPipeline:
    """Runs every engine for one design with a shared set of settings"""

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()
        self.normalizer = InputNormalizer()
        self.manual_j = ManualJCalculator(self.settings.manual_j)
        self.manual_s = ManualSVerifier(self.settings.manual_s)
        self.manual_d = ManualDDesigner(self.settings.manual_d)
        self.manual_t = ManualTSelector(self.settings.manual_t)

    def run(
        self,
        payload: Mapping[str, Any],
        rooms: Optional[Iterable[RoomLike]] = None,
        equipment: Optional[Union[CapacityRating, Mapping[str, Any]]] = None,
        available_static_pressure: Optional[float] = None,
        total_equivalent_length: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Run the full design sequence

        Args:
            payload: Upstream load input (ManualJInput or envelope shape)
            rooms: Rooms with name and floor area; one whole-house room if omitted
            equipment: Selected equipment capacity; defaults to the design loads
            available_static_pressure: Manual D ASP in in. w.c.
            total_equivalent_length: Manual D TEL in ft

        Returns:
            JSON-compatible design report
        """
        with log_operation("normalize_input", {"payload_type": type(payload).__name__}, logger):
            normalized = self.normalizer.normalize(payload)
        data = normalized.input

        with log_operation("manual_j", {"surfaces": len(data.surfaces)}, logger):
            loads = self.manual_j.calculate(data)

        room_list = list(rooms or []) or [self._whole_house(data)]
        room_loads = apportion_to_rooms(loads, room_list)
        totals = summarize_system_totals(loads)

        design_load = CapacityRating(
            sensible=loads.cooling_sensible,
            total=loads.total_cooling,
            heating=loads.heating_load,
        )
        if equipment is None:
            logger.info("No equipment selected; checking a nominal unit matching the design load")
            equipment = design_load

        with log_operation("manual_s", {"total_cooling": loads.total_cooling}, logger):
            sizing = self.manual_s.verify_selection(design_load, equipment)

        airflows = [RoomAirflow(name=r.name, cfm=r.cooling_cfm, area=r.area) for r in room_loads]
        with log_operation("manual_d", {"rooms": len(airflows)}, logger):
            ducts = self.manual_d.design_system(airflows, available_static_pressure, total_equivalent_length)

        with log_operation("manual_t", {"rooms": len(airflows)}, logger):
            terminals = self.manual_t.select_all(airflows)

        with log_operation("aed", {"windows": len(data.windows)}, logger):
            aed = self.manual_j.calculate_aed(data)

        orientations = self.manual_j.calculate_multi_orientation(data)

        design = data.design
        return {
            "designConditions": {
                "outdoorTempWinter": design.outdoor_temp_winter,
                "outdoorTempSummer": design.outdoor_temp_summer,
                "indoorTempWinter": design.indoor_temp_winter,
                "indoorTempSummer": design.indoor_temp_summer,
                "dailyRange": design.daily_range,
                "latitude": design.latitude,
                "orientation": design.orientation,
            },
            "moistureDiff": loads.grains_difference,
            "manualJ": loads.to_json(),
            "systemTotals": totals.to_json(),
            "rooms": [r.to_json() for r in room_loads],
            "manualS": sizing.to_json(),
            "manualD": ducts.to_json(),
            "manualT": terminals.to_json(),
            "aed": aed.to_json(),
            "orientations": [row.to_json() for row in orientations],
            "dataQuality": {
                "score": round_half_up(normalized.quality_score, 2),
                "appliedDefaults": list(normalized.applied_defaults),
                "sourceShape": normalized.source_shape,
            },
        }

    @staticmethod
    def _whole_house(data) -> RoomArea:
        floor_area = sum(s.area for s in data.surfaces if s.type == SurfaceType.FLOOR)
        return RoomArea(name=WHOLE_HOUSE, area=floor_area)


def run_load_pipeline(
    payload: Mapping[str, Any],
    rooms: Optional[Iterable[RoomLike]] = None,
    equipment: Optional[Union[CapacityRating, Mapping[str, Any]]] = None,
    settings: Optional[EngineSettings] = None,
    available_static_pressure: Optional[float] = None,
    total_equivalent_length: Optional[float] = None
) -> Dict[str, Any]:
    """Full design report with the given (or default) settings"""
    return LoadPipeline(settings).run(
        payload,
        rooms=rooms,
        equipment=equipment,
        available_static_pressure=available_static_pressure,
        total_equivalent_length=total_equivalent_length,
    )
