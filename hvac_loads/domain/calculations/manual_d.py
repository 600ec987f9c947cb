"""
ACCA Manual D Duct Design
Friction rate and round branch duct sizing from room airflow

Friction Rate = (ASP x 100) / TEL
    ASP: available static pressure (in. w.c.)
    TEL: total equivalent length (ft)

Branch diameters come from an empirical curve standing in for the friction
chart: d = max(5", ceil_0.5((cfm / 15) ** 0.45 x 2)). The curve is monotonic,
so more airflow never gives a smaller duct.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from hvac_loads.core.settings import ManualDConfig
from hvac_loads.domain.core.models import RoomAirflow
from hvac_loads.services.error_types import ValidationError, from_pydantic_error
from hvac_loads.utils.validation import ceil_to_increment, round_half_up, round_int

logger = logging.getLogger(__name__)


@dataclass
class DuctBranch:
    """Round branch duct serving one room"""
    name: str
    cfm: int
    round_size: float   # inches
    velocity: int       # FPM

    def to_json(self) -> Dict[str, Any]:
        return {"name": self.name, "cfm": self.cfm, "roundSize": self.round_size, "velocity": self.velocity}


@dataclass
class ManualDResult:
    """Duct system design"""
    friction_rate: float
    total_cfm: float
    branches: List[DuctBranch] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            "frictionRate": self.friction_rate,
            "totalCFM": self.total_cfm,
            "branches": [b.to_json() for b in self.branches],
        }


RoomLike = Union[RoomAirflow, Mapping[str, Any]]


def _coerce_rooms(rooms: Iterable[RoomLike]) -> List[RoomAirflow]:
    coerced = []
    for index, room in enumerate(rooms):
        if isinstance(room, RoomAirflow):
            coerced.append(room)
            continue
        try:
            coerced.append(RoomAirflow.model_validate(room))
        except PydanticValidationError as e:
            raise from_pydantic_error(e, prefix=f"rooms.{index}") from e
    return coerced


class ManualDDesigner:
    """Sizes supply branches for a list of rooms"""

    def __init__(self, config: Optional[ManualDConfig] = None):
        self.config = config or ManualDConfig()

    def friction_rate(self, available_static_pressure: float, total_equivalent_length: float) -> float:
        """Design friction rate in in. w.c. per 100 ft, 3 decimals"""
        if not math.isfinite(total_equivalent_length) or total_equivalent_length <= 0:
            raise ValidationError(
                "Total equivalent length must be positive",
                field='total_equivalent_length',
                details={'value': total_equivalent_length}
            )
        if not math.isfinite(available_static_pressure) or available_static_pressure < 0:
            raise ValidationError(
                "Available static pressure must be zero or positive",
                field='available_static_pressure',
                details={'value': available_static_pressure}
            )
        return round_half_up(available_static_pressure * 100 / total_equivalent_length, 3)

    def branch_diameter(self, cfm: float) -> float:
        """Round duct diameter in inches for a branch airflow"""
        cfg = self.config
        raw = math.pow(cfm / cfg.curve_divisor, cfg.curve_exponent) * 2
        return max(cfg.min_diameter_in, ceil_to_increment(raw, cfg.size_increment_in))

    @staticmethod
    def velocity_fpm(cfm: float, diameter_in: float) -> float:
        """Air velocity in FPM: CFM over the duct cross-section in ft²"""
        area_sqft = math.pi * (diameter_in / 2 / 12) ** 2
        return cfm / area_sqft

    def design_system(
        self,
        rooms: Iterable[RoomLike],
        available_static_pressure: Optional[float] = None,
        total_equivalent_length: Optional[float] = None
    ) -> ManualDResult:
        """
        Design the branch duct schedule

        Args:
            rooms: Rooms with name and design CFM, in schedule order
            available_static_pressure: ASP in in. w.c. (default 0.5)
            total_equivalent_length: TEL in ft (default 250)

        Returns:
            ManualDResult with friction rate, total CFM and one branch per room
        """
        cfg = self.config
        asp = cfg.default_static_pressure if available_static_pressure is None else available_static_pressure
        tel = cfg.default_equivalent_length if total_equivalent_length is None else total_equivalent_length

        friction = self.friction_rate(asp, tel)
        rooms = _coerce_rooms(rooms)

        branches = []
        for room in rooms:
            diameter = self.branch_diameter(room.cfm)
            branches.append(DuctBranch(
                name=room.name,
                cfm=round_int(room.cfm),
                round_size=diameter,
                velocity=round_int(self.velocity_fpm(room.cfm, diameter)),
            ))

        total_cfm = sum(room.cfm for room in rooms)
        logger.debug(f"Manual D: {len(branches)} branches, {total_cfm:.0f} CFM, friction rate {friction}")
        return ManualDResult(friction_rate=friction, total_cfm=total_cfm, branches=branches)


def design_system(
    rooms: Iterable[RoomLike],
    available_static_pressure: float = 0.5,
    total_equivalent_length: float = 250.0,
    config: Optional[ManualDConfig] = None
) -> ManualDResult:
    """Manual D design with default (or given) sizing curve"""
    return ManualDDesigner(config).design_system(rooms, available_static_pressure, total_equivalent_length)
