"""
ACCA Manual T Air Distribution
Register count, throw and face velocity per room

Residential heuristics rather than an ADPI lookup:
    registers  = max(1, ceil(cfm / 180))
    velocity   = (cfm / registers) / Ak, with Ak = 0.28 ft² for a 4x10 register
    throw      = 0.75 x sqrt(floor area), i.e. 75% of the room's characteristic length
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from hvac_loads.core.settings import ManualTConfig
from hvac_loads.domain.core.models import RoomAirflow
from hvac_loads.services.error_types import ValidationError, from_pydantic_error
from hvac_loads.utils.validation import round_half_up, round_int

logger = logging.getLogger(__name__)


@dataclass
class TerminalSelection:
    """Supply registers for one room"""
    room_name: str
    required_cfm: int
    register_count: int
    cfm_per_register: float
    estimated_throw: int      # feet
    velocity_fpm: int
    register_size: str = '4x10'
    status: str = 'Pass'

    def to_json(self) -> Dict[str, Any]:
        return {
            "roomName": self.room_name,
            "requiredCFM": self.required_cfm,
            "registerCount": self.register_count,
            "cfmPerRegister": self.cfm_per_register,
            "estimatedThrow": self.estimated_throw,
            "velocityFPM": self.velocity_fpm,
            "size": self.register_size,
            "status": self.status,
        }


@dataclass
class ManualTResult:
    terminals: List[TerminalSelection] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {"terminals": [t.to_json() for t in self.terminals]}


def _require_non_negative(value: float, name: str) -> None:
    if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value) or value < 0:
        raise ValidationError(f"{name} must be a finite number >= 0", field=name, details={'value': value})


class ManualTSelector:
    """Selects registers for rooms from their design airflow"""

    def __init__(self, config: Optional[ManualTConfig] = None):
        self.config = config or ManualTConfig()

    def select_terminals(self, room_name: str, cfm: float, area: float) -> TerminalSelection:
        """
        Select supply registers for one room

        Args:
            room_name: Room label
            cfm: Room design airflow
            area: Room floor area in ft²

        Returns:
            TerminalSelection
        """
        _require_non_negative(cfm, 'cfm')
        _require_non_negative(area, 'area')
        cfg = self.config

        register_count = max(1, math.ceil(cfm / cfg.register_capacity_cfm))
        cfm_per_register = cfm / register_count
        velocity = cfm_per_register / cfg.register_free_area_sqft
        throw = math.sqrt(area) * cfg.throw_fraction

        status = 'Fail: Noisy' if velocity > cfg.max_face_velocity_fpm else 'Pass'
        if status != 'Pass':
            logger.warning(f"{room_name}: register face velocity {velocity:.0f} FPM exceeds {cfg.max_face_velocity_fpm:.0f} FPM")

        return TerminalSelection(
            room_name=room_name,
            required_cfm=round_int(cfm),
            register_count=register_count,
            cfm_per_register=round_half_up(cfm_per_register, 1),
            estimated_throw=round_int(throw),
            velocity_fpm=round_int(velocity),
            register_size=cfg.register_size,
            status=status,
        )

    def select_all(self, rooms: Iterable[Union[RoomAirflow, Mapping[str, Any]]]) -> ManualTResult:
        """Terminal selections for every room, in input order"""
        terminals = []
        for index, room in enumerate(rooms):
            if not isinstance(room, RoomAirflow):
                try:
                    room = RoomAirflow.model_validate(room)
                except PydanticValidationError as e:
                    raise from_pydantic_error(e, prefix=f"rooms.{index}") from e
            terminals.append(self.select_terminals(room.name, room.cfm, room.area))
        return ManualTResult(terminals=terminals)


def select_terminals(room_name: str, cfm: float, area: float, config: Optional[ManualTConfig] = None) -> TerminalSelection:
    """Manual T selection with default register assumptions"""
    return ManualTSelector(config).select_terminals(room_name, cfm, area)
