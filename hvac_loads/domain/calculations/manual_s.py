"""
ACCA Manual S Equipment Selection Check
Compares equipment capacity with the Manual J design load

ACCA Table 1-4 residential limits:
    Cooling:  95% - 115% of total cooling load (125% for variable-speed)
    Sensible: equipment sensible capacity must cover the sensible load
    Heating:  at least 100% of the design heating load, 140% sanity ceiling
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from hvac_loads.core.settings import ManualSConfig
from hvac_loads.domain.core.models import CapacityRating
from hvac_loads.services.error_types import from_pydantic_error
from hvac_loads.utils.validation import round_half_up, round_int

logger = logging.getLogger(__name__)


class ManualSStatus(str, Enum):
    PASS = "Pass"
    UNDERSIZED = "Fail: Undersized"
    OVERSIZED = "Fail: Oversized"
    SHR_MISMATCH = "Warning: SHR Mismatch"


def _ratio_text(ratio: float) -> str:
    return f"{round_half_up(ratio, 2):.2f}"


@dataclass
class ManualSResult:
    """Equipment sizing verdict"""
    status: ManualSStatus
    total_capacity_ratio: float
    sensible_capacity_ratio: float
    heating_capacity_ratio: float
    min_cooling_btu: int
    max_cooling_btu: int
    heating_compliant: bool = True
    notes: List[str] = field(default_factory=list)

    @property
    def is_compliant(self) -> bool:
        return self.status == ManualSStatus.PASS and self.heating_compliant

    def to_json(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "totalCapacityRatio": self.total_capacity_ratio,
            "sensibleCapacityRatio": self.sensible_capacity_ratio,
            "heatingCapacityRatio": self.heating_capacity_ratio,
            # report figures, half-up to 2 decimals
            "coolingCompliance": _ratio_text(self.total_capacity_ratio),
            "sensibleCompliance": _ratio_text(self.sensible_capacity_ratio),
            "heatingCompliance": _ratio_text(self.heating_capacity_ratio),
            "sizingLimits": {
                "minCoolingBTU": self.min_cooling_btu,
                "maxCoolingBTU": self.max_cooling_btu,
            },
            "heatingCompliant": self.heating_compliant,
            "isCompliant": self.is_compliant,
            "notes": list(self.notes),
        }


RatingLike = Union[CapacityRating, Mapping[str, Any]]


def _coerce_rating(value: RatingLike, name: str) -> CapacityRating:
    if isinstance(value, CapacityRating):
        return value
    try:
        return CapacityRating.model_validate(value)
    except PydanticValidationError as e:
        raise from_pydantic_error(e, prefix=name) from e


class ManualSVerifier:
    """Checks a selected unit against the design load"""

    def __init__(self, config: Optional[ManualSConfig] = None):
        self.config = config or ManualSConfig()

    def verify_selection(self, load: RatingLike, equipment: RatingLike) -> ManualSResult:
        """
        Verify equipment capacity against design loads

        A zero design load is treated as 1 BTU/hr so ratios stay finite.

        Args:
            load: Design load {sensible, total, heating} in BTU/hr
            equipment: Equipment capacity {sensible, total, heating} in BTU/hr

        Returns:
            ManualSResult with status, ratios and the acceptable cooling window
        """
        load = _coerce_rating(load, 'load')
        equipment = _coerce_rating(equipment, 'equipment')
        cfg = self.config

        cooling_ratio = equipment.total / (load.total or 1)
        heating_ratio = equipment.heating / (load.heating or 1)
        sensible_ratio = equipment.sensible / (load.sensible or 1)

        notes = []
        if cooling_ratio < cfg.cooling_floor:
            status = ManualSStatus.UNDERSIZED
            notes.append(f"Cooling capacity is {cooling_ratio:.0%} of load, below the {cfg.cooling_floor:.0%} minimum")
        elif cooling_ratio > cfg.cooling_ceiling:
            status = ManualSStatus.OVERSIZED
            notes.append(f"Cooling capacity is {cooling_ratio:.0%} of load, above the {cfg.cooling_ceiling:.0%} limit")
        elif sensible_ratio < cfg.sensible_floor:
            status = ManualSStatus.SHR_MISMATCH
            notes.append(f"Sensible capacity covers only {sensible_ratio:.0%} of the sensible load")
        else:
            status = ManualSStatus.PASS

        heating_compliant = heating_ratio >= cfg.heating_floor
        if not heating_compliant:
            notes.append(f"Heating capacity is {heating_ratio:.0%} of load; undersized heating is not acceptable")
        elif heating_ratio > cfg.heating_ceiling:
            notes.append(f"Heating capacity is {heating_ratio:.0%} of load, above the {cfg.heating_ceiling:.0%} sanity ceiling")

        if status == ManualSStatus.PASS and heating_compliant and not notes:
            notes.append("Selection is within ACCA Manual S tolerances.")

        window = self.sizing_window(load.total)
        result = ManualSResult(
            status=status,
            total_capacity_ratio=cooling_ratio,
            sensible_capacity_ratio=sensible_ratio,
            heating_capacity_ratio=heating_ratio,
            min_cooling_btu=window["minCoolingBTU"],
            max_cooling_btu=window["maxCoolingBTU"],
            heating_compliant=heating_compliant,
            notes=notes,
        )

        logger.debug(
            f"Manual S: {status.value} (cooling {cooling_ratio:.2f}, sensible {sensible_ratio:.2f}, "
            f"heating {heating_ratio:.2f})"
        )
        return result

    def sizing_window(self, total_cooling_load: float) -> Dict[str, int]:
        """Acceptable nominal cooling capacity range for equipment selection"""
        return {
            "minCoolingBTU": round_int(total_cooling_load * self.config.cooling_floor),
            "maxCoolingBTU": round_int(total_cooling_load * self.config.cooling_ceiling),
        }


def verify_selection(load: RatingLike, equipment: RatingLike, config: Optional[ManualSConfig] = None) -> ManualSResult:
    """Manual S check with default (or given) limits"""
    return ManualSVerifier(config).verify_selection(load, equipment)
