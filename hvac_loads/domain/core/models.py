"""
Input data model for the load and sizing engines
Immutable pydantic models validated once, at construction

Field names are snake_case; the camelCase names produced by the upstream
extraction stage (outdoorTempWinter, uValue, ...) are accepted as aliases.
"""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from hvac_loads.domain.core.solar_gains import COMPASS_POINTS, normalize_orientation
from hvac_loads.services.error_types import ValidationError
from hvac_loads.utils.validation import is_missing


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        extra='ignore',
    )


class SurfaceType(str, Enum):
    WALL = "wall"
    WINDOW = "window"
    DOOR = "door"
    ROOF = "roof"
    CEILING = "ceiling"
    FLOOR = "floor"


class InfiltrationMethod(str, Enum):
    ACH = "ACH"
    CFM = "CFM"


MIXED_ORIENTATION = 'mixed'

_DAILY_RANGE_ALIASES = {'l': 'L', 'low': 'L', 'm': 'M', 'medium': 'M', 'h': 'H', 'high': 'H'}

# Duct location spellings seen from forms and extractors
_DUCT_LOCATION_ALIASES = {
    'conditioned_space': 'conditioned',
    'inside': 'conditioned',
    'vented_attic': 'attic',
    'unconditioned_attic': 'attic',
    'crawl_space': 'crawlspace',
    'crawl': 'crawlspace',
    'vented_crawlspace': 'crawlspace',
    'unconditioned_crawlspace': 'crawlspace',
    'unconditioned_basement': 'basement',
    'outdoors': 'exterior',
    'outside': 'exterior',
}


class ClimateConditions(_FrozenModel):
    """Design conditions for one calculation run"""
    outdoor_temp_winter: float
    outdoor_temp_summer: float
    indoor_temp_winter: float = 70.0
    indoor_temp_summer: float = 75.0
    daily_range: Literal['L', 'M', 'H'] = 'M'
    latitude: float = Field(40.0, ge=-90, le=90)
    orientation: str = MIXED_ORIENTATION
    outdoor_grains: Optional[float] = Field(None, ge=0)

    @field_validator('daily_range', mode='before')
    @classmethod
    def normalize_daily_range(cls, v):
        if isinstance(v, str):
            return _DAILY_RANGE_ALIASES.get(v.strip().lower(), v)
        return v

    @field_validator('orientation', mode='before')
    @classmethod
    def normalize_building_orientation(cls, v):
        key = normalize_orientation(v)
        return key if key in COMPASS_POINTS else MIXED_ORIENTATION


class Surface(_FrozenModel):
    """One exterior building element"""
    name: str = Field(..., min_length=1)
    type: SurfaceType
    area: float = Field(..., ge=0, description="Square feet")
    u_value: float = Field(..., ge=0, description="BTU/hr·ft²·°F")
    shgc: Optional[float] = Field(None, ge=0, le=1)
    orientation: Optional[str] = None
    internal_shading: float = Field(1.0, ge=0)
    cltd: Optional[float] = None

    @field_validator('type', mode='before')
    @classmethod
    def normalize_type(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator('orientation', mode='before')
    @classmethod
    def normalize_surface_orientation(cls, v):
        if is_missing(v):
            return None
        # Unrecognised text ('mixed', 'unknown') is kept so glazing still gets the default solar factor
        return normalize_orientation(v) or str(v).strip()

    @property
    def is_window(self) -> bool:
        return self.type == SurfaceType.WINDOW


class InfiltrationSpec(_FrozenModel):
    """Infiltration/ventilation airflow definition"""
    method: InfiltrationMethod = InfiltrationMethod.ACH
    value: float = Field(0.0, ge=0)
    volume: float = Field(0.0, ge=0, description="Conditioned volume in cubic feet (ACH method)")

    @field_validator('method', mode='before')
    @classmethod
    def normalize_method(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


class DuctSpec(_FrozenModel):
    """Duct system location and insulation"""
    location: str = 'conditioned'
    r_value: float = Field(6.0, ge=0)
    area: float = Field(0.0, ge=0, description="Duct surface area in square feet")

    @field_validator('location', mode='before')
    @classmethod
    def normalize_location(cls, v):
        if v is None:
            return 'conditioned'
        key = str(v).strip().lower().replace('-', '_').replace(' ', '_')
        return _DUCT_LOCATION_ALIASES.get(key, key)

    @property
    def in_conditioned_space(self) -> bool:
        return self.location == 'conditioned'


class InternalLoads(_FrozenModel):
    """Occupants and pre-aggregated appliance gains"""
    occupants: float = Field(0, ge=0)
    appliance_sensible: float = Field(0.0, ge=0, description="BTU/hr")
    appliance_latent: float = Field(0.0, ge=0, description="BTU/hr")


class ManualJInput(_FrozenModel):
    """Aggregate input for one Manual J run (whole building or one room)"""
    design: ClimateConditions
    surfaces: List[Surface]
    infiltration: InfiltrationSpec = Field(default_factory=InfiltrationSpec)
    ducts: DuctSpec = Field(default_factory=DuctSpec)
    internals: InternalLoads = Field(default_factory=InternalLoads)

    def with_orientation(self, direction: str) -> 'ManualJInput':
        """
        Copy of this input with the building orientation replaced

        Args:
            direction: Compass point (N, NE, ... NW), long name, or 'mixed'

        Returns:
            New ManualJInput; this instance is left untouched
        """
        key = normalize_orientation(direction)
        if key not in COMPASS_POINTS:
            if str(direction).strip().lower() != MIXED_ORIENTATION:
                raise ValidationError(
                    f"Unknown orientation: {direction!r}", field='orientation', details={'value': direction})
            key = MIXED_ORIENTATION
        design = self.design.model_copy(update={'orientation': key})
        return self.model_copy(update={'design': design})

    @property
    def windows(self) -> List[Surface]:
        return [s for s in self.surfaces if s.is_window]


class CapacityRating(_FrozenModel):
    """Sensible, total and heating BTU/hr - either a design load or an equipment capacity"""
    sensible: float = Field(0.0, ge=0)
    total: float = Field(0.0, ge=0)
    heating: float = Field(0.0, ge=0)


class RoomAirflow(_FrozenModel):
    """Room design airflow for duct and terminal sizing"""
    name: str = Field(..., min_length=1)
    cfm: float = Field(..., ge=0)
    area: float = Field(0.0, ge=0)


class RoomArea(_FrozenModel):
    """Room floor area for apportioning whole-building loads"""
    name: str = Field(..., min_length=1)
    area: float = Field(..., ge=0)
