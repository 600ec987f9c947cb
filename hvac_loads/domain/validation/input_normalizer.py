"""
Upstream Input Normalization

Turns the loosely-typed JSON produced by the extraction stage into a validated
ManualJInput. Three classes of problem are handled differently:

- Missing optional fields are filled with documented defaults and logged as
  data-quality issues; the calculation still runs.
- Present but invalid values (negative areas, non-finite numbers) are rejected
  with a ValidationError naming the field.
- Missing required structure (no surfaces, no design conditions, no outdoor
  design temperatures) raises MissingFieldError.

Two payload shapes are accepted: the ManualJInput shape
(design / surfaces / infiltration / ducts / internals) and the aggregated
envelope shape (climate / envelope / physics / internals).
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from hvac_loads.domain.core.models import MIXED_ORIENTATION, ManualJInput
from hvac_loads.domain.core.psychrometrics import BTU_PER_WATT
from hvac_loads.domain.core.solar_gains import COMPASS_POINTS, normalize_orientation
from hvac_loads.services.error_types import (
    DataQualityError,
    MissingFieldError,
    ValidationError,
    from_pydantic_error,
    log_error_with_context,
)
from hvac_loads.utils.logging_utils import log_data_quality
from hvac_loads.utils.validation import is_missing, safe_float

logger = logging.getLogger(__name__)


# Defaults used when the extractor leaves a value out
DEFAULT_U_VALUES = MappingProxyType({
    'wall': 0.05,
    'window': 0.55,
    'door': 0.20,
    'roof': 0.03,
    'ceiling': 0.03,
    'floor': 0.04,
})
DEFAULT_WINDOW_SHGC = 0.4
DEFAULT_ACH = 0.35
DEFAULT_VENTILATION_CFM = 15.0
DEFAULT_CEILING_HEIGHT_FT = 9.0
DEFAULT_FOUNDATION = 'slab'
DEFAULT_LATITUDE = 40.0
DEFAULT_INDOOR_WINTER = 70.0
DEFAULT_INDOOR_SUMMER = 75.0

# Floor heat loss multipliers by foundation type
FOUNDATION_FACTORS = MappingProxyType({
    'slab': 0.8,
    'basement': 1.0,
    'crawlspace': 1.2,
})

# Share of the cooling temperature difference that reaches a ground-coupled floor
FLOOR_COOLING_FRACTION = 0.5

# Inputs scoring below this are reported as a data-quality problem
ACCEPTABLE_QUALITY_SCORE = 0.8


@dataclass
class NormalizedInput:
    """Validated input plus a record of every default that was applied"""
    input: ManualJInput
    applied_defaults: List[str] = field(default_factory=list)
    source_shape: str = 'manual_j'

    @property
    def quality_score(self) -> float:
        return max(0.0, 1.0 - 0.05 * len(self.applied_defaults))


def _lookup(data: Mapping[str, Any], name: str, *aliases: str) -> Any:
    """Value for a snake_case field, accepting its camelCase spelling and any extra aliases"""
    for key in (name, to_camel(name)) + aliases:
        if key in data:
            return data[key]
    return None


def _section(data: Mapping[str, Any], name: str) -> Optional[Mapping[str, Any]]:
    value = _lookup(data, name)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValidationError(f"'{name}' must be an object", field=name, details={'value': value})
    return value


class InputNormalizer:
    """Applies the defaulting policy and validates the result"""

    def normalize(self, payload: Mapping[str, Any]) -> NormalizedInput:
        """
        Normalize either supported payload shape

        Args:
            payload: Upstream JSON object

        Returns:
            NormalizedInput
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("Load input must be a JSON object", field='$', details={'type': type(payload).__name__})

        if _lookup(payload, 'surfaces') is None and _lookup(payload, 'envelope') is not None:
            return self.normalize_envelope(payload)
        return self.normalize_manual_j(payload)

    def normalize_manual_j(self, payload: Mapping[str, Any]) -> NormalizedInput:
        """Normalize a ManualJInput-shaped payload"""
        applied: List[str] = []

        design = self._design(_section(payload, 'design'), 'design', applied)

        raw_surfaces = _lookup(payload, 'surfaces')
        if raw_surfaces is None:
            raise MissingFieldError('surfaces')
        if not isinstance(raw_surfaces, (list, tuple)):
            raise ValidationError("'surfaces' must be an array", field='surfaces', details={'value': raw_surfaces})

        surfaces = [self._surface(raw, index, applied) for index, raw in enumerate(raw_surfaces)]

        infiltration = dict(_section(payload, 'infiltration') or {})
        if is_missing(_lookup(infiltration, 'method')) and is_missing(_lookup(infiltration, 'value')):
            ceiling_height = safe_float(_lookup(payload, 'ceiling_height'), DEFAULT_CEILING_HEIGHT_FT)
            if is_missing(_lookup(payload, 'ceiling_height')):
                applied.append(f"ceilingHeight: {DEFAULT_CEILING_HEIGHT_FT:g} ft")
            infiltration = {
                'method': 'ACH',
                'value': DEFAULT_ACH,
                'volume': self._estimate_volume(surfaces, ceiling_height),
            }
            applied.append(f"infiltration: {DEFAULT_ACH} ACH")
        elif is_missing(_lookup(infiltration, 'volume')) and str(_lookup(infiltration, 'method') or 'ACH').upper() == 'ACH':
            ceiling_height = safe_float(_lookup(payload, 'ceiling_height'), DEFAULT_CEILING_HEIGHT_FT)
            infiltration['volume'] = self._estimate_volume(surfaces, ceiling_height)
            applied.append("infiltration.volume: floor area x ceiling height")

        ducts = _section(payload, 'ducts')
        if ducts is None:
            applied.append("ducts: conditioned space")
            ducts = {'location': 'conditioned'}

        internals = _section(payload, 'internals')
        if internals is None:
            applied.append("internals: none")
            internals = {}

        data = {
            'design': design,
            'surfaces': surfaces,
            'infiltration': infiltration,
            'ducts': ducts,
            'internals': internals,
        }
        return self._finish(data, applied, 'manual_j')

    def normalize_envelope(self, payload: Mapping[str, Any]) -> NormalizedInput:
        """
        Build a ManualJInput from the aggregated envelope shape

        The envelope areas become one surface per component; ventilation is
        added to ACH infiltration as a direct CFM rate.
        """
        applied: List[str] = []

        climate = _section(payload, 'climate') or _section(payload, 'design')
        design = self._design(climate, 'climate', applied)

        envelope = _section(payload, 'envelope')
        if envelope is None:
            raise MissingFieldError('envelope')
        physics = _section(payload, 'physics') or {}
        internals = _section(payload, 'internals') or {}

        def physics_value(name: str, default: float, *aliases: str) -> float:
            value = _lookup(physics, name, *aliases)
            if is_missing(value) or safe_float(value, 0.0) == 0.0:
                applied.append(f"physics.{to_camel(name)}: {default}")
                return default
            return value

        def envelope_area(name: str) -> Any:
            value = _lookup(envelope, name)
            return 0.0 if is_missing(value) else value

        ceiling_height = _lookup(envelope, 'ceiling_height')
        if is_missing(ceiling_height):
            ceiling_height = DEFAULT_CEILING_HEIGHT_FT
            applied.append(f"envelope.ceilingHeight: {DEFAULT_CEILING_HEIGHT_FT:g} ft")

        foundation = _lookup(envelope, 'foundation_type')
        if is_missing(foundation):
            foundation = DEFAULT_FOUNDATION
            applied.append(f"envelope.foundationType: {DEFAULT_FOUNDATION}")
        foundation = str(foundation).strip().lower().replace('_', '').replace(' ', '')
        foundation_factor = FOUNDATION_FACTORS.get(foundation, 1.0)

        floor_area = envelope_area('floor_area')
        # glazing follows a compass building through the orientation sweep; 'mixed' takes the default solar factor
        window_orientation = None if normalize_orientation(design['orientation']) in COMPASS_POINTS else MIXED_ORIENTATION
        dt_cool = max(0.0, safe_float(design['outdoor_temp_summer']) - safe_float(design['indoor_temp_summer']))

        surfaces = [
            {'name': 'Walls', 'type': 'wall', 'area': envelope_area('wall_area'),
             'u_value': physics_value('wall_u_value', DEFAULT_U_VALUES['wall'])},
            {'name': 'Windows', 'type': 'window', 'area': envelope_area('window_area'),
             'u_value': physics_value('window_u_value', DEFAULT_U_VALUES['window']),
             'shgc': physics_value('window_shgc', DEFAULT_WINDOW_SHGC, 'windowSHGC'),
             'orientation': window_orientation},
            {'name': 'Doors', 'type': 'door', 'area': envelope_area('door_area'),
             'u_value': physics_value('door_u_value', DEFAULT_U_VALUES['door'])},
            {'name': 'Roof/Ceiling', 'type': 'roof', 'area': envelope_area('roof_area'),
             'u_value': physics_value('roof_u_value', DEFAULT_U_VALUES['roof'])},
            {'name': 'Floor', 'type': 'floor', 'area': floor_area,
             'u_value': safe_float(physics_value('floor_u_value', DEFAULT_U_VALUES['floor'])) * foundation_factor,
             'cltd': dt_cool * FLOOR_COOLING_FRACTION},
        ]

        ach = safe_float(physics_value('air_changes', DEFAULT_ACH))
        ventilation = safe_float(physics_value('ventilation_cfm', DEFAULT_VENTILATION_CFM, 'ventilationCFM'))
        volume = safe_float(floor_area) * safe_float(ceiling_height, DEFAULT_CEILING_HEIGHT_FT)
        infiltration = {'method': 'CFM', 'value': ach * volume / 60.0 + ventilation, 'volume': volume}

        watts = safe_float(_lookup(internals, 'appliance_load_watts')) + safe_float(_lookup(internals, 'lighting_load_watts'))
        occupants = _lookup(internals, 'occupancy')
        if is_missing(occupants):
            occupants = _lookup(internals, 'occupants')
        data = {
            'design': design,
            'surfaces': surfaces,
            'infiltration': infiltration,
            'ducts': {'location': _lookup(envelope, 'duct_location') or 'conditioned'},
            'internals': {
                'occupants': 0 if is_missing(occupants) else occupants,
                'appliance_sensible': watts * BTU_PER_WATT,
                'appliance_latent': 0.0,
            },
        }
        return self._finish(data, applied, 'envelope')

    def _design(self, raw: Optional[Mapping[str, Any]], name: str, applied: List[str]) -> Dict[str, Any]:
        if raw is None:
            raise MissingFieldError(name)

        design = {}
        for key in ('outdoor_temp_winter', 'outdoor_temp_summer'):
            value = _lookup(raw, key)
            if is_missing(value):
                raise MissingFieldError(f"{name}.{to_camel(key)}")
            design[key] = value

        defaults = {
            'indoor_temp_winter': DEFAULT_INDOOR_WINTER,
            'indoor_temp_summer': DEFAULT_INDOOR_SUMMER,
            'daily_range': 'M',
            'latitude': DEFAULT_LATITUDE,
            'orientation': MIXED_ORIENTATION,
        }
        for key, default in defaults.items():
            value = _lookup(raw, key)
            if is_missing(value):
                applied.append(f"{name}.{to_camel(key)}: {default}")
                value = default
            design[key] = value

        grains = _lookup(raw, 'outdoor_grains')
        if is_missing(grains):
            grains = _lookup(raw, 'humidity_ratio')
        if not is_missing(grains):
            design['outdoor_grains'] = grains
        return design

    def _surface(self, raw: Any, index: int, applied: List[str]) -> Dict[str, Any]:
        if not isinstance(raw, Mapping):
            raise ValidationError(f"surfaces.{index} must be an object", field=f"surfaces.{index}")

        surface = {k: v for k, v in raw.items()}
        path = f"surfaces.{index}"

        surface_type = _lookup(raw, 'type')
        if is_missing(surface_type):
            surface_type = 'wall'
            applied.append(f"{path}.type: wall")
        surface_type = str(surface_type).strip().lower()
        surface['type'] = surface_type

        if is_missing(_lookup(raw, 'name')):
            surface['name'] = f"{surface_type.title()} {index + 1}"

        if is_missing(_lookup(raw, 'area')):
            surface['area'] = 0.0
            applied.append(f"{path}.area: 0")

        if is_missing(_lookup(raw, 'u_value')):
            u_value = DEFAULT_U_VALUES.get(surface_type, DEFAULT_U_VALUES['wall'])
            surface['u_value'] = u_value
            surface.pop('uValue', None)
            applied.append(f"{path}.uValue: {u_value}")

        if surface_type == 'window' and is_missing(_lookup(raw, 'shgc')):
            surface['shgc'] = DEFAULT_WINDOW_SHGC
            applied.append(f"{path}.shgc: {DEFAULT_WINDOW_SHGC}")

        return surface

    @staticmethod
    def _estimate_volume(surfaces: List[Dict[str, Any]], ceiling_height: float) -> float:
        floor_area = sum(safe_float(s.get('area')) for s in surfaces if s.get('type') == 'floor')
        if floor_area <= 0:
            floor_area = sum(safe_float(s.get('area')) for s in surfaces if s.get('type') in ('roof', 'ceiling'))
        return max(0.0, floor_area) * ceiling_height

    @staticmethod
    def _finish(data: Dict[str, Any], applied: List[str], shape: str) -> NormalizedInput:
        try:
            model = ManualJInput.model_validate(data)
        except PydanticValidationError as e:
            raise from_pydantic_error(e) from e

        result = NormalizedInput(input=model, applied_defaults=applied, source_shape=shape)
        log_data_quality(shape, result.quality_score, applied, logger)
        if result.quality_score < ACCEPTABLE_QUALITY_SCORE:
            log_error_with_context(
                DataQualityError(
                    f"{len(applied)} input values were defaulted",
                    {'quality_score': result.quality_score, 'applied_defaults': list(applied)},
                ),
                {'stage': 'normalize_input', 'source_shape': shape},
            )
        return result


_normalizer = InputNormalizer()


def normalize_manual_j_input(payload: Mapping[str, Any]) -> ManualJInput:
    """Validated ManualJInput from either upstream payload shape"""
    return _normalizer.normalize(payload).input


def build_input_from_envelope(payload: Mapping[str, Any]) -> ManualJInput:
    """Validated ManualJInput from the aggregated envelope shape"""
    return _normalizer.normalize_envelope(payload).input
