"""
Tunable constants for the Manual J/S/D/T engines

Each engine takes its own frozen config so a caller (or a test) can change one
assumption without touching module state. EngineSettings.from_env() builds the
whole set from HVAC_* environment variables.
"""

import logging
import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict

from hvac_loads.core.environment import (
    get_env_bool, get_env_float, get_env_str, load_environment
)
from hvac_loads.domain.core import psychrometrics
from hvac_loads.services.error_types import ConfigurationError

logger = logging.getLogger(__name__)

DUCT_LOSS_MODES = ('percentage', 'r_value')

STANDARD_COOLING_CEILING = 1.15
VARIABLE_SPEED_COOLING_CEILING = 1.25


def _require_positive(config: Any, *names: str) -> None:
    for name in names:
        value = getattr(config, name)
        if not math.isfinite(value) or value <= 0:
            raise ConfigurationError(
                f"{type(config).__name__}.{name} must be a positive number",
                {'field': name, 'value': value}
            )


def _require_non_negative(config: Any, *names: str) -> None:
    for name in names:
        value = getattr(config, name)
        if not math.isfinite(value) or value < 0:
            raise ConfigurationError(
                f"{type(config).__name__}.{name} must be zero or positive",
                {'field': name, 'value': value}
            )


@dataclass(frozen=True)
class ManualJConfig:
    """Load engine assumptions"""
    supply_dt_heating: float = 50.0    # °F, heating supply air minus room air
    supply_dt_cooling: float = 20.0    # °F, room air minus cooling supply air
    sensible_factor: float = psychrometrics.SENSIBLE_HEAT_FACTOR
    latent_factor: float = psychrometrics.LATENT_HEAT_FACTOR
    indoor_grains: float = psychrometrics.INDOOR_GRAINS
    people_sensible_btu: float = psychrometrics.PEOPLE_SENSIBLE_BTU
    people_latent_btu: float = psychrometrics.PEOPLE_LATENT_BTU

    duct_loss_mode: str = 'percentage'
    duct_heating_penalty: float = 0.15
    duct_cooling_penalty: float = 0.20

    # Older payloads scaled CFM-method infiltration by 0.05; off unless a caller needs those numbers back
    legacy_cfm_scaling: bool = False
    legacy_cfm_factor: float = 0.05

    aed_default_shgc: float = 0.3
    aed_limit_percent: float = 30.0

    def __post_init__(self):
        _require_positive(self, 'supply_dt_heating', 'supply_dt_cooling', 'sensible_factor', 'aed_limit_percent')
        _require_non_negative(
            self, 'latent_factor', 'indoor_grains', 'people_sensible_btu', 'people_latent_btu',
            'duct_heating_penalty', 'duct_cooling_penalty', 'legacy_cfm_factor', 'aed_default_shgc'
        )
        if self.duct_loss_mode not in DUCT_LOSS_MODES:
            raise ConfigurationError(
                f"Unknown duct loss mode '{self.duct_loss_mode}'",
                {'allowed': list(DUCT_LOSS_MODES)}
            )


@dataclass(frozen=True)
class ManualSConfig:
    """ACCA Table 1-4 sizing limits"""
    cooling_floor: float = 0.95
    cooling_ceiling: float = STANDARD_COOLING_CEILING
    heating_floor: float = 1.0
    heating_ceiling: float = 1.40
    sensible_floor: float = 1.0

    def __post_init__(self):
        _require_positive(self, 'cooling_floor', 'cooling_ceiling', 'heating_floor', 'heating_ceiling', 'sensible_floor')
        if self.cooling_ceiling < self.cooling_floor:
            raise ConfigurationError(
                "Cooling ceiling must not be below the cooling floor",
                {'cooling_floor': self.cooling_floor, 'cooling_ceiling': self.cooling_ceiling}
            )
        if self.heating_ceiling < self.heating_floor:
            raise ConfigurationError(
                "Heating ceiling must not be below the heating floor",
                {'heating_floor': self.heating_floor, 'heating_ceiling': self.heating_ceiling}
            )

    @classmethod
    def variable_speed(cls) -> 'ManualSConfig':
        """Limits for variable-speed equipment"""
        return cls(cooling_ceiling=VARIABLE_SPEED_COOLING_CEILING)


@dataclass(frozen=True)
class ManualDConfig:
    """Empirical branch-sizing curve: d = (cfm / divisor) ** exponent x 2"""
    curve_divisor: float = 15.0
    curve_exponent: float = 0.45
    size_increment_in: float = 0.5
    min_diameter_in: float = 5.0
    default_static_pressure: float = 0.5    # in. w.c.
    default_equivalent_length: float = 250.0  # ft

    def __post_init__(self):
        _require_positive(
            self, 'curve_divisor', 'curve_exponent', 'size_increment_in', 'min_diameter_in',
            'default_equivalent_length'
        )
        _require_non_negative(self, 'default_static_pressure')


@dataclass(frozen=True)
class ManualTConfig:
    """Residential register heuristics"""
    register_capacity_cfm: float = 180.0
    register_free_area_sqft: float = 0.28   # 4x10 diffuser Ak
    register_size: str = '4x10'
    throw_fraction: float = 0.75
    max_face_velocity_fpm: float = 700.0

    def __post_init__(self):
        _require_positive(
            self, 'register_capacity_cfm', 'register_free_area_sqft', 'throw_fraction',
            'max_face_velocity_fpm'
        )


@dataclass(frozen=True)
class EngineSettings:
    """Configuration for every engine in one place"""
    manual_j: ManualJConfig = field(default_factory=ManualJConfig)
    manual_s: ManualSConfig = field(default_factory=ManualSConfig)
    manual_d: ManualDConfig = field(default_factory=ManualDConfig)
    manual_t: ManualTConfig = field(default_factory=ManualTConfig)

    @classmethod
    def from_env(cls, load_dotenv_files: bool = True) -> 'EngineSettings':
        """
        Build settings from HVAC_* environment variables

        Args:
            load_dotenv_files: Load .env/.env.local from the working directory first

        Returns:
            EngineSettings with environment overrides applied
        """
        if load_dotenv_files:
            load_environment()

        j = ManualJConfig()
        s_defaults = ManualSConfig()
        d = ManualDConfig()
        t = ManualTConfig()

        manual_j = ManualJConfig(
            supply_dt_heating=get_env_float('HVAC_SUPPLY_DT_HEATING', j.supply_dt_heating),
            supply_dt_cooling=get_env_float('HVAC_SUPPLY_DT_COOLING', j.supply_dt_cooling),
            indoor_grains=get_env_float('HVAC_INDOOR_GRAINS', j.indoor_grains),
            duct_loss_mode=get_env_str('HVAC_DUCT_LOSS_MODE', j.duct_loss_mode).lower(),
            legacy_cfm_scaling=get_env_bool('HVAC_LEGACY_CFM_SCALING', j.legacy_cfm_scaling),
        )

        ceiling_default = (
            VARIABLE_SPEED_COOLING_CEILING if get_env_bool('HVAC_VARIABLE_SPEED', False)
            else s_defaults.cooling_ceiling
        )
        manual_s = ManualSConfig(
            cooling_ceiling=get_env_float('HVAC_COOLING_CEILING', ceiling_default),
        )

        manual_d = ManualDConfig(
            curve_divisor=get_env_float('HVAC_DUCT_CURVE_DIVISOR', d.curve_divisor),
            curve_exponent=get_env_float('HVAC_DUCT_CURVE_EXPONENT', d.curve_exponent),
            min_diameter_in=get_env_float('HVAC_MIN_DUCT_DIAMETER', d.min_diameter_in),
        )

        manual_t = ManualTConfig(
            register_capacity_cfm=get_env_float('HVAC_REGISTER_CAPACITY_CFM', t.register_capacity_cfm),
            register_free_area_sqft=get_env_float('HVAC_REGISTER_FREE_AREA', t.register_free_area_sqft),
        )

        settings = cls(manual_j=manual_j, manual_s=manual_s, manual_d=manual_d, manual_t=manual_t)
        logger.info(
            f"Engine settings: supply dT {manual_j.supply_dt_heating:g}/{manual_j.supply_dt_cooling:g}°F, "
            f"duct mode {manual_j.duct_loss_mode}, cooling ceiling {manual_s.cooling_ceiling:.2f}"
        )
        return settings

    def to_json(self) -> Dict[str, Any]:
        return {
            section.name: {f.name: getattr(getattr(self, section.name), f.name)
                           for f in fields(getattr(self, section.name))}
            for section in fields(self)
        }
