"""
Peak solar heat gain factors (PSHGF) by latitude band and orientation

Coarse residential table in BTU/hr·ft² of glazing. Three latitude bands
(30°, 40°, 50°) stand in for the full ASHRAE solar-position tables; values
are approximate and intended for load estimation, not solar design.
"""

import logging
from types import MappingProxyType
from typing import Mapping, Optional

from hvac_loads.utils.validation import round_half_up

logger = logging.getLogger(__name__)


COMPASS_POINTS = ('N', 'NE', 'E', 'SE', 'S', 'SW', 'W', 'NW')
HORIZONTAL = 'Horizontal'

DEFAULT_SOLAR_FACTOR = 50.0

PEAK_SOLAR_GAINS: Mapping[int, Mapping[str, float]] = MappingProxyType({
    30: MappingProxyType({'N': 37, 'NE': 114, 'E': 202, 'SE': 198, 'S': 110,
                          'SW': 198, 'W': 202, 'NW': 114, HORIZONTAL: 262}),
    40: MappingProxyType({'N': 39, 'NE': 108, 'E': 216, 'SE': 200, 'S': 106,
                          'SW': 200, 'W': 216, 'NW': 108, HORIZONTAL: 258}),
    50: MappingProxyType({'N': 39, 'NE': 100, 'E': 219, 'SE': 195, 'S': 104,
                          'SW': 195, 'W': 219, 'NW': 100, HORIZONTAL: 246}),
})

# Accepted spellings from extractors and older payloads
_ORIENTATION_ALIASES = {
    'n': 'N', 'north': 'N',
    'ne': 'NE', 'northeast': 'NE', 'north_east': 'NE',
    'e': 'E', 'east': 'E',
    'se': 'SE', 'southeast': 'SE', 'south_east': 'SE',
    's': 'S', 'south': 'S',
    'sw': 'SW', 'southwest': 'SW', 'south_west': 'SW',
    'w': 'W', 'west': 'W',
    'nw': 'NW', 'northwest': 'NW', 'north_west': 'NW',
    'h': HORIZONTAL, 'horizontal': HORIZONTAL, 'roof': HORIZONTAL,
}


def normalize_orientation(orientation: Optional[str]) -> Optional[str]:
    """
    Map free-form orientation text to a table key

    Returns None when the text is not a recognised direction ('mixed',
    'unknown', empty).
    """
    if orientation is None:
        return None
    key = str(orientation).strip().lower().replace('-', '_').replace(' ', '_')
    return _ORIENTATION_ALIASES.get(key)


def latitude_bucket(latitude: float, buckets=(30, 40, 50)) -> int:
    """Nearest tabulated latitude band, clamped to the table range"""
    bucket = int(round_half_up(latitude / 10.0) * 10)
    return max(min(buckets), min(max(buckets), bucket))


class SolarGainModel:
    """
    Lookup of peak solar heat gain factors.

    The table is owned by the instance so tests and regional deployments can
    substitute their own values.
    """

    def __init__(
        self,
        table: Optional[Mapping[int, Mapping[str, float]]] = None,
        default_factor: float = DEFAULT_SOLAR_FACTOR
    ):
        self.table = table if table is not None else PEAK_SOLAR_GAINS
        self.default_factor = default_factor
        self._buckets = tuple(sorted(self.table))

    def get_solar_gain_factor(self, latitude: float, orientation: Optional[str]) -> float:
        """
        Peak solar heat gain factor for a glazing orientation

        Args:
            latitude: Site latitude in degrees
            orientation: Compass point, long name, or 'Horizontal'

        Returns:
            PSHGF in BTU/hr·ft²; the conservative default when the orientation is unknown
        """
        key = normalize_orientation(orientation)
        row = self.table.get(latitude_bucket(latitude, self._buckets))
        if key is None or row is None or key not in row:
            logger.debug(f"No solar factor for orientation={orientation!r}, using {self.default_factor}")
            return float(self.default_factor)
        return float(row[key])


default_solar_model = SolarGainModel()


def get_solar_gain_factor(latitude: float, orientation: Optional[str]) -> float:
    """Module-level lookup against the default table"""
    return default_solar_model.get_solar_gain_factor(latitude, orientation)
