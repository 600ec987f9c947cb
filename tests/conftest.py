"""
Pytest configuration and fixtures
"""
import pytest

from hvac_loads.core.settings import ManualJConfig
from hvac_loads.domain.calculations.manual_j import ManualJCalculator
from hvac_loads.domain.core.models import ManualJInput


@pytest.fixture
def design_conditions():
    """Cold-winter / hot-summer design day at 40° N"""
    return {
        'outdoorTempWinter': 10,
        'outdoorTempSummer': 95,
        'indoorTempWinter': 70,
        'indoorTempSummer': 75,
        'latitude': 40,
        'orientation': 'mixed',
    }


@pytest.fixture
def single_wall_payload():
    """One 1000 ft² wall, no glazing, no infiltration, internals or duct penalty"""
    return {
        'design': {
            'outdoorTempWinter': -10,
            'outdoorTempSummer': 95,
            'indoorTempWinter': 70,
            'indoorTempSummer': 75,
        },
        'surfaces': [
            {'name': 'Wall', 'type': 'wall', 'area': 1000, 'uValue': 0.05},
        ],
        'infiltration': {'method': 'ACH', 'value': 0, 'volume': 0},
        'ducts': {'location': 'conditioned'},
        'internals': {'occupants': 0, 'applianceSensible': 0, 'applianceLatent': 0},
    }


@pytest.fixture
def single_wall_input(single_wall_payload):
    return ManualJInput.model_validate(single_wall_payload)


@pytest.fixture
def house_payload(design_conditions):
    """Small house with oriented glazing, a CLTD roof, ACH infiltration and attic ducts"""
    return {
        'design': design_conditions,
        'surfaces': [
            {'name': 'North Wall', 'type': 'wall', 'area': 400, 'uValue': 0.06, 'orientation': 'N'},
            {'name': 'South Window', 'type': 'window', 'area': 40, 'uValue': 0.30, 'shgc': 0.25, 'orientation': 'S'},
            {'name': 'East Window', 'type': 'window', 'area': 20, 'uValue': 0.30, 'shgc': 0.25, 'orientation': 'E'},
            {'name': 'Roof', 'type': 'roof', 'area': 1500, 'uValue': 0.03, 'cltd': 40},
            {'name': 'Slab', 'type': 'floor', 'area': 1500, 'uValue': 0.03},
        ],
        'infiltration': {'method': 'ACH', 'value': 0.35, 'volume': 12000},
        'ducts': {'location': 'attic', 'rValue': 6, 'area': 300},
        'internals': {'occupants': 3, 'applianceSensible': 1200, 'applianceLatent': 0},
    }


@pytest.fixture
def house_input(house_payload):
    return ManualJInput.model_validate(house_payload)


@pytest.fixture
def calculator():
    return ManualJCalculator()


@pytest.fixture
def r_value_calculator():
    return ManualJCalculator(ManualJConfig(duct_loss_mode='r_value'))
