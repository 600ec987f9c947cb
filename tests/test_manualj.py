"""
Manual J load engine tests
Hand-checked loads for small buildings plus the engine's structural properties
"""

import logging

import pytest

from hvac_loads.core.settings import ManualJConfig
from hvac_loads.domain.calculations.manual_j import (
    DUCT_COMPONENT,
    INFILTRATION_COMPONENT,
    INTERNALS_COMPONENT,
    SOLAR_COMPONENT,
    ManualJCalculator,
    calculate_manual_j,
)
from hvac_loads.domain.core.models import ManualJInput
from hvac_loads.domain.core.solar_gains import DEFAULT_SOLAR_FACTOR
from hvac_loads.services.error_types import ValidationError


def _with_surface(payload, **changes):
    surface = dict(payload['surfaces'][0], **changes)
    return dict(payload, surfaces=[surface] + payload['surfaces'][1:])


class TestSingleSurface:
    """One-wall building with every other load switched off"""

    def test_single_wall_loads(self, calculator, single_wall_input):
        result = calculator.calculate(single_wall_input)

        assert result.heating_load == 4000
        assert result.cooling_sensible == 1000
        assert result.cooling_latent == 0
        assert result.total_cooling == 1000

    def test_single_wall_airflow(self, calculator, single_wall_input):
        """CFM = load / (1.08 x supply dT), 50°F heating and 20°F cooling"""
        result = calculator.calculate(single_wall_input)

        assert result.heating_cfm == 74
        assert result.cooling_cfm == 46

    def test_accepts_camel_case_mapping(self, single_wall_payload):
        result = calculate_manual_j(single_wall_payload)
        assert result.heating_load == 4000

    def test_zero_heating_delta_t(self, calculator, single_wall_payload):
        """Winter outdoor at or above indoor gives no heating transmission"""
        payload = dict(single_wall_payload)
        payload['design'] = dict(payload['design'], outdoorTempWinter=72)

        result = calculator.calculate(payload)

        assert result.heating_load == 0
        assert result.find_component('Wall')[0] == 0

    def test_zero_cooling_delta_t(self, calculator, single_wall_payload):
        payload = dict(single_wall_payload)
        payload['design'] = dict(payload['design'], outdoorTempSummer=70)

        result = calculator.calculate(payload)

        assert result.cooling_sensible == 0
        assert result.total_cooling == 0

    def test_cltd_replaces_cooling_delta_t(self, calculator, single_wall_payload):
        payload = _with_surface(single_wall_payload, cltd=30)
        result = calculator.calculate(payload)

        assert result.cooling_sensible == 1500
        assert result.heating_load == 4000


class TestHouseLoads:
    """Multi-surface house with glazing, infiltration, internals and attic ducts"""

    def test_totals(self, calculator, house_input):
        result = calculator.calculate(house_input)

        assert result.heating_load == 14324
        assert result.cooling_sensible == 10898
        assert result.cooling_latent == 3361
        assert result.total_cooling == 14259
        assert result.heating_cfm == 265
        assert result.cooling_cfm == 505

    def test_breakdown_order(self, calculator, house_input):
        result = calculator.calculate(house_input)

        assert [item.component for item in result.breakdown] == [
            'North Wall', 'South Window', SOLAR_COMPONENT, 'East Window', 'Roof', 'Slab',
            INFILTRATION_COMPONENT, INTERNALS_COMPONENT, DUCT_COMPONENT,
        ]

    def test_breakdown_lines(self, calculator, house_input):
        result = calculator.calculate(house_input)

        assert result.find_component('North Wall') == (1440, 480)
        assert result.find_component('South Window') == (720, 240)
        assert result.find_component('Roof') == (2700, 1800)
        assert result.find_component(SOLAR_COMPONENT) == (0, 2140)
        assert result.find_component(INFILTRATION_COMPONENT) == (4536, 4273)
        assert result.find_component(INTERNALS_COMPONENT) == (0, 2490)
        assert result.find_component(DUCT_COMPONENT) == (1868, 1816)

    def test_breakdown_sums_to_totals(self, calculator, house_input):
        """Lines are rounded individually, so sums may drift by one per line"""
        result = calculator.calculate(house_input)
        tolerance = len(result.breakdown)

        assert abs(sum(i.heating for i in result.breakdown) - result.heating_load) <= tolerance
        assert abs(sum(i.cooling for i in result.breakdown) - result.total_cooling) <= tolerance

    def test_cooling_total_identity(self, calculator, house_input):
        result = calculator.calculate(house_input)
        assert result.total_cooling == result.cooling_sensible + result.cooling_latent

    def test_grains_difference_from_estimate(self, calculator, house_input):
        """95°F estimates 123 grains outdoors against 65 indoors"""
        result = calculator.calculate(house_input)
        assert result.grains_difference == pytest.approx(58.0)

    def test_measured_outdoor_grains(self, calculator, house_payload):
        house_payload['design'] = dict(house_payload['design'], outdoorGrains=60)
        result = calculator.calculate(house_payload)

        assert result.grains_difference == 0
        assert result.cooling_latent == 600    # people only

    def test_to_json(self, calculator, house_input):
        payload = calculator.calculate(house_input).to_json()

        assert payload['coolingLoad'] == payload['totalCooling']
        assert payload['psychrometrics']['grainsDifference'] == pytest.approx(58.0)
        assert payload['psychrometrics']['sensibleHeatRatio'] == pytest.approx(0.764)
        assert payload['breakdown'][0] == {'component': 'North Wall', 'heating': 1440, 'cooling': 480}


class TestMonotonicity:
    """More area or a higher U-value never lowers the loads"""

    @pytest.mark.parametrize("field,values", [
        ('area', [0, 100, 500, 1000, 2500]),
        ('uValue', [0.0, 0.02, 0.05, 0.1, 0.5]),
    ])
    def test_wall_changes(self, calculator, house_payload, field, values):
        previous = None
        for value in values:
            result = calculator.calculate(_with_surface(house_payload, **{field: value}))
            if previous is not None:
                assert result.heating_load >= previous.heating_load
                assert result.cooling_sensible >= previous.cooling_sensible
            previous = result

    def test_window_area(self, calculator, house_payload):
        base = calculator.calculate(house_payload)
        surfaces = [dict(s) for s in house_payload['surfaces']]
        surfaces[1]['area'] = 80
        larger = calculator.calculate(dict(house_payload, surfaces=surfaces))

        assert larger.heating_load > base.heating_load
        assert larger.cooling_sensible > base.cooling_sensible


class TestDuctGating:
    """Duct penalties only apply outside the conditioned space"""

    def test_conditioned_ducts_add_nothing(self, calculator, house_payload):
        house_payload['ducts'] = {'location': 'conditioned'}
        result = calculator.calculate(house_payload)

        assert result.find_component(DUCT_COMPONENT) == (0, 0)
        assert all(item.component != DUCT_COMPONENT for item in result.breakdown)
        assert result.heating_load == 12456

    def test_unconditioned_ducts_increase_loads(self, calculator, house_payload):
        house_payload['ducts'] = {'location': 'conditioned'}
        baseline = calculator.calculate(house_payload)

        for location in ('attic', 'crawlspace', 'basement', 'garage'):
            house_payload['ducts'] = {'location': location}
            result = calculator.calculate(house_payload)
            assert result.heating_load > baseline.heating_load
            assert result.cooling_sensible > baseline.cooling_sensible

    def test_location_aliases(self, calculator, house_payload):
        house_payload['ducts'] = {'location': 'Conditioned Space'}
        result = calculator.calculate(house_payload)
        assert result.find_component(DUCT_COMPONENT) == (0, 0)


class TestInfiltration:

    def test_ach_method(self, calculator, house_input):
        result = calculator.calculate(house_input)
        assert result.infiltration_cfm == pytest.approx(70.0)

    def test_cfm_method_is_not_scaled(self, calculator, single_wall_payload):
        single_wall_payload['infiltration'] = {'method': 'CFM', 'value': 100}
        result = calculator.calculate(single_wall_payload)

        assert result.infiltration_cfm == pytest.approx(100.0)
        assert result.find_component(INFILTRATION_COMPONENT)[0] == round(100 * 1.08 * 80)

    def test_legacy_cfm_scaling(self, single_wall_payload, caplog):
        single_wall_payload['infiltration'] = {'method': 'cfm', 'value': 100}
        calculator = ManualJCalculator(ManualJConfig(legacy_cfm_scaling=True))

        with caplog.at_level(logging.WARNING):
            result = calculator.calculate(single_wall_payload)

        assert result.infiltration_cfm == pytest.approx(5.0)
        assert "Legacy CFM scaling" in caplog.text


class TestInternalGains:

    def test_people_and_appliances(self, calculator, single_wall_payload):
        single_wall_payload['internals'] = {'occupants': 2, 'applianceSensible': 500, 'applianceLatent': 100}
        result = calculator.calculate(single_wall_payload)

        assert result.cooling_sensible == 1000 + 2 * 230 + 500
        assert result.cooling_latent == 2 * 200 + 100
        assert result.heating_load == 4000


class TestSolarGain:

    def test_oriented_window(self, calculator, single_wall_payload):
        single_wall_payload['surfaces'] = [
            {'name': 'Window', 'type': 'window', 'area': 100, 'uValue': 0.5, 'shgc': 0.5, 'orientation': 'W'},
        ]
        result = calculator.calculate(single_wall_payload)

        assert result.find_component('Window') == (4000, 1000)
        assert result.find_component(SOLAR_COMPONENT) == (0, 100 * 0.5 * 216)

    def test_internal_shading(self, calculator, single_wall_payload):
        single_wall_payload['surfaces'] = [
            {'name': 'Window', 'type': 'window', 'area': 100, 'uValue': 0.5, 'shgc': 0.5,
             'orientation': 'S', 'internalShading': 0.5},
        ]
        result = calculator.calculate(single_wall_payload)
        assert result.find_component(SOLAR_COMPONENT) == (0, 2650)

    def test_window_inherits_building_orientation(self, calculator, single_wall_payload):
        single_wall_payload['design'] = dict(single_wall_payload['design'], orientation='south')
        single_wall_payload['surfaces'] = [
            {'name': 'Window', 'type': 'window', 'area': 100, 'uValue': 0.5, 'shgc': 0.5},
        ]
        result = calculator.calculate(single_wall_payload)
        assert result.find_component(SOLAR_COMPONENT) == (0, 5300)

    def test_unoriented_window_in_mixed_building(self, calculator, single_wall_payload):
        """No direction at all means transmission only"""
        single_wall_payload['surfaces'] = [
            {'name': 'Window', 'type': 'window', 'area': 100, 'uValue': 0.5, 'shgc': 0.5},
        ]
        result = calculator.calculate(single_wall_payload)

        assert result.find_component(SOLAR_COMPONENT) == (0, 0)
        assert result.cooling_sensible == 1000

    @pytest.mark.parametrize("orientation", ['mixed', 'unknown', 'Street side'])
    def test_unrecognised_orientation_uses_default_factor(self, calculator, single_wall_payload, orientation):
        single_wall_payload['surfaces'] = [
            {'name': 'Window', 'type': 'window', 'area': 100, 'uValue': 0.5, 'shgc': 0.5,
             'orientation': orientation},
        ]
        result = calculator.calculate(single_wall_payload)

        assert result.find_component(SOLAR_COMPONENT) == (0, 100 * 0.5 * DEFAULT_SOLAR_FACTOR)
        assert result.cooling_sensible == 1000 + 2500

    def test_unrecognised_orientation_kept_on_surface(self, single_wall_payload):
        single_wall_payload['surfaces'] = [
            {'name': 'Window', 'type': 'window', 'area': 10, 'uValue': 0.5, 'orientation': ' mixed '},
            {'name': 'Skylight', 'type': 'window', 'area': 10, 'uValue': 0.5, 'orientation': 'horizontal'},
            {'name': 'Door', 'type': 'door', 'area': 20, 'uValue': 0.2, 'orientation': ''},
        ]
        window, skylight, door = ManualJInput.model_validate(single_wall_payload).surfaces

        assert window.orientation == 'mixed'
        assert skylight.orientation == 'Horizontal'
        assert door.orientation is None

    def test_window_without_shgc(self, calculator, single_wall_payload):
        single_wall_payload['surfaces'] = [
            {'name': 'Window', 'type': 'window', 'area': 100, 'uValue': 0.5, 'orientation': 'E'},
        ]
        result = calculator.calculate(single_wall_payload)
        assert result.cooling_sensible == 1000


class TestInputValidation:
    """Bad data is rejected when the input is built, with the field named"""

    def test_negative_area(self, calculator, single_wall_payload):
        with pytest.raises(ValidationError) as exc_info:
            calculator.calculate(_with_surface(single_wall_payload, area=-5))
        assert exc_info.value.field == 'surfaces.0.area'

    def test_negative_u_value(self, single_wall_payload):
        with pytest.raises(ValidationError) as exc_info:
            calculate_manual_j(_with_surface(single_wall_payload, uValue=-0.1))
        assert 'surfaces.0' in exc_info.value.field

    def test_non_finite_number(self, single_wall_payload):
        with pytest.raises(ValidationError):
            calculate_manual_j(_with_surface(single_wall_payload, area=float('inf')))

    def test_input_is_immutable(self, single_wall_input):
        with pytest.raises(Exception):
            single_wall_input.surfaces = []

    def test_snake_case_fields(self):
        data = ManualJInput(
            design={'outdoor_temp_winter': -10, 'outdoor_temp_summer': 95},
            surfaces=[{'name': 'Wall', 'type': 'WALL', 'area': 1000, 'u_value': 0.05}],
        )
        assert calculate_manual_j(data).heating_load == 4000
