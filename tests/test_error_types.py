"""
Error taxonomy and numeric helper tests
"""

import logging

import pytest
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from hvac_loads.services.error_types import (
    ConfigurationError,
    CriticalError,
    DataQualityError,
    HVACCalculationError,
    MissingFieldError,
    NonCriticalError,
    ValidationError,
    from_pydantic_error,
    log_error_with_context,
)
from hvac_loads.utils.validation import ceil_to_increment, is_missing, round_half_up, round_int, safe_float


class _Sample(BaseModel):
    area: float = Field(..., ge=0)
    name: str


class TestHierarchy:

    def test_categories(self):
        assert issubclass(ValidationError, CriticalError)
        assert issubclass(MissingFieldError, ValidationError)
        assert issubclass(ConfigurationError, CriticalError)
        assert issubclass(DataQualityError, NonCriticalError)
        assert issubclass(CriticalError, HVACCalculationError)

    def test_missing_field_message(self):
        error = MissingFieldError('surfaces')

        assert error.field == 'surfaces'
        assert error.details['field'] == 'surfaces'
        assert "Required field 'surfaces' is missing" in str(error)

    def test_details_in_str(self):
        error = HVACCalculationError("Bad input", {'value': -1})
        assert str(error) == "Bad input | Details: {'value': -1}"
        assert str(HVACCalculationError("Plain")) == "Plain"


class TestFromPydantic:

    def test_first_error_names_field(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            _Sample.model_validate({'area': -1})

        error = from_pydantic_error(exc_info.value)

        assert isinstance(error, ValidationError)
        assert error.field == 'area'
        assert {e['field'] for e in error.details['errors']} == {'area', 'name'}

    def test_prefix(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            _Sample.model_validate({'area': -1, 'name': 'x'})

        error = from_pydantic_error(exc_info.value, prefix='rooms.2')
        assert error.field == 'rooms.2.area'


class TestLogging:

    def test_critical_logged_as_error(self, caplog):
        with caplog.at_level(logging.WARNING):
            log_error_with_context(ValidationError("bad area", field='area'), {'stage': 'manual_j'})
        assert caplog.records[-1].levelno == logging.ERROR

    def test_non_critical_logged_as_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            log_error_with_context(DataQualityError("defaulted"), {'stage': 'normalize'})
        assert caplog.records[-1].levelno == logging.WARNING


class TestNumericHelpers:

    @pytest.mark.parametrize("value,digits,expected", [
        (0.5, 0, 1), (2.5, 0, 3), (1.125, 2, 1.13), (133.333, 1, 133.3), (0.25, 1, 0.3),
    ])
    def test_round_half_up(self, value, digits, expected):
        assert round_half_up(value, digits) == pytest.approx(expected)

    def test_round_int(self):
        assert round_int(4999.5) == 5000
        assert isinstance(round_int(1.2), int)

    def test_ceil_to_increment(self):
        assert ceil_to_increment(6.01, 0.5) == 6.5
        assert ceil_to_increment(6.0, 0.5) == 6.0
        with pytest.raises(ValueError):
            ceil_to_increment(6.0, 0)

    @pytest.mark.parametrize("value", [None, '', '   ', float('nan')])
    def test_is_missing(self, value):
        assert is_missing(value)

    def test_zero_is_not_missing(self):
        assert not is_missing(0)

    def test_safe_float(self):
        assert safe_float('1,200') == 1200
        assert safe_float('abc', 5.0) == 5.0
        assert safe_float(True, 2.0) == 2.0
        assert safe_float(float('inf'), 3.0) == 3.0
        assert safe_float(-4, min_val=0) == 0
