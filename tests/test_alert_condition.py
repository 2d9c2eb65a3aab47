import pytest

from models.alert import AlertCondition, Operator, calculate_severity
from models.enums import AlertType, Severity


@pytest.mark.parametrize(
    "operator, current, expected",
    [
        (Operator.GT, 31, True),
        (Operator.GT, 30, False),
        (Operator.GTE, 30, True),
        (Operator.LT, 29.9, True),
        (Operator.LTE, 30.1, False),
        (Operator.EQ, 30, True),
    ],
)
def test_evaluate(operator, current, expected):
    assert AlertCondition(operator=operator, value=30).evaluate(current) is expected


def test_condition_is_stored_as_json():
    condition = AlertCondition(operator=Operator.LT, value=-5)
    raw = condition.to_json()
    assert '"operator":"lt"' in raw
    assert AlertCondition.from_json(raw) == condition
    assert condition.describe() == "< -5"


def test_temperature_severity_scales_with_deviation():
    assert calculate_severity(AlertType.TEMPERATURE, 32, 30) == Severity.LOW
    assert calculate_severity(AlertType.TEMPERATURE, 36, 30) == Severity.MEDIUM
    assert calculate_severity(AlertType.TEMPERATURE, 41, 30) == Severity.HIGH
    assert calculate_severity(AlertType.TEMPERATURE, 46, 30) == Severity.CRITICAL


def test_air_quality_severity_uses_absolute_bands():
    assert calculate_severity(AlertType.AIR_QUALITY, 120, 100) == Severity.LOW
    assert calculate_severity(AlertType.AIR_QUALITY, 180, 100) == Severity.MEDIUM
    assert calculate_severity(AlertType.AIR_QUALITY, 250, 100) == Severity.HIGH
    assert calculate_severity(AlertType.AIR_QUALITY, 350, 100) == Severity.CRITICAL


def test_other_domains_are_medium():
    assert calculate_severity(AlertType.HUMIDITY, 95, 80) == Severity.MEDIUM
