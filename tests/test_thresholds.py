from models.enums import AlertType
from rules.thresholds import THRESHOLD_RANGES, threshold_options, threshold_range


def test_options_are_centred_on_the_current_value():
    assert threshold_options(AlertType.TEMPERATURE, 25) == [10, 15, 20, 25, 30, 35, 40]


def test_near_the_edge_falls_back_to_a_sweep_from_the_minimum():
    options = threshold_options(AlertType.TEMPERATURE, 39)
    assert options == [-20, -15, -10, -5, 0, 5, 10]
    # the sweep does not necessarily contain the current value
    assert 39 not in options


def test_options_stay_in_range_sorted_and_unique():
    for alert_type, rng in THRESHOLD_RANGES.items():
        for current in (rng.min, (rng.min + rng.max) / 2, rng.max):
            options = threshold_options(alert_type, current)
            assert 5 <= len(options) <= 7
            assert options == sorted(set(options))
            assert all(rng.contains(v) for v in options)


def test_unknown_domain_uses_twenty_percent_band():
    rng = threshold_range(AlertType.RAIN, 10)
    assert (rng.min, rng.max) == (8, 12)
    negative = threshold_range(AlertType.SNOW, -10)
    assert negative.min < negative.max
    zero = threshold_range(AlertType.STORM, 0)
    assert (zero.min, zero.max) == (-1, 1)
    assert len(threshold_options(AlertType.RAIN, 10)) >= 5


def test_small_and_negative_values_in_percentage_band_still_give_enough_options():
    for alert_type in (AlertType.RAIN, AlertType.SNOW, AlertType.STORM):
        for current in (0.05, 0.001, 1e-6, -0.05, 0.3, 1.2, -2.5):
            rng = threshold_range(alert_type, current)
            options = threshold_options(alert_type, current)
            assert 5 <= len(options) <= 7, (alert_type, current, options)
            assert options == sorted(set(options))
            assert all(rng.contains(v) for v in options)


def test_narrow_band_is_widened_around_the_current_value():
    assert threshold_options(AlertType.RAIN, 0.05) == [-0.15, -0.05, 0.05, 0.15, 0.25]
