import pytest

from bot.callback_codec import decode, encode, format_number, quote_text
from core.errors import CallbackDataTooLongError, MalformedCallbackError
from models.enums import Role


def test_decode_splits_action_sub_action_and_params():
    token = decode("alerts_update_abc_30")
    assert token.action == "alerts"
    assert token.sub_action == "update"
    assert token.params == ("abc", "30")
    assert token.float_param(1) == 30.0
    assert token.raw == "alerts_update_abc_30"


@pytest.mark.parametrize("raw", [None, "", "weather", "_current"])
def test_decode_rejects_fewer_than_two_segments(raw):
    with pytest.raises(MalformedCallbackError):
        decode(raw)


def test_missing_or_bad_params_are_malformed():
    token = decode("alerts_update_abc_nan")
    with pytest.raises(MalformedCallbackError):
        token.float_param(1)
    with pytest.raises(MalformedCallbackError):
        token.param(5)
    with pytest.raises(MalformedCallbackError):
        decode("role_confirm_promote_x_2").int_param(1)


def test_encode_formats_enums_and_numbers():
    assert encode("role", "confirm", "promote", 42, Role.MODERATOR) == "role_confirm_promote_42_2"
    assert encode("alert", "temp", "high", 30.0) == "alert_temp_high_30"


def test_encode_refuses_payloads_over_the_limit():
    with pytest.raises(CallbackDataTooLongError):
        encode("location", "confirm", "name", "x" * 60)
    assert encode("a", "b", "c" * 60, limit=100)


def test_free_text_survives_delimiters_and_unicode():
    name = "St_Petersburg, Україна"
    token = decode(encode("location", "confirm", "name", quote_text(name), limit=200))
    assert "_" not in quote_text(name)
    assert token.text_param(1) == name


def test_format_number():
    assert format_number(30.0) == "30"
    assert format_number(2.5) == "2.5"
    assert format_number(-0.001) == "0"
