"""
Bot error taxonomy.

Every error carries a localization key so the router (and the command
dispatcher) can turn it into a chat reply in the user's language. None of
these are fatal: the worst outcome of any of them is a reply saying so.
"""
from typing import Any, Dict, Optional


class WeatherBotError(Exception):
    """Base class for all errors that degrade to a chat reply."""

    message_key = "error_generic"

    def __init__(self, message: str = "", message_key: Optional[str] = None, **params: Any):
        super().__init__(message or self.__class__.__name__)
        if message_key:
            self.message_key = message_key
        self.params: Dict[str, Any] = params


class MalformedCallbackError(WeatherBotError):
    """Callback token could not be decoded or a param failed to parse."""

    message_key = "error_invalid_request"


class CallbackDataTooLongError(WeatherBotError):
    """An encoded token would exceed the transport payload limit."""

    message_key = "error_request_too_long"


class InvalidTimezoneError(WeatherBotError):
    message_key = "error_invalid_timezone"


class InvalidLocationError(WeatherBotError):
    message_key = "error_invalid_location"


class PermissionDeniedError(WeatherBotError):
    message_key = "error_insufficient_permissions"


class NotFoundError(WeatherBotError):
    message_key = "error_not_found"


class IllegalRoleTransitionError(WeatherBotError):
    """Role ladder violation; message_key names the step the admin must take."""

    message_key = "error_illegal_role_transition"


class RoleChangeError(WeatherBotError):
    """The store refused a role change (own role, last admin, invalid value)."""

    message_key = "error_role_change"


class StoreError(WeatherBotError):
    message_key = "error_failed_try_again"


class WeatherProviderError(WeatherBotError):
    message_key = "error_weather_unavailable"
