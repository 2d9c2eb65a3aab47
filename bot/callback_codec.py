"""
Callback token codec.

Every inline button carries a compact string "<action>_<subAction>_<p1>_<p2>...".
The action and sub-action are always the first two segments; what follows is
interpreted positionally by the flow that owns the action. Numeric params
travel as-is, free text is percent-encoded (including "_") so it never
introduces extra segments. A flow whose last param is free text may still
recover it with CallbackToken.rest(), which re-joins the tail.

Tokens are only ever built with encode(), which refuses anything over the
transport payload limit instead of letting the button silently break.
"""
import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Optional, Tuple
from urllib.parse import quote, unquote

from config.settings import settings
from core.errors import CallbackDataTooLongError, MalformedCallbackError

DELIMITER = "_"


@dataclass(frozen=True)
class CallbackToken:
    action: str
    sub_action: str
    params: Tuple[str, ...] = ()

    @property
    def raw(self) -> str:
        return DELIMITER.join((self.action, self.sub_action) + self.params)

    def has(self, index: int) -> bool:
        return 0 <= index < len(self.params)

    def param(self, index: int) -> str:
        if not self.has(index) or self.params[index] == "":
            raise MalformedCallbackError(f"{self.raw!r}: missing param {index}")
        return self.params[index]

    def rest(self, index: int) -> str:
        """Re-join params[index:] with the delimiter (free-text tail)."""
        if not self.has(index):
            raise MalformedCallbackError(f"{self.raw!r}: missing param {index}")
        return DELIMITER.join(self.params[index:])

    def int_param(self, index: int) -> int:
        value = self.param(index)
        try:
            return int(value)
        except ValueError as e:
            raise MalformedCallbackError(f"{self.raw!r}: param {index} is not an integer") from e

    def float_param(self, index: int) -> float:
        value = self.param(index)
        try:
            number = float(value)
        except ValueError as e:
            raise MalformedCallbackError(f"{self.raw!r}: param {index} is not a number") from e
        if not math.isfinite(number):
            raise MalformedCallbackError(f"{self.raw!r}: param {index} is not finite")
        return number

    def text_param(self, index: int) -> str:
        return unquote_text(self.rest(index))


def decode(raw: Optional[str]) -> CallbackToken:
    """
    Split a raw callback payload into a token.

    Raises:
        MalformedCallbackError: fewer than two segments or an empty action.
    """
    parts = (raw or "").split(DELIMITER)
    if len(parts) < 2 or not parts[0]:
        raise MalformedCallbackError(f"malformed callback data {raw!r}")
    return CallbackToken(action=parts[0], sub_action=parts[1], params=tuple(parts[2:]))


def _segment(value: Any) -> str:
    if isinstance(value, IntEnum):
        return str(int(value))
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def encode(action: str, sub_action: str, *params: Any, limit: Optional[int] = None) -> str:
    """
    Join action, sub-action and params into a callback payload.

    Free-text params must already be passed through quote_text().

    Raises:
        CallbackDataTooLongError: the payload exceeds the transport limit.
    """
    raw = DELIMITER.join([action, sub_action] + [_segment(p) for p in params])
    limit = settings.CALLBACK_DATA_LIMIT if limit is None else limit
    if len(raw.encode("utf-8")) > limit:
        raise CallbackDataTooLongError(f"callback data is {len(raw.encode('utf-8'))} bytes (limit {limit})")
    return raw


def quote_text(text: str) -> str:
    """Percent-encode free text so it is ASCII and free of the delimiter."""
    return quote(text, safe="").replace(DELIMITER, "%5F")


def unquote_text(text: str) -> str:
    return unquote(text)


def format_number(value: float) -> str:
    """Shortest stable text for a threshold value: 30.0 -> "30", 2.5 -> "2.5"."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_coord(value: float) -> str:
    return f"{value:.4f}"
