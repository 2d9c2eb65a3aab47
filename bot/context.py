"""
Per-update context handed to every flow.

A FlowContext is built fresh for each incoming update and carries only
opaque identifiers plus the shared collaborators; flows keep no state of
their own between taps.
"""
from dataclasses import dataclass
from typing import Any, Optional

from core.errors import PermissionDeniedError
from models.enums import Role
from models.user import User
from services.localization_service import LocalizationService
from services.store import BaseStore
from services.weather_service import WeatherService


@dataclass
class FlowContext:
    user_id: int
    chat_id: int
    store: BaseStore
    weather: WeatherService
    i18n: LocalizationService
    language: str = "en"

    def t(self, key: str, **params: Any) -> str:
        return self.i18n.t(self.language, key, **params)

    async def current_user(self) -> User:
        return await self.store.get_user(self.user_id)

    async def require_role(self, role: Role) -> User:
        """Load the acting user and reject them unless they hold at least ``role``."""
        user = await self.current_user()
        if user.role < role:
            raise PermissionDeniedError(f"user {self.user_id} lacks {role.display_name}")
        return user


async def build_context(
    store: BaseStore,
    weather: WeatherService,
    i18n: LocalizationService,
    user_id: int,
    chat_id: int,
    username: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    language_code: Optional[str] = None,
) -> FlowContext:
    """Register/refresh the user and return a context in their saved language."""
    user = await store.register_user(
        user_id,
        username=username,
        first_name=first_name,
        last_name=last_name,
        language=i18n.normalize(language_code),
    )
    return FlowContext(
        user_id=user_id,
        chat_id=chat_id,
        store=store,
        weather=weather,
        i18n=i18n,
        language=i18n.normalize(user.language),
    )
