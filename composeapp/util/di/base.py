from dishka import Provider as DishkaProvider
from dishka import from_context

from composeapp.config import Config
from composeapp.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for all composeapp DI providers."""


class ConfigProvider(Provider):
    """Exposes the Config passed as container context."""

    config = from_context(provides=Config, scope=Scope.APP)
