from dishka import AsyncContainer, make_async_container

from composeapp.config import Config
from composeapp.domain.bundle.util.di import BundleProvider, ProgressProvider
from composeapp.domain.shared.port.progress import ProgressReporter
from composeapp.infrastructure.oci import OciProvider
from composeapp.util.di.base import ConfigProvider
from composeapp.util.di.scope import Scope


def create_container(
    config: Config | None = None,
    progress: ProgressReporter | None = None,
) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        ConfigProvider(),
        OciProvider(),
        BundleProvider(),
        ProgressProvider(progress),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
