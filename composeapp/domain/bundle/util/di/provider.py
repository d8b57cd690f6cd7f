from dishka import provide

from composeapp.config import Config
from composeapp.domain.bundle.service.archive import ArchiveBuilder
from composeapp.domain.bundle.service.publish import PublishService
from composeapp.domain.pin.port.resolver import DigestResolver
from composeapp.domain.pin.service.pin import PinService
from composeapp.domain.shared.port.progress import LoggingProgressReporter, ProgressReporter
from composeapp.domain.shared.port.registry import RegistryClient
from composeapp.util.di.base import Provider
from composeapp.util.di.scope import Scope


class ProgressProvider(Provider):
    """Supplies the reporter that progress events go to."""

    def __init__(self, progress: ProgressReporter | None = None) -> None:
        super().__init__()
        self._progress = progress or LoggingProgressReporter()

    @provide(scope=Scope.APP)
    def get_progress(self) -> ProgressReporter:
        return self._progress


class BundleProvider(Provider):
    """DI provider for the pin and publish services."""

    @provide(scope=Scope.UOW)
    def get_archive_builder(self, config: Config, progress: ProgressReporter) -> ArchiveBuilder:
        return ArchiveBuilder(
            progress=progress,
            ignore_file=config.bundle.ignore_file,
            descriptor_file=config.bundle.descriptor_file,
        )

    @provide(scope=Scope.UOW)
    def get_pin_service(
        self, resolver: DigestResolver, progress: ProgressReporter
    ) -> PinService:
        return PinService(resolver=resolver, progress=progress)

    @provide(scope=Scope.UOW)
    def get_publish_service(
        self,
        config: Config,
        archiver: ArchiveBuilder,
        registry: RegistryClient,
        progress: ProgressReporter,
    ) -> PublishService:
        return PublishService(
            archiver=archiver,
            registry=registry,
            progress=progress,
            root=config.bundle.root,
        )
