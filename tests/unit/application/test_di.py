"""Container wiring tests."""

from composeapp.application.di import create_container
from composeapp.config import BundleConfig, Config, PinConfig
from composeapp.domain.bundle.service.publish import PublishService
from composeapp.domain.pin.service.pin import PinService
from composeapp.domain.pin.service.registry_resolver import RegistryDigestResolver
from composeapp.domain.shared.port.progress import RecordingProgressReporter


async def test_resolves_services_with_registry_strategy(tmp_path):
    progress = RecordingProgressReporter()
    config = Config(pin=PinConfig(strategy="registry"), bundle=BundleConfig(root=tmp_path))
    container = create_container(config, progress=progress)
    try:
        async with container() as uow:
            pin = await uow.get(PinService)
            publish = await uow.get(PublishService)

            assert isinstance(pin.resolver, RegistryDigestResolver)
            assert pin.progress is progress
            assert publish.root == tmp_path
            assert publish.archiver.descriptor_file == "docker-compose.yml"
    finally:
        await container.close()
