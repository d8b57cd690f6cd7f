"""Publish command: pin, bundle and push a compose application."""

import asyncio
import sys
from pathlib import Path

import cyclopts

from composeapp.application.di import create_container
from composeapp.cli.console import ConsoleProgressReporter, get_console
from composeapp.config import Config, configure_logging
from composeapp.domain.app.model import AppDescriptor
from composeapp.domain.bundle.service.publish import PublishResult, PublishService
from composeapp.domain.pin.service.pin import PinService
from composeapp.domain.shared.error import ComposeAppError

app = cyclopts.App(name="publish", help="Publish a compose application to a registry")


async def publish_app(
    config: Config,
    descriptor: AppDescriptor,
    target: str,
    *,
    pin: bool = True,
    verbose: bool = False,
) -> PublishResult:
    progress = ConsoleProgressReporter(get_console(), verbose=verbose)
    container = create_container(config, progress=progress)
    try:
        async with container() as uow:
            if pin:
                pinner = await uow.get(PinService)
                await pinner.pin_images(descriptor)
            publisher = await uow.get(PublishService)
            return await publisher.publish_bundle(descriptor, target)
    finally:
        await container.close()


@app.default
def publish(
    target: str,
    /,
    file: Path = Path("docker-compose.yml"),
    pin: bool = True,
    verbose: bool = False,
) -> None:
    """Bundle the current directory and push it as an OCI artifact.

    Args:
        target: Registry reference to publish to (e.g. 'registry.example.com/apps/shop:v1').
        file: Compose file describing the application.
        pin: Pin service images to digests before publishing.
        verbose: Show each archived file.
    """
    console = get_console()
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)

    try:
        descriptor = AppDescriptor.load(file)
        result = asyncio.run(publish_app(config, descriptor, target, pin=pin, verbose=verbose))
    except FileNotFoundError:
        console.error(f"Compose file not found: {file}")
        sys.exit(1)
    except ComposeAppError as e:
        console.error(e.message)
        sys.exit(1)

    console.success(f"Published {result.reference.name}:{result.tag}@{result.manifest_digest}")
