"""Pin command: rewrite service images to digest-pinned references."""

import asyncio
import sys
from pathlib import Path

import cyclopts

from composeapp.application.di import create_container
from composeapp.cli.console import ConsoleProgressReporter, get_console
from composeapp.config import Config, configure_logging
from composeapp.domain.app.model import AppDescriptor
from composeapp.domain.pin.service.pin import PinService
from composeapp.domain.shared.error import ComposeAppError

app = cyclopts.App(name="pin", help="Pin service images to immutable digests")


async def pin_descriptor(config: Config, descriptor: AppDescriptor, *, verbose: bool = False) -> None:
    progress = ConsoleProgressReporter(get_console(), verbose=verbose)
    container = create_container(config, progress=progress)
    try:
        async with container() as uow:
            service = await uow.get(PinService)
            await service.pin_images(descriptor)
    finally:
        await container.close()


@app.default
def pin(
    file: Path = Path("docker-compose.yml"),
    /,
    write: bool = False,
    verbose: bool = False,
) -> None:
    """Pin every service image in a compose file.

    Args:
        file: Compose file to read.
        write: Rewrite the file in place instead of printing the pinned document.
        verbose: Show each archived file and debug logging.
    """
    console = get_console()
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)

    try:
        descriptor = AppDescriptor.load(file)
        asyncio.run(pin_descriptor(config, descriptor, verbose=verbose))
    except FileNotFoundError:
        console.error(f"Compose file not found: {file}")
        sys.exit(1)
    except ComposeAppError as e:
        console.error(e.message)
        sys.exit(1)

    content = descriptor.dump()
    if write:
        file.write_bytes(content)
        console.success(f"Pinned {len(descriptor.services)} service(s) in {file}")
    else:
        console.print(content.decode())
