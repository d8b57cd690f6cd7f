"""PinService - rewrites service images to digest-pinned references."""

import logging
from dataclasses import dataclass

from composeapp.domain.app.model import AppDescriptor
from composeapp.domain.pin.port.resolver import DigestResolver
from composeapp.domain.reference.model import ImageReference, PlatformDescriptor
from composeapp.domain.reference.placeholder import expand_default_placeholder
from composeapp.domain.shared.error import InvalidReferenceError
from composeapp.domain.shared.event import ImagePinned, PinStarted
from composeapp.domain.shared.port.progress import ProgressReporter
from composeapp.domain.shared.service import Service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PinnedImage:
    """Outcome of pinning one service."""

    service: str
    original: str
    pinned: ImageReference
    platforms: list[PlatformDescriptor]


class PinService(Service):
    """Pins every service image of a descriptor to an immutable digest.

    Services are processed one at a time, in descriptor order. The first error
    aborts the pass; services pinned before it keep their new image.
    """

    resolver: DigestResolver
    progress: ProgressReporter

    async def pin_images(self, descriptor: AppDescriptor) -> list[PinnedImage]:
        """Pin all service images of ``descriptor`` in place.

        Returns:
            One PinnedImage per service, in order.

        Raises:
            InvalidReferenceError: If an image is unparsable or untagged.
            ResolutionError: If a digest cannot be resolved.
        """
        results = []
        for name, service in descriptor.services.items():
            result = await self.pin_service(descriptor, name, service.image)
            results.append(result)
        logger.info(f"Pinned {len(results)} service image(s)")
        return results

    async def pin_service(self, descriptor: AppDescriptor, name: str, image: str) -> PinnedImage:
        image = expand_default_placeholder(image)
        self.progress.emit(PinStarted(service=name, image=image))

        reference = ImageReference.parse(image)
        if not reference.is_tagged:
            raise InvalidReferenceError(
                f"Invalid image reference({image}): Images must be tagged. e.g {image}:stable",
                reference=image,
            )

        resolution = await self.resolver.resolve(reference)
        pinned = reference.pin(resolution.digest)
        descriptor.set_image(name, str(pinned))

        platforms = resolution.platforms
        self.progress.emit(
            ImagePinned(service=name, image=image, platforms=platforms, pinned=str(pinned))
        )
        return PinnedImage(service=name, original=image, pinned=pinned, platforms=platforms)
