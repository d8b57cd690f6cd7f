"""Digest resolution straight against the registry."""

import logging

from composeapp.domain.reference.model import ImageReference, Resolution
from composeapp.domain.shared.error import RegistryError, ResolutionError
from composeapp.domain.shared.port.registry import RegistryClient
from composeapp.domain.shared.service import Service

logger = logging.getLogger(__name__)


class RegistryDigestResolver(Service):
    """Resolves a tag via the registry: tag -> descriptor -> manifest.

    The pinned digest is the one the tag points at, so a multi-platform image is
    pinned to its manifest list rather than to one platform's manifest.
    """

    registry: RegistryClient

    async def resolve(self, reference: ImageReference) -> Resolution:
        if reference.tag is None:
            raise ResolutionError(f"Cannot resolve untagged reference {reference}")
        try:
            repo = await self.registry.repository(reference)
            desc = await repo.get_tag(reference.tag)
            manifest = await repo.get_manifest(desc.digest)
        except RegistryError as e:
            raise ResolutionError(f"Unable to resolve {reference}: {e.message}") from e

        logger.debug(f"{reference} -> {desc.digest} ({desc.media_type})")
        return Resolution(digest=desc.digest, manifest=manifest)
