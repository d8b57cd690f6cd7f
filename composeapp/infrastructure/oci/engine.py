"""Digest resolution through the local container engine, using aiodocker."""

import aiodocker
import logfire

from composeapp.domain.pin.port.resolver import DigestResolver
from composeapp.domain.reference.model import (
    ImageReference,
    PlatformDescriptor,
    PlatformList,
    Resolution,
)
from composeapp.domain.shared.error import ResolutionError


class EngineDigestResolver(DigestResolver):
    """Asks the engine's distribution endpoint for a reference's digest and platforms.

    The engine talks to the registry with its own configured credentials, so this
    works for private registries the engine is already logged in to.
    """

    def __init__(self, docker: aiodocker.Docker):
        self._docker = docker

    async def resolve(self, reference: ImageReference) -> Resolution:
        try:
            # aiodocker has no wrapper for /distribution; go through the raw query helper
            data = await self._docker._query_json(f"distribution/{reference}/json")
        except aiodocker.DockerError as e:
            logfire.error("Engine distribution inspect failed", reference=str(reference), error=str(e))
            raise ResolutionError(f"Unable to inspect {reference}: {e}") from e

        digest = (data.get("Descriptor") or {}).get("digest")
        if not digest:
            raise ResolutionError(f"Engine returned no digest for {reference}")

        platforms = tuple(PlatformDescriptor.from_oci(p) for p in data.get("Platforms") or [])
        logfire.debug("Resolved via engine", reference=str(reference), digest=digest)
        return Resolution(digest=digest, manifest=PlatformList(entries=platforms))
