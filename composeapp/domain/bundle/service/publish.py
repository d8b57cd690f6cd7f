"""PublishService - ships a compose application as an OCI artifact."""

import logging
from dataclasses import dataclass
from pathlib import Path

from composeapp.domain.app.model import AppDescriptor
from composeapp.domain.bundle.service.archive import ArchiveBuilder
from composeapp.domain.reference.model import Descriptor, ImageReference
from composeapp.domain.shared.error import PublishError, RegistryError
from composeapp.domain.shared.event import BlobUploaded, ManifestPushed
from composeapp.domain.shared.port.progress import ProgressReporter
from composeapp.domain.shared.port.registry import RegistryClient
from composeapp.domain.shared.service import Service

logger = logging.getLogger(__name__)

BUNDLE_MEDIA_TYPE = "application/tar+gzip"
BUNDLE_KIND = "compose-app"
BUNDLE_VERSION = "v1"


@dataclass(frozen=True)
class PublishResult:
    """Where the bundle landed."""

    reference: ImageReference
    tag: str
    blob: Descriptor
    manifest_digest: str


class PublishService(Service):
    """Serializes a descriptor, archives the bundle root and pushes it.

    The blob upload and the manifest push are two separate registry calls. If
    the push fails the blob stays behind for registry-side garbage collection.
    """

    archiver: ArchiveBuilder
    registry: RegistryClient
    progress: ProgressReporter
    root: Path = Path(".")

    async def publish_bundle(self, descriptor: AppDescriptor, target: str) -> PublishResult:
        """Publish ``descriptor`` plus the bundle root to ``target``.

        Args:
            descriptor: The (usually pinned) application descriptor.
            target: Registry reference; an untagged target is pushed as ``latest``.

        Raises:
            InvalidReferenceError: If ``target`` is not a valid reference.
            ArchiveError: If the bundle root cannot be archived.
            PublishError: If the blob upload or manifest push fails.
        """
        content = descriptor.dump()
        archive = self.archiver.build_archive(content, self.root)

        reference = ImageReference.parse(target).with_default_tag()
        tag = reference.tag
        assert tag is not None

        try:
            repo = await self.registry.repository(reference)
            blob = await repo.put_blob(BUNDLE_MEDIA_TYPE, archive)
            self.progress.emit(BlobUploaded(digest=blob.digest, size=blob.size))

            manifest = await repo.build_manifest(blob, {BUNDLE_KIND: BUNDLE_VERSION})
            digest = await repo.put_manifest(manifest, tag)
        except RegistryError as e:
            raise PublishError(f"Unable to publish {reference}: {e.message}") from e

        self.progress.emit(ManifestPushed(reference=reference.name, tag=tag, digest=digest))
        logger.info(f"Published {reference.name}:{tag} blob={blob.digest} manifest={digest}")
        return PublishResult(reference=reference, tag=tag, blob=blob, manifest_digest=digest)
