"""Registry client port - the capabilities this package needs from an OCI registry."""

from abc import abstractmethod
from typing import Protocol

from composeapp.domain.reference.model import (
    Descriptor,
    ImageManifest,
    ImageReference,
    ManifestKind,
)


class Repository(Protocol):
    """One repository (``domain/path``) on a registry."""

    @property
    def name(self) -> str: ...

    @abstractmethod
    async def get_tag(self, tag: str) -> Descriptor:
        """Resolve a tag to the descriptor of the manifest it points at.

        Raises:
            ManifestUnknownError: If the tag does not exist.
            RegistryError: On any other failure.
        """
        ...

    @abstractmethod
    async def get_manifest(self, digest: str) -> ManifestKind:
        """Fetch a manifest by digest and classify it."""
        ...

    @abstractmethod
    async def put_blob(self, media_type: str, data: bytes) -> Descriptor:
        """Upload an opaque blob and return its descriptor."""
        ...

    @abstractmethod
    async def build_manifest(
        self, layer: Descriptor, annotations: dict[str, str]
    ) -> ImageManifest:
        """Build a single-layer manifest, uploading its config blob."""
        ...

    @abstractmethod
    async def put_manifest(self, manifest: ImageManifest, tag: str) -> str:
        """Push a manifest under ``tag`` and return its digest."""
        ...


class RegistryClient(Protocol):
    @abstractmethod
    async def repository(self, reference: ImageReference) -> Repository:
        """Resolve the repository a reference lives in."""
        ...
