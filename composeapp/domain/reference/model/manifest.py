"""OCI content descriptors, manifests and the platform view of a resolved image."""

from __future__ import annotations

import hashlib
import json
from typing import Annotated, Any, Literal

from pydantic import Field

from composeapp.domain.shared.value import ValueObject

# Docker distribution media types
DOCKER_MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"
DOCKER_MANIFEST_LIST = "application/vnd.docker.distribution.manifest.list.v2+json"

# OCI media types
OCI_IMAGE_MANIFEST = "application/vnd.oci.image.manifest.v1+json"
OCI_IMAGE_INDEX = "application/vnd.oci.image.index.v1+json"
OCI_IMAGE_CONFIG = "application/vnd.oci.image.config.v1+json"

MANIFEST_LIST_TYPES = frozenset({DOCKER_MANIFEST_LIST, OCI_IMAGE_INDEX})
SINGLE_MANIFEST_TYPES = frozenset({DOCKER_MANIFEST_V2, OCI_IMAGE_MANIFEST})


def sha256_digest(data: bytes) -> str:
    """Content digest in ``algorithm:hex`` form."""
    return "sha256:" + hashlib.sha256(data).hexdigest()


class PlatformDescriptor(ValueObject):
    """Platform of one entry in a manifest list."""

    architecture: str
    os: str | None = None
    variant: str | None = None

    @property
    def label(self) -> str:
        """Architecture name; arm entries carry their variant (``armv7``)."""
        if self.architecture == "arm" and self.variant:
            return self.architecture + self.variant
        return self.architecture

    @classmethod
    def from_oci(cls, data: dict[str, Any]) -> PlatformDescriptor:
        return cls(
            architecture=data.get("architecture", ""),
            os=data.get("os"),
            variant=data.get("variant") or None,
        )


class SinglePlatform(ValueObject):
    """A plain image manifest; no platform list is enumerated."""

    kind: Literal["single"] = "single"

    @property
    def platforms(self) -> list[PlatformDescriptor]:
        return []


class PlatformList(ValueObject):
    """A manifest list / image index, one platform per sub-manifest in manifest order."""

    kind: Literal["list"] = "list"
    entries: tuple[PlatformDescriptor, ...] = ()

    @property
    def platforms(self) -> list[PlatformDescriptor]:
        return list(self.entries)


ManifestKind = Annotated[SinglePlatform | PlatformList, Field(discriminator="kind")]


class Resolution(ValueObject):
    """Digest and manifest kind an image tag resolved to."""

    digest: str
    manifest: ManifestKind

    @property
    def platforms(self) -> list[PlatformDescriptor]:
        return self.manifest.platforms


class Descriptor(ValueObject):
    """OCI content descriptor."""

    media_type: str
    digest: str
    size: int
    annotations: dict[str, str] | None = None

    @classmethod
    def for_content(cls, media_type: str, data: bytes) -> Descriptor:
        return cls(media_type=media_type, digest=sha256_digest(data), size=len(data))

    def to_oci(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "mediaType": self.media_type,
            "digest": self.digest,
            "size": self.size,
        }
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        return out


class ImageManifest(ValueObject):
    """OCI image manifest referencing a config blob and a list of layers."""

    config: Descriptor
    layers: tuple[Descriptor, ...]
    annotations: dict[str, str] = {}
    media_type: str = OCI_IMAGE_MANIFEST

    def to_oci(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "schemaVersion": 2,
            "mediaType": self.media_type,
            "config": self.config.to_oci(),
            "layers": [layer.to_oci() for layer in self.layers],
        }
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        return out

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_oci(), indent=3).encode()
