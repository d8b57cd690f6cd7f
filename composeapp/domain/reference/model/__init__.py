from composeapp.domain.reference.model.manifest import (
    Descriptor,
    ImageManifest,
    ManifestKind,
    PlatformDescriptor,
    PlatformList,
    Resolution,
    SinglePlatform,
    sha256_digest,
)
from composeapp.domain.reference.model.reference import DEFAULT_TAG, ImageReference

__all__ = [
    "DEFAULT_TAG",
    "Descriptor",
    "ImageManifest",
    "ImageReference",
    "ManifestKind",
    "PlatformDescriptor",
    "PlatformList",
    "Resolution",
    "SinglePlatform",
    "sha256_digest",
]
