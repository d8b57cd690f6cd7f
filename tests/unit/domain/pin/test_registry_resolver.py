"""Unit tests for RegistryDigestResolver."""

from unittest.mock import AsyncMock

import pytest

from composeapp.domain.pin.service.registry_resolver import RegistryDigestResolver
from composeapp.domain.reference.model import (
    Descriptor,
    ImageReference,
    PlatformDescriptor,
    PlatformList,
    SinglePlatform,
)
from composeapp.domain.reference.model.manifest import DOCKER_MANIFEST_LIST
from composeapp.domain.shared.error import (
    ManifestUnknownError,
    RegistryError,
    ResolutionError,
)

LIST_DIGEST = "sha256:" + "c" * 64


@pytest.fixture
def repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_tag.return_value = Descriptor(
        media_type=DOCKER_MANIFEST_LIST, digest=LIST_DIGEST, size=1024
    )
    repo.get_manifest.return_value = PlatformList(
        entries=(
            PlatformDescriptor(architecture="amd64"),
            PlatformDescriptor(architecture="arm", variant="v7"),
            PlatformDescriptor(architecture="arm64", variant="v8"),
        )
    )
    return repo


@pytest.fixture
def registry(repo) -> AsyncMock:
    registry = AsyncMock()
    registry.repository.return_value = repo
    return registry


class TestRegistryDigestResolver:
    async def test_manifest_list_enumerates_platforms(self, registry, repo):
        resolver = RegistryDigestResolver(registry=registry)
        reference = ImageReference.parse("nginx:stable")

        resolution = await resolver.resolve(reference)

        assert resolution.digest == LIST_DIGEST
        assert [p.label for p in resolution.platforms] == ["amd64", "armv7", "arm64"]
        registry.repository.assert_awaited_once_with(reference)
        repo.get_tag.assert_awaited_once_with("stable")
        repo.get_manifest.assert_awaited_once_with(LIST_DIGEST)

    async def test_single_manifest(self, registry, repo):
        repo.get_manifest.return_value = SinglePlatform()
        resolver = RegistryDigestResolver(registry=registry)

        resolution = await resolver.resolve(ImageReference.parse("app:1"))

        assert resolution.digest == LIST_DIGEST
        assert resolution.platforms == []

    async def test_unknown_tag(self, registry, repo):
        repo.get_tag.side_effect = ManifestUnknownError("not found", status_code=404)
        resolver = RegistryDigestResolver(registry=registry)

        with pytest.raises(ResolutionError, match="not found"):
            await resolver.resolve(ImageReference.parse("app:missing"))

    async def test_unexpected_manifest(self, registry, repo):
        repo.get_manifest.side_effect = RegistryError("Unexpected manifest: schema1")
        resolver = RegistryDigestResolver(registry=registry)

        with pytest.raises(ResolutionError, match="Unexpected manifest"):
            await resolver.resolve(ImageReference.parse("app:1"))

    async def test_untagged(self, registry):
        resolver = RegistryDigestResolver(registry=registry)
        with pytest.raises(ResolutionError):
            await resolver.resolve(ImageReference.parse("app"))
        registry.repository.assert_not_awaited()
