"""Unit tests for PublishService."""

import io
import tarfile
from unittest.mock import AsyncMock, MagicMock

import pytest

from composeapp.domain.app.model import AppDescriptor
from composeapp.domain.bundle.service.archive import ArchiveBuilder
from composeapp.domain.bundle.service.publish import (
    BUNDLE_KIND,
    BUNDLE_MEDIA_TYPE,
    BUNDLE_VERSION,
    PublishService,
)
from composeapp.domain.reference.model import Descriptor, ImageManifest, ImageReference
from composeapp.domain.reference.model.manifest import OCI_IMAGE_CONFIG
from composeapp.domain.shared.error import (
    InvalidReferenceError,
    PublishError,
    RegistryError,
)
from composeapp.domain.shared.event import BlobUploaded, ManifestPushed

MANIFEST_DIGEST = "sha256:" + "d" * 64


@pytest.fixture
def descriptor() -> AppDescriptor:
    return AppDescriptor.from_mapping(
        {"services": {"web": {"image": "docker.io/library/nginx@sha256:" + "a" * 64}}}
    )


@pytest.fixture
def repo() -> AsyncMock:
    repo = AsyncMock()

    async def put_blob(media_type: str, data: bytes) -> Descriptor:
        return Descriptor.for_content(media_type, data)

    async def build_manifest(layer: Descriptor, annotations: dict[str, str]) -> ImageManifest:
        config = Descriptor.for_content(OCI_IMAGE_CONFIG, b"")
        return ImageManifest(config=config, layers=(layer,), annotations=annotations)

    repo.put_blob.side_effect = put_blob
    repo.build_manifest.side_effect = build_manifest
    repo.put_manifest.return_value = MANIFEST_DIGEST
    return repo


@pytest.fixture
def registry(repo) -> AsyncMock:
    registry = AsyncMock()
    registry.repository.return_value = repo
    return registry


@pytest.fixture
def service(registry, progress, tmp_path) -> PublishService:
    (tmp_path / "a.txt").write_text("alpha")
    return PublishService(
        archiver=ArchiveBuilder(progress=progress),
        registry=registry,
        progress=progress,
        root=tmp_path,
    )


class TestPublishBundle:
    async def test_untagged_target_defaults_to_latest(self, service, descriptor, repo):
        result = await service.publish_bundle(descriptor, "registry.example.com/apps/shop")

        assert result.tag == "latest"
        repo.put_manifest.assert_awaited_once()
        assert repo.put_manifest.await_args.args[1] == "latest"

    async def test_explicit_tag_preserved(self, service, descriptor, registry, repo):
        result = await service.publish_bundle(descriptor, "registry.example.com/apps/shop:v1.2")

        assert result.tag == "v1.2"
        assert repo.put_manifest.await_args.args[1] == "v1.2"
        reference = registry.repository.await_args.args[0]
        assert reference == ImageReference.parse("registry.example.com/apps/shop:v1.2")

    async def test_uploads_archive_with_descriptor(self, service, descriptor, repo):
        await service.publish_bundle(descriptor, "registry.example.com/apps/shop:v1")

        media_type, data = repo.put_blob.await_args.args
        assert media_type == BUNDLE_MEDIA_TYPE
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tar:
            names = tar.getnames()
            compose = tar.extractfile("docker-compose.yml").read()
        assert sorted(names) == ["a.txt", "docker-compose.yml"]
        assert compose == descriptor.dump()

    async def test_manifest_annotations(self, service, descriptor, repo):
        await service.publish_bundle(descriptor, "registry.example.com/apps/shop:v1")

        layer, annotations = repo.build_manifest.await_args.args
        assert layer.media_type == BUNDLE_MEDIA_TYPE
        assert annotations == {BUNDLE_KIND: BUNDLE_VERSION}
        assert annotations == {"compose-app": "v1"}

    async def test_reports_both_digests(self, service, descriptor, progress):
        result = await service.publish_bundle(descriptor, "registry.example.com/apps/shop:v1")

        assert result.manifest_digest == MANIFEST_DIGEST
        assert result.blob.digest.startswith("sha256:")
        assert progress.of_type(BlobUploaded)[0].digest == result.blob.digest
        pushed = progress.of_type(ManifestPushed)[0]
        assert pushed.digest == MANIFEST_DIGEST
        assert pushed.tag == "v1"
        assert pushed.reference == "registry.example.com/apps/shop"

    async def test_invalid_target(self, service, descriptor, registry):
        with pytest.raises(InvalidReferenceError):
            await service.publish_bundle(descriptor, "Bad Target")
        registry.repository.assert_not_awaited()

    async def test_blob_failure(self, service, descriptor, repo):
        repo.put_blob.side_effect = RegistryError("upload refused", status_code=500)

        with pytest.raises(PublishError, match="upload refused"):
            await service.publish_bundle(descriptor, "registry.example.com/apps/shop:v1")
        repo.put_manifest.assert_not_awaited()

    async def test_manifest_failure_leaves_blob(self, service, descriptor, repo):
        repo.put_manifest.side_effect = RegistryError("denied", status_code=403)
        repo.delete_blob = MagicMock()

        with pytest.raises(PublishError):
            await service.publish_bundle(descriptor, "registry.example.com/apps/shop:v1")

        repo.put_blob.assert_awaited_once()
        repo.delete_blob.assert_not_called()
