"""Progress events emitted by the pin and publish workflows.

Events carry identifiers and outcomes only. Turning them into human-readable
lines is the job of a ProgressReporter implementation (see cli.console).
"""

from typing import Literal

from pydantic import BaseModel

from composeapp.domain.reference.model import PlatformDescriptor


class ProgressEvent(BaseModel):
    kind: str


class PinStarted(ProgressEvent):
    kind: Literal["pin_started"] = "pin_started"
    service: str
    image: str


class ImagePinned(ProgressEvent):
    kind: Literal["image_pinned"] = "image_pinned"
    service: str
    image: str
    platforms: list[PlatformDescriptor]
    pinned: str


class PathIgnored(ProgressEvent):
    """First skip caused by an ignore pattern."""

    kind: Literal["path_ignored"] = "path_ignored"
    pattern: str
    path: str


class FileArchived(ProgressEvent):
    kind: Literal["file_archived"] = "file_archived"
    name: str
    size: int


class BlobUploaded(ProgressEvent):
    kind: Literal["blob_uploaded"] = "blob_uploaded"
    digest: str
    size: int


class ManifestPushed(ProgressEvent):
    kind: Literal["manifest_pushed"] = "manifest_pushed"
    reference: str
    tag: str
    digest: str
