"""Container image references.

Parsing follows the normalisation rules of the Docker CLI so that short names
like ``nginx:stable`` resolve to ``docker.io/library/nginx:stable``.
"""

from __future__ import annotations

import re
from typing import ClassVar

from composeapp.domain.shared.error import InvalidReferenceError
from composeapp.domain.shared.value import ValueObject

DEFAULT_DOMAIN = "docker.io"
LEGACY_DEFAULT_DOMAIN = "index.docker.io"
OFFICIAL_REPO_PREFIX = "library/"
DEFAULT_TAG = "latest"
NAME_TOTAL_LENGTH_MAX = 255


class ImageReference(ValueObject):
    """A normalised image reference: ``domain/path[:tag][@digest]``."""

    domain: str
    path: str
    tag: str | None = None
    digest: str | None = None

    _path_component: ClassVar[re.Pattern] = re.compile(r"^[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*$")
    _domain_re: ClassVar[re.Pattern] = re.compile(
        r"^(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
        r"(?:\.(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9]))*"
        r"(?::[0-9]+)?$"
    )
    _tag_re: ClassVar[re.Pattern] = re.compile(r"^[\w][\w.-]{0,127}$")
    _digest_re: ClassVar[re.Pattern] = re.compile(
        r"^[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}$"
    )

    @classmethod
    def parse(cls, text: str) -> ImageReference:
        """Parse and normalise an image reference string.

        Raises:
            InvalidReferenceError: If the string is not a valid reference.
        """
        if not text:
            raise InvalidReferenceError("Invalid image reference: empty string", reference=text)

        remainder, digest = text, None
        if "@" in text:
            remainder, digest = text.split("@", 1)
            if not cls._digest_re.match(digest):
                raise InvalidReferenceError(
                    f"Invalid image reference({text}): invalid digest format", reference=text
                )

        name, tag = remainder, None
        colon = remainder.rfind(":")
        if colon > remainder.rfind("/"):
            name, tag = remainder[:colon], remainder[colon + 1 :]
            if not cls._tag_re.match(tag):
                raise InvalidReferenceError(
                    f"Invalid image reference({text}): invalid tag format", reference=text
                )

        if not name:
            raise InvalidReferenceError(
                f"Invalid image reference({text}): missing repository name", reference=text
            )

        domain, path = cls._split_domain(name)
        if not cls._domain_re.match(domain):
            raise InvalidReferenceError(
                f"Invalid image reference({text}): invalid registry domain", reference=text
            )
        if path != path.lower():
            raise InvalidReferenceError(
                f"Invalid image reference({text}): repository name must be lowercase",
                reference=text,
            )
        if not all(cls._path_component.match(part) for part in path.split("/")):
            raise InvalidReferenceError(
                f"Invalid image reference({text}): invalid repository name", reference=text
            )
        if len(domain) + 1 + len(path) > NAME_TOTAL_LENGTH_MAX:
            raise InvalidReferenceError(
                f"Invalid image reference({text}): repository name must not be more than "
                f"{NAME_TOTAL_LENGTH_MAX} characters",
                reference=text,
            )

        return cls(domain=domain, path=path, tag=tag, digest=digest)

    @staticmethod
    def _split_domain(name: str) -> tuple[str, str]:
        first, sep, rest = name.partition("/")
        if sep and (
            "." in first or ":" in first or first == "localhost" or first.lower() != first
        ):
            domain, path = first, rest
        else:
            domain, path = DEFAULT_DOMAIN, name

        if domain == LEGACY_DEFAULT_DOMAIN:
            domain = DEFAULT_DOMAIN
        if domain == DEFAULT_DOMAIN and "/" not in path:
            path = OFFICIAL_REPO_PREFIX + path
        return domain, path

    @property
    def name(self) -> str:
        """Repository name including the registry domain."""
        return f"{self.domain}/{self.path}"

    @property
    def is_tagged(self) -> bool:
        return self.tag is not None

    def pin(self, digest: str) -> ImageReference:
        """Return the digest-pinned form of this reference (tag dropped)."""
        return self.model_copy(update={"tag": None, "digest": digest})

    def with_default_tag(self) -> ImageReference:
        if self.tag is not None:
            return self
        return self.model_copy(update={"tag": DEFAULT_TAG})

    def __str__(self) -> str:
        ref = self.name
        if self.tag is not None:
            ref += f":{self.tag}"
        if self.digest is not None:
            ref += f"@{self.digest}"
        return ref
