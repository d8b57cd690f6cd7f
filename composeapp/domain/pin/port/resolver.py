from abc import abstractmethod
from typing import Protocol

from composeapp.domain.reference.model import ImageReference, Resolution


class DigestResolver(Protocol):
    """Strategy that turns a tagged reference into a digest and platform set."""

    @abstractmethod
    async def resolve(self, reference: ImageReference) -> Resolution:
        """Resolve ``reference``.

        Raises:
            ResolutionError: On any transport or not-found failure.
        """
        ...
