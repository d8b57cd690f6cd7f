"""Base class for composeapp's domain services.

Services (pinning, archiving, publishing) declare their collaborators as
annotated class attributes and are constructed by the DI container with
keyword arguments.
"""

from dataclasses import dataclass
from typing import dataclass_transform


@dataclass_transform()
class _ServiceMeta(type):
    """Turns every ``Service`` subclass into a dataclass."""

    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            return dataclass(cls)
        return cls


class Service(metaclass=_ServiceMeta):
    """A domain service whose fields are its injected collaborators."""
