"""Compose application descriptor.

The descriptor is validated once when loaded. Everything downstream works with
typed ServiceDescriptor records and never re-checks field shapes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from composeapp.domain.shared.error import InputError


class ServiceDescriptor(BaseModel):
    """One compose service. Fields other than ``image`` are carried through untouched."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(exclude=True)
    image: str

    def to_mapping(self) -> dict[str, Any]:
        return self.model_dump(mode="python")


class AppDescriptor(BaseModel):
    """A compose application: keyed services plus any other top-level sections."""

    model_config = ConfigDict(extra="allow")

    services: dict[str, ServiceDescriptor] = {}

    @classmethod
    def from_mapping(cls, data: Any) -> AppDescriptor:
        """Validate a parsed compose document.

        ``services`` may be a mapping keyed by name (the compose format) or a
        list of records each carrying a ``name``.

        Raises:
            InputError: If a service record is malformed or names repeat.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InputError("Application descriptor must be a mapping")

        raw_services = data.get("services") or {}
        if isinstance(raw_services, list):
            items = []
            for i, record in enumerate(raw_services):
                if not isinstance(record, dict) or not isinstance(record.get("name"), str):
                    raise InputError(f"Service #{i} has invalid format", service=str(i))
                items.append((record["name"], {k: v for k, v in record.items() if k != "name"}))
        elif isinstance(raw_services, dict):
            items = list(raw_services.items())
        else:
            raise InputError("'services' must be a mapping of service name to definition")

        services: dict[str, ServiceDescriptor] = {}
        for name, record in items:
            name = str(name)
            if name in services:
                raise InputError(f"Service({name}) is defined more than once", service=name)
            if not isinstance(record, dict):
                raise InputError(f"Service({name}) has invalid format", service=name)
            if "image" not in record:
                raise InputError(f"Service({name}) missing 'image' attribute", service=name)
            if not isinstance(record["image"], str) or not record["image"]:
                raise InputError(f"Service({name}) invalid 'image' attribute", service=name)
            services[name] = ServiceDescriptor.model_validate({**record, "name": name})

        others = {k: v for k, v in data.items() if k != "services"}
        return cls.model_validate({**others, "services": services})

    @classmethod
    def load(cls, path: Path) -> AppDescriptor:
        try:
            data = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise InputError(f"Unable to parse {path}: {e}") from e
        return cls.from_mapping(data)

    def set_image(self, service: str, image: str) -> None:
        """Replace the image of the service with the given name."""
        try:
            self.services[service].image = image
        except KeyError:
            raise InputError(f"Service({service}) not found", service=service) from None

    def to_mapping(self) -> dict[str, Any]:
        out = dict(self.model_extra or {})
        out["services"] = {name: svc.to_mapping() for name, svc in self.services.items()}
        return out

    def dump(self) -> bytes:
        """Canonical YAML form: keys sorted at every level, block style."""
        return yaml.safe_dump(
            self.to_mapping(), sort_keys=True, default_flow_style=False
        ).encode()
