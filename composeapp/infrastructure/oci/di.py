from typing import AsyncIterable

import aiodocker
import httpx
from dishka import provide

from composeapp.config import Config
from composeapp.domain.pin.port.resolver import DigestResolver
from composeapp.domain.pin.service.registry_resolver import RegistryDigestResolver
from composeapp.domain.shared.port.registry import RegistryClient
from composeapp.infrastructure.oci.engine import EngineDigestResolver
from composeapp.infrastructure.oci.registry import HttpRegistryClient
from composeapp.util.di.base import Provider
from composeapp.util.di.scope import Scope


class OciProvider(Provider):
    @provide(scope=Scope.APP)
    async def get_http_client(self, config: Config) -> AsyncIterable[httpx.AsyncClient]:
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.registry.timeout_seconds),
            follow_redirects=True,
        )
        yield client
        await client.aclose()

    @provide(scope=Scope.APP)
    def get_registry_client(self, client: httpx.AsyncClient, config: Config) -> RegistryClient:
        return HttpRegistryClient(client=client, config=config.registry)

    @provide(scope=Scope.UOW)
    async def get_digest_resolver(
        self, config: Config, registry: RegistryClient
    ) -> AsyncIterable[DigestResolver]:
        if config.pin.strategy == "engine":
            docker = aiodocker.Docker()
            yield EngineDigestResolver(docker=docker)
            await docker.close()
        else:
            yield RegistryDigestResolver(registry=registry)
