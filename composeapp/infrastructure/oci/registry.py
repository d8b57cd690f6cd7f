"""OCI distribution API client using httpx."""

import base64
import re

import httpx
import logfire
from pydantic import ValidationError

from composeapp.config import RegistryConfig
from composeapp.domain.reference.model import (
    Descriptor,
    ImageManifest,
    ImageReference,
    ManifestKind,
    PlatformDescriptor,
    PlatformList,
    SinglePlatform,
    sha256_digest,
)
from composeapp.domain.reference.model.manifest import (
    DOCKER_MANIFEST_LIST,
    DOCKER_MANIFEST_V2,
    MANIFEST_LIST_TYPES,
    OCI_IMAGE_CONFIG,
    OCI_IMAGE_INDEX,
    OCI_IMAGE_MANIFEST,
    SINGLE_MANIFEST_TYPES,
)
from composeapp.domain.shared.error import ManifestUnknownError, RegistryError
from composeapp.domain.shared.port.registry import RegistryClient, Repository

DOCKER_HUB_DOMAIN = "docker.io"
DOCKER_HUB_HOST = "registry-1.docker.io"

MANIFEST_ACCEPT = ", ".join(
    [OCI_IMAGE_INDEX, DOCKER_MANIFEST_LIST, OCI_IMAGE_MANIFEST, DOCKER_MANIFEST_V2]
)

_CHALLENGE_PARAM = re.compile(r'(\w+)="([^"]*)"')


def _media_type(response: httpx.Response) -> str:
    return response.headers.get("content-type", "").split(";")[0].strip()


def _json_object(response: httpx.Response, what: str) -> dict:
    try:
        body = response.json()
    except ValueError as e:
        raise RegistryError(f"Malformed {what} from {response.request.url}: {e}") from e
    if not isinstance(body, dict):
        raise RegistryError(f"Malformed {what} from {response.request.url}: expected an object")
    return body


class HttpRepository(Repository):
    """One repository on a registry, reached over the /v2/ API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        name: str,
        credentials: tuple[str, str] | None = None,
    ) -> None:
        self._client = client
        self._base_url = base_url
        self._name = name
        self._credentials = credentials
        self._authorization: str | None = None

    @property
    def name(self) -> str:
        return self._name

    def _url(self, kind: str, ref: str) -> str:
        return f"{self._base_url}/v2/{self._name}/{kind}/{ref}"

    async def get_tag(self, tag: str) -> Descriptor:
        url = self._url("manifests", tag)
        response = await self._request("HEAD", url, headers={"Accept": MANIFEST_ACCEPT})
        digest = response.headers.get("docker-content-digest")
        if digest:
            size = int(response.headers.get("content-length", 0))
            return Descriptor(media_type=_media_type(response), digest=digest, size=size)

        # Some registries omit the digest header on HEAD; hash the manifest instead
        response = await self._request("GET", url, headers={"Accept": MANIFEST_ACCEPT})
        return Descriptor.for_content(_media_type(response), response.content)

    async def get_manifest(self, digest: str) -> ManifestKind:
        response = await self._request(
            "GET", self._url("manifests", digest), headers={"Accept": MANIFEST_ACCEPT}
        )
        body = _json_object(response, "manifest")
        media_type = body.get("mediaType") or _media_type(response)

        if media_type in MANIFEST_LIST_TYPES:
            try:
                return PlatformList(
                    entries=tuple(
                        PlatformDescriptor.from_oci(m.get("platform") or {})
                        for m in body.get("manifests", [])
                    )
                )
            except (AttributeError, TypeError, ValidationError) as e:
                raise RegistryError(f"Malformed manifest list from {response.request.url}") from e
        if media_type in SINGLE_MANIFEST_TYPES:
            return SinglePlatform()
        raise RegistryError(f"Unexpected manifest: {media_type or 'unknown media type'}")

    async def put_blob(self, media_type: str, data: bytes) -> Descriptor:
        desc = Descriptor.for_content(media_type, data)
        try:
            await self._request("HEAD", self._url("blobs", desc.digest))
            logfire.debug("Blob already present", repository=self._name, digest=desc.digest)
            return desc
        except ManifestUnknownError:
            pass

        response = await self._request(
            "POST", f"{self._base_url}/v2/{self._name}/blobs/uploads/", expected=(202,)
        )
        location = response.headers.get("location")
        if not location:
            raise RegistryError("Registry did not return an upload location")

        upload_url = httpx.URL(self._base_url).join(location).copy_merge_params(
            {"digest": desc.digest}
        )
        await self._request(
            "PUT",
            str(upload_url),
            content=data,
            headers={"Content-Type": "application/octet-stream"},
            expected=(201,),
        )
        logfire.info("Uploaded blob", repository=self._name, digest=desc.digest, size=desc.size)
        return desc

    async def build_manifest(
        self, layer: Descriptor, annotations: dict[str, str]
    ) -> ImageManifest:
        config = await self.put_blob(OCI_IMAGE_CONFIG, b"")
        return ImageManifest(config=config, layers=(layer,), annotations=annotations)

    async def put_manifest(self, manifest: ImageManifest, tag: str) -> str:
        body = manifest.to_bytes()
        response = await self._request(
            "PUT",
            self._url("manifests", tag),
            content=body,
            headers={"Content-Type": manifest.media_type},
            expected=(201,),
        )
        digest = response.headers.get("docker-content-digest") or sha256_digest(body)
        logfire.info("Pushed manifest", repository=self._name, tag=tag, digest=digest)
        return digest

    async def _request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
        expected: tuple[int, ...] = (200,),
    ) -> httpx.Response:
        headers = dict(headers or {})
        try:
            response = await self._send(method, url, headers, content)
            if response.status_code == 401 and await self._authenticate(response):
                response = await self._send(method, url, headers, content)
        except httpx.HTTPError as e:
            logfire.error("Registry request failed", method=method, url=url, error=str(e))
            raise RegistryError(f"{method} {url} failed: {e}") from e

        if response.status_code == 404:
            raise ManifestUnknownError(f"{method} {url}: not found", status_code=404)
        if response.status_code not in expected:
            detail = "" if method == "HEAD" else f": {response.text[:500]}"
            raise RegistryError(
                f"{method} {url}: unexpected status {response.status_code}{detail}",
                status_code=response.status_code,
            )
        return response

    async def _send(
        self, method: str, url: str, headers: dict[str, str], content: bytes | None
    ) -> httpx.Response:
        if self._authorization:
            headers = {**headers, "Authorization": self._authorization}
        return await self._client.request(method, url, headers=headers, content=content)

    async def _authenticate(self, response: httpx.Response) -> bool:
        """Answer a 401 challenge. Returns True if the request should be retried."""
        challenge = response.headers.get("www-authenticate", "")
        scheme, _, params = challenge.partition(" ")

        if scheme.lower() == "basic":
            if self._credentials is None:
                return False
            token = base64.b64encode(":".join(self._credentials).encode()).decode()
            self._authorization = f"Basic {token}"
            return True

        if scheme.lower() != "bearer":
            return False

        fields = dict(_CHALLENGE_PARAM.findall(params))
        realm = fields.get("realm")
        if not realm:
            raise RegistryError(f"Malformed auth challenge: {challenge}", status_code=401)

        query = {"scope": fields.get("scope", f"repository:{self._name}:pull,push")}
        if "service" in fields:
            query["service"] = fields["service"]
        token_response = await self._client.get(realm, params=query, auth=self._credentials)
        if token_response.status_code != 200:
            raise RegistryError(
                f"Unable to obtain registry token from {realm}: {token_response.status_code}",
                status_code=token_response.status_code,
            )
        data = _json_object(token_response, "token response")
        token = data.get("token") or data.get("access_token")
        if not token:
            raise RegistryError(f"Token response from {realm} carried no token", status_code=401)
        self._authorization = f"Bearer {token}"
        return True


class HttpRegistryClient(RegistryClient):
    """Hands out HttpRepository instances for references."""

    def __init__(self, client: httpx.AsyncClient, config: RegistryConfig) -> None:
        self._client = client
        self._config = config

    def base_url(self, domain: str) -> str:
        host = DOCKER_HUB_HOST if domain == DOCKER_HUB_DOMAIN else domain
        scheme = "http" if domain in self._config.insecure else "https"
        return f"{scheme}://{host}"

    async def repository(self, reference: ImageReference) -> HttpRepository:
        return HttpRepository(
            client=self._client,
            base_url=self.base_url(reference.domain),
            name=reference.path,
            credentials=self._config.credentials,
        )
