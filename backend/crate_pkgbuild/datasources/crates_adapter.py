from typing import Optional
from urllib.parse import quote

import httpx
from loguru import logger
from pydantic import ValidationError

from ..config import Settings, get_settings
from ..errors import MalformedPayloadError, RegistryFetchError
from ..schemas import RegistryPayload
from .base import MetadataSource


class CratesIoAdapter(MetadataSource):
    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or get_settings()
        headers = {
            "Accept": "application/json",
            "User-Agent": self.settings.registry_user_agent,
        }
        if self.settings.registry_token:
            headers["Authorization"] = f"Bearer {self.settings.registry_token}"
        self.headers = headers
        if client is None:
            client_kwargs = {
                "base_url": str(self.settings.registry_base_url),
                "timeout": self.settings.http_timeout_seconds,
            }
            # httpx accepts http://, https:// and socks5:// proxy URLs alike
            if self.settings.registry_proxy:
                client_kwargs["proxy"] = self.settings.registry_proxy
            client = httpx.AsyncClient(**client_kwargs)
        self.client = client

    async def __aenter__(self) -> "CratesIoAdapter":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def fetch_metadata(self, name: str) -> RegistryPayload:
        logger.debug(f"[registry] fetching crate={name}")
        try:
            # the name is one path segment; "#" or "?" must not leak into the URL
            path = f"/api/v1/crates/{quote(name, safe='')}"
            resp = await self.client.get(path, headers=self.headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            body = exc.response.text[:200]
            logger.error(f"[registry] crate={name} HTTP {status}: {body}")
            raise RegistryFetchError(
                name, f"HTTP {status} {exc.response.reason_phrase}", status_code=status
            ) from exc
        except httpx.RequestError as exc:
            logger.error(f"[registry] crate={name} request error: {type(exc).__name__}")
            raise RegistryFetchError(name, f"request error: {type(exc).__name__} {exc!r}") from exc

        try:
            payload = RegistryPayload.model_validate(resp.json())
        except ValidationError as exc:
            raise MalformedPayloadError(
                name, f"unexpected payload shape: {exc.error_count()} validation error(s)"
            ) from exc
        except ValueError as exc:
            # JSONDecodeError and UnicodeDecodeError from a body that is not UTF-8
            raise MalformedPayloadError(name, f"response is not JSON: {exc}") from exc

        logger.debug(
            f"[registry] fetched crate={name} latest={payload.latest_stable_version} "
            f"versions={len(payload.versions)}"
        )
        return payload
