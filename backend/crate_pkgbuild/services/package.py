import asyncio
from typing import Iterable, List, Optional

from loguru import logger

from ..datasources.base import MetadataSource
from ..schemas import DescriptiveInfo, PackageSpec, RegistryPayload, ResolvedDescriptor
from .licenses import normalize


class Package:
    """One configured crate plus the registry payload it fetched.

    The payload is fetched lazily and at most once: the first caller starts
    the request, later (or concurrent) callers await the same task.
    """

    def __init__(self, spec: PackageSpec, source: MetadataSource, extra_licenses: Iterable[str] = ()):
        self.spec = spec
        self.source = source
        self.extra_licenses = tuple(extra_licenses)
        self._fetch: Optional[asyncio.Task] = None

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def binaries(self) -> List[str]:
        return list(self.spec.binaries)

    async def load_metadata(self) -> RegistryPayload:
        if self._fetch is None:
            self._fetch = asyncio.ensure_future(self.source.fetch_metadata(self.name))
        return await self._fetch

    async def latest_version(self) -> str:
        payload = await self.load_metadata()
        return _latest_version(payload)

    async def license(self) -> List[str]:
        payload = await self.load_metadata()
        return _license(payload, self.extra_licenses)

    async def descriptive_info(self) -> DescriptiveInfo:
        payload = await self.load_metadata()
        return DescriptiveInfo(
            description=payload.crate.description or "",
            url=payload.url,
            version=_latest_version(payload),
            license=_license(payload, self.extra_licenses),
        )

    async def resolve(self) -> ResolvedDescriptor:
        info = await self.descriptive_info()
        logger.info(f"📦 {self.name} {info.version}")
        return ResolvedDescriptor(
            name=self.name,
            binaries=self.binaries,
            version=info.version,
            license_tokens=info.license,
            description=info.description,
            url=info.url,
        )


def _latest_version(payload: RegistryPayload) -> str:
    record = payload.find_version(payload.latest_stable_version)
    if record is None:
        return payload.latest_stable_version
    return record.num


def _license(payload: RegistryPayload, extra: Iterable[str]) -> List[str]:
    record = payload.find_version(payload.latest_stable_version)
    if record is None:
        return []
    return normalize(record.license, extra)
