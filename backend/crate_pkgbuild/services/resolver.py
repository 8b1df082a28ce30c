import asyncio
from typing import Iterable, List, Sequence

from loguru import logger

from ..datasources.base import MetadataSource
from ..schemas import PackageSpec, ResolvedDescriptor
from .package import Package


def build_packages(
    specs: Iterable[PackageSpec], source: MetadataSource, extra_licenses: Iterable[str] = ()
) -> List[Package]:
    extra = tuple(extra_licenses)
    return [Package(spec, source, extra) for spec in specs]


async def resolve_all(
    specs: Sequence[PackageSpec], source: MetadataSource, extra_licenses: Iterable[str] = ()
) -> List[ResolvedDescriptor]:
    """Resolve every spec concurrently; results follow the order of ``specs``.

    The first failure propagates and no descriptor is returned. Fetches that
    are still in flight are left to finish and their results are dropped.
    """
    packages = build_packages(specs, source, extra_licenses)
    logger.info(f"[resolver] resolving {len(packages)} crate(s)")
    return list(await asyncio.gather(*(pkg.resolve() for pkg in packages)))
