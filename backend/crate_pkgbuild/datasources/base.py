from typing import Protocol

from ..schemas import RegistryPayload


class MetadataSource(Protocol):
    async def fetch_metadata(self, name: str) -> RegistryPayload:
        ...
