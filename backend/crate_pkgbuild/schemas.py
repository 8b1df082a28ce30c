from typing import List, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class PackageSpec(BaseModel):
    """A configured crate and the binaries its recipe installs."""

    model_config = ConfigDict(frozen=True)

    name: str
    binaries: List[str]


class CrateRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    max_stable_version: Optional[str] = None
    max_version: Optional[str] = None
    description: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[str] = None
    documentation: Optional[str] = None


class VersionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    num: str
    license: Optional[str] = None


class RegistryPayload(BaseModel):
    """Body of ``GET /api/v1/crates/{name}``, reduced to the fields we read."""

    model_config = ConfigDict(frozen=True)

    crate: CrateRecord
    versions: List[VersionRecord]

    @model_validator(mode="after")
    def _require_latest_version(self) -> "RegistryPayload":
        if not self.latest_stable_version:
            raise ValueError("crate has neither max_stable_version nor max_version")
        return self

    @property
    def latest_stable_version(self) -> str:
        # crates with only pre-releases report a null max_stable_version
        return self.crate.max_stable_version or self.crate.max_version or ""

    @property
    def url(self) -> str:
        for candidate in (self.crate.homepage, self.crate.repository, self.crate.documentation):
            if candidate:
                return candidate
        return ""

    def find_version(self, num: str) -> Optional[VersionRecord]:
        for record in self.versions:
            if record.num == num:
                return record
        return None


class DescriptiveInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    url: str
    version: str
    license: List[str]


class ResolvedDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    binaries: List[str]
    version: str
    license_tokens: List[str]
    description: str = ""
    url: str = ""
