from functools import lru_cache
from typing import List, Optional

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    registry_base_url: HttpUrl = Field(
        default="https://crates.io", alias="REGISTRY_BASE_URL"
    )
    # crates.io rejects requests without an identifying User-Agent
    registry_user_agent: str = Field(
        default="crate-pkgbuild (https://github.com/crate-pkgbuild/crate-pkgbuild)",
        alias="REGISTRY_USER_AGENT",
    )
    registry_token: Optional[str] = Field(default=None, alias="REGISTRY_TOKEN")
    registry_proxy: Optional[str] = Field(default=None, alias="REGISTRY_PROXY")
    http_timeout_seconds: float = Field(default=20, alias="HTTP_TIMEOUT_SECONDS")
    packages_file: str = Field(default="packages.yaml", alias="PACKAGES_FILE")
    template_file: str = Field(default="template/PKGBUILD", alias="TEMPLATE_FILE")
    build_dir: str = Field(default="build", alias="BUILD_DIR")
    recipe_filename: str = Field(default="PKGBUILD", alias="RECIPE_FILENAME")
    extra_licenses: List[str] = Field(default=[], alias="EXTRA_LICENSES")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    github_actions: bool = Field(default=False, alias="GITHUB_ACTIONS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # ignore unrelated env vars to avoid validation errors


@lru_cache
def get_settings() -> Settings:
    return Settings()
