from typing import Optional


class PkgbuildError(RuntimeError):
    """Base class for every error that aborts a generation run."""


class ConfigError(PkgbuildError):
    pass


class RegistryFetchError(PkgbuildError):
    def __init__(self, name: str, cause: str, status_code: Optional[int] = None):
        self.name = name
        self.cause = cause
        self.status_code = status_code
        super().__init__(f"Failed to load metadata of crate {name}: {cause}")


class MalformedPayloadError(RegistryFetchError):
    pass


class RecipeWriteError(PkgbuildError):
    pass
