import re
from pathlib import Path
from typing import Any, List, Mapping

import yaml
from loguru import logger

from ..errors import ConfigError
from ..schemas import PackageSpec

# crates.io identifiers: ASCII letter first, then letters, digits, "-" or "_"
CRATE_NAME = re.compile(r"[A-Za-z][A-Za-z0-9_-]{0,63}")


def decode_entry(name: Any, value: Any) -> PackageSpec:
    if not isinstance(name, str) or not name:
        raise ConfigError(f"Crate name must be a non-empty string, got {name!r}")
    if not CRATE_NAME.fullmatch(name):
        raise ConfigError(f"Invalid crate name {name!r}")
    if value is None:
        return PackageSpec(name=name, binaries=[name])
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return PackageSpec(name=name, binaries=list(value))
    raise ConfigError(f"Unexpected type of value for crate {name}: {value!r}")


def decode_packages(data: Any) -> List[PackageSpec]:
    """Turn ``{crate: null | [binary, ...]}`` into package specs, keeping file order."""
    if data is None:
        return []
    if not isinstance(data, Mapping):
        raise ConfigError(f"Package list must be a mapping, got {type(data).__name__}")
    return [decode_entry(name, value) for name, value in data.items()]


def load_packages(path: str | Path) -> List[PackageSpec]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read package list {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    specs = decode_packages(data)
    logger.debug(f"[config] loaded {len(specs)} crate(s) from {path}")
    return specs
