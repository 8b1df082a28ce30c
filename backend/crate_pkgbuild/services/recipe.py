import re
import shlex
from pathlib import Path
from typing import Callable, Dict, Iterable

from loguru import logger

from ..errors import RecipeWriteError
from ..schemas import ResolvedDescriptor

Escape = Callable[[str], str]

TOKENS = ("CRATE", "VERSION", "BINARIES", "DESCRIPTION", "URL", "LICENSE")

# one pass over the template so substituted values are never rescanned
_TOKEN_PATTERN = re.compile("|".join(TOKENS))


def _join(values: Iterable[str], escape: Escape) -> str:
    return " ".join(escape(value) for value in values)


def substitutions(descriptor: ResolvedDescriptor, escape: Escape = shlex.quote) -> Dict[str, str]:
    return {
        "CRATE": escape(descriptor.name),
        "VERSION": escape(descriptor.version),
        "BINARIES": _join(descriptor.binaries, escape),
        "DESCRIPTION": escape(descriptor.description),
        "URL": escape(descriptor.url),
        "LICENSE": _join(descriptor.license_tokens, escape),
    }


def emit(descriptor: ResolvedDescriptor, template: str, escape: Escape = shlex.quote) -> str:
    values = substitutions(descriptor, escape)
    return _TOKEN_PATTERN.sub(lambda match: values[match.group(0)], template)


def write_recipe(build_dir: str | Path, descriptor: ResolvedDescriptor, content: str, filename: str = "PKGBUILD") -> Path:
    directory = Path(build_dir) / descriptor.name
    target = directory / filename
    try:
        directory.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise RecipeWriteError(f"Cannot write recipe {target}: {exc}") from exc
    logger.info(f"[recipe] wrote {target}")
    return target
