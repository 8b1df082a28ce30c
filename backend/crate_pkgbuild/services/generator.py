from pathlib import Path
from typing import Iterable, List, NamedTuple, Optional, Sequence

from ..datasources.base import MetadataSource
from ..schemas import PackageSpec, ResolvedDescriptor
from .recipe import emit, write_recipe
from .resolver import resolve_all


class Recipe(NamedTuple):
    descriptor: ResolvedDescriptor
    content: str
    path: Optional[Path]


async def generate(
    specs: Sequence[PackageSpec],
    template: str,
    source: MetadataSource,
    build_dir: str | Path,
    filename: str = "PKGBUILD",
    extra_licenses: Iterable[str] = (),
    dry_run: bool = False,
) -> List[Recipe]:
    # nothing is written until every crate has resolved
    descriptors = await resolve_all(specs, source, extra_licenses)
    recipes: List[Recipe] = []
    for descriptor in descriptors:
        content = emit(descriptor, template)
        path = None if dry_run else write_recipe(build_dir, descriptor, content, filename)
        recipes.append(Recipe(descriptor, content, path))
    return recipes
