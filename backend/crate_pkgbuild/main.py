"""Command line entry point: ``crate-pkgbuild generate|resolve|license``."""

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Callable, List, Optional

import click
from loguru import logger
from pydantic import ValidationError
from pydantic_settings import SettingsError

from .config import Settings, get_settings
from .datasources.crates_adapter import CratesIoAdapter
from .errors import ConfigError, PkgbuildError
from .schemas import ResolvedDescriptor
from .services.generator import generate
from .services.licenses import normalize
from .services.package_list import load_packages
from .services.resolver import resolve_all

SourceFactory = Callable[[Settings], CratesIoAdapter]

LOG_FORMAT = "<level>{level: <8}</level> {message}"


def configure_logging(level: str) -> None:
    logger.remove()
    try:
        logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
    except ValueError as exc:
        # keep a sink so the failure itself can still be reported
        logger.add(sys.stderr, level="INFO", format=LOG_FORMAT)
        raise ConfigError(f"Unknown log level {level!r}") from exc


def load_settings() -> Settings:
    try:
        return get_settings()
    except (ValidationError, SettingsError) as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc


def read_template(path: str | Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read template {path}: {exc}") from exc


def report_failure(settings: Optional[Settings], exc: PkgbuildError) -> None:
    logger.error(f"{type(exc).__name__}: {exc}")
    if settings is None:
        github_actions = os.environ.get("GITHUB_ACTIONS", "").lower() == "true"
    else:
        github_actions = settings.github_actions
    if github_actions:
        click.echo(f"::error::{exc}")


class _Context:
    def __init__(self, settings: Settings, source_factory: SourceFactory):
        self.settings = settings
        self.source_factory = source_factory

    def run(self, coro_fn):
        async def runner():
            async with self.source_factory(self.settings) as source:
                return await coro_fn(source)

        try:
            return asyncio.run(runner())
        except PkgbuildError as exc:
            report_failure(self.settings, exc)
            sys.exit(1)


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL for this run.")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]):
    """Generate PKGBUILD recipes for crates published on crates.io."""
    try:
        settings = load_settings()
    except ConfigError as exc:
        configure_logging("INFO")
        report_failure(None, exc)
        sys.exit(1)
    try:
        configure_logging(log_level or settings.log_level)
    except ConfigError as exc:
        report_failure(settings, exc)
        sys.exit(1)
    obj = ctx.ensure_object(dict)
    ctx.obj = _Context(settings, obj.get("source_factory", CratesIoAdapter))


def _load_specs(ctx: _Context, packages: Optional[str]):
    try:
        return load_packages(packages or ctx.settings.packages_file)
    except ConfigError as exc:
        report_failure(ctx.settings, exc)
        sys.exit(1)


@cli.command("generate")
@click.option("--packages", type=click.Path(dir_okay=False), default=None, help="YAML package list.")
@click.option("--template", type=click.Path(dir_okay=False), default=None, help="Recipe template.")
@click.option("--build-dir", type=click.Path(file_okay=False), default=None, help="Output root.")
@click.option("--dry-run", is_flag=True, help="Print recipes instead of writing them.")
@click.pass_obj
def generate_cmd(ctx: _Context, packages, template, build_dir, dry_run):
    """Resolve every configured crate and write one recipe per crate."""
    settings = ctx.settings
    specs = _load_specs(ctx, packages)
    try:
        template_text = read_template(template or settings.template_file)
    except ConfigError as exc:
        report_failure(settings, exc)
        sys.exit(1)

    recipes = ctx.run(
        lambda source: generate(
            specs,
            template_text,
            source,
            build_dir or settings.build_dir,
            filename=settings.recipe_filename,
            extra_licenses=settings.extra_licenses,
            dry_run=dry_run,
        )
    )
    if dry_run:
        for recipe in recipes:
            click.echo(f"# ==> {recipe.descriptor.name}/{settings.recipe_filename}")
            click.echo(recipe.content)
    else:
        click.echo(f"Wrote {len(recipes)} recipe(s)")


@cli.command("resolve")
@click.option("--packages", type=click.Path(dir_okay=False), default=None, help="YAML package list.")
@click.option("--json", "as_json", is_flag=True, help="Print descriptors as JSON.")
@click.pass_obj
def resolve_cmd(ctx: _Context, packages, as_json):
    """Print the resolved version and licenses of every configured crate."""
    specs = _load_specs(ctx, packages)
    descriptors: List[ResolvedDescriptor] = ctx.run(
        lambda source: resolve_all(specs, source, ctx.settings.extra_licenses)
    )
    if as_json:
        click.echo(json.dumps([d.model_dump(mode="json") for d in descriptors], indent=2, ensure_ascii=False))
        return
    for descriptor in descriptors:
        licenses = " ".join(descriptor.license_tokens) or "-"
        click.echo(f"{descriptor.name} {descriptor.version} {licenses}")


@cli.command("license")
@click.argument("expressions", nargs=-1, required=True)
@click.pass_obj
def license_cmd(ctx: _Context, expressions):
    """Show how license expressions are normalized."""
    for expression in expressions:
        tokens = normalize(expression, ctx.settings.extra_licenses)
        click.echo(f"{expression!r} -> {' '.join(tokens)}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
