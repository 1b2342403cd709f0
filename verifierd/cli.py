"""Command-line interface for verifierd.

Commands:
    serve               Run the verification daemon in the foreground
    versions LANGUAGE   List compiler versions known to the catalog
    preload LANGUAGE    Download every cataloged compiler binary
"""

import asyncio
import sys
from pathlib import Path

import click

from verifier_library.compilers import ADAPTERS
from verifier_library.compilers.catalog import VersionCatalog
from verifier_library.compilers.pool import CompilerPool
from verifier_library.config.loader import load_config
from verifier_library.config.settings import VerifierSettings
from verifier_library.errors import InitializationError
from verifier_library.storage import get_compilers_dir

LANGUAGE = click.Choice(sorted(ADAPTERS))


def _load(config_path: str | None) -> VerifierSettings:
    return load_config(Path(config_path) if config_path else None)


async def _open_catalog(settings: VerifierSettings, language: str) -> VersionCatalog:
    """Fetch the manifest and scan the local cache, without scheduling refreshes."""
    language_settings = settings.language(language)
    catalog = await VersionCatalog.create(
        list_url=language_settings.list_url,
        compilers_dir=Path(language_settings.compilers_dir or get_compilers_dir(language)),
        binary_name=ADAPTERS[language]().binary_name,
        download_retries=settings.download_retries,
        timeout_seconds=settings.download_timeout_seconds,
    )
    catalog.load_from_dir()
    return catalog


async def _list_versions(settings: VerifierSettings, language: str) -> list[str]:
    catalog = await _open_catalog(settings, language)
    try:
        return [f"{v}{' (cached)' if catalog.is_cached(v) else ''}" for v in catalog.versions()]
    finally:
        await catalog.stop()


async def _preload(settings: VerifierSettings, language: str) -> tuple[int, int]:
    catalog = await _open_catalog(settings, language)
    try:
        pool = CompilerPool(catalog, ADAPTERS[language](), workers=settings.compiler_threads)
        available = await pool.preload()
        return available, len(pool.list_versions_sorted())
    finally:
        await catalog.stop()


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Path to verifierd.yaml")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None):
    """verifierd - smart-contract source verification service."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.option("--host", help="Override listen address")
@click.option("--port", type=int, help="Override listen port")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None):
    """Run the daemon in the foreground."""
    import uvicorn

    config = _load(ctx.obj["config_path"])
    uvicorn.run(
        "verifierd.main:app",
        host=host or config.host,
        port=port or config.port,
        log_level=config.log_level.lower(),
        workers=config.workers,
    )


@cli.command()
@click.argument("language", type=LANGUAGE)
@click.pass_context
def versions(ctx: click.Context, language: str):
    """List compiler versions for LANGUAGE, newest first."""
    settings = _load(ctx.obj["config_path"])
    try:
        lines = asyncio.run(_list_versions(settings, language))
    except InitializationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for line in lines:
        click.echo(line)


@cli.command()
@click.argument("language", type=LANGUAGE)
@click.pass_context
def preload(ctx: click.Context, language: str):
    """Download every cataloged compiler for LANGUAGE."""
    settings = _load(ctx.obj["config_path"])
    try:
        available, total = asyncio.run(_preload(settings, language))
    except InitializationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"{available}/{total} {language} compilers available locally")


if __name__ == "__main__":
    cli()
