"""Startup wiring: settings -> catalogs -> pools -> clients.

Contract:
- Inputs: VerifierSettings
- Outputs: One VerifierClient per enabled language
- Side Effects: Fetches manifests, scans and optionally fills the compiler
  cache, starts refresh schedulers
"""

import asyncio
import logging
from pathlib import Path

from .compilers import ADAPTERS
from .compilers.catalog import VersionCatalog
from .compilers.pool import CompilerPool
from .config.settings import VerifierSettings
from .errors import InitializationError
from .storage import get_compilers_dir
from .verification.client import VerifierClient
from .verification.extensions import HttpLookupMiddleware

logger = logging.getLogger(__name__)


async def build_client(
    language: str,
    settings: VerifierSettings,
    permits: asyncio.Semaphore,
) -> VerifierClient:
    """Build the client for one language.

    Args:
        language: Supported language name
        settings: Verifier settings
        permits: Process-wide compile permit gate

    Raises:
        InitializationError: If the compiler list cannot be loaded
    """
    if language not in ADAPTERS:
        raise InitializationError(f"Unsupported language: {language}")

    language_settings = settings.language(language)
    adapter = ADAPTERS[language]()
    compilers_dir = Path(language_settings.compilers_dir or get_compilers_dir(language))

    catalog = await VersionCatalog.create(
        list_url=language_settings.list_url,
        compilers_dir=compilers_dir,
        binary_name=adapter.binary_name,
        refresh_schedule=language_settings.refresh_versions_schedule,
        download_retries=settings.download_retries,
        timeout_seconds=settings.download_timeout_seconds,
    )
    catalog.load_from_dir()

    pool = CompilerPool(
        catalog,
        adapter,
        workers=settings.compiler_threads,
        compile_timeout=settings.compile_timeout_seconds,
        permits=permits,
    )
    if settings.preload_compilers:
        await pool.preload()

    await catalog.start()

    client = VerifierClient(pool)
    if settings.extensions.lookup_url:
        client = client.with_middleware(
            HttpLookupMiddleware(settings.extensions.lookup_url, timeout_seconds=settings.extensions.timeout_seconds)
        )
    logger.info(f"{language} verifier ready with {len(pool.list_versions_sorted())} compiler versions")
    return client


async def build_clients(settings: VerifierSettings) -> dict[str, VerifierClient]:
    """Build clients for every enabled language, sharing one permit gate.

    Raises:
        InitializationError: If any enabled language fails to start
    """
    permits = asyncio.Semaphore(settings.compiler_threads)
    clients: dict[str, VerifierClient] = {}
    try:
        for language in ADAPTERS:
            if settings.language(language).enabled:
                clients[language] = await build_client(language, settings, permits)
    except InitializationError:
        await close_clients(clients)
        raise
    return clients


async def close_clients(clients: dict[str, VerifierClient]) -> None:
    """Stop refresh schedulers and release HTTP clients."""
    for client in clients.values():
        await client.compilers.catalog.stop()
        close = getattr(client.middleware, "close", None)
        if close is not None:
            await close()
