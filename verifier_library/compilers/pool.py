"""Concurrency-gated compiler pool.

One pool per language: a VersionCatalog for binaries, a CompilerAdapter for
invocations, and a counting permit gate shared by every compile. A permit is
held from binary resolution until the compiler subprocess has exited, which
bounds the number of compiler subprocesses running at once.

Contract:
- Inputs: CompilerVersion, SourceInput
- Outputs: CompilationArtifact
- Side Effects: Downloads binaries, runs compiler subprocesses
"""

import asyncio
import logging

from ..errors import InternalError
from ..models.artifacts import CompilationArtifact
from ..models.sources import SourceInput
from ..models.versions import CompilerVersion
from .base import CompilerAdapter
from .catalog import VersionCatalog

logger = logging.getLogger(__name__)


class CompilerPool:
    """Compiles sources with cataloged compilers under a permit limit.

    Example:
        >>> pool = CompilerPool(catalog, VyperCompiler(), workers=4)
        >>> artifact = await pool.compile(catalog.lookup("0.3.7"), source_input)
    """

    def __init__(
        self,
        catalog: VersionCatalog,
        adapter: CompilerAdapter,
        workers: int,
        compile_timeout: float | None = None,
        permits: asyncio.Semaphore | None = None,
    ) -> None:
        """Initialize pool.

        Args:
            catalog: Version catalog providing binaries
            adapter: Language adapter invoking the binaries
            workers: Maximum concurrent compiles (ignored when permits is given)
            compile_timeout: Seconds before a compiler subprocess is killed
            permits: Permit gate shared with other pools, so one limit spans
                every language
        """
        if permits is None and workers < 1:
            raise ValueError("workers must be at least 1")
        self.catalog = catalog
        self.adapter = adapter
        self.compile_timeout = compile_timeout
        self.workers = workers
        self._permits = permits or asyncio.Semaphore(workers)
        self._in_flight = 0

    @property
    def language(self) -> str:
        return self.adapter.language

    @property
    def in_flight(self) -> int:
        """Number of compiles currently holding a permit."""
        return self._in_flight

    async def compile(self, version: CompilerVersion, source_input: SourceInput) -> CompilationArtifact:
        """Compile with one permit held for the whole resolution and invocation.

        Blocks until a permit is free. The permit is released on every exit
        path, including cancellation.

        Raises:
            VersionNotFoundError: Version unknown to the catalog
            CompilationError: Compiler reported source errors
            InternalError: Download, subprocess or adapter failure
        """
        async with self._permits:
            self._in_flight += 1
            try:
                binary = await self.catalog.resolve(version)
                return await self.adapter.compile(binary, source_input, self.compile_timeout)
            finally:
                self._in_flight -= 1

    async def preload(self) -> int:
        """Download every cataloged binary that is not cached yet.

        Failures are logged and skipped.

        Returns:
            Number of binaries available after preloading
        """
        versions = [v for v in self.catalog.versions() if not self.catalog.is_cached(v)]
        logger.info(f"Preloading {len(versions)} {self.language} compilers")
        downloads = asyncio.Semaphore(self.workers)

        async def fetch(version: CompilerVersion) -> None:
            async with downloads:
                try:
                    await self.catalog.resolve(version)
                except InternalError as e:
                    logger.error(f"Failed to preload {self.language} {version}: {e}")

        await asyncio.gather(*(fetch(v) for v in versions))
        available = sum(1 for v in self.catalog.versions() if self.catalog.is_cached(v))
        logger.info(f"{available} {self.language} compilers available locally")
        return available

    def list_versions_sorted(self) -> list[CompilerVersion]:
        """All cataloged versions, newest first."""
        return self.catalog.versions()

    def all_versions_sorted_str(self) -> list[str]:
        return [str(v) for v in self.list_versions_sorted()]
