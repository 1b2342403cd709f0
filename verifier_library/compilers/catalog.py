"""Compiler version catalog backed by a remote build manifest.

Tracks every known compiler version and where to download it, refreshes
from the manifest on a cron schedule, and resolves versions to local
binaries in a per-version cache directory.

Architecture:
- Known versions only ever grow: refreshes add, never remove
- Downloads of the same version are single-flight (one asyncio.Lock per
  version); different versions download concurrently
- Resolved binaries are cached for the process lifetime and never evicted
- Refreshes run on an APScheduler AsyncIOScheduler

Manifest format:
    {"builds": [{"longVersion": "0.3.7+commit.6020b8bb",
                 "path": "https://.../vyper.0.3.7+commit.6020b8bb.linux",
                 "sha256": "0x..."}]}
`path` may be relative to the manifest URL; `version` is accepted when
`longVersion` is absent.
"""

import asyncio
import hashlib
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from ..errors import BadRequestError
from ..errors import InitializationError
from ..errors import InternalError
from ..errors import VersionNotFoundError
from ..models.versions import CompilerVersion
from .binaries import CompilerBinary
from .binaries import CompilerBuild

logger = logging.getLogger(__name__)


class ManifestError(ValueError):
    """Raised when a build manifest is not in the expected format."""


class IntegrityError(ValueError):
    """Raised when a downloaded binary does not match its manifest checksum."""


def parse_cron(cron_expr: str) -> CronTrigger:
    """Parse cron expression into CronTrigger.

    Args:
        cron_expr: Standard cron expression (5 or 6 parts)

    Returns:
        CronTrigger configured with expression, evaluated in UTC

    Example:
        "0 0 * * *" -> Daily at midnight UTC
        "*/30 * * * *" -> Every 30 minutes
    """
    parts = cron_expr.split()

    if len(parts) == 5:
        minute, hour, day, month, day_of_week = parts
        return CronTrigger(
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=day_of_week,
            timezone="UTC",
        )
    if len(parts) == 6:
        second, minute, hour, day, month, day_of_week = parts
        return CronTrigger(
            second=second,
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=day_of_week,
            timezone="UTC",
        )
    raise ValueError(f"Invalid cron expression (must be 5 or 6 parts): {cron_expr}")


def parse_manifest(payload: Any, list_url: str) -> list[CompilerBuild]:
    """Parse a build manifest into compiler builds.

    Malformed entries are skipped with a warning.

    Raises:
        ManifestError: If the manifest has no `builds` list
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("builds"), list):
        raise ManifestError("Manifest must be an object with a 'builds' list")

    base_url = httpx.URL(list_url)
    builds = []
    for entry in payload["builds"]:
        try:
            version = CompilerVersion.parse(entry.get("longVersion") or entry["version"])
            url = str(base_url.join(entry["path"]))
            sha256 = entry.get("sha256")
            if sha256:
                sha256 = sha256.lower().removeprefix("0x")
            builds.append(CompilerBuild(version=version, url=url, sha256=sha256 or None))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed manifest entry {entry!r}: {e}")
    return builds


class VersionCatalog:
    """Known compiler versions and their local binaries for one language."""

    def __init__(
        self,
        list_url: str,
        compilers_dir: Path,
        binary_name: str,
        refresh_schedule: str | None = None,
        download_retries: int = 3,
        retry_backoff_seconds: float = 1.0,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 120.0,
    ) -> None:
        """Initialize catalog.

        Args:
            list_url: Manifest URL
            compilers_dir: Local cache directory, one subdirectory per version
            binary_name: File name of the binary inside a version directory
            refresh_schedule: Cron expression for periodic refreshes (None disables)
            download_retries: Attempts per download before raising InternalError
            retry_backoff_seconds: Base delay between attempts (multiplied by attempt number)
            http_client: Client for manifest and binary downloads (owned when None)
            timeout_seconds: Timeout for one HTTP request
        """
        self.list_url = list_url
        self.compilers_dir = Path(compilers_dir)
        self.binary_name = binary_name
        self.refresh_schedule = refresh_schedule
        self.download_retries = download_retries
        self.retry_backoff_seconds = retry_backoff_seconds

        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout_seconds, follow_redirects=True)
        self._known: dict[CompilerVersion, CompilerBuild | None] = {}
        self._binaries: dict[CompilerVersion, CompilerBinary] = {}
        self._locks: dict[CompilerVersion, asyncio.Lock] = {}
        self.scheduler: AsyncIOScheduler | None = None

    @classmethod
    async def create(cls, *args: Any, **kwargs: Any) -> "VersionCatalog":
        """Create a catalog and fetch its manifest once.

        Raises:
            InitializationError: If the manifest is unreachable or malformed
        """
        catalog = cls(*args, **kwargs)
        try:
            await catalog.initialize()
        except InitializationError:
            await catalog.stop()
            raise
        return catalog

    async def initialize(self) -> None:
        """Fetch the manifest for the first time.

        Raises:
            InitializationError: If the manifest is unreachable or malformed
        """
        try:
            added = await self.refresh()
        except (httpx.HTTPError, ManifestError) as e:
            raise InitializationError(f"Failed to load compiler list from {self.list_url}: {e}") from e
        logger.info(f"Compiler catalog initialized from {self.list_url} with {len(added)} versions")

    async def refresh(self) -> set[CompilerVersion]:
        """Fetch the manifest and merge new versions into the known set.

        Returns:
            Versions added by this refresh

        Raises:
            httpx.HTTPError: If the manifest cannot be fetched
            ManifestError: If the manifest is malformed
        """
        response = await self._http.get(self.list_url)
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as e:
            raise ManifestError(f"Manifest is not valid JSON: {e}") from e

        added = set()
        for build in parse_manifest(payload, self.list_url):
            if self._known.get(build.version) is None:
                if build.version not in self._known:
                    added.add(build.version)
                self._known[build.version] = build

        if added:
            logger.info(f"Compiler catalog refresh added {len(added)} versions")
        else:
            logger.debug("Compiler catalog refresh found no new versions")
        return added

    async def _scheduled_refresh(self) -> None:
        try:
            await self.refresh()
        except (httpx.HTTPError, ManifestError) as e:
            logger.error(f"Scheduled compiler list refresh from {self.list_url} failed: {e}")

    async def start(self) -> None:
        """Start periodic refreshes. Idempotent; no-op without a schedule."""
        if self.refresh_schedule is None or self.scheduler is not None:
            return

        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.scheduler.add_job(
            func=self._scheduled_refresh,
            trigger=parse_cron(self.refresh_schedule),
            id=f"refresh-{self.binary_name}",
            name=f"Refresh {self.binary_name} compiler list",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(f"Scheduled {self.binary_name} compiler list refresh: {self.refresh_schedule}")

    async def stop(self) -> None:
        """Stop periodic refreshes and release the HTTP client."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None
        if self._owns_client:
            await self._http.aclose()

    def load_from_dir(self) -> int:
        """Register binaries already present in the cache directory.

        Such versions join the known set even if the manifest lacks them.

        Returns:
            Number of binaries registered
        """
        if not self.compilers_dir.is_dir():
            return 0

        loaded = 0
        for entry in sorted(self.compilers_dir.iterdir()):
            path = entry / self.binary_name
            if not entry.is_dir() or not path.is_file():
                continue
            try:
                version = CompilerVersion.parse(entry.name)
            except ValueError:
                logger.debug(f"Ignoring non-version directory in compiler cache: {entry}")
                continue
            self._known.setdefault(version, None)
            self._binaries.setdefault(version, CompilerBinary(path=path, version=version))
            loaded += 1

        logger.info(f"Loaded {loaded} cached {self.binary_name} binaries from {self.compilers_dir}")
        return loaded

    def versions(self) -> list[CompilerVersion]:
        """All known versions, newest first."""
        return sorted(self._known, reverse=True)

    def __contains__(self, version: CompilerVersion) -> bool:
        return version in self._known

    def is_cached(self, version: CompilerVersion) -> bool:
        return version in self._binaries

    def lookup(self, requested: str) -> CompilerVersion:
        """Find the known version answering an exact version request.

        A request without a commit hash resolves to the newest build of that release.

        Raises:
            BadRequestError: If the string is not a compiler version
            VersionNotFoundError: If no known version matches
        """
        try:
            requested_version = CompilerVersion.parse(requested)
        except ValueError as e:
            raise BadRequestError(str(e)) from e

        matches = [v for v in self._known if v.satisfies_request(requested_version)]
        if not matches:
            raise VersionNotFoundError(requested)
        return max(matches)

    async def resolve(self, version: CompilerVersion) -> CompilerBinary:
        """Get the local binary for a version, downloading it if needed.

        Raises:
            VersionNotFoundError: If the version is unknown
            InternalError: If the download keeps failing or the cache directory is unusable
        """
        binary = self._binaries.get(version)
        if binary is not None:
            return binary

        lock = self._locks.setdefault(version, asyncio.Lock())
        async with lock:
            binary = self._binaries.get(version)
            if binary is not None:
                return binary

            build = self._known.get(version)
            if build is None:
                raise VersionNotFoundError(str(version))

            binary = await self._download(build)
            self._binaries[version] = binary
            return binary

    async def _download(self, build: CompilerBuild) -> CompilerBinary:
        target_dir = self.compilers_dir / str(build.version)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InternalError(f"Cannot create compiler cache directory {target_dir}: {e}") from e
        path = target_dir / self.binary_name

        last_error: Exception | None = None
        for attempt in range(1, self.download_retries + 1):
            try:
                await self._download_once(build, path)
                logger.info(f"Downloaded {self.binary_name} {build.version} to {path}")
                return CompilerBinary(path=path, version=build.version, sha256=build.sha256)
            except (httpx.HTTPError, OSError, IntegrityError) as e:
                last_error = e
                logger.warning(
                    f"Download of {self.binary_name} {build.version} failed "
                    f"(attempt {attempt}/{self.download_retries}): {e}"
                )
                if attempt < self.download_retries:
                    await asyncio.sleep(self.retry_backoff_seconds * attempt)

        raise InternalError(
            f"Failed to download {self.binary_name} {build.version} "
            f"after {self.download_retries} attempts: {last_error}"
        ) from last_error

    async def _download_once(self, build: CompilerBuild, path: Path) -> None:
        digest = hashlib.sha256()
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{self.binary_name}-", suffix=".part")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                async with self._http.stream("GET", build.url) as response:
                    response.raise_for_status()
                    async for chunk in response.aiter_bytes():
                        digest.update(chunk)
                        await asyncio.to_thread(f.write, chunk)

            if build.sha256 and digest.hexdigest() != build.sha256:
                raise IntegrityError(f"Checksum mismatch: expected {build.sha256}, got {digest.hexdigest()}")

            tmp_path.chmod(tmp_path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH | stat.S_IRUSR)
            os.replace(tmp_path, path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
