"""
Shared pytest fixtures for the verifier test suite.

Provides fixtures for:
- Temporary storage directories
- Fake compiler binaries (shell scripts speaking --standard-json)
- Version catalogs backed by a local compiler cache
- A verifierd app wired to a scripted compiler
"""

import json
import stat
import tempfile
from collections.abc import AsyncGenerator
from collections.abc import Callable
from collections.abc import Generator
from pathlib import Path
from typing import Any

import httpx
import pytest
from fakes import ScriptedAdapter
from fakes import offline_transport
from fakes import populate_cache
from fastapi import FastAPI

from verifier_library.compilers.catalog import VersionCatalog
from verifier_library.compilers.pool import CompilerPool
from verifier_library.verification import VerifierClient

API_VERSIONS = ["v0.3.10", "v0.3.9", "v0.3.7"]


@pytest.fixture
def temp_storage_dir() -> Generator[Path, None, None]:
    """Create temporary storage directory for tests.

    Automatically cleaned up after test completes.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_storage_env(temp_storage_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point VERIFIERD_HOME at a temporary directory.

    Example:
        >>> def test_with_isolated_storage(mock_storage_env):
        ...     from verifier_library.storage.paths import get_home_dir
        ...     assert get_home_dir() == mock_storage_env.resolve()
    """
    monkeypatch.setenv("VERIFIERD_HOME", str(temp_storage_dir))
    monkeypatch.delenv("VERIFIERD_CONFIG_DIR", raising=False)
    return temp_storage_dir


@pytest.fixture
def fake_compiler(temp_storage_dir: Path) -> Callable[..., Path]:
    """Factory writing an executable shell script that impersonates a compiler.

    The script saves its stdin next to itself as `input.json`, then prints
    `output` (dict serialized as JSON, or raw text), writes `stderr` and
    exits with `exit_code`. `body` replaces the whole behavior when given.
    """
    counter = 0

    def factory(
        output: dict[str, Any] | str = "",
        stderr: str = "",
        exit_code: int = 0,
        body: str | None = None,
    ) -> Path:
        nonlocal counter
        counter += 1
        directory = temp_storage_dir / f"fake-compiler-{counter}"
        directory.mkdir()
        (directory / "output.txt").write_text(output if isinstance(output, str) else json.dumps(output))
        (directory / "stderr.txt").write_text(stderr)

        if body is None:
            body = (
                'dir=$(dirname "$0")\n'
                'cat > "$dir/input.json"\n'
                'cat "$dir/output.txt"\n'
                'cat "$dir/stderr.txt" >&2\n'
                f"exit {exit_code}\n"
            )
        path = directory / "compiler"
        path.write_text("#!/bin/sh\n" + body)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IRUSR)
        return path

    return factory


@pytest.fixture
async def cached_catalog(temp_storage_dir: Path) -> AsyncGenerator[Callable[[list[str]], VersionCatalog], None]:
    """Factory building catalogs whose versions all sit in the local cache."""
    catalogs: list[VersionCatalog] = []

    def factory(versions: list[str]) -> VersionCatalog:
        compilers_dir = temp_storage_dir / f"compilers-{len(catalogs)}"
        populate_cache(compilers_dir, versions)
        catalog = VersionCatalog(
            list_url="https://compilers.test/list.json",
            compilers_dir=compilers_dir,
            binary_name="vyper",
            http_client=httpx.AsyncClient(transport=offline_transport()),
        )
        catalog.load_from_dir()
        catalogs.append(catalog)
        return catalog

    yield factory

    for catalog in catalogs:
        await catalog._http.aclose()


@pytest.fixture
def make_app(temp_storage_dir: Path) -> Callable[[dict[str, Any]], FastAPI]:
    """Factory creating a verifierd app whose only language is a scripted vyper.

    Built synchronously: TestClient runs the app on its own event loop.
    """
    from verifierd.main import create_app

    def factory(results: dict[str, Any]) -> FastAPI:
        compilers_dir = temp_storage_dir / "api-compilers"
        populate_cache(compilers_dir, API_VERSIONS)
        catalog = VersionCatalog(
            list_url="https://compilers.test/list.json",
            compilers_dir=compilers_dir,
            binary_name="vyper",
            http_client=httpx.AsyncClient(transport=offline_transport()),
        )
        catalog.load_from_dir()
        pool = CompilerPool(catalog, ScriptedAdapter(results), workers=2)
        return create_app(clients={"vyper": VerifierClient(pool)})

    return factory
