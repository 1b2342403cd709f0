"""
Test doubles and sample data shared across the test suite.
"""

from pathlib import Path
from typing import Any

import httpx

from verifier_library.compilers.binaries import CompilerBinary
from verifier_library.errors import CompilationError
from verifier_library.errors import Diagnostic
from verifier_library.models import CompilationArtifact
from verifier_library.models import ContractArtifact
from verifier_library.models import SourceInput
from verifier_library.models import VersionConstraint

# Runtime code followed by a Vyper 0.3.7 style trailer: a1 65 "vyper" 83 00 03 07, length 0x000b
RUNTIME_BODY = "6003600401600055"
VYPER_TRAILER = "a165767970657283000307000b"
RUNTIME_WITH_TRAILER = RUNTIME_BODY + VYPER_TRAILER
OTHER_TRAILER = "a165767970657283000309000b"


def populate_cache(compilers_dir: Path, versions: list[str], binary_name: str = "vyper") -> None:
    """Create one cached (placeholder) binary per version."""
    for version in versions:
        version_dir = compilers_dir / version
        version_dir.mkdir(parents=True, exist_ok=True)
        (version_dir / binary_name).write_text("#!/bin/sh\nexit 0\n")


def offline_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def contract(name: str, runtime: str, creation: str | None = None, file_path: str = "main.vy") -> ContractArtifact:
    return ContractArtifact(
        name=name,
        file_path=file_path,
        creation_bytecode=creation if creation is not None else "6000" + runtime,
        runtime_bytecode=runtime,
        abi=[],
    )


def compilation_error(message: str = "unexpected token") -> CompilationError:
    return CompilationError([Diagnostic(severity="error", message=message, file="main.vy", line=1, column=0)])


class ScriptedAdapter:
    """Compiler adapter returning canned results per compiler release.

    `results` maps a release string ("0.3.7") to a list of contracts, an
    exception to raise, or a callable taking the SourceInput and returning
    either. Unlisted releases compile to no contracts.
    """

    language = "vyper"
    binary_name = "vyper"

    def __init__(self, results: dict[str, Any], reported_versions: dict[str, str] | None = None) -> None:
        self.results = results
        self.reported_versions = reported_versions or {}
        self.calls: list[tuple[str, SourceInput]] = []

    def find_version_constraints(self, sources: dict[str, str]) -> list[VersionConstraint]:
        from verifier_library.compilers.vyper import VyperCompiler

        return VyperCompiler().find_version_constraints(sources)

    async def compile(
        self,
        binary: CompilerBinary,
        source_input: SourceInput,
        timeout: float | None = None,
    ) -> CompilationArtifact:
        release = binary.version.release
        self.calls.append((release, source_input))
        result = self.results.get(release, [])
        if callable(result):
            result = result(source_input)
        if isinstance(result, Exception):
            raise result
        settings = getattr(source_input, "settings_overrides", None)
        if settings is None:
            settings = source_input.settings
        return CompilationArtifact(
            contracts=tuple(result),
            compiler_version=self.reported_versions.get(release),
            settings=dict(settings),
            sources=source_input.source_contents(),
        )
