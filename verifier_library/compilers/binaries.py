"""Compiler build descriptors."""

from dataclasses import dataclass
from pathlib import Path

from ..models.versions import CompilerVersion


@dataclass(frozen=True)
class CompilerBuild:
    """A downloadable compiler build listed in a remote manifest."""

    version: CompilerVersion
    url: str
    sha256: str | None = None


@dataclass(frozen=True)
class CompilerBinary:
    """A compiler binary available on local disk.

    Assumed byte-identical for the process lifetime once resolved.
    """

    path: Path
    version: CompilerVersion
    sha256: str | None = None
