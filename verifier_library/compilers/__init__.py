"""Compiler catalog, pool and language adapters."""

from .base import CompilerAdapter
from .base import StandardJsonCompiler
from .base import run_compiler
from .binaries import CompilerBinary
from .binaries import CompilerBuild
from .catalog import VersionCatalog
from .pool import CompilerPool
from .solidity import SolidityCompiler
from .vyper import VyperCompiler

ADAPTERS: dict[str, type[StandardJsonCompiler]] = {
    "vyper": VyperCompiler,
    "solidity": SolidityCompiler,
}

__all__ = [
    "ADAPTERS",
    "CompilerAdapter",
    "CompilerBinary",
    "CompilerBuild",
    "CompilerPool",
    "SolidityCompiler",
    "StandardJsonCompiler",
    "VersionCatalog",
    "VyperCompiler",
    "run_compiler",
]
