"""Compilation output and verification results."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Any

from ..errors import Diagnostic
from .versions import CompilerVersion


class MatchType(str, Enum):
    """How closely compiled bytecode matches the submitted bytecode.

    - FULL: byte-identical
    - PARTIAL: identical once trailing build metadata is stripped from both
    """

    FULL = "FULL"
    PARTIAL = "PARTIAL"


@dataclass(frozen=True)
class ContractArtifact:
    """One compiled contract."""

    name: str
    file_path: str
    creation_bytecode: str
    runtime_bytecode: str
    abi: list[dict[str, Any]] | None = None
    warnings: tuple[Diagnostic, ...] = ()


@dataclass(frozen=True)
class CompilationArtifact:
    """Everything one compiler invocation produced.

    Contracts keep the compiler's declaration order (file order, then
    contract order within the file).

    Attributes:
        contracts: Compiled contracts in declaration order
        compiler_version: Version string the compiler reported, if any
        settings: Compiler settings the invocation used, as reported to callers
        sources: Source path to content for every compiled file
    """

    contracts: tuple[ContractArtifact, ...] = ()
    compiler_version: str | None = None
    settings: dict[str, Any] = field(default_factory=dict)
    sources: dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.contracts)

    def by_name(self) -> dict[str, ContractArtifact]:
        """Map contract name to artifact (first declaration wins)."""
        contracts: dict[str, ContractArtifact] = {}
        for contract in self.contracts:
            contracts.setdefault(contract.name, contract)
        return contracts


@dataclass(frozen=True)
class MatchResult:
    """A successful verification."""

    contract_name: str
    file_path: str
    match_type: MatchType
    compiler_version: CompilerVersion
    artifact: ContractArtifact
    settings: dict[str, Any] = field(default_factory=dict)
    sources: dict[str, str] = field(default_factory=dict)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return self.artifact.warnings
