"""Verification request models.

These are the semantic request shapes accepted by the verification
pipeline. Missing required fields are rejected by validation before any
verification starts; content-level problems are reported by the pipeline.
"""

from pydantic import Field

from .base import CamelCaseModel
from .bytecode import BytecodeType


class VerificationMetadata(CamelCaseModel):
    """Informational request metadata, never used in bytecode matching."""

    chain_id: str | None = Field(default=None, description="Chain the contract is deployed on")
    contract_address: str | None = Field(default=None, description="Deployed contract address")


class MultiPartVerifyRequest(CamelCaseModel):
    """Verify bytecode against discrete source files plus settings."""

    bytecode: str = Field(..., description="Submitted bytecode (hex, optional 0x prefix)")
    bytecode_type: BytecodeType = Field(..., description="Creation input or deployed bytecode")
    compiler_version: str | None = Field(
        default=None,
        description="Exact compiler version; when absent, the sources' version pragma selects candidates",
    )
    evm_version: str | None = Field(default=None, description="Target EVM version (compiler default if unset)")
    optimizations: bool | None = Field(default=None, description="Enable the optimizer")
    optimization_runs: int | None = Field(default=None, ge=0, description="Optimizer runs (Solidity only)")
    source_files: dict[str, str] = Field(..., description="Map of source path to content")
    interfaces: dict[str, str] = Field(default_factory=dict, description="Map of interface path to content")
    contract_name: str | None = Field(default=None, description="Preferred contract when several match")
    metadata: VerificationMetadata | None = Field(default=None, description="Chain and address information")


class StandardJsonVerifyRequest(CamelCaseModel):
    """Verify bytecode against a compiler-native standard-json document."""

    bytecode: str = Field(..., description="Submitted bytecode (hex, optional 0x prefix)")
    bytecode_type: BytecodeType = Field(..., description="Creation input or deployed bytecode")
    compiler_version: str | None = Field(
        default=None,
        description="Exact compiler version; when absent, the sources' version pragma selects candidates",
    )
    input: str = Field(..., description="Standard-json input document as text")
    contract_name: str | None = Field(default=None, description="Preferred contract when several match")
    metadata: VerificationMetadata | None = Field(default=None, description="Chain and address information")
