"""Response models for the verifierd API.

Pydantic models for API responses.
"""

from enum import Enum
from typing import Any

from pydantic import Field

from verifier_library.models import MatchResult
from verifier_library.models import MatchType
from verifier_library.models.base import CamelCaseModel


class VerifyStatus(str, Enum):
    """Outcome of a verification request that reached the engine."""

    OK = "OK"
    FAILED = "FAILED"


class ContractInfo(CamelCaseModel):
    """Verified contract data attached to a successful response.

    Attributes:
        name: Contract name
        file_path: Source file declaring the contract
        abi: Contract ABI
        sources: Source path to content
        settings: Compiler settings used
        compiler_version: Compiler version used
    """

    name: str = Field(..., description="Contract name")
    file_path: str = Field(..., description="Source file declaring the contract")
    abi: list[dict[str, Any]] | None = Field(default=None, description="Contract ABI")
    sources: dict[str, str] = Field(default_factory=dict, description="Source path to content")
    settings: dict[str, Any] = Field(default_factory=dict, description="Compiler settings used")
    compiler_version: str = Field(..., description="Compiler version used")


class VerifyResponse(CamelCaseModel):
    """Response for a verification request.

    A FAILED status describes the submitted code, not the service: system
    failures are reported as HTTP errors instead.
    """

    status: VerifyStatus = Field(..., description="Verification outcome")
    message: str | None = Field(default=None, description="Failure description")
    match_type: MatchType | None = Field(default=None, description="Full or partial match")
    compiler_version_used: str | None = Field(default=None, description="Compiler version that produced the match")
    contracts: list[ContractInfo] = Field(default_factory=list, description="Verified contracts")

    @classmethod
    def ok(cls, result: MatchResult) -> "VerifyResponse":
        version = str(result.compiler_version)
        return cls(
            status=VerifyStatus.OK,
            match_type=result.match_type,
            compiler_version_used=version,
            contracts=[
                ContractInfo(
                    name=result.contract_name,
                    file_path=result.file_path,
                    abi=result.artifact.abi,
                    sources=result.sources,
                    settings=result.settings,
                    compiler_version=version,
                )
            ],
        )

    @classmethod
    def failed(cls, message: str) -> "VerifyResponse":
        return cls(status=VerifyStatus.FAILED, message=message)


class ListCompilerVersionsResponse(CamelCaseModel):
    """Compiler versions available for a language, newest first."""

    compiler_versions: list[str] = Field(default_factory=list, description="Version strings, newest first")


class StatusResponse(CamelCaseModel):
    """Daemon status.

    Attributes:
        status: Daemon status
        version: Daemon version
        uptime_seconds: Seconds since startup
        languages: Served language to number of known compiler versions
    """

    status: str = Field(..., description="Daemon status")
    version: str = Field(..., description="Daemon version")
    uptime_seconds: float = Field(..., description="Seconds since startup")
    languages: dict[str, int] = Field(default_factory=dict, description="Known compiler versions per language")
