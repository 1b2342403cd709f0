"""Models for the verifier library."""

from .artifacts import CompilationArtifact
from .artifacts import ContractArtifact
from .artifacts import MatchResult
from .artifacts import MatchType
from .bytecode import BytecodeType
from .bytecode import SubmittedBytecode
from .bytecode import decode_hex
from .requests import MultiPartVerifyRequest
from .requests import StandardJsonVerifyRequest
from .requests import VerificationMetadata
from .sources import MultiPartInput
from .sources import OptimizationSettings
from .sources import SourceInput
from .sources import StandardJsonInput
from .versions import CompilerVersion
from .versions import VersionConstraint

__all__ = [
    "BytecodeType",
    "CompilationArtifact",
    "CompilerVersion",
    "ContractArtifact",
    "MatchResult",
    "MatchType",
    "MultiPartInput",
    "MultiPartVerifyRequest",
    "OptimizationSettings",
    "SourceInput",
    "StandardJsonInput",
    "StandardJsonVerifyRequest",
    "SubmittedBytecode",
    "VerificationMetadata",
    "VersionConstraint",
    "decode_hex",
]
