"""API models for the verifierd daemon.

Request models live in verifier_library.models; this module adds the
response models.
"""

from .responses import ContractInfo
from .responses import ListCompilerVersionsResponse
from .responses import StatusResponse
from .responses import VerifyResponse
from .responses import VerifyStatus

__all__ = [
    "ContractInfo",
    "ListCompilerVersionsResponse",
    "StatusResponse",
    "VerifyResponse",
    "VerifyStatus",
]
