"""Smart-contract verification engine.

This is the business logic layer that sits between verifierd (transport)
and the native compiler binaries.

Public Interface:
    Modules:
    - config: Configuration loading
    - storage: Compiler cache locations
    - models: Versions, inputs, artifacts and requests
    - compilers: Version catalog, compiler pool and language adapters
    - verification: Bytecode matching, pipeline and client facade
    - errors: Verification error taxonomy
"""

# Re-export key types for convenience
from .errors import BadRequestError
from .errors import VerificationError
from .models import MatchResult
from .models import MatchType
from .verification import VerifierClient
from .verification import verify_multi_part
from .verification import verify_standard_json

__all__ = [
    "BadRequestError",
    "MatchResult",
    "MatchType",
    "VerificationError",
    "VerifierClient",
    "verify_multi_part",
    "verify_standard_json",
]
