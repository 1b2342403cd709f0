"""Error taxonomy for contract verification.

Two families:
- VerificationError and its subclasses describe the outcome of a verification
  attempt. Some are ordinary "Failed" results (the submitted code does not
  match), others are failures of the system itself.
- BadRequestError marks a structurally malformed call that is rejected
  outright, before any verification starts.
"""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Diagnostic:
    """One compiler message, located in the sources where possible."""

    severity: str
    message: str
    file: str | None = None
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        location = ""
        if self.file:
            location = self.file
            if self.line is not None:
                location += f":{self.line}"
                if self.column is not None:
                    location += f":{self.column}"
            location += ": "
        return f"{location}{self.severity}: {self.message}"


class VerificationError(Exception):
    """Base class for verification outcomes other than a match.

    Attributes:
        is_verification_failure: True when the error is a normal "Failed"
            result describing the submitted code, False when it is invalid
            input or a failure of the system.
    """

    is_verification_failure: ClassVar[bool] = False
    kind: ClassVar[str] = "verification_error"


class InitializationError(VerificationError):
    """Raised when the compiler catalog or pool fails to start."""

    kind = "initialization"


class VersionNotFoundError(VerificationError):
    """Raised when a requested compiler version is absent from the catalog."""

    kind = "version_not_found"

    def __init__(self, version: str) -> None:
        super().__init__(f"Compiler version not found: {version}")
        self.version = version


class CompilationError(VerificationError):
    """Raised when the compiler ran and reported errors in the sources."""

    is_verification_failure = True
    kind = "compilation"

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        errors = [d for d in diagnostics if d.severity == "error"] or diagnostics
        super().__init__("\n".join(str(d) for d in errors) or "Compilation failed")


class CompilerVersionMismatchError(VerificationError):
    """Raised when the compiled artifact reports a different compiler version than requested."""

    is_verification_failure = True
    kind = "compiler_version_mismatch"

    def __init__(self, expected: str, found: str) -> None:
        super().__init__(f"Compiler version mismatch: expected {expected}, compiler reported {found}")
        self.expected = expected
        self.found = found


class NoMatchingContractsError(VerificationError):
    """Raised when compilation succeeded but no contract matches the submitted bytecode."""

    is_verification_failure = True
    kind = "no_matching_contracts"

    def __init__(self, message: str = "No contract could be verified with provided data") -> None:
        super().__init__(message)


class InvalidStandardJsonError(VerificationError):
    """Raised when a standard-json input is not valid JSON or violates its schema.

    Reported as a normal "Failed" result, not as a rejected request.
    """

    is_verification_failure = True
    kind = "invalid_standard_json"


class InternalError(VerificationError):
    """Raised on subprocess crashes, I/O failures and adapter faults."""

    kind = "internal"


class BadRequestError(ValueError):
    """Raised when a verification call is structurally malformed."""
