"""Compiler adapter contract and the shared standard-json driver.

Contract:
- Inputs: A resolved compiler binary and a SourceInput
- Outputs: CompilationArtifact
- Side Effects: Runs exactly one compiler subprocess per compile
- Errors: CompilationError for source errors, InternalError for crashes,
  timeouts and unreadable compiler output
"""

import asyncio
import contextlib
import copy
import json
import logging
import re
from abc import ABC
from abc import abstractmethod
from typing import Any
from typing import ClassVar
from typing import Protocol

from ..errors import BadRequestError
from ..errors import CompilationError
from ..errors import Diagnostic
from ..errors import InternalError
from ..models.artifacts import CompilationArtifact
from ..models.artifacts import ContractArtifact
from ..models.sources import MultiPartInput
from ..models.sources import SourceInput
from ..models.sources import StandardJsonInput
from ..models.versions import VersionConstraint
from .binaries import CompilerBinary

logger = logging.getLogger(__name__)


class CompilerAdapter(Protocol):
    """Per-language compiler invocation."""

    language: str
    binary_name: str

    def find_version_constraints(self, sources: dict[str, str]) -> list[VersionConstraint]:
        """Version constraints declared by the sources' pragmas."""
        ...

    async def compile(
        self,
        binary: CompilerBinary,
        source_input: SourceInput,
        timeout: float | None = None,
    ) -> CompilationArtifact:
        """Compile the input with the given binary."""
        ...


async def run_compiler(args: list[str], stdin: bytes, timeout: float | None = None) -> tuple[bytes, bytes, int]:
    """Run one compiler subprocess to completion.

    The subprocess is killed and reaped if the caller is cancelled or the
    timeout expires, so no process outlives the call.

    Args:
        args: Command line, binary path first
        stdin: Bytes written to the compiler's stdin
        timeout: Seconds before the subprocess is killed (None waits forever)

    Returns:
        Tuple of (stdout, stderr, returncode)

    Raises:
        InternalError: If the binary cannot be started or times out
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise InternalError(f"Failed to start compiler {args[0]}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(stdin), timeout)
    except asyncio.TimeoutError as e:
        raise InternalError(f"Compiler {args[0]} timed out after {timeout}s") from e
    finally:
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            logger.warning(f"Killed compiler subprocess {proc.pid}")

    return stdout, stderr, proc.returncode


class StandardJsonCompiler(ABC):
    """Base for compilers driven through `--standard-json` over stdin/stdout.

    Subclasses describe the language: its binary name, pragma syntax, the
    output selection needed for matching and how multi-part input maps onto
    a standard-json document.
    """

    language: ClassVar[str]
    binary_name: ClassVar[str]
    pragma_pattern: ClassVar[re.Pattern[str]]
    output_selection: ClassVar[dict[str, Any]]

    def find_version_constraints(self, sources: dict[str, str]) -> list[VersionConstraint]:
        """Collect version pragmas from every source file, in file order.

        Raises:
            BadRequestError: If a pragma cannot be parsed
        """
        constraints = []
        for path, content in sources.items():
            for match in self.pragma_pattern.finditer(content):
                try:
                    constraints.append(VersionConstraint.parse(match.group(1)))
                except ValueError as e:
                    raise BadRequestError(f"{path}: unsupported version pragma: {e}") from e
        return constraints

    @abstractmethod
    def multi_part_settings(self, source_input: MultiPartInput) -> dict[str, Any]:
        """Compiler settings generated from multi-part input."""

    @abstractmethod
    def multi_part_document(self, source_input: MultiPartInput) -> dict[str, Any]:
        """Standard-json document (without settings) built from multi-part input."""

    def reported_settings(self, source_input: SourceInput) -> dict[str, Any]:
        """Settings as reported back to callers (without the forced output selection)."""
        if isinstance(source_input, StandardJsonInput):
            return copy.deepcopy(source_input.settings)
        return self.multi_part_settings(source_input)

    def build_input(self, source_input: SourceInput) -> dict[str, Any]:
        """Build the standard-json document sent to the compiler."""
        if isinstance(source_input, StandardJsonInput):
            document = copy.deepcopy(source_input.document)
        else:
            document = self.multi_part_document(source_input)
        settings = document.setdefault("settings", {})
        settings["outputSelection"] = copy.deepcopy(self.output_selection)
        return document

    def parse_diagnostic(self, entry: dict[str, Any]) -> Diagnostic:
        location = entry.get("sourceLocation") or {}
        return Diagnostic(
            severity=str(entry.get("severity", "error")).lower(),
            message=str(entry.get("message") or entry.get("formattedMessage") or ""),
            file=location.get("file"),
        )

    def reported_version(self, output: dict[str, Any]) -> str | None:
        return None

    async def compile(
        self,
        binary: CompilerBinary,
        source_input: SourceInput,
        timeout: float | None = None,
    ) -> CompilationArtifact:
        """Compile the input in one subprocess.

        Raises:
            CompilationError: Compiler reported errors in the sources
            InternalError: Compiler crashed, timed out or produced unreadable output
        """
        document = self.build_input(source_input)
        logger.debug(f"Running {self.language} compiler {binary.version} on {len(document.get('sources', {}))} sources")

        stdout, stderr, returncode = await run_compiler(
            [str(binary.path), "--standard-json"],
            json.dumps(document).encode("utf-8"),
            timeout,
        )
        output = self._parse_output(stdout, stderr, returncode)
        return self._artifact(output, source_input)

    def _parse_output(self, stdout: bytes, stderr: bytes, returncode: int) -> dict[str, Any]:
        if returncode < 0:
            raise InternalError(f"{self.language} compiler terminated by signal {-returncode}")

        output: dict[str, Any] | None = None
        if stdout.strip():
            try:
                parsed = json.loads(stdout)
                if isinstance(parsed, dict):
                    output = parsed
            except json.JSONDecodeError:
                output = None

        stderr_text = stderr.decode("utf-8", errors="replace").strip()
        diagnostics = [self.parse_diagnostic(entry) for entry in (output or {}).get("errors") or []]
        if any(d.severity == "error" for d in diagnostics):
            raise CompilationError(diagnostics)

        if returncode != 0:
            if stderr_text:
                raise CompilationError([Diagnostic(severity="error", message=stderr_text)])
            raise InternalError(f"{self.language} compiler exited with code {returncode} and no output")

        if output is None:
            raise InternalError(f"{self.language} compiler produced unreadable output: {stderr_text[:500]}")

        return output

    def _artifact(self, output: dict[str, Any], source_input: SourceInput) -> CompilationArtifact:
        diagnostics = [self.parse_diagnostic(entry) for entry in output.get("errors") or []]

        contracts = []
        for file_path, file_contracts in (output.get("contracts") or {}).items():
            warnings = tuple(d for d in diagnostics if d.file in (None, file_path))
            for name, data in (file_contracts or {}).items():
                evm = data.get("evm") or {}
                contracts.append(
                    ContractArtifact(
                        name=name,
                        file_path=file_path,
                        creation_bytecode=(evm.get("bytecode") or {}).get("object") or "",
                        runtime_bytecode=(evm.get("deployedBytecode") or {}).get("object") or "",
                        abi=data.get("abi"),
                        warnings=warnings,
                    )
                )

        return CompilationArtifact(
            contracts=tuple(contracts),
            compiler_version=self.reported_version(output),
            settings=self.reported_settings(source_input),
            sources=source_input.source_contents(),
        )
