"""Verification pipeline.

Orchestrates version selection, compilation attempts and bytecode matching
for one request. Two entry points, one per input shape:

- verify_multi_part: discrete source files plus settings
- verify_standard_json: one compiler-native JSON document (as text)

Steps:
1. Validate the request. Malformed calls raise BadRequestError; an invalid
   standard-json document raises InvalidStandardJsonError, which is a normal
   "Failed" outcome.
2. Select candidate versions: the exact requested version (VersionNotFoundError
   before any compilation if absent), or every cataloged version satisfying
   the sources' version pragmas, newest first.
3. Compile each candidate. A failing candidate is recorded and the next one
   tried; nothing is retried.
4. Match every artifact against the submitted bytecode. A full match returns
   at once, the first partial match is returned if no full match follows.
5. No match anywhere: NoMatchingContractsError, or the newest candidate's
   compile failure when nothing compiled.
6. On a verification failure, consult the client's ExtensionMiddleware (if
   any) and retry once with the settings it returns.
"""

import json
import logging

from ..errors import BadRequestError
from ..errors import CompilationError
from ..errors import CompilerVersionMismatchError
from ..errors import InvalidStandardJsonError
from ..errors import NoMatchingContractsError
from ..errors import VerificationError
from ..errors import VersionNotFoundError
from ..models.artifacts import CompilationArtifact
from ..models.artifacts import MatchResult
from ..models.artifacts import MatchType
from ..models.bytecode import BytecodeType
from ..models.bytecode import SubmittedBytecode
from ..models.bytecode import decode_hex
from ..models.requests import MultiPartVerifyRequest
from ..models.requests import StandardJsonVerifyRequest
from ..models.requests import VerificationMetadata
from ..models.sources import MultiPartInput
from ..models.sources import OptimizationSettings
from ..models.sources import SourceInput
from ..models.sources import StandardJsonInput
from ..models.versions import CompilerVersion
from .client import VerifierClient
from .matcher import BytecodeMatcher

logger = logging.getLogger(__name__)

# Failures that describe the submitted code rather than the system
_CANDIDATE_FAILURES = (CompilationError, CompilerVersionMismatchError)
_LOCAL_FAILURES = (CompilationError, CompilerVersionMismatchError, NoMatchingContractsError)


async def verify_multi_part(client: VerifierClient, request: MultiPartVerifyRequest) -> MatchResult:
    """Verify bytecode against discrete source files.

    Args:
        client: Client for the request's language
        request: Multi-part request

    Returns:
        The selected match

    Raises:
        BadRequestError: Malformed request
        VersionNotFoundError: Requested version not cataloged
        CompilationError, CompilerVersionMismatchError, NoMatchingContractsError:
            The sources do not verify the bytecode
        InternalError: System failure
    """
    submitted = _submitted_bytecode(request.bytecode, request.bytecode_type)
    if not request.source_files:
        raise BadRequestError("No source files provided")

    source_input = MultiPartInput(
        sources=dict(request.source_files),
        interfaces=dict(request.interfaces),
        evm_version=request.evm_version,
        optimization=OptimizationSettings(enabled=request.optimizations, runs=request.optimization_runs),
    )
    return await _verify(
        client,
        submitted,
        source_input,
        request.compiler_version,
        request.contract_name,
        request.metadata,
    )


async def verify_standard_json(client: VerifierClient, request: StandardJsonVerifyRequest) -> MatchResult:
    """Verify bytecode against a standard-json input document.

    Raises:
        InvalidStandardJsonError: The input is not valid JSON or violates the schema
        (plus everything verify_multi_part raises)
    """
    submitted = _submitted_bytecode(request.bytecode, request.bytecode_type)
    source_input = parse_standard_json_input(request.input)
    return await _verify(
        client,
        submitted,
        source_input,
        request.compiler_version,
        request.contract_name,
        request.metadata,
    )


def parse_standard_json_input(text: str) -> StandardJsonInput:
    """Parse and validate a standard-json input document.

    Raises:
        InvalidStandardJsonError: If the text is not JSON or not a valid document
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidStandardJsonError(f"Invalid standard-json input: {e}") from e

    if not isinstance(document, dict):
        raise InvalidStandardJsonError("Invalid standard-json input: expected a JSON object")
    if "language" in document and not isinstance(document["language"], str):
        raise InvalidStandardJsonError("Invalid standard-json input: 'language' must be a string")

    sources = document.get("sources")
    if not isinstance(sources, dict) or not sources:
        raise InvalidStandardJsonError("Invalid standard-json input: 'sources' must be a non-empty object")
    for path, entry in sources.items():
        if not isinstance(entry, dict) or not isinstance(entry.get("content"), str):
            raise InvalidStandardJsonError(f"Invalid standard-json input: 'sources.{path}.content' must be a string")

    for key in ("settings", "interfaces"):
        if key in document and not isinstance(document[key], dict):
            raise InvalidStandardJsonError(f"Invalid standard-json input: '{key}' must be an object")

    return StandardJsonInput(document=document)


def _submitted_bytecode(value: str, bytecode_type: BytecodeType) -> SubmittedBytecode:
    try:
        return SubmittedBytecode.from_hex(value, bytecode_type)
    except ValueError as e:
        raise BadRequestError(f"Invalid bytecode: {e}") from e


def candidate_versions(
    client: VerifierClient,
    compiler_version: str | None,
    source_input: SourceInput,
) -> list[CompilerVersion]:
    """Compiler versions to try, in order.

    Raises:
        BadRequestError: No version requested and no version pragma declared
        VersionNotFoundError: Nothing in the catalog satisfies the request
    """
    pool = client.compilers
    if compiler_version:
        return [pool.catalog.lookup(compiler_version)]

    constraints = pool.adapter.find_version_constraints(source_input.source_contents())
    if not constraints:
        raise BadRequestError("Compiler version is required when the sources declare no version pragma")

    candidates = [v for v in pool.list_versions_sorted() if all(c.matches(v) for c in constraints)]
    if not candidates:
        raise VersionNotFoundError(" ".join(str(c) for c in constraints))
    return candidates


async def _verify(
    client: VerifierClient,
    submitted: SubmittedBytecode,
    source_input: SourceInput,
    compiler_version: str | None,
    name_hint: str | None,
    metadata: VerificationMetadata | None,
) -> MatchResult:
    candidates = candidate_versions(client, compiler_version, source_input)
    logger.debug(f"Trying {len(candidates)} {client.language} candidate versions: {[str(v) for v in candidates]}")

    try:
        return await _verify_candidates(client, candidates, submitted, source_input, name_hint)
    except _LOCAL_FAILURES as err:
        result = await _verify_with_fallback(client, candidates, submitted, source_input, name_hint, metadata, err)
        if result is None:
            raise
        return result


async def _verify_candidates(
    client: VerifierClient,
    candidates: list[CompilerVersion],
    submitted: SubmittedBytecode,
    source_input: SourceInput,
    name_hint: str | None,
) -> MatchResult:
    matcher = BytecodeMatcher(submitted)
    failures: list[VerificationError] = []
    compiled_any = False
    partial: MatchResult | None = None

    for version in candidates:
        try:
            artifact = await client.compilers.compile(version, source_input)
            _check_reported_version(version, artifact)
        except _CANDIDATE_FAILURES as e:
            logger.info(f"Candidate {client.language} {version} failed: {e}")
            failures.append(e)
            continue

        compiled_any = True
        best = matcher.best_match(artifact, name_hint)
        if best is None:
            logger.debug(f"No contract compiled with {version} matches ({len(artifact)} contracts)")
            continue

        contract, match_type = best
        result = MatchResult(
            contract_name=contract.name,
            file_path=contract.file_path,
            match_type=match_type,
            compiler_version=version,
            artifact=contract,
            settings=artifact.settings,
            sources=artifact.sources,
        )
        if match_type == MatchType.FULL:
            return result
        if partial is None:
            partial = result

    if partial is not None:
        return partial
    if compiled_any:
        raise NoMatchingContractsError()
    raise failures[0]


def _check_reported_version(version: CompilerVersion, artifact: CompilationArtifact) -> None:
    if not artifact.compiler_version:
        return
    try:
        reported = CompilerVersion.parse(artifact.compiler_version)
    except ValueError:
        logger.debug(f"Ignoring unparseable reported compiler version {artifact.compiler_version!r}")
        return

    same_commit = reported.commit is None or version.commit is None or reported.commit == version.commit
    if not reported.same_release(version) or not same_commit:
        raise CompilerVersionMismatchError(str(version), artifact.compiler_version)


async def _verify_with_fallback(
    client: VerifierClient,
    candidates: list[CompilerVersion],
    submitted: SubmittedBytecode,
    source_input: SourceInput,
    name_hint: str | None,
    metadata: VerificationMetadata | None,
    local_error: VerificationError,
) -> MatchResult | None:
    if client.middleware is None or metadata is None:
        return None
    if not metadata.chain_id or not metadata.contract_address:
        return None

    logger.info(
        f"Local verification failed ({local_error.kind}); consulting fallback for "
        f"{metadata.chain_id}:{metadata.contract_address}"
    )
    lookup = await client.middleware.lookup(metadata.chain_id, metadata.contract_address)
    if lookup is None:
        return None

    if lookup.expected_bytecode is not None:
        try:
            expected = decode_hex(lookup.expected_bytecode)
        except ValueError:
            logger.warning("Fallback returned unreadable expected bytecode, ignoring it")
            return None
        if expected != submitted.code:
            logger.info("Fallback expected bytecode differs from the submitted bytecode, ignoring it")
            return None

    retry_input = source_input.with_settings(lookup.settings)
    try:
        return await _verify_candidates(client, candidates, submitted, retry_input, name_hint)
    except _LOCAL_FAILURES as e:
        logger.info(f"Retry with fallback settings failed: {e}")
        return None
