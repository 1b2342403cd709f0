"""Verifier router for the verifierd API.

Thin HTTP wrapper around verifier_library.verification: assigns a request
id, logs and counts each outcome, and maps error kinds to HTTP outcomes. All verification logic is in the library.

Outcome mapping:
- Match -> 200 status=OK
- Verification failures (compilation, mismatch, no match, invalid
  standard-json) -> 200 status=FAILED
- BadRequestError, VersionNotFoundError -> 400
- InitializationError, InternalError -> 500
"""

import logging
import uuid
from collections.abc import Awaitable
from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException

from verifier_library.errors import BadRequestError
from verifier_library.errors import VerificationError
from verifier_library.errors import VersionNotFoundError
from verifier_library.models import MatchResult
from verifier_library.models import MultiPartVerifyRequest
from verifier_library.models import StandardJsonVerifyRequest
from verifier_library.models import VerificationMetadata
from verifier_library.verification import VerifierClient
from verifier_library.verification import verify_multi_part
from verifier_library.verification import verify_standard_json

from ..dependencies import get_client
from ..metrics import count_verify_contract
from ..models import ListCompilerVersionsResponse
from ..models import VerifyResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v2/verifier", tags=["verifier"])


@router.post("/{language}/sources/verify-multi-part", response_model=VerifyResponse, response_model_exclude_none=True)
async def verify_multi_part_endpoint(
    request: MultiPartVerifyRequest,
    client: Annotated[VerifierClient, Depends(get_client)],
) -> VerifyResponse:
    """Verify bytecode against discrete source files."""
    request_id = uuid.uuid4().hex
    metadata = request.metadata or VerificationMetadata()
    logger.info(
        f"[{request_id}] {client.language} multi-part verification request received: "
        f"chain_id={metadata.chain_id}, contract_address={metadata.contract_address}"
    )
    logger.debug(
        f"[{request_id}] Request details: bytecode_type={request.bytecode_type.value}, "
        f"compiler_version={request.compiler_version}, evm_version={request.evm_version}, "
        f"source_files={list(request.source_files)}, interfaces={list(request.interfaces)}"
    )
    return await _process(request_id, client, "multi-part", metadata, verify_multi_part(client, request))


@router.post(
    "/{language}/sources/verify-standard-json", response_model=VerifyResponse, response_model_exclude_none=True
)
async def verify_standard_json_endpoint(
    request: StandardJsonVerifyRequest,
    client: Annotated[VerifierClient, Depends(get_client)],
) -> VerifyResponse:
    """Verify bytecode against a standard-json input document."""
    request_id = uuid.uuid4().hex
    metadata = request.metadata or VerificationMetadata()
    logger.info(
        f"[{request_id}] {client.language} standard-json verification request received: "
        f"chain_id={metadata.chain_id}, contract_address={metadata.contract_address}"
    )
    logger.debug(
        f"[{request_id}] Request details: bytecode_type={request.bytecode_type.value}, "
        f"compiler_version={request.compiler_version}, input_length={len(request.input)}"
    )
    return await _process(request_id, client, "standard-json", metadata, verify_standard_json(client, request))


@router.get("/{language}/versions", response_model=ListCompilerVersionsResponse)
async def list_compiler_versions(
    client: Annotated[VerifierClient, Depends(get_client)],
) -> ListCompilerVersionsResponse:
    """List the language's compiler versions, newest first."""
    return ListCompilerVersionsResponse(compiler_versions=client.compilers.all_versions_sorted_str())


async def _process(
    request_id: str,
    client: VerifierClient,
    input_shape: str,
    metadata: VerificationMetadata,
    verification: Awaitable[MatchResult],
) -> VerifyResponse:
    def finish(status: str, outcome: str) -> None:
        count_verify_contract(metadata.chain_id, client.language, status, input_shape)
        logger.info(
            f"[{request_id}] verification outcome: chain_id={metadata.chain_id or ''}, "
            f"language={client.language}, input={input_shape}, status={status}, outcome={outcome}"
        )

    try:
        result = await verification
    except (BadRequestError, VersionNotFoundError) as e:
        logger.info(f"[{request_id}] Bad request: {e}")
        finish("BAD_REQUEST", type(e).__name__)
        raise HTTPException(status_code=400, detail=str(e)) from e
    except VerificationError as e:
        if not e.is_verification_failure:
            logger.error(f"[{request_id}] {e.kind} error: {e!r}")
            finish("ERROR", e.kind)
            raise HTTPException(status_code=500, detail=str(e)) from e
        logger.info(f"[{request_id}] Request processing failed: {e}")
        response = VerifyResponse.failed(str(e))
        finish(response.status.value, e.kind)
        return response

    logger.info(f"[{request_id}] Request processed successfully: match_type={result.match_type.value}")
    response = VerifyResponse.ok(result)
    finish(response.status.value, "ok")
    return response
