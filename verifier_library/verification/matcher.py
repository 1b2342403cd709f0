"""Bytecode matching tolerant of compiler-embedded build metadata.

Compilers append a metadata trailer to the code they emit:

    <CBOR-encoded build metadata><2-byte big-endian length>

Two length conventions exist. Solidity and Vyper 0.3.4-0.3.9 count only the
CBOR item; Vyper 0.3.10+ also counts the two length bytes. Both readings are
tried, and one is accepted only if the bytes before the length field decode
as exactly one CBOR map or array. Trailer contents are never compared.

Classification:
- FULL: normalized bytes identical
- PARTIAL: identical once each side's trailer is stripped
- no match otherwise
"""

import logging

import cbor2

from ..models.artifacts import CompilationArtifact
from ..models.artifacts import ContractArtifact
from ..models.artifacts import MatchType
from ..models.bytecode import BytecodeType
from ..models.bytecode import SubmittedBytecode
from ..models.bytecode import decode_hex

logger = logging.getLogger(__name__)

LENGTH_FIELD_SIZE = 2
# Length field plus the smallest CBOR item
MIN_TRAILER_SIZE = LENGTH_FIELD_SIZE + 1

_CBOR_ARRAY = 4
_CBOR_MAP = 5


def _decodes(data: bytes) -> bool:
    try:
        cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError, EOFError):
        return False
    return True


def _is_cbor_metadata(item: bytes) -> bool:
    """True if item is exactly one CBOR map or array, with no bytes left over."""
    if not item or item[0] >> 5 not in (_CBOR_ARRAY, _CBOR_MAP):
        return False
    # An item that needs every byte cannot be decoded from a shorter prefix
    return _decodes(item) and not _decodes(item[:-1])


def metadata_trailer_length(code: bytes) -> int:
    """Length of the metadata trailer at the end of code, 0 if there is none.

    Example:
        >>> metadata_trailer_length(bytes.fromhex("6001a165767970657283000307000b"))
        13
        >>> metadata_trailer_length(bytes.fromhex("600160020a"))
        0
    """
    if len(code) < MIN_TRAILER_SIZE:
        return 0

    declared = int.from_bytes(code[-LENGTH_FIELD_SIZE:], "big")
    for trailer_length in (declared + LENGTH_FIELD_SIZE, declared):
        if trailer_length < MIN_TRAILER_SIZE or trailer_length > len(code):
            continue
        if _is_cbor_metadata(code[-trailer_length:-LENGTH_FIELD_SIZE]):
            return trailer_length
    return 0


def strip_metadata_trailer(code: bytes) -> bytes:
    """Code without its metadata trailer; unchanged when there is none."""
    trailer_length = metadata_trailer_length(code)
    if trailer_length == 0:
        return code
    return code[:-trailer_length]


def compare_bytecode(compiled: bytes, submitted: bytes) -> MatchType | None:
    """Classify two normalized bytecodes.

    A full match is never also reported as partial.
    """
    if compiled == submitted:
        return MatchType.FULL

    if len(submitted) < MIN_TRAILER_SIZE:
        return None

    compiled_body = strip_metadata_trailer(compiled)
    submitted_body = strip_metadata_trailer(submitted)
    if len(compiled_body) == len(compiled) and len(submitted_body) == len(submitted):
        return None
    if compiled_body and compiled_body == submitted_body:
        return MatchType.PARTIAL
    return None


class BytecodeMatcher:
    """Matches compiled contracts against one submitted bytecode."""

    def __init__(self, submitted: SubmittedBytecode) -> None:
        self.submitted = submitted

    def match(self, contract: ContractArtifact) -> MatchType | None:
        """Classify one contract against the submitted bytecode.

        Compares creation bytecode for creation input, runtime bytecode for
        deployed code. Compiled code that is not valid hex (e.g. unlinked
        library placeholders) never matches.
        """
        if self.submitted.bytecode_type == BytecodeType.CREATION:
            compiled_hex = contract.creation_bytecode
        else:
            compiled_hex = contract.runtime_bytecode

        try:
            compiled = decode_hex(compiled_hex)
        except ValueError:
            logger.debug(f"Skipping {contract.file_path}:{contract.name}: compiled bytecode is not valid hex")
            return None
        if not compiled:
            return None

        return compare_bytecode(compiled, self.submitted.code)

    def best_match(
        self,
        artifact: CompilationArtifact,
        name_hint: str | None = None,
    ) -> tuple[ContractArtifact, MatchType] | None:
        """Select the single best matching contract of an artifact.

        Ranking: full before partial, then the contract named by name_hint,
        then declaration order.
        """
        best: tuple[tuple[int, int, int], ContractArtifact, MatchType] | None = None
        for position, contract in enumerate(artifact.contracts):
            match_type = self.match(contract)
            if match_type is None:
                continue
            rank = (
                0 if match_type == MatchType.FULL else 1,
                0 if name_hint is not None and contract.name == name_hint else 1,
                position,
            )
            if best is None or rank < best[0]:
                best = (rank, contract, match_type)

        if best is None:
            return None
        return best[1], best[2]
