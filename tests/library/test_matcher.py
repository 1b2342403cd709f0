"""
Unit tests for bytecode matching.

Tests metadata trailer detection under both length conventions, full and
partial classification, and best-match ranking.
"""

import pytest
from fakes import OTHER_TRAILER
from fakes import RUNTIME_BODY
from fakes import RUNTIME_WITH_TRAILER
from fakes import VYPER_TRAILER
from fakes import contract

from verifier_library.models import BytecodeType
from verifier_library.models import CompilationArtifact
from verifier_library.models import MatchType
from verifier_library.models import SubmittedBytecode
from verifier_library.verification import BytecodeMatcher
from verifier_library.verification import compare_bytecode
from verifier_library.verification import metadata_trailer_length
from verifier_library.verification import strip_metadata_trailer

# a1 64 "solc" 43 00 08 13, CBOR length excluding the length field
SOLIDITY_TRAILER = "a164736f6c6343000813000a"
# Same CBOR item as VYPER_TRAILER, length counting the length field itself (Vyper 0.3.10+)
INCLUSIVE_TRAILER = "a165767970657283000307000d"
# Vyper 0.3.10 trailer (length counts itself) after a body ending in DUP1 and one more byte
DUP_BODY_TRAILER = "a16576797065728300030a000d"


def h(text: str) -> bytes:
    return bytes.fromhex(text)


@pytest.mark.unit
class TestMetadataTrailer:
    """Test trailer detection and stripping."""

    def test_length_excluding_length_field(self) -> None:
        """Test Solidity and older Vyper trailers are detected."""
        assert metadata_trailer_length(h(RUNTIME_BODY + VYPER_TRAILER)) == 13
        assert metadata_trailer_length(h("6080604052600080fd" + SOLIDITY_TRAILER)) == 12

    def test_length_including_length_field(self) -> None:
        """Test Vyper 0.3.10+ trailers are detected."""
        assert metadata_trailer_length(h(RUNTIME_BODY + INCLUSIVE_TRAILER)) == 13

    def test_no_trailer_when_length_exceeds_code(self) -> None:
        """Test code whose last bytes are not a plausible length has no trailer."""
        assert metadata_trailer_length(h("600160020a")) == 0

    def test_inclusive_length_after_dup_opcode(self) -> None:
        """Test a body byte that looks like a CBOR array header is not taken as trailer."""
        assert metadata_trailer_length(h("6001" + "80" + "11" + DUP_BODY_TRAILER)) == 13

    def test_no_trailer_when_cbor_item_leaves_bytes_over(self) -> None:
        """Test a region holding a CBOR item plus extra bytes is not a trailer."""
        # 0x80 is an empty array; the byte after it is not part of any item
        assert metadata_trailer_length(h("6001" + "8011" + "0002")) == 0

    def test_no_trailer_when_cbor_item_is_truncated(self) -> None:
        """Test a map header whose entries run past the length field is not a trailer."""
        assert metadata_trailer_length(h("6001" + "a26576797065" + "0006")) == 0

    def test_no_trailer_without_cbor_container(self) -> None:
        """Test a plausible length not pointing at a CBOR map or array is ignored."""
        assert metadata_trailer_length(h("60016002000003")) == 0

    def test_no_trailer_in_tiny_code(self) -> None:
        """Test code shorter than the smallest trailer has none."""
        assert metadata_trailer_length(h("a1")) == 0
        assert metadata_trailer_length(b"") == 0

    def test_strip_removes_trailer(self) -> None:
        """Test stripping leaves the code body."""
        assert strip_metadata_trailer(h(RUNTIME_WITH_TRAILER)) == h(RUNTIME_BODY)

    def test_strip_without_trailer_is_identity(self) -> None:
        """Test stripping code without a trailer changes nothing."""
        assert strip_metadata_trailer(h("600160020a")) == h("600160020a")


@pytest.mark.unit
class TestCompareBytecode:
    """Test full/partial/no-match classification."""

    def test_identical_is_full(self) -> None:
        """Test byte-identical code is a full match."""
        assert compare_bytecode(h(RUNTIME_WITH_TRAILER), h(RUNTIME_WITH_TRAILER)) == MatchType.FULL

    def test_identical_without_trailer_is_full(self) -> None:
        """Test identical code needs no trailer to fully match."""
        assert compare_bytecode(h("600160020a"), h("600160020a")) == MatchType.FULL

    def test_different_trailer_is_partial(self) -> None:
        """Test code differing only in metadata is a partial match."""
        assert compare_bytecode(h(RUNTIME_BODY + VYPER_TRAILER), h(RUNTIME_BODY + OTHER_TRAILER)) == MatchType.PARTIAL

    def test_mixed_length_conventions_are_partial(self) -> None:
        """Test trailers are stripped per side, whatever their convention."""
        compiled = h(RUNTIME_BODY + VYPER_TRAILER)
        submitted = h(RUNTIME_BODY + INCLUSIVE_TRAILER)

        assert compare_bytecode(compiled, submitted) == MatchType.PARTIAL

    def test_body_differing_before_inclusive_trailer_is_no_match(self) -> None:
        """Test bodies that differ right before the trailer never match partially."""
        compiled = h("6001" + "80" + "11" + DUP_BODY_TRAILER)
        submitted = h("6001" + "80" + "22" + DUP_BODY_TRAILER)

        assert compare_bytecode(compiled, submitted) is None

    def test_same_body_before_inclusive_trailer_is_partial(self) -> None:
        """Test a DUP opcode before the trailer still allows a partial match."""
        compiled = h("6001" + "80" + "11" + DUP_BODY_TRAILER)
        submitted = h("6001" + "80" + "11" + "a16576797065728300030b000d")

        assert compare_bytecode(compiled, submitted) == MatchType.PARTIAL

    def test_different_body_is_no_match(self) -> None:
        """Test different code bodies never match."""
        assert compare_bytecode(h("6004600401600055" + VYPER_TRAILER), h(RUNTIME_BODY + OTHER_TRAILER)) is None

    def test_different_code_without_trailers_is_no_match(self) -> None:
        """Test code without trailers only matches fully."""
        assert compare_bytecode(h("600160020a"), h("600160030a")) is None

    def test_trailer_only_code_is_no_match(self) -> None:
        """Test an empty body never produces a partial match."""
        assert compare_bytecode(h(VYPER_TRAILER), h(OTHER_TRAILER)) is None

    def test_short_submission_is_no_match(self) -> None:
        """Test submissions shorter than a trailer only match fully."""
        assert compare_bytecode(h("6001"), h("6002")) is None
        assert compare_bytecode(h("6001"), h("6001")) == MatchType.FULL


@pytest.mark.unit
class TestBytecodeMatcher:
    """Test per-contract matching and best-match selection."""

    def test_runtime_submission_compares_runtime_code(self) -> None:
        """Test deployed bytecode is compared against runtime code."""
        matcher = BytecodeMatcher(SubmittedBytecode(h(RUNTIME_WITH_TRAILER), BytecodeType.RUNTIME))

        assert matcher.match(contract("Token", RUNTIME_WITH_TRAILER)) == MatchType.FULL

    def test_creation_submission_compares_creation_code(self) -> None:
        """Test creation input is compared against creation code."""
        matcher = BytecodeMatcher(SubmittedBytecode(h("6000" + RUNTIME_WITH_TRAILER), BytecodeType.CREATION))

        assert matcher.match(contract("Token", RUNTIME_WITH_TRAILER)) == MatchType.FULL
        assert matcher.match(contract("Token", RUNTIME_WITH_TRAILER, creation=RUNTIME_WITH_TRAILER)) is None

    def test_unlinked_code_never_matches(self) -> None:
        """Test compiled code with library placeholders is skipped."""
        matcher = BytecodeMatcher(SubmittedBytecode(h(RUNTIME_WITH_TRAILER), BytecodeType.RUNTIME))

        assert matcher.match(contract("Lib", "73__$abcdef$__6000")) is None

    def test_empty_compiled_code_never_matches(self) -> None:
        """Test interfaces and abstract contracts with no code are skipped."""
        matcher = BytecodeMatcher(SubmittedBytecode(h(RUNTIME_WITH_TRAILER), BytecodeType.RUNTIME))

        assert matcher.match(contract("IToken", "")) is None

    def test_best_match_prefers_full_over_partial(self) -> None:
        """Test a later full match beats an earlier partial one."""
        matcher = BytecodeMatcher(SubmittedBytecode(h(RUNTIME_WITH_TRAILER), BytecodeType.RUNTIME))
        artifact = CompilationArtifact(
            contracts=(
                contract("Partial", RUNTIME_BODY + OTHER_TRAILER),
                contract("Full", RUNTIME_WITH_TRAILER),
            )
        )

        best = matcher.best_match(artifact)

        assert best is not None
        assert best[0].name == "Full"
        assert best[1] == MatchType.FULL

    def test_best_match_uses_name_hint_between_equals(self) -> None:
        """Test the name hint breaks ties within one match type."""
        matcher = BytecodeMatcher(SubmittedBytecode(h(RUNTIME_WITH_TRAILER), BytecodeType.RUNTIME))
        artifact = CompilationArtifact(
            contracts=(
                contract("First", RUNTIME_WITH_TRAILER, file_path="a.vy"),
                contract("Second", RUNTIME_WITH_TRAILER, file_path="b.vy"),
            )
        )

        assert matcher.best_match(artifact)[0].name == "First"
        assert matcher.best_match(artifact, name_hint="Second")[0].name == "Second"
        assert matcher.best_match(artifact, name_hint="Missing")[0].name == "First"

    def test_name_hint_never_beats_full_match(self) -> None:
        """Test the hint ranks below match type."""
        matcher = BytecodeMatcher(SubmittedBytecode(h(RUNTIME_WITH_TRAILER), BytecodeType.RUNTIME))
        artifact = CompilationArtifact(
            contracts=(
                contract("Hinted", RUNTIME_BODY + OTHER_TRAILER),
                contract("Exact", RUNTIME_WITH_TRAILER),
            )
        )

        assert matcher.best_match(artifact, name_hint="Hinted")[0].name == "Exact"

    def test_best_match_none_when_nothing_matches(self) -> None:
        """Test no match yields None."""
        matcher = BytecodeMatcher(SubmittedBytecode(h(RUNTIME_WITH_TRAILER), BytecodeType.RUNTIME))
        artifact = CompilationArtifact(contracts=(contract("Other", "600160020a"),))

        assert matcher.best_match(artifact) is None
