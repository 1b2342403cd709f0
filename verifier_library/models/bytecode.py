"""Submitted bytecode and hex normalization."""

from dataclasses import dataclass
from enum import Enum


class BytecodeType(str, Enum):
    """Which form of the contract's code was submitted.

    - CREATION: deployment transaction input (constructor code + runtime)
    - RUNTIME: code stored on-chain at the contract address
    """

    CREATION = "CREATION_INPUT"
    RUNTIME = "DEPLOYED_BYTECODE"


def decode_hex(value: str) -> bytes:
    """Normalize a hex string and decode it to raw bytes.

    Strips surrounding whitespace and an optional 0x prefix; case-insensitive.

    Raises:
        ValueError: If the value is not valid hex

    Example:
        >>> decode_hex("0x60AB")
        b'`\\xab'
    """
    text = value.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    if len(text) % 2:
        raise ValueError("Hex string has an odd number of digits")
    return bytes.fromhex(text.lower())


@dataclass(frozen=True)
class SubmittedBytecode:
    """Bytecode a caller wants verified.

    Chain and address metadata are deliberately absent: they never take
    part in matching.
    """

    code: bytes
    bytecode_type: BytecodeType

    @classmethod
    def from_hex(cls, value: str, bytecode_type: BytecodeType) -> "SubmittedBytecode":
        """Build from a display hex string.

        Raises:
            ValueError: If the value is empty or not valid hex
        """
        code = decode_hex(value)
        if not code:
            raise ValueError("Bytecode is empty")
        return cls(code=code, bytecode_type=bytecode_type)

    def __str__(self) -> str:
        return "0x" + self.code.hex()
