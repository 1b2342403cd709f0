"""Verification pipeline, bytecode matching and client facade."""

from .client import VerifierClient
from .extensions import ExtensionLookup
from .extensions import ExtensionMiddleware
from .extensions import HttpLookupMiddleware
from .matcher import BytecodeMatcher
from .matcher import compare_bytecode
from .matcher import metadata_trailer_length
from .matcher import strip_metadata_trailer
from .pipeline import parse_standard_json_input
from .pipeline import verify_multi_part
from .pipeline import verify_standard_json

__all__ = [
    "BytecodeMatcher",
    "ExtensionLookup",
    "ExtensionMiddleware",
    "HttpLookupMiddleware",
    "VerifierClient",
    "compare_bytecode",
    "metadata_trailer_length",
    "parse_standard_json_input",
    "strip_metadata_trailer",
    "verify_multi_part",
    "verify_standard_json",
]
