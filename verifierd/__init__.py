"""HTTP transport for the smart-contract verifier."""

__version__ = "0.1.0"
