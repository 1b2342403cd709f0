"""Configuration for the verifier."""

from .loader import load_config
from .settings import CompilerLanguageSettings
from .settings import ExtensionSettings
from .settings import VerifierSettings

__all__ = [
    "load_config",
    "CompilerLanguageSettings",
    "ExtensionSettings",
    "VerifierSettings",
]
