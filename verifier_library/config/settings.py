"""Settings models for the verifier daemon and engine.

This module defines the configuration structure for the compiler catalog,
the compiler pool and the optional fallback extension.

Contract:
- Inputs: Environment variables, YAML files
- Outputs: Validated settings objects
- Side Effects: None (read-only)
"""

import os
from pathlib import Path

from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

DEFAULT_VYPER_LIST_URL = "https://raw.githubusercontent.com/blockscout/solc-bin/main/vyper.list.json"
DEFAULT_SOLIDITY_LIST_URL = "https://binaries.soliditylang.org/linux-amd64/list.json"


def _default_compiler_threads() -> int:
    return max(os.cpu_count() or 1, 1)


class CompilerLanguageSettings(BaseModel):
    """Configuration for one supported compiler language.

    Attributes:
        enabled: Whether the language is served at all
        compilers_dir: Local binary cache (default: $VERIFIERD_HOME/compilers/<language>)
        list_url: Remote manifest listing every downloadable compiler build
        refresh_versions_schedule: Cron expression for manifest refreshes (UTC)
    """

    enabled: bool = True
    compilers_dir: str | None = None
    list_url: str
    refresh_versions_schedule: str = Field(
        default="0 0 * * *",
        description="5 or 6 part cron expression, evaluated in UTC",
    )

    @field_validator("compilers_dir")
    @classmethod
    def expand_and_resolve_path(cls, v: str | None) -> str | None:
        """Expand ~ and resolve to absolute path."""
        if v is None:
            return None
        return str(Path(v).expanduser().resolve())

    @field_validator("refresh_versions_schedule")
    @classmethod
    def validate_schedule(cls, v: str) -> str:
        parts = v.split()
        if len(parts) not in (5, 6):
            raise ValueError(f"Cron expression must have 5 or 6 parts, got {len(parts)}")
        return v


class ExtensionSettings(BaseModel):
    """Configuration for the optional fallback lookup service."""

    lookup_url: str | None = Field(
        default=None,
        description="Base URL of the fallback lookup service (disabled when unset)",
    )
    timeout_seconds: float = 10.0


class VerifierSettings(BaseSettings):
    """Configuration for the verifier daemon.

    Attributes:
        host: Listen address (default: 127.0.0.1)
        port: Listen port (default: 8050)
        log_level: Logging level (default: info)
        workers: Number of uvicorn workers (default: 1)
        compiler_threads: Maximum number of concurrent compiler subprocesses
        preload_compilers: Download every cataloged compiler on startup
        compile_timeout_seconds: Kill compiler subprocesses running longer than this
        download_retries: Attempts per compiler download before giving up
        download_timeout_seconds: Timeout for one manifest or binary download
        vyper: Vyper compiler settings
        solidity: Solidity compiler settings
        extensions: Fallback lookup settings

    Example:
        >>> settings = VerifierSettings()
        >>> assert settings.port == 8050
        >>> assert settings.compiler_threads >= 1
    """

    model_config = SettingsConfigDict(
        env_prefix="VERIFIERD_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = 8050
    log_level: str = "info"
    workers: int = 1

    compiler_threads: int = Field(default_factory=_default_compiler_threads, ge=1)
    preload_compilers: bool = False
    compile_timeout_seconds: float | None = Field(default=None, gt=0)
    download_retries: int = Field(default=3, ge=1)
    download_timeout_seconds: float = Field(default=120.0, gt=0)

    vyper: CompilerLanguageSettings = Field(
        default_factory=lambda: CompilerLanguageSettings(list_url=DEFAULT_VYPER_LIST_URL)
    )
    solidity: CompilerLanguageSettings = Field(
        default_factory=lambda: CompilerLanguageSettings(enabled=False, list_url=DEFAULT_SOLIDITY_LIST_URL)
    )
    extensions: ExtensionSettings = Field(default_factory=ExtensionSettings)

    def language(self, name: str) -> CompilerLanguageSettings:
        """Get settings for a language by name.

        Raises:
            KeyError: If the language is not supported
        """
        if name == "vyper":
            return self.vyper
        if name == "solidity":
            return self.solidity
        raise KeyError(f"Unsupported language: {name}")
