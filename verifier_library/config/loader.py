"""Configuration loading for the verifier daemon.

Settings come from verifierd.yaml with VERIFIERD_* environment overrides.
Contract:
- Inputs: Config file paths, environment variables
- Outputs: VerifierSettings objects
- Side Effects: Creates default config file if missing
"""

import logging
import os
from pathlib import Path

import yaml

from ..storage.paths import get_config_dir
from .settings import VerifierSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = """# verifierd configuration
# Environment variables (VERIFIERD_*, nested with __) override these values

# Server settings
host: "127.0.0.1"
port: 8050
log_level: "info"
workers: 1

# Maximum number of concurrent compiler subprocesses (default: CPU count)
# compiler_threads: 8

# Download every cataloged compiler on startup
preload_compilers: false

# compile_timeout_seconds: 120
download_retries: 3

vyper:
  enabled: true
  # compilers_dir: "~/.verifierd/compilers/vyper"
  list_url: "https://raw.githubusercontent.com/blockscout/solc-bin/main/vyper.list.json"
  refresh_versions_schedule: "0 0 * * *"

solidity:
  enabled: false
  list_url: "https://binaries.soliditylang.org/linux-amd64/list.json"
  refresh_versions_schedule: "0 0 * * *"

# Fallback lookup consulted only when local verification fails
# extensions:
#   lookup_url: "http://localhost:8051"
"""


def get_config_path() -> Path:
    """Location of verifierd.yaml inside the config directory."""
    return get_config_dir() / "verifierd.yaml"


def create_default_config() -> None:
    """Write the commented default config unless a config file is already present."""
    path = get_config_path()
    if path.exists():
        return
    path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    logger.info(f"Wrote default configuration to {path}")


def _read_yaml(config_path: Path) -> dict:
    """Parse the config file, falling back to no values when it is unreadable."""
    if not config_path.exists():
        return {}
    try:
        values = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        return {}
    if not isinstance(values, dict):
        logger.warning(f"Ignoring config {config_path}: top level is not a mapping")
        return {}
    logger.debug(f"Read config values from {config_path}")
    return values


def _drop_env_overridden(values: dict) -> dict:
    """Remove YAML keys that a VERIFIERD_* variable already sets.

    Nested sections keep their siblings: VERIFIERD_VYPER__LIST_URL drops only
    vyper.list_url.
    """
    kept = {}
    for section, value in values.items():
        variable = f"VERIFIERD_{str(section).upper()}"
        if variable in os.environ:
            continue
        if isinstance(value, dict):
            value = {k: v for k, v in value.items() if f"{variable}__{str(k).upper()}" not in os.environ}
        kept[section] = value
    return kept


def load_config(config_path: Path | None = None) -> VerifierSettings:
    """Load verifier configuration from YAML and environment.

    YAML values are defaults; VERIFIERD_* variables win (e.g. VERIFIERD_PORT,
    VERIFIERD_VYPER__LIST_URL).

    Args:
        config_path: Config file to read (default: verifierd.yaml in the config dir,
            written with defaults when missing)
    """
    if config_path is None:
        create_default_config()
        config_path = get_config_path()

    # pydantic-settings merges env vars underneath these init values
    settings = VerifierSettings(**_drop_env_overridden(_read_yaml(config_path)))

    logger.info(
        f"Configuration loaded from {config_path}: listening on {settings.host}:{settings.port}, "
        f"{settings.compiler_threads} compile permits"
    )
    return settings
