"""Path resolution for verifierd storage locations.

This module provides path resolution based on VERIFIERD_HOME environment variable,
following XDG-like directory structure within that root.

Contract:
- Inputs: Environment variables (VERIFIERD_HOME)
- Outputs: Resolved Path objects
- Side Effects: Creates directories if they don't exist
"""

import os
from pathlib import Path


def get_home_dir() -> Path:
    """Get VERIFIERD_HOME from environment.

    Returns:
        Path to root directory (default: .verifierd)
    """
    root = os.environ.get("VERIFIERD_HOME", ".verifierd")
    return Path(root).resolve()


def get_config_dir() -> Path:
    """Get configuration directory.

    Returns:
        Path to config directory ($VERIFIERD_HOME/config)
    """
    config_dir: Path = get_home_dir() / "config"

    env_override: str | None = os.environ.get("VERIFIERD_CONFIG_DIR")
    if env_override is not None:
        config_dir = Path(env_override).resolve()

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_compilers_dir(language: str) -> Path:
    """Get the compiler binary cache directory for one language.

    Each cached compiler version lives in its own subdirectory:
    $VERIFIERD_HOME/compilers/<language>/<version>/<binary>

    Args:
        language: Compiler language name (e.g. "vyper")

    Returns:
        Path to the language's compiler cache directory

    Example:
        >>> get_compilers_dir("vyper").name
        'vyper'
    """
    compilers_dir: Path = get_home_dir() / "compilers" / language
    compilers_dir.mkdir(parents=True, exist_ok=True)
    return compilers_dir
