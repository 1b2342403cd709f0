"""Storage locations for verifier_library.

The only persisted state is the compiler binary cache: one directory per
cached compiler version holding its binary.

Public Interface:
    - get_home_dir: Get VERIFIERD_HOME
    - get_config_dir: Get config directory
    - get_compilers_dir: Get per-language compiler cache directory
"""

from .paths import get_compilers_dir
from .paths import get_config_dir
from .paths import get_home_dir

__all__ = [
    "get_home_dir",
    "get_config_dir",
    "get_compilers_dir",
]
