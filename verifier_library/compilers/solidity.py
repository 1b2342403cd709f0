"""Solidity compiler adapter."""

import re
from typing import Any

from ..errors import Diagnostic
from ..models.sources import MultiPartInput
from ..models.sources import deep_merge
from .base import StandardJsonCompiler

DEFAULT_OPTIMIZER_RUNS = 200

# solc locates errors only in formattedMessage: " --> path/File.sol:12:5:"
_LOCATION_RE = re.compile(r"-->\s*(?P<file>[^:\n]+):(?P<line>\d+):(?P<column>\d+)")


class SolidityCompiler(StandardJsonCompiler):
    """Drives `solc --standard-json`.

    Multi-part interfaces are compiled as ordinary sources.
    """

    language = "solidity"
    binary_name = "solc"
    pragma_pattern = re.compile(r"pragma\s+solidity\s+([^;]+);")
    output_selection = {"*": {"*": ["abi", "evm.bytecode.object", "evm.deployedBytecode.object"]}}

    def multi_part_settings(self, source_input: MultiPartInput) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        if source_input.evm_version:
            settings["evmVersion"] = source_input.evm_version
        optimization = source_input.optimization
        if optimization.enabled is not None:
            settings["optimizer"] = {
                "enabled": optimization.enabled,
                "runs": optimization.runs if optimization.runs is not None else DEFAULT_OPTIMIZER_RUNS,
            }
        return deep_merge(settings, source_input.settings_overrides)

    def multi_part_document(self, source_input: MultiPartInput) -> dict[str, Any]:
        sources = {**source_input.interfaces, **source_input.sources}
        return {
            "language": "Solidity",
            "sources": {path: {"content": content} for path, content in sources.items()},
            "settings": self.multi_part_settings(source_input),
        }

    def parse_diagnostic(self, entry: dict[str, Any]) -> Diagnostic:
        location = entry.get("sourceLocation") or {}
        line = column = None
        match = _LOCATION_RE.search(entry.get("formattedMessage") or "")
        if match:
            line = int(match.group("line"))
            column = int(match.group("column"))
        return Diagnostic(
            severity=str(entry.get("severity", "error")).lower(),
            message=str(entry.get("message") or entry.get("formattedMessage") or ""),
            file=location.get("file") or (match.group("file").strip() if match else None),
            line=line,
            column=column,
        )
