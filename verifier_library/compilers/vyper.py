"""Vyper compiler adapter."""

import json
import re
from typing import Any

from ..errors import CompilationError
from ..errors import Diagnostic
from ..models.sources import MultiPartInput
from ..models.sources import deep_merge
from .base import StandardJsonCompiler


class VyperCompiler(StandardJsonCompiler):
    """Drives `vyper --standard-json`.

    Multi-part interfaces ending in `.json` are passed as ABI documents,
    anything else as interface source code.
    """

    language = "vyper"
    binary_name = "vyper"
    pragma_pattern = re.compile(r"^[ \t]*#[ \t]*(?:@version|pragma[ \t]+version)[ \t]+(.+?)[ \t]*$", re.MULTILINE)
    output_selection = {"*": ["abi", "evm.bytecode", "evm.deployedBytecode"]}

    def multi_part_settings(self, source_input: MultiPartInput) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        if source_input.evm_version:
            settings["evmVersion"] = source_input.evm_version
        if source_input.optimization.enabled is not None:
            settings["optimize"] = source_input.optimization.enabled
        return deep_merge(settings, source_input.settings_overrides)

    def multi_part_document(self, source_input: MultiPartInput) -> dict[str, Any]:
        interfaces: dict[str, Any] = {}
        for path, content in source_input.interfaces.items():
            if path.endswith(".json"):
                try:
                    interfaces[path] = {"abi": json.loads(content)}
                except json.JSONDecodeError as e:
                    raise CompilationError(
                        [Diagnostic(severity="error", message=f"Invalid interface ABI: {e}", file=path)]
                    ) from e
            else:
                interfaces[path] = {"content": content}

        return {
            "language": "Vyper",
            "sources": {path: {"content": content} for path, content in source_input.sources.items()},
            "interfaces": interfaces,
            "settings": self.multi_part_settings(source_input),
        }

    def parse_diagnostic(self, entry: dict[str, Any]) -> Diagnostic:
        location = entry.get("sourceLocation") or {}
        return Diagnostic(
            severity=str(entry.get("severity", "error")).lower(),
            message=str(entry.get("message") or entry.get("formattedMessage") or ""),
            file=location.get("file"),
            line=location.get("lineno"),
            column=location.get("col_offset"),
        )

    def reported_version(self, output: dict[str, Any]) -> str | None:
        compiler = output.get("compiler")
        if not isinstance(compiler, str):
            return None
        return compiler.removeprefix("vyper-")
