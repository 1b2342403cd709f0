"""Source inputs handed to a compiler.

A verification request supplies its sources in one of two shapes:
- MultiPartInput: discrete named files plus global settings
- StandardJsonInput: one combined compiler-native JSON document

Compiler adapters turn either shape into one compiler invocation.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from typing import Any


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into a copy of base.

    Nested dicts are merged recursively; any other overlay value replaces
    the base value.

    Example:
        >>> deep_merge({"optimizer": {"enabled": True, "runs": 200}}, {"optimizer": {"runs": 1}})
        {'optimizer': {'enabled': True, 'runs': 1}}
    """
    merged = copy.deepcopy(base)

    for key, value in overlay.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)

    return merged


@dataclass(frozen=True)
class OptimizationSettings:
    """Optimizer configuration shared by all supported languages."""

    enabled: bool | None = None
    runs: int | None = None


@dataclass(frozen=True)
class MultiPartInput:
    """Discrete source files plus global compiler settings.

    Attributes:
        sources: Map of source path to content
        interfaces: Map of interface path to content (ABI JSON or source)
        evm_version: Target EVM version, compiler default when None
        optimization: Optimizer settings
        settings_overrides: Compiler settings merged last into the generated settings
    """

    sources: dict[str, str]
    interfaces: dict[str, str] = field(default_factory=dict)
    evm_version: str | None = None
    optimization: OptimizationSettings = field(default_factory=OptimizationSettings)
    settings_overrides: dict[str, Any] = field(default_factory=dict)

    def source_contents(self) -> dict[str, str]:
        return dict(self.sources)

    def with_settings(self, overrides: dict[str, Any]) -> MultiPartInput:
        return replace(self, settings_overrides=deep_merge(self.settings_overrides, overrides))


@dataclass(frozen=True)
class StandardJsonInput:
    """A compiler-native standard-json input document."""

    document: dict[str, Any]

    @property
    def settings(self) -> dict[str, Any]:
        return self.document.get("settings") or {}

    def source_contents(self) -> dict[str, str]:
        return {path: entry.get("content", "") for path, entry in self.document.get("sources", {}).items()}

    def with_settings(self, overrides: dict[str, Any]) -> StandardJsonInput:
        document = copy.deepcopy(self.document)
        document["settings"] = deep_merge(self.settings, overrides)
        return StandardJsonInput(document=document)


SourceInput = MultiPartInput | StandardJsonInput
