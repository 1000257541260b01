"""Configuration for TypeScript generation."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class GeneratorConfig:
    """Configuration options for generation."""

    # Emission strategy: "types", "context" (types plus name contexts) or
    # "methods" (contexts plus shex-methods shape objects)
    emitter: str = "types"

    # Spaces per indentation level in object types and enums
    indent: int = 2

    # Put the import lines in front of a generated module
    include_preamble: bool = True

    # Prefix of the exported schema source constant ("methods" only)
    module_name: str = "schema"

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        return {
            "emitter": self.emitter,
            "indent": self.indent,
            "include_preamble": self.include_preamble,
            "module_name": self.module_name,
        }
