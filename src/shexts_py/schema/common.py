"""Shared value types for the ShEx model."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NodeKind(Enum):
    IRI = "iri"
    BLANK_NODE = "bnode"
    LITERAL = "literal"
    NON_LITERAL = "nonliteral"


UNBOUNDED = -1  # Sentinel for unbounded max cardinality


@dataclass
class Cardinality:
    min: Optional[int] = None   # None = not specified (ShEx default 1)
    max: Optional[int] = None   # None = not specified, UNBOUNDED = unlimited

    @property
    def effective_min(self) -> int:
        return self.min if self.min is not None else 1

    @property
    def effective_max(self) -> Optional[int]:
        """Effective max. Returns None for unbounded, int otherwise."""
        if self.max == UNBOUNDED:
            return None
        if self.max is None:
            return 1
        return self.max

    @property
    def is_required(self) -> bool:
        return self.effective_min > 0

    @property
    def is_multiple(self) -> bool:
        return self.effective_max is None


@dataclass
class IRI:
    value: str

    def __hash__(self):
        return hash(self.value)

    def __eq__(self, other):
        if isinstance(other, IRI):
            return self.value == other.value
        return False

    def __repr__(self):
        return f"IRI({self.value!r})"


@dataclass
class Prefix:
    name: str
    iri: str


@dataclass
class IriStem:
    """An IRI stem for ShEx value sets, e.g. <http://example.org/~>"""
    stem: str


@dataclass
class Literal:
    value: str
    datatype: Optional[IRI] = None
    language: Optional[str] = None

    def __hash__(self):
        return hash((self.value, self.datatype, self.language))

    def __eq__(self, other):
        if isinstance(other, Literal):
            return (self.value == other.value and
                    self.datatype == other.datatype and
                    self.language == other.language)
        return False
