"""Errors raised while turning a ShEx schema into TypeScript declarations.

None of them is recoverable: a shape that fails to generate never yields
partial declaration text.
"""
from __future__ import annotations


class ShExTypesError(Exception):
    pass


class UnsupportedExpressionKind(ShExTypesError):
    """An expression node is not a TripleConstraint, EachOf, OneOf or ShapeRef."""

    def __init__(self, kind: str):
        super().__init__(f"unexpected expression type: {kind}")
        self.kind = kind


class NameSynthesisError(ShExTypesError):
    def __init__(self):
        super().__init__("Can't generate enum name without a subject or a predicate")


class UnresolvedPrefixError(ShExTypesError):
    def __init__(self, iri: str):
        super().__init__(f"Unknown prefix found in schema for {iri!r}")
        self.iri = iri


class MissingExpectedField(ShExTypesError):
    def __init__(self, field_name: str, kind: str):
        super().__init__(f"{kind} is missing required field {field_name!r}")
        self.field_name = field_name
        self.kind = kind
