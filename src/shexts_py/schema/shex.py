"""ShEx data model (Shape, TripleConstraint, NodeConstraint, etc.)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from shexts_py.schema.common import IRI, Cardinality, IriStem, Literal, NodeKind, Prefix


@dataclass
class ValueSetValue:
    """A single value in a ShEx value set: can be IRI, Literal, or IriStem."""
    value: Union[IRI, Literal, IriStem]

    @property
    def lexical(self) -> str:
        """The string an enum member is bound to."""
        if isinstance(self.value, IRI):
            return self.value.value
        if isinstance(self.value, IriStem):
            return self.value.stem
        return self.value.value

    @property
    def is_iri(self) -> bool:
        return isinstance(self.value, (IRI, IriStem))


@dataclass
class Annotation:
    """A `// predicate object` annotation on a triple constraint or shape."""
    predicate: IRI
    object: Union[IRI, Literal]


@dataclass
class NodeConstraint:
    datatype: Optional[IRI] = None
    node_kind: Optional[NodeKind] = None
    values: Optional[list[ValueSetValue]] = None  # value set [v1 v2 ...]
    pattern: Optional[str] = None  # string facets
    flags: Optional[str] = None
    length: Optional[int] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_inclusive: Optional[float] = None  # numeric facets
    min_exclusive: Optional[float] = None
    max_inclusive: Optional[float] = None
    max_exclusive: Optional[float] = None
    total_digits: Optional[int] = None
    fraction_digits: Optional[int] = None

    @property
    def has_values(self) -> bool:
        return bool(self.values)


@dataclass
class ShapeRef:
    """Reference to another shape: @<ShapeName>, or &<ShapeName> as inclusion."""
    name: IRI


@dataclass
class TripleConstraint:
    predicate: IRI
    constraint: Optional[Union[NodeConstraint, ShapeRef, Shape]] = None
    cardinality: Cardinality = field(default_factory=Cardinality)
    inverse: bool = False
    annotations: list[Annotation] = field(default_factory=list)


@dataclass
class EachOf:
    """Conjunction of triple expressions (;-separated in ShExC)."""
    expressions: list[TripleExpression] = field(default_factory=list)
    cardinality: Cardinality = field(default_factory=Cardinality)


@dataclass
class OneOf:
    """Disjunction of triple expressions (|-separated in ShExC)."""
    expressions: list[TripleExpression] = field(default_factory=list)
    cardinality: Cardinality = field(default_factory=Cardinality)


TripleExpression = Union[TripleConstraint, EachOf, OneOf, ShapeRef]


@dataclass
class Shape:
    name: Optional[IRI] = None  # None for shapes nested in a value expression
    expression: Optional[TripleExpression] = None
    closed: bool = False
    extra: list[IRI] = field(default_factory=list)  # EXTRA predicates
    extends: list[IRI] = field(default_factory=list)
    annotations: list[Annotation] = field(default_factory=list)


@dataclass
class EnumShape:
    """A shape declared as a bare value set: <Name> [ v1 v2 ... ]"""
    name: IRI
    values: list[ValueSetValue] = field(default_factory=list)


ShapeDecl = Union[Shape, EnumShape]


@dataclass
class ShExSchema:
    shapes: list[ShapeDecl] = field(default_factory=list)
    prefixes: list[Prefix] = field(default_factory=list)
    start: Optional[IRI] = None  # start = @<Shape>
