"""Schema model for ShEx shapes."""
from shexts_py.schema.common import IRI, UNBOUNDED, Cardinality, IriStem, Literal, NodeKind, Prefix
from shexts_py.schema.shex import (
    Annotation,
    EachOf,
    EnumShape,
    NodeConstraint,
    OneOf,
    Shape,
    ShapeRef,
    ShExSchema,
    TripleConstraint,
    ValueSetValue,
)
