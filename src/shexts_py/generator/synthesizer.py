"""Map value constraints onto TypeScript type text.

A triple constraint's value is one of: nothing (`.`), a node constraint
(node kind, datatype, or value set), a reference to another shape, or a nested
shape. Value sets become enums; their names are derived from the owning shape
and predicate:

    rdf:type on <Person>   -> PersonType
    ex:status              -> StatusType
    <Color> [ ... ]        -> Color   (standalone enum shape)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional, Union

from rdflib.namespace import XSD

from shexts_py.errors import NameSynthesisError, UnsupportedExpressionKind
from shexts_py.naming import RDF_TYPE, enum_member_names, normalize_url
from shexts_py.schema.common import IRI, NodeKind
from shexts_py.schema.shex import NodeConstraint, Shape, ShapeRef, ValueSetValue

if TYPE_CHECKING:
    from shexts_py.generator.emitter import Emitter
    from shexts_py.generator.walker import Fragment, WalkContext

NUMERIC_DATATYPES = frozenset(str(XSD[name]) for name in (
    "integer",
    "decimal",
    "float",
    "double",
    "nonPositiveInteger",
    "negativeInteger",
    "long",
    "int",
    "short",
    "byte",
    "nonNegativeInteger",
    "unsignedLong",
    "unsignedInt",
    "unsignedShort",
    "unsignedByte",
    "positiveInteger",
))

DATE_DATATYPES = frozenset(str(XSD[name]) for name in ("dateTime", "date", "dateTimeStamp"))

STRING_DATATYPES = frozenset({str(XSD.string)})


@dataclass
class ValueType:
    type_text: str
    is_value_set: bool = False
    child_shapes: list[str] = field(default_factory=list)
    inline_enums: dict[str, list[ValueSetValue]] = field(default_factory=dict)
    name_context: dict[str, str] = field(default_factory=dict)


def enum_name(shape_id: Optional[IRI], predicate: Optional[IRI] = None) -> str:
    """Name of the enum generated for a value set."""
    if shape_id is not None and predicate is None:
        return normalize_url(shape_id.value, True)
    if shape_id is not None and predicate == RDF_TYPE:
        return normalize_url(shape_id.value, True) + normalize_url(predicate.value, True)
    if predicate is not None:
        return normalize_url(predicate.value, True) + "Type"
    raise NameSynthesisError()


def synthesize_node_type(nc: NodeConstraint, emitter: Emitter) -> str:
    """Type text for a node constraint without a value set."""
    if nc.node_kind in (NodeKind.IRI, NodeKind.BLANK_NODE, NodeKind.NON_LITERAL):
        return emitter.iri_type()
    if nc.datatype is not None:
        datatype = nc.datatype.value
        if datatype in NUMERIC_DATATYPES:
            return emitter.literal_type("number")
        if datatype in DATE_DATATYPES:
            return emitter.literal_type("Date")
        if datatype in STRING_DATATYPES:
            return emitter.literal_type("string")
        return normalize_url(datatype, True)
    if nc.node_kind is NodeKind.LITERAL:
        return emitter.literal_type("string")
    return "string"


def synthesize_enum(
    nc: NodeConstraint, context: WalkContext, predicate: Optional[IRI], emitter: Emitter
) -> ValueType:
    """Enum accesses for a value set, and the inline enum that declares them."""
    name = enum_name(context.shape_id, predicate)
    members = enum_member_names(nc.values, context.prefixes)
    members.update(context.known_enums.get(name, {}))
    accesses: list[str] = []
    for v in nc.values:
        access = emitter.render_enum_access(name, members[v.lexical])
        if access not in accesses:
            accesses.append(access)
    return ValueType(
        type_text=emitter.render_enum_union(accesses),
        is_value_set=True,
        inline_enums={name: list(nc.values)},
    )


def synthesize_value(
    constraint: Union[NodeConstraint, ShapeRef, Shape, None],
    context: WalkContext,
    predicate: Optional[IRI],
    emitter: Emitter,
    compose_shape: Callable[[Shape, WalkContext], Fragment],
) -> ValueType:
    """Type text for the value of a triple constraint.

    Args:
        constraint: The value expression of the triple constraint.
        context: Context of the shape owning the triple constraint.
        predicate: The predicate the value hangs off, used to name enums.
        emitter: Output flavor.
        compose_shape: Callback composing a nested shape into a fragment.

    Returns:
        The type text and what it drags along: referenced shapes, inline
        enums and, for nested shapes, name context entries.
    """
    if constraint is None:
        return ValueType(type_text="string")

    if isinstance(constraint, ShapeRef):
        return ValueType(
            type_text=emitter.render_reference(normalize_url(constraint.name.value, True)),
            child_shapes=[constraint.name.value],
        )

    if isinstance(constraint, NodeConstraint):
        if constraint.has_values:
            return synthesize_enum(constraint, context, predicate, emitter)
        return ValueType(type_text=synthesize_node_type(constraint, emitter))

    if isinstance(constraint, Shape):
        nested = compose_shape(constraint, context)
        return ValueType(
            type_text=nested.type_value,
            child_shapes=list(nested.child_shapes),
            inline_enums=dict(nested.inline_enums),
            name_context=dict(nested.name_context),
        )

    raise UnsupportedExpressionKind(type(constraint).__name__)
