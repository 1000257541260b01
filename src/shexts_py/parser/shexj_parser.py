"""Parse ShExJ (the JSON form of ShEx) into the ShEx model.

Accepts ShEx 2.0 schemas, where shapes carry their ``id`` directly, and 2.1+
schemas, where they are wrapped in a ``ShapeDecl``. ShExJ has no prefixes; the
prefix table is read from ``prefixes`` or ``_prefixes`` when present.
"""
from __future__ import annotations

import json
from typing import Any, Optional, Union

from shexts_py.errors import MissingExpectedField, UnsupportedExpressionKind
from shexts_py.schema.common import IRI, UNBOUNDED, Cardinality, IriStem, Literal, NodeKind, Prefix
from shexts_py.schema.shex import (
    Annotation,
    EachOf,
    EnumShape,
    NodeConstraint,
    OneOf,
    Shape,
    ShapeDecl,
    ShapeRef,
    ShExSchema,
    TripleConstraint,
    TripleExpression,
    ValueSetValue,
)

NODE_KINDS = {
    "iri": NodeKind.IRI,
    "bnode": NodeKind.BLANK_NODE,
    "literal": NodeKind.LITERAL,
    "nonliteral": NodeKind.NON_LITERAL,
}

# ShExJ facet -> NodeConstraint attribute
FACETS = {
    "pattern": "pattern",
    "flags": "flags",
    "length": "length",
    "minlength": "min_length",
    "maxlength": "max_length",
    "mininclusive": "min_inclusive",
    "minexclusive": "min_exclusive",
    "maxinclusive": "max_inclusive",
    "maxexclusive": "max_exclusive",
    "totaldigits": "total_digits",
    "fractiondigits": "fraction_digits",
}


def _require(d: dict, key: str, kind: str) -> Any:
    if key not in d:
        raise MissingExpectedField(key, kind)
    return d[key]


def _kind(d: dict) -> str:
    return _require(d, "type", d.get("id", "expression"))


def _parse_cardinality(d: dict) -> Cardinality:
    mx = d.get("max")
    return Cardinality(min=d.get("min"), max=UNBOUNDED if mx == -1 else mx)


def _parse_object(obj: Union[str, dict]) -> Union[IRI, Literal]:
    if isinstance(obj, str):
        return IRI(obj)
    dt = obj.get("type")
    return Literal(
        value=str(_require(obj, "value", "ObjectLiteral")),
        datatype=IRI(dt) if dt else None,
        language=obj.get("language"),
    )


def _parse_value(v: Union[str, dict]) -> ValueSetValue:
    if isinstance(v, dict) and v.get("type") == "IriStem":
        return ValueSetValue(value=IriStem(stem=_require(v, "stem", "IriStem")))
    if isinstance(v, dict) and "value" not in v:
        raise UnsupportedExpressionKind(v.get("type", "value set value"))
    return ValueSetValue(value=_parse_object(v))


def _parse_annotations(items: Optional[list]) -> list[Annotation]:
    return [
        Annotation(
            predicate=IRI(_require(a, "predicate", "Annotation")),
            object=_parse_object(_require(a, "object", "Annotation")),
        )
        for a in items or []
    ]


def _parse_node_constraint(d: dict) -> NodeConstraint:
    nc = NodeConstraint()
    if "nodeKind" in d:
        nc.node_kind = NODE_KINDS.get(d["nodeKind"])
        if nc.node_kind is None:
            raise UnsupportedExpressionKind(f"nodeKind {d['nodeKind']}")
    if "datatype" in d:
        nc.datatype = IRI(d["datatype"])
    if "values" in d:
        nc.values = [_parse_value(v) for v in d["values"]]
    for key, attr in FACETS.items():
        if key in d:
            setattr(nc, attr, d[key])
    return nc


def _parse_shape(d: dict, name: Optional[IRI] = None) -> Shape:
    expr = d.get("expression")
    return Shape(
        name=name,
        expression=_parse_triple_expression(expr) if expr is not None else None,
        closed=bool(d.get("closed", False)),
        extra=[IRI(e) for e in d.get("extra", [])],
        extends=[IRI(e) for e in d.get("extends", [])],
        annotations=_parse_annotations(d.get("annotations")),
    )


def _parse_value_expr(v: Union[str, dict, None]) -> Union[NodeConstraint, ShapeRef, Shape, None]:
    if v is None:
        return None
    if isinstance(v, str):
        return ShapeRef(name=IRI(v))
    kind = _kind(v)
    if kind == "NodeConstraint":
        return _parse_node_constraint(v)
    if kind == "Shape":
        return _parse_shape(v)
    raise UnsupportedExpressionKind(kind)


def _parse_triple_expression(d: Union[str, dict]) -> TripleExpression:
    if isinstance(d, str):
        return ShapeRef(name=IRI(d))
    kind = _kind(d)
    if kind == "TripleConstraint":
        return TripleConstraint(
            predicate=IRI(_require(d, "predicate", kind)),
            constraint=_parse_value_expr(d.get("valueExpr")),
            cardinality=_parse_cardinality(d),
            inverse=bool(d.get("inverse", False)),
            annotations=_parse_annotations(d.get("annotations")),
        )
    if kind in ("EachOf", "OneOf"):
        group = EachOf if kind == "EachOf" else OneOf
        return group(
            expressions=[_parse_triple_expression(e) for e in _require(d, "expressions", kind)],
            cardinality=_parse_cardinality(d),
        )
    raise UnsupportedExpressionKind(kind)


def _parse_shape_decl(d: dict) -> ShapeDecl:
    name = IRI(_require(d, "id", _kind(d)))
    expr = d
    if d["type"] == "ShapeDecl":
        expr = _require(d, "shapeExpr", "ShapeDecl")
    kind = _kind(expr)
    if kind == "Shape":
        return _parse_shape(expr, name)
    if kind == "NodeConstraint" and "values" in expr:
        return EnumShape(name=name, values=[_parse_value(v) for v in expr["values"]])
    raise UnsupportedExpressionKind(kind)


def _parse_start(start: Union[str, dict, None]) -> Optional[IRI]:
    if isinstance(start, str):
        return IRI(start)
    return None


def schema_from_dict(data: dict) -> ShExSchema:
    """Build a ShExSchema from a decoded ShExJ document."""
    if _kind(data) != "Schema":
        raise UnsupportedExpressionKind(data["type"])
    prefixes = data.get("prefixes") or data.get("_prefixes") or {}
    return ShExSchema(
        shapes=[_parse_shape_decl(s) for s in data.get("shapes", [])],
        prefixes=[Prefix(name=k, iri=v) for k, v in prefixes.items()],
        start=_parse_start(data.get("start")),
    )


def parse_shexj(source: str) -> ShExSchema:
    """Parse a ShExJ string or file path into ShExSchema.

    Args:
        source: JSON string or file path.

    Returns:
        ShExSchema with parsed shapes and prefixes.
    """
    try:
        with open(source, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (FileNotFoundError, OSError):
        data = json.loads(source)

    return schema_from_dict(data)


def parse_shexj_file(filepath: str) -> ShExSchema:
    """Parse a ShExJ file from a file path."""
    with open(filepath, "r", encoding="utf-8") as f:
        return schema_from_dict(json.load(f))
