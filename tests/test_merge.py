"""Tests for the duplicate-property pre-pass."""
from shexts_py.generator.assembler import ShapeAssembler
from shexts_py.generator.merge import (
    merge_duplicate_properties,
    merge_shape_expression,
    union_values,
)
from shexts_py.generator.driver import generate
from shexts_py.naming import PrefixMap
from shexts_py.parser.shexc_parser import parse_shexc
from shexts_py.schema.common import IRI, Cardinality, Literal, Prefix
from shexts_py.schema.shex import (
    EachOf,
    NodeConstraint,
    OneOf,
    Shape,
    ShapeRef,
    TripleConstraint,
    ValueSetValue,
)

EX = "http://example.org/"
XSD = "http://www.w3.org/2001/XMLSchema#"


def _values(*lexicals):
    return [ValueSetValue(Literal(v)) for v in lexicals]


def _enum_tc(local, *lexicals, **kwargs):
    return TripleConstraint(
        predicate=IRI(EX + local),
        constraint=NodeConstraint(values=_values(*lexicals)),
        **kwargs,
    )


def _lexicals(tc):
    return [v.lexical for v in tc.constraint.values]


def test_union_values_is_ordered_and_deduplicated():
    merged = union_values(_values("a", "b"), _values("b", "c"))
    assert [v.lexical for v in merged] == ["a", "b", "c"]


def test_value_sets_are_unioned():
    merged = merge_duplicate_properties([_enum_tc("p", "a", "b"), _enum_tc("p", "b", "c")])
    assert len(merged) == 1
    assert _lexicals(merged[0]) == ["a", "b", "c"]


def test_later_constraint_wins_without_two_value_sets():
    later = TripleConstraint(
        predicate=IRI(EX + "p"),
        constraint=NodeConstraint(datatype=IRI(XSD + "string")),
    )
    merged = merge_duplicate_properties([_enum_tc("p", "a"), later])
    assert merged == [later]


def test_merged_constraint_keeps_later_cardinality():
    merged = merge_duplicate_properties([
        _enum_tc("p", "a"),
        _enum_tc("p", "b", cardinality=Cardinality(0, 1)),
    ])
    assert merged[0].cardinality == Cardinality(0, 1)


def test_other_expressions_keep_their_order():
    ref = ShapeRef(IRI(EX + "Base"))
    merged = merge_duplicate_properties([
        _enum_tc("p", "a"), _enum_tc("q", "x"), ref, _enum_tc("p", "b"),
    ])
    assert [getattr(e, "predicate", None) for e in merged] == [
        IRI(EX + "q"), None, IRI(EX + "p"),
    ]
    assert merged[1] is ref


def test_input_is_not_mutated():
    first = _enum_tc("p", "a", "b")
    merge_duplicate_properties([first, _enum_tc("p", "c")])
    assert _lexicals(first) == ["a", "b"]


def test_shape_expression_pre_pass():
    expr = EachOf([_enum_tc("p", "a"), _enum_tc("p", "b")])
    merged = merge_shape_expression(expr)
    assert len(merged.expressions) == 1
    assert len(expr.expressions) == 2
    assert merge_shape_expression(None) is None


def test_duplicate_predicate_yields_one_property(emitter):
    """Two value sets on the same predicate: one property, one merged enum."""
    shape = Shape(
        name=IRI(EX + "S"),
        expression=EachOf([_enum_tc("p", "a", "b"), _enum_tc("p", "b", "c")]),
    )
    artifact = ShapeAssembler(emitter).assemble(shape, PrefixMap([Prefix("ex", EX)]))
    assert artifact.declaration == (
        "export type S = {\n  p: (PType.A | PType.B | PType.C);\n};\n"
    )
    assert [v.lexical for v in artifact.inline_enums["PType"]] == ["a", "b", "c"]


def test_nested_sequences_are_flattened_and_merged():
    expr = EachOf([
        _enum_tc("a", "x"),
        EachOf([_enum_tc("a", "y"), EachOf([_enum_tc("b", "z")])]),
    ])
    merged = merge_shape_expression(expr)
    assert [tc.predicate for tc in merged.expressions] == [IRI(EX + "a"), IRI(EX + "b")]
    assert _lexicals(merged.expressions[0]) == ["x", "y"]


def test_sequences_inside_a_nested_choice_are_merged_on_their_own():
    expr = EachOf([
        _enum_tc("a", "x"),
        OneOf([EachOf([_enum_tc("c", "1"), _enum_tc("c", "2")]), _enum_tc("a", "y")]),
    ])
    merged = merge_shape_expression(expr)
    assert _lexicals(merged.expressions[0]) == ["x"]
    choice = merged.expressions[1]
    assert [_lexicals(tc) for tc in choice.expressions[0].expressions] == [["1", "2"]]
    assert _lexicals(choice.expressions[1]) == ["y"]


def test_duplicate_in_parenthesized_group_yields_one_property():
    schema = parse_shexc(
        "PREFIX ex: <http://example.org/>\n"
        "ex:S { ex:a [ex:x] ; ( ex:a [ex:y] ; ex:b IRI ) }"
    )
    declarations = generate(schema)
    assert declarations == [
        'export enum AType {\n  X = "http://example.org/x",\n  Y = "http://example.org/y",\n}\n',
        "export type S = {\n  a: (AType.X | AType.Y);\n  b: string | NamedNode;\n};\n",
    ]
