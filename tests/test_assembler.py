"""Tests for assembling single shapes into exported type declarations."""
import pytest

from shexts_py.errors import MissingExpectedField, UnresolvedPrefixError
from shexts_py.generator.assembler import ShapeAssembler, iter_triple_constraints
from shexts_py.naming import RDF_TYPE, PrefixMap
from shexts_py.schema.common import IRI, Cardinality, Literal, NodeKind
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
FOAF = "http://xmlns.com/foaf/0.1/"
SCHEMA = "http://schema.org/"


def _tc(predicate, datatype="string", **kwargs):
    return TripleConstraint(
        predicate=IRI(predicate),
        constraint=NodeConstraint(datatype=IRI(XSD + datatype)),
        **kwargs,
    )


def _assemble(shape, prefixes, emitter):
    return ShapeAssembler(emitter).assemble(shape, prefixes)


def test_iri_property_and_optional_enum(prefixes, emitter):
    shape = Shape(
        name=IRI(EX + "Device"),
        expression=EachOf([
            TripleConstraint(
                predicate=IRI(EX + "link"),
                constraint=NodeConstraint(node_kind=NodeKind.IRI),
            ),
            TripleConstraint(
                predicate=IRI(EX + "mode"),
                constraint=NodeConstraint(values=[
                    ValueSetValue(Literal("on")), ValueSetValue(Literal("off")),
                ]),
                cardinality=Cardinality(0, 1),
            ),
        ]),
    )
    artifact = _assemble(shape, prefixes, emitter)
    assert artifact.exported_name == "Device"
    assert artifact.declaration == (
        "export type Device = {\n"
        "  link: string | NamedNode;\n"
        "  mode?: (ModeType.On | ModeType.Off);\n"
        "};\n"
    )
    assert list(artifact.inline_enums) == ["ModeType"]


def test_single_top_level_constraint_is_wrapped(prefixes, emitter):
    shape = Shape(name=IRI(EX + "User"), expression=_tc(EX + "login"))
    artifact = _assemble(shape, prefixes, emitter)
    assert artifact.generated_shape == "{\n  login: string | Literal;\n}"


def test_single_extra_constraint_is_wrapped(prefixes, emitter):
    shape = Shape(name=IRI(EX + "S"), expression=_tc(EX + "tag"), extra=[IRI(EX + "tag")])
    assert _assemble(shape, prefixes, emitter).generated_shape == (
        "{\n  tag: string | Literal;\n}"
    )


def test_empty_shape(prefixes, emitter):
    artifact = _assemble(Shape(name=IRI(EX + "Anything")), prefixes, emitter)
    assert artifact.declaration == "export type Anything = {};\n"


def test_choice_in_sequence_is_intersected(prefixes, emitter):
    shape = Shape(
        name=IRI(EX + "S"),
        expression=EachOf([
            _tc(EX + "a"),
            OneOf([_tc(EX + "b"), _tc(EX + "c", "integer")]),
        ]),
    )
    assert _assemble(shape, prefixes, emitter).generated_shape == (
        "{\n  a: string | Literal;\n}"
        " & ({\n  b: string | Literal;\n} | {\n  c: number | Literal;\n})"
    )


def test_extra_surface_is_intersected(prefixes, emitter):
    shape = Shape(
        name=IRI(EX + "S"),
        expression=EachOf([_tc(EX + "tag"), _tc(EX + "name")]),
        extra=[IRI(EX + "tag")],
    )
    assert _assemble(shape, prefixes, emitter).generated_shape == (
        "{\n  name: string | Literal;\n} & {\n  tag: string | Literal;\n}"
    )


def test_top_level_choice(prefixes, emitter):
    shape = Shape(name=IRI(EX + "S"), expression=OneOf([_tc(EX + "a"), _tc(EX + "b")]))
    assert _assemble(shape, prefixes, emitter).declaration == (
        "export type S = {\n  a: string | Literal;\n} | {\n  b: string | Literal;\n};\n"
    )


def test_extends(prefixes, emitter):
    shape = Shape(
        name=IRI(EX + "Employee"),
        expression=_tc(EX + "salary", "decimal"),
        extends=[IRI(EX + "Person")],
    )
    artifact = _assemble(shape, prefixes, emitter)
    assert artifact.generated_shape == "{\n  salary: number | Literal;\n} & Person"
    assert artifact.child_shapes == [EX + "Person"]


def test_colliding_property_names(prefixes, emitter):
    shape = Shape(
        name=IRI(EX + "Person"),
        expression=EachOf([_tc(FOAF + "name"), _tc(SCHEMA + "name", cardinality=Cardinality(0, 1))]),
    )
    artifact = _assemble(shape, prefixes, emitter)
    assert artifact.generated_shape == (
        "{\n  foafName: string | Literal;\n  schemaName?: string | Literal;\n}"
    )
    assert artifact.name_context == {"foafName": "foaf:name", "schemaName": "schema:name"}


def test_nested_shape_value(prefixes, emitter):
    shape = Shape(
        name=IRI(EX + "Person"),
        expression=TripleConstraint(
            predicate=IRI(EX + "address"),
            constraint=Shape(expression=EachOf([
                _tc(EX + "city"),
                TripleConstraint(predicate=IRI(EX + "country"), constraint=ShapeRef(IRI(EX + "Country"))),
            ])),
        ),
    )
    artifact = _assemble(shape, prefixes, emitter)
    assert artifact.generated_shape == (
        "{\n"
        "  address: {\n"
        "    city: string | Literal;\n"
        "    country: Country;\n"
        "  };\n"
        "}"
    )
    assert artifact.child_shapes == [EX + "Country"]
    assert artifact.name_context == {
        "city": "ex:city", "country": "ex:country", "address": "ex:address",
    }


def test_nested_enum_is_named_after_predicate(prefixes, emitter):
    shape = Shape(
        name=IRI(EX + "Order"),
        expression=TripleConstraint(
            predicate=IRI(EX + "line"),
            constraint=Shape(expression=TripleConstraint(
                predicate=IRI(EX + "unit"),
                constraint=NodeConstraint(values=[ValueSetValue(Literal("kg"))]),
            )),
        ),
    )
    artifact = _assemble(shape, prefixes, emitter)
    assert "unit: UnitType.Kg;" in artifact.generated_shape
    assert list(artifact.inline_enums) == ["UnitType"]


def test_typed_shape(prefixes, emitter):
    shape = Shape(
        name=IRI(EX + "Person"),
        expression=EachOf([
            TripleConstraint(
                predicate=RDF_TYPE,
                constraint=NodeConstraint(values=[ValueSetValue(IRI(EX + "Person"))]),
            ),
            _tc(EX + "name"),
        ]),
    )
    artifact = _assemble(shape, prefixes, emitter)
    assert artifact.typed
    assert artifact.generated_shape.startswith("{\n  type: PersonType.Person;\n")


def test_shape_without_id(prefixes, emitter):
    with pytest.raises(MissingExpectedField):
        _assemble(Shape(expression=_tc(EX + "a")), prefixes, emitter)


def test_unresolved_prefix(emitter):
    shape = Shape(name=IRI(EX + "S"), expression=_tc("http://other.org/p"))
    with pytest.raises(UnresolvedPrefixError):
        _assemble(shape, PrefixMap(), emitter)


def test_iter_triple_constraints_does_not_enter_nested_shapes():
    nested = TripleConstraint(
        predicate=IRI(EX + "address"),
        constraint=Shape(expression=_tc(EX + "city")),
    )
    expr = EachOf([_tc(EX + "a"), OneOf([_tc(EX + "b"), nested])])
    assert [tc.predicate.value for tc in iter_triple_constraints(expr)] == [
        EX + "a", EX + "b", EX + "address",
    ]
