"""Tests for IRI -> identifier normalization and name disambiguation."""
import pytest

from shexts_py.errors import UnresolvedPrefixError
from shexts_py.naming import (
    RDF_TYPE,
    PrefixMap,
    camel_case,
    enum_member_names,
    local_name,
    normalize_url,
    predicate_to_name_context,
    property_names,
    to_identifier,
)
from shexts_py.schema.common import IRI, Literal, Prefix
from shexts_py.schema.shex import ValueSetValue

EX = "http://example.org/"
FOAF = "http://xmlns.com/foaf/0.1/"
SCHEMA = "http://schema.org/"


# ── Local names and casing ────────────────────────────────────────


def test_local_name_prefers_fragment():
    assert local_name("http://example.org/ns#Thing") == "Thing"


def test_local_name_last_segment():
    assert local_name("http://example.org/a/b/c") == "c"
    assert local_name("http://example.org/a/") == "a"
    assert local_name("urn:isbn:123") == "123"


def test_local_name_strips_extension():
    assert local_name("http://example.org/data/file.ttl") == "file"


def test_camel_case():
    assert camel_case("has_part") == "hasPart"
    assert camel_case("first name") == "firstName"
    assert camel_case("FOO bar") == "fooBar"
    assert camel_case("---") == ""


def test_to_identifier_edge_cases():
    assert to_identifier("") == "_"
    assert to_identifier("1st") == "_1st"
    assert to_identifier("in progress", True) == "InProgress"


# ── normalize_url ─────────────────────────────────────────────────


def test_normalize_url_property_and_type_names():
    assert normalize_url(EX + "knows") == "knows"
    assert normalize_url(EX + "Person", True) == "Person"
    assert normalize_url(EX + "ns#has_part") == "hasPart"


def test_normalize_url_leading_digit():
    assert normalize_url(EX + "123abc") == "_123abc"


def test_normalize_url_disambiguation_uses_prefix():
    prefixes = {"foaf": FOAF, "schema": SCHEMA}
    assert normalize_url(FOAF + "name", False, "name", prefixes) == "foafName"
    assert normalize_url(SCHEMA + "name", False, "name", prefixes) == "schemaName"


def test_normalize_url_disambiguation_is_case_insensitive():
    assert normalize_url(EX + "Name", True, "name", {"ex": EX}) == "ExName"


def test_normalize_url_disambiguation_without_prefix_uses_namespace():
    assert normalize_url(EX + "Active", True, "Active") == "ExampleActive"


def test_normalize_url_ignores_unrelated_hint():
    assert normalize_url(FOAF + "name", False, "title", {"foaf": FOAF}) == "name"


def test_normalize_url_is_deterministic():
    first = normalize_url(FOAF + "name", False, "name", {"foaf": FOAF})
    assert all(
        normalize_url(FOAF + "name", False, "name", {"foaf": FOAF}) == first
        for _ in range(5)
    )


# ── PrefixMap ─────────────────────────────────────────────────────


def test_prefix_map_prefers_most_specific_namespace():
    pm = PrefixMap([Prefix("ex", EX), Prefix("exv", EX + "vocab/")])
    assert pm.split(EX + "vocab/term") == ("exv", "term")
    assert pm.split(EX + "term") == ("ex", "term")
    assert pm.split("http://other.org/x") is None
    assert pm.prefix_for(EX + "vocab/term") == "exv"
    assert pm.prefix_for("http://other.org/x") is None


def test_prefix_map_coerce():
    pm = PrefixMap.coerce({"ex": EX})
    assert pm.split(EX + "a") == ("ex", "a")
    assert PrefixMap.coerce(pm) is pm
    assert PrefixMap.coerce(None).split(EX + "a") is None


# ── Property and enum member names ────────────────────────────────


def test_property_names_disambiguate_colliding_predicates(prefixes):
    names = property_names(
        [IRI(FOAF + "name"), IRI(SCHEMA + "name"), IRI(EX + "age")], prefixes
    )
    assert names == {
        FOAF + "name": "foafName",
        SCHEMA + "name": "schemaName",
        EX + "age": "age",
    }


def test_property_names_repeated_predicate_named_once(prefixes):
    names = property_names([IRI(EX + "age"), IRI(EX + "age")], prefixes)
    assert names == {EX + "age": "age"}


def test_enum_member_names_prefix_disambiguation(prefixes):
    values = [ValueSetValue(IRI(EX + "Active")), ValueSetValue(IRI(SCHEMA + "Active"))]
    assert enum_member_names(values, prefixes) == {
        EX + "Active": "ExActive",
        SCHEMA + "Active": "SchemaActive",
    }


def test_enum_member_names_numeric_fallback(prefixes):
    values = [ValueSetValue(Literal("a b")), ValueSetValue(Literal("a-b"))]
    names = enum_member_names(values, prefixes)
    assert names == {"a b": "AB", "a-b": "AB2"}
    assert len(set(names.values())) == len(names)


def test_enum_member_names_duplicate_values_collapse(prefixes):
    values = [ValueSetValue(Literal("red")), ValueSetValue(Literal("red"))]
    assert enum_member_names(values, prefixes) == {"red": "Red"}


# ── Name contexts ─────────────────────────────────────────────────


def test_name_context_entry(prefixes):
    assert predicate_to_name_context(IRI(FOAF + "name"), "foafName", prefixes) == (
        "foafName", "foaf:name",
    )


def test_name_context_rdf_type_without_prefix(prefixes):
    assert predicate_to_name_context(RDF_TYPE, "type", prefixes) == ("type", "rdf:type")


def test_name_context_unknown_prefix(prefixes):
    with pytest.raises(UnresolvedPrefixError):
        predicate_to_name_context(IRI("http://other.org/p"), "p", prefixes)
