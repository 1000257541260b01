"""shexts-py: generate TypeScript declarations from ShEx schemas."""
__version__ = "0.1.0"

from shexts_py.schema.common import IRI, Cardinality, NodeKind, Prefix
from shexts_py.schema.shex import EnumShape, Shape, ShExSchema, TripleConstraint

from shexts_py.parser.shexc_parser import ShExParseError, parse_shexc, parse_shexc_file
from shexts_py.parser.shexj_parser import parse_shexj, parse_shexj_file

from shexts_py.config import GeneratorConfig
from shexts_py.errors import (
    MissingExpectedField,
    NameSynthesisError,
    ShExTypesError,
    UnresolvedPrefixError,
    UnsupportedExpressionKind,
)
from shexts_py.generator.driver import SchemaDriver, generate, generate_module
from shexts_py.naming import normalize_url

__all__ = [
    # Schema
    "IRI", "Cardinality", "NodeKind", "Prefix",
    "EnumShape", "Shape", "ShExSchema", "TripleConstraint",
    # Parsers
    "ShExParseError",
    "parse_shexc", "parse_shexc_file",
    "parse_shexj", "parse_shexj_file",
    # Generation
    "GeneratorConfig", "SchemaDriver", "generate", "generate_module",
    "normalize_url",
    # Errors
    "ShExTypesError", "UnsupportedExpressionKind", "NameSynthesisError",
    "UnresolvedPrefixError", "MissingExpectedField",
]
