"""Parsers for ShExC (compact syntax) and ShExJ (JSON) schemas."""
from shexts_py.parser.shexc_parser import ShExParseError, parse_shexc, parse_shexc_file
from shexts_py.parser.shexj_parser import parse_shexj, parse_shexj_file, schema_from_dict
