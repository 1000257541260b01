import os

import pytest

from shexts_py.generator.emitter import TypeScriptContextEmitter, TypeScriptEmitter
from shexts_py.naming import PrefixMap
from shexts_py.parser.shexc_parser import parse_shexc_file
from shexts_py.parser.shexj_parser import parse_shexj_file
from shexts_py.schema.common import Prefix

DATA_DIR = os.path.join(os.path.dirname(__file__), "data")

EX = "http://example.org/"


@pytest.fixture
def data_dir():
    return DATA_DIR


@pytest.fixture
def prefixes():
    return PrefixMap([
        Prefix("ex", EX),
        Prefix("xsd", "http://www.w3.org/2001/XMLSchema#"),
        Prefix("foaf", "http://xmlns.com/foaf/0.1/"),
        Prefix("schema", "http://schema.org/"),
    ])


@pytest.fixture
def emitter():
    return TypeScriptEmitter()


@pytest.fixture
def context_emitter():
    return TypeScriptContextEmitter()


@pytest.fixture
def person_schema():
    return parse_shexc_file(os.path.join(DATA_DIR, "person.shex"))


@pytest.fixture
def issue_schema():
    return parse_shexj_file(os.path.join(DATA_DIR, "issue.json"))
