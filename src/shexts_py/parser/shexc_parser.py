"""Parse ShExC compact syntax into the ShEx model.

Handles: PREFIX, BASE, start, shape declarations with EXTRA/CLOSED/EXTENDS,
value-set shape declarations, triple expressions with `;`, `|`, parenthesized
groups and `&` inclusions, triple constraints with inverse `^`, `a`, node
kinds, datatypes, facets, value sets, shape references, nested shapes,
cardinality and `//` annotations.
"""
from __future__ import annotations

import re
from typing import Optional, Union
from urllib.parse import urljoin

from rdflib.namespace import XSD

from shexts_py.naming import RDF_TYPE
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
    'IRI': NodeKind.IRI,
    'LITERAL': NodeKind.LITERAL,
    'BNODE': NodeKind.BLANK_NODE,
    'NONLITERAL': NodeKind.NON_LITERAL,
}

# facet keyword -> (NodeConstraint attribute, number type)
FACETS = {
    'LENGTH': ('length', int),
    'MINLENGTH': ('min_length', int),
    'MAXLENGTH': ('max_length', int),
    'MININCLUSIVE': ('min_inclusive', float),
    'MINEXCLUSIVE': ('min_exclusive', float),
    'MAXINCLUSIVE': ('max_inclusive', float),
    'MAXEXCLUSIVE': ('max_exclusive', float),
    'TOTALDIGITS': ('total_digits', int),
    'FRACTIONDIGITS': ('fraction_digits', int),
}

_NUMBER_RE = re.compile(r'[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?')


class ShExParseError(Exception):
    pass


class ShExCTokenizer:
    """Simple tokenizer for ShExC format."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.base: Optional[str] = None

    def _skip_ws_and_comments(self):
        while self.pos < len(self.text):
            if self.text[self.pos] in ' \t\n\r':
                self.pos += 1
            elif self.text[self.pos] == '#':
                # Skip to end of line
                while self.pos < len(self.text) and self.text[self.pos] != '\n':
                    self.pos += 1
            else:
                break

    def peek(self) -> Optional[str]:
        self._skip_ws_and_comments()
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def remaining(self) -> str:
        self._skip_ws_and_comments()
        return self.text[self.pos:]

    def at_end(self) -> bool:
        self._skip_ws_and_comments()
        return self.pos >= len(self.text)

    def error(self, message: str) -> ShExParseError:
        context = self.text[max(0, self.pos - 20):self.pos + 30]
        return ShExParseError(f"{message} at pos {self.pos}, got: ...{context}...")

    def expect(self, s: str):
        self._skip_ws_and_comments()
        if not self.text[self.pos:].startswith(s):
            raise self.error(f"Expected {s!r}")
        self.pos += len(s)

    def try_consume(self, s: str) -> bool:
        self._skip_ws_and_comments()
        if self.text[self.pos:].startswith(s):
            self.pos += len(s)
            return True
        return False

    def read_iri_ref(self) -> str:
        """Read <...> IRI reference."""
        self._skip_ws_and_comments()
        if self.peek() != '<':
            raise self.error("Expected '<'")
        end = self.text.find('>', self.pos)
        if end < 0:
            raise self.error("Unterminated IRI")
        iri = self.text[self.pos + 1:end]
        self.pos = end + 1
        if self.base and ':' not in iri:
            return urljoin(self.base, iri)
        return iri

    def read_prefixed_name(self, prefixes: dict[str, str]) -> str:
        """Read prefix:local and resolve to full IRI."""
        self._skip_ws_and_comments()
        m = re.match(r'([a-zA-Z_][\w.-]*)?:([\w.-]*)', self.text[self.pos:])
        if not m:
            raise self.error("Expected prefixed name")
        prefix = m.group(1) or ''
        local = m.group(2).rstrip('.')
        if prefix not in prefixes:
            raise self.error(f"Unknown prefix {prefix!r}")
        self.pos += m.start(2) + len(local)
        return prefixes[prefix] + local

    def read_iri_or_prefixed(self, prefixes: dict[str, str]) -> str:
        """Read either <IRI> or prefix:local."""
        if self.peek() == '<':
            return self.read_iri_ref()
        return self.read_prefixed_name(prefixes)

    def at_prefixed_name(self) -> bool:
        return re.match(r'([a-zA-Z_][\w.-]*)?:', self.remaining()) is not None

    def read_keyword(self) -> Optional[str]:
        """Peek an uppercase keyword like EXTRA, CLOSED, IRI, etc."""
        m = re.match(r'[A-Z][A-Za-z_]*(?![\w:])', self.remaining())
        if m:
            return m.group(0)
        return None

    def consume_keyword(self, kw: str):
        if self.read_keyword() != kw:
            raise self.error(f"Expected keyword {kw!r}")
        self.pos += len(kw)


def _parse_cardinality(tok: ShExCTokenizer) -> Cardinality:
    """Parse optional cardinality: ?, *, +, {m,n}, {m,}, {m}."""
    if tok.at_end():
        return Cardinality()

    c = tok.peek()
    if c == '?':
        tok.pos += 1
        return Cardinality(min=0, max=1)
    elif c == '*':
        tok.pos += 1
        return Cardinality(min=0, max=UNBOUNDED)
    elif c == '+':
        tok.pos += 1
        return Cardinality(min=1, max=UNBOUNDED)
    elif c == '{' and re.match(r'\{\s*\d', tok.remaining()):
        m = re.match(r'\{\s*(\d+)\s*(,\s*(\d+|\*)?\s*)?\}', tok.remaining())
        if not m:
            raise tok.error("Malformed cardinality")
        tok.pos += m.end()
        mn = int(m.group(1))
        if m.group(2) is None:
            return Cardinality(min=mn, max=mn)  # {n} means exactly n
        if m.group(3) in (None, '*'):
            return Cardinality(min=mn, max=UNBOUNDED)
        return Cardinality(min=mn, max=int(m.group(3)))
    return Cardinality()  # default


def _parse_literal(tok: ShExCTokenizer, prefixes: dict[str, str]) -> Literal:
    """Parse a literal value: "string"^^datatype, "string"@lang, number or boolean."""
    tok._skip_ws_and_comments()
    quote = tok.text[tok.pos]
    if quote not in '"\'':
        remaining = tok.remaining()
        for word in ('true', 'false'):
            if re.match(word + r'(?!\w)', remaining):
                tok.pos += len(word)
                return Literal(value=word, datatype=IRI(str(XSD.boolean)))
        m = _NUMBER_RE.match(remaining)
        if not m:
            raise tok.error("Expected literal")
        tok.pos += m.end()
        kind = "double" if m.group(2) else "decimal" if '.' in m.group(1) else "integer"
        return Literal(value=m.group(0), datatype=IRI(str(XSD[kind])))

    tok.pos += 1
    start = tok.pos
    while tok.pos < len(tok.text) and tok.text[tok.pos] != quote:
        if tok.text[tok.pos] == '\\':
            tok.pos += 1  # skip escaped char
        tok.pos += 1
    value = tok.text[start:tok.pos]
    tok.pos += 1  # skip closing quote

    datatype = None
    language = None
    if tok.text[tok.pos:tok.pos + 2] == '^^':
        tok.pos += 2
        datatype = IRI(tok.read_iri_or_prefixed(prefixes))
    elif tok.text[tok.pos:tok.pos + 1] == '@':
        tok.pos += 1
        m = re.match(r'[a-zA-Z]+(-[a-zA-Z0-9]+)*', tok.text[tok.pos:])
        if m:
            language = m.group(0)
            tok.pos += m.end()

    return Literal(value=value, datatype=datatype, language=language)


def _parse_value_set(
    tok: ShExCTokenizer, prefixes: dict[str, str]
) -> list[ValueSetValue]:
    """Parse a value set: [ v1 v2 ... ] or [ <iri>~ ]."""
    tok.expect('[')
    values = []
    while not tok.try_consume(']'):
        c = tok.peek()
        if c is None:
            raise tok.error("Unterminated value set")
        if c == '<' or tok.at_prefixed_name():
            iri = tok.read_iri_or_prefixed(prefixes)
            if tok.text[tok.pos:tok.pos + 1] == '~':
                tok.pos += 1
                values.append(ValueSetValue(value=IriStem(stem=iri)))
            else:
                values.append(ValueSetValue(value=IRI(iri)))
        else:
            values.append(ValueSetValue(value=_parse_literal(tok, prefixes)))
    return values


def _parse_facets(tok: ShExCTokenizer, nc: NodeConstraint) -> NodeConstraint:
    """Parse string and numeric facets following a node constraint."""
    while True:
        if tok.peek() == '/' and not tok.remaining().startswith('//'):
            m = re.match(r'/((?:[^/\\\n]|\\.)*)/([smix]*)', tok.remaining())
            if not m:
                raise tok.error("Malformed pattern")
            tok.pos += m.end()
            nc.pattern = m.group(1)
            nc.flags = m.group(2) or None
            continue
        kw = tok.read_keyword()
        if kw not in FACETS:
            return nc
        tok.consume_keyword(kw)
        m = _NUMBER_RE.match(tok.remaining())
        if not m:
            raise tok.error(f"Expected number after {kw}")
        tok.pos += m.end()
        attr, kind = FACETS[kw]
        setattr(nc, attr, kind(float(m.group(0))) if kind is int else kind(m.group(0)))


def _parse_annotations(tok: ShExCTokenizer, prefixes: dict[str, str]) -> list[Annotation]:
    """Parse `// predicate object` annotations."""
    annotations = []
    while tok.try_consume('//'):
        predicate = _parse_predicate(tok, prefixes)
        c = tok.peek()
        if c == '<' or (c is not None and tok.at_prefixed_name()):
            obj: Union[IRI, Literal] = IRI(tok.read_iri_or_prefixed(prefixes))
        else:
            obj = _parse_literal(tok, prefixes)
        annotations.append(Annotation(predicate=predicate, object=obj))
    return annotations


def _parse_predicate(tok: ShExCTokenizer, prefixes: dict[str, str]) -> IRI:
    if re.match(r'a(?=[\s<@\[{.(])', tok.remaining()):
        tok.pos += 1
        return RDF_TYPE
    return IRI(tok.read_iri_or_prefixed(prefixes))


def _parse_value_expr(
    tok: ShExCTokenizer, prefixes: dict[str, str]
) -> Union[NodeConstraint, ShapeRef, Shape, None]:
    """Parse the constraint after a predicate."""
    c = tok.peek()

    # Shape reference: @<ShapeName>
    if c == '@':
        tok.pos += 1
        return ShapeRef(name=IRI(tok.read_iri_or_prefixed(prefixes)))

    # Value set: [ ... ]
    if c == '[':
        return _parse_facets(tok, NodeConstraint(values=_parse_value_set(tok, prefixes)))

    # Dot (wildcard / no constraint)
    if c == '.':
        tok.pos += 1
        return None

    kw = tok.read_keyword()
    if c == '{' or kw in ('CLOSED', 'EXTRA', 'EXTENDS'):
        return _parse_shape_definition(tok, prefixes, name=None)

    if kw in NODE_KINDS:
        tok.consume_keyword(kw)
        return _parse_facets(tok, NodeConstraint(node_kind=NODE_KINDS[kw]))

    if c == '/' or kw in FACETS:
        return _parse_facets(tok, NodeConstraint())

    # Datatype: prefix:local or <iri>
    return _parse_facets(tok, NodeConstraint(datatype=IRI(tok.read_iri_or_prefixed(prefixes))))


def _parse_triple_constraint(
    tok: ShExCTokenizer, prefixes: dict[str, str]
) -> TripleConstraint:
    """Parse a single triple constraint."""
    inverse = tok.try_consume('^')
    predicate = _parse_predicate(tok, prefixes)
    constraint = _parse_value_expr(tok, prefixes)
    card = _parse_cardinality(tok)
    annotations = _parse_annotations(tok, prefixes)

    return TripleConstraint(
        predicate=predicate,
        constraint=constraint,
        cardinality=card,
        inverse=inverse,
        annotations=annotations,
    )


def _parse_unary(tok: ShExCTokenizer, prefixes: dict[str, str]) -> TripleExpression:
    c = tok.peek()
    if c == '(':
        tok.pos += 1
        expr = _parse_triple_expression(tok, prefixes)
        tok.expect(')')
        card = _parse_cardinality(tok)
        if isinstance(expr, (EachOf, OneOf)):
            expr.cardinality = card
        elif isinstance(expr, TripleConstraint) and card.min is not None:
            expr.cardinality = card
        _parse_annotations(tok, prefixes)
        return expr
    if c == '&':
        tok.pos += 1
        return ShapeRef(name=IRI(tok.read_iri_or_prefixed(prefixes)))
    return _parse_triple_constraint(tok, prefixes)


def _parse_group(tok: ShExCTokenizer, prefixes: dict[str, str]) -> TripleExpression:
    """Parse `;`-separated expressions into an EachOf."""
    items = [_parse_unary(tok, prefixes)]
    while tok.try_consume(';'):
        if tok.peek() in ('}', ')', '|', None):
            break
        items.append(_parse_unary(tok, prefixes))
    if len(items) == 1:
        return items[0]
    return EachOf(expressions=items)


def _parse_triple_expression(tok: ShExCTokenizer, prefixes: dict[str, str]) -> TripleExpression:
    """Parse `|`-separated groups into a OneOf."""
    alternatives = [_parse_group(tok, prefixes)]
    while tok.try_consume('|'):
        alternatives.append(_parse_group(tok, prefixes))
    if len(alternatives) == 1:
        return alternatives[0]
    return OneOf(expressions=alternatives)


def _parse_shape_definition(
    tok: ShExCTokenizer, prefixes: dict[str, str], name: Optional[IRI]
) -> Shape:
    """Parse EXTRA/CLOSED/EXTENDS modifiers and a { ... } body."""
    extra_preds: list[IRI] = []
    extends: list[IRI] = []
    closed = False
    while True:
        kw = tok.read_keyword()
        if kw == 'EXTRA':
            tok.consume_keyword(kw)
            # Read predicates until { or another modifier
            while tok.peek() not in ('{', None) and tok.read_keyword() is None:
                extra_preds.append(_parse_predicate(tok, prefixes))
        elif kw == 'CLOSED':
            tok.consume_keyword(kw)
            closed = True
        elif kw == 'EXTENDS':
            tok.consume_keyword(kw)
            while tok.try_consume('@'):
                extends.append(IRI(tok.read_iri_or_prefixed(prefixes)))
        else:
            break

    tok.expect('{')
    expr = None
    if not tok.try_consume('}'):
        expr = _parse_triple_expression(tok, prefixes)
        tok.expect('}')

    return Shape(
        name=name,
        expression=expr,
        closed=closed,
        extra=extra_preds,
        extends=extends,
        annotations=_parse_annotations(tok, prefixes),
    )


def _parse_shape_decl(tok: ShExCTokenizer, prefixes: dict[str, str]) -> ShapeDecl:
    name = IRI(tok.read_iri_or_prefixed(prefixes))
    if tok.peek() == '[':
        return EnumShape(name=name, values=_parse_value_set(tok, prefixes))
    if tok.read_keyword() in NODE_KINDS or tok.peek() in ('@', '<', '.'):
        raise tok.error(f"Unsupported shape expression for {name.value!r}")
    return _parse_shape_definition(tok, prefixes, name)


def parse_shexc(source: str) -> ShExSchema:
    """Parse a ShExC string or file path into ShExSchema.

    Args:
        source: File path or ShExC string.

    Returns:
        ShExSchema with parsed shapes and prefixes.
    """
    # Try to read as file
    try:
        with open(source, 'r', encoding='utf-8') as f:
            text = f.read()
    except (FileNotFoundError, OSError):
        text = source

    tok = ShExCTokenizer(text)
    prefixes_dict: dict[str, str] = {}
    prefix_list: list[Prefix] = []
    start: Optional[IRI] = None
    shapes: list[ShapeDecl] = []

    while not tok.at_end():
        kw = tok.read_keyword()

        if kw == 'PREFIX':
            tok.consume_keyword('PREFIX')
            m = re.match(r'([a-zA-Z_][\w.-]*)?:', tok.remaining())
            if not m:
                raise tok.error("Expected prefix name")
            pname = m.group(1) or ''
            tok.pos += m.end()
            piri = tok.read_iri_ref()
            prefixes_dict[pname] = piri
            prefix_list.append(Prefix(name=pname, iri=piri))
            continue

        if kw == 'BASE':
            tok.consume_keyword('BASE')
            tok.base = tok.read_iri_ref()
            continue

        # start = @<Shape>
        if re.match(r'start\s*=', tok.remaining()):
            tok.expect('start')
            tok.expect('=')
            tok.expect('@')
            start = IRI(tok.read_iri_or_prefixed(prefixes_dict))
            continue

        # Shape definition: <Name> EXTRA/CLOSED? { ... } or <Name> [ ... ]
        if tok.peek() == '<' or tok.at_prefixed_name():
            shapes.append(_parse_shape_decl(tok, prefixes_dict))
            continue

        raise tok.error("Unexpected token")

    return ShExSchema(shapes=shapes, prefixes=prefix_list, start=start)


def parse_shexc_file(filepath: str) -> ShExSchema:
    """Parse a ShExC file from a file path."""
    with open(filepath, 'r', encoding='utf-8') as f:
        return parse_shexc(f.read())
