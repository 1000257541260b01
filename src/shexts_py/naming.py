"""Turn IRIs into legal TypeScript identifiers.

Identifiers are built from the local name of an IRI (its fragment, or the last
path segment without extension), camel-cased. When two IRIs collapse onto the
same identifier, the namespace prefix is folded in to tell them apart:

    http://xmlns.com/foaf/0.1/name  -> name  -> foafName
    http://schema.org/name          -> name  -> schemaName
"""
from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, Mapping, Optional, Union

from rdflib.namespace import RDF, RDFS

from shexts_py.errors import UnresolvedPrefixError
from shexts_py.schema.common import IRI, Prefix
from shexts_py.schema.shex import ValueSetValue

RDF_TYPE = IRI(str(RDF.type))
RDFS_COMMENT = IRI(str(RDFS.comment))

_WORD_RE = re.compile(r"[^\W_]+")


class PrefixMap:
    """Manages IRI-to-prefixed-name resolution."""

    def __init__(self, prefixes: Iterable[Prefix] = ()):
        # Sort by longest IRI first to get most specific match
        self.entries = sorted(
            [(p.name, p.iri) for p in prefixes],
            key=lambda x: -len(x[1]),
        )

    @classmethod
    def coerce(cls, prefixes: Union[PrefixMap, Mapping[str, str], None]) -> PrefixMap:
        if isinstance(prefixes, PrefixMap):
            return prefixes
        if prefixes is None:
            return cls()
        return cls(Prefix(name, iri) for name, iri in prefixes.items())

    def split(self, iri: str) -> Optional[tuple[str, str]]:
        """Return (prefix, local) for the most specific matching namespace."""
        for name, prefix_iri in self.entries:
            if iri.startswith(prefix_iri):
                return name, iri[len(prefix_iri):]
        return None

    def prefix_for(self, iri: str) -> Optional[str]:
        match = self.split(iri)
        return match[0] if match else None


def local_name(iri: str) -> str:
    """The fragment of an IRI, or its last path segment without extension."""
    base, _, fragment = iri.partition("#")
    fragment = fragment.lstrip("#")
    if fragment:
        return fragment
    segment = re.split(r"[/:]", base.rstrip("/"))[-1]
    stem, dot, ext = segment.rpartition(".")
    if dot and stem and ext.isalpha():
        return stem
    return segment


def _upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def camel_case(text: str) -> str:
    words = _WORD_RE.findall(text)
    if not words:
        return ""
    head, *tail = words
    head = head.lower() if head.isupper() else head[:1].lower() + head[1:]
    rest = "".join(
        _upper_first(w.lower() if w.isupper() and len(w) > 1 else w) for w in tail
    )
    return head + rest


def _finish(name: str, as_identifier: bool) -> str:
    if not name:
        name = "_"
    elif name[0].isdigit():
        name = "_" + name
    return _upper_first(name) if as_identifier else name


def to_identifier(text: str, as_identifier: bool = False) -> str:
    """Identifier for free text, such as the lexical form of a literal."""
    return _finish(camel_case(text), as_identifier)


def _namespace_qualifier(iri: str, prefixes: PrefixMap) -> str:
    prefix = prefixes.prefix_for(iri)
    if prefix:
        return prefix
    namespace = iri[: len(iri) - len(local_name(iri))].rstrip("#/")
    return local_name(namespace) if namespace else ""


def normalize_url(
    iri: str,
    as_identifier: bool = False,
    disambiguation: Optional[str] = None,
    prefixes: Union[PrefixMap, Mapping[str, str], None] = None,
) -> str:
    """Map an IRI onto a legal identifier.

    Args:
        iri: The IRI to normalize.
        as_identifier: Capitalize the result (type and enum names).
        disambiguation: A name this IRI must not collapse onto. When the
            normalized name equals it, the namespace prefix is prepended.
        prefixes: Prefix table used to find that namespace prefix.

    Returns:
        The identifier. Deterministic for a given set of arguments.
    """
    name = camel_case(local_name(iri))
    if disambiguation and name.lower() == disambiguation.lower():
        qualifier = camel_case(_namespace_qualifier(iri, PrefixMap.coerce(prefixes)))
        if qualifier:
            name = qualifier + _upper_first(name)
    return _finish(name, as_identifier)


def _number_duplicates(names: dict[str, str]) -> dict[str, str]:
    taken: set[str] = set()
    result: dict[str, str] = {}
    for key, name in names.items():
        candidate = name
        n = 2
        while candidate in taken:
            candidate = f"{name}{n}"
            n += 1
        taken.add(candidate)
        result[key] = candidate
    return result


def _distinct_names(
    candidates: dict[str, tuple[str, Optional[str]]],
    as_identifier: bool,
    prefixes: PrefixMap,
) -> dict[str, str]:
    """candidates maps key -> (base name, IRI to disambiguate with or None)."""
    counts = Counter(base for base, _ in candidates.values())
    names: dict[str, str] = {}
    for key, (base, iri) in candidates.items():
        if counts[base] > 1 and iri is not None:
            base = normalize_url(iri, as_identifier, base, prefixes)
        names[key] = base
    return _number_duplicates(names)


def property_names(predicates: Iterable[IRI], prefixes: PrefixMap) -> dict[str, str]:
    """Property name for every predicate of a shape, pairwise distinct."""
    candidates: dict[str, tuple[str, Optional[str]]] = {}
    for predicate in predicates:
        if predicate.value not in candidates:
            candidates[predicate.value] = (normalize_url(predicate.value), predicate.value)
    return _distinct_names(candidates, False, prefixes)


def enum_member_names(values: Iterable[ValueSetValue], prefixes: PrefixMap) -> dict[str, str]:
    """Member name for every value of one enum, keyed by lexical value."""
    candidates: dict[str, tuple[str, Optional[str]]] = {}
    for v in values:
        key = v.lexical
        if key in candidates:
            continue
        if v.is_iri:
            candidates[key] = (normalize_url(key, True), key)
        else:
            candidates[key] = (to_identifier(key, True), None)
    return _distinct_names(candidates, True, prefixes)


def predicate_to_name_context(predicate: IRI, name: str, prefixes: PrefixMap) -> tuple[str, str]:
    """(short name, curie) entry of a shape's name context."""
    match = prefixes.split(predicate.value)
    if match is not None:
        prefix, local = match
        return name, f"{prefix}:{local}"
    if predicate == RDF_TYPE:
        return name, "rdf:type"
    raise UnresolvedPrefixError(predicate.value)
