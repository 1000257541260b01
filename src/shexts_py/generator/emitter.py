"""Emission strategies: how generated fragments are spelled out.

The walker decides *what* a shape looks like (which members, which unions,
which intersections); an emitter decides how each of those is written. One
walker serves every output flavor.
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence


def _has_top_level(text: str, operators: str) -> bool:
    """True if text contains one of operators outside any bracket pair."""
    depth = 0
    in_string = False
    for i, c in enumerate(text):
        if in_string:
            if c == '"' and text[i - 1] != "\\":
                in_string = False
        elif c == '"':
            in_string = True
        elif c in "({[":
            depth += 1
        elif c in ")}]":
            depth -= 1
        elif depth == 0 and c in operators:
            return True
    return False


class Emitter(ABC):
    """Abstract base class for declaration emitters."""

    name: str = ""

    # Emit a short-name -> curie lookup table per shape
    emits_name_contexts: bool = False

    # Emit the schema source and a runtime shape object per shape
    emits_shape_methods: bool = False

    def __init__(self, indent: int = 2):
        self.indent = " " * indent

    @abstractmethod
    def render_member(self, name: str, required: bool, type_text: str, comment: str = "") -> str:
        """One property of an object type."""

    @abstractmethod
    def render_object(self, members: list[str]) -> str:
        """An object type holding members."""

    @abstractmethod
    def render_choice(self, alternatives: list[str]) -> str:
        """Exactly one of alternatives."""

    @abstractmethod
    def render_intersection(self, parts: list[str]) -> str:
        """All of parts at once."""

    @abstractmethod
    def render_reference(self, name: str) -> str:
        """A reference to another exported declaration."""

    @abstractmethod
    def render_many(self, type_text: str) -> str:
        """A value that may be given once or as a list."""

    @abstractmethod
    def render_enum_access(self, enum: str, member: str) -> str:
        """One member of an enum used as a type."""

    @abstractmethod
    def render_enum_union(self, accesses: list[str]) -> str:
        """A type allowing any of the given enum members."""

    @abstractmethod
    def render_export(self, name: str, text: str) -> str:
        """The exported declaration of a shape."""

    @abstractmethod
    def render_enum(self, name: str, members: Iterable[tuple[str, str]]) -> str:
        """An enum declaration from (member, value) pairs."""

    @abstractmethod
    def render_name_context(self, name: str, entries: dict[str, str]) -> str:
        """A lookup table from short property names to curies."""

    @abstractmethod
    def iri_type(self) -> str:
        """Type of an IRI-valued node."""

    @abstractmethod
    def literal_type(self, base: str) -> str:
        """Type of a literal whose lexical value maps onto base."""

    def render_shex_export(self, name: str, shex: str) -> str:
        """The schema source as a string constant."""
        raise NotImplementedError(f"{type(self).__name__} does not emit the schema source")

    def render_shape_methods(
        self,
        variable: str,
        type_name: str,
        iri: str,
        shex_name: str,
        type_enum: Optional[str] = None,
        child_types: Sequence[str] = (),
    ) -> str:
        """A runtime object validating and building instances of one shape."""
        raise NotImplementedError(f"{type(self).__name__} does not emit shape objects")

    def preamble(self) -> list[str]:
        """Lines a module needs before the declarations."""
        return []


class TypeScriptEmitter(Emitter):
    name = "types"

    def render_member(self, name, required, type_text, comment=""):
        member = f"{name}{'' if required else '?'}: {type_text};"
        if comment:
            member += f" // {comment}"
        return member

    def render_object(self, members):
        if not members:
            return "{}"
        body = "\n".join(
            self.indent + m.replace("\n", "\n" + self.indent) for m in members
        )
        return "{\n" + body + "\n}"

    def render_choice(self, alternatives):
        return " | ".join(alternatives)

    def render_intersection(self, parts):
        if len(parts) == 1:
            return parts[0]
        return " & ".join(
            f"({p})" if _has_top_level(p, "|") else p for p in parts
        )

    def render_reference(self, name):
        return name

    def render_many(self, type_text):
        item = f"({type_text})" if _has_top_level(type_text, "|&") else type_text
        return f"{type_text} | {item}[]"

    def render_enum_access(self, enum, member):
        return f"{enum}.{member}"

    def render_enum_union(self, accesses):
        if len(accesses) == 1:
            return accesses[0]
        return "(" + " | ".join(accesses) + ")"

    def render_export(self, name, text):
        return f"export type {name} = {text};\n"

    def render_enum(self, name, members):
        lines = [
            f"{self.indent}{member} = {json.dumps(value, ensure_ascii=False)},"
            for member, value in members
        ]
        if not lines:
            return f"export enum {name} {{}}\n"
        return f"export enum {name} {{\n" + "\n".join(lines) + "\n}\n"

    def render_name_context(self, name, entries):
        return self.render_enum(f"{name}Context", entries.items())

    def iri_type(self):
        return "string | NamedNode"

    def literal_type(self, base):
        return f"{base} | Literal"

    def preamble(self):
        return ['import { NamedNode, Literal } from "rdflib";\n']


class TypeScriptContextEmitter(TypeScriptEmitter):
    """TypeScript types followed by a name context for every shape."""

    name = "context"
    emits_name_contexts = True


class TypeScriptMethodsEmitter(TypeScriptContextEmitter):
    """Types and name contexts, plus a shex-methods ``Shape`` object per shape.

    The module also carries the ShExC source the objects validate against.
    """

    name = "methods"
    emits_shape_methods = True

    def render_shex_export(self, name, shex):
        escaped = shex.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")
        return f"export const {name}Shex = `\n{escaped}\n`;\n"

    def render_shape_methods(self, variable, type_name, iri, shex_name, type_enum=None, child_types=()):
        lines = [
            f"export const {variable} = new Shape<{type_name}>({{",
            f"id: {json.dumps(iri, ensure_ascii=False)},",
            f"shape: {shex_name}Shex,",
            f"context: {type_name}Context,",
        ]
        if type_enum:
            lines.append(f"type: {type_enum},")
        if child_types:
            lines.append("childContexts: [" + ", ".join(f"{c}Context" for c in child_types) + "],")
        body = "\n".join(self.indent + line for line in lines[1:])
        return f"{lines[0]}\n{body}\n}});\n"

    def preamble(self):
        return super().preamble() + ['import { Shape } from "shex-methods";\n']


EMITTERS: dict[str, type[Emitter]] = {
    TypeScriptEmitter.name: TypeScriptEmitter,
    TypeScriptContextEmitter.name: TypeScriptContextEmitter,
    TypeScriptMethodsEmitter.name: TypeScriptMethodsEmitter,
}


def get_emitter(name: str, indent: int = 2) -> Emitter:
    try:
        return EMITTERS[name](indent=indent)
    except KeyError:
        raise ValueError(f"Unknown emitter: {name!r}") from None
