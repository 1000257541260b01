"""Walk a shape's triple expression and build its declaration fragments.

Each node yields a Fragment with two surfaces:

* ``generated``, the required surface: members, unions and inclusions that make
  up the shape's own object type;
* ``extra``, the open surface: members on EXTRA predicates and choices nested
  in a sequence. The assembler intersects it with the required surface.

Besides the text, a fragment carries what its subtree referenced: shapes,
inline enums, name context entries, and whether it holds an rdf:type value set.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from shexts_py.errors import UnsupportedExpressionKind
from shexts_py.generator.emitter import Emitter
from shexts_py.generator.merge import union_values
from shexts_py.generator.synthesizer import synthesize_value
from shexts_py.naming import (
    RDF_TYPE,
    RDFS_COMMENT,
    PrefixMap,
    normalize_url,
    predicate_to_name_context,
)
from shexts_py.schema.common import IRI, Literal
from shexts_py.schema.shex import (
    Annotation,
    EachOf,
    OneOf,
    Shape,
    ShapeRef,
    TripleConstraint,
    TripleExpression,
    ValueSetValue,
)


@dataclass(frozen=True)
class WalkContext:
    """Everything a walk needs to know about the shape being generated.

    Built once per shape and never mutated; nested shapes get their own.
    """
    shape_id: Optional[IRI]
    prefixes: PrefixMap
    extra: frozenset[str] = frozenset()
    property_names: dict[str, str] = field(default_factory=dict)
    # enum name -> lexical value -> member, fixed once the whole schema is known
    known_enums: dict[str, dict[str, str]] = field(default_factory=dict)

    def property_name(self, predicate: IRI) -> str:
        name = self.property_names.get(predicate.value)
        return name if name is not None else normalize_url(predicate.value)


@dataclass
class Fragment:
    generated: str = ""
    extra: str = ""
    type_value: str = ""
    typed: bool = False
    members: list[str] = field(default_factory=list)
    includes: list[str] = field(default_factory=list)
    child_shapes: list[str] = field(default_factory=list)
    inline_enums: dict[str, list[ValueSetValue]] = field(default_factory=dict)
    name_context: dict[str, str] = field(default_factory=dict)

    def absorb(self, other: Fragment) -> None:
        """Take over the metadata of a child fragment."""
        self.typed = self.typed or other.typed
        for iri in other.child_shapes:
            if iri not in self.child_shapes:
                self.child_shapes.append(iri)
        for name, values in other.inline_enums.items():
            self.inline_enums[name] = union_values(self.inline_enums.get(name, []), values)
        self.name_context.update(other.name_context)


def comment_from_annotations(annotations: list[Annotation]) -> str:
    for annotation in annotations:
        if annotation.predicate == RDFS_COMMENT:
            obj = annotation.object
            text = obj.value if isinstance(obj, (IRI, Literal)) else str(obj)
            return " ".join(text.split())
    return ""


class ExpressionWalker:
    """Recursive descent over EachOf / OneOf / TripleConstraint / ShapeRef."""

    def __init__(
        self,
        emitter: Emitter,
        compose_shape: Callable[[Shape, WalkContext], Fragment],
    ):
        self.emitter = emitter
        self.compose_shape = compose_shape

    def walk(self, node: TripleExpression, context: WalkContext) -> Fragment:
        if isinstance(node, TripleConstraint):
            return self.walk_triple_constraint(node, context)
        if isinstance(node, OneOf):
            return self.walk_one_of(node, context)
        if isinstance(node, EachOf):
            return self.walk_each_of(node, context)
        if isinstance(node, ShapeRef):
            return self.walk_inclusion(node)
        raise UnsupportedExpressionKind(type(node).__name__)

    def walk_inclusion(self, ref: ShapeRef) -> Fragment:
        reference = self.emitter.render_reference(normalize_url(ref.name.value, True))
        return Fragment(
            generated=reference,
            includes=[reference],
            child_shapes=[ref.name.value],
        )

    def walk_triple_constraint(self, tc: TripleConstraint, context: WalkContext) -> Fragment:
        value = synthesize_value(
            tc.constraint, context, tc.predicate, self.emitter, self.compose_shape
        )
        type_text = value.type_text
        if tc.cardinality.is_multiple:
            type_text = self.emitter.render_many(type_text)

        name = context.property_name(tc.predicate)
        member = self.emitter.render_member(
            name,
            tc.cardinality.is_required,
            type_text,
            comment_from_annotations(tc.annotations),
        )

        fragment = Fragment(
            type_value=type_text,
            typed=tc.predicate == RDF_TYPE and value.is_value_set,
            child_shapes=value.child_shapes,
            inline_enums=value.inline_enums,
            name_context=value.name_context,
        )
        short_name, curie = predicate_to_name_context(tc.predicate, name, context.prefixes)
        fragment.name_context[short_name] = curie

        # EXTRA predicates are open: any value passes, so they stay out of the
        # required surface unless they pin the value down to a set.
        if tc.predicate.value in context.extra and not value.is_value_set:
            fragment.extra = member
        else:
            fragment.generated = member
            fragment.members = [member]
        return fragment

    def walk_one_of(self, expr: OneOf, context: WalkContext) -> Fragment:
        fragment = Fragment()
        alternatives: list[str] = []
        extras: list[str] = []
        for child in expr.expressions:
            visited = self.walk(child, context)
            fragment.absorb(visited)
            if isinstance(child, TripleConstraint):
                if visited.generated:
                    alternatives.append(self.emitter.render_object([visited.generated]))
                if visited.extra:
                    extras.append(self.emitter.render_object([visited.extra]))
                continue
            if visited.generated:
                alternatives.append(visited.generated)
            if visited.extra:
                extras.append(visited.extra)

        if alternatives:
            fragment.generated = self.emitter.render_choice(alternatives)
        if extras:
            fragment.extra = self.emitter.render_intersection(extras)
        return fragment

    def walk_each_of(self, expr: EachOf, context: WalkContext) -> Fragment:
        fragment = Fragment()
        extras: list[str] = []
        for child in expr.expressions:
            visited = self.walk(child, context)
            fragment.absorb(visited)
            if isinstance(child, TripleConstraint):
                fragment.members.extend(visited.members)
                if visited.extra:
                    extras.append(self.emitter.render_object([visited.extra]))
            elif isinstance(child, EachOf):
                fragment.members.extend(visited.members)
                fragment.includes.extend(visited.includes)
                if visited.extra:
                    extras.append(visited.extra)
            elif isinstance(child, OneOf):
                # A choice inside a sequence is not part of the required
                # object type: its union joins the open surface.
                if visited.generated:
                    extras.append(visited.generated)
                if visited.extra:
                    extras.append(visited.extra)
            else:
                fragment.includes.extend(visited.includes)

        parts = list(fragment.includes)
        if fragment.members:
            parts.insert(0, self.emitter.render_object(fragment.members))
        if parts:
            fragment.generated = self.emitter.render_intersection(parts)
        if extras:
            fragment.extra = self.emitter.render_intersection(extras)
        return fragment
