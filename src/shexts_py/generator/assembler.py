"""Assemble one shape declaration into an exported TypeScript type."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from shexts_py.errors import MissingExpectedField
from shexts_py.generator.emitter import Emitter
from shexts_py.generator.merge import merge_shape_expression
from shexts_py.generator.walker import ExpressionWalker, Fragment, WalkContext
from shexts_py.naming import PrefixMap, normalize_url, property_names
from shexts_py.schema.common import IRI
from shexts_py.schema.shex import (
    EachOf,
    OneOf,
    Shape,
    TripleConstraint,
    TripleExpression,
    ValueSetValue,
)

logger = logging.getLogger(__name__)


@dataclass
class ShapeArtifact:
    iri: IRI
    exported_name: str
    declaration: str
    generated_shape: str
    child_shapes: list[str] = field(default_factory=list)
    typed: bool = False
    inline_enums: dict[str, list[ValueSetValue]] = field(default_factory=dict)
    name_context: dict[str, str] = field(default_factory=dict)


def iter_triple_constraints(expr: Optional[TripleExpression]) -> Iterator[TripleConstraint]:
    """Triple constraints of a shape, not descending into nested shapes."""
    if isinstance(expr, TripleConstraint):
        yield expr
    elif isinstance(expr, (EachOf, OneOf)):
        for sub in expr.expressions:
            yield from iter_triple_constraints(sub)


class ShapeAssembler:
    def __init__(self, emitter: Emitter):
        self.emitter = emitter
        self.walker = ExpressionWalker(emitter, self.compose_shape)

    def context_for(
        self,
        shape: Shape,
        prefixes: PrefixMap,
        known_enums: Optional[dict[str, dict[str, str]]] = None,
        owner: Optional[IRI] = None,
    ) -> WalkContext:
        """Walk context of a shape; owner names the enclosing shape of a nested one."""
        predicates = [tc.predicate for tc in iter_triple_constraints(shape.expression)]
        return WalkContext(
            shape_id=owner if owner is not None else shape.name,
            prefixes=prefixes,
            extra=frozenset(iri.value for iri in shape.extra),
            property_names=property_names(predicates, prefixes),
            known_enums=known_enums if known_enums is not None else {},
        )

    def compose_shape(self, shape: Shape, outer: Optional[WalkContext] = None) -> Fragment:
        """Walk a shape and compose its type text into ``type_value``.

        outer is the context of the enclosing shape when this one is nested in
        a value expression.
        """
        if outer is None:
            context = self.context_for(shape, PrefixMap())
        else:
            context = self.context_for(shape, outer.prefixes, outer.known_enums, outer.shape_id)
        return self._compose(shape, context)

    def _compose(self, shape: Shape, context: WalkContext) -> Fragment:
        expression = merge_shape_expression(shape.expression)
        if expression is None:
            fragment = Fragment()
            text = self.emitter.render_object([])
        else:
            fragment = self.walker.walk(expression, context)
            if isinstance(expression, TripleConstraint):
                text = self.emitter.render_object([fragment.generated or fragment.extra])
            elif fragment.extra and fragment.generated:
                text = self.emitter.render_intersection([fragment.generated, fragment.extra])
            else:
                text = fragment.generated or fragment.extra or self.emitter.render_object([])

        if shape.extends:
            bases = [normalize_url(iri.value, True) for iri in shape.extends]
            text = self.emitter.render_intersection(
                [text] + [self.emitter.render_reference(b) for b in bases]
            )
            for iri in shape.extends:
                if iri.value not in fragment.child_shapes:
                    fragment.child_shapes.append(iri.value)

        fragment.type_value = text
        return fragment

    def assemble(
        self,
        shape: Shape,
        prefixes: PrefixMap,
        known_enums: Optional[dict[str, dict[str, str]]] = None,
    ) -> ShapeArtifact:
        if shape.name is None:
            raise MissingExpectedField("id", "Shape")
        context = self.context_for(shape, prefixes, known_enums)
        fragment = self._compose(shape, context)
        exported_name = normalize_url(shape.name.value, True)
        logger.debug(
            "Assembled %s as %s (%d child shapes, %d inline enums)",
            shape.name.value, exported_name,
            len(fragment.child_shapes), len(fragment.inline_enums),
        )
        return ShapeArtifact(
            iri=shape.name,
            exported_name=exported_name,
            declaration=self.emitter.render_export(exported_name, fragment.type_value),
            generated_shape=fragment.type_value,
            child_shapes=fragment.child_shapes,
            typed=fragment.typed,
            inline_enums=fragment.inline_enums,
            name_context=fragment.name_context,
        )
