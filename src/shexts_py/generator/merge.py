"""Duplicate-property pre-pass run on a shape before it is walked.

Parsers may hand over the same predicate twice in one shape, typically once
per value set. Those are folded into a single triple constraint so that every
predicate shows up once in the generated type.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Iterator, Optional

from shexts_py.schema.shex import (
    EachOf,
    NodeConstraint,
    OneOf,
    TripleConstraint,
    TripleExpression,
    ValueSetValue,
)


def union_values(
    first: Iterable[ValueSetValue], second: Iterable[ValueSetValue]
) -> list[ValueSetValue]:
    """Ordered union of two value sets, keyed by lexical value."""
    merged: dict[str, ValueSetValue] = {}
    for v in list(first) + list(second):
        merged.setdefault(v.lexical, v)
    return list(merged.values())


def _values_of(tc: TripleConstraint) -> Optional[list[ValueSetValue]]:
    if isinstance(tc.constraint, NodeConstraint) and tc.constraint.values:
        return tc.constraint.values
    return None


def merge_duplicate_properties(expressions: list[TripleExpression]) -> list[TripleExpression]:
    """Fold triple constraints sharing a predicate into one.

    Two value sets are unioned; otherwise the later constraint wins. The merged
    constraint takes the position of the later one, as the other constraints
    keep their order.
    """
    merged: list[TripleExpression] = []
    for expr in expressions:
        if not isinstance(expr, TripleConstraint):
            merged.append(expr)
            continue
        duplicate = next(
            (e for e in merged
             if isinstance(e, TripleConstraint) and e.predicate == expr.predicate),
            None,
        )
        if duplicate is None:
            merged.append(expr)
            continue
        merged = [e for e in merged if e is not duplicate]
        earlier, later = _values_of(duplicate), _values_of(expr)
        if earlier is not None and later is not None:
            # both are NodeConstraints here
            constraint = replace(duplicate.constraint, values=union_values(earlier, later))
            expr = replace(expr, constraint=constraint)
        merged.append(expr)
    return merged


def _flatten(expressions: list[TripleExpression]) -> Iterator[TripleExpression]:
    for expr in expressions:
        if isinstance(expr, EachOf):
            yield from _flatten(expr.expressions)
        else:
            yield expr


def _merge_sequences(expression: TripleExpression) -> TripleExpression:
    # Nested sequences are spliced into one object type, so they are merged
    # together with their parent.
    if isinstance(expression, EachOf):
        flat = [_merge_sequences(e) for e in _flatten(expression.expressions)]
        return replace(expression, expressions=merge_duplicate_properties(flat))
    if isinstance(expression, OneOf):
        return replace(expression, expressions=[_merge_sequences(e) for e in expression.expressions])
    return expression


def merge_shape_expression(expression: Optional[TripleExpression]) -> Optional[TripleExpression]:
    """Apply the pre-pass to a shape's expression, without mutating it.

    Every sequence is flattened and merged, at any depth. The top-level group is
    merged even when it is a choice.
    """
    if expression is None:
        return None
    expression = _merge_sequences(expression)
    if isinstance(expression, OneOf):
        return replace(expression, expressions=merge_duplicate_properties(expression.expressions))
    return expression
